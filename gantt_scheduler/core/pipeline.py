from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from gantt_scheduler.core.build.build_graph import build_graph
from gantt_scheduler.core.errors import GanttError
from gantt_scheduler.core.model import Schedule, ScheduleOptions, TaskGraph
from gantt_scheduler.core.options.options_config import DEFAULT_OPTIONS
from gantt_scheduler.core.parse.parse_document import parse_document
from gantt_scheduler.core.schedule.critical_path import calculate_critical_path
from gantt_scheduler.core.schedule.dates import end_date, format_date
from gantt_scheduler.core.schedule.schedule_dates import schedule_dates
from gantt_scheduler.core.schedule.toposort import topological_sort
from gantt_scheduler.core.validate.validate_graph import validate_graph

logger = logging.getLogger(__name__)


def prepare_graph(
    raw: dict[str, Any],
    *,
    options_base: ScheduleOptions = DEFAULT_OPTIONS,
) -> tuple[Optional[TaskGraph], Optional[ScheduleOptions], list[GanttError], list[GanttError]]:
    """Parse, build and structurally validate a raw document.

    Returns (graph, options, errors, warnings); graph is None when errors exist.
    """
    doc, errors, warnings = parse_document(raw, options_base=options_base)
    if errors or doc is None:
        return None, None, errors, warnings

    try:
        graph = build_graph(doc)
    except GanttError as e:
        return None, None, [e], warnings

    errors = validate_graph(graph)
    if errors:
        return None, None, errors, warnings

    return graph, doc.options, [], warnings


def generate_schedule(
    raw: dict[str, Any],
    *,
    options_base: ScheduleOptions = DEFAULT_OPTIONS,
    critical_path: Optional[bool] = None,
) -> tuple[Optional[Schedule], list[GanttError], list[GanttError]]:
    """Run the whole engine on a raw document.

    `critical_path` overrides the document's "Show Critical Path" option when given.
    Returns (schedule, errors, warnings); schedule is None when errors exist.
    """
    graph, options, errors, warnings = prepare_graph(raw, options_base=options_base)
    if errors or graph is None or options is None:
        return None, errors, warnings

    if critical_path is not None and critical_path != options.show_critical_path:
        options = replace(options, show_critical_path=critical_path)

    order = topological_sort(graph)
    tasks = [graph.tasks[i] for i in order]
    try:
        schedule_dates(graph, order)
        if options.show_critical_path:
            calculate_critical_path(graph)
        ends = [end_date(t) for t in tasks]
    except GanttError as e:
        if e.file is None:
            e = replace(e, file=graph.file)
        return None, [e], warnings

    starts = [t.start_date for t in tasks if t.start_date is not None]
    schedule = Schedule(
        options=options,
        tasks=tasks,
        warnings=warnings,
        project_start=min(starts, default=None),
        project_end=max(ends, default=None),
    )
    logger.debug("scheduled %d tasks", len(tasks))
    return schedule, [], warnings


def summarize_schedule(schedule: Schedule) -> str:
    critical = [t.id for t in schedule.tasks if t.is_critical]
    span = "empty"
    if schedule.project_start is not None and schedule.project_end is not None:
        span = f"{format_date(schedule.project_start)} -> {format_date(schedule.project_end)}"
    out = f"OK: {len(schedule.tasks)} tasks scheduled ({span})"
    if schedule.options.show_critical_path:
        out += "\nCritical: " + (", ".join(critical) if critical else "none")
    return out
