from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from gantt_scheduler.core.errors import ScheduleError
from gantt_scheduler.core.model import TaskGraph
from gantt_scheduler.core.schedule.dates import end_date, shift_date
from gantt_scheduler.core.schedule.toposort import post_order

logger = logging.getLogger(__name__)


def calculate_critical_path(graph: TaskGraph) -> Optional[date]:
    """Annotate every task with its CPM window, slack and criticality.

    Requires every task to be dated already. Slack is whole calendar days, so a
    task is critical exactly when its slack is zero. Returns the project end date
    (None for an empty graph).
    """
    # Forward pass: the scheduled dates are the earliest dates.
    for t in graph.tasks:
        if t.start_date is None:
            raise ScheduleError(
                code="E_INCOMPLETE_SCHEDULE",
                message=f"task {t.id} has no start date; schedule dates first",
                file=graph.file,
                path=f"tasks[{t.id}]",
            )
        t.earliest_start = t.start_date
        t.earliest_finish = end_date(t)

    project_end = max(
        (t.earliest_finish for t in graph.tasks if t.earliest_finish is not None), default=None
    )
    if project_end is None:
        return None

    # Sinks first; the second sweep picks up anything the roots do not reach.
    visited: set[int] = set()
    reverse_order = post_order(graph, graph.roots(), visited=visited)
    reverse_order += post_order(graph, range(len(graph.tasks)), visited=visited)

    for idx in reverse_order:
        t = graph.tasks[idx]
        if not t.successors:
            t.latest_finish = project_end
        else:
            known = [
                graph.tasks[s].latest_start
                for s in t.successors
                if graph.tasks[s].latest_start is not None
            ]
            t.latest_finish = min(known) if known else None

        if t.latest_finish is not None:
            t.latest_start = shift_date(
                t.latest_finish, t.duration, t.time_units, backward=True, task_id=t.id
            )

    for t in graph.tasks:
        if t.latest_start is None or t.earliest_start is None:
            t.slack = None
            t.is_critical = False
            continue
        t.slack = (t.latest_start - t.earliest_start).days
        t.is_critical = t.slack == 0

    logger.debug(
        "critical path: %d/%d tasks critical, project end %s",
        sum(1 for t in graph.tasks if t.is_critical),
        len(graph.tasks),
        project_end,
    )
    return project_end
