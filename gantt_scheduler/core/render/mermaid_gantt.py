from __future__ import annotations

from typing import Any

from gantt_scheduler.core.model import Schedule, Task
from gantt_scheduler.core.schedule.dates import DATE_FORMAT, end_date, format_date


UNIT_SUFFIX: dict[str, str] = {"Days": "d", "Weeks": "w", "Months": "M"}
STATE_MODIFIER: dict[str, str] = {"In Progress": "active", "Completed": "done"}


def render_mermaid_gantt(schedule: Schedule) -> str:
    """Render a Mermaid `gantt` block, one line per task in schedule order."""
    opts = schedule.options
    lines = [
        "gantt",
        f"  title {opts.title}",
        f"  dateFormat  {DATE_FORMAT}",
        f"  axisFormat {opts.axis_date_format}",
        f"  tickInterval {opts.tick_interval_value}{opts.tick_interval_unit}",
        f"  todayMarker {'on' if opts.show_today_line else 'off'}",
    ]
    if opts.tick_interval_unit == "week":
        lines.append(f"  weekday {opts.weekday.lower()}")

    for t in schedule.tasks:
        lines.append("  " + _task_line(t, show_critical=opts.show_critical_path))

    return "\n".join(lines) + "\n"


def _task_line(task: Task, *, show_critical: bool) -> str:
    assert task.start_date is not None

    modifiers: list[str] = []
    state_mod = STATE_MODIFIER.get(task.record.state)
    if state_mod:
        modifiers.append(state_mod)
    if (show_critical and task.is_critical) or task.record.critical:
        modifiers.append("crit")

    fields = modifiers + [
        f"id_{task.id}",
        format_date(task.start_date),
        f"{task.duration}{UNIT_SUFFIX[task.time_units]}",
    ]
    return f"{task.task_name} : " + ", ".join(fields)


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    """JSON-friendly view of a schedule. Dates are DD-MM-YYYY."""

    def _fmt(d: Any) -> Any:
        return format_date(d) if d is not None else None

    tasks: list[dict[str, Any]] = []
    for t in schedule.tasks:
        item: dict[str, Any] = {
            "id": t.id,
            "task_name": t.task_name,
            "start": _fmt(t.start_date),
            "end": _fmt(end_date(t)),
            "duration": t.duration,
            "time_units": t.time_units,
            "state": t.record.state,
            "critical": t.is_critical or t.record.critical,
        }
        if schedule.options.show_critical_path:
            item["slack_days"] = t.slack
            item["latest_start"] = _fmt(t.latest_start)
            item["latest_finish"] = _fmt(t.latest_finish)
        tasks.append(item)

    return {
        "title": schedule.options.title,
        "project_start": _fmt(schedule.project_start),
        "project_end": _fmt(schedule.project_end),
        "critical_path": schedule.options.show_critical_path,
        "tasks": tasks,
    }
