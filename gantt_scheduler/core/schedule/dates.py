from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta
from typing import Optional

from gantt_scheduler.core.errors import ScheduleError
from gantt_scheduler.core.model import Task, TimeUnit


DATE_FORMAT = "DD-MM-YYYY"


def parse_date(text: str) -> date:
    """Parse `DD-M(M)-YYYY`. Raises ValueError on anything else."""
    parts = text.strip().split("-")
    if len(parts) != 3 or not all(p.strip().isdigit() for p in parts):
        raise ValueError(f"expected DD-MM-YYYY, got {text!r}")
    day, month, year = (int(p) for p in parts)
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    try:
        return date(year, month, day)
    except OverflowError as e:
        raise ValueError(f"date out of range: {text!r}") from e


def format_date(d: date) -> str:
    return f"{d.day:02d}-{d.month:02d}-{d.year:04d}"


def shift_date(
    start: date,
    duration: int,
    units: TimeUnit,
    *,
    backward: bool = False,
    task_id: Optional[str] = None,
) -> date:
    """Move `start` by `duration` units. Months keep the day of month, clamped to
    the length of the target month.

    Raises ScheduleError (E_DATE_OUT_OF_RANGE) when the result falls outside the
    years 1-9999.
    """
    if units not in ("Days", "Weeks", "Months"):
        raise ValueError(f"unknown time unit: {units}")
    try:
        if units == "Months":
            return _add_months(start, -duration if backward else duration)
        delta = timedelta(days=duration * 7 if units == "Weeks" else duration)
        return start - delta if backward else start + delta
    except (OverflowError, ValueError) as e:
        direction = "before" if backward else "after"
        subject = f"task {task_id}" if task_id is not None else "date"
        raise ScheduleError(
            code="E_DATE_OUT_OF_RANGE",
            message=(
                f"{subject}: {duration} {units} {direction} {format_date(start)} "
                f"is outside the supported calendar ({e})"
            ),
            path=f"tasks[{task_id}]" if task_id is not None else None,
        ) from e


def end_date(task: Task) -> date:
    if task.start_date is None:
        raise ValueError(f"task {task.id} has no start date")
    return shift_date(task.start_date, task.duration, task.time_units, task_id=task.id)


def _add_months(start: date, months: int) -> date:
    # 0-based month index
    total = start.year * 12 + start.month - 1 + months
    year, month = divmod(total, 12)
    day = min(start.day, monthrange(year, month + 1)[1])
    return date(year, month + 1, day)
