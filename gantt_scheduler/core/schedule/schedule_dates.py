from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from gantt_scheduler.core.errors import ScheduleError
from gantt_scheduler.core.model import TaskGraph
from gantt_scheduler.core.schedule.dates import end_date, shift_date
from gantt_scheduler.core.schedule.toposort import post_order

logger = logging.getLogger(__name__)


def schedule_dates(graph: TaskGraph, order: list[int]) -> None:
    """Give every task a start date.

    Forward: in topological order, an undated task starts when its latest dated
    predecessor ends. Backward: whatever is still undated starts early enough to
    end on its earliest successor's start. Anchor dates are never overwritten.

    Raises ScheduleError if a task can be dated by neither pass.
    """
    propagate_forward(graph, order)
    deduce_backward(graph, order)
    check_all_dated(graph)


def propagate_forward(graph: TaskGraph, order: list[int]) -> None:
    for idx in order:
        task = graph.tasks[idx]
        if task.start_date is not None:
            continue

        latest: Optional[date] = None
        for p in task.predecessors:
            pred = graph.tasks[p]
            if pred.start_date is None:
                # left for the backward pass
                continue
            pred_end = end_date(pred)
            if latest is None or pred_end > latest:
                latest = pred_end
                task.last_predecessor = p

        if latest is not None:
            task.start_date = latest

    logger.debug(
        "forward pass dated %d/%d tasks",
        sum(1 for t in graph.tasks if t.start_date is not None),
        len(graph.tasks),
    )


def deduce_backward(graph: TaskGraph, order: list[int]) -> None:
    visited: set[int] = set()

    def undated(i: int) -> bool:
        return graph.tasks[i].start_date is None

    for start in order:
        if not undated(start):
            continue
        # successors come out of post_order before the tasks that precede them
        for idx in post_order(graph, [start], visited=visited, descend=undated):
            task = graph.tasks[idx]
            if task.start_date is not None:
                continue

            earliest: Optional[date] = None
            for s in task.successors:
                succ_start = graph.tasks[s].start_date
                if succ_start is not None and (earliest is None or succ_start < earliest):
                    earliest = succ_start

            if earliest is None:
                raise ScheduleError(
                    code="E_UNDATABLE_TASK",
                    message=(
                        f"could not deduce a start date for task '{task.task_name}': "
                        "it is not reachable from a Start node and has no dated successor"
                    ),
                    file=graph.file,
                    path=f"tasks[{task.id}]",
                )

            task.start_date = shift_date(
                earliest, task.duration, task.time_units, backward=True, task_id=task.id
            )
            logger.debug("deduced start of %s from successors: %s", task.id, task.start_date)


def check_all_dated(graph: TaskGraph) -> None:
    missing = [t.id for t in graph.tasks if t.start_date is None]
    if missing:
        raise ScheduleError(
            code="E_INCOMPLETE_SCHEDULE",
            message="could not determine start dates for all tasks: " + ", ".join(missing),
            file=graph.file,
            path="tasks",
        )
