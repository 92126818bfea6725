from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from gantt_scheduler.core.errors import GraphStructureError
from gantt_scheduler.core.model import GraphDocument, Task, TaskGraph

logger = logging.getLogger(__name__)


def build_graph(doc: GraphDocument) -> TaskGraph:
    """Link tasks through their ports and push anchor dates onto successors.

    Anchors never enter the arena: a connection out of an anchor only sets the
    successor's start date. Raises GraphStructureError when a connection names a
    port that does not exist or points into an anchor.
    """

    tasks = [Task(index=i, record=rec) for i, rec in enumerate(doc.tasks)]

    # port id -> task index
    after_to_task: dict[str, int] = {}
    before_to_task: dict[str, int] = {}
    for t in tasks:
        for pid in t.record.after_ports:
            after_to_task[pid] = t.index
        for pid in t.record.before_ports:
            before_to_task[pid] = t.index

    anchor_after: dict[str, date] = {}
    anchor_before: set[str] = set()
    for a in doc.anchors:
        for pid in a.after_ports:
            anchor_after[pid] = a.start_date
        anchor_before.update(a.before_ports)

    for i, conn in enumerate(doc.connections):
        path = f"connections[{i}]"

        anchor_date: Optional[date] = anchor_after.get(conn.from_port)
        if anchor_date is None and conn.from_port not in after_to_task:
            raise GraphStructureError(
                code="E_UNKNOWN_PORT",
                message=f"unknown After port: {conn.from_port}",
                file=doc.file,
                path=f"{path}.from",
            )

        if conn.to_port in anchor_before:
            raise GraphStructureError(
                code="E_INVALID_CONNECTION",
                message=f"connection targets a Start node (port {conn.to_port})",
                file=doc.file,
                path=f"{path}.to",
            )
        if conn.to_port not in before_to_task:
            raise GraphStructureError(
                code="E_UNKNOWN_PORT",
                message=f"unknown Before port: {conn.to_port}",
                file=doc.file,
                path=f"{path}.to",
            )
        dst = tasks[before_to_task[conn.to_port]]

        if anchor_date is not None:
            # Several anchors on one task: the latest date wins.
            if dst.start_date is None or anchor_date > dst.start_date:
                dst.start_date = anchor_date
            continue

        src = tasks[after_to_task[conn.from_port]]
        if dst.index not in src.successors:
            src.successors.append(dst.index)
        if src.index not in dst.predecessors:
            dst.predecessors.append(src.index)

    logger.debug(
        "built graph: %d tasks, %d edges, %d anchored",
        len(tasks),
        sum(len(t.successors) for t in tasks),
        sum(1 for t in tasks if t.start_date is not None),
    )
    return TaskGraph(tasks=tasks, file=doc.file)
