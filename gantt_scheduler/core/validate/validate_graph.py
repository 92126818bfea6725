from __future__ import annotations

from typing import Iterator

from gantt_scheduler.core.errors import (
    GanttError,
    GraphStructureError,
    GraphValidationError,
    sort_errors,
)
from gantt_scheduler.core.model import TaskGraph


def validate_graph(graph: TaskGraph) -> list[GanttError]:
    """Structural checks that must pass before any date math runs."""
    return sort_errors(check_names(graph) + detect_cycles(graph))


def check_names(graph: TaskGraph) -> list[GanttError]:
    errors: list[GanttError] = []
    for t in graph.tasks:
        if not t.task_name:
            errors.append(
                GraphValidationError(
                    code="E_REQUIRED_FIELD",
                    message=f"task {t.id} must have a non-empty 'Task Name'",
                    file=graph.file,
                    path=f"tasks[{t.id}].Task Name",
                )
            )
    return errors


def detect_cycles(graph: TaskGraph) -> list[GanttError]:
    """Three-colour DFS over successors. One error per distinct cycle found."""
    WHITE, GRAY, BLACK = 0, 1, 2
    state = [WHITE] * len(graph.tasks)
    emitted: set[str] = set()
    out: list[GanttError] = []

    for root in range(len(graph.tasks)):
        if state[root] != WHITE:
            continue

        path: list[int] = [root]
        stack: list[Iterator[int]] = [iter(graph.tasks[root].successors)]
        state[root] = GRAY

        while stack:
            u = path[-1]
            for v in stack[-1]:
                if state[v] == GRAY:
                    # cycle: v ... u -> v
                    cycle = path[path.index(v):] + [v]
                    ids = [graph.tasks[i].id for i in cycle]
                    key = "->".join(ids)
                    if key not in emitted:
                        emitted.add(key)
                        out.append(
                            GraphStructureError(
                                code="E_CYCLE_DETECTED",
                                message="dependency cycle detected: " + " -> ".join(ids),
                                file=graph.file,
                                path=f"tasks[{graph.tasks[u].id}].After",
                            )
                        )
                elif state[v] == WHITE:
                    state[v] = GRAY
                    path.append(v)
                    stack.append(iter(graph.tasks[v].successors))
                    break
            else:
                state[u] = BLACK
                path.pop()
                stack.pop()

    return out
