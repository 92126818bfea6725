from __future__ import annotations

from typing import Callable, Iterable, Iterator, Optional

from gantt_scheduler.core.model import TaskGraph


def post_order(
    graph: TaskGraph,
    starts: Iterable[int],
    *,
    visited: Optional[set[int]] = None,
    descend: Optional[Callable[[int], bool]] = None,
) -> list[int]:
    """Depth-first post-order over successors: a task is recorded only after every
    successor reachable from it.

    `visited` is shared across calls when given, so repeated entry points and
    diamonds are walked once. `descend` filters which successors are followed.
    Assumes the graph is acyclic.
    """
    seen = visited if visited is not None else set()
    out: list[int] = []

    for start in starts:
        if start in seen:
            continue
        seen.add(start)
        stack: list[tuple[int, Iterator[int]]] = [(start, iter(graph.tasks[start].successors))]
        while stack:
            idx, successors = stack[-1]
            for nxt in successors:
                if nxt in seen or (descend is not None and not descend(nxt)):
                    continue
                seen.add(nxt)
                stack.append((nxt, iter(graph.tasks[nxt].successors)))
                break
            else:
                stack.pop()
                out.append(idx)

    return out


def topological_sort(graph: TaskGraph) -> list[int]:
    """Task indices with every predecessor ahead of its successors.

    Ties between independent tasks follow input order of the roots.
    """
    order = post_order(graph, graph.roots())
    order.reverse()
    return order
