from gantt_scheduler.core.build.build_graph import build_graph
from gantt_scheduler.core.parse.parse_document import parse_document
from gantt_scheduler.core.schedule.toposort import post_order, topological_sort


def _graph(raw):
    parsed, errors, _ = parse_document(raw)
    assert errors == []
    return build_graph(parsed)


def _assert_respects_edges(graph, order):
    pos = {idx: i for i, idx in enumerate(order)}
    for t in graph.tasks:
        for s in t.successors:
            assert pos[t.index] < pos[s], f"{t.id} must come before {graph.tasks[s].id}"


def test_chain_order(doc):
    raw = doc.start("s", "01-01-2026").task("C").task("B").task("A").edge("s", "A").chain("A", "B", "C").build()
    graph = _graph(raw)
    order = topological_sort(graph)
    assert [graph.tasks[i].id for i in order] == ["A", "B", "C"]


def test_diamond_visits_each_task_once(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("A")
        .task("B")
        .task("C")
        .task("D")
        .edge("s", "A")
        .chain("A", "B", "D")
        .chain("A", "C", "D")
        .build()
    )
    graph = _graph(raw)
    order = topological_sort(graph)
    assert sorted(order) == list(range(4))
    _assert_respects_edges(graph, order)


def test_multiple_entry_points(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("A")
        .task("X")
        .task("B")
        .task("Y")
        .edge("s", "A")
        .chain("A", "B")
        .chain("X", "Y", "B")
        .build()
    )
    graph = _graph(raw)
    order = topological_sort(graph)
    assert len(order) == 4
    _assert_respects_edges(graph, order)


def test_independent_tasks_keep_a_stable_order(doc):
    raw = doc.start("s", "01-01-2026").task("A").task("B").task("C").build()
    graph = _graph(raw)
    first = topological_sort(graph)
    assert topological_sort(graph) == first
    assert sorted(first) == [0, 1, 2]


def test_post_order_records_successors_first(doc):
    raw = doc.start("s", "01-01-2026").task("A").task("B").task("C").chain("A", "B", "C").build()
    graph = _graph(raw)
    assert [graph.tasks[i].id for i in post_order(graph, [0])] == ["C", "B", "A"]


def test_post_order_shares_visited_between_calls(doc):
    raw = doc.start("s", "01-01-2026").task("A").task("B").task("C").chain("A", "C").chain("B", "C").build()
    graph = _graph(raw)
    visited: set[int] = set()
    first = post_order(graph, [0], visited=visited)
    second = post_order(graph, [1], visited=visited)
    assert [graph.tasks[i].id for i in first] == ["C", "A"]
    assert [graph.tasks[i].id for i in second] == ["B"]
