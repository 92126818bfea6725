from datetime import date

import pytest

from gantt_scheduler.core.build.build_graph import build_graph
from gantt_scheduler.core.errors import ScheduleError
from gantt_scheduler.core.parse.parse_document import parse_document
from gantt_scheduler.core.schedule.critical_path import calculate_critical_path
from gantt_scheduler.core.schedule.schedule_dates import schedule_dates
from gantt_scheduler.core.schedule.toposort import topological_sort


def _analyzed(raw):
    parsed, errors, _ = parse_document(raw)
    assert errors == []
    graph = build_graph(parsed)
    schedule_dates(graph, topological_sort(graph))
    project_end = calculate_critical_path(graph)
    return graph, project_end


def test_single_chain_is_entirely_critical(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("A", 5, "Days")
        .task("B", 2, "Weeks")
        .task("C", 1, "Months")
        .edge("s", "A")
        .chain("A", "B", "C")
        .build()
    )
    graph, project_end = _analyzed(raw)
    assert project_end == date(2026, 2, 20)
    for t in graph.tasks:
        assert t.slack == 0
        assert t.is_critical


def test_parallel_branch_has_slack(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("A", 5)
        .task("C", 3)
        .task("B", 2, "Weeks")
        .edge("s", "A")
        .edge("s", "C")
        .edge("A", "B")
        .edge("C", "B")
        .build()
    )
    graph, _ = _analyzed(raw)
    a, b, c = graph.by_id("A"), graph.by_id("B"), graph.by_id("C")
    assert a.is_critical and b.is_critical
    assert c.slack == 2
    assert not c.is_critical
    assert c.earliest_start == date(2026, 1, 1)
    assert c.earliest_finish == date(2026, 1, 4)
    assert c.latest_start == date(2026, 1, 3)
    assert c.latest_finish == date(2026, 1, 6)


def test_one_day_of_slack_is_not_critical(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("long", 4)
        .task("short", 3)
        .task("end", 1)
        .edge("s", "long")
        .edge("s", "short")
        .edge("long", "end")
        .edge("short", "end")
        .build()
    )
    graph, _ = _analyzed(raw)
    assert graph.by_id("long").slack == 0
    assert graph.by_id("long").is_critical
    assert graph.by_id("short").slack == 1
    assert not graph.by_id("short").is_critical


def test_diamond_longest_branch(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("A", 1)
        .task("B", 10)
        .task("C", 1, "Weeks")
        .task("D", 1)
        .edge("s", "A")
        .chain("A", "B", "D")
        .chain("A", "C", "D")
        .build()
    )
    graph, _ = _analyzed(raw)
    critical = sorted(t.id for t in graph.tasks if t.is_critical)
    assert critical == ["A", "B", "D"]
    assert graph.by_id("C").slack == 3


def test_shorter_sink_gets_slack_to_project_end(doc):
    raw = (
        doc.start("s", "01-01-2026")
        .task("main", 10)
        .task("side", 2)
        .edge("s", "main")
        .edge("s", "side")
        .build()
    )
    graph, project_end = _analyzed(raw)
    assert project_end == date(2026, 1, 11)
    assert graph.by_id("main").is_critical
    assert graph.by_id("side").latest_finish == project_end
    assert graph.by_id("side").slack == 8


def test_backward_deduced_task_on_critical_chain(doc):
    raw = (
        doc.start("s", "10-01-2026")
        .task("launch", 2)
        .task("prep", 3)
        .edge("s", "launch")
        .edge("prep", "launch")
        .build()
    )
    graph, _ = _analyzed(raw)
    assert graph.by_id("prep").is_critical
    assert graph.by_id("launch").is_critical


def test_months_chain_without_clamping_is_critical(doc):
    raw = (
        doc.start("s", "15-11-2025")
        .task("A", 3, "Months")
        .task("B", 1, "Months")
        .edge("s", "A")
        .chain("A", "B")
        .build()
    )
    graph, project_end = _analyzed(raw)
    assert project_end == date(2026, 3, 15)
    assert all(t.is_critical for t in graph.tasks)


def test_empty_graph(doc):
    raw = doc.start("s", "01-01-2026").build()
    graph, project_end = _analyzed(raw)
    assert graph.tasks == []
    assert project_end is None


def test_requires_dates(doc):
    raw = doc.start("s", "01-01-2026").task("A").build()
    parsed, _, _ = parse_document(raw)
    graph = build_graph(parsed)
    with pytest.raises(ScheduleError):
        calculate_critical_path(graph)
