from __future__ import annotations

from typing import Any

import pytest


class DocBuilder:
    """Builds raw graph documents in the editor's node/port/connection shape."""

    def __init__(self) -> None:
        self.nodes: list[dict[str, Any]] = []
        self.connections: list[dict[str, Any]] = []

    def start(self, nid: str, start_date: str) -> "DocBuilder":
        self.nodes.append(
            {
                "id": nid,
                "name": "Start",
                "properties": [{"name": "Start Date", "value": start_date}],
                "interfaces": [{"name": "After", "id": f"{nid}.after"}],
            }
        )
        return self

    def task(
        self,
        nid: str,
        duration: Any = 1,
        units: str = "Days",
        *,
        name: Any = None,
        **extra: Any,
    ) -> "DocBuilder":
        props = [
            {"name": "Task Name", "value": nid if name is None else name},
            {"name": "Duration", "value": duration},
            {"name": "Time units", "value": units},
        ]
        for key, value in extra.items():
            props.append({"name": key.replace("_", " ").capitalize(), "value": value})
        self.nodes.append(
            {
                "id": nid,
                "name": "Task",
                "properties": props,
                "interfaces": [
                    {"name": "Before", "id": f"{nid}.before"},
                    {"name": "After", "id": f"{nid}.after"},
                ],
            }
        )
        return self

    def options(self, **props: Any) -> "DocBuilder":
        self.nodes.append(
            {
                "id": f"options{len(self.nodes)}",
                "name": "Options",
                "properties": [{"name": k, "value": v} for k, v in props.items()],
                "interfaces": [],
            }
        )
        return self

    def edge(self, src: str, dst: str) -> "DocBuilder":
        self.connections.append({"from": f"{src}.after", "to": f"{dst}.before"})
        return self

    def chain(self, *ids: str) -> "DocBuilder":
        for src, dst in zip(ids, ids[1:]):
            self.edge(src, dst)
        return self

    def build(self) -> dict[str, Any]:
        return {"nodes": list(self.nodes), "connections": list(self.connections)}


@pytest.fixture
def doc() -> DocBuilder:
    return DocBuilder()
