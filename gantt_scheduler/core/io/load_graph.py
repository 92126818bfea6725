from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from gantt_scheduler.core.errors import GraphLoadError

# suffix -> (decoder, parse error code)
_DECODERS: dict[str, tuple[Callable[[str], Any], str]] = {
    ".yaml": (yaml.safe_load, "E_YAML_PARSE"),
    ".yml": (yaml.safe_load, "E_YAML_PARSE"),
    ".json": (json.loads, "E_JSON_PARSE"),
}


def load_graph(path: str) -> dict[str, Any]:
    """Load a graph document, or an editor export wrapping one.

    Returns a dict with keys: nodes, connections, __file__. Values are passed
    through untouched; the document parser owns shape checking.
    """
    p = Path(path)
    data = _decode(p)
    graph = _select_graph(data, p)
    return {
        "nodes": graph.get("nodes"),
        "connections": graph.get("connections", []),
        "__file__": str(p),
    }


def unwrap_export(data: dict[str, Any]) -> dict[str, Any]:
    """Return the first graph of a {"result": {"dataflow": {"graphs": [...]}}}
    export, or `data` itself when it is not one."""
    node: Any = data
    for key in ("result", "dataflow", "graphs"):
        if not isinstance(node, dict):
            return data
        node = node.get(key)
    if isinstance(node, list) and node and isinstance(node[0], dict):
        return node[0]
    return data


def _decode(p: Path) -> Any:
    if not p.is_file():
        raise GraphLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p))

    decoder = _DECODERS.get(p.suffix.lower())
    if decoder is None:
        supported = ", ".join(sorted(_DECODERS))
        raise GraphLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"supported formats are {supported}",
            file=str(p),
        )
    decode, parse_code = decoder

    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise GraphLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        return decode(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise GraphLoadError(code=parse_code, message=str(e), file=str(p)) from e


def _select_graph(data: Any, p: Path) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise GraphLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )
    return unwrap_export(data)
