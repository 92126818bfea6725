from __future__ import annotations

from typing import Any, Optional, cast

from gantt_scheduler.core.errors import (
    GanttError,
    GraphStructureError,
    GraphValidationError,
    sort_errors,
)
from gantt_scheduler.core.model import (
    AFTER_PORT,
    ANCHOR_NODE,
    BEFORE_PORT,
    OPTIONS_NODE,
    TASK_STATES,
    TIME_UNITS,
    AnchorRecord,
    ConnectionRecord,
    GraphDocument,
    ScheduleOptions,
    TaskRecord,
    TaskState,
    TimeUnit,
)
from gantt_scheduler.core.options.options_config import DEFAULT_OPTIONS, as_flag, parse_options
from gantt_scheduler.core.schedule.dates import parse_date


def parse_document(
    doc: dict[str, Any],
    *,
    options_base: ScheduleOptions = DEFAULT_OPTIONS,
) -> tuple[Optional[GraphDocument], list[GanttError], list[GanttError]]:
    """Resolve raw nodes into anchor, options and task records.

    Returns (document, errors, warnings). Document is None when errors exist.
    """

    file = cast(Optional[str], doc.get("__file__"))

    nodes = doc.get("nodes")
    if not isinstance(nodes, list):
        return (
            None,
            [
                GraphValidationError(
                    code="E_REQUIRED_FIELD",
                    message="nodes is required and must be an array",
                    file=file,
                    path="nodes",
                )
            ],
            [],
        )

    # Fail fast on the raw list before looking at any node in detail.
    names = [n.get("name") if isinstance(n, dict) else None for n in nodes]
    if ANCHOR_NODE not in names:
        return (
            None,
            [
                GraphStructureError(
                    code="E_NO_ANCHOR",
                    message=f"the graph must contain a {ANCHOR_NODE} node",
                    file=file,
                    path="nodes",
                )
            ],
            [],
        )
    if names.count(OPTIONS_NODE) > 1:
        return (
            None,
            [
                GraphStructureError(
                    code="E_MULTIPLE_OPTIONS",
                    message=f"the graph must contain at most one {OPTIONS_NODE} node",
                    file=file,
                    path="nodes",
                )
            ],
            [],
        )

    errors: list[GanttError] = []
    warnings: list[GanttError] = []
    anchors: list[AnchorRecord] = []
    tasks: list[TaskRecord] = []
    options = options_base
    seen_ids: set[str] = set()

    for i, raw in enumerate(nodes):
        node_path = f"nodes[{i}]"
        if not isinstance(raw, dict):
            errors.append(
                GraphValidationError(
                    code="E_INVALID_TYPE",
                    message="node must be an object",
                    file=file,
                    path=node_path,
                )
            )
            continue

        nid = _as_id(raw.get("id"))
        if nid is None:
            errors.append(
                GraphValidationError(
                    code="E_REQUIRED_FIELD",
                    message="id is required and must be a non-empty string or an integer",
                    file=file,
                    path=f"{node_path}.id",
                )
            )
            continue
        if nid in seen_ids:
            errors.append(
                GraphValidationError(
                    code="E_DUPLICATE_ID",
                    message=f"duplicate node id: {nid}",
                    file=file,
                    path=f"{node_path}.id",
                )
            )
            continue
        seen_ids.add(nid)

        name = raw.get("name")
        if not isinstance(name, str):
            errors.append(
                GraphValidationError(
                    code="E_REQUIRED_FIELD",
                    message="name is required and must be a string",
                    file=file,
                    path=f"{node_path}.name",
                )
            )
            continue

        props = _properties(raw.get("properties", []))
        if props is None:
            errors.append(
                GraphValidationError(
                    code="E_INVALID_TYPE",
                    message="properties must be an array of {name, value} objects",
                    file=file,
                    path=f"{node_path}.properties",
                )
            )
            continue

        if name == OPTIONS_NODE:
            options, opt_errors, opt_warnings = parse_options(
                props, base=options_base, file=file, path=f"{node_path}.properties"
            )
            errors.extend(opt_errors)
            warnings.extend(opt_warnings)
            continue

        ports = _ports(raw.get("interfaces", []))
        if ports is None:
            errors.append(
                GraphValidationError(
                    code="E_INVALID_TYPE",
                    message="interfaces must be an array of {name, id} objects",
                    file=file,
                    path=f"{node_path}.interfaces",
                )
            )
            continue
        after_ports = [pid for role, pid in ports if role == AFTER_PORT]
        before_ports = [pid for role, pid in ports if role == BEFORE_PORT]
        prop_map = dict(props)

        if name == ANCHOR_NODE:
            raw_date = prop_map.get("Start Date")
            try:
                if not isinstance(raw_date, str):
                    raise ValueError("Start Date is required")
                start = parse_date(raw_date)
            except ValueError as e:
                errors.append(
                    GraphValidationError(
                        code="E_INVALID_START_DATE",
                        message=f"{ANCHOR_NODE} node needs a 'Start Date' as DD-MM-YYYY ({e})",
                        file=file,
                        path=f"{node_path}.properties",
                    )
                )
                continue
            anchors.append(
                AnchorRecord(
                    id=nid,
                    start_date=start,
                    after_ports=after_ports,
                    before_ports=before_ports,
                )
            )
            continue

        record = _task_record(nid, name, prop_map, after_ports, before_ports, errors, file, node_path)
        if record is not None:
            tasks.append(record)

    connections = _connections(doc.get("connections"), errors, file)

    if errors:
        return None, sort_errors(errors), sort_errors(warnings)

    document = GraphDocument(
        anchors=anchors,
        tasks=tasks,
        connections=connections,
        options=options,
        file=file,
    )
    return document, [], sort_errors(warnings)


def _task_record(
    nid: str,
    name: str,
    props: dict[str, Any],
    after_ports: list[str],
    before_ports: list[str],
    errors: list[GanttError],
    file: Optional[str],
    node_path: str,
) -> Optional[TaskRecord]:
    ok = True

    # Missing names are reported by the structural validator after the graph is built.
    task_name = props.get("Task Name")
    if task_name is not None and not isinstance(task_name, str):
        task_name = str(task_name)

    duration = _as_duration(props.get("Duration"))
    if duration is None:
        errors.append(
            GraphValidationError(
                code="E_INVALID_DURATION",
                message="Duration is required and must be a non-negative integer",
                file=file,
                path=f"{node_path}.properties.Duration",
            )
        )
        ok = False

    units = props.get("Time units")
    if units not in TIME_UNITS:
        errors.append(
            GraphValidationError(
                code="E_INVALID_ENUM",
                message=f"Time units must be one of {list(TIME_UNITS)}",
                file=file,
                path=f"{node_path}.properties.Time units",
            )
        )
        ok = False

    state = props.get("State", "Open")
    if state not in TASK_STATES:
        errors.append(
            GraphValidationError(
                code="E_INVALID_ENUM",
                message=f"State must be one of {list(TASK_STATES)}",
                file=file,
                path=f"{node_path}.properties.State",
            )
        )
        ok = False

    if not ok:
        return None

    return TaskRecord(
        id=nid,
        name=name,
        properties=props,
        task_name=(task_name or "").strip(),
        duration=cast(int, duration),
        time_units=cast(TimeUnit, units),
        state=cast(TaskState, state),
        critical=as_flag(props.get("Critical", False)),
        after_ports=after_ports,
        before_ports=before_ports,
    )


def _connections(
    raw: Any, errors: list[GanttError], file: Optional[str]
) -> list[ConnectionRecord]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        errors.append(
            GraphValidationError(
                code="E_INVALID_TYPE",
                message="connections must be an array",
                file=file,
                path="connections",
            )
        )
        return []

    out: list[ConnectionRecord] = []
    for i, conn in enumerate(raw):
        src = _as_id(conn.get("from")) if isinstance(conn, dict) else None
        dst = _as_id(conn.get("to")) if isinstance(conn, dict) else None
        if src is None or dst is None:
            errors.append(
                GraphValidationError(
                    code="E_INVALID_TYPE",
                    message="connection must be an object with 'from' and 'to' port ids",
                    file=file,
                    path=f"connections[{i}]",
                )
            )
            continue
        out.append(ConnectionRecord(from_port=src, to_port=dst))
    return out


def _properties(raw: Any) -> Optional[list[tuple[str, Any]]]:
    if not isinstance(raw, list):
        return None
    out: list[tuple[str, Any]] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            return None
        out.append((item["name"], item.get("value")))
    return out


def _ports(raw: Any) -> Optional[list[tuple[str, str]]]:
    if not isinstance(raw, list):
        return None
    out: list[tuple[str, str]] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            return None
        pid = _as_id(item.get("id"))
        if pid is None:
            return None
        out.append((item["name"], pid))
    return out


def _as_id(v: Any) -> Optional[str]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return str(v)
    if isinstance(v, str) and v.strip():
        return v
    return None


def _as_duration(v: Any) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v if v >= 0 else None
    if isinstance(v, str) and v.strip().isdigit():
        return int(v.strip())
    return None
