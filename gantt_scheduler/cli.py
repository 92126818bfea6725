from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from gantt_scheduler.core.errors import GanttError, GraphLoadError, GraphValidationError, sort_errors
from gantt_scheduler.core.io.load_graph import load_graph
from gantt_scheduler.core.model import Schedule, ScheduleOptions
from gantt_scheduler.core.options.options_config import OptionsConfigError, load_and_merge
from gantt_scheduler.core.pipeline import generate_schedule, prepare_graph, summarize_schedule
from gantt_scheduler.core.render.mermaid_gantt import render_mermaid_gantt, schedule_to_dict
from gantt_scheduler.core.schedule.dates import end_date, format_date

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Gantt CLI: schedule a task-dependency graph."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a graph document (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Check a graph document: anchors, ports, task names and cycles."""
    _check_format(format, "E_VALIDATE_UNKNOWN_FORMAT")

    raw = _load_or_exit(path, "validate", format)

    graph, _, errors, warnings = prepare_graph(raw)
    if errors or graph is None:
        if format == "json":
            _emit_json("validate", False, exit_code=2, errors=errors, warnings=warnings, body=None)
        _print_errors(warnings + errors)
        raise typer.Exit(code=2)

    roots = [graph.tasks[i].id for i in graph.roots()]
    anchored = [t.id for t in graph.tasks if t.start_date is not None]

    if format == "json":
        body = {"task_count": len(graph.tasks), "roots": roots, "anchored": anchored}
        _emit_json("validate", True, exit_code=0, errors=[], warnings=warnings, body=body)

    _print_errors(warnings)
    typer.echo(f"OK: {len(graph.tasks)} tasks ({len(anchored)} anchored)")
    typer.echo("Roots: " + ", ".join(roots))


@app.command("schedule")
def schedule(
    path: str = typer.Argument(..., help="Path to a graph document (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    options_file: Optional[str] = typer.Option(
        None, "--options-file", help="Optional YAML file with chart option defaults"
    ),
    critical_path: Optional[bool] = typer.Option(
        None,
        "--critical-path/--no-critical-path",
        help="Override the document's 'Show Critical Path' option",
    ),
) -> None:
    """Compute start dates (and optionally the critical path) for every task."""
    _check_format(format, "E_SCHEDULE_UNKNOWN_FORMAT")

    raw = _load_or_exit(path, "schedule", format)
    base = _options_or_exit(options_file, raw)

    result, errors, warnings = generate_schedule(raw, options_base=base, critical_path=critical_path)
    if errors or result is None:
        if format == "json":
            _emit_json("schedule", False, exit_code=2, errors=errors, warnings=warnings, body=None)
        _print_errors(warnings + errors)
        raise typer.Exit(code=2)

    if format == "json":
        _emit_json(
            "schedule",
            True,
            exit_code=0,
            errors=[],
            warnings=warnings,
            body=schedule_to_dict(result),
        )

    _print_errors(warnings)
    Console().print(_schedule_table(result))
    typer.echo(summarize_schedule(result))


@app.command("render")
def render(
    path: str = typer.Argument(..., help="Path to a graph document (.yaml/.yml/.json)"),
    out: Optional[str] = typer.Option(None, "--out", help="Write the chart here instead of stdout"),
    options_file: Optional[str] = typer.Option(
        None, "--options-file", help="Optional YAML file with chart option defaults"
    ),
) -> None:
    """Render the schedule as a Mermaid gantt chart."""
    raw = _load_or_exit(path, "render", "text")
    base = _options_or_exit(options_file, raw)

    result, errors, warnings = generate_schedule(raw, options_base=base)
    if errors or result is None:
        _print_errors(warnings + errors)
        raise typer.Exit(code=2)

    _print_errors(warnings)
    chart = render_mermaid_gantt(result)
    if out is None:
        typer.echo(chart, nl=False)
        return

    p = Path(out)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(chart, encoding="utf-8")
    typer.echo(f"OK: wrote chart to {out}")


def _schedule_table(result: Schedule) -> Table:
    table = Table(title=result.options.title)
    table.add_column("Task")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Duration")
    table.add_column("State")
    if result.options.show_critical_path:
        table.add_column("Slack")
        table.add_column("Critical")

    for t in result.tasks:
        assert t.start_date is not None
        row = [
            t.task_name,
            format_date(t.start_date),
            format_date(end_date(t)),
            f"{t.duration} {t.time_units}",
            t.record.state,
        ]
        if result.options.show_critical_path:
            row.append("-" if t.slack is None else f"{t.slack}d")
            row.append("yes" if t.is_critical else "no")
        table.add_row(*row)
    return table


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = GraphValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _load_or_exit(path: str, command: str, format: str) -> dict[str, Any]:
    try:
        return load_graph(path)
    except GraphLoadError as e:
        if format == "json":
            _emit_json(command, False, exit_code=1, errors=[e], warnings=[], body=None)
        _print_errors([e])
        raise typer.Exit(code=1)


def _options_or_exit(options_file: Optional[str], raw: dict[str, Any]) -> ScheduleOptions:
    try:
        return load_and_merge(options_file)
    except FileNotFoundError:
        _print_errors(
            [
                GraphLoadError(
                    code="E_OPTIONS_FILE_NOT_FOUND",
                    message=f"options file not found: {options_file}",
                    file=raw.get("__file__"),
                    path="options_file",
                )
            ]
        )
        raise typer.Exit(code=1)
    except OptionsConfigError as e:
        _print_errors(
            [
                GraphValidationError(
                    code="E_OPTIONS_FILE_INVALID",
                    message=str(e),
                    file=raw.get("__file__"),
                    path="options_file",
                )
            ]
        )
        raise typer.Exit(code=2)


def _to_item(e: GanttError) -> dict[str, Any]:
    source = "load" if isinstance(e, GraphLoadError) else "schedule"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": e.severity,
        "source": source,
    }


def _emit_json(
    command: str,
    ok: bool,
    *,
    exit_code: int,
    errors: list[GanttError],
    warnings: list[GanttError],
    body: Optional[dict[str, Any]],
) -> None:
    payload = {
        "tool": "gantt",
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [_to_item(e) for e in sort_errors(errors)],
        "warnings": [_to_item(w) for w in sort_errors(warnings)],
        "result": body,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _print_errors(errors: list[GanttError]) -> None:
    for e in sort_errors(errors):
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="gantt")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
