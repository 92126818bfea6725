from pathlib import Path

from typer.testing import CliRunner

from gantt_scheduler.cli import app

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"

runner = CliRunner()


def test_cli_render_stdout():
    r = runner.invoke(app, ["render", str(EXAMPLES / "basic-chart.yaml")])
    assert r.exit_code == 0, r.output
    assert r.stdout.splitlines() == [
        "gantt",
        "  title Cabin build",
        "  dateFormat  DD-MM-YYYY",
        "  axisFormat %d-%m-%Y",
        "  tickInterval 1week",
        "  todayMarker off",
        "  weekday tuesday",
        "  Permits : active, id_C, 01-01-2026, 3d",
        "  Foundations : done, crit, id_A, 01-01-2026, 5d",
        "  Framing : crit, id_B, 06-01-2026, 2w",
    ]


def test_cli_render_to_file(tmp_path: Path):
    out_path = tmp_path / "charts" / "winter.mmd"
    r = runner.invoke(app, ["render", str(EXAMPLES / "export-envelope.json"), "--out", str(out_path)])
    assert r.exit_code == 0, r.output
    assert "OK: wrote chart to" in r.stdout
    chart = out_path.read_text(encoding="utf-8")
    assert "  Winter works : crit, id_2, 15-11-2025, 3M" in chart
    assert "  Spring review : id_3, 15-02-2026, 1w" in chart


def test_cli_render_is_deterministic(tmp_path: Path):
    out1 = tmp_path / "one.mmd"
    out2 = tmp_path / "two.mmd"
    r1 = runner.invoke(app, ["render", str(EXAMPLES / "basic-chart.yaml"), "--out", str(out1)])
    r2 = runner.invoke(app, ["render", str(EXAMPLES / "basic-chart.yaml"), "--out", str(out2)])
    assert r1.exit_code == 0
    assert r2.exit_code == 0
    assert out1.read_text(encoding="utf-8") == out2.read_text(encoding="utf-8")


def test_cli_render_cycle_fails():
    r = runner.invoke(app, ["render", str(EXAMPLES / "invalid-cycle.yaml")])
    assert r.exit_code == 2
    assert "E_CYCLE_DETECTED" in r.output
