"""
tests/test_forecast_cli.py

Goal:
- Exercise the CLI (__main__) path of pipeline.forecast to cover argparse + run().
- Ensures the module writes every expected output when run as a script.

What this tests:
- Tiny CSV inputs and a small config in a temp workspace.
- sys.argv is replaced so pytest's own flags don't reach argparse.
- Output parquet schemas, the CSV export and the console summary.
"""

import runpy
import sys
from pathlib import Path

import pandas as pd

from pipeline.forecast import run

ACTIVITIES = (
    "id,name,min,most_likely,max,confidence_level,distribution_type,status,sd_override,actual_duration\n"
    "S1,Survey,3,5,8,high_confidence,normal,complete,,6\n"
    "S2,Design,10,15,25,medium_confidence,triangular,in_progress,,\n"
    "S3,Permits,5,10,30,low_confidence,log_normal,planned,,\n"
    "S4,Fit-out,8,10,16,medium_high_confidence,uniform,planned,,\n"
)

CONFIG = (
    "scenario:\n"
    "  name: CLI test\n"
    "  project_name: Depot\n"
    "  start_date: '2026-01-05'\n"
    "  use_us_holidays: true\n"
    "monte_carlo:\n"
    "  iterations: 5000\n"
    "  seed: from-config\n"
    "analytics:\n"
    "  bootstrap_iterations: 10\n"
    "  cdf_max_points: 50\n"
)


def _write_inputs(root: Path) -> tuple:
    samples = root / "samples"
    samples.mkdir(parents=True, exist_ok=True)
    (samples / "activities.csv").write_text(ACTIVITIES, encoding="utf-8")
    (samples / "holidays.csv").write_text("id,name,start_date,end_date\nH1,Shutdown,2026-01-12,2026-01-16\n", encoding="utf-8")
    cfg = root / "config.yaml"
    cfg.write_text(CONFIG, encoding="utf-8")
    return samples, cfg


def test_forecast_cli_runs_inprocess(tmp_path: Path, monkeypatch, capsys) -> None:
    samples, cfg = _write_inputs(tmp_path)
    outdir = tmp_path / "out"

    argv = [
        "pipeline.forecast",
        "--samples", str(samples),
        "--outdir", str(outdir),
        "--config", str(cfg),
        "--trials", "1000",
        "--start-date", "2026-01-05",
    ]
    monkeypatch.setattr(sys, "argv", argv, raising=True)
    sys.modules.pop("pipeline.forecast", None)

    runpy.run_module("pipeline.forecast", run_name="__main__")

    for stem in (
        "deterministic_schedule",
        "monte_carlo_runs",
        "monte_carlo_summary",
        "forecast_histogram",
        "forecast_s_curves",
    ):
        assert (outdir / f"{stem}.parquet").exists(), stem
    assert (outdir / "simulation_results.csv").exists()

    sched = pd.read_parquet(outdir / "deterministic_schedule.parquet")
    assert list(sched["activity_id"]) == ["S1", "S2", "S3", "S4"]
    assert bool(sched.loc[0, "is_actual"]) is True
    # the Jan 12-16 shutdown week and MLK day (Jan 19) are skipped
    assert sched.loc[0, "end_date"] == "2026-01-21"

    runs = pd.read_parquet(outdir / "monte_carlo_runs.parquet")
    assert len(runs) == 1000
    assert runs["TotalDays"].is_monotonic_increasing

    summary = pd.read_parquet(outdir / "monte_carlo_summary.parquet")
    assert len(summary) == 12
    assert {"Percentile", "Days", "CI_Lower", "CI_Upper", "BufferDays", "Seed"}.issubset(summary.columns)
    assert summary["Days"].is_monotonic_increasing
    assert (summary["Trials"] == 1000).all()
    assert (summary["Seed"] == "from-config").all()

    sc = pd.read_parquet(outdir / "forecast_s_curves.parquet")
    assert {"Metric", "Value", "CDF"}.issubset(sc.columns)
    assert sc["CDF"].iloc[-1] == 1
    assert (sc["CDF"].diff().fillna(0) >= -1e-9).all()

    hist = pd.read_parquet(outdir / "forecast_histogram.parquet")
    assert len(hist) == 40

    out = capsys.readouterr().out
    assert "[forecast] deterministic" in out
    assert "[forecast] Wrote outputs in" in out


def test_run_overrides_seed_and_trials(tmp_path: Path, capsys) -> None:
    samples, cfg = _write_inputs(tmp_path)
    report = run(str(samples), str(tmp_path / "out"), str(cfg), trials=2000, seed="override")

    assert report.simulation.trial_count == 2000
    assert report.simulation.seed == "override"
    # start_date taken from the config file
    assert report.schedule.activities[0].start_date == "2026-01-05"
    assert "[forecast] trials" not in capsys.readouterr().out


def test_run_without_config_file(tmp_path: Path) -> None:
    samples, _ = _write_inputs(tmp_path)
    report = run(str(samples), str(tmp_path / "out"), str(tmp_path / "absent.yaml"), trials=1000, start_date="2026-03-02")
    assert report.simulation.seed == "spert"
    assert report.schedule.activities[0].start_date == "2026-03-02"


def test_config_ci_level_and_date_format(tmp_path: Path, capsys) -> None:
    samples, _ = _write_inputs(tmp_path)
    cfg = tmp_path / "custom.yaml"
    cfg.write_text(
        "scenario:\n"
        "  start_date: '2026-01-05'\n"
        "monte_carlo:\n"
        "  iterations: 1000\n"
        "analytics:\n"
        "  bootstrap_iterations: 10\n"
        "  ci_level: 0.5\n"
        "display:\n"
        "  date_format: DD/MM/YYYY\n",
        encoding="utf-8",
    )
    outdir = tmp_path / "out"
    report = run(str(samples), str(outdir), str(cfg))

    assert {ci.confidence for ci in report.percentile_cis.values()} == {0.5}

    sched = pd.read_parquet(outdir / "deterministic_schedule.parquet")
    assert sched.loc[0, "start_date"] == "2026-01-05"
    assert sched.loc[0, "start_display"] == "05/01/2026"

    summary = pd.read_parquet(outdir / "monte_carlo_summary.parquet")
    y, m, d = report.schedule.project_end_date.split("-")
    assert (summary["ProjectEndDisplay"] == f"{d}/{m}/{y}").all()
    assert f"end {d}/{m}/{y}" in capsys.readouterr().out
