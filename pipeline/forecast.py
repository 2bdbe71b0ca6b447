# pipeline/forecast.py
# -----------------------------------------------------------------------------
# Purpose:
#   Run the full SPERT forecast for one scenario and write tabular outputs:
#   deterministic schedule, Monte Carlo runs, percentile summary with the
#   schedule buffer, histogram and S-curve points.
#
# What it reads:
#   - config.yaml                  (scenario targets, trials, seed, ...)
#   - <samples>/activities.csv     (see pipeline.scenario_ingest)
#   - <samples>/holidays.csv       (optional)
#
# What it writes:
#   - <outdir>/deterministic_schedule.parquet
#   - <outdir>/monte_carlo_runs.parquet
#   - <outdir>/monte_carlo_summary.parquet
#   - <outdir>/forecast_histogram.parquet
#   - <outdir>/forecast_s_curves.parquet
#   - <outdir>/simulation_results.csv
# -----------------------------------------------------------------------------

from __future__ import annotations

import argparse
import dataclasses
from datetime import date
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from engine.calendar import format_date_display, parse_date_iso
from engine.models import Calendar
from engine.us_holidays import calendar_from_us_holidays
from pipeline.scenario_ingest import load_activities, load_calendar
from services.csv_export import write_simulation_csv
from services.forecast_service import ForecastReport, build_forecast
from services.settings import load_config, scenario_settings_from_config


def _merge_us_holidays(calendar: Optional[Calendar], start_date: str) -> Calendar:
    """Add US federal holidays for the start year and the following four years."""
    year = parse_date_iso(start_date).year
    us = calendar_from_us_holidays(range(year, year + 5))
    own = calendar.holidays if calendar is not None else ()
    return Calendar(holidays=own + us.holidays)


def report_frames(report: ForecastReport, date_format: str = "MM/DD/YYYY") -> Dict[str, pd.DataFrame]:
    """
    Flatten a ForecastReport into the output tables, keyed by file stem.

    Dates stay ISO; the *_display columns use `date_format`.
    """
    sim = report.simulation

    schedule = pd.DataFrame([dataclasses.asdict(a) for a in report.schedule.activities])
    if not schedule.empty:
        schedule["start_display"] = schedule["start_date"].map(lambda d: format_date_display(d, date_format))
        schedule["end_display"] = schedule["end_date"].map(lambda d: format_date_display(d, date_format))

    runs = pd.DataFrame({"Trial": range(1, len(sim.samples) + 1), "TotalDays": sim.samples})

    rows = []
    for p, value in sim.percentiles.items():
        ci = report.percentile_cis.get(p)
        rows.append(
            {
                "Percentile": p,
                "Days": value,
                "CI_Lower": ci.lower if ci else None,
                "CI_Upper": ci.upper if ci else None,
            }
        )
    summary = pd.DataFrame(rows)
    buf = report.buffer
    summary = summary.assign(
        Mean=sim.mean,
        StdDev=sim.standard_deviation,
        MinSample=sim.min_sample,
        MaxSample=sim.max_sample,
        Trials=sim.trial_count,
        Seed=sim.seed,
        EngineVersion=sim.engine_version,
        DeterministicTotal=report.schedule.total_duration_days,
        ProjectEndDate=report.schedule.project_end_date,
        ProjectEndDisplay=format_date_display(report.schedule.project_end_date, date_format),
        BufferDays=buf.buffer_days if buf else None,
        ProjectTargetDays=buf.project_target_duration if buf else None,
    )

    histogram = pd.DataFrame([dataclasses.asdict(b) for b in sim.histogram_bins])

    s_curve = pd.DataFrame(
        {
            "Metric": "TotalDays",
            "Value": [pt.value for pt in report.s_curve],
            "CDF": [pt.probability for pt in report.s_curve],
        }
    )

    return {
        "deterministic_schedule": schedule,
        "monte_carlo_runs": runs,
        "monte_carlo_summary": summary,
        "forecast_histogram": histogram,
        "forecast_s_curves": s_curve,
    }


def run(
    samples_dir: str,
    outdir: str,
    config_fp: Optional[str] = None,
    trials: Optional[int] = None,
    seed: Optional[str] = None,
    start_date: Optional[str] = None,
) -> ForecastReport:
    """
    Main forecast driver.

    Steps:
      1) Load config and turn it into ScenarioSettings (CLI overrides win).
      2) Read + validate activities and the optional holiday calendar.
      3) Build the forecast (schedule, Monte Carlo, buffer, CIs, sensitivity).
      4) Write parquet tables and the CSV summary.
    """
    cfg = load_config(Path(config_fp) if config_fp else None)
    if trials is not None:
        cfg["monte_carlo"]["iterations"] = trials
    if seed is not None:
        cfg["monte_carlo"]["seed"] = seed
    settings = scenario_settings_from_config(cfg)

    sc = cfg["scenario"]
    start = start_date or sc.get("start_date") or date.today().isoformat()

    samples = Path(samples_dir)
    activities = load_activities(
        samples / "activities.csv",
        settings.default_confidence_level,
        settings.default_distribution_type,
    )
    calendar = load_calendar(samples / "holidays.csv")
    if sc.get("use_us_holidays"):
        calendar = _merge_us_holidays(calendar, start)

    def _progress(done: int, total: int) -> None:
        print(f"[forecast] trials {done}/{total}")

    an = cfg["analytics"]
    report = build_forecast(
        activities,
        settings,
        start,
        calendar,
        on_progress=_progress,
        progress_interval=int(cfg["monte_carlo"].get("progress_interval", 10000)),
        bootstrap_iterations=int(an.get("bootstrap_iterations", 500)),
        ci_level=float(an.get("ci_level", 0.95)),
        cdf_max_points=an.get("cdf_max_points"),
        top_sensitive=int(an.get("top_sensitive", 5)),
    )

    out = Path(outdir)
    out.mkdir(parents=True, exist_ok=True)
    date_format = cfg["display"].get("date_format", "MM/DD/YYYY")
    for stem, df in report_frames(report, date_format).items():
        df.to_parquet(out / f"{stem}.parquet", index=False)
    write_simulation_csv(
        report.simulation,
        sc.get("name", "Baseline"),
        sc.get("project_name", ""),
        out / "simulation_results.csv",
        timestamp=report.generated_at,
    )

    buf = report.buffer
    pct = round(settings.project_probability_target * 100)
    end = format_date_display(report.schedule.project_end_date, date_format)
    msg = f"deterministic {report.schedule.total_duration_days} days, end {end}"
    if buf is not None:
        msg += f"; P{pct} {buf.project_target_duration:.1f} days, buffer {buf.buffer_days} days"
    print(f"[forecast] {msg}")
    print(f"[forecast] Wrote outputs in {out}")
    return report


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a SPERT schedule forecast and write parquet outputs.")
    parser.add_argument("--samples", default="data/samples", help="Directory with activities.csv / holidays.csv")
    parser.add_argument("--outdir", default="data/processed", help="Output dir")
    parser.add_argument("--config", default="config.yaml", help="YAML config (optional)")
    parser.add_argument("--trials", type=int, default=None, help="Override Monte Carlo trial count")
    parser.add_argument("--seed", default=None, help="Override RNG seed string")
    parser.add_argument("--start-date", default=None, help="Project start date YYYY-MM-DD")
    args = parser.parse_args()

    run(args.samples, args.outdir, args.config, args.trials, args.seed, args.start_date)
