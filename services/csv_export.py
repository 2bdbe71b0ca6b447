# services/csv_export.py
"""
CSV export of a SimulationRun: commented metadata header, summary statistics
and the percentile table. Values are written with 2 decimals.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Optional

from engine.models import STANDARD_PERCENTILES, SimulationRun


def export_simulation_csv(
    run: SimulationRun,
    scenario_name: str,
    project_name: str,
    timestamp: Optional[str] = None,
) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")

    buf.write("# SPERT Forecast - Simulation Results\n")
    w.writerow(["# Project", project_name])
    w.writerow(["# Scenario", scenario_name])
    if timestamp:
        w.writerow(["# Timestamp", timestamp])
    w.writerow(["# Engine Version", run.engine_version])
    w.writerow(["# Trial Count", run.trial_count])
    w.writerow(["# Seed", run.seed])
    buf.write("\n")

    w.writerow(["Statistic", "Value"])
    w.writerow(["Mean", f"{run.mean:.2f}"])
    w.writerow(["Standard Deviation", f"{run.standard_deviation:.2f}"])
    w.writerow(["Min Sample", f"{run.min_sample:.2f}"])
    w.writerow(["Max Sample", f"{run.max_sample:.2f}"])
    buf.write("\n")

    w.writerow(["Percentile", "Duration (days)"])
    for p in STANDARD_PERCENTILES:
        value = run.percentiles.get(p)
        if value is not None:
            w.writerow([f"P{p}", f"{value:.2f}"])

    return buf.getvalue().rstrip("\n")


def write_simulation_csv(
    run: SimulationRun, scenario_name: str, project_name: str, out_fp: Path, timestamp: Optional[str] = None
) -> Path:
    out_fp = Path(out_fp)
    out_fp.parent.mkdir(parents=True, exist_ok=True)
    out_fp.write_text(export_simulation_csv(run, scenario_name, project_name, timestamp), encoding="utf-8")
    return out_fp
