# pipeline/scenario_ingest.py
# -----------------------------------------------------------------------------
# Purpose:
#   Read scenario inputs from CSV, coerce/validate them, and hand back engine
#   records. The CLI writes a normalised activities.parquet for inspection.
#
# What it reads:
#   - <samples>/activities.csv   id, name, min, most_likely, max, plus optional
#                                confidence_level, distribution_type, status,
#                                sd_override, actual_duration
#   - <samples>/holidays.csv     optional; start_date, end_date[, name, id]
#
# What it writes (CLI only):
#   - <out>/activities.parquet
# -----------------------------------------------------------------------------

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd

from engine.models import (
    Activity,
    ActivityStatus,
    Calendar,
    ConfidenceLevel,
    DistributionType,
    Holiday,
)
from engine.validation import validate_activities, validate_calendar

REQUIRED_ACTIVITY_COLS = ["id", "min", "most_likely", "max"]
NUMERIC_COLS = ["min", "most_likely", "max", "sd_override", "actual_duration"]


def _read_activities_frame(fp: Path) -> pd.DataFrame:
    if not fp.exists():
        raise FileNotFoundError(f"Missing {fp}")
    df = pd.read_csv(fp, dtype={"id": str, "name": str})

    missing = set(REQUIRED_ACTIVITY_COLS) - set(df.columns)
    if missing:
        raise ValueError(f"activities file missing columns: {sorted(missing)}")

    # Coerce numerics; blanks become NaN and are read back as "not set"
    for c in NUMERIC_COLS:
        if c in df.columns:
            df[c] = pd.to_numeric(df[c], errors="coerce")
        else:
            df[c] = float("nan")

    blank = [c for c in REQUIRED_ACTIVITY_COLS if c != "id" and df[c].isna().any()]
    if blank:
        raise ValueError(f"activities file has blank or non-numeric values in: {blank}")
    return df


def load_activities(
    fp: Path,
    default_confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    default_distribution_type: DistributionType = DistributionType.NORMAL,
) -> List[Activity]:
    """
    Parse and validate the activity chain, preserving file order.

    Missing confidence_level / distribution_type cells take the scenario
    defaults; a missing status means planned.
    """
    df = _read_activities_frame(Path(fp))

    activities = []
    for _, row in df.iterrows():
        d = row.to_dict()
        d = {k: (None if isinstance(v, float) and pd.isna(v) else v) for k, v in d.items()}
        d["confidence_level"] = d.get("confidence_level") or default_confidence_level
        d["distribution_type"] = d.get("distribution_type") or default_distribution_type
        d["status"] = d.get("status") or ActivityStatus.PLANNED
        activities.append(Activity.from_dict(d))

    return validate_activities(activities)


def load_calendar(fp: Path) -> Optional[Calendar]:
    """Holiday ranges from CSV; None when the file does not exist."""
    fp = Path(fp)
    if not fp.exists():
        return None
    df = pd.read_csv(fp, dtype=str).fillna("")
    if "start_date" not in df.columns:
        raise ValueError("holidays file missing columns: ['start_date']")

    holidays = []
    for i, row in df.iterrows():
        start = row["start_date"].strip()
        end = (row.get("end_date") or "").strip() or start
        holidays.append(
            Holiday(
                start_date=start,
                end_date=end,
                name=(row.get("name") or "").strip(),
                id=(row.get("id") or "").strip() or f"H{i + 1}",
            )
        )
    return validate_calendar(Calendar(holidays=tuple(holidays)))


def activities_to_frame(activities: List[Activity]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": a.id,
                "name": a.name,
                "min": a.min,
                "most_likely": a.most_likely,
                "max": a.max,
                "confidence_level": a.confidence_level.value,
                "distribution_type": a.distribution_type.value,
                "status": a.status.value,
                "sd_override": a.sd_override,
                "actual_duration": a.actual_duration,
            }
            for a in activities
        ]
    )


def main(samples_dir: Path, processed_dir: Path) -> Path:
    activities = load_activities(Path(samples_dir) / "activities.csv")
    processed_dir = Path(processed_dir)
    processed_dir.mkdir(parents=True, exist_ok=True)
    out = processed_dir / "activities.parquet"
    activities_to_frame(activities).to_parquet(out, index=False)
    print(f"[scenario_ingest] Wrote {out} rows={len(activities)}")
    return out


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--samples", default="data/samples")
    ap.add_argument("--out", default="data/processed")
    args = ap.parse_args()
    main(Path(args.samples), Path(args.out))
