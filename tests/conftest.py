"""
tests/conftest.py

Shared pytest fixtures: a small activity chain and a holiday calendar.
These keep engine tests on tiny, hard-coded inputs instead of sample files.
"""
# --- Add this block so `import engine...` works in tests & CI ---
import sys
from pathlib import Path
_repo_root = Path(__file__).resolve().parents[1]
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))
# -----------------------------------------------------------------

from typing import List

import pytest

from engine.models import (
    Activity,
    ActivityStatus,
    Calendar,
    ConfidenceLevel,
    DistributionType,
    Holiday,
)

MONDAY = "2026-01-05"


def make_activity(
    id: str,
    min: float,
    ml: float,
    max: float,
    dist: DistributionType = DistributionType.NORMAL,
    level: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    **kwargs,
) -> Activity:
    """Terse Activity builder used across the test modules."""
    return Activity(
        id=id,
        name=kwargs.pop("name", f"Activity {id}"),
        min=min,
        most_likely=ml,
        max=max,
        confidence_level=level,
        distribution_type=dist,
        **kwargs,
    )


@pytest.fixture
def chain() -> List[Activity]:
    """
    Two planned activities plus one complete activity with an actual duration.

    - A: normal (3, 5, 10)  -> P50 duration ceil(5.5) = 6
    - B: normal (2, 4, 6)   -> P50 duration 4
    - C: complete, actual 3 working days
    """
    return [
        make_activity("A", 3, 5, 10),
        make_activity("B", 2, 4, 6),
        make_activity("C", 1, 2, 4, status=ActivityStatus.COMPLETE, actual_duration=3),
    ]


@pytest.fixture
def shutdown_calendar() -> Calendar:
    """Tue 2026-01-06 through Wed 2026-01-07 blocked out."""
    return Calendar(holidays=(Holiday("2026-01-06", "2026-01-07", name="Shutdown", id="H1"),))
