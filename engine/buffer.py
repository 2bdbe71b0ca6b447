# engine/buffer.py
# -----------------------------------------------------------------------------
# Purpose:
#   Schedule contingency: Monte Carlo duration at the project target minus the
#   deterministic total.
#
#   e.g. deterministic total 200 days at P50 per activity, MC P95 = 232.8
#        -> buffer of 33 working days.
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from typing import Mapping, Optional

from engine.models import ScheduleBuffer


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def compute_schedule_buffer(
    deterministic_total: float,
    simulation_percentiles: Mapping[int, float],
    activity_probability_target: float,
    project_probability_target: float,
) -> Optional[ScheduleBuffer]:
    """
    Look up P(round(project_target * 100)) and diff it against the total.

    Returns None when that percentile is not in the table. buffer_days is
    negative when the deterministic plan already exceeds the project target.
    """
    key = _round_half_up(project_probability_target * 100)
    project_duration = simulation_percentiles.get(key)
    if project_duration is None:
        return None

    return ScheduleBuffer(
        deterministic_total=deterministic_total,
        project_target_duration=project_duration,
        buffer_days=_round_half_up(project_duration - deterministic_total),
        activity_probability_target=activity_probability_target,
        project_probability_target=project_probability_target,
    )
