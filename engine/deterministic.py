# engine/deterministic.py
# -----------------------------------------------------------------------------
# Purpose:
#   Deterministic, calendar-aware schedule for a finish-to-start activity chain
#   at a single probability target (e.g. P50 per activity).
#
# Rules:
#   - Start date rolls forward to the first working day.
#   - Complete activities with an actual duration use it (is_actual=True);
#     every other activity takes max(1, ceil(inverse_cdf(target))).
#   - End = start + duration working days; the next activity starts one
#     working day after the previous end.
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from engine.calendar import (
    add_working_days,
    format_date_iso,
    next_working_day_on_or_after,
    parse_date_iso,
)
from engine.distributions import create_distribution_for_activity
from engine.models import Activity, Calendar, DeterministicSchedule, ScheduledActivity


def _duration_at(activity: Activity, probability_target: float) -> int:
    dist = create_distribution_for_activity(activity)
    return max(1, math.ceil(dist.inverse_cdf(probability_target)))


def compute_deterministic_durations(
    activities: Sequence[Activity], probability_target: float
) -> List[int]:
    """
    Durations (>= 1 working day) for every non-complete activity, in order.

    These are the Parkinson's Law floors consumed by engine.monte_carlo.run_trials.
    """
    return [_duration_at(a, probability_target) for a in activities if not a.uses_actual]


def compute_deterministic_schedule(
    activities: Sequence[Activity],
    start_date: str,
    percentile: float,
    calendar: Optional[Calendar] = None,
) -> DeterministicSchedule:
    """
    Chain `activities` in input order starting at `start_date` ("YYYY-MM-DD").

    An empty chain has zero duration and ends on the adjusted start date.
    """
    scheduled: List[ScheduledActivity] = []
    current = next_working_day_on_or_after(parse_date_iso(start_date), calendar)

    for activity in activities:
        if activity.uses_actual:
            duration = activity.actual_duration
            is_actual = True
        else:
            duration = _duration_at(activity, percentile)
            is_actual = False

        end = add_working_days(current, duration, calendar)
        scheduled.append(
            ScheduledActivity(
                activity_id=activity.id,
                name=activity.name,
                duration=duration,
                start_date=format_date_iso(current),
                end_date=format_date_iso(end),
                is_actual=is_actual,
            )
        )
        current = add_working_days(end, 1, calendar)

    total = sum(s.duration for s in scheduled)
    project_end = scheduled[-1].end_date if scheduled else format_date_iso(current)

    return DeterministicSchedule(
        activities=tuple(scheduled),
        total_duration_days=total,
        project_end_date=project_end,
    )
