# engine/validation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Reject malformed activities, settings and calendars before they reach the
#   engine. The engine itself assumes well-formed input.
#
# Behaviour:
#   - validate_* functions return the record unchanged or raise ValidationError
#     listing every problem found ("field: message").
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
import re
from typing import List, Sequence

from engine.models import (
    MAX_TRIAL_COUNT,
    MIN_TRIAL_COUNT,
    Activity,
    ActivityStatus,
    Calendar,
    ScenarioSettings,
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationError(ValueError):
    """A record failed validation. `errors` holds one message per problem."""

    def __init__(self, record: str, errors: List[str]) -> None:
        self.record = record
        self.errors = errors
        super().__init__(f"Invalid {record}: " + "; ".join(errors))


def _finite(x: float) -> bool:
    return isinstance(x, (int, float)) and math.isfinite(x)


def validate_activity(activity: Activity) -> Activity:
    errors: List[str] = []
    if not activity.id:
        errors.append("id: must not be empty")
    if not activity.name:
        errors.append("name: must not be empty")
    for fname in ("min", "most_likely", "max"):
        v = getattr(activity, fname)
        if not _finite(v) or v < 0:
            errors.append(f"{fname}: must be a non-negative number, got {v}")
    if not errors:
        if activity.min > activity.most_likely:
            errors.append("min: Min must be <= Most Likely")
        if activity.most_likely > activity.max:
            errors.append("most_likely: Most Likely must be <= Max")
    if activity.sd_override is not None and not (_finite(activity.sd_override) and activity.sd_override > 0):
        errors.append(f"sd_override: must be a positive number, got {activity.sd_override}")
    if activity.actual_duration is not None and not (
        _finite(activity.actual_duration) and activity.actual_duration >= 0
    ):
        errors.append(f"actual_duration: must be a non-negative number, got {activity.actual_duration}")
    if activity.actual_duration is not None and activity.status is not ActivityStatus.COMPLETE:
        errors.append("actual_duration: only allowed when status is complete")

    if errors:
        raise ValidationError(f"activity {activity.id!r}", errors)
    return activity


def validate_activities(activities: Sequence[Activity]) -> List[Activity]:
    seen = set()
    for a in activities:
        validate_activity(a)
        if a.id in seen:
            raise ValidationError(f"activity {a.id!r}", ["id: duplicate activity id"])
        seen.add(a.id)
    return list(activities)


def validate_settings(settings: ScenarioSettings) -> ScenarioSettings:
    errors: List[str] = []
    for fname in ("probability_target", "project_probability_target"):
        v = getattr(settings, fname)
        if not _finite(v) or not 0.01 <= v <= 0.99:
            errors.append(f"{fname}: must be between 0.01 and 0.99, got {v}")
    if (
        not isinstance(settings.trial_count, int)
        or not MIN_TRIAL_COUNT <= settings.trial_count <= MAX_TRIAL_COUNT
    ):
        errors.append(
            f"trial_count: must be an integer in [{MIN_TRIAL_COUNT}, {MAX_TRIAL_COUNT}], got {settings.trial_count}"
        )
    if not settings.rng_seed:
        errors.append("rng_seed: must not be empty")

    if errors:
        raise ValidationError("scenario settings", errors)
    return settings


def validate_calendar(calendar: Calendar) -> Calendar:
    errors: List[str] = []
    for h in calendar.holidays:
        label = h.name or h.id or h.start_date
        if not _ISO_DATE.match(h.start_date or "") or not _ISO_DATE.match(h.end_date or ""):
            errors.append(f"holiday {label}: dates must be YYYY-MM-DD")
        elif h.start_date > h.end_date:
            errors.append(f"holiday {label}: start_date must be <= end_date")

    if errors:
        raise ValidationError("calendar", errors)
    return calendar
