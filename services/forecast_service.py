# services/forecast_service.py
"""
Forecast orchestration service.

- Validates activities, settings and calendar.
- Deterministic schedule at the activity target -> Parkinson floors.
- Monte Carlo run at the scenario seed, then the schedule buffer at the
  project target.
- Adds the diagnostic overlays: bootstrap CIs for the percentile ladder, a
  downsampled S-curve and the sensitivity ranking.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from engine.analytics import cdf, compute_standard_percentile_cis
from engine.buffer import compute_schedule_buffer
from engine.deterministic import compute_deterministic_durations, compute_deterministic_schedule
from engine.models import (
    Activity,
    Calendar,
    CDFPoint,
    DeterministicSchedule,
    PercentileCI,
    ScenarioSettings,
    ScheduleBuffer,
    SimulationRun,
)
from engine.monte_carlo import DEFAULT_PROGRESS_INTERVAL, ProgressCallback, run_monte_carlo_simulation
from engine.sensitivity import SensitivityResult, top_sensitive_activities
from engine.validation import validate_activities, validate_calendar, validate_settings


@dataclass(frozen=True)
class ForecastReport:
    generated_at: str
    schedule: DeterministicSchedule
    simulation: SimulationRun
    buffer: Optional[ScheduleBuffer]
    percentile_cis: Dict[int, PercentileCI]
    s_curve: List[CDFPoint]
    sensitivity: List[SensitivityResult]


def compute_schedule(
    activities: Sequence[Activity],
    start_date: str,
    probability_target: float,
    calendar: Optional[Calendar] = None,
) -> DeterministicSchedule:
    """Validated wrapper around the deterministic scheduler."""
    validate_activities(activities)
    if calendar is not None:
        validate_calendar(calendar)
    return compute_deterministic_schedule(activities, start_date, probability_target, calendar)


def run_simulation(
    activities: Sequence[Activity],
    settings: ScenarioSettings,
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> SimulationRun:
    """Monte Carlo run with Parkinson floors at the activity probability target."""
    validate_activities(activities)
    validate_settings(settings)
    floors = compute_deterministic_durations(activities, settings.probability_target)
    return run_monte_carlo_simulation(
        activities,
        settings.trial_count,
        settings.rng_seed,
        deterministic_durations=floors,
        on_progress=on_progress,
        progress_interval=progress_interval,
    )


def build_forecast(
    activities: Sequence[Activity],
    settings: ScenarioSettings,
    start_date: str,
    calendar: Optional[Calendar] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    bootstrap_iterations: int = 500,
    ci_level: float = 0.95,
    cdf_max_points: Optional[int] = 200,
    top_sensitive: int = 5,
) -> ForecastReport:
    """
    Full forecast for one scenario.

    Bootstrap CIs are seeded from the scenario seed, so the whole report is
    reproducible. bootstrap_iterations=0 skips them; ci_level sets their
    confidence level.
    """
    schedule = compute_schedule(activities, start_date, settings.probability_target, calendar)
    simulation = run_simulation(activities, settings, on_progress, progress_interval)

    buffer = compute_schedule_buffer(
        schedule.total_duration_days,
        simulation.percentiles,
        settings.probability_target,
        settings.project_probability_target,
    )

    cis: Dict[int, PercentileCI] = {}
    if bootstrap_iterations > 0:
        cis = compute_standard_percentile_cis(
            simulation.samples,
            bootstrap_iterations,
            seed=f"{settings.rng_seed}:bootstrap",
            ci_level=ci_level,
        )

    return ForecastReport(
        generated_at=datetime.now(timezone.utc).isoformat(),
        schedule=schedule,
        simulation=simulation,
        buffer=buffer,
        percentile_cis=cis,
        s_curve=cdf(simulation.samples, cdf_max_points),
        sensitivity=top_sensitive_activities(activities, top_sensitive),
    )
