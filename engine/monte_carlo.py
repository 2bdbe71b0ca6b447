# engine/monte_carlo.py
# -----------------------------------------------------------------------------
# Purpose:
#   Monte Carlo forecast of total project duration for a linear activity chain.
#
# What this module provides:
#   - run_trials(...): raw per-trial totals (float64 array, trial order)
#   - compute_simulation_stats(...): sorted series -> SimulationRun
#   - run_monte_carlo_simulation(...): both steps in one call
#
# Notes:
#   - Completed activities with an actual duration contribute a fixed sum.
#   - Parkinson's Law: every sampled activity duration is floored at its
#     deterministic duration (max(floor, sampled)); work never finishes early.
#   - Same activities + trial count + seed => identical series.
#   - Runs every requested trial; there is no cancellation hook. Callers that
#     need responsiveness run this in a worker thread/process.
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import numpy as np

from engine.analytics import compute_standard_percentiles, histogram, percentile, sort_samples
from engine.analytics import mean as compute_mean
from engine.analytics import standard_deviation as compute_sd
from engine.distributions import Distribution, create_distribution_for_activity
from engine.models import ENGINE_VERSION, Activity, SimulationRun
from engine.rng import create_seeded_rng

ProgressCallback = Callable[[int, int], None]

DEFAULT_PROGRESS_INTERVAL = 10_000
HISTOGRAM_BINS = 40


def run_trials(
    activities: Sequence[Activity],
    trial_count: int,
    seed: str,
    deterministic_durations: Optional[Sequence[float]] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> np.ndarray:
    """
    Run `trial_count` independent trials and return their total durations.

    Parameters
    ----------
    activities : ordered activity chain
    trial_count : number of trials
    seed : RNG seed string
    deterministic_durations : optional floors, one per non-complete activity
        in chain order (see engine.deterministic.compute_deterministic_durations)
    on_progress : optional callback(completed_trials, total_trials), fired every
        `progress_interval` trials; never on the final trial
    progress_interval : progress cadence

    Raises
    ------
    ValueError
        Propagated from distribution construction for any invalid activity.
    """
    rng = create_seeded_rng(seed)

    completed_sum = 0.0
    distributions: List[Distribution] = []
    for activity in activities:
        if activity.uses_actual:
            completed_sum += float(activity.actual_duration)
        else:
            distributions.append(create_distribution_for_activity(activity))

    floors = [0.0] * len(distributions)
    if deterministic_durations is not None:
        for i, d in enumerate(deterministic_durations[: len(distributions)]):
            floors[i] = float(d)
    steps = list(zip(distributions, floors))

    samples = np.empty(trial_count, dtype=float)
    report = on_progress is not None and trial_count >= progress_interval

    for trial in range(trial_count):
        total = completed_sum
        for dist, floor in steps:
            sampled = dist.sample(rng)
            total += floor if floor > sampled else sampled
        samples[trial] = total

        done = trial + 1
        if report and done % progress_interval == 0 and done < trial_count:
            on_progress(done, trial_count)

    return samples


def compute_simulation_stats(samples: Sequence[float], trial_count: int, seed: str) -> SimulationRun:
    """
    Summarise a raw sample series.

    The histogram only covers samples <= P99 so a long tail does not flatten
    the buckets; mean, SD, min/max and the stored series use every sample.
    """
    ordered = sort_samples(samples)
    ordered.flags.writeable = False

    p99 = percentile(ordered, 0.99)
    cut = int(np.searchsorted(ordered, p99, side="right"))
    bins = histogram(ordered[:cut], HISTOGRAM_BINS)

    return SimulationRun(
        trial_count=trial_count,
        seed=seed,
        engine_version=ENGINE_VERSION,
        percentiles=compute_standard_percentiles(ordered),
        histogram_bins=tuple(bins),
        mean=compute_mean(ordered),
        standard_deviation=compute_sd(ordered),
        min_sample=float(ordered[0]) if ordered.size else 0.0,
        max_sample=float(ordered[-1]) if ordered.size else 0.0,
        samples=ordered,
    )


def run_monte_carlo_simulation(
    activities: Sequence[Activity],
    trial_count: int,
    seed: str,
    deterministic_durations: Optional[Sequence[float]] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> SimulationRun:
    samples = run_trials(
        activities,
        trial_count,
        seed,
        deterministic_durations=deterministic_durations,
        on_progress=on_progress,
        progress_interval=progress_interval,
    )
    return compute_simulation_stats(samples, trial_count, seed)
