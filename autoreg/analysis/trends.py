"""Trend computation.

Week-over-week deltas over most-recent-first sequences.
"""

import numpy as np

from autoreg.analysis.weekly import WeeklySummary, active_summaries
from autoreg.training.constants import DELOAD_WEEK_SET_RATIO


def detect_trend(values: list[float]) -> float:
    """Mean week-over-week change of a most-recent-first sequence.

    Computes the mean of ``values[i] - values[i + 1]`` over adjacent pairs.
    Positive means the metric has been increasing (worsening for fatigue,
    improving for performance).

    Args:
        values: Metric values, index 0 = most recent

    Returns:
        Average change per week, 0.0 with fewer than 2 values
    """
    if len(values) < 2:
        return 0.0

    # np.diff gives values[i+1] - values[i]; most-recent-first flips the sign
    deltas = -np.diff(np.asarray(values, dtype=float))
    return float(deltas.mean())


def weeks_since_last_deload(summaries: list[WeeklySummary]) -> int:
    """Weeks since the last low-volume (deload-like) window.

    A window counts as deload-like when it has sets and its total is at most
    60% of the mean total over active windows. This is a proxy; no deload
    event log exists.

    Args:
        summaries: Weekly summaries, index 0 = most recent, gaps included

    Returns:
        Index of the first deload-like window, ``len(summaries)`` if none,
        0 if there is no active window at all
    """
    active = active_summaries(summaries)
    if not active:
        return 0

    avg_sets = sum(s.total_sets for s in active) / len(active)
    deload_threshold = avg_sets * DELOAD_WEEK_SET_RATIO

    for i, summary in enumerate(summaries):
        if 0 < summary.total_sets <= deload_threshold:
            return i
    return len(summaries)
