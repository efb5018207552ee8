"""Deload signal evaluation.

Six independent heuristics, each with its own point budget and severity
tiers. Signals are descriptive: an evaluator returns a DeloadSignal when its
trigger fires and None otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from autoreg.analysis.schemas import DeloadSignal, Severity
from autoreg.analysis.trends import detect_trend
from autoreg.analysis.weekly import WeeklySummary, resolve_today
from autoreg.training.constants import (
    DECLINING_PERFORMANCE_POINTS,
    ELEVATED_SORENESS_POINTS,
    EXTENDED_BLOCK_POINTS,
    NO_REST_DAYS_POINTS,
    REST_DAY_LOOKBACK_DAYS,
    RISING_FATIGUE_POINTS,
    SORENESS_WINDOW_WEEKS,
    STALL_LOOKBACK_WEEKS,
    STALLED_PROGRESS_POINTS,
    TREND_WINDOW_WEEKS,
)
from autoreg.training.types import WorkoutRecord

# Neutral performance when the current window has no feedback
NEUTRAL_PERFORMANCE = 3.0


@dataclass
class StalledLifts:
    """Result of stalled-lift detection."""

    stalled_count: int = 0
    total_tracked: int = 0
    stalled_exercises: list[str] = field(default_factory=list)

    @property
    def ratio(self) -> float:
        return self.stalled_count / self.total_tracked if self.total_tracked else 0.0


def _points(severity: Severity, budget: tuple[int, int, int]) -> int:
    high, medium, low = budget
    return {Severity.HIGH: high, Severity.MEDIUM: medium, Severity.LOW: low}[severity]


def get_consecutive_training_days(workout_history: list[WorkoutRecord], now: datetime | None = None) -> int:
    """Count consecutive trained days ending today.

    Scans back at most 30 days and stops at the first untrained day. An
    untrained today does not break the streak (the day is not over yet).
    """
    if not workout_history:
        return 0

    today = resolve_today(now)
    workout_dates = {wh.date.date() for wh in workout_history}

    consecutive = 0
    for i in range(REST_DAY_LOOKBACK_DAYS):
        if today - timedelta(days=i) in workout_dates:
            consecutive += 1
        elif i > 0:
            break
    return consecutive


def detect_stalled_lifts(
    workout_history: list[WorkoutRecord],
    now: datetime | None = None,
    weeks_to_check: int = STALL_LOOKBACK_WEEKS,
) -> StalledLifts:
    """Detect exercises whose weight has stalled or declined.

    Builds a per-exercise series of max weight per session over the trailing
    window. An exercise with at least two sessions is stalled when its most
    recent max is not above the best of the earlier sessions.
    """
    cutoff = resolve_today(now) - timedelta(days=weeks_to_check * 7)
    exercise_weights: dict[str, list[tuple[date, float]]] = {}

    for workout in workout_history:
        workout_day = workout.date.date()
        if workout_day < cutoff:
            continue
        for name, max_weight in workout.max_weight_by_exercise().items():
            exercise_weights.setdefault(name, []).append((workout_day, max_weight))

    result = StalledLifts()
    for name, entries in exercise_weights.items():
        if len(entries) < 2:
            continue
        result.total_tracked += 1

        entries = sorted(entries, key=lambda e: e[0], reverse=True)
        recent_max = entries[0][1]
        older_max = max((weight for _, weight in entries[1:]), default=0.0)

        if recent_max <= older_max:
            result.stalled_count += 1
            result.stalled_exercises.append(name)

    return result


def rising_fatigue_signal(active: list[WeeklySummary], has_feedback: bool) -> DeloadSignal | None:
    """Signal 1: fatigue trending up or currently high."""
    if len(active) < 2 or not has_feedback:
        return None

    trend = detect_trend([s.avg_fatigue for s in active[:TREND_WINDOW_WEEKS]])
    current = active[0].avg_fatigue
    if not (trend > 0.3 or current >= 4):
        return None

    if current >= 4.5 or trend > 0.7:
        severity = Severity.HIGH
    elif current >= 3.5:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    if current >= 4:
        description = f"Your fatigue level is high ({current:.1f}/5) and has been increasing"
    else:
        description = f"Your fatigue has been trending upward over recent weeks (+{trend:.1f}/week)"

    return DeloadSignal(
        signal="Rising Fatigue",
        description=description,
        severity=severity,
        value=current,
        threshold=3.5,
        points=_points(severity, RISING_FATIGUE_POINTS),
    )


def declining_performance_signal(active: list[WeeklySummary], has_feedback: bool) -> DeloadSignal | None:
    """Signal 2: performance trending down or currently low.

    Performance is higher-is-better, so a negative trend is a decline.
    """
    if len(active) < 2 or not has_feedback:
        return None

    trend = detect_trend([s.avg_performance for s in active[:TREND_WINDOW_WEEKS]])
    current = active[0].avg_performance or NEUTRAL_PERFORMANCE
    if not (trend < -0.2 or current <= 2.5):
        return None

    if current <= 2 or trend < -0.6:
        severity = Severity.HIGH
    elif current <= 2.5:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    if current <= 2.5:
        description = f"Your self-rated performance is low ({current:.1f}/5)"
    else:
        description = f"Your performance ratings have been declining ({trend:.1f}/week)"

    return DeloadSignal(
        signal="Declining Performance",
        description=description,
        severity=severity,
        value=current,
        threshold=3.0,
        points=_points(severity, DECLINING_PERFORMANCE_POINTS),
    )


def elevated_soreness_signal(active: list[WeeklySummary], has_feedback: bool) -> DeloadSignal | None:
    """Signal 3: soreness elevated over recent weeks or right now."""
    if len(active) < 2 or not has_feedback:
        return None

    values = [s.avg_soreness for s in active[:SORENESS_WINDOW_WEEKS]]
    avg_soreness = sum(values) / len(values)
    current = active[0].avg_soreness
    if not (avg_soreness >= 3.5 or current >= 4):
        return None

    if current >= 4.5:
        severity = Severity.HIGH
    elif avg_soreness >= 4:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    return DeloadSignal(
        signal="Elevated Soreness",
        description=f"Your average soreness is {avg_soreness:.1f}/5 over recent weeks",
        severity=severity,
        value=avg_soreness,
        threshold=3.5,
        points=_points(severity, ELEVATED_SORENESS_POINTS),
    )


def no_rest_days_signal(consecutive_days: int) -> DeloadSignal | None:
    """Signal 4: too many consecutive training days."""
    if consecutive_days < 8:
        return None

    if consecutive_days >= 14:
        severity = Severity.HIGH
    elif consecutive_days >= 10:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    return DeloadSignal(
        signal="No Rest Days",
        description=f"You've trained {consecutive_days} consecutive days without a rest day",
        severity=severity,
        value=consecutive_days,
        threshold=8,
        points=_points(severity, NO_REST_DAYS_POINTS),
    )


def stalled_progress_signal(stalled: StalledLifts) -> DeloadSignal | None:
    """Signal 5: a large share of tracked lifts stalled or declined."""
    if stalled.total_tracked == 0:
        return None

    ratio = stalled.ratio
    if ratio < 0.4:
        return None

    if ratio >= 0.75:
        severity = Severity.HIGH
    elif ratio >= 0.5:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    examples = ", ".join(stalled.stalled_exercises[:3])
    return DeloadSignal(
        signal="Stalled Progress",
        description=f"{stalled.stalled_count}/{stalled.total_tracked} exercises have stalled or declined ({examples})",
        severity=severity,
        value=ratio * 100,
        threshold=40,
        points=_points(severity, STALLED_PROGRESS_POINTS),
    )


def extended_block_signal(weeks_since_deload: int) -> DeloadSignal | None:
    """Signal 6: long stretch since the last reduced-volume week."""
    if weeks_since_deload < 4:
        return None

    if weeks_since_deload >= 6:
        severity = Severity.HIGH
    elif weeks_since_deload >= 5:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    return DeloadSignal(
        signal="Extended Training Block",
        description=f"It's been ~{weeks_since_deload} weeks since your last reduced-volume week",
        severity=severity,
        value=weeks_since_deload,
        threshold=4,
        points=_points(severity, EXTENDED_BLOCK_POINTS),
    )
