"""Weekly aggregation of workout and feedback history.

Buckets records into trailing 7-day windows ending today and reduces each
window to scalar summaries. Pure function of its inputs: same history and
same ``now`` always produce the same summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from autoreg.analysis.feedback_scale import fatigue_score, performance_score, pump_score, soreness_score
from autoreg.training.constants import ANALYSIS_WEEKS
from autoreg.training.types import WorkoutFeedback, WorkoutRecord


@dataclass(frozen=True)
class WeeklySummary:
    """Summary of one trailing 7-day window.

    Feedback means are on the 1-5 scale and are 0 when the window has no
    feedback entries.
    """

    week_start: date
    week_end: date
    workout_count: int
    total_sets: int
    total_volume: float
    avg_fatigue: float
    avg_performance: float
    avg_soreness: float
    avg_pump: float

    @property
    def is_active(self) -> bool:
        """Whether any workout was recorded in this window."""
        return self.workout_count > 0


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def resolve_today(now: datetime | None) -> date:
    """Calendar day analysis is anchored to."""
    return (now or datetime.now(timezone.utc)).date()


def get_weekly_summaries(
    workout_history: list[WorkoutRecord],
    feedback_history: list[WorkoutFeedback],
    weeks: int = ANALYSIS_WEEKS,
    now: datetime | None = None,
) -> list[WeeklySummary]:
    """Group history into weekly summaries, most recent first.

    Window ``w`` covers the calendar days
    ``[today - 7w - 6, today - 7w]`` inclusive. Empty windows still occupy
    their slot so index == weeks ago.

    Args:
        workout_history: Full workout history (any order)
        feedback_history: Full feedback history (any order)
        weeks: Number of windows to build
        now: Reference time (defaults to current UTC time)

    Returns:
        List of WeeklySummary, index 0 = most recent window
    """
    today = resolve_today(now)
    summaries: list[WeeklySummary] = []

    for w in range(weeks):
        week_end = today - timedelta(days=w * 7)
        week_start = week_end - timedelta(days=6)

        week_workouts = [wh for wh in workout_history if week_start <= wh.date.date() <= week_end]
        week_feedback = [fb for fb in feedback_history if week_start <= fb.date.date() <= week_end]

        total_sets = 0
        total_volume = 0.0
        for workout in week_workouts:
            for s in workout.completed_sets():
                total_sets += 1
                total_volume += s.weight * s.reps

        summaries.append(
            WeeklySummary(
                week_start=week_start,
                week_end=week_end,
                workout_count=len(week_workouts),
                total_sets=total_sets,
                total_volume=total_volume,
                avg_fatigue=_mean([fatigue_score(fb) for fb in week_feedback]),
                avg_performance=_mean([performance_score(fb.performance_rating) for fb in week_feedback]),
                avg_soreness=_mean([soreness_score(fb.soreness_rating) for fb in week_feedback]),
                avg_pump=_mean([pump_score(fb.pump_rating) for fb in week_feedback]),
            )
        )

    return summaries


def active_summaries(summaries: list[WeeklySummary]) -> list[WeeklySummary]:
    """Windows with at least one workout, order preserved."""
    return [s for s in summaries if s.is_active]
