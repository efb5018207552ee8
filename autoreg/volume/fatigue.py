"""Per-muscle fatigue tracking.

Fatigue accumulates with logged sets, decays with rest, and is reset to zero
whenever a deload is triggered.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta

from pydantic import BaseModel, Field, field_validator

from autoreg.training.constants import (
    DEFAULT_RECOVERY_RATE,
    FATIGUE_CEILING,
    FATIGUE_CRITICAL_THRESHOLD,
    FATIGUE_DELOAD_THRESHOLD,
    FATIGUE_PER_SET,
    FATIGUED_MUSCLES_FOR_DELOAD,
    HARD_SESSION_SETS,
    RECENT_FEEDBACK_COUNT,
    SCORE_DELOAD,
)
from autoreg.training.landmarks import TRACKED_MUSCLES, parse_tracked_muscle
from autoreg.training.types import MuscleGroup, WorkoutFeedback, to_utc


class MuscleFatigue(BaseModel):
    """Fatigue state of one muscle group.

    Attributes:
        current_fatigue: 0-100, +5 per logged set
        recovery_rate: Points recovered per rest day
        consecutive_hard_sessions: Sessions in a row with more than 4 sets
        needs_deload: current_fatigue above 70
    """

    muscle_group: MuscleGroup
    current_fatigue: float = Field(default=0.0, ge=0.0, le=FATIGUE_CEILING)
    last_trained_date: datetime | None = None
    last_recovered_at: datetime | None = None
    recovery_rate: float = DEFAULT_RECOVERY_RATE
    consecutive_hard_sessions: int = 0
    needs_deload: bool = False

    @field_validator("last_trained_date", "last_recovered_at")
    @classmethod
    def timestamps_as_utc(cls, value: datetime | None) -> datetime | None:
        return to_utc(value) if value is not None else None

    def after_session(self, sets: int, trained_at: datetime | None = None) -> MuscleFatigue:
        """Fatigue after a session contributing ``sets`` to this muscle.

        Non-positive set counts leave the muscle untouched.
        """
        if sets <= 0:
            return self
        if trained_at is not None:
            trained_at = to_utc(trained_at)
        fatigue = min(float(FATIGUE_CEILING), self.current_fatigue + sets * FATIGUE_PER_SET)
        return self.model_copy(
            update={
                "current_fatigue": fatigue,
                "last_trained_date": trained_at or self.last_trained_date,
                "last_recovered_at": trained_at or self.last_recovered_at,
                "consecutive_hard_sessions": self.consecutive_hard_sessions + 1 if sets > HARD_SESSION_SETS else 0,
                "needs_deload": fatigue > FATIGUE_DELOAD_THRESHOLD,
            }
        )

    def recover(self, days: int) -> MuscleFatigue:
        """Fatigue after ``days`` of rest, floored at zero."""
        if days <= 0:
            return self
        fatigue = max(0.0, self.current_fatigue - self.recovery_rate * days)
        return self.model_copy(
            update={"current_fatigue": fatigue, "needs_deload": fatigue > FATIGUE_DELOAD_THRESHOLD}
        )

    def recover_until(self, now: datetime) -> MuscleFatigue:
        """Apply recovery for whole days elapsed since the last recovery point.

        Repeated calls with the same ``now`` decay only once.
        """
        anchor = self.last_recovered_at or self.last_trained_date
        if anchor is None:
            return self
        days = (to_utc(now) - anchor).days
        if days <= 0:
            return self
        return self.recover(days).model_copy(update={"last_recovered_at": anchor + timedelta(days=days)})


FatigueMap = dict[MuscleGroup, MuscleFatigue]


def initial_fatigue_tracking() -> FatigueMap:
    return {muscle: MuscleFatigue(muscle_group=muscle) for muscle in TRACKED_MUSCLES}


def apply_session_fatigue(
    fatigue: Mapping[MuscleGroup, MuscleFatigue],
    sets_by_muscle: Mapping[str, int],
    trained_at: datetime | None = None,
) -> FatigueMap:
    """Accumulate fatigue for every tracked muscle worked in a session."""
    updated = dict(fatigue)
    for name, sets in sets_by_muscle.items():
        muscle = parse_tracked_muscle(name)
        if muscle is None or sets <= 0:
            continue
        current = updated.get(muscle) or MuscleFatigue(muscle_group=muscle)
        updated[muscle] = current.after_session(sets, trained_at)
    return updated


def recover_all(fatigue: Mapping[MuscleGroup, MuscleFatigue], now: datetime) -> FatigueMap:
    """Decay each muscle's fatigue for the rest days elapsed up to ``now``."""
    return {muscle: state.recover_until(now) for muscle, state in fatigue.items()}


def should_trigger_deload(
    fatigue: Mapping[MuscleGroup, MuscleFatigue],
    feedback: list[WorkoutFeedback],
) -> bool:
    """Fatigue-based deload check.

    True when at least three muscles need a deload (or sit above 80), or
    when the three most recent feedback entries average a total score of 7.

    Args:
        fatigue: Per-muscle fatigue
        feedback: Feedback history, most recent first
    """
    fatigued = [f for f in fatigue.values() if f.needs_deload or f.current_fatigue > FATIGUE_CRITICAL_THRESHOLD]
    if len(fatigued) >= FATIGUED_MUSCLES_FOR_DELOAD:
        return True

    recent = feedback[:RECENT_FEEDBACK_COUNT]
    if not recent:
        return False
    avg_score = sum(f.total_score for f in recent) / len(recent)
    return avg_score >= SCORE_DELOAD
