"""Workout, feedback and program schemas consumed by the engine.

Workout records arrive in one of two shapes:
- flat: ``sets`` is a list of logged sets carrying exercise name and muscle group
- legacy: ``exercises`` is a list of exercises, each with its own ``sets``
  carrying target/actual reps

Both shapes are read through the same helpers so analysis code never needs
to know which one it is looking at.
"""

from collections.abc import Iterator
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


def to_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware values pass through unchanged."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class MuscleGroup(StrEnum):
    """Muscle groups with volume landmarks."""

    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"
    QUADRICEPS = "quadriceps"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    CORE = "core"
    FULL_BODY = "full_body"


class MusclePriority(StrEnum):
    """Per-muscle emphasis inside a mesocycle."""

    FOCUS = "focus"
    NORMAL = "normal"
    MAINTAIN = "maintain"


class LoggedSet(BaseModel):
    """A set logged in the flat workout shape."""

    exercise_name: str
    muscle_group: str
    weight: float = 0.0
    reps: int = 0
    rir: int | None = None
    completed: bool = True


class ExerciseSet(BaseModel):
    """A set inside a legacy exercise entry (also used for planned sets)."""

    id: str | None = None
    weight: float | None = None
    target_reps: int = 0
    actual_reps: int | None = None
    rir: int | None = None
    completed: bool = False
    is_warmup: bool = False


class ExerciseEntry(BaseModel):
    """An exercise with its sets (legacy workout shape and deload planning)."""

    exercise_id: str | None = None
    exercise_name: str
    muscle_group: str | None = None
    sets: list[ExerciseSet] = Field(default_factory=list)
    is_deloaded: bool = False


class CompletedSet(BaseModel):
    """Shape-independent view of a completed set."""

    exercise_name: str
    muscle_group: str | None
    weight: float
    reps: int


class WorkoutRecord(BaseModel):
    """A recorded workout. Read-only input to the engine."""

    id: str
    date: datetime
    name: str = ""
    sets: list[LoggedSet] | None = None
    exercises: list[ExerciseEntry] | None = None

    @field_validator("date")
    @classmethod
    def date_as_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    def completed_sets(self) -> Iterator[CompletedSet]:
        """Yield every completed set regardless of record shape.

        Legacy records take precedence when both shapes are present. Legacy
        reps fall back from actual to target reps.
        """
        if self.exercises:
            for exercise in self.exercises:
                for s in exercise.sets:
                    if not s.completed:
                        continue
                    yield CompletedSet(
                        exercise_name=exercise.exercise_name,
                        muscle_group=exercise.muscle_group,
                        weight=s.weight or 0.0,
                        reps=s.actual_reps or s.target_reps or 0,
                    )
        elif self.sets:
            for s in self.sets:
                if not s.completed:
                    continue
                yield CompletedSet(
                    exercise_name=s.exercise_name,
                    muscle_group=s.muscle_group,
                    weight=s.weight or 0.0,
                    reps=s.reps or 0,
                )

    def max_weight_by_exercise(self) -> dict[str, float]:
        """Heaviest completed weight per exercise in this session.

        Exercises whose best weight is zero (bodyweight, empty) are omitted.
        """
        best: dict[str, float] = {}
        for s in self.completed_sets():
            best[s.exercise_name] = max(best.get(s.exercise_name, 0.0), s.weight)
        return {name: weight for name, weight in best.items() if weight > 0}

    def sets_by_muscle(self) -> dict[str, int]:
        """Count completed sets per muscle group."""
        counts: dict[str, int] = {}
        for s in self.completed_sets():
            if s.muscle_group:
                counts[s.muscle_group] = counts.get(s.muscle_group, 0) + 1
        return counts


class WorkoutFeedback(BaseModel):
    """Post-workout subjective feedback.

    Attributes:
        pump_rating: 0=none, 1=moderate, 2=great
        soreness_rating: 0=none, 1=mild, 2=significant
        performance_rating: 0=exceeded, 1=hit, 2=struggled, 3=missed target
            (lower is better)
        total_score: pump + soreness + performance (0-7), set at submission
    """

    id: str
    workout_id: str
    date: datetime
    pump_rating: int = Field(ge=0, le=2)
    soreness_rating: int = Field(ge=0, le=2)
    performance_rating: int = Field(ge=0, le=3)
    total_score: int = Field(default=0, ge=0, le=7)
    notes: str | None = None

    @field_validator("date")
    @classmethod
    def date_as_utc(cls, value: datetime) -> datetime:
        return to_utc(value)


class TrainingProgram(BaseModel):
    """Premade program template, consumed only at mesocycle creation."""

    id: str
    name: str
    description: str = ""
    duration_weeks: int = Field(ge=1)
    days_per_week: int = Field(ge=1)
    muscle_priorities: dict[MuscleGroup, MusclePriority] = Field(default_factory=dict)
    starting_volume_multiplier: float = Field(default=1.0, gt=0)
    volume_progression_per_week: float = Field(default=2.0, ge=0)
