"""Mesocycle data models.

A mesocycle is a multi-week block of periodized training ending in a deload
week. Only the state machine in ``autoreg.mesocycle.machine`` changes a
mesocycle's status or week statuses.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field

from autoreg.training.types import MuscleGroup, MusclePriority


class MesoCycleStatus(StrEnum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class WeekStatus(StrEnum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MesoCycleWeek(BaseModel):
    """One week of a mesocycle.

    Attributes:
        week_number: 1-indexed week number
        is_deload: Whether this week is a reduced-volume week
        target_volume: Planned sets per muscle
        completed_volume: Actual sets per muscle (running total while in progress)
        workout_ids: Workouts completed during this week
        status: upcoming, in_progress or completed
    """

    week_number: int = Field(ge=1)
    is_deload: bool = False
    target_volume: dict[MuscleGroup, int] = Field(default_factory=dict)
    completed_volume: dict[MuscleGroup, int] = Field(default_factory=dict)
    workout_ids: list[str] = Field(default_factory=list)
    status: WeekStatus = WeekStatus.UPCOMING


class MesoCycle(BaseModel):
    """A periodized training block.

    ``current_week`` is 0 while planned and 1-indexed once started.
    """

    id: str
    name: str
    description: str = ""
    status: MesoCycleStatus = MesoCycleStatus.PLANNED
    start_date: datetime | None = None
    end_date: datetime | None = None
    total_weeks: int = Field(ge=1)
    current_week: int = Field(default=0, ge=0)
    weeks: list[MesoCycleWeek] = Field(default_factory=list)
    muscle_priorities: dict[MuscleGroup, MusclePriority] = Field(default_factory=dict)
    starting_volume: dict[MuscleGroup, int] = Field(default_factory=dict)
    volume_progression_per_week: float = 0.0
    program_id: str | None = None
    program_name: str | None = None
    total_workouts: int = Field(default=0, ge=0)
    completed_workouts: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        return self.status is MesoCycleStatus.ACTIVE

    @property
    def current_week_plan(self) -> MesoCycleWeek | None:
        """The week currently being trained, if any."""
        if 1 <= self.current_week <= len(self.weeks):
            return self.weeks[self.current_week - 1]
        return None

    @property
    def workouts_per_week(self) -> float:
        return self.total_workouts / self.total_weeks if self.total_weeks else 0.0
