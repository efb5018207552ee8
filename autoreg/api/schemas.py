"""Request and response schemas for the training API."""

from typing import Annotated

from pydantic import BaseModel, Field

from autoreg.analysis.schemas import DeloadRecommendation, DeloadWorkoutConfig
from autoreg.training.constants import MESOCYCLE_DEFAULT_WEEKS, MESOCYCLE_MAX_WEEKS, MESOCYCLE_MIN_WEEKS
from autoreg.training.types import MuscleGroup, MusclePriority, WorkoutRecord
from autoreg.volume.ledger import VolumeStatus

# ============================================================================
# Deload analysis
# ============================================================================


class DeloadAnalysisRequest(BaseModel):
    """Workout history to analyze; feedback comes from the session."""

    workouts: list[WorkoutRecord] = Field(description="Full workout history", default_factory=list)


class DeloadAnalysisResponse(BaseModel):
    recommendation: DeloadRecommendation
    config: DeloadWorkoutConfig
    show_banner: bool = Field(description="Whether the recommendation banner should be shown")


class DayBoundaryResponse(BaseModel):
    fatigue_recovered: bool = Field(description="Whether any muscle recovered fatigue since the last check")
    is_in_deload_week: bool
    fatigue_deload_recommended: bool = Field(description="Fatigue-based deload trigger after recovery")


class OverlayResponse(BaseModel):
    is_in_deload_week: bool
    deload_start_date: str | None = Field(description="ISO 8601 start of the deload window", default=None)
    last_deload_date: str | None = Field(description="ISO 8601 end of the last deload window", default=None)
    is_dismissed: bool
    day_of_deload: int = Field(description="1-based day of the deload window, 0 when not deloading")
    days_remaining: int


# ============================================================================
# Mesocycles
# ============================================================================


class CreateMesoCycleRequest(BaseModel):
    name: str = Field(min_length=1)
    total_weeks: int = Field(default=MESOCYCLE_DEFAULT_WEEKS, ge=MESOCYCLE_MIN_WEEKS, le=MESOCYCLE_MAX_WEEKS)
    muscle_priorities: dict[MuscleGroup, MusclePriority] = Field(default_factory=dict)
    workouts_per_week: int = Field(default=0, ge=0, description="0 disables automatic week advancement")


class WorkoutCompletionRequest(BaseModel):
    workout_id: str
    sets_by_muscle: dict[str, Annotated[int, Field(ge=0)]] = Field(description="Completed sets per muscle group")


class TransitionResponse(BaseModel):
    changed: bool = Field(description="False when the event was ignored as invalid")
    active_mesocycle_id: str | None = None
    current_week: int | None = None


# ============================================================================
# Feedback and volume
# ============================================================================


class FeedbackRequest(BaseModel):
    workout_id: str
    pump_rating: int = Field(ge=0, le=2)
    soreness_rating: int = Field(ge=0, le=2)
    performance_rating: int = Field(ge=0, le=3, description="0=exceeded ... 3=missed target")
    notes: str | None = None


class FeedbackResponse(BaseModel):
    id: str
    total_score: int
    next_week_volume: dict[MuscleGroup, int]


class AddSetsRequest(BaseModel):
    sets: int = Field(gt=0)


class VolumeStatusResponse(BaseModel):
    muscle_group: MuscleGroup
    sets_completed: int
    target_sets: int
    recommended_volume: int
    percent_of_mrv: float
    status: VolumeStatus
