"""Deload recommendation schemas.

Recommendations are ephemeral: recomputed from history on every call and
never persisted.
"""

from enum import StrEnum

from pydantic import BaseModel, Field


class Severity(StrEnum):
    """Signal severity tier."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SummaryBracket(StrEnum):
    """Confidence bracket used to pick the summary wording."""

    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    STRONG = "strong"


class DeloadSignal(BaseModel):
    """One fatigue heuristic that fired."""

    signal: str
    description: str
    severity: Severity
    value: float
    threshold: float
    points: int = Field(ge=0, description="Points awarded toward confidence")


class DeloadRecommendation(BaseModel):
    """Aggregate deload recommendation."""

    needs_deload: bool
    confidence: int = Field(ge=0, le=100)
    signals: list[DeloadSignal] = Field(default_factory=list)
    bracket: SummaryBracket = SummaryBracket.NONE
    summary: str
    suggested_duration: int = Field(description="Suggested deload length in days")
    suggested_volume_reduction: float = Field(ge=0.0, le=1.0)
    suggested_intensity_reduction: float = Field(ge=0.0, le=1.0)
    weeks_since_last_deload: int = Field(ge=0)


class DeloadWorkoutConfig(BaseModel):
    """How to reshape a workout for a deload."""

    volume_multiplier: float
    intensity_multiplier: float
    remove_finishers: bool
    max_sets_per_exercise: int
