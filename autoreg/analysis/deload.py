"""Deload detection engine.

Analyzes workout history and feedback to decide whether the user should
take a deload week, and reshapes workouts when they do.

Properties:
- Pure: no state, no I/O beyond debug logging
- Deterministic given the same history and the same ``now``
- ``needs_deload`` is exactly ``confidence >= 40``
"""

from __future__ import annotations

import math
from datetime import datetime

from loguru import logger

from autoreg.analysis.schemas import DeloadRecommendation, DeloadSignal, DeloadWorkoutConfig, SummaryBracket
from autoreg.analysis.signals import (
    declining_performance_signal,
    detect_stalled_lifts,
    elevated_soreness_signal,
    extended_block_signal,
    get_consecutive_training_days,
    no_rest_days_signal,
    rising_fatigue_signal,
    stalled_progress_signal,
)
from autoreg.analysis.trends import weeks_since_last_deload
from autoreg.analysis.weekly import active_summaries, get_weekly_summaries
from autoreg.training.constants import (
    ANALYSIS_WEEKS,
    DELOAD_CONFIDENCE_THRESHOLD,
    MAX_SCORE,
    MIN_WORKOUTS_FOR_ANALYSIS,
    MODERATE_CONFIDENCE_THRESHOLD,
    REDUCTION_TIERS,
    STRONG_CONFIDENCE_THRESHOLD,
    SUGGESTED_DELOAD_DAYS,
    WEIGHT_INCREMENT,
)
from autoreg.training.types import ExerciseEntry, WorkoutFeedback, WorkoutRecord

SUMMARIES: dict[SummaryBracket, str] = {
    SummaryBracket.STRONG: (
        "Strong signs of accumulated fatigue. A deload week is highly recommended "
        "to prevent overtraining and maximize long-term gains."
    ),
    SummaryBracket.MODERATE: (
        "Your body is showing signs of fatigue accumulation. Consider a deload week to recover and come back stronger."
    ),
    SummaryBracket.MILD: (
        "Some early signs of fatigue building up. A light deload could be beneficial, "
        "or keep training but monitor closely."
    ),
}
RECOVERING_WELL = "You're recovering well. Keep pushing!"
MINOR_SIGNALS = "Some minor fatigue signals detected, but nothing concerning yet. Keep monitoring."
NOT_ENOUGH_HISTORY = "Not enough workout history to analyze. Keep training and logging workouts!"


def confidence_bracket(confidence: int) -> SummaryBracket:
    """Pick the summary bracket for a confidence value."""
    if confidence >= STRONG_CONFIDENCE_THRESHOLD:
        return SummaryBracket.STRONG
    if confidence >= MODERATE_CONFIDENCE_THRESHOLD:
        return SummaryBracket.MODERATE
    if confidence >= DELOAD_CONFIDENCE_THRESHOLD:
        return SummaryBracket.MILD
    return SummaryBracket.NONE


def reduction_for_confidence(confidence: int) -> tuple[float, float]:
    """Return (volume reduction, intensity reduction) for a confidence value.

    Below the deload threshold nothing is reduced.
    """
    for min_confidence, volume_reduction, intensity_reduction in REDUCTION_TIERS:
        if confidence >= min_confidence:
            return volume_reduction, intensity_reduction
    return 0.0, 0.0


def _summary_text(bracket: SummaryBracket, signals: list[DeloadSignal]) -> str:
    if bracket is SummaryBracket.NONE:
        return MINOR_SIGNALS if signals else RECOVERING_WELL
    return SUMMARIES[bracket]


def analyze_deload_need(
    workout_history: list[WorkoutRecord],
    feedback_history: list[WorkoutFeedback],
    now: datetime | None = None,
) -> DeloadRecommendation:
    """Analyze history and decide whether a deload is needed.

    Args:
        workout_history: Full workout history
        feedback_history: Feedback entries (any order)
        now: Reference time (defaults to current UTC time)

    Returns:
        DeloadRecommendation. With fewer than 4 workouts the recommendation
        is neutral: zero confidence, no signals, no deload.
    """
    if len(workout_history) < MIN_WORKOUTS_FOR_ANALYSIS:
        logger.debug(f"Deload analysis skipped: {len(workout_history)} workouts (< {MIN_WORKOUTS_FOR_ANALYSIS})")
        return DeloadRecommendation(
            needs_deload=False,
            confidence=0,
            signals=[],
            bracket=SummaryBracket.NONE,
            summary=NOT_ENOUGH_HISTORY,
            suggested_duration=SUGGESTED_DELOAD_DAYS,
            suggested_volume_reduction=0.0,
            suggested_intensity_reduction=0.0,
            weeks_since_last_deload=0,
        )

    summaries = get_weekly_summaries(workout_history, feedback_history, ANALYSIS_WEEKS, now=now)
    active = active_summaries(summaries)
    has_feedback = len(feedback_history) > 0
    weeks_since_deload = weeks_since_last_deload(summaries)

    candidates = [
        rising_fatigue_signal(active, has_feedback),
        declining_performance_signal(active, has_feedback),
        elevated_soreness_signal(active, has_feedback),
        no_rest_days_signal(get_consecutive_training_days(workout_history, now=now)),
        stalled_progress_signal(detect_stalled_lifts(workout_history, now=now)),
        extended_block_signal(weeks_since_deload),
    ]
    signals = [s for s in candidates if s is not None]

    total_score = sum(s.points for s in signals)
    confidence = min(100, round(100 * total_score / MAX_SCORE))
    needs_deload = confidence >= DELOAD_CONFIDENCE_THRESHOLD
    volume_reduction, intensity_reduction = reduction_for_confidence(confidence)
    bracket = confidence_bracket(confidence)

    logger.debug(
        f"Deload analysis: confidence={confidence}, needs_deload={needs_deload}, "
        f"signals={[s.signal for s in signals]}, weeks_since_deload={weeks_since_deload}"
    )

    return DeloadRecommendation(
        needs_deload=needs_deload,
        confidence=confidence,
        signals=signals,
        bracket=bracket,
        summary=_summary_text(bracket, signals),
        suggested_duration=SUGGESTED_DELOAD_DAYS,
        suggested_volume_reduction=volume_reduction,
        suggested_intensity_reduction=intensity_reduction,
        weeks_since_last_deload=weeks_since_deload,
    )


def get_deload_config(recommendation: DeloadRecommendation) -> DeloadWorkoutConfig:
    """Build the workout reshaping config for a recommendation."""
    return DeloadWorkoutConfig(
        volume_multiplier=round(1 - recommendation.suggested_volume_reduction, 4),
        intensity_multiplier=round(1 - recommendation.suggested_intensity_reduction, 4),
        remove_finishers=recommendation.confidence >= MODERATE_CONFIDENCE_THRESHOLD,
        max_sets_per_exercise=2 if recommendation.confidence >= STRONG_CONFIDENCE_THRESHOLD else 3,
    )


def round_to_increment(weight: float, increment: float = WEIGHT_INCREMENT) -> float:
    """Round a weight to the nearest plate increment (halves round up)."""
    return math.floor(weight / increment + 0.5) * increment


def apply_deload_to_exercises(exercises: list[ExerciseEntry], config: DeloadWorkoutConfig) -> list[ExerciseEntry]:
    """Reshape exercises for a deload workout.

    Each exercise keeps ``ceil(sets * volume_multiplier)`` sets, capped at
    ``max_sets_per_exercise`` and never below one. Weights are scaled by the
    intensity multiplier and rounded to the nearest 2.5. All sets come back
    incomplete.
    """
    deloaded: list[ExerciseEntry] = []
    for exercise in exercises:
        original_sets = exercise.sets
        target_count = max(
            1,
            min(config.max_sets_per_exercise, math.ceil(len(original_sets) * config.volume_multiplier)),
        )
        sets = [
            s.model_copy(
                update={
                    "id": s.id or f"deload-set-{index}",
                    "weight": round_to_increment(s.weight * config.intensity_multiplier) if s.weight else s.weight,
                    "completed": False,
                }
            )
            for index, s in enumerate(original_sets[:target_count])
        ]
        deloaded.append(exercise.model_copy(update={"sets": sets, "is_deloaded": True}))
    return deloaded
