"""Mesocycle state machine.

Lifecycle: planned -> active -> completed | abandoned. Every transition is a
pure function ``(state, event) -> Transition`` and never touches storage;
the returned effects name the keys that changed. An invalid event (no
active mesocycle, unknown id, a second active cycle) returns the unchanged
state with no effects and logs a warning.

While a mesocycle is active exactly one week is in progress, every earlier
week is completed and every later week is upcoming.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone

from loguru import logger

from autoreg.mesocycle.models import MesoCycle, MesoCycleStatus, WeekStatus
from autoreg.mesocycle.planning import create_mesocycle, create_mesocycle_from_program, maintenance_volume
from autoreg.state.effects import (
    MESOCYCLE_HISTORY_KEY,
    MUSCLE_FATIGUE_KEY,
    WEEKLY_VOLUME_KEY,
    WORKOUT_FEEDBACK_KEY,
    RemoveKey,
    StorageEffect,
    Transition,
)
from autoreg.state.models import TrainingState
from autoreg.state.serialization import (
    persist_fatigue,
    persist_feedback,
    persist_history,
    persist_weekly_volume,
)
from autoreg.training.constants import (
    FEEDBACK_HISTORY_LIMIT,
    SCORE_DELOAD,
    SCORE_INCREASE_HIGH,
    SCORE_INCREASE_LOW,
    SCORE_MAINTAIN,
    SET_ADJUSTMENTS,
)
from autoreg.training.landmarks import TRACKED_MUSCLES, VOLUME_LANDMARKS, get_landmark, parse_tracked_muscle
from autoreg.training.types import MuscleGroup, MusclePriority, TrainingProgram, WorkoutFeedback, to_utc
from autoreg.volume.fatigue import apply_session_fatigue, initial_fatigue_tracking, recover_all
from autoreg.volume.ledger import VolumeReport

StateTransition = Transition[TrainingState]


def _now(now: datetime | None) -> datetime:
    return to_utc(now) if now is not None else datetime.now(timezone.utc)


def _unchanged(state: TrainingState, reason: str) -> StateTransition:
    logger.warning(f"Ignoring invalid mesocycle transition: {reason}")
    return Transition(state)


def _effects(
    state: TrainingState,
    *,
    history: bool = False,
    volume: bool = False,
    fatigue: bool = False,
    feedback: bool = False,
) -> tuple[StorageEffect, ...]:
    effects: list[StorageEffect] = []
    if history:
        effects.append(persist_history(state))
    if volume:
        effects.append(persist_weekly_volume(state))
    if fatigue:
        effects.append(persist_fatigue(state))
    if feedback:
        effects.append(persist_feedback(state))
    return tuple(effects)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def add_mesocycle(state: TrainingState, mesocycle: MesoCycle) -> StateTransition:
    """Append a planned mesocycle to history."""
    if state.find_mesocycle(mesocycle.id) is not None:
        return _unchanged(state, f"mesocycle {mesocycle.id} already exists")
    next_state = state.with_mesocycle(mesocycle)
    logger.info(f"Created mesocycle {mesocycle.id} '{mesocycle.name}' ({mesocycle.total_weeks} weeks)")
    return Transition(next_state, _effects(next_state, history=True))


def create_mesocycle_transition(
    state: TrainingState,
    name: str,
    total_weeks: int,
    priorities: dict[MuscleGroup, MusclePriority] | None = None,
    workouts_per_week: int = 0,
    now: datetime | None = None,
) -> StateTransition:
    """Plan a mesocycle from muscle priorities and add it to history.

    Raises:
        ValueError: If the week count or workouts per week are out of range
    """
    mesocycle = create_mesocycle(name, total_weeks, priorities, workouts_per_week, now=_now(now))
    return add_mesocycle(state, mesocycle)


def start_mesocycle(state: TrainingState, mesocycle_id: str, now: datetime | None = None) -> StateTransition:
    """Activate a planned mesocycle.

    The first week becomes in progress and the weekly ledger is reset. Only
    one mesocycle may be active at a time.
    """
    mesocycle = state.find_mesocycle(mesocycle_id)
    if mesocycle is None:
        return _unchanged(state, f"unknown mesocycle {mesocycle_id}")
    if mesocycle.status is not MesoCycleStatus.PLANNED:
        return _unchanged(state, f"mesocycle {mesocycle_id} is {mesocycle.status}, not planned")
    if state.active_mesocycle_id is not None:
        return _unchanged(state, f"mesocycle {state.active_mesocycle_id} is already active")

    started_at = _now(now)
    weeks = [
        week.model_copy(update={"status": WeekStatus.IN_PROGRESS if i == 0 else WeekStatus.UPCOMING})
        for i, week in enumerate(mesocycle.weeks)
    ]
    active = mesocycle.model_copy(
        update={
            "status": MesoCycleStatus.ACTIVE,
            "current_week": 1,
            "start_date": started_at,
            "weeks": weeks,
        }
    )
    next_state = state.with_mesocycle(active, started_at).replace(
        active_mesocycle_id=active.id,
        weekly_volume=state.weekly_volume.reset(),
    )
    logger.info(f"Started mesocycle {active.id} '{active.name}'")
    return Transition(next_state, _effects(next_state, history=True, volume=True))


def start_program(state: TrainingState, program: TrainingProgram, now: datetime | None = None) -> StateTransition:
    """Create a mesocycle from a program template and start it at once."""
    if state.active_mesocycle_id is not None:
        return _unchanged(state, f"cannot start program '{program.id}' while {state.active_mesocycle_id} is active")
    started_at = _now(now)
    created = add_mesocycle(state, create_mesocycle_from_program(program, now=started_at))
    mesocycle_id = created.state.mesocycle_history[-1].id
    return start_mesocycle(created.state, mesocycle_id, started_at)


def _finish(state: TrainingState, status: MesoCycleStatus, now: datetime | None) -> StateTransition:
    active = state.active_mesocycle
    if active is None:
        return _unchanged(state, f"no active mesocycle to mark {status}")

    ended_at = _now(now)
    finished = active.model_copy(update={"status": status, "end_date": ended_at})
    next_state = state.with_mesocycle(finished, ended_at).replace(
        active_mesocycle_id=None,
        weekly_volume=state.weekly_volume.reset(),
    )
    logger.info(f"Mesocycle {active.id} {status} after week {active.current_week}/{active.total_weeks}")
    return Transition(next_state, _effects(next_state, history=True, volume=True))


def complete_mesocycle(state: TrainingState, now: datetime | None = None) -> StateTransition:
    return _finish(state, MesoCycleStatus.COMPLETED, now)


def abandon_mesocycle(state: TrainingState, now: datetime | None = None) -> StateTransition:
    return _finish(state, MesoCycleStatus.ABANDONED, now)


def _advance(state: TrainingState, mesocycle: MesoCycle, now: datetime) -> TrainingState:
    """Move ``mesocycle`` to its next week, completing it after the last one.

    The week being left is marked completed with a snapshot of the ledger.
    """
    snapshot = dict(state.weekly_volume.sets)
    current_index = mesocycle.current_week - 1
    next_week = mesocycle.current_week + 1

    weeks = list(mesocycle.weeks)
    if 0 <= current_index < len(weeks):
        weeks[current_index] = weeks[current_index].model_copy(
            update={"status": WeekStatus.COMPLETED, "completed_volume": snapshot}
        )

    if next_week > mesocycle.total_weeks:
        completed = mesocycle.model_copy(
            update={"status": MesoCycleStatus.COMPLETED, "end_date": now, "weeks": weeks}
        )
        logger.info(f"Mesocycle {mesocycle.id} completed all {mesocycle.total_weeks} weeks")
        return state.with_mesocycle(completed, now).replace(
            active_mesocycle_id=None,
            weekly_volume=state.weekly_volume.reset(),
        )

    weeks[next_week - 1] = weeks[next_week - 1].model_copy(update={"status": WeekStatus.IN_PROGRESS})
    advanced = mesocycle.model_copy(update={"current_week": next_week, "weeks": weeks})
    logger.info(f"Mesocycle {mesocycle.id} advanced to week {next_week}/{mesocycle.total_weeks}")
    return state.with_mesocycle(advanced, now).replace(weekly_volume=state.weekly_volume.reset())


def advance_week(state: TrainingState, now: datetime | None = None) -> StateTransition:
    """Close the current week and start the next one."""
    active = state.active_mesocycle
    if active is None:
        return _unchanged(state, "no active mesocycle to advance")
    next_state = _advance(state, active, _now(now))
    return Transition(next_state, _effects(next_state, history=True, volume=True))


def record_workout_completion(
    state: TrainingState,
    workout_id: str,
    sets_by_muscle: Mapping[str, int],
    now: datetime | None = None,
) -> StateTransition:
    """Count a finished workout against the active mesocycle.

    Adds the workout's sets to the ledger, the current week's running volume
    and per-muscle fatigue. Once the completed workout count reaches a whole
    multiple of workouts per week, the week advances automatically.
    """
    active = state.active_mesocycle
    if active is None:
        return _unchanged(state, f"workout {workout_id} completed with no active mesocycle")
    negative = sorted(muscle for muscle, sets in sets_by_muscle.items() if sets < 0)
    if negative:
        return _unchanged(state, f"workout {workout_id} has negative set counts for {', '.join(negative)}")

    completed_at = _now(now)
    ledger = state.weekly_volume.record_many(sets_by_muscle)
    fatigue = apply_session_fatigue(state.muscle_fatigue, sets_by_muscle, completed_at)

    weeks = list(active.weeks)
    current = active.current_week_plan
    if current is not None:
        weeks[active.current_week - 1] = current.model_copy(
            update={
                "workout_ids": [*current.workout_ids, workout_id],
                "completed_volume": dict(ledger.sets),
            }
        )
    completed_workouts = active.completed_workouts + 1
    updated = active.model_copy(update={"completed_workouts": completed_workouts, "weeks": weeks})
    next_state = state.with_mesocycle(updated, completed_at).replace(weekly_volume=ledger, muscle_fatigue=fatigue)
    logger.info(
        f"Recorded workout {workout_id} for mesocycle {active.id}: "
        f"{completed_workouts}/{active.total_workouts} workouts"
    )

    per_week = updated.workouts_per_week
    if per_week > 0 and completed_workouts % per_week == 0:
        next_state = _advance(next_state, updated, completed_at)

    return Transition(next_state, _effects(next_state, history=True, volume=True, fatigue=True))


def trigger_deload(state: TrainingState, now: datetime | None = None) -> StateTransition:
    """Turn the current week into a deload week.

    The week's targets drop to maintenance volume, fatigue is cleared and the
    weekly ledger is reset. The mesocycle stays active.
    """
    active = state.active_mesocycle
    if active is None or active.current_week_plan is None:
        return _unchanged(state, "no active mesocycle week to deload")

    deloaded_at = _now(now)
    weeks = list(active.weeks)
    weeks[active.current_week - 1] = active.current_week_plan.model_copy(
        update={"is_deload": True, "target_volume": maintenance_volume()}
    )
    next_state = state.with_mesocycle(active.model_copy(update={"weeks": weeks}), deloaded_at).replace(
        muscle_fatigue=initial_fatigue_tracking(),
        weekly_volume=state.weekly_volume.reset(),
    )
    logger.info(f"Deload triggered for week {active.current_week} of mesocycle {active.id}")
    return Transition(next_state, _effects(next_state, history=True, volume=True, fatigue=True))


def reset_training_data(state: TrainingState) -> StateTransition:
    """Drop mesocycle history, volume, fatigue and feedback.

    The stored keys are removed rather than overwritten with empty values.
    """
    logger.warning(
        f"Resetting training data: {len(state.mesocycle_history)} mesocycles, "
        f"{len(state.workout_feedback)} feedback entries"
    )
    keys = (MESOCYCLE_HISTORY_KEY, WEEKLY_VOLUME_KEY, MUSCLE_FATIGUE_KEY, WORKOUT_FEEDBACK_KEY)
    return Transition(TrainingState(), tuple(RemoveKey(key) for key in keys))


# ---------------------------------------------------------------------------
# Volume, fatigue and feedback
# ---------------------------------------------------------------------------


def add_sets(state: TrainingState, muscle: MuscleGroup | str, count: int) -> StateTransition:
    """Add sets to the weekly ledger outside a workout completion."""
    if parse_tracked_muscle(str(muscle)) is None:
        return _unchanged(state, f"untracked muscle group {muscle}")
    if count <= 0:
        return _unchanged(state, f"set count must be positive, got {count}")
    next_state = state.replace(weekly_volume=state.weekly_volume.record_sets(muscle, count))
    return Transition(next_state, _effects(next_state, volume=True))


def reset_weekly_volume(state: TrainingState) -> StateTransition:
    next_state = state.replace(weekly_volume=state.weekly_volume.reset())
    return Transition(next_state, _effects(next_state, volume=True))


def submit_feedback(
    state: TrainingState,
    workout_id: str,
    pump_rating: int,
    soreness_rating: int,
    performance_rating: int,
    notes: str | None = None,
    now: datetime | None = None,
) -> tuple[StateTransition, WorkoutFeedback]:
    """Record post-workout feedback, most recent first, keeping the last 100.

    Raises:
        pydantic.ValidationError: If a rating is outside its scale
    """
    feedback = WorkoutFeedback(
        id=uuid.uuid4().hex,
        workout_id=workout_id,
        date=_now(now),
        pump_rating=pump_rating,
        soreness_rating=soreness_rating,
        performance_rating=performance_rating,
        total_score=pump_rating + soreness_rating + performance_rating,
        notes=notes,
    )
    entries = (feedback, *state.workout_feedback)[:FEEDBACK_HISTORY_LIMIT]
    next_state = state.replace(workout_feedback=entries)
    logger.info(f"Feedback for workout {workout_id}: total_score={feedback.total_score}")
    return Transition(next_state, _effects(next_state, feedback=True)), feedback


def recover_fatigue(state: TrainingState, now: datetime | None = None) -> StateTransition:
    """Decay per-muscle fatigue for rest days elapsed up to ``now``."""
    fatigue = recover_all(state.muscle_fatigue, _now(now))
    if fatigue == dict(state.muscle_fatigue):
        return Transition(state)
    next_state = state.replace(muscle_fatigue=fatigue)
    return Transition(next_state, _effects(next_state, fatigue=True))


def recommended_volume(state: TrainingState, muscle: MuscleGroup | str) -> int:
    """This week's target sets, falling back to MEV without an active week."""
    landmark = get_landmark(muscle)
    active = state.active_mesocycle
    week = active.current_week_plan if active is not None else None
    if week is None:
        return landmark.mev
    return week.target_volume.get(MuscleGroup(muscle)) or landmark.mev


def volume_status(state: TrainingState, muscle: MuscleGroup | str) -> VolumeReport:
    return state.weekly_volume.report(muscle, recommended_volume(state, muscle))


def set_adjustment_for_score(total_score: int) -> int:
    """Weekly set change for a feedback total score (0-7)."""
    if total_score <= SCORE_INCREASE_HIGH:
        return SET_ADJUSTMENTS["increase_high"]
    if total_score <= SCORE_INCREASE_LOW:
        return SET_ADJUSTMENTS["increase_low"]
    if total_score == SCORE_MAINTAIN:
        return SET_ADJUSTMENTS["maintain"]
    if total_score >= SCORE_DELOAD:
        return SET_ADJUSTMENTS["deload"]
    return SET_ADJUSTMENTS["decrease"]


def calculate_next_week_volume(state: TrainingState, feedback: WorkoutFeedback) -> dict[MuscleGroup, int]:
    """Next week's sets per muscle, adjusted by feedback and kept within [MV, MRV]."""
    adjustment = set_adjustment_for_score(feedback.total_score)
    volume: dict[MuscleGroup, int] = {}
    for muscle in TRACKED_MUSCLES:
        landmark = VOLUME_LANDMARKS[muscle]
        volume[muscle] = max(landmark.mv, min(recommended_volume(state, muscle) + adjustment, landmark.mrv))
    return volume
