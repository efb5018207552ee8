"""Single in-process owner of training state.

``TrainingSession`` holds the current ``TrainingState`` and
``DeloadOverlayState``. Events are applied one at a time under a lock: the
pure transition computes the next state, the session swaps it in, then the
transition's effects are written to the key-value store best-effort. A
failed write never rolls back the in-memory state.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from datetime import datetime, timezone

from loguru import logger

from autoreg.analysis.deload import analyze_deload_need
from autoreg.analysis.schemas import DeloadRecommendation
from autoreg.config.settings import Settings
from autoreg.mesocycle import machine
from autoreg.mesocycle.models import MesoCycle
from autoreg.overlay import deload_overlay
from autoreg.overlay.deload_overlay import DeloadOverlayState
from autoreg.state.effects import Transition, apply_effects
from autoreg.state.models import TrainingState
from autoreg.state.serialization import load_overlay_state, load_training_state
from autoreg.storage.kv import InMemoryKeyValueStore, KeyValueStore
from autoreg.storage.sql import SqlKeyValueStore
from autoreg.training.types import MuscleGroup, MusclePriority, TrainingProgram, WorkoutFeedback, WorkoutRecord, to_utc
from autoreg.volume.fatigue import should_trigger_deload
from autoreg.volume.ledger import VolumeReport


def _now(now: datetime | None) -> datetime:
    return to_utc(now) if now is not None else datetime.now(timezone.utc)


class TrainingSession:
    """Applies training events to state and persists the results."""

    def __init__(
        self,
        store: KeyValueStore,
        state: TrainingState | None = None,
        overlay: DeloadOverlayState | None = None,
    ):
        self.store = store
        self._state = state or TrainingState()
        self._overlay = overlay or DeloadOverlayState()
        self._lock = threading.RLock()

    @classmethod
    def load(cls, store: KeyValueStore) -> TrainingSession:
        """Restore a session from whatever the store holds."""
        return cls(store, load_training_state(store), load_overlay_state(store))

    @property
    def state(self) -> TrainingState:
        return self._state

    @property
    def active_mesocycle(self) -> MesoCycle | None:
        return self._state.active_mesocycle

    def _apply(self, transition: Transition[TrainingState]) -> bool:
        self._state = transition.state
        if transition.effects:
            failures = apply_effects(self.store, transition.effects)
            if failures:
                logger.warning(f"{failures} of {len(transition.effects)} storage writes failed")
        return transition.changed

    def _apply_overlay(self, transition: Transition[DeloadOverlayState]) -> DeloadOverlayState:
        self._overlay = transition.state
        if transition.effects:
            apply_effects(self.store, transition.effects)
        return self._overlay

    # Mesocycle actions

    def create_mesocycle(
        self,
        name: str,
        total_weeks: int,
        priorities: dict[MuscleGroup, MusclePriority] | None = None,
        workouts_per_week: int = 0,
        now: datetime | None = None,
    ) -> MesoCycle:
        with self._lock:
            self._apply(
                machine.create_mesocycle_transition(
                    self._state, name, total_weeks, priorities, workouts_per_week, now=now
                )
            )
            return self._state.mesocycle_history[-1]

    def start_mesocycle(self, mesocycle_id: str, now: datetime | None = None) -> bool:
        with self._lock:
            return self._apply(machine.start_mesocycle(self._state, mesocycle_id, now))

    def start_program(self, program: TrainingProgram, now: datetime | None = None) -> MesoCycle | None:
        """Create and start a mesocycle from a program. None if one is already active."""
        with self._lock:
            if not self._apply(machine.start_program(self._state, program, now)):
                return None
            return self._state.active_mesocycle

    def advance_week(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self._apply(machine.advance_week(self._state, now))

    def record_workout_completion(
        self,
        workout_id: str,
        sets_by_muscle: Mapping[str, int],
        now: datetime | None = None,
    ) -> bool:
        with self._lock:
            return self._apply(machine.record_workout_completion(self._state, workout_id, sets_by_muscle, now))

    def complete_workout(self, workout: WorkoutRecord) -> bool:
        """Record a finished workout using its own per-muscle set counts."""
        return self.record_workout_completion(workout.id, workout.sets_by_muscle(), workout.date)

    def trigger_deload(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self._apply(machine.trigger_deload(self._state, now))

    def abandon_mesocycle(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self._apply(machine.abandon_mesocycle(self._state, now))

    def complete_mesocycle(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self._apply(machine.complete_mesocycle(self._state, now))

    # Volume, fatigue and feedback

    def add_sets(self, muscle: MuscleGroup | str, count: int) -> bool:
        with self._lock:
            return self._apply(machine.add_sets(self._state, muscle, count))

    def reset_weekly_volume(self) -> None:
        with self._lock:
            self._apply(machine.reset_weekly_volume(self._state))

    def submit_feedback(
        self,
        workout_id: str,
        pump_rating: int,
        soreness_rating: int,
        performance_rating: int,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> WorkoutFeedback:
        with self._lock:
            transition, feedback = machine.submit_feedback(
                self._state, workout_id, pump_rating, soreness_rating, performance_rating, notes, now
            )
            self._apply(transition)
            return feedback

    def recover_fatigue(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self._apply(machine.recover_fatigue(self._state, now))

    def volume_status(self, muscle: MuscleGroup | str) -> VolumeReport:
        return machine.volume_status(self._state, muscle)

    def recommended_volume(self, muscle: MuscleGroup | str) -> int:
        return machine.recommended_volume(self._state, muscle)

    def calculate_next_week_volume(self, feedback: WorkoutFeedback) -> dict[MuscleGroup, int]:
        return machine.calculate_next_week_volume(self._state, feedback)

    def should_trigger_deload(self) -> bool:
        return should_trigger_deload(self._state.muscle_fatigue, list(self._state.workout_feedback))

    # Deload overlay

    def overlay(self, now: datetime | None = None) -> DeloadOverlayState:
        """Current overlay, ending an expired deload window first."""
        with self._lock:
            return self._apply_overlay(deload_overlay.check_expiry(self._overlay, _now(now)))

    def start_deload(self, now: datetime | None = None) -> DeloadOverlayState:
        with self._lock:
            return self._apply_overlay(deload_overlay.start_deload(self._overlay, now))

    def end_deload(self, now: datetime | None = None) -> DeloadOverlayState:
        with self._lock:
            return self._apply_overlay(deload_overlay.end_deload(self._overlay, now))

    def dismiss_deload(self, now: datetime | None = None) -> DeloadOverlayState:
        with self._lock:
            self.overlay(now)
            return self._apply_overlay(deload_overlay.dismiss_deload(self._overlay))

    # Analysis

    def analyze(self, workout_history: list[WorkoutRecord], now: datetime | None = None) -> DeloadRecommendation:
        """Deload recommendation from workout history and stored feedback."""
        return analyze_deload_need(workout_history, list(self._state.workout_feedback), now=now)

    def should_show_recommendation(self, recommendation: DeloadRecommendation, now: datetime | None = None) -> bool:
        return deload_overlay.should_show_recommendation(self.overlay(now), recommendation)

    def reset(self) -> None:
        """Erase all training data and the deload overlay, in memory and in storage."""
        with self._lock:
            self._apply(machine.reset_training_data(self._state))
            self._apply_overlay(deload_overlay.reset_overlay())

    def day_boundary_check(self, now: datetime | None = None) -> bool:
        """Periodic check: decay fatigue and expire a finished deload window.

        Returns True when any muscle recovered fatigue.
        """
        current = _now(now)
        with self._lock:
            recovered = self.recover_fatigue(current)
            self.overlay(current)
        return recovered


def build_store(settings: Settings) -> KeyValueStore:
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    return SqlKeyValueStore(settings.database_url)


def build_session_from_settings(settings: Settings) -> TrainingSession:
    store = build_store(settings)
    logger.info(f"Loading training session (backend={settings.storage_backend})")
    return TrainingSession.load(store)
