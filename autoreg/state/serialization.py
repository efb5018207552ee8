"""Serialization between training state and the key-value boundary.

Each fixed key holds one JSON document:
- mesocycle_history: list of MesoCycle
- weekly_volume: {muscle: sets}
- muscle_fatigue: {muscle: MuscleFatigue}
- workout_feedback: list of WorkoutFeedback, most recent first
- deload_state: DeloadOverlayState
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from autoreg.mesocycle.models import MesoCycle
from autoreg.overlay.deload_overlay import DeloadOverlayState
from autoreg.state.effects import (
    DELOAD_STATE_KEY,
    MESOCYCLE_HISTORY_KEY,
    MUSCLE_FATIGUE_KEY,
    WEEKLY_VOLUME_KEY,
    WORKOUT_FEEDBACK_KEY,
    PersistKey,
)
from autoreg.state.models import TrainingState, find_active_id
from autoreg.storage.errors import StorageUnavailableError
from autoreg.storage.kv import KeyValueStore
from autoreg.training.constants import FEEDBACK_HISTORY_LIMIT
from autoreg.training.types import MuscleGroup, WorkoutFeedback
from autoreg.volume.fatigue import MuscleFatigue, initial_fatigue_tracking
from autoreg.volume.ledger import VolumeLedger

_history_adapter = TypeAdapter(list[MesoCycle])
_feedback_adapter = TypeAdapter(list[WorkoutFeedback])
_fatigue_adapter = TypeAdapter(dict[MuscleGroup, MuscleFatigue])


def persist_history(state: TrainingState) -> PersistKey:
    return PersistKey(MESOCYCLE_HISTORY_KEY, _history_adapter.dump_json(list(state.mesocycle_history)).decode())


def persist_weekly_volume(state: TrainingState) -> PersistKey:
    return PersistKey(WEEKLY_VOLUME_KEY, json.dumps(state.weekly_volume.to_dict()))


def persist_fatigue(state: TrainingState) -> PersistKey:
    return PersistKey(MUSCLE_FATIGUE_KEY, _fatigue_adapter.dump_json(dict(state.muscle_fatigue)).decode())


def persist_feedback(state: TrainingState) -> PersistKey:
    return PersistKey(WORKOUT_FEEDBACK_KEY, _feedback_adapter.dump_json(list(state.workout_feedback)).decode())


def _read(store: KeyValueStore, key: str) -> str | None:
    try:
        return store.get(key)
    except StorageUnavailableError as e:
        logger.warning(f"Storage read failed (using defaults): key={key}, error={e}")
    except Exception as e:
        logger.exception(f"Unexpected error reading key={key}: {e}")
    return None


def _decode(raw: str | None, key: str, adapter: TypeAdapter[Any]) -> Any | None:
    if raw is None:
        return None
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding corrupt persisted value for key={key}: {e.error_count()} errors")
        return None


def load_training_state(store: KeyValueStore) -> TrainingState:
    """Rebuild training state from the store.

    Missing or corrupt keys fall back to defaults. The active mesocycle is
    the one whose status is active.
    """
    history = _decode(_read(store, MESOCYCLE_HISTORY_KEY), MESOCYCLE_HISTORY_KEY, _history_adapter) or []
    feedback = _decode(_read(store, WORKOUT_FEEDBACK_KEY), WORKOUT_FEEDBACK_KEY, _feedback_adapter) or []

    fatigue = initial_fatigue_tracking()
    fatigue.update(_decode(_read(store, MUSCLE_FATIGUE_KEY), MUSCLE_FATIGUE_KEY, _fatigue_adapter) or {})

    ledger = VolumeLedger.empty()
    raw_volume = _read(store, WEEKLY_VOLUME_KEY)
    if raw_volume is not None:
        try:
            ledger = VolumeLedger.from_dict(json.loads(raw_volume))
        except (json.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Discarding corrupt persisted value for key={WEEKLY_VOLUME_KEY}: {e}")

    state = TrainingState(
        mesocycle_history=tuple(history),
        active_mesocycle_id=find_active_id(history),
        weekly_volume=ledger,
        muscle_fatigue=fatigue,
        workout_feedback=tuple(feedback[:FEEDBACK_HISTORY_LIMIT]),
    )
    logger.info(
        f"Loaded training state: mesocycles={len(history)}, active={state.active_mesocycle_id}, "
        f"feedback={len(state.workout_feedback)}"
    )
    return state


def load_overlay_state(store: KeyValueStore) -> DeloadOverlayState:
    raw = _read(store, DELOAD_STATE_KEY)
    if raw is None:
        return DeloadOverlayState()
    try:
        return DeloadOverlayState.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding corrupt persisted value for key={DELOAD_STATE_KEY}: {e.error_count()} errors")
        return DeloadOverlayState()
