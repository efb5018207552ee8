"""Persistence effects.

Transitions never touch storage. They return the next state together with a
list of effects naming the keys to write; ``apply_effects`` runs those
effects against the key-value boundary. Writes are best-effort: a failure
is logged and the in-memory state stays authoritative.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from loguru import logger

from autoreg.storage.errors import StorageUnavailableError
from autoreg.storage.kv import KeyValueStore

MESOCYCLE_HISTORY_KEY = "mesocycle_history"
WEEKLY_VOLUME_KEY = "weekly_volume"
MUSCLE_FATIGUE_KEY = "muscle_fatigue"
WORKOUT_FEEDBACK_KEY = "workout_feedback"
DELOAD_STATE_KEY = "deload_state"

ALL_KEYS = (
    MESOCYCLE_HISTORY_KEY,
    WEEKLY_VOLUME_KEY,
    MUSCLE_FATIGUE_KEY,
    WORKOUT_FEEDBACK_KEY,
    DELOAD_STATE_KEY,
)


@dataclass(frozen=True)
class PersistKey:
    """Write ``payload`` under ``key``."""

    key: str
    payload: str


@dataclass(frozen=True)
class RemoveKey:
    """Delete ``key``."""

    key: str


StorageEffect = PersistKey | RemoveKey

StateT = TypeVar("StateT")


@dataclass(frozen=True)
class Transition(Generic[StateT]):
    """Result of applying one event: the next state plus persistence effects.

    A rejected (invalid) transition carries the unchanged state and no effects.
    """

    state: StateT
    effects: tuple[StorageEffect, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.effects)


def apply_effects(store: KeyValueStore, effects: Iterable[StorageEffect]) -> int:
    """Execute effects against the store, best-effort.

    Args:
        store: Key-value boundary
        effects: Effects in the order they were produced

    Returns:
        Number of effects that failed
    """
    failures = 0
    for effect in effects:
        try:
            if isinstance(effect, PersistKey):
                store.set(effect.key, effect.payload)
            else:
                store.remove(effect.key)
        except StorageUnavailableError as e:
            failures += 1
            logger.warning(f"Storage write failed (continuing in memory): key={effect.key}, error={e}")
        except Exception as e:
            failures += 1
            logger.exception(f"Unexpected error writing key={effect.key}: {e}")
    return failures
