"""In-memory training state.

The single state owner (``TrainingSession``) holds one TrainingState and
replaces it wholesale after every transition. State objects are never
mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from autoreg.mesocycle.models import MesoCycle, MesoCycleStatus
from autoreg.training.types import WorkoutFeedback
from autoreg.volume.fatigue import FatigueMap, initial_fatigue_tracking
from autoreg.volume.ledger import VolumeLedger


@dataclass(frozen=True)
class TrainingState:
    """Immutable periodization state.

    Attributes:
        mesocycle_history: Every mesocycle ever created, oldest first
        active_mesocycle_id: Id of the active mesocycle (at most one)
        weekly_volume: Sets per muscle in the current training week
        muscle_fatigue: Per-muscle fatigue
        workout_feedback: Feedback entries, most recent first, capped at 100
    """

    mesocycle_history: tuple[MesoCycle, ...] = ()
    active_mesocycle_id: str | None = None
    weekly_volume: VolumeLedger = field(default_factory=VolumeLedger.empty)
    muscle_fatigue: FatigueMap = field(default_factory=initial_fatigue_tracking)
    workout_feedback: tuple[WorkoutFeedback, ...] = ()

    @property
    def active_mesocycle(self) -> MesoCycle | None:
        if self.active_mesocycle_id is None:
            return None
        return self.find_mesocycle(self.active_mesocycle_id)

    def find_mesocycle(self, mesocycle_id: str) -> MesoCycle | None:
        return next((m for m in self.mesocycle_history if m.id == mesocycle_id), None)

    def replace(self, **changes: object) -> TrainingState:
        """Create a new state instance with updated fields."""
        return replace(self, **changes)

    def with_mesocycle(self, mesocycle: MesoCycle, now: datetime | None = None) -> TrainingState:
        """Replace (or append) a mesocycle in history, stamping ``updated_at``."""
        if now is not None:
            mesocycle = mesocycle.model_copy(update={"updated_at": now})
        history = list(self.mesocycle_history)
        for i, existing in enumerate(history):
            if existing.id == mesocycle.id:
                history[i] = mesocycle
                break
        else:
            history.append(mesocycle)
        return self.replace(mesocycle_history=tuple(history))


def find_active_id(history: tuple[MesoCycle, ...] | list[MesoCycle]) -> str | None:
    """Id of the first mesocycle whose status is active."""
    return next((m.id for m in history if m.status is MesoCycleStatus.ACTIVE), None)
