"""Weekly volume ledger.

Tracks sets accumulated per muscle group in the current training week and
classifies them against volume landmarks. The ledger is immutable: every
update returns a new ledger.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from autoreg.training.landmarks import TRACKED_MUSCLES, VolumeLandmark, get_landmark, parse_tracked_muscle
from autoreg.training.types import MuscleGroup


class VolumeStatus(StrEnum):
    """Where weekly sets sit relative to the landmarks."""

    BELOW_MEV = "below_mev"
    AT_MEV = "at_mev"
    IN_MAV = "in_mav"
    NEAR_MRV = "near_mrv"
    AT_MRV = "at_mrv"


def classify_volume(sets: int, landmark: VolumeLandmark) -> VolumeStatus:
    """Classify a weekly set count against landmarks.

    Checked top-down: at MRV, within 2 sets of MRV, inside MAV, at MEV,
    otherwise below MEV.
    """
    if sets >= landmark.mrv:
        return VolumeStatus.AT_MRV
    if sets >= landmark.mrv - 2:
        return VolumeStatus.NEAR_MRV
    if sets >= landmark.mav[0]:
        return VolumeStatus.IN_MAV
    if sets >= landmark.mev:
        return VolumeStatus.AT_MEV
    return VolumeStatus.BELOW_MEV


def _zeroed() -> dict[MuscleGroup, int]:
    return {muscle: 0 for muscle in TRACKED_MUSCLES}


@dataclass(frozen=True)
class VolumeReport:
    """Volume status of one muscle for the current week."""

    muscle_group: MuscleGroup
    sets_completed: int
    target_sets: int
    percent_of_mrv: float
    status: VolumeStatus


@dataclass(frozen=True)
class VolumeLedger:
    """Sets per tracked muscle group for the current week."""

    sets: Mapping[MuscleGroup, int] = field(default_factory=_zeroed)

    @classmethod
    def empty(cls) -> VolumeLedger:
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, int]) -> VolumeLedger:
        """Rebuild a ledger from persisted data, ignoring unknown muscles."""
        sets = _zeroed()
        for name, count in data.items():
            muscle = parse_tracked_muscle(name)
            if muscle is not None:
                sets[muscle] = max(0, int(count))
        return cls(sets=sets)

    def to_dict(self) -> dict[str, int]:
        return {str(muscle): count for muscle, count in self.sets.items()}

    def get(self, muscle: MuscleGroup | str) -> int:
        tracked = parse_tracked_muscle(str(muscle))
        return self.sets.get(tracked, 0) if tracked is not None else 0

    def record_sets(self, muscle: MuscleGroup | str, count: int) -> VolumeLedger:
        """Add sets to a muscle. Untracked muscles and negative counts are ignored."""
        tracked = parse_tracked_muscle(str(muscle))
        if tracked is None:
            logger.debug(f"Ignoring sets for untracked muscle group: {muscle}")
            return self
        if count <= 0:
            return self
        updated = dict(self.sets)
        updated[tracked] = updated.get(tracked, 0) + count
        return VolumeLedger(sets=updated)

    def record_many(self, sets_by_muscle: Mapping[str, int]) -> VolumeLedger:
        ledger = self
        for muscle, count in sets_by_muscle.items():
            ledger = ledger.record_sets(muscle, count)
        return ledger

    def status_for(self, muscle: MuscleGroup | str) -> VolumeStatus:
        return classify_volume(self.get(muscle), get_landmark(muscle))

    def percent_of_mrv(self, muscle: MuscleGroup | str) -> float:
        return 100 * self.get(muscle) / get_landmark(muscle).mrv

    def reset(self) -> VolumeLedger:
        return VolumeLedger.empty()

    def report(self, muscle: MuscleGroup | str, target_sets: int) -> VolumeReport:
        """Build a status report for one muscle."""
        return VolumeReport(
            muscle_group=MuscleGroup(muscle),
            sets_completed=self.get(muscle),
            target_sets=target_sets,
            percent_of_mrv=self.percent_of_mrv(muscle),
            status=self.status_for(muscle),
        )
