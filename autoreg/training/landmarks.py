"""Volume landmarks per muscle group.

Weekly set counts bounding the useful training-volume range:
- MV: maintenance volume (deload target)
- MEV: minimum effective volume
- MAV: maximum adaptive volume range (low, high)
- MRV: maximum recoverable volume

Static reference data. Never mutated.
"""

from dataclasses import dataclass

from autoreg.training.types import MuscleGroup


@dataclass(frozen=True)
class VolumeLandmark:
    """Weekly set landmarks for one muscle group."""

    mv: int
    mev: int
    mav: tuple[int, int]
    mrv: int


VOLUME_LANDMARKS: dict[MuscleGroup, VolumeLandmark] = {
    MuscleGroup.CHEST: VolumeLandmark(mv=6, mev=10, mav=(12, 20), mrv=22),
    MuscleGroup.BACK: VolumeLandmark(mv=6, mev=10, mav=(14, 22), mrv=25),
    MuscleGroup.SHOULDERS: VolumeLandmark(mv=6, mev=8, mav=(12, 18), mrv=20),
    MuscleGroup.BICEPS: VolumeLandmark(mv=4, mev=8, mav=(10, 16), mrv=20),
    MuscleGroup.TRICEPS: VolumeLandmark(mv=4, mev=6, mav=(10, 14), mrv=18),
    MuscleGroup.FOREARMS: VolumeLandmark(mv=2, mev=4, mav=(6, 10), mrv=14),
    MuscleGroup.QUADRICEPS: VolumeLandmark(mv=6, mev=8, mav=(12, 18), mrv=20),
    MuscleGroup.HAMSTRINGS: VolumeLandmark(mv=4, mev=6, mav=(10, 16), mrv=18),
    MuscleGroup.GLUTES: VolumeLandmark(mv=4, mev=6, mav=(10, 16), mrv=20),
    MuscleGroup.CALVES: VolumeLandmark(mv=4, mev=6, mav=(10, 16), mrv=20),
    MuscleGroup.CORE: VolumeLandmark(mv=4, mev=6, mav=(8, 14), mrv=18),
    MuscleGroup.FULL_BODY: VolumeLandmark(mv=6, mev=8, mav=(12, 18), mrv=22),
}

# full_body has landmarks but is never tracked in weekly volume
TRACKED_MUSCLES: tuple[MuscleGroup, ...] = tuple(m for m in MuscleGroup if m is not MuscleGroup.FULL_BODY)


def get_landmark(muscle: MuscleGroup | str) -> VolumeLandmark:
    """Look up landmarks for a muscle group.

    Raises:
        ValueError: If the muscle group is unknown
    """
    return VOLUME_LANDMARKS[MuscleGroup(muscle)]


def parse_tracked_muscle(muscle: str) -> MuscleGroup | None:
    """Return the tracked muscle group for a name, or None if it is not tracked."""
    try:
        group = MuscleGroup(muscle)
    except ValueError:
        return None
    return group if group in TRACKED_MUSCLES else None
