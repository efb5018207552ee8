"""Mesocycle week planning.

Per-week target volume is computed up front when a mesocycle is created:
- from a program template: MEV x starting multiplier, plus the program's
  progression per week, capped at MRV
- manually: priority-adjusted starting volume plus a fixed weekly increment,
  capped at MRV

In both cases the final week is a deload week targeting maintenance volume.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone

from loguru import logger

from autoreg.mesocycle.models import MesoCycle, MesoCycleWeek
from autoreg.training.constants import (
    FOCUS_EXTRA_SETS,
    MESOCYCLE_DEFAULT_WEEKS,
    MESOCYCLE_MAX_WEEKS,
    MESOCYCLE_MIN_WEEKS,
    VOLUME_INCREASE_PER_WEEK,
)
from autoreg.training.landmarks import TRACKED_MUSCLES, VOLUME_LANDMARKS
from autoreg.training.types import MuscleGroup, MusclePriority, TrainingProgram


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def maintenance_volume() -> dict[MuscleGroup, int]:
    """Deload target: maintenance volume (MV) for every tracked muscle."""
    return {muscle: VOLUME_LANDMARKS[muscle].mv for muscle in TRACKED_MUSCLES}


def empty_volume() -> dict[MuscleGroup, int]:
    return {muscle: 0 for muscle in TRACKED_MUSCLES}


def priority_starting_volume(priorities: dict[MuscleGroup, MusclePriority]) -> dict[MuscleGroup, int]:
    """Starting weekly sets per muscle: focus → MEV+2, maintain → MV, normal → MEV."""
    volume: dict[MuscleGroup, int] = {}
    for muscle in TRACKED_MUSCLES:
        landmark = VOLUME_LANDMARKS[muscle]
        priority = priorities.get(muscle, MusclePriority.NORMAL)
        if priority is MusclePriority.FOCUS:
            volume[muscle] = landmark.mev + FOCUS_EXTRA_SETS
        elif priority is MusclePriority.MAINTAIN:
            volume[muscle] = landmark.mv
        else:
            volume[muscle] = landmark.mev
    return volume


def build_manual_weeks(
    starting_volume: dict[MuscleGroup, int],
    total_weeks: int,
    increment: int = VOLUME_INCREASE_PER_WEEK,
) -> list[MesoCycleWeek]:
    """Linear weekly progression from the starting volume, final week at MV."""
    weeks: list[MesoCycleWeek] = []
    for i in range(total_weeks):
        is_deload = i == total_weeks - 1
        if is_deload:
            target = maintenance_volume()
        else:
            target = {
                muscle: min(starting_volume[muscle] + i * increment, VOLUME_LANDMARKS[muscle].mrv)
                for muscle in TRACKED_MUSCLES
            }
        weeks.append(
            MesoCycleWeek(
                week_number=i + 1,
                is_deload=is_deload,
                target_volume=target,
                completed_volume=empty_volume(),
            )
        )
    return weeks


def build_program_weeks(program: TrainingProgram) -> list[MesoCycleWeek]:
    """Weekly targets derived from a program template, final week at MV."""
    weeks: list[MesoCycleWeek] = []
    for i in range(program.duration_weeks):
        is_deload = i == program.duration_weeks - 1
        if is_deload:
            target = maintenance_volume()
        else:
            target = {}
            for muscle in TRACKED_MUSCLES:
                landmark = VOLUME_LANDMARKS[muscle]
                base = landmark.mev * program.starting_volume_multiplier
                target[muscle] = round_half_up(min(base + i * program.volume_progression_per_week, landmark.mrv))
        weeks.append(
            MesoCycleWeek(
                week_number=i + 1,
                is_deload=is_deload,
                target_volume=target,
                completed_volume=empty_volume(),
            )
        )
    return weeks


def create_mesocycle(
    name: str,
    total_weeks: int = MESOCYCLE_DEFAULT_WEEKS,
    priorities: dict[MuscleGroup, MusclePriority] | None = None,
    workouts_per_week: int = 0,
    now: datetime | None = None,
) -> MesoCycle:
    """Build a planned mesocycle from muscle priorities.

    Args:
        name: Display name
        total_weeks: Length including the final deload week (3-8)
        priorities: Per-muscle priority, missing muscles default to normal
        workouts_per_week: Planned sessions per week; 0 disables automatic
            week advancement
        now: Creation time

    Returns:
        MesoCycle in the planned state with all weeks upcoming

    Raises:
        ValueError: If total_weeks is outside 3-8 or workouts_per_week is negative
    """
    if not MESOCYCLE_MIN_WEEKS <= total_weeks <= MESOCYCLE_MAX_WEEKS:
        raise ValueError(
            f"total_weeks must be between {MESOCYCLE_MIN_WEEKS} and {MESOCYCLE_MAX_WEEKS}, got {total_weeks}"
        )
    if workouts_per_week < 0:
        raise ValueError(f"workouts_per_week must be >= 0, got {workouts_per_week}")

    created_at = now or datetime.now(timezone.utc)
    muscle_priorities = {muscle: (priorities or {}).get(muscle, MusclePriority.NORMAL) for muscle in TRACKED_MUSCLES}
    starting_volume = priority_starting_volume(muscle_priorities)

    mesocycle = MesoCycle(
        id=uuid.uuid4().hex,
        name=name,
        total_weeks=total_weeks,
        weeks=build_manual_weeks(starting_volume, total_weeks),
        muscle_priorities=muscle_priorities,
        starting_volume=starting_volume,
        volume_progression_per_week=VOLUME_INCREASE_PER_WEEK,
        total_workouts=total_weeks * workouts_per_week,
        created_at=created_at,
        updated_at=created_at,
    )
    logger.debug(f"Planned mesocycle {mesocycle.id} '{name}': {total_weeks} weeks, {mesocycle.total_workouts} workouts")
    return mesocycle


def create_mesocycle_from_program(program: TrainingProgram, now: datetime | None = None) -> MesoCycle:
    """Build a planned mesocycle from a program template."""
    created_at = now or datetime.now(timezone.utc)
    starting_volume = {
        muscle: round_half_up(VOLUME_LANDMARKS[muscle].mev * program.starting_volume_multiplier)
        for muscle in TRACKED_MUSCLES
    }

    mesocycle = MesoCycle(
        id=uuid.uuid4().hex,
        name=program.name,
        description=program.description,
        total_weeks=program.duration_weeks,
        weeks=build_program_weeks(program),
        muscle_priorities={
            muscle: program.muscle_priorities.get(muscle, MusclePriority.NORMAL) for muscle in TRACKED_MUSCLES
        },
        starting_volume=starting_volume,
        volume_progression_per_week=program.volume_progression_per_week,
        program_id=program.id,
        program_name=program.name,
        total_workouts=program.duration_weeks * program.days_per_week,
        created_at=created_at,
        updated_at=created_at,
    )
    logger.debug(f"Planned mesocycle {mesocycle.id} from program '{program.id}'")
    return mesocycle
