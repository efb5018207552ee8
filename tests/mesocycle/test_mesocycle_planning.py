"""Tests for mesocycle creation and per-week volume planning."""

import pytest

from autoreg.mesocycle.models import MesoCycleStatus, WeekStatus
from autoreg.mesocycle.planning import (
    build_program_weeks,
    create_mesocycle,
    create_mesocycle_from_program,
    maintenance_volume,
    round_half_up,
)
from autoreg.training.landmarks import VOLUME_LANDMARKS
from autoreg.training.types import MuscleGroup, MusclePriority, TrainingProgram


def _program(**overrides) -> TrainingProgram:
    fields = {
        "id": "ppl-4",
        "name": "Push Pull Legs",
        "duration_weeks": 4,
        "days_per_week": 4,
        "starting_volume_multiplier": 1.0,
        "volume_progression_per_week": 2.0,
    }
    fields.update(overrides)
    return TrainingProgram(**fields)


def test_create_mesocycle_defaults(now):
    mesocycle = create_mesocycle("Hypertrophy block", now=now)

    assert mesocycle.status is MesoCycleStatus.PLANNED
    assert mesocycle.total_weeks == 5
    assert mesocycle.current_week == 0
    assert len(mesocycle.weeks) == 5
    assert all(week.status is WeekStatus.UPCOMING for week in mesocycle.weeks)
    assert mesocycle.created_at == now
    assert mesocycle.total_workouts == 0


def test_final_week_is_deload_at_maintenance_volume(now):
    mesocycle = create_mesocycle("Block", total_weeks=4, now=now)

    assert [week.is_deload for week in mesocycle.weeks] == [False, False, False, True]
    assert mesocycle.weeks[-1].target_volume == maintenance_volume()
    assert mesocycle.weeks[-1].target_volume[MuscleGroup.CHEST] == 6


def test_priorities_shape_starting_volume_and_progression(now):
    priorities = {MuscleGroup.CHEST: MusclePriority.FOCUS, MuscleGroup.BICEPS: MusclePriority.MAINTAIN}

    mesocycle = create_mesocycle("Block", total_weeks=6, priorities=priorities, now=now)

    chest = [week.target_volume[MuscleGroup.CHEST] for week in mesocycle.weeks[:-1]]
    biceps = [week.target_volume[MuscleGroup.BICEPS] for week in mesocycle.weeks[:-1]]
    back = [week.target_volume[MuscleGroup.BACK] for week in mesocycle.weeks[:-1]]
    assert chest == [12, 14, 16, 18, 20]
    assert biceps == [4, 6, 8, 10, 12]
    assert back == [10, 12, 14, 16, 18]
    assert mesocycle.muscle_priorities[MuscleGroup.TRICEPS] is MusclePriority.NORMAL


def test_manual_progression_is_capped_at_mrv(now):
    mesocycle = create_mesocycle("Long block", total_weeks=8, now=now)

    forearms = [week.target_volume[MuscleGroup.FOREARMS] for week in mesocycle.weeks[:-1]]
    assert forearms == [4, 6, 8, 10, 12, 14, 14]


@pytest.mark.parametrize("weeks", [2, 9])
def test_week_count_outside_range_is_rejected(weeks):
    with pytest.raises(ValueError, match="total_weeks"):
        create_mesocycle("Bad", total_weeks=weeks)


def test_workouts_per_week_sets_total_workouts(now):
    assert create_mesocycle("Block", total_weeks=4, workouts_per_week=4, now=now).total_workouts == 16

    with pytest.raises(ValueError, match="workouts_per_week"):
        create_mesocycle("Bad", workouts_per_week=-1)


def test_program_weeks_follow_template_progression():
    weeks = build_program_weeks(_program(starting_volume_multiplier=1.2, volume_progression_per_week=1.5))

    chest = [week.target_volume[MuscleGroup.CHEST] for week in weeks]
    # 10 * 1.2 = 12, then +1.5/week, rounded half up; final week at MV
    assert chest == [12, 14, 15, 6]
    assert weeks[-1].is_deload is True


def test_program_targets_never_exceed_mrv():
    weeks = build_program_weeks(_program(duration_weeks=8, starting_volume_multiplier=1.5, volume_progression_per_week=3.0))

    for week in weeks:
        for muscle, sets in week.target_volume.items():
            assert sets <= VOLUME_LANDMARKS[muscle].mrv


def test_create_from_program_links_template(now):
    mesocycle = create_mesocycle_from_program(_program(), now=now)

    assert mesocycle.program_id == "ppl-4"
    assert mesocycle.name == "Push Pull Legs"
    assert mesocycle.total_workouts == 16
    assert mesocycle.status is MesoCycleStatus.PLANNED
    assert mesocycle.workouts_per_week == 4


def test_round_half_up():
    assert [round_half_up(v) for v in (12.5, 13.5, 14.49, 15.0)] == [13, 14, 14, 15]
