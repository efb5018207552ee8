"""Tests for per-muscle fatigue accumulation, recovery and the fatigue deload check."""

from datetime import datetime, timedelta

from autoreg.training.types import MuscleGroup
from autoreg.volume.fatigue import (
    MuscleFatigue,
    apply_session_fatigue,
    initial_fatigue_tracking,
    recover_all,
    should_trigger_deload,
)


def test_each_set_adds_five_points(now):
    fatigue = MuscleFatigue(muscle_group=MuscleGroup.CHEST).after_session(4, now)

    assert fatigue.current_fatigue == 20.0
    assert fatigue.consecutive_hard_sessions == 0
    assert fatigue.last_trained_date == now
    assert fatigue.needs_deload is False


def test_hard_sessions_are_counted_and_reset():
    fatigue = MuscleFatigue(muscle_group=MuscleGroup.BACK)

    fatigue = fatigue.after_session(5).after_session(6)
    assert fatigue.consecutive_hard_sessions == 2

    fatigue = fatigue.after_session(2)
    assert fatigue.consecutive_hard_sessions == 0


def test_fatigue_is_capped_and_flags_deload():
    fatigue = MuscleFatigue(muscle_group=MuscleGroup.QUADRICEPS, current_fatigue=60.0).after_session(10)

    assert fatigue.current_fatigue == 100.0
    assert fatigue.needs_deload is True


def test_recover_decays_per_day_and_floors_at_zero():
    fatigue = MuscleFatigue(muscle_group=MuscleGroup.CHEST, current_fatigue=75.0, needs_deload=True)

    assert fatigue.recover(2).current_fatigue == 45.0
    assert fatigue.recover(2).needs_deload is False
    assert fatigue.recover(10).current_fatigue == 0.0
    assert fatigue.recover(0) is fatigue


def test_recover_until_applies_elapsed_days_once(now):
    trained = MuscleFatigue(muscle_group=MuscleGroup.CHEST).after_session(10, now - timedelta(days=2))

    recovered = trained.recover_until(now)
    again = recovered.recover_until(now)

    assert recovered.current_fatigue == 20.0
    assert again.current_fatigue == 20.0


def test_apply_session_fatigue_skips_untracked_muscles(now):
    fatigue = apply_session_fatigue(initial_fatigue_tracking(), {"chest": 3, "full_body": 6, "neck": 2}, now)

    assert fatigue[MuscleGroup.CHEST].current_fatigue == 15.0
    assert MuscleGroup.FULL_BODY not in fatigue


def test_recover_all_without_training_is_a_no_op(now):
    fatigue = initial_fatigue_tracking()

    assert recover_all(fatigue, now) == fatigue


def test_three_fatigued_muscles_trigger_deload():
    fatigue = initial_fatigue_tracking()
    for muscle in (MuscleGroup.CHEST, MuscleGroup.BACK):
        fatigue[muscle] = fatigue[muscle].model_copy(update={"needs_deload": True})
    assert should_trigger_deload(fatigue, []) is False

    fatigue[MuscleGroup.CALVES] = fatigue[MuscleGroup.CALVES].model_copy(update={"current_fatigue": 85.0})
    assert should_trigger_deload(fatigue, []) is True


def test_recent_feedback_score_triggers_deload(make_feedback):
    fatigue = initial_fatigue_tracking()
    worst = [make_feedback(i, pump=2, soreness=2, performance=3) for i in range(3)]
    mixed = [make_feedback(0, pump=2, soreness=2, performance=3), make_feedback(1, pump=0, soreness=0, performance=0)]

    assert should_trigger_deload(fatigue, worst) is True
    assert should_trigger_deload(fatigue, mixed) is False
    assert should_trigger_deload(fatigue, []) is False


def test_non_positive_sets_leave_fatigue_untouched(now):
    trained = MuscleFatigue(muscle_group=MuscleGroup.CHEST).after_session(6, now)

    assert trained.after_session(-10, now) is trained
    assert trained.after_session(0, now) is trained

    fatigue = apply_session_fatigue(initial_fatigue_tracking(), {"chest": -10, "back": 0}, now)
    assert fatigue[MuscleGroup.CHEST].current_fatigue == 0.0
    assert fatigue[MuscleGroup.BACK].last_trained_date is None


def test_naive_timestamps_are_read_as_utc(now):
    trained = MuscleFatigue(muscle_group=MuscleGroup.CHEST).after_session(10, datetime(2026, 3, 13, 12, 0))

    assert trained.last_trained_date == now - timedelta(days=2)
    assert trained.recover_until(now).current_fatigue == 20.0
    assert trained.recover_until(datetime(2026, 3, 15, 12, 0)).current_fatigue == 20.0

    stored = MuscleFatigue(muscle_group=MuscleGroup.BACK, last_trained_date=datetime(2026, 3, 14, 12, 0))
    assert stored.last_trained_date.tzinfo is not None
