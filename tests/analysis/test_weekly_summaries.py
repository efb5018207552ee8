"""Tests for weekly aggregation and feedback scale conversion."""

from datetime import timedelta

from autoreg.analysis.feedback_scale import fatigue_score, performance_score, pump_score, soreness_score
from autoreg.analysis.weekly import active_summaries, get_weekly_summaries
from autoreg.training.types import ExerciseEntry, ExerciseSet, LoggedSet, WorkoutRecord

# ============================================================================
# FEEDBACK SCALE
# ============================================================================


def test_soreness_and_pump_map_onto_one_to_five():
    assert [soreness_score(v) for v in (0, 1, 2)] == [1.0, 3.0, 5.0]
    assert [pump_score(v) for v in (0, 1, 2)] == [1.0, 3.0, 5.0]


def test_performance_scale_is_inverted():
    """Exceeded (0) is the best score, missed target (3) the worst."""
    assert performance_score(0) == 5.0
    assert performance_score(3) == 2.0
    assert performance_score(0) > performance_score(1) > performance_score(2) > performance_score(3)


def test_fatigue_is_read_from_soreness(make_feedback):
    assert fatigue_score(make_feedback(0, soreness=2)) == 5.0
    assert fatigue_score(make_feedback(0, soreness=0)) == 1.0


# ============================================================================
# WINDOWS
# ============================================================================


def test_windows_are_most_recent_first_with_gaps(make_workout, now):
    """Empty windows keep their slot so index equals weeks ago."""
    workouts = [make_workout(0), make_workout(6), make_workout(7), make_workout(22)]

    summaries = get_weekly_summaries(workouts, [], weeks=6, now=now)

    assert len(summaries) == 6
    assert [s.workout_count for s in summaries] == [2, 1, 0, 1, 0, 0]
    assert summaries[0].week_end == now.date()
    assert summaries[0].week_start == now.date() - timedelta(days=6)
    assert summaries[1].week_end == now.date() - timedelta(days=7)


def test_sets_and_volume_are_summed(make_workout, now):
    summaries = get_weekly_summaries([make_workout(1, weight=100.0, reps=5, sets=4)], [], now=now)

    assert summaries[0].total_sets == 4
    assert summaries[0].total_volume == 2000.0


def test_feedback_means_per_window(make_workout, make_feedback, now):
    workouts = [make_workout(1), make_workout(2)]
    feedback = [make_feedback(1, soreness=2, performance=3, pump=0), make_feedback(2, soreness=0, performance=1, pump=2)]

    summary = get_weekly_summaries(workouts, feedback, now=now)[0]

    assert summary.avg_soreness == 3.0
    assert summary.avg_fatigue == 3.0
    assert summary.avg_performance == 3.0
    assert summary.avg_pump == 3.0


def test_window_without_feedback_has_zero_means(make_workout, now):
    summary = get_weekly_summaries([make_workout(1)], [], now=now)[0]

    assert summary.avg_fatigue == 0.0
    assert summary.avg_performance == 0.0


def test_incomplete_sets_are_ignored(now):
    workout = WorkoutRecord(
        id="w1",
        date=now,
        sets=[
            LoggedSet(exercise_name="Row", muscle_group="back", weight=60, reps=10),
            LoggedSet(exercise_name="Row", muscle_group="back", weight=60, reps=10, completed=False),
        ],
    )

    assert get_weekly_summaries([workout], [], now=now)[0].total_sets == 1


def test_legacy_exercise_shape_is_read(now):
    """Legacy records fall back from actual to target reps."""
    workout = WorkoutRecord(
        id="legacy",
        date=now - timedelta(days=1),
        exercises=[
            ExerciseEntry(
                exercise_name="Squat",
                muscle_group="quadriceps",
                sets=[
                    ExerciseSet(weight=100, target_reps=5, actual_reps=6, completed=True),
                    ExerciseSet(weight=100, target_reps=5, completed=True),
                    ExerciseSet(weight=100, target_reps=5, completed=False),
                ],
            )
        ],
    )

    summary = get_weekly_summaries([workout], [], now=now)[0]

    assert summary.total_sets == 2
    assert summary.total_volume == 1100.0
    assert workout.sets_by_muscle() == {"quadriceps": 2}


def test_active_summaries_drop_empty_windows(make_workout, now):
    summaries = get_weekly_summaries([make_workout(0), make_workout(15)], [], now=now)

    active = active_summaries(summaries)

    assert [s.week_end for s in active] == [now.date(), now.date() - timedelta(days=14)]
