"""Tests for the weekly volume ledger and landmark classification."""

import pytest

from autoreg.training.landmarks import TRACKED_MUSCLES, VOLUME_LANDMARKS, VolumeLandmark, get_landmark, parse_tracked_muscle
from autoreg.training.types import MuscleGroup
from autoreg.volume.ledger import VolumeLedger, VolumeStatus, classify_volume

LANDMARK = VolumeLandmark(mv=6, mev=10, mav=(12, 18), mrv=20)


@pytest.mark.parametrize(
    ("sets", "status"),
    [
        (8, VolumeStatus.BELOW_MEV),
        (10, VolumeStatus.AT_MEV),
        (14, VolumeStatus.IN_MAV),
        (19, VolumeStatus.NEAR_MRV),
        (20, VolumeStatus.AT_MRV),
        (25, VolumeStatus.AT_MRV),
    ],
)
def test_volume_status_ordering(sets, status):
    assert classify_volume(sets, LANDMARK) is status


def test_landmarks_are_ordered_for_every_muscle():
    for muscle, landmark in VOLUME_LANDMARKS.items():
        assert 0 < landmark.mv <= landmark.mev <= landmark.mav[0] <= landmark.mav[1] <= landmark.mrv, muscle


def test_full_body_has_landmarks_but_is_not_tracked():
    assert get_landmark("full_body").mrv == 22
    assert MuscleGroup.FULL_BODY not in TRACKED_MUSCLES
    assert parse_tracked_muscle("full_body") is None
    assert parse_tracked_muscle("neck") is None
    assert parse_tracked_muscle("chest") is MuscleGroup.CHEST


def test_empty_ledger_tracks_every_muscle_at_zero():
    ledger = VolumeLedger.empty()

    assert set(ledger.sets) == set(TRACKED_MUSCLES)
    assert all(count == 0 for count in ledger.sets.values())


def test_record_sets_is_additive_and_immutable():
    empty = VolumeLedger.empty()

    ledger = empty.record_sets("chest", 4).record_sets(MuscleGroup.CHEST, 3)

    assert ledger.get("chest") == 7
    assert empty.get("chest") == 0


def test_record_sets_ignores_untracked_and_non_positive_counts():
    ledger = VolumeLedger.empty().record_sets("chest", 5)

    assert ledger.record_sets("chest", -3).get("chest") == 5
    assert ledger.record_sets("chest", 0) is ledger
    assert ledger.record_sets("full_body", 4).to_dict() == ledger.to_dict()
    assert ledger.record_sets("neck", 4).to_dict() == ledger.to_dict()


def test_record_many_and_percent_of_mrv():
    ledger = VolumeLedger.empty().record_many({"chest": 11, "back": 5, "cardio": 3})

    assert ledger.get("chest") == 11
    assert ledger.percent_of_mrv("chest") == pytest.approx(50.0)
    assert ledger.status_for("chest") is VolumeStatus.AT_MEV
    assert ledger.status_for("back") is VolumeStatus.BELOW_MEV


def test_reset_zeroes_all_muscles():
    ledger = VolumeLedger.empty().record_many({"chest": 11, "back": 5}).reset()

    assert ledger == VolumeLedger.empty()


def test_from_dict_ignores_unknown_muscles():
    ledger = VolumeLedger.from_dict({"chest": 4, "neck": 9, "full_body": 2})

    assert ledger.get("chest") == 4
    assert set(ledger.to_dict()) == {str(m) for m in TRACKED_MUSCLES}


def test_report_for_muscle():
    report = VolumeLedger.empty().record_sets("shoulders", 19).report("shoulders", target_sets=14)

    assert report.muscle_group is MuscleGroup.SHOULDERS
    assert report.sets_completed == 19
    assert report.target_sets == 14
    assert report.percent_of_mrv == pytest.approx(95.0)
    assert report.status is VolumeStatus.NEAR_MRV
