"""Tests for the training HTTP API.

The session dependency is overridden with an in-memory session per test.
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from autoreg.api.dependencies import get_training_session
from autoreg.main import app
from autoreg.training.types import MuscleGroup


@pytest.fixture
def client(session):
    app.dependency_overrides[get_training_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _workout_payload(days_ago: int, weight: float = 100.0) -> dict:
    return {
        "id": f"w{days_ago}",
        "date": (datetime.now(UTC) - timedelta(days=days_ago)).isoformat(),
        "sets": [{"exercise_name": "Squat", "muscle_group": "quadriceps", "weight": weight, "reps": 5}] * 3,
    }


def _create_and_start(client, **body) -> str:
    response = client.post("/mesocycles", json={"name": "Block", "total_weeks": 4, **body})
    assert response.status_code == 201
    mesocycle_id = response.json()["id"]
    assert client.post(f"/mesocycles/{mesocycle_id}/start").status_code == 200
    return mesocycle_id


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# ============================================================================
# DELOAD
# ============================================================================


def test_analyze_with_short_history_is_neutral(client):
    response = client.post("/deload/analyze", json={"workouts": [_workout_payload(i) for i in range(3)]})

    assert response.status_code == 200
    data = response.json()
    assert data["recommendation"]["needs_deload"] is False
    assert data["recommendation"]["confidence"] == 0
    assert data["config"]["volume_multiplier"] == 1.0
    assert data["show_banner"] is False


def test_analyze_uses_stored_feedback(client, session):
    for i in range(14):
        session.submit_feedback(f"w{i}", 0, 2, 3, now=datetime.now(UTC) - timedelta(days=i))
    workouts = [_workout_payload(i, weight=100.0 + i) for i in range(14)]

    data = client.post("/deload/analyze", json={"workouts": workouts}).json()

    assert data["recommendation"]["needs_deload"] is True
    assert data["config"]["max_sets_per_exercise"] == 2
    assert data["show_banner"] is True


def test_overlay_lifecycle(client):
    assert client.get("/deload/overlay").json()["is_in_deload_week"] is False

    started = client.post("/deload/overlay/start").json()
    assert started["is_in_deload_week"] is True
    assert started["day_of_deload"] == 1
    assert started["days_remaining"] == 6

    assert client.post("/deload/overlay/dismiss").json()["is_dismissed"] is True

    ended = client.post("/deload/overlay/end").json()
    assert ended["is_in_deload_week"] is False
    assert ended["last_deload_date"] is not None


def test_day_boundary_route_recovers_fatigue(client, session):
    three_days_ago = datetime.now(UTC) - timedelta(days=3)
    mesocycle = session.create_mesocycle("Block", 4, now=three_days_ago)
    session.start_mesocycle(mesocycle.id, three_days_ago)
    session.record_workout_completion("w1", {"chest": 10}, three_days_ago)

    response = client.post("/maintenance/day-boundary")

    assert response.status_code == 200
    assert response.json() == {
        "fatigue_recovered": True,
        "is_in_deload_week": False,
        "fatigue_deload_recommended": False,
    }
    assert session.state.muscle_fatigue[MuscleGroup.CHEST].current_fatigue == 5.0
    assert client.post("/maintenance/day-boundary").json()["fatigue_recovered"] is False


def test_overlay_read_runs_day_boundary_check(client, session):
    two_days_ago = datetime.now(UTC) - timedelta(days=2)
    mesocycle = session.create_mesocycle("Block", 4, now=two_days_ago)
    session.start_mesocycle(mesocycle.id, two_days_ago)
    session.record_workout_completion("w1", {"back": 10}, two_days_ago)

    assert client.get("/deload/overlay").status_code == 200
    assert session.state.muscle_fatigue[MuscleGroup.BACK].current_fatigue == 20.0


# ============================================================================
# MESOCYCLES
# ============================================================================


def test_mesocycle_lifecycle(client):
    mesocycle_id = _create_and_start(client, workouts_per_week=2)

    for i in range(2):
        response = client.post("/workouts/completed", json={"workout_id": f"w{i}", "sets_by_muscle": {"chest": 4}})
        assert response.status_code == 200
    assert response.json()["current_week"] == 2

    active = client.get("/mesocycles/active").json()
    assert active["id"] == mesocycle_id
    assert active["weeks"][0]["status"] == "completed"
    assert active["weeks"][1]["status"] == "in_progress"

    assert client.post("/mesocycles/active/deload").status_code == 200
    assert client.post("/mesocycles/active/advance").json()["current_week"] == 3
    assert client.post("/mesocycles/active/abandon").json()["active_mesocycle_id"] is None
    assert client.get("/mesocycles/active").status_code == 404


def test_events_without_active_mesocycle_conflict(client):
    for path in ("advance", "deload", "abandon", "complete"):
        assert client.post(f"/mesocycles/active/{path}").status_code == 409
    response = client.post("/workouts/completed", json={"workout_id": "w1", "sets_by_muscle": {"chest": 4}})
    assert response.status_code == 409


def test_negative_set_counts_are_rejected(client, session):
    _create_and_start(client, workouts_per_week=1)

    response = client.post("/workouts/completed", json={"workout_id": "w1", "sets_by_muscle": {"chest": -10}})

    assert response.status_code == 422
    assert session.active_mesocycle.completed_workouts == 0
    assert session.active_mesocycle.current_week == 1


def test_second_start_conflicts(client):
    _create_and_start(client)
    second = client.post("/mesocycles", json={"name": "Second"}).json()["id"]

    assert client.post(f"/mesocycles/{second}/start").status_code == 409
    assert client.post("/mesocycles/missing/start").status_code == 404


def test_invalid_mesocycle_request_is_rejected(client):
    assert client.post("/mesocycles", json={"name": "Short", "total_weeks": 2}).status_code == 422
    assert client.post("/mesocycles", json={"name": "Block", "muscle_priorities": {"chest": "extreme"}}).status_code == 422


def test_start_program(client):
    program = {"id": "ppl", "name": "PPL", "duration_weeks": 5, "days_per_week": 3}

    response = client.post("/mesocycles/from-program", json=program)

    assert response.status_code == 201
    assert response.json()["status"] == "active"
    assert response.json()["total_workouts"] == 15
    assert client.post("/mesocycles/from-program", json=program).status_code == 409


# ============================================================================
# FEEDBACK AND VOLUME
# ============================================================================


def test_submit_feedback(client, session):
    response = client.post(
        "/feedback",
        json={"workout_id": "w1", "pump_rating": 0, "soreness_rating": 2, "performance_rating": 3},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["total_score"] == 5
    assert data["next_week_volume"]["chest"] == 10
    assert session.state.workout_feedback[0].workout_id == "w1"


def test_feedback_rating_out_of_scale(client):
    response = client.post(
        "/feedback",
        json={"workout_id": "w1", "pump_rating": 3, "soreness_rating": 0, "performance_rating": 0},
    )

    assert response.status_code == 422


def test_volume_status(client):
    _create_and_start(client)
    client.post("/volume/chest/sets", json={"sets": 19})

    data = client.get("/volume/chest").json()

    assert data["sets_completed"] == 19
    assert data["target_sets"] == 10
    assert data["recommended_volume"] == 10
    assert data["status"] == "in_mav"
    assert data["percent_of_mrv"] == pytest.approx(86.4)


def test_unknown_muscle_is_not_found(client):
    assert client.get("/volume/neck").status_code == 404
    assert client.get("/volume/full_body").status_code == 404
    assert client.post("/volume/neck/sets", json={"sets": 3}).status_code == 404
