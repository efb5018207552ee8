"""Root conftest for all tests.

Shared fixtures: a fixed reference time, in-memory storage, a fresh
training session, record factories and a loguru capture sink.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from loguru import logger

from autoreg.session import TrainingSession
from autoreg.storage.kv import InMemoryKeyValueStore
from autoreg.training.types import LoggedSet, WorkoutFeedback, WorkoutRecord

# All tests anchor "now" here so windows and streaks are deterministic
FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def session(store: InMemoryKeyValueStore) -> TrainingSession:
    return TrainingSession(store)


@pytest.fixture
def make_workout() -> Callable[..., WorkoutRecord]:
    """Factory for flat-shape workouts logged ``days_ago`` days before FIXED_NOW."""

    def _make(
        days_ago: int,
        exercise: str = "Bench Press",
        muscle: str = "chest",
        weight: float = 100.0,
        reps: int = 8,
        sets: int = 3,
        workout_id: str | None = None,
    ) -> WorkoutRecord:
        return WorkoutRecord(
            id=workout_id or f"w-{days_ago}-{exercise}",
            date=FIXED_NOW - timedelta(days=days_ago),
            name=f"{exercise} day",
            sets=[
                LoggedSet(exercise_name=exercise, muscle_group=muscle, weight=weight, reps=reps)
                for _ in range(sets)
            ],
        )

    return _make


@pytest.fixture
def make_feedback() -> Callable[..., WorkoutFeedback]:
    """Factory for feedback entries submitted ``days_ago`` days before FIXED_NOW."""

    def _make(days_ago: int, pump: int = 1, soreness: int = 1, performance: int = 1) -> WorkoutFeedback:
        return WorkoutFeedback(
            id=f"fb-{days_ago}",
            workout_id=f"w-{days_ago}",
            date=FIXED_NOW - timedelta(days=days_ago),
            pump_rating=pump,
            soreness_rating=soreness,
            performance_rating=performance,
            total_score=pump + soreness + performance,
        )

    return _make


@pytest.fixture
def log_messages():
    """Capture loguru records as ``(level, message)`` tuples."""
    messages: list[tuple[str, str]] = []
    handler_id = logger.add(lambda m: messages.append((m.record["level"].name, m.record["message"])), level="DEBUG")
    yield messages
    logger.remove(handler_id)
