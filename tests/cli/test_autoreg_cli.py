"""Tests for the autoreg CLI."""

import json

import pytest
from loguru import logger
from typer.testing import CliRunner

from cli.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def drop_cli_log_sinks():
    """The CLI binds a stderr sink to the runner's stream; drop it after each run."""
    yield
    logger.remove()


@pytest.fixture
def memory_backend(monkeypatch):
    monkeypatch.setattr("cli.cli.settings.storage_backend", "memory")


def _write_workouts(path, make_workout, count: int):
    workouts = [json.loads(make_workout(i * 2).model_dump_json()) for i in range(count)]
    path.write_text(json.dumps(workouts), encoding="utf-8")
    return path


def test_landmarks_table():
    result = runner.invoke(app, ["landmarks"])

    assert result.exit_code == 0
    assert "quadriceps" in result.stdout
    assert "full_body" not in result.stdout


def test_analyze_short_history(tmp_path, make_workout, now):
    workouts = _write_workouts(tmp_path / "workouts.json", make_workout, 2)

    result = runner.invoke(app, ["analyze", str(workouts), "--now", now.strftime("%Y-%m-%dT%H:%M:%S"), "--json"])

    assert result.exit_code == 0
    assert '"confidence": 0' in result.stdout


def test_analyze_prints_signals(tmp_path, make_workout, make_feedback, now):
    workouts = _write_workouts(tmp_path / "workouts.json", make_workout, 6)
    feedback = tmp_path / "feedback.json"
    entries = [json.loads(make_feedback(i * 2, soreness=2, performance=3).model_dump_json()) for i in range(6)]
    feedback.write_text(json.dumps(entries), encoding="utf-8")

    result = runner.invoke(
        app,
        ["analyze", str(workouts), "--feedback", str(feedback), "--now", now.strftime("%Y-%m-%dT%H:%M:%S")],
    )

    assert result.exit_code == 0
    assert "Deload analysis" in result.stdout
    assert "Rising" in result.stdout


def test_analyze_rejects_invalid_file(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text('[{"id": 1}]', encoding="utf-8")

    result = runner.invoke(app, ["analyze", str(bad)])

    assert result.exit_code == 1


def test_status_without_active_mesocycle(memory_backend):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "No active mesocycle" in result.stdout
    assert "Weekly volume" in result.stdout


def test_reset_requires_confirm(memory_backend):
    result = runner.invoke(app, ["reset"])

    assert result.exit_code == 1
    assert "--confirm" in result.stdout


def test_reset_with_confirm(memory_backend):
    result = runner.invoke(app, ["reset", "--confirm"])

    assert result.exit_code == 0
    assert "Training data reset" in result.stdout
