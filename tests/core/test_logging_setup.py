"""Tests for loguru sink configuration."""

import json

from loguru import logger

from autoreg.config.settings import Settings
from autoreg.core.logger import configure_logging


def test_file_sink_writes_json_lines_with_component(tmp_path):
    log_file = tmp_path / "logs" / "autoreg.jsonl"
    settings = Settings(log_file=str(log_file), log_json=True, log_level="INFO", storage_backend="memory")

    configure_logging(settings, component="cli")
    logger.info("Recorded workout w1")
    logger.debug("not written at INFO")
    logger.complete()
    logger.remove()

    records = [json.loads(line)["record"] for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [r["message"] for r in records] == ["Recorded workout w1"]
    assert records[0]["extra"]["component"] == "cli"


def test_level_argument_overrides_settings(tmp_path):
    log_file = tmp_path / "autoreg.log"
    settings = Settings(log_file=str(log_file), log_level="WARNING", storage_backend="memory")

    configure_logging(settings, component="api", level="debug")
    logger.debug("Deload triggered for week 2")
    logger.complete()
    logger.remove()

    line = log_file.read_text(encoding="utf-8").strip()
    assert "[api]" in line
    assert "Deload triggered for week 2" in line
