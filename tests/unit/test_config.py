"""Unit tests for settings and logging setup."""

import logging

import pytest
from loguru import logger

from tracksync.config import Settings
from tracksync.core.logging import InterceptHandler, setup_logging


@pytest.mark.unit
class TestSettings:
    def test_defaults(self):
        config = Settings(_env_file=None)

        assert config.subtitle_slots == 3
        assert config.empty_track_label == "No subtitle"
        assert config.request_timeout is None
        assert config.search_result_language == "ja"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TRACKSYNC_SITE_DETECTION_MAX_RETRIES", "4")
        monkeypatch.setenv("TRACKSYNC_DEBUG", "true")

        config = Settings(_env_file=None)

        assert config.site_detection_max_retries == 4
        assert config.debug is True


@pytest.mark.unit
class TestLogging:
    def test_stdlib_logging_is_routed_through_loguru(self, test_settings):
        setup_logging(test_settings)
        messages = []
        sink_id = logger.add(messages.append, format="{message}")

        try:
            logging.getLogger("tracksync.test").info("hello from stdlib")
        finally:
            logger.remove(sink_id)

        assert isinstance(logging.root.handlers[0], InterceptHandler)
        assert any("hello from stdlib" in str(m) for m in messages)

    def test_file_sink(self, tmp_path):
        log_file = tmp_path / "logs" / "tracksync.log"

        setup_logging(Settings(_env_file=None, log_file=str(log_file)))
        logger.complete()

        assert log_file.parent.exists()
        logger.remove()
