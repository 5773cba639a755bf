"""Unit tests for structlog configuration."""

import json

import pytest
import structlog

from foodtrack.logging_config import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore default structlog configuration after each test."""
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test configure_logging()."""

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test JSON renderer emits one object per event."""
        configure_logging("INFO", "json")

        structlog.get_logger("test").info("Meal saved", meal_id="m1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "Meal saved"
        assert event["meal_id"] == "m1"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test events below the level are dropped."""
        configure_logging("WARNING", "json")

        structlog.get_logger("test").info("hidden")
        structlog.get_logger("test").warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_unknown_level_defaults_to_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test bogus level names."""
        configure_logging("LOUD", "json")

        structlog.get_logger("test").debug("hidden")
        structlog.get_logger("test").info("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
