"""Unit tests for structured logging setup."""

from __future__ import annotations

import json

import pytest

from core.logging_config import configure_logging, get_logger


def test_logger_writes_json_events_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """Events should render as JSON on stderr and leave stdout untouched."""
    configure_logging("info")
    logger = get_logger("tests.logging")

    logger.info("schema_sniffed", row_count=3)
    captured = capsys.readouterr()

    payload = json.loads(captured.err.strip().splitlines()[-1])
    assert payload["event"] == "schema_sniffed" and payload["row_count"] == 3
    assert captured.out == ""


def test_configure_logging_filters_lower_levels(capsys: pytest.CaptureFixture[str]) -> None:
    """Info events should be dropped at warning level."""
    configure_logging("warning")
    logger = get_logger("tests.logging")

    logger.info("hidden_event")
    configure_logging("info")

    assert "hidden_event" not in capsys.readouterr().err


def test_configure_logging_rejects_unknown_level() -> None:
    """Unknown level names should fail fast."""
    with pytest.raises(ValueError):
        configure_logging("loud")

    assert True
