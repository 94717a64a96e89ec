"""Runtime configuration model for Tabload.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_DELIMITER,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MIN_PROGRESS_DELTA,
    DEFAULT_MIN_PROGRESS_INTERVAL_MS,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import TabloadConfigError


@dataclass(frozen=True)
class TabloadConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for memory-mapped stores.
        delimiter: Default field delimiter characters.
        encoding: Default text encoding, or None for the platform default.
        progress_min_delta: Smallest progress change that is always emitted.
        progress_min_interval_ms: Elapsed time after which progress is emitted.
        log_level: Minimum structured log level name.
    """

    data_root: Path
    delimiter: str
    encoding: str | None
    progress_min_delta: float
    progress_min_interval_ms: int
    log_level: str

    @classmethod
    def from_env(cls) -> "TabloadConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            TabloadConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("TABLOAD_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        delimiter = os.getenv("TABLOAD_DELIMITER", DEFAULT_DELIMITER)
        if not delimiter:
            raise TabloadConfigError(
                "Invalid TABLOAD_DELIMITER value: expected at least one character. "
                "Unset TABLOAD_DELIMITER to use ',' or set it to the field separator."
            )
        encoding = os.getenv("TABLOAD_ENCODING") or None
        min_delta = _parse_min_delta(
            os.getenv("TABLOAD_PROGRESS_MIN_DELTA", str(DEFAULT_MIN_PROGRESS_DELTA))
        )
        min_interval_ms = _parse_min_interval_ms(
            os.getenv("TABLOAD_PROGRESS_MIN_INTERVAL_MS", str(DEFAULT_MIN_PROGRESS_INTERVAL_MS))
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            delimiter=delimiter,
            encoding=encoding,
            progress_min_delta=min_delta,
            progress_min_interval_ms=min_interval_ms,
            log_level=_parse_log_level(os.getenv("TABLOAD_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )


def _parse_min_delta(raw_value: str) -> float:
    """Parse the minimum progress delta environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed non-negative delta.

    Raises:
        TabloadConfigError: If value is not a non-negative number.
    """
    try:
        value = float(raw_value)
    except ValueError as error:
        raise TabloadConfigError(
            "Invalid TABLOAD_PROGRESS_MIN_DELTA value: "
            f"expected number, got '{raw_value}'. "
            "Set TABLOAD_PROGRESS_MIN_DELTA to a value such as 0.01."
        ) from error
    if value < 0.0:
        raise TabloadConfigError(
            f"Invalid TABLOAD_PROGRESS_MIN_DELTA value: {value} is negative. "
            "Use zero to emit every progress change."
        )
    return value


def _parse_min_interval_ms(raw_value: str) -> int:
    """Parse the minimum progress interval environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed non-negative interval in milliseconds.

    Raises:
        TabloadConfigError: If value is not a non-negative integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise TabloadConfigError(
            "Invalid TABLOAD_PROGRESS_MIN_INTERVAL_MS value: "
            f"expected integer, got '{raw_value}'. "
            "Set TABLOAD_PROGRESS_MIN_INTERVAL_MS to a millisecond count."
        ) from error
    if value < 0:
        raise TabloadConfigError(
            f"Invalid TABLOAD_PROGRESS_MIN_INTERVAL_MS value: {value} is negative. "
            "Use zero to disable time-based throttling."
        )
    return value


def _parse_log_level(raw_value: str) -> str:
    """Validate the log level environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Lower-case level name.

    Raises:
        TabloadConfigError: If the level is not supported.
    """
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise TabloadConfigError(
            f"Invalid TABLOAD_LOG_LEVEL value: '{raw_value}'. "
            f"Supported levels: {SUPPORTED_LOG_LEVELS}."
        )
    return level
