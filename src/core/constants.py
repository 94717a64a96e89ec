"""Core constants used across Tabload modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".tabload")
STORES_DIR_NAME = "stores"
STORE_FILE_SUFFIX = ".npy"
DEFAULT_STORE_NAME = "coordinates"
DEFAULT_DELIMITER = ","
DEFAULT_START_COLUMN = 0
DEFAULT_PROGRESS_BEGIN = 0.0
DEFAULT_PROGRESS_END = 1.0
DEFAULT_MIN_PROGRESS_DELTA = 0.01
DEFAULT_MIN_PROGRESS_INTERVAL_MS = 500
INDETERMINATE_PROGRESS = -1.0
STORE_DTYPE = "float64"
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
