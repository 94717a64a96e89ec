"""Tabload exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TabloadError(Exception):
    """Base exception for all Tabload failures."""


class TabloadConfigError(TabloadError):
    """Raised for invalid runtime configuration."""


class TabloadIngestError(TabloadError):
    """Raised for malformed delimited input."""


class NoDataFoundError(TabloadIngestError):
    """Raised when no row of the source carries numeric columns."""


class MalformedRowError(TabloadIngestError):
    """Raised when a data row disagrees with the locked schema.

    Attributes:
        line_number: One-based physical line number of the offending row.
        expected: Token count the schema requires.
        found: Token count observed on the row.
    """

    def __init__(self, message: str, line_number: int, expected: int, found: int) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.expected = expected
        self.found = found


class TruncatedRowError(TabloadIngestError):
    """Raised when a data row has fewer tokens than the column mask needs.

    Attributes:
        line_number: One-based physical line number of the offending row.
        row_index: Zero-based output row the line would have filled.
    """

    def __init__(self, message: str, line_number: int, row_index: int) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.row_index = row_index


class UnparseableValueError(TabloadIngestError):
    """Raised when a masked token is not a valid number.

    Attributes:
        line_number: One-based physical line number of the offending row.
        row_index: Zero-based output row the line would have filled.
        token: The raw token that failed to parse.
    """

    def __init__(self, message: str, line_number: int, row_index: int, token: str) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.row_index = row_index
        self.token = token


class TabloadIOError(TabloadError):
    """Raised when a source cannot be opened, read, or decoded."""


class TabloadCanceledError(TabloadError):
    """Raised when a cooperative cancellation request is observed."""


class TabloadStoreError(TabloadError):
    """Raised for coordinate store contract violations."""


class TabloadExportError(TabloadError):
    """Raised for delimited export failures."""


class ProgressTreeError(TabloadError):
    """Raised when a progress tree is used outside its contract."""
