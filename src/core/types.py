"""Shared typed models.

This module defines immutable data models used by the ingest,
progress, store, and export layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import DEFAULT_DELIMITER, DEFAULT_START_COLUMN


@dataclass(frozen=True)
class SchemaInfo:
    """Shape of the numeric data found in a delimited source.

    Attributes:
        start_row: Zero-based non-blank line index of the first data row.
        row_count: Number of non-blank lines from ``start_row`` to end of file.
        column_mask: Sorted token positions that carry numeric values.
        token_count: Token count every data row must have.
    """

    start_row: int
    row_count: int
    column_mask: tuple[int, ...]
    token_count: int

    @property
    def column_count(self) -> int:
        """Number of numeric columns selected by the mask."""
        return len(self.column_mask)


@dataclass(frozen=True)
class LoadOptions:
    """Delimited source parsing options.

    Attributes:
        delimiter: Field separator characters; any one of them splits tokens.
        start_column: Leading token count ignored during numeric detection.
        encoding: Text encoding, or None for the platform default.
    """

    delimiter: str = DEFAULT_DELIMITER
    start_column: int = DEFAULT_START_COLUMN
    encoding: str | None = None


@dataclass(frozen=True)
class WriteOptions:
    """Delimited export options.

    Attributes:
        delimiter: Separator written between values.
        value_format: Optional printf-style pattern such as ``%5.2f``.
        headers: Optional header names, one per store column.
        encoding: Text encoding, or None for the platform default.
    """

    delimiter: str = DEFAULT_DELIMITER
    value_format: str | None = None
    headers: tuple[str, ...] | None = None
    encoding: str | None = None
