"""Re-openable line sources for delimited text.

Schema sniffing and loading each need a full independent pass, so
sources are described by openers that produce a fresh handle per pass.
This module also owns tokenization and numeric token parsing.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import io
from pathlib import Path
import re
from typing import Callable, ContextManager, Iterable, Iterator

from core.errors import TabloadIOError

LineSourceOpener = Callable[[], ContextManager[Iterable[str]]]

_SPECIAL_NUMBER_TOKENS = {"nan", "+nan", "-nan", "infinity", "+infinity", "-infinity"}


@dataclass(frozen=True)
class SourceLine:
    """One non-blank line of a source.

    Attributes:
        line_number: One-based physical line number in the source.
        row_index: Zero-based index among non-blank lines.
        text: Line content with surrounding whitespace removed.
    """

    line_number: int
    row_index: int
    text: str


def file_line_opener(path: Path | str, encoding: str | None = None) -> LineSourceOpener:
    """Build an opener reading a text file.

    Args:
        path: File to read.
        encoding: Text encoding, or None for the platform default.

    Returns:
        Zero-argument callable opening a fresh handle on every call.
    """
    file_path = Path(path).expanduser()

    def open_lines() -> ContextManager[Iterable[str]]:
        return file_path.open("r", encoding=encoding, newline=None)

    return open_lines


def text_line_opener(text: str) -> LineSourceOpener:
    """Build an opener over in-memory text."""

    def open_lines() -> ContextManager[Iterable[str]]:
        return io.StringIO(text)

    return open_lines


@contextmanager
def read_source_lines(opener: LineSourceOpener) -> Iterator[Iterator[SourceLine]]:
    """Open a source and yield an iterator over its non-blank lines.

    The handle is closed when the block exits, whether it completes,
    fails, or is canceled.

    Args:
        opener: Source opener for this pass.

    Yields:
        Iterator of non-blank source lines in file order.

    Raises:
        TabloadIOError: If the source cannot be opened, read, or decoded.
    """
    try:
        with opener() as handle:
            yield _iter_source_lines(handle)
    except (OSError, UnicodeDecodeError) as error:
        raise TabloadIOError(
            f"Failed to read delimited source: {error}. "
            "Check the path, permissions, and encoding, then retry."
        ) from error


def _iter_source_lines(handle: Iterable[str]) -> Iterator[SourceLine]:
    row_index = -1
    for line_number, raw_line in enumerate(handle, 1):
        text = raw_line.strip()
        if not text:
            continue
        row_index += 1
        yield SourceLine(line_number=line_number, row_index=row_index, text=text)


class LineTokenizer:
    """Split lines on any of the delimiter characters.

    Runs of delimiters collapse, and empty tokens are never produced,
    so ``"1,,2"`` has two tokens.
    """

    def __init__(self, delimiter: str) -> None:
        if not delimiter:
            raise ValueError("Delimiter must contain at least one character.")
        self.delimiter = delimiter
        self._pattern = re.compile("[" + re.escape(delimiter) + "]+")

    def tokenize(self, text: str) -> list[str]:
        if len(self.delimiter) == 1:
            return [token for token in text.split(self.delimiter) if token]
        return [token for token in self._pattern.split(text) if token]


def parse_number(token: str) -> float:
    """Parse a numeric token.

    Accepts signs, decimal points, exponents, ``NaN`` and ``Infinity``.
    Digit-group underscores, non-ASCII digits and Python-only spellings
    such as ``inf`` are rejected.

    Args:
        token: Raw token text.

    Returns:
        Parsed value.

    Raises:
        ValueError: If the token is not a number.
    """
    stripped = token.strip()
    if not stripped or not stripped.isascii() or "_" in stripped:
        raise ValueError(f"not a number: {token!r}")
    lowered = stripped.lower()
    if lowered.lstrip("+-").startswith(("inf", "nan")) and lowered not in _SPECIAL_NUMBER_TOKENS:
        raise ValueError(f"not a number: {token!r}")
    return float(stripped)
