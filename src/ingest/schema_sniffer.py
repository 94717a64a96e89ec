"""Schema inference for delimited numeric sources.

One forward pass finds the first data row and the token positions that
carry numbers, then checks that every later row has the same arity.
Stores are allocated with a fixed shape, so this pass must finish
before any value is loaded.
"""

from __future__ import annotations

from typing import Callable

from core.constants import DEFAULT_DELIMITER, DEFAULT_START_COLUMN
from core.errors import MalformedRowError, NoDataFoundError, TabloadCanceledError
from core.logging_config import get_logger
from core.types import SchemaInfo
from ingest.line_source import LineSourceOpener, LineTokenizer, parse_number, read_source_lines

_LOGGER = get_logger(__name__)

CancelCheck = Callable[[], bool]


def sniff_schema(
    opener: LineSourceOpener,
    delimiter: str = DEFAULT_DELIMITER,
    start_column: int = DEFAULT_START_COLUMN,
    cancel_check: CancelCheck | None = None,
) -> SchemaInfo:
    """Infer the data rows and numeric columns of a delimited source.

    Blank lines are skipped and do not count as rows. Before a schema is
    found, rows with no more than ``start_column`` tokens are ignored.
    The first row with at least one numeric token at or after
    ``start_column`` locks the schema; every later non-blank row must
    have exactly as many tokens as that row.

    Args:
        opener: Source opener; one pass is made.
        delimiter: Field separator characters.
        start_column: Leading tokens excluded from numeric detection.
        cancel_check: Optional predicate polled once per line.

    Returns:
        Schema of the source.

    Raises:
        NoDataFoundError: If no row has a numeric column.
        MalformedRowError: If a row after the schema row has a different token count.
        TabloadCanceledError: If ``cancel_check`` reports cancellation.
        TabloadIOError: If the source cannot be read.
    """
    if start_column < 0:
        raise ValueError(f"start_column must be non-negative, got {start_column}.")
    tokenizer = LineTokenizer(delimiter)
    start_row = -1
    last_row = -1
    column_mask: tuple[int, ...] = ()
    token_count = 0
    with read_source_lines(opener) as lines:
        for line in lines:
            if cancel_check is not None and cancel_check():
                raise TabloadCanceledError(
                    f"Schema detection canceled at line {line.line_number}."
                )
            last_row = line.row_index
            tokens = tokenizer.tokenize(line.text)
            if start_row >= 0:
                if len(tokens) != token_count:
                    raise MalformedRowError(
                        f"Incorrect number of entries on line {line.line_number}: "
                        f"{token_count} expected, found {len(tokens)}.",
                        line_number=line.line_number,
                        expected=token_count,
                        found=len(tokens),
                    )
                continue
            trial_mask = numeric_positions(tokens, start_column)
            if trial_mask:
                start_row = line.row_index
                column_mask = trial_mask
                token_count = len(tokens)
    if start_row < 0:
        raise NoDataFoundError(
            "No numeric data found in source. "
            "Check the delimiter and start column, or add numeric rows."
        )
    schema = SchemaInfo(
        start_row=start_row,
        row_count=last_row - start_row + 1,
        column_mask=column_mask,
        token_count=token_count,
    )
    _LOGGER.info(
        "schema_sniffed",
        start_row=schema.start_row,
        row_count=schema.row_count,
        columns=list(schema.column_mask),
        token_count=schema.token_count,
    )
    return schema


def numeric_positions(tokens: list[str], start_column: int) -> tuple[int, ...]:
    """Return positions at or after ``start_column`` whose tokens parse as numbers."""
    positions: list[int] = []
    for position in range(start_column, len(tokens)):
        try:
            parse_number(tokens[position])
        except ValueError:
            continue
        positions.append(position)
    return tuple(positions)
