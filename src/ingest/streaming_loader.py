"""Streaming load of delimited numeric data into coordinate stores.

The loader sniffs the source schema, allocates a store of exactly that
shape, then re-reads the source and writes one store row per data line.
Cancellation is polled before every line and progress advances one
step per loaded row.
"""

from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import ContextManager

import numpy as np

from core.constants import DEFAULT_STORE_NAME, STORE_DTYPE
from core.errors import (
    MalformedRowError,
    NoDataFoundError,
    TabloadCanceledError,
    TruncatedRowError,
    UnparseableValueError,
)
from core.logging_config import get_logger
from core.types import LoadOptions, SchemaInfo
from ingest.line_source import (
    LineSourceOpener,
    LineTokenizer,
    SourceLine,
    file_line_opener,
    parse_number,
    read_source_lines,
)
from ingest.schema_sniffer import CancelCheck, sniff_schema
from progress.progress_tree import ProgressTree
from store.coordinate_store import CoordinateStore
from store.store_factory import CoordinateStoreFactory

_LOGGER = get_logger(__name__)


def load_delimited(
    opener: LineSourceOpener,
    store_factory: CoordinateStoreFactory,
    name: str = DEFAULT_STORE_NAME,
    options: LoadOptions | None = None,
    *,
    cancel_check: CancelCheck | None = None,
    progress: ProgressTree | None = None,
) -> CoordinateStore:
    """Load the numeric rows of a delimited source into a new store.

    Args:
        opener: Source opener; the source is read twice.
        store_factory: Factory allocating the output store.
        name: Name given to the output store.
        options: Delimiter, start column, and encoding settings.
        cancel_check: Optional predicate polled once per line.
        progress: Optional progress tree; loading runs in one subsection of it.

    Returns:
        Store with one row per data line and one column per numeric position.

    Raises:
        NoDataFoundError: If the source has no numeric rows or columns.
        MalformedRowError: If rows disagree with the sniffed schema.
        TruncatedRowError: If a data row lacks a masked column.
        UnparseableValueError: If a masked token is not a number.
        TabloadCanceledError: If ``cancel_check`` reports cancellation.
        TabloadIOError: If the source cannot be read.
    """
    load_options = options or LoadOptions()
    if progress is not None:
        progress.post_indeterminate()
    schema = sniff_schema(
        opener,
        delimiter=load_options.delimiter,
        start_column=load_options.start_column,
        cancel_check=cancel_check,
    )
    if schema.row_count == 0 or schema.column_count == 0:
        raise NoDataFoundError(
            f"No data found: rows = {schema.row_count}, columns = {schema.column_count}."
        )
    store = store_factory.create_store(name, schema.column_count, schema.row_count)
    _LOGGER.info(
        "load_started", store=name, rows=schema.row_count, columns=schema.column_count
    )
    section: ContextManager[object] = nullcontext()
    if progress is not None:
        progress.post_message(f"Loading {schema.row_count} rows into '{name}'")
        section = progress.section(1.0, schema.row_count)
    try:
        with section:
            loaded_rows = _load_rows(
                opener, store, schema, load_options.delimiter, cancel_check, progress
            )
    except TabloadCanceledError:
        _LOGGER.warning("load_canceled", store=name, rows=schema.row_count)
        raise
    _LOGGER.info("load_completed", store=name, rows=loaded_rows, columns=schema.column_count)
    return store


def load_delimited_file(
    path: Path | str,
    store_factory: CoordinateStoreFactory,
    name: str | None = None,
    options: LoadOptions | None = None,
    *,
    cancel_check: CancelCheck | None = None,
    progress: ProgressTree | None = None,
) -> CoordinateStore:
    """Load a delimited text file; the store is named after the file by default."""
    load_options = options or LoadOptions()
    file_path = Path(path).expanduser()
    return load_delimited(
        file_line_opener(file_path, load_options.encoding),
        store_factory,
        name or file_path.stem,
        load_options,
        cancel_check=cancel_check,
        progress=progress,
    )


def _load_rows(
    opener: LineSourceOpener,
    store: CoordinateStore,
    schema: SchemaInfo,
    delimiter: str,
    cancel_check: CancelCheck | None,
    progress: ProgressTree | None,
) -> int:
    """Parse every data line into the store and return the number of rows written."""
    tokenizer = LineTokenizer(delimiter)
    buffer = np.empty(schema.column_count, dtype=STORE_DTYPE)
    row = 0
    with read_source_lines(opener) as lines:
        for line in lines:
            if cancel_check is not None and cancel_check():
                raise TabloadCanceledError(
                    f"Loading canceled after {row} of {schema.row_count} rows."
                )
            if line.row_index < schema.start_row:
                continue
            if row >= schema.row_count:
                raise _changed_source_error(line, schema)
            _parse_row(tokenizer.tokenize(line.text), line, row, schema.column_mask, buffer)
            store.set_row(row, buffer)
            row += 1
            if progress is not None:
                progress.post_step()
    if row != schema.row_count:
        raise MalformedRowError(
            f"Source changed while loading: expected {schema.row_count} data rows, "
            f"found {row}. Retry once the source is no longer being written.",
            line_number=0,
            expected=schema.row_count,
            found=row,
        )
    return row


def _parse_row(
    tokens: list[str],
    line: SourceLine,
    row: int,
    column_mask: tuple[int, ...],
    buffer: np.ndarray,
) -> None:
    """Fill ``buffer`` with the masked tokens of one line, in mask order."""
    for column, position in enumerate(column_mask):
        if position >= len(tokens):
            raise TruncatedRowError(
                f"Too few columns on line {line.line_number} (row {row}): "
                f"column {position} requested, {len(tokens)} present.",
                line_number=line.line_number,
                row_index=row,
            )
        token = tokens[position]
        try:
            buffer[column] = parse_number(token)
        except ValueError as error:
            raise UnparseableValueError(
                f"Unparseable element on line {line.line_number} (row {row}): {line.text}",
                line_number=line.line_number,
                row_index=row,
                token=token,
            ) from error


def _changed_source_error(line: SourceLine, schema: SchemaInfo) -> MalformedRowError:
    return MalformedRowError(
        f"Source changed while loading: line {line.line_number} is beyond the "
        f"{schema.row_count} data rows found during schema detection.",
        line_number=line.line_number,
        expected=schema.row_count,
        found=schema.row_count + 1,
    )
