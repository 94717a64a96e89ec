"""Delimited text export of coordinate stores.

Rows are written in store order, values in column order. Without a
value format each value uses the shortest text that parses back to the
same float, so unformatted exports reload exactly.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterator

import numpy as np

from core.constants import STORE_DTYPE
from core.errors import TabloadExportError
from core.logging_config import get_logger
from core.types import WriteOptions
from store.coordinate_store import CoordinateStore

_LOGGER = get_logger(__name__)


def render_delimited_lines(
    store: CoordinateStore, options: WriteOptions | None = None
) -> Iterator[str]:
    """Yield the export lines of a store, without line terminators.

    Args:
        store: Store to render.
        options: Delimiter, value format, and header settings.

    Yields:
        The header line when headers are given, then one line per row.

    Raises:
        TabloadExportError: If headers do not match the column count or
            the value format cannot render a float.
    """
    write_options = options or WriteOptions()
    _check_headers(store, write_options.headers)
    if write_options.headers is not None:
        yield write_options.delimiter.join(write_options.headers)
    buffer = np.empty(store.column_count, dtype=STORE_DTYPE)
    for row_index in range(store.row_count):
        values = store.get_row(row_index, buffer)
        yield write_options.delimiter.join(
            _format_value(float(value), write_options.value_format) for value in values
        )


def save_delimited(
    path: Path | str,
    store: CoordinateStore,
    options: WriteOptions | None = None,
) -> Path:
    """Write a store to a delimited text file.

    Args:
        path: Destination file, overwritten if present.
        store: Store to export.
        options: Delimiter, value format, header, and encoding settings.

    Returns:
        The written file path.

    Raises:
        TabloadExportError: If rendering or writing fails.
    """
    write_options = options or WriteOptions()
    output_path = Path(path).expanduser()
    _check_headers(store, write_options.headers)
    _format_value(0.0, write_options.value_format)
    try:
        with output_path.open("w", encoding=write_options.encoding, newline="\n") as handle:
            for line in render_delimited_lines(store, write_options):
                handle.write(line)
                handle.write("\n")
    except OSError as error:
        raise TabloadExportError(
            f"Failed to write delimited export to {output_path}: {error}."
        ) from error
    _LOGGER.info(
        "export_completed",
        store=store.name,
        path=str(output_path),
        rows=store.row_count,
        columns=store.column_count,
    )
    return output_path


def _check_headers(store: CoordinateStore, headers: tuple[str, ...] | None) -> None:
    if headers is not None and len(headers) != store.column_count:
        raise TabloadExportError(
            f"Number of headers != column count: {len(headers)} != {store.column_count}."
        )


def _format_value(value: float, value_format: str | None) -> str:
    if value_format is None:
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return repr(value)
    try:
        return value_format % value
    except (TypeError, ValueError) as error:
        raise TabloadExportError(
            f"Invalid value format {value_format!r}: {error}. "
            "Use a printf-style pattern such as '%.6f'."
        ) from error
