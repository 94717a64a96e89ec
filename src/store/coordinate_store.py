"""Fixed-shape numeric coordinate stores.

A coordinate store holds ``row_count`` rows of ``column_count`` float
values. Ingestion writes whole rows by index; export reads them back.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import numpy as np

from core.constants import STORE_DTYPE
from core.errors import TabloadStoreError


class CoordinateStore(Protocol):
    """Row/column numeric store with a shape fixed at creation."""

    @property
    def name(self) -> str: ...

    @property
    def row_count(self) -> int: ...

    @property
    def column_count(self) -> int: ...

    def set_row(self, row_index: int, values: Sequence[float] | np.ndarray) -> None: ...

    def get_row(self, row_index: int, out: np.ndarray | None = None) -> np.ndarray: ...

    def flush(self) -> None: ...


class ArrayCoordinateStore:
    """Coordinate store backed by a two-dimensional numpy array.

    The array may be an in-memory ndarray or a ``numpy.memmap``; rows
    are written through to it directly.
    """

    def __init__(self, name: str, values: np.ndarray) -> None:
        if values.ndim != 2:
            raise TabloadStoreError(
                f"Coordinate store '{name}' needs a 2-D array, got {values.ndim} dimensions."
            )
        self._name = name
        self._values = values

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[float]]) -> "ArrayCoordinateStore":
        """Build a store holding a copy of ``rows``.

        Raises:
            TabloadStoreError: If rows are ragged.
        """
        try:
            values = np.array(rows, dtype=STORE_DTYPE, ndmin=2)
        except ValueError as error:
            raise TabloadStoreError(
                f"Cannot build coordinate store '{name}': rows must all have the same length."
            ) from error
        return cls(name, values)

    @property
    def name(self) -> str:
        return self._name

    @property
    def row_count(self) -> int:
        return int(self._values.shape[0])

    @property
    def column_count(self) -> int:
        return int(self._values.shape[1])

    def set_row(self, row_index: int, values: Sequence[float] | np.ndarray) -> None:
        """Overwrite one row.

        Raises:
            TabloadStoreError: If the index or value count is out of range.
        """
        self._check_row_index(row_index)
        row = np.asarray(values, dtype=STORE_DTYPE)
        self._check_length(row, "values")
        self._values[row_index, :] = row

    def get_row(self, row_index: int, out: np.ndarray | None = None) -> np.ndarray:
        """Read one row, filling ``out`` when a buffer is supplied.

        Raises:
            TabloadStoreError: If the index or buffer length is out of range.
        """
        self._check_row_index(row_index)
        if out is None:
            return np.array(self._values[row_index, :], dtype=STORE_DTYPE)
        if not isinstance(out, np.ndarray):
            raise TabloadStoreError(
                f"Row buffer must be a numpy array, got {type(out).__name__}. "
                "Pass a float array of length column_count or omit the buffer."
            )
        self._check_length(out, "buffer")
        out[:] = self._values[row_index, :]
        return out

    def to_array(self) -> np.ndarray:
        """Return a copy of every row as one array."""
        return np.array(self._values, dtype=STORE_DTYPE)

    def flush(self) -> None:
        """Push pending writes of memory-mapped stores to disk."""
        flush = getattr(self._values, "flush", None)
        if callable(flush):
            flush()

    def _check_row_index(self, row_index: int) -> None:
        if not 0 <= row_index < self.row_count:
            raise TabloadStoreError(
                f"Row index {row_index} is out of range for coordinate store "
                f"'{self._name}' with {self.row_count} rows."
            )

    def _check_length(self, row: Any, label: str) -> None:
        shape = np.shape(row)
        if len(shape) != 1 or shape[0] != self.column_count:
            raise TabloadStoreError(
                f"Row {label} has shape {shape}; coordinate store '{self._name}' "
                f"expects {self.column_count} values."
            )
