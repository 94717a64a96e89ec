"""Coordinate store factories.

Loaders only know the shape of their data after sniffing, so they ask
a factory for a store of exactly that shape. This module provides an
in-memory factory and a factory of memory-mapped ``.npy`` files.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Protocol

import numpy as np
from numpy.lib.format import open_memmap

from core.config import TabloadConfig
from core.constants import STORE_DTYPE, STORE_FILE_SUFFIX, STORES_DIR_NAME
from core.errors import TabloadStoreError
from core.logging_config import get_logger
from store.coordinate_store import ArrayCoordinateStore, CoordinateStore

_LOGGER = get_logger(__name__)
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class CoordinateStoreFactory(Protocol):
    """Allocator of coordinate stores with a known shape."""

    def create_store(self, name: str, column_count: int, row_count: int) -> CoordinateStore: ...


class InMemoryStoreFactory:
    """Factory of zero-filled in-memory stores."""

    def create_store(self, name: str, column_count: int, row_count: int) -> ArrayCoordinateStore:
        _check_shape(name, column_count, row_count)
        values = np.zeros((row_count, column_count), dtype=STORE_DTYPE)
        _LOGGER.debug(
            "store_created", store=name, backend="memory", rows=row_count, columns=column_count
        )
        return ArrayCoordinateStore(name, values)


class MemmapStoreFactory:
    """Factory of stores memory-mapped onto ``.npy`` files under one directory."""

    def __init__(self, root_dir: Path) -> None:
        self._root_dir = root_dir
        self._created: set[Path] = set()

    @classmethod
    def from_config(cls, config: TabloadConfig) -> "MemmapStoreFactory":
        return cls(config.data_root / STORES_DIR_NAME)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def store_path(self, name: str) -> Path:
        """Return the file backing the store called ``name``."""
        safe_name = _UNSAFE_NAME_CHARS.sub("_", name).strip("._") or "store"
        return self._root_dir / f"{safe_name}{STORE_FILE_SUFFIX}"

    def create_store(self, name: str, column_count: int, row_count: int) -> ArrayCoordinateStore:
        """Create or overwrite the ``.npy`` file for ``name``.

        Raises:
            TabloadStoreError: If the shape is empty or the file cannot be created.
        """
        _check_shape(name, column_count, row_count)
        path = self.store_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            values = open_memmap(
                path, mode="w+", dtype=STORE_DTYPE, shape=(row_count, column_count)
            )
        except OSError as error:
            raise TabloadStoreError(
                f"Failed to create coordinate store file {path}: {error}. "
                "Check that TABLOAD_DATA_ROOT is writable."
            ) from error
        self._created.add(path)
        _LOGGER.info(
            "store_created",
            store=name,
            backend="memmap",
            path=str(path),
            rows=row_count,
            columns=column_count,
        )
        return ArrayCoordinateStore(name, values)

    def discard_store(self, name: str) -> bool:
        """Delete the file of a store this factory created, such as after a failed load.

        Files this factory did not create are left alone.

        Returns:
            Whether a file was deleted.
        """
        path = self.store_path(name)
        if path not in self._created:
            return False
        self._created.discard(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as error:
            raise TabloadStoreError(
                f"Failed to remove incomplete coordinate store {path}: {error}. "
                "Delete the file by hand before exporting it."
            ) from error
        _LOGGER.warning("store_discarded", store=name, path=str(path))
        return True


def open_store(path: Path, name: str | None = None) -> ArrayCoordinateStore:
    """Open a saved ``.npy`` store read-only.

    Args:
        path: Store file path.
        name: Optional store name, the file stem by default.

    Returns:
        Store backed by a read-only memory map.

    Raises:
        TabloadStoreError: If the file is missing or not a 2-D numeric array.
    """
    try:
        values = np.load(path, mmap_mode="r", allow_pickle=False)
    except (OSError, ValueError) as error:
        raise TabloadStoreError(
            f"Failed to open coordinate store {path}: {error}. "
            "Provide a .npy file written by 'tabload load'."
        ) from error
    if not np.issubdtype(values.dtype, np.number):
        raise TabloadStoreError(
            f"Coordinate store {path} holds non-numeric dtype {values.dtype}."
        )
    return ArrayCoordinateStore(name or path.stem, values)


def _check_shape(name: str, column_count: int, row_count: int) -> None:
    if column_count <= 0 or row_count <= 0:
        raise TabloadStoreError(
            f"Cannot create coordinate store '{name}' with {row_count} rows "
            f"and {column_count} columns: both must be positive."
        )
