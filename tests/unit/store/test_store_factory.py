"""Unit tests for coordinate store factories."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import numpy as np
import pytest

from core.config import TabloadConfig
from core.errors import TabloadStoreError
from store.store_factory import InMemoryStoreFactory, MemmapStoreFactory, open_store


def test_in_memory_factory_creates_zeroed_store() -> None:
    """In-memory stores should have the requested shape and start at zero."""
    store = InMemoryStoreFactory().create_store("demo", column_count=3, row_count=4)

    assert (store.row_count, store.column_count) == (4, 3)
    assert not store.to_array().any()


@pytest.mark.parametrize(("columns", "rows"), [(0, 3), (3, 0)])
def test_factories_reject_empty_shapes(columns: int, rows: int, tmp_path: Path) -> None:
    """Empty shapes should be refused by every factory."""
    with pytest.raises(TabloadStoreError):
        InMemoryStoreFactory().create_store("demo", columns, rows)
    with pytest.raises(TabloadStoreError):
        MemmapStoreFactory(tmp_path).create_store("demo", columns, rows)

    assert list(tmp_path.iterdir()) == []


def test_memmap_store_persists_rows(tmp_path: Path) -> None:
    """Rows written to a memory-mapped store should reopen from disk."""
    config = replace(TabloadConfig.from_env(), data_root=tmp_path)
    factory = MemmapStoreFactory.from_config(config)
    store = factory.create_store("run 1/points", column_count=2, row_count=2)

    store.set_row(0, [1.0, 2.0])
    store.set_row(1, [3.0, 4.0])
    store.flush()
    reopened = open_store(factory.store_path("run 1/points"))

    assert factory.store_path("run 1/points").name == "run_1_points.npy"
    np.testing.assert_array_equal(reopened.to_array(), [[1.0, 2.0], [3.0, 4.0]])


def test_open_store_rejects_missing_file(tmp_path: Path) -> None:
    """Opening a missing store file should fail with a store error."""
    with pytest.raises(TabloadStoreError):
        open_store(tmp_path / "missing.npy")

    assert True


def test_open_store_rejects_one_dimensional_arrays(tmp_path: Path) -> None:
    """Saved arrays must be two-dimensional to act as stores."""
    path = tmp_path / "flat.npy"
    np.save(path, np.arange(3.0))

    with pytest.raises(TabloadStoreError):
        open_store(path)

    assert path.exists()


def test_discard_store_removes_only_created_files(tmp_path: Path) -> None:
    """Discarding should delete files this factory created and nothing else."""
    factory = MemmapStoreFactory(tmp_path)
    factory.create_store("partial", column_count=2, row_count=3)
    np.save(tmp_path / "earlier.npy", np.ones((1, 1)))

    assert factory.discard_store("partial") is True
    assert factory.discard_store("earlier") is False
    assert not factory.store_path("partial").exists()
    assert (tmp_path / "earlier.npy").exists()
