"""Unit tests for delimited export."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import TabloadExportError
from core.types import WriteOptions
from export.tabular_writer import render_delimited_lines, save_delimited
from store.coordinate_store import ArrayCoordinateStore


def _store() -> ArrayCoordinateStore:
    return ArrayCoordinateStore.from_rows("demo", [[1.0, 0.1], [-2.5, 1e-20]])


def test_render_uses_round_trip_float_text() -> None:
    """Default rendering should use the shortest exact float text."""
    lines = list(render_delimited_lines(_store()))

    assert lines == ["1.0,0.1", "-2.5,1e-20"]


def test_render_applies_format_delimiter_and_headers() -> None:
    """Headers come first, then formatted values joined by the delimiter."""
    options = WriteOptions(delimiter="\t", value_format="%.2f", headers=("x", "y"))

    lines = list(render_delimited_lines(_store(), options))

    assert lines == ["x\ty", "1.00\t0.10", "-2.50\t0.00"]


def test_render_spells_non_finite_values() -> None:
    """Non-finite values should use spellings the loader accepts."""
    store = ArrayCoordinateStore.from_rows("demo", [[float("inf"), float("-inf"), float("nan")]])

    assert list(render_delimited_lines(store)) == ["Infinity,-Infinity,NaN"]


def test_header_count_must_match_columns(tmp_path: Path) -> None:
    """Mismatched header counts should fail before anything is written."""
    output_path = tmp_path / "out.csv"

    with pytest.raises(TabloadExportError):
        save_delimited(output_path, _store(), WriteOptions(headers=("only",)))

    assert not output_path.exists()


def test_invalid_value_format_is_rejected() -> None:
    """Patterns that cannot format a float should fail with an export error."""
    with pytest.raises(TabloadExportError):
        list(render_delimited_lines(_store(), WriteOptions(value_format="value")))

    assert True


def test_invalid_value_format_leaves_no_file(tmp_path: Path) -> None:
    """A bad pattern should fail before the output file is created."""
    output_path = tmp_path / "out.csv"
    options = WriteOptions(value_format="%s and %s", headers=("a", "b"))

    with pytest.raises(TabloadExportError):
        save_delimited(output_path, _store(), options)

    assert not output_path.exists()


def test_save_delimited_writes_one_line_per_row(tmp_path: Path) -> None:
    """Saved files should hold one newline-terminated line per row."""
    output_path = save_delimited(tmp_path / "out.csv", _store())

    assert output_path.read_text(encoding="utf-8") == "1.0,0.1\n-2.5,1e-20\n"
