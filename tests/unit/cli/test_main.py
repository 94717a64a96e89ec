"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from cli.main import main
from core.errors import MalformedRowError, NoDataFoundError, UnparseableValueError
from tests.fixture_paths import delimited_fixture


def test_cli_sniff_prints_schema(capsys: pytest.CaptureFixture[str]) -> None:
    """CLI sniff should print start row, row count, and mask positions."""
    exit_code = main(["sniff", str(delimited_fixture("masked_columns.csv"))])
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert output == ["start_row=0", "row_count=4", "columns=1,3"]


def test_cli_load_writes_npy_store(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """CLI load should create a store under the data root and print its shape."""
    args = [
        "--data-root",
        str(tmp_path),
        "load",
        str(delimited_fixture("row_ids.tsv")),
        "--delimiter",
        "\t",
        "--start-column",
        "1",
        "--name",
        "weights",
    ]

    exit_code = main(args)
    output = capsys.readouterr().out.strip().splitlines()

    store_path = tmp_path.resolve() / "stores" / "weights.npy"
    assert exit_code == 0
    assert output == [f"store_path={store_path}", "rows=3", "columns=2"]
    np.testing.assert_array_equal(np.load(store_path), [[0.5, 10.0], [0.25, 20.0], [0.125, 30.0]])


def test_cli_export_writes_delimited_text(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """CLI export should render a saved store with headers and format."""
    store_path = tmp_path / "points.npy"
    np.save(store_path, np.array([[1.0, 2.0], [3.5, 4.0]]))
    output_path = tmp_path / "points.csv"

    exit_code = main(
        [
            "export",
            str(store_path),
            "--output",
            str(output_path),
            "--format",
            "%.1f",
            "--header",
            "x",
            "--header",
            "y",
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == str(output_path)
    assert output_path.read_text() == "x,y\n1.0,2.0\n3.5,4.0\n"


def test_cli_sniff_propagates_no_data_error() -> None:
    """CLI sniff should surface the no-data failure for text-only files."""
    with pytest.raises(NoDataFoundError):
        main(["sniff", str(delimited_fixture("no_numeric.txt"))])

    assert True


def test_cli_failed_load_leaves_no_store_file(tmp_path: Path) -> None:
    """A load that fails mid-stream should not leave a zero-filled store behind."""
    source = tmp_path / "broken.csv"
    source.write_text("1,2\n3,4\n5,x\n")

    with pytest.raises(UnparseableValueError):
        main(["--data-root", str(tmp_path), "load", str(source)])

    assert not (tmp_path.resolve() / "stores" / "broken.npy").exists()


def test_cli_failed_sniff_keeps_previous_store(tmp_path: Path) -> None:
    """A load that fails before allocating should not delete an earlier store."""
    stores_dir = tmp_path.resolve() / "stores"
    stores_dir.mkdir()
    np.save(stores_dir / "points.npy", np.ones((2, 2)))
    source = tmp_path / "points.csv"
    source.write_text("1,2\n3\n")

    with pytest.raises(MalformedRowError):
        main(["--data-root", str(tmp_path), "load", str(source)])

    np.testing.assert_array_equal(np.load(stores_dir / "points.npy"), np.ones((2, 2)))
