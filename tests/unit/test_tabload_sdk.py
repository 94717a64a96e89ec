"""Unit tests for the public SDK surface."""

from __future__ import annotations

from pathlib import Path

import tabload


def test_sdk_exports_resolve() -> None:
    """Every name in __all__ should be importable from the SDK module."""
    missing = [name for name in tabload.__all__ if not hasattr(tabload, name)]

    assert missing == []


def test_sdk_load_and_save_round_trip(tmp_path: Path) -> None:
    """The SDK should load text into a store and write it back out."""
    store = tabload.load_delimited(
        tabload.text_line_opener("a b\n1 2\n3 4\n"),
        tabload.InMemoryStoreFactory(),
        "pairs",
        tabload.LoadOptions(delimiter=" "),
    )

    output = tabload.save_delimited(tmp_path / "pairs.csv", store)

    assert output.read_text() == "1.0,2.0\n3.0,4.0\n"
