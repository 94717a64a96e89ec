"""Public SDK surface for Tabload.

This module provides a stable import path for library users.
It re-exports the loader, writer, progress, and store entry points.
"""

from __future__ import annotations

from core.config import TabloadConfig
from core.errors import (
    MalformedRowError,
    NoDataFoundError,
    TabloadCanceledError,
    TabloadError,
    TabloadIngestError,
    TabloadIOError,
    TruncatedRowError,
    UnparseableValueError,
)
from core.types import LoadOptions, SchemaInfo, WriteOptions
from export.tabular_writer import render_delimited_lines, save_delimited
from ingest.line_source import file_line_opener, text_line_opener
from ingest.schema_sniffer import sniff_schema
from ingest.streaming_loader import load_delimited, load_delimited_file
from progress.progress_tree import ProgressTree
from progress.task import LoggingTask, ProgressTask
from store.coordinate_store import ArrayCoordinateStore, CoordinateStore
from store.store_factory import InMemoryStoreFactory, MemmapStoreFactory, open_store

__all__ = [
    "ArrayCoordinateStore",
    "CoordinateStore",
    "InMemoryStoreFactory",
    "LoadOptions",
    "LoggingTask",
    "MalformedRowError",
    "MemmapStoreFactory",
    "NoDataFoundError",
    "ProgressTask",
    "ProgressTree",
    "SchemaInfo",
    "TabloadCanceledError",
    "TabloadConfig",
    "TabloadError",
    "TabloadIOError",
    "TabloadIngestError",
    "TruncatedRowError",
    "UnparseableValueError",
    "WriteOptions",
    "file_line_opener",
    "load_delimited",
    "load_delimited_file",
    "open_store",
    "render_delimited_lines",
    "save_delimited",
    "sniff_schema",
    "text_line_opener",
]
