"""Delimited text export.

This module renders coordinate stores back to line-oriented text
that the ingest layer can load again.
"""
