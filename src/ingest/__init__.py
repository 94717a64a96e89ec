"""Delimited data ingestion.

This module sniffs the numeric shape of delimited text sources and
streams their data rows into fixed-shape coordinate stores.
"""
