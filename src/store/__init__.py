"""Coordinate storage layer.

This module provides fixed-shape numeric row/column stores and the
factories that allocate them in memory or as memory-mapped files.
"""
