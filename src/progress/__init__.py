"""Progress reporting layer.

This module turns nested step counts and fractions into throttled
progress values and forwards them to a task listener.
"""
