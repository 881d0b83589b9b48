"""
daysum - a minimal personal time tracker.

Labelled checkpoints are kept in a flat binary timeline file, sorted by
timestamp. The time between two checkpoints is credited to the label of
the later one, and summaries add those durations up per label.
"""

__version__ = "0.1.0"
