"""tagdiary - one diary entry per day, grouped by inline tags."""

__version__ = "0.1.0"
