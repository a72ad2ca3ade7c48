"""
Utility functions shared across the application.
"""

from .datetime_utils import (
    day_window,
    ensure_utc,
    get_current_timestamp,
    whole_minutes_between,
)

__all__ = [
    "get_current_timestamp",
    "ensure_utc",
    "day_window",
    "whole_minutes_between",
]
