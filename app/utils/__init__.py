"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_naive_utc,
    ensure_utc,
    get_app_timezone,
    now_utc,
    parse_timestamp,
    to_app_timezone,
)

__all__ = [
    "ensure_naive_utc",
    "ensure_utc",
    "get_app_timezone",
    "now_utc",
    "parse_timestamp",
    "to_app_timezone",
]
