"""Utility functions for timestamps and request fingerprinting."""

from .hashing import compute_request_fingerprint, hash_string
from .timestamps import (
    ensure_utc,
    format_duration_hms,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    # Hashing
    "compute_request_fingerprint",
    "hash_string",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
    "parse_iso_datetime",
    "format_duration_hms",
]
