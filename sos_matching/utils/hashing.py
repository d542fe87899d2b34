"""Deterministic fingerprints for match requests."""

import hashlib
import json
from typing import Any, Mapping


def hash_string(value: str) -> str:
    """SHA-256 hex digest of a string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def compute_request_fingerprint(payload: Mapping[str, Any]) -> str:
    """Fingerprint a request payload independent of key order.

    The payload is serialised as canonical JSON (sorted keys, no whitespace)
    before hashing, so two dicts with the same content produce the same
    digest.

    Args:
        payload: JSON-serialisable mapping, e.g. MatchRequest.model_dump()

    Returns:
        64-character hexadecimal SHA-256 digest
    """
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hash_string(canonical)
