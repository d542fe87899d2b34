"""Soft checks on raw configuration that warn rather than fail."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect a raw configuration dict for settings that are legal but suspicious.

    Args:
        config_dict: Raw configuration dictionary (before validation)

    Returns:
        List of warning messages
    """
    warning_messages = []

    matching = config_dict.get("matching") or {}
    if isinstance(matching, dict):
        threshold = matching.get("score_threshold")
        if isinstance(threshold, (int, float)) and threshold > 9:
            warning_messages.append(
                f"score_threshold {threshold} leaves little headroom below the 10.0 cap; "
                "most skill candidates will be discarded"
            )

        radius = matching.get("max_radius_km")
        if isinstance(radius, (int, float)) and radius > 500:
            warning_messages.append(
                f"max_radius_km {radius} is very large; distance will barely affect scores"
            )

        max_matches = matching.get("max_matches_per_request")
        if isinstance(max_matches, int) and max_matches > 100:
            warning_messages.append(
                f"max_matches_per_request {max_matches} will notify a large number of volunteers "
                "for every SOS"
            )

        if matching.get("dedupe_requests") is False:
            warning_messages.append(
                "dedupe_requests is disabled; concurrent triggers for the same request "
                "can create duplicate matches"
            )

    http = config_dict.get("http") or {}
    if isinstance(http, dict):
        timeout = http.get("request_timeout")
        if isinstance(timeout, (int, float)) and timeout > 30:
            warning_messages.append(
                f"http.request_timeout {timeout}s may stall matching when a registry hangs"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
