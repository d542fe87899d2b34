"""Tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from sos_matching.utils.timestamps import (
    ensure_utc,
    format_duration_hms,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)


class TestUtcHelpers:
    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo == timezone.utc

    def test_ensure_utc_treats_naive_as_utc(self):
        result = ensure_utc(datetime(2025, 1, 1, 12, 0))
        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offsets(self):
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2025, 1, 1, 14, 0, tzinfo=plus_two))
        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_ensure_utc_none(self):
        assert ensure_utc(None) is None


class TestFormatAndParse:
    def test_format_timestamp(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2025-11-04T12:00:00.123456Z"

    def test_format_timestamp_none(self):
        assert format_timestamp(None) is None

    def test_parse_round_trip_preserves_microseconds(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert parse_iso_datetime(format_timestamp(dt)) == dt

    def test_parse_with_offset(self):
        assert parse_iso_datetime("2025-11-04T14:00:00+02:00") == datetime(
            2025, 11, 4, 12, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", [None, "", "   ", "not-a-date"])
    def test_parse_invalid_returns_none(self, value):
        assert parse_iso_datetime(value) is None

    def test_storage_format_sorts_chronologically(self):
        earlier = format_timestamp(datetime(2025, 1, 1, 9, 59, 59, tzinfo=timezone.utc))
        later = format_timestamp(datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc))
        assert earlier < later


class TestFormatDurationHms:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (None, "00:00:00"),
            (0, "00:00:00"),
            (-5, "00:00:00"),
            (59.9, "00:00:59"),
            (3725.9, "01:02:05"),
            (90000, "25:00:00"),
        ],
    )
    def test_format(self, seconds, expected):
        assert format_duration_hms(seconds) == expected
