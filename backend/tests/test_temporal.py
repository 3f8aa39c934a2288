"""
Tests for temporal.py - KST date references and timestamp parsing.
"""
import pytest
import sys
import os
from datetime import date, datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from temporal import KST, civil_date, combine_due, parse_timestamp, resolve_references


class TestResolveReferences:
    """Tests for relative date resolution."""

    def test_monday_references(self):
        """On a Monday, 'next Monday' is a week ahead."""
        refs = resolve_references(datetime(2026, 1, 5, 10, 0, tzinfo=KST))

        assert refs.today == date(2026, 1, 5)
        assert refs.tomorrow == date(2026, 1, 6)
        assert refs.day_after_tomorrow == date(2026, 1, 7)
        assert refs.this_friday == date(2026, 1, 9)
        assert refs.next_monday == date(2026, 1, 12)
        assert refs.day_name == "월"

    def test_friday_this_friday_is_next_week(self):
        """On a Friday, 'this Friday' means the following Friday."""
        refs = resolve_references(datetime(2026, 1, 9, 8, 0, tzinfo=KST))

        assert refs.this_friday == date(2026, 1, 16)
        assert refs.next_monday == date(2026, 1, 12)
        assert refs.day_name == "금"

    def test_sunday_references(self):
        """Sunday is index 0 in the day name table."""
        refs = resolve_references(datetime(2026, 1, 4, 23, 0, tzinfo=KST))

        assert refs.day_name == "일"
        assert refs.this_friday == date(2026, 1, 9)
        assert refs.next_monday == date(2026, 1, 5)

    def test_utc_instant_uses_kst_day(self):
        """16:00 UTC is already the next day in KST."""
        refs = resolve_references(datetime(2026, 1, 4, 16, 0, tzinfo=timezone.utc))

        assert refs.today == date(2026, 1, 5)
        assert refs.current_time == "01:00"

    def test_month_rollover(self):
        """Dates roll over month and year boundaries."""
        refs = resolve_references(datetime(2025, 12, 31, 12, 0, tzinfo=KST))

        assert refs.tomorrow == date(2026, 1, 1)
        assert refs.day_after_tomorrow == date(2026, 1, 2)

    def test_default_uses_wall_clock(self):
        """Without an explicit instant the current KST time is used."""
        refs = resolve_references()
        assert refs.now.utcoffset().total_seconds() == 9 * 3600


class TestParseTimestamp:
    """Tests for timestamp normalization."""

    def test_date_only_is_kst_midnight(self):
        parsed = parse_timestamp("2026-01-05")
        assert parsed == datetime(2026, 1, 5, 0, 0, tzinfo=KST)

    def test_zulu_suffix(self):
        parsed = parse_timestamp("2026-01-04T15:00:00Z")
        assert civil_date(parsed) == date(2026, 1, 5)
        assert parsed.hour == 0

    def test_naive_datetime_is_kst(self):
        parsed = parse_timestamp("2026-01-05T10:00:00")
        assert parsed == datetime(2026, 1, 5, 10, 0, tzinfo=KST)

    def test_blank_and_none(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("   ") is None

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("next tuesday")


class TestCombineDue:
    """Tests for merging a generated date and time."""

    def test_date_and_time(self):
        assert combine_due("2026-01-06", "15:00") == "2026-01-06T15:00:00+09:00"

    def test_date_without_time(self):
        assert combine_due("2026-01-06", None) == "2026-01-06T00:00:00+09:00"

    def test_no_date(self):
        assert combine_due(None, "09:00") is None
