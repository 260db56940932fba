#!/usr/bin/env python3
"""
Tests for TemporalKey - the minute address every entry lives at

Tests cover:
- Canonical text form and parsing
- Calendar validation (leap years, month lengths, clock range)
- Chronological ordering
"""

from datetime import date, datetime

import pytest

from plantacerium.core.datashapes import TemporalKey, validate_clock_time
from plantacerium.core.errors import TemporalValidationError


class TestTemporalKeyBasics:
    """Construction and canonical form."""

    def test_canonical_is_zero_padded(self):
        """HAPPY PATH: canonical form is YYYY-MM-DD-HH-mm."""
        key = TemporalKey(2024, 3, 5, 7, 9)
        assert key.canonical() == "2024-03-05-07-09"
        assert str(key) == "2024-03-05-07-09"

    def test_parse_canonical(self):
        """HAPPY PATH: parse accepts what canonical produces."""
        key = TemporalKey.parse("2024-03-15-14-30")
        assert key == TemporalKey(2024, 3, 15, 14, 30)

    def test_parse_strips_whitespace(self):
        assert TemporalKey.parse("  2024-03-15-14-30\n") == TemporalKey(2024, 3, 15, 14, 30)

    def test_from_datetime_truncates_seconds(self):
        """HAPPY PATH: 14:30:59 belongs to minute 14:30."""
        key = TemporalKey.from_datetime(datetime(2024, 3, 15, 14, 30, 59, 999999))
        assert key == TemporalKey(2024, 3, 15, 14, 30)

    def test_of_and_views(self):
        key = TemporalKey.of(date(2024, 3, 15), 14, 30)
        assert key.date == date(2024, 3, 15)
        assert key.minute_of_day == 14 * 60 + 30
        assert key.to_datetime() == datetime(2024, 3, 15, 14, 30)

    def test_keys_are_hashable_and_frozen(self):
        key = TemporalKey(2024, 3, 15, 14, 30)
        assert {key: 1}[TemporalKey(2024, 3, 15, 14, 30)] == 1
        with pytest.raises(AttributeError):
            key.minute = 31


class TestTemporalKeyValidation:
    """Every field must name a real minute."""

    @pytest.mark.parametrize("fields", [
        (2024, 13, 1, 0, 0),
        (2024, 0, 1, 0, 0),
        (2024, 4, 31, 0, 0),
        (2023, 2, 29, 0, 0),
        (2024, 1, 1, 24, 0),
        (2024, 1, 1, 0, 60),
        (2024, 1, 1, -1, 0),
        (0, 1, 1, 0, 0),
    ])
    def test_invalid_fields_rejected(self, fields):
        """EDGE: out-of-range fields raise TemporalValidationError."""
        with pytest.raises(TemporalValidationError):
            TemporalKey(*fields)

    def test_leap_day_accepted(self):
        """EDGE: Feb 29 exists in leap years."""
        assert TemporalKey(2024, 2, 29, 23, 59).day == 29

    def test_bool_is_not_a_minute(self):
        """EDGE: True is an int subclass but never a valid field."""
        with pytest.raises(TemporalValidationError):
            TemporalKey(2024, 1, 1, 0, True)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            TemporalKey(2024, 1, 1, 25, 0)

    @pytest.mark.parametrize("text", [
        "2024-3-15-14-30",
        "2024-03-15 14:30",
        "2024-02-30-10-00",
        "",
        "not a key",
    ])
    def test_parse_rejects_bad_text(self, text):
        """EDGE: malformed text and impossible dates both fail."""
        with pytest.raises(TemporalValidationError):
            TemporalKey.parse(text)

    def test_parse_rejects_non_string(self):
        with pytest.raises(TemporalValidationError):
            TemporalKey.parse(202403151430)

    def test_validate_clock_time(self):
        assert validate_clock_time(23, 59) == (23, 59)
        with pytest.raises(TemporalValidationError):
            validate_clock_time(12, 75)


class TestTemporalKeyOrdering:
    """Sorting keys sorts them chronologically."""

    def test_sorted_is_chronological(self):
        keys = [
            TemporalKey(2024, 3, 15, 14, 30),
            TemporalKey(2023, 12, 31, 23, 59),
            TemporalKey(2024, 3, 15, 9, 0),
            TemporalKey(2024, 1, 1, 0, 0),
        ]
        assert [k.canonical() for k in sorted(keys)] == [
            "2023-12-31-23-59",
            "2024-01-01-00-00",
            "2024-03-15-09-00",
            "2024-03-15-14-30",
        ]

    def test_canonical_sort_matches_key_sort(self):
        keys = [TemporalKey(2024, m, 1, h, 0) for m in (11, 2) for h in (23, 4)]
        assert sorted(keys) == sorted(keys, key=lambda k: k.canonical())
