"""
Tests for RFC-1123 date formatting and parsing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from azuredl.core.exceptions import MalformedDateError
from azuredl.core.rfc1123 import (
    DAY_NAMES,
    MONTH_NAMES,
    format_now,
    format_rfc1123,
    parse_rfc1123,
)


class TestFormat:
    """Test suite for format_rfc1123."""

    def test_format_utc(self):
        """Test formatting a UTC instant."""
        instant = datetime(2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc)

        assert format_rfc1123(instant) == "Tue, 03 Jun 2008 11:05:30 GMT"

    def test_format_zero_pads_fields(self):
        """Test that day, hour, minute and second are padded to two digits."""
        instant = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        assert format_rfc1123(instant) == "Thu, 02 Jan 2025 03:04:05 GMT"

    def test_format_always_emits_seconds(self):
        """Test that a zero second is still emitted."""
        instant = datetime(2025, 6, 3, 11, 5, tzinfo=timezone.utc)

        assert format_rfc1123(instant).endswith("11:05:00 GMT")

    def test_format_naive_is_utc(self):
        """Test that naive datetimes are treated as UTC."""
        instant = datetime(2008, 6, 3, 11, 5, 30)

        assert format_rfc1123(instant) == "Tue, 03 Jun 2008 11:05:30 GMT"

    def test_format_positive_offset(self):
        """Test formatting with a positive numeric offset."""
        instant = datetime(2008, 6, 3, 13, 5, 30, tzinfo=timezone(timedelta(hours=2)))

        assert format_rfc1123(instant) == "Tue, 03 Jun 2008 13:05:30 +0200"

    def test_format_negative_offset(self):
        """Test formatting with a negative offset including minutes."""
        instant = datetime(
            2008, 6, 3, 5, 35, 30,
            tzinfo=timezone(-timedelta(hours=5, minutes=30))
        )

        assert format_rfc1123(instant) == "Tue, 03 Jun 2008 05:35:30 -0530"

    @pytest.mark.parametrize("offset, expected", [
        (timedelta(seconds=-30), "Tue, 03 Jun 2008 11:05:30 GMT"),
        (timedelta(seconds=30), "Tue, 03 Jun 2008 11:04:30 GMT"),
        (-timedelta(hours=1, seconds=30), "Tue, 03 Jun 2008 12:05:30 GMT"),
    ])
    def test_format_sub_minute_offset_rendered_in_gmt(self, offset, expected):
        """Test that offsets with a seconds part are converted rather than rounded."""
        instant = datetime(2008, 6, 3, 11, 5, tzinfo=timezone(offset))

        assert format_rfc1123(instant) == expected
        assert parse_rfc1123(format_rfc1123(instant)) == instant

    def test_format_four_digit_year(self):
        """Test that years below 1000 keep four digits."""
        instant = datetime(1, 1, 1, tzinfo=timezone.utc)

        assert format_rfc1123(instant) == "Mon, 01 Jan 0001 00:00:00 GMT"

    def test_format_drops_microseconds(self):
        """Test that sub-second precision is not emitted."""
        instant = datetime(2008, 6, 3, 11, 5, 30, 999999, tzinfo=timezone.utc)

        assert format_rfc1123(instant) == "Tue, 03 Jun 2008 11:05:30 GMT"

    def test_format_uses_fixed_names(self):
        """Test that names come from the English tables."""
        assert DAY_NAMES[0] == "Mon"
        assert MONTH_NAMES[11] == "Dec"
        assert len(DAY_NAMES) == 7
        assert len(MONTH_NAMES) == 12

    def test_format_now_uses_clock(self):
        """Test format_now with an injected clock."""
        clock = lambda: datetime(2025, 6, 3, 11, 5, 30, tzinfo=timezone.utc)

        assert format_now(clock) == "Tue, 03 Jun 2025 11:05:30 GMT"

    def test_format_now_defaults_to_current_time(self):
        """Test that format_now without a clock returns a GMT timestamp."""
        text = format_now()

        assert text.endswith(" GMT")
        parsed = parse_rfc1123(text)
        assert abs((datetime.now(timezone.utc) - parsed).total_seconds()) < 5


class TestParse:
    """Test suite for parse_rfc1123."""

    def test_parse_basic(self):
        """Test parsing a full RFC-1123 string."""
        parsed = parse_rfc1123("Tue, 03 Jun 2008 11:05:30 GMT")

        assert parsed == datetime(2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_parse_single_digit_day(self):
        """Test that an unpadded day is accepted."""
        parsed = parse_rfc1123("Tue, 3 Jun 2008 11:05:30 GMT")

        assert parsed == datetime(2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc)
        assert format_rfc1123(parsed) == "Tue, 03 Jun 2008 11:05:30 GMT"

    def test_parse_without_day_of_week(self):
        """Test that the day-of-week is optional."""
        parsed = parse_rfc1123("03 Jun 2008 11:05:30 GMT")

        assert parsed == datetime(2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc)

    def test_parse_without_seconds(self):
        """Test that seconds are optional."""
        parsed = parse_rfc1123("Tue, 03 Jun 2008 11:05 GMT")

        assert parsed == datetime(2008, 6, 3, 11, 5, 0, tzinfo=timezone.utc)

    def test_parse_case_insensitive(self):
        """Test that names and zone are matched case-insensitively."""
        parsed = parse_rfc1123("TUE, 03 jUN 2008 11:05:30 gmt")

        assert parsed == datetime(2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc)

    def test_parse_offset_normalized_to_utc(self):
        """Test that numeric offsets are converted to UTC."""
        assert parse_rfc1123("Tue, 03 Jun 2008 13:05:30 +0200") == datetime(
            2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc
        )
        assert parse_rfc1123("Tue, 03 Jun 2008 09:35:30 -0130") == datetime(
            2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc
        )

    def test_parse_day_overflow_rolls_into_next_month(self):
        """Test lenient resolution of day 32."""
        parsed = parse_rfc1123("32 Jun 2008 00:00:00 GMT")

        assert parsed == datetime(2008, 7, 2, tzinfo=timezone.utc)

    def test_parse_day_overflow_checks_resolved_weekday(self):
        """Test that the day-of-week is checked against the resolved date."""
        assert parse_rfc1123("Wed, 32 Jun 2008 00:00:00 GMT") == datetime(
            2008, 7, 2, tzinfo=timezone.utc
        )

        with pytest.raises(MalformedDateError):
            parse_rfc1123("Tue, 32 Jun 2008 00:00:00 GMT")

    def test_parse_hour_24_rolls_into_next_day(self):
        """Test lenient resolution of 24:00."""
        parsed = parse_rfc1123("03 Jun 2008 24:00:00 GMT")

        assert parsed == datetime(2008, 6, 4, tzinfo=timezone.utc)

    def test_parse_leap_second_rolls_into_next_minute(self):
        """Test lenient resolution of second 60."""
        parsed = parse_rfc1123("Tue, 03 Jun 2008 11:05:60 GMT")

        assert parsed == datetime(2008, 6, 3, 11, 6, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text", [
        "Tue, 03 Jun 08 11:05:30 GMT",
        "Tue, 03 Jun 2008 11:05:30 EST",
        "Tue, 03 Jun 2008 11:05:30 UT",
        "Tue, 03 Jun 2008 11:05:30 Z",
        "Tue, 03 Foo 2008 11:05:30 GMT",
        "Xyz, 03 Jun 2008 11:05:30 GMT",
        "Mon, 03 Jun 2008 11:05:30 GMT",
        "Tue, 00 Jun 2008 11:05:30 GMT",
        "Tue, 03 Jun 2008 11:05:30 +2400",
        "Tue, 03 Jun 2008 11:05:30 +0260",
        "Tue, 03 Jun 2008 11:05:30",
        "Tue,03 Jun 2008 11:05:30 GMT",
        "00 Jan 0000 00:00:00 GMT",
        "01 Jan 0000 00:00:00 GMT",
        "31 Dec 9999 23:59:60 GMT",
        "",
        "2008-06-03T11:05:30Z",
    ])
    def test_parse_malformed(self, text):
        """Test that strings outside the grammar are rejected."""
        with pytest.raises(MalformedDateError):
            parse_rfc1123(text)

    def test_malformed_error_is_value_error(self):
        """Test that MalformedDateError carries the input text."""
        with pytest.raises(ValueError) as exc_info:
            parse_rfc1123("not a date")

        assert exc_info.value.text == "not a date"


class TestRoundTrip:
    """Test that parse(format(x)) reproduces x to the second."""

    @pytest.mark.parametrize("instant", [
        datetime(2008, 6, 3, 11, 5, 30, tzinfo=timezone.utc),
        datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc),
        datetime(1999, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        datetime(2000, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        datetime(1, 1, 1, tzinfo=timezone.utc),
        datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        datetime(2025, 6, 3, 11, 5, 30, 123456, tzinfo=timezone.utc),
    ])
    def test_round_trip(self, instant):
        """Test round trip for a range of instants."""
        assert parse_rfc1123(format_rfc1123(instant)) == instant.replace(microsecond=0)

    def test_round_trip_with_offset(self):
        """Test round trip of a non-UTC instant."""
        instant = datetime(2008, 6, 3, 13, 5, 30, tzinfo=timezone(timedelta(hours=2)))

        assert parse_rfc1123(format_rfc1123(instant)) == instant
