"""Tests for half-open intervals and date/time parsing"""

from datetime import date, time

import pytest

from tableturn.booking.errors import ValidationError
from tableturn.booking.intervals import (
    TimeInterval,
    format_minutes,
    minutes_of,
    overlaps,
    parse_date,
    parse_time,
    to_time,
)


def test_touching_intervals_do_not_overlap():
    dinner = TimeInterval(18 * 60, 19 * 60 + 30)
    late = TimeInterval(19 * 60 + 30, 20 * 60 + 30)

    assert not overlaps(dinner, late)
    assert not overlaps(late, dinner)


def test_overlap_is_symmetric():
    a = TimeInterval.from_start(600, 120)
    b = TimeInterval.from_start(660, 30)

    assert overlaps(a, b)
    assert overlaps(b, a)


def test_contains_includes_edges():
    window = TimeInterval(9 * 60, 22 * 60)

    assert window.contains(TimeInterval(9 * 60, 22 * 60))
    assert window.contains(TimeInterval.from_start(20 * 60, 120))
    assert not window.contains(TimeInterval.from_start(21 * 60, 120))
    assert not window.contains(TimeInterval.from_start(8 * 60 + 59, 60))


def test_from_start_requires_positive_duration():
    with pytest.raises(ValidationError):
        TimeInterval.from_start(600, 0)

    with pytest.raises(ValidationError):
        TimeInterval.from_start(600, -30)


def test_str_formats_both_ends():
    assert str(TimeInterval.from_start(18 * 60, 90)) == "18:00-19:30"


@pytest.mark.parametrize("value,expected", [
    ("00:00", 0),
    ("09:05", 545),
    ("9:30", 570),
    ("23:59", 1439),
])
def test_parse_time(value, expected):
    assert parse_time(value) == expected


@pytest.mark.parametrize("value", ["24:00", "12:60", "1230", "noon", "", None, "12:5"])
def test_parse_time_rejects_malformed(value):
    with pytest.raises(ValidationError):
        parse_time(value)


def test_parse_date():
    assert parse_date("2030-06-03") == date(2030, 6, 3)


@pytest.mark.parametrize("value", ["2030-02-30", "2030/06/03", "03-06-2030", "tomorrow", None])
def test_parse_date_rejects_malformed(value):
    with pytest.raises(ValidationError):
        parse_date(value)


def test_minutes_round_trip_through_time():
    assert minutes_of(time(19, 45)) == 1185
    assert to_time(1185) == time(19, 45)
    assert format_minutes(1185) == "19:45"


def test_to_time_rejects_values_past_midnight():
    with pytest.raises(ValidationError):
        to_time(24 * 60)
