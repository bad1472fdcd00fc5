"""Tests for business hours resolution"""

from datetime import date, time

import pytest

from tableturn.booking.errors import ClosedDay, OutsideBusinessHours
from tableturn.booking.hours import BusinessHoursResolver
from tableturn.booking.intervals import TimeInterval
from tableturn.models.restaurant import BusinessHours

MONDAY = date(2030, 6, 3)
TUESDAY = date(2030, 6, 4)
WEDNESDAY = date(2030, 6, 5)
SUNDAY = date(2030, 6, 9)


def row(weekday, open_time, close_time, is_open=True):
    return BusinessHours(weekday=weekday, open_time=open_time, close_time=close_time, is_open=is_open)


@pytest.fixture
def resolver():
    return BusinessHoursResolver([
        row(0, time(9, 0), time(22, 0)),
        row(1, time(9, 0), time(22, 0), is_open=False),
        row(2, time(18, 0), time(17, 0)),
        row(6, time(10, 0), time(21, 0)),
    ])


def test_resolves_weekday_monday_first(resolver):
    hours = resolver.resolve(MONDAY)

    assert hours.is_open
    assert hours.day_name == "monday"
    assert (hours.open, hours.close) == (540, 1320)
    assert hours.as_dict() == {"open": "09:00", "close": "22:00", "is_open": True}

    sunday = resolver.resolve(SUNDAY)
    assert sunday.day_name == "sunday"
    assert sunday.open == 600


def test_closed_flag_resolves_closed(resolver):
    hours = resolver.resolve(TUESDAY)

    assert not hours.is_open
    assert hours.window is None
    assert hours.as_dict() == {"is_open": False}


def test_inverted_window_resolves_closed(resolver):
    assert not resolver.resolve(WEDNESDAY).is_open


def test_missing_row_resolves_closed(resolver):
    assert not resolver.resolve(date(2030, 6, 6)).is_open


def test_require_window_accepts_interval_ending_at_close(resolver):
    hours = resolver.require_window(MONDAY, TimeInterval.from_start(20 * 60, 120))
    assert hours.is_open


def test_require_window_raises_closed_day(resolver):
    with pytest.raises(ClosedDay) as exc_info:
        resolver.require_window(TUESDAY, TimeInterval.from_start(12 * 60, 60))

    assert not isinstance(exc_info.value, OutsideBusinessHours)
    assert exc_info.value.details["day_name"] == "tuesday"


def test_require_window_raises_outside_hours(resolver):
    with pytest.raises(OutsideBusinessHours) as exc_info:
        resolver.require_window(MONDAY, TimeInterval.from_start(21 * 60, 120))

    assert exc_info.value.details["business_hours"]["close"] == "22:00"

    with pytest.raises(OutsideBusinessHours):
        resolver.require_window(MONDAY, TimeInterval.from_start(8 * 60, 90))
