from datetime import date

import pytest

from driveway_calendar import timeparse


def test_parse_24_hour():
    assert timeparse.parse_time("09:00") == 540
    assert timeparse.parse_time("9:00") == 540
    assert timeparse.parse_time("17:30") == 1050
    assert timeparse.parse_time("00:00") == 0
    assert timeparse.parse_time("24:00") == 1440


def test_parse_12_hour():
    assert timeparse.parse_time("9:00 AM") == 540
    assert timeparse.parse_time("9 am") == 540
    assert timeparse.parse_time("5:00 PM") == 1020
    assert timeparse.parse_time("5:15 p.m.") == 1035
    assert timeparse.parse_time("10:00PM") == 1320


def test_parse_noon_and_midnight():
    assert timeparse.parse_time("12:00 PM") == 720
    assert timeparse.parse_time("12:00 AM") == 0
    assert timeparse.parse_time("12:30 am") == 30


def test_parse_minutes_passthrough():
    assert timeparse.parse_time(0) == 0
    assert timeparse.parse_time(1440) == 1440


@pytest.mark.parametrize("value", ["", "  ", "25:00", "13:00 PM", "0:00 AM", "9:60", "noon", "24:30", -5, 1441, True, None])
def test_parse_rejects_invalid(value):
    with pytest.raises(ValueError):
        timeparse.parse_time(value)


def test_ordering_is_numeric_not_lexical():
    """'9:00 AM' sorts before '10:00 AM' once normalized, unlike the raw strings."""
    assert "9:00 AM" > "10:00 AM"
    assert timeparse.parse_time("9:00 AM") < timeparse.parse_time("10:00 AM")


def test_format_time():
    assert timeparse.format_time(540) == "09:00"
    assert timeparse.format_time(1035) == "17:15"
    assert timeparse.format_time(1440) == "24:00"


def test_date_key_uses_zero_based_month():
    assert timeparse.date_key(2024, 2, 1) == "2024-03-01"
    assert timeparse.date_key(2024, 11, 31) == "2024-12-31"


def test_parse_date_key():
    assert timeparse.parse_date_key("2024-03-01") == "2024-03-01"
    assert timeparse.parse_date_key(" 2024-3-1 ") == "2024-03-01"
    assert timeparse.parse_date_key(date(2024, 3, 1)) == "2024-03-01"

    with pytest.raises(ValueError):
        timeparse.parse_date_key("01.03.2024")
    with pytest.raises(ValueError):
        timeparse.parse_date_key("2024-02-30")
