import os
import time
from datetime import datetime
from decimal import Decimal

import pytest

from invoice_desk.utils.money import format_money, parse_date_safe, to_number, today_start


@pytest.mark.parametrize(
    "value, expected",
    [
        (25000, Decimal(25000)),
        ("25000.50", Decimal("25000.50")),
        (" 12 ", Decimal(12)),
        (1.5, Decimal("1.5")),
        (None, Decimal(0)),
        ("", Decimal(0)),
        ("abc", Decimal(0)),
        ("NaN", Decimal(0)),
        (float("inf"), Decimal(0)),
        (True, Decimal(0)),
        ({"amount": 1}, Decimal(0)),
    ],
)
def test_to_number_never_raises(value, expected):
    assert to_number(value) == expected


@pytest.fixture
def west_of_utc(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_bare_date_keeps_its_calendar_day(west_of_utc):
    dt = parse_date_safe("2024-03-15")
    assert (dt.year, dt.month, dt.day) == (2024, 3, 15)
    assert (dt.hour, dt.minute) == (0, 0)


def test_bare_date_same_day_in_any_zone(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available on this platform")
    try:
        for tz in ("UTC", "America/Los_Angeles", "Asia/Jakarta", "Pacific/Kiritimati"):
            monkeypatch.setenv("TZ", tz)
            time.tzset()
            assert parse_date_safe("2024-03-15").date().isoformat() == "2024-03-15"
    finally:
        monkeypatch.undo()
        time.tzset()


def test_utc_timestamp_converted_to_local(west_of_utc):
    # midnight UTC is still the previous evening in New York
    dt = parse_date_safe("2024-03-15T00:00:00.000Z")
    assert dt.tzinfo is None
    assert (dt.month, dt.day, dt.hour) == (3, 14, 20)


@pytest.mark.parametrize("value", [None, "", "not a date", "2024-13-40"])
def test_unparsable_dates_are_none(value):
    assert parse_date_safe(value) is None


def test_today_start():
    assert today_start(datetime(2024, 3, 15, 17, 42, 9)) == datetime(2024, 3, 15)


def test_format_money():
    assert format_money(25000) == "Rp 25.000"
    assert format_money("1234567.4", "IDR") == "Rp 1.234.567"
    assert format_money(1234.5, "USD") == "$ 1,234.50"
    assert format_money(None) == "Rp 0"
    assert format_money(-5000) == "-Rp 5.000"
