from datetime import date, timedelta

import pytest

from services.dates import add_interval, cycle_end, cycle_start, next_cycle_start, parse_day, shift_months
from services.errors import InvalidInputError


def test_cycle_start_on_start_day_is_that_day():
    assert cycle_start(date(2024, 1, 31), 31) == date(2024, 1, 31)
    assert cycle_start(date(2024, 3, 15), 15) == date(2024, 3, 15)


def test_cycle_start_clamps_short_months():
    assert cycle_start(date(2024, 2, 15), 31) == date(2024, 1, 31)
    assert cycle_start(date(2024, 2, 29), 31) == date(2024, 2, 29)
    assert cycle_start(date(2023, 2, 28), 30) == date(2023, 2, 28)
    assert cycle_start(date(2024, 3, 1), 31) == date(2024, 2, 29)


def test_cycle_start_before_start_day_uses_previous_month():
    assert cycle_start(date(2024, 1, 10), 25) == date(2023, 12, 25)
    assert cycle_start("2024-05-24", 25) == date(2024, 4, 25)


def test_cycle_start_is_idempotent_and_contains_day():
    day = date(2023, 1, 1)
    while day < date(2025, 1, 1):
        for start_day in (1, 15, 28, 29, 30, 31):
            start = cycle_start(day, start_day)
            assert cycle_start(start, start_day) == start
            assert start <= day < next_cycle_start(start, start_day)
        day += timedelta(days=3)


def test_cycle_end_is_day_before_next_start():
    assert cycle_end(date(2024, 1, 31), 31) == date(2024, 2, 28)
    assert cycle_end(date(2024, 2, 1), 1) == date(2024, 2, 29)


def test_shift_months_clamps_day():
    assert shift_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert shift_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert shift_months(date(2024, 3, 31), -1, 31) == date(2024, 2, 29)
    assert shift_months(date(2024, 2, 29), 1, 31) == date(2024, 3, 31)


def test_add_interval_units():
    start = date(2024, 1, 31)
    assert add_interval(start, "day", 3) == date(2024, 2, 3)
    assert add_interval(start, "week", 2) == date(2024, 2, 14)
    assert add_interval(start, "month", 1) == date(2024, 2, 29)
    assert add_interval(date(2024, 2, 29), "year", 1) == date(2025, 2, 28)


def test_add_interval_rejects_bad_input():
    with pytest.raises(InvalidInputError):
        add_interval(date(2024, 1, 1), "fortnight", 1)
    with pytest.raises(InvalidInputError):
        add_interval(date(2024, 1, 1), "day", 0)


def test_add_interval_out_of_date_range_is_invalid_input():
    with pytest.raises(InvalidInputError):
        add_interval(date(2024, 1, 1), "year", 10000)
    with pytest.raises(InvalidInputError):
        add_interval(date(2024, 1, 1), "day", 10**9)
    with pytest.raises(InvalidInputError):
        add_interval(date(9999, 12, 1), "month", 1)


def test_parse_day_accepts_strings_only_in_iso_format():
    assert parse_day("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(InvalidInputError):
        parse_day("29/02/2024")
