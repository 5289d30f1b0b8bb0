from datetime import date

import pytest

from services.cycles import OVERALL, build_cycle_window, current_option, cycle_bounds, next_cycle, previous_cycle
from services.dates import cycle_start
from services.errors import InvalidInputError


def test_window_has_future_current_and_past_cycles():
    options = build_cycle_window(1, today=date(2024, 6, 10))
    real = [o for o in options if not o.is_overall]

    assert len(real) == 13
    assert real[0].value == "2024-07-01"
    assert real[1].value == "2024-06-01"
    assert real[-1].value == "2023-07-01"
    assert options[-1].value == OVERALL


def test_exactly_one_current_cycle():
    for today in (date(2024, 1, 1), date(2024, 2, 29), date(2024, 12, 31)):
        options = build_cycle_window(1, today=today)
        current = [o for o in options if o.is_current]
        assert len(current) == 1
        assert current[0].start == cycle_start(today, 1)


def test_window_reclamps_each_step():
    options = build_cycle_window(31, today=date(2024, 3, 5), past_cycles=2)
    assert [o.value for o in options if not o.is_overall] == ["2024-03-31", "2024-02-29", "2024-01-31", "2023-12-31"]
    assert options[1].label == "Feb 29 - Mar 30, 2024"
    assert options[1].is_current


def test_overall_is_never_current():
    options = build_cycle_window(5, today=date(2024, 6, 10))
    overall = options[-1]
    assert overall.is_overall
    assert not overall.is_current
    assert overall.start is None


def test_next_is_disabled_on_current_cycle():
    options = build_cycle_window(1, today=date(2024, 6, 10))
    current = current_option(options)
    assert next_cycle(options, current.value) is None
    assert next_cycle(options, "2024-07-01") is None
    assert next_cycle(options, "2024-05-01") == "2024-06-01"


def test_previous_stops_at_oldest_cycle():
    options = build_cycle_window(1, today=date(2024, 6, 10))
    assert previous_cycle(options, "2024-06-01") == "2024-05-01"
    assert previous_cycle(options, "2023-07-01") is None


def test_navigation_is_noop_on_overall():
    options = build_cycle_window(1, today=date(2024, 6, 10))
    assert previous_cycle(options, OVERALL) is None
    assert next_cycle(options, OVERALL) is None


def test_cycle_bounds():
    assert cycle_bounds("2024-01-31", 31) == (date(2024, 1, 31), date(2024, 2, 28))
    assert cycle_bounds(OVERALL, 31) == (None, None)
    with pytest.raises(InvalidInputError):
        cycle_bounds("2024-01-15", 31)
