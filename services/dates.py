"""Calendar arithmetic shared by budgeting cycles and recurring schedules.

Everything here works on calendar fields (``datetime.date``), never on
instants, so there is no time-of-day or timezone drift across day
boundaries.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from services.errors import InvalidInputError

ISO_FORMAT = "%Y-%m-%d"


def parse_day(value) -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string and return a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), ISO_FORMAT).date()
        except ValueError as exc:
            raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc
    raise InvalidInputError(f"Invalid date {value!r}")


def format_day(value: date) -> str:
    return value.strftime(ISO_FORMAT)


def shift_months(day: date, months: int, day_of_month: int | None = None) -> date:
    """Move ``day`` by whole calendar months, clamping to the target month.

    When ``day_of_month`` is given the result lands on that day (or the last
    day of the target month when it is shorter), otherwise the original day
    of month is kept under the same clamping rule: Jan 31 + 1 month is
    Feb 28 (Feb 29 in leap years).
    """
    return day + relativedelta(months=months, day=day_of_month)


def add_interval(day: date, unit: str, value: int) -> date:
    if value < 1:
        raise InvalidInputError("interval_value must be at least 1")
    if unit not in ("day", "week", "month", "year"):
        raise InvalidInputError(f"Unsupported interval unit {unit!r}")
    try:
        if unit == "day":
            return day + timedelta(days=value)
        if unit == "week":
            return day + timedelta(weeks=value)
        if unit == "month":
            return shift_months(day, value)
        return shift_months(day, 12 * value)
    except (OverflowError, ValueError) as exc:
        raise InvalidInputError(f"{value} {unit}(s) after {day} is outside the supported date range") from exc


def cycle_start(day, cycle_start_day: int) -> date:
    """Return the first day of the budgeting cycle that contains ``day``."""
    day = parse_day(day)
    candidate = shift_months(day, 0, cycle_start_day)
    if day.day < candidate.day:
        candidate = shift_months(day, -1, cycle_start_day)
    return candidate


def next_cycle_start(start: date, cycle_start_day: int) -> date:
    return shift_months(start, 1, cycle_start_day)


def previous_cycle_start(start: date, cycle_start_day: int) -> date:
    return shift_months(start, -1, cycle_start_day)


def cycle_end(start: date, cycle_start_day: int) -> date:
    # inclusive
    return next_cycle_start(start, cycle_start_day) - timedelta(days=1)
