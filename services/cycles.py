from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from services.dates import cycle_end, cycle_start, format_day, next_cycle_start, parse_day, previous_cycle_start
from services.errors import InvalidInputError

OVERALL = "overall"


@dataclass(frozen=True)
class CycleOption:
    value: str
    label: str
    start: date | None
    end: date | None
    is_current: bool = False
    is_overall: bool = False


def _label(start: date, end: date) -> str:
    return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"


def build_cycle_window(
    cycle_start_day: int,
    today=None,
    past_cycles: int = 11,
    future_cycles: int = 1,
    include_overall: bool = True,
) -> list[CycleOption]:
    """Cycles newest first: future ones, the current one, then ``past_cycles`` older ones.

    The synthetic overall option, when included, always sorts last.
    """
    today = parse_day(today or date.today())
    current = cycle_start(today, cycle_start_day)

    newest = current
    for _ in range(future_cycles):
        newest = next_cycle_start(newest, cycle_start_day)

    options = []
    start = newest
    for _ in range(future_cycles + 1 + past_cycles):
        end = cycle_end(start, cycle_start_day)
        options.append(
            CycleOption(
                value=format_day(start),
                label=_label(start, end),
                start=start,
                end=end,
                is_current=start == current,
            )
        )
        start = previous_cycle_start(start, cycle_start_day)

    if include_overall:
        options.append(CycleOption(value=OVERALL, label="Overall", start=None, end=None, is_overall=True))
    return options


def current_option(options: list[CycleOption]) -> CycleOption | None:
    return next((o for o in options if o.is_current), None)


def _real_index(options: list[CycleOption], selected: str) -> int | None:
    for idx, option in enumerate(options):
        if option.value == selected and not option.is_overall:
            return idx
    return None


def previous_cycle(options: list[CycleOption], selected: str) -> str | None:
    """Value of the next older cycle, or ``None`` at the oldest cycle or on overall."""
    idx = _real_index(options, selected)
    if idx is None:
        return None
    older = idx + 1
    if older >= len(options) or options[older].is_overall:
        return None
    return options[older].value


def next_cycle(options: list[CycleOption], selected: str) -> str | None:
    """Value of the next newer cycle, or ``None`` once the current cycle is reached."""
    idx = _real_index(options, selected)
    if idx is None or idx == 0 or options[idx].is_current:
        return None
    # Never step from the current cycle into the future ones.
    current = current_option(options)
    if current is not None and idx < options.index(current):
        return None
    return options[idx - 1].value


def cycle_bounds(selected: str, cycle_start_day: int) -> tuple[date | None, date | None]:
    """Resolve a selected option value into an inclusive ``(start, end)`` filter."""
    if selected == OVERALL:
        return None, None
    start = parse_day(selected)
    if cycle_start(start, cycle_start_day) != start:
        raise InvalidInputError(f"{selected} is not the start of a cycle beginning on day {cycle_start_day}")
    return start, cycle_end(start, cycle_start_day)
