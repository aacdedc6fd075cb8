import logging
from typing import AbstractSet, FrozenSet, Iterable, List

from driveway_calendar.models import CalendarGrid, DayCell

logger = logging.getLogger(__name__)

Selection = FrozenSet[str]

EMPTY: Selection = frozenset()


def booked_dates(grid: CalendarGrid) -> Selection:
    """Dates in the grid holding at least one booked slot."""
    return frozenset(cell.date for cell in grid.cells() if cell.is_booked)


def _selectable(cells: Iterable[DayCell]) -> List[str]:
    return [cell.date for cell in cells if not cell.is_booked]


def _toggle_group(selection: AbstractSet[str], group: List[str]) -> Selection:
    """All-or-nothing toggle: deselect the group if fully selected, otherwise fill it in."""
    if not group:
        return frozenset(selection)
    if all(date in selection for date in group):
        return frozenset(selection) - frozenset(group)
    return frozenset(selection) | frozenset(group)


def toggle_date(selection: AbstractSet[str], date: str, blocked: AbstractSet[str] = EMPTY) -> Selection:
    """Removes the date if selected, adds it otherwise. Blocked dates are never added."""
    if date in selection:
        return frozenset(selection) - {date}
    if date in blocked:
        logger.debug(f"Ignoring selection of booked date {date}")
        return frozenset(selection)
    return frozenset(selection) | {date}


def select_only(selection: AbstractSet[str], date: str, blocked: AbstractSet[str] = EMPTY) -> Selection:
    """Single-select mode: the clicked date replaces the whole selection."""
    if date in blocked:
        logger.debug(f"Ignoring selection of booked date {date}")
        return EMPTY
    return frozenset({date})


def toggle_row(selection: AbstractSet[str], grid: CalendarGrid, week_index: int) -> Selection:
    """Toggles every selectable date of one calendar week."""
    if not 0 <= week_index < len(grid.weeks):
        raise IndexError(f"Week {week_index} outside grid of {len(grid.weeks)} weeks")
    week = [cell for cell in grid.weeks[week_index] if cell is not None]
    return _toggle_group(selection, _selectable(week))


def toggle_column(selection: AbstractSet[str], grid: CalendarGrid, weekday_index: int) -> Selection:
    """Toggles every selectable date of the month falling on one weekday (Sunday = 0)."""
    if not 0 <= weekday_index <= 6:
        raise IndexError(f"Weekday {weekday_index} outside 0-6")
    column = [week[weekday_index] for week in grid.weeks if week[weekday_index] is not None]
    return _toggle_group(selection, _selectable(column))


def clear(selection: AbstractSet[str]) -> Selection:
    return EMPTY
