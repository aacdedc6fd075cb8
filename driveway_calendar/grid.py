import calendar
import logging
from typing import AbstractSet, List, Optional, Tuple

from driveway_calendar.models import CalendarGrid, DayCell
from driveway_calendar.store import SlotStore
from driveway_calendar.timeparse import date_key

logger = logging.getLogger(__name__)


def _check_month(month: int):
    if not 0 <= month <= 11:
        raise ValueError(f"Month must be 0-11, got {month}")


def days_in_month(year: int, month: int) -> int:
    """Number of days in a 0-based month."""
    _check_month(month)
    return calendar.monthrange(year, month + 1)[1]


def first_weekday(year: int, month: int) -> int:
    """Weekday index of day 1, with Sunday = 0."""
    _check_month(month)
    # calendar counts Monday as 0
    return (calendar.monthrange(year, month + 1)[0] + 1) % 7


def month_dates(year: int, month: int) -> List[str]:
    """All date keys of the month in order."""
    return [date_key(year, month, day) for day in range(1, days_in_month(year, month) + 1)]


def dates_on_weekday(year: int, month: int, weekday: int) -> List[str]:
    """Date keys of the month falling on the given Sunday-based weekday."""
    if not 0 <= weekday <= 6:
        raise ValueError(f"Weekday must be 0-6, got {weekday}")
    offset = (weekday - first_weekday(year, month)) % 7
    return [date_key(year, month, day) for day in range(1 + offset, days_in_month(year, month) + 1, 7)]


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Moves a (year, 0-based month) pair by delta months."""
    _check_month(month)
    total = year * 12 + month + delta
    return total // 12, total % 12


def build_calendar_grid(year: int, month: int, store: SlotStore, selection: AbstractSet[str]) -> CalendarGrid:
    """Projects a month into Sunday-first weeks of 7 cells, padding outside days with None."""
    weeks: List[Tuple[Optional[DayCell], ...]] = []
    current_week: List[Optional[DayCell]] = [None] * first_weekday(year, month)

    for day in range(1, days_in_month(year, month) + 1):
        key = date_key(year, month, day)
        current_week.append(
            DayCell(day=day, date=key, slots=store.slots_on(key), is_selected=key in selection)
        )
        if len(current_week) == 7:
            weeks.append(tuple(current_week))
            current_week = []

    if current_week:
        current_week.extend([None] * (7 - len(current_week)))
        weeks.append(tuple(current_week))

    logger.debug(f"Built grid for {year}-{month + 1:02d} with {len(weeks)} weeks")
    return CalendarGrid(year=year, month=month, weeks=tuple(weeks))
