import logging
from datetime import date
from typing import List

from driveway_calendar import report
from driveway_calendar.controller import AvailabilityController
from driveway_calendar.models import ApplyResult, OperationResult
from driveway_calendar.persist import JsonSlotBackend

logger = logging.getLogger(__name__)

SAVE_FAILED = "Failed to save slots. Changes were not written."


def open_session(path: str | None, year: int | None = None, month: int | None = None) -> AvailabilityController:
    """Opens an editing session on the JSON slots file, defaulting to the current month."""
    today = date.today()
    year = today.year if year is None else year
    month = today.month - 1 if month is None else month
    return AvailabilityController(year, month, backend=JsonSlotBackend(path))


def show(path: str | None = None, year: int | None = None, month: int | None = None):
    """Prints the month calendar and the slots of every date in it."""
    session = open_session(path, year, month)
    grid = session.grid()
    print(report.render_month(grid))
    for cell in grid.cells():
        if cell.slots:
            report.print_day_report(cell.date, cell.slots)


def apply(
    start: str,
    end: str,
    dates: List[str] | None = None,
    weekdays: List[int] | None = None,
    capacity: int | None = None,
    title: str | None = None,
    notes: str | None = None,
    path: str | None = None,
    year: int | None = None,
    month: int | None = None,
) -> ApplyResult:
    """Selects the requested dates and weekday columns, then batch-applies one slot to them."""
    session = open_session(path, year, month)
    session.set_multi_select(True)

    for date_str in dates or []:
        try:
            session.click_date(date_str)
        except ValueError as e:
            logger.error(f"Skipping date: {e}")
    for weekday in weekdays or []:
        session.click_column(weekday)

    logger.info(f"Applying {start}-{end} to {len(session.selection)} selected date(s)")
    result = session.apply_to_selected(start, end, capacity=capacity, title=title, notes=notes)
    for line in report.summarize_apply(result):
        print(line)

    if result.applied and not session.save():
        print(f"Error: {SAVE_FAILED}")
        return result.model_copy(update={"error": SAVE_FAILED})
    return result


def change_slot(action: str, date_str: str, slot_id: str, path: str | None = None, **kwargs) -> OperationResult:
    """Runs one lifecycle action (capacity, toggle, cancel, delete) against a saved slot."""
    session = open_session(path)
    if action == "capacity":
        result = session.edit_capacity(date_str, slot_id, kwargs["capacity"])
    elif action == "toggle":
        result = session.toggle_disable(date_str, slot_id)
    elif action == "cancel":
        result = session.cancel_slot(date_str, slot_id, kwargs.get("reason", ""))
    elif action == "delete":
        result = session.delete_slot(date_str, slot_id)
    else:
        raise ValueError(f"Unknown action: {action}")

    if result.ok and not session.save():
        result = OperationResult(ok=False, slot=result.slot, error=SAVE_FAILED)

    if result.ok:
        if result.slot is not None:
            print(report.format_slot(result.slot))
        else:
            print(f"Slot {slot_id} removed from {date_str}.")
    else:
        print(f"Error: {result.error}")
    return result
