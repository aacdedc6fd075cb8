from typing import Iterable, List

from driveway_calendar import config
from driveway_calendar.models import ApplyResult, CalendarGrid, DayCell, Slot, SlotStatus

STATUS_PREFIX = {
    SlotStatus.AVAILABLE: "[AVAILABLE]",
    SlotStatus.BOOKED: "[BOOKED]   ",
    SlotStatus.DISABLED: "[DISABLED] ",
    SlotStatus.CANCELLED: "[CANCELLED]",
}


def _cell_label(cell: DayCell | None) -> str:
    # Markers: * selected, ! booked, + has slots
    if cell is None:
        return "    "
    if cell.is_selected:
        marker = "*"
    elif cell.is_booked:
        marker = "!"
    elif cell.slots:
        marker = "+"
    else:
        marker = " "
    return f"{cell.day:>3}{marker}"


def render_month(grid: CalendarGrid) -> str:
    """Renders the grid as a fixed-width text calendar."""
    lines = [f"{config.MONTH_NAMES[grid.month]} {grid.year}".center(4 + 4 * 7).rstrip()]
    lines.append("    " + "".join(f"{name:>4}" for name in config.DAY_NAMES))
    for index, week in enumerate(grid.weeks):
        lines.append(f"W{index + 1:<3}" + "".join(_cell_label(cell) for cell in week).rstrip())
    return "\n".join(lines)


def format_slot(slot: Slot) -> str:
    line = (
        f"{STATUS_PREFIX[slot.status]} {slot.time_range.label} "
        f"{slot.available_spots}/{slot.capacity} free  id={slot.id}"
    )
    if slot.title:
        line += f"  {slot.title}"
    if slot.notes:
        line += f"  ({slot.notes})"
    if slot.cancellation_reason:
        line += f"  reason: {slot.cancellation_reason}"
    return line


def print_day_report(date: str, slots: Iterable[Slot]):
    """Prints the slots of one date to stdout."""
    slots = list(slots)
    print(f"\n--- Slots for {date} ---")
    for slot in slots:
        print(format_slot(slot))
    if not slots:
        print("No slots on this date.")


def summarize_apply(result: ApplyResult) -> List[str]:
    """Human readable lines describing a batch application."""
    if not result.ok:
        return [f"Error: {result.error}"]
    lines = [f"Added slot to {len(result.applied)} date(s)."]
    if result.conflicts:
        lines.append(f"{result.skipped_count} date(s) skipped due to conflicts:")
        lines.extend(f"  - {c.date}: {c.reason}" for c in result.conflicts)
    return lines
