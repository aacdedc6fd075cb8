import logging
from typing import TYPE_CHECKING, Iterable, List

from driveway_calendar.errors import ValidationError
from driveway_calendar.models import Conflict, ConflictPartition, Slot, TimeRange

if TYPE_CHECKING:
    from driveway_calendar.store import SlotStore

logger = logging.getLogger(__name__)


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """Checks if two half-open time ranges overlap.

    Ranges that only touch (a.end == b.start) do not overlap.
    """
    return a.start < b.end and b.start < a.end


def find_conflicts(candidate: TimeRange, slots: Iterable[Slot]) -> List[Slot]:
    """Returns the active slots whose range overlaps the candidate.

    Cancelled slots never block; disabled slots still do.
    """
    return [slot for slot in slots if slot.is_active and overlaps(candidate, slot.time_range)]


def validate_batch(candidate: TimeRange | None, dates: Iterable[str]):
    """Rejects a batch before any conflict evaluation."""
    if candidate is None:
        raise ValidationError("Start and end time are required")
    if candidate.start >= candidate.end:
        raise ValidationError("End time must be after start time")
    if not list(dates):
        raise ValidationError("Select at least one date")


def resolve_conflicts(candidate: TimeRange, dates: Iterable[str], store: "SlotStore") -> ConflictPartition:
    """Partitions target dates into those the candidate fits on and those it collides with.

    Args:
        candidate: The time range to be created
        dates: Target date keys, evaluated in sorted order
        store: Current slots to check against

    Returns:
        ConflictPartition with applicable dates and one Conflict per blocked date
    """
    applicable: List[str] = []
    conflicting: List[Conflict] = []

    for date in sorted(set(dates)):
        blocking = find_conflicts(candidate, store.slots_on(date))
        if blocking:
            first = blocking[0]
            reason = f"Overlaps {first.status.value} slot {first.time_range.label}"
            if len(blocking) > 1:
                reason += f" and {len(blocking) - 1} more"
            conflicting.append(Conflict(date=date, reason=reason, slot_id=first.id))
            logger.debug(f"{date}: {candidate.label} conflicts with slot {first.id}")
        else:
            applicable.append(date)

    return ConflictPartition(applicable=applicable, conflicting=conflicting)
