import logging
import uuid
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Set, Tuple

from pydantic import TypeAdapter
from pydantic import ValidationError as ModelValidationError

from driveway_calendar import config
from driveway_calendar.conflicts import find_conflicts
from driveway_calendar.errors import InvariantViolation, SlotNotFoundError, ValidationError
from driveway_calendar.models import Slot, SlotStatus, SlotTemplate
from driveway_calendar.timeparse import parse_date_key

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]
Snapshot = Dict[str, List[Slot]]

_capacity_adapter = TypeAdapter(int)


def new_slot_id() -> str:
    return uuid.uuid4().hex


class SlotStore:
    """Immutable per-date collection of slots.

    Slots on a date keep creation order. Every mutating method returns a new
    store and leaves the receiver untouched, so a rejected operation can never
    leave partial changes behind.
    """

    def __init__(self, slots: Mapping[str, Iterable[Slot]] | None = None):
        self._slots: Dict[str, Tuple[Slot, ...]] = {}
        for date, day_slots in (slots or {}).items():
            day_slots = tuple(day_slots)
            if day_slots:
                self._slots[parse_date_key(date)] = day_slots

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Iterable]) -> "SlotStore":
        """Seeds a store from external records, either Slot objects or plain dicts."""
        slots: Dict[str, List[Slot]] = {}
        for date, records in data.items():
            key = parse_date_key(date)
            day_slots = []
            for record in records:
                slot = record if isinstance(record, Slot) else Slot.model_validate({**record, "date": key})
                if slot.date != key:
                    raise ValueError(f"Slot {slot.id} dated {slot.date} filed under {key}")
                if any(existing.id == slot.id for existing in day_slots):
                    raise ValueError(f"Duplicate slot id {slot.id} on {key}")
                day_slots.append(slot)
            slots[key] = day_slots
        return cls(slots)

    # --- Queries ---

    def slots_on(self, date: str) -> Tuple[Slot, ...]:
        return self._slots.get(date, ())

    def get(self, date: str, slot_id: str) -> Slot:
        for slot in self.slots_on(date):
            if slot.id == slot_id:
                return slot
        raise SlotNotFoundError(date, slot_id)

    def dates(self) -> List[str]:
        return sorted(self._slots)

    def booked_dates(self) -> Set[str]:
        return {
            date
            for date, day_slots in self._slots.items()
            if any(slot.status == SlotStatus.BOOKED for slot in day_slots)
        }

    def all_slots(self) -> Iterator[Slot]:
        for date in self.dates():
            yield from self._slots[date]

    def snapshot(self) -> Snapshot:
        """A fresh dict of fresh lists; slots themselves are frozen."""
        return {date: list(self._slots[date]) for date in self.dates()}

    def __len__(self) -> int:
        return sum(len(day_slots) for day_slots in self._slots.values())

    def __eq__(self, other) -> bool:
        if not isinstance(other, SlotStore):
            return NotImplemented
        return self._slots == other._slots

    def __repr__(self) -> str:
        return f"SlotStore({len(self)} slots on {len(self._slots)} dates)"

    # --- Mutations ---

    def _with_day(self, date: str, day_slots: Iterable[Slot]) -> "SlotStore":
        updated = dict(self._slots)
        updated[date] = tuple(day_slots)
        if not updated[date]:
            del updated[date]
        return SlotStore(updated)

    def _replace(self, date: str, slot: Slot) -> "SlotStore":
        return self._with_day(date, [slot if s.id == slot.id else s for s in self.slots_on(date)])

    def _synthesize(self, date: str, template: SlotTemplate, id_factory: IdFactory, taken: Set[str]) -> Slot:
        slot_id = id_factory()
        while slot_id in taken:
            slot_id = id_factory()
        return Slot(
            id=slot_id,
            date=date,
            start_time=template.time_range.start,
            end_time=template.time_range.end,
            capacity=template.capacity,
            booked=0,
            status=SlotStatus.AVAILABLE,
            title=template.title,
            notes=template.notes,
        )

    def apply_slot(
        self, dates: Iterable[str], template: SlotTemplate, id_factory: IdFactory | None = None
    ) -> Tuple["SlotStore", List[Slot]]:
        """Appends one new available slot per date, keeping existing slots.

        Dates must already be conflict-free; an overlap with an active slot is
        refused for the whole call.
        """
        id_factory = id_factory or new_slot_id
        updated = dict(self._slots)
        applied: List[Slot] = []

        for date in sorted(set(dates)):
            key = parse_date_key(date)
            existing = updated.get(key, ())
            blocking = find_conflicts(template.time_range, existing)
            if blocking:
                raise InvariantViolation(
                    f"Slot {template.time_range.label} on {key} overlaps existing slot {blocking[0].id}"
                )
            slot = self._synthesize(key, template, id_factory, {s.id for s in existing})
            updated[key] = existing + (slot,)
            applied.append(slot)

        return SlotStore(updated), applied

    def add_slot(self, date: str, template: SlotTemplate, id_factory: IdFactory | None = None) -> Tuple["SlotStore", Slot]:
        """Single-date quick add."""
        store, applied = self.apply_slot([date], template, id_factory)
        return store, applied[0]

    def edit_capacity(self, date: str, slot_id: str, capacity: int) -> "SlotStore":
        slot = self.get(date, slot_id)
        try:
            capacity = _capacity_adapter.validate_python(capacity)
        except ModelValidationError as e:
            raise ValidationError(f"Capacity must be a whole number, got {capacity!r}") from e
        if capacity < 1:
            raise ValidationError("Capacity must be at least 1")
        if capacity > config.MAX_CAPACITY:
            raise ValidationError(f"Capacity cannot exceed {config.MAX_CAPACITY}")
        if slot.status == SlotStatus.CANCELLED:
            raise InvariantViolation(f"Slot {slot_id} is cancelled and cannot be edited")
        if capacity < slot.booked:
            raise InvariantViolation(f"Capacity {capacity} is below the {slot.booked} spot(s) already booked")
        return self._replace(date, Slot.model_validate({**slot.model_dump(), "capacity": capacity}))

    def toggle_disable(self, date: str, slot_id: str) -> "SlotStore":
        slot = self.get(date, slot_id)
        if slot.status == SlotStatus.AVAILABLE:
            new_status = SlotStatus.DISABLED
        elif slot.status == SlotStatus.DISABLED:
            new_status = SlotStatus.AVAILABLE
        else:
            raise InvariantViolation(f"Slot {slot_id} is {slot.status.value} and cannot be enabled or disabled")
        return self._replace(date, slot.model_copy(update={"status": new_status}))

    def cancel(self, date: str, slot_id: str, reason: str) -> "SlotStore":
        slot = self.get(date, slot_id)
        if not reason or not reason.strip():
            raise ValidationError("A cancellation reason is required")
        if slot.status == SlotStatus.CANCELLED:
            raise InvariantViolation(f"Slot {slot_id} is already cancelled")
        return self._replace(
            date,
            slot.model_copy(update={"status": SlotStatus.CANCELLED, "cancellation_reason": reason.strip()}),
        )

    def delete(self, date: str, slot_id: str) -> "SlotStore":
        """Removes a slot. Booked slots must be cancelled first."""
        slot = self.get(date, slot_id)
        if slot.status == SlotStatus.BOOKED:
            raise InvariantViolation(f"Slot {slot_id} is booked and cannot be deleted. Cancel it first.")
        if slot.status == SlotStatus.DISABLED:
            raise InvariantViolation(f"Slot {slot_id} is disabled. Enable or cancel it before deleting.")
        if slot.status == SlotStatus.AVAILABLE and slot.booked > 0:
            raise InvariantViolation(f"Slot {slot_id} has {slot.booked} booking(s). Cancel it first.")
        return self._with_day(date, [s for s in self.slots_on(date) if s.id != slot_id])
