# Exceptions raised by the slot store and surfaced by the controller as structured results.


class AvailabilityError(Exception):
    """Base class for refused calendar operations."""


class ValidationError(AvailabilityError):
    """
    User input that cannot be applied as given. Recoverable, shown to the user.
    Raised for:
        1. Missing start or end time
        2. End time not after start time
        3. Empty date selection for a batch
        4. Capacity below one, or a blank cancellation reason
    """


class InvariantViolation(AvailabilityError):
    """
    An operation that would break a slot lifecycle rule: deleting a booked slot,
    lowering capacity below the booked count, or re-opening a cancelled slot.
    The store is left unchanged.
    """


class SlotNotFoundError(AvailabilityError, LookupError):
    """No slot with the given id exists on the given date."""

    def __init__(self, date: str, slot_id: str):
        super().__init__(f"No slot {slot_id} on {date}")
        self.date = date
        self.slot_id = slot_id
