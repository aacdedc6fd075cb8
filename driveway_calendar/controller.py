import logging
from typing import Callable, Iterable, List, Protocol

from pydantic import ValidationError as ModelValidationError

from driveway_calendar import config, selection
from driveway_calendar.conflicts import resolve_conflicts, validate_batch
from driveway_calendar.errors import AvailabilityError, ValidationError
from driveway_calendar.grid import build_calendar_grid, dates_on_weekday, shift_month
from driveway_calendar.models import (
    ApplyResult,
    CalendarGrid,
    Conflict,
    OperationResult,
    Slot,
    SlotTemplate,
    TimeRange,
    WeeklyAvailability,
)
from driveway_calendar.selection import Selection
from driveway_calendar.store import IdFactory, SlotStore, Snapshot
from driveway_calendar.timeparse import parse_date_key

logger = logging.getLogger(__name__)


class SlotBackend(Protocol):
    def load(self) -> SlotStore: ...

    def save(self, store: SlotStore) -> bool: ...


def _first_error(e: ModelValidationError) -> str:
    """Pulls a readable message out of a pydantic error."""
    errors = e.errors()
    if not errors:
        return str(e)
    return errors[0]["msg"].removeprefix("Value error, ")


def make_template(start, end, capacity: int | None = None, title: str | None = None, notes: str | None = None) -> SlotTemplate:
    """Normalizes raw form input into a SlotTemplate, raising ValidationError on bad input."""
    if start in (None, "") or end in (None, ""):
        raise ValidationError("Start and end time are required")
    try:
        time_range = TimeRange(start=start, end=end)
    except ModelValidationError as e:
        raise ValidationError(_first_error(e)) from e

    fields = {"time_range": time_range, "title": title or None, "notes": notes or None}
    if capacity is not None:
        fields["capacity"] = capacity
    try:
        return SlotTemplate(**fields)
    except ModelValidationError as e:
        raise ValidationError(f"Invalid capacity: {_first_error(e)}") from e


class AvailabilityController:
    """Editing session for one host calendar.

    Owns the visible month, the multi-select mode, the current selection and
    the slot store. Every store change replaces the store with a new value and
    hands a fresh snapshot to ``on_change``.
    """

    def __init__(
        self,
        year: int,
        month: int,
        store: SlotStore | None = None,
        backend: SlotBackend | None = None,
        on_change: Callable[[Snapshot], None] | None = None,
        id_factory: IdFactory | None = None,
    ):
        shift_month(year, month, 0)  # validates month
        self.year = year
        self.month = month
        self.multi_select = False
        self.backend = backend
        self.on_change = on_change
        self.id_factory = id_factory
        self._selection: Selection = selection.EMPTY
        if store is None:
            store = backend.load() if backend is not None else SlotStore()
        self._store = store

    # --- State views ---

    @property
    def store(self) -> SlotStore:
        return self._store

    @property
    def selection(self) -> Selection:
        return self._selection

    def selected_dates(self) -> List[str]:
        return sorted(self._selection)

    def grid(self) -> CalendarGrid:
        return build_calendar_grid(self.year, self.month, self._store, self._selection)

    def snapshot(self) -> Snapshot:
        return self._store.snapshot()

    def _set_store(self, store: SlotStore):
        self._store = store
        if self.on_change is not None:
            self.on_change(store.snapshot())

    def _blocked(self) -> Selection:
        return frozenset(self._store.booked_dates())

    # --- Navigation ---

    def navigate(self, year: int, month: int):
        shift_month(year, month, 0)
        self.year, self.month = year, month
        self._selection = selection.clear(self._selection)
        logger.debug(f"Navigated to {config.MONTH_NAMES[month]} {year}")

    def next_month(self):
        self.navigate(*shift_month(self.year, self.month, 1))

    def previous_month(self):
        self.navigate(*shift_month(self.year, self.month, -1))

    def set_multi_select(self, enabled: bool):
        self.multi_select = enabled
        self._selection = selection.clear(self._selection)
        logger.debug(f"Multi-select {'on' if enabled else 'off'}")

    # --- Selection ---

    def click_date(self, date: str) -> Selection:
        key = parse_date_key(date)
        if self.multi_select:
            self._selection = selection.toggle_date(self._selection, key, self._blocked())
        else:
            self._selection = selection.select_only(self._selection, key, self._blocked())
        return self._selection

    def click_week(self, week_index: int) -> Selection:
        if not self.multi_select:
            logger.debug("Week selection ignored outside multi-select mode")
            return self._selection
        self._selection = selection.toggle_row(self._selection, self.grid(), week_index)
        return self._selection

    def click_column(self, weekday_index: int) -> Selection:
        if not self.multi_select:
            logger.debug("Column selection ignored outside multi-select mode")
            return self._selection
        self._selection = selection.toggle_column(self._selection, self.grid(), weekday_index)
        return self._selection

    def clear_selection(self):
        self._selection = selection.clear(self._selection)

    # --- Slot creation ---

    def _apply(self, dates: Iterable[str], template: SlotTemplate) -> ApplyResult:
        dates = list(dates)
        try:
            validate_batch(template.time_range, dates)
        except ValidationError as e:
            return ApplyResult(error=str(e))

        partition = resolve_conflicts(template.time_range, dates, self._store)
        try:
            store, applied = self._store.apply_slot(partition.applicable, template, self.id_factory)
        except AvailabilityError as e:
            logger.error(f"Refused to apply {template.time_range.label}: {e}")
            return ApplyResult(conflicts=partition.conflicting, error=str(e))

        if applied:
            self._set_store(store)
            logger.info(f"Added {template.time_range.label} to {len(applied)} date(s)")
        if partition.conflicting:
            logger.warning(f"Skipped {len(partition.conflicting)} date(s) due to conflicts")
        return ApplyResult(applied=applied, conflicts=partition.conflicting)

    def apply_to_selected(
        self, start, end, capacity: int | None = None, title: str | None = None, notes: str | None = None
    ) -> ApplyResult:
        """Creates the same slot on every selected date that has room for it."""
        try:
            template = make_template(start, end, capacity, title, notes)
        except ValidationError as e:
            return ApplyResult(error=str(e))

        result = self._apply(self._selection, template)
        if result.applied:
            self._selection = selection.clear(self._selection)
        return result

    def quick_add(
        self, date: str, start, end, capacity: int | None = None, title: str | None = None, notes: str | None = None
    ) -> ApplyResult:
        """Adds a single slot on one date, checked for conflicts like a batch."""
        try:
            key = parse_date_key(date)
            template = make_template(start, end, capacity, title, notes)
        except (ValueError, ValidationError) as e:
            return ApplyResult(error=str(e))
        return self._apply([key], template)

    def apply_weekly_template(
        self, weekly: WeeklyAvailability, capacity: int | None = None, title: str | None = None
    ) -> ApplyResult:
        """Applies recurring weekday hours to every non-booked matching date of the visible month."""
        try:
            windows = weekly.enabled_windows()
        except ModelValidationError as e:
            return ApplyResult(error=_first_error(e))
        if not windows:
            return ApplyResult(error="Enable at least one weekday")

        blocked = self._blocked()
        store = self._store
        applied: List[Slot] = []
        conflicts: List[Conflict] = []
        for weekday, time_range in windows:
            try:
                template = make_template(time_range.start, time_range.end, capacity, title)
            except ValidationError as e:
                return ApplyResult(error=str(e))
            dates = [d for d in dates_on_weekday(self.year, self.month, weekday) if d not in blocked]
            partition = resolve_conflicts(template.time_range, dates, store)
            try:
                store, added = store.apply_slot(partition.applicable, template, self.id_factory)
            except AvailabilityError as e:
                logger.error(f"Refused weekly template for {config.DAY_NAMES[weekday]}: {e}")
                return ApplyResult(error=str(e))
            applied.extend(added)
            conflicts.extend(partition.conflicting)

        if applied:
            self._set_store(store)
            logger.info(f"Weekly template added {len(applied)} slot(s) in {config.MONTH_NAMES[self.month]} {self.year}")
        if conflicts:
            logger.warning(f"Weekly template skipped {len(conflicts)} date(s) due to conflicts")
        return ApplyResult(applied=applied, conflicts=conflicts)

    # --- Slot lifecycle ---

    def _run(self, action: str, date: str, slot_id: str, mutate: Callable[[SlotStore, str], SlotStore]) -> OperationResult:
        try:
            date = parse_date_key(date)
        except ValueError as e:
            return OperationResult(ok=False, error=str(e))
        try:
            store = mutate(self._store, date)
        except AvailabilityError as e:
            logger.warning(f"Refused to {action} slot {slot_id} on {date}: {e}")
            return OperationResult(ok=False, error=str(e))

        self._set_store(store)
        slot = next((s for s in store.slots_on(date) if s.id == slot_id), None)
        logger.info(f"Slot {slot_id} on {date}: {action} done")
        return OperationResult(ok=True, slot=slot)

    def edit_capacity(self, date: str, slot_id: str, capacity: int) -> OperationResult:
        return self._run("edit capacity of", date, slot_id, lambda s, d: s.edit_capacity(d, slot_id, capacity))

    def toggle_disable(self, date: str, slot_id: str) -> OperationResult:
        return self._run("toggle", date, slot_id, lambda s, d: s.toggle_disable(d, slot_id))

    def cancel_slot(self, date: str, slot_id: str, reason: str) -> OperationResult:
        result = self._run("cancel", date, slot_id, lambda s, d: s.cancel(d, slot_id, reason))
        if result.ok and result.slot is not None and result.slot.booked > 0:
            logger.info(f"Slot {slot_id} had {result.slot.booked} booking(s); holders must be notified")
        return result

    def delete_slot(self, date: str, slot_id: str) -> OperationResult:
        return self._run("delete", date, slot_id, lambda s, d: s.delete(d, slot_id))

    # --- Persistence ---

    def save(self) -> bool:
        """Flushes the store to the backend. Returns False if nothing was written."""
        if self.backend is None:
            logger.warning("No backend configured. Nothing saved.")
            return False
        if not self.backend.save(self._store):
            logger.error(f"Backend failed to save {len(self._store)} slot(s)")
            return False
        return True

    def load(self):
        """Re-seeds the session from the backend, dropping unsaved changes."""
        if self.backend is None:
            logger.warning("No backend configured. Nothing loaded.")
            return
        self._selection = selection.clear(self._selection)
        self._set_store(self.backend.load())
