from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from driveway_calendar import config
from driveway_calendar.timeparse import format_time, parse_date_key, parse_time


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    DISABLED = "disabled"
    CANCELLED = "cancelled"


class TimeRange(BaseModel):
    """Half-open [start, end) range in minutes since midnight."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return parse_time(value)

    @model_validator(mode="after")
    def _check_order(self):
        if self.start >= self.end:
            raise ValueError(f"End time {format_time(self.end)} must be after start time {format_time(self.start)}")
        return self

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def label(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    date: str  # ISO format YYYY-MM-DD
    start_time: int  # minutes since midnight
    end_time: int
    capacity: int = Field(ge=1)
    booked: int = Field(default=0, ge=0)
    status: SlotStatus = SlotStatus.AVAILABLE
    title: str | None = None
    notes: str | None = None
    cancellation_reason: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return parse_date_key(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return parse_time(value)

    @model_validator(mode="after")
    def _check_invariants(self):
        if self.start_time >= self.end_time:
            raise ValueError("Slot start time must be before its end time")
        if self.booked > self.capacity:
            raise ValueError(f"Booked count {self.booked} exceeds capacity {self.capacity}")
        return self

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status != SlotStatus.CANCELLED

    @property
    def available_spots(self) -> int:
        if self.status in (SlotStatus.DISABLED, SlotStatus.CANCELLED):
            return 0
        return self.capacity - self.booked


class SlotTemplate(BaseModel):
    """Definition of a slot to be created on one or more dates."""

    model_config = ConfigDict(frozen=True)

    time_range: TimeRange
    capacity: int = Field(default_factory=lambda: config.DEFAULT_CAPACITY, ge=1, le=config.MAX_CAPACITY)
    title: str | None = None
    notes: str | None = None


class DayCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: int
    date: str
    slots: Tuple[Slot, ...] = ()
    is_selected: bool = False

    @property
    def is_booked(self) -> bool:
        """A date with any booked slot can never be selected."""
        return any(slot.status == SlotStatus.BOOKED for slot in self.slots)


class CalendarGrid(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int  # 0-based, 0 = January
    weeks: Tuple[Tuple[Optional[DayCell], ...], ...]

    def cells(self) -> Iterator[DayCell]:
        """Yields the non-padding cells in calendar order."""
        for week in self.weeks:
            for cell in week:
                if cell is not None:
                    yield cell


class Conflict(BaseModel):
    date: str
    reason: str
    slot_id: str | None = None


class ConflictPartition(BaseModel):
    applicable: List[str] = []
    conflicting: List[Conflict] = []


class ApplyResult(BaseModel):
    applied: List[Slot] = []
    conflicts: List[Conflict] = []
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def skipped_count(self) -> int:
        return len(self.conflicts)


class OperationResult(BaseModel):
    ok: bool
    slot: Slot | None = None
    error: str | None = None


class DayWindow(BaseModel):
    enabled: bool = False
    start: str = "09:00"  # raw input, normalized on use
    end: str = "17:00"

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)


def _default_week() -> Dict[str, DayWindow]:
    return {key: DayWindow() for key in config.WEEKDAY_KEYS}


class WeeklyAvailability(BaseModel):
    """Recurring weekly hours, keyed by lower-case weekday name."""

    days: Dict[str, DayWindow] = Field(default_factory=_default_week)

    @field_validator("days")
    @classmethod
    def _check_keys(cls, value: Dict[str, DayWindow]) -> Dict[str, DayWindow]:
        unknown = set(value) - set(config.WEEKDAY_KEYS)
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(sorted(unknown))}")
        return {key: value.get(key, DayWindow()) for key in config.WEEKDAY_KEYS}

    def enabled_windows(self) -> List[Tuple[int, TimeRange]]:
        """Returns (weekday index, range) pairs for enabled days, Sunday = 0."""
        return [
            (index, self.days[key].time_range)
            for index, key in enumerate(config.WEEKDAY_KEYS)
            if self.days[key].enabled
        ]
