import itertools

import pytest

from driveway_calendar.models import SlotStatus
from helpers import make_slot


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


@pytest.fixture
def booked_monday():
    """A fully booked slot on Monday 2024-03-11."""
    return make_slot("booked", "2024-03-11", "10:00", "12:00", capacity=2, booked=2, status=SlotStatus.BOOKED)
