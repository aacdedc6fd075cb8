from driveway_calendar.models import Slot, SlotStatus


def make_slot(slot_id, date, start, end, capacity=1, booked=0, status=SlotStatus.AVAILABLE, **kwargs):
    return Slot(
        id=slot_id,
        date=date,
        start_time=start,
        end_time=end,
        capacity=capacity,
        booked=booked,
        status=status,
        **kwargs,
    )
