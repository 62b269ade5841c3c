"""
time_off.py
-----------
Time-off filter: is a staff member blocked for a whole local day, and by
which TimeOff row.

TimeOff rows always span whole days, so this is a date-containment check
against [start_of_day, end_of_day], never a time-of-day check.
"""

from datetime import date

from staff.models import TimeOff
from ..exceptions import ValidationError
from .slot_utils import day_window, end_of_day, local_date, start_of_day


def normalize_time_off_bounds(starts_at, ends_at):
    """
    Widen caller-supplied instants (or dates) to whole local days:
    start -> 00:00:00.000 of its day, end -> 23:59:59.999 of its day.
    """
    if starts_at is None or ends_at is None:
        raise ValidationError("Time off needs both a start and an end.")
    start = start_of_day(starts_at)
    end = end_of_day(ends_at)
    if end < start:
        raise ValidationError("Time off must not end before it starts.")
    return start, end


def find_covering_time_off(staff, day: date):
    """
    The TimeOff covering 'day' for this staff member, or None.
    Accepts a Staff instance or a staff id.
    """
    staff_id = getattr(staff, "pk", staff)
    day_start, day_end = day_window(local_date(day))
    return (
        TimeOff.objects.filter(
            staff_id=staff_id,
            start_time__lt=day_end,
            end_time__gte=day_start,
        )
        .order_by("start_time")
        .first()
    )


def is_day_blocked(staff, day: date) -> bool:
    return find_covering_time_off(staff, day) is not None
