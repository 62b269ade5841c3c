"""
working_hours.py
----------------
Working-hours resolver: which [start, end) wall-clock intervals a staff member
is bookable on a given date, and the atomic replacement of a weekly schedule.

No rows for the weekday means "not working that day". There is no implicit
default availability.
"""

import logging
from datetime import date

from django.db import transaction

from staff.models import WorkingHours
from ..exceptions import ValidationError
from .slot_utils import intervals_overlap, weekday_index

logger = logging.getLogger(__name__)


def get_working_intervals(staff, day: date):
    """
    Ordered list of (start_time, end_time) `datetime.time` pairs for the
    weekday of 'day'. Accepts a Staff instance or a staff id.
    """
    staff_id = getattr(staff, "pk", staff)
    rows = WorkingHours.objects.filter(
        staff_id=staff_id,
        weekday=weekday_index(day),
    ).order_by("start_time")
    return [(row.start_time, row.end_time) for row in rows]


def validate_weekly_schedule(intervals):
    """
    intervals: iterable of dicts with weekday/start_time/end_time.
    Each interval must end after it starts and intervals on the same weekday
    must not overlap (touching is fine).
    """
    by_day = {}
    for item in intervals:
        weekday = item["weekday"]
        if not 0 <= weekday <= 6:
            raise ValidationError(f"Weekday must be between 0 (Sunday) and 6, got {weekday}.")
        if item["start_time"] >= item["end_time"]:
            raise ValidationError("Working hours must end after they start.")
        by_day.setdefault(weekday, []).append((item["start_time"], item["end_time"]))

    for weekday, rows in by_day.items():
        rows.sort()
        for (a_start, a_end), (b_start, b_end) in zip(rows, rows[1:]):
            if intervals_overlap(a_start, a_end, b_start, b_end):
                raise ValidationError(
                    f"Working hours overlap on weekday {weekday}: "
                    f"{a_start:%H:%M}-{a_end:%H:%M} and {b_start:%H:%M}-{b_end:%H:%M}."
                )


@transaction.atomic
def replace_working_hours(staff, intervals):
    """
    Replace the whole weekly schedule of 'staff' with 'intervals'.
    Existing appointments are not touched.
    """
    intervals = list(intervals)
    validate_weekly_schedule(intervals)

    WorkingHours.objects.filter(staff=staff).delete()
    WorkingHours.objects.bulk_create([
        WorkingHours(
            staff=staff,
            weekday=item["weekday"],
            start_time=item["start_time"],
            end_time=item["end_time"],
        )
        for item in intervals
    ])
    logger.info("Replaced working hours for staff %s (%d intervals)", staff.pk, len(intervals))
    return list(WorkingHours.objects.filter(staff=staff))
