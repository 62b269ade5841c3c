"""
availability_engine.py
----------------------
Computes bookable slots for a (date, service, optional staff) query by
combining:
1) the staff member's working intervals for that weekday,
2) whole-day time off (excludes the staff member for the date), and
3) existing active (PENDING/CONFIRMED) appointments.

Conflict rule: a slot [start, start + duration) is taken when it overlaps an
active appointment under the half-open rule in slot_utils.intervals_overlap,
so back-to-back appointments never conflict.

Reads here are not transactional. AppointmentManager re-checks at commit time.
"""

import logging
from datetime import date, timedelta

from django.conf import settings

from ..models import ACTIVE_STATUSES, Appointment, Service, Staff
from ..exceptions import ValidationError
from .lookups import get_or_not_found
from .slot_utils import at, day_window, generate_slots, intervals_overlap, local_date
from .time_off import is_day_blocked
from .working_hours import get_working_intervals

logger = logging.getLogger(__name__)


def _configured_step():
    return (getattr(settings, "SCHEDULING", {}) or {}).get("SLOT_STEP_MINUTES") or None


class AvailabilityEngine:
    def __init__(self, step_minutes=None):
        self.step_minutes = step_minutes if step_minutes is not None else _configured_step()

    # ---- candidate staff ----

    def candidate_staff(self, service):
        """Active staff qualified for 'service', in auto-assignment order (pk)."""
        return Staff.objects.filter(active=True, services=service).order_by("pk")

    def _is_candidate(self, staff, service) -> bool:
        return staff.active and staff.offers(service)

    # ---- appointments ----

    def active_appointments(self, staff, window_start, window_end, exclude_id=None):
        """Active appointments of 'staff' overlapping [window_start, window_end)."""
        qs = Appointment.objects.filter(
            staff=staff,
            status__in=ACTIVE_STATUSES,
            start_time__lt=window_end,
            end_time__gt=window_start,
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.order_by("start_time")

    def busy_intervals(self, staff_list, window_start, window_end, exclude_id=None):
        """Mapping of staff pk -> [(start, end), ...] of their active appointments."""
        busy = {s.pk: [] for s in staff_list}
        qs = Appointment.objects.filter(
            staff__in=list(staff_list),
            status__in=ACTIVE_STATUSES,
            start_time__lt=window_end,
            end_time__gt=window_start,
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        for staff_id, start, end in qs.values_list("staff_id", "start_time", "end_time"):
            busy.setdefault(staff_id, []).append((start, end))
        return busy

    def has_conflict(self, staff, start_time, end_time, exclude_id=None) -> bool:
        return self.active_appointments(staff, start_time, end_time, exclude_id).exists()

    # ---- schedule checks ----

    def is_within_schedule(self, staff, start_time, end_time) -> bool:
        """
        True when [start_time, end_time) sits inside one of the staff member's
        working intervals for that local day and the day isn't blocked by
        time off.
        """
        day = local_date(start_time)
        if local_date(end_time - timedelta(microseconds=1)) != day:
            return False
        if is_day_blocked(staff, day):
            return False
        for open_time, close_time in get_working_intervals(staff, day):
            if at(day, open_time) <= start_time and end_time <= at(day, close_time):
                return True
        return False

    # ---- slots ----

    def slots_for_staff(self, staff, service, day: date):
        """
        {slot_start: available} for one staff member on 'day', or None when
        the whole day is blocked by time off.
        """
        if is_day_blocked(staff, day):
            logger.debug("Staff %s is on time off on %s", staff.pk, day)
            return None

        intervals = get_working_intervals(staff, day)
        if not intervals:
            return {}

        duration = timedelta(minutes=service.duration_minutes)
        window_start, window_end = day_window(day)
        booked = [
            (a.start_time, a.end_time)
            for a in self.active_appointments(staff, window_start, window_end)
        ]

        slots = {}
        for open_time, close_time in intervals:
            for start in generate_slots(day, open_time, close_time,
                                        service.duration_minutes, self.step_minutes):
                end = start + duration
                taken = any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in booked)
                slots[start] = slots.get(start, False) or not taken
        return slots

    def get_available_slots(self, day: date, service, staff=None):
        """
        Ordered list of {"time": aware datetime, "available": bool}.

        With 'staff', only that staff member is considered. Without it, every
        active staff member qualified for the service is a candidate and a
        time is available when at least one of them is free. Past dates are
        allowed; date-range policy belongs to the caller.
        """
        service = get_or_not_found(Service, service)
        if not service.active:
            raise ValidationError("This service is not currently available.")

        if staff is not None:
            staff = get_or_not_found(Staff, staff)
            candidates = [staff] if self._is_candidate(staff, service) else []
        else:
            candidates = list(self.candidate_staff(service))

        merged = {}
        for member in candidates:
            member_slots = self.slots_for_staff(member, service, day)
            if not member_slots:
                continue
            for start, available in member_slots.items():
                merged[start] = merged.get(start, False) or available

        logger.debug(
            "Availability for service %s on %s: %d candidate staff, %d slots",
            service.pk, day, len(candidates), len(merged),
        )
        return [{"time": start, "available": merged[start]} for start in sorted(merged)]
