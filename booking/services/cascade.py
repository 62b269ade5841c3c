"""
cascade.py
----------
Cross-aggregate effects of administrative schedule changes:

- delete_staff: future active appointments of the staff member become
  RESCHEDULE_PENDING with no staff, then the Staff row is deleted.
- create_time_off / update_time_off: active appointments overlapping the
  (whole-day) time-off window become RESCHEDULE_PENDING; staff is kept.

Each triggering write and its dependent updates run in one transaction. Any
database failure rolls the whole thing back and surfaces as OperationFailed.
Terminal appointments are never touched, so running a cascade twice is safe.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from staff.models import TimeOff
from ..models import ACTIVE_STATUSES, RESCHEDULE_PENDING, Appointment, Staff
from ..exceptions import NotFound, OperationFailed, ValidationError
from .time_off import normalize_time_off_bounds

logger = logging.getLogger(__name__)


def _valid_time_off_type(value):
    valid = {choice for choice, _label in TimeOff.TYPE_CHOICES}
    if value not in valid:
        raise ValidationError(
            f"Time off type must be one of {', '.join(sorted(valid))}; got {value!r}."
        )
    return value


class CascadeCoordinator:

    def _lock_staff(self, staff_id):
        try:
            return Staff.objects.select_for_update().get(pk=staff_id)
        except Staff.DoesNotExist:
            raise NotFound(f"Staff {staff_id} not found.")

    def _flag_time_off_conflicts(self, staff, start, end):
        """
        Mark active appointments of 'staff' overlapping [start, end] as
        RESCHEDULE_PENDING. Partial overlaps (e.g. across midnight) count.
        """
        qs = Appointment.objects.filter(
            staff=staff,
            status__in=ACTIVE_STATUSES,
            start_time__lte=end,
            end_time__gt=start,
        )
        return qs.update(status=RESCHEDULE_PENDING, updated_at=timezone.now())

    def delete_staff(self, staff) -> int:
        """
        Delete a staff member. Returns the number of future appointments
        moved to RESCHEDULE_PENDING. Past appointments keep their status.
        """
        staff_id = staff.pk
        try:
            with transaction.atomic():
                locked = self._lock_staff(staff_id)
                affected = Appointment.objects.filter(
                    staff=locked,
                    start_time__gte=timezone.now(),
                    status__in=ACTIVE_STATUSES,
                ).update(status=RESCHEDULE_PENDING, staff=None, updated_at=timezone.now())
                locked.delete()
        except DatabaseError as exc:
            logger.exception("Deleting staff %s failed; rolled back", staff_id)
            raise OperationFailed("Deleting the staff member failed and was rolled back.") from exc

        logger.info("Deleted staff %s; %d appointment(s) need rescheduling", staff_id, affected)
        return affected

    def create_time_off(self, staff, type, starts_at, ends_at, reason=""):
        """
        Record whole-day time off and flag the appointments it covers.
        The TimeOff is created whether or not anything conflicts.

        Returns:
            (TimeOff, affected_count)
        """
        _valid_time_off_type(type)
        start, end = normalize_time_off_bounds(starts_at, ends_at)

        try:
            with transaction.atomic():
                locked = self._lock_staff(staff.pk)
                time_off = TimeOff.objects.create(
                    staff=locked,
                    type=type,
                    start_time=start,
                    end_time=end,
                    reason=reason or "",
                )
                affected = self._flag_time_off_conflicts(locked, start, end)
        except DatabaseError as exc:
            logger.exception("Creating time off for staff %s failed; rolled back", staff.pk)
            raise OperationFailed("Creating time off failed and was rolled back.") from exc

        logger.info(
            "Time off %s for staff %s (%s to %s); %d appointment(s) need rescheduling",
            time_off.pk, staff.pk, start.date(), end.date(), affected,
        )
        return time_off, affected

    def update_time_off(self, time_off, **changes):
        """
        Change type/bounds/reason of an existing TimeOff. Bounds are
        re-normalized and any appointment newly covered is flagged.

        Returns:
            (TimeOff, affected_count)
        """
        if "type" in changes:
            _valid_time_off_type(changes["type"])
        start, end = normalize_time_off_bounds(
            changes.get("start_time", time_off.start_time),
            changes.get("end_time", time_off.end_time),
        )

        try:
            with transaction.atomic():
                try:
                    time_off = TimeOff.objects.select_for_update().get(pk=time_off.pk)
                except TimeOff.DoesNotExist:
                    raise NotFound(f"Time off {time_off.pk} not found.")
                time_off.start_time = start
                time_off.end_time = end
                if "type" in changes:
                    time_off.type = changes["type"]
                if "reason" in changes:
                    time_off.reason = changes["reason"] or ""
                time_off.save()
                affected = self._flag_time_off_conflicts(time_off.staff, start, end)
        except DatabaseError as exc:
            logger.exception("Updating time off %s failed; rolled back", time_off.pk)
            raise OperationFailed("Updating time off failed and was rolled back.") from exc

        logger.info("Updated time off %s; %d appointment(s) need rescheduling", time_off.pk, affected)
        return time_off, affected
