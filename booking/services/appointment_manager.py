"""
appointment_manager.py
----------------------
Owns the appointment lifecycle: creation (commit-time conflict re-check),
cancellation, administrative status changes, and rescheduling of appointments
a cascade left in RESCHEDULE_PENDING.

Lifecycle:
    PENDING   -> CONFIRMED | CANCELLED | NO_SHOW
    CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW
    RESCHEDULE_PENDING -> CANCELLED, or back to PENDING via reschedule()
    COMPLETED, CANCELLED, NO_SHOW are terminal.
Entering RESCHEDULE_PENDING is reserved for CascadeCoordinator.

Concurrency:
- Each write runs in one transaction. The staff rows involved are locked with
  SELECT ... FOR UPDATE before the overlap re-check, so two bookings for the
  same staff member serialize on that lock.
- The partial unique constraint on (staff, start_time) for active rows is the
  storage backstop; an IntegrityError on insert becomes SlotConflict.
- Status changes only touch the one appointment row.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..models import (
    CANCELLED,
    COMPLETED,
    CONFIRMED,
    NO_SHOW,
    PENDING,
    RESCHEDULE_PENDING,
    Appointment,
    Staff,
)
from ..exceptions import InvalidTransition, SlotConflict, ValidationError
from .assignment import choose_staff
from .availability_engine import AvailabilityEngine
from .slot_utils import local_date, make_aware
from .time_off import is_day_blocked

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED, NO_SHOW},
    CONFIRMED: {COMPLETED, CANCELLED, NO_SHOW},
    RESCHEDULE_PENDING: {CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
    NO_SHOW: set(),
}

CLIENT = "client"
ADMIN = "admin"


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


def _cancellation_cutoff_minutes() -> int:
    return (getattr(settings, "SCHEDULING", {}) or {}).get("CANCELLATION_CUTOFF_MINUTES") or 0


class AppointmentManager:
    def __init__(self, availability=None):
        self.availability = availability or AvailabilityEngine()

    # ---- staff resolution (must run inside a transaction) ----

    def _lock_requested_staff(self, staff, service, start_time, end_time, exclude_id=None, actor=CLIENT):
        """
        Lock and validate an explicitly requested staff member, then re-check
        overlap against their active appointments.

        Time off always blocks the booking. Working hours bind clients only;
        admins may book outside the weekly grid.
        """
        try:
            locked = Staff.objects.select_for_update().get(pk=staff.pk)
        except Staff.DoesNotExist:
            raise ValidationError(f"Staff {staff.pk} does not exist.")
        if not locked.active:
            raise ValidationError("Selected staff member is not active.")
        if not locked.offers(service):
            raise ValidationError("Selected staff member does not provide this service.")
        if is_day_blocked(locked, local_date(start_time)):
            raise SlotConflict("Selected staff member is on time off that day.")
        if actor != ADMIN and not self.availability.is_within_schedule(locked, start_time, end_time):
            raise SlotConflict("Selected time is outside the staff member's working hours.")
        if self.availability.has_conflict(locked, start_time, end_time, exclude_id=exclude_id):
            raise SlotConflict(
                "Selected time overlaps with an existing appointment for this staff member."
            )
        return locked

    def _auto_assign(self, service, start_time, end_time, exclude_id=None):
        """
        Lock every qualified staff member, keep the ones whose schedule covers
        the interval, and let choose_staff pick deterministically.
        """
        candidates = list(self.availability.candidate_staff(service).select_for_update())
        working = [
            s for s in candidates
            if self.availability.is_within_schedule(s, start_time, end_time)
        ]
        busy = self.availability.busy_intervals(working, start_time, end_time, exclude_id=exclude_id)
        chosen = choose_staff(working, busy, start_time, end_time)
        if chosen is None:
            raise SlotConflict("No staff member is available for that time.")
        return chosen

    def _resolve_staff(self, staff, service, start_time, end_time, exclude_id=None, actor=CLIENT):
        if staff is not None:
            return self._lock_requested_staff(staff, service, start_time, end_time, exclude_id, actor)
        return self._auto_assign(service, start_time, end_time, exclude_id)

    # ---- operations ----

    def create_appointment(self, client, service, start_time, staff=None, notes="", actor=CLIENT):
        """
        Create a PENDING appointment after a commit-time overlap check.

        Args:
            client: ClientProfile instance
            service: Service instance (needs duration_minutes)
            start_time: datetime (naive values are read as salon-local time)
            staff: Staff instance, or None to auto-assign
            notes: optional string
            actor: CLIENT or ADMIN; only admins may book outside working hours

        Raises:
            ValidationError: inactive service, inactive/unqualified staff
            SlotConflict: the slot was taken, nobody is free, or the requested
                staff member is off or not working then
        """
        if not service.active:
            raise ValidationError("This service is not currently available.")

        start_time = make_aware(start_time)
        end_time = start_time + timedelta(minutes=service.duration_minutes)

        try:
            with transaction.atomic():
                assigned = self._resolve_staff(staff, service, start_time, end_time, actor=actor)
                appointment = Appointment.objects.create(
                    client=client,
                    service=service,
                    staff=assigned,
                    start_time=start_time,
                    end_time=end_time,
                    status=PENDING,
                    notes=notes or "",
                )
        except IntegrityError:
            logger.info(
                "Concurrent booking for staff %s at %s rejected",
                getattr(staff, "pk", None), start_time,
            )
            raise SlotConflict("That time was just booked. Please choose another slot.")
        except SlotConflict:
            logger.info("Slot conflict for service %s at %s", service.pk, start_time)
            raise

        logger.info(
            "Created appointment %s: service=%s staff=%s start=%s",
            appointment.pk, service.pk, appointment.staff_id, start_time,
        )
        return appointment

    def cancel_appointment(self, appointment, actor=CLIENT):
        """
        Cancel a PENDING/CONFIRMED appointment. Clients must respect the
        configured cutoff; admins may cancel at any time.

        Raises:
            InvalidTransition: already terminal (a second cancel included)
            ValidationError: client cancellation inside the cutoff window
        """
        with transaction.atomic():
            appointment = Appointment.objects.select_for_update().get(pk=appointment.pk)
            if appointment.status not in (PENDING, CONFIRMED):
                raise InvalidTransition(
                    f"Cannot cancel an appointment that is {appointment.status}."
                )

            now = timezone.now()
            cutoff = _cancellation_cutoff_minutes()
            if actor != ADMIN and cutoff and appointment.start_time - now <= timedelta(minutes=cutoff):
                raise ValidationError(
                    f"Cannot cancel within {cutoff} minutes of the appointment start."
                )

            appointment.status = CANCELLED
            appointment.cancellation_time = now
            appointment.save(update_fields=["status", "cancellation_time", "updated_at"])

        logger.info("Appointment %s cancelled by %s", appointment.pk, actor)
        return appointment

    def set_status(self, appointment, new_status):
        """
        Administrative status change, validated against ALLOWED_TRANSITIONS.
        A disallowed change raises InvalidTransition and leaves the row as is.
        """
        valid = {value for value, _label in Appointment.STATUS_CHOICES}
        if new_status not in valid:
            raise ValidationError(f"Unknown status {new_status!r}.")
        if new_status == RESCHEDULE_PENDING:
            raise InvalidTransition("RESCHEDULE_PENDING is set by the system only.")

        with transaction.atomic():
            appointment = Appointment.objects.select_for_update().get(pk=appointment.pk)
            old_status = appointment.status
            if not can_transition(old_status, new_status):
                raise InvalidTransition(f"Cannot change status from {old_status} to {new_status}.")

            appointment.status = new_status
            fields = ["status", "updated_at"]
            if new_status == CANCELLED:
                appointment.cancellation_time = timezone.now()
                fields.append("cancellation_time")
            appointment.save(update_fields=fields)

        logger.info("Appointment %s: %s -> %s", appointment.pk, old_status, new_status)
        return appointment

    def reschedule_appointment(self, appointment, start_time, staff=None, actor=ADMIN):
        """
        Move a RESCHEDULE_PENDING appointment to a new time (and staff member,
        auto-assigned when omitted) and put it back to PENDING. Same
        commit-time conflict re-check as creation.
        """
        start_time = make_aware(start_time)

        try:
            with transaction.atomic():
                appointment = (
                    Appointment.objects.select_for_update()
                    .select_related("service")
                    .get(pk=appointment.pk)
                )
                if appointment.status != RESCHEDULE_PENDING:
                    raise InvalidTransition(
                        f"Only RESCHEDULE_PENDING appointments can be rescheduled "
                        f"(this one is {appointment.status})."
                    )
                service = appointment.service
                end_time = start_time + timedelta(minutes=service.duration_minutes)
                assigned = self._resolve_staff(
                    staff, service, start_time, end_time, exclude_id=appointment.pk, actor=actor
                )

                appointment.staff = assigned
                appointment.start_time = start_time
                appointment.end_time = end_time
                appointment.status = PENDING
                appointment.save(update_fields=["staff", "start_time", "end_time", "status", "updated_at"])
        except IntegrityError:
            raise SlotConflict("That time was just booked. Please choose another slot.")

        logger.info(
            "Appointment %s rescheduled to %s with staff %s",
            appointment.pk, start_time, appointment.staff_id,
        )
        return appointment
