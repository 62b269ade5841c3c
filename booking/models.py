# booking/models.py
#
# Purpose:
# - Core domain models for salon scheduling.
#
# Design highlights:
# - ClientProfile: the person an appointment is booked for. Identity is owned
#   elsewhere; here it's only the target of Appointment.client.
# - Service: duration_minutes is the slot length; "active" controls bookability.
# - Staff: stylist identity plus the set of services they're qualified for.
#   Working hours and time off live in the "staff" app (staff.models).
# - Appointment:
#   • [start_time, end_time) with end_time = start_time + service duration
#   • staff is optional: NULL means "needs (re)assignment"
#   • status follows the lifecycle in booking.services.appointment_manager
#
# Notes for developers:
# - Only PENDING and CONFIRMED appointments are "active": they block slots and
#   are the only ones cascades touch.
# - The partial unique constraint on (staff, start_time) for active rows is the
#   storage-level backstop for two concurrent bookings of the same slot. The
#   general overlap check runs in AppointmentManager under a row lock.
#

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError


PENDING = "PENDING"
CONFIRMED = "CONFIRMED"
COMPLETED = "COMPLETED"
CANCELLED = "CANCELLED"
NO_SHOW = "NO_SHOW"
RESCHEDULE_PENDING = "RESCHEDULE_PENDING"

ACTIVE_STATUSES = (PENDING, CONFIRMED)


# -------------------------
# Client (person who books)
# -------------------------
class ClientProfile(models.Model):
    """
    A client an appointment is booked for.
    - 'user' link is optional; the scheduling core only needs the id.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="client_profile",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)

    def __str__(self):
        return self.name


# -------------------------
# Service catalog item
# -------------------------
class Service(models.Model):
    """
    A service offered by the salon.

    Rules:
    - duration_minutes must be > 0 (it is the slot length)
    - price must be > 0
    - active controls visibility and bookability
    """
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1)]
    )
    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0.01)],
    )
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"


# -------------------------
# Staff member / Stylist
# -------------------------
class Staff(models.Model):
    """
    A stylist who can be assigned to appointments.

    - services: what this staff member is qualified to perform. A staff member
      with no services never shows up as a candidate for "any staff" booking.
    - active: inactive staff are never candidates and can't be booked directly.
    """
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=100, blank=True)
    bio = models.TextField(blank=True)
    active = models.BooleanField(default=True)
    services = models.ManyToManyField(Service, related_name="staff", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "staff"

    def __str__(self):
        return self.name

    def offers(self, service) -> bool:
        return self.services.filter(pk=service.pk).exists()


# -------------------------
# Appointment
# -------------------------
class Appointment(models.Model):
    """
    A booked (or formerly booked) appointment.

    - staff can become NULL when the staff member is deleted; the appointment
      is then RESCHEDULE_PENDING until an admin reassigns it.
    - cancellation_time records when a cancellation happened.
    """
    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
        (NO_SHOW, "No show"),
        (RESCHEDULE_PENDING, "Reschedule pending"),
    ]

    client = models.ForeignKey(ClientProfile, on_delete=models.CASCADE, related_name="appointments")
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name="appointments")
    staff = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="appointments",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING,
        help_text="Appointment lifecycle status",
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    cancellation_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the appointment was cancelled (if applicable).",
    )

    class Meta:
        ordering = ["start_time", "id"]
        indexes = [
            models.Index(fields=["staff", "start_time"], name="appointment_staff_start_idx"),
            models.Index(fields=["status"], name="appointment_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["staff", "start_time"],
                condition=Q(status__in=ACTIVE_STATUSES),
                name="uniq_active_appointment_staff_start",
            ),
        ]

    def __str__(self):
        return f"{self.client.name} → {self.service.name} on {self.start_time}"

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError("Appointment must end after it starts.")
