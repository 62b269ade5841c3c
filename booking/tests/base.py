# booking/tests/base.py
#
# Shared fixtures: Dana works Monday 09:00-13:00 and is qualified for a
# 60-minute Manicure; one client. Dates are "next Monday" relative to today so
# future-only rules (booking, cascades) behave the same on any run date.

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from booking.models import ClientProfile, Service, Staff, Appointment, PENDING
from staff.models import WorkingHours

MONDAY = 1  # Sunday=0


def next_weekday(weekday: int, after: date | None = None) -> date:
    """First date strictly after 'after' (default: today) with the given Sunday=0 weekday."""
    after = after or timezone.localdate()
    delta = (weekday - after.isoweekday() % 7) % 7 or 7
    return after + timedelta(days=delta)


def aware(day: date, hour: int, minute: int = 0) -> datetime:
    return timezone.make_aware(datetime.combine(day, time(hour, minute)))


class SalonTestCase(TestCase):
    def setUp(self):
        self.manicure = Service.objects.create(
            name="Manicure",
            description="Classic manicure",
            duration_minutes=60,
            price=Decimal("120.00"),
        )
        self.dana = Staff.objects.create(name="Dana", role="Nail technician")
        self.dana.services.add(self.manicure)
        WorkingHours.objects.create(
            staff=self.dana, weekday=MONDAY, start_time=time(9, 0), end_time=time(13, 0)
        )
        self.client_profile = ClientProfile.objects.create(
            name="Test Client", email="client@example.com", phone="0501234567"
        )
        self.monday = next_weekday(MONDAY)

    def book(self, start, staff=None, status=PENDING, service=None):
        """Insert an appointment row directly (no lifecycle checks)."""
        service = service or self.manicure
        return Appointment.objects.create(
            client=self.client_profile,
            service=service,
            staff=staff if staff is not None else self.dana,
            start_time=start,
            end_time=start + timedelta(minutes=service.duration_minutes),
            status=status,
        )
