from datetime import time, timedelta
from decimal import Decimal

from django.test import override_settings
from django.utils import timezone

from booking.exceptions import NotFound, ValidationError
from booking.models import CANCELLED, COMPLETED, CONFIRMED, RESCHEDULE_PENDING, Service, Staff
from booking.services.availability_engine import AvailabilityEngine
from booking.services.cascade import CascadeCoordinator
from booking.services.time_off import find_covering_time_off, normalize_time_off_bounds
from booking.services.working_hours import get_working_intervals, replace_working_hours
from staff.models import TimeOff, WorkingHours

from .base import MONDAY, SalonTestCase, aware


def _times(slots):
    return [timezone.localtime(s["time"]).time() for s in slots]


class WorkingHoursResolverTests(SalonTestCase):

    def test_intervals_for_matching_weekday(self):
        WorkingHours.objects.create(staff=self.dana, weekday=MONDAY, start_time=time(14, 0), end_time=time(17, 0))
        self.assertEqual(
            get_working_intervals(self.dana, self.monday),
            [(time(9, 0), time(13, 0)), (time(14, 0), time(17, 0))],
        )

    def test_no_rows_means_not_working(self):
        self.assertEqual(get_working_intervals(self.dana, self.monday + timedelta(days=1)), [])

    def test_accepts_staff_id(self):
        self.assertEqual(len(get_working_intervals(self.dana.pk, self.monday)), 1)

    def test_replace_rejects_overlapping_intervals(self):
        with self.assertRaises(ValidationError):
            replace_working_hours(self.dana, [
                {"weekday": 2, "start_time": time(9, 0), "end_time": time(12, 0)},
                {"weekday": 2, "start_time": time(11, 0), "end_time": time(15, 0)},
            ])
        # unchanged
        self.assertEqual(WorkingHours.objects.filter(staff=self.dana).count(), 1)

    def test_replace_allows_touching_intervals(self):
        rows = replace_working_hours(self.dana, [
            {"weekday": 2, "start_time": time(9, 0), "end_time": time(12, 0)},
            {"weekday": 2, "start_time": time(12, 0), "end_time": time(15, 0)},
        ])
        self.assertEqual(len(rows), 2)
        self.assertEqual(get_working_intervals(self.dana, self.monday), [])


class TimeOffFilterTests(SalonTestCase):

    def test_bounds_are_widened_to_whole_days(self):
        start, end = normalize_time_off_bounds(aware(self.monday, 10, 30), aware(self.monday, 11, 0))
        start, end = timezone.localtime(start), timezone.localtime(end)
        self.assertEqual(start.time(), time(0, 0))
        self.assertEqual(end.time(), time(23, 59, 59, 999000))
        self.assertEqual(start.date(), self.monday)
        self.assertEqual(end.date(), self.monday)

    def test_end_before_start_is_rejected(self):
        with self.assertRaises(ValidationError):
            normalize_time_off_bounds(aware(self.monday, 9), aware(self.monday - timedelta(days=1), 9))

    def test_covering_time_off_is_found_by_date(self):
        start, end = normalize_time_off_bounds(self.monday, self.monday + timedelta(days=2))
        time_off = TimeOff.objects.create(staff=self.dana, type=TimeOff.VACATION, start_time=start, end_time=end)

        self.assertEqual(find_covering_time_off(self.dana, self.monday), time_off)
        self.assertEqual(find_covering_time_off(self.dana, self.monday + timedelta(days=2)), time_off)
        self.assertIsNone(find_covering_time_off(self.dana, self.monday + timedelta(days=3)))
        self.assertIsNone(find_covering_time_off(self.dana, self.monday - timedelta(days=1)))


class AvailabilityEngineTests(SalonTestCase):
    """
    Scenarios for Dana (Monday 09:00-13:00) and a 60 minute Manicure.
    """

    def setUp(self):
        super().setUp()
        self.engine = AvailabilityEngine(step_minutes=None)

    def test_scenario_a_all_slots_free(self):
        slots = self.engine.get_available_slots(self.monday, self.manicure.pk, self.dana.pk)
        self.assertEqual(_times(slots), [time(9), time(10), time(11), time(12)])
        self.assertTrue(all(s["available"] for s in slots))

    def test_scenario_b_booked_slot_is_unavailable(self):
        self.book(aware(self.monday, 10))
        slots = self.engine.get_available_slots(self.monday, self.manicure, self.dana)
        availability = {timezone.localtime(s["time"]).time(): s["available"] for s in slots}
        self.assertEqual(availability, {
            time(9): True,
            time(10): False,
            time(11): True,
            time(12): True,
        })

    def test_inactive_appointments_do_not_block(self):
        self.book(aware(self.monday, 9), status=CANCELLED)
        self.book(aware(self.monday, 10), status=COMPLETED)
        self.book(aware(self.monday, 11), status=RESCHEDULE_PENDING)
        slots = self.engine.get_available_slots(self.monday, self.manicure, self.dana)
        self.assertTrue(all(s["available"] for s in slots))

    def test_partial_overlap_blocks_both_neighbours(self):
        self.book(aware(self.monday, 9, 30), status=CONFIRMED)
        slots = self.engine.get_available_slots(self.monday, self.manicure, self.dana)
        self.assertEqual([s["available"] for s in slots], [False, False, True, True])

    def test_time_off_day_returns_no_slots(self):
        CascadeCoordinator().create_time_off(self.dana, TimeOff.SICK_LEAVE, self.monday, self.monday)
        self.assertEqual(self.engine.get_available_slots(self.monday, self.manicure, self.dana), [])

    def test_non_working_day_returns_empty_list(self):
        tuesday = self.monday + timedelta(days=1)
        self.assertEqual(self.engine.get_available_slots(tuesday, self.manicure, self.dana), [])

    def test_unqualified_or_inactive_staff_yield_empty_list(self):
        outsider = Staff.objects.create(name="Outsider")
        WorkingHours.objects.create(staff=outsider, weekday=MONDAY, start_time=time(9), end_time=time(13))
        self.assertEqual(self.engine.get_available_slots(self.monday, self.manicure, outsider), [])

        self.dana.active = False
        self.dana.save()
        self.assertEqual(self.engine.get_available_slots(self.monday, self.manicure, self.dana), [])

    def test_any_staff_is_union_with_at_least_one_free(self):
        noa = Staff.objects.create(name="Noa")
        noa.services.add(self.manicure)
        WorkingHours.objects.create(staff=noa, weekday=MONDAY, start_time=time(11), end_time=time(15))

        self.book(aware(self.monday, 10))            # Dana busy at 10
        self.book(aware(self.monday, 11))            # Dana busy at 11, Noa free
        self.book(aware(self.monday, 14), staff=noa)  # Noa busy at 14

        slots = self.engine.get_available_slots(self.monday, self.manicure)
        availability = {timezone.localtime(s["time"]).time(): s["available"] for s in slots}
        self.assertEqual(availability, {
            time(9): True,
            time(10): False,
            time(11): True,
            time(12): True,
            time(13): True,
            time(14): False,
        })
        self.assertEqual(list(availability), sorted(availability))

    def test_no_qualified_staff_returns_empty_list(self):
        pedicure = Service.objects.create(name="Pedicure", duration_minutes=60, price=Decimal("140.00"))
        self.assertEqual(self.engine.get_available_slots(self.monday, pedicure), [])

    def test_all_staff_on_time_off_returns_empty_list(self):
        CascadeCoordinator().create_time_off(self.dana, TimeOff.VACATION, self.monday, self.monday)
        self.assertEqual(self.engine.get_available_slots(self.monday, self.manicure), [])

    def test_past_dates_are_allowed(self):
        past_monday = self.monday - timedelta(days=14)
        slots = self.engine.get_available_slots(past_monday, self.manicure, self.dana)
        self.assertEqual(len(slots), 4)

    def test_unknown_ids_raise_not_found(self):
        with self.assertRaises(NotFound):
            self.engine.get_available_slots(self.monday, 9999)
        with self.assertRaises(NotFound):
            self.engine.get_available_slots(self.monday, self.manicure, 9999)

    def test_inactive_service_is_rejected(self):
        self.manicure.active = False
        self.manicure.save()
        with self.assertRaises(ValidationError):
            self.engine.get_available_slots(self.monday, self.manicure)

    @override_settings(SCHEDULING={"SLOT_STEP_MINUTES": 30, "CANCELLATION_CUTOFF_MINUTES": 120})
    def test_configured_step(self):
        slots = AvailabilityEngine().get_available_slots(self.monday, self.manicure, self.dana)
        self.assertEqual(_times(slots)[:3], [time(9), time(9, 30), time(10)])
        self.assertEqual(_times(slots)[-1], time(12))
        self.assertEqual(len(slots), 7)
