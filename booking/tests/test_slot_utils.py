from datetime import date, datetime, time

from django.test import SimpleTestCase, override_settings
from django.utils import timezone

from booking.services.slot_utils import (
    compare_hhmm,
    day_window,
    end_of_day,
    format_hhmm,
    generate_slots,
    intervals_overlap,
    parse_date_param,
    parse_hhmm,
    start_of_day,
    weekday_index,
)


class CalendarPrimitivesTests(SimpleTestCase):

    def test_weekday_index_sunday_is_zero(self):
        self.assertEqual(weekday_index(date(2024, 6, 2)), 0)   # Sunday
        self.assertEqual(weekday_index(date(2024, 6, 3)), 1)   # Monday
        self.assertEqual(weekday_index(date(2024, 6, 8)), 6)   # Saturday

    def test_parse_and_format_hhmm(self):
        self.assertEqual(parse_hhmm("09:30"), time(9, 30))
        self.assertEqual(format_hhmm(time(7, 5)), "07:05")
        with self.assertRaises(ValueError):
            parse_hhmm("9am")
        with self.assertRaises(ValueError):
            parse_hhmm("25:00")

    def test_compare_hhmm(self):
        self.assertEqual(compare_hhmm("09:00", "10:00"), -1)
        self.assertEqual(compare_hhmm("10:00", "10:00"), 0)
        self.assertEqual(compare_hhmm("13:15", "13:00"), 1)

    def test_touching_intervals_do_not_overlap(self):
        """An appointment ending at 10:00 and one starting at 10:00 don't conflict."""
        self.assertFalse(intervals_overlap(9, 10, 10, 11))
        self.assertFalse(intervals_overlap(10, 11, 9, 10))

    def test_overlapping_intervals(self):
        self.assertTrue(intervals_overlap(9, 11, 10, 12))
        self.assertTrue(intervals_overlap(10, 11, 9, 12))   # contained
        self.assertTrue(intervals_overlap(9, 10, 9, 10))    # identical

    def test_parse_date_param_trims_time_part(self):
        self.assertEqual(parse_date_param("2024-06-03"), date(2024, 6, 3))
        self.assertEqual(parse_date_param("2024-06-03T10:00:00Z"), date(2024, 6, 3))
        self.assertEqual(parse_date_param("2024-06-03 10:00"), date(2024, 6, 3))
        with self.assertRaises(ValueError):
            parse_date_param("03/06/2024")


@override_settings(TIME_ZONE="Asia/Jerusalem")
class LocalDayTests(SimpleTestCase):

    def test_day_window_is_local_midnight_to_midnight(self):
        start, end = day_window(date(2024, 6, 3))
        local = timezone.localtime(start)
        self.assertEqual((local.hour, local.minute), (0, 0))
        self.assertEqual((end - start).total_seconds(), 24 * 3600)

    def test_start_and_end_of_day(self):
        instant = timezone.make_aware(datetime(2024, 6, 3, 15, 45))
        start = timezone.localtime(start_of_day(instant))
        end = timezone.localtime(end_of_day(instant))
        self.assertEqual(start.date(), date(2024, 6, 3))
        self.assertEqual(start.time(), time(0, 0))
        self.assertEqual(end.date(), date(2024, 6, 3))
        self.assertEqual(end.time(), time(23, 59, 59, 999000))


class GenerateSlotsTests(SimpleTestCase):

    def test_steps_by_duration_by_default(self):
        slots = generate_slots(date(2024, 6, 3), time(9, 0), time(13, 0), 60)
        self.assertEqual([timezone.localtime(s).time() for s in slots],
                         [time(9, 0), time(10, 0), time(11, 0), time(12, 0)])

    def test_finer_step_keeps_slot_inside_interval(self):
        slots = generate_slots(date(2024, 6, 3), time(9, 0), time(10, 30), 60, step_minutes=15)
        self.assertEqual([timezone.localtime(s).time() for s in slots],
                         [time(9, 0), time(9, 15), time(9, 30)])

    def test_interval_shorter_than_service_has_no_slots(self):
        self.assertEqual(generate_slots(date(2024, 6, 3), time(9, 0), time(9, 45), 60), [])

    def test_slots_are_timezone_aware(self):
        slots = generate_slots(date(2024, 6, 3), time(9, 0), time(10, 0), 30)
        self.assertTrue(all(timezone.is_aware(s) for s in slots))
