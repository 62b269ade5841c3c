"""
slot_utils.py
-------------
Calendar primitives shared by the scheduling services:
- "HH:MM" parsing/formatting and comparison
- weekday index consistent with staff.models.WorkingHours (Sunday=0)
- half-open interval overlap
- local-day windows as timezone-aware datetimes
- candidate slot generation inside one working interval

Everything here is pure; nothing touches the database.
"""

from datetime import date, datetime, time, timedelta

from django.utils import timezone

# TimeOff end boundary: 23:59:59.999 local time.
END_OF_DAY = time(23, 59, 59, 999000)


def parse_hhmm(value: str) -> time:
    """
    Parse a wall-clock "HH:MM" string. Raises ValueError on anything else.
    """
    value = (value or "").strip()
    h, m = value.split(":")
    if len(h) != 2 or len(m) != 2:
        raise ValueError(f"Expected HH:MM, got {value!r}")
    return time(int(h), int(m))


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def compare_hhmm(a: str, b: str) -> int:
    """Return -1, 0 or 1 as wall-clock a is before, equal to, or after b."""
    ta, tb = parse_hhmm(a), parse_hhmm(b)
    return (ta > tb) - (ta < tb)


def weekday_index(day: date) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return day.isoweekday() % 7


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """
    Half-open overlap test for [a_start, a_end) and [b_start, b_end).
    Touching intervals (a_end == b_start) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def make_aware(dt_naive: datetime) -> datetime:
    """
    Convert a naive datetime to an aware one using Django's current timezone.
    Aware values are returned unchanged.
    """
    if timezone.is_aware(dt_naive):
        return dt_naive
    return timezone.make_aware(dt_naive, timezone.get_current_timezone())


def local_date(value) -> date:
    """The salon-local calendar date of a date or an (aware) datetime."""
    if isinstance(value, datetime):
        return timezone.localtime(make_aware(value)).date()
    return value


def at(day: date, wall_clock: time) -> datetime:
    """Aware datetime for a local wall-clock time on a given day."""
    return make_aware(datetime.combine(day, wall_clock))


def start_of_day(value) -> datetime:
    return at(local_date(value), time(0, 0))


def end_of_day(value) -> datetime:
    return at(local_date(value), END_OF_DAY)


def day_window(day: date):
    """
    Local day as an aware half-open window [midnight, next midnight).
    """
    return at(day, time(0, 0)), at(day + timedelta(days=1), time(0, 0))


def parse_date_param(raw: str) -> date:
    """
    Parse 'YYYY-MM-DD'. Inputs that include a time part ("...T10:00" or
    "... 10:00") are trimmed to the date. Raises ValueError when invalid.
    """
    raw = (raw or "").strip()
    if "T" in raw:
        raw = raw.split("T", 1)[0].strip()
    elif " " in raw:
        raw = raw.split(" ", 1)[0].strip()
    y, m, d = map(int, raw.split("-"))
    return date(y, m, d)


def generate_slots(day: date, open_time: time, close_time: time,
                   duration_minutes: int, step_minutes: int | None = None):
    """
    Candidate slot starts inside one working interval on 'day'.

    A start qualifies when [start, start + duration) fits in
    [open_time, close_time). Starts advance by step_minutes, or by the
    duration when no step is given. Returned datetimes are timezone-aware.
    """
    if duration_minutes <= 0:
        return []

    slot = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes or duration_minutes)

    day_open = at(day, open_time)
    day_close = at(day, close_time)

    slots = []
    current = day_open
    while current + slot <= day_close:
        slots.append(current)
        current += step
    return slots
