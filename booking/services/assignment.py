"""
assignment.py
-------------
Deterministic "any staff" auto-assignment.

choose_staff is pure: it takes the candidate staff and their existing busy
intervals as explicit inputs and never reads the database. Ties are broken by
ascending staff id, so the same inputs always pick the same person.
"""

from .slot_utils import intervals_overlap


def choose_staff(candidates, busy_by_staff, start, end):
    """
    Pick the first candidate (lowest pk) with no busy interval overlapping
    [start, end).

    Args:
        candidates: iterable of Staff (already filtered to qualified, active,
            working, and not on time off)
        busy_by_staff: mapping of staff pk -> iterable of (start, end) pairs
        start, end: the requested interval

    Returns:
        The chosen Staff, or None when nobody is free.
    """
    for staff in sorted(candidates, key=lambda s: s.pk):
        busy = busy_by_staff.get(staff.pk, ())
        if not any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in busy):
            return staff
    return None
