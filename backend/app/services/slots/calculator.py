# backend/app/services/slots/calculator.py
"""
Slot generation for one staff member (or the salon) on one date.

Produces SlotCandidate(start, end) pairs on a fixed grid:

✓ salon open/close for the weekday
✓ staff hours (intersected with salon hours) and break
✓ staff time-off ranges
✓ busy bookings (pending / confirmed)
✓ minimum lead time from "now"

Pure function of its inputs: "now" is always supplied by the caller.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterator

from .config import BookingConfig, get_booking_config
from .intervals import day_of, epoch_ms_to_datetime, overlaps, to_wall_clock
from .records import (
    SalonDayRule,
    SlotCandidate,
    StaffDayRule,
    busy_bookings,
    normalize_bookings,
    normalize_time_off,
    staff_time_off,
)
from .window import salon_window, staff_window

logger = logging.getLogger(__name__)


def generate_slots(
    day,
    day_rule,
    staff_rule,
    duration_minutes,
    bookings,
    time_off,
    now,
    staff_id=None,
    config: BookingConfig | None = None,
) -> list[SlotCandidate]:
    """
    Calculate bookable slots for a date.

    Returns:
        List of SlotCandidate in ascending start order. Empty list = no slots.
    """
    return list(iter_slots(
        day, day_rule, staff_rule, duration_minutes, bookings, time_off, now,
        staff_id=staff_id, config=config,
    ))


def iter_slots(
    day,
    day_rule,
    staff_rule,
    duration_minutes,
    bookings,
    time_off,
    now,
    staff_id=None,
    config: BookingConfig | None = None,
) -> Iterator[SlotCandidate]:
    """Lazy variant of generate_slots(); each call starts a fresh walk."""
    config = config or get_booking_config()
    day = day_of(day)
    now = _as_datetime(now)

    # Step 1: Salon window
    if day_rule is not None and not isinstance(day_rule, SalonDayRule):
        day_rule = SalonDayRule.from_row(day_rule)
    window = salon_window(day, day_rule)
    if window is None:
        return

    range_start, range_end = window.start, window.end
    break_start = break_end = None

    # Step 2: Staff window, intersected with the salon window
    if staff_rule is not None:
        if not isinstance(staff_rule, StaffDayRule):
            staff_rule = StaffDayRule.from_row(staff_rule)
        personal = staff_window(day, staff_rule, day_rule)
        if personal is None:
            return
        range_start = max(range_start, personal.start)
        range_end = min(range_end, personal.end)
        if range_end <= range_start:
            return
        break_start, break_end = personal.break_start, personal.break_end

    # Step 3: Duration
    duration = _duration(duration_minutes)
    if duration is None:
        return

    # Step 4: Blocking ranges
    off_ranges = staff_time_off(normalize_time_off(time_off), staff_id)
    busy = busy_bookings(normalize_bookings(bookings), staff_id)
    earliest = now + config.min_lead

    # Step 5: Walk the grid
    step = config.slot_step
    slot_start = range_start
    while slot_start < range_end:
        slot_end = slot_start + duration
        if _is_free(slot_start, slot_end, range_end, earliest, break_start, break_end, off_ranges, busy):
            yield SlotCandidate(start=slot_start, end=slot_end, staff_id=staff_id)
        slot_start += step


# ── Helpers ──────────────────────────────────────────────────────────────


def _is_free(slot_start, slot_end, range_end, earliest, break_start, break_end, off_ranges, busy) -> bool:
    if slot_end > range_end:
        return False
    if slot_start < earliest:
        return False
    if break_start is not None and overlaps(slot_start, slot_end, break_start, break_end):
        return False
    if any(overlaps(slot_start, slot_end, off.start_at, off.end_at) for off in off_ranges):
        return False
    if any(overlaps(slot_start, slot_end, b.appointment_start, b.appointment_end) for b in busy):
        return False
    return True


def _duration(duration_minutes) -> timedelta | None:
    if isinstance(duration_minutes, bool):
        return None
    try:
        minutes = float(duration_minutes or 0)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric service duration: {duration_minutes!r}")
        return None
    if not math.isfinite(minutes) or minutes <= 0:
        return None
    return timedelta(minutes=minutes)


def _as_datetime(now) -> datetime:
    """Accept the evaluation instant as a datetime or epoch milliseconds."""
    if isinstance(now, datetime):
        return to_wall_clock(now)
    return epoch_ms_to_datetime(now)
