# backend/app/services/slots/validator.py
"""
Validation of a single proposed booking.

Used by booking creation and by admin edits (drag / resize / reassign).
Checks the same constraints as the slot generator with the same
half-open overlap semantics, so every generated slot validates.
First failing check wins.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .intervals import overlaps, to_wall_clock
from .records import busy_bookings, normalize_bookings, normalize_time_off, staff_time_off
from .window import resolve_window

logger = logging.getLogger(__name__)


class RejectReason(str, Enum):
    NO_EMPLOYEE_SELECTED = "NO_EMPLOYEE_SELECTED"
    INVALID_RANGE = "INVALID_RANGE"
    CLOSED_DAY = "CLOSED_DAY"
    OUTSIDE_WORKING_HOURS = "OUTSIDE_WORKING_HOURS"
    INSIDE_BREAK = "INSIDE_BREAK"
    OVERLAPS_EXISTING_BOOKING = "OVERLAPS_EXISTING_BOOKING"
    STAFF_UNAVAILABLE = "STAFF_UNAVAILABLE"


REASON_MESSAGES = {
    RejectReason.NO_EMPLOYEE_SELECTED: "Select an employee first.",
    RejectReason.INVALID_RANGE: "Invalid time range.",
    RejectReason.CLOSED_DAY: "Employee/salon is closed on this day.",
    RejectReason.OUTSIDE_WORKING_HOURS: "This booking is outside working hours.",
    RejectReason.INSIDE_BREAK: "This time overlaps break hours.",
    RejectReason.OVERLAPS_EXISTING_BOOKING: "This slot overlaps another booking.",
    RejectReason.STAFF_UNAVAILABLE: "Employee is unavailable in this time range.",
}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: RejectReason | None = None

    @property
    def message(self) -> str:
        if self.reason is None:
            return ""
        return REASON_MESSAGES[self.reason]

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }


ACCEPTED = ValidationResult(ok=True)


def _reject(reason: RejectReason) -> ValidationResult:
    logger.debug(f"Booking rejected: {reason.value}")
    return ValidationResult(ok=False, reason=reason)


def validate_booking(
    employee_id,
    start,
    end,
    bookings=(),
    time_off=(),
    salon_hours=(),
    staff_hours=(),
    exclude_booking_id=None,
) -> ValidationResult:
    """
    Check a proposed booking [start, end) for one employee.

    Never raises for rule violations or bad inputs; returns a
    ValidationResult with a RejectReason instead.
    """
    # Step 1: Employee
    if employee_id is None or str(employee_id).strip() == "":
        return _reject(RejectReason.NO_EMPLOYEE_SELECTED)
    employee_id = str(employee_id)

    # Step 2: Range
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return _reject(RejectReason.INVALID_RANGE)
    start, end = to_wall_clock(start), to_wall_clock(end)
    if end <= start:
        return _reject(RejectReason.INVALID_RANGE)

    # Step 3: Working window for start's date
    window = resolve_window(salon_hours, staff_hours, employee_id, start.date())
    if window is None:
        return _reject(RejectReason.CLOSED_DAY)

    # Step 4: Inside working hours
    if start < window.start or end > window.end:
        return _reject(RejectReason.OUTSIDE_WORKING_HOURS)

    # Step 5: Break
    if window.has_break and overlaps(start, end, window.break_start, window.break_end):
        return _reject(RejectReason.INSIDE_BREAK)

    # Step 6: Existing bookings
    busy = busy_bookings(normalize_bookings(bookings), employee_id, exclude_booking_id)
    if any(overlaps(start, end, b.appointment_start, b.appointment_end) for b in busy):
        return _reject(RejectReason.OVERLAPS_EXISTING_BOOKING)

    # Step 7: Time off
    off_ranges = staff_time_off(normalize_time_off(time_off), employee_id)
    if any(overlaps(start, end, off.start_at, off.end_at) for off in off_ranges):
        return _reject(RejectReason.STAFF_UNAVAILABLE)

    return ACCEPTED
