# backend/app/services/slots/__init__.py
"""
Scheduling and availability engine.

Window resolver: effective working hours + break for a staff member/day
Slot generator:  grid slots that fit the window and collide with nothing
Validator:       accept/reject one proposed booking with a reason code
"""

from .config import BookingConfig, get_booking_config
from .records import (
    Booking,
    SalonDayRule,
    SlotCandidate,
    StaffDayRule,
    TimeOffRange,
    Window,
)
from .window import resolve_window
from .calculator import generate_slots, iter_slots
from .validator import RejectReason, ValidationResult, validate_booking
from .availability import calculate_service_availability, merge_staff_slots

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "Booking",
    "SalonDayRule",
    "SlotCandidate",
    "StaffDayRule",
    "TimeOffRange",
    "Window",
    "resolve_window",
    "generate_slots",
    "iter_slots",
    "RejectReason",
    "ValidationResult",
    "validate_booking",
    "calculate_service_availability",
    "merge_staff_slots",
]
