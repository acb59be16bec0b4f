# backend/app/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        slot_step_minutes: Grid step for slot starts (15 by default)
        min_lead_minutes: Minimum gap between "now" and a slot start
        calendar_snap_minutes: Rounding step for admin drag/resize edits
        horizon_days: How many days ahead slots are offered
        lock_timeout_seconds: TTL of the per-staff booking write lock
        lock_wait_seconds: How long a writer waits for that lock
    """
    slot_step_minutes: int = 15
    min_lead_minutes: int = 15
    calendar_snap_minutes: int = 10
    horizon_days: int = 60
    lock_timeout_seconds: int = 10
    lock_wait_seconds: float = 5.0

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (5, 10, 15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 5, 10, 15, 30 or 60, got {self.slot_step_minutes}")
        if self.min_lead_minutes < 0:
            raise ValueError(f"min_lead_minutes must be >= 0, got {self.min_lead_minutes}")
        if self.calendar_snap_minutes <= 0:
            raise ValueError(f"calendar_snap_minutes must be > 0, got {self.calendar_snap_minutes}")

    @property
    def slot_step(self) -> timedelta:
        return timedelta(minutes=self.slot_step_minutes)

    @property
    def min_lead(self) -> timedelta:
        return timedelta(minutes=self.min_lead_minutes)


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get booking configuration (singleton).

    Defaults match the public booking flow: 15-minute grid and a
    15-minute minimum lead time.
    """
    return BookingConfig()
