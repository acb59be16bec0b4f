# backend/app/services/booking_lock.py
"""
Per-staff write serialisation for booking commits.

Snapshot -> validate -> commit must not interleave for the same staff
member, otherwise two requests can both validate against a snapshot that
misses the other's write. Key: booking_lock:{staff_id}
"""

import logging
from contextlib import contextmanager
from redis import Redis
from redis.exceptions import LockError

from .slots.config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)

LOCK_PREFIX = "booking_lock"


class BookingLockTimeout(Exception):
    """Another writer holds the lock for this staff member."""

    def __init__(self, staff_id):
        super().__init__(f"Booking lock busy for staff_id={staff_id}")
        self.staff_id = staff_id


@contextmanager
def staff_write_lock(redis: Redis, staff_ids, config: BookingConfig | None = None):
    """
    Hold booking locks for one or more staff members.

    Locks are taken in sorted order so an edit that moves a booking
    between two staff members cannot deadlock with the reverse move.
    """
    config = config or get_booking_config()
    if not isinstance(staff_ids, (list, tuple, set)):
        staff_ids = [staff_ids]

    acquired = []
    try:
        for staff_id in sorted({str(s) for s in staff_ids}):
            lock = redis.lock(
                f"{LOCK_PREFIX}:{staff_id}",
                timeout=config.lock_timeout_seconds,
                blocking_timeout=config.lock_wait_seconds,
            )
            if not lock.acquire():
                logger.warning(f"Booking lock wait timed out: staff_id={staff_id}")
                raise BookingLockTimeout(staff_id)
            acquired.append(lock)
        yield
    finally:
        for lock in reversed(acquired):
            try:
                lock.release()
            except LockError:
                # expired before release; the commit already happened
                logger.warning(f"Booking lock expired before release: {lock.name}")
