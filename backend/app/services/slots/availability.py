# backend/app/services/slots/availability.py
"""
Service availability across staff.

Wraps the slot generator with data loading and the "auto-assign" mode
of the public booking form: when no staff member is chosen, every
eligible staff member is tried in order and each start time is offered
once, assigned to the first staff member who has it free.
"""

import logging
from datetime import date, datetime, timedelta
from sqlalchemy.orm import Session

from .calculator import generate_slots
from .config import BookingConfig, get_booking_config
from .intervals import weekday_index
from .records import SlotCandidate
from .repository import (
    day_bounds,
    get_busy_bookings,
    get_salon_hours,
    get_service,
    get_service_staff_ids,
    get_staff_hours,
    get_time_off,
)
from .window import find_salon_rule, find_staff_rule

logger = logging.getLogger(__name__)


def merge_staff_slots(
    day: date,
    day_rule,
    staff_rules,
    staff_ids: list,
    duration_minutes: int,
    bookings,
    time_off,
    now: datetime,
    config: BookingConfig | None = None,
) -> list[SlotCandidate]:
    """
    Auto-assign: union of per-staff slots keyed by start time.

    The first staff member in staff_ids that offers a start keeps it.
    Result is sorted by start.
    """
    weekday = weekday_index(day)
    by_start: dict[datetime, SlotCandidate] = {}

    for staff_id in staff_ids:
        staff_rule = find_staff_rule(staff_rules, staff_id, weekday)
        slots = generate_slots(
            day,
            day_rule,
            staff_rule,
            duration_minutes,
            bookings,
            time_off,
            now,
            staff_id=staff_id,
            config=config,
        )
        for slot in slots:
            by_start.setdefault(slot.start, slot)

    return [by_start[start] for start in sorted(by_start)]


def calculate_service_availability(
    db: Session,
    salon_id: int,
    service_id: int,
    target_date: date,
    now: datetime,
    staff_id: int | None = None,
    config: BookingConfig | None = None,
) -> dict:
    """
    Calculate available time slots for a service on a day.

    Returns:
        Dict for SlotsDayResponse.
    """
    config = config or get_booking_config()

    result = {
        "salon_id": salon_id,
        "service_id": service_id,
        "staff_id": staff_id,
        "date": target_date,
        "duration_minutes": 0,
        "slot_step_minutes": config.slot_step_minutes,
        "slots": [],
    }

    # Step 1: Service
    service = get_service(db, service_id)
    if not service:
        return result
    result["duration_minutes"] = service.duration_minutes

    # Step 2: Staff who can take it
    staff_ids = _eligible_staff(db, salon_id, service_id, staff_id)
    if not staff_ids:
        logger.info(f"No eligible staff: salon_id={salon_id}, service_id={service_id}, staff_id={staff_id}")
        return result

    # Step 3: Snapshot for the day
    range_start, range_end = day_bounds(target_date)
    salon_rules = get_salon_hours(db, salon_id)
    staff_rules = get_staff_hours(db, salon_id, staff_ids)
    bookings = get_busy_bookings(db, staff_ids, range_start, range_end)
    time_off = get_time_off(db, staff_ids, range_start, range_end)

    # Step 4: Slots
    slots = merge_staff_slots(
        target_date,
        find_salon_rule(salon_rules, weekday_index(target_date)),
        staff_rules,
        staff_ids,
        service.duration_minutes,
        bookings,
        time_off,
        now,
        config,
    )

    result["slots"] = [
        {"start": slot.start, "end": slot.end, "staff_id": slot.staff_id}
        for slot in slots
    ]
    return result


def calculate_calendar(
    db: Session,
    salon_id: int,
    service_id: int,
    start_date: date,
    end_date: date,
    now: datetime,
    config: BookingConfig | None = None,
) -> list[tuple[date, int]]:
    """
    Count open slots per day in [start_date, end_date].

    Returns:
        List of (date, open_slots_count), one entry per day.
    """
    config = config or get_booking_config()

    dates = []
    current = start_date
    while current <= end_date:
        dates.append(current)
        current += timedelta(days=1)
    if not dates:
        return []

    service = get_service(db, service_id)
    staff_ids = get_service_staff_ids(db, salon_id, service_id) if service else []
    if not staff_ids:
        return [(dt, 0) for dt in dates]

    # One snapshot for the whole range
    range_start, _ = day_bounds(dates[0])
    _, range_end = day_bounds(dates[-1])
    salon_rules = get_salon_hours(db, salon_id)
    staff_rules = get_staff_hours(db, salon_id, staff_ids)
    bookings = get_busy_bookings(db, staff_ids, range_start, range_end)
    time_off = get_time_off(db, staff_ids, range_start, range_end)

    days = []
    for dt in dates:
        slots = merge_staff_slots(
            dt,
            find_salon_rule(salon_rules, weekday_index(dt)),
            staff_rules,
            staff_ids,
            service.duration_minutes,
            bookings,
            time_off,
            now,
            config,
        )
        days.append((dt, len(slots)))

    return days


# ── Helpers ──────────────────────────────────────────────────────────────


def _eligible_staff(db: Session, salon_id: int, service_id: int, staff_id: int | None) -> list[int]:
    staff_ids = get_service_staff_ids(db, salon_id, service_id)
    if staff_id is None:
        return staff_ids
    return [staff_id] if staff_id in staff_ids else []
