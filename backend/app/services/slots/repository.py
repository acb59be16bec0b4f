# backend/app/services/slots/repository.py
"""
Snapshot loading for the scheduling engine.

Reads salon hours, staff hours, bookings and time-off from the database
and returns engine records. No scheduling logic lives here.
"""

from datetime import date, datetime, time, timedelta
from sqlalchemy.orm import Session

from .records import (
    BUSY_STATUSES,
    Booking,
    SalonDayRule,
    StaffDayRule,
    TimeOffRange,
    normalize_bookings,
    normalize_salon_rules,
    normalize_staff_rules,
    normalize_time_off,
)


def day_bounds(target_date: date) -> tuple[datetime, datetime]:
    """[00:00 of target_date, 00:00 of the next day)."""
    start = datetime.combine(target_date, time.min)
    return start, start + timedelta(days=1)


def get_salon_hours(db: Session, salon_id: int) -> list[SalonDayRule]:
    from ...models.generated import SalonHours

    rows = (
        db.query(SalonHours)
        .filter(SalonHours.salon_id == salon_id)
        .order_by(SalonHours.day_of_week)
        .all()
    )
    return normalize_salon_rules(rows)


def get_staff_hours(
    db: Session,
    salon_id: int,
    staff_ids: list[int] | None = None,
) -> list[StaffDayRule]:
    from ...models.generated import EmployeeHours

    query = db.query(EmployeeHours).filter(EmployeeHours.salon_id == salon_id)
    if staff_ids is not None:
        query = query.filter(EmployeeHours.staff_id.in_(staff_ids))
    return normalize_staff_rules(query.order_by(EmployeeHours.id).all())


def get_busy_bookings(
    db: Session,
    staff_ids: list[int],
    range_start: datetime,
    range_end: datetime,
) -> list[Booking]:
    """Pending/confirmed bookings of the staff overlapping [range_start, range_end)."""
    from ...models.generated import Bookings

    if not staff_ids:
        return []

    rows = (
        db.query(Bookings)
        .filter(
            Bookings.staff_id.in_(staff_ids),
            Bookings.status.in_(sorted(BUSY_STATUSES)),
            Bookings.appointment_start < range_end,
            Bookings.appointment_end > range_start,
        )
        .order_by(Bookings.appointment_start)
        .all()
    )
    return normalize_bookings(rows)


def get_time_off(
    db: Session,
    staff_ids: list[int],
    range_start: datetime,
    range_end: datetime,
) -> list[TimeOffRange]:
    """Time-off ranges of the staff overlapping [range_start, range_end)."""
    from ...models.generated import EmployeeTimeOff

    if not staff_ids:
        return []

    rows = (
        db.query(EmployeeTimeOff)
        .filter(
            EmployeeTimeOff.staff_id.in_(staff_ids),
            EmployeeTimeOff.start_at < range_end,
            EmployeeTimeOff.end_at > range_start,
        )
        .order_by(EmployeeTimeOff.start_at)
        .all()
    )
    return normalize_time_off(rows)


def get_service(db: Session, service_id: int):
    """Get active service by ID."""
    from ...models.generated import Services

    return db.query(Services).filter(
        Services.id == service_id,
        Services.is_active == 1,
    ).first()


def get_staff(db: Session, staff_id: int):
    """Get active staff member by ID."""
    from ...models.generated import Staff

    return db.query(Staff).filter(
        Staff.id == staff_id,
        Staff.is_active == 1,
    ).first()


def get_service_staff_ids(db: Session, salon_id: int, service_id: int) -> list[int]:
    """Active staff of the salon who provide this service, ordered by id."""
    from ...models.generated import Staff, t_staff_services

    rows = (
        db.query(Staff.id)
        .join(t_staff_services, Staff.id == t_staff_services.c.staff_id)
        .filter(
            Staff.salon_id == salon_id,
            Staff.is_active == 1,
            t_staff_services.c.service_id == service_id,
            t_staff_services.c.is_active == 1,
        )
        .order_by(Staff.id)
        .all()
    )
    return [row[0] for row in rows]
