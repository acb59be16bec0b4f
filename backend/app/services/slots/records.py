# backend/app/services/slots/records.py
"""
Typed records consumed by the scheduling engine.

Rows arrive from the data layer as dicts or ORM objects with loose shapes;
each record type has a from_row() that normalises one row and returns None
when the row cannot take part in scheduling.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from .intervals import parse_timestamp

logger = logging.getLogger(__name__)

BUSY_STATUSES = frozenset({"pending", "confirmed"})
DEFAULT_STATUS = "pending"


def _field(row, *names, default=None):
    """Read the first present field from a dict or an attribute-style row."""
    for name in names:
        if isinstance(row, dict):
            value = row.get(name)
        else:
            value = getattr(row, name, None)
        if value is not None and value != "":
            return value
    return default


def _id_str(value) -> str:
    return "" if value is None else str(value)


def _day_of_week(row) -> int | None:
    try:
        value = int(_field(row, "day_of_week"))
    except (TypeError, ValueError):
        return None
    return value if 0 <= value <= 6 else None


@dataclass(frozen=True)
class SalonDayRule:
    day_of_week: int
    open_time: str | None = None
    close_time: str | None = None
    is_closed: bool = False

    @classmethod
    def from_row(cls, row) -> "SalonDayRule | None":
        day_of_week = _day_of_week(row)
        if day_of_week is None:
            logger.warning(f"Dropping salon hours row with bad day_of_week: {row!r}")
            return None
        return cls(
            day_of_week=day_of_week,
            open_time=_field(row, "open_time", "start_time"),
            close_time=_field(row, "close_time", "end_time"),
            is_closed=bool(_field(row, "is_closed", default=False)),
        )


@dataclass(frozen=True)
class StaffDayRule:
    staff_id: str
    day_of_week: int
    start_time: str | None = None
    end_time: str | None = None
    is_off: bool = False
    break_start: str | None = None
    break_end: str | None = None

    @classmethod
    def from_row(cls, row) -> "StaffDayRule | None":
        day_of_week = _day_of_week(row)
        if day_of_week is None:
            logger.warning(f"Dropping staff hours row with bad day_of_week: {row!r}")
            return None
        return cls(
            staff_id=_id_str(_field(row, "staff_id", "employee_id")),
            day_of_week=day_of_week,
            start_time=_field(row, "start_time"),
            end_time=_field(row, "end_time"),
            is_off=bool(_field(row, "is_off", "is_closed", default=False)),
            break_start=_field(row, "break_start"),
            break_end=_field(row, "break_end"),
        )


@dataclass(frozen=True)
class TimeOffRange:
    staff_id: str
    start_at: datetime
    end_at: datetime

    @classmethod
    def from_row(cls, row) -> "TimeOffRange | None":
        start = parse_timestamp(_field(row, "start_at", "start_time"))
        end = parse_timestamp(_field(row, "end_at", "end_time"))
        if start is None or end is None or end <= start:
            logger.warning(f"Dropping unusable time-off row: {row!r}")
            return None
        return cls(
            staff_id=_id_str(_field(row, "staff_id", "employee_id")),
            start_at=start,
            end_at=end,
        )


@dataclass(frozen=True)
class Booking:
    id: str
    staff_id: str
    appointment_start: datetime
    appointment_end: datetime
    status: str = DEFAULT_STATUS
    service_id: str = ""
    customer_name: str | None = None
    customer_phone: str | None = None
    notes: str | None = None

    @property
    def is_busy(self) -> bool:
        return self.status in BUSY_STATUSES

    @classmethod
    def from_row(cls, row) -> "Booking | None":
        start = parse_timestamp(_field(row, "appointment_start", "start_time", "start"))
        end = parse_timestamp(_field(row, "appointment_end", "end_time", "end"))
        if start is None or end is None or end <= start:
            logger.warning(f"Dropping unusable booking row: {row!r}")
            return None
        return cls(
            id=_id_str(_field(row, "id")),
            staff_id=_id_str(_field(row, "staff_id", "employee_id")),
            appointment_start=start,
            appointment_end=end,
            status=str(_field(row, "status", default=DEFAULT_STATUS)),
            service_id=_id_str(_field(row, "service_id")),
            customer_name=_field(row, "customer_name"),
            customer_phone=_field(row, "customer_phone"),
            notes=_field(row, "notes"),
        )


@dataclass(frozen=True)
class Window:
    """Resolved working window for one staff member (or salon) on one date."""
    start: datetime
    end: datetime
    break_start: datetime | None = None
    break_end: datetime | None = None

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None


@dataclass(frozen=True)
class SlotCandidate:
    start: datetime
    end: datetime
    staff_id: str | None = None

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()


def _normalize(rows, record_type) -> list:
    result = []
    for row in rows or []:
        if isinstance(row, record_type):
            result.append(row)
            continue
        record = record_type.from_row(row)
        if record is not None:
            result.append(record)
    return result


def normalize_salon_rules(rows) -> list[SalonDayRule]:
    return _normalize(rows, SalonDayRule)


def normalize_staff_rules(rows) -> list[StaffDayRule]:
    return _normalize(rows, StaffDayRule)


def normalize_time_off(rows) -> list[TimeOffRange]:
    return _normalize(rows, TimeOffRange)


def normalize_bookings(rows) -> list[Booking]:
    return _normalize(rows, Booking)


def busy_bookings(
    bookings: list[Booking],
    staff_id: str | None = None,
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    """
    Bookings that block time: pending/confirmed, optionally for one staff
    member, optionally without the booking being edited.
    """
    result = []
    for booking in bookings:
        if not booking.is_busy:
            continue
        if staff_id and booking.staff_id != str(staff_id):
            continue
        if exclude_booking_id and booking.id == str(exclude_booking_id):
            continue
        result.append(booking)
    return result


def staff_time_off(time_off: list[TimeOffRange], staff_id: str | None = None) -> list[TimeOffRange]:
    if not staff_id:
        return list(time_off)
    return [item for item in time_off if item.staff_id == str(staff_id)]
