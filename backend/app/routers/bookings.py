# backend/app/routers/bookings.py
"""
Bookings API endpoints.

Every write that can occupy time is validated against a fresh snapshot
inside the per-staff write lock, then committed.
"""

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Bookings as DBBookings
from ..redis_client import get_redis
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
    BookingUpdate,
    BookingValidateRequest,
    BookingValidateResponse,
)
from ..services.booking_lock import BookingLockTimeout, staff_write_lock
from ..services.slots import RejectReason, ValidationResult, get_booking_config, validate_booking
from ..services.slots.intervals import snap_datetime
from ..services.slots.records import BUSY_STATUSES
from ..services.slots.repository import (
    get_busy_bookings,
    get_salon_hours,
    get_service,
    get_service_staff_ids,
    get_staff,
    get_staff_hours,
    get_time_off,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/validate", response_model=BookingValidateResponse)
def validate_booking_range(
    data: BookingValidateRequest,
    db: Session = Depends(get_db),
):
    """Dry-run check of a proposed time range (calendar drag/resize preview)."""
    start, end = data.start, data.end
    if data.snap:
        start, end = _snap(start), _snap(end)

    result = _check_against_snapshot(
        db, data.salon_id, data.staff_id, start, end, data.exclude_booking_id
    )
    return BookingValidateResponse(**result.as_dict())


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    service = get_service(db, data.service_id)
    if not service or service.salon_id != data.salon_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Service not found or inactive"
        )
    _require_staff(db, data.salon_id, data.service_id, data.staff_id)

    values = data.model_dump()
    if values["appointment_end"] is None:
        values["appointment_end"] = data.appointment_start + timedelta(minutes=service.duration_minutes)
    _require_ordered_range(values["appointment_start"], values["appointment_end"])

    try:
        with staff_write_lock(redis, [data.staff_id]):
            if values["status"] in BUSY_STATUSES:
                result = _check_against_snapshot(
                    db,
                    data.salon_id,
                    data.staff_id,
                    values["appointment_start"],
                    values["appointment_end"],
                )
                _raise_if_rejected(result)

            obj = DBBookings(**values)
            db.add(obj)
            db.commit()
            db.refresh(obj)
    except BookingLockTimeout:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Booking is busy, try again"
        )

    logger.info(
        f"Booking created: booking_id={obj.id}, salon_id={obj.salon_id}, "
        f"staff_id={obj.staff_id}, service_id={obj.service_id}, "
        f"time={obj.appointment_start.isoformat()}..{obj.appointment_end.isoformat()}"
    )
    return obj


@router.patch("/{id}", response_model=BookingRead)
def update_booking(
    id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    """Admin edit: move/resize/reassign/change service or status."""
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)
    snap = changes.pop("snap", False)
    changes = {field: value for field, value in changes.items() if value is not None}

    new = {
        "staff_id": changes.get("staff_id", obj.staff_id),
        "service_id": changes.get("service_id", obj.service_id),
        "appointment_start": changes.get("appointment_start", obj.appointment_start),
        "appointment_end": changes.get("appointment_end"),
        "status": changes.get("status", obj.status),
    }

    service = get_service(db, new["service_id"])
    if "service_id" in changes and (not service or service.salon_id != obj.salon_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Service not found or inactive"
        )
    if "staff_id" in changes or "service_id" in changes:
        _require_staff(db, obj.salon_id, new["service_id"], new["staff_id"])

    if new["appointment_end"] is None:
        if "service_id" in changes:
            new["appointment_end"] = new["appointment_start"] + timedelta(minutes=service.duration_minutes)
        else:
            # moved without resize: keep the duration
            new["appointment_end"] = new["appointment_start"] + (obj.appointment_end - obj.appointment_start)

    if snap:
        new["appointment_start"] = _snap(new["appointment_start"])
        new["appointment_end"] = _snap(new["appointment_end"])
    _require_ordered_range(new["appointment_start"], new["appointment_end"])

    moved = (
        new["staff_id"] != obj.staff_id
        or new["appointment_start"] != obj.appointment_start
        or new["appointment_end"] != obj.appointment_end
    )
    reactivated = obj.status not in BUSY_STATUSES and new["status"] in BUSY_STATUSES
    needs_check = new["status"] in BUSY_STATUSES and (moved or reactivated)

    try:
        with staff_write_lock(redis, [obj.staff_id, new["staff_id"]]):
            if needs_check:
                result = _check_against_snapshot(
                    db,
                    obj.salon_id,
                    new["staff_id"],
                    new["appointment_start"],
                    new["appointment_end"],
                    exclude_booking_id=obj.id,
                )
                _raise_if_rejected(result)

            for field in ("customer_name", "customer_phone", "notes"):
                if field in changes:
                    setattr(obj, field, changes[field])
            for field, value in new.items():
                setattr(obj, field, value)
            obj.updated_at = datetime.now()

            db.commit()
            db.refresh(obj)
    except BookingLockTimeout:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Booking is busy, try again"
        )

    logger.info(f"Booking updated: booking_id={obj.id}, fields={sorted(changes)}, validated={needs_check}")
    return obj


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed, set status=cancelled instead",
    )


# ──────────────────────────────────────────────────────────────────────────────
# Helper functions
# ──────────────────────────────────────────────────────────────────────────────

def _snap(value: datetime) -> datetime:
    return snap_datetime(value, get_booking_config().calendar_snap_minutes)


def _require_staff(db: Session, salon_id: int, service_id: int, staff_id: int) -> None:
    staff = get_staff(db, staff_id)
    if not staff or staff.salon_id != salon_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Staff member not found or inactive"
        )
    if staff_id not in get_service_staff_ids(db, salon_id, service_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Staff member does not provide this service"
        )


def _check_against_snapshot(
    db: Session,
    salon_id: int,
    staff_id: int | None,
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> ValidationResult:
    """Load the snapshot touching [start, end) and run the validator."""
    staff_ids = [staff_id] if staff_id else []
    return validate_booking(
        employee_id=staff_id,
        start=start,
        end=end,
        bookings=get_busy_bookings(db, staff_ids, start, end),
        time_off=get_time_off(db, staff_ids, start, end),
        salon_hours=get_salon_hours(db, salon_id),
        staff_hours=get_staff_hours(db, salon_id, staff_ids),
        exclude_booking_id=exclude_booking_id,
    )


def _require_ordered_range(start: datetime, end: datetime) -> None:
    """Every stored booking needs end > start, whatever its status."""
    if end <= start:
        _raise_if_rejected(ValidationResult(ok=False, reason=RejectReason.INVALID_RANGE))


def _raise_if_rejected(result: ValidationResult) -> None:
    if result.ok:
        return
    logger.info(f"Booking rejected: {result.reason.value}")
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"reason": result.reason.value, "message": result.message},
    )
