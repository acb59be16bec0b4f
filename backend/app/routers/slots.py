# backend/app/routers/slots.py
"""
Slots API endpoints.

GET /slots/day      - Bookable slots of a service on a day (one staff or auto-assign)
GET /slots/calendar - Open slot counts per day for a date range
"""

from datetime import date, datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import (
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
)
from ..services.slots import calculate_service_availability, get_booking_config
from ..services.slots.availability import calculate_calendar
from ..services.slots.repository import get_service


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    salon_id: int,
    service_id: int,
    staff_id: int | None = None,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get bookable slots for a service on a day; without staff_id slots are auto-assigned."""
    config = get_booking_config()

    today = date.today()
    max_date = today + timedelta(days=config.horizon_days)

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    if target_date > max_date:
        raise HTTPException(status_code=400, detail=f"Date cannot be more than {config.horizon_days} days ahead")

    service = get_service(db, service_id)
    if not service or service.salon_id != salon_id:
        raise HTTPException(status_code=404, detail="Service not found")

    result = calculate_service_availability(
        db=db,
        salon_id=salon_id,
        service_id=service_id,
        target_date=target_date,
        now=datetime.now(),
        staff_id=staff_id,
        config=config,
    )

    return SlotsDayResponse(**result)


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    salon_id: int,
    service_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Get calendar of days with open slots for a service."""
    config = get_booking_config()

    service = get_service(db, service_id)
    if not service or service.salon_id != salon_id:
        raise HTTPException(status_code=404, detail="Service not found")

    today = date.today()
    if start_date is None:
        start_date = today
    if end_date is None:
        end_date = start_date + timedelta(days=config.horizon_days)

    if start_date < today:
        start_date = today
    if end_date > today + timedelta(days=config.horizon_days):
        end_date = today + timedelta(days=config.horizon_days)
    if end_date < start_date:
        end_date = start_date

    counts = calculate_calendar(
        db, salon_id, service_id, start_date, end_date, datetime.now(), config
    )

    days = [
        SlotsDayStatus(date=dt, has_slots=count > 0, open_slots_count=count)
        for dt, count in counts
    ]

    return SlotsCalendarResponse(
        salon_id=salon_id,
        service_id=service_id,
        start_date=start_date,
        end_date=end_date,
        days=days,
        horizon_days=config.horizon_days,
        min_lead_minutes=config.min_lead_minutes,
        slot_step_minutes=config.slot_step_minutes,
    )
