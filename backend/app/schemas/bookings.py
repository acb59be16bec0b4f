# backend/app/schemas/bookings.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, field_validator

BookingStatus = Literal["pending", "confirmed", "cancelled", "no_show"]


def _wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    """Salon times are naive local wall-clock; drop any offset sent by the client."""
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


class BookingCreate(BaseModel):
    salon_id: int
    service_id: int
    staff_id: int

    customer_name: str
    customer_phone: Optional[str] = None

    appointment_start: datetime
    appointment_end: Optional[datetime] = None  # defaults to start + service duration

    status: BookingStatus = "pending"
    notes: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("appointment_start", "appointment_end")
    @classmethod
    def to_wall_clock(cls, v):
        return _wall_clock(v)


class BookingUpdate(BaseModel):
    """Admin edit: move, resize, reassign, change service or status."""
    staff_id: Optional[int] = None
    service_id: Optional[int] = None

    appointment_start: Optional[datetime] = None
    appointment_end: Optional[datetime] = None

    status: Optional[BookingStatus] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None

    snap: bool = False  # round times to the calendar grid

    model_config = {"from_attributes": True}

    @field_validator("appointment_start", "appointment_end")
    @classmethod
    def to_wall_clock(cls, v):
        return _wall_clock(v)


class BookingRead(BaseModel):
    id: int

    salon_id: int
    service_id: int
    staff_id: int

    customer_name: str
    customer_phone: Optional[str] = None

    appointment_start: datetime
    appointment_end: datetime

    status: str
    notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookingValidateRequest(BaseModel):
    salon_id: int
    staff_id: Optional[int] = None
    start: datetime
    end: datetime
    exclude_booking_id: Optional[int] = None
    snap: bool = False

    @field_validator("start", "end")
    @classmethod
    def to_wall_clock(cls, v):
        return _wall_clock(v)


class BookingValidateResponse(BaseModel):
    ok: bool
    reason: Optional[str] = None
    message: str = ""
