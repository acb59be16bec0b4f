"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    """A bookable interval."""
    start: datetime
    end: datetime
    staff_id: int | None = None

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Available slots of a service on one day."""
    salon_id: int
    service_id: int
    staff_id: int | None = None  # None = auto-assign
    date: date
    duration_minutes: int
    slot_step_minutes: int = Field(description="Grid step in minutes")
    slots: list[SlotInfo]

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_slots: bool
    open_slots_count: int = 0

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    salon_id: int
    service_id: int
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int
    min_lead_minutes: int
    slot_step_minutes: int = Field(description="Grid step in minutes")

    model_config = {"from_attributes": True}
