from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from appointments.core.config import settings


class CalendarCreateSchema(BaseModel):
    name: str
    appointment_type: str | None = None
    description: str | None = None
    location_type: str = "virtual"
    location_details: str | None = None
    virtual_meeting_preference: str | None = None
    duration_minutes: int = Field(default_factory=lambda: settings.DEFAULT_DURATION_MINUTES)
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0
    timezone: str = Field(default_factory=lambda: settings.DEFAULT_TIMEZONE)
    booking_window_days: int = Field(default_factory=lambda: settings.DEFAULT_BOOKING_WINDOW_DAYS)
    min_schedule_notice_minutes: int = Field(default_factory=lambda: settings.DEFAULT_MIN_NOTICE_MINUTES)
    requires_confirmation: bool = False
    google_calendar_sync: bool = False
    owner_email: str | None = None


class CalendarUpdateSchema(BaseModel):
    name: str | None = None
    appointment_type: str | None = None
    description: str | None = None
    location_type: str | None = None
    location_details: str | None = None
    virtual_meeting_preference: str | None = None
    duration_minutes: int | None = None
    buffer_before_minutes: int | None = None
    buffer_after_minutes: int | None = None
    timezone: str | None = None
    booking_window_days: int | None = None
    min_schedule_notice_minutes: int | None = None
    status: Literal["active", "inactive"] | None = None
    requires_confirmation: bool | None = None
    google_calendar_sync: bool | None = None
    owner_email: str | None = None


class CalendarSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    owner_user_id: str
    owner_email: str | None = None
    name: str
    appointment_type: str | None = None
    description: str | None = None
    location_type: str
    location_details: str | None = None
    virtual_meeting_preference: str | None = None
    duration_minutes: int
    buffer_before_minutes: int
    buffer_after_minutes: int
    timezone: str
    share_id: str
    booking_window_days: int
    min_schedule_notice_minutes: int
    status: str
    requires_confirmation: bool
    google_calendar_sync: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicCalendarSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    appointment_type: str | None = None
    description: str | None = None
    location_type: str
    duration_minutes: int
    timezone: str
    share_id: str
    booking_window_days: int
    requires_confirmation: bool


class AvailabilityRuleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    rule_type: Literal["weekly", "date"]
    day_of_week: int | None = None
    specific_date: str | None = None
    start_minutes: int
    end_minutes: int
    is_unavailable: bool = False


class RulesReplaceSchema(BaseModel):
    rules: list[AvailabilityRuleSchema]


class CalendarDetailSchema(BaseModel):
    calendar: CalendarSchema
    rules: list[AvailabilityRuleSchema]


class SlotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start: datetime
    end: datetime


class DayAvailabilitySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    slots: list[SlotSchema]


class PublicAvailabilityResponseSchema(BaseModel):
    calendar: PublicCalendarSchema
    availability: list[DayAvailabilitySchema]


class BookingCreateSchema(BaseModel):
    guest_name: str
    guest_email: str
    slot_start: datetime
    slot_end: datetime
    guest_timezone: str | None = None
    guest_notes: str | None = None


class BookingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    calendar_id: str
    share_id: str
    created_by_user_id: str | None = None
    guest_name: str
    guest_email: str
    guest_timezone: str | None = None
    guest_notes: str | None = None
    start_time: datetime
    end_time: datetime
    status: str
    meeting_url: str | None = None
    meeting_location: str | None = None
    external_event_id: str | None = None
    external_calendar: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BookingResponseSchema(BaseModel):
    booking: BookingSchema
    availability: list[DayAvailabilitySchema]


class BookingStatusUpdateSchema(BaseModel):
    status: Literal["scheduled", "cancelled", "completed"]
    reason: str | None = None


class CalendarSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    calendar: CalendarSchema
    upcoming_availability: list[DayAvailabilitySchema]
    upcoming_bookings: list[BookingSchema]
