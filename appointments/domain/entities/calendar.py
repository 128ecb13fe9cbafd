from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

LOCATION_TYPES = ("in_person", "virtual", "phone", "custom")
CALENDAR_STATUSES = ("active", "inactive")


@dataclass(frozen=True)
class Calendar:
    id: str
    business_id: str
    owner_user_id: str
    name: str
    share_id: str
    timezone: str
    duration_minutes: int
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0
    booking_window_days: int = 30
    min_schedule_notice_minutes: int = 0
    appointment_type: str | None = None
    description: str | None = None
    location_type: str = "virtual"  # "in_person", "virtual", "phone", "custom"
    location_details: str | None = None
    virtual_meeting_preference: str | None = None
    status: str = "active"  # "active", "inactive"
    requires_confirmation: bool = False
    google_calendar_sync: bool = False
    owner_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"
