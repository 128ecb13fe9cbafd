from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

BOOKING_STATUSES = ("pending", "scheduled", "cancelled", "completed")

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "pending": ("scheduled", "cancelled"),
    "scheduled": ("cancelled", "completed"),
    "cancelled": (),
    "completed": (),
}


@dataclass(frozen=True)
class Booking:
    id: str
    calendar_id: str
    share_id: str
    guest_name: str
    guest_email: str
    start_time: datetime  # aware, UTC
    end_time: datetime  # aware, UTC
    status: str = "scheduled"
    guest_timezone: str | None = None
    guest_notes: str | None = None
    meeting_url: str | None = None
    meeting_location: str | None = None
    external_event_id: str | None = None
    external_calendar: str | None = None
    created_by_user_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start_time < end and self.end_time > start


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, ())
