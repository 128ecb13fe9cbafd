from __future__ import annotations

from pydantic import BaseModel


class BookingNotification(BaseModel):
    kind: str  # "booking_created", "booking_confirmed", "booking_declined", "booking_completed"
    recipient_role: str  # "guest" | "owner"
    recipient_email: str
    booking_id: str
    calendar_id: str
    calendar_name: str
    guest_name: str
    guest_email: str
    start_time: str  # UTC ISO
    end_time: str  # UTC ISO
    timezone: str
    local_start: str
    local_end: str
    guest_timezone: str | None = None
    guest_local_start: str | None = None
    guest_local_end: str | None = None
    location_summary: str
    meeting_url: str | None = None
    notes: str | None = None
    status: str
    reason: str | None = None
