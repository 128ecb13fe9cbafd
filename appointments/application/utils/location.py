from __future__ import annotations

from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar


def summarize_location(calendar: Calendar) -> str:
    """One-line description of where the meeting happens, for notifications."""
    if calendar.location_type == "in_person":
        return calendar.location_details or "In-person meeting"
    if calendar.location_type == "virtual":
        provider = calendar.virtual_meeting_preference or "Virtual meeting"
        if calendar.location_details:
            return f"{provider} · {calendar.location_details}"
        return provider
    if calendar.location_type == "phone":
        return calendar.location_details or "Phone call"
    return calendar.location_details or "Details to follow"


def resolve_meeting_url(calendar: Calendar, booking: Booking) -> str | None:
    if calendar.location_type != "virtual":
        return None
    if booking.meeting_url:
        return booking.meeting_url
    for candidate in (calendar.location_details, calendar.virtual_meeting_preference):
        if candidate and candidate.startswith("http"):
            return candidate
    return None
