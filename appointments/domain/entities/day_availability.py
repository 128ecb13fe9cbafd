from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar


@dataclass(frozen=True)
class AvailabilitySlot:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class DayAvailability:
    date: str  # calendar-local YYYY-MM-DD
    slots: list[AvailabilitySlot] = field(default_factory=list)


@dataclass(frozen=True)
class CalendarSummary:
    calendar: Calendar
    upcoming_availability: list[DayAvailability]
    upcoming_bookings: list[Booking]
