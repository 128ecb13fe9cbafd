from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

from appointments.application.exceptions import SlotUnavailableError
from appointments.application.ports.scheduling_store import SchedulingStorePort
from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar


class MemorySchedulingStore(SchedulingStorePort):
    def __init__(self) -> None:
        self._calendars: dict[str, Calendar] = {}
        self._rules: dict[str, list[AvailabilityRule]] = {}
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.Lock()  # guards every read and write of the three dicts

    def create_calendar(self, calendar: Calendar) -> Calendar:
        with self._lock:
            self._calendars[calendar.id] = calendar
            self._rules.setdefault(calendar.id, [])
        return calendar

    def get_calendar(self, calendar_id: str, business_id: str) -> Calendar | None:
        calendar = self._calendars.get(calendar_id)
        if calendar is None or calendar.business_id != business_id:
            return None
        return calendar

    def get_calendar_by_share_id(self, share_id: str) -> Calendar | None:
        with self._lock:
            calendars = list(self._calendars.values())
        for calendar in calendars:
            if calendar.share_id == share_id:
                return calendar
        return None

    def list_calendars(self, business_id: str) -> list[Calendar]:
        with self._lock:
            calendars = [c for c in self._calendars.values() if c.business_id == business_id]
        return sorted(calendars, key=lambda c: c.created_at.timestamp() if c.created_at else 0.0, reverse=True)

    def update_calendar(self, calendar: Calendar) -> Calendar:
        with self._lock:
            self._calendars[calendar.id] = calendar
        return calendar

    def share_id_exists(self, share_id: str) -> bool:
        return self.get_calendar_by_share_id(share_id) is not None

    def get_rules(self, calendar_id: str) -> list[AvailabilityRule]:
        with self._lock:
            return list(self._rules.get(calendar_id, []))

    def replace_rules(self, calendar_id: str, rules: list[AvailabilityRule]) -> list[AvailabilityRule]:
        # Build the new list completely before swapping it in.
        new_rules = [replace(rule, calendar_id=calendar_id) for rule in rules]
        with self._lock:
            self._rules[calendar_id] = new_rules
        return list(new_rules)

    def list_bookings(
        self,
        calendar_ids: list[str],
        include_cancelled: bool = False,
        starting_after: datetime | None = None,
    ) -> list[Booking]:
        wanted = set(calendar_ids)
        with self._lock:
            snapshot = list(self._bookings.values())
        bookings = [
            b
            for b in snapshot
            if b.calendar_id in wanted
            and (include_cancelled or not b.is_cancelled)
            and (starting_after is None or b.start_time >= starting_after)
        ]
        return sorted(bookings, key=lambda b: b.start_time)

    def get_booking(self, booking_id: str, calendar_id: str) -> Booking | None:
        booking = self._bookings.get(booking_id)
        if booking is None or booking.calendar_id != calendar_id:
            return None
        return booking

    def insert_booking_if_free(self, booking: Booking) -> Booking:
        with self._lock:
            for existing in self._bookings.values():
                if existing.calendar_id != booking.calendar_id or existing.is_cancelled:
                    continue
                if existing.overlaps(booking.start_time, booking.end_time):
                    raise SlotUnavailableError("Selected slot is no longer available")
            self._bookings[booking.id] = booking
        return booking

    def update_booking_status(self, booking_id: str, from_status: str, to_status: str, updated_at: datetime) -> Booking | None:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None or booking.status != from_status:
                return None
            updated = replace(booking, status=to_status, updated_at=updated_at)
            self._bookings[booking_id] = updated
        return updated
