from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from appointments.application.exceptions import (
    BookingNotFoundError,
    CalendarNotFoundError,
    ConfigurationError,
    InvalidStatusTransitionError,
    SlotUnavailableError,
)
from appointments.application.ports.scheduling_store import SchedulingStorePort
from appointments.application.use_cases.availability_window import AvailabilityWindowUseCase
from appointments.application.use_cases.notify_booking import NotifyBookingUseCase
from appointments.application.utils.share_ids import generate_share_id
from appointments.application.utils.timezones import UTC, ensure_utc, validate_timezone
from appointments.domain.entities.booking import Booking, can_transition
from appointments.domain.entities.calendar import Calendar
from appointments.domain.entities.day_availability import DayAvailability

NOTIFICATION_KINDS = {
    "scheduled": "booking_confirmed",
    "cancelled": "booking_declined",
    "completed": "booking_completed",
}

# Takes a callable and its arguments, e.g. FastAPI's BackgroundTasks.add_task.
Scheduler = Callable[..., Any]


@dataclass(frozen=True)
class BookingRequest:
    guest_name: str
    guest_email: str
    slot_start: datetime
    slot_end: datetime
    guest_timezone: str | None = None
    guest_notes: str | None = None
    meeting_url: str | None = None
    meeting_location: str | None = None


@dataclass(frozen=True)
class BookingResult:
    booking: Booking
    availability: list[DayAvailability]


class BookingUseCase:
    def __init__(
        self,
        store: SchedulingStorePort,
        availability: AvailabilityWindowUseCase,
        notify: NotifyBookingUseCase,
    ) -> None:
        self._store = store
        self._availability = availability
        self._notify = notify
        self._logger = logging.getLogger(__name__)

    def reserve(
        self,
        share_id: str,
        request: BookingRequest,
        now: datetime | None = None,
        schedule: Scheduler | None = None,
    ) -> BookingResult:
        """Public booking flow: reserve a slot on an active calendar found by share id."""
        calendar = self._store.get_calendar_by_share_id(share_id)
        if calendar is None or not calendar.is_active:
            raise CalendarNotFoundError("Calendar not found")
        return self._reserve(calendar, request, now=now, schedule=schedule)

    def reserve_for_calendar(
        self,
        business_id: str,
        calendar_id: str,
        request: BookingRequest,
        created_by_user_id: str | None = None,
        now: datetime | None = None,
        schedule: Scheduler | None = None,
    ) -> BookingResult:
        """Admin booking flow, scoped to the caller's tenant."""
        calendar = self._get_calendar(business_id, calendar_id)
        return self._reserve(calendar, request, created_by_user_id=created_by_user_id, now=now, schedule=schedule)

    def change_status(
        self,
        business_id: str,
        calendar_id: str,
        booking_id: str,
        status: str,
        reason: str | None = None,
        now: datetime | None = None,
        schedule: Scheduler | None = None,
    ) -> BookingResult:
        """Accept (scheduled), decline (cancelled) or complete a booking."""
        now = ensure_utc(now) if now else datetime.now(UTC)
        calendar = self._get_calendar(business_id, calendar_id)
        current = self._store.get_booking(booking_id, calendar.id)
        if current is None:
            raise BookingNotFoundError("Booking not found")

        if not can_transition(current.status, status):
            raise InvalidStatusTransitionError(
                f"Status change from {current.status} to {status} is not allowed for this booking"
            )

        updated = self._store.update_booking_status(current.id, current.status, status, now)
        if updated is None:
            raise InvalidStatusTransitionError("Booking status changed concurrently; reload and retry")

        reason = reason.strip() if reason and reason.strip() else None
        self._logger.info(
            "Booking status changed",
            extra={"booking_id": updated.id, "calendar_id": calendar.id, "status": status, "reason": reason},
        )
        self._send(schedule, NOTIFICATION_KINDS[status], calendar, updated, reason=reason if status == "cancelled" else None)

        return BookingResult(booking=updated, availability=self._availability.build_window(calendar, now=now))

    def complete_elapsed(self, business_id: str, calendar_id: str, now: datetime | None = None) -> list[Booking]:
        """Mark scheduled bookings that have already ended as completed."""
        now = ensure_utc(now) if now else datetime.now(UTC)
        calendar = self._get_calendar(business_id, calendar_id)

        completed: list[Booking] = []
        for booking in self._store.list_bookings([calendar.id]):
            if booking.status != "scheduled" or booking.end_time > now:
                continue
            updated = self._store.update_booking_status(booking.id, "scheduled", "completed", now)
            if updated is not None:
                completed.append(updated)

        if completed:
            self._logger.info(
                "Elapsed bookings completed",
                extra={"calendar_id": calendar.id, "count": len(completed)},
            )
        return completed

    def _reserve(
        self,
        calendar: Calendar,
        request: BookingRequest,
        created_by_user_id: str | None = None,
        now: datetime | None = None,
        schedule: Scheduler | None = None,
    ) -> BookingResult:
        now = ensure_utc(now) if now else datetime.now(UTC)
        guest_name = request.guest_name.strip()
        guest_email = request.guest_email.strip()
        if not guest_name or not guest_email:
            raise ConfigurationError("Guest name and email are required")

        guest_timezone = (request.guest_timezone or "").strip() or calendar.timezone
        validate_timezone(guest_timezone)

        try:
            start = ensure_utc(request.slot_start)
            end = ensure_utc(request.slot_end)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if end <= start:
            raise ConfigurationError("Invalid slot duration")

        cutoff = now + timedelta(minutes=calendar.min_schedule_notice_minutes)
        if start < cutoff:
            raise SlotUnavailableError("Selected slot is within the minimum scheduling notice")

        booking = Booking(
            id=str(uuid.uuid4()),
            calendar_id=calendar.id,
            share_id=generate_share_id(),
            guest_name=guest_name,
            guest_email=guest_email,
            guest_timezone=guest_timezone,
            guest_notes=(request.guest_notes or "").strip() or None,
            start_time=start,
            end_time=end,
            status="pending" if calendar.requires_confirmation else "scheduled",
            meeting_url=request.meeting_url,
            meeting_location=request.meeting_location,
            created_by_user_id=created_by_user_id,
            created_at=now,
            updated_at=now,
        )

        try:
            booking = self._store.insert_booking_if_free(booking)
        except SlotUnavailableError:
            self._logger.info(
                "Slot no longer available",
                extra={"calendar_id": calendar.id, "share_id": calendar.share_id, "slot_start": start.isoformat()},
            )
            raise

        self._logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "calendar_id": calendar.id, "status": booking.status},
        )
        self._send(schedule, "booking_created", calendar, booking)

        return BookingResult(booking=booking, availability=self._availability.build_window(calendar, now=now))

    def _send(
        self,
        schedule: Scheduler | None,
        kind: str,
        calendar: Calendar,
        booking: Booking,
        reason: str | None = None,
    ) -> None:
        """Send now, or hand the send to the caller's scheduler to run after the response."""
        if schedule is None:
            self._notify.execute(kind, calendar, booking, reason=reason)
            return
        schedule(self._notify.execute, kind, calendar, booking, reason=reason)

    def _get_calendar(self, business_id: str, calendar_id: str) -> Calendar:
        calendar = self._store.get_calendar(calendar_id, business_id)
        if calendar is None:
            raise CalendarNotFoundError("Calendar not found")
        return calendar
