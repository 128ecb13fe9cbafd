from __future__ import annotations

import logging

from appointments.application.dto.booking_notification import BookingNotification
from appointments.application.ports.notifier import NotifierPort
from appointments.application.utils.location import resolve_meeting_url, summarize_location
from appointments.application.utils.timezones import describe_slot_for_display
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar


class NotifyBookingUseCase:
    def __init__(self, notifier: NotifierPort, enabled: bool = True) -> None:
        self._notifier = notifier
        self._enabled = enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, kind: str, calendar: Calendar, booking: Booking, reason: str | None = None) -> int:
        """
        Notify the guest and, when known, the calendar owner.
        Returns the number of notifications delivered. Delivery failures are logged only.
        """
        notifications = self.build(kind, calendar, booking, reason)
        if not self._enabled:
            self._logger.info(
                "NOTIFICATIONS_ENABLED=false -> skipping send",
                extra={"booking_id": booking.id, "status": booking.status},
            )
            return 0

        sent = 0
        for notification in notifications:
            try:
                self._notifier.send(notification)
                sent += 1
            except Exception as e:
                self._logger.warning(
                    "Booking notification failed",
                    extra={
                        "booking_id": booking.id,
                        "calendar_id": calendar.id,
                        "status": booking.status,
                        "error": str(e),
                    },
                )
        return sent

    def build(self, kind: str, calendar: Calendar, booking: Booking, reason: str | None = None) -> list[BookingNotification]:
        local_start = describe_slot_for_display(booking.start_time, calendar.timezone)
        local_end = describe_slot_for_display(booking.end_time, calendar.timezone)
        guest_start = guest_end = None
        if booking.guest_timezone:
            guest_start = describe_slot_for_display(booking.start_time, booking.guest_timezone)["label"]
            guest_end = describe_slot_for_display(booking.end_time, booking.guest_timezone)["label"]

        base = {
            "kind": kind,
            "booking_id": booking.id,
            "calendar_id": calendar.id,
            "calendar_name": calendar.name,
            "guest_name": booking.guest_name,
            "guest_email": booking.guest_email,
            "start_time": booking.start_time.isoformat(),
            "end_time": booking.end_time.isoformat(),
            "timezone": calendar.timezone,
            "local_start": local_start["label"],
            "local_end": local_end["label"],
            "guest_timezone": booking.guest_timezone,
            "guest_local_start": guest_start,
            "guest_local_end": guest_end,
            "location_summary": booking.meeting_location or summarize_location(calendar),
            "meeting_url": resolve_meeting_url(calendar, booking),
            "notes": booking.guest_notes,
            "status": booking.status,
            "reason": reason,
        }

        notifications = [
            BookingNotification(recipient_role="guest", recipient_email=booking.guest_email, **base)
        ]
        if calendar.owner_email:
            notifications.append(
                BookingNotification(recipient_role="owner", recipient_email=calendar.owner_email, **base)
            )
        return notifications
