from __future__ import annotations

import logging

from appointments.application.dto.booking_notification import BookingNotification
from appointments.application.ports.notifier import NotifierPort


class LoggingNotifier(NotifierPort):
    def __init__(self) -> None:
        self._sent: list[BookingNotification] = []
        self._logger = logging.getLogger(__name__)

    @property
    def sent(self) -> list[BookingNotification]:
        return list(self._sent)

    def send(self, notification: BookingNotification) -> None:
        self._sent.append(notification)
        self._logger.info(
            "Mock booking notification",
            extra={
                "booking_id": notification.booking_id,
                "status": notification.status,
                "reason": notification.reason,
                "kind": notification.kind,
            },
        )
