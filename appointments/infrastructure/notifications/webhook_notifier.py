from __future__ import annotations

import logging

import httpx

from appointments.application.dto.booking_notification import BookingNotification
from appointments.application.ports.notifier import NotifierPort
from appointments.infrastructure.notifications.signing import SIGNATURE_HEADER, sign_body


class WebhookNotifier(NotifierPort):
    """POSTs each notification as JSON to the delivery service that owns email."""

    def __init__(self, endpoint: str, secret: str | None = None, client: httpx.Client | None = None) -> None:
        if not endpoint:
            raise ValueError("NOTIFICATION_WEBHOOK_URL is required for webhook notifications")
        self._endpoint = endpoint
        self._secret = secret
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send(self, notification: BookingNotification) -> None:
        body = notification.model_dump_json().encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._secret:
            headers[SIGNATURE_HEADER] = sign_body(body, self._secret)

        resp = self._client.post(self._endpoint, content=body, headers=headers)
        if resp.status_code >= 400:
            self._logger.error(
                "Notification delivery failed",
                extra={
                    "status": resp.status_code,
                    "booking_id": notification.booking_id,
                    "kind": notification.kind,
                    "error": resp.text[:200],
                },
            )
            resp.raise_for_status()
