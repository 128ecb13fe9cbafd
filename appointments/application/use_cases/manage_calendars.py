from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from appointments.application.exceptions import CalendarNotFoundError, ConfigurationError
from appointments.application.ports.scheduling_store import SchedulingStorePort
from appointments.application.utils.rule_resolver import validate_rules
from appointments.application.utils.share_ids import generate_unique_share_id
from appointments.application.utils.timezones import UTC, validate_timezone
from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import CALENDAR_STATUSES, LOCATION_TYPES, Calendar

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "appointment_type",
        "description",
        "location_type",
        "location_details",
        "virtual_meeting_preference",
        "duration_minutes",
        "buffer_before_minutes",
        "buffer_after_minutes",
        "timezone",
        "booking_window_days",
        "min_schedule_notice_minutes",
        "status",
        "requires_confirmation",
        "google_calendar_sync",
        "owner_email",
    }
)
NULLABLE_FIELDS = frozenset(
    {"appointment_type", "description", "location_details", "virtual_meeting_preference", "owner_email"}
)


def validate_calendar(calendar: Calendar, max_booking_window_days: int) -> None:
    if not calendar.name or not calendar.name.strip():
        raise ConfigurationError("Calendar name is required")
    if calendar.location_type not in LOCATION_TYPES:
        raise ConfigurationError(f"Unsupported location type: {calendar.location_type}")
    if calendar.status not in CALENDAR_STATUSES:
        raise ConfigurationError(f"Unsupported calendar status: {calendar.status}")
    if calendar.duration_minutes <= 0:
        raise ConfigurationError("durationMinutes must be a positive number")
    if calendar.buffer_before_minutes < 0 or calendar.buffer_after_minutes < 0:
        raise ConfigurationError("Buffers cannot be negative")
    if calendar.min_schedule_notice_minutes < 0:
        raise ConfigurationError("minScheduleNoticeMinutes cannot be negative")
    if not 1 <= calendar.booking_window_days <= max_booking_window_days:
        raise ConfigurationError(f"bookingWindowDays must be between 1 and {max_booking_window_days}")
    validate_timezone(calendar.timezone)


class CalendarAdminUseCase:
    def __init__(self, store: SchedulingStorePort, max_booking_window_days: int = 365) -> None:
        self._store = store
        self._max_booking_window_days = max_booking_window_days
        self._logger = logging.getLogger(__name__)

    def create_calendar(self, business_id: str, owner_user_id: str, name: str, **fields: Any) -> Calendar:
        """
        Create an active calendar. Keyword fields match Calendar attributes in
        UPDATABLE_FIELDS; unknown keys are rejected.
        """
        self._check_fields(fields, UPDATABLE_FIELDS - {"name"})
        name = (name or "").strip()
        now = datetime.now(UTC)
        if not fields.get("appointment_type"):
            fields["appointment_type"] = name
        calendar = Calendar(
            id=str(uuid.uuid4()),
            business_id=business_id,
            owner_user_id=owner_user_id,
            name=name,
            share_id="",
            timezone=fields.pop("timezone", "UTC"),
            duration_minutes=fields.pop("duration_minutes", 30),
            created_at=now,
            updated_at=now,
            **fields,
        )
        validate_calendar(calendar, self._max_booking_window_days)

        calendar = replace(calendar, share_id=generate_unique_share_id(self._store.share_id_exists))
        created = self._store.create_calendar(calendar)
        self._logger.info(
            "Calendar created",
            extra={"calendar_id": created.id, "share_id": created.share_id},
        )
        return created

    def get_calendar(self, business_id: str, calendar_id: str) -> tuple[Calendar, list[AvailabilityRule]]:
        calendar = self._require(business_id, calendar_id)
        return calendar, self._store.get_rules(calendar.id)

    def list_calendars(self, business_id: str) -> list[Calendar]:
        return self._store.list_calendars(business_id)

    def update_calendar(self, business_id: str, calendar_id: str, changes: dict[str, Any]) -> Calendar:
        self._check_fields(changes, UPDATABLE_FIELDS)
        calendar = self._require(business_id, calendar_id)
        if not changes:
            return calendar
        cleared = sorted(k for k, v in changes.items() if v is None and k not in NULLABLE_FIELDS)
        if cleared:
            raise ConfigurationError(f"Fields cannot be cleared: {', '.join(cleared)}")

        if "name" in changes:
            changes = {**changes, "name": changes["name"].strip()}
        updated = replace(calendar, **changes, updated_at=datetime.now(UTC))
        validate_calendar(updated, self._max_booking_window_days)
        return self._store.update_calendar(updated)

    def deactivate_calendar(self, business_id: str, calendar_id: str) -> Calendar:
        """Soft delete: bookings keep referencing the calendar."""
        calendar = self._require(business_id, calendar_id)
        updated = self._store.update_calendar(replace(calendar, status="inactive", updated_at=datetime.now(UTC)))
        self._logger.info("Calendar deactivated", extra={"calendar_id": calendar.id})
        return updated

    def replace_rules(self, business_id: str, calendar_id: str, rules: list[AvailabilityRule]) -> list[AvailabilityRule]:
        calendar = self._require(business_id, calendar_id)
        validate_rules(rules)
        stored = self._store.replace_rules(
            calendar.id,
            [replace(rule, id=str(uuid.uuid4()), calendar_id=calendar.id) for rule in rules],
        )
        self._logger.info(
            "Availability rules replaced",
            extra={"calendar_id": calendar.id, "count": len(stored)},
        )
        return stored

    def list_bookings(self, business_id: str, calendar_id: str, include_cancelled: bool = True) -> list[Booking]:
        calendar = self._require(business_id, calendar_id)
        return self._store.list_bookings([calendar.id], include_cancelled=include_cancelled)

    def _require(self, business_id: str, calendar_id: str) -> Calendar:
        calendar = self._store.get_calendar(calendar_id, business_id)
        if calendar is None:
            raise CalendarNotFoundError("Calendar not found")
        return calendar

    def _check_fields(self, fields: dict[str, Any], allowed: frozenset[str]) -> None:
        unknown = set(fields) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown calendar fields: {', '.join(sorted(unknown))}")
