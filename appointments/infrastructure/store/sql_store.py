from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from appointments.application.exceptions import SlotUnavailableError
from appointments.application.ports.scheduling_store import SchedulingStorePort
from appointments.application.utils.timezones import UTC
from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar
from appointments.infrastructure.store.sql_models import AvailabilityRuleRow, BookingRow, CalendarRow

CALENDAR_COLUMNS = (
    "id",
    "business_id",
    "owner_user_id",
    "owner_email",
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
    "share_id",
    "booking_window_days",
    "min_schedule_notice_minutes",
    "status",
    "requires_confirmation",
    "google_calendar_sync",
)

BOOKING_COLUMNS = (
    "id",
    "calendar_id",
    "share_id",
    "created_by_user_id",
    "guest_name",
    "guest_email",
    "guest_timezone",
    "guest_notes",
    "status",
    "meeting_url",
    "meeting_location",
    "external_event_id",
    "external_calendar",
)


class SqlSchedulingStore(SchedulingStorePort):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._logger = logging.getLogger(__name__)

    def create_calendar(self, calendar: Calendar) -> Calendar:
        with self._session_factory() as session, session.begin():
            row = CalendarRow(
                **{name: getattr(calendar, name) for name in CALENDAR_COLUMNS},
                created_at=calendar.created_at,
                updated_at=calendar.updated_at,
            )
            session.add(row)
        return calendar

    def get_calendar(self, calendar_id: str, business_id: str) -> Calendar | None:
        with self._session_factory() as session:
            row = session.scalars(
                select(CalendarRow).where(CalendarRow.id == calendar_id, CalendarRow.business_id == business_id)
            ).first()
            return _calendar_from_row(row) if row else None

    def get_calendar_by_share_id(self, share_id: str) -> Calendar | None:
        with self._session_factory() as session:
            row = session.scalars(select(CalendarRow).where(CalendarRow.share_id == share_id)).first()
            return _calendar_from_row(row) if row else None

    def list_calendars(self, business_id: str) -> list[Calendar]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(CalendarRow).where(CalendarRow.business_id == business_id).order_by(CalendarRow.created_at.desc())
            ).all()
            return [_calendar_from_row(row) for row in rows]

    def update_calendar(self, calendar: Calendar) -> Calendar:
        values = {name: getattr(calendar, name) for name in CALENDAR_COLUMNS if name != "id"}
        values["updated_at"] = calendar.updated_at
        with self._session_factory() as session, session.begin():
            session.execute(update(CalendarRow).where(CalendarRow.id == calendar.id).values(**values))
        return calendar

    def share_id_exists(self, share_id: str) -> bool:
        with self._session_factory() as session:
            return session.scalar(select(CalendarRow.id).where(CalendarRow.share_id == share_id)) is not None

    def get_rules(self, calendar_id: str) -> list[AvailabilityRule]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(AvailabilityRuleRow)
                .where(AvailabilityRuleRow.calendar_id == calendar_id)
                .order_by(
                    AvailabilityRuleRow.rule_type.desc(),
                    AvailabilityRuleRow.day_of_week.asc(),
                    AvailabilityRuleRow.start_minutes.asc(),
                )
            ).all()
            return [_rule_from_row(row) for row in rows]

    def replace_rules(self, calendar_id: str, rules: list[AvailabilityRule]) -> list[AvailabilityRule]:
        # Delete and insert share one transaction; any failure rolls back to the previous rule set.
        with self._session_factory() as session, session.begin():
            session.execute(delete(AvailabilityRuleRow).where(AvailabilityRuleRow.calendar_id == calendar_id))
            session.add_all(
                [
                    AvailabilityRuleRow(
                        id=rule.id,
                        calendar_id=calendar_id,
                        rule_type=rule.rule_type,
                        day_of_week=rule.day_of_week,
                        specific_date=date.fromisoformat(rule.specific_date) if rule.specific_date else None,
                        start_minutes=rule.start_minutes,
                        end_minutes=rule.end_minutes,
                        is_unavailable=rule.is_unavailable,
                    )
                    for rule in rules
                ]
            )
        return self.get_rules(calendar_id)

    def list_bookings(
        self,
        calendar_ids: list[str],
        include_cancelled: bool = False,
        starting_after: datetime | None = None,
    ) -> list[Booking]:
        if not calendar_ids:
            return []

        query = select(BookingRow).where(BookingRow.calendar_id.in_(calendar_ids))
        if not include_cancelled:
            query = query.where(BookingRow.status != "cancelled")
        if starting_after is not None:
            query = query.where(BookingRow.start_time >= starting_after.astimezone(UTC))

        with self._session_factory() as session:
            rows = session.scalars(query.order_by(BookingRow.start_time.asc())).all()
            return [_booking_from_row(row) for row in rows]

    def get_booking(self, booking_id: str, calendar_id: str) -> Booking | None:
        with self._session_factory() as session:
            row = session.scalars(
                select(BookingRow).where(BookingRow.id == booking_id, BookingRow.calendar_id == calendar_id)
            ).first()
            return _booking_from_row(row) if row else None

    def insert_booking_if_free(self, booking: Booking) -> Booking:
        start = booking.start_time.astimezone(UTC)
        end = booking.end_time.astimezone(UTC)
        try:
            with self._session_factory() as session, session.begin():
                # Serializes bookings per calendar (SQLite: BEGIN IMMEDIATE); a racing insert waits, then sees the winner.
                session.execute(select(CalendarRow.id).where(CalendarRow.id == booking.calendar_id).with_for_update())
                if _has_overlap(session, booking.calendar_id, start, end):
                    raise SlotUnavailableError("Selected slot is no longer available")

                session.add(
                    BookingRow(
                        **{name: getattr(booking, name) for name in BOOKING_COLUMNS},
                        start_time=start,
                        end_time=end,
                        created_at=booking.created_at,
                        updated_at=booking.updated_at,
                    )
                )
        except IntegrityError as e:
            self._logger.warning(
                "Booking insert rejected by database constraint",
                extra={"calendar_id": booking.calendar_id, "error": str(e.orig)},
            )
            raise SlotUnavailableError("Selected slot is no longer available") from e
        return booking

    def update_booking_status(self, booking_id: str, from_status: str, to_status: str, updated_at: datetime) -> Booking | None:
        with self._session_factory() as session, session.begin():
            result = session.execute(
                update(BookingRow)
                .where(BookingRow.id == booking_id, BookingRow.status == from_status)
                .values(status=to_status, updated_at=updated_at)
            )
            if result.rowcount == 0:
                return None
            row = session.get(BookingRow, booking_id, populate_existing=True)
            return _booking_from_row(row)


def _has_overlap(session: Session, calendar_id: str, start: datetime, end: datetime) -> bool:
    conflict = session.scalar(
        select(BookingRow.id)
        .where(
            BookingRow.calendar_id == calendar_id,
            BookingRow.status != "cancelled",
            BookingRow.start_time < end,
            BookingRow.end_time > start,
        )
        .limit(1)
    )
    return conflict is not None


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive values; everything is stored in UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _calendar_from_row(row: CalendarRow) -> Calendar:
    return Calendar(
        **{name: getattr(row, name) for name in CALENDAR_COLUMNS},
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _rule_from_row(row: AvailabilityRuleRow) -> AvailabilityRule:
    return AvailabilityRule(
        id=row.id,
        calendar_id=row.calendar_id,
        rule_type=row.rule_type,
        day_of_week=row.day_of_week,
        specific_date=row.specific_date.isoformat() if row.specific_date else None,
        start_minutes=row.start_minutes,
        end_minutes=row.end_minutes,
        is_unavailable=row.is_unavailable,
    )


def _booking_from_row(row: BookingRow) -> Booking:
    return Booking(
        **{name: getattr(row, name) for name in BOOKING_COLUMNS},
        start_time=_as_utc(row.start_time),
        end_time=_as_utc(row.end_time),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )
