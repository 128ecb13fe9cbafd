from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from appointments.application.exceptions import CalendarNotFoundError, ConfigurationError
from appointments.application.ports.scheduling_store import SchedulingStorePort
from appointments.application.utils.rule_resolver import resolve_open_intervals
from appointments.application.utils.slot_generator import compute_slots_for_day
from appointments.application.utils.timezones import UTC, ensure_utc, local_weekday, utc_to_local_date
from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar
from appointments.domain.entities.day_availability import CalendarSummary, DayAvailability

SUMMARY_AVAILABLE_DAYS = 7
SUMMARY_BOOKINGS = 10


def build_availability_window(
    calendar: Calendar,
    rules: list[AvailabilityRule],
    bookings: list[Booking],
    start: datetime,
    end: datetime,
    now: datetime,
) -> list[DayAvailability]:
    """
    Bookable slots for every calendar-local date between `start` and `end` (inclusive).

    Closed or fully booked dates are left out of the result rather than returned empty.
    The notice cutoff never falls before `now`, even for a window that starts in the past.
    """
    cutoff = max(start, now) + timedelta(minutes=calendar.min_schedule_notice_minutes)
    first_day = date.fromisoformat(utc_to_local_date(start, calendar.timezone))
    last_day = date.fromisoformat(utc_to_local_date(end, calendar.timezone))

    results: list[DayAvailability] = []
    day = first_day
    while day <= last_day:
        local_date = day.isoformat()
        day += timedelta(days=1)

        intervals = resolve_open_intervals(rules, local_date, local_weekday(local_date))
        if not intervals:
            continue

        availability = compute_slots_for_day(local_date, calendar, intervals, bookings, cutoff)
        if availability.slots:
            results.append(availability)

    return results


class AvailabilityWindowUseCase:
    def __init__(
        self,
        store: SchedulingStorePort,
        window_cap_days: int = 30,
        summary_days_default: int = 14,
        summary_days_cap: int = 60,
    ) -> None:
        self._store = store
        self._window_cap_days = window_cap_days
        self._summary_days_default = summary_days_default
        self._summary_days_cap = summary_days_cap
        self._logger = logging.getLogger(__name__)

    def build_window(
        self,
        calendar: Calendar,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> list[DayAvailability]:
        now = ensure_utc(now) if now else datetime.now(UTC)
        start = ensure_utc(start) if start else now
        latest = start + timedelta(days=min(calendar.booking_window_days, self._window_cap_days))
        if end is None:
            end = latest
        else:
            end = ensure_utc(end)
            if end < start:
                raise ConfigurationError("end must not be before start")
            end = min(end, latest)

        rules = self._store.get_rules(calendar.id)
        bookings = self._store.list_bookings([calendar.id])
        days = build_availability_window(calendar, rules, bookings, start, end, now)
        self._logger.debug(
            "Availability window built",
            extra={"calendar_id": calendar.id, "days": len(days)},
        )
        return days

    def get_public_availability(
        self,
        share_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> tuple[Calendar, list[DayAvailability]]:
        calendar = self._store.get_calendar_by_share_id(share_id)
        if calendar is None or not calendar.is_active:
            raise CalendarNotFoundError("Calendar not found")
        return calendar, self.build_window(calendar, start, end, now)

    def calendar_summaries(
        self,
        business_id: str,
        days: int | None = None,
        now: datetime | None = None,
    ) -> list[CalendarSummary]:
        now = ensure_utc(now) if now else datetime.now(UTC)
        days = min(days or self._summary_days_default, self._summary_days_cap)

        calendars = self._store.list_calendars(business_id)
        if not calendars:
            return []

        bookings = self._store.list_bookings([c.id for c in calendars], starting_after=now)
        summaries: list[CalendarSummary] = []
        for calendar in calendars:
            rules = self._store.get_rules(calendar.id)
            calendar_bookings = [b for b in bookings if b.calendar_id == calendar.id]
            window_days = min(calendar.booking_window_days, days)

            availability: list[DayAvailability] = []
            if window_days > 0:
                end = now + timedelta(days=window_days - 1)
                availability = build_availability_window(calendar, rules, calendar_bookings, now, end, now)

            summaries.append(
                CalendarSummary(
                    calendar=calendar,
                    upcoming_availability=availability[:SUMMARY_AVAILABLE_DAYS],
                    upcoming_bookings=calendar_bookings[:SUMMARY_BOOKINGS],
                )
            )
        return summaries
