"""
Shared fixtures for the scheduling tests.

All dates are pinned: 2026-03-09 is a Monday, and NOW sits a week earlier.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from appointments.application.use_cases.availability_window import AvailabilityWindowUseCase
from appointments.application.use_cases.booking import BookingUseCase
from appointments.application.use_cases.manage_calendars import CalendarAdminUseCase
from appointments.application.use_cases.notify_booking import NotifyBookingUseCase
from appointments.application.utils.timezones import UTC
from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.domain.entities.calendar import Calendar
from appointments.infrastructure.notifications.logging_notifier import LoggingNotifier
from appointments.infrastructure.store.memory_store import MemorySchedulingStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
BUSINESS_ID = "biz-1"
OWNER_ID = "user-1"


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_calendar():
    def _make(**overrides) -> Calendar:
        calendar = Calendar(
            id="cal-1",
            business_id=BUSINESS_ID,
            owner_user_id=OWNER_ID,
            name="Intro call",
            share_id="abcdefghjkmn",
            timezone="UTC",
            duration_minutes=30,
            buffer_before_minutes=10,
            buffer_after_minutes=10,
            booking_window_days=30,
            min_schedule_notice_minutes=0,
            created_at=NOW,
            updated_at=NOW,
        )
        return replace(calendar, **overrides)

    return _make


@pytest.fixture
def monday_rule() -> AvailabilityRule:
    # Monday 09:00-10:00
    return AvailabilityRule(rule_type="weekly", day_of_week=1, start_minutes=540, end_minutes=600)


@pytest.fixture
def store() -> MemorySchedulingStore:
    return MemorySchedulingStore()


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def availability_uc(store) -> AvailabilityWindowUseCase:
    return AvailabilityWindowUseCase(store=store)


@pytest.fixture
def admin_uc(store) -> CalendarAdminUseCase:
    return CalendarAdminUseCase(store=store)


@pytest.fixture
def booking_uc(store, availability_uc, notifier) -> BookingUseCase:
    return BookingUseCase(store=store, availability=availability_uc, notify=NotifyBookingUseCase(notifier=notifier))


@pytest.fixture
def seeded_calendar(admin_uc, monday_rule) -> Calendar:
    """An active UTC calendar with the Monday 09:00-10:00 rule, 30 minute slots and 10 minute buffers."""
    calendar = admin_uc.create_calendar(
        BUSINESS_ID,
        OWNER_ID,
        "Intro call",
        timezone="UTC",
        duration_minutes=30,
        buffer_before_minutes=10,
        buffer_after_minutes=10,
        booking_window_days=30,
        min_schedule_notice_minutes=0,
    )
    admin_uc.replace_rules(BUSINESS_ID, calendar.id, [monday_rule])
    return calendar
