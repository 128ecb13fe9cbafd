from __future__ import annotations

import pytest

from appointments.application.exceptions import (
    CalendarNotFoundError,
    ConfigurationError,
    ShareIdExhaustedError,
)
from appointments.application.utils.share_ids import SHARE_ID_ALPHABET, generate_unique_share_id
from appointments.domain.entities.availability_rule import AvailabilityRule

from conftest import BUSINESS_ID, OWNER_ID


def test_create_calendar_defaults(admin_uc):
    calendar = admin_uc.create_calendar(BUSINESS_ID, OWNER_ID, "  Discovery call ")

    assert calendar.name == "Discovery call"
    assert calendar.appointment_type == "Discovery call"
    assert calendar.status == "active"
    assert calendar.timezone == "UTC"
    assert calendar.duration_minutes == 30
    assert len(calendar.share_id) == 12
    assert set(calendar.share_id) <= set(SHARE_ID_ALPHABET)
    assert admin_uc.list_calendars(BUSINESS_ID) == [calendar]


@pytest.mark.parametrize(
    "fields",
    [
        {"timezone": "Atlantis/Capital"},
        {"duration_minutes": 0},
        {"buffer_before_minutes": -5},
        {"booking_window_days": 0},
        {"booking_window_days": 400},
        {"min_schedule_notice_minutes": -1},
        {"location_type": "carrier_pigeon"},
        {"colour": "blue"},
    ],
)
def test_create_calendar_rejects_bad_config(admin_uc, fields):
    with pytest.raises(ConfigurationError):
        admin_uc.create_calendar(BUSINESS_ID, OWNER_ID, "Call", **fields)


def test_create_calendar_requires_name(admin_uc):
    with pytest.raises(ConfigurationError, match="name"):
        admin_uc.create_calendar(BUSINESS_ID, OWNER_ID, "   ")


def test_update_calendar(seeded_calendar, admin_uc):
    updated = admin_uc.update_calendar(
        BUSINESS_ID, seeded_calendar.id, {"name": " Renamed ", "description": None, "timezone": "Europe/London"}
    )

    assert updated.name == "Renamed"
    assert updated.timezone == "Europe/London"
    assert updated.share_id == seeded_calendar.share_id
    calendar, _ = admin_uc.get_calendar(BUSINESS_ID, seeded_calendar.id)
    assert calendar.name == "Renamed"


def test_update_calendar_rejects_clearing_required_fields(seeded_calendar, admin_uc):
    with pytest.raises(ConfigurationError, match="cannot be cleared"):
        admin_uc.update_calendar(BUSINESS_ID, seeded_calendar.id, {"duration_minutes": None})


def test_calendar_is_tenant_scoped(seeded_calendar, admin_uc):
    with pytest.raises(CalendarNotFoundError):
        admin_uc.get_calendar("biz-other", seeded_calendar.id)
    with pytest.raises(CalendarNotFoundError):
        admin_uc.update_calendar("biz-other", seeded_calendar.id, {"name": "Mine now"})
    assert admin_uc.list_calendars("biz-other") == []


def test_deactivate_calendar(seeded_calendar, admin_uc):
    deactivated = admin_uc.deactivate_calendar(BUSINESS_ID, seeded_calendar.id)

    assert deactivated.status == "inactive"
    assert not deactivated.is_active


def test_replace_rules_assigns_ids(seeded_calendar, admin_uc):
    rules = [
        AvailabilityRule(rule_type="weekly", day_of_week=2, start_minutes=600, end_minutes=720),
        AvailabilityRule(rule_type="date", specific_date="2026-03-10", start_minutes=0, end_minutes=1440, is_unavailable=True),
    ]

    saved = admin_uc.replace_rules(BUSINESS_ID, seeded_calendar.id, rules)

    assert len(saved) == 2
    assert all(r.id and r.calendar_id == seeded_calendar.id for r in saved)
    _, stored = admin_uc.get_calendar(BUSINESS_ID, seeded_calendar.id)
    assert {r.day_of_week for r in stored} == {2, None}


def test_invalid_rules_keep_previous_set(seeded_calendar, admin_uc, monday_rule):
    bad = [
        AvailabilityRule(rule_type="weekly", day_of_week=3, start_minutes=600, end_minutes=720),
        AvailabilityRule(rule_type="weekly", day_of_week=3, start_minutes=800, end_minutes=700),
    ]

    with pytest.raises(ConfigurationError):
        admin_uc.replace_rules(BUSINESS_ID, seeded_calendar.id, bad)

    _, stored = admin_uc.get_calendar(BUSINESS_ID, seeded_calendar.id)
    assert [(r.day_of_week, r.start_minutes, r.end_minutes) for r in stored] == [(1, 540, 600)]


def test_share_id_generation_gives_up():
    calls = []

    def always_taken(candidate):
        calls.append(candidate)
        return True

    with pytest.raises(ShareIdExhaustedError):
        generate_unique_share_id(always_taken)
    assert len(calls) == 6


def test_share_id_retries_on_collision():
    seen = []

    def taken_once(candidate):
        seen.append(candidate)
        return len(seen) == 1

    share_id = generate_unique_share_id(taken_once)
    assert share_id == seen[1]
