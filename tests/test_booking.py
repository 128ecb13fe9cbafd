"""
Tests for booking reservation and status changes.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta

import pytest

from appointments.application.exceptions import (
    CalendarNotFoundError,
    ConfigurationError,
    InvalidStatusTransitionError,
    SlotUnavailableError,
)
from appointments.application.use_cases.booking import BookingRequest, BookingUseCase
from appointments.application.use_cases.notify_booking import NotifyBookingUseCase
from appointments.application.utils.timezones import UTC
from appointments.domain.entities.booking import Booking
from appointments.infrastructure.store.memory_store import MemorySchedulingStore

from conftest import BUSINESS_ID, OWNER_ID

SLOT_START = datetime(2026, 3, 9, 9, 10, tzinfo=UTC)
SLOT_END = datetime(2026, 3, 9, 9, 40, tzinfo=UTC)


def request(start=SLOT_START, end=SLOT_END, **overrides):
    fields = {"guest_name": " Ada Lovelace ", "guest_email": "ada@example.com"}
    fields.update(overrides)
    return BookingRequest(slot_start=start, slot_end=end, **fields)


class FailingNotifier:
    def send(self, notification):
        raise RuntimeError("smtp down")


def test_reserve_creates_scheduled_booking(seeded_calendar, booking_uc, notifier, now):
    result = booking_uc.reserve(seeded_calendar.share_id, request(guest_notes="  "), now=now)

    booking = result.booking
    assert booking.status == "scheduled"
    assert booking.guest_name == "Ada Lovelace"
    assert booking.guest_timezone == "UTC"
    assert booking.guest_notes is None
    assert booking.start_time == SLOT_START
    assert len(booking.share_id) == 12
    assert "2026-03-09" not in [d.date for d in result.availability]
    assert [n.kind for n in notifier.sent] == ["booking_created"]


def test_reserve_pending_when_confirmation_required(seeded_calendar, admin_uc, booking_uc, now):
    admin_uc.update_calendar(BUSINESS_ID, seeded_calendar.id, {"requires_confirmation": True})

    result = booking_uc.reserve(seeded_calendar.share_id, request(), now=now)
    assert result.booking.status == "pending"


def test_pending_booking_still_blocks_slot(seeded_calendar, admin_uc, booking_uc, now):
    admin_uc.update_calendar(BUSINESS_ID, seeded_calendar.id, {"requires_confirmation": True})
    booking_uc.reserve(seeded_calendar.share_id, request(), now=now)

    with pytest.raises(SlotUnavailableError):
        booking_uc.reserve(seeded_calendar.share_id, request(guest_email="bob@example.com"), now=now)


def test_stale_slot_rejected(seeded_calendar, booking_uc, now):
    """A slot taken after the guest loaded availability is refused."""
    booking_uc.reserve(seeded_calendar.share_id, request(), now=now)

    with pytest.raises(SlotUnavailableError):
        booking_uc.reserve(seeded_calendar.share_id, request(guest_email="bob@example.com"), now=now)

    # partial overlap is refused too
    with pytest.raises(SlotUnavailableError):
        booking_uc.reserve(
            seeded_calendar.share_id,
            request(start=datetime(2026, 3, 9, 9, 30, tzinfo=UTC), end=datetime(2026, 3, 9, 10, 0, tzinfo=UTC)),
            now=now,
        )


def test_concurrent_reservations_have_one_winner(seeded_calendar, booking_uc, now):
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def attempt(i):
        barrier.wait()
        try:
            booking_uc.reserve(seeded_calendar.share_id, request(guest_email=f"guest{i}@example.com"), now=now)
            outcome = "ok"
        except SlotUnavailableError:
            outcome = "taken"
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("taken") == 7


def test_reserve_inside_notice_window_rejected(seeded_calendar, admin_uc, booking_uc):
    admin_uc.update_calendar(BUSINESS_ID, seeded_calendar.id, {"min_schedule_notice_minutes": 120})

    with pytest.raises(SlotUnavailableError):
        booking_uc.reserve(seeded_calendar.share_id, request(), now=datetime(2026, 3, 9, 8, 0, tzinfo=UTC))


@pytest.mark.parametrize(
    "req",
    [
        request(guest_name="  "),
        request(guest_email=""),
        request(guest_timezone="Not/AZone"),
        request(end=SLOT_START),
        request(start=datetime(2026, 3, 9, 9, 10), end=datetime(2026, 3, 9, 9, 40)),
    ],
)
def test_reserve_rejects_invalid_requests(seeded_calendar, booking_uc, now, req):
    with pytest.raises(ConfigurationError):
        booking_uc.reserve(seeded_calendar.share_id, req, now=now)


def test_reserve_unknown_share_id(booking_uc, now):
    with pytest.raises(CalendarNotFoundError):
        booking_uc.reserve("zzzzzzzzzzzz", request(), now=now)


def test_reserve_for_calendar_is_tenant_scoped(seeded_calendar, booking_uc, now):
    result = booking_uc.reserve_for_calendar(
        BUSINESS_ID, seeded_calendar.id, request(guest_timezone="Europe/Paris"), created_by_user_id=OWNER_ID, now=now
    )
    assert result.booking.created_by_user_id == OWNER_ID
    assert result.booking.guest_timezone == "Europe/Paris"

    with pytest.raises(CalendarNotFoundError):
        booking_uc.reserve_for_calendar("biz-other", seeded_calendar.id, request(), now=now)


def test_confirm_then_cancel_pending_booking(seeded_calendar, admin_uc, booking_uc, notifier, now):
    admin_uc.update_calendar(BUSINESS_ID, seeded_calendar.id, {"requires_confirmation": True})
    booking = booking_uc.reserve(seeded_calendar.share_id, request(), now=now).booking

    confirmed = booking_uc.change_status(BUSINESS_ID, seeded_calendar.id, booking.id, "scheduled", now=now)
    assert confirmed.booking.status == "scheduled"

    cancelled = booking_uc.change_status(
        BUSINESS_ID, seeded_calendar.id, booking.id, "cancelled", reason=" Double booked ", now=now
    )
    assert cancelled.booking.status == "cancelled"
    # the slot is open again
    assert "2026-03-09" in [d.date for d in cancelled.availability]

    assert [n.kind for n in notifier.sent] == ["booking_created", "booking_confirmed", "booking_declined"]
    assert notifier.sent[-1].reason == "Double booked"


def test_invalid_transitions_rejected(seeded_calendar, booking_uc, now):
    booking = booking_uc.reserve(seeded_calendar.share_id, request(), now=now).booking
    booking_uc.change_status(BUSINESS_ID, seeded_calendar.id, booking.id, "cancelled", now=now)

    with pytest.raises(InvalidStatusTransitionError):
        booking_uc.change_status(BUSINESS_ID, seeded_calendar.id, booking.id, "scheduled", now=now)
    with pytest.raises(InvalidStatusTransitionError):
        booking_uc.change_status(BUSINESS_ID, seeded_calendar.id, booking.id, "completed", now=now)


def test_cancelled_slot_can_be_rebooked(seeded_calendar, booking_uc, now):
    booking = booking_uc.reserve(seeded_calendar.share_id, request(), now=now).booking
    booking_uc.change_status(BUSINESS_ID, seeded_calendar.id, booking.id, "cancelled", now=now)

    again = booking_uc.reserve(seeded_calendar.share_id, request(guest_email="bob@example.com"), now=now)
    assert again.booking.status == "scheduled"


def test_complete_elapsed(seeded_calendar, booking_uc, store, now):
    past = booking_uc.reserve(seeded_calendar.share_id, request(), now=now).booking
    future = booking_uc.reserve(
        seeded_calendar.share_id,
        request(start=datetime(2026, 3, 16, 9, 10, tzinfo=UTC), end=datetime(2026, 3, 16, 9, 40, tzinfo=UTC)),
        now=now,
    ).booking

    completed = booking_uc.complete_elapsed(BUSINESS_ID, seeded_calendar.id, now=datetime(2026, 3, 10, tzinfo=UTC))

    assert [b.id for b in completed] == [past.id]
    assert store.get_booking(future.id, seeded_calendar.id).status == "scheduled"


def test_notification_failure_does_not_undo_booking(seeded_calendar, store, availability_uc, now):
    uc = BookingUseCase(
        store=store, availability=availability_uc, notify=NotifyBookingUseCase(notifier=FailingNotifier())
    )

    result = uc.reserve(seeded_calendar.share_id, request(), now=now)

    assert store.get_booking(result.booking.id, seeded_calendar.id) is not None


def test_scheduled_notifications_wait_for_the_scheduler(seeded_calendar, booking_uc, notifier, now):
    """With a scheduler, sends are handed off instead of running inside the request."""
    deferred = []

    def schedule(func, *args, **kwargs):
        deferred.append((func, args, kwargs))

    booking = booking_uc.reserve(seeded_calendar.share_id, request(), now=now, schedule=schedule).booking
    booking_uc.change_status(
        BUSINESS_ID, seeded_calendar.id, booking.id, "cancelled", reason="Sick", now=now, schedule=schedule
    )

    assert notifier.sent == []
    assert len(deferred) == 2

    for func, args, kwargs in deferred:
        func(*args, **kwargs)

    assert [n.kind for n in notifier.sent] == ["booking_created", "booking_declined"]
    assert notifier.sent[-1].reason == "Sick"


def test_memory_store_reads_while_bookings_are_inserted(make_calendar):
    store = MemorySchedulingStore()
    calendar = store.create_calendar(make_calendar())
    errors: list[Exception] = []
    done = threading.Event()

    def write():
        try:
            for i in range(500):
                start = datetime(2026, 3, 9, tzinfo=UTC) + timedelta(minutes=30 * i)
                store.insert_booking_if_free(
                    Booking(
                        id=f"b-{i}",
                        calendar_id=calendar.id,
                        share_id=f"share{i:07d}",
                        guest_name="Ada",
                        guest_email="ada@example.com",
                        start_time=start,
                        end_time=start + timedelta(minutes=30),
                    )
                )
                store.create_calendar(make_calendar(id=f"cal-extra-{i}", share_id=f"extra{i:07d}"))
        finally:
            done.set()

    def read():
        try:
            while not done.is_set():
                store.list_bookings([calendar.id], include_cancelled=True)
                store.get_calendar_by_share_id("nosuchshare1")
                store.list_calendars(BUSINESS_ID)
                store.get_rules(calendar.id)
        except Exception as e:  # collected for the assertion below
            errors.append(e)

    readers = [threading.Thread(target=read) for _ in range(4)]
    writer = threading.Thread(target=write)
    for t in readers:
        t.start()
    writer.start()
    writer.join()
    for t in readers:
        t.join()

    assert errors == []
    assert len(store.list_bookings([calendar.id])) == 500
    assert len(store.list_calendars(BUSINESS_ID)) == 501
