from __future__ import annotations

from datetime import datetime, timedelta

from appointments.application.utils.intervals import Interval
from appointments.application.utils.timezones import local_time_exists, local_to_utc
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar
from appointments.domain.entities.day_availability import AvailabilitySlot, DayAvailability


def has_conflict(start: datetime, end: datetime, bookings: list[Booking]) -> bool:
    """True if [start, end) overlaps any booking that is not cancelled."""
    for booking in bookings:
        if booking.is_cancelled:
            continue
        if booking.overlaps(start, end):
            return True
    return False


def compute_slots_for_day(
    local_date: str,
    calendar: Calendar,
    intervals: list[Interval],
    bookings: list[Booking],
    min_notice_cutoff: datetime,
) -> DayAvailability:
    """
    Walk each open interval and emit bookable slots.

    The cursor starts after the leading buffer and always advances by
    duration + both buffers, whether or not the candidate was published.
    Candidates that touch a DST gap, or whose real length differs from the
    duration because they straddle a repeated hour, are not published.
    """
    duration = calendar.duration_minutes
    step = duration + calendar.buffer_before_minutes + calendar.buffer_after_minutes
    length = timedelta(minutes=duration)
    slots: list[AvailabilitySlot] = []

    for interval_start, interval_end in intervals:
        cursor = interval_start + calendar.buffer_before_minutes
        latest_end = interval_end - calendar.buffer_after_minutes

        while cursor + duration <= latest_end and cursor + duration <= interval_end:
            start_minutes, end_minutes = cursor, cursor + duration
            cursor += step

            if not local_time_exists(local_date, start_minutes, calendar.timezone):
                continue
            if not local_time_exists(local_date, end_minutes, calendar.timezone):
                continue
            slot_start = local_to_utc(local_date, start_minutes, calendar.timezone)
            slot_end = local_to_utc(local_date, end_minutes, calendar.timezone)
            if slot_end - slot_start != length:
                continue
            if slot_start < min_notice_cutoff:
                continue
            if has_conflict(slot_start, slot_end, bookings):
                continue
            slots.append(AvailabilitySlot(start=slot_start, end=slot_end))

    return DayAvailability(date=local_date, slots=slots)
