from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from appointments.domain.entities.availability_rule import AvailabilityRule
from appointments.domain.entities.booking import Booking
from appointments.domain.entities.calendar import Calendar


class SchedulingStorePort(ABC):
    @abstractmethod
    def create_calendar(self, calendar: Calendar) -> Calendar:
        raise NotImplementedError

    @abstractmethod
    def get_calendar(self, calendar_id: str, business_id: str) -> Calendar | None:
        """Get a calendar scoped to its owning tenant."""
        raise NotImplementedError

    @abstractmethod
    def get_calendar_by_share_id(self, share_id: str) -> Calendar | None:
        raise NotImplementedError

    @abstractmethod
    def list_calendars(self, business_id: str) -> list[Calendar]:
        raise NotImplementedError

    @abstractmethod
    def update_calendar(self, calendar: Calendar) -> Calendar:
        raise NotImplementedError

    @abstractmethod
    def share_id_exists(self, share_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_rules(self, calendar_id: str) -> list[AvailabilityRule]:
        raise NotImplementedError

    @abstractmethod
    def replace_rules(self, calendar_id: str, rules: list[AvailabilityRule]) -> list[AvailabilityRule]:
        """
        Atomically replace the whole rule set of a calendar.
        On failure the previous rule set must remain untouched.
        """
        raise NotImplementedError

    @abstractmethod
    def list_bookings(
        self,
        calendar_ids: list[str],
        include_cancelled: bool = False,
        starting_after: datetime | None = None,
    ) -> list[Booking]:
        """Bookings for the given calendars ordered by start time."""
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: str, calendar_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def insert_booking_if_free(self, booking: Booking) -> Booking:
        """
        Re-check overlap against non-cancelled bookings of the same calendar and
        insert in the same critical section. Raises SlotUnavailableError on overlap,
        including when a concurrent insert won the race.
        """
        raise NotImplementedError

    @abstractmethod
    def update_booking_status(self, booking_id: str, from_status: str, to_status: str, updated_at: datetime) -> Booking | None:
        """
        Compare-and-set the booking status. Returns None if the booking no longer
        has `from_status`.
        """
        raise NotImplementedError
