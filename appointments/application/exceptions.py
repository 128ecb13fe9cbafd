class ConfigurationError(ValueError):
    """Raised when calendar settings or availability rules are invalid."""
    pass


class SlotUnavailableError(RuntimeError):
    """Raised when a requested slot overlaps a booking or violates minimum notice."""
    pass


class NotFoundError(LookupError):
    pass


class CalendarNotFoundError(NotFoundError):
    """Raised when a calendar id or share id does not resolve for the caller."""
    pass


class BookingNotFoundError(NotFoundError):
    pass


class InvalidStatusTransitionError(ValueError):
    """Raised when a booking status change is not allowed from its current status."""
    pass


class ShareIdExhaustedError(RuntimeError):
    pass
