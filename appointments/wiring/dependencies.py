from functools import lru_cache
import logging

from appointments.core.config import settings
from appointments.application.ports.notifier import NotifierPort
from appointments.application.ports.scheduling_store import SchedulingStorePort
from appointments.application.use_cases.availability_window import AvailabilityWindowUseCase
from appointments.application.use_cases.booking import BookingUseCase
from appointments.application.use_cases.manage_calendars import CalendarAdminUseCase
from appointments.application.use_cases.notify_booking import NotifyBookingUseCase
from appointments.infrastructure.notifications.logging_notifier import LoggingNotifier
from appointments.infrastructure.notifications.webhook_notifier import WebhookNotifier
from appointments.infrastructure.store.database import build_engine, build_session_factory, create_tables
from appointments.infrastructure.store.memory_store import MemorySchedulingStore
from appointments.infrastructure.store.sql_store import SqlSchedulingStore


_store: SchedulingStorePort | None = None


def get_store() -> SchedulingStorePort:
    global _store
    if _store is None:
        if settings.STORE_PROVIDER.lower() == "sql":
            engine = build_engine(
                settings.DATABASE_URL,
                echo=settings.DB_ECHO,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
            )
            create_tables(engine)
            _store = SqlSchedulingStore(build_session_factory(engine))
        else:
            _store = MemorySchedulingStore()
    return _store


def set_store(store: SchedulingStorePort | None) -> None:
    global _store
    _store = store


@lru_cache
def get_notifier() -> NotifierPort:
    logger = logging.getLogger(__name__)
    if not settings.NOTIFICATION_WEBHOOK_URL:
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using LoggingNotifier (webhook url missing, ENV=%s)", settings.ENV)
            return LoggingNotifier()
        raise ValueError("NOTIFICATION_WEBHOOK_URL is required to deliver booking notifications.")

    logger.info("Using WebhookNotifier")
    return WebhookNotifier(
        endpoint=settings.NOTIFICATION_WEBHOOK_URL,
        secret=settings.NOTIFICATION_WEBHOOK_SECRET,
    )


def get_availability_use_case() -> AvailabilityWindowUseCase:
    return AvailabilityWindowUseCase(
        store=get_store(),
        window_cap_days=settings.AVAILABILITY_WINDOW_CAP_DAYS,
        summary_days_default=settings.SUMMARY_DAYS_DEFAULT,
        summary_days_cap=settings.SUMMARY_DAYS_CAP,
    )


def get_calendar_admin_use_case() -> CalendarAdminUseCase:
    return CalendarAdminUseCase(store=get_store(), max_booking_window_days=settings.MAX_BOOKING_WINDOW_DAYS)


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        store=get_store(),
        availability=get_availability_use_case(),
        notify=NotifyBookingUseCase(notifier=get_notifier(), enabled=settings.NOTIFICATIONS_ENABLED),
    )
