from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from appointments.application.exceptions import ConfigurationError

UTC = ZoneInfo("UTC")


def validate_timezone(name: str) -> str:
    """Return the zone name unchanged if it is a known IANA zone, else raise ConfigurationError."""
    if not name or not name.strip():
        raise ConfigurationError("timezone is required")
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone: {name}") from e
    return name


def _wall_clock(local_date: str, minutes: int) -> datetime:
    return datetime.combine(date.fromisoformat(local_date), time()) + timedelta(minutes=minutes)


def local_to_utc(local_date: str, minutes: int, tz_name: str) -> datetime:
    """
    Absolute UTC instant for the wall clock `local_date` + `minutes` in `tz_name`.

    The offset is taken from the zone at that local time, so instants on either
    side of a DST change land on the right hour. `minutes` may be 1440 (next midnight).
    Repeated wall times resolve to the first occurrence. Wall times skipped by a
    forward jump have no instant; check them with `local_time_exists`.
    """
    return _wall_clock(local_date, minutes).replace(tzinfo=ZoneInfo(tz_name)).astimezone(UTC)


def local_time_exists(local_date: str, minutes: int, tz_name: str) -> bool:
    """False for wall times inside a DST gap (e.g. 02:30 on a spring-forward night)."""
    wall = _wall_clock(local_date, minutes)
    instant = wall.replace(tzinfo=ZoneInfo(tz_name)).astimezone(UTC)
    return instant.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None) == wall


def utc_to_local_string(instant: datetime, tz_name: str) -> str:
    """Local wall clock as YYYY-MM-DDTHH:MM."""
    return instant.astimezone(ZoneInfo(tz_name)).strftime("%Y-%m-%dT%H:%M")


def utc_to_local_date(instant: datetime, tz_name: str) -> str:
    return instant.astimezone(ZoneInfo(tz_name)).strftime("%Y-%m-%d")


def local_weekday(local_date: str) -> int:
    """Day of week with 0=Sunday."""
    return date.fromisoformat(local_date).isoweekday() % 7


def describe_slot_for_display(instant: datetime, tz_name: str) -> dict[str, str]:
    local = instant.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    label = f"{local:%b} {local.day}, {hour}:{local:%M} {local:%p}"
    return {"label": label, "local": local.strftime("%Y-%m-%dT%H:%M")}


def ensure_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to UTC. Naive datetimes are rejected."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must include a UTC offset")
    return value.astimezone(UTC)
