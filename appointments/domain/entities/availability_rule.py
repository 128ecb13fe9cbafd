from __future__ import annotations

from dataclasses import dataclass

RULE_TYPES = ("weekly", "date")


@dataclass(frozen=True)
class AvailabilityRule:
    rule_type: str  # "weekly" | "date"
    start_minutes: int  # minute of day, 0-1439
    end_minutes: int  # minute of day, 1-1440, exclusive
    day_of_week: int | None = None  # 0=Sunday, weekly rules only
    specific_date: str | None = None  # YYYY-MM-DD, date rules only
    is_unavailable: bool = False
    id: str | None = None
    calendar_id: str | None = None
