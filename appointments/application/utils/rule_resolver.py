from __future__ import annotations

from datetime import date

from appointments.application.exceptions import ConfigurationError
from appointments.application.utils.intervals import Interval, subtract_many
from appointments.domain.entities.availability_rule import RULE_TYPES, AvailabilityRule


def rules_for_day(rules: list[AvailabilityRule], local_date: str, day_of_week: int) -> list[AvailabilityRule]:
    """Date rules for `local_date` replace every weekly rule for that weekday."""
    date_specific = [r for r in rules if r.rule_type == "date" and r.specific_date == local_date]
    if date_specific:
        return date_specific
    return [r for r in rules if r.rule_type == "weekly" and r.day_of_week == day_of_week]


def build_day_intervals(day_rules: list[AvailabilityRule]) -> list[Interval]:
    available = [(r.start_minutes, r.end_minutes) for r in day_rules if not r.is_unavailable]
    if not available:
        return []

    blackouts = [(r.start_minutes, r.end_minutes) for r in day_rules if r.is_unavailable]
    if not blackouts:
        return available
    return subtract_many(available, blackouts)


def resolve_open_intervals(rules: list[AvailabilityRule], local_date: str, day_of_week: int) -> list[Interval]:
    """Open minute-of-day intervals for one calendar-local date. Empty list means closed."""
    return build_day_intervals(rules_for_day(rules, local_date, day_of_week))


def validate_rules(rules: list[AvailabilityRule]) -> None:
    """Reject malformed rules. Values are never clamped."""
    for rule in rules:
        if rule.rule_type not in RULE_TYPES:
            raise ConfigurationError(f"Unsupported rule type: {rule.rule_type}")

        if rule.rule_type == "weekly":
            if rule.day_of_week is None or not 0 <= rule.day_of_week <= 6:
                raise ConfigurationError("Weekly rules require a valid dayOfWeek (0-6)")
            if rule.specific_date:
                raise ConfigurationError("Weekly rules cannot include specificDate")

        if rule.rule_type == "date":
            if not rule.specific_date:
                raise ConfigurationError("Date rules require a specificDate value")
            if rule.day_of_week is not None:
                raise ConfigurationError("Date rules cannot include dayOfWeek")
            try:
                date.fromisoformat(rule.specific_date)
            except ValueError as e:
                raise ConfigurationError(f"Invalid specificDate: {rule.specific_date}") from e

        if not 0 <= rule.start_minutes < 1440:
            raise ConfigurationError("startMinutes must be between 0 and 1439")
        if not 0 < rule.end_minutes <= 1440:
            raise ConfigurationError("endMinutes must be between 1 and 1440")
        if rule.end_minutes <= rule.start_minutes:
            raise ConfigurationError("endMinutes must be greater than startMinutes")
