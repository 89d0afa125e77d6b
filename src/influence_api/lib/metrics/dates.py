"""Date helpers shared by the metric computations.

Every metric accepts an optional ``now`` so "today" can be pinned; these
helpers normalize it and derive calendar-day distances and week buckets.
"""

from datetime import UTC, date, datetime, timedelta


def resolve_now(now: datetime | None = None) -> datetime:
    """Return ``now`` as an aware UTC datetime, defaulting to the current time."""
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


def days_until(target: date, now: datetime) -> int:
    """Whole calendar days from ``now`` (UTC) until ``target``; negative when past."""
    return (target - resolve_now(now).date()).days


def week_start(moment: datetime) -> date:
    """ISO week start (Monday) of ``moment`` in UTC."""
    day = resolve_now(moment).date()
    return day - timedelta(days=day.weekday())


def within_days(moment: datetime | None, now: datetime, days: int) -> bool:
    """Whether ``moment`` falls in the trailing ``days`` window ending at ``now``."""
    if moment is None:
        return False
    return resolve_now(moment) >= resolve_now(now) - timedelta(days=days)
