"""Verified-voter counts, verification rate, and weekly growth."""

from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from influence_api.lib.metrics.dates import resolve_now, week_start
from influence_api.lib.metrics.types import TimeSeriesPoint, VerifiedVoterMetrics
from influence_api.lib.snapshot import Snapshot, SnapshotIndex

# Week-over-week deltas are averaged over the last GROWTH_WINDOW_POINTS points.
GROWTH_WINDOW_POINTS = 5


def verified_voter_dates(
    index: SnapshotIndex,
    person_ids: Iterable[str],
    now: datetime,
) -> dict[str, datetime]:
    """Earliest full verification per verified person.

    Undated verifications count as verified at ``now``.

    Args:
        index: Snapshot index.
        person_ids: Candidate person ids.
        now: Reference time used for undated records.

    Returns:
        Mapping of person id to verification timestamp, verified persons only.
    """
    dates: dict[str, datetime] = {}
    for person_id in person_ids:
        for verification in index.verifications_by_person.get(person_id, []):
            if not verification.is_fully_verified:
                continue
            verified_at = verification.created_at or now
            current = dates.get(person_id)
            if current is None or verified_at < current:
                dates[person_id] = verified_at
    return dates


def compute_growth_trend(verification_dates: Iterable[datetime]) -> list[TimeSeriesPoint]:
    """Cumulative verified-voter count per ISO week, ascending.

    Args:
        verification_dates: One timestamp per verified voter.

    Returns:
        Time series of ``{date: week start, value: running total}``.
    """
    weekly: dict[str, int] = {}
    cumulative = 0
    for verified_at in sorted(verification_dates):
        cumulative += 1
        weekly[week_start(verified_at).isoformat()] = cumulative
    return [TimeSeriesPoint(date=day, value=value) for day, value in sorted(weekly.items())]


def compute_weekly_growth_rate(trend: list[TimeSeriesPoint]) -> float:
    """Average week-over-week percentage growth over the most recent points.

    Pairs whose earlier value is zero are skipped.  Returns 0 when fewer
    than two points (or no usable pairs) exist.
    """
    recent = trend[-GROWTH_WINDOW_POINTS:]
    if len(recent) < 2:
        return 0.0

    rates = [
        (curr.value - prev.value) / prev.value * 100
        for prev, curr in zip(recent, recent[1:], strict=False)
        if prev.value > 0
    ]
    if not rates:
        return 0.0
    return sum(rates) / len(rates)


def compute_verified_voters(
    snapshot: Snapshot,
    group_id: str,
    *,
    now: datetime | None = None,
    index: SnapshotIndex | None = None,
) -> VerifiedVoterMetrics:
    """Compute verified-voter metrics for a viewpoint group.

    Supporters are the distinct profiles holding any relationship to the
    group.  A verified voter is a supporter's person with at least one fully
    verified record, counted once.

    Args:
        snapshot: Relational snapshot.
        group_id: Viewpoint group id (usually the main group).
        now: Reference time; defaults to the current UTC time.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        VerifiedVoterMetrics with count, rate, weekly trend and growth rate.
    """
    now = resolve_now(now)
    index = index or SnapshotIndex.build(snapshot)

    supporter_profile_ids = index.group_profile_ids(group_id)
    total_supporters = len(supporter_profile_ids)
    person_ids = index.person_ids_for_profiles(supporter_profile_ids)

    dates = verified_voter_dates(index, person_ids, now)
    current = len(dates)
    verification_rate = current / total_supporters * 100 if total_supporters > 0 else 0.0

    growth_trend = compute_growth_trend(dates.values())
    weekly_growth_rate = compute_weekly_growth_rate(growth_trend)

    logger.debug(
        "Group {}: {} supporters, {} verified voters ({:.1f}%)",
        group_id,
        total_supporters,
        current,
        verification_rate,
    )
    return VerifiedVoterMetrics(
        current=current,
        verification_rate=verification_rate,
        growth_trend=growth_trend,
        weekly_growth_rate=weekly_growth_rate,
    )
