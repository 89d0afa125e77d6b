"""Supporter engagement: recent joiners and how many of them verify."""

from datetime import datetime

from loguru import logger

from influence_api.lib.metrics.dates import resolve_now, within_days
from influence_api.lib.metrics.types import SupporterEngagement
from influence_api.lib.snapshot import RelationshipType, Snapshot, SnapshotIndex

GROWTH_WEIGHT = 0.6
VERIFICATION_WEIGHT = 0.4


def compute_engagement_score(
    recent_joiners_30d: int,
    recent_joiners_90d: int,
    total_supporters: int,
    recent_verification_rate: float,
) -> int | None:
    """Composite 0-100 engagement score, or None without 30-day joiners.

    ``growth = min(100, joiners_90d / total x 100)`` and
    ``verification = recent_verification_rate x 100`` are blended 60/40.
    """
    if recent_joiners_30d == 0 or total_supporters == 0:
        return None
    growth_score = min(recent_joiners_90d / total_supporters * 100, 100.0)
    verification_score = recent_verification_rate * 100
    return round(growth_score * GROWTH_WEIGHT + verification_score * VERIFICATION_WEIGHT)


def compute_supporter_engagement(
    snapshot: Snapshot,
    group_id: str,
    *,
    now: datetime | None = None,
    index: SnapshotIndex | None = None,
) -> SupporterEngagement:
    """Compute recent-join and verification-momentum stats for supporters.

    Args:
        snapshot: Relational snapshot.
        group_id: Viewpoint group id.
        now: Reference time; defaults to the current UTC time.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        SupporterEngagement; ``recent_verification_rate`` is a 0-1 fraction.
    """
    now = resolve_now(now)
    index = index or SnapshotIndex.build(snapshot)

    supporter_rels = index.group_rels(group_id, RelationshipType.SUPPORTER)
    total_supporters = len({rel.profile_id for rel in supporter_rels})

    joined_30d = [rel for rel in supporter_rels if within_days(rel.created_at, now, 30)]
    joined_90d = [rel for rel in supporter_rels if within_days(rel.created_at, now, 90)]

    recent_verified = 0
    for rel in joined_30d:
        person_id = index.person_id_for_profile(rel.profile_id)
        if person_id is not None and index.is_verified_person(person_id):
            recent_verified += 1
    recent_verification_rate = recent_verified / len(joined_30d) if joined_30d else 0.0

    engagement_score = compute_engagement_score(
        len(joined_30d),
        len(joined_90d),
        total_supporters,
        recent_verification_rate,
    )

    logger.debug(
        "Group {}: {} supporters, {} joined in 30d, {} in 90d",
        group_id,
        total_supporters,
        len(joined_30d),
        len(joined_90d),
    )
    return SupporterEngagement(
        total_supporters=total_supporters,
        recent_joiners_30d=len(joined_30d),
        recent_joiners_90d=len(joined_90d),
        recent_verification_rate=recent_verification_rate,
        engagement_score=engagement_score,
    )
