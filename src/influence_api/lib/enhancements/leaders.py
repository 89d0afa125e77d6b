"""Peer leader enrichment from the static snapshot.

The remote roster only knows group membership; verification data lives in
the snapshot.  This fills in verified voters, rate, growth and reach for
each leader while keeping the roster's own supporter count.
"""

from collections.abc import Iterable
from datetime import datetime

from influence_api.lib.metrics.dates import resolve_now, within_days
from influence_api.lib.metrics.jurisdictions import jurisdiction_display_name
from influence_api.lib.metrics.verified_voters import verified_voter_dates
from influence_api.lib.snapshot import Snapshot, SnapshotIndex
from influence_api.lib.sway_client.types import LeaderProfile

RECENT_DAYS = 30


def enrich_leader_metrics(
    leaders: Iterable[LeaderProfile],
    snapshot: Snapshot,
    *,
    now: datetime | None = None,
    index: SnapshotIndex | None = None,
) -> list[LeaderProfile]:
    """Add snapshot-derived verification metrics to a peer roster.

    Args:
        leaders: Leaders as returned by the remote API.
        snapshot: Relational snapshot.
        now: Reference time; defaults to the current UTC time.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        New LeaderProfile records; ``verification_rate`` is a 0-1 fraction
        of the roster's ``total_supporters`` and ``growth_rate`` is weekly.
    """
    now = resolve_now(now)
    index = index or SnapshotIndex.build(snapshot)

    enriched: list[LeaderProfile] = []
    for leader in leaders:
        profile_ids: set[str] = set()
        for group in leader.groups:
            profile_ids |= index.group_profile_ids(group.id)
        person_ids = index.person_ids_for_profiles(profile_ids)

        dates = verified_voter_dates(index, person_ids, now)
        # Undated verifications are left out of the 30-day window.
        recent = sum(
            1
            for person_id in dates
            if any(
                v.is_fully_verified and within_days(v.created_at, now, RECENT_DAYS)
                for v in index.verifications_by_person.get(person_id, [])
            )
        )

        jurisdiction_ids: set[str] = set()
        for verification in index.verifications_for_persons(sorted(dates), verified_only=True):
            jurisdiction_ids |= index.jurisdictions_by_verification.get(verification.id, set())
        names: list[str] = []
        for jurisdiction_id in sorted(jurisdiction_ids):
            name = jurisdiction_display_name(index.jurisdictions_by_id.get(jurisdiction_id))
            if name not in names:
                names.append(name)

        verified = len(dates)
        enriched.append(
            leader.model_copy(
                update={
                    "verified_voters": verified,
                    "verification_rate": verified / leader.total_supporters if leader.total_supporters > 0 else 0.0,
                    "growth_rate": recent / RECENT_DAYS * 7,
                    "reach": len(jurisdiction_ids),
                    "jurisdictions": names,
                }
            )
        )
    return enriched
