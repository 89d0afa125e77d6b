"""Coalition finder: other groups organizing in the same places."""

from loguru import logger

from influence_api.lib.enhancements.types import CoalitionOpportunity
from influence_api.lib.metrics.jurisdictions import jurisdiction_display_name
from influence_api.lib.snapshot import Snapshot, SnapshotIndex

MAX_OPPORTUNITIES = 5

JURISDICTION_WEIGHT = 0.5
BALLOT_WEIGHT = 0.3
SIZE_WEIGHT = 0.2
SIZE_CAP = 100


def count_shared_ballot_items(snapshot: Snapshot, first: set[str], second: set[str]) -> int:
    """Ballot items voted on in a jurisdiction both groups reach."""
    shared = first & second
    return sum(1 for item in snapshot.ballot_items if item.jurisdiction_id in shared)


def calculate_synergy_score(
    shared_jurisdictions: int,
    main_jurisdictions: int,
    shared_ballot_items: int,
    total_ballot_items: int,
    supporter_count: int,
) -> float:
    """Blend jurisdiction overlap, ballot overlap and group size into 0..1."""
    jurisdiction_overlap = shared_jurisdictions / max(main_jurisdictions, 1)
    ballot_overlap = shared_ballot_items / max(total_ballot_items, 1)
    size_balance = min(supporter_count, SIZE_CAP) / SIZE_CAP
    return jurisdiction_overlap * JURISDICTION_WEIGHT + ballot_overlap * BALLOT_WEIGHT + size_balance * SIZE_WEIGHT


def find_coalition_opportunities(
    snapshot: Snapshot,
    group_id: str,
    *,
    index: SnapshotIndex | None = None,
) -> list[CoalitionOpportunity]:
    """Rank other groups by how well they complement ``group_id``.

    Args:
        snapshot: Relational snapshot.
        group_id: The main viewpoint group id.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        Up to five groups sharing at least one verified-voter jurisdiction,
        highest synergy first.
    """
    index = index or SnapshotIndex.build(snapshot)
    main_jurisdictions = index.group_jurisdiction_ids(group_id)

    opportunities: list[CoalitionOpportunity] = []
    for group in snapshot.viewpoint_groups:
        if group.id == group_id:
            continue
        group_jurisdictions = index.group_jurisdiction_ids(group.id)
        shared = sorted(main_jurisdictions & group_jurisdictions)
        if not shared:
            continue

        supporter_count = len(index.group_profile_ids(group.id))
        shared_ballot_items = count_shared_ballot_items(snapshot, main_jurisdictions, group_jurisdictions)
        opportunities.append(
            CoalitionOpportunity(
                leader_name=group.title or group.id,
                group_id=group.id,
                supporter_count=supporter_count,
                shared_jurisdictions=[
                    jurisdiction_display_name(index.jurisdictions_by_id.get(jid)) for jid in shared
                ],
                shared_ballot_items=shared_ballot_items,
                synergy_score=calculate_synergy_score(
                    len(shared),
                    len(main_jurisdictions),
                    shared_ballot_items,
                    len(snapshot.ballot_items),
                    supporter_count,
                ),
            )
        )

    opportunities.sort(key=lambda o: (-o.synergy_score, o.group_id))
    logger.debug("Group {}: {} coalition candidates", group_id, len(opportunities))
    return opportunities[:MAX_OPPORTUNITIES]
