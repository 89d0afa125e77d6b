"""Network expansion: main-group supporters who organize groups of their own."""

from datetime import datetime

from loguru import logger

from influence_api.lib.metrics.types import NetworkExpansion
from influence_api.lib.metrics.verified_voters import compute_growth_trend
from influence_api.lib.snapshot import RelationshipType, Snapshot, SnapshotIndex


def compute_network_expansion(
    snapshot: Snapshot,
    group_id: str,
    *,
    index: SnapshotIndex | None = None,
) -> NetworkExpansion:
    """Count connected leaders and the jurisdictions they add.

    A connected leader is a profile holding the supporter role in
    ``group_id`` and the leader role in some other group.  New jurisdictions
    are those reached by the verified voters of the connected leaders'
    groups but not by the main group's own verified voters.

    Args:
        snapshot: Relational snapshot.
        group_id: The main viewpoint group id.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        NetworkExpansion with counts, a cumulative weekly trend of connected
        leaders, and the number of verified voters not yet organizing.
    """
    index = index or SnapshotIndex.build(snapshot)
    supporters = index.group_profile_ids(group_id, RelationshipType.SUPPORTER)

    # profile id -> earliest creation of a leadership role elsewhere (None if undated)
    leader_since: dict[str, datetime | None] = {}
    leader_groups: set[str] = set()
    for profile_id in sorted(supporters):
        for rel in index.rels_by_profile.get(profile_id, []):
            if rel.type != RelationshipType.LEADER or rel.viewpoint_group_id == group_id:
                continue
            leader_groups.add(rel.viewpoint_group_id)
            current = leader_since.get(profile_id)
            if profile_id not in leader_since or (
                rel.created_at is not None and (current is None or rel.created_at < current)
            ):
                leader_since[profile_id] = rel.created_at

    connected_leaders = len(leader_since)

    main_jurisdictions = index.group_jurisdiction_ids(group_id)
    reached: set[str] = set()
    for other_group_id in sorted(leader_groups):
        reached |= index.group_jurisdiction_ids(other_group_id)
    new_jurisdictions = reached - main_jurisdictions

    trend = compute_growth_trend(since for since in leader_since.values() if since is not None)

    verified = index.verified_person_ids(index.person_ids_for_profiles(index.group_profile_ids(group_id)))
    potential_leaders = max(0, len(verified) - connected_leaders)

    logger.debug(
        "Group {}: {} connected leaders across {} groups, {} new jurisdictions",
        group_id,
        connected_leaders,
        len(leader_groups),
        len(new_jurisdictions),
    )
    return NetworkExpansion(
        connected_leaders=connected_leaders,
        new_jurisdictions=len(new_jurisdictions),
        trend=trend,
        potential_leaders=potential_leaders,
    )
