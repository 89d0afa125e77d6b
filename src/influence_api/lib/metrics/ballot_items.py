"""Per-ballot-item influence view.

A richer record than :class:`BallotExposure`: it keeps the election, the
candidate roster, measure text and race flags, and is what topic matching
runs against.  Items are never merged here; every upcoming ballot item in
the group's footprint gets its own entry.
"""

from datetime import datetime

from loguru import logger

from influence_api.lib.metrics.ballot_exposure import (
    calculate_urgency,
    infer_level_from_jurisdiction,
    resolve_contest,
    resolve_title,
)
from influence_api.lib.metrics.dates import days_until, resolve_now
from influence_api.lib.metrics.jurisdictions import JurisdictionFootprint, jurisdiction_display_name
from influence_api.lib.metrics.types import BallotItemInfluence, BallotItemType
from influence_api.lib.snapshot import Snapshot, SnapshotIndex


def compute_ballot_item_influence(
    snapshot: Snapshot,
    group_id: str,
    *,
    now: datetime | None = None,
    index: SnapshotIndex | None = None,
) -> list[BallotItemInfluence]:
    """Describe every upcoming ballot item the group's supporters can vote on.

    Args:
        snapshot: Relational snapshot.
        group_id: Viewpoint group id.
        now: Reference time; defaults to the current UTC time.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        Items sorted by election date ascending, then supporters and
        verified supporters descending.
    """
    now = resolve_now(now)
    index = index or SnapshotIndex.build(snapshot)
    footprint = JurisdictionFootprint.for_group(index, group_id)

    items: list[BallotItemInfluence] = []
    for ballot_item in snapshot.ballot_items:
        if not ballot_item.jurisdiction_id:
            continue
        election = index.elections_by_id.get(ballot_item.election_id)
        if election is None:
            continue
        days = days_until(election.poll_date, now)
        if days < 0:
            continue

        supporters = footprint.supporter_count(ballot_item.jurisdiction_id)
        if supporters == 0:
            continue

        contest = resolve_contest(index, ballot_item)
        jurisdiction = index.jurisdictions_by_id.get(ballot_item.jurisdiction_id)
        jurisdiction_name = jurisdiction_display_name(jurisdiction)
        measure = contest.measure
        race = contest.race

        items.append(
            BallotItemInfluence(
                id=ballot_item.id,
                title=resolve_title(contest, ballot_item, jurisdiction_name),
                type=BallotItemType.MEASURE if contest.is_measure else BallotItemType.RACE,
                election_id=election.id,
                election_name=election.name,
                election_date=election.poll_date,
                jurisdiction=jurisdiction_name,
                jurisdiction_id=ballot_item.jurisdiction_id,
                state=jurisdiction.state if jurisdiction else None,
                supporters=supporters,
                verified_supporters=footprint.verified_count(ballot_item.jurisdiction_id),
                urgency=calculate_urgency(days),
                office_level=contest.office_level or infer_level_from_jurisdiction(jurisdiction),
                office_name=contest.office_name,
                candidate_count=contest.candidate_count,
                candidates=contest.candidates or None,
                measure_summary=(measure.summary or measure.description) if measure else None,
                measure_pro_snippet=measure.pro_snippet if measure else None,
                measure_con_snippet=measure.con_snippet if measure else None,
                num_winners=ballot_item.num_winners,
                num_selections_max=ballot_item.num_selections_max,
                is_ranked_choice=ballot_item.is_ranked_choice,
                is_primary=race.is_primary if race else False,
                is_runoff=race.is_runoff if race else False,
                is_recall=race.is_recall if race else False,
            )
        )

    items.sort(key=lambda item: (item.election_date, -item.supporters, -item.verified_supporters))
    logger.debug("Group {}: {} ballot items in reach", group_id, len(items))
    return items
