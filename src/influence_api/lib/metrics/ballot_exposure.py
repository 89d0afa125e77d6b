"""Ballot exposure: which upcoming ballot items a group's supporters can vote on.

For every upcoming ballot item inside the group's jurisdiction footprint this
counts the supporters who can vote on it, classifies urgency by days until
the election, and scores strategic value as a leverage score:

    leverage = verified supporters x office level multiplier x urgency weight

Local contests weigh most because fewer absolute votes swing them.  The
contest-resolution helpers here (office, candidates, title) are shared with
:mod:`influence_api.lib.metrics.ballot_items`.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from influence_api.lib.metrics.dates import days_until, resolve_now
from influence_api.lib.metrics.jurisdictions import JurisdictionFootprint, jurisdiction_display_name
from influence_api.lib.metrics.keys import api_election_key, ballot_exposure_key, candidate_key
from influence_api.lib.metrics.types import (
    BallotExposure,
    BallotItemSummary,
    BallotItemType,
    Candidate,
    LeverageLevel,
    OfficeLevel,
    SupporterCountSource,
    UrgencyLevel,
)
from influence_api.lib.snapshot import (
    BallotItem,
    InfluenceTarget,
    Jurisdiction,
    Measure,
    Office,
    Race,
    Snapshot,
    SnapshotIndex,
)
from influence_api.lib.sway_client.types import UpcomingElection

LEVERAGE_MULTIPLIERS: dict[OfficeLevel, float] = {
    OfficeLevel.LOCAL: 3.0,
    OfficeLevel.STATE: 2.0,
    OfficeLevel.FEDERAL: 1.0,
}

URGENCY_WEIGHTS: dict[UrgencyLevel, float] = {
    UrgencyLevel.HIGH: 1.0,
    UrgencyLevel.MEDIUM: 0.7,
    UrgencyLevel.LOW: 0.4,
}

HIGH_URGENCY_DAYS = 30
MEDIUM_URGENCY_DAYS = 90

# Share of verified voters assumed to live in an externally-reported election's area.
API_SUPPORTER_ESTIMATE_RATIO = 0.1


def calculate_urgency(days: int) -> UrgencyLevel:
    """Urgency for an election ``days`` away: high under 30, medium under 90, else low."""
    if days < HIGH_URGENCY_DAYS:
        return UrgencyLevel.HIGH
    if days < MEDIUM_URGENCY_DAYS:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW


def calculate_leverage_score(
    verified_supporters: int,
    office_level: OfficeLevel,
    urgency: UrgencyLevel,
) -> float:
    """Weighted strategic value of supporter presence on a ballot item."""
    return verified_supporters * LEVERAGE_MULTIPLIERS[office_level] * URGENCY_WEIGHTS[urgency]


def calculate_leverage_level(verified_supporters: int, candidate_count: int) -> LeverageLevel:
    """Categorical leverage from supporter count and field size.

    A crowded field (4+ candidates) with 500+ verified supporters is a
    kingmaker position.  A contested race (2+) with 200+, or any item with
    100+, is significant.  Everything else is marginal.
    """
    is_tossup = candidate_count >= 4
    is_competitive = candidate_count >= 2

    if is_tossup and verified_supporters >= 500:
        return LeverageLevel.KINGMAKER
    if is_competitive and verified_supporters >= 200:
        return LeverageLevel.SIGNIFICANT
    if verified_supporters >= 100:
        return LeverageLevel.SIGNIFICANT
    return LeverageLevel.MARGINAL


def map_office_level(raw: str | None) -> OfficeLevel | None:
    """Normalize a free-form office level; anything not federal or state is local."""
    if not raw:
        return None
    normalized = raw.lower()
    if "federal" in normalized:
        return OfficeLevel.FEDERAL
    if "state" in normalized:
        return OfficeLevel.STATE
    return OfficeLevel.LOCAL


def infer_level_from_jurisdiction(jurisdiction: Jurisdiction | None) -> OfficeLevel:
    """Guess the office level of an item from the jurisdiction it is voted in."""
    if jurisdiction is None:
        return OfficeLevel.LOCAL
    name = f"{jurisdiction.estimated_name or ''} {jurisdiction.name or ''}".lower()
    ocdid = (jurisdiction.ocdid or "").lower()
    geoid = jurisdiction.geoid or ""

    if "congressional" in name or "/cd:" in ocdid:
        return OfficeLevel.FEDERAL
    if len(geoid) == 2 or "/state:" in ocdid:
        return OfficeLevel.STATE
    return OfficeLevel.LOCAL


@dataclass
class ContestDetails:
    """What a ballot item is a contest for, resolved through the snapshot."""

    race: Race | None = None
    office: Office | None = None
    measure: Measure | None = None
    influence_target: InfluenceTarget | None = None
    candidates: list[Candidate] = field(default_factory=list)
    candidate_count: int = 0

    @property
    def office_name(self) -> str | None:
        return self.office.name if self.office is not None else None

    @property
    def office_level(self) -> OfficeLevel | None:
        return map_office_level(self.office.level) if self.office is not None else None

    @property
    def is_measure(self) -> bool:
        """Measures carry a Measure record, or have neither a race nor candidates."""
        return self.measure is not None or (self.race is None and self.candidate_count == 0)


def _office_for_race(index: SnapshotIndex, race: Race | None) -> Office | None:
    if race is None or race.office_term_id is None:
        return None
    term = index.office_terms_by_id.get(race.office_term_id)
    if term is None:
        return None
    return index.offices_by_id.get(term.office_id)


def _candidate_name(index: SnapshotIndex, person_id: str, fallback: str | None = None) -> str:
    person = index.persons_by_id.get(person_id)
    if person is not None and person.full_name:
        return person.full_name
    return fallback or "Candidate"


def resolve_contest(index: SnapshotIndex, ballot_item: BallotItem) -> ContestDetails:
    """Resolve race, office, measure and candidate roster for a ballot item.

    The race linked to the ballot item wins; otherwise the item's options
    are walked option -> candidacy -> race -> office term -> office.  The
    roster is deduplicated by (name, party).

    Args:
        index: Snapshot index.
        ballot_item: The ballot item to resolve.

    Returns:
        ContestDetails; fields stay None when the chain is broken.
    """
    details = ContestDetails()

    measure = index.measures_by_ballot_item.get(ballot_item.id)
    if measure is None and ballot_item.measure_id:
        measure = index.measures_by_id.get(ballot_item.measure_id)
    details.measure = measure
    if measure is not None and measure.influence_target_id:
        details.influence_target = index.influence_targets_by_id.get(measure.influence_target_id)

    race = index.races_by_ballot_item.get(ballot_item.id)
    if race is None and ballot_item.race_id:
        race = index.races_by_id.get(ballot_item.race_id)

    seen_candidates: set[tuple[str, str | None]] = set()
    seen_candidacies: set[str] = set()

    def add_candidate(name: str, party_id: str | None) -> None:
        party = index.parties_by_id.get(party_id) if party_id else None
        label = party.label if party is not None else None
        key = candidate_key(name, label)
        if key not in seen_candidates:
            seen_candidates.add(key)
            details.candidates.append(Candidate(name=name, party=label))

    if race is not None:
        details.race = race
        details.office = _office_for_race(index, race)
        for candidacy in index.candidacies_by_race.get(race.id, []):
            seen_candidacies.add(candidacy.id)
            add_candidate(_candidate_name(index, candidacy.person_id), candidacy.party_id)
    else:
        for option in index.options_by_ballot_item.get(ballot_item.id, []):
            if not option.candidacy_id:
                continue
            candidacy = index.candidacies_by_id.get(option.candidacy_id)
            if candidacy is None or candidacy.id in seen_candidacies:
                continue
            seen_candidacies.add(candidacy.id)
            if details.office is None and candidacy.race_id:
                details.office = _office_for_race(index, index.races_by_id.get(candidacy.race_id))
            add_candidate(
                _candidate_name(index, candidacy.person_id, option.text or option.title),
                candidacy.party_id,
            )

    details.candidate_count = len(seen_candidacies)
    return details


def resolve_title(contest: ContestDetails, ballot_item: BallotItem, jurisdiction_name: str) -> str:
    """Display title for a ballot item; never empty.

    Falls through office name, measure title and name, the item's own
    title, then the influence target's description and name, and finally
    synthesizes ``"Measure in <place>"`` or ``"Ballot item in <place>"``.
    """
    measure = contest.measure
    target = contest.influence_target
    candidates = (
        contest.office_name,
        measure.title if measure else None,
        measure.name if measure else None,
        ballot_item.title,
        target.description if target else None,
        target.name if target else None,
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    kind = "Measure" if contest.is_measure else "Ballot item"
    return f"{kind} in {jurisdiction_name}"


def title_with_year(title: str, election_year: int, current_year: int) -> str:
    """Append ``" (YYYY)"`` when the election is not in the current year."""
    if election_year != current_year:
        return f"{title} ({election_year})"
    return title


def _sort_exposures(exposures: list[BallotExposure]) -> list[BallotExposure]:
    return sorted(exposures, key=lambda e: (e.ballot_item.election_date, -e.leverage_score))


def exposures_from_upcoming_elections(
    elections: Iterable[UpcomingElection],
    total_verified: int,
    *,
    now: datetime | None = None,
    seen_keys: set[str] | None = None,
) -> list[BallotExposure]:
    """Convert externally-fetched elections into ballot exposures.

    The external feed carries no jurisdiction linkage, so the supporter
    count is estimated as a fixed share of all verified voters and the
    record is tagged ``supporter_count_source="estimated"``.

    Args:
        elections: Validated upcoming elections.
        total_verified: The group's verified-voter count.
        now: Reference time.
        seen_keys: Dedup keys already used; updated in place.

    Returns:
        Estimated exposures, unsorted.
    """
    now = resolve_now(now)
    seen = seen_keys if seen_keys is not None else set()
    estimated = math.floor(total_verified * API_SUPPORTER_ESTIMATE_RATIO)

    exposures: list[BallotExposure] = []
    for election in elections:
        days = days_until(election.election_day, now)
        if days < 0 or estimated == 0:
            continue

        key = api_election_key(election.office_name, election.id, election.election_day.year)
        if key in seen:
            continue
        seen.add(key)

        urgency = calculate_urgency(days)
        level = map_office_level(election.office_level) or OfficeLevel.LOCAL
        title = title_with_year(election.office_name or "Election", election.election_day.year, now.year)

        exposures.append(
            BallotExposure(
                ballot_item=BallotItemSummary(
                    id=election.id,
                    title=title,
                    type=BallotItemType.MEASURE if election.is_measure else BallotItemType.RACE,
                    election_date=election.election_day,
                    office_level=level,
                    office_name=title,
                    candidate_count=election.candidate_count,
                ),
                verified_supporters=estimated,
                urgency=urgency,
                leverage_score=calculate_leverage_score(estimated, level, urgency),
                leverage_level=calculate_leverage_level(estimated, election.candidate_count),
                supporter_count_source=SupporterCountSource.ESTIMATED,
            )
        )
    return exposures


def compute_ballot_exposure(
    snapshot: Snapshot,
    group_id: str,
    *,
    upcoming_elections: Iterable[UpcomingElection] | None = None,
    now: datetime | None = None,
    index: SnapshotIndex | None = None,
) -> list[BallotExposure]:
    """Compute exposure and leverage for every upcoming ballot item in reach.

    Items in the past, without a jurisdiction, or outside the group's
    footprint (no supporter linked to the item's jurisdiction) are skipped.
    Items for the same office in the same year collapse to one entry.

    Args:
        snapshot: Relational snapshot.
        group_id: Viewpoint group id.
        upcoming_elections: Optional externally-fetched elections, merged in
            as estimated exposures.
        now: Reference time; defaults to the current UTC time.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        Exposures sorted by election date ascending, then leverage descending.
    """
    now = resolve_now(now)
    index = index or SnapshotIndex.build(snapshot)
    footprint = JurisdictionFootprint.for_group(index, group_id)

    seen_keys: set[str] = set()
    exposures: list[BallotExposure] = []

    if upcoming_elections:
        exposures.extend(
            exposures_from_upcoming_elections(
                upcoming_elections,
                len(footprint.verified_persons),
                now=now,
                seen_keys=seen_keys,
            )
        )

    for ballot_item in snapshot.ballot_items:
        if not ballot_item.jurisdiction_id:
            continue
        election = index.elections_by_id.get(ballot_item.election_id)
        if election is None:
            continue
        days = days_until(election.poll_date, now)
        if days < 0:
            continue

        potential = footprint.supporter_count(ballot_item.jurisdiction_id)
        if potential == 0:
            continue
        verified = footprint.verified_count(ballot_item.jurisdiction_id)

        contest = resolve_contest(index, ballot_item)
        jurisdiction = index.jurisdictions_by_id.get(ballot_item.jurisdiction_id)
        jurisdiction_name = jurisdiction_display_name(jurisdiction)
        election_year = election.poll_date.year

        key = ballot_exposure_key(contest.office_name, election_year, ballot_item.id)
        if key in seen_keys:
            continue
        seen_keys.add(key)

        urgency = calculate_urgency(days)
        level = contest.office_level or infer_level_from_jurisdiction(jurisdiction)
        title = title_with_year(resolve_title(contest, ballot_item, jurisdiction_name), election_year, now.year)

        exposures.append(
            BallotExposure(
                ballot_item=BallotItemSummary(
                    id=ballot_item.id,
                    title=title,
                    type=BallotItemType.MEASURE if contest.is_measure else BallotItemType.RACE,
                    election_date=election.poll_date,
                    office_level=level,
                    office_name=contest.office_name,
                    candidate_count=contest.candidate_count,
                ),
                verified_supporters=verified,
                potential_supporters=potential,
                urgency=urgency,
                leverage_score=calculate_leverage_score(verified, level, urgency),
                leverage_level=calculate_leverage_level(verified, contest.candidate_count),
                jurisdiction=jurisdiction_name,
                jurisdiction_id=ballot_item.jurisdiction_id,
            )
        )

    logger.debug("Group {}: {} ballot exposures", group_id, len(exposures))
    return _sort_exposures(exposures)
