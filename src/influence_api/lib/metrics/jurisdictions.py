"""Geographic concentration of a group's verified voters.

Counts verified voters per jurisdiction and summarizes the spread with a
Herfindahl-Hirschman Index.  Also owns the jurisdiction naming rules: a
display name never surfaces a bare numeric geocode or a raw id.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from influence_api.lib.metrics.geography import name_contains_state
from influence_api.lib.metrics.types import JurisdictionConcentration, TopJurisdiction
from influence_api.lib.snapshot import Jurisdiction, Snapshot, SnapshotIndex

TOP_JURISDICTIONS = 10
UNKNOWN_JURISDICTION = "Unknown jurisdiction"


def _is_bare_code(value: str, jurisdiction: Jurisdiction) -> bool:
    return value.isdigit() or value in (jurisdiction.id, jurisdiction.geoid, jurisdiction.geo_id)


def _is_state_level(jurisdiction: Jurisdiction) -> bool:
    return jurisdiction.type == "state" or (jurisdiction.geoid is not None and len(jurisdiction.geoid) == 2)


def _proper_name(jurisdiction: Jurisdiction) -> str | None:
    """First usable name, preferring ``estimated_name`` over ``name``."""
    for candidate in (jurisdiction.estimated_name, jurisdiction.name):
        if candidate and candidate.strip() and not _is_bare_code(candidate.strip(), jurisdiction):
            return candidate.strip()
    return None


def jurisdiction_display_name(jurisdiction: Jurisdiction | None) -> str:
    """Human-readable jurisdiction name.

    Prefers ``estimated_name``, then ``name``; a state-level jurisdiction
    with only a code falls back to its state.  Anything else resolves to
    ``UNKNOWN_JURISDICTION`` rather than exposing a geocode or id.
    """
    if jurisdiction is None:
        return UNKNOWN_JURISDICTION
    name = _proper_name(jurisdiction)
    if name:
        return name
    if jurisdiction.state and _is_state_level(jurisdiction):
        return jurisdiction.state
    return UNKNOWN_JURISDICTION


def format_jurisdiction_name(jurisdiction: Jurisdiction | None) -> str | None:
    """Topic-view jurisdiction label, qualified with its state.

    Returns ``"<name>, <state>"`` unless the name already mentions the
    state.  Returns None when no proper name exists so callers can drop
    the jurisdiction instead of showing a code.
    """
    if jurisdiction is None:
        return None
    name = _proper_name(jurisdiction)
    if name:
        if jurisdiction.state and not name_contains_state(name, jurisdiction.state):
            return f"{name}, {jurisdiction.state}"
        return name
    if jurisdiction.state and _is_state_level(jurisdiction):
        return jurisdiction.state
    return None


def classify_jurisdiction_type(jurisdiction: Jurisdiction | None) -> str:
    """Classify as state, county, city, district or unknown.

    A two-character geoid is a state FIPS code; otherwise the name decides,
    and a jurisdiction that only carries a ``state`` is treated as a district.
    """
    if jurisdiction is None:
        return "unknown"
    if jurisdiction.geoid and len(jurisdiction.geoid) == 2:
        return "state"
    name = (jurisdiction.estimated_name or jurisdiction.name or "").lower()
    for kind in ("county", "city", "district"):
        if kind in name:
            return kind
    if jurisdiction.state:
        return "district"
    return "unknown"


def interpret_concentration(hhi: float) -> str:
    """Band a concentration index into Very High / High / Medium / Low."""
    if hhi > 0.5:
        return "Very High"
    if hhi > 0.25:
        return "High"
    if hhi > 0.15:
        return "Medium"
    return "Low"


def herfindahl_index(counts: list[int]) -> float:
    """Sum of squared shares of ``counts``; 0 for an empty or all-zero list."""
    total = sum(counts)
    if total <= 0:
        return 0.0
    return sum((count / total) ** 2 for count in counts)


@dataclass
class JurisdictionFootprint:
    """Which of a group's persons are linked to each jurisdiction.

    ``supporters`` holds every supporter person with any verification record
    in the jurisdiction; ``verified`` only those whose record there is fully
    verified.  Persons are counted once per jurisdiction however many
    verification records they hold.
    """

    supporters: dict[str, set[str]] = field(default_factory=dict)
    verified: dict[str, set[str]] = field(default_factory=dict)
    verified_persons: set[str] = field(default_factory=set)

    @classmethod
    def for_group(cls, index: SnapshotIndex, group_id: str) -> "JurisdictionFootprint":
        person_ids = index.person_ids_for_profiles(index.group_profile_ids(group_id))
        return cls.for_persons(index, person_ids)

    @classmethod
    def for_persons(cls, index: SnapshotIndex, person_ids: Iterable[str]) -> "JurisdictionFootprint":
        supporters: dict[str, set[str]] = defaultdict(set)
        verified: dict[str, set[str]] = defaultdict(set)
        verified_persons: set[str] = set()

        for person_id in sorted(person_ids):
            for verification in index.verifications_by_person.get(person_id, []):
                jurisdiction_ids = index.jurisdictions_by_verification.get(verification.id, set())
                for jurisdiction_id in jurisdiction_ids:
                    supporters[jurisdiction_id].add(person_id)
                if verification.is_fully_verified:
                    verified_persons.add(person_id)
                    for jurisdiction_id in jurisdiction_ids:
                        verified[jurisdiction_id].add(person_id)

        return cls(supporters=dict(supporters), verified=dict(verified), verified_persons=verified_persons)

    def supporter_count(self, jurisdiction_id: str) -> int:
        return len(self.supporters.get(jurisdiction_id, ()))

    def verified_count(self, jurisdiction_id: str) -> int:
        return len(self.verified.get(jurisdiction_id, ()))


def compute_jurisdiction_concentration(
    snapshot: Snapshot,
    group_id: str,
    *,
    index: SnapshotIndex | None = None,
    top_n: int = TOP_JURISDICTIONS,
) -> JurisdictionConcentration:
    """Compute where a group's verified voters are concentrated.

    Args:
        snapshot: Relational snapshot.
        group_id: Viewpoint group id.
        index: Optional prebuilt index for the same snapshot.
        top_n: Number of jurisdictions to return.

    Returns:
        JurisdictionConcentration with the top jurisdictions by verified
        count, the concentration index, and the distinct jurisdiction count.
    """
    index = index or SnapshotIndex.build(snapshot)
    footprint = JurisdictionFootprint.for_group(index, group_id)

    total_verified = len(footprint.verified_persons)
    counts = {jid: len(persons) for jid, persons in footprint.verified.items()}

    rows: list[TopJurisdiction] = []
    for jurisdiction_id, count in counts.items():
        jurisdiction = index.jurisdictions_by_id.get(jurisdiction_id)
        rows.append(
            TopJurisdiction(
                id=jurisdiction_id,
                name=jurisdiction_display_name(jurisdiction),
                type=classify_jurisdiction_type(jurisdiction),
                geoid=jurisdiction.geoid if jurisdiction else None,
                verified_count=count,
                supporter_count=footprint.supporter_count(jurisdiction_id),
                percentage=count / total_verified * 100 if total_verified > 0 else 0.0,
            )
        )
    rows.sort(key=lambda row: (-row.verified_count, row.id))

    # Shares are over jurisdiction assignments: a voter in a state, county and
    # district at once is counted in each, and the index must stay within [0, 1].
    concentration_index = herfindahl_index(list(counts.values()))

    logger.debug(
        "Group {}: {} verified voters across {} jurisdictions (HHI {:.3f})",
        group_id,
        total_verified,
        len(counts),
        concentration_index,
    )
    return JurisdictionConcentration(
        top_jurisdictions=rows[:top_n],
        concentration_index=concentration_index,
        total_jurisdictions=len(counts),
    )
