"""Snapshot container and precomputed join indexes.

A :class:`Snapshot` is the sole input to every metric: an immutable set of
tables loaded up front.  :class:`SnapshotIndex` resolves foreign keys through
dictionaries built once per computation pass instead of scanning tables.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from typing import TypeVar

from influence_api.lib.snapshot.models import (
    BallotItem,
    BallotItemOption,
    Candidacy,
    Election,
    InfluenceTarget,
    Jurisdiction,
    Measure,
    Office,
    OfficeTerm,
    Party,
    Person,
    Profile,
    ProfileViewpointGroupRel,
    Race,
    Record,
    RelationshipType,
    ViewpointGroup,
    VoterVerification,
    VoterVerificationJurisdictionRel,
)

_R = TypeVar("_R", bound=Record)

# Snapshot attribute -> (JSON file name, record model)
TABLE_FILES: dict[str, tuple[str, type[Record]]] = {
    "viewpoint_groups": ("viewpoint_groups.json", ViewpointGroup),
    "profiles": ("profiles.json", Profile),
    "persons": ("persons.json", Person),
    "profile_viewpoint_group_rels": ("profile_viewpoint_group_rels.json", ProfileViewpointGroupRel),
    "voter_verifications": ("voter_verifications.json", VoterVerification),
    "jurisdictions": ("jurisdictions.json", Jurisdiction),
    "voter_verification_jurisdiction_rels": (
        "voter_verification_jurisdiction_rels.json",
        VoterVerificationJurisdictionRel,
    ),
    "elections": ("elections.json", Election),
    "ballot_items": ("ballot_items.json", BallotItem),
    "ballot_item_options": ("ballot_item_options.json", BallotItemOption),
    "races": ("races.json", Race),
    "candidacies": ("candidacies.json", Candidacy),
    "offices": ("offices.json", Office),
    "office_terms": ("office_terms.json", OfficeTerm),
    "measures": ("measures.json", Measure),
    "influence_targets": ("influence_targets.json", InfluenceTarget),
    "parties": ("parties.json", Party),
}


@dataclass(frozen=True)
class Snapshot:
    """Read-only relational snapshot of every table the metrics consume."""

    viewpoint_groups: tuple[ViewpointGroup, ...] = ()
    profiles: tuple[Profile, ...] = ()
    persons: tuple[Person, ...] = ()
    profile_viewpoint_group_rels: tuple[ProfileViewpointGroupRel, ...] = ()
    voter_verifications: tuple[VoterVerification, ...] = ()
    jurisdictions: tuple[Jurisdiction, ...] = ()
    voter_verification_jurisdiction_rels: tuple[VoterVerificationJurisdictionRel, ...] = ()
    elections: tuple[Election, ...] = ()
    ballot_items: tuple[BallotItem, ...] = ()
    ballot_item_options: tuple[BallotItemOption, ...] = ()
    races: tuple[Race, ...] = ()
    candidacies: tuple[Candidacy, ...] = ()
    offices: tuple[Office, ...] = ()
    office_terms: tuple[OfficeTerm, ...] = ()
    measures: tuple[Measure, ...] = ()
    influence_targets: tuple[InfluenceTarget, ...] = ()
    parties: tuple[Party, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable from callers but store tuples.
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, tuple):
                object.__setattr__(self, f.name, tuple(value))

    def table_sizes(self) -> dict[str, int]:
        """Return the number of records per table."""
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}


def _by_id(records: Iterable[_R]) -> dict[str, _R]:
    return {r.id: r for r in records}


@dataclass
class SnapshotIndex:
    """Lookup maps over a snapshot, built once per computation pass.

    Use :meth:`build`; the constructor is for the dataclass machinery.
    """

    snapshot: Snapshot
    profiles_by_id: dict[str, Profile] = field(default_factory=dict)
    persons_by_id: dict[str, Person] = field(default_factory=dict)
    groups_by_id: dict[str, ViewpointGroup] = field(default_factory=dict)
    jurisdictions_by_id: dict[str, Jurisdiction] = field(default_factory=dict)
    elections_by_id: dict[str, Election] = field(default_factory=dict)
    candidacies_by_id: dict[str, Candidacy] = field(default_factory=dict)
    races_by_id: dict[str, Race] = field(default_factory=dict)
    office_terms_by_id: dict[str, OfficeTerm] = field(default_factory=dict)
    offices_by_id: dict[str, Office] = field(default_factory=dict)
    measures_by_id: dict[str, Measure] = field(default_factory=dict)
    influence_targets_by_id: dict[str, InfluenceTarget] = field(default_factory=dict)
    parties_by_id: dict[str, Party] = field(default_factory=dict)

    rels_by_group: dict[str, list[ProfileViewpointGroupRel]] = field(default_factory=dict)
    rels_by_profile: dict[str, list[ProfileViewpointGroupRel]] = field(default_factory=dict)
    verifications_by_person: dict[str, list[VoterVerification]] = field(default_factory=dict)
    jurisdictions_by_verification: dict[str, set[str]] = field(default_factory=dict)
    options_by_ballot_item: dict[str, list[BallotItemOption]] = field(default_factory=dict)
    candidacies_by_race: dict[str, list[Candidacy]] = field(default_factory=dict)
    races_by_ballot_item: dict[str, Race] = field(default_factory=dict)
    measures_by_ballot_item: dict[str, Measure] = field(default_factory=dict)

    @classmethod
    def build(cls, snapshot: Snapshot) -> SnapshotIndex:
        """Index every table of ``snapshot``.

        Args:
            snapshot: The relational snapshot.

        Returns:
            A populated SnapshotIndex.
        """
        index = cls(
            snapshot=snapshot,
            profiles_by_id=_by_id(snapshot.profiles),
            persons_by_id=_by_id(snapshot.persons),
            groups_by_id=_by_id(snapshot.viewpoint_groups),
            jurisdictions_by_id=_by_id(snapshot.jurisdictions),
            elections_by_id=_by_id(snapshot.elections),
            candidacies_by_id=_by_id(snapshot.candidacies),
            races_by_id=_by_id(snapshot.races),
            office_terms_by_id=_by_id(snapshot.office_terms),
            offices_by_id=_by_id(snapshot.offices),
            measures_by_id=_by_id(snapshot.measures),
            influence_targets_by_id=_by_id(snapshot.influence_targets),
            parties_by_id=_by_id(snapshot.parties),
        )

        rels_by_group: dict[str, list[ProfileViewpointGroupRel]] = defaultdict(list)
        rels_by_profile: dict[str, list[ProfileViewpointGroupRel]] = defaultdict(list)
        for rel in snapshot.profile_viewpoint_group_rels:
            rels_by_group[rel.viewpoint_group_id].append(rel)
            rels_by_profile[rel.profile_id].append(rel)

        verifications_by_person: dict[str, list[VoterVerification]] = defaultdict(list)
        for verification in snapshot.voter_verifications:
            verifications_by_person[verification.person_id].append(verification)

        jurisdictions_by_verification: dict[str, set[str]] = defaultdict(set)
        for jrel in snapshot.voter_verification_jurisdiction_rels:
            jurisdictions_by_verification[jrel.voter_verification_id].add(jrel.jurisdiction_id)

        options_by_ballot_item: dict[str, list[BallotItemOption]] = defaultdict(list)
        for option in snapshot.ballot_item_options:
            options_by_ballot_item[option.ballot_item_id].append(option)

        candidacies_by_race: dict[str, list[Candidacy]] = defaultdict(list)
        for candidacy in snapshot.candidacies:
            if candidacy.race_id:
                candidacies_by_race[candidacy.race_id].append(candidacy)

        index.rels_by_group = dict(rels_by_group)
        index.rels_by_profile = dict(rels_by_profile)
        index.verifications_by_person = dict(verifications_by_person)
        index.jurisdictions_by_verification = dict(jurisdictions_by_verification)
        index.options_by_ballot_item = dict(options_by_ballot_item)
        index.candidacies_by_race = dict(candidacies_by_race)
        index.races_by_ballot_item = {r.ballot_item_id: r for r in snapshot.races if r.ballot_item_id}
        index.measures_by_ballot_item = {m.ballot_item_id: m for m in snapshot.measures if m.ballot_item_id}
        return index

    # ------------------------------------------------------------------
    # Group scope helpers
    # ------------------------------------------------------------------

    def group_rels(
        self,
        group_id: str,
        role: RelationshipType | None = None,
    ) -> list[ProfileViewpointGroupRel]:
        """Relationships into ``group_id``, optionally restricted to one role."""
        rels = self.rels_by_group.get(group_id, [])
        if role is None:
            return list(rels)
        return [rel for rel in rels if rel.type == role]

    def group_profile_ids(self, group_id: str, role: RelationshipType | None = None) -> set[str]:
        """Distinct profile ids related to ``group_id``."""
        return {rel.profile_id for rel in self.group_rels(group_id, role)}

    def person_ids_for_profiles(self, profile_ids: Iterable[str]) -> set[str]:
        """Map profile ids to person ids, dropping profiles missing from the snapshot."""
        person_ids: set[str] = set()
        for profile_id in profile_ids:
            profile = self.profiles_by_id.get(profile_id)
            if profile is not None:
                person_ids.add(profile.person_id)
        return person_ids

    def person_id_for_profile(self, profile_id: str) -> str | None:
        profile = self.profiles_by_id.get(profile_id)
        return profile.person_id if profile is not None else None

    def verifications_for_persons(
        self,
        person_ids: Iterable[str],
        *,
        verified_only: bool = False,
    ) -> list[VoterVerification]:
        """All verification records for ``person_ids`` in snapshot order per person."""
        result: list[VoterVerification] = []
        for person_id in person_ids:
            for verification in self.verifications_by_person.get(person_id, []):
                if verified_only and not verification.is_fully_verified:
                    continue
                result.append(verification)
        return result

    def is_verified_person(self, person_id: str) -> bool:
        """Whether the person holds at least one fully-verified record."""
        return any(v.is_fully_verified for v in self.verifications_by_person.get(person_id, []))

    def verified_person_ids(self, person_ids: Iterable[str]) -> set[str]:
        return {person_id for person_id in person_ids if self.is_verified_person(person_id)}

    def group_jurisdiction_ids(self, group_id: str) -> set[str]:
        """Jurisdictions reached by the fully-verified voters of a group (any role)."""
        person_ids = self.person_ids_for_profiles(self.group_profile_ids(group_id))
        jurisdiction_ids: set[str] = set()
        for verification in self.verifications_for_persons(sorted(person_ids), verified_only=True):
            jurisdiction_ids |= self.jurisdictions_by_verification.get(verification.id, set())
        return jurisdiction_ids
