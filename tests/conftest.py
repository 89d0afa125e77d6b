"""Shared test fixtures: a pinned clock, settings, and a snapshot factory."""

import json
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from influence_api.core.config import Settings
from influence_api.lib.snapshot import (
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
    Snapshot,
    ViewpointGroup,
    VoterVerification,
    VoterVerificationJurisdictionRel,
)
from influence_api.lib.snapshot.snapshot import TABLE_FILES

# A Monday, so week buckets line up with whole days.
NOW = datetime(2025, 6, 2, 12, 0, tzinfo=UTC)
MAIN_GROUP_ID = "main-group"


class SnapshotFactory:
    """Builds small relational snapshots one record at a time."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now
        self.tables: dict[str, list[Any]] = {}
        self._counter = 0

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def _add(self, table: str, record: Any) -> Any:
        self.tables.setdefault(table, []).append(record)
        return record

    # -- groups and people ------------------------------------------------

    def group(self, group_id: str = MAIN_GROUP_ID, title: str | None = "Main Group", **kwargs: Any) -> str:
        self._add("viewpoint_groups", ViewpointGroup(id=group_id, title=title, **kwargs))
        return group_id

    def person(self, first_name: str = "Pat", last_name: str = "Voter") -> str:
        person_id = self._next("person")
        self._add("persons", Person(id=person_id, first_name=first_name, last_name=last_name))
        return person_id

    def profile(self, person_id: str | None = None) -> str:
        profile_id = self._next("profile")
        self._add("profiles", Profile(id=profile_id, person_id=person_id or self.person()))
        return profile_id

    def link(
        self,
        profile_id: str,
        group_id: str = MAIN_GROUP_ID,
        role: str = "supporter",
        joined_at: datetime | None = None,
    ) -> None:
        self._add(
            "profile_viewpoint_group_rels",
            ProfileViewpointGroupRel(
                id=self._next("rel"),
                profile_id=profile_id,
                viewpoint_group_id=group_id,
                type=role,
                created_at=joined_at,
            ),
        )

    def verify(
        self,
        person_id: str,
        jurisdictions: Iterable[str] = (),
        *,
        fully_verified: bool = True,
        verified_at: datetime | None = None,
    ) -> str:
        verification_id = self._next("verification")
        self._add(
            "voter_verifications",
            VoterVerification(
                id=verification_id,
                person_id=person_id,
                is_fully_verified=fully_verified,
                created_at=verified_at,
            ),
        )
        for jurisdiction_id in jurisdictions:
            self._add(
                "voter_verification_jurisdiction_rels",
                VoterVerificationJurisdictionRel(
                    id=self._next("vjr"),
                    voter_verification_id=verification_id,
                    jurisdiction_id=jurisdiction_id,
                ),
            )
        return verification_id

    def supporter(
        self,
        group_id: str = MAIN_GROUP_ID,
        *,
        verified: bool | None = None,
        jurisdictions: Iterable[str] = (),
        joined_at: datetime | None = None,
        verified_at: datetime | None = None,
        role: str = "supporter",
    ) -> str:
        """Add a profile related to ``group_id``; returns the profile id.

        ``verified=None`` adds no verification record; False adds an
        unverified one (still linked to ``jurisdictions``).
        """
        person_id = self.person()
        profile_id = self.profile(person_id)
        self.link(profile_id, group_id, role, joined_at)
        if verified is not None:
            self.verify(person_id, jurisdictions, fully_verified=verified, verified_at=verified_at)
        return profile_id

    def supporters(self, count: int, group_id: str = MAIN_GROUP_ID, **kwargs: Any) -> list[str]:
        return [self.supporter(group_id, **kwargs) for _ in range(count)]

    def person_of(self, profile_id: str) -> str:
        return next(p.person_id for p in self.tables["profiles"] if p.id == profile_id)

    # -- geography and ballots -------------------------------------------

    def jurisdiction(self, jurisdiction_id: str, name: str | None = None, **kwargs: Any) -> str:
        self._add("jurisdictions", Jurisdiction(id=jurisdiction_id, name=name, **kwargs))
        return jurisdiction_id

    def election(self, days_out: int, name: str = "General Election", election_id: str | None = None) -> str:
        election_id = election_id or self._next("election")
        poll_date: date = (self.now + timedelta(days=days_out)).date()
        self._add("elections", Election(id=election_id, name=name, poll_date=poll_date))
        return election_id

    def office(self, name: str, level: str | None = "local") -> str:
        office_id = self._next("office")
        self._add("offices", Office(id=office_id, name=name, level=level))
        term_id = self._next("term")
        self._add("office_terms", OfficeTerm(id=term_id, office_id=office_id))
        return term_id

    def race(
        self,
        jurisdiction_id: str,
        days_out: int,
        office: str | None = "City Council",
        level: str | None = "local",
        candidates: Iterable[tuple[str, str, str | None]] = (),
        election_id: str | None = None,
        **race_kwargs: Any,
    ) -> str:
        """Add a race ballot item with ``(first, last, party)`` candidates."""
        election_id = election_id or self.election(days_out)
        ballot_item_id = self._next("ballot-item")
        self._add(
            "ballot_items",
            BallotItem(id=ballot_item_id, election_id=election_id, jurisdiction_id=jurisdiction_id),
        )
        race_id = self._next("race")
        term_id = self.office(office, level) if office else None
        self._add(
            "races",
            Race(id=race_id, ballot_item_id=ballot_item_id, office_term_id=term_id, **race_kwargs),
        )
        for first, last, party in candidates:
            party_id = None
            if party:
                party_id = self._next("party")
                self._add("parties", Party(id=party_id, name=party, abbreviation=party[:1]))
            self._add(
                "candidacies",
                Candidacy(
                    id=self._next("candidacy"),
                    person_id=self.person(first, last),
                    race_id=race_id,
                    party_id=party_id,
                ),
            )
        return ballot_item_id

    def measure(
        self,
        jurisdiction_id: str,
        days_out: int,
        title: str | None = None,
        summary: str | None = None,
        target: tuple[str | None, str | None] | None = None,
        election_id: str | None = None,
    ) -> str:
        election_id = election_id or self.election(days_out)
        ballot_item_id = self._next("ballot-item")
        self._add(
            "ballot_items",
            BallotItem(id=ballot_item_id, election_id=election_id, jurisdiction_id=jurisdiction_id),
        )
        target_id = None
        if target is not None:
            target_id = self._next("target")
            self._add("influence_targets", InfluenceTarget(id=target_id, name=target[0], description=target[1]))
        self._add(
            "measures",
            Measure(
                id=self._next("measure"),
                ballot_item_id=ballot_item_id,
                title=title,
                summary=summary,
                influence_target_id=target_id,
            ),
        )
        return ballot_item_id

    def option(self, ballot_item_id: str, candidacy_id: str | None = None, text: str | None = None) -> None:
        self._add(
            "ballot_item_options",
            BallotItemOption(
                id=self._next("option"),
                ballot_item_id=ballot_item_id,
                candidacy_id=candidacy_id,
                text=text,
            ),
        )

    def build(self) -> Snapshot:
        return Snapshot(**{table: tuple(records) for table, records in self.tables.items()})

    def write(self, data_dir: Path) -> Path:
        """Dump every table into ``data_dir`` in the layout the snapshot loader reads."""
        data_dir.mkdir(parents=True, exist_ok=True)
        for table, (filename, _model) in TABLE_FILES.items():
            rows = [record.model_dump(mode="json") for record in self.tables.get(table, [])]
            (data_dir / filename).write_text(json.dumps(rows), encoding="utf-8")
        return data_dir


@pytest.fixture
def now() -> datetime:
    """Pinned reference time."""
    return NOW


@pytest.fixture
def factory() -> SnapshotFactory:
    """Fresh snapshot factory with the main group already added."""
    f = SnapshotFactory()
    f.group()
    return f


@pytest.fixture
def live_factory() -> SnapshotFactory:
    """Snapshot factory dated from the wall clock, for entrypoints that read the current time."""
    f = SnapshotFactory(now=datetime.now(UTC))
    f.group()
    return f


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Test settings: offline, reading snapshots from a temp directory."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        data_dir=str(tmp_path),
        main_group_id=MAIN_GROUP_ID,
        sway_api_key=None,
    )


@pytest.fixture
def main_group_id() -> str:
    return MAIN_GROUP_ID
