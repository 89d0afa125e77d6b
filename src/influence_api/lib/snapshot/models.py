"""Pydantic record models for the relational snapshot tables.

Each model mirrors one JSON table.  Records are flat, keyed by opaque
string ids, and reference each other through ``*_id`` foreign keys.
Unknown columns are ignored so upstream exports can grow new fields.
"""

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RelationshipType(StrEnum):
    """Role a profile holds within a viewpoint group."""

    LEADER = "leader"
    SUPPORTER = "supporter"
    MEMBER = "member"


class Record(BaseModel):
    """Base for snapshot records: immutable, tolerant of extra columns."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class Person(Record):
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    party_id: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Profile(Record):
    """Platform identity bound 1:1 to a Person."""

    person_id: str
    display_name_long: str | None = None
    display_name_short: str | None = None
    bio: str | None = None
    location: str | None = None
    is_disabled: bool = False
    is_id_verified: bool = False


class ViewpointGroup(Record):
    """A named coalition/topic led by one or more leaders."""

    title: str | None = Field(default=None, validation_alias=AliasChoices("title", "name"))
    description: str | None = None


class ProfileViewpointGroupRel(Record):
    """Join record linking a profile to a viewpoint group with a role."""

    profile_id: str
    viewpoint_group_id: str
    type: RelationshipType = Field(validation_alias=AliasChoices("type", "role"))
    is_public: bool | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class VoterVerification(Record):
    """A verification attempt; only ``is_fully_verified`` records count."""

    person_id: str
    is_fully_verified: bool = False
    has_confirmed_voted: bool | None = None
    needs_manual_review: bool | None = None


class Jurisdiction(Record):
    """A geographic unit.  ``geoid`` length signals the hierarchy level."""

    name: str | None = None
    estimated_name: str | None = None
    type: str | None = None
    level: str | None = None
    state: str | None = None
    geoid: str | None = None
    geo_id: str | None = None
    ocdid: str | None = None
    mtfcc: str | None = None
    parent_jurisdiction_id: str | None = None


class VoterVerificationJurisdictionRel(Record):
    voter_verification_id: str
    jurisdiction_id: str


class Election(Record):
    name: str = ""
    poll_date: date
    jurisdiction_id: str | None = None

    @field_validator("poll_date", mode="before")
    @classmethod
    def _truncate_datetime(cls, v: Any) -> Any:
        # Some exports carry full timestamps; only the calendar day matters.
        if isinstance(v, str) and len(v) > 10:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v


class BallotItem(Record):
    """One decision on a ballot: a race or a measure."""

    election_id: str
    title: str | None = None
    type: str | None = None
    race_id: str | None = None
    measure_id: str | None = None
    jurisdiction_id: str | None = None
    num_selections_max: int | None = None
    num_winners: int | None = None
    is_ranked_choice: bool = False


class BallotItemOption(Record):
    ballot_item_id: str
    title: str | None = None
    text: str | None = None
    candidacy_id: str | None = None
    option_type: str | None = None


class Race(Record):
    office_term_id: str | None = None
    ballot_item_id: str | None = None
    is_primary: bool = False
    is_runoff: bool = False
    is_recall: bool = False


class Candidacy(Record):
    person_id: str
    race_id: str | None = None
    party_id: str | None = None


class Office(Record):
    name: str
    level: str | None = None
    jurisdiction_id: str | None = None


class OfficeTerm(Record):
    office_id: str
    start_date: date | None = None
    end_date: date | None = None


class Measure(Record):
    title: str | None = None
    name: str | None = None
    description: str | None = None
    summary: str | None = None
    pro_snippet: str | None = None
    con_snippet: str | None = None
    ballot_item_id: str | None = None
    influence_target_id: str | None = None
    jurisdiction_id: str | None = None


class InfluenceTarget(Record):
    """Descriptive label used for a measure that has no title."""

    name: str | None = None
    description: str | None = None
    type: str | None = None


class Party(Record):
    name: str = ""
    abbreviation: str | None = None

    @property
    def label(self) -> str | None:
        return self.abbreviation or self.name or None
