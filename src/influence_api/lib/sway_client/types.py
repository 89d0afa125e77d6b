"""Validated shapes for payloads returned by the Sway GraphQL API.

Remote payloads are loosely typed.  Everything is narrowed into these
models before it reaches the metrics engine; nodes that cannot be parsed
are dropped by :func:`parse_nodes` with a warning.
"""

from datetime import date
from typing import Annotated, Any, TypeVar

from loguru import logger
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

_M = TypeVar("_M", bound=BaseModel)


class RemoteModel(BaseModel):
    """Base for remote payload models: accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _to_date(v: Any) -> Any:
    if isinstance(v, str) and len(v) > 10:
        return v[:10]
    return v


# Remote dates arrive as either "YYYY-MM-DD" or a full ISO timestamp.
ElectionDay = Annotated[date, BeforeValidator(_to_date)]


class CivicEnginePerson(RemoteModel):
    first_name: str = ""
    last_name: str = ""
    party: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class CivicEngineCandidacy(RemoteModel):
    id: str | None = None
    person: CivicEnginePerson | None = None


class CivicEngineOffice(RemoteModel):
    name: str | None = None
    level: str | None = None


class CivicEngineRace(RemoteModel):
    id: str
    election_day: ElectionDay
    type: str | None = None
    office: CivicEngineOffice | None = None
    candidacies: list[CivicEngineCandidacy] = Field(default_factory=list)


class CivicEnginePosition(RemoteModel):
    """An elected position and its races, as reported by CivicEngine."""

    id: str
    name: str
    level: str | None = None
    races: list[CivicEngineRace] = Field(default_factory=list)


class CivicEngineData(RemoteModel):
    positions: list[CivicEnginePosition] = Field(default_factory=list)

    @field_validator("positions", mode="before")
    @classmethod
    def _unwrap_nodes(cls, v: Any) -> Any:
        # GraphQL connections wrap the list as {"nodes": [...]}.
        if isinstance(v, dict):
            return v.get("nodes") or []
        return v


class UpcomingElection(RemoteModel):
    """One upcoming race flattened out of a CivicEngine position."""

    id: str
    election_day: ElectionDay
    office_name: str | None = None
    office_level: str | None = None
    candidate_count: int = 0
    type: str = "race"

    @property
    def is_measure(self) -> bool:
        return self.type.lower() == "measure"


class LeaderGroup(RemoteModel):
    id: str
    title: str | None = None
    supporter_count: int = 0


class LeaderProfile(RemoteModel):
    """A leader from the peer roster, optionally enriched from the snapshot."""

    id: str
    name: str | None = None
    slug: str | None = None
    person_id: str | None = None
    total_supporters: int = 0
    total_viewpoints: int = 0
    group_count: int = 0
    groups: list[LeaderGroup] = Field(default_factory=list)

    # Filled in by enrich_leader_metrics from the static snapshot
    verified_voters: int = 0
    verification_rate: float = 0.0
    growth_rate: float = 0.0
    reach: int = 0
    jurisdictions: list[str] = Field(default_factory=list)


class BenchmarkSample(RemoteModel):
    """Weekly growth rate observed for a comparable group."""

    group_id: str | None = None
    growth_rate: float = 0.0


class MeasureDetail(RemoteModel):
    """Descriptive measure fields looked up for a ballot item."""

    ballot_item_id: str
    title: str | None = None
    name: str | None = None
    summary: str | None = None
    description: str | None = None
    pro_snippet: str | None = None
    con_snippet: str | None = None
    influence_target_description: str | None = None

    @property
    def display_title(self) -> str | None:
        return self.influence_target_description or self.title or self.name


def parse_nodes(raw: Any, model: type[_M], source: str) -> list[_M]:
    """Validate a list of raw payload nodes, skipping ones that do not fit.

    Args:
        raw: Decoded JSON value; anything other than a list yields [].
        model: Model to validate each node against.
        source: Name used in log messages.

    Returns:
        List of validated models.
    """
    if not isinstance(raw, list):
        return []
    parsed: list[_M] = []
    for node in raw:
        try:
            parsed.append(model.model_validate(node))
        except ValidationError as exc:
            logger.warning("Skipping unparseable {} node: {}", source, exc.errors()[0]["msg"])
    return parsed
