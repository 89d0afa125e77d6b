"""Output records produced by the metrics engine.

Records serialize with camelCase aliases (``model_dump(by_alias=True)``),
which is the contract the dashboard front end consumes.  Python code
addresses fields by their snake_case names.
"""

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UrgencyLevel(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LeverageLevel(StrEnum):
    KINGMAKER = "kingmaker"
    SIGNIFICANT = "significant"
    MARGINAL = "marginal"


class OfficeLevel(StrEnum):
    LOCAL = "local"
    STATE = "state"
    FEDERAL = "federal"


class ImpactLevel(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BallotItemType(StrEnum):
    RACE = "race"
    MEASURE = "measure"


class SupporterCountSource(StrEnum):
    """Whether a supporter count comes from jurisdiction linkage or a heuristic."""

    EXACT = "exact"
    ESTIMATED = "estimated"


class MetricModel(BaseModel):
    """Base for metric records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeSeriesPoint(MetricModel):
    date: str
    value: int


class VerifiedVoterMetrics(MetricModel):
    current: int
    verification_rate: float
    growth_trend: list[TimeSeriesPoint] = Field(default_factory=list)
    weekly_growth_rate: float = 0.0


class TopJurisdiction(MetricModel):
    id: str
    name: str
    type: str
    geoid: str | None = None
    verified_count: int
    supporter_count: int
    percentage: float


class JurisdictionConcentration(MetricModel):
    top_jurisdictions: list[TopJurisdiction] = Field(default_factory=list)
    concentration_index: float = 0.0
    total_jurisdictions: int = 0


class BallotItemSummary(MetricModel):
    id: str
    title: str
    type: BallotItemType
    election_date: date
    office_level: OfficeLevel | None = None
    office_name: str | None = None
    candidate_count: int | None = None


class BallotExposure(MetricModel):
    """Supporter presence on one upcoming ballot item and its strategic value."""

    ballot_item: BallotItemSummary
    verified_supporters: int
    potential_supporters: int | None = None
    urgency: UrgencyLevel
    leverage_score: float
    leverage_level: LeverageLevel | None = None
    jurisdiction: str | None = None
    jurisdiction_id: str | None = None
    supporter_count_source: SupporterCountSource = SupporterCountSource.EXACT


class Candidate(MetricModel):
    name: str
    party: str | None = None


class BallotItemInfluence(MetricModel):
    """Detailed view of one ballot item within the group's footprint."""

    id: str
    title: str
    type: BallotItemType
    election_id: str
    election_name: str
    election_date: date
    jurisdiction: str
    jurisdiction_id: str | None = None
    state: str | None = None
    supporters: int
    verified_supporters: int
    urgency: UrgencyLevel
    office_level: OfficeLevel
    office_name: str | None = None
    candidate_count: int = 0
    candidates: list[Candidate] | None = None
    measure_summary: str | None = None
    measure_pro_snippet: str | None = None
    measure_con_snippet: str | None = None
    num_winners: int | None = None
    num_selections_max: int | None = None
    is_ranked_choice: bool = False
    is_primary: bool = False
    is_runoff: bool = False
    is_recall: bool = False


class NetworkExpansion(MetricModel):
    connected_leaders: int = 0
    new_jurisdictions: int = 0
    trend: list[TimeSeriesPoint] = Field(default_factory=list)
    potential_leaders: int | None = None


class SupporterEngagement(MetricModel):
    total_supporters: int = 0
    recent_joiners_30d: int = Field(default=0, alias="recentJoiners30d")
    recent_joiners_90d: int = Field(default=0, alias="recentJoiners90d")
    recent_verification_rate: float = 0.0
    engagement_score: int | None = None


class ActionableInsight(MetricModel):
    priority: int = Field(ge=1, le=5)
    title: str
    description: str
    metric: str
    action: str
    impact: ImpactLevel


class TopicJurisdiction(MetricModel):
    id: str
    name: str
    verified_count: int


class TopicMetrics(MetricModel):
    supporter_count: int = 0
    verified_voter_count: int = 0
    leader_count: int = 0
    recent_joiners_30d: int = Field(default=0, alias="recentJoiners30d")
    recent_joiners_90d: int = Field(default=0, alias="recentJoiners90d")
    top_jurisdictions: list[TopicJurisdiction] = Field(default_factory=list)
    created_date: datetime | None = None
    updated_date: datetime | None = None


class TopicOpportunity(MetricModel):
    topic: str
    topic_id: str
    ballot_item: BallotItemInfluence
    relevance_score: float
    opportunity_score: float
