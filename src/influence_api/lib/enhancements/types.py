"""Output records for the optional API-enhanced analytics."""

from enum import StrEnum

from pydantic import Field

from influence_api.lib.metrics.types import BallotItemSummary, LeverageLevel, MetricModel


class Competitiveness(StrEnum):
    SAFE = "safe"
    LEAN = "lean"
    TOSSUP = "tossup"


class TrendDirection(StrEnum):
    ACCELERATING = "accelerating"
    STEADY = "steady"
    SLOWING = "slowing"


class ElectoralLandscape(MetricModel):
    ballot_item: BallotItemSummary
    competitiveness: Competitiveness
    candidate_count: int
    your_leverage: LeverageLevel
    verified_supporters: int


class CoalitionOpportunity(MetricModel):
    """Another group whose verified voters overlap the main group's footprint."""

    leader_name: str
    group_id: str
    supporter_count: int
    shared_jurisdictions: list[str] = Field(default_factory=list)
    shared_ballot_items: int = 0
    synergy_score: float


class VelocityProjection(MetricModel):
    in_30_days: int = Field(alias="in30Days")
    in_90_days: int = Field(alias="in90Days")


class MovementVelocity(MetricModel):
    your_growth_rate: float
    peer_median: float | None = None
    percentile: float | None = None
    trend_direction: TrendDirection
    projection: VelocityProjection
