"""Dashboard response envelopes.

The dashboard bundles every metric record plus the optional enhancement
sections.  Enhancement fields are omitted (None) when the remote API is
unavailable; core metric fields are always present.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from influence_api.lib.enhancements import CoalitionOpportunity, ElectoralLandscape, MovementVelocity
from influence_api.lib.metrics import (
    ActionableInsight,
    BallotExposure,
    BallotItemInfluence,
    JurisdictionConcentration,
    NetworkExpansion,
    SupporterEngagement,
    TopicMetrics,
    TopicOpportunity,
    VerifiedVoterMetrics,
)
from influence_api.lib.metrics.types import MetricModel
from influence_api.lib.sway_client import LeaderProfile


class TopicGroup(MetricModel):
    """A titled viewpoint group as exposed to the dashboard."""

    id: str
    title: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DashboardSummary(MetricModel):
    """Headline numbers for the main group."""

    verified_voters: int
    verification_rate: float
    connected_leaders: int
    viewpoints: int
    topics: list[str] = Field(default_factory=list)
    topic_supporter_counts: dict[str, int] = Field(default_factory=dict)
    topic_verified_voter_counts: dict[str, int] = Field(default_factory=dict)
    topic_metrics: dict[str, TopicMetrics] = Field(default_factory=dict)
    growth_rate: float = 0.0
    reach: int = 0
    jurisdictions: list[str] = Field(default_factory=list)
    last_updated: datetime


class DashboardModel(MetricModel):
    """Complete dashboard payload for one group."""

    summary: DashboardSummary
    focus_this_week: list[ActionableInsight] = Field(default_factory=list)
    verified_voters: VerifiedVoterMetrics
    jurisdictions: JurisdictionConcentration
    ballot_exposure: list[BallotExposure] = Field(default_factory=list)
    ballot_items_influence: list[BallotItemInfluence] = Field(default_factory=list)
    network_expansion: NetworkExpansion
    supporter_engagement: SupporterEngagement
    viewpoint_groups: list[TopicGroup] = Field(default_factory=list)

    electoral_landscape: list[ElectoralLandscape] | None = None
    coalition_opportunities: list[CoalitionOpportunity] | None = None
    velocity: MovementVelocity | None = None
    leader_comparison: list[LeaderProfile] | None = None


class TopicOpportunitiesResponse(MetricModel):
    items: list[TopicOpportunity] = Field(default_factory=list)
    total: int = 0


class MetricsErrorResponse(BaseModel):
    """Body returned when the dashboard cannot be computed."""

    error: str = Field(description="Short error summary")
    message: str = Field(description="Underlying failure message")
