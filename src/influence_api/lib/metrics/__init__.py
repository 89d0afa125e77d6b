"""Metrics library: pure aggregation and scoring over a relational snapshot.

Every function here is deterministic for a given snapshot and ``now``,
performs no I/O, and never mutates its input.

Public API:
    - compute_verified_voters: Verified-voter count, rate and weekly growth
    - compute_jurisdiction_concentration: Top jurisdictions and HHI
    - compute_ballot_exposure: Upcoming ballot items with leverage scores
    - compute_ballot_item_influence: Detailed per-ballot-item view
    - compute_network_expansion: Connected leaders and new jurisdictions
    - compute_supporter_engagement: Recent joiners and engagement score
    - compute_topic_metrics: Per-topic rollups
    - find_topic_opportunities: Topic to ballot item matching
    - derive_actions: Ranked actionable insights from the core metrics
"""

from influence_api.lib.metrics.actions import MetricsContext, derive_actions, generate_priority_action
from influence_api.lib.metrics.ballot_exposure import (
    calculate_leverage_level,
    calculate_leverage_score,
    calculate_urgency,
    compute_ballot_exposure,
    exposures_from_upcoming_elections,
    infer_level_from_jurisdiction,
    map_office_level,
)
from influence_api.lib.metrics.ballot_items import compute_ballot_item_influence
from influence_api.lib.metrics.engagement import compute_supporter_engagement
from influence_api.lib.metrics.jurisdictions import (
    JurisdictionFootprint,
    classify_jurisdiction_type,
    compute_jurisdiction_concentration,
    format_jurisdiction_name,
    interpret_concentration,
    jurisdiction_display_name,
)
from influence_api.lib.metrics.keys import api_election_key, ballot_exposure_key, candidate_key, title_key
from influence_api.lib.metrics.network_expansion import compute_network_expansion
from influence_api.lib.metrics.topics import calculate_topic_relevance, compute_topic_metrics, find_topic_opportunities
from influence_api.lib.metrics.types import (
    ActionableInsight,
    BallotExposure,
    BallotItemInfluence,
    BallotItemSummary,
    BallotItemType,
    Candidate,
    ImpactLevel,
    JurisdictionConcentration,
    LeverageLevel,
    NetworkExpansion,
    OfficeLevel,
    SupporterCountSource,
    SupporterEngagement,
    TimeSeriesPoint,
    TopicJurisdiction,
    TopicMetrics,
    TopicOpportunity,
    TopJurisdiction,
    UrgencyLevel,
    VerifiedVoterMetrics,
)
from influence_api.lib.metrics.verified_voters import (
    compute_growth_trend,
    compute_verified_voters,
    compute_weekly_growth_rate,
)

__all__ = [
    "ActionableInsight",
    "BallotExposure",
    "BallotItemInfluence",
    "BallotItemSummary",
    "BallotItemType",
    "Candidate",
    "ImpactLevel",
    "JurisdictionConcentration",
    "JurisdictionFootprint",
    "LeverageLevel",
    "MetricsContext",
    "NetworkExpansion",
    "OfficeLevel",
    "SupporterCountSource",
    "SupporterEngagement",
    "TimeSeriesPoint",
    "TopJurisdiction",
    "TopicJurisdiction",
    "TopicMetrics",
    "TopicOpportunity",
    "UrgencyLevel",
    "VerifiedVoterMetrics",
    "api_election_key",
    "ballot_exposure_key",
    "calculate_leverage_level",
    "calculate_leverage_score",
    "calculate_topic_relevance",
    "calculate_urgency",
    "candidate_key",
    "classify_jurisdiction_type",
    "compute_ballot_exposure",
    "compute_ballot_item_influence",
    "compute_growth_trend",
    "compute_jurisdiction_concentration",
    "compute_network_expansion",
    "compute_supporter_engagement",
    "compute_topic_metrics",
    "compute_verified_voters",
    "compute_weekly_growth_rate",
    "derive_actions",
    "exposures_from_upcoming_elections",
    "find_topic_opportunities",
    "format_jurisdiction_name",
    "generate_priority_action",
    "infer_level_from_jurisdiction",
    "interpret_concentration",
    "jurisdiction_display_name",
    "map_office_level",
    "title_key",
]
