"""Enhancements library: optional analytics layered on external data.

None of these are required for the core metrics.  Coalition and velocity
are computed from the snapshot and refined by peer data when it exists;
the electoral landscape and leader comparison need the remote API.

Public API:
    - analyze_electoral_landscape: Competitiveness of each exposed race
    - find_coalition_opportunities: Groups sharing the main group's footprint
    - calculate_movement_velocity: Growth pace, direction and peer percentile
    - enrich_leader_metrics: Snapshot metrics for a remote peer roster
"""

from influence_api.lib.enhancements.coalition import calculate_synergy_score, find_coalition_opportunities
from influence_api.lib.enhancements.electoral_landscape import analyze_electoral_landscape, determine_competitiveness
from influence_api.lib.enhancements.leaders import enrich_leader_metrics
from influence_api.lib.enhancements.types import (
    CoalitionOpportunity,
    Competitiveness,
    ElectoralLandscape,
    MovementVelocity,
    TrendDirection,
    VelocityProjection,
)
from influence_api.lib.enhancements.velocity import (
    calculate_growth_rate,
    calculate_movement_velocity,
    determine_trend_direction,
)

__all__ = [
    "CoalitionOpportunity",
    "Competitiveness",
    "ElectoralLandscape",
    "MovementVelocity",
    "TrendDirection",
    "VelocityProjection",
    "analyze_electoral_landscape",
    "calculate_growth_rate",
    "calculate_movement_velocity",
    "calculate_synergy_score",
    "determine_competitiveness",
    "determine_trend_direction",
    "enrich_leader_metrics",
    "find_coalition_opportunities",
]
