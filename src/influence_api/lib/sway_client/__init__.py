"""Sway API client library: optional remote enrichment data.

Public API:
    - SwayClient: Async GraphQL client (elections, leaders, measure details)
    - SwayAPIError: Raised for transport, HTTP, auth and GraphQL failures
    - TokenCache: Explicit holder for the bearer token and its expiry
    - Validated payload types (UpcomingElection, LeaderProfile, ...)
"""

from influence_api.lib.sway_client.client import SwayAPIError, SwayClient
from influence_api.lib.sway_client.token_cache import TokenCache, token_expiry
from influence_api.lib.sway_client.types import (
    BenchmarkSample,
    CivicEngineCandidacy,
    CivicEngineData,
    CivicEngineOffice,
    CivicEnginePerson,
    CivicEnginePosition,
    CivicEngineRace,
    LeaderGroup,
    LeaderProfile,
    MeasureDetail,
    UpcomingElection,
    parse_nodes,
)

__all__ = [
    "BenchmarkSample",
    "CivicEngineCandidacy",
    "CivicEngineData",
    "CivicEngineOffice",
    "CivicEnginePerson",
    "CivicEnginePosition",
    "CivicEngineRace",
    "LeaderGroup",
    "LeaderProfile",
    "MeasureDetail",
    "SwayAPIError",
    "SwayClient",
    "TokenCache",
    "UpcomingElection",
    "parse_nodes",
    "token_expiry",
]
