"""Async client for the Sway GraphQL API.

Exchanges an API key for a bearer token (cached in a shared
:class:`TokenCache`), runs GraphQL queries over httpx, and narrows the
responses into the typed records in :mod:`influence_api.lib.sway_client.types`.
"""

from __future__ import annotations

import json
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger
from pydantic import ValidationError

from influence_api.lib.sway_client.token_cache import TokenCache
from influence_api.lib.sway_client.types import (
    BenchmarkSample,
    CivicEngineData,
    CivicEnginePosition,
    LeaderGroup,
    LeaderProfile,
    MeasureDetail,
    UpcomingElection,
    parse_nodes,
)

if TYPE_CHECKING:
    from influence_api.core.config import Settings

DEFAULT_GRAPHQL_ENDPOINT = "https://sway-production.hasura.app/v1/graphql"
DEFAULT_AUTH_ENDPOINT = "https://www.sway.co/api/auth/token"

CIVIC_ENGINE_QUERY = """
query GetElectoralContext($geoIds: [String!]!) {
  CivicEngine {
    positions(filterBy: { geoId: $geoIds }, first: 50) {
      nodes {
        id
        name
        level
        races {
          id
          electionDay
          candidacies { person { firstName lastName party } }
        }
      }
    }
  }
}
"""

UPCOMING_ELECTIONS_QUERY = """
query GetUpcomingElections($geoIds: [String!]!) {
  CivicEngine {
    positions(filterBy: { geoId: $geoIds }, first: 100) {
      nodes {
        id
        name
        level
        races {
          id
          electionDay
          type
          office { name level }
          candidacies { id person { firstName lastName party } }
        }
      }
    }
  }
}
"""

TOP_LEADERS_QUERY = """
query GetTopLeaders($limit: Int!) {
  profiles(where: { profileViewpointGroupRels: { type: { _eq: LEADER } } }, limit: $limit) {
    id
    displayNameLong
    personId
    profileViewpointGroupRels(where: { type: { _eq: LEADER } }) {
      viewpointGroup {
        id
        title
        profileViewpointGroupRels { id type profile { id personId } }
      }
    }
  }
}
"""

MEASURE_DETAILS_QUERY = """
query GetBallotItemMeasures($ids: [uuid!]!) {
  ballotItems(where: { id: { _in: $ids } }) {
    id
    measure {
      title
      name
      summary
      description
      proSnippet
      conSnippet
      influenceTarget { name description }
    }
  }
}
"""

ADJACENT_LEADERS_LIMIT = 20


class SwayAPIError(Exception):
    """Raised when the Sway API cannot be reached or returns an error.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code from the API.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _map_leader(profile: dict[str, Any]) -> LeaderProfile | None:
    """Flatten a raw leader profile into a LeaderProfile.

    Returns None and logs a warning when the profile has no id.
    """
    profile_id = profile.get("id")
    if not profile_id:
        logger.warning("Skipping leader profile without id")
        return None

    rels = profile.get("profileViewpointGroupRels") or []
    groups: list[LeaderGroup] = []
    supporter_person_ids: set[str] = set()
    for rel in rels:
        group = rel.get("viewpointGroup") or {}
        members = group.get("profileViewpointGroupRels") or []
        for member in members:
            person_id = (member.get("profile") or {}).get("personId")
            if person_id:
                supporter_person_ids.add(person_id)
        if group.get("id"):
            groups.append(LeaderGroup(id=group["id"], title=group.get("title"), supporter_count=len(members)))

    return LeaderProfile(
        id=profile_id,
        name=profile.get("displayNameLong"),
        slug=profile_id,
        person_id=profile.get("personId"),
        total_supporters=len(supporter_person_ids),
        total_viewpoints=len(rels),
        group_count=len(rels),
        groups=groups,
    )


def _positions(civic: Any) -> list[CivicEnginePosition]:
    """Validate the position nodes of a CivicEngine payload one by one."""
    if not isinstance(civic, dict):
        return []
    raw = civic.get("positions")
    if isinstance(raw, dict):
        raw = raw.get("nodes")
    return parse_nodes(raw, CivicEnginePosition, "CivicEngine position")


def _map_measure(node: dict[str, Any]) -> MeasureDetail | None:
    measure = node.get("measure")
    if not node.get("id") or not isinstance(measure, dict):
        return None
    target = measure.get("influenceTarget")
    if not isinstance(target, dict):
        target = {}
    try:
        return MeasureDetail.model_validate(
            {
                **measure,
                "ballot_item_id": node["id"],
                "influence_target_description": target.get("description") or target.get("name"),
            }
        )
    except ValidationError as exc:
        logger.warning("Skipping measure detail for {}: {}", node["id"], exc.errors()[0]["msg"])
        return None


class SwayClient:
    """Async client for the Sway GraphQL API.

    Args:
        api_key: Sway API key; without one every call raises SwayAPIError.
        graphql_endpoint: GraphQL endpoint URL.
        auth_endpoint: Token exchange endpoint URL.
        token_cache: Shared token cache; a private one is created if omitted.
        timeout: Request timeout in seconds.
        token_ttl: Token lifetime assumed when the JWT carries no ``exp``.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        graphql_endpoint: str = DEFAULT_GRAPHQL_ENDPOINT,
        auth_endpoint: str = DEFAULT_AUTH_ENDPOINT,
        token_cache: TokenCache | None = None,
        timeout: float = 30.0,
        token_ttl: timedelta = timedelta(hours=60),
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._graphql_endpoint = graphql_endpoint
        self._auth_endpoint = auth_endpoint
        self._token_ttl = token_ttl
        self.token_cache = token_cache if token_cache is not None else TokenCache()
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=False)

    @classmethod
    def from_settings(cls, settings: Settings, token_cache: TokenCache | None = None) -> SwayClient:
        """Build a client from application settings."""
        return cls(
            settings.sway_api_key,
            graphql_endpoint=settings.sway_graphql_endpoint,
            auth_endpoint=settings.sway_auth_endpoint,
            token_cache=token_cache,
            timeout=settings.sway_request_timeout,
            token_ttl=timedelta(hours=settings.sway_token_ttl_hours),
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> SwayClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Sway API error: {} {} for {}", exc.response.status_code, exc.response.reason_phrase, url)
            raise SwayAPIError(
                f"HTTP {exc.response.status_code}: {exc.response.reason_phrase}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Sway API request failed: {}", exc)
            raise SwayAPIError(f"Request failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("Sway API returned non-JSON response for {}", url)
            raise SwayAPIError(f"Invalid JSON response from {url}") from exc

        if not isinstance(result, dict):
            logger.error("Sway API returned {} instead of an object for {}", type(result).__name__, url)
            msg = "Unexpected response shape"
            raise SwayAPIError(msg)
        return result

    async def get_token(self) -> str:
        """Return a valid bearer token, exchanging the API key when needed.

        Raises:
            SwayAPIError: If no API key is configured or the exchange fails.
        """
        now = datetime.now(UTC)
        cached = self.token_cache.get(now)
        if cached is not None:
            return cached

        if not self._api_key:
            msg = "SWAY_API_KEY not configured, API features disabled"
            raise SwayAPIError(msg)

        payload = await self._send("GET", self._auth_endpoint, headers={"x-api-key": self._api_key})
        token = payload.get("token")
        if not isinstance(token, str) or not token:
            msg = "Token exchange response did not include a token"
            raise SwayAPIError(msg)

        self.token_cache.store(token, now, self._token_ttl)
        return token

    async def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        Raises:
            SwayAPIError: On transport failure or when the response carries
                GraphQL ``errors``.
        """
        token = await self.get_token()
        payload = await self._send(
            "POST",
            self._graphql_endpoint,
            headers={"Authorization": f"Bearer {token}"},
            json={"query": query, "variables": variables or {}},
        )

        errors = payload.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
            logger.error("GraphQL errors: {}", messages)
            raise SwayAPIError(f"GraphQL errors: {messages}")

        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def fetch_civic_engine_data(self, geo_ids: list[str]) -> CivicEngineData | None:
        """Fetch CivicEngine positions for ``geo_ids``; None when no ids are given."""
        if not geo_ids:
            return None
        data = await self.query(CIVIC_ENGINE_QUERY, {"geoIds": geo_ids})
        civic = data.get("CivicEngine")
        if not civic:
            return None
        return CivicEngineData(positions=_positions(civic))

    async def fetch_upcoming_elections(
        self,
        geo_ids: list[str],
        *,
        today: date | None = None,
    ) -> list[UpcomingElection] | None:
        """Fetch future races for ``geo_ids`` flattened into UpcomingElection records.

        Args:
            geo_ids: Jurisdiction geo ids.
            today: Races before this day are dropped; defaults to today (UTC).

        Returns:
            Upcoming elections, or None when no ids are given.
        """
        if not geo_ids:
            return None
        today = today or datetime.now(UTC).date()
        data = await self.query(UPCOMING_ELECTIONS_QUERY, {"geoIds": geo_ids})

        elections: list[UpcomingElection] = []
        for position in _positions(data.get("CivicEngine")):
            for race in position.races:
                if race.election_day < today:
                    continue
                office = race.office
                elections.append(
                    UpcomingElection(
                        id=race.id,
                        election_day=race.election_day,
                        office_name=(office.name if office and office.name else position.name),
                        office_level=(office.level if office and office.level else position.level),
                        candidate_count=len(race.candidacies),
                        type=race.type or "race",
                    )
                )
        logger.info("Fetched {} upcoming elections from Sway API", len(elections))
        return elections

    async def fetch_top_leaders(self, limit: int = 50) -> list[LeaderProfile]:
        """Fetch leaders for peer comparison, largest supporter base first."""
        data = await self.query(TOP_LEADERS_QUERY, {"limit": limit})
        raw = data.get("profiles")
        if not isinstance(raw, list):
            return []
        leaders = [leader for profile in raw if isinstance(profile, dict) and (leader := _map_leader(profile))]
        leaders.sort(key=lambda leader: -leader.total_supporters)
        return leaders

    async def find_adjacent_leaders(self, jurisdiction_ids: list[str]) -> list[LeaderProfile] | None:
        """Leaders active near ``jurisdiction_ids``; None when no ids are given.

        The API exposes no jurisdiction filter for leaders, so this returns
        the top of the general roster.
        """
        if not jurisdiction_ids:
            return None
        logger.debug("Adjacent leader lookup for {} jurisdictions", len(jurisdiction_ids))
        return await self.fetch_top_leaders(ADJACENT_LEADERS_LIMIT)

    async def fetch_benchmark_groups(self, supporter_count: int) -> list[BenchmarkSample] | None:
        """Growth samples of similar-sized groups.

        The API schema has no benchmark query yet, so this always returns None.
        """
        logger.debug("No benchmark source available for groups of {} supporters", supporter_count)
        return None

    async def fetch_ballot_item_measure_details(self, ballot_item_ids: list[str]) -> dict[str, MeasureDetail]:
        """Measure titles and summaries for the given ballot items, keyed by id."""
        if not ballot_item_ids:
            return {}
        data = await self.query(MEASURE_DETAILS_QUERY, {"ids": ballot_item_ids})
        raw = data.get("ballotItems")
        if not isinstance(raw, list):
            return {}
        details: dict[str, MeasureDetail] = {}
        for node in raw:
            if isinstance(node, dict) and (detail := _map_measure(node)) is not None:
                details[detail.ballot_item_id] = detail
        return details
