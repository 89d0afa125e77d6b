"""Dashboard service: computes every metric for the main group.

Core metrics come from the static snapshot and are always returned.
Remote enhancements are fetched concurrently when a client is supplied;
any failure there is logged and the affected section is left out.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger

from influence_api.core.config import Settings
from influence_api.lib.enhancements import (
    analyze_electoral_landscape,
    calculate_movement_velocity,
    enrich_leader_metrics,
    find_coalition_opportunities,
)
from influence_api.lib.metrics import (
    BallotItemInfluence,
    BallotItemType,
    JurisdictionConcentration,
    MetricsContext,
    TopicMetrics,
    compute_ballot_exposure,
    compute_ballot_item_influence,
    compute_jurisdiction_concentration,
    compute_network_expansion,
    compute_supporter_engagement,
    compute_topic_metrics,
    compute_verified_voters,
    derive_actions,
    find_topic_opportunities,
)
from influence_api.lib.metrics.dates import resolve_now
from influence_api.lib.metrics.jurisdictions import UNKNOWN_JURISDICTION
from influence_api.lib.snapshot import Snapshot, SnapshotIndex, load_snapshot
from influence_api.lib.sway_client import (
    BenchmarkSample,
    CivicEngineData,
    LeaderProfile,
    SwayClient,
    TokenCache,
    UpcomingElection,
)
from influence_api.schemas.dashboard import (
    DashboardModel,
    DashboardSummary,
    TopicGroup,
    TopicOpportunitiesResponse,
)

MEASURE_PLACEHOLDER_PREFIX = "Measure in "


@dataclass
class RemoteEnhancements:
    """Whatever the remote API returned; None means unavailable."""

    civic_data: CivicEngineData | None = None
    adjacent_leaders: list[LeaderProfile] | None = None
    benchmarks: list[BenchmarkSample] | None = None
    upcoming_elections: list[UpcomingElection] | None = None
    top_leaders: list[LeaderProfile] | None = None


def _geo_ids(index: SnapshotIndex, concentration: JurisdictionConcentration) -> list[str]:
    geo_ids: list[str] = []
    for row in concentration.top_jurisdictions:
        jurisdiction = index.jurisdictions_by_id.get(row.id)
        if jurisdiction is None:
            continue
        geo_id = jurisdiction.geo_id or jurisdiction.geoid
        if geo_id:
            geo_ids.append(geo_id)
    return geo_ids


def _settled(name: str, result: Any) -> Any:
    """Return a gathered result, or None (logged) when it is an exception."""
    if isinstance(result, BaseException):
        logger.warning("API enhancement {} failed, continuing without it: {}", name, result)
        return None
    return result


async def fetch_enhancements(
    client: SwayClient,
    index: SnapshotIndex,
    concentration: JurisdictionConcentration,
    verified_voters: int,
    *,
    leaders_limit: int,
    now: datetime,
) -> RemoteEnhancements:
    """Fetch all remote enhancement inputs concurrently.

    Args:
        client: Sway API client.
        index: Snapshot index, used to map jurisdictions to geo ids.
        concentration: The main group's jurisdiction concentration.
        verified_voters: The main group's verified-voter count.
        leaders_limit: Size of the peer roster to fetch.
        now: Reference time; elections on or before this day are dropped.

    Returns:
        RemoteEnhancements with None for every fetch that failed.
    """
    geo_ids = _geo_ids(index, concentration)
    jurisdiction_ids = [row.id for row in concentration.top_jurisdictions]

    results = await asyncio.gather(
        client.fetch_civic_engine_data(geo_ids),
        client.find_adjacent_leaders(jurisdiction_ids),
        client.fetch_benchmark_groups(verified_voters),
        client.fetch_upcoming_elections(geo_ids, today=now.date()),
        client.fetch_top_leaders(leaders_limit),
        return_exceptions=True,
    )
    civic_data, adjacent, benchmarks, elections, leaders = results
    return RemoteEnhancements(
        civic_data=_settled("civic_engine_data", civic_data),
        adjacent_leaders=_settled("adjacent_leaders", adjacent),
        benchmarks=_settled("benchmark_groups", benchmarks),
        upcoming_elections=_settled("upcoming_elections", elections),
        top_leaders=_settled("top_leaders", leaders),
    )


async def enrich_measure_titles(
    client: SwayClient,
    items: list[BallotItemInfluence],
) -> list[BallotItemInfluence]:
    """Replace synthesized ``"Measure in ..."`` titles with remote measure text.

    Args:
        client: Sway API client.
        items: Ballot item influence records.

    Returns:
        The items, with titles and summaries filled in where the API knows
        the measure.  Unchanged when the lookup fails.
    """
    missing = [
        item.id
        for item in items
        if item.type == BallotItemType.MEASURE and item.title.startswith(MEASURE_PLACEHOLDER_PREFIX)
    ]
    if not missing:
        return items

    try:
        details = await client.fetch_ballot_item_measure_details(missing)
    except Exception as exc:
        logger.warning("Ballot item enrichment failed: {}", exc)
        return items

    enriched: list[BallotItemInfluence] = []
    for item in items:
        detail = details.get(item.id)
        if detail is None:
            enriched.append(item)
            continue
        enriched.append(
            item.model_copy(
                update={
                    "title": detail.display_title or item.title,
                    "measure_summary": detail.summary or item.measure_summary,
                }
            )
        )
    logger.info("Enriched {} of {} untitled measures", len(details), len(missing))
    return enriched


def build_summary(
    snapshot: Snapshot,
    context: MetricsContext,
    connected_leaders: int,
    topic_metrics: dict[str, TopicMetrics],
    now: datetime,
) -> DashboardSummary:
    """Headline numbers for the dashboard."""
    topics = [group.title for group in snapshot.viewpoint_groups if group.title]
    top = context.jurisdictions.top_jurisdictions
    return DashboardSummary(
        verified_voters=context.verified_voters.current,
        verification_rate=context.verified_voters.verification_rate,
        connected_leaders=connected_leaders,
        viewpoints=len(topics),
        topics=topics,
        topic_supporter_counts={title: m.supporter_count for title, m in topic_metrics.items()},
        topic_verified_voter_counts={title: m.verified_voter_count for title, m in topic_metrics.items()},
        topic_metrics=topic_metrics,
        growth_rate=context.verified_voters.weekly_growth_rate,
        reach=len(top),
        jurisdictions=[row.name for row in top if row.name != UNKNOWN_JURISDICTION],
        last_updated=now,
    )


async def build_dashboard(
    snapshot: Snapshot,
    settings: Settings,
    *,
    client: SwayClient | None = None,
    now: datetime | None = None,
) -> DashboardModel:
    """Compute the full dashboard for ``settings.main_group_id``.

    Args:
        snapshot: Relational snapshot.
        settings: Application settings.
        client: Optional Sway API client; enhancements are skipped without one.
        now: Reference time; defaults to the current UTC time.

    Returns:
        The assembled DashboardModel.
    """
    now = resolve_now(now)
    group_id = settings.main_group_id
    index = SnapshotIndex.build(snapshot)

    verified_voters = compute_verified_voters(snapshot, group_id, now=now, index=index)
    jurisdictions = compute_jurisdiction_concentration(snapshot, group_id, index=index)
    network_expansion = compute_network_expansion(snapshot, group_id, index=index)
    supporter_engagement = compute_supporter_engagement(snapshot, group_id, now=now, index=index)

    remote = RemoteEnhancements()
    if client is not None:
        remote = await fetch_enhancements(
            client,
            index,
            jurisdictions,
            verified_voters.current,
            leaders_limit=settings.top_leaders_limit,
            now=now,
        )
        if remote.upcoming_elections:
            logger.info("Using {} upcoming elections from Sway API", len(remote.upcoming_elections))

    ballot_exposure = compute_ballot_exposure(
        snapshot,
        group_id,
        upcoming_elections=remote.upcoming_elections,
        now=now,
        index=index,
    )
    ballot_items = compute_ballot_item_influence(snapshot, group_id, now=now, index=index)
    if client is not None:
        ballot_items = await enrich_measure_titles(client, ballot_items)

    context = MetricsContext(
        verified_voters=verified_voters,
        jurisdictions=jurisdictions,
        ballot_exposure=ballot_exposure,
        network_expansion=network_expansion,
    )
    focus_this_week = derive_actions(context, now=now)
    topic_metrics = compute_topic_metrics(snapshot, now=now, index=index)

    dashboard = DashboardModel(
        summary=build_summary(snapshot, context, network_expansion.connected_leaders, topic_metrics, now),
        focus_this_week=focus_this_week,
        verified_voters=verified_voters,
        jurisdictions=jurisdictions,
        ballot_exposure=ballot_exposure,
        ballot_items_influence=ballot_items,
        network_expansion=network_expansion,
        supporter_engagement=supporter_engagement,
        viewpoint_groups=[
            TopicGroup(
                id=group.id,
                title=group.title,
                description=group.description,
                created_at=group.created_at,
                updated_at=group.updated_at,
            )
            for group in snapshot.viewpoint_groups
            if group.title
        ],
    )

    # Snapshot-derived enhancements, enriched by peer data when it exists.
    if remote.adjacent_leaders or len(snapshot.viewpoint_groups) > 1:
        dashboard.coalition_opportunities = find_coalition_opportunities(snapshot, group_id, index=index)
    if remote.benchmarks or verified_voters.growth_trend:
        dashboard.velocity = calculate_movement_velocity(verified_voters.growth_trend, remote.benchmarks)
    if remote.upcoming_elections is not None:
        dashboard.electoral_landscape = analyze_electoral_landscape(remote.civic_data, ballot_exposure)
    if remote.top_leaders:
        dashboard.leader_comparison = enrich_leader_metrics(remote.top_leaders, snapshot, now=now, index=index)
        logger.info("Fetched {} leaders for comparison", len(remote.top_leaders))

    logger.info(
        "Dashboard for group {}: {} verified voters, {} ballot exposures, {} actions",
        group_id,
        verified_voters.current,
        len(ballot_exposure),
        len(focus_this_week),
    )
    return dashboard


async def load_and_build_dashboard(
    settings: Settings,
    *,
    token_cache: TokenCache | None = None,
    offline: bool = False,
    now: datetime | None = None,
) -> DashboardModel:
    """Load the snapshot from ``settings.data_dir`` and build the dashboard.

    A Sway client is opened only when enhancements are configured and
    ``offline`` is False; it is always closed before returning.

    Args:
        settings: Application settings.
        token_cache: Shared token cache for the client.
        offline: Skip remote enhancements entirely.
        now: Reference time; defaults to the current UTC time.

    Returns:
        The assembled DashboardModel.
    """
    snapshot = await asyncio.to_thread(load_snapshot, settings.data_dir)

    if offline or not settings.enhancements_configured:
        logger.debug("Sway API enhancements disabled, using static data only")
        return await build_dashboard(snapshot, settings, now=now)

    client = SwayClient.from_settings(settings, token_cache=token_cache)
    try:
        return await build_dashboard(snapshot, settings, client=client, now=now)
    finally:
        await client.close()


async def load_topic_opportunities(
    settings: Settings,
    *,
    limit: int = 20,
    now: datetime | None = None,
) -> TopicOpportunitiesResponse:
    """Match every titled topic against the main group's upcoming ballot items.

    Args:
        settings: Application settings.
        limit: Maximum number of opportunities returned.
        now: Reference time; defaults to the current UTC time.

    Returns:
        The best ``limit`` opportunities and the total found.
    """
    snapshot = await asyncio.to_thread(load_snapshot, settings.data_dir)
    items = compute_ballot_item_influence(snapshot, settings.main_group_id, now=now)
    opportunities = find_topic_opportunities(snapshot.viewpoint_groups, items)
    return TopicOpportunitiesResponse(items=opportunities[:limit], total=len(opportunities))
