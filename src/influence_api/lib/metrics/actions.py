"""Action deriver: turns the core metrics into a short, ranked to-do list.

Rules run in a fixed order and each contributes zero, one or two insights:

1. Urgent or high-leverage ballot items -> publish a voter guide and mobilize.
2. A strong jurisdiction with a low verification rate -> verification push.
3. Geographic concentration risk -> expand into adjacent jurisdictions.
4. Few connected leaders but many verified supporters -> recruit organizers.
5. Remaining slots -> upcoming medium/low urgency items worth preparing for.
6. Nothing fired but exposures exist -> the single highest-leverage item.

The same inputs always produce the same list.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from influence_api.lib.metrics.dates import days_until, resolve_now
from influence_api.lib.metrics.keys import title_key
from influence_api.lib.metrics.types import (
    ActionableInsight,
    BallotExposure,
    ImpactLevel,
    JurisdictionConcentration,
    LeverageLevel,
    NetworkExpansion,
    UrgencyLevel,
    VerifiedVoterMetrics,
)

MAX_INSIGHTS = 5
MAX_FOCUS_ITEMS = 2

IMPACT_WEIGHTS: dict[ImpactLevel, int] = {
    ImpactLevel.HIGH: 3,
    ImpactLevel.MEDIUM: 2,
    ImpactLevel.LOW: 1,
}

MOBILIZE_ACTION = "Publish a voter guide + mobilize supporters here"
VERIFY_ACTION = "Run a targeted verification push"
EXPAND_ACTION = "Expand into adjacent jurisdictions before you're fragile"
RECRUIT_ACTION = "Recruit chapter leaders from engaged supporters"
PREPARE_ACTION = "Research candidates and start building endorsement case"


@dataclass(frozen=True)
class MetricsContext:
    """The four core metrics the action rules read."""

    verified_voters: VerifiedVoterMetrics
    jurisdictions: JurisdictionConcentration
    ballot_exposure: list[BallotExposure]
    network_expansion: NetworkExpansion


def _unique_by_title(exposures: list[BallotExposure]) -> list[BallotExposure]:
    ranked = sorted(exposures, key=lambda e: -e.leverage_score)
    seen: set[str] = set()
    unique: list[BallotExposure] = []
    for exposure in ranked:
        key = title_key(exposure.ballot_item.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(exposure)
    return unique


def _is_focus_candidate(exposure: BallotExposure, days: int) -> bool:
    verified = exposure.verified_supporters
    if exposure.urgency == UrgencyLevel.HIGH and verified >= 10:
        return True
    if (
        exposure.leverage_level in (LeverageLevel.KINGMAKER, LeverageLevel.SIGNIFICANT)
        and verified >= 20
        and days <= 90
    ):
        return True
    return verified >= 10 and 0 < days <= 180


def _is_prepare_candidate(exposure: BallotExposure, days: int) -> bool:
    return (
        exposure.urgency in (UrgencyLevel.MEDIUM, UrgencyLevel.LOW)
        and exposure.leverage_level in (LeverageLevel.SIGNIFICANT, LeverageLevel.MARGINAL)
        and exposure.verified_supporters >= 5
        and 0 < days <= 180
    )


def _level_label(exposure: BallotExposure) -> str:
    return str(exposure.ballot_item.office_level or "local")


def _focus_insight(exposure: BallotExposure, days: int) -> ActionableInsight:
    is_urgent = days < 30
    leverage_text = {
        LeverageLevel.KINGMAKER: "Kingmaker leverage",
        LeverageLevel.SIGNIFICANT: "Significant leverage",
    }.get(exposure.leverage_level)

    if is_urgent:
        description = f"Election in {days} days • {exposure.verified_supporters} verified supporters"
    elif leverage_text:
        description = f"{exposure.verified_supporters} verified supporters • {leverage_text}"
    else:
        description = f"{exposure.verified_supporters} verified supporters"

    return ActionableInsight(
        priority=1,
        title=f"Focus on {exposure.ballot_item.title}",
        description=description,
        metric=f"Leverage Score: {round(exposure.leverage_score)} • {_level_label(exposure)} level",
        action=MOBILIZE_ACTION,
        impact=ImpactLevel.HIGH if is_urgent else ImpactLevel.MEDIUM,
    )


def _verification_insight(context: MetricsContext) -> ActionableInsight | None:
    for jurisdiction in context.jurisdictions.top_jurisdictions[:5]:
        rate = (
            jurisdiction.verified_count / jurisdiction.supporter_count * 100
            if jurisdiction.supporter_count > 0
            else 0.0
        )
        if rate < 80 and jurisdiction.verified_count >= 5 and jurisdiction.percentage >= 5:
            unverified = max(0, jurisdiction.supporter_count - jurisdiction.verified_count)
            return ActionableInsight(
                priority=1,
                title=f"Increase verification in {jurisdiction.name}",
                description=(
                    f"{round(rate)}% verified • {unverified} unverified supporters in high-concentration area"
                ),
                metric=(
                    f"{jurisdiction.verified_count} verified • "
                    f"{round(jurisdiction.percentage)}% of your network"
                ),
                action=VERIFY_ACTION,
                impact=ImpactLevel.HIGH if rate < 60 else ImpactLevel.MEDIUM,
            )
    return None


def _concentration_insight(context: MetricsContext) -> ActionableInsight | None:
    concentration = context.jurisdictions
    if not (
        concentration.concentration_index > 0.5
        and concentration.total_jurisdictions < 5
        and context.verified_voters.current >= 10
    ):
        return None

    percent = round(concentration.concentration_index * 100)
    top = concentration.top_jurisdictions[0] if concentration.top_jurisdictions else None
    top_name = top.name if top else "Primary location"
    top_share = round(top.percentage) if top else 0
    return ActionableInsight(
        priority=1,
        title="Expand geographic reach before you're fragile",
        description=(
            f"{percent}% concentration in {concentration.total_jurisdictions} jurisdictions • "
            f"{top_name} has {top_share}%"
        ),
        metric=f"Concentration Index: {percent}% • {concentration.total_jurisdictions} active jurisdictions",
        action=EXPAND_ACTION,
        impact=ImpactLevel.HIGH if concentration.concentration_index > 0.7 else ImpactLevel.MEDIUM,
    )


def _network_insight(context: MetricsContext) -> ActionableInsight | None:
    network = context.network_expansion
    potential = network.potential_leaders
    if potential is None or not (
        network.connected_leaders < 5 and potential >= 10 and context.verified_voters.current >= 20
    ):
        return None

    # Only used for the threshold below; never surfaced.
    ratio = potential / network.connected_leaders if network.connected_leaders > 0 else math.inf
    return ActionableInsight(
        priority=1,
        title="Grow your network of allied organizers",
        description=(
            f"{potential} verified supporters could start their own groups • "
            f"Only {network.connected_leaders} currently organizing"
        ),
        metric=f"{network.new_jurisdictions} new jurisdictions reached via connected leaders",
        action=RECRUIT_ACTION,
        impact=ImpactLevel.HIGH if ratio > 5 else ImpactLevel.MEDIUM,
    )


def _prepare_insight(exposure: BallotExposure, days: int) -> ActionableInsight:
    return ActionableInsight(
        priority=1,
        title=f"Prepare for {exposure.ballot_item.title}",
        description=f"Election in {days} days • {exposure.verified_supporters} verified supporters",
        metric=f"Leverage: {exposure.leverage_level or LeverageLevel.MARGINAL} • {_level_label(exposure)} level",
        action=PREPARE_ACTION,
        impact=ImpactLevel.MEDIUM,
    )


def _fallback_insight(exposure: BallotExposure, days: int) -> ActionableInsight:
    if days > 0:
        description = f"Election in {days} days • {exposure.verified_supporters} verified supporters"
    else:
        description = f"{exposure.verified_supporters} verified supporters"
    return ActionableInsight(
        priority=1,
        title=f"Focus on {exposure.ballot_item.title}",
        description=description,
        metric=f"Leverage Score: {round(exposure.leverage_score)}",
        action=MOBILIZE_ACTION,
        impact=ImpactLevel.HIGH if exposure.urgency == UrgencyLevel.HIGH else ImpactLevel.MEDIUM,
    )


def _renumber(insights: list[ActionableInsight]) -> list[ActionableInsight]:
    ranked = sorted(insights, key=lambda i: (i.priority, -IMPACT_WEIGHTS[i.impact]))[:MAX_INSIGHTS]
    return [insight.model_copy(update={"priority": n}) for n, insight in enumerate(ranked, start=1)]


def derive_actions(context: MetricsContext, *, now: datetime | None = None) -> list[ActionableInsight]:
    """Derive up to five prioritized, actionable insights.

    Args:
        context: The verified-voter, jurisdiction, ballot-exposure and
            network metrics for one group.
        now: Reference time for days-until-election; defaults to now (UTC).

    Returns:
        Insights ordered by rule, with ``priority`` numbered 1..N.
    """
    now = resolve_now(now)
    dated = [(e, days_until(e.ballot_item.election_date, now)) for e in _unique_by_title(context.ballot_exposure)]

    # (rule rank, insight); rank is the insertion order, which is the rule order.
    ranked: list[tuple[int, ActionableInsight]] = []

    def add(insight: ActionableInsight | None) -> None:
        if insight is not None and len(ranked) < MAX_INSIGHTS:
            ranked.append((len(ranked) + 1, insight))

    focus = [(e, days) for e, days in dated if _is_focus_candidate(e, days)][:MAX_FOCUS_ITEMS]
    for exposure, days in focus:
        add(_focus_insight(exposure, days))

    add(_verification_insight(context))
    add(_concentration_insight(context))
    add(_network_insight(context))

    used_titles = {title_key(e.ballot_item.title) for e, _ in focus}
    for exposure, days in dated:
        if len(ranked) >= MAX_INSIGHTS:
            break
        if title_key(exposure.ballot_item.title) not in used_titles and _is_prepare_candidate(exposure, days):
            add(_prepare_insight(exposure, days))

    if not ranked and dated:
        add(_fallback_insight(*dated[0]))

    return _renumber([insight.model_copy(update={"priority": rank}) for rank, insight in ranked])


def generate_priority_action(
    exposures: list[BallotExposure],
    *,
    now: datetime | None = None,
) -> ActionableInsight | None:
    """Single mobilization insight for the first exposure, or None when empty."""
    if not exposures:
        return None
    first = exposures[0]
    days = days_until(first.ballot_item.election_date, resolve_now(now))
    return ActionableInsight(
        priority=1,
        title=f"Focus on {first.ballot_item.title}",
        description=f"Election in {days} days",
        metric=f"{first.verified_supporters} verified supporters",
        action="Create voter mobilization plan",
        impact=ImpactLevel.HIGH,
    )
