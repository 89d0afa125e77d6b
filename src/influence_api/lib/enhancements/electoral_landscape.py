"""Electoral landscape: how contested each exposed race is."""

from collections.abc import Iterable

from influence_api.lib.enhancements.types import Competitiveness, ElectoralLandscape
from influence_api.lib.metrics.types import BallotExposure, LeverageLevel
from influence_api.lib.sway_client.types import CivicEngineData, CivicEnginePosition


def determine_competitiveness(candidate_count: int) -> Competitiveness:
    """Four or more candidates is a tossup, two or more leans, otherwise safe."""
    if candidate_count >= 4:
        return Competitiveness.TOSSUP
    if candidate_count >= 2:
        return Competitiveness.LEAN
    return Competitiveness.SAFE


def _matching_position(civic_data: CivicEngineData, title: str) -> CivicEnginePosition | None:
    needle = title.lower()
    for position in civic_data.positions:
        if needle in position.name.lower():
            return position
    return None


def analyze_electoral_landscape(
    civic_data: CivicEngineData | None,
    exposures: Iterable[BallotExposure],
) -> list[ElectoralLandscape]:
    """Classify the competitiveness of each ballot exposure.

    When CivicEngine data is available, a position whose name contains the
    exposure title refines the candidate count from its first race.

    Args:
        civic_data: Optional CivicEngine positions for the group's area.
        exposures: Ballot exposures to classify.

    Returns:
        One landscape entry per exposure, in input order.
    """
    landscapes: list[ElectoralLandscape] = []
    for exposure in exposures:
        candidate_count = exposure.ballot_item.candidate_count or 0

        if civic_data is not None:
            position = _matching_position(civic_data, exposure.ballot_item.title)
            if position is not None and position.races and position.races[0].candidacies:
                candidate_count = len(position.races[0].candidacies)

        landscapes.append(
            ElectoralLandscape(
                ballot_item=exposure.ballot_item.model_copy(update={"candidate_count": candidate_count}),
                competitiveness=determine_competitiveness(candidate_count),
                candidate_count=candidate_count,
                your_leverage=exposure.leverage_level or LeverageLevel.MARGINAL,
                verified_supporters=exposure.verified_supporters,
            )
        )
    return landscapes
