"""Movement velocity: growth pace, direction and peer comparison."""

import statistics
from collections.abc import Sequence

from influence_api.lib.enhancements.types import MovementVelocity, TrendDirection, VelocityProjection
from influence_api.lib.metrics.types import TimeSeriesPoint
from influence_api.lib.sway_client.types import BenchmarkSample

RECENT_WEEKS = 4


def calculate_growth_rate(trend: Sequence[TimeSeriesPoint]) -> float:
    """Average weekly gain over the last four points of a cumulative trend."""
    recent = trend[-RECENT_WEEKS:]
    if len(recent) < 2:
        return 0.0
    return (recent[-1].value - recent[0].value) / (len(recent) - 1)


def determine_trend_direction(trend: Sequence[TimeSeriesPoint]) -> TrendDirection:
    """Compare growth in the second half of the trend against the first half."""
    if len(trend) < 3:
        return TrendDirection.STEADY
    mid = len(trend) // 2
    first_rate = calculate_growth_rate(trend[:mid])
    second_rate = calculate_growth_rate(trend[mid:])

    if second_rate > first_rate * 1.2:
        return TrendDirection.ACCELERATING
    if second_rate < first_rate * 0.8:
        return TrendDirection.SLOWING
    return TrendDirection.STEADY


def project_growth(weekly_rate: float, days: int) -> int:
    return round(weekly_rate * days / 7)


def calculate_percentile(value: float, samples: Sequence[float]) -> float:
    """Percentage of samples strictly below ``value``."""
    if not samples:
        return 0.0
    return sum(1 for sample in samples if sample < value) / len(samples) * 100


def calculate_movement_velocity(
    trend: Sequence[TimeSeriesPoint],
    benchmarks: Sequence[BenchmarkSample] | None = None,
) -> MovementVelocity:
    """Summarize how fast the verified base is growing.

    Args:
        trend: Cumulative weekly verified-voter trend.
        benchmarks: Optional growth rates of comparable groups.

    Returns:
        MovementVelocity; peer median and percentile only when benchmarks exist.
    """
    rate = calculate_growth_rate(trend)
    velocity = MovementVelocity(
        your_growth_rate=rate,
        trend_direction=determine_trend_direction(trend),
        projection=VelocityProjection(in_30_days=project_growth(rate, 30), in_90_days=project_growth(rate, 90)),
    )
    if benchmarks:
        rates = [sample.growth_rate for sample in benchmarks]
        velocity.peer_median = statistics.median(rates)
        velocity.percentile = calculate_percentile(rate, rates)
    return velocity
