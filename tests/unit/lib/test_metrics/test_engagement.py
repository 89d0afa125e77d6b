"""Unit tests for supporter engagement."""

from datetime import timedelta

import pytest

from influence_api.lib.metrics import compute_supporter_engagement
from influence_api.lib.metrics.engagement import compute_engagement_score


class TestComputeSupporterEngagement:
    """Tests for compute_supporter_engagement."""

    def test_recent_windows(self, factory, main_group_id, now) -> None:
        factory.supporters(2, verified=True, joined_at=now - timedelta(days=5))
        factory.supporters(2, verified=False, joined_at=now - timedelta(days=20))
        factory.supporters(3, joined_at=now - timedelta(days=60))
        factory.supporters(3, joined_at=now - timedelta(days=200))

        result = compute_supporter_engagement(factory.build(), main_group_id, now=now)

        assert result.total_supporters == 10
        assert result.recent_joiners_30d == 4
        assert result.recent_joiners_90d == 7
        assert result.recent_verification_rate == 0.5
        # growth 70 x 0.6 + verification 50 x 0.4
        assert result.engagement_score == 62

    def test_undated_joins_are_not_recent(self, factory, main_group_id, now) -> None:
        factory.supporters(3, verified=True)

        result = compute_supporter_engagement(factory.build(), main_group_id, now=now)

        assert result.total_supporters == 3
        assert result.recent_joiners_30d == 0
        assert result.recent_verification_rate == 0.0
        assert result.engagement_score is None

    def test_only_supporter_role_counts(self, factory, main_group_id, now) -> None:
        factory.supporter(joined_at=now - timedelta(days=1))
        factory.supporter(role="leader", joined_at=now - timedelta(days=1))

        result = compute_supporter_engagement(factory.build(), main_group_id, now=now)

        assert result.total_supporters == 1
        assert result.recent_joiners_30d == 1

    def test_empty(self, factory, main_group_id, now) -> None:
        result = compute_supporter_engagement(factory.build(), main_group_id, now=now)
        assert result.total_supporters == 0
        assert result.engagement_score is None

    def test_payload_keys(self, factory, main_group_id, now) -> None:
        payload = compute_supporter_engagement(factory.build(), main_group_id, now=now).model_dump(by_alias=True)
        assert payload["recentJoiners30d"] == 0
        assert "engagementScore" in payload


class TestComputeEngagementScore:
    def test_none_without_recent_joiners(self) -> None:
        assert compute_engagement_score(0, 10, 100, 0.0) is None
        assert compute_engagement_score(1, 1, 0, 1.0) is None

    def test_growth_component_is_capped(self) -> None:
        assert compute_engagement_score(10, 500, 100, 1.0) == 100

    @pytest.mark.parametrize(
        ("args", "expected"),
        [((5, 10, 100, 0.2), 14), ((1, 1, 4, 0.0), 15), ((2, 2, 2, 0.5), 80)],
    )
    def test_weighting(self, args: tuple, expected: int) -> None:
        assert compute_engagement_score(*args) == expected
