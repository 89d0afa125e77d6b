"""Unit tests for peer leader enrichment."""

from datetime import timedelta

import pytest

from influence_api.lib.enhancements import enrich_leader_metrics
from influence_api.lib.sway_client import LeaderGroup, LeaderProfile


class TestEnrichLeaderMetrics:
    """Tests for enrich_leader_metrics."""

    def test_fills_snapshot_metrics(self, factory, now) -> None:
        factory.jurisdiction("j1", "Austin")
        factory.jurisdiction("j2", "48453")
        factory.jurisdiction("j3", "0600002")
        factory.group("g2", "Parks")
        factory.supporter("g2", verified=True, jurisdictions=["j1", "j2"], verified_at=now - timedelta(days=10))
        factory.supporter("g2", verified=True, jurisdictions=["j3"])
        factory.supporter("g2", verified=False, jurisdictions=["j1"])
        leader = LeaderProfile(id="alice", name="Alice", total_supporters=4, groups=[LeaderGroup(id="g2")])

        (enriched,) = enrich_leader_metrics([leader], factory.build(), now=now)

        assert enriched.total_supporters == 4
        assert enriched.verified_voters == 2
        assert enriched.verification_rate == 0.5
        assert enriched.growth_rate == pytest.approx(7 / 30)
        assert enriched.reach == 3
        assert enriched.jurisdictions == ["Austin", "Unknown jurisdiction"]

    def test_input_is_not_mutated(self, factory, now) -> None:
        leader = LeaderProfile(id="bob", total_supporters=0, groups=[LeaderGroup(id="missing")])

        (enriched,) = enrich_leader_metrics([leader], factory.build(), now=now)

        assert enriched.verification_rate == 0.0
        assert enriched.reach == 0
        assert enriched is not leader
        assert leader.verified_voters == 0
