"""Unit tests for network expansion."""

from datetime import UTC, datetime

from influence_api.lib.metrics import compute_network_expansion


class TestComputeNetworkExpansion:
    """Tests for compute_network_expansion."""

    def test_counts_supporters_leading_other_groups(self, factory, main_group_id) -> None:
        factory.group("g2", "Neighbors for Parks")
        factory.group("g3", "Transit Now")
        organizer = factory.supporter(verified=True)
        factory.link(organizer, "g2", "leader")
        factory.link(organizer, "g3", "leader")
        other = factory.supporter()
        factory.link(other, "g3", "leader")
        factory.supporters(2)

        result = compute_network_expansion(factory.build(), main_group_id)

        assert result.connected_leaders == 2

    def test_leading_main_group_does_not_count(self, factory, main_group_id) -> None:
        profile_id = factory.supporter()
        factory.link(profile_id, main_group_id, "leader")

        assert compute_network_expansion(factory.build(), main_group_id).connected_leaders == 0

    def test_leader_elsewhere_without_supporter_role(self, factory, main_group_id) -> None:
        factory.group("g2", "Other")
        profile_id = factory.supporter(role="member")
        factory.link(profile_id, "g2", "leader")

        assert compute_network_expansion(factory.build(), main_group_id).connected_leaders == 0

    def test_new_jurisdictions_exclude_main_footprint(self, factory, main_group_id) -> None:
        factory.group("g2", "Other")
        organizer = factory.supporter(verified=True, jurisdictions=["austin"])
        factory.link(organizer, "g2", "leader")
        factory.supporter("g2", verified=True, jurisdictions=["austin", "dallas"])
        factory.supporter("g2", verified=True, jurisdictions=["houston"])
        factory.supporter("g2", verified=False, jurisdictions=["el-paso"])

        result = compute_network_expansion(factory.build(), main_group_id)

        assert result.new_jurisdictions == 2

    def test_trend_uses_earliest_leadership(self, factory, main_group_id) -> None:
        factory.group("g2", "Other")
        factory.group("g3", "Another")
        organizer = factory.supporter()
        factory.link(organizer, "g2", "leader", joined_at=datetime(2025, 5, 14, tzinfo=UTC))
        factory.link(organizer, "g3", "leader", joined_at=datetime(2025, 5, 1, tzinfo=UTC))
        second = factory.supporter()
        factory.link(second, "g2", "leader", joined_at=datetime(2025, 5, 13, tzinfo=UTC))

        result = compute_network_expansion(factory.build(), main_group_id)

        assert [(p.date, p.value) for p in result.trend] == [("2025-04-28", 1), ("2025-05-12", 2)]

    def test_potential_leaders(self, factory, main_group_id) -> None:
        factory.group("g2", "Other")
        organizer = factory.supporter(verified=True)
        factory.link(organizer, "g2", "leader")
        factory.supporters(4, verified=True)
        factory.supporters(3, verified=False)

        assert compute_network_expansion(factory.build(), main_group_id).potential_leaders == 4

    def test_empty(self, factory, main_group_id) -> None:
        result = compute_network_expansion(factory.build(), main_group_id)
        assert result.connected_leaders == 0
        assert result.new_jurisdictions == 0
        assert result.trend == []
        assert result.potential_leaders == 0
