"""Unit tests for the per-ballot-item influence view."""

from influence_api.lib.metrics import BallotItemType, OfficeLevel, UrgencyLevel, compute_ballot_item_influence
from influence_api.lib.snapshot import BallotItem


class TestComputeBallotItemInfluence:
    """Tests for compute_ballot_item_influence."""

    def test_race_details(self, factory, main_group_id, now) -> None:
        factory.jurisdiction("J1", "Austin", state="TX")
        factory.supporters(3, verified=True, jurisdictions=["J1"])
        factory.supporter(verified=False, jurisdictions=["J1"])
        election = factory.election(20, name="Municipal Election")
        item_id = factory.race(
            "J1",
            20,
            office="Mayor",
            candidates=[("Ana", "Ruiz", "Democratic"), ("Bo", "Lee", "Republican")],
            election_id=election,
            is_runoff=True,
        )

        (item,) = compute_ballot_item_influence(factory.build(), main_group_id, now=now)

        assert item.id == item_id
        assert item.title == "Mayor"
        assert item.type == BallotItemType.RACE
        assert item.election_name == "Municipal Election"
        assert item.jurisdiction == "Austin"
        assert item.state == "TX"
        assert item.supporters == 4
        assert item.verified_supporters == 3
        assert item.urgency == UrgencyLevel.HIGH
        assert item.office_level == OfficeLevel.LOCAL
        assert item.candidate_count == 2
        assert [(c.name, c.party) for c in item.candidates] == [("Ana Ruiz", "D"), ("Bo Lee", "R")]
        assert item.is_runoff is True
        assert item.is_primary is False

    def test_roster_deduplicated_by_name_and_party(self, factory, main_group_id, now) -> None:
        factory.jurisdiction("J1", "Austin")
        factory.supporter(verified=True, jurisdictions=["J1"])
        factory.race("J1", 20, candidates=[("Ana", "Ruiz", None), ("Ana", "Ruiz", None)])

        (item,) = compute_ballot_item_influence(factory.build(), main_group_id, now=now)

        assert item.candidate_count == 2
        assert [c.name for c in item.candidates] == ["Ana Ruiz"]

    def test_office_resolved_through_options(self, factory, main_group_id, now) -> None:
        factory.jurisdiction("J1", "Austin")
        factory.supporter(verified=True, jurisdictions=["J1"])
        factory.race("J2", 20, office="County Judge", candidates=[("Cy", "Diaz", None)])
        candidacy_id = factory.tables["candidacies"][0].id
        election = factory.election(25)
        factory._add("ballot_items", BallotItem(id="bi-options", election_id=election, jurisdiction_id="J1"))
        factory.option("bi-options", candidacy_id=candidacy_id, text="Cy Diaz")

        (item,) = compute_ballot_item_influence(factory.build(), main_group_id, now=now)

        assert item.id == "bi-options"
        assert item.title == "County Judge"
        assert item.type == BallotItemType.RACE
        assert item.candidate_count == 1

    def test_measure_text(self, factory, main_group_id, now) -> None:
        factory.jurisdiction("J1", "Austin")
        factory.supporter(verified=True, jurisdictions=["J1"])
        factory.measure("J1", 60, title="Prop B", summary="Issues park bonds")

        (item,) = compute_ballot_item_influence(factory.build(), main_group_id, now=now)

        assert item.type == BallotItemType.MEASURE
        assert item.measure_summary == "Issues park bonds"
        assert item.candidates is None
        assert item.urgency == UrgencyLevel.MEDIUM

    def test_items_are_not_merged(self, factory, main_group_id, now) -> None:
        factory.jurisdiction("J1", "Austin")
        factory.jurisdiction("J2", "Round Rock")
        factory.supporter(verified=True, jurisdictions=["J1", "J2"])
        factory.race("J1", 10, office="Mayor")
        factory.race("J2", 10, office="Mayor")

        assert len(compute_ballot_item_influence(factory.build(), main_group_id, now=now)) == 2

    def test_sorted_by_date_then_supporters(self, factory, main_group_id, now) -> None:
        factory.jurisdiction("small", "Small Town")
        factory.jurisdiction("big", "Big City")
        factory.supporter(verified=True, jurisdictions=["small", "big"])
        factory.supporters(3, verified=True, jurisdictions=["big"])
        election = factory.election(30)
        factory.race("small", 30, office="Small Council", election_id=election)
        factory.race("big", 30, office="Big Council", election_id=election)
        factory.race("small", 7, office="Early Vote")

        items = compute_ballot_item_influence(factory.build(), main_group_id, now=now)

        assert [i.title for i in items] == ["Early Vote", "Big Council", "Small Council"]

    def test_empty_snapshot(self, factory, main_group_id, now) -> None:
        assert compute_ballot_item_influence(factory.build(), main_group_id, now=now) == []
