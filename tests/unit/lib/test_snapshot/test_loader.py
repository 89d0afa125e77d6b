"""Unit tests for snapshot loading and record parsing."""

import json
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

from influence_api.lib.snapshot import (
    Election,
    ProfileViewpointGroupRel,
    RelationshipType,
    SnapshotLoadError,
    ViewpointGroup,
    VoterVerification,
    load_snapshot,
    parse_table,
)


def _write(directory: Path, filename: str, rows: object) -> None:
    (directory / filename).write_text(json.dumps(rows), encoding="utf-8")


class TestLoadSnapshot:
    """Tests for load_snapshot."""

    def test_missing_directory_yields_empty_snapshot(self, tmp_path: Path) -> None:
        snapshot = load_snapshot(tmp_path / "does-not-exist")
        assert all(size == 0 for size in snapshot.table_sizes().values())

    def test_missing_files_are_empty_tables(self, tmp_path: Path) -> None:
        _write(tmp_path, "viewpoint_groups.json", [{"id": "g1", "title": "Clean Water"}])
        snapshot = load_snapshot(tmp_path)
        assert len(snapshot.viewpoint_groups) == 1
        assert snapshot.profiles == ()
        assert snapshot.ballot_items == ()

    def test_loads_records_and_ignores_unknown_columns(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            "voter_verifications.json",
            [{"id": "v1", "person_id": "p1", "is_fully_verified": True, "extra_column": 42}],
        )
        snapshot = load_snapshot(str(tmp_path))
        assert snapshot.voter_verifications == (VoterVerification(id="v1", person_id="p1", is_fully_verified=True),)

    def test_invalid_records_are_skipped(self, tmp_path: Path) -> None:
        _write(
            tmp_path,
            "profiles.json",
            [{"id": "pr1", "person_id": "p1"}, {"id": "pr2"}, {"person_id": "p3"}],
        )
        snapshot = load_snapshot(tmp_path)
        assert [p.id for p in snapshot.profiles] == ["pr1"]

    def test_malformed_json_is_empty_table(self, tmp_path: Path) -> None:
        (tmp_path / "jurisdictions.json").write_text("{not json", encoding="utf-8")
        snapshot = load_snapshot(tmp_path)
        assert snapshot.jurisdictions == ()

    def test_undecodable_file_is_empty_table(self, tmp_path: Path) -> None:
        """A table that is not valid UTF-8 degrades to empty; the rest still load."""
        (tmp_path / "persons.json").write_bytes(b'[{"id": "p\xff"}]')
        _write(tmp_path, "viewpoint_groups.json", [{"id": "g1", "title": "Clean Water"}])
        snapshot = load_snapshot(tmp_path)
        assert snapshot.persons == ()
        assert len(snapshot.viewpoint_groups) == 1

    def test_non_array_file_raises(self, tmp_path: Path) -> None:
        _write(tmp_path, "persons.json", {"id": "p1"})
        with pytest.raises(SnapshotLoadError, match="persons.json must contain a JSON array"):
            load_snapshot(tmp_path)


class TestParseTable:
    """Tests for record validation rules."""

    def test_relationship_role_is_normalized(self) -> None:
        rows = [
            {"id": "r1", "profile_id": "pr1", "viewpoint_group_id": "g1", "type": "LEADER"},
            {"id": "r2", "profile_id": "pr2", "viewpoint_group_id": "g1", "role": "Supporter"},
        ]
        rels = parse_table(rows, ProfileViewpointGroupRel, "rels")
        assert [r.type for r in rels] == [RelationshipType.LEADER, RelationshipType.SUPPORTER]

    def test_unknown_role_is_skipped(self) -> None:
        rows = [{"id": "r1", "profile_id": "pr1", "viewpoint_group_id": "g1", "type": "admin"}]
        assert parse_table(rows, ProfileViewpointGroupRel, "rels") == ()

    def test_group_title_accepts_name(self) -> None:
        (group,) = parse_table([{"id": "g1", "name": "Housing"}], ViewpointGroup, "groups")
        assert group.title == "Housing"

    def test_poll_date_truncates_timestamps(self) -> None:
        (election,) = parse_table(
            [{"id": "e1", "name": "General", "poll_date": "2025-11-04T00:00:00Z"}],
            Election,
            "elections",
        )
        assert election.poll_date == date(2025, 11, 4)

    def test_naive_timestamps_are_utc(self) -> None:
        (verification,) = parse_table(
            [{"id": "v1", "person_id": "p1", "created_at": "2025-05-01T10:00:00"}],
            VoterVerification,
            "verifications",
        )
        assert verification.created_at == datetime(2025, 5, 1, 10, tzinfo=UTC)

    def test_rejects_non_list(self) -> None:
        with pytest.raises(SnapshotLoadError):
            parse_table({"rows": []}, ViewpointGroup, "groups")
