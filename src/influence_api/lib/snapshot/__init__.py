"""Snapshot library: the in-memory relational data model.

Public API:
    - Snapshot: Immutable container of every table
    - SnapshotIndex: Precomputed id and foreign-key lookup maps
    - load_snapshot: Read a snapshot from a directory of JSON files
    - Record models for each table
"""

from influence_api.lib.snapshot.loader import SnapshotLoadError, load_snapshot, parse_table
from influence_api.lib.snapshot.models import (
    BallotItem,
    BallotItemOption,
    Candidacy,
    Election,
    InfluenceTarget,
    Jurisdiction,
    Measure,
    Office,
    OfficeTerm,
    Party,
    Person,
    Profile,
    ProfileViewpointGroupRel,
    Race,
    Record,
    RelationshipType,
    ViewpointGroup,
    VoterVerification,
    VoterVerificationJurisdictionRel,
)
from influence_api.lib.snapshot.snapshot import TABLE_FILES, Snapshot, SnapshotIndex

__all__ = [
    "TABLE_FILES",
    "BallotItem",
    "BallotItemOption",
    "Candidacy",
    "Election",
    "InfluenceTarget",
    "Jurisdiction",
    "Measure",
    "Office",
    "OfficeTerm",
    "Party",
    "Person",
    "Profile",
    "ProfileViewpointGroupRel",
    "Race",
    "Record",
    "RelationshipType",
    "Snapshot",
    "SnapshotIndex",
    "SnapshotLoadError",
    "ViewpointGroup",
    "VoterVerification",
    "VoterVerificationJurisdictionRel",
    "load_snapshot",
    "parse_table",
]
