"""Load a relational snapshot from a directory of JSON table exports.

Each table lives in its own file holding a JSON array of records.  A
missing or unreadable file degrades to an empty table so the metrics can
still be computed from whatever data is present; individual records that
fail validation are skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from influence_api.lib.snapshot.models import Record
from influence_api.lib.snapshot.snapshot import TABLE_FILES, Snapshot


class SnapshotLoadError(ValueError):
    """Raised when a table file is readable but structurally invalid."""


def parse_table(raw: Any, model: type[Record], source: str) -> tuple[Record, ...]:
    """Validate a raw JSON array into record models.

    Args:
        raw: Decoded JSON value (must be a list).
        model: Record model to validate each element against.
        source: Name used in log and error messages.

    Returns:
        Tuple of validated records; invalid elements are skipped.

    Raises:
        SnapshotLoadError: If ``raw`` is not a JSON array.
    """
    if not isinstance(raw, list):
        msg = f"{source} must contain a JSON array, got {type(raw).__name__}"
        raise SnapshotLoadError(msg)

    records: list[Record] = []
    skipped = 0
    for i, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping invalid record {} in {}: {}", i, source, exc.errors()[0]["msg"])
    if skipped:
        logger.warning("{}: skipped {} of {} records", source, skipped, len(raw))
    return tuple(records)


def _read_json(path: Path) -> Any:
    """Read a JSON file, returning an empty list when it is missing or unreadable."""
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error("Snapshot table {} not found, using empty table", path.name)
    except (OSError, ValueError) as exc:
        logger.error("Error loading {}: {}", path.name, exc)
    return []


def load_snapshot(data_dir: str | Path) -> Snapshot:
    """Load every snapshot table from ``data_dir``.

    Args:
        data_dir: Directory containing the table JSON files.

    Returns:
        A populated Snapshot.

    Raises:
        SnapshotLoadError: If a table file does not hold a JSON array.
    """
    root = Path(data_dir)
    if not root.is_dir():
        logger.warning("Snapshot directory {} does not exist", root)

    tables: dict[str, tuple[Record, ...]] = {}
    for attr, (filename, model) in TABLE_FILES.items():
        tables[attr] = parse_table(_read_json(root / filename), model, filename)

    snapshot = Snapshot(**tables)  # type: ignore[arg-type]
    logger.debug("Loaded snapshot from {}: {}", root, snapshot.table_sizes())
    return snapshot
