"""Deduplication keys.

Several records can describe the same real-world contest (a race reached
through different ballot items, an API election repeated across positions).
Each entity type gets one key function so the equivalence rule is explicit.
"""


def ballot_exposure_key(office_name: str | None, election_year: int, ballot_item_id: str) -> str:
    """Key for a static ballot exposure.

    Items for the same office in the same election year collapse to one
    entry; items without an office fall back to their ballot item id.
    """
    if office_name:
        return f"{office_name}-{election_year}"
    return f"ballot-item-{ballot_item_id}"


def api_election_key(office_name: str | None, election_id: str, election_year: int) -> str:
    """Key for an externally-fetched upcoming election."""
    return f"api-{office_name or election_id}-{election_year}"


def candidate_key(name: str, party: str | None) -> tuple[str, str | None]:
    """Key for a candidate on a ballot item roster."""
    return (name, party)


def title_key(title: str) -> str:
    """Key used to treat two ballot exposures with the same title as one opportunity."""
    return title.strip()
