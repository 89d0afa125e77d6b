"""Per-topic rollups and topic-to-ballot-item matching.

Every titled viewpoint group is a topic.  :func:`compute_topic_metrics`
summarizes each one for side-by-side comparison, and
:func:`find_topic_opportunities` scores upcoming ballot items against topic
text so a leader can see which contests their topics bear on.
"""

import re
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from influence_api.lib.metrics.dates import resolve_now, within_days
from influence_api.lib.metrics.geography import CITY_ALIASES, STATE_CODES, US_STATE_ABBREVIATIONS
from influence_api.lib.metrics.jurisdictions import format_jurisdiction_name
from influence_api.lib.metrics.types import (
    BallotItemInfluence,
    TopicJurisdiction,
    TopicMetrics,
    TopicOpportunity,
    UrgencyLevel,
)
from influence_api.lib.snapshot import RelationshipType, Snapshot, SnapshotIndex, ViewpointGroup

TOPIC_TOP_JURISDICTIONS = 5
MIN_RELEVANCE = 0.1

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "should", "could", "may", "might", "must", "can", "this", "that", "these",
        "those", "i", "you", "he", "she", "it", "we", "they", "what", "which", "who", "when", "where",
        "why", "how",
    }
)  # fmt: skip

URGENCY_MULTIPLIERS: dict[UrgencyLevel, int] = {
    UrgencyLevel.HIGH: 3,
    UrgencyLevel.MEDIUM: 2,
    UrgencyLevel.LOW: 1,
}

_NON_WORD = re.compile(r"[^\w\s]")
_STATE_CODE_TOKEN = re.compile(r"\b[A-Z]{2}\b")


# ---------------------------------------------------------------------------
# Topic rollups
# ---------------------------------------------------------------------------


def compute_topic_metrics(
    snapshot: Snapshot,
    *,
    now: datetime | None = None,
    index: SnapshotIndex | None = None,
) -> dict[str, TopicMetrics]:
    """Summarize every viewpoint group that has a title.

    Counts are over the supporter role.  A topic's top jurisdictions are
    where its verified supporters are registered, labelled with
    :func:`format_jurisdiction_name`; jurisdictions without a proper name
    are left out rather than shown as codes.

    Args:
        snapshot: Relational snapshot.
        now: Reference time; defaults to the current UTC time.
        index: Optional prebuilt index for the same snapshot.

    Returns:
        Mapping of topic title to its metrics, in snapshot order.  When two
        groups share a title the first one wins.
    """
    now = resolve_now(now)
    index = index or SnapshotIndex.build(snapshot)

    topics: dict[str, TopicMetrics] = {}
    for group in snapshot.viewpoint_groups:
        title = (group.title or "").strip()
        if not title:
            continue
        if title in topics:
            logger.debug("Duplicate topic title {!r} on group {}, keeping the first", title, group.id)
            continue

        supporter_rels = index.group_rels(group.id, RelationshipType.SUPPORTER)
        supporter_profiles = {rel.profile_id for rel in supporter_rels}
        leader_profiles = index.group_profile_ids(group.id, RelationshipType.LEADER)

        verified_profiles = 0
        verified_persons: set[str] = set()
        for profile_id in supporter_profiles:
            person_id = index.person_id_for_profile(profile_id)
            if person_id is not None and index.is_verified_person(person_id):
                verified_profiles += 1
                verified_persons.add(person_id)

        topics[title] = TopicMetrics(
            supporter_count=len(supporter_profiles),
            verified_voter_count=verified_profiles,
            leader_count=len(leader_profiles),
            recent_joiners_30d=sum(1 for rel in supporter_rels if within_days(rel.created_at, now, 30)),
            recent_joiners_90d=sum(1 for rel in supporter_rels if within_days(rel.created_at, now, 90)),
            top_jurisdictions=_topic_jurisdictions(index, verified_persons),
            created_date=group.created_at,
            updated_date=group.updated_at,
        )

    logger.debug("Computed metrics for {} topics", len(topics))
    return topics


def _topic_jurisdictions(index: SnapshotIndex, verified_persons: set[str]) -> list[TopicJurisdiction]:
    persons_by_jurisdiction: dict[str, set[str]] = defaultdict(set)
    for verification in index.verifications_for_persons(sorted(verified_persons), verified_only=True):
        for jurisdiction_id in index.jurisdictions_by_verification.get(verification.id, set()):
            persons_by_jurisdiction[jurisdiction_id].add(verification.person_id)

    rows: list[TopicJurisdiction] = []
    for jurisdiction_id, persons in persons_by_jurisdiction.items():
        name = format_jurisdiction_name(index.jurisdictions_by_id.get(jurisdiction_id))
        if name is None:
            continue
        rows.append(TopicJurisdiction(id=jurisdiction_id, name=name, verified_count=len(persons)))
    rows.sort(key=lambda row: (-row.verified_count, row.id))
    return rows[:TOPIC_TOP_JURISDICTIONS]


# ---------------------------------------------------------------------------
# Topic <-> ballot item matching
# ---------------------------------------------------------------------------


def _words(text: str) -> list[str]:
    return _NON_WORD.sub(" ", text.lower()).split()


def extract_keywords(text: str) -> set[str]:
    """Lowercased words longer than two characters, minus stop words."""
    return {word for word in _words(text) if len(word) > 2 and word not in STOP_WORDS}


def extract_phrases(text: str) -> list[str]:
    """Two- and three-word sequences of the text's longer words."""
    words = [word for word in _words(text) if len(word) > 2]
    phrases: list[str] = []
    for i in range(len(words) - 1):
        phrases.append(f"{words[i]} {words[i + 1]}")
        if i < len(words) - 2:
            phrases.append(f"{words[i]} {words[i + 1]} {words[i + 2]}")
    return [phrase for phrase in phrases if len(phrase) > 5]


def extract_locations(text: str) -> set[str]:
    """Places a topic mentions: state codes, state names, and major cities.

    Two-letter state codes are only recognised when written in capitals
    ("CA"), so ordinary words such as "in" or "or" are not read as states.
    Recognised places bring their aliases along ("SF" adds "san francisco"
    and "ca").
    """
    locations: set[str] = set()
    for code in _STATE_CODE_TOKEN.findall(text):
        if code.lower() in STATE_CODES:
            locations.add(code.lower())

    normalized = " ".join(_words(text))
    padded = f" {normalized} "
    for state, code in US_STATE_ABBREVIATIONS.items():
        if f" {state} " in padded:
            locations.update((state, code))
    for city, aliases in CITY_ALIASES.items():
        if f" {city} " in padded:
            locations.add(city)
            locations.update(aliases)
    return locations


def _location_matches(locations: set[str], item: BallotItemInfluence) -> bool:
    text = " ".join(_words(f"{item.jurisdiction} {item.state or ''}"))
    tokens = set(text.split())
    padded = f" {text} "
    return any(location in tokens or f" {location} " in padded for location in locations)


def calculate_topic_relevance(topic: ViewpointGroup, item: BallotItemInfluence) -> float:
    """Relevance of a ballot item to a topic, between 0 and 1.

    A topic that names a place only matches items voted on in that place.
    Otherwise the score blends title overlap (0.4), shared two- and
    three-word phrases (0.3) and keyword overlap (0.3).
    """
    topic_title = (topic.title or "").lower().strip()
    raw_topic_text = f"{topic.title or ''} {topic.description or ''}".strip()
    topic_text = raw_topic_text.lower()
    if not topic_text:
        return 0.0

    locations = extract_locations(raw_topic_text)
    if locations and not _location_matches(locations, item):
        return 0.0

    item_title = item.title.lower()
    item_text = " ".join(
        part.lower()
        for part in (item.title, item.office_name or "", item.measure_summary or "", item.jurisdiction)
        if part
    )

    topic_keywords = extract_keywords(topic_text)
    if not topic_keywords:
        return 0.0
    item_keywords = extract_keywords(item_text)

    keyword_score = 0
    for keyword in topic_keywords:
        if keyword in item_keywords:
            keyword_score += 2
        elif any(keyword in other or other in keyword for other in item_keywords):
            keyword_score += 1
    normalized_keyword_score = min(keyword_score / (len(topic_keywords) * 2), 1.0)

    phrases = extract_phrases(topic_text)
    phrase_hits = sum(1 for phrase in phrases if phrase in item_text)
    normalized_phrase_score = min(phrase_hits / max(len(phrases), 1), 1.0)

    title_score = 0.0
    if topic_title and topic_title in item_title:
        title_score = 1.0
    elif topic_title:
        title_words = extract_keywords(topic_title)
        if title_words:
            title_score = sum(1 for word in title_words if word in item_title) / len(title_words)

    relevance = title_score * 0.4 + normalized_phrase_score * 0.3 + normalized_keyword_score * 0.3
    return min(relevance, 1.0)


def calculate_opportunity_score(relevance: float, item: BallotItemInfluence) -> float:
    """Blend relevance (0.5), verified supporters up to 100 (0.3) and urgency (0.2)."""
    supporter_score = min(item.verified_supporters / 100, 1.0)
    urgency_score = URGENCY_MULTIPLIERS[item.urgency] / 3
    return relevance * 0.5 + supporter_score * 0.3 + urgency_score * 0.2


def find_topic_opportunities(
    topics: Iterable[ViewpointGroup],
    items: Iterable[BallotItemInfluence],
) -> list[TopicOpportunity]:
    """Pair titled topics with the ballot items relevant to them.

    Args:
        topics: Viewpoint groups; untitled ones are ignored.
        items: Ballot item influence records.

    Returns:
        Pairs with relevance of at least 0.1, best opportunity first.
    """
    item_list = list(items)
    opportunities: list[TopicOpportunity] = []
    for topic in topics:
        if not topic.title:
            continue
        for item in item_list:
            relevance = calculate_topic_relevance(topic, item)
            if relevance < MIN_RELEVANCE:
                continue
            opportunities.append(
                TopicOpportunity(
                    topic=topic.title,
                    topic_id=topic.id,
                    ballot_item=item,
                    relevance_score=relevance,
                    opportunity_score=calculate_opportunity_score(relevance, item),
                )
            )
    opportunities.sort(key=lambda o: -o.opportunity_score)
    return opportunities
