"""
Fetch-query generation from explicit preferences and history.
"""
import logging
import random
from typing import Optional

from .config import (
    FALLBACK_SEED_QUERIES,
    FALLBACK_SHORTS_QUERIES,
    FRESHNESS_QUERY_HINT,
    HISTORY_QUERY_DEPTH,
    MAX_QUERIES,
    MAX_SHORTS_QUERIES,
    SHORTS_QUERY_SUFFIX,
)
from .keywords import extract_keywords
from .models import (
    CategoricalPreferences,
    Depth,
    DiscoveryMode,
    Freshness,
    Mood,
    UserSignals,
    Visual,
    Vocal,
)
from .profile import UserProfile

logger = logging.getLogger(__name__)

# At most one hint per axis, in this order.
CONTEXT_HINTS = [
    ("mood", {Mood.RELAX: "relaxing", Mood.ENERGETIC: "upbeat"}),
    ("depth", {Depth.DEEP: "解説", Depth.CASUAL: "まとめ"}),
    ("vocal", {Vocal.INSTRUMENTAL: "bgm"}),
    ("visual", {Visual.AVATAR: "vtuber", Visual.REAL: "vlog"}),
]


def context_suffix(preferences: CategoricalPreferences) -> str:
    hints = []
    for axis, table in CONTEXT_HINTS:
        hint = table.get(getattr(preferences, axis))
        if hint:
            hints.append(hint)
    return " ".join(hints)


def _with_suffix(base: str, *suffixes: str) -> str:
    return " ".join(part for part in (base.strip(), *suffixes) if part).strip()


class _QueryBuffer:
    """Ordered, de-duplicated, capped list of queries."""

    def __init__(self, limit: int):
        self.limit = limit
        self.items: list[str] = []

    @property
    def full(self) -> bool:
        return len(self.items) >= self.limit

    def add(self, query: str) -> None:
        if query and not self.full and query not in self.items:
            self.items.append(query)


def generate_queries(
    signals: UserSignals,
    rng: Optional[random.Random] = None,
    limit: int = MAX_QUERIES,
) -> list[str]:
    """Generate up to ``limit`` distinct search queries.

    Precedence: preferred genres, preferred channels, recent watch-history
    keywords, one random subscription, one random past search, then broad
    seeds. History and subscription sources are skipped in pure discovery
    mode, where the broad seeds are always added.
    """
    rng = rng or random.Random()
    suffix = context_suffix(signals.preferences)
    fresh = FRESHNESS_QUERY_HINT if signals.freshness == Freshness.NEW else ""
    discovery = signals.discovery_mode == DiscoveryMode.DISCOVERY
    buf = _QueryBuffer(limit)

    for genre in signals.preferred_genres:
        buf.add(_with_suffix(genre, suffix, fresh))

    for channel in signals.preferred_channels:
        buf.add(_with_suffix(channel, suffix))

    if not discovery:
        for video in signals.watch_history[:HISTORY_QUERY_DEPTH]:
            tokens = extract_keywords(video.title)
            if tokens:
                buf.add(tokens[0])

        if signals.subscribed_channels and not buf.full:
            buf.add(rng.choice(signals.subscribed_channels).name.strip())

        if signals.search_history and not buf.full:
            buf.add(rng.choice(signals.search_history).strip())

    if not buf.items or discovery:
        for seed in FALLBACK_SEED_QUERIES:
            buf.add(_with_suffix(seed, suffix))

    logger.debug("Generated %d queries: %s", len(buf.items), buf.items)
    return buf.items


def generate_shorts_queries(
    profile: UserProfile, limit: int = MAX_SHORTS_QUERIES
) -> list[str]:
    """Short-form seeds: the heaviest profile terms tagged as shorts."""
    terms = profile.top_terms(limit)
    if not terms:
        return list(FALLBACK_SHORTS_QUERIES[:limit])
    return [f"{term} {SHORTS_QUERY_SUFFIX}" for term in terms]
