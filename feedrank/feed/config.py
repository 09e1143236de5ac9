"""
Ranking configuration.

Fixed tables (weights, keyword lists) are module constants; everything a
caller may want to tune lives on RankingConfig.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScoringMode(str, Enum):
    """FLAT uses rule bonuses only; VECTOR adds term-vector similarity."""
    FLAT = "flat"
    VECTOR = "vector"


class FeedVariant(str, Enum):
    """FULL mixes trending/personalized and returns shorts; PAGINATED returns one page."""
    FULL = "full"
    PAGINATED = "paginated"


# Query generation
MAX_QUERIES = 5
MAX_SHORTS_QUERIES = 4
HISTORY_QUERY_DEPTH = 5
FALLBACK_SEED_QUERIES = ["急上昇", "music", "gaming"]
FALLBACK_SHORTS_QUERIES = ["#shorts", "面白い #shorts", "music #shorts"]
SHORTS_QUERY_SUFFIX = "#shorts"
FRESHNESS_QUERY_HINT = "最新"

# Aggregation
MAX_SUBSCRIPTION_FETCHES = 3
CHANNEL_VIDEO_LIMIT = 5
RELATED_HISTORY_DEPTH = 5

# Filtering
NEGATIVE_PENALTY_THRESHOLD = 2

# Scoring
NG_KEYWORD_SCORE = -10000.0
DURATION_MATCH_BONUS = 50.0
DURATION_MISMATCH_PENALTY = -20.0
PREFERRED_CHANNEL_BONUS = 30.0
SUBSCRIBED_BONUS = {ScoringMode.FLAT: 15.0, ScoringMode.VECTOR: 50.0}
GENRE_BONUS = 10.0
CATEGORY_BONUS = 8.0
FRESHNESS_BONUS = 10.0
SIMILARITY_SCALE = 100.0
NEGATIVE_SIGNAL_WEIGHT = 20.0
SCORE_FLOOR = {ScoringMode.FLAT: -1000.0, ScoringMode.VECTOR: -50.0}

# Diversity and mixing
CHANNEL_COOLDOWN = 3
MIN_FEED_SIZE = 5
LONG_FORM_TARGET = 50
SHORT_FORM_TARGET = 20
TRENDING_RATIO = 0.40
PAGE_SIZE = 50


@dataclass
class RankingConfig:
    """Tunables for one FeedRanker."""
    scoring_mode: ScoringMode = ScoringMode.VECTOR
    variant: FeedVariant = FeedVariant.FULL
    max_queries: int = MAX_QUERIES
    max_shorts_queries: int = MAX_SHORTS_QUERIES
    max_subscription_fetches: int = MAX_SUBSCRIPTION_FETCHES
    channel_video_limit: int = CHANNEL_VIDEO_LIMIT
    follow_related: bool = True
    noise_scale: float = 10.0
    cooldown: int = CHANNEL_COOLDOWN
    min_feed_size: int = MIN_FEED_SIZE
    long_form_target: int = LONG_FORM_TARGET
    short_form_target: int = SHORT_FORM_TARGET
    trending_ratio: float = TRENDING_RATIO
    page_size: int = PAGE_SIZE
    # None means "follow the scoring mode": descriptions are matched in VECTOR mode.
    match_description: Optional[bool] = None
    require_japanese: bool = False
    seed: Optional[int] = None

    @property
    def score_floor(self) -> float:
        return SCORE_FLOOR[self.scoring_mode]

    @property
    def subscribed_bonus(self) -> float:
        return SUBSCRIBED_BONUS[self.scoring_mode]

    @property
    def ng_matches_description(self) -> bool:
        if self.match_description is None:
            return self.scoring_mode == ScoringMode.VECTOR
        return self.match_description
