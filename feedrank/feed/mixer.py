"""
Final feed assembly: trending/personalized blend and pagination.
"""
import logging
import random
from typing import Optional, Sequence

from .config import LONG_FORM_TARGET, PAGE_SIZE, SHORT_FORM_TARGET, TRENDING_RATIO
from .duration import is_short_form
from .models import FeedResult, Video

logger = logging.getLogger(__name__)


def _split_by_form(videos: Sequence[Video]) -> tuple[list[Video], list[Video]]:
    long_form, short_form = [], []
    for v in videos:
        (short_form if is_short_form(v) else long_form).append(v)
    return long_form, short_form


def _shuffled(videos: list[Video], rng: random.Random) -> list[Video]:
    out = list(videos)
    rng.shuffle(out)
    return out


def select_long_form(
    trending: Sequence[Video],
    personalized: Sequence[Video],
    rng: random.Random,
    target: int = LONG_FORM_TARGET,
    trending_ratio: float = TRENDING_RATIO,
) -> tuple[list[Video], list[Video]]:
    """Pick the trending and personalized shares of the long-form feed.

    Personalized shortfalls are covered by leftover trending videos.

    Returns:
        (from_trending, from_personalized), before the final shuffle.
    """
    trending = _shuffled(list(trending), rng)
    personalized = _shuffled(list(personalized), rng)

    trending_quota = round(target * trending_ratio)
    from_trending = trending[:trending_quota]
    from_personalized = personalized[:target - len(from_trending)]

    gap = target - len(from_trending) - len(from_personalized)
    if gap > 0:
        from_trending += trending[trending_quota:trending_quota + gap]
    return from_trending, from_personalized


def mix_feed(
    trending: Sequence[Video],
    personalized: Sequence[Video],
    rng: Optional[random.Random] = None,
    long_target: int = LONG_FORM_TARGET,
    trending_ratio: float = TRENDING_RATIO,
    short_target: int = SHORT_FORM_TARGET,
) -> FeedResult:
    """Blend trending and personalized candidates into videos and shorts.

    Args:
        trending: Filtered trending candidates.
        personalized: Filtered, scored and diversified candidates.
        rng: Shuffle source.
        long_target: Long-form feed size.
        trending_ratio: Share of the long-form feed taken from trending.
        short_target: Short-form feed size.
    """
    rng = rng or random.Random()
    trending_long, trending_short = _split_by_form(trending)
    personal_long, personal_short = _split_by_form(personalized)

    from_trending, from_personalized = select_long_form(
        trending_long, personal_long, rng, long_target, trending_ratio
    )
    videos = _shuffled(from_trending + from_personalized, rng)
    shorts = _shuffled(trending_short + personal_short, rng)[:short_target]

    logger.info(
        "Mixed feed: %d videos (%d trending, %d personalized), %d shorts",
        len(videos), len(from_trending), len(from_personalized), len(shorts),
    )
    return FeedResult(videos=videos, shorts=shorts)


def paginate(videos: Sequence[Video], page_size: int = PAGE_SIZE) -> FeedResult:
    """One page of an already ranked list; no trending split, no shorts."""
    return FeedResult(videos=list(videos[:page_size]))
