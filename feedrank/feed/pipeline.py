"""
Feed ranking pipeline orchestrator.

Combines profile building, query generation, concurrent candidate fetch,
filtering, scoring, channel diversity and mixing into one home feed.
"""
import logging
import random
from datetime import datetime
from typing import Optional

from ..sources.base import ContentSource
from .aggregator import CandidateAggregator
from .config import FeedVariant, RankingConfig
from .diversity import apply_channel_cooldown, backfill_from_trending
from .filters import FilterChain
from .mixer import mix_feed, paginate
from .models import FeedResult, UserSignals
from .profile import build_profile
from .queries import generate_queries, generate_shorts_queries
from .scorer import Scorer

logger = logging.getLogger(__name__)


class FeedRanker:
    """Ranks a personalized feed for one user snapshot per call.

    Holds no per-user state; every call to rank() is independent.
    """

    def __init__(
        self,
        source: ContentSource,
        config: Optional[RankingConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.source = source
        self.config = config or RankingConfig()
        self.rng = rng or random.Random(self.config.seed)

    async def rank(
        self,
        signals: UserSignals,
        page: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> FeedResult:
        """Run the full ranking pipeline.

        Steps:
            1. Build the term-weight profile
            2. Generate search queries (plus shorts seeds for the full feed)
            3. Fetch candidates concurrently
            4. Filter and de-duplicate both pools
            5. Score and sort
            6. Enforce channel cooldown, backfill from trending if too few
            7. Mix (full feed) or truncate to one page (paginated)

        Args:
            signals: User snapshot.
            page: Page number; defaults to signals.page.
            now: Reference time for freshness checks.

        Returns:
            FeedResult with long-form videos and, for the full feed, shorts.

        Raises:
            RecommendationsUnavailableError: If every candidate source failed.
        """
        config = self.config
        page = page or signals.page
        paginated = config.variant == FeedVariant.PAGINATED
        logger.info(
            "Ranking page %d (%s, %s scoring)",
            page, config.variant.value, config.scoring_mode.value,
        )

        # 1-2. Profile and queries
        profile = build_profile(signals)
        queries = generate_queries(signals, self.rng, config.max_queries)
        shorts_queries = (
            [] if paginated
            else generate_shorts_queries(profile, config.max_shorts_queries)
        )
        logger.info("Queries: %s", queries)

        # 3. Fetch
        aggregator = CandidateAggregator(self.source, config, self.rng)
        pools = await aggregator.collect(queries, signals, shorts_queries)

        # 4. Filter; the shared id set keeps the two pools disjoint
        chain = FilterChain(signals, config)
        accepted_ids: set[str] = set()
        personalized = chain.apply(pools.personalized, accepted_ids)
        trending = chain.apply(pools.trending, accepted_ids)
        logger.info(
            "After filtering: %d personalized, %d trending",
            len(personalized), len(trending),
        )

        # 5. Score
        scorer = Scorer(signals, profile, config, self.rng, now)
        ranked = scorer.rank(personalized + trending if paginated else personalized)

        # 6. Diversity
        diverse = [c.video for c in apply_channel_cooldown(ranked, config.cooldown)]
        backfilled = backfill_from_trending(
            diverse, trending, chain.seen_ids, config.min_feed_size
        )

        # 7. Mix
        if paginated:
            result = paginate(diverse, config.page_size)
        else:
            used = {v.id for v in diverse}
            result = mix_feed(
                [v for v in trending if v.id not in used],
                diverse,
                self.rng,
                config.long_form_target,
                config.trending_ratio,
                config.short_form_target,
            )
        result.backfilled = backfilled

        logger.info(
            "Ranking complete: %d videos, %d shorts%s",
            len(result.videos), len(result.shorts),
            " (backfilled)" if backfilled else "",
        )
        return result
