"""
Concurrent candidate fetch with per-source failure isolation.
"""
import asyncio
import logging
import random
from typing import Awaitable, Optional, Sequence

from ..sources.base import ContentSource
from .config import RELATED_HISTORY_DEPTH, RankingConfig
from .errors import RecommendationsUnavailableError
from .models import CandidatePools, DiscoveryMode, SourceOutcome, UserSignals, Video

logger = logging.getLogger(__name__)

TRENDING_LABEL = "trending"


async def _search_videos(source: ContentSource, query: str) -> list[Video]:
    result = await source.search(query)
    return [*result.videos, *result.shorts]


async def _related_videos(source: ContentSource, video_id: str) -> list[Video]:
    details = await source.get_video_details(video_id)
    return list(details.related_videos)


async def _channel_videos(source: ContentSource, channel_id: str, limit: int) -> list[Video]:
    videos = await source.get_channel_videos(channel_id)
    return list(videos)[:limit]


async def _trending_videos(source: ContentSource) -> list[Video]:
    return list(await source.get_trending())


async def _isolated(label: str, coro: Awaitable[list[Video]]) -> SourceOutcome:
    """Await one fetch; a failure becomes an empty outcome carrying the error."""
    try:
        videos = await coro
    except Exception as e:
        logger.warning("Source %s failed: %s", label, e)
        return SourceOutcome(label=label, videos=[], error=e)
    logger.debug("Source %s returned %d videos", label, len(videos))
    return SourceOutcome(label=label, videos=videos)


class CandidateAggregator:
    """Fans out fetches against a ContentSource and pools the results."""

    def __init__(
        self,
        source: ContentSource,
        config: Optional[RankingConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.source = source
        self.config = config or RankingConfig()
        self.rng = rng or random.Random(self.config.seed)

    def _related_targets(self, signals: UserSignals) -> list[str]:
        """Most recent watched video, plus one random pick among the recent few."""
        history = [v for v in signals.watch_history if v.id]
        if not history:
            return []
        depth = min(len(history), RELATED_HISTORY_DEPTH)
        indices = [0]
        if depth > 1:
            pick = self.rng.randrange(depth)
            if pick != 0:
                indices.append(pick)
        return [history[i].id for i in indices]

    def _personalized_fetches(
        self,
        queries: Sequence[str],
        signals: UserSignals,
    ) -> list[tuple[str, Awaitable[list[Video]]]]:
        fetches = [
            (f"search:{query}", _search_videos(self.source, query)) for query in queries
        ]

        if self.config.follow_related:
            for video_id in self._related_targets(signals):
                fetches.append(
                    (f"related:{video_id}", _related_videos(self.source, video_id))
                )

        if signals.discovery_mode != DiscoveryMode.DISCOVERY and signals.subscribed_channels:
            count = min(self.config.max_subscription_fetches, len(signals.subscribed_channels))
            for channel in self.rng.sample(signals.subscribed_channels, count):
                fetches.append((
                    f"channel:{channel.id}",
                    _channel_videos(self.source, channel.id, self.config.channel_video_limit),
                ))
        return fetches

    async def collect(
        self,
        queries: Sequence[str],
        signals: UserSignals,
        shorts_queries: Sequence[str] = (),
    ) -> CandidatePools:
        """Run every fetch concurrently and wait for all of them.

        Args:
            queries: Search queries for long-form candidates.
            signals: User snapshot (history, subscriptions, discovery mode).
            shorts_queries: Extra search queries for short-form candidates.

        Returns:
            CandidatePools with videos merged in scheduling order.

        Raises:
            RecommendationsUnavailableError: If every fetch failed.
        """
        fetches = self._personalized_fetches([*queries, *shorts_queries], signals)
        fetches.append((TRENDING_LABEL, _trending_videos(self.source)))

        outcomes = await asyncio.gather(
            *(_isolated(label, coro) for label, coro in fetches)
        )

        failures = [o.error for o in outcomes if o.failed]
        if len(failures) == len(outcomes):
            logger.error("All %d candidate sources failed", len(outcomes))
            raise RecommendationsUnavailableError(failures) from failures[0]
        if failures:
            logger.info("%d of %d candidate sources failed", len(failures), len(outcomes))

        personalized: list[Video] = []
        trending: list[Video] = []
        for outcome in outcomes:
            target = trending if outcome.label == TRENDING_LABEL else personalized
            target.extend(outcome.videos)

        logger.info(
            "Collected %d personalized and %d trending candidates from %d sources",
            len(personalized),
            len(trending),
            len(outcomes),
        )
        return CandidatePools(
            personalized=personalized, trending=trending, outcomes=list(outcomes)
        )
