"""
Tests for the concurrent candidate aggregator.
"""
import asyncio
import random
from unittest.mock import AsyncMock

import pytest

from feedrank.feed.aggregator import CandidateAggregator
from feedrank.feed.config import RankingConfig
from feedrank.feed.errors import RecommendationsUnavailableError
from feedrank.feed.models import Channel, DiscoveryMode, UserSignals, Video
from feedrank.sources.base import ContentSourceError, SearchResult, VideoDetails


def _make_video(video_id, channel_id="UC1"):
    return Video(id=video_id, title=f"title {video_id}", channel_id=channel_id,
                 channel_name="Ch")


def _make_source():
    source = AsyncMock()
    source.search.return_value = SearchResult(videos=[_make_video("s1")],
                                              shorts=[_make_video("s2")])
    source.get_channel_videos.return_value = [_make_video(f"c{i}") for i in range(8)]
    source.get_video_details.return_value = VideoDetails(
        video=_make_video("h1"), related_videos=[_make_video("r1")]
    )
    source.get_trending.return_value = [_make_video("t1"), _make_video("t2")]
    return source


def _aggregator(source, **config):
    return CandidateAggregator(source, RankingConfig(**config), random.Random(0))


class TestCollect:
    @pytest.mark.asyncio
    async def test_pools_split_by_origin(self):
        source = _make_source()
        pools = await _aggregator(source).collect(["q1"], UserSignals())

        assert [v.id for v in pools.personalized] == ["s1", "s2"]
        assert [v.id for v in pools.trending] == ["t1", "t2"]
        source.get_trending.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_trending_always_requested_in_discovery_mode(self):
        source = _make_source()
        signals = UserSignals(
            discovery_mode=DiscoveryMode.DISCOVERY,
            subscribed_channels=[Channel(id="UC1", name="A")],
        )
        await _aggregator(source).collect([], signals)

        source.get_trending.assert_awaited_once()
        source.get_channel_videos.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_subscription_fetches_capped(self):
        source = _make_source()
        signals = UserSignals(subscribed_channels=[
            Channel(id=f"UC{i}", name=f"Ch{i}") for i in range(6)
        ])
        pools = await _aggregator(source).collect([], signals)

        assert source.get_channel_videos.await_count == 3
        # 5 per channel
        assert len(pools.personalized) == 15

    @pytest.mark.asyncio
    async def test_related_walk_starts_with_latest(self):
        source = _make_source()
        signals = UserSignals(watch_history=[_make_video("h1"), _make_video("h2")])
        pools = await _aggregator(source).collect([], signals)

        first_call = source.get_video_details.await_args_list[0]
        assert first_call.args == ("h1",)
        assert "r1" in [v.id for v in pools.personalized]

    @pytest.mark.asyncio
    async def test_related_walk_disabled(self):
        source = _make_source()
        signals = UserSignals(watch_history=[_make_video("h1")])
        await _aggregator(source, follow_related=False).collect([], signals)
        source.get_video_details.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_shorts_queries_searched(self):
        source = _make_source()
        await _aggregator(source).collect(["q1"], UserSignals(), ["cat #shorts"])
        queries = [c.args[0] for c in source.search.await_args_list]
        assert queries == ["q1", "cat #shorts"]


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_single_failure_is_isolated(self):
        source = _make_source()

        async def search(query, page_token=None):
            if query == "broken":
                raise ContentSourceError("boom")
            return SearchResult(videos=[_make_video(f"ok-{query}")])

        source.search.side_effect = search
        pools = await _aggregator(source).collect(["broken", "fine"], UserSignals())

        assert [v.id for v in pools.personalized] == ["ok-fine"]
        assert sum(1 for o in pools.outcomes if o.failed) == 1

    @pytest.mark.asyncio
    async def test_trending_failure_is_isolated(self):
        source = _make_source()
        source.get_trending.side_effect = RuntimeError("down")
        pools = await _aggregator(source).collect(["q1"], UserSignals())
        assert pools.trending == []
        assert len(pools.personalized) == 2

    @pytest.mark.asyncio
    async def test_all_failures_raise_once(self):
        source = _make_source()
        source.search.side_effect = ContentSourceError("search down")
        source.get_channel_videos.side_effect = ContentSourceError("channels down")
        source.get_trending.side_effect = ContentSourceError("trending down")
        signals = UserSignals(subscribed_channels=[Channel(id="UC1", name="A")])

        with pytest.raises(RecommendationsUnavailableError) as exc_info:
            await _aggregator(source).collect(["q1", "q2"], signals)

        assert len(exc_info.value.causes) == 4
        assert isinstance(exc_info.value.__cause__, ContentSourceError)

    @pytest.mark.asyncio
    async def test_empty_success_is_not_failure(self):
        source = _make_source()
        source.search.return_value = SearchResult()
        source.get_trending.return_value = []
        pools = await _aggregator(source).collect(["q1"], UserSignals())
        assert pools.personalized == []
        assert pools.trending == []


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        source = _make_source()
        expected = 4  # three searches plus trending
        started = 0
        all_started = asyncio.Event()

        async def wait_for_everyone():
            nonlocal started
            started += 1
            if started == expected:
                all_started.set()
            await all_started.wait()

        async def search(query, page_token=None):
            await wait_for_everyone()
            return SearchResult(videos=[_make_video(query)])

        async def trending():
            await wait_for_everyone()
            return []

        source.search.side_effect = search
        source.get_trending.side_effect = trending

        # Sequential execution would never release the event.
        pools = await asyncio.wait_for(
            _aggregator(source).collect(["a1", "b2", "c3"], UserSignals()), timeout=2
        )
        assert len(pools.personalized) == 3

    @pytest.mark.asyncio
    async def test_merge_follows_scheduling_order(self):
        source = _make_source()
        delays = {"slow": 0.05, "fast": 0.0}

        async def search(query, page_token=None):
            await asyncio.sleep(delays[query])
            return SearchResult(videos=[_make_video(query)])

        source.search.side_effect = search
        pools = await _aggregator(source).collect(["slow", "fast"], UserSignals())
        assert [v.id for v in pools.personalized] == ["slow", "fast"]
