"""
Tests for fetch-query generation.
"""
import random

from feedrank.feed.config import FALLBACK_SEED_QUERIES, FALLBACK_SHORTS_QUERIES
from feedrank.feed.models import (
    CategoricalPreferences,
    Channel,
    Depth,
    DiscoveryMode,
    Freshness,
    Mood,
    UserSignals,
    Video,
    Visual,
)
from feedrank.feed.profile import UserProfile
from feedrank.feed.queries import (
    context_suffix,
    generate_queries,
    generate_shorts_queries,
)


def _make_video(video_id, title):
    return Video(id=video_id, title=title, channel_id="UC1", channel_name="Ch")


class TestContextSuffix:
    def test_no_preferences(self):
        assert context_suffix(CategoricalPreferences()) == ""

    def test_hints_in_axis_order(self):
        prefs = CategoricalPreferences(
            mood=Mood.RELAX, depth=Depth.DEEP, visual=Visual.AVATAR
        )
        assert context_suffix(prefs) == "relaxing 解説 vtuber"


class TestGenerateQueries:
    def test_genre_with_suffix_and_freshness(self):
        signals = UserSignals(
            preferred_genres=["lofi"],
            preferences=CategoricalPreferences(mood=Mood.RELAX),
            freshness=Freshness.NEW,
        )
        queries = generate_queries(signals, random.Random(0))
        assert queries[0] == "lofi relaxing 最新"

    def test_channel_has_no_freshness_suffix(self):
        signals = UserSignals(
            preferred_channels=["Lofi Girl"],
            preferences=CategoricalPreferences(mood=Mood.RELAX),
            freshness=Freshness.NEW,
        )
        queries = generate_queries(signals, random.Random(0))
        assert queries[0] == "Lofi Girl relaxing"

    def test_capped_and_distinct(self):
        signals = UserSignals(preferred_genres=["a1", "b2", "a1", "c3", "d4", "e5", "f6"])
        queries = generate_queries(signals, random.Random(0))
        assert queries == ["a1", "b2", "c3", "d4", "e5"]

    def test_precedence(self):
        signals = UserSignals(
            preferred_genres=["jazz"],
            preferred_channels=["Cafe Music"],
            watch_history=[_make_video("v1", "Minecraft survival ep1")],
        )
        queries = generate_queries(signals, random.Random(0))
        assert queries[:3] == ["jazz", "Cafe Music", "Minecraft"]

    def test_history_keywords_deduplicated(self):
        signals = UserSignals(watch_history=[
            _make_video("v1", "Minecraft survival"),
            _make_video("v2", "Minecraft hardcore"),
            _make_video("v3", "Piano cover"),
        ])
        queries = generate_queries(signals, random.Random(0))
        assert queries == ["Minecraft", "Piano"]

    def test_history_depth_is_five(self):
        history = [_make_video(f"v{i}", f"topic{i} video") for i in range(8)]
        queries = generate_queries(UserSignals(watch_history=history), random.Random(0))
        assert queries == ["topic0", "topic1", "topic2", "topic3", "topic4"]

    def test_random_subscription(self):
        signals = UserSignals(subscribed_channels=[Channel(id="UC1", name="Only Channel")])
        queries = generate_queries(signals, random.Random(0))
        assert queries == ["Only Channel"]

    def test_search_history_used(self):
        signals = UserSignals(search_history=["cat videos"])
        queries = generate_queries(signals, random.Random(0))
        assert queries == ["cat videos"]

    def test_fallback_when_nothing_else(self):
        queries = generate_queries(UserSignals(), random.Random(0))
        assert queries == FALLBACK_SEED_QUERIES

    def test_fallback_gets_context_suffix(self):
        signals = UserSignals(preferences=CategoricalPreferences(visual=Visual.AVATAR))
        queries = generate_queries(signals, random.Random(0))
        assert queries == [f"{seed} vtuber" for seed in FALLBACK_SEED_QUERIES]

    def test_discovery_mode_skips_history(self):
        signals = UserSignals(
            watch_history=[_make_video("v1", "Minecraft survival")],
            subscribed_channels=[Channel(id="UC1", name="Some Channel")],
            search_history=["cats"],
            discovery_mode=DiscoveryMode.DISCOVERY,
        )
        queries = generate_queries(signals, random.Random(0))
        assert queries == FALLBACK_SEED_QUERIES

    def test_discovery_mode_keeps_explicit_preferences(self):
        signals = UserSignals(
            preferred_genres=["jazz"],
            discovery_mode=DiscoveryMode.DISCOVERY,
        )
        queries = generate_queries(signals, random.Random(0))
        assert queries == ["jazz", *FALLBACK_SEED_QUERIES]


class TestGenerateShortsQueries:
    def test_top_terms_tagged(self):
        profile = UserProfile(weights={"cat": 5.0, "dog": 3.0, "bird": 1.0, "fish": 0.5, "ant": 0.1})
        assert generate_shorts_queries(profile) == [
            "cat #shorts", "dog #shorts", "bird #shorts", "fish #shorts"
        ]

    def test_fallback_when_empty(self):
        assert generate_shorts_queries(UserProfile()) == FALLBACK_SHORTS_QUERIES[:4]
