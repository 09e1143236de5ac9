"""
Tests for the candidate filter chain.
"""
import pytest

from feedrank.feed.config import RankingConfig, ScoringMode
from feedrank.feed.filters import (
    BRAND_CHANNEL_ALLOWLIST,
    FilterChain,
    contains_japanese,
    negative_penalty,
)
from feedrank.feed.models import Channel, UserSignals, Video


def _make_video(video_id="v1", title="ゲーム実況 part1", channel_id="UC1",
                channel_name="TestChannel", description=""):
    return Video(
        id=video_id,
        title=title,
        channel_id=channel_id,
        channel_name=channel_name,
        description=description,
    )


class TestRejectionReason:
    def test_passes(self):
        chain = FilterChain(UserSignals())
        assert chain.rejection_reason(_make_video()) is None

    def test_seen_id(self):
        chain = FilterChain(UserSignals(seen_ids={"v1"}))
        assert chain.rejection_reason(_make_video("v1")) == "seen"

    def test_watch_history_counts_as_seen(self):
        chain = FilterChain(UserSignals(watch_history=[_make_video("v1")]))
        assert chain.rejection_reason(_make_video("v1")) == "seen"

    def test_shorts_history_counts_as_seen(self):
        chain = FilterChain(UserSignals(shorts_history=[_make_video("s1")]))
        assert chain.rejection_reason(_make_video("s1")) == "seen"

    def test_ng_keyword_in_title_case_insensitive(self):
        chain = FilterChain(UserSignals(ng_keywords=["SPOILER"]))
        assert chain.rejection_reason(_make_video(title="Big spoiler ahead")) == "ng_keyword"

    def test_ng_keyword_in_channel_name(self):
        chain = FilterChain(UserSignals(ng_keywords=["drama"]))
        video = _make_video(channel_name="DramaAlert")
        assert chain.rejection_reason(video) == "ng_keyword"

    def test_ng_keyword_in_description_vector_mode(self):
        signals = UserSignals(ng_keywords=["gacha"])
        video = _make_video(description="今日はgachaを回します")
        vector = FilterChain(signals, RankingConfig(scoring_mode=ScoringMode.VECTOR))
        flat = FilterChain(signals, RankingConfig(scoring_mode=ScoringMode.FLAT))
        assert vector.rejection_reason(video) == "ng_keyword"
        assert flat.rejection_reason(video) is None

    def test_blank_ng_keyword_ignored(self):
        chain = FilterChain(UserSignals(ng_keywords=["  "]))
        assert chain.rejection_reason(_make_video()) is None

    def test_ng_channel(self):
        chain = FilterChain(UserSignals(ng_channels=["UC_bad"]))
        assert chain.rejection_reason(_make_video(channel_id="UC_bad")) == "ng_channel"

    def test_negative_penalty_over_threshold(self):
        chain = FilterChain(UserSignals(negative_keywords={"drama": 3}))
        assert chain.rejection_reason(_make_video(title="Drama recap")) == "negative_penalty"

    def test_negative_penalty_at_threshold_passes(self):
        chain = FilterChain(UserSignals(negative_keywords={"drama": 2}))
        assert chain.rejection_reason(_make_video(title="Drama recap")) is None

    def test_noise_keyword(self):
        chain = FilterChain(UserSignals())
        assert chain.rejection_reason(_make_video(title="【速報】大ニュース")) == "noise"
        assert chain.rejection_reason(_make_video(channel_name="NHK")) == "noise"

    def test_brand_keyword_blocked_for_other_channels(self):
        chain = FilterChain(UserSignals())
        assert chain.rejection_reason(_make_video(title="Xerox review")) == "noise"

    def test_brand_keyword_allowed_for_own_channel(self):
        chain = FilterChain(UserSignals())
        own = next(iter(BRAND_CHANNEL_ALLOWLIST))
        assert chain.rejection_reason(_make_video(title="Xerox update", channel_id=own)) is None

    def test_order_seen_before_ng(self):
        chain = FilterChain(UserSignals(seen_ids={"v1"}, ng_keywords=["part1"]))
        assert chain.rejection_reason(_make_video("v1")) == "seen"


class TestJapaneseRule:
    def test_off_by_default(self):
        chain = FilterChain(UserSignals())
        assert chain.rejection_reason(_make_video(title="English only video")) is None

    def test_rejects_when_enabled(self):
        chain = FilterChain(UserSignals(), RankingConfig(require_japanese=True))
        assert chain.rejection_reason(_make_video(title="English only video")) == "non_japanese"

    def test_japanese_description_passes(self):
        chain = FilterChain(UserSignals(), RankingConfig(require_japanese=True))
        video = _make_video(title="English title", description="日本語の説明")
        assert chain.rejection_reason(video) is None

    def test_subscribed_exempt(self):
        signals = UserSignals(subscribed_channels=[Channel(id="UC_en", name="English Ch")])
        chain = FilterChain(signals, RankingConfig(require_japanese=True))
        video = _make_video(title="English only video", channel_id="UC_en")
        assert chain.rejection_reason(video) is None

    def test_contains_japanese(self):
        assert contains_japanese("ひらがな")
        assert contains_japanese("カタカナ")
        assert contains_japanese("漢字")
        assert not contains_japanese("latin only")


class TestNegativePenalty:
    def test_sums_over_keywords(self):
        video = _make_video(title="Drama drama gossip")
        assert negative_penalty(video, {"drama": 1, "Gossip": 0.5}) == pytest.approx(2.5)

    def test_empty_table(self):
        assert negative_penalty(_make_video(), {}) == 0.0


class TestApply:
    def test_dedup_first_wins(self):
        chain = FilterChain(UserSignals())
        first = _make_video("v1", title="ゲーム first")
        second = _make_video("v1", title="ゲーム second")
        assert chain.apply([first, second]) == [first]

    def test_shared_seen_set(self):
        chain = FilterChain(UserSignals())
        accepted: set[str] = set()
        a = chain.apply([_make_video("v1"), _make_video("v2")], accepted)
        b = chain.apply([_make_video("v2"), _make_video("v3")], accepted)
        assert [v.id for v in a] == ["v1", "v2"]
        assert [v.id for v in b] == ["v3"]

    def test_rejected_not_marked_seen(self):
        chain = FilterChain(UserSignals(ng_keywords=["bad"]))
        accepted: set[str] = set()
        chain.apply([_make_video("v1", title="bad video")], accepted)
        assert accepted == set()

    def test_missing_id_dropped(self):
        chain = FilterChain(UserSignals())
        assert chain.apply([_make_video("")]) == []
