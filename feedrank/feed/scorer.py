"""
Candidate scoring against the user's signals and profile.

Score components (additive):
  NG keyword                       -10000, stops scoring
  preferred duration bucket        +50 / -20 on mismatch
  preferred channel (substring)    +30
  subscribed channel               +15 flat, +50 vector
  preferred genre in text          +10 each
  categorical keyword group        +8 per matching axis
  recent upload, freshness=new     +10
  profile similarity (vector)      100 * dot / (|profile| * sqrt(n_keywords))
  negative keywords (vector)       -20 * penalty
  exploration noise                uniform(0, noise_scale)
"""
import logging
import math
import random
from datetime import datetime
from typing import Iterable, Optional

from . import config as cfg
from .config import RankingConfig, ScoringMode
from .duration import duration_bucket, is_recent_upload, video_seconds
from .filters import negative_penalty, ng_keyword_hit
from .keywords import normalized_keywords
from .models import (
    Community,
    Depth,
    Era,
    Freshness,
    LiveStyle,
    Mood,
    ScoredCandidate,
    UserSignals,
    Video,
    Vocal,
)
from .profile import UserProfile

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS = {
    "mood": {
        Mood.RELAX: ["relax", "chill", "lofi", "癒し", "睡眠", "作業用", "まったり"],
        Mood.ENERGETIC: ["upbeat", "hype", "edm", "workout", "テンション", "盛り上が", "神回"],
    },
    "depth": {
        Depth.DEEP: ["解説", "考察", "documentary", "ドキュメンタリー", "徹底", "explained"],
        Depth.CASUAL: ["まとめ", "切り抜き", "funny", "おもしろ", "面白", "ネタ"],
    },
    "vocal": {
        Vocal.INSTRUMENTAL: ["instrumental", "bgm", "piano", "ピアノ", "inst", "ambient"],
        Vocal.VOCAL: ["歌ってみた", "cover", "vocal", "歌枠", "雑談", "トーク"],
    },
    "era": {
        Era.RETRO: ["retro", "レトロ", "昭和", "平成", "懐かし", "80s", "90s"],
        Era.MODERN: ["最新", "new", "latest", "2025", "2026"],
    },
    "live": {
        LiveStyle.LIVE: ["live", "ライブ", "生配信", "配信", "アーカイブ"],
        LiveStyle.EDITED: ["切り抜き", "編集", "highlights", "ダイジェスト"],
    },
    "community": {
        Community.SOLO: ["solo", "ソロ", "一人", "ひとり"],
        Community.COLLAB: ["コラボ", "collab", "feat", "ft.", "大会", "凸待ち"],
    },
}


class Scorer:
    """Scores candidates in FLAT or VECTOR mode.

    Args:
        signals: User snapshot.
        profile: Term vector built from the same signals.
        config: Mode, noise scale and floors.
        rng: Source of exploration noise.
        now: Reference time for timestamp-based freshness.
    """

    def __init__(
        self,
        signals: UserSignals,
        profile: UserProfile,
        config: Optional[RankingConfig] = None,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
    ):
        self.signals = signals
        self.profile = profile
        self.config = config or RankingConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.now = now
        self.subscribed_ids = {c.id for c in signals.subscribed_channels}
        self.subscribed_names = {c.name.lower() for c in signals.subscribed_channels if c.name}
        self.preferred_durations = set(signals.preferred_durations)

    @property
    def vector_mode(self) -> bool:
        return self.config.scoring_mode == ScoringMode.VECTOR

    def _category_matches(self, text: str) -> list[str]:
        matched = []
        for axis, groups in CATEGORY_KEYWORDS.items():
            wanted = getattr(self.profile.preferences, axis)
            words = groups.get(wanted)
            if words and any(w.lower() in text for w in words):
                matched.append(axis)
        return matched

    def similarity(self, video: Video) -> float:
        """Scaled cosine-style match between the video keywords and the profile."""
        keywords = normalized_keywords(f"{video.title} {video.channel_name}")
        if self.profile.magnitude <= 0 or not keywords:
            return 0.0
        dot = sum(self.profile.weight_of(k) for k in keywords)
        return cfg.SIMILARITY_SCALE * dot / (self.profile.magnitude * math.sqrt(len(keywords)))

    def score(self, video: Video) -> ScoredCandidate:
        if ng_keyword_hit(video, self.signals.ng_keywords, self.config.ng_matches_description):
            return ScoredCandidate(video, cfg.NG_KEYWORD_SCORE, ["ng_keyword"])

        score = 0.0
        reasons = []

        if self.preferred_durations:
            bucket = duration_bucket(video_seconds(video))
            if bucket is not None:
                if bucket in self.preferred_durations:
                    score += cfg.DURATION_MATCH_BONUS
                    reasons.append(f"duration:{bucket.value}")
                else:
                    score += cfg.DURATION_MISMATCH_PENALTY
                    reasons.append("duration_mismatch")

        channel_name = video.channel_name.lower()
        if any(p.strip() and p.strip().lower() in channel_name
               for p in self.signals.preferred_channels):
            score += cfg.PREFERRED_CHANNEL_BONUS
            reasons.append("preferred_channel")

        if video.channel_id in self.subscribed_ids or channel_name in self.subscribed_names:
            score += self.config.subscribed_bonus
            reasons.append("subscribed")

        text = f"{video.title} {video.description} {video.channel_name}".lower()
        for genre in self.signals.preferred_genres:
            if genre.strip() and genre.strip().lower() in text:
                score += cfg.GENRE_BONUS
                reasons.append(f"genre:{genre}")

        for axis in self._category_matches(text):
            score += cfg.CATEGORY_BONUS
            reasons.append(f"category:{axis}")

        if self.signals.freshness == Freshness.NEW and is_recent_upload(video, self.now):
            score += cfg.FRESHNESS_BONUS
            reasons.append("fresh")

        if self.vector_mode:
            sim = self.similarity(video)
            if sim > 0:
                score += sim
                reasons.append(f"similarity:{sim:.1f}")
            penalty = negative_penalty(video, self.signals.negative_keywords)
            if penalty > 0:
                score -= cfg.NEGATIVE_SIGNAL_WEIGHT * penalty
                reasons.append("negative_keywords")

        if self.config.noise_scale > 0:
            score += self.rng.uniform(0, self.config.noise_scale)

        return ScoredCandidate(video, score, reasons)

    def rank(self, videos: Iterable[Video]) -> list[ScoredCandidate]:
        """Score, drop anything below the floor, and sort best first."""
        scored = [self.score(v) for v in videos]
        kept = [c for c in scored if c.score >= self.config.score_floor]
        if len(kept) < len(scored):
            logger.debug("Dropped %d candidates below floor %.0f",
                         len(scored) - len(kept), self.config.score_floor)
        kept.sort(key=lambda c: c.score, reverse=True)
        return kept
