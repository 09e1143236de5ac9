"""
Candidate filter chain and de-duplication.

Rules run in order and stop at the first rejection:
  seen -> ng_keyword -> ng_channel -> negative_penalty -> noise -> non_japanese
"""
import logging
import re
from typing import Iterable, Optional

from .config import NEGATIVE_PENALTY_THRESHOLD, RankingConfig
from .keywords import normalized_keywords
from .models import UserSignals, Video

logger = logging.getLogger(__name__)

# News, politics and incident coverage kept out of the home feed.
NOISE_BLOCK_KEYWORDS = [
    "ニュース", "News", "報道", "政治", "首相", "大統領", "内閣",
    "事件", "事故", "逮捕", "裁判", "速報", "会見", "訃報", "地震",
    "津波", "災害", "炎上", "物申す", "批判", "晒し", "閲覧注意",
    "衆院選", "参院選", "選挙", "与党", "野党", "政策",
    "NHK", "日テレ", "FNN", "TBS", "ANN", "テレ東",
]

# Brand terms only the app's own channel may use.
BRAND_KEYWORDS = ["xerox"]
BRAND_CHANNEL_ALLOWLIST = {"UCCMV3NfZk_NB-MmUvHj6aFw"}

# Latin acronyms match whole words only ("ANN" must not hit "channel").
_NOISE_PATTERN = re.compile(
    "|".join(
        rf"\b{re.escape(w)}\b" if w.isascii() else re.escape(w)
        for w in NOISE_BLOCK_KEYWORDS
    ),
    re.IGNORECASE,
)

_JAPANESE_PATTERN = re.compile(r"[一-龠]+|[ぁ-ゔ]+|[ァ-ヴー]+")


def contains_japanese(text: str) -> bool:
    return bool(_JAPANESE_PATTERN.search(text or ""))


def negative_penalty(video: Video, negative_keywords: dict[str, float]) -> float:
    """Sum of negative-keyword weights over the video's title and channel keywords."""
    if not negative_keywords:
        return 0.0
    table = {k.lower(): w for k, w in negative_keywords.items()}
    keywords = normalized_keywords(f"{video.title} {video.channel_name}")
    return sum(table.get(k, 0.0) for k in keywords)


def ng_keyword_hit(video: Video, ng_keywords: Iterable[str], include_description: bool) -> bool:
    text = f"{video.title} {video.channel_name}"
    if include_description:
        text = f"{text} {video.description}"
    text = text.lower()
    return any(ng.strip() and ng.strip().lower() in text for ng in ng_keywords)


class FilterChain:
    """Rejects candidates the user should not see."""

    def __init__(self, signals: UserSignals, config: Optional[RankingConfig] = None):
        self.signals = signals
        self.config = config or RankingConfig()
        self.seen_ids = set(signals.seen_ids) | signals.history_ids()
        self.ng_channels = set(signals.ng_channels)
        self.subscribed_ids = {c.id for c in signals.subscribed_channels}

    def rejection_reason(self, video: Video) -> Optional[str]:
        """Return why a video is rejected, or None if it passes."""
        if video.id in self.seen_ids:
            return "seen"

        if ng_keyword_hit(video, self.signals.ng_keywords, self.config.ng_matches_description):
            return "ng_keyword"

        if video.channel_id in self.ng_channels:
            return "ng_channel"

        if negative_penalty(video, self.signals.negative_keywords) > NEGATIVE_PENALTY_THRESHOLD:
            return "negative_penalty"

        text = f"{video.title} {video.channel_name}"
        if _NOISE_PATTERN.search(text):
            return "noise"
        text = text.lower()
        if (
            any(word in text for word in BRAND_KEYWORDS)
            and video.channel_id not in BRAND_CHANNEL_ALLOWLIST
        ):
            return "noise"

        if (
            self.config.require_japanese
            and video.channel_id not in self.subscribed_ids
            and not contains_japanese(f"{video.title} {video.channel_name}")
            and not contains_japanese(video.description)
        ):
            return "non_japanese"

        return None

    def apply(self, videos: Iterable[Video], seen: Optional[set[str]] = None) -> list[Video]:
        """Filter and de-duplicate by id; the first occurrence wins.

        Args:
            videos: Candidates in priority order.
            seen: Ids already accepted elsewhere. Updated in place so that
                several pools can be filtered against each other.
        """
        accepted_ids = seen if seen is not None else set()
        accepted = []
        rejected: dict[str, int] = {}
        for video in videos:
            if not video.id or video.id in accepted_ids:
                continue
            reason = self.rejection_reason(video)
            if reason:
                rejected[reason] = rejected.get(reason, 0) + 1
                logger.debug("Rejected %s (%s): %s", video.id, reason, video.title[:40])
                continue
            accepted_ids.add(video.id)
            accepted.append(video)

        if rejected:
            logger.debug("Filter rejections: %s", rejected)
        return accepted
