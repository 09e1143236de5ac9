"""
User profile: a weighted term vector built from history and subscriptions.

Weights per source (index 0 = most recent, decay = exp(-index / 10)):
  subscribed channel names   5.0
  shorts history (30 items)  title 3.0 * decay, channel 4.0 * decay
  watch history (20 items)   title 1.5 * decay, channel 2.0 * decay
"""
import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field

import numpy as np

from .keywords import normalized_keywords
from .models import CategoricalPreferences, UserSignals

logger = logging.getLogger(__name__)

SUBSCRIPTION_WEIGHT = 5.0
SHORTS_HISTORY_LIMIT = 30
SHORTS_TITLE_WEIGHT = 3.0
SHORTS_CHANNEL_WEIGHT = 4.0
WATCH_HISTORY_LIMIT = 20
WATCH_TITLE_WEIGHT = 1.5
WATCH_CHANNEL_WEIGHT = 2.0
DECAY_SCALE = 10.0


def recency_decay(index: int) -> float:
    return math.exp(-index / DECAY_SCALE)


@dataclass
class UserProfile:
    """Term weights plus the categorical preferences, which are not vectorized."""
    weights: dict[str, float] = field(default_factory=dict)
    magnitude: float = 0.0
    preferences: CategoricalPreferences = field(default_factory=CategoricalPreferences)

    def weight_of(self, term: str) -> float:
        return self.weights.get(term, 0.0)

    def top_terms(self, n: int) -> list[str]:
        ranked = sorted(self.weights.items(), key=lambda kv: (-kv[1], kv[0]))
        return [term for term, _ in ranked[:n]]


def _accumulate(weights: dict[str, float], text: str, weight: float) -> None:
    if weight <= 0:
        return
    for token in normalized_keywords(text):
        weights[token] += weight


def build_profile(signals: UserSignals) -> UserProfile:
    """Build the term vector for one invocation.

    Args:
        signals: User snapshot; histories are most-recent-first.

    Returns:
        UserProfile with its magnitude precomputed.
    """
    weights: dict[str, float] = defaultdict(float)

    for channel in signals.subscribed_channels:
        _accumulate(weights, channel.name, SUBSCRIPTION_WEIGHT)

    for i, video in enumerate(signals.shorts_history[:SHORTS_HISTORY_LIMIT]):
        decay = recency_decay(i)
        _accumulate(weights, video.title, SHORTS_TITLE_WEIGHT * decay)
        _accumulate(weights, video.channel_name, SHORTS_CHANNEL_WEIGHT * decay)

    for i, video in enumerate(signals.watch_history[:WATCH_HISTORY_LIMIT]):
        decay = recency_decay(i)
        _accumulate(weights, video.title, WATCH_TITLE_WEIGHT * decay)
        _accumulate(weights, video.channel_name, WATCH_CHANNEL_WEIGHT * decay)

    magnitude = float(np.linalg.norm(list(weights.values()))) if weights else 0.0
    logger.debug("Built profile with %d terms (magnitude %.2f)", len(weights), magnitude)

    return UserProfile(
        weights=dict(weights),
        magnitude=magnitude,
        preferences=signals.preferences,
    )
