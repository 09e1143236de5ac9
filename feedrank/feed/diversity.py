"""
Channel diversity: per-channel cooldown and trending backfill.
"""
import logging
from typing import Iterable, Sequence

from .config import CHANNEL_COOLDOWN, MIN_FEED_SIZE
from .models import ScoredCandidate, Video

logger = logging.getLogger(__name__)


def apply_channel_cooldown(
    ranked: Iterable[ScoredCandidate], cooldown: int = CHANNEL_COOLDOWN
) -> list[ScoredCandidate]:
    """Walk a best-first list, admitting a video only if its channel is cooled down.

    Admitting a video sets its channel's cooldown and ticks every other
    channel down by one. Rejected videos are not reconsidered.
    """
    cooldowns: dict[str, int] = {}
    admitted = []
    for candidate in ranked:
        channel = candidate.video.channel_id
        if cooldowns.get(channel, 0) > 0:
            continue
        admitted.append(candidate)
        for other, remaining in cooldowns.items():
            if remaining > 0:
                cooldowns[other] = remaining - 1
        cooldowns[channel] = cooldown
    return admitted


def backfill_from_trending(
    admitted: list[Video],
    trending: Sequence[Video],
    excluded_ids: set[str],
    minimum: int = MIN_FEED_SIZE,
) -> bool:
    """Top ``admitted`` up to ``minimum`` from the trending pool, in place.

    Returns:
        True if any video was added.
    """
    if len(admitted) >= minimum:
        return False

    present = {v.id for v in admitted}
    added = 0
    for video in trending:
        if len(admitted) >= minimum:
            break
        if video.id in present or video.id in excluded_ids:
            continue
        admitted.append(video)
        present.add(video.id)
        added += 1

    if added:
        logger.info(
            "Backfilled %d trending videos (feed had %d, minimum %d)",
            added, len(admitted) - added, minimum,
        )
    return added > 0
