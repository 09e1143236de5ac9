"""
Build a UserSignals snapshot from the app's JSON backup file.

Backup layout (camelCase, as exported by the web app):
    {
      "subscriptions": [{"id", "name", "avatarUrl"}],
      "history": [Video],
      "shortsHistory": [Video],          # optional
      "searchHistory": ["..."],          # optional
      "hiddenVideoIds": ["..."],         # optional
      "negativeKeywords": {"word": 1},   # optional
      "preferences": {
        "genres", "channels", "durations", "freshness", "discoveryMode",
        "ngKeywords", "ngChannels", "prefMood", ..., "prefCommunity"
      }
    }
"""
import json
import logging
from pathlib import Path
from typing import Any, Union

from .feed.models import Channel, UserSignals, Video

logger = logging.getLogger(__name__)

# backup key -> CategoricalPreferences field
PREFERENCE_KEYS = {
    "prefMood": "mood",
    "prefDepth": "depth",
    "prefVocal": "vocal",
    "prefEra": "era",
    "prefRegion": "region",
    "prefLive": "live",
    "prefInfoEnt": "info_ent",
    "prefPacing": "pacing",
    "prefVisual": "visual",
    "prefCommunity": "community",
}


def _text(item: dict, key: str) -> str:
    """String field of a backup record; a missing or null value becomes ""."""
    value = item.get(key)
    return "" if value is None else str(value)


def _record(item: Any, kind: str) -> dict:
    if not isinstance(item, dict):
        raise ValueError(f"Invalid backup file format: {kind} entry is not an object")
    return item


def video_from_dict(item: dict) -> Video:
    """Convert an app Video object into a Video."""
    item = _record(item, "video")
    views = item.get("viewCount")
    return Video(
        id=_text(item, "id"),
        title=_text(item, "title"),
        channel_id=_text(item, "channelId"),
        channel_name=_text(item, "channelName"),
        duration=_text(item, "isoDuration"),
        duration_text=_text(item, "duration"),
        upload_text=_text(item, "uploadedAt"),
        published_at=_text(item, "publishedAt"),
        description=_text(item, "descriptionSnippet"),
        channel_avatar_url=item.get("channelAvatarUrl") or None,
        thumbnail_url=item.get("thumbnailUrl") or None,
        view_count=int(views) if isinstance(views, (int, float)) else None,
    )


def channel_from_dict(item: dict) -> Channel:
    item = _record(item, "subscription")
    return Channel(
        id=_text(item, "id"),
        name=_text(item, "name"),
        avatar_url=_text(item, "avatarUrl"),
    )


def signals_from_backup(data: dict[str, Any], page: int = 1) -> UserSignals:
    """Validate a parsed backup into UserSignals.

    Raises:
        ValueError: If the backup lacks subscriptions or history, or an
            entry in them is not an object.
        pydantic.ValidationError: If a preference value is not a known option.
    """
    if "subscriptions" not in data or "history" not in data:
        raise ValueError("Invalid backup file format: missing subscriptions/history")

    prefs = data.get("preferences") or {}
    categorical = {
        field: prefs[key] for key, field in PREFERENCE_KEYS.items() if prefs.get(key)
    }

    return UserSignals.model_validate({
        "watch_history": [video_from_dict(v) for v in data.get("history") or []],
        "shorts_history": [video_from_dict(v) for v in data.get("shortsHistory") or []],
        "search_history": list(data.get("searchHistory") or []),
        "subscribed_channels": [channel_from_dict(c) for c in data.get("subscriptions") or []],
        "preferred_genres": prefs.get("genres") or [],
        "preferred_channels": prefs.get("channels") or [],
        "preferred_durations": prefs.get("durations") or [],
        "ng_keywords": prefs.get("ngKeywords") or [],
        "ng_channels": prefs.get("ngChannels") or [],
        "seen_ids": set(data.get("hiddenVideoIds") or []),
        "negative_keywords": data.get("negativeKeywords") or {},
        "preferences": categorical,
        "freshness": prefs.get("freshness") or "balanced",
        "discovery_mode": prefs.get("discoveryMode") or "balanced",
        "page": page,
    })


def load_signals(path: Union[str, Path], page: int = 1) -> UserSignals:
    """Read a backup file from disk."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    signals = signals_from_backup(data, page=page)
    logger.info(
        "Loaded signals: %d history, %d subscriptions, %d genres",
        len(signals.watch_history),
        len(signals.subscribed_channels),
        len(signals.preferred_genres),
    )
    return signals
