"""
Duration parsing, short-form detection and upload recency.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from .models import DurationBucket, Video

SHORT_FORM_MAX_SECONDS = 60
SHORT_BUCKET_MAX = 240      # (0, 240) is short
MEDIUM_BUCKET_MAX = 1200    # [240, 1200] is medium
SHORT_FORM_MARKERS = ("#shorts", "#short")
RECENT_UPLOAD_WINDOW = timedelta(days=7)

_ISO_PATTERN = re.compile(
    r"P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$"
)
_RECENT_TEXT_PATTERN = re.compile(
    r"\d+\s*(?:分|時間|日)前"
    r"|\b\d+\s*(?:second|minute|min|hour|hr|day)s?\s+ago",
    re.IGNORECASE,
)


def _parse_iso(duration_str: Optional[str]) -> int:
    """Parse ISO 8601 duration (P1DT2H3M4S, PT1H2M3S, PT1.5S) to whole seconds."""
    match = _ISO_PATTERN.match((duration_str or "").strip())
    if not match:
        return 0
    days = int(match.group(1) or 0)
    hours = int(match.group(2) or 0)
    minutes = int(match.group(3) or 0)
    seconds = round(float(match.group(4) or 0))
    return days * 86400 + hours * 3600 + minutes * 60 + seconds


def _parse_clock(text: Optional[str]) -> int:
    """Parse H:MM:SS, MM:SS or plain seconds."""
    parts = (text or "").strip().split(":")
    # isdecimal, not isdigit: "²" is a digit that int() rejects
    if not parts or not all(p.strip().isdecimal() for p in parts) or len(parts) > 3:
        return 0
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


def parse_duration(iso_duration: Optional[str], text: Optional[str] = "") -> int:
    """Duration in seconds from the ISO token, else the human text; 0 if neither parses."""
    seconds = _parse_iso(iso_duration)
    if seconds > 0:
        return seconds
    return _parse_clock(text)


def video_seconds(video: Video) -> int:
    return parse_duration(video.duration, video.duration_text)


def is_short_form(video: Video) -> bool:
    """Short-form: at most a minute long, or tagged as a short in the title."""
    seconds = video_seconds(video)
    if 0 < seconds <= SHORT_FORM_MAX_SECONDS:
        return True
    title = video.title.lower()
    return any(marker in title for marker in SHORT_FORM_MARKERS)


def duration_bucket(seconds: int) -> Optional[DurationBucket]:
    if seconds <= 0:
        return None
    if seconds < SHORT_BUCKET_MAX:
        return DurationBucket.SHORT
    if seconds <= MEDIUM_BUCKET_MAX:
        return DurationBucket.MEDIUM
    return DurationBucket.LONG


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_recent_upload(video: Video, now: Optional[datetime] = None) -> bool:
    """Whether the upload looks recent (minutes/hours/days ago).

    The human text wins; the timestamp is consulted only when the text
    carries no marker. Anything unparseable counts as not recent.
    """
    if video.upload_text and _RECENT_TEXT_PATTERN.search(video.upload_text):
        return True
    if not video.published_at:
        return False
    published = _parse_timestamp(video.published_at)
    if published is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return timedelta(0) <= now - published <= RECENT_UPLOAD_WINDOW
