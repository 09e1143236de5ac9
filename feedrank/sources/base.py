"""
Content source interface consumed by the ranking engine.
"""
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..feed.models import Video


class ContentSourceError(Exception):
    """A content source call failed (as opposed to returning nothing)."""


@dataclass
class SearchResult:
    videos: list[Video] = field(default_factory=list)
    shorts: list[Video] = field(default_factory=list)


@dataclass
class VideoDetails:
    video: Optional[Video]
    related_videos: list[Video] = field(default_factory=list)


class ContentSource(Protocol):
    """Remote video catalogue. Every call may run concurrently with the others."""

    async def search(self, query: str, page_token: Optional[str] = None) -> SearchResult:
        ...

    async def get_channel_videos(self, channel_id: str) -> list[Video]:
        ...

    async def get_video_details(self, video_id: str) -> VideoDetails:
        ...

    async def get_trending(self) -> list[Video]:
        ...
