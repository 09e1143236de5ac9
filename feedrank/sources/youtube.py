"""
YouTube Data API v3 content source.

Search and listing endpoints return bare IDs, so every call is followed
by a videos.list request (1 quota unit per 50 videos) for durations and
stats. Set YOUTUBE_API_KEY in the environment or pass api_key.
"""
import logging
import os
from typing import Optional

import httpx

from ..feed.duration import is_short_form, parse_duration
from ..feed.keywords import extract_keywords
from ..feed.models import Video
from .base import ContentSourceError, SearchResult, VideoDetails

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"
RELATED_QUERY_TERMS = 3


def _format_clock(seconds: int) -> str:
    """Format seconds as H:MM:SS or M:SS."""
    h, remainder = divmod(seconds, 3600)
    m, s = divmod(remainder, 60)
    if h:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def _video_from_item(item: dict) -> Video:
    """Build a Video from a videos.list item."""
    snippet = item.get("snippet", {})
    stats = item.get("statistics", {})
    content = item.get("contentDetails", {})
    thumbnails = snippet.get("thumbnails", {})
    thumb = (
        thumbnails.get("high", {}).get("url")
        or thumbnails.get("medium", {}).get("url")
        or thumbnails.get("default", {}).get("url")
    )
    iso = content.get("duration", "")
    seconds = parse_duration(iso)
    view_count = stats.get("viewCount")
    return Video(
        id=item["id"],
        title=snippet.get("title", ""),
        channel_id=snippet.get("channelId", ""),
        channel_name=snippet.get("channelTitle", ""),
        duration=iso,
        duration_text=_format_clock(seconds) if seconds else "",
        published_at=snippet.get("publishedAt", ""),
        description=snippet.get("description", ""),
        thumbnail_url=thumb,
        view_count=int(view_count) if view_count is not None else None,
    )


class YouTubeDataSource:
    """Async ContentSource backed by the YouTube Data API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        region_code: str = "JP",
        max_results: int = 25,
        timeout: float = 30,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or os.environ.get("YOUTUBE_API_KEY", "")
        if not self.api_key:
            logger.warning("YOUTUBE_API_KEY is not set; requests will be rejected")
        self.region_code = region_code
        self.max_results = min(max_results, 50)
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def _get(self, endpoint: str, params: dict) -> dict:
        """GET an API endpoint, translating failures into ContentSourceError."""
        try:
            resp = await self._client.get(
                f"{API_BASE}/{endpoint}",
                params={**params, "key": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 403:
                logger.error("YouTube API quota exceeded")
            else:
                logger.error("YouTube API error on %s: %s", endpoint, e)
            raise ContentSourceError(f"{endpoint} failed: {e}") from e
        except httpx.HTTPError as e:
            raise ContentSourceError(f"{endpoint} request failed: {e}") from e

    async def _videos_by_ids(self, video_ids: list[str]) -> list[Video]:
        if not video_ids:
            return []
        data = await self._get(
            "videos",
            {
                "part": "snippet,statistics,contentDetails",
                "id": ",".join(video_ids[:50]),
            },
        )
        return [_video_from_item(item) for item in data.get("items", [])]

    async def _search_ids(self, **params) -> list[str]:
        data = await self._get(
            "search",
            {
                "part": "snippet",
                "type": "video",
                "maxResults": self.max_results,
                **params,
            },
        )
        return [
            item["id"]["videoId"]
            for item in data.get("items", [])
            if item.get("id", {}).get("videoId")
        ]

    async def search(self, query: str, page_token: Optional[str] = None) -> SearchResult:
        params = {"q": query, "order": "relevance", "regionCode": self.region_code}
        if page_token:
            params["pageToken"] = page_token
        videos = await self._videos_by_ids(await self._search_ids(**params))

        result = SearchResult()
        for v in videos:
            (result.shorts if is_short_form(v) else result.videos).append(v)
        logger.info(
            "Search '%s': %d videos, %d shorts", query, len(result.videos), len(result.shorts)
        )
        return result

    async def get_channel_videos(self, channel_id: str) -> list[Video]:
        ids = await self._search_ids(channelId=channel_id, order="date")
        return await self._videos_by_ids(ids)

    async def get_video_details(self, video_id: str) -> VideoDetails:
        videos = await self._videos_by_ids([video_id])
        if not videos:
            return VideoDetails(video=None)
        video = videos[0]

        # The API no longer offers relatedToVideoId; search by the title's leading terms.
        terms = extract_keywords(video.title)[:RELATED_QUERY_TERMS]
        if not terms:
            return VideoDetails(video=video)
        ids = await self._search_ids(q=" ".join(terms), order="relevance",
                                     regionCode=self.region_code)
        related = await self._videos_by_ids([i for i in ids if i != video_id])
        return VideoDetails(video=video, related_videos=related)

    async def get_trending(self) -> list[Video]:
        data = await self._get(
            "videos",
            {
                "part": "snippet,statistics,contentDetails",
                "chart": "mostPopular",
                "regionCode": self.region_code,
                "maxResults": 50,
            },
        )
        videos = [_video_from_item(item) for item in data.get("items", [])]
        logger.info("Fetched %d trending videos (%s)", len(videos), self.region_code)
        return videos
