"""
Data models for the feed ranking engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Video:
    """A video item as returned by a content source."""
    id: str
    title: str
    channel_id: str
    channel_name: str
    duration: str = ""         # ISO 8601, e.g. PT4M13S
    duration_text: str = ""    # H:MM:SS / MM:SS / seconds
    upload_text: str = ""      # e.g. "3 days ago", "3日前"
    published_at: str = ""     # ISO timestamp
    description: str = ""
    channel_avatar_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    view_count: Optional[int] = None


@dataclass(frozen=True)
class Channel:
    """A channel: a subscription or a blocked entity."""
    id: str
    name: str
    avatar_url: str = ""


# ── Preference axes ───────────────────────────────────────────────────


class DurationBucket(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class Freshness(str, Enum):
    NEW = "new"
    POPULAR = "popular"
    BALANCED = "balanced"


class DiscoveryMode(str, Enum):
    SUBSCRIBED = "subscribed"
    DISCOVERY = "discovery"
    BALANCED = "balanced"


class Mood(str, Enum):
    RELAX = "relax"
    ENERGETIC = "energetic"
    ANY = "any"


class Depth(str, Enum):
    CASUAL = "casual"
    DEEP = "deep"
    ANY = "any"


class Vocal(str, Enum):
    INSTRUMENTAL = "instrumental"
    VOCAL = "vocal"
    ANY = "any"


class Era(str, Enum):
    RETRO = "retro"
    MODERN = "modern"
    ANY = "any"


class Region(str, Enum):
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"
    ANY = "any"


class LiveStyle(str, Enum):
    LIVE = "live"
    EDITED = "edited"
    ANY = "any"


class InfoEnt(str, Enum):
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"
    ANY = "any"


class Pacing(str, Enum):
    CALM = "calm"
    FAST = "fast"
    ANY = "any"


class Visual(str, Enum):
    REAL = "real"
    AVATAR = "avatar"
    ANY = "any"


class Community(str, Enum):
    SOLO = "solo"
    COLLAB = "collab"
    ANY = "any"


class CategoricalPreferences(BaseModel):
    """Enumerated taste preferences. Every axis defaults to ``any``."""
    mood: Mood = Mood.ANY
    depth: Depth = Depth.ANY
    vocal: Vocal = Vocal.ANY
    era: Era = Era.ANY
    region: Region = Region.ANY
    live: LiveStyle = LiveStyle.ANY
    info_ent: InfoEnt = InfoEnt.ANY
    pacing: Pacing = Pacing.ANY
    visual: Visual = Visual.ANY
    community: Community = Community.ANY


class UserSignals(BaseModel):
    """Read-only snapshot of everything the engine knows about a user.

    Assembled by the caller for each request. History lists are ordered
    most-recent-first.
    """
    watch_history: list[Video] = Field(default_factory=list)
    search_history: list[str] = Field(default_factory=list)
    shorts_history: list[Video] = Field(default_factory=list)
    subscribed_channels: list[Channel] = Field(default_factory=list)
    preferred_genres: list[str] = Field(default_factory=list)
    preferred_channels: list[str] = Field(default_factory=list)
    preferred_durations: list[DurationBucket] = Field(default_factory=list)
    ng_keywords: list[str] = Field(default_factory=list)
    ng_channels: list[str] = Field(default_factory=list)
    seen_ids: set[str] = Field(default_factory=set)
    negative_keywords: dict[str, float] = Field(default_factory=dict)
    preferences: CategoricalPreferences = Field(default_factory=CategoricalPreferences)
    freshness: Freshness = Freshness.BALANCED
    discovery_mode: DiscoveryMode = DiscoveryMode.BALANCED
    page: int = Field(default=1, ge=1)

    @property
    def is_new_user(self) -> bool:
        """True when there is nothing to personalize from.

        One subscription is tolerated because the app subscribes new users
        to its own channel.
        """
        return not (
            len(self.subscribed_channels) > 1
            or self.search_history
            or self.watch_history
            or self.preferred_genres
            or self.preferred_channels
        )

    def history_ids(self) -> set[str]:
        return {v.id for v in self.watch_history} | {v.id for v in self.shorts_history}


# ── Ranking pass ──────────────────────────────────────────────────────


@dataclass
class ScoredCandidate:
    """A candidate with its score for one ranking pass."""
    video: Video
    score: float
    reasons: list[str] = field(default_factory=list)


@dataclass
class SourceOutcome:
    """Result of one fetch call made by the aggregator."""
    label: str
    videos: list[Video]
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class CandidatePools:
    """Candidates gathered for one invocation, split by origin."""
    personalized: list[Video]
    trending: list[Video]
    outcomes: list[SourceOutcome] = field(default_factory=list)


@dataclass
class FeedResult:
    """Final output of a ranking invocation."""
    videos: list[Video]
    shorts: list[Video] = field(default_factory=list)
    backfilled: bool = False
