# Content sources
from .base import ContentSource, ContentSourceError, SearchResult, VideoDetails
from .youtube import YouTubeDataSource
