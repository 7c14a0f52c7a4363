"""Core value types shared across the media tracker."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

VERSION = "0.1.0"
AUTHOR = "shelfkeep"
PROJECT_NAME = "shelfkeep"
REPOSITORY_LINK = "https://example.com/shelfkeep"


class MediaError(Exception):
    """Raised when a media operation cannot be completed."""


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class MetadataLot(_StrEnum):
    """The kind of media a metadata record describes."""

    AUDIO_BOOK = "AudioBook"
    BOOK = "Book"
    MOVIE = "Movie"
    SHOW = "Show"
    VIDEO_GAME = "VideoGame"
    PODCAST = "Podcast"


class MetadataImageLot(_StrEnum):
    POSTER = "Poster"
    BACKDROP = "Backdrop"


class BookSource(_StrEnum):
    OPEN_LIBRARY = "OpenLibrary"
    GOODREADS = "Goodreads"


class AudioBookSource(_StrEnum):
    AUDIBLE = "Audible"


class MediaImportSource(_StrEnum):
    MEDIA_TRACKER = "MediaTracker"
    GOODREADS = "Goodreads"


class DefaultCollection(_StrEnum):
    """Collections every user has."""

    IN_PROGRESS = "In Progress"
    WATCHLIST = "Watchlist"


@dataclass
class BookSpecifics:
    pages: Optional[int]
    source: BookSource


@dataclass
class AudioBookSpecifics:
    runtime: Optional[int]
    source: AudioBookSource


@dataclass(frozen=True)
class MetadataImage:
    url: str
    lot: MetadataImageLot


@dataclass
class MediaDetails:
    """Everything a provider reports about one media item."""

    identifier: str
    title: str
    lot: MetadataLot
    specifics: Any
    description: Optional[str] = None
    creators: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    poster_images: list[str] = field(default_factory=list)
    backdrop_images: list[str] = field(default_factory=list)
    publish_year: Optional[int] = None
    publish_date: Optional[dt.date] = None


@dataclass
class MediaSearchItem:
    identifier: str
    lot: MetadataLot
    title: str
    poster_images: list[str] = field(default_factory=list)
    publish_year: Optional[int] = None


@dataclass
class MediaSearchResults:
    total: int
    items: list[MediaSearchItem] = field(default_factory=list)


@dataclass(frozen=True)
class SeenShowExtraInformation:
    season: int
    episode: int


@dataclass(frozen=True)
class SeenPodcastExtraInformation:
    episode: int


SeenExtraInformation = Union[SeenShowExtraInformation, SeenPodcastExtraInformation]


@dataclass(frozen=True)
class IdObject:
    id: int


@dataclass(frozen=True)
class CoreDetails:
    version: str
    author_name: str
    repository_link: str


@dataclass(frozen=True)
class CoreFeatureEnabled:
    name: MetadataLot
    enabled: bool


_FEATURE_ORDER = (
    MetadataLot.BOOK,
    MetadataLot.MOVIE,
    MetadataLot.SHOW,
    MetadataLot.VIDEO_GAME,
    MetadataLot.AUDIO_BOOK,
    MetadataLot.PODCAST,
)


def core_details() -> CoreDetails:
    """Primary information about the service."""
    return CoreDetails(
        version=VERSION, author_name=AUTHOR, repository_link=REPOSITORY_LINK
    )


def core_enabled_features(enabled: Mapping[MetadataLot, bool]) -> list[CoreFeatureEnabled]:
    """Report, in a fixed order, which media kinds are enabled; missing ones are off."""
    return [
        CoreFeatureEnabled(name=lot, enabled=bool(enabled.get(lot, False)))
        for lot in _FEATURE_ORDER
    ]


def seen_extra_to_json(info: Optional[SeenExtraInformation]) -> Optional[dict]:
    """Encode extra seen information as a tagged JSON object."""
    if info is None:
        return None
    if isinstance(info, SeenShowExtraInformation):
        return {"Show": {"season": info.season, "episode": info.episode}}
    if isinstance(info, SeenPodcastExtraInformation):
        return {"Podcast": {"episode": info.episode}}
    raise MediaError(f"cannot encode extra information of type {type(info).__name__}")


def seen_extra_from_json(data: Optional[Mapping]) -> Optional[SeenExtraInformation]:
    """Decode a tagged JSON object into extra seen information."""
    if data is None:
        return None
    if not isinstance(data, Mapping) or len(data) != 1:
        raise MediaError("extra information must be an object with exactly one tag")
    ((tag, body),) = data.items()
    try:
        if tag == "Show":
            return SeenShowExtraInformation(
                season=int(body["season"]), episode=int(body["episode"])
            )
        if tag == "Podcast":
            return SeenPodcastExtraInformation(episode=int(body["episode"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise MediaError(f"malformed {tag} extra information") from exc
    raise MediaError(f"unknown extra information tag {tag!r}")