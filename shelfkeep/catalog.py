"""Read-only queries over the media catalogue: details, history and listings."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .models import (
    AudioBookSpecifics,
    BookSpecifics,
    MediaError,
    MediaSearchItem,
    MediaSearchResults,
    MetadataImageLot,
    MetadataLot,
)
from .store import Database, MetadataRow, SeenRow

LIMIT = 20


class MediaSortOrder(str, Enum):
    DESC = "Desc"
    ASC = "Asc"


class MediaSortBy(str, Enum):
    TITLE = "Title"
    RELEASE_DATE = "ReleaseDate"


class MediaFilter(str, Enum):
    ALL = "All"
    RATED = "Rated"
    UNRATED = "Unrated"


@dataclass
class MediaSortInput:
    order: MediaSortOrder = MediaSortOrder.ASC
    by: MediaSortBy = MediaSortBy.RELEASE_DATE


@dataclass
class MediaListInput:
    page: int
    lot: MetadataLot
    sort: Optional[MediaSortInput] = None
    query: Optional[str] = None
    filter: Optional[MediaFilter] = None


@dataclass
class SearchInput:
    query: str
    page: Optional[int] = None


@dataclass
class MediaBaseData:
    """A stored item together with its related names and images."""

    model: MetadataRow
    creators: list[str] = field(default_factory=list)
    poster_images: list[str] = field(default_factory=list)
    backdrop_images: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)


@dataclass
class DatabaseMediaDetails:
    """Full details of a stored item, with the specifics of its kind."""

    id: int
    title: str
    lot: MetadataLot
    description: Optional[str] = None
    creators: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    poster_images: list[str] = field(default_factory=list)
    backdrop_images: list[str] = field(default_factory=list)
    publish_year: Optional[int] = None
    publish_date: Optional[dt.date] = None
    book_specifics: Optional[BookSpecifics] = None
    movie_specifics: Optional[Any] = None
    show_specifics: Optional[Any] = None
    video_game_specifics: Optional[Any] = None
    audio_book_specifics: Optional[AudioBookSpecifics] = None
    podcast_specifics: Optional[Any] = None


def _sort_rows(rows: list[MetadataRow], sort: Optional[MediaSortInput]) -> list[MetadataRow]:
    rows = sorted(rows, key=lambda m: m.id)
    if sort is None:
        return rows
    attr = "title" if sort.by is MediaSortBy.TITLE else "publish_year"

    def key(m: MetadataRow) -> tuple:
        value = getattr(m, attr)
        # Missing values sort first in ascending order, as in SQL.
        return (False, 0) if value is None else (True, value)

    return sorted(rows, key=key, reverse=sort.order is MediaSortOrder.DESC)


class MediaCatalog:
    """Queries about stored media items and a user's activity on them."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def metadata_images(self, meta: MetadataRow) -> tuple[list[str], list[str]]:
        """Split an item's images into poster and backdrop URLs."""
        posters = [i.url for i in meta.images if i.lot is MetadataImageLot.POSTER]
        backdrops = [i.url for i in meta.images if i.lot is MetadataImageLot.BACKDROP]
        return posters, backdrops

    def generic_metadata(self, metadata_id: int) -> MediaBaseData:
        meta = self._db.get_metadata(metadata_id)
        if meta is None:
            raise MediaError("The record does not exist")
        posters, backdrops = self.metadata_images(meta)
        return MediaBaseData(
            model=meta,
            creators=self._db.creators_of(metadata_id),
            poster_images=posters,
            backdrop_images=backdrops,
            genres=self._db.genres_of(metadata_id),
        )

    def media_details(self, metadata_id: int) -> DatabaseMediaDetails:
        base = self.generic_metadata(metadata_id)
        model = base.model
        details = DatabaseMediaDetails(
            id=model.id,
            title=model.title,
            lot=model.lot,
            description=model.description,
            creators=base.creators,
            genres=base.genres,
            poster_images=base.poster_images,
            backdrop_images=base.backdrop_images,
            publish_year=model.publish_year,
            publish_date=model.publish_date,
        )
        if model.lot is MetadataLot.BOOK:
            details.book_specifics = self._db.get_book(metadata_id)
            if details.book_specifics is None:
                raise MediaError(f"book details for {metadata_id} are missing")
        elif model.lot is MetadataLot.AUDIO_BOOK:
            details.audio_book_specifics = self._db.get_audio_book(metadata_id)
            if details.audio_book_specifics is None:
                raise MediaError(f"audio book details for {metadata_id} are missing")
        return details

    def seen_history(self, metadata_id: int, user_id: int) -> list[SeenRow]:
        """A user's seen records for an item, most recently updated first."""
        return self._db.find_seen(user_id, metadata_id)

    def media_list(self, user_id: int, input: MediaListInput) -> MediaSearchResults:
        """One page of the user's items of one kind, filtered and sorted."""
        lot = MetadataLot(input.lot)
        rows = [
            m
            for m in map(self._db.get_metadata, self._db.user_metadata_ids(user_id))
            if m is not None and m.lot is lot
        ]
        if input.query is not None:
            needle = input.query.lower()
            rows = [
                m
                for m in rows
                if needle in m.title.lower()
                or (m.description is not None and needle in m.description.lower())
            ]
        if input.filter in (MediaFilter.RATED, MediaFilter.UNRATED):
            reviewed = set(self._db.reviewed_metadata_ids(user_id))
            want_rated = input.filter is MediaFilter.RATED
            rows = [m for m in rows if (m.id in reviewed) == want_rated]
        rows = _sort_rows(rows, input.sort)
        if input.page >= 1:
            start = (input.page - 1) * LIMIT
            page_rows = rows[start : start + LIMIT]
        else:
            page_rows = []
        items = [
            MediaSearchItem(
                identifier=str(m.id),
                lot=m.lot,
                title=m.title,
                poster_images=self.metadata_images(m)[0],
                publish_year=m.publish_year,
            )
            for m in page_rows
        ]
        return MediaSearchResults(total=len(rows), items=items)