"""Services that search for books and audio books and store them."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from .media_service import MediaService
from .models import (
    AudioBookSource,
    AudioBookSpecifics,
    BookSpecifics,
    IdObject,
    MediaDetails,
    MediaError,
    MediaSearchResults,
    MetadataLot,
)
from .store import Database


class MediaProvider(Protocol):
    def details(self, identifier: str) -> MediaDetails: ...

    def search(self, query: str, page: Optional[int] = None) -> MediaSearchResults: ...


def _details_from_provider(db: Database, provider: MediaProvider, metadata_id: int) -> MediaDetails:
    meta = db.get_metadata(metadata_id)
    if meta is None:
        raise MediaError("The record does not exist")
    return provider.details(meta.identifier)


def _commit(
    db: Database,
    provider: MediaProvider,
    identifier: str,
    save: Callable[[MediaDetails], IdObject],
) -> IdObject:
    meta = db.find_metadata_by_identifier(identifier)
    if meta is not None:
        return IdObject(id=meta.id)
    return save(provider.details(identifier))


class BooksService:
    """Books from a provider such as Open Library."""

    def __init__(self, db: Database, provider: MediaProvider, media_service: MediaService) -> None:
        self._db = db
        self._provider = provider
        self._media_service = media_service

    def search(self, query: str, page: Optional[int] = None) -> MediaSearchResults:
        """Search the provider for books."""
        return self._provider.search(query, page)

    def details_from_provider(self, metadata_id: int) -> MediaDetails:
        """Fetch the latest details of a stored book from its provider."""
        return _details_from_provider(self._db, self._provider, metadata_id)

    def commit_book(self, identifier: str) -> IdObject:
        """Return the stored book with this identifier, fetching and storing it if new."""
        return _commit(self._db, self._provider, identifier, self.save_to_db)

    def save_to_db(self, details: MediaDetails) -> IdObject:
        """Store a book's details and its book-specific row."""
        specifics = details.specifics
        if not isinstance(specifics, BookSpecifics):
            raise MediaError("book details must carry book specifics")
        metadata_id = self._media_service.commit_media(
            details.identifier,
            MetadataLot.BOOK,
            details.title,
            details.description,
            details.publish_year,
            None,
            details.poster_images,
            details.backdrop_images,
            details.creators,
            details.genres,
        )
        self._db.insert_book(metadata_id, specifics.pages, specifics.source)
        return IdObject(id=metadata_id)


class AudioBooksService:
    """Audio books from a provider such as Audible."""

    def __init__(self, db: Database, provider: MediaProvider, media_service: MediaService) -> None:
        self._db = db
        self._provider = provider
        self._media_service = media_service

    def search(self, query: str, page: Optional[int] = None) -> MediaSearchResults:
        """Search the provider for audio books."""
        return self._provider.search(query, page)

    def details_from_provider(self, metadata_id: int) -> MediaDetails:
        """Fetch the latest details of a stored audio book from its provider."""
        return _details_from_provider(self._db, self._provider, metadata_id)

    def commit_audio_book(self, identifier: str) -> IdObject:
        """Return the stored audio book with this identifier, fetching and storing it if new."""
        return _commit(self._db, self._provider, identifier, self.save_to_db)

    def save_to_db(self, details: MediaDetails) -> IdObject:
        """Store an audio book's details and its audio-book-specific row."""
        specifics = details.specifics
        if not isinstance(specifics, AudioBookSpecifics):
            raise MediaError("audio book details must carry audio book specifics")
        metadata_id = self._media_service.commit_media(
            details.identifier,
            MetadataLot.AUDIO_BOOK,
            details.title,
            details.description,
            details.publish_year,
            details.publish_date,
            details.poster_images,
            details.backdrop_images,
            details.creators,
            details.genres,
        )
        self._db.insert_audio_book(metadata_id, specifics.runtime, AudioBookSource.AUDIBLE)
        return IdObject(id=metadata_id)