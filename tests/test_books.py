import datetime as dt

import pytest

from shelfkeep.books import AudioBooksService, BooksService
from shelfkeep.media_service import MediaService
from shelfkeep.models import (
    AudioBookSource,
    AudioBookSpecifics,
    BookSource,
    BookSpecifics,
    MediaDetails,
    MediaError,
    MediaSearchItem,
    MediaSearchResults,
    MetadataLot,
)
from shelfkeep.store import Database


class FakeProvider:
    def __init__(self, details_by_id):
        self.details_by_id = details_by_id
        self.detail_calls = []
        self.search_calls = []

    def details(self, identifier):
        self.detail_calls.append(identifier)
        return self.details_by_id[identifier]

    def search(self, query, page=None):
        self.search_calls.append((query, page))
        return MediaSearchResults(
            total=1, items=[MediaSearchItem(identifier="x", lot=MetadataLot.BOOK, title=query)]
        )


def book_details(identifier="OL1W"):
    return MediaDetails(
        identifier=identifier,
        title="A Book",
        lot=MetadataLot.BOOK,
        description="Desc",
        creators=["Ann", "Bob"],
        genres=["Fiction"],
        poster_images=["https://img.example/p.jpg"],
        publish_year=1999,
        publish_date=dt.date(1999, 3, 3),
        specifics=BookSpecifics(pages=300, source=BookSource.GOODREADS),
    )


def audio_details(identifier="B0TEST0001"):
    return MediaDetails(
        identifier=identifier,
        title="Heard It",
        lot=MetadataLot.AUDIO_BOOK,
        creators=["Ann"],
        publish_year=2019,
        publish_date=dt.date(2019, 5, 14),
        specifics=AudioBookSpecifics(runtime=615, source=AudioBookSource.AUDIBLE),
    )


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


def make(cls, db, details):
    provider = FakeProvider({d.identifier: d for d in details})
    return cls(db, provider, MediaService(db, None, None, None)), provider


def test_commit_book_stores_and_reuses(db):
    service, provider = make(BooksService, db, [book_details()])
    first = service.commit_book("OL1W")
    second = service.commit_book("OL1W")
    assert first == second
    assert provider.detail_calls == ["OL1W"]
    meta = db.get_metadata(first.id)
    assert meta.title == "A Book"
    assert meta.lot is MetadataLot.BOOK
    assert meta.publish_date is None
    assert db.creators_of(first.id) == ["Ann", "Bob"]
    assert db.genres_of(first.id) == ["Fiction"]
    assert db.get_book(first.id) == BookSpecifics(pages=300, source=BookSource.GOODREADS)


def test_book_save_rejects_wrong_specifics(db):
    service, _ = make(BooksService, db, [])
    with pytest.raises(MediaError):
        service.save_to_db(audio_details())
    assert db.all_metadata() == []


def test_book_details_from_provider(db):
    service, provider = make(BooksService, db, [book_details()])
    stored = service.commit_book("OL1W")
    refreshed = service.details_from_provider(stored.id)
    assert refreshed.identifier == "OL1W"
    assert provider.detail_calls == ["OL1W", "OL1W"]
    with pytest.raises(MediaError):
        service.details_from_provider(stored.id + 100)


def test_book_search_passes_through(db):
    service, provider = make(BooksService, db, [])
    results = service.search("dune", 2)
    assert provider.search_calls == [("dune", 2)]
    assert results.items[0].title == "dune"


def test_commit_audio_book(db):
    service, provider = make(AudioBooksService, db, [audio_details()])
    stored = service.commit_audio_book("B0TEST0001")
    assert service.commit_audio_book("B0TEST0001") == stored
    assert provider.detail_calls == ["B0TEST0001"]
    meta = db.get_metadata(stored.id)
    assert meta.lot is MetadataLot.AUDIO_BOOK
    assert meta.publish_date == dt.date(2019, 5, 14)
    assert db.get_audio_book(stored.id) == AudioBookSpecifics(
        runtime=615, source=AudioBookSource.AUDIBLE
    )


def test_audio_book_save_rejects_wrong_specifics(db):
    service, _ = make(AudioBooksService, db, [])
    with pytest.raises(MediaError):
        service.save_to_db(book_details())
    assert db.all_metadata() == []


def test_audio_book_details_from_missing_record(db):
    service, provider = make(AudioBooksService, db, [audio_details()])
    with pytest.raises(MediaError):
        service.details_from_provider(1)
    assert provider.detail_calls == []