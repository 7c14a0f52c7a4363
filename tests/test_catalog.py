import datetime as dt
from decimal import Decimal

import pytest

from shelfkeep.catalog import (
    LIMIT,
    MediaCatalog,
    MediaFilter,
    MediaListInput,
    MediaSortBy,
    MediaSortInput,
    MediaSortOrder,
)
from shelfkeep.models import (
    AudioBookSource,
    BookSource,
    MediaError,
    MetadataImage,
    MetadataImageLot,
    MetadataLot,
    SeenShowExtraInformation,
)
from shelfkeep.store import Database, ReviewRow, SeenRow

UTC = dt.timezone.utc


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


def _book(db, title, year=None, description=None, images=(), user_id=1):
    meta = db.insert_metadata(
        MetadataLot.BOOK, title, f"id-{title}", description, year, None, images
    )
    db.insert_book(meta.id, 100, BookSource.OPEN_LIBRARY)
    if user_id is not None:
        db.associate_user_with_metadata(user_id, meta.id)
    return meta


def test_metadata_images_split_by_lot(db):
    meta = _book(
        db,
        "Dune",
        images=[
            MetadataImage("p1", MetadataImageLot.POSTER),
            MetadataImage("b1", MetadataImageLot.BACKDROP),
            MetadataImage("p2", MetadataImageLot.POSTER),
        ],
    )
    posters, backdrops = MediaCatalog(db).metadata_images(meta)
    assert posters == ["p1", "p2"]
    assert backdrops == ["b1"]


def test_generic_metadata_collects_related_names(db):
    meta = _book(db, "Dune")
    db.link_creator(meta.id, db.get_or_create_creator("Frank Herbert"))
    db.link_genre(meta.id, db.get_or_create_genre("Science Fiction"))
    base = MediaCatalog(db).generic_metadata(meta.id)
    assert base.model.id == meta.id
    assert base.creators == ["Frank Herbert"]
    assert base.genres == ["Science Fiction"]


def test_generic_metadata_missing_raises(db):
    with pytest.raises(MediaError):
        MediaCatalog(db).generic_metadata(999)


def test_media_details_for_book(db):
    meta = db.insert_metadata(MetadataLot.BOOK, "Emma", "emma", "A novel", 1815)
    db.insert_book(meta.id, 321, BookSource.GOODREADS)
    details = MediaCatalog(db).media_details(meta.id)
    assert details.title == "Emma"
    assert details.publish_year == 1815
    assert details.book_specifics.pages == 321
    assert details.book_specifics.source is BookSource.GOODREADS
    assert details.audio_book_specifics is None


def test_media_details_for_audio_book(db):
    meta = db.insert_metadata(MetadataLot.AUDIO_BOOK, "Heard", "B0ABC")
    db.insert_audio_book(meta.id, 540, AudioBookSource.AUDIBLE)
    details = MediaCatalog(db).media_details(meta.id)
    assert details.audio_book_specifics.runtime == 540
    assert details.book_specifics is None


def test_media_details_missing_specifics_raises(db):
    meta = db.insert_metadata(MetadataLot.BOOK, "Bare", "bare")
    with pytest.raises(MediaError):
        MediaCatalog(db).media_details(meta.id)


def test_seen_history_newest_first_with_show_information(db):
    meta = db.insert_metadata(MetadataLot.SHOW, "Show", "show-1")
    older = db.insert_seen(
        SeenRow(
            user_id=1,
            metadata_id=meta.id,
            progress=100,
            last_updated_on=dt.datetime(2023, 1, 1, tzinfo=UTC),
            extra_information=SeenShowExtraInformation(season=1, episode=2),
        )
    )
    newer = db.insert_seen(
        SeenRow(
            user_id=1,
            metadata_id=meta.id,
            progress=100,
            last_updated_on=dt.datetime(2023, 2, 1, tzinfo=UTC),
        )
    )
    history = MediaCatalog(db).seen_history(meta.id, 1)
    assert [s.id for s in history] == [newer.id, older.id]
    assert history[1].show_information == SeenShowExtraInformation(1, 2)
    assert history[0].show_information is None


def test_media_list_only_users_items_of_lot(db):
    mine = _book(db, "Mine")
    _book(db, "Other", user_id=2)
    show = db.insert_metadata(MetadataLot.SHOW, "A Show", "s")
    db.associate_user_with_metadata(1, show.id)
    result = MediaCatalog(db).media_list(1, MediaListInput(page=1, lot=MetadataLot.BOOK))
    assert result.total == 1
    assert [i.identifier for i in result.items] == [str(mine.id)]
    assert result.items[0].lot is MetadataLot.BOOK


def test_media_list_query_matches_title_or_description(db):
    a = _book(db, "The Hobbit")
    b = _book(db, "Other", description="a HOBBIT tale")
    _book(db, "Unrelated")
    result = MediaCatalog(db).media_list(
        1, MediaListInput(page=1, lot=MetadataLot.BOOK, query="hobbit")
    )
    assert {i.identifier for i in result.items} == {str(a.id), str(b.id)}


def test_media_list_sort_by_title(db):
    for title in ["b", "c", "a"]:
        _book(db, title)
    catalog = MediaCatalog(db)
    asc = catalog.media_list(
        1,
        MediaListInput(
            page=1, lot=MetadataLot.BOOK, sort=MediaSortInput(MediaSortOrder.ASC, MediaSortBy.TITLE)
        ),
    )
    desc = catalog.media_list(
        1,
        MediaListInput(
            page=1, lot=MetadataLot.BOOK, sort=MediaSortInput(MediaSortOrder.DESC, MediaSortBy.TITLE)
        ),
    )
    assert [i.title for i in asc.items] == ["a", "b", "c"]
    assert [i.title for i in desc.items] == ["c", "b", "a"]


def test_media_list_sort_by_release_puts_missing_first(db):
    _book(db, "late", year=2000)
    _book(db, "none")
    _book(db, "early", year=1990)
    result = MediaCatalog(db).media_list(
        1, MediaListInput(page=1, lot=MetadataLot.BOOK, sort=MediaSortInput())
    )
    assert [i.title for i in result.items] == ["none", "early", "late"]


def test_media_list_without_sort_orders_by_id(db):
    ids = [_book(db, t).id for t in ["z", "y", "x"]]
    result = MediaCatalog(db).media_list(1, MediaListInput(page=1, lot=MetadataLot.BOOK))
    assert [i.identifier for i in result.items] == [str(i) for i in ids]


def test_media_list_rated_and_unrated_partition(db):
    rated = _book(db, "rated")
    unrated = _book(db, "unrated")
    db.insert_review(ReviewRow(user_id=1, metadata_id=rated.id, rating=Decimal("4")))
    catalog = MediaCatalog(db)

    def ids(f):
        r = catalog.media_list(1, MediaListInput(page=1, lot=MetadataLot.BOOK, filter=f))
        return [i.identifier for i in r.items]

    assert ids(MediaFilter.RATED) == [str(rated.id)]
    assert ids(MediaFilter.UNRATED) == [str(unrated.id)]
    assert sorted(ids(MediaFilter.ALL)) == sorted([str(rated.id), str(unrated.id)])


def test_media_list_pagination(db):
    for n in range(LIMIT + 5):
        _book(db, f"book-{n:02d}")
    catalog = MediaCatalog(db)
    first = catalog.media_list(1, MediaListInput(page=1, lot=MetadataLot.BOOK))
    second = catalog.media_list(1, MediaListInput(page=2, lot=MetadataLot.BOOK))
    assert first.total == second.total == LIMIT + 5
    assert len(first.items) == LIMIT
    assert len(second.items) == 5
    assert not {i.identifier for i in first.items} & {i.identifier for i in second.items}


def test_media_list_page_zero_is_empty(db):
    _book(db, "one")
    result = MediaCatalog(db).media_list(1, MediaListInput(page=0, lot=MetadataLot.BOOK))
    assert result.items == []
    assert result.total == 1