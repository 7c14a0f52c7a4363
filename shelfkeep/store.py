"""SQLite-backed persistence for metadata, user activity and import reports."""

from __future__ import annotations

import datetime as dt
import json
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Optional

from .models import (
    AudioBookSource,
    AudioBookSpecifics,
    BookSource,
    BookSpecifics,
    MediaError,
    MediaImportSource,
    MetadataImage,
    MetadataImageLot,
    MetadataLot,
    SeenExtraInformation,
    SeenPodcastExtraInformation,
    SeenShowExtraInformation,
    seen_extra_from_json,
    seen_extra_to_json,
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS metadata (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_on TEXT NOT NULL,
    lot TEXT NOT NULL,
    last_updated_on TEXT NOT NULL,
    title TEXT NOT NULL,
    identifier TEXT NOT NULL,
    description TEXT,
    publish_year INTEGER,
    publish_date TEXT,
    images TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS metadata_identifier_idx ON metadata (identifier);
CREATE TABLE IF NOT EXISTS creator (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS genre (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS metadata_to_creator (
    metadata_id INTEGER NOT NULL
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    creator_id INTEGER NOT NULL
        REFERENCES creator (id) ON UPDATE CASCADE ON DELETE CASCADE,
    PRIMARY KEY (metadata_id, creator_id)
);
CREATE TABLE IF NOT EXISTS metadata_to_genre (
    metadata_id INTEGER NOT NULL
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    genre_id INTEGER NOT NULL
        REFERENCES genre (id) ON UPDATE CASCADE ON DELETE CASCADE,
    PRIMARY KEY (metadata_id, genre_id)
);
CREATE TABLE IF NOT EXISTS book (
    metadata_id INTEGER PRIMARY KEY
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    num_pages INTEGER,
    source TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS audio_book (
    metadata_id INTEGER PRIMARY KEY
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    runtime INTEGER,
    source TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS collection (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_on TEXT NOT NULL,
    name TEXT NOT NULL,
    user_id INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS metadata_to_collection (
    metadata_id INTEGER NOT NULL
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    collection_id INTEGER NOT NULL
        REFERENCES collection (id) ON UPDATE CASCADE ON DELETE CASCADE,
    PRIMARY KEY (metadata_id, collection_id)
);
CREATE TABLE IF NOT EXISTS seen (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    progress INTEGER NOT NULL,
    started_on TEXT,
    finished_on TEXT,
    last_updated_on TEXT NOT NULL,
    user_id INTEGER NOT NULL,
    metadata_id INTEGER NOT NULL
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    extra_information TEXT,
    identifier TEXT
);
CREATE TABLE IF NOT EXISTS review (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    posted_on TEXT NOT NULL,
    rating TEXT,
    text TEXT,
    visibility TEXT NOT NULL,
    spoiler INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    metadata_id INTEGER NOT NULL
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    extra_information TEXT,
    identifier TEXT
);
CREATE TABLE IF NOT EXISTS user_to_metadata (
    user_id INTEGER NOT NULL,
    metadata_id INTEGER NOT NULL
        REFERENCES metadata (id) ON UPDATE CASCADE ON DELETE CASCADE,
    last_updated_on TEXT NOT NULL,
    PRIMARY KEY (user_id, metadata_id)
);
CREATE TABLE IF NOT EXISTS media_import_report (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    source TEXT NOT NULL,
    started_on TEXT NOT NULL,
    finished_on TEXT,
    details TEXT,
    success INTEGER
);
"""


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _dump_datetime(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat(timespec="microseconds")


def _load_datetime(text: Optional[str]) -> Optional[dt.datetime]:
    return None if text is None else dt.datetime.fromisoformat(text)


def _dump_date(value: Optional[dt.date]) -> Optional[str]:
    return None if value is None else value.isoformat()


def _load_date(text: Optional[str]) -> Optional[dt.date]:
    return None if text is None else dt.date.fromisoformat(text)


def _dump_extra(info: Optional[SeenExtraInformation]) -> Optional[str]:
    encoded = seen_extra_to_json(info)
    return None if encoded is None else json.dumps(encoded)


def _load_extra(text: Optional[str]) -> Optional[SeenExtraInformation]:
    return None if text is None else seen_extra_from_json(json.loads(text))


def _dump_images(images: Iterable[MetadataImage]) -> str:
    return json.dumps([{"url": i.url, "lot": str(i.lot)} for i in images])


def _load_images(text: str) -> list[MetadataImage]:
    return [
        MetadataImage(url=i["url"], lot=MetadataImageLot(i["lot"]))
        for i in json.loads(text)
    ]


@dataclass
class MetadataRow:
    """A stored media item."""

    id: int
    created_on: dt.datetime
    lot: MetadataLot
    last_updated_on: dt.datetime
    title: str
    identifier: str
    description: Optional[str]
    publish_year: Optional[int]
    publish_date: Optional[dt.date]
    images: list[MetadataImage] = field(default_factory=list)


@dataclass
class SeenRow:
    """One record of a user consuming (part of) a media item."""

    user_id: int
    metadata_id: int
    progress: int
    started_on: Optional[dt.date] = None
    finished_on: Optional[dt.date] = None
    last_updated_on: dt.datetime = field(default_factory=_now)
    extra_information: Optional[SeenExtraInformation] = None
    identifier: Optional[str] = None
    id: Optional[int] = None

    @property
    def show_information(self) -> Optional[SeenShowExtraInformation]:
        info = self.extra_information
        return info if isinstance(info, SeenShowExtraInformation) else None

    @property
    def podcast_information(self) -> Optional[SeenPodcastExtraInformation]:
        info = self.extra_information
        return info if isinstance(info, SeenPodcastExtraInformation) else None


@dataclass
class ReviewRow:
    """A user's rating and/or written review of a media item."""

    user_id: int
    metadata_id: int
    rating: Optional[Decimal] = None
    text: Optional[str] = None
    visibility: str = "Public"
    spoiler: bool = False
    posted_on: dt.datetime = field(default_factory=_now)
    extra_information: Optional[SeenExtraInformation] = None
    identifier: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ImportReportRow:
    """The record of one media import run."""

    id: int
    user_id: int
    source: MediaImportSource
    started_on: dt.datetime
    finished_on: Optional[dt.datetime] = None
    details: Optional[Any] = None
    success: Optional[bool] = None


class Database:
    """A media database stored in SQLite."""

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(str(path), isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.executescript(_SCHEMA)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        self._conn.execute("BEGIN")
        try:
            yield self._conn
        except sqlite3.IntegrityError as exc:
            self._conn.execute("ROLLBACK")
            raise MediaError(str(exc)) from exc
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")

    def _one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return self._conn.execute(sql, params).fetchone()

    def _scalar(self, sql: str, params: tuple = ()) -> Any:
        return self._conn.execute(sql, params).fetchone()[0]

    def _column(self, sql: str, params: tuple = ()) -> list:
        return [r[0] for r in self._conn.execute(sql, params)]

    # metadata

    @staticmethod
    def _metadata_from_row(row: sqlite3.Row) -> MetadataRow:
        return MetadataRow(
            id=row["id"],
            created_on=_load_datetime(row["created_on"]),
            lot=MetadataLot(row["lot"]),
            last_updated_on=_load_datetime(row["last_updated_on"]),
            title=row["title"],
            identifier=row["identifier"],
            description=row["description"],
            publish_year=row["publish_year"],
            publish_date=_load_date(row["publish_date"]),
            images=_load_images(row["images"]),
        )

    def insert_metadata(
        self,
        lot: MetadataLot,
        title: str,
        identifier: str,
        description: Optional[str] = None,
        publish_year: Optional[int] = None,
        publish_date: Optional[dt.date] = None,
        images: Iterable[MetadataImage] = (),
    ) -> MetadataRow:
        """Store a new media item and return it."""
        stamp = _dump_datetime(_now())
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO metadata (created_on, lot, last_updated_on, title, identifier,"
                " description, publish_year, publish_date, images)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    stamp,
                    str(MetadataLot(lot)),
                    stamp,
                    title,
                    identifier,
                    description,
                    publish_year,
                    _dump_date(publish_date),
                    _dump_images(images),
                ),
            )
        return self.get_metadata(cursor.lastrowid)

    def get_metadata(self, metadata_id: int) -> Optional[MetadataRow]:
        row = self._one("SELECT * FROM metadata WHERE id = ?", (metadata_id,))
        return None if row is None else self._metadata_from_row(row)

    def find_metadata_by_identifier(self, identifier: str) -> Optional[MetadataRow]:
        row = self._one(
            "SELECT * FROM metadata WHERE identifier = ? ORDER BY id LIMIT 1",
            (identifier,),
        )
        return None if row is None else self._metadata_from_row(row)

    def update_metadata(
        self,
        metadata_id: int,
        title: str,
        description: Optional[str],
        images: Iterable[MetadataImage],
    ) -> MetadataRow:
        """Replace the title, description and images of a stored item."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE metadata SET title = ?, description = ?, images = ?,"
                " last_updated_on = ? WHERE id = ?",
                (
                    title,
                    description,
                    _dump_images(images),
                    _dump_datetime(_now()),
                    metadata_id,
                ),
            )
        if cursor.rowcount == 0:
            raise MediaError(f"metadata {metadata_id} does not exist")
        return self.get_metadata(metadata_id)

    def delete_metadata(self, metadata_id: int) -> bool:
        """Delete an item and everything attached to it; report whether it existed."""
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM metadata WHERE id = ?", (metadata_id,))
        return cursor.rowcount > 0

    def all_metadata(self) -> list[MetadataRow]:
        rows = self._conn.execute("SELECT * FROM metadata ORDER BY id")
        return [self._metadata_from_row(r) for r in rows]

    # creators and genres

    def _get_or_create_named(self, table: str, name: str) -> int:
        with self._transaction() as conn:
            conn.execute(f"INSERT OR IGNORE INTO {table} (name) VALUES (?)", (name,))
            return conn.execute(
                f"SELECT id FROM {table} WHERE name = ?", (name,)
            ).fetchone()[0]

    def get_or_create_creator(self, name: str) -> int:
        return self._get_or_create_named("creator", name)

    def get_or_create_genre(self, name: str) -> int:
        return self._get_or_create_named("genre", name)

    def link_creator(self, metadata_id: int, creator_id: int) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO metadata_to_creator (metadata_id, creator_id)"
                " VALUES (?, ?)",
                (metadata_id, creator_id),
            )

    def link_genre(self, metadata_id: int, genre_id: int) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO metadata_to_genre (metadata_id, genre_id)"
                " VALUES (?, ?)",
                (metadata_id, genre_id),
            )

    def creators_of(self, metadata_id: int) -> list[str]:
        return self._column(
            "SELECT c.name FROM metadata_to_creator AS mc"
            " JOIN creator AS c ON c.id = mc.creator_id"
            " WHERE mc.metadata_id = ? ORDER BY mc.rowid",
            (metadata_id,),
        )

    def genres_of(self, metadata_id: int) -> list[str]:
        return self._column(
            "SELECT g.name FROM metadata_to_genre AS mg"
            " JOIN genre AS g ON g.id = mg.genre_id"
            " WHERE mg.metadata_id = ? ORDER BY mg.rowid",
            (metadata_id,),
        )

    # lot specifics

    def insert_book(
        self, metadata_id: int, num_pages: Optional[int], source: BookSource
    ) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO book (metadata_id, num_pages, source) VALUES (?, ?, ?)",
                (metadata_id, num_pages, str(BookSource(source))),
            )

    def get_book(self, metadata_id: int) -> Optional[BookSpecifics]:
        row = self._one("SELECT * FROM book WHERE metadata_id = ?", (metadata_id,))
        if row is None:
            return None
        return BookSpecifics(pages=row["num_pages"], source=BookSource(row["source"]))

    def insert_audio_book(
        self, metadata_id: int, runtime: Optional[int], source: AudioBookSource
    ) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO audio_book (metadata_id, runtime, source) VALUES (?, ?, ?)",
                (metadata_id, runtime, str(AudioBookSource(source))),
            )

    def get_audio_book(self, metadata_id: int) -> Optional[AudioBookSpecifics]:
        row = self._one(
            "SELECT * FROM audio_book WHERE metadata_id = ?", (metadata_id,)
        )
        if row is None:
            return None
        return AudioBookSpecifics(
            runtime=row["runtime"], source=AudioBookSource(row["source"])
        )

    # user associations

    @staticmethod
    def _associate(conn: sqlite3.Connection, user_id: int, metadata_id: int) -> None:
        conn.execute(
            "INSERT INTO user_to_metadata (user_id, metadata_id, last_updated_on)"
            " VALUES (?, ?, ?) ON CONFLICT (user_id, metadata_id)"
            " DO UPDATE SET last_updated_on = excluded.last_updated_on",
            (user_id, metadata_id, _dump_datetime(_now())),
        )

    def associate_user_with_metadata(self, user_id: int, metadata_id: int) -> None:
        """Record that a user has some activity on an item."""
        with self._transaction() as conn:
            self._associate(conn, user_id, metadata_id)

    def all_user_metadata(self) -> list[tuple[int, int]]:
        rows = self._conn.execute(
            "SELECT user_id, metadata_id FROM user_to_metadata"
            " ORDER BY user_id, metadata_id"
        )
        return [(r[0], r[1]) for r in rows]

    def user_metadata_ids(self, user_id: int) -> list[int]:
        return self._column(
            "SELECT metadata_id FROM user_to_metadata WHERE user_id = ?"
            " ORDER BY metadata_id",
            (user_id,),
        )

    def delete_user_metadata(self, user_id: int, metadata_id: int) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM user_to_metadata WHERE user_id = ? AND metadata_id = ?",
                (user_id, metadata_id),
            )
        return cursor.rowcount > 0

    def count_metadata_users(self, metadata_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM user_to_metadata WHERE metadata_id = ?",
            (metadata_id,),
        )

    # seen

    @staticmethod
    def _seen_from_row(row: sqlite3.Row) -> SeenRow:
        return SeenRow(
            id=row["id"],
            user_id=row["user_id"],
            metadata_id=row["metadata_id"],
            progress=row["progress"],
            started_on=_load_date(row["started_on"]),
            finished_on=_load_date(row["finished_on"]),
            last_updated_on=_load_datetime(row["last_updated_on"]),
            extra_information=_load_extra(row["extra_information"]),
            identifier=row["identifier"],
        )

    def insert_seen(self, seen: SeenRow) -> SeenRow:
        """Store a seen record, associate its user with the item, return it with its id."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO seen (progress, started_on, finished_on, last_updated_on,"
                " user_id, metadata_id, extra_information, identifier)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    seen.progress,
                    _dump_date(seen.started_on),
                    _dump_date(seen.finished_on),
                    _dump_datetime(seen.last_updated_on),
                    seen.user_id,
                    seen.metadata_id,
                    _dump_extra(seen.extra_information),
                    seen.identifier,
                ),
            )
            self._associate(conn, seen.user_id, seen.metadata_id)
        return replace(seen, id=cursor.lastrowid)

    def update_seen(self, seen: SeenRow) -> SeenRow:
        if seen.id is None:
            raise MediaError("cannot update a seen record that has no id")
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE seen SET progress = ?, started_on = ?, finished_on = ?,"
                " last_updated_on = ?, user_id = ?, metadata_id = ?,"
                " extra_information = ?, identifier = ? WHERE id = ?",
                (
                    seen.progress,
                    _dump_date(seen.started_on),
                    _dump_date(seen.finished_on),
                    _dump_datetime(seen.last_updated_on),
                    seen.user_id,
                    seen.metadata_id,
                    _dump_extra(seen.extra_information),
                    seen.identifier,
                    seen.id,
                ),
            )
        if cursor.rowcount == 0:
            raise MediaError(f"seen record {seen.id} does not exist")
        return seen

    def get_seen(self, seen_id: int) -> Optional[SeenRow]:
        row = self._one("SELECT * FROM seen WHERE id = ?", (seen_id,))
        return None if row is None else self._seen_from_row(row)

    def delete_seen(self, seen_id: int) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM seen WHERE id = ?", (seen_id,))
        return cursor.rowcount > 0

    def find_seen(
        self, user_id: int, metadata_id: int, in_progress_only: bool = False
    ) -> list[SeenRow]:
        """A user's seen records for an item, most recently updated first."""
        sql = "SELECT * FROM seen WHERE user_id = ? AND metadata_id = ?"
        if in_progress_only:
            sql += " AND progress < 100"
        sql += " ORDER BY last_updated_on DESC, id DESC"
        rows = self._conn.execute(sql, (user_id, metadata_id))
        return [self._seen_from_row(r) for r in rows]

    def find_seen_by_identifier(self, identifier: Optional[str]) -> Optional[SeenRow]:
        if identifier is None:
            return None
        row = self._one(
            "SELECT * FROM seen WHERE identifier = ? ORDER BY id LIMIT 1",
            (identifier,),
        )
        return None if row is None else self._seen_from_row(row)

    def count_seen(self, user_id: int, metadata_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM seen WHERE user_id = ? AND metadata_id = ?",
            (user_id, metadata_id),
        )

    # reviews

    def insert_review(self, review: ReviewRow) -> ReviewRow:
        """Store a review, associate its user with the item, return it with its id."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO review (posted_on, rating, text, visibility, spoiler,"
                " user_id, metadata_id, extra_information, identifier)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    _dump_datetime(review.posted_on),
                    None if review.rating is None else str(review.rating),
                    review.text,
                    review.visibility,
                    int(review.spoiler),
                    review.user_id,
                    review.metadata_id,
                    _dump_extra(review.extra_information),
                    review.identifier,
                ),
            )
            self._associate(conn, review.user_id, review.metadata_id)
        return replace(review, id=cursor.lastrowid)

    def reviewed_metadata_ids(self, user_id: int) -> list[int]:
        return self._column(
            "SELECT metadata_id FROM review WHERE user_id = ? ORDER BY id",
            (user_id,),
        )

    def count_reviews(self, user_id: int, metadata_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM review WHERE user_id = ? AND metadata_id = ?",
            (user_id, metadata_id),
        )

    # collections

    def create_collection(self, user_id: int, name: str) -> int:
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO collection (created_on, name, user_id) VALUES (?, ?, ?)",
                (_dump_datetime(_now()), name, user_id),
            )
        return cursor.lastrowid

    def add_to_collection(self, collection_id: int, metadata_id: int) -> bool:
        """Put an item in a collection; report whether it was newly added."""
        with self._transaction() as conn:
            owner = conn.execute(
                "SELECT user_id FROM collection WHERE id = ?", (collection_id,)
            ).fetchone()
            if owner is None:
                raise MediaError(f"collection {collection_id} does not exist")
            cursor = conn.execute(
                "INSERT OR IGNORE INTO metadata_to_collection (metadata_id, collection_id)"
                " VALUES (?, ?)",
                (metadata_id, collection_id),
            )
            inserted = cursor.rowcount > 0
            if inserted:
                self._associate(conn, owner[0], metadata_id)
        return inserted

    def collection_metadata_ids(self, user_id: int) -> list[int]:
        return self._column(
            "SELECT DISTINCT mc.metadata_id FROM metadata_to_collection AS mc"
            " JOIN collection AS c ON c.id = mc.collection_id"
            " WHERE c.user_id = ? ORDER BY mc.metadata_id",
            (user_id,),
        )

    # import reports

    @staticmethod
    def _report_from_row(row: sqlite3.Row) -> ImportReportRow:
        success = row["success"]
        return ImportReportRow(
            id=row["id"],
            user_id=row["user_id"],
            source=MediaImportSource(row["source"]),
            started_on=_load_datetime(row["started_on"]),
            finished_on=_load_datetime(row["finished_on"]),
            details=None if row["details"] is None else json.loads(row["details"]),
            success=None if success is None else bool(success),
        )

    def insert_import_report(
        self,
        user_id: int,
        source: MediaImportSource,
        started_on: Optional[dt.datetime] = None,
    ) -> ImportReportRow:
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO media_import_report (user_id, source, started_on)"
                " VALUES (?, ?, ?)",
                (
                    user_id,
                    str(MediaImportSource(source)),
                    _dump_datetime(started_on or _now()),
                ),
            )
        row = self._one(
            "SELECT * FROM media_import_report WHERE id = ?", (cursor.lastrowid,)
        )
        return self._report_from_row(row)

    def pending_import_reports(self) -> list[ImportReportRow]:
        """Reports of imports that have neither succeeded nor failed yet."""
        rows = self._conn.execute(
            "SELECT * FROM media_import_report WHERE success IS NULL ORDER BY id"
        )
        return [self._report_from_row(r) for r in rows]

    def set_import_success(self, report_id: int, success: bool) -> None:
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE media_import_report SET success = ? WHERE id = ?",
                (int(success), report_id),
            )
        if cursor.rowcount == 0:
            raise MediaError(f"import report {report_id} does not exist")