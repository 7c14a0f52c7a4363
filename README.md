# shelfkeep

A library for keeping track of the books and audio books people read and
listen to. It keeps a SQLite catalog of media items, records what each user
has seen and how far they got, holds reviews and collections, looks items up
on Open Library and Audible, and reads history from Goodreads RSS feeds and
MediaTracker servers.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `shelfkeep.models` – shared value types: `MetadataLot`, `MediaDetails`,
  `MediaSearchItem`, `MediaSearchResults`, `BookSpecifics`,
  `AudioBookSpecifics`, `MetadataImage`, `IdObject`, `DefaultCollection`, and
  the helpers `core_details()`, `core_enabled_features(enabled)`,
  `seen_extra_to_json(info)` and `seen_extra_from_json(data)`. `MediaError` is
  raised whenever an operation cannot be completed.
- `shelfkeep.store` – `Database`, a SQLite store (in memory by default, usable
  as a context manager) for metadata, creators, genres, book and audio book
  rows, seen records (`SeenRow`), reviews (`ReviewRow`), collections,
  user–item associations and import reports (`ImportReportRow`). Storing a
  seen record, a review or a new collection entry associates the user with
  the item.
- `shelfkeep.catalog` – `MediaCatalog` answers read queries: `media_details`,
  `seen_history` (most recent first) and `media_list`, which returns one page
  of 20 of a user's items of one kind, optionally searched by text in the
  title or description, filtered by `MediaFilter` (rated or unrated) and
  sorted with `MediaSortInput`.
- `shelfkeep.media_service` – `MediaService` records progress with
  `ProgressUpdate` / `ProgressUpdateAction`, deletes seen items, commits new
  media with creators and genres, updates stored media, removes user–item
  links with no activity, deletes items no user has touched, and queues
  summary-recalculation and metadata-update jobs.
- `shelfkeep.openlibrary` – `OpenlibraryService` (search and work details) and
  `parse_date`.
- `shelfkeep.audible` – `AudibleService` (search and product details) and
  `audible_item_to_details`.
- `shelfkeep.books` – `BooksService` and `AudioBooksService` join a provider
  to the database: `search`, `commit_book` / `commit_audio_book` (return the
  stored item, fetching and storing it if it is new), `save_to_db` and
  `details_from_provider`.
- `shelfkeep.jobs` – job payloads (`ImportMediaJob`, `UserCreatedJob`,
  `AfterMediaSeenJob`, `RecalculateUserSummaryJob`, `UpdateMetadataJob`),
  `JobStorage`, a thread-safe in-memory FIFO queue, `after_media_seen_actions`,
  which decides how the default collections change once something has been
  seen, and `update_metadata_job`, which refreshes one item from its provider.
- `shelfkeep.importer.types` – import inputs and results
  (`DeployImportInput`, `ImportItem`, `ImportResult`, `ImportResultResponse`,
  `ImportFailedItem`, …) with dictionary round trips where they are stored.
- `shelfkeep.importer.goodreads` – `extract_user_id`, `parse_rss` and
  `import_goodreads`.
- `shelfkeep.importer.media_tracker` – `extract_review_information`,
  `convert_item` and `import_media_tracker`.
- `shelfkeep.importer.service` – `ImporterService` normalises an import input
  and queues an `ImportMediaJob`, and marks imports left unfinished for more
  than 24 hours as failed.

## Example

```python
from shelfkeep.store import Database
from shelfkeep.jobs import JobStorage
from shelfkeep.media_service import MediaService, ProgressUpdate, ProgressUpdateAction
from shelfkeep.catalog import MediaCatalog
from shelfkeep.models import MetadataLot

with Database(":memory:") as db:
    service = MediaService(db, JobStorage(), JobStorage(), JobStorage())
    metadata_id = service.commit_media(
        "OL45883W", MetadataLot.BOOK, "A Book", None, 2001, None,
        [], [], ["An Author"], ["Fiction"],
    )
    seen = service.progress_update(
        ProgressUpdate(metadata_id=metadata_id, action=ProgressUpdateAction.NOW),
        user_id=1,
    )
    history = MediaCatalog(db).seen_history(metadata_id, user_id=1)
    print(history[0].progress)  # 100
```

Deciding what happens to the default collections:

```python
from shelfkeep.jobs import after_media_seen_actions
from shelfkeep.models import MetadataLot

after_media_seen_actions(MetadataLot.BOOK, 100)
# [CollectionAction.REMOVE_FROM_WATCHLIST, CollectionAction.REMOVE_FROM_IN_PROGRESS]
```

Helpers for import sources:

```python
from shelfkeep.importer.goodreads import extract_user_id
from shelfkeep.importer.media_tracker import extract_review_information

extract_user_id("https://www.goodreads.com/user/show/1234-example")  # "1234"

review = extract_review_information("01/05/2023: [SPOILERS]\n\nThe ending was unexpected.")
review.spoiler  # True
review.text     # "The ending was unexpected."
```

## What it does not do

- There is no server, web interface or command-line program; everything is a
  library call.
- `JobStorage` only queues jobs. Nothing here runs a worker that takes queued
  jobs off and executes them, and there is no scheduler for the periodic
  clean-ups; call the `MediaService` and `ImporterService` methods yourself.
- `ImporterService` queues imports but does not write imported items into the
  database; the importers return an `ImportResult` for the caller to store.
- Only books and audio books have providers and stored specifics. Movies,
  shows, video games and podcasts exist as `MetadataLot` values but there is
  no service that searches for them or stores their details.
- There are no user accounts, authentication or user summaries.