"""Book search and details from an Open Library server."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from .catalog import LIMIT
from .models import (
    AUTHOR,
    PROJECT_NAME,
    BookSource,
    BookSpecifics,
    MediaDetails,
    MediaError,
    MediaSearchItem,
    MediaSearchResults,
    MetadataLot,
)

_DATE_FORMATS = ("%b %d, %Y", "%B %d, %Y")
_SEARCH_FIELDS = ",".join(["key", "title", "author_name", "cover_i", "first_publish_year"])


def parse_date(text: str) -> Optional[dt.date]:
    """Parse an edition's publish date such as ``"Mar 3, 1999"``; None if it has no day."""
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    return None


def _get_key(key: str) -> str:
    """The last path segment of an Open Library key such as ``/works/OL1W``."""
    return key.rstrip("/").rsplit("/", 1)[-1]


def _field(data: Mapping[str, Any], name: str) -> Any:
    try:
        return data[name]
    except (KeyError, TypeError) as exc:
        raise MediaError(f"Open Library response is missing {name!r}") from exc


def _author_key(entry: Mapping[str, Any]) -> str:
    if isinstance(entry, Mapping):
        if "key" in entry:
            return str(entry["key"])
        author = entry.get("author")
        if isinstance(author, Mapping) and "key" in author:
            return str(author["key"])
    raise MediaError("Open Library author entry has no key")


def _description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and "value" in value:
        return str(value["value"])
    raise MediaError("Open Library description has an unknown shape")


class OpenlibraryService:
    """Fetches book details and search results from Open Library."""

    def __init__(
        self,
        url: str,
        cover_image_url: str,
        cover_image_size: str,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base = httpx.URL(url)
        self._image_url = cover_image_url
        self._image_size = str(cover_image_size)
        self._client = client if client is not None else httpx.Client()
        self._headers = {"User-Agent": f"{AUTHOR}/{PROJECT_NAME}"}

    def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        try:
            response = self._client.get(
                self._base.join(path), params=params, headers=self._headers
            )
            return response.json()
        except httpx.HTTPError as exc:
            raise MediaError(f"request to Open Library failed: {exc}") from exc
        except ValueError as exc:
            raise MediaError(f"Open Library sent invalid JSON: {exc}") from exc

    def get_cover_image_url(self, cover_id: int) -> str:
        return f"{self._image_url}/id/{cover_id}-{self._image_size}.jpg?default=false"

    def details(self, identifier: str) -> MediaDetails:
        """Details of one work, with authors, covers and edition data."""
        data = self._get_json(f"works/{identifier}.json")
        editions = self._get_json(f"works/{identifier}/editions.json")
        entries = (editions.get("entries") if isinstance(editions, Mapping) else None) or []

        all_pages = [e["number_of_pages"] for e in entries if e.get("number_of_pages") is not None]
        num_pages = sum(all_pages) // len(all_pages) if all_pages else 0
        dates = [
            d
            for d in (parse_date(e["publish_date"]) for e in entries if e.get("publish_date"))
            if d is not None
        ]
        first_release = min(dates, default=None)

        creators = [
            str(_field(self._get_json(f"{_author_key(a)}.json"), "name"))
            for a in data.get("authors") or []
        ]
        return MediaDetails(
            identifier=_get_key(str(_field(data, "key"))),
            title=str(_field(data, "title")),
            description=_description(data.get("description")),
            lot=MetadataLot.BOOK,
            creators=creators,
            genres=list(data.get("subjects") or []),
            poster_images=[self.get_cover_image_url(c) for c in data.get("covers") or []],
            backdrop_images=[],
            publish_year=None if first_release is None else first_release.year,
            publish_date=None,
            specifics=BookSpecifics(pages=num_pages, source=BookSource.OPEN_LIBRARY),
        )

    def search(self, query: str, page: Optional[int] = None) -> MediaSearchResults:
        """One page of works matching ``query``."""
        search = self._get_json(
            "search.json",
            params={
                "q": query,
                "fields": _SEARCH_FIELDS,
                "offset": ((page or 0) - 1) * LIMIT,
                "limit": LIMIT,
                "type": "work",
            },
        )
        items = [
            MediaSearchItem(
                identifier=_get_key(str(_field(doc, "key"))),
                lot=MetadataLot.BOOK,
                title=str(_field(doc, "title")),
                poster_images=[]
                if doc.get("cover_i") is None
                else [self.get_cover_image_url(doc["cover_i"])],
                publish_year=doc.get("first_publish_year"),
            )
            for doc in _field(search, "docs")
        ]
        return MediaSearchResults(total=int(_field(search, "num_found")), items=items)