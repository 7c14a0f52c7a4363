"""Audio book search and details from an Audible catalogue server."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from .catalog import LIMIT
from .models import (
    AUTHOR,
    PROJECT_NAME,
    AudioBookSource,
    AudioBookSpecifics,
    MediaDetails,
    MediaError,
    MediaSearchItem,
    MediaSearchResults,
    MetadataLot,
)

_PRIMARY_QUERY = {
    "response_groups": ",".join(["contributors", "media", "product_attrs"]),
    "image_sizes": ",".join(["2400"]),
}


def _parse_date(text: str) -> Optional[dt.date]:
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        return None


def _field(data: Mapping[str, Any], name: str) -> Any:
    try:
        return data[name]
    except (KeyError, TypeError) as exc:
        raise MediaError(f"Audible response is missing {name!r}") from exc


def audible_item_to_details(item: Mapping[str, Any]) -> MediaDetails:
    """Convert one Audible product record into media details."""
    images = item.get("product_images") or {}
    poster = images.get("2400")
    release = _parse_date(item.get("release_date") or "")
    return MediaDetails(
        identifier=str(_field(item, "asin")),
        lot=MetadataLot.AUDIO_BOOK,
        title=str(_field(item, "title")),
        description=item.get("merchandising_summary"),
        creators=[str(_field(a, "name")) for a in _field(item, "authors")],
        genres=[],
        publish_year=None if release is None else release.year,
        publish_date=release,
        specifics=AudioBookSpecifics(
            runtime=item.get("runtime_length_min"), source=AudioBookSource.AUDIBLE
        ),
        poster_images=[] if poster is None else [poster],
        backdrop_images=[],
    )


class AudibleService:
    """Fetches audio book details and search results from Audible."""

    def __init__(self, url: str, client: Optional[httpx.Client] = None) -> None:
        self._base = httpx.URL(url)
        self._client = client if client is not None else httpx.Client()
        self._headers = {"User-Agent": f"{AUTHOR}/{PROJECT_NAME}"}

    def _get_json(self, path: str, params: dict) -> Any:
        try:
            response = self._client.get(
                self._base.join(path), params=params, headers=self._headers
            )
            return response.json()
        except httpx.HTTPError as exc:
            raise MediaError(f"request to Audible failed: {exc}") from exc
        except ValueError as exc:
            raise MediaError(f"Audible sent invalid JSON: {exc}") from exc

    def details(self, identifier: str) -> MediaDetails:
        data = self._get_json(identifier, dict(_PRIMARY_QUERY))
        return audible_item_to_details(_field(data, "product"))

    def search(self, query: str, page: Optional[int] = None) -> MediaSearchResults:
        """One page of products matching ``query``, sorted by relevance."""
        params = {
            "title": query,
            "num_results": LIMIT,
            "page": (1 if page is None else page) - 1,
            "products_sort_by": "Relevance",
            **_PRIMARY_QUERY,
        }
        search = self._get_json("", params)
        items = []
        for product in _field(search, "products"):
            d = audible_item_to_details(product)
            items.append(
                MediaSearchItem(
                    identifier=d.identifier,
                    lot=MetadataLot.AUDIO_BOOK,
                    title=d.title,
                    poster_images=d.poster_images,
                    publish_year=d.publish_year,
                )
            )
        return MediaSearchResults(total=int(_field(search, "total_results")), items=items)