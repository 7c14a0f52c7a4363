"""Import of a user's shelves from a Goodreads RSS feed."""

from __future__ import annotations

import datetime as dt
import re
import xml.etree.ElementTree as ET
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

from ..models import BookSource, BookSpecifics, MediaDetails, MediaError, MetadataLot
from .types import (
    DeployGoodreadsImportInput,
    ImportItem,
    ImportItemRating,
    ImportItemReview,
    ImportItemSeen,
    ImportResult,
)

_USER_ID = re.compile(r"/(\d+)-")
_INTEGER = re.compile(r"[+-]?\d+")

_REQUIRED_FIELDS = (
    "title",
    "book_description",
    "author_name",
    "book_large_image_url",
    "book_id",
    "book_published",
    "user_shelves",
    "user_read_at",
    "user_review",
    "user_rating",
)


def extract_user_id(url: str) -> Optional[str]:
    """The numeric user id in a Goodreads profile URL, if there is one."""
    match = _USER_ID.search(url)
    return match.group(1) if match else None


def _parse_int(text: str) -> Optional[int]:
    return int(text) if _INTEGER.fullmatch(text) else None


def _parse_rfc2822(text: str) -> Optional[dt.datetime]:
    try:
        value = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _fields(item: ET.Element) -> dict[str, str]:
    values = {}
    for name in _REQUIRED_FIELDS:
        element = item.find(name)
        if element is None:
            raise MediaError(f"feed item is missing <{name}>")
        values[name] = (element.text or "").strip()
    pages = item.find("book/num_pages")
    values["num_pages"] = "" if pages is None else (pages.text or "").strip()
    if item.find("book") is None:
        raise MediaError("feed item is missing <book>")
    return values


def _convert(values: dict[str, str]) -> ImportItem:
    book_id = _parse_int(values["book_id"])
    if book_id is None:
        raise MediaError(f"invalid book id {values['book_id']!r}")

    rating = ImportItemRating()
    if values["user_review"]:
        rating.review = ImportItemReview(text=values["user_review"], spoiler=False)
    if values["user_rating"]:
        score = _parse_int(values["user_rating"])
        if score is None:
            raise MediaError(f"invalid rating {values['user_rating']!r}")
        if score != 0:
            rating.rating = score
    reviews = [rating] if rating.review is not None or rating.rating is not None else []

    identifier = str(book_id)
    return ImportItem(
        source_id=identifier,
        lot=MetadataLot.BOOK,
        identifier=MediaDetails(
            identifier=identifier,
            title=values["title"],
            description=values["book_description"],
            lot=MetadataLot.BOOK,
            creators=[values["author_name"]],
            poster_images=[values["book_large_image_url"]],
            publish_year=_parse_int(values["book_published"]),
            specifics=BookSpecifics(
                pages=_parse_int(values["num_pages"]), source=BookSource.GOODREADS
            ),
        ),
        seen_history=[ImportItemSeen(ended_on=_parse_rfc2822(values["user_read_at"]))],
        reviews=reviews,
    )


def parse_rss(content: str) -> ImportResult:
    """Turn the text of a Goodreads shelf RSS feed into import items."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise MediaError(f"invalid Goodreads feed: {exc}") from exc
    channel = root.find("channel")
    if channel is None:
        raise MediaError("Goodreads feed has no channel")
    return ImportResult(
        media=[_convert(_fields(item)) for item in channel.findall("item")],
        failed_items=[],
    )


def import_goodreads(
    input: DeployGoodreadsImportInput,
    rss_url: str,
    client: Optional[httpx.Client] = None,
) -> ImportResult:
    """Fetch the feed for the user id in ``input.profile_url`` and parse it."""
    url = f"{rss_url}/{input.profile_url}"
    try:
        if client is None:
            with httpx.Client() as own_client:
                content = own_client.get(url).text
        else:
            content = client.get(url).text
    except httpx.HTTPError as exc:
        raise MediaError(f"could not fetch the Goodreads feed: {exc}") from exc
    return parse_rss(content)