"""Import of a user's history from a MediaTracker server."""

from __future__ import annotations

import datetime as dt
import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..models import (
    AUTHOR,
    PROJECT_NAME,
    BookSource,
    BookSpecifics,
    MediaDetails,
    MediaError,
    MetadataLot,
)
from .types import (
    DeployMediaTrackerImportInput,
    ImportFailedItem,
    ImportFailStep,
    ImportItem,
    ImportItemRating,
    ImportItemReview,
    ImportItemSeen,
    ImportResult,
)

logger = logging.getLogger(__name__)

_REVIEW = re.compile(
    r"^(?P<date>\d{2}/\d{2}/\d{4}):(?P<spoiler>\s*\[SPOILERS\])?\n\n(?P<text>[\s\S]*)$",
    re.MULTILINE,
)

_MEDIA_TYPES = {
    "book": MetadataLot.BOOK,
    "movie": MetadataLot.MOVIE,
    "tv": MetadataLot.SHOW,
    "video_game": MetadataLot.VIDEO_GAME,
    "audiobook": MetadataLot.AUDIO_BOOK,
}

_REQUIRED_DETAIL_FIELDS = ("seenHistory", "seasons", "title")
_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def extract_review_information(text: str) -> Optional[ImportItemReview]:
    """Split a review written as ``dd/mm/yyyy: [SPOILERS]\\n\\ntext`` into its parts."""
    match = _REVIEW.search(text)
    if match is None:
        return None
    try:
        date = dt.datetime.strptime(match.group("date"), "%d/%m/%Y").replace(
            tzinfo=dt.timezone.utc
        )
    except ValueError as exc:
        raise MediaError(f"invalid review date {match.group('date')!r}") from exc
    spoiler_mark = match.group("spoiler")
    spoiler = spoiler_mark is not None and spoiler_mark.strip() == "[SPOILERS]"
    return ImportItemReview(text=match.group("text"), spoiler=spoiler, date=date)


def _lot(media_type: Any) -> MetadataLot:
    try:
        return _MEDIA_TYPES[media_type]
    except (KeyError, TypeError):
        raise MediaError(f"unknown media type {media_type!r}") from None


def _timestamp_ms(value: Any) -> Optional[dt.datetime]:
    if value is None:
        return None
    try:
        if isinstance(value, str):
            value = float(value) if "." in value else int(value)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError
    except (TypeError, ValueError):
        raise MediaError(f"invalid timestamp {value!r}") from None
    return _EPOCH + dt.timedelta(milliseconds=value)


def _openlibrary_key(key: str) -> str:
    return key.rstrip("/").rsplit("/", 1)[-1]


def _require(data: Mapping[str, Any], name: str) -> Any:
    value = data.get(name) if isinstance(data, Mapping) else None
    if value is None:
        raise MediaError(f"MediaTracker item is missing {name!r}")
    return value


def convert_item(
    item: Mapping[str, Any],
    details: Mapping[str, Any],
    identifier: str,
    lot: MetadataLot,
    need_details: bool,
) -> ImportItem:
    """Build an import item from a MediaTracker item and its details."""
    if need_details:
        target: Any = identifier
    else:
        target = MediaDetails(
            identifier=identifier,
            title=str(details["title"]),
            description=details.get("overview"),
            lot=lot,
            creators=list(details.get("authors") or []),
            specifics=BookSpecifics(
                pages=details.get("numberOfPages"), source=BookSource.GOODREADS
            ),
        )

    reviews = []
    user_rating = details.get("userRating")
    if user_rating is not None:
        text = user_rating.get("review")
        if text is not None:
            review = extract_review_information(text)
        else:
            review = ImportItemReview(text="", spoiler=False)
        reviews.append(
            ImportItemRating(
                id=str(_require(user_rating, "id")),
                review=review,
                rating=user_rating.get("rating"),
            )
        )

    episodes: dict[Any, Mapping[str, Any]] = {}
    for season in details.get("seasons") or []:
        for episode in season.get("episodes") or []:
            episodes.setdefault(episode.get("id"), episode)

    seen_history = []
    for seen in details.get("seenHistory") or []:
        season_number = episode_number = None
        episode_id = seen.get("episodeId")
        if episode_id is not None:
            episode = episodes.get(episode_id)
            if episode is None:
                raise MediaError(f"episode {episode_id} is not part of any season")
            season_number = episode["seasonNumber"]
            episode_number = episode["episodeNumber"]
        seen_history.append(
            ImportItemSeen(
                id=str(_require(seen, "id")),
                ended_on=_timestamp_ms(seen.get("date")),
                show_season_number=season_number,
                show_episode_number=episode_number,
            )
        )

    return ImportItem(
        source_id=str(_require(item, "id")),
        lot=lot,
        identifier=target,
        seen_history=seen_history,
        reviews=reviews,
    )


def _identifier(item: Mapping[str, Any], details: Mapping[str, Any]) -> str:
    media_type = item.get("mediaType")
    if media_type == "book":
        goodreads_id = details.get("goodreadsId")
        if goodreads_id is not None:
            return str(goodreads_id)
        return _openlibrary_key(str(_require(item, "openlibraryId")))
    if media_type in ("movie", "tv"):
        return str(_require(item, "tmdbId"))
    if media_type == "video_game":
        return str(_require(item, "igdbId"))
    if media_type == "audiobook":
        return str(_require(item, "audibleId"))
    raise MediaError(f"unknown media type {media_type!r}")


def _check_details(details: Any) -> Mapping[str, Any]:
    if not isinstance(details, Mapping):
        raise ValueError("details are not an object")
    missing = [name for name in _REQUIRED_DETAIL_FIELDS if details.get(name) is None]
    if missing:
        raise ValueError(f"missing field(s): {', '.join(missing)}")
    return details


def _run(client: httpx.Client, base: httpx.URL, headers: dict) -> ImportResult:
    try:
        items = client.get(base.join("items"), headers=headers).json()
    except httpx.HTTPError as exc:
        raise MediaError(f"could not fetch MediaTracker items: {exc}") from exc
    except ValueError as exc:
        raise MediaError(f"MediaTracker sent invalid items: {exc}") from exc
    if not isinstance(items, list):
        raise MediaError("MediaTracker items must be a list")

    result = ImportResult()
    total = len(items)
    for idx, item in enumerate(items):
        lot = _lot(item.get("mediaType"))
        item_id = _require(item, "id")
        try:
            response = client.get(base.join(f"details/{item_id}"), headers=headers)
        except httpx.HTTPError as exc:
            raise MediaError(f"could not fetch details for {item_id}: {exc}") from exc
        try:
            details = _check_details(response.json())
        except ValueError as exc:
            logger.error("Encountered error for id = %s: %s", item_id, exc)
            result.failed_items.append(
                ImportFailedItem(
                    lot=lot,
                    step=ImportFailStep.ITEM_DETAILS_FROM_SOURCE,
                    identifier=str(item_id),
                    error=str(exc),
                )
            )
            continue
        identifier = _identifier(item, details)
        logger.debug(
            "Got details for %s: %s (%d/%d)", item.get("mediaType"), item_id, idx, total
        )
        need_details = details.get("goodreadsId") is None
        result.media.append(convert_item(item, details, identifier, lot, need_details))
    return result


def import_media_tracker(
    input: DeployMediaTrackerImportInput, client: Optional[httpx.Client] = None
) -> ImportResult:
    """Read every seen item, with history and ratings, from a MediaTracker server."""
    base = httpx.URL(f"{input.api_url}/api/")
    headers = {"User-Agent": f"{AUTHOR}/{PROJECT_NAME}", "Access-Token": input.api_key}
    if client is None:
        with httpx.Client() as own_client:
            return _run(own_client, base, headers)
    return _run(client, base, headers)