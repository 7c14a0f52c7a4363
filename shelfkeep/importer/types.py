"""Value types describing media imports and their results."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..models import MediaDetails, MediaError, MediaImportSource, MetadataLot


@dataclass
class ImportItemReview:
    text: str
    spoiler: bool = False
    date: Optional[dt.datetime] = None


@dataclass
class ImportItemRating:
    id: Optional[str] = None
    review: Optional[ImportItemReview] = None
    rating: Optional[int] = None


@dataclass
class ImportItemSeen:
    id: Optional[str] = None
    ended_on: Optional[dt.datetime] = None
    show_season_number: Optional[int] = None
    show_episode_number: Optional[int] = None
    podcast_episode_number: Optional[int] = None


@dataclass
class ImportItem:
    """One item read from an import source.

    ``identifier`` is either the provider identifier still to be looked up,
    or details that are already complete and only need storing.
    """

    source_id: str
    lot: MetadataLot
    identifier: Union[str, MediaDetails]
    seen_history: list[ImportItemSeen] = field(default_factory=list)
    reviews: list[ImportItemRating] = field(default_factory=list)

    @property
    def needs_details(self) -> bool:
        return isinstance(self.identifier, str)


class ImportFailStep(str, Enum):
    """The stage at which importing an item failed."""

    ITEM_DETAILS_FROM_SOURCE = "ItemDetailsFromSource"
    MEDIA_DETAILS_FROM_PROVIDER = "MediaDetailsFromProvider"


@dataclass(frozen=True)
class ImportFailedItem:
    lot: MetadataLot
    step: ImportFailStep
    identifier: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "lot": MetadataLot(self.lot).value,
            "step": ImportFailStep(self.step).value,
            "identifier": self.identifier,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ImportFailedItem:
        try:
            return cls(
                lot=MetadataLot(data["lot"]),
                step=ImportFailStep(data["step"]),
                identifier=str(data["identifier"]),
                error=data.get("error"),
            )
        except (KeyError, ValueError) as exc:
            raise MediaError(f"malformed failed import item: {exc}") from exc


@dataclass
class ImportResult:
    media: list[ImportItem] = field(default_factory=list)
    failed_items: list[ImportFailedItem] = field(default_factory=list)


@dataclass(frozen=True)
class ImportDetails:
    total: int

    def __post_init__(self) -> None:
        if self.total < 0:
            raise ValueError("the number of imported items cannot be negative")


@dataclass
class ImportResultResponse:
    """The summary stored with a finished import report."""

    source: MediaImportSource
    import_details: ImportDetails
    failed_items: list[ImportFailedItem] = field(default_factory=list)

    @classmethod
    def from_import(cls, source: MediaImportSource, result: ImportResult) -> ImportResultResponse:
        return cls(
            source=MediaImportSource(source),
            import_details=ImportDetails(total=len(result.media) - len(result.failed_items)),
            failed_items=list(result.failed_items),
        )

    def to_dict(self) -> dict:
        return {
            "source": MediaImportSource(self.source).value,
            "import": {"total": self.import_details.total},
            "failed_items": [f.to_dict() for f in self.failed_items],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ImportResultResponse:
        try:
            return cls(
                source=MediaImportSource(data["source"]),
                import_details=ImportDetails(total=int(data["import"]["total"])),
                failed_items=[ImportFailedItem.from_dict(f) for f in data["failed_items"]],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MediaError(f"malformed import result: {exc}") from exc


@dataclass
class DeployMediaTrackerImportInput:
    api_url: str
    api_key: str


@dataclass
class DeployGoodreadsImportInput:
    profile_url: str


@dataclass
class DeployImportInput:
    source: MediaImportSource
    media_tracker: Optional[DeployMediaTrackerImportInput] = None
    goodreads: Optional[DeployGoodreadsImportInput] = None

    def to_dict(self) -> dict:
        return {
            "source": MediaImportSource(self.source).value,
            "media_tracker": None
            if self.media_tracker is None
            else {"api_url": self.media_tracker.api_url, "api_key": self.media_tracker.api_key},
            "goodreads": None
            if self.goodreads is None
            else {"profile_url": self.goodreads.profile_url},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DeployImportInput:
        try:
            tracker = data.get("media_tracker")
            goodreads = data.get("goodreads")
            return cls(
                source=MediaImportSource(data["source"]),
                media_tracker=None
                if tracker is None
                else DeployMediaTrackerImportInput(tracker["api_url"], tracker["api_key"]),
                goodreads=None
                if goodreads is None
                else DeployGoodreadsImportInput(goodreads["profile_url"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MediaError(f"malformed import input: {exc}") from exc