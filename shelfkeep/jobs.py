"""Background job payloads, a simple job queue and job handlers."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, Optional, TypeVar

from .models import DefaultCollection, MediaDetails, MediaError, MetadataLot

logger = logging.getLogger(__name__)


@dataclass
class ImportMediaJob:
    NAME: ClassVar[str] = "shelfkeep::ImportMedia"
    user_id: int
    input: Any


@dataclass
class UserCreatedJob:
    NAME: ClassVar[str] = "shelfkeep::UserCreatedJob"
    user_id: int


@dataclass
class AfterMediaSeenJob:
    NAME: ClassVar[str] = "shelfkeep::AfterMediaSeenJob"
    seen: Any
    metadata_lot: MetadataLot


@dataclass
class RecalculateUserSummaryJob:
    NAME: ClassVar[str] = "shelfkeep::RecalculateUserSummaryJob"
    user_id: int


@dataclass
class UpdateMetadataJob:
    NAME: ClassVar[str] = "shelfkeep::UpdateMetadataJob"
    metadata: Any


class CollectionAction(Enum):
    """A change to one of a user's default collections."""

    ADD_TO_IN_PROGRESS = ("add", DefaultCollection.IN_PROGRESS)
    REMOVE_FROM_WATCHLIST = ("remove", DefaultCollection.WATCHLIST)
    REMOVE_FROM_IN_PROGRESS = ("remove", DefaultCollection.IN_PROGRESS)

    @property
    def is_add(self) -> bool:
        return self.value[0] == "add"

    @property
    def collection(self) -> DefaultCollection:
        return self.value[1]


J = TypeVar("J")


class JobStorage(Generic[J]):
    """A thread-safe FIFO queue of jobs, optionally restricted to one job type."""

    def __init__(self, job_type: Optional[type] = None) -> None:
        self._job_type = job_type
        self._queue: deque[tuple[str, J]] = deque()
        self._lock = threading.Lock()

    def push(self, job: J) -> str:
        """Queue a job and return its id."""
        if self._job_type is not None and not isinstance(job, self._job_type):
            raise TypeError(
                f"expected {self._job_type.__name__}, got {type(job).__name__}"
            )
        job_id = str(uuid.uuid4())
        with self._lock:
            self._queue.append((job_id, job))
        return job_id

    def pop(self) -> tuple[str, J]:
        """Remove and return the oldest queued job with its id."""
        with self._lock:
            if not self._queue:
                raise LookupError("no jobs queued")
            return self._queue.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)


def after_media_seen_actions(metadata_lot: MetadataLot, progress: int) -> list[CollectionAction]:
    """Collection changes to make after a user records progress on an item.

    Shows and podcasts stay "In Progress" because their last episode cannot be
    determined automatically; anything else finished leaves both default lists.
    """
    if metadata_lot in (MetadataLot.SHOW, MetadataLot.PODCAST):
        return [CollectionAction.ADD_TO_IN_PROGRESS]
    if progress == 100:
        return [
            CollectionAction.REMOVE_FROM_WATCHLIST,
            CollectionAction.REMOVE_FROM_IN_PROGRESS,
        ]
    return [CollectionAction.ADD_TO_IN_PROGRESS]


def _provider_for(providers: Mapping[MetadataLot, Any], lot: MetadataLot) -> Any:
    try:
        return providers[lot]
    except KeyError:
        raise MediaError(f"no provider configured for {lot}") from None


def update_metadata_job(
    job: UpdateMetadataJob, media_service: Any, providers: Mapping[MetadataLot, Any]
) -> MediaDetails:
    """Refresh one metadata record from its provider and return the fetched details."""
    metadata_id = job.metadata.id
    lot = MetadataLot(job.metadata.lot)
    logger.info("Updating metadata for %s", metadata_id)
    details = _provider_for(providers, lot).details_from_provider(metadata_id)
    try:
        media_service.update_media(
            metadata_id,
            details.title,
            details.description,
            details.poster_images,
            details.backdrop_images,
        )
    except Exception:
        logger.exception("Could not update media %s", metadata_id)
    if details.lot in (MetadataLot.SHOW, MetadataLot.PODCAST):
        _provider_for(providers, details.lot).update_details(metadata_id, details.specifics)
    return details