"""Changes to the media catalogue: progress, cleanup, commits and job deployment."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .jobs import (
    AfterMediaSeenJob,
    JobStorage,
    RecalculateUserSummaryJob,
    UpdateMetadataJob,
)
from .models import (
    IdObject,
    MediaError,
    MetadataImage,
    MetadataImageLot,
    MetadataLot,
    SeenExtraInformation,
    SeenPodcastExtraInformation,
    SeenShowExtraInformation,
)
from .store import Database, MetadataRow, SeenRow

logger = logging.getLogger(__name__)


class ProgressUpdateAction(str, Enum):
    UPDATE = "Update"
    NOW = "Now"
    IN_THE_PAST = "InThePast"
    JUST_STARTED = "JustStarted"


@dataclass
class ProgressUpdate:
    """A user's report of progress on a media item.

    ``identifier`` should be set when the update comes from another source,
    so that repeating the same update is recognised.
    """

    metadata_id: int
    action: ProgressUpdateAction
    progress: Optional[int] = None
    date: Optional[dt.date] = None
    show_season_number: Optional[int] = None
    show_episode_number: Optional[int] = None
    podcast_episode_number: Optional[int] = None
    identifier: Optional[str] = None


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _today() -> dt.date:
    return _now().date()


def _images(poster_images, backdrop_images) -> list[MetadataImage]:
    return [MetadataImage(url=u, lot=MetadataImageLot.POSTER) for u in poster_images] + [
        MetadataImage(url=u, lot=MetadataImageLot.BACKDROP) for u in backdrop_images
    ]


class MediaService:
    """Operations that change stored media and user activity."""

    def __init__(
        self,
        db: Database,
        after_media_seen: JobStorage,
        update_metadata: JobStorage,
        recalculate_user_summary: JobStorage,
    ) -> None:
        self._db = db
        self._after_media_seen = after_media_seen
        self._update_metadata = update_metadata
        self._recalculate_user_summary = recalculate_user_summary

    def _require_metadata(self, metadata_id: int) -> MetadataRow:
        meta = self._db.get_metadata(metadata_id)
        if meta is None:
            raise MediaError("The record does not exist")
        return meta

    @staticmethod
    def _extra_information(
        lot: MetadataLot, input: ProgressUpdate
    ) -> Optional[SeenExtraInformation]:
        if lot is MetadataLot.SHOW:
            if input.show_season_number is None or input.show_episode_number is None:
                raise MediaError("a show needs a season and an episode number")
            return SeenShowExtraInformation(
                season=input.show_season_number, episode=input.show_episode_number
            )
        if lot is MetadataLot.PODCAST:
            if input.podcast_episode_number is None:
                raise MediaError("a podcast needs an episode number")
            return SeenPodcastExtraInformation(episode=input.podcast_episode_number)
        return None

    def progress_update(self, input: ProgressUpdate, user_id: int) -> IdObject:
        """Record progress and return the id of the affected seen record.

        If a seen record with the update's identifier already exists, nothing
        is recorded and the id of its media item is returned instead.
        """
        existing = self._db.find_seen_by_identifier(input.identifier)
        if existing is not None:
            return IdObject(id=existing.metadata_id)

        action = ProgressUpdateAction(input.action)
        if action is ProgressUpdateAction.UPDATE:
            underway = self._db.find_seen(user_id, input.metadata_id, in_progress_only=True)
            if len(underway) != 1:
                raise MediaError("There is no `seen` item underway")
            if input.progress is None:
                raise MediaError("an update needs a progress value")
            last_seen = replace(
                underway[0], progress=input.progress, last_updated_on=_now()
            )
            if input.progress == 100:
                last_seen.finished_on = _today()
            seen_item = self._db.update_seen(last_seen)
            meta = self._require_metadata(input.metadata_id)
        else:
            meta = self._require_metadata(input.metadata_id)
            finished_on = _today() if action is ProgressUpdateAction.NOW else input.date
            if action is ProgressUpdateAction.JUST_STARTED:
                progress, started_on = 0, _today()
            else:
                progress, started_on = 100, None
            seen_item = self._db.insert_seen(
                SeenRow(
                    user_id=user_id,
                    metadata_id=input.metadata_id,
                    progress=progress,
                    started_on=started_on,
                    finished_on=finished_on,
                    last_updated_on=_now(),
                    extra_information=self._extra_information(meta.lot, input),
                    identifier=input.identifier,
                )
            )

        try:
            self._after_media_seen.push(
                AfterMediaSeenJob(seen=seen_item, metadata_lot=meta.lot)
            )
        except Exception:
            logger.exception("Could not queue the after-seen job for %s", seen_item.id)
        return IdObject(id=seen_item.id)

    def deploy_recalculate_summary_job(self, user_id: int) -> str:
        """Queue a recalculation of the user's summary and return the job id."""
        return self._recalculate_user_summary.push(RecalculateUserSummaryJob(user_id=user_id))

    def delete_seen_item(self, seen_id: int, user_id: int) -> IdObject:
        seen = self._db.get_seen(seen_id)
        if seen is None:
            raise MediaError("This seen item does not exist")
        if seen.user_id != user_id:
            raise MediaError("This seen item does not belong to this user")
        self._db.delete_seen(seen_id)
        try:
            self.deploy_recalculate_summary_job(user_id)
        except Exception:
            logger.exception("Could not queue a summary recalculation for %s", user_id)
        return IdObject(id=seen_id)

    def cleanup_user_and_metadata_association(self) -> int:
        """Drop user-item links with no seen record, review or collection entry.

        Returns the number of links removed.
        """
        removed = 0
        collected: dict[int, set[int]] = {}
        for user_id, metadata_id in self._db.all_user_metadata():
            if user_id not in collected:
                collected[user_id] = set(self._db.collection_metadata_ids(user_id))
            activity = self._db.count_seen(user_id, metadata_id) + self._db.count_reviews(
                user_id, metadata_id
            )
            if activity == 0 and metadata_id not in collected[user_id]:
                logger.debug("Removing user_to_metadata = %s", (user_id, metadata_id))
                if self._db.delete_user_metadata(user_id, metadata_id):
                    removed += 1
        return removed

    def update_media(
        self,
        metadata_id: int,
        title: str,
        description: Optional[str],
        poster_images: list[str],
        backdrop_images: list[str],
    ) -> MetadataRow:
        """Replace the title, description and images of a stored item."""
        return self._db.update_metadata(
            metadata_id, title, description, _images(poster_images, backdrop_images)
        )

    def commit_media(
        self,
        identifier: str,
        lot: MetadataLot,
        title: str,
        description: Optional[str],
        publish_year: Optional[int],
        publish_date: Optional[dt.date],
        poster_images: list[str],
        backdrop_images: list[str],
        creator_names: list[str],
        genres: list[str],
    ) -> int:
        """Store a new item with its creators and genres; return its id."""
        metadata = self._db.insert_metadata(
            lot=MetadataLot(lot),
            title=title,
            identifier=identifier,
            description=description,
            publish_year=publish_year,
            publish_date=publish_date,
            images=_images(poster_images, backdrop_images),
        )
        for name in creator_names:
            self._db.link_creator(metadata.id, self._db.get_or_create_creator(name))
        for name in genres:
            self._db.link_genre(metadata.id, self._db.get_or_create_genre(name))
        return metadata.id

    def cleanup_metadata_with_associated_user_activities(self) -> int:
        """Delete items no user has any activity on; return how many were deleted."""
        deleted = 0
        for metadata in self._db.all_metadata():
            if self._db.count_metadata_users(metadata.id) == 0:
                if self._db.delete_metadata(metadata.id):
                    deleted += 1
        return deleted

    def deploy_update_metadata_job(self, metadata_id: int) -> str:
        """Queue a refresh of an item's metadata and return the job id."""
        meta = self._require_metadata(metadata_id)
        return self._update_metadata.push(UpdateMetadataJob(metadata=meta))