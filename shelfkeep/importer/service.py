"""Deployment and housekeeping of media import jobs."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import replace
from typing import Any, Optional

from ..jobs import ImportMediaJob, JobStorage
from ..models import MediaError
from ..store import Database
from .goodreads import extract_user_id
from .types import DeployImportInput

logger = logging.getLogger(__name__)

_STALE_AFTER = dt.timedelta(hours=24)


def _as_utc(value: Any) -> dt.datetime:
    if isinstance(value, str):
        value = dt.datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


class ImporterService:
    """Queues imports for users and marks abandoned ones as failed."""

    def __init__(self, db: Database, import_jobs: JobStorage) -> None:
        self._db = db
        self._import_jobs = import_jobs

    def deploy_import(self, user_id: int, input: DeployImportInput) -> str:
        """Normalise the import input, queue an import job and return its id."""
        tracker = input.media_tracker
        if tracker is not None:
            tracker = replace(tracker, api_url=tracker.api_url.rstrip("/"))
        goodreads = input.goodreads
        if goodreads is not None:
            goodreads_user = extract_user_id(goodreads.profile_url)
            if goodreads_user is None:
                raise MediaError(
                    f"no user id in Goodreads profile URL {goodreads.profile_url!r}"
                )
            goodreads = replace(goodreads, profile_url=goodreads_user)
        job_input = replace(input, media_tracker=tracker, goodreads=goodreads)
        return self._import_jobs.push(ImportMediaJob(user_id=user_id, input=job_input))

    def invalidate_import_jobs(self, now: Optional[dt.datetime] = None) -> list[int]:
        """Mark unfinished imports started over a day ago as failed; return their ids."""
        current = _as_utc(now if now is not None else dt.datetime.now(dt.timezone.utc))
        invalidated = []
        for report in self._db.pending_import_reports():
            if current - _as_utc(report.started_on) > _STALE_AFTER:
                logger.info("Invalidating job with id = %s", report.id)
                self._db.set_import_success(report.id, False)
                invalidated.append(report.id)
        return invalidated