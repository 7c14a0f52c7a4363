import datetime as dt

import pytest

from shelfkeep.importer.service import ImporterService
from shelfkeep.importer.types import (
    DeployGoodreadsImportInput,
    DeployImportInput,
    DeployMediaTrackerImportInput,
)
from shelfkeep.jobs import ImportMediaJob, JobStorage
from shelfkeep.models import MediaError, MediaImportSource
from shelfkeep.store import Database

UTC = dt.timezone.utc


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "shelf.sqlite"))
    yield database
    database.close()


@pytest.fixture
def queue():
    return JobStorage(ImportMediaJob)


def test_deploy_goodreads_import_extracts_user_id(db, queue):
    service = ImporterService(db, queue)
    profile = "https://www.goodreads.com/user/show/143396636-ignisda"
    job_input = DeployImportInput(
        source=MediaImportSource.GOODREADS,
        goodreads=DeployGoodreadsImportInput(profile_url=profile),
    )
    job_id = service.deploy_import(7, job_input)
    popped_id, job = queue.pop()
    assert popped_id == job_id
    assert job.user_id == 7
    assert job.input.goodreads.profile_url == "143396636"
    assert job_input.goodreads.profile_url == profile


def test_deploy_media_tracker_import_trims_slashes(db, queue):
    service = ImporterService(db, queue)
    job_input = DeployImportInput(
        source=MediaImportSource.MEDIA_TRACKER,
        media_tracker=DeployMediaTrackerImportInput(
            api_url="http://tracker.example.com//", api_key="placeholder"
        ),
    )
    service.deploy_import(1, job_input)
    assert len(queue) == 1
    _, job = queue.pop()
    assert job.input.media_tracker.api_url == "http://tracker.example.com"
    assert job.input.media_tracker.api_key == "placeholder"


def test_deploy_goodreads_import_invalid_url(db, queue):
    service = ImporterService(db, queue)
    job_input = DeployImportInput(
        source=MediaImportSource.GOODREADS,
        goodreads=DeployGoodreadsImportInput(
            profile_url="https://www.goodreads.com/user/show/invalid-url"
        ),
    )
    with pytest.raises(MediaError):
        service.deploy_import(1, job_input)
    assert len(queue) == 0


def test_invalidate_import_jobs_only_stale(db, queue):
    now = dt.datetime(2023, 6, 1, 12, 0, tzinfo=UTC)
    db.insert_import_report(1, MediaImportSource.GOODREADS, now - dt.timedelta(hours=25))
    db.insert_import_report(1, MediaImportSource.MEDIA_TRACKER, now - dt.timedelta(hours=1))
    before = {r.id: r for r in db.pending_import_reports()}
    assert len(before) == 2
    stale_id = next(
        i for i, r in before.items() if r.source == MediaImportSource.GOODREADS
    )

    service = ImporterService(db, queue)
    assert service.invalidate_import_jobs(now) == [stale_id]

    remaining = [r.id for r in db.pending_import_reports()]
    assert stale_id not in remaining
    assert len(remaining) == 1
    assert service.invalidate_import_jobs(now) == []