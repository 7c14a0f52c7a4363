import pytest

from shelfkeep import models
from shelfkeep.models import (
    DefaultCollection,
    MediaDetails,
    MediaError,
    MetadataLot,
    SeenPodcastExtraInformation,
    SeenShowExtraInformation,
    core_details,
    core_enabled_features,
    seen_extra_from_json,
    seen_extra_to_json,
)


def test_show_extra_encodes_with_tag():
    encoded = seen_extra_to_json(SeenShowExtraInformation(season=2, episode=5))
    assert encoded == {"Show": {"season": 2, "episode": 5}}


def test_podcast_extra_encodes_with_tag():
    encoded = seen_extra_to_json(SeenPodcastExtraInformation(episode=9))
    assert encoded == {"Podcast": {"episode": 9}}


@pytest.mark.parametrize(
    "info",
    [SeenShowExtraInformation(season=1, episode=3), SeenPodcastExtraInformation(episode=4)],
)
def test_extra_round_trip(info):
    assert seen_extra_from_json(seen_extra_to_json(info)) == info


def test_extra_none_passes_through():
    assert seen_extra_to_json(None) is None
    assert seen_extra_from_json(None) is None


def test_extra_unknown_tag_rejected():
    with pytest.raises(MediaError):
        seen_extra_from_json({"Movie": {"episode": 1}})


def test_extra_missing_field_rejected():
    with pytest.raises(MediaError):
        seen_extra_from_json({"Show": {"season": 1}})


def test_extra_multiple_tags_rejected():
    with pytest.raises(MediaError):
        seen_extra_from_json({"Show": {"season": 1, "episode": 1}, "Podcast": {"episode": 1}})


def test_enabled_features_order_and_flags():
    features = core_enabled_features({MetadataLot.BOOK: True, MetadataLot.PODCAST: True})
    assert [f.name for f in features] == [
        MetadataLot.BOOK,
        MetadataLot.MOVIE,
        MetadataLot.SHOW,
        MetadataLot.VIDEO_GAME,
        MetadataLot.AUDIO_BOOK,
        MetadataLot.PODCAST,
    ]
    enabled = {f.name for f in features if f.enabled}
    assert enabled == {MetadataLot.BOOK, MetadataLot.PODCAST}


def test_core_details_uses_module_constants():
    details = core_details()
    assert details.version == models.VERSION
    assert details.author_name == models.AUTHOR
    assert details.repository_link == models.REPOSITORY_LINK


def test_lot_string_form_is_value():
    assert str(MetadataLot.VIDEO_GAME) == MetadataLot.VIDEO_GAME.value
    assert MetadataLot("AudioBook") is MetadataLot.AUDIO_BOOK


def test_default_collection_names():
    assert DefaultCollection("In Progress") is DefaultCollection.IN_PROGRESS
    assert DefaultCollection("Watchlist") is DefaultCollection.WATCHLIST
    assert str(DefaultCollection.IN_PROGRESS) == "In Progress"
    assert str(DefaultCollection.WATCHLIST) == "Watchlist"


def test_media_details_lists_are_independent():
    first = MediaDetails(identifier="a", title="A", lot=MetadataLot.BOOK, specifics=None)
    second = MediaDetails(identifier="b", title="B", lot=MetadataLot.BOOK, specifics=None)
    first.creators.append("Someone")
    assert second.creators == []