import datetime as dt

import httpx
import pytest

from shelfkeep.catalog import LIMIT
from shelfkeep.models import AUTHOR, PROJECT_NAME, BookSource, MediaError, MetadataLot
from shelfkeep.openlibrary import OpenlibraryService, parse_date

BASE = "https://openlibrary.example/"
COVERS = "https://covers.example"

ROUTES = {
    "/works/OL1W.json": {
        "key": "/works/OL1W",
        "title": "A Book",
        "description": {"type": "/type/text", "value": "A tale"},
        "covers": [42],
        "authors": [{"author": {"key": "/authors/OL9A"}}, {"key": "/authors/OL8A"}],
        "subjects": ["Fiction"],
    },
    "/works/OL1W/editions.json": {
        "entries": [
            {"publish_date": "Mar 3, 1999", "number_of_pages": 300},
            {"publish_date": "Jan 1, 2005"},
            {"publish_date": "1990"},
        ]
    },
    "/authors/OL9A.json": {"name": "Ann"},
    "/authors/OL8A.json": {"name": "Bob"},
    "/works/OL2W.json": {"key": "/works/OL2W", "title": "Plain", "description": "Just text"},
    "/works/OL2W/editions.json": {},
}


def make_service(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenlibraryService(BASE, COVERS, "M", client=client)


def routed(request):
    body = ROUTES.get(request.url.path)
    if body is None:
        return httpx.Response(404, text="not found")
    return httpx.Response(200, json=body)


def test_details_collects_everything():
    service = make_service(routed)
    details = service.details("OL1W")
    assert details.identifier == "OL1W"
    assert details.title == "A Book"
    assert details.description == "A tale"
    assert details.lot is MetadataLot.BOOK
    assert details.creators == ["Ann", "Bob"]
    assert details.genres == ["Fiction"]
    assert details.publish_year == 1999
    assert details.publish_date is None
    assert details.specifics.pages == 300
    assert details.specifics.source is BookSource.OPEN_LIBRARY
    assert details.poster_images == [service.get_cover_image_url(42)]
    assert details.backdrop_images == []


def test_details_with_text_description_and_no_editions():
    details = make_service(routed).details("OL2W")
    assert details.description == "Just text"
    assert details.specifics.pages == 0
    assert details.publish_year is None
    assert details.creators == []


def test_cover_image_url_format():
    service = make_service(routed)
    assert service.get_cover_image_url(7) == "https://covers.example/id/7-M.jpg?default=false"


def test_parse_date():
    assert parse_date("Mar 3, 1999") == dt.date(1999, 3, 3)
    assert parse_date("March 3, 1999") == dt.date(1999, 3, 3)
    assert parse_date("1999") is None
    assert parse_date("garbage") is None


def test_search_sends_query_and_maps_docs():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        seen["path"] = request.url.path
        seen["agent"] = request.headers["User-Agent"]
        return httpx.Response(
            200,
            json={
                "num_found": 57,
                "docs": [
                    {"key": "/works/OL5W", "title": "Five", "cover_i": 9, "first_publish_year": 2001},
                    {"key": "/works/OL6W", "title": "Six"},
                ],
            },
        )

    service = make_service(handler)
    results = service.search("dune", 2)
    assert seen["path"] == "/search.json"
    assert seen["params"]["q"] == "dune"
    assert seen["params"]["limit"] == str(LIMIT)
    assert seen["params"]["offset"] == str(LIMIT)
    assert seen["params"]["type"] == "work"
    assert seen["agent"] == f"{AUTHOR}/{PROJECT_NAME}"
    assert results.total == 57
    assert [i.identifier for i in results.items] == ["OL5W", "OL6W"]
    assert results.items[0].poster_images == [service.get_cover_image_url(9)]
    assert results.items[0].publish_year == 2001
    assert results.items[1].poster_images == []
    assert all(i.lot is MetadataLot.BOOK for i in results.items)


def test_invalid_json_raises():
    service = make_service(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(MediaError):
        service.details("OL1W")


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(MediaError):
        make_service(handler).search("x", 1)