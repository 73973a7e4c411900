"""Tests for the paginated meet feed."""

import asyncio

import pytest

from meetup_api.app.core.errors import ValidationError
from meetup_api.app.schemas.event import SortBy
from meetup_api.app.services.event_service import EventService

FEED = "/api/v1/meets/"


def collect(client, headers=None, **params):
    """Follow cursors until the feed is exhausted; returns (ids, pages)."""
    ids, pages = [], 0
    cursor = None
    while True:
        query = dict(params)
        if cursor:
            query["cursor"] = cursor
        response = client.get(FEED, params=query, headers=headers or {})
        assert response.status_code == 200, response.text
        page = response.json()
        pages += 1
        ids.extend(event["id"] for event in page["data"])
        if not page["hasMore"]:
            assert page["cursor"] is None
            return ids, pages
        assert page["cursor"] == page["data"][-1]["id"]
        cursor = page["cursor"]


def test_date_posted_pages_newest_first(client, make_user, make_meet, clock):
    alice = make_user("Alice")
    clock("2026-10-01T10:00:00.000000+00:00")
    first = make_meet(alice, name="E1", date="2026-11-01T10:00:00Z")
    clock("2026-10-02T10:00:00.000000+00:00")
    second = make_meet(alice, name="E2", date="2026-11-02T10:00:00Z")

    page = client.get(FEED, params={"limit": 1, "sortBy": "DATE_POSTED"}).json()
    assert [e["id"] for e in page["data"]] == [second]
    assert page["hasMore"] is True
    assert page["cursor"] == second

    page = client.get(FEED, params={"limit": 1, "sortBy": "DATE_POSTED", "cursor": second}).json()
    assert [e["id"] for e in page["data"]] == [first]
    assert page["hasMore"] is False
    assert page["cursor"] is None


def test_event_date_ordering_ignores_posting_time(client, make_user, make_meet, clock):
    alice = make_user("Alice")
    clock("2026-10-01T10:00:00.000000+00:00")
    later = make_meet(alice, date="2026-12-24T18:00:00Z")
    clock("2026-10-02T10:00:00.000000+00:00")
    sooner = make_meet(alice, date="2026-11-05T18:00:00Z")

    by_posted, _ = collect(client, limit=10)
    by_date, _ = collect(client, limit=10, sortBy="EVENT_DATE")
    assert by_posted == [sooner, later]
    assert by_date == [later, sooner]


@pytest.mark.parametrize("limit", [1, 2, 3, 7])
def test_pagination_visits_every_event_once_despite_ties(client, make_user, make_meet, clock, limit):
    alice = make_user("Alice")
    clock("2026-10-01T10:00:00.000000+00:00")
    tied = [make_meet(alice, name=f"tied {i}") for i in range(5)]
    clock("2026-10-03T10:00:00.000000+00:00")
    newest = make_meet(alice, name="newest")

    ids, pages = collect(client, limit=limit)
    assert ids == [newest] + sorted(tied, reverse=True)
    # limit + 1 look-ahead means no trailing empty page.
    assert pages == -(-len(ids) // limit)


def test_page_never_exceeds_limit(client, make_user, make_meet):
    alice = make_user("Alice")
    for i in range(4):
        make_meet(alice, name=f"meet {i}")
    for limit in (1, 3, 4, 100):
        page = client.get(FEED, params={"limit": limit}).json()
        assert len(page["data"]) <= limit
        assert page["hasMore"] is (limit < 4)


def test_default_limit_is_ten(client, make_user, make_meet):
    alice = make_user("Alice")
    for i in range(11):
        make_meet(alice, name=f"meet {i}")
    page = client.get(FEED).json()
    assert len(page["data"]) == 10
    assert page["hasMore"] is True


def test_unknown_cursor_yields_empty_page(client, make_user, make_meet):
    make_meet(make_user("Alice"))
    response = client.get(FEED, params={"cursor": "does-not-exist"})
    assert response.status_code == 200
    assert response.json() == {"data": [], "hasMore": False, "cursor": None}


@pytest.mark.parametrize("limit", [0, 101, -3])
def test_out_of_range_limit_is_rejected(client, limit):
    response = client.get(FEED, params={"limit": limit})
    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"limit"}


def test_service_rejects_out_of_range_limit_before_querying():
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(EventService.list_events(limit=0, sort_by=SortBy.EVENT_DATE))
    assert "limit" in excinfo.value.errors


def test_registered_filter_is_per_caller(client, make_user, make_meet):
    alice, bob = make_user("Alice"), make_user("Bob")
    event_id = make_meet(alice)
    make_meet(alice, name="Unattended")
    assert client.post(f"/api/v1/meets/{event_id}/register", headers=bob["headers"]).json() is True

    bob_ids, _ = collect(client, headers=bob["headers"], registered="true")
    alice_ids, _ = collect(client, headers=alice["headers"], registered="true")
    assert bob_ids == [event_id]
    assert alice_ids == []


def test_registered_filter_requires_identity(client):
    response = client.get(FEED, params={"registered": "true"})
    assert response.status_code == 401


def test_feed_items_carry_counts_and_caller_flags(client, make_user, make_meet):
    alice, bob, carol = make_user("Alice"), make_user("Bob"), make_user("Carol")
    popular = make_meet(alice, name="Popular")
    quiet = make_meet(alice, name="Quiet")
    for user in (bob, carol):
        client.post(f"/api/v1/meets/{popular}/register", headers=user["headers"])

    as_bob = {e["id"]: e for e in client.get(FEED, headers=bob["headers"]).json()["data"]}
    assert as_bob[popular]["numAttendees"] == 2
    assert as_bob[popular]["isRegistered"] is True
    assert as_bob[quiet]["numAttendees"] == 0
    assert as_bob[quiet]["isRegistered"] is False

    anonymous = client.get(FEED).json()["data"]
    assert all(e["isRegistered"] is False for e in anonymous)
    assert anonymous[0]["coordinator"]["name"] == "Alice"
    assert anonymous[0]["coordinator"]["profilePicture"].startswith("data:image/svg+xml")


def test_unknown_sort_key_is_rejected(client):
    response = client.get(FEED, params={"sortBy": "POPULARITY"})
    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"sortBy"}
