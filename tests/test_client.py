"""Tests for the requests-based API client against a stubbed session."""

import json

import pytest
import requests

from meetup_client import MeetupAPI


def make_response(status_code, body=None, url="http://testserver/api/v1/"):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.reason = "Test"
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    response.headers["Content-Type"] = "application/json"
    return response


class StubSession:
    """Replays canned responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def api_factory():
    def build(*responses):
        session = StubSession(*responses)
        return MeetupAPI(base_url="http://testserver/", session=session), session

    return build


def test_login_keeps_token_for_later_calls(api_factory):
    api, session = api_factory(
        make_response(200, {"accessToken": "tok", "tokenType": "bearer", "user": {"id": "u1"}}),
        make_response(200, True),
    )
    data, error = api.login("alice", "pw")
    assert error is None and data["user"]["id"] == "u1"

    ok, error = api.register("e1")
    assert ok is True and error is None
    assert session.calls[1]["url"] == "http://testserver/api/v1/meets/e1/register"
    assert session.calls[1]["headers"]["Authorization"] == "Bearer tok"
    assert "Authorization" not in session.calls[0]["headers"]


def test_iter_events_follows_cursors(api_factory):
    api, session = api_factory(
        make_response(200, {"data": [{"id": "e3"}, {"id": "e2"}], "hasMore": True, "cursor": "e2"}),
        make_response(200, {"data": [{"id": "e1"}], "hasMore": False, "cursor": None}),
    )
    assert [e["id"] for e in api.iter_events(page_size=2, sort_by="EVENT_DATE")] == ["e3", "e2", "e1"]
    assert session.calls[0]["params"] == {"limit": 2, "sortBy": "EVENT_DATE"}
    assert session.calls[1]["params"] == {"limit": 2, "cursor": "e2", "sortBy": "EVENT_DATE"}


def test_validation_errors_are_passed_through(api_factory):
    api, _ = api_factory(
        make_response(422, {"detail": "Validation failed", "errors": {"name": "Name is required"}})
    )
    meet_id, error = api.create_meet(
        name="", description="d", location="l", date="2026-11-01", type="VIRTUAL"
    )
    assert meet_id is None
    assert error == {
        "status_code": 422,
        "message": "Validation failed",
        "errors": {"name": "Name is required"},
    }


def test_connection_failures_have_no_status(api_factory):
    api, _ = api_factory(requests.ConnectionError("refused"))
    data, error = api.list_events()
    assert data is None
    assert error["status_code"] is None
    assert "refused" in error["message"]


def test_iter_events_raises_when_a_page_fails(api_factory):
    api, _ = api_factory(make_response(401, {"detail": "Sign in to list registered meets"}))
    with pytest.raises(RuntimeError, match="Sign in"):
        list(api.iter_events(registered=True))
