"""Meetup API client.

A thin wrapper around the Meetup HTTP API built on ``requests``.  Every
high level method returns a ``(data, error)`` tuple: on success
``error`` is ``None``; on failure ``data`` is ``None`` (or an empty
list) and ``error`` is a dictionary with ``status_code``, ``message``
and, for validation failures, the per-field ``errors`` map.

The client keeps the access token returned by :meth:`MeetupAPI.login`
and sends it as ``Authorization: Bearer <token>`` on later calls.

Example::

    api = MeetupAPI(base_url="http://localhost:8000")
    api.login("alice", "password123")
    for meet in api.iter_events(sort_by="EVENT_DATE"):
        print(meet["name"], meet["numAttendees"])
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

ApiError = Dict[str, Any]


class MeetupAPI:
    """Client for interacting with the Meetup API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_prefix: str = "/api/v1",
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            api_prefix: Path prefix of the versioned API.
            token: Optional access token obtained earlier.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + api_prefix
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[ApiError]]:
        """Perform an HTTP request to the API.

        Returns ``(data, error)``; see the module docstring.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            return None, self._error_from_response(exc)
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    @staticmethod
    def _error_from_response(exc: requests.HTTPError) -> ApiError:
        response = exc.response
        error: ApiError = {"status_code": None, "message": str(exc)}
        if response is None:
            return error
        error["status_code"] = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("detail")
            if isinstance(detail, str):
                error["message"] = detail
            if isinstance(body.get("errors"), dict):
                error["errors"] = body["errors"]
        elif response.text:
            error["message"] = response.text
        logger.error("API request failed (%s): %s", error["status_code"], error["message"])
        return error

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def signup(self, email: str, password: str, username: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request(
            "POST",
            "/auth/signup",
            json_body={"email": email, "password": password, "username": username},
        )

    def login(self, username: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Log in and remember the returned access token."""
        data, error = self._request(
            "POST", "/auth/login", json_body={"username": username, "password": password}
        )
        if data:
            self.token = data.get("accessToken")
        return data, error

    def me(self) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", "/auth/me")

    # ------------------------------------------------------------------
    # Meets
    # ------------------------------------------------------------------
    def create_meet(
        self,
        *,
        name: str,
        description: str,
        location: str,
        date: str,
        type: str,
        tags: Optional[List[str]] = None,
        images: Optional[List[str]] = None,
    ) -> Tuple[Optional[str], Optional[ApiError]]:
        """Create a meet and return its id."""
        data, error = self._request(
            "POST",
            "/meets/",
            json_body={
                "name": name,
                "description": description,
                "location": location,
                "date": date,
                "type": type,
                "tags": tags or [],
                "images": images or [],
            },
        )
        if error:
            return None, error
        return data.get("id"), None

    def list_events(
        self,
        *,
        limit: int = 10,
        cursor: Optional[str] = None,
        sort_by: Optional[str] = None,
        registered: bool = False,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Fetch one page of the feed: ``{"data", "hasMore", "cursor"}``."""
        params: Dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor
        if sort_by:
            params["sortBy"] = sort_by
        if registered:
            params["registered"] = "true"
        return self._request("GET", "/meets/", params=params)

    def iter_events(self, *, page_size: int = 10, **filters: Any) -> Iterator[Dict[str, Any]]:
        """Yield every meet in feed order, following cursors page by page.

        Raises ``RuntimeError`` if a page request fails midway.
        """
        cursor = None
        while True:
            page, error = self.list_events(limit=page_size, cursor=cursor, **filters)
            if error:
                raise RuntimeError(f"Listing meets failed: {error['message']}")
            yield from page["data"]
            if not page["hasMore"]:
                return
            cursor = page["cursor"]

    def get_event(self, event_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", f"/meets/{event_id}")

    def register(self, event_id: str) -> Tuple[bool, Optional[ApiError]]:
        """Register the logged-in user for a meet."""
        data, error = self._request("POST", f"/meets/{event_id}/register")
        if error:
            return False, error
        return bool(data), None

    def attendees(self, event_id: str) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        data, error = self._request("GET", f"/meets/{event_id}/attendees")
        if error:
            return [], error
        return data or [], None
