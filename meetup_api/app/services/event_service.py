"""
Business logic for events ("meets").

The feed is cursor paginated.  Each ordering is a total order: the sort
column descending, then ``id`` descending, so rows sharing a timestamp
are never skipped or repeated across pages.  The cursor handed back to
the client is the id of the last event on the page; the next page
resumes strictly after it.

Attendee counts and the caller's own registrations are fetched with one
query each per page rather than one query per event.
"""

import json
import logging
import sqlite3
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Dict, List, Optional, Tuple

from ..core.config import settings
from ..core.db import get_connection, new_id, to_utc_iso, utcnow
from ..core.errors import AuthorizationError, NotFoundError, ValidationError
from ..schemas.event import EventCreate, EventPage, EventRead, SortBy
from ..schemas.user import UserSummary

logger = logging.getLogger(__name__)

# sortBy -> (column, direction).  Ties are always broken by id in the
# same direction.
SORT_ORDER: Dict[SortBy, Tuple[str, str]] = {
    SortBy.DATE_POSTED: ("created_at", "DESC"),
    SortBy.EVENT_DATE: ("date", "DESC"),
}

EVENT_SELECT = """
    SELECT e.id, e.name, e.description, e.location_name, e.date, e.type,
           e.images, e.tags, e.created_at, e.updated_at,
           u.id AS coordinator_id,
           u.name AS coordinator_name,
           u.profile_picture AS coordinator_picture
    FROM events e
    JOIN users u ON u.id = e.coordinator_id
"""


def parse_event_date(value: str) -> Optional[datetime]:
    """Parse an ISO‑8601 or RFC 1123 date string.

    ISO strings may end in ``Z``.  RFC 1123 is what browsers produce from
    ``Date.toUTCString()`` (``Tue, 19 Oct 2026 10:00:00 GMT``).  Returns
    ``None`` when neither form matches.
    """
    value = value.strip()
    if not value:
        return None
    iso = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def _clean_list(values: List[str]) -> List[str]:
    return [v.strip() for v in values if v and v.strip()]


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class EventService:
    """Service for creating and listing events."""

    @staticmethod
    def validate(data: EventCreate) -> Tuple[Dict[str, str], Optional[str]]:
        """Check an event payload field by field.

        Returns the error map (empty when valid) and the date normalised to
        a UTC ISO string.
        """
        errors: Dict[str, str] = {}
        if not data.name.strip():
            errors["name"] = "Name is required"
        if not data.description.strip():
            errors["description"] = "Description is required"
        if not data.location.strip():
            errors["location"] = "Location name is required (zoom link, address, etc.)"
        parsed_date = parse_event_date(data.date)
        event_date = None
        if parsed_date is None:
            errors["date"] = "Date must be an ISO-8601 or RFC 1123 timestamp"
        else:
            try:
                event_date = to_utc_iso(parsed_date)
            except (OverflowError, ValueError):
                errors["date"] = "Date is out of range"
        return errors, event_date

    @classmethod
    async def create_event(cls, data: EventCreate, current_user: Optional[dict]) -> str:
        """Persist a new event owned by the caller and return its id."""
        if current_user is None:
            raise AuthorizationError()
        errors, event_date = cls.validate(data)
        if errors:
            raise ValidationError(errors)

        event_id = new_id()
        now = utcnow()
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT INTO events (id, name, description, location_name, date, type,
                                    images, tags, coordinator_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event_id,
                    data.name.strip(),
                    data.description.strip(),
                    data.location.strip(),
                    event_date,
                    data.type.value,
                    json.dumps(_clean_list(data.images)),
                    json.dumps(_clean_list(data.tags)),
                    current_user["user_id"],
                    now,
                    now,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s created event %s (%s)", current_user["user_id"], event_id, data.name)
        return event_id

    @classmethod
    async def list_events(
        cls,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        sort_by: SortBy = SortBy.DATE_POSTED,
        registered_only: bool = False,
        current_user: Optional[dict] = None,
    ) -> EventPage:
        """Return one page of the event feed.

        - ``limit`` – page size in ``[1, settings.max_page_size]``.
        - ``cursor`` – id of the last event of the previous page.  An id
          that does not exist yields an empty page.
        - ``sort_by`` – ``DATE_POSTED`` (creation time) or ``EVENT_DATE``
          (scheduled date), newest first.
        - ``registered_only`` – restrict to events the caller attends.
          Requires an identity.
        """
        if limit is None:
            limit = settings.default_page_size
        if not 1 <= limit <= settings.max_page_size:
            raise ValidationError(
                {"limit": f"Limit must be between 1 and {settings.max_page_size}"}
            )
        if registered_only and current_user is None:
            raise AuthorizationError("Sign in to list registered meets")

        column, direction = SORT_ORDER[SortBy(sort_by)]
        comparator = "<" if direction == "DESC" else ">"
        where: List[str] = []
        params: list = []
        if registered_only:
            where.append(
                "EXISTS (SELECT 1 FROM attendance a WHERE a.event_id = e.id AND a.user_id = ?)"
            )
            params.append(current_user["user_id"])

        conn = get_connection()
        try:
            if cursor:
                anchor = conn.execute(
                    f"SELECT {column} AS sort_key FROM events WHERE id = ?",
                    (cursor,),
                ).fetchone()
                if anchor is None:
                    return EventPage(data=[], has_more=False, cursor=None)
                where.append(
                    f"(e.{column} {comparator} ? OR (e.{column} = ? AND e.id {comparator} ?))"
                )
                params.extend([anchor["sort_key"], anchor["sort_key"], cursor])

            query = EVENT_SELECT
            if where:
                query += " WHERE " + " AND ".join(where)
            query += f" ORDER BY e.{column} {direction}, e.id {direction} LIMIT ?"
            params.append(limit + 1)
            rows = conn.execute(query, tuple(params)).fetchall()

            has_more = len(rows) > limit
            events = cls._annotate(conn, rows[:limit], current_user)
        finally:
            conn.close()
        return EventPage(
            data=events,
            has_more=has_more,
            cursor=events[-1].id if has_more else None,
        )

    @classmethod
    async def get_event(cls, event_id: str, current_user: Optional[dict] = None) -> EventRead:
        """Retrieve a single event with the same annotations as a feed item."""
        conn = get_connection()
        try:
            row = conn.execute(EVENT_SELECT + " WHERE e.id = ?", (event_id,)).fetchone()
            if not row:
                raise NotFoundError(f"Event {event_id} not found")
            return cls._annotate(conn, [row], current_user)[0]
        finally:
            conn.close()

    @staticmethod
    def _annotate(
        conn: sqlite3.Connection,
        rows: List[sqlite3.Row],
        current_user: Optional[dict],
    ) -> List[EventRead]:
        """Build ``EventRead`` objects with attendee counts and registration flags."""
        if not rows:
            return []
        ids = [row["id"] for row in rows]
        marks = _placeholders(len(ids))
        counts = {
            r["event_id"]: r["total"]
            for r in conn.execute(
                f"SELECT event_id, COUNT(*) AS total FROM attendance "
                f"WHERE event_id IN ({marks}) GROUP BY event_id",
                ids,
            ).fetchall()
        }
        registered: set = set()
        if current_user is not None:
            registered = {
                r["event_id"]
                for r in conn.execute(
                    f"SELECT event_id FROM attendance WHERE user_id = ? AND event_id IN ({marks})",
                    [current_user["user_id"], *ids],
                ).fetchall()
            }
        return [
            EventRead(
                id=row["id"],
                name=row["name"],
                description=row["description"],
                location_name=row["location_name"],
                date=row["date"],
                type=row["type"],
                images=json.loads(row["images"]),
                tags=json.loads(row["tags"]),
                created_at=row["created_at"],
                updated_at=row["updated_at"],
                coordinator=UserSummary(
                    id=row["coordinator_id"],
                    name=row["coordinator_name"],
                    profile_picture=row["coordinator_picture"],
                ),
                num_attendees=counts.get(row["id"], 0),
                is_registered=row["id"] in registered,
            )
            for row in rows
        ]
