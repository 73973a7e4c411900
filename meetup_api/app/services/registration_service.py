"""
Business logic for event attendance.

Attendance is a set: the ``attendance`` table's primary key is
``(user_id, event_id)`` and registrations are written with
``INSERT OR IGNORE``.  Registering twice, or two concurrent requests for
the same pair, leaves exactly one row and neither call fails.  There is
no unregister operation.
"""

import logging
from typing import List, Optional

from ..core.db import get_connection, utcnow
from ..core.errors import AuthorizationError, NotFoundError
from ..schemas.user import UserSummary

logger = logging.getLogger(__name__)


class RegistrationService:
    """Service for registering users to events."""

    @classmethod
    async def register(cls, event_id: str, current_user: Optional[dict]) -> bool:
        """Record that the caller attends ``event_id``.

        Raises ``NotFoundError`` for an unknown event, in which case
        nothing is written.
        """
        if current_user is None:
            raise AuthorizationError()
        conn = get_connection()
        try:
            event = conn.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
            if not event:
                raise NotFoundError(f"Event {event_id} not found")
            cursor = conn.execute(
                "INSERT OR IGNORE INTO attendance (user_id, event_id, created_at) VALUES (?, ?, ?)",
                (current_user["user_id"], event_id, utcnow()),
            )
            inserted = cursor.rowcount
            conn.commit()
        finally:
            conn.close()
        if inserted:
            logger.info("User %s registered for event %s", current_user["user_id"], event_id)
        else:
            logger.debug("User %s already registered for event %s", current_user["user_id"], event_id)
        return True

    @classmethod
    async def list_attendees(cls, event_id: str) -> List[UserSummary]:
        """Return the users attending an event, earliest registration first."""
        conn = get_connection()
        try:
            event = conn.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
            if not event:
                raise NotFoundError(f"Event {event_id} not found")
            rows = conn.execute(
                """
                SELECT u.id, u.name, u.profile_picture
                FROM attendance a
                JOIN users u ON u.id = a.user_id
                WHERE a.event_id = ?
                ORDER BY a.created_at, a.rowid
                """,
                (event_id,),
            ).fetchall()
        finally:
            conn.close()
        return [
            UserSummary(id=row["id"], name=row["name"], profile_picture=row["profile_picture"])
            for row in rows
        ]
