#!/usr/bin/env python3
"""
Seed the database with demo users, meets and registrations.

Creates five users (Alice, Bob, Charlie, David, Eve) sharing the
password given by ``--password``, one meet per user and a few
registrations.  Users that already exist are left alone and their meets
are not duplicated.

Usage:
    python seed.py --password "password123"
"""

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from meetup_api.app.core.config import settings
from meetup_api.app.core.db import init_db
from meetup_api.app.core.errors import AuthenticationError, ConflictError
from meetup_api.app.core.logging_config import setup_logging
from meetup_api.app.schemas.event import EventCreate, EventType
from meetup_api.app.schemas.user import UserCreate
from meetup_api.app.services.event_service import EventService
from meetup_api.app.services.registration_service import RegistrationService
from meetup_api.app.services.user_service import UserService

logger = logging.getLogger("seed")

USERS = [
    ("Alice", "alice@gmail.com"),
    ("Bob", "bob@gmail.com"),
    ("Charlie", "charlie@gmail.com"),
    ("David", "david@gmail.com"),
    ("Eve", "eve@gmail.com"),
]

MEETS = [
    ("Morning yoga", "Gentle flow for all levels", "https://zoom.us/j/100200300", EventType.VIRTUAL, ["yoga", "wellness"]),
    ("Sunrise hike", "Easy 6 km loop, bring water", "North trailhead", EventType.IN_PERSON, ["hiking", "outdoors"]),
    ("Board game night", "Bring a game or learn a new one", "Community centre, room 2", EventType.IN_PERSON, ["games"]),
    ("Meditation circle", "Twenty minutes of guided breathing", "https://meet.example.com/calm", EventType.VIRTUAL, ["meditation"]),
    ("Group ride", "Casual 30 km ride, no drop", "Old bridge car park", EventType.IN_PERSON, ["cycling", "outdoors"]),
]


async def seed(password: str) -> None:
    identities = []
    created_users = []
    for name, email in USERS:
        try:
            await UserService.create_user(
                UserCreate(email=email, password=password, username=name), bio="test user"
            )
            created_users.append(name)
        except ConflictError:
            logger.info("User %s already exists, skipping", name)
        try:
            user = await UserService.authenticate(email, password)
        except AuthenticationError:
            logger.warning("User %s exists with a different password, skipping", name)
            continue
        identities.append({"user_id": user.id, "email": user.email, "name": user.name})

    start = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    event_ids = []
    for days, (identity, (title, description, location, kind, tags)) in enumerate(zip(identities, MEETS), start=1):
        if identity["name"] not in created_users:
            continue
        event_ids.append(
            await EventService.create_event(
                EventCreate(
                    name=title,
                    description=description,
                    location=location,
                    date=(start + timedelta(days=days)).isoformat(),
                    type=kind,
                    tags=tags,
                ),
                identity,
            )
        )

    # Everyone attends the meet of the next user round the table.
    for offset, event_id in enumerate(event_ids):
        await RegistrationService.register(event_id, identities[(offset + 1) % len(identities)])
    logger.info("Seeded %d users and %d meets", len(created_users), len(event_ids))


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the Meetup database with demo data.")
    ap.add_argument("--password", default="password123", help="Password for every demo user")
    args = ap.parse_args()

    setup_logging(settings.log_level)
    init_db()
    asyncio.run(seed(args.password))


if __name__ == "__main__":
    main()
