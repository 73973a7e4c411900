"""Tests for the demo data seeding script."""

import asyncio

import seed
from meetup_api.app.schemas.user import UserCreate
from meetup_api.app.services.user_service import UserService


def test_seed_creates_users_meets_and_registrations(db_rows):
    asyncio.run(seed.seed("password123"))

    assert len(db_rows("SELECT * FROM users")) == 5
    assert len(db_rows("SELECT * FROM events")) == 5
    assert len(db_rows("SELECT * FROM attendance")) == 5


def test_seed_skips_existing_user_with_other_password(db_rows):
    asyncio.run(
        UserService.create_user(
            UserCreate(email="bob@gmail.com", password="bobs-own-password", username="Bob")
        )
    )

    asyncio.run(seed.seed("password123"))

    assert len(db_rows("SELECT * FROM users")) == 5
    rows = db_rows("SELECT u.name FROM events e JOIN users u ON u.id = e.coordinator_id")
    coordinators = {row["name"] for row in rows}
    assert "Bob" not in coordinators
    assert len(coordinators) == 4
