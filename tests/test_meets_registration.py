"""Tests for registering attendance and listing attendees."""

import asyncio
import threading

from meetup_api.app.services.registration_service import RegistrationService


def test_register_twice_keeps_single_edge(client, make_user, make_meet, db_rows):
    alice, bob = make_user("Alice"), make_user("Bob")
    event_id = make_meet(alice)

    for _ in range(2):
        response = client.post(f"/api/v1/meets/{event_id}/register", headers=bob["headers"])
        assert response.status_code == 200
        assert response.json() is True

    rows = db_rows("SELECT user_id FROM attendance WHERE event_id = ?", (event_id,))
    assert [row["user_id"] for row in rows] == [bob["id"]]
    meet = client.get(f"/api/v1/meets/{event_id}", headers=bob["headers"]).json()
    assert meet["numAttendees"] == 1
    assert meet["isRegistered"] is True


def test_concurrent_registrations_for_same_pair(make_user, make_meet, db_rows):
    alice, bob = make_user("Alice"), make_user("Bob")
    event_id = make_meet(alice)
    identity = {"user_id": bob["id"], "email": "bob@example.com", "name": "Bob"}
    results, errors = [], []

    def worker():
        try:
            results.append(asyncio.run(RegistrationService.register(event_id, identity)))
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert results == [True] * 8
    assert len(db_rows("SELECT 1 FROM attendance WHERE event_id = ?", (event_id,))) == 1


def test_register_for_unknown_event_is_not_found(client, make_user, db_rows):
    bob = make_user("Bob")
    response = client.post("/api/v1/meets/missing/register", headers=bob["headers"])
    assert response.status_code == 404
    assert response.json()["detail"] == "Event missing not found"
    assert db_rows("SELECT * FROM attendance") == []


def test_register_requires_authentication(client, make_user, make_meet, db_rows):
    event_id = make_meet(make_user("Alice"))
    response = client.post(f"/api/v1/meets/{event_id}/register")
    assert response.status_code == 401
    assert db_rows("SELECT * FROM attendance") == []


def test_attendees_listed_in_registration_order(client, make_user, make_meet):
    alice, bob, carol = make_user("Alice"), make_user("Bob"), make_user("Carol")
    event_id = make_meet(alice)
    client.post(f"/api/v1/meets/{event_id}/register", headers=carol["headers"])
    client.post(f"/api/v1/meets/{event_id}/register", headers=bob["headers"])

    attendees = client.get(f"/api/v1/meets/{event_id}/attendees").json()
    assert [a["name"] for a in attendees] == ["Carol", "Bob"]
    assert set(attendees[0]) == {"id", "name", "profilePicture"}


def test_attendees_of_unknown_event_is_not_found(client):
    assert client.get("/api/v1/meets/missing/attendees").status_code == 404
