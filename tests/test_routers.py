"""
End-to-end tests through the HTTP API.
"""
import pytest


@pytest.fixture
def people(make_graph):
    return make_graph(
        {
            "host": ["amy", "mutual"],
            "amy": ["host"],
            "mutual": ["host"],
            "stranger": ["mutual"],
        }
    )


def test_requests_without_token_are_rejected(client):
    assert client.get("/hangouts").status_code == 401
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_cookie_is_accepted(client, token_for):
    from utils.constants import COOKIE_NAME

    client.cookies.set(COOKIE_NAME, token_for("cookie-user"))
    response = client.get("/users/me")
    assert response.status_code == 200
    assert response.json()["id"] == "cookie-user"


def test_first_request_materializes_user(client, auth_headers):
    response = client.get("/users/me", headers=auth_headers("newbie"))
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "newbie"
    assert body["name"] == "Newbie"
    assert body["first_degree_friend_ids"] == []

    users = client.get("/users", headers=auth_headers("newbie")).json()["users"]
    assert [u["id"] for u in users] == ["newbie"]


def test_update_profile_and_friends(client, auth_headers, people):
    response = client.put(
        "/users/stranger",
        json={"bio": "new here", "friend_ids": ["amy", "mutual", "amy"]},
        headers=auth_headers("stranger"),
    )
    assert response.status_code == 200
    assert response.json()["bio"] == "new here"
    assert response.json()["first_degree_friend_ids"] == ["amy", "mutual"]

    forbidden = client.put(
        "/users/amy", json={"bio": "hacked"}, headers=auth_headers("stranger")
    )
    assert forbidden.status_code == 403


def test_friend_cap_is_enforced(client, auth_headers, people, monkeypatch):
    from business import user as user_service

    monkeypatch.setattr(user_service, "MAX_FIRST_DEGREE_FRIENDS", 1)
    response = client.put(
        "/users/host",
        json={"friend_ids": ["amy", "mutual"]},
        headers=auth_headers("host"),
    )
    assert response.status_code == 422
    assert "maximum" in response.json()["detail"]


def test_create_accept_and_confirm(client, auth_headers, people):
    created = client.post(
        "/hangouts",
        json={
            "participant_ids": ["amy"],
            "activity_description": "Board games",
            "details": "My place",
            "scheduled_at": "2026-07-04T18:00:00",
        },
        headers=auth_headers("host"),
    )
    assert created.status_code == 201
    hangout = created.json()
    assert hangout["status"] == "pending"
    assert hangout["host"]["id"] == "host"
    assert [p["id"] for p in hangout["participants"]] == ["amy"]
    assert hangout["accepted_by"] == ["host"]
    assert hangout["can_respond"] is True

    listed = client.get("/hangouts", headers=auth_headers("amy")).json()["hangouts"]
    assert [h["id"] for h in listed] == [hangout["id"]]

    accepted = client.put(f"/hangouts/{hangout['id']}/accept", headers=auth_headers("amy"))
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "confirmed"

    rejected = client.put(f"/hangouts/{hangout['id']}/reject", headers=auth_headers("amy"))
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "confirmed"
    assert rejected.json()["rejected_by"] == ["amy"]


def test_second_degree_flow(client, auth_headers, people):
    hangout = client.post(
        "/hangouts",
        json={"participant_ids": ["stranger"], "activity_description": "Climbing"},
        headers=auth_headers("host"),
    ).json()
    assert hangout["status"] == "pending_approval"
    assert hangout["participant_degrees"] == {"stranger": "second_degree"}

    early = client.put(f"/hangouts/{hangout['id']}/accept", headers=auth_headers("stranger"))
    assert early.status_code == 403

    requests = client.get("/connection-requests", headers=auth_headers("mutual")).json()
    [request] = requests["requests"]
    assert request["requester"]["id"] == "host"
    assert request["requested"]["id"] == "stranger"

    not_mine = client.put(
        f"/connection-requests/{request['id']}",
        json={"decision": "approved"},
        headers=auth_headers("host"),
    )
    assert not_mine.status_code == 403

    resolved = client.put(
        f"/connection-requests/{request['id']}",
        json={"decision": "approved"},
        headers=auth_headers("mutual"),
    )
    assert resolved.status_code == 204

    again = client.put(
        f"/connection-requests/{request['id']}",
        json={"decision": "rejected"},
        headers=auth_headers("mutual"),
    )
    assert again.status_code == 409

    assert client.get("/connection-requests", headers=auth_headers("mutual")).json() == {
        "requests": []
    }

    confirmed = client.put(
        f"/hangouts/{hangout['id']}/accept", headers=auth_headers("stranger")
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"


def test_cancel_hangout(client, auth_headers, people):
    hangout = client.post(
        "/hangouts",
        json={"participant_ids": ["amy"], "activity_description": "Picnic"},
        headers=auth_headers("host"),
    ).json()

    assert client.delete(f"/hangouts/{hangout['id']}", headers=auth_headers("amy")).status_code == 403
    assert client.delete(f"/hangouts/{hangout['id']}", headers=auth_headers("host")).status_code == 204
    assert client.delete(f"/hangouts/{hangout['id']}", headers=auth_headers("host")).status_code == 409

    assert client.get("/hangouts", headers=auth_headers("host")).json() == {"hangouts": []}


def test_error_mapping(client, auth_headers, people):
    missing = client.put("/hangouts/does-not-exist/accept", headers=auth_headers("amy"))
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Hangout not found"

    no_participants = client.post(
        "/hangouts",
        json={"participant_ids": [], "activity_description": "Alone"},
        headers=auth_headers("host"),
    )
    assert no_participants.status_code == 422

    unknown = client.post(
        "/hangouts",
        json={"participant_ids": ["ghost"], "activity_description": "Haunt"},
        headers=auth_headers("host"),
    )
    assert unknown.status_code == 404

    bad_decision = client.put(
        "/connection-requests/anything",
        json={"decision": "maybe"},
        headers=auth_headers("mutual"),
    )
    assert bad_decision.status_code == 422
