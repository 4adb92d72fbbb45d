"""
Tests for the HTTP endpoints.

Tests cover:
- Registration and login returning tokens
- Duplicate registration and bad credentials
- Bearer-token protection of user and message routes
- Sending, viewing and reading messages
"""

import sqlite3
from contextlib import closing

import pytest


ALICE = {
    "username": "alice",
    "password": "hunter2",
    "first_name": "Alice",
    "last_name": "Tester",
    "phone": "555-1111",
}

BOB = {
    "username": "bob",
    "password": "secret",
    "first_name": "Bob",
    "last_name": "Tester",
    "phone": "555-2222",
}


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, data) -> str:
    response = client.post("/register", json=data)
    assert response.status_code == 201
    return response.json()["token"]


@pytest.fixture
def tokens(client):
    return {
        "alice": register(client, ALICE),
        "bob": register(client, BOB),
    }


class TestAuth:
    def test_register_returns_token(self, client):
        response = client.post("/register", json=ALICE)

        assert response.status_code == 201
        assert "token" in response.json()

    def test_register_duplicate(self, client):
        register(client, ALICE)
        response = client.post("/register", json={**ALICE, "password": "other"})

        assert response.status_code == 400
        assert response.json() == {"error": "Username taken. Please pick another!"}

    def test_register_missing_password(self, client):
        response = client.post("/register", json={"username": "alice"})

        assert response.status_code == 400
        assert "password" in response.json()["error"]

    def test_login(self, client):
        register(client, ALICE)
        response = client.post("/login", json={"username": "alice", "password": "hunter2"})

        assert response.status_code == 200
        token = response.json()["token"]
        assert client.get("/users", headers=auth(token)).status_code == 200

    def test_login_updates_last_login(self, client):
        token = register(client, ALICE)
        before = client.get("/users/alice", headers=auth(token)).json()["user"]["last_login_at"]

        client.post("/login", json={"username": "alice", "password": "hunter2"})
        after = client.get("/users/alice", headers=auth(token)).json()["user"]["last_login_at"]

        assert after > before

    @pytest.mark.parametrize("username, password", [("alice", "wrong"), ("nobody", "hunter2")])
    def test_login_invalid_credentials(self, client, username, password):
        register(client, ALICE)
        response = client.post("/login", json={"username": username, "password": password})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid user/password"}


class TestUsers:
    def test_requires_token(self, client):
        response = client.get("/users")

        assert response.status_code == 401
        assert "error" in response.json()

    def test_rejects_bad_token(self, client):
        response = client.get("/users", headers=auth("garbage"))

        assert response.status_code == 401

    def test_list_users(self, client, tokens):
        response = client.get("/users", headers=auth(tokens["alice"]))

        assert response.status_code == 200
        users = response.json()["users"]
        assert sorted(u["username"] for u in users) == ["alice", "bob"]
        assert all("password" not in u for u in users)

    def test_get_own_profile(self, client, tokens):
        response = client.get("/users/alice", headers=auth(tokens["alice"]))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["username"] == "alice"
        assert user["phone"] == "555-1111"
        assert user["join_at"] is not None
        assert "password" not in user

    def test_get_other_profile_forbidden(self, client, tokens):
        response = client.get("/users/bob", headers=auth(tokens["alice"]))

        assert response.status_code == 401

    def test_mailboxes(self, client, tokens):
        sent = client.post(
            "/messages", json={"to_username": "bob", "body": "hi bob"}, headers=auth(tokens["alice"])
        ).json()["message"]

        outbox = client.get("/users/alice/from", headers=auth(tokens["alice"])).json()["messages"]
        inbox = client.get("/users/bob/to", headers=auth(tokens["bob"])).json()["messages"]

        assert [m["id"] for m in outbox] == [sent["id"]]
        assert outbox[0]["to_user"]["username"] == "bob"
        assert "to_username" not in outbox[0]
        assert [m["id"] for m in inbox] == [sent["id"]]
        assert inbox[0]["from_user"]["first_name"] == "Alice"
        assert inbox[0]["sent_at"] == outbox[0]["sent_at"]

    def test_other_users_mailbox_forbidden(self, client, tokens):
        response = client.get("/users/bob/to", headers=auth(tokens["alice"]))

        assert response.status_code == 401


class TestMessages:
    def send(self, client, tokens, sender="alice", to="bob", body="hello"):
        response = client.post("/messages", json={"to_username": to, "body": body}, headers=auth(tokens[sender]))
        assert response.status_code == 201
        return response.json()["message"]

    def test_send(self, client, tokens):
        message = self.send(client, tokens)

        assert message["from_username"] == "alice"
        assert message["to_username"] == "bob"
        assert message["read_at"] is None

    def test_send_to_unknown_user(self, client, tokens):
        response = client.post(
            "/messages", json={"to_username": "nobody", "body": "hello"}, headers=auth(tokens["alice"])
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_get_message(self, client, tokens):
        message = self.send(client, tokens)

        for user in ("alice", "bob"):
            response = client.get(f"/messages/{message['id']}", headers=auth(tokens[user]))
            assert response.status_code == 200
            detail = response.json()["message"]
            assert detail["from_user"]["username"] == "alice"
            assert detail["to_user"]["username"] == "bob"

    def test_get_message_by_outsider(self, client, tokens):
        message = self.send(client, tokens)
        carol = register(client, {**ALICE, "username": "carol"})

        response = client.get(f"/messages/{message['id']}", headers=auth(carol))

        assert response.status_code == 401

    def test_get_missing_message(self, client, tokens):
        response = client.get("/messages/999", headers=auth(tokens["alice"]))

        assert response.status_code == 404

    def test_mark_read(self, client, tokens):
        message = self.send(client, tokens)

        response = client.post(f"/messages/{message['id']}/read", headers=auth(tokens["bob"]))

        assert response.status_code == 200
        receipt = response.json()["message"]
        assert receipt["id"] == message["id"]
        assert receipt["read_at"] is not None

    def test_mark_read_by_sender_forbidden(self, client, tokens):
        message = self.send(client, tokens)

        response = client.post(f"/messages/{message['id']}/read", headers=auth(tokens["alice"]))

        assert response.status_code == 403

    def test_mark_read_missing_message(self, client, tokens):
        response = client.post("/messages/999/read", headers=auth(tokens["bob"]))

        assert response.status_code == 404


class TestStorageFaults:
    def test_storage_fault_answers_opaque_500(self, client, tokens, config):
        with closing(sqlite3.connect(config.db.path)) as conn:
            conn.execute("DROP TABLE messages")
            conn.commit()

        response = client.get("/users/alice/from", headers=auth(tokens["alice"]))

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "messages" not in response.text
