from __future__ import annotations

from files_manager.extensions import db
from files_manager.jobs.queue import WELCOME_QUEUE
from files_manager.models import User
from files_manager.services import build_worker_pools


def test_register_returns_id_and_email(client):
    response = client.post("/users", json={"email": "bob@example.com", "password": "hunter22"})

    assert response.status_code == 201
    payload = response.get_json()
    assert payload["email"] == "bob@example.com"
    assert isinstance(payload["id"], int)
    assert "password" not in payload
    assert "password_hash" not in payload


def test_register_requires_email_and_password(client):
    missing_email = client.post("/users", json={"password": "hunter22"})
    assert missing_email.status_code == 400
    assert missing_email.get_json()["error"]["message"] == "Missing email"

    missing_password = client.post("/users", json={"email": "bob@example.com"})
    assert missing_password.status_code == 400
    assert missing_password.get_json()["error"]["message"] == "Missing password"


def test_duplicate_email_is_rejected_and_original_digest_kept(client, app):
    with app.app_context():
        original_digest = User.query.filter_by(email="alice@example.com").one().password_hash

    duplicate = client.post("/users", json={"email": "alice@example.com", "password": "other-password"})
    assert duplicate.status_code == 400
    assert duplicate.get_json()["error"]["code"] == "ALREADY_EXISTS"
    assert duplicate.get_json()["error"]["message"] == "Already exist"

    with app.app_context():
        assert User.query.count() == 1
        assert User.query.filter_by(email="alice@example.com").one().password_hash == original_digest


def test_password_is_stored_as_digest(client, app):
    client.post("/users", json={"email": "bob@example.com", "password": "hunter22"})

    with app.app_context():
        user = User.query.filter_by(email="bob@example.com").one()
        assert user.password_hash != "hunter22"
        assert user.verify_password("hunter22")
        assert not user.verify_password("hunter23")


def test_me_requires_a_valid_token(client):
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers={"X-Token": "bogus"}).status_code == 401


def test_registration_queues_a_welcome_job(client, app, caplog):
    response = client.post("/users", json={"email": "bob@example.com", "password": "hunter22"})
    user_id = response.get_json()["id"]

    pool = build_worker_pools(app)[WELCOME_QUEUE]
    with caplog.at_level("INFO", logger="files_manager.jobs.welcome"):
        outcomes = pool.drain()

    assert [outcome.ok for outcome in outcomes] == [True]
    assert outcomes[0].payload == {"user_id": user_id}
    assert "Welcome bob@example.com!" in caplog.text


def test_welcome_job_for_missing_user_fails_permanently(app):
    pool = build_worker_pools(app)[WELCOME_QUEUE]
    pool.queue.enqueue({"user_id": 999})
    pool.queue.enqueue({})

    outcomes = pool.drain()

    assert [outcome.ok for outcome in outcomes] == [False, False]
    assert outcomes[0].error == "User not found"
    assert outcomes[1].error == "Missing user_id"
    assert pool.queue.size() == 0

    with app.app_context():
        assert db.session.query(User).count() == 1
