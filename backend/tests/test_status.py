from __future__ import annotations

from helpers import b64, login


def test_status_reports_backing_services(client):
    response = client.get("/status")

    assert response.status_code == 200
    assert response.get_json() == {"redis": True, "db": True}


def test_stats_counts_users_and_files(client):
    assert client.get("/stats").get_json() == {"users": 1, "files": 0}

    headers = login(client)
    client.post("/files", json={"name": "docs", "type": "folder"}, headers=headers)
    client.post("/files", json={"name": "a.txt", "type": "file", "data": b64(b"a")}, headers=headers)
    client.post("/users", json={"email": "bob@example.com", "password": "hunter22"})

    assert client.get("/stats").get_json() == {"users": 2, "files": 2}
