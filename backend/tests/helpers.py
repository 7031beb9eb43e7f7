from __future__ import annotations

import base64
import io

from PIL import Image


def basic_auth(email: str, password: str) -> dict[str, str]:
    credentials = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {credentials}"}


def login(client, email: str = "alice@example.com", password: str = "secret123") -> dict[str, str]:
    response = client.get("/connect", headers=basic_auth(email, password))
    assert response.status_code == 200
    return {"X-Token": response.get_json()["token"]}


def register(client, email: str, password: str) -> dict[str, str]:
    response = client.post("/users", json={"email": email, "password": password})
    assert response.status_code == 201
    return login(client, email, password)


def png_bytes(width: int = 800, height: int = 600, color: str = "orange") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def b64(content: bytes) -> str:
    return base64.b64encode(content).decode()
