from __future__ import annotations

from pathlib import Path

import pytest

from files_manager import create_app
from files_manager.extensions import db
from files_manager.models import User


@pytest.fixture
def app(tmp_path: Path):
    db_path = tmp_path / "test.db"
    storage_path = tmp_path / "storage"

    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
            "FOLDER_PATH": str(storage_path),
            "CACHE_BACKEND": "memory",
            "QUEUE_BACKEND": "memory",
            "SESSION_TTL_SECONDS": 60 * 60 * 24,
            "THUMBNAIL_SIZES": (500, 250, 100),
            "FILES_PAGE_SIZE": 20,
        }
    )

    with app.app_context():
        db.create_all()

        user = User(email="alice@example.com")
        user.set_password("secret123")
        db.session.add(user)
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
