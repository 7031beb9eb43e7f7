from __future__ import annotations

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.exc import IntegrityError

from files_manager import MIGRATIONS_DIR, create_app
from files_manager.extensions import db


@pytest.fixture
def empty_app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'migrated.db'}",
            "FOLDER_PATH": str(tmp_path / "storage"),
            "CACHE_BACKEND": "memory",
            "QUEUE_BACKEND": "memory",
        }
    )
    with app.app_context():
        yield app
        db.session.remove()


def _alembic_config() -> AlembicConfig:
    config = AlembicConfig()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    return config


def test_initial_migration_makes_email_a_unique_index(empty_app):
    command.upgrade(_alembic_config(), "head")

    inspector = sa.inspect(db.engine)
    indexes = {index["name"]: index for index in inspector.get_indexes("users")}
    assert indexes["ix_users_email"]["column_names"] == ["email"]
    assert indexes["ix_users_email"]["unique"]
    assert inspector.get_unique_constraints("users") == []

    insert = sa.text("INSERT INTO users (email, password_hash, created_at) VALUES (:email, 'x', CURRENT_TIMESTAMP)")
    with db.engine.begin() as connection:
        connection.execute(insert, {"email": "alice@example.com"})
    with pytest.raises(IntegrityError):
        with db.engine.begin() as connection:
            connection.execute(insert, {"email": "alice@example.com"})


def test_initial_migration_downgrades_cleanly(empty_app):
    config = _alembic_config()
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    tables = set(sa.inspect(db.engine).get_table_names())
    assert "users" not in tables
    assert "file_nodes" not in tables
