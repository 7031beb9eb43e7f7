from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import FileNode, User
from ..services import session_store


status_bp = Blueprint("status", __name__)


def _database_alive() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as error:
        current_app.logger.warning("database health check failed: %s", error)
        db.session.rollback()
        return False
    return True


@status_bp.get("/status")
def status():
    return jsonify({"redis": session_store().cache.is_alive(), "db": _database_alive()})


@status_bp.get("/stats")
def stats():
    return jsonify(
        {
            "users": db.session.query(db.func.count(User.id)).scalar() or 0,
            "files": db.session.query(db.func.count(FileNode.id)).scalar() or 0,
        }
    )
