from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..common.auth import current_user, token_required
from ..common.errors import BadRequest, Conflict
from ..extensions import db
from ..jobs.queue import WELCOME_QUEUE, WelcomeJob
from ..models import User
from ..services import job_queue


users_bp = Blueprint("users", __name__, url_prefix="/users")


def register_user(email: str, password: str) -> User:
    email = email.strip().lower()
    if not email:
        raise BadRequest("Missing email")
    if not password:
        raise BadRequest("Missing password")

    existing = User.query.filter(func.lower(User.email) == email).one_or_none()
    if existing is not None:
        raise Conflict()

    user = User(email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as error:
        # Lost a race with a concurrent registration for the same email.
        db.session.rollback()
        raise Conflict() from error

    job_queue(WELCOME_QUEUE).enqueue(WelcomeJob(user_id=user.id).to_payload())
    current_app.logger.info("user %s registered", user.id)
    return user


@users_bp.post("")
def create_user():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        raise BadRequest("JSON object expected.")

    email = payload.get("email")
    password = payload.get("password")
    user = register_user(
        email if isinstance(email, str) else "",
        password if isinstance(password, str) else "",
    )
    return jsonify(user.to_dict()), 201


@users_bp.get("/me")
@token_required
def me():
    user = current_user(required=True)
    assert user is not None
    return jsonify(user.to_dict())
