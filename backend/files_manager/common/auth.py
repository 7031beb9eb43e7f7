from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import g, request
from sqlalchemy import func

from ..extensions import db
from ..models import User
from ..services import session_store
from .errors import Unauthorized


TOKEN_HEADER = "X-Token"


def request_token() -> str | None:
    token = (request.headers.get(TOKEN_HEADER) or "").strip()
    return token or None


def current_user(required: bool = True) -> User | None:
    if "current_user" in g:
        user = g.current_user
    else:
        user_id = session_store().resolve(request_token())
        user = db.session.get(User, user_id) if user_id is not None else None
        g.current_user = user

    if user is None and required:
        raise Unauthorized()
    return user


def token_required(func: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        current_user(required=True)
        return func(*args, **kwargs)

    return wrapper


def authenticate_basic() -> User:
    credentials = request.authorization
    if credentials is None or credentials.type != "basic":
        raise Unauthorized()

    email = (credentials.username or "").strip()
    password = credentials.password or ""
    if not email or not password:
        raise Unauthorized()

    user = User.query.filter(func.lower(User.email) == email.lower()).one_or_none()
    if user is None or not user.verify_password(password):
        raise Unauthorized()
    return user
