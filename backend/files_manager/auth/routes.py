from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..common.auth import authenticate_basic, request_token
from ..common.errors import Unauthorized
from ..services import session_store


auth_bp = Blueprint("auth", __name__)


@auth_bp.get("/connect")
def connect():
    user = authenticate_basic()
    token = session_store().issue(user.id)
    return jsonify({"token": token})


@auth_bp.get("/disconnect")
def disconnect():
    store = session_store()
    token = request_token()
    user_id = store.resolve(token)
    if user_id is None:
        raise Unauthorized()

    store.revoke(token)
    current_app.logger.info("user %s disconnected", user_id)
    return "", 204
