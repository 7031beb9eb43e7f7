from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request

from ..common.auth import current_user, token_required
from ..common.errors import BadRequest, InvalidParent
from ..models import ROOT_PARENT_WIRE_ID, FileNodeType
from ..services import file_tree


files_bp = Blueprint("files", __name__, url_prefix="/files")


def _parse_parent_id(value: Any) -> int | None:
    if isinstance(value, bool):
        raise InvalidParent("Parent not found")
    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError) as error:
        raise InvalidParent("Parent not found") from error
    if parsed == ROOT_PARENT_WIRE_ID:
        return None
    if parsed < 0:
        raise InvalidParent("Parent not found")
    return parsed


def _parse_page(value: str | None) -> int:
    try:
        return max(0, int(value or 0))
    except ValueError:
        return 0


def _parse_size(value: str | None) -> int | None:
    """Return the requested thumbnail width, or None for the original.

    Unknown sizes fall back to the original content.
    """

    if not value:
        return None
    allowed = {str(size): size for size in current_app.config["THUMBNAIL_SIZES"]}
    return allowed.get(value.strip())


def _decode_data(value: Any) -> bytes:
    if not isinstance(value, str) or not value:
        raise BadRequest("Missing data")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as error:
        raise BadRequest("Invalid data", {"reason": "data must be base64 encoded"}) from error


@files_bp.post("")
@token_required
def upload():
    user = current_user(required=True)
    assert user is not None

    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        raise BadRequest("JSON object expected.")

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise BadRequest("Missing name")

    try:
        kind = FileNodeType(payload.get("type"))
    except ValueError as error:
        raise BadRequest("Missing type") from error

    content = _decode_data(payload.get("data")) if kind.has_content else b""
    parent_id = _parse_parent_id(payload.get("parentId", ROOT_PARENT_WIRE_ID))
    is_public = payload.get("isPublic", False)
    if not isinstance(is_public, bool):
        raise BadRequest("isPublic must be a boolean")

    tree = file_tree()
    if kind == FileNodeType.FOLDER:
        node = tree.create_folder(user.id, name, parent_id, is_public=is_public)
    else:
        node = tree.create_file(user.id, name, kind, parent_id, content, is_public=is_public)

    return jsonify(node.to_dict()), 201


@files_bp.get("/<int:node_id>")
@token_required
def show(node_id: int):
    user = current_user(required=True)
    assert user is not None

    node = file_tree().get(node_id, user.id)
    return jsonify(node.to_dict())


@files_bp.get("")
@token_required
def index():
    user = current_user(required=True)
    assert user is not None

    try:
        parent_id = _parse_parent_id(request.args.get("parentId"))
    except InvalidParent:
        return jsonify([])

    page = _parse_page(request.args.get("page"))
    nodes = file_tree().list(user.id, parent_id, page)
    return jsonify([node.to_dict() for node in nodes])


@files_bp.put("/<int:node_id>/publish")
@token_required
def publish(node_id: int):
    user = current_user(required=True)
    assert user is not None

    node = file_tree().set_visibility(node_id, user.id, True)
    return jsonify(node.to_dict())


@files_bp.put("/<int:node_id>/unpublish")
@token_required
def unpublish(node_id: int):
    user = current_user(required=True)
    assert user is not None

    node = file_tree().set_visibility(node_id, user.id, False)
    return jsonify(node.to_dict())


@files_bp.get("/<int:node_id>/data")
def data(node_id: int):
    user = current_user(required=False)
    requester_id = user.id if user is not None else None

    node, content = file_tree().read_content(node_id, requester_id, _parse_size(request.args.get("size")))
    mime, _ = mimetypes.guess_type(node.name)
    return Response(content, status=200, mimetype=mime or "application/octet-stream")
