from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from .extensions import db


pwd_hasher = PasswordHasher()

ROOT_PARENT_WIRE_ID = 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FileNodeType(str, enum.Enum):
    FOLDER = "folder"
    FILE = "file"
    IMAGE = "image"

    @property
    def has_content(self) -> bool:
        return self is not FileNodeType.FOLDER


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)

    def set_password(self, password: str) -> None:
        self.password_hash = pwd_hasher.hash(password)

    def verify_password(self, password: str) -> bool:
        try:
            return pwd_hasher.verify(self.password_hash, password)
        except (VerifyMismatchError, InvalidHashError):
            return False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email}


class FileNode(db.Model):
    __tablename__ = "file_nodes"

    id = db.Column(db.Integer, primary_key=True)
    # NULL is the root of the owner's tree.
    parent_id = db.Column(db.Integer, db.ForeignKey("file_nodes.id"), nullable=True, index=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.Enum(FileNodeType), nullable=False, default=FileNodeType.FILE)
    is_public = db.Column(db.Boolean, nullable=False, default=False)
    storage_path = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)

    @property
    def is_folder(self) -> bool:
        return self.type == FileNodeType.FOLDER

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.owner_id,
            "name": self.name,
            "type": self.type.value,
            "isPublic": self.is_public,
            "parentId": self.parent_id if self.parent_id is not None else ROOT_PARENT_WIRE_ID,
        }
