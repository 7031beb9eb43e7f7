from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from uuid import uuid4

from .errors import BadRequest


logger = logging.getLogger(__name__)

INVALID_NAME_PATTERN = re.compile(r"[\\/\x00]")
HANDLE_PATTERN = re.compile(r"^[0-9a-f]{32}(_[0-9]+)?$")


def validate_node_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise BadRequest("Missing name")
    if len(cleaned) > 255:
        raise BadRequest("Name must be <= 255 characters.")
    if INVALID_NAME_PATTERN.search(cleaned):
        raise BadRequest("Name contains invalid characters.")
    if cleaned in {".", ".."}:
        raise BadRequest("Reserved name.")
    return cleaned


def variant_handle(handle: str, size: int) -> str:
    return f"{handle}_{size}"


class BlobStorage:
    """Handle-addressed byte store rooted at a single directory.

    Handles are opaque hex strings. Derivatives of a handle live next to it
    under ``<handle>_<size>``, so a write never replaces the original bytes.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _safe_resolve(self, handle: str) -> Path:
        if not HANDLE_PATTERN.match(handle):
            raise BadRequest("Invalid storage handle.")
        root = self.root.resolve()
        candidate = (root / handle).resolve()
        if os.path.commonpath([str(root), str(candidate)]) != str(root):
            raise BadRequest("Invalid storage handle.")
        return candidate

    def new_handle(self) -> str:
        return uuid4().hex

    def exists(self, handle: str) -> bool:
        return self._safe_resolve(handle).is_file()

    def write(self, handle: str, content: bytes) -> None:
        target = self._safe_resolve(handle)
        target.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file first so readers never see a partial blob.
        partial = target.with_name(f".{target.name}.{uuid4().hex[:8]}.part")
        try:
            with partial.open("wb") as output:
                output.write(content)
            os.replace(partial, target)
        finally:
            if partial.exists():
                partial.unlink()
        logger.debug("stored %d bytes under %s", len(content), handle)

    def read(self, handle: str) -> bytes:
        return self._safe_resolve(handle).read_bytes()
