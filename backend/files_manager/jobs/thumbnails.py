from __future__ import annotations

import io
import logging
from typing import Any

from PIL import Image, UnidentifiedImageError

from ..common.storage import BlobStorage, variant_handle
from ..models import FileNode, FileNodeType
from .queue import JobError, ThumbnailJob


logger = logging.getLogger(__name__)


def render_thumbnail(content: bytes, width: int) -> bytes:
    """Resample an image to ``width`` pixels wide, keeping its aspect ratio."""

    try:
        with Image.open(io.BytesIO(content)) as image:
            image.load()
            image_format = image.format or "PNG"
            height = max(1, round(image.height * width / image.width))
            resized = image.resize((width, height), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError, ValueError) as error:
        raise JobError(f"Cannot decode image: {error}") from error

    if image_format == "JPEG" and resized.mode not in {"RGB", "L"}:
        resized = resized.convert("RGB")

    output = io.BytesIO()
    try:
        resized.save(output, format=image_format)
    except (OSError, ValueError, KeyError) as error:
        raise JobError(f"Cannot encode {image_format} thumbnail: {error}") from error
    return output.getvalue()


def process_thumbnail_job(payload: dict[str, Any], storage: BlobStorage) -> list[str]:
    job = ThumbnailJob.from_payload(payload)

    node = FileNode.query.filter_by(id=job.file_id, owner_id=job.owner_id).one_or_none()
    if node is None:
        raise JobError("File not found", permanent=True)
    if node.type != FileNodeType.IMAGE or not node.storage_path:
        raise JobError("File is not an image", permanent=True)

    try:
        original = storage.read(node.storage_path)
    except OSError as error:
        raise JobError(f"Cannot read original content: {error}") from error

    written: list[str] = []
    for size in job.sizes:
        thumbnail = render_thumbnail(original, size)
        handle = variant_handle(node.storage_path, size)
        try:
            storage.write(handle, thumbnail)
        except OSError as error:
            raise JobError(f"Cannot write {size}px thumbnail: {error}") from error
        written.append(handle)
        logger.debug("file %s: %dpx thumbnail written", node.id, size)

    logger.info("file %s: %d thumbnails generated", node.id, len(written))
    return written
