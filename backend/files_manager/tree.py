from __future__ import annotations

import logging
from collections.abc import Sequence

from .common.errors import AccessError, BadRequest, InvalidParent, NotFound
from .common.storage import BlobStorage, validate_node_name, variant_handle
from .extensions import db
from .jobs.queue import JobQueue, ThumbnailJob
from .models import FileNode, FileNodeType


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
# Largest value a 64-bit signed INTEGER column can hold.
MAX_NODE_ID = 2**63 - 1


def _in_id_range(value: int) -> bool:
    return 0 < value <= MAX_NODE_ID


class FileTree:
    """Owner-scoped file and folder metadata plus the bytes behind it.

    ``parent_id`` is ``None`` for the root of an owner's tree. Query methods
    raise ``AccessError`` (a ``NotFound``) for nodes that are absent and for
    nodes the requester is not allowed to see, without telling them apart.
    """

    def __init__(
        self,
        storage: BlobStorage,
        thumbnail_queue: JobQueue | None = None,
        thumbnail_sizes: Sequence[int] = (500, 250, 100),
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.storage = storage
        self.thumbnail_queue = thumbnail_queue
        self.thumbnail_sizes = tuple(thumbnail_sizes)
        self.page_size = page_size

    def _validate_parent(self, owner_id: int, parent_id: int | None) -> None:
        if parent_id is None:
            return
        if not _in_id_range(parent_id):
            raise InvalidParent("Parent not found")
        parent = db.session.get(FileNode, parent_id)
        if parent is None or parent.owner_id != owner_id:
            raise InvalidParent("Parent not found")
        if not parent.is_folder:
            raise InvalidParent("Parent is not a folder")

    def create_folder(self, owner_id: int, name: str, parent_id: int | None, is_public: bool = False) -> FileNode:
        name = validate_node_name(name)
        self._validate_parent(owner_id, parent_id)

        node = FileNode(
            owner_id=owner_id,
            name=name,
            type=FileNodeType.FOLDER,
            is_public=is_public,
            parent_id=parent_id,
            storage_path=None,
        )
        db.session.add(node)
        db.session.commit()
        logger.info("folder %s created by user %s", node.id, owner_id)
        return node

    def create_file(
        self,
        owner_id: int,
        name: str,
        kind: FileNodeType,
        parent_id: int | None,
        content: bytes,
        is_public: bool = False,
    ) -> FileNode:
        if not kind.has_content:
            raise BadRequest("Missing type")
        name = validate_node_name(name)
        self._validate_parent(owner_id, parent_id)

        # Bytes first: a crash here leaves an orphan blob, never a dangling row.
        handle = self.storage.new_handle()
        self.storage.write(handle, content)

        node = FileNode(
            owner_id=owner_id,
            name=name,
            type=kind,
            is_public=is_public,
            parent_id=parent_id,
            storage_path=handle,
        )
        db.session.add(node)
        db.session.commit()
        logger.info("%s %s created by user %s (%d bytes)", kind.value, node.id, owner_id, len(content))

        if kind == FileNodeType.IMAGE and self.thumbnail_queue is not None:
            job = ThumbnailJob(file_id=node.id, owner_id=owner_id, sizes=self.thumbnail_sizes)
            self.thumbnail_queue.enqueue(job.to_payload())
            logger.debug("thumbnail job queued for file %s", node.id)

        return node

    def get(self, node_id: int, requester_id: int | None) -> FileNode:
        if not _in_id_range(node_id):
            raise AccessError()
        node = db.session.get(FileNode, node_id)
        if node is None:
            raise AccessError()
        if node.owner_id != requester_id and not node.is_public:
            raise AccessError()
        return node

    def get_owned(self, node_id: int, owner_id: int) -> FileNode:
        if not _in_id_range(node_id):
            raise AccessError()
        node = db.session.get(FileNode, node_id)
        if node is None or node.owner_id != owner_id:
            raise AccessError()
        return node

    def list(self, owner_id: int, parent_id: int | None, page: int = 0) -> list[FileNode]:
        page = max(0, page)
        offset = page * self.page_size
        if offset > MAX_NODE_ID or (parent_id is not None and not _in_id_range(parent_id)):
            return []
        query = FileNode.query.filter(FileNode.owner_id == owner_id)
        if parent_id is None:
            query = query.filter(FileNode.parent_id.is_(None))
        else:
            query = query.filter(FileNode.parent_id == parent_id)
        return query.order_by(FileNode.id.asc()).offset(offset).limit(self.page_size).all()

    def set_visibility(self, node_id: int, requester_id: int, public: bool) -> FileNode:
        node = self.get_owned(node_id, requester_id)
        if node.is_public != public:
            node.is_public = public
            db.session.commit()
            logger.info("file %s is now %s", node.id, "public" if public else "private")
        return node

    def read_content(self, node_id: int, requester_id: int | None, size: int | None = None) -> tuple[FileNode, bytes]:
        node = self.get(node_id, requester_id)
        if not node.type.has_content:
            raise BadRequest("A folder doesn't have content")
        if not node.storage_path:
            raise NotFound()

        handle = node.storage_path
        if size is not None:
            handle = variant_handle(handle, size)

        # Missing derivatives mean "not generated yet"; there is no pending state.
        if not self.storage.exists(handle):
            raise NotFound()
        return node, self.storage.read(handle)
