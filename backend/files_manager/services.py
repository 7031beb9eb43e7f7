from __future__ import annotations

from pathlib import Path

from flask import Flask, current_app

from .common.cache import KeyValueCache, MemoryCache, RedisCache
from .common.sessions import SessionStore
from .common.storage import BlobStorage
from .jobs.pool import WorkerPool, should_start_workers
from .jobs.queue import THUMBNAIL_QUEUE, WELCOME_QUEUE, JobQueue, build_queue
from .jobs.thumbnails import process_thumbnail_job
from .jobs.welcome import process_welcome_job
from .tree import FileTree


def _build_cache(app: Flask) -> KeyValueCache:
    backend = app.config["CACHE_BACKEND"]
    if backend == "memory":
        return MemoryCache()
    if backend == "redis":
        return RedisCache.from_url(app.config["REDIS_URL"])
    raise ValueError(f"Unknown cache backend: {backend}")


def init_services(app: Flask) -> None:
    storage_root = Path(app.config["FOLDER_PATH"])
    storage_root.mkdir(parents=True, exist_ok=True)

    app.extensions["session_store"] = SessionStore(_build_cache(app), int(app.config["SESSION_TTL_SECONDS"]))
    app.extensions["blob_storage"] = BlobStorage(storage_root)
    app.extensions["job_queues"] = {
        name: build_queue(app.config["QUEUE_BACKEND"], name, app.config["REDIS_URL"])
        for name in (THUMBNAIL_QUEUE, WELCOME_QUEUE)
    }


def build_worker_pools(app: Flask) -> dict[str, WorkerPool]:
    queues: dict[str, JobQueue] = app.extensions["job_queues"]
    storage: BlobStorage = app.extensions["blob_storage"]
    poll_timeout = float(app.config["QUEUE_POLL_TIMEOUT_SECONDS"])

    return {
        THUMBNAIL_QUEUE: WorkerPool(
            app,
            queues[THUMBNAIL_QUEUE],
            lambda payload: process_thumbnail_job(payload, storage),
            concurrency=int(app.config["THUMBNAIL_WORKERS"]),
            poll_timeout=poll_timeout,
        ),
        WELCOME_QUEUE: WorkerPool(
            app,
            queues[WELCOME_QUEUE],
            process_welcome_job,
            concurrency=int(app.config["WELCOME_WORKERS"]),
            poll_timeout=poll_timeout,
        ),
    }


def start_worker_pools(app: Flask, force: bool = False) -> dict[str, WorkerPool] | None:
    if not force and not should_start_workers(app):
        return None
    pools = build_worker_pools(app)
    for pool in pools.values():
        pool.start()
    return pools


def session_store() -> SessionStore:
    return current_app.extensions["session_store"]


def blob_storage() -> BlobStorage:
    return current_app.extensions["blob_storage"]


def job_queue(name: str) -> JobQueue:
    return current_app.extensions["job_queues"][name]


def file_tree() -> FileTree:
    return FileTree(
        storage=blob_storage(),
        thumbnail_queue=job_queue(THUMBNAIL_QUEUE),
        thumbnail_sizes=current_app.config["THUMBNAIL_SIZES"],
        page_size=int(current_app.config["FILES_PAGE_SIZE"]),
    )
