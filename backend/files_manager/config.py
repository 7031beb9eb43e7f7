from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[1]


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    cleaned = raw.strip()
    return cleaned or default


def env_sizes(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    raw = os.getenv(name)
    if not raw:
        return default

    sizes: list[int] = []
    for chunk in raw.split(","):
        try:
            value = int(chunk.strip())
        except ValueError:
            return default
        if value <= 0:
            return default
        sizes.append(value)
    return tuple(sizes) or default


def env_origins() -> list[str]:
    raw_origins = os.getenv("FRONTEND_ORIGINS")
    if raw_origins:
        origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        if origins:
            return origins

    return ["http://localhost:5173", "http://127.0.0.1:5173"]


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'files_manager.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    FRONTEND_ORIGINS = env_origins()
    FOLDER_PATH = env_str("FOLDER_PATH", "/tmp/files_manager")

    REDIS_URL = env_str("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = env_str("CACHE_BACKEND", "redis")
    QUEUE_BACKEND = env_str("QUEUE_BACKEND", "redis")

    SESSION_TTL_SECONDS = max(1, env_int("SESSION_TTL_SECONDS", 60 * 60 * 24))
    FILES_PAGE_SIZE = max(1, env_int("FILES_PAGE_SIZE", 20))
    THUMBNAIL_SIZES = env_sizes("THUMBNAIL_SIZES", (500, 250, 100))

    START_WORKERS = env_bool("START_WORKERS", False)
    THUMBNAIL_WORKERS = max(1, env_int("THUMBNAIL_WORKERS", 2))
    WELCOME_WORKERS = max(1, env_int("WELCOME_WORKERS", 1))
    QUEUE_POLL_TIMEOUT_SECONDS = max(1, env_int("QUEUE_POLL_TIMEOUT_SECONDS", 1))

    MAX_CONTENT_LENGTH = env_int("MAX_CONTENT_LENGTH", 64 * 1024 * 1024)
