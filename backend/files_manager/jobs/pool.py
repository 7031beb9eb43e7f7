from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from flask import Flask
from redis.exceptions import RedisError

from ..extensions import db
from .queue import JobError, JobQueue


logger = logging.getLogger(__name__)

JobHandler = Callable[[dict[str, Any]], Any]


@dataclass
class JobOutcome:
    payload: dict[str, Any]
    ok: bool
    error: str | None = None
    result: Any = None


class WorkerPool:
    """Fixed number of daemon threads consuming one job queue.

    Jobs run inside an application context so handlers can use the database
    session. A failed job is logged and dropped; nothing is retried.
    """

    def __init__(self, app: Flask, job_queue: JobQueue, handler: JobHandler, concurrency: int = 1, poll_timeout: float = 1.0) -> None:
        self._app = app
        self.queue = job_queue
        self._handler = handler
        self._concurrency = max(1, int(concurrency))
        self._poll_timeout = max(0.1, float(poll_timeout))
        self._threads: list[threading.Thread] = []
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(target=self._run, name=f"{self.queue.name}-worker-{index}", daemon=True)
            for index in range(self._concurrency)
        ]
        for thread in self._threads:
            thread.start()
        logger.info("started %d worker(s) for queue %s", self._concurrency, self.queue.name)

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout)

    def process(self, payload: dict[str, Any]) -> JobOutcome:
        with self._app.app_context():
            try:
                result = self._handler(payload)
            except JobError as error:
                db.session.rollback()
                logger.warning(
                    "job on %s failed (%s): %s payload=%s",
                    self.queue.name,
                    "permanent" if error.permanent else "transient",
                    error,
                    payload,
                )
                return JobOutcome(payload=payload, ok=False, error=str(error))
            except Exception as error:
                db.session.rollback()
                logger.exception("job on %s crashed payload=%s", self.queue.name, payload)
                return JobOutcome(payload=payload, ok=False, error=str(error))
        return JobOutcome(payload=payload, ok=True, result=result)

    def drain(self) -> list[JobOutcome]:
        outcomes: list[JobOutcome] = []
        while True:
            payload = self.queue.dequeue(timeout=None)
            if payload is None:
                return outcomes
            outcomes.append(self.process(payload))

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                payload = self.queue.dequeue(timeout=self._poll_timeout)
            except RedisError as error:
                logger.warning("queue %s unreachable: %s", self.queue.name, error)
                self._stop_event.wait(self._poll_timeout)
                continue
            if payload is None:
                continue
            self.process(payload)


def should_start_workers(app: Flask) -> bool:
    if app.config.get("TESTING") or not app.config.get("START_WORKERS"):
        return False

    if app.debug:
        return os.environ.get("WERKZEUG_RUN_MAIN") == "true"
    return True
