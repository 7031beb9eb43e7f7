from __future__ import annotations

import argparse
import logging
import signal
import threading

from files_manager import create_app
from files_manager.services import start_worker_pools


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the thumbnail and welcome job workers.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )

    # Pools are started here, not by the app factory.
    app = create_app({"START_WORKERS": False})
    pools = start_worker_pools(app, force=True) or {}

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())
    stop.wait()

    for pool in pools.values():
        pool.stop(timeout=5)
    logging.getLogger(__name__).info("workers stopped")


if __name__ == "__main__":
    main()
