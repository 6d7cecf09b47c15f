"""Rotating sink demo: writes synthetic logs through a rotating file handler.

SIGHUP forces a rotation; SIGINT/SIGTERM stop the loop.
"""

import logging
import random
import signal
import sys
import time
import uuid

from rotating_sink.config import resolve_config
from rotating_sink.handler import RotatingSinkHandler
from rotating_sink.sink import RotatingSink

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [rotating-sink] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True
_rotate_requested = False


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


def _hup_handler(_sig, _frame):
    global _rotate_requested
    _rotate_requested = True


LEVELS = [logging.INFO] * 4 + [logging.DEBUG, logging.WARNING, logging.ERROR]
SERVICES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    logging.INFO: [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
        "Database query completed in 12ms",
    ],
    logging.DEBUG: [
        "Entering request handler",
        "Parsed request body",
    ],
    logging.WARNING: [
        "Slow query detected (>500ms)",
        "Connection pool nearing capacity",
    ],
    logging.ERROR: [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
    ],
}


def main():
    global _rotate_requested
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, _hup_handler)

    config = resolve_config()
    logger.info("Starting rotating sink demo")
    logger.info(
        "Config: path=%s, max_size=%d bytes, interval=%ss, max_backups=%d, compress=%s",
        config.base_path, config.max_size_bytes, config.backup_interval_seconds,
        config.max_backups, config.compress_backups,
    )

    sink = RotatingSink(config)
    handler = RotatingSinkHandler(sink)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(service)s] [%(req_id)s] %(message)s"
    ))
    app_log = logging.getLogger("demo.app")
    app_log.setLevel(logging.DEBUG)
    app_log.propagate = False
    app_log.addHandler(handler)

    entries_written = 0
    try:
        while _running:
            if _rotate_requested:
                _rotate_requested = False
                backup = sink.force_rotate()
                logger.info("Forced rotation: %s", backup or "nothing to rotate")

            level = random.choice(LEVELS)
            app_log.log(
                level,
                random.choice(MESSAGES[level]),
                extra={"service": random.choice(SERVICES), "req_id": uuid.uuid4().hex[:8]},
            )
            entries_written += 1
            time.sleep(0.05)
    except KeyboardInterrupt:
        pass

    handler.close()
    logger.info("Shut down cleanly. Total entries written: %d", entries_written)
    logger.info("Metrics: %s", sink.metrics.snapshot())


if __name__ == "__main__":
    main()
