"""Append-only byte sink with size-based and time-based rotation."""

import logging
import os
import threading
import time
from datetime import datetime, timezone

from rotating_sink.background import BackgroundDispatcher
from rotating_sink.backups import backup_name
from rotating_sink.compressor import compress_backup
from rotating_sink.config import RotationConfig
from rotating_sink.metrics import SinkMetrics
from rotating_sink.retention import enforce_retention

logger = logging.getLogger(__name__)


class RotatingSink:
    """Thread-safe writer for a single log path.

    One lock covers the whole check-rotate-append sequence, so bytes never land
    in a file that has already been renamed to a backup. Compression and
    retention are handed to a background dispatcher once a rotation finishes.

    The file is opened lazily on the first write, and a write after ``close()``
    reopens it.
    """

    def __init__(self, config: RotationConfig, time_func=None, metrics=None,
                 dispatcher=None, monotonic_func=None):
        self._config = config
        # Wall clock names backups; the monotonic clock measures the interval.
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._monotonic = monotonic_func or time.monotonic
        self._lock = threading.Lock()
        self._file = None
        self._size = 0
        self._last_rotation = self._time_func()
        self._last_rotation_mono = self._monotonic()
        self._metrics = metrics or SinkMetrics()
        self._background = dispatcher or BackgroundDispatcher(
            track=config.wait_for_background
        )

    @property
    def path(self) -> str:
        return self._config.base_path

    @property
    def config(self) -> RotationConfig:
        return self._config

    @property
    def metrics(self) -> SinkMetrics:
        return self._metrics

    @property
    def current_size(self) -> int:
        with self._lock:
            return self._size

    @property
    def last_rotation(self) -> datetime:
        with self._lock:
            return self._last_rotation

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._file is not None

    def _open_file(self):
        directory = os.path.dirname(self._config.base_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        f = open(self._config.base_path, "ab", buffering=0)
        try:
            size = os.fstat(f.fileno()).st_size
        except OSError:
            f.close()
            raise
        self._file = f
        self._size = size

    def _rotation_reason(self, pending: int) -> str | None:
        cfg = self._config
        if cfg.max_size_bytes > 0 and self._size + pending > cfg.max_size_bytes:
            return "size"
        if cfg.backup_interval_seconds > 0:
            elapsed = self._monotonic() - self._last_rotation_mono
            if elapsed > cfg.backup_interval_seconds:
                return "time"
        return None

    def _rotate(self, reason: str) -> str | None:
        """Close, rename to a timestamped backup, reopen. Returns the backup path."""
        if self._file is not None:
            f, self._file = self._file, None
            f.close()

        base = self._config.base_path
        backup = backup_name(base, self._time_func())
        try:
            os.rename(base, backup)
        except FileNotFoundError:
            logger.debug("Nothing to rotate at %s", base)
            backup = None
        else:
            logger.info("Rotated (%s): %s -> %s", reason, base, backup)
            if self._config.compress_backups:
                self._background.submit(
                    compress_backup, backup, self._metrics, name="compress-backup"
                )

        self._open_file()
        self._last_rotation = self._time_func()
        self._last_rotation_mono = self._monotonic()
        self._metrics.record_rotation(reason)

        if self._config.max_backups > 0:
            self._background.submit(
                enforce_retention, base, self._config.max_backups, self._metrics,
                name="enforce-retention",
            )
        return backup

    def open(self):
        """Open the active file now instead of on the first write."""
        with self._lock:
            if self._file is None:
                self._open_file()

    def write(self, data: bytes) -> int:
        """Append *data*, rotating first if needed. Returns the bytes written.

        Errors from directory creation, open, rename or the write itself are
        raised to the caller; the sink stays usable afterwards.
        """
        with self._lock:
            if self._file is None:
                self._open_file()

            reason = self._rotation_reason(len(data))
            if reason is not None:
                self._rotate(reason)

            n = self._file.write(data) or 0
            self._size += n
        self._metrics.record_write(n)
        return n

    def force_rotate(self) -> str | None:
        """Rotate now regardless of size or age. Returns the backup path, if any.

        Rotating a sink that has never written still reopens the active file
        and advances the rotation clock.
        """
        with self._lock:
            return self._rotate("forced")

    def close(self):
        """Close the active file. Safe to call more than once."""
        with self._lock:
            if self._file is None:
                return
            f, self._file = self._file, None
            f.close()

    def wait_for_background(self, timeout: float | None = None) -> bool:
        """Wait for compression/retention tasks. Only blocks when tracking is enabled."""
        return self._background.wait(timeout)
