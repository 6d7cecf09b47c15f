"""Thread-safe counters for the rotating sink and its background work."""

import threading
import time


class SinkMetrics:
    """Tracks writes, rotations, and background compression/retention outcomes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._bytes_written = 0
        self._writes = 0
        self._rotations = {"size": 0, "time": 0, "forced": 0}
        self._compressions = 0
        self._compression_failures = 0
        self._backups_removed = 0
        self._removal_failures = 0
        self._start_time = time.monotonic()

    def record_write(self, nbytes: int):
        with self._lock:
            self._writes += 1
            self._bytes_written += nbytes

    def record_rotation(self, reason: str):
        with self._lock:
            self._rotations[reason] = self._rotations.get(reason, 0) + 1

    def record_compression(self, ok: bool):
        with self._lock:
            if ok:
                self._compressions += 1
            else:
                self._compression_failures += 1

    def record_removal(self, ok: bool):
        with self._lock:
            if ok:
                self._backups_removed += 1
            else:
                self._removal_failures += 1

    @property
    def rotations(self) -> int:
        with self._lock:
            return sum(self._rotations.values())

    def snapshot(self) -> dict:
        with self._lock:
            elapsed = time.monotonic() - self._start_time
            return {
                "bytes_written": self._bytes_written,
                "writes": self._writes,
                "rotations": sum(self._rotations.values()),
                "rotations_by_reason": dict(self._rotations),
                "compressions": self._compressions,
                "compression_failures": self._compression_failures,
                "backups_removed": self._backups_removed,
                "removal_failures": self._removal_failures,
                "elapsed_seconds": round(elapsed, 1),
            }
