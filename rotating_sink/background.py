"""Fire-and-forget dispatch of post-rotation work."""

import logging
import threading
import time

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """Runs each task on its own daemon thread.

    With ``track=True`` the dispatcher remembers live threads so tests can
    ``wait()`` for them; otherwise nothing is kept and ``wait()`` returns at once.
    """

    def __init__(self, track: bool = False):
        self._track = track
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def submit(self, fn, *args, name: str | None = None):
        thread = threading.Thread(
            target=self._run, args=(fn, args), name=name, daemon=True
        )
        if self._track:
            with self._lock:
                self._threads = [t for t in self._threads if t.is_alive()]
                self._threads.append(thread)
        thread.start()

    @staticmethod
    def _run(fn, args):
        try:
            fn(*args)
        except Exception:
            logger.exception("Background task %s failed", getattr(fn, "__name__", fn))

    def wait(self, timeout: float | None = None) -> bool:
        """Block until tracked tasks finish. Returns False if *timeout* expired first."""
        if not self._track:
            return True
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = [t for t in self._threads if t.is_alive()]
                self._threads = pending
            if not pending:
                return True
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            pending[0].join(remaining)
