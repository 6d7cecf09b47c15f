"""Bridges the standard logging facility onto a RotatingSink."""

import logging
import sys
import threading

from rotating_sink.config import RotationConfig, load_config
from rotating_sink.sink import RotatingSink

logger = logging.getLogger(__name__)


class RotatingSinkHandler(logging.Handler):
    """logging.Handler that writes each formatted record as one UTF-8 line."""

    terminator = "\n"

    def __init__(self, sink: RotatingSink, level=logging.NOTSET):
        super().__init__(level)
        self._sink = sink

    @property
    def sink(self) -> RotatingSink:
        return self._sink

    def emit(self, record: logging.LogRecord):
        try:
            msg = self.format(record) + self.terminator
            self._sink.write(msg.encode("utf-8"))
        except Exception:
            self.handleError(record)

    def close(self):
        try:
            self._sink.close()
        finally:
            super().close()


def attach_rotating_handler(target: logging.Logger, config: RotationConfig,
                            formatter: logging.Formatter | None = None) -> logging.Handler:
    """Attach a rotating handler to *target*, falling back to stderr if the file can't be opened."""
    sink = RotatingSink(config)
    try:
        sink.open()
        handler = RotatingSinkHandler(sink)
    except OSError as e:
        logger.warning(
            "Failed to open rotating log %s: %s, falling back to stderr",
            config.base_path, e,
        )
        handler = logging.StreamHandler(sys.stderr)
    if formatter is not None:
        handler.setFormatter(formatter)
    target.addHandler(handler)
    return handler


_default_sink: RotatingSink | None = None
_default_lock = threading.Lock()


def get_default_sink() -> RotatingSink:
    """Process-wide sink built from the environment on first use."""
    global _default_sink
    with _default_lock:
        if _default_sink is None:
            _default_sink = RotatingSink(load_config())
        return _default_sink


def set_default_sink(sink: RotatingSink | None):
    """Replace the process-wide sink (None resets to lazy construction)."""
    global _default_sink
    with _default_lock:
        _default_sink = sink
