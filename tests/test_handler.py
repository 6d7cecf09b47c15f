"""Tests for the logging integration."""

import logging
import os
import shutil
import tempfile
import unittest
from unittest import mock

from rotating_sink import handler as handler_module
from rotating_sink.backups import list_backups
from rotating_sink.config import RotationConfig
from rotating_sink.handler import (
    RotatingSinkHandler,
    attach_rotating_handler,
    get_default_sink,
    set_default_sink,
)
from rotating_sink.sink import RotatingSink


class _HandlerCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.base = os.path.join(self.tmpdir, "app.log")
        self.logger = logging.getLogger(f"test.handler.{self.id()}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

    def tearDown(self):
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()
        shutil.rmtree(self.tmpdir)

    def _config(self, **overrides):
        defaults = dict(
            base_path=self.base,
            max_size_bytes=0,
            max_backups=0,
            backup_interval_seconds=0,
            compress_backups=False,
        )
        defaults.update(overrides)
        return RotationConfig(**defaults)


class TestRotatingSinkHandler(_HandlerCase):
    def test_records_written_one_per_line(self):
        sink = RotatingSink(self._config())
        h = RotatingSinkHandler(sink)
        h.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        self.logger.addHandler(h)

        self.logger.info("hello %s", "world")
        self.logger.warning("café")
        h.close()

        with open(self.base, "rb") as f:
            self.assertEqual(f.read(), "INFO hello world\nWARNING café\n".encode("utf-8"))
        self.assertFalse(sink.is_open)

    def test_records_rotate_with_the_sink(self):
        sink = RotatingSink(self._config(max_size_bytes=200))
        self.logger.addHandler(RotatingSinkHandler(sink))

        for i in range(40):
            self.logger.info("message number %04d with padding", i)

        self.assertGreater(len(list_backups(self.base)), 0)
        self.assertLessEqual(os.path.getsize(self.base), 200)

    def test_write_error_goes_to_handle_error(self):
        sink = mock.Mock(spec=RotatingSink)
        sink.write.side_effect = OSError("disk gone")
        h = RotatingSinkHandler(sink)
        self.logger.addHandler(h)

        with mock.patch.object(h, "handleError") as handle_error:
            self.logger.error("boom")

        handle_error.assert_called_once()


class TestAttachRotatingHandler(_HandlerCase):
    def test_attaches_rotating_handler(self):
        h = attach_rotating_handler(
            self.logger, self._config(), logging.Formatter("%(message)s")
        )
        self.assertIsInstance(h, RotatingSinkHandler)
        self.assertIn(h, self.logger.handlers)
        self.assertTrue(os.path.exists(self.base))

        self.logger.info("attached")
        with open(self.base) as f:
            self.assertEqual(f.read(), "attached\n")

    def test_falls_back_to_stderr(self):
        blocker = os.path.join(self.tmpdir, "blocker")
        open(blocker, "w").close()
        config = self._config(base_path=os.path.join(blocker, "app.log"))

        with self.assertLogs("rotating_sink.handler", level="WARNING"):
            h = attach_rotating_handler(self.logger, config)

        self.assertIsInstance(h, logging.StreamHandler)
        self.assertNotIsInstance(h, RotatingSinkHandler)
        self.assertIn(h, self.logger.handlers)


class TestDefaultSink(unittest.TestCase):
    def setUp(self):
        set_default_sink(None)
        self.addCleanup(set_default_sink, None)

    def test_lazily_built_once(self):
        with mock.patch.object(handler_module, "load_config",
                               return_value=RotationConfig(base_path="/tmp/default.log")) as load:
            first = get_default_sink()
            second = get_default_sink()

        self.assertIs(first, second)
        self.assertEqual(first.path, "/tmp/default.log")
        load.assert_called_once()

    def test_replaceable_for_tests(self):
        sink = RotatingSink(RotationConfig(base_path="/tmp/injected.log"))
        set_default_sink(sink)
        self.assertIs(get_default_sink(), sink)


if __name__ == "__main__":
    unittest.main()
