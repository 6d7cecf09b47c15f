"""Tests for backup naming and discovery."""

import os
import shutil
import tempfile
import unittest
from datetime import datetime

from rotating_sink.backups import (
    backup_name,
    is_compressed,
    list_backups,
    parse_backup_timestamp,
    sort_by_mtime,
    sort_by_name,
)

NOW = datetime(2025, 1, 15, 12, 0, 0)


class _TmpDirCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.base = os.path.join(self.tmpdir, "app.log")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _touch(self, name, mtime=None):
        path = os.path.join(self.tmpdir, name)
        open(path, "w").close()
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path


class TestBackupName(_TmpDirCase):
    def test_timestamp_format(self):
        self.assertEqual(backup_name(self.base, NOW), self.base + ".20250115-120000")

    def test_collision_appends_sequence(self):
        self._touch("app.log.20250115-120000")
        self.assertEqual(backup_name(self.base, NOW), self.base + ".20250115-120000_001")

    def test_collision_with_compressed_backup(self):
        self._touch("app.log.20250115-120000.gz")
        self._touch("app.log.20250115-120000_001")
        self.assertEqual(backup_name(self.base, NOW), self.base + ".20250115-120000_002")


class TestParseBackupTimestamp(unittest.TestCase):
    def test_valid_names(self):
        for name in ("app.log.20250115-120000", "app.log.20250115-120000.gz",
                     "app.log.20250115-120000_003"):
            self.assertEqual(parse_backup_timestamp(name, "app.log"), NOW)

    def test_invalid_names(self):
        for name in ("app.log", "random.txt", "app.log.notatime", "app.log.20251399-999999"):
            self.assertIsNone(parse_backup_timestamp(name, "app.log"))


class TestListBackups(_TmpDirCase):
    def test_returns_only_backups(self):
        self._touch("app.log")
        self._touch("app.log.20250115-120000")
        self._touch("app.log.20250115-130000.gz")
        self._touch("app.log.20250115-130000_001")
        self._touch("app.log.old")
        self._touch("other.log.20250115-120000")

        result = sort_by_name(list_backups(self.base))

        self.assertEqual(result, [
            os.path.join(self.tmpdir, "app.log.20250115-120000"),
            os.path.join(self.tmpdir, "app.log.20250115-130000.gz"),
            os.path.join(self.tmpdir, "app.log.20250115-130000_001"),
        ])

    def test_missing_directory(self):
        self.assertEqual(list_backups(os.path.join(self.tmpdir, "nope", "app.log")), [])

    def test_is_compressed(self):
        self.assertTrue(is_compressed("app.log.20250115-120000.gz"))
        self.assertFalse(is_compressed("app.log.20250115-120000"))


class TestOrdering(_TmpDirCase):
    def test_name_and_mtime_orderings_agree(self):
        names = [
            "app.log.20250115-115959",
            "app.log.20250115-120000.gz",
            "app.log.20250115-120000_001",
            "app.log.20250115-120000_002.gz",
            "app.log.20250116-000000",
        ]
        base_mtime = 1_700_000_000
        paths = [self._touch(n, base_mtime + i * 10) for i, n in enumerate(names)]

        shuffled = [paths[3], paths[0], paths[4], paths[2], paths[1]]
        self.assertEqual(sort_by_name(shuffled), paths)
        self.assertEqual(sort_by_mtime(shuffled), paths)

    def test_mtime_drops_vanished_files(self):
        kept = self._touch("app.log.20250115-120000", 1_700_000_000)
        gone = os.path.join(self.tmpdir, "app.log.20250115-130000")
        self.assertEqual(sort_by_mtime([gone, kept]), [kept])


if __name__ == "__main__":
    unittest.main()
