"""Backup naming and discovery for a rotating log path.

Backups live next to the active file and are named
``<base>.<YYYYMMDD-HHMMSS>[_NNN][.gz]``. The ``_NNN`` suffix only appears when
two rotations land in the same second. Names sort lexicographically in
chronological order, compressed or not.
"""

import logging
import os
import re
from datetime import datetime

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
COMPRESSED_EXT = ".gz"
MAX_SEQUENCE = 999


def _pattern(base_path: str) -> re.Pattern:
    name = re.escape(os.path.basename(base_path))
    return re.compile(rf"^{name}\.(\d{{8}}-\d{{6}})(?:_(\d{{3}}))?(\.gz)?$")


def backup_name(base_path: str, now: datetime) -> str:
    """Pick a free backup path for a rotation happening at *now*."""
    stem = f"{base_path}.{now.strftime(TIMESTAMP_FORMAT)}"
    candidate = stem
    seq = 0
    while os.path.exists(candidate) or os.path.exists(candidate + COMPRESSED_EXT):
        seq += 1
        if seq > MAX_SEQUENCE:
            raise FileExistsError(f"No free backup name for {stem}")
        candidate = f"{stem}_{seq:03d}"
    return candidate


def parse_backup_timestamp(path: str, base_path: str) -> datetime | None:
    """Extract the rotation timestamp from a backup path. Returns None on failure."""
    match = _pattern(base_path).match(os.path.basename(path))
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def is_compressed(path: str) -> bool:
    return path.endswith(COMPRESSED_EXT)


def list_backups(base_path: str) -> list[str]:
    """Return every backup path (compressed and uncompressed) for *base_path*, unsorted."""
    directory = os.path.dirname(base_path) or "."
    pattern = _pattern(base_path)
    try:
        names = os.listdir(directory)
    except FileNotFoundError:
        return []
    return [
        os.path.join(os.path.dirname(base_path), name)
        for name in names
        if pattern.match(name)
    ]


def _name_key(path: str) -> str:
    name = os.path.basename(path)
    if is_compressed(name):
        name = name[: -len(COMPRESSED_EXT)]
    return name


def sort_by_name(paths: list[str]) -> list[str]:
    """Oldest first, using the timestamp embedded in the name."""
    return sorted(paths, key=_name_key)


def sort_by_mtime(paths: list[str]) -> list[str]:
    """Oldest first by modification time. Paths that vanish while stat'ing are dropped."""
    stamped = []
    for path in paths:
        try:
            stamped.append((os.stat(path).st_mtime, path))
        except FileNotFoundError:
            logger.debug("Backup %s vanished before it could be stat'ed", path)
    stamped.sort(key=lambda item: item[0])
    return [path for _, path in stamped]
