"""Gzip compression of rotated backups, meant to run off the write path."""

import gzip
import logging
import os
import shutil
import zlib

from rotating_sink.backups import COMPRESSED_EXT, is_compressed

logger = logging.getLogger(__name__)


def compress_file(filepath: str) -> str:
    """Gzip-compress a file and remove the original. Returns the .gz path.

    If writing the archive fails, the original is left in place, the partial
    .gz is removed, and the error is re-raised. Once the archive is complete
    it is kept even if the original has meanwhile disappeared.
    """
    gz_path = filepath + COMPRESSED_EXT
    st = os.stat(filepath)
    try:
        with open(filepath, "rb") as f_in, gzip.open(gz_path, "wb") as f_out:
            shutil.copyfileobj(f_in, f_out)
    except BaseException:
        _discard(gz_path)
        raise
    # Retention orders by mtime, so the archive keeps the backup's.
    os.utime(gz_path, ns=(st.st_atime_ns, st.st_mtime_ns))
    try:
        os.remove(filepath)
    except FileNotFoundError:
        logger.debug("Backup %s already removed, keeping %s", filepath, gz_path)
    return gz_path


def _discard(path: str):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove partial archive %s: %s", path, e)


def compress_backup(filepath: str, metrics=None) -> str | None:
    """Background entry point: compress *filepath*, reporting instead of raising."""
    try:
        gz_path = compress_file(filepath)
    except FileNotFoundError:
        # A concurrent retention pass got there first.
        logger.debug("Backup %s disappeared before compression", filepath)
        return None
    except (OSError, zlib.error) as e:
        logger.error("Failed to compress backup %s: %s", filepath, e)
        if metrics is not None:
            metrics.record_compression(False)
        return None

    logger.info("Compressed: %s", gz_path)
    if metrics is not None:
        metrics.record_compression(True)
    return gz_path


def read_backup(filepath: str) -> bytes:
    """Read a backup's original bytes, decompressing .gz files transparently."""
    if is_compressed(filepath):
        with gzip.open(filepath, "rb") as f:
            return f.read()
    with open(filepath, "rb") as f:
        return f.read()
