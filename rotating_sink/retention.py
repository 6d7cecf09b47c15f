"""Count-based pruning of old backups."""

import logging
import os

from rotating_sink.backups import COMPRESSED_EXT, is_compressed, list_backups, sort_by_mtime

logger = logging.getLogger(__name__)


def _logical_name(path: str) -> str:
    return path[: -len(COMPRESSED_EXT)] if is_compressed(path) else path


def group_backups(paths: list[str]) -> list[list[str]]:
    """Group raw/.gz twins into one backup each, oldest first.

    Both members exist only while a compression is in flight; the group's age
    is its oldest member's mtime.
    """
    groups: dict[str, list[str]] = {}
    for path in sort_by_mtime(paths):
        groups.setdefault(_logical_name(path), []).append(path)
    return list(groups.values())


def enforce_retention(base_path: str, max_backups: int, metrics=None) -> list[str]:
    """Delete the oldest backups beyond *max_backups*. Returns the deleted paths.

    Runs detached from any caller, so failures are logged per file and never
    raised. ``max_backups == 0`` means unlimited retention. A backup that is
    still being compressed is left for a later pass.
    """
    if max_backups <= 0:
        return []

    groups = group_backups(list_backups(base_path))
    if len(groups) <= max_backups:
        return []

    excess = len(groups) - max_backups
    deleted = []
    for members in groups[:excess]:
        if len(members) > 1:
            logger.debug("Compression of %s in flight, skipping", _logical_name(members[0]))
            continue
        path = members[0]
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug("Backup %s already removed", path)
            continue
        except OSError as e:
            logger.error("Failed to remove old backup %s: %s", path, e)
            if metrics is not None:
                metrics.record_removal(False)
            continue
        deleted.append(path)
        if metrics is not None:
            metrics.record_removal(True)

    if deleted:
        logger.info("Purged %d backup(s): %s", len(deleted), ", ".join(deleted))
    return deleted
