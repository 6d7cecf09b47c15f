"""Inspector logic: list, read, and search the active log and its backups."""

import gzip
import os

from rotating_sink.backups import list_backups, sort_by_name
from rotating_sink.compressor import read_backup


def list_log_files(base_path: str) -> list[str]:
    """Return the active file (if present) followed by backups, oldest first."""
    files = sort_by_name(list_backups(base_path))
    if os.path.exists(base_path):
        files.insert(0, base_path)
    return files


def read_file(path: str) -> bytes:
    """Read a log file, transparently decompressing .gz files."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")
    return read_backup(path)


def search_files(base_path: str, text: str) -> list[tuple[str, int, str]]:
    """Search for text across all log files. Returns (path, line_num, line) tuples."""
    results = []
    for path in list_log_files(base_path):
        try:
            content = read_backup(path).decode("utf-8", errors="replace")
        except (OSError, EOFError, gzip.BadGzipFile):
            continue
        for line_num, line in enumerate(content.splitlines(), 1):
            if text in line:
                results.append((path, line_num, line))
    return results
