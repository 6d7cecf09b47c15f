"""CLI log inspector: list, read, and search rotated logs, or force a rotation."""

import argparse
import logging
import os
import sys
from dataclasses import replace

from rotating_sink.config import resolve_config
from rotating_sink.inspector import list_log_files, read_file, search_files
from rotating_sink.sink import RotatingSink


def _human_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [rotating-sink] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    config = resolve_config()

    parser = argparse.ArgumentParser(description="Inspect rotated log files")
    parser.add_argument("--log-path", default=config.base_path,
                        help="Active log file path")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="List the log and its backups")
    group.add_argument("--read", metavar="PATH", help="Read a log or backup file")
    group.add_argument("--search", metavar="TEXT", help="Search text across all log files")
    group.add_argument("--rotate", action="store_true", help="Force a rotation (only while no other process writes the log)")
    args = parser.parse_args(argv)

    if args.list:
        files = list_log_files(args.log_path)
        if not files:
            print("No log files found.")
            return 0
        for path in files:
            print(f"  {os.path.basename(path)}  ({_human_size(os.path.getsize(path))})")

    elif args.read:
        try:
            sys.stdout.buffer.write(read_file(args.read))
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    elif args.search:
        results = search_files(args.log_path, args.search)
        if not results:
            print(f"No matches found for '{args.search}'.")
            return 0
        for path, line_num, line in results:
            print(f"  [{os.path.basename(path)}:{line_num}] {line}")

    elif args.rotate:
        # Wait for compression/retention before the process exits.
        rotate_config = replace(config, base_path=args.log_path, wait_for_background=True)
        sink = RotatingSink(rotate_config)
        try:
            backup = sink.force_rotate()
        except OSError as e:
            print(f"Error: rotation failed: {e}", file=sys.stderr)
            return 1
        finally:
            sink.close()
        sink.wait_for_background()
        print(f"Rotated to {backup}" if backup else "Nothing to rotate.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
