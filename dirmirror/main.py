"""
Command Line Entry Point

Builds a DirectoryMirror from the configuration file and runs one of the
watch, copy or clean commands.

Usage:
    python -m dirmirror watch
    python -m dirmirror copy --config dirmirror.yaml
    python -m dirmirror clean

Author: dirmirror Project
License: MIT
"""

import argparse
import sys
import threading
from typing import List, Optional

from pydantic import ValidationError

from .config.config_loader import ConfigLoader
from .config.schema import LogLevel
from .core.exceptions import MirrorError
from .core.mirror import DirectoryMirror
from .utils.logger import setup_logging

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG_ERROR = 2


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dirmirror",
        description="Mirror source directories into destination directories."
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=("watch", "copy", "clean"),
        default="watch",
        help="watch for changes (default), copy once, or empty the destinations"
    )
    parser.add_argument("--config", default=None, help="Path to the YAML configuration file.")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=[level.value for level in LogLevel],
        help="Override the configured log level."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, stop_event: Optional[threading.Event] = None) -> int:
    """
    Run the command line interface.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])
        stop_event: Ends watch mode when set, in addition to Ctrl+C

    Returns:
        Process exit code
    """
    args = parse_args(sys.argv[1:] if argv is None else argv)

    try:
        config = ConfigLoader(args.config).load()
    except (ValueError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    app = config.app
    logger = setup_logging(
        log_level=args.log_level or app.log_level,
        log_to_file=app.log_to_file,
        log_file_path=app.log_file_path,
        log_rotation_size=app.log_rotation_size,
        log_retention_count=app.log_retention_count,
        json_format=app.json_format
    )

    try:
        mirror = DirectoryMirror.from_config(config, logger=logger)
    except (MirrorError, OSError) as e:
        logger.error(f"Config error: {e}")
        return EXIT_CONFIG_ERROR

    if args.command == "copy":
        report = mirror.copy()
        return EXIT_OK if report.succeeded else EXIT_FAILURES

    if args.command == "clean":
        report = mirror.clean()
        return EXIT_OK if report.succeeded else EXIT_FAILURES

    stop_event = stop_event or threading.Event()
    mirror.watch()
    logger.info("Watching for changes... (Ctrl+C to stop)")

    try:
        while not stop_event.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Stopping...")
    finally:
        mirror.stop()

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
