#!/usr/bin/env python3
"""
CLI for the gowatch live-reload loop.

Usage:
    python -m src.cli --dir ./myservice
    python -m src.cli --dir ./myservice --build-flags=-race --run-flags="--port 8080"
    python -m src.cli --dir ./myservice --ignore "*_test.go" "vendor/*"
"""

import argparse
import logging
import shlex
import signal
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from src.gowatch import GowatchConfig, Watcher, WatcherError


logger = logging.getLogger("gowatch")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class GracefulShutdown:
    """Stop the watcher on SIGINT/SIGTERM."""

    def __init__(self, watcher: Watcher):
        self.watcher = watcher
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.watcher.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gowatch",
        description="Rebuild and restart a Go program whenever its sources change",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Watch the current directory
  gowatch

  # Watch another module, passing flags to the build and to the program
  gowatch --dir ./api --build-flags=-race --run-flags="--port 8080"

  # Ignore test files
  gowatch --ignore "*_test.go"

Settings can also come from GOWATCH_DIR, GOWATCH_BUILD_FLAGS,
GOWATCH_RUN_FLAGS, GOWATCH_IGNORE and GOWATCH_SUFFIX (a .env file in the
working directory is loaded first). Command-line flags win.
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--dir", help="Directory to watch and build (default: current directory)")
    parser.add_argument("--build-flags", help="Flags passed to the build command, shell quoted")
    parser.add_argument("--run-flags", help="Flags passed to the program, shell quoted")
    parser.add_argument("--ignore", nargs="*", help="Glob patterns of files that never trigger a restart")
    parser.add_argument("--suffix", help="Suffix of source files that trigger a restart (default: .go)")
    parser.add_argument("--build-command", nargs="+", help="Build command (default: go build)")
    parser.add_argument(
        "--shutdown-timeout",
        type=float,
        help="Seconds to wait for the program to exit before killing it",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> GowatchConfig:
    """Apply command-line flags on top of the environment config."""
    config = GowatchConfig.from_env()

    if args.dir:
        config.root_dir = Path(args.dir)
    if args.build_flags is not None:
        config.build_flags = shlex.split(args.build_flags)
    if args.run_flags is not None:
        config.run_flags = shlex.split(args.run_flags)
    if args.ignore is not None:
        config.ignore_patterns = list(args.ignore)
    if args.suffix:
        config.source_suffix = args.suffix
    if args.build_command:
        config.build_command = list(args.build_command)
    if args.shutdown_timeout is not None:
        config.shutdown_timeout_s = args.shutdown_timeout

    config.root_dir = config.root_dir.resolve()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    config = config_from_args(args)
    if not config.root_dir.is_dir():
        logger.error(f"Not a directory: {config.root_dir}")
        return 1

    watcher = Watcher(config)
    GracefulShutdown(watcher)

    logger.info(f"Watching {config.root_dir} for {config.source_suffix} changes")
    if config.ignore_patterns:
        logger.info(f"Ignoring: {', '.join(config.ignore_patterns)}")
    logger.info("Press Ctrl+C to stop")

    try:
        watcher.run()
    except WatcherError as e:
        output = getattr(e, "output", "")
        if output:
            logger.error(output.rstrip())
        logger.error(f"gowatch stopped: {e}")
        return 1

    logger.info("gowatch stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
