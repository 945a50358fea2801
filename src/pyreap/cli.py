"""pyreap - command line entry point."""

import argparse
import logging
import sys

from pyreap.models import ColumnLayout
from pyreap.monitor import InvalidPatternError, ProcessReaper

logger = logging.getLogger("pyreap")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="pyreap",
        description="Periodically terminate every process whose command line matches PATTERN.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "pattern",
        metavar="PATTERN",
        help="regular expression searched for in each process command line",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=logging.getLevelNamesMapping(),
        help="change python log level",
    )
    return parser


def protect_pattern(argv: list[str]) -> list[str]:
    """Keep a trailing pattern such as ``-bash`` from being read as an option."""
    if not argv or "--" in argv:
        return argv
    *options, last = argv
    if not last.startswith("-") or last.startswith("--") or last == "-h":
        return argv
    if options and options[-1] == "--log-level":
        return argv
    return [*options, "--", last]


def setup_logger(log_level: str = "INFO") -> logging.Logger:
    """Set up the root logger when using the CLI.

    Args:
        log_level (str): log level to use

    Returns:
        logging.Logger: logger instance
    """
    logging.basicConfig(
        force=True,
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)8s %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(stream=sys.stdout)],
    )
    return logger


def main(argv: list[str] | None = None) -> int:
    """Entry point for pyreap. Returns the process exit status."""
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(protect_pattern(argv))
    setup_logger(args.log_level)

    try:
        reaper = ProcessReaper(args.pattern, layout=ColumnLayout.detect())
    except InvalidPatternError as exc:
        print(f"{parser.prog}: {exc}", file=sys.stderr)  # noqa: T201
        return EXIT_FAILURE

    logger.debug(
        "Watching for %r every %.1fs (pid %s)", args.pattern, reaper.interval, reaper.own_pid
    )
    try:
        reaper.run()
    except KeyboardInterrupt:
        logger.info("Received Ctrl+C. Shutting down...")
        return EXIT_INTERRUPTED
    return EXIT_OK
