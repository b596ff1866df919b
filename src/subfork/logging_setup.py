"""Console logging for the command line entrypoint."""

from __future__ import annotations

import logging
import sys


class _PackageOnlyFilter(logging.Filter):
    """Keep subfork records; let third-party loggers through only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "subfork" or record.name.startswith("subfork."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(level: int | str = logging.WARNING) -> None:
    """Configure a stderr handler on the root logger.

    Call once, before the first task is started, so forked children inherit
    the same handler.
    """

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [pid %(process)d] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(fmt)
    console.addFilter(_PackageOnlyFilter())
    root.addHandler(console)

    logging.captureWarnings(True)
