"""Logging configuration for the trasker entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _PackageFilter(logging.Filter):
    """Keep trasker records; let third-party records through only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "trasker" or record.name.startswith("trasker."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure root logging. Call once, before the shell starts."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(fmt)
    console.addFilter(_PackageFilter())
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    logging.captureWarnings(True)
