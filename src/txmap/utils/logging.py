"""
Logging utilities for txmap.

Library modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves. Applications (the CLI) call ``setup_logging`` once, which
routes records to a Rich handler on stderr so that mapping results written to
stdout stay machine-readable.
"""

import logging
import time
from contextlib import contextmanager

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "setup_logging",
    "get_logger",
    "timed",
]

_stderr_console = Console(stderr=True)

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """
    Configure the root logger for txmap applications.

    Args:
        verbose: DEBUG level when True, WARNING otherwise (per-element mapping
            failures are reported as warnings).
        log_file: Optional path that additionally receives every record.
    """
    handlers: list[logging.Handler] = [
        RichHandler(
            console=_stderr_console,
            rich_tracebacks=True,
            markup=False,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for a txmap module."""
    return logging.getLogger(name)


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None, items: int | None = None):
    """
    Log the wall time of a block at DEBUG level.

    Example:
        with timed("genome_to_transcript", logger, items=len(ranges)):
            groups = processor.map(...)
    """
    log = logger or logging.getLogger(__name__)
    start = time.perf_counter()
    if items is None:
        log.debug("Starting: %s", operation)
    else:
        log.debug("Starting: %s (%d items)", operation, items)
    try:
        yield
    finally:
        log.debug("Completed: %s (%.3fs)", operation, time.perf_counter() - start)
