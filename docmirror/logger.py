# docmirror Logging
# Logging setup with Rich console output and optional log file

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    *,
    verbose: bool = False,
    level: str = "INFO",
    log_file: Optional[str] = None,
    colored: bool = True,
) -> None:
    """
    Configure logging for the docmirror package.

    Args:
        verbose: Force DEBUG level.
        level: Level name used when not verbose.
        log_file: Optional file receiving plain-text log lines.
        colored: Enable colored console output.
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    console = Console(stderr=True, no_color=not colored)
    handlers: list[logging.Handler] = [
        RichHandler(console=console, show_path=False, rich_tracebacks=verbose, markup=False)
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    package_logger = logging.getLogger("docmirror")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False
