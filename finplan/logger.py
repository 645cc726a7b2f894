"""Logging configuration for the finplan command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Configure the package logger with a rich console handler.

    Args:
        verbose: Log debug messages instead of warnings and errors only.
        console: Console to write to. Defaults to stderr.

    Returns:
        The configured ``finplan`` logger.
    """
    logger = logging.getLogger("finplan")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
