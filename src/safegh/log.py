"""
Logging setup for the safe-gh CLI.

Modules log through logging.getLogger(__name__). Logs go to stderr so
they never mix with the JSON payload on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """
    Install a Rich handler on the safegh logger.

    Args:
        verbose: DEBUG when True, WARNING otherwise
    """
    logger = logging.getLogger("safegh")
    logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
