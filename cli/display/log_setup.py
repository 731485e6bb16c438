"""
Log output for CLI commands, routed through rich.
"""

import logging

from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> None:
    """
    Send vgmswan log records to a rich handler.

    Args:
        verbose: Show INFO records (WARNING and above otherwise)
    """
    level = logging.INFO if verbose else logging.WARNING
    logger = logging.getLogger("vgmswan")
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
