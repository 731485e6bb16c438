"""
CLI display modules.
"""

from cli.display.log_setup import setup_logging
from cli.display.tables import (
    display_compile_summary,
    display_header_info,
    display_song_info,
)

__all__ = [
    "setup_logging",
    "display_compile_summary",
    "display_header_info",
    "display_song_info",
]
