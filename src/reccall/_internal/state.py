"""CLI state management."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from reccall.models import RecCallSettings
from reccall.service import ShortcutService
from reccall.store import ShortcutStore

CLI_THEME: Final[Theme] = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "green",
        "text": "white",
    }
)


@dataclass(slots=True)
class CLIState:
    """State shared between CLI commands during a single invocation."""

    console: Console
    settings: RecCallSettings
    verbose: bool

    def build_service(self) -> ShortcutService:
        """Return a shortcut service bound to the configured store path."""
        store = ShortcutStore(self.settings.store_path, starter_pack_dir=self.settings.starter_pack_dir)
        return ShortcutService(store)


def build_console(verbose: bool) -> Console:
    """Return a Rich console configured with project-specific styling.

    Args:
        verbose: Whether to enable verbose logging with timestamps.

    Returns:
        Configured Console instance.
    """
    return Console(
        theme=CLI_THEME,
        highlight=False,
        soft_wrap=True,
        stderr=False,
        log_path=False,
        log_time=verbose,
    )


def configure_logging(console: Console, verbose: bool) -> None:
    """Route ``reccall`` log records through a Rich handler on ``console``.

    Args:
        console: Console that renders log records.
        verbose: Whether to emit DEBUG records instead of warnings only.
    """
    logger = logging.getLogger("reccall")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=console, show_path=False, show_time=verbose, markup=False)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
