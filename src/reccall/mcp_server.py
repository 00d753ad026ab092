"""RecCall MCP server exposing the shortcut tools over stdio via FastMCP.

Every tool returns human-readable text; handled failures (unknown shortcut,
missing confirmation) are reported in the text rather than raised.
"""

from __future__ import annotations

import logging
import sys

from mcp.server.fastmcp import FastMCP

from reccall.models import RecCallSettings
from reccall.service import (
    ConfirmationRequiredError,
    InvalidShortcutNameError,
    ShortcutExistsError,
    ShortcutNotFoundError,
    ShortcutService,
)
from reccall.store import ShortcutStore

logger = logging.getLogger(__name__)

_INSTRUCTIONS = (
    "Use these tools to record reusable context shortcuts and recall them by name. "
    "Call `call` with a shortcut name to retrieve its full stored instructions."
)


def handle_rec(service: ShortcutService, shortcut: str, context: str) -> str:
    """Record a shortcut and describe the outcome."""
    try:
        service.record(shortcut, context)
    except InvalidShortcutNameError as exc:
        return f"{exc} Provide a non-empty shortcut name."
    except ShortcutExistsError as exc:
        return (
            f"Shortcut '{shortcut}' already exists.\n\n"
            f"Current context:\n{exc.existing_context}\n\n"
            "Use rec_update to change it."
        )
    return f"Shortcut '{shortcut}' has been recorded successfully!\n\nStored context:\n{context}"


def handle_list(service: ShortcutService) -> str:
    """Describe every stored shortcut with a context preview."""
    lines = [f"- {preview.name}: {preview.preview}" for preview in service.list()]
    if not lines:
        return "No shortcuts stored yet. Use rec to create your first shortcut."
    return f"Stored shortcuts ({len(lines)}):\n\n" + "\n".join(lines)


def handle_update(service: ShortcutService, shortcut: str, context: str) -> str:
    """Replace a shortcut's context and describe the outcome."""
    try:
        previous = service.update(shortcut, context)
    except ShortcutNotFoundError as exc:
        return _not_found_text(exc)
    return (
        f"Shortcut '{shortcut}' has been updated successfully!\n\n"
        f"Previous context:\n{previous}\n\nNew context:\n{context}"
    )


def handle_delete(service: ShortcutService, shortcut: str) -> str:
    """Delete a shortcut; deleting an unknown shortcut is not an error."""
    if not service.delete(shortcut):
        return f"Shortcut '{shortcut}' not found. Nothing to delete."
    return f"Shortcut '{shortcut}' has been deleted successfully!"


def handle_purge(service: ShortcutService, confirm: bool) -> str:
    """Delete every shortcut when confirmed."""
    try:
        count = service.purge(confirm=confirm)
    except ConfirmationRequiredError as exc:
        return (
            f"This will delete ALL {exc.count} shortcuts. This action cannot be undone.\n"
            "Call rec_purge again with confirm=true to proceed."
        )
    if count == 0:
        return "No shortcuts to delete."
    return f"All {count} shortcuts have been deleted successfully!"


def handle_call(service: ShortcutService, shortcut: str) -> str:
    """Return the stored context verbatim, or a not-found message."""
    try:
        return service.call(shortcut)
    except ShortcutNotFoundError as exc:
        return _not_found_text(exc)


def handle_reload_starter_pack(service: ShortcutService, confirm: bool) -> str:
    """Overwrite the store with the starter pack when confirmed."""
    try:
        count = service.reload_starter_pack(confirm=confirm)
    except ConfirmationRequiredError as exc:
        return (
            f"This will overwrite ALL {exc.count} existing shortcuts with starter pack recipes.\n"
            "Call rec_reload_starter_pack again with confirm=true to proceed."
        )
    return f"Starter pack loaded successfully! {count} recipes loaded."


def handle_search(service: ShortcutService, query: str) -> str:
    """Describe shortcuts matching ``query`` by name or content."""
    results = service.search(query)
    if not results:
        return f'No shortcuts found matching "{query}".'
    lines = [f"- {preview.name}: {preview.preview}" for preview in results]
    return f'Found {len(results)} shortcut(s) matching "{query}":\n\n' + "\n".join(lines)


def _not_found_text(exc: ShortcutNotFoundError) -> str:
    available = ", ".join(exc.available) or "none"
    return f"Shortcut '{exc.name}' not found.\n\nAvailable shortcuts: {available}"


def build_server(settings: RecCallSettings | None = None) -> FastMCP:
    """Create the FastMCP server with every RecCall tool registered.

    Args:
        settings: Tool settings; read from the environment when omitted.

    Returns:
        Configured FastMCP instance.
    """
    resolved = settings or RecCallSettings.from_env()
    mcp = FastMCP("reccall", instructions=_INSTRUCTIONS)

    def service() -> ShortcutService:
        store = ShortcutStore(resolved.store_path, starter_pack_dir=resolved.starter_pack_dir)
        return ShortcutService(store)

    @mcp.tool()
    def rec(shortcut: str, context: str) -> str:
        """Record a new context shortcut with instructions.

        Args:
            shortcut: The shortcut name/alias.
            context: The context or instruction to store.
        """
        return handle_rec(service(), shortcut, context)

    @mcp.tool()
    def rec_list() -> str:
        """List all stored context shortcuts."""
        return handle_list(service())

    @mcp.tool()
    def rec_update(shortcut: str, context: str) -> str:
        """Update an existing context shortcut.

        Args:
            shortcut: The shortcut name/alias to update.
            context: The new context or instruction.
        """
        return handle_update(service(), shortcut, context)

    @mcp.tool()
    def rec_delete(shortcut: str) -> str:
        """Delete a context shortcut.

        Args:
            shortcut: The shortcut name/alias to delete.
        """
        return handle_delete(service(), shortcut)

    @mcp.tool()
    def rec_purge(confirm: bool = False) -> str:
        """Delete all stored context shortcuts.

        Args:
            confirm: Must be true to actually delete the shortcuts.
        """
        return handle_purge(service(), confirm)

    @mcp.tool()
    def call(shortcut: str) -> str:
        """Call a stored context shortcut.

        Args:
            shortcut: The shortcut name/alias to recall.
        """
        return handle_call(service(), shortcut)

    @mcp.tool()
    def rec_reload_starter_pack(confirm: bool = False) -> str:
        """Reload the starter pack recipes, overwriting existing shortcuts.

        Args:
            confirm: Must be true when shortcuts already exist.
        """
        return handle_reload_starter_pack(service(), confirm)

    @mcp.tool()
    def rec_search(query: str) -> str:
        """Search stored shortcuts by name or content.

        Args:
            query: Case-insensitive text to look for.
        """
        return handle_search(service(), query)

    return mcp


def main() -> None:
    """Run the MCP server on stdio; logs go to stderr."""
    logging.basicConfig(stream=sys.stderr, level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    logger.info("RecCall MCP server running on stdio")
    build_server().run(transport="stdio")


if __name__ == "__main__":
    main()
