"""Tests for the MCP tool handlers and server wiring."""

from __future__ import annotations

import asyncio

from mcp.server.fastmcp import FastMCP

from reccall.mcp_server import (
    build_server,
    handle_call,
    handle_delete,
    handle_list,
    handle_purge,
    handle_rec,
    handle_reload_starter_pack,
    handle_search,
    handle_update,
)
from reccall.models import RecCallSettings
from reccall.service import ShortcutService
from reccall.store import ShortcutStore


def test_rec_then_call_returns_context_verbatim(service: ShortcutService) -> None:
    """Recorded contexts come back unchanged from the call tool."""
    message = handle_rec(service, "greet", "Say hello.\n\nThen wave.")

    assert "recorded successfully" in message
    assert handle_call(service, "greet") == "Say hello.\n\nThen wave."


def test_rec_reports_existing_shortcut(seeded_service: ShortcutService, store: ShortcutStore) -> None:
    """Recording over an existing name reports the current context instead of overwriting."""
    message = handle_rec(seeded_service, "greet", "replacement")

    assert "already exists" in message
    assert "Say hello politely." in message
    assert store.load()["greet"] == "Say hello politely."


def test_rec_rejects_blank_name(service: ShortcutService, store: ShortcutStore) -> None:
    """Blank names are reported as text and nothing is stored."""
    message = handle_rec(service, "", "context")

    assert message.startswith("Shortcut name cannot be blank.")
    assert not store.path.exists()


def test_call_unknown_shortcut_lists_available(seeded_service: ShortcutService, store: ShortcutStore) -> None:
    """Missing shortcuts are reported as text with the available names."""
    message = handle_call(seeded_service, "missing")

    assert message.startswith("Shortcut 'missing' not found.")
    assert f"Available shortcuts: {', '.join(store.load())}" in message


def test_call_unknown_shortcut_on_empty_store(service: ShortcutService) -> None:
    """An empty store reports 'none' as the available shortcuts."""
    assert handle_call(service, "missing").endswith("Available shortcuts: none")


def test_list_reports_previews(service: ShortcutService) -> None:
    """Long contexts are truncated in the list output."""
    handle_rec(service, "long", "x" * 150)

    message = handle_list(service)

    assert message.startswith("Stored shortcuts (1):")
    assert f"- long: {'x' * 100}..." in message


def test_list_empty_store(service: ShortcutService) -> None:
    """An empty store returns guidance text."""
    assert handle_list(service).startswith("No shortcuts stored yet.")


def test_update_reports_previous_context(service: ShortcutService) -> None:
    """Updates echo both the previous and new contexts."""
    handle_rec(service, "greet", "Hello")

    message = handle_update(service, "greet", "Howdy")

    assert "Previous context:\nHello" in message
    assert "New context:\nHowdy" in message
    assert handle_call(service, "greet") == "Howdy"


def test_update_unknown_shortcut(service: ShortcutService, store: ShortcutStore) -> None:
    """Updating an unknown shortcut does not create it."""
    message = handle_update(service, "missing", "value")

    assert "not found" in message
    assert "missing" not in store.load()


def test_delete_is_idempotent(service: ShortcutService) -> None:
    """Deleting twice reports success and then nothing to delete."""
    handle_rec(service, "greet", "Hello")

    assert "deleted successfully" in handle_delete(service, "greet")
    assert "Nothing to delete" in handle_delete(service, "greet")


def test_purge_requires_confirmation(service: ShortcutService, store: ShortcutStore) -> None:
    """Purging without confirmation leaves the store untouched."""
    handle_rec(service, "a", "1")
    handle_rec(service, "b", "2")

    rejected = handle_purge(service, False)
    accepted = handle_purge(service, True)

    assert "ALL 2 shortcuts" in rejected
    assert "confirm=true" in rejected
    assert accepted == "All 2 shortcuts have been deleted successfully!"
    assert store.load() == {}


def test_purge_empty_store(service: ShortcutService) -> None:
    """Purging an empty store is a no-op."""
    assert handle_purge(service, False) == "No shortcuts to delete."


def test_reload_starter_pack_requires_confirmation(seeded_service: ShortcutService, store: ShortcutStore) -> None:
    """Reloading over existing shortcuts needs confirmation."""
    handle_rec(seeded_service, "custom", "mine")

    rejected = handle_reload_starter_pack(seeded_service, False)
    accepted = handle_reload_starter_pack(seeded_service, True)

    assert "overwrite ALL" in rejected
    assert accepted == "Starter pack loaded successfully! 2 recipes loaded."
    assert "custom" not in store.load()


def test_search_matches_name_and_content(service: ShortcutService) -> None:
    """Search covers both names and contexts."""
    handle_rec(service, "react-component", "Create a component")
    handle_rec(service, "api-test", "Write React tests")
    handle_rec(service, "other", "Nothing relevant")

    message = handle_search(service, "react")

    assert message.startswith('Found 2 shortcut(s) matching "react":')
    assert "other" not in message


def test_search_without_matches(service: ShortcutService) -> None:
    """Searches without matches say so."""
    assert handle_search(service, "zzz") == 'No shortcuts found matching "zzz".'


def test_build_server_registers_every_tool(settings: RecCallSettings) -> None:
    """The FastMCP server exposes the full tool surface."""
    server = build_server(settings)

    tools = asyncio.run(server.list_tools())

    assert isinstance(server, FastMCP)
    assert {tool.name for tool in tools} == {
        "rec",
        "rec_list",
        "rec_update",
        "rec_delete",
        "rec_purge",
        "call",
        "rec_reload_starter_pack",
        "rec_search",
    }
