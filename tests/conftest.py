"""Shared pytest fixtures for reccall."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from reccall.models import RecCallSettings
from reccall.service import ShortcutService
from reccall.store import ShortcutStore

from .helpers import REPO_URL, FakeClock
from .payloads import ManifestPayload, RecipePayload, RepoConfigPayload


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every RECCALL_* path at the test's temporary directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("RECCALL_STORE_PATH", str(home / ".reccall.json"))
    monkeypatch.setenv("RECCALL_REPO_CONFIG_PATH", str(home / ".reccall" / "repo-config.json"))
    monkeypatch.setenv("RECCALL_STARTER_PACK_DIR", str(tmp_path / "no-starter-pack"))
    return home


@pytest.fixture(autouse=True)
def reset_reccall_logger() -> Iterator[None]:
    """Undo handler changes the CLI makes to the package logger."""
    yield
    logger = logging.getLogger("reccall")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def recipe_payload() -> RecipePayload:
    """Provide a canonical repository recipe."""
    return {
        "shortcut": "sync-main",
        "context": "Rebase the current branch onto origin/main.",
        "name": "Sync with main",
        "description": "Keep the branch current",
    }


@pytest.fixture
def repo_config_payload(tmp_path: Path) -> RepoConfigPayload:
    """Provide a sample repo configuration payload."""
    return {
        "defaultRepo": REPO_URL,
        "cacheDir": str(tmp_path / "cache"),
        "enabled": True,
    }


@pytest.fixture
def starter_pack_dir(tmp_path: Path) -> Path:
    """Create a starter pack with two valid recipes and one broken entry."""
    pack_dir = tmp_path / "starter-pack"
    pack_dir.mkdir()
    manifest: ManifestPayload = {
        "recipes": [
            {"file": "greet.json", "name": "Greeting"},
            {"file": "broken.json"},
            {"file": "review.json", "description": "Review the diff"},
        ]
    }
    (pack_dir / "manifest.json").write_text(json.dumps(manifest), encoding="utf-8")
    (pack_dir / "greet.json").write_text(
        json.dumps({"shortcut": "greet", "context": "Say hello politely."}),
        encoding="utf-8",
    )
    (pack_dir / "broken.json").write_text("{not json", encoding="utf-8")
    (pack_dir / "review.json").write_text(
        json.dumps({"shortcut": "code-review", "context": "Review the current diff."}),
        encoding="utf-8",
    )
    return pack_dir


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Location of an isolated shortcut store."""
    return tmp_path / "data" / ".reccall.json"


@pytest.fixture
def store(store_path: Path) -> ShortcutStore:
    """Shortcut store without a starter pack."""
    return ShortcutStore(store_path)


@pytest.fixture
def service(store: ShortcutStore) -> ShortcutService:
    """Shortcut service bound to the isolated store."""
    return ShortcutService(store)


@pytest.fixture
def seeded_service(store_path: Path, starter_pack_dir: Path) -> ShortcutService:
    """Shortcut service whose store bootstraps from the test starter pack."""
    return ShortcutService(ShortcutStore(store_path, starter_pack_dir=starter_pack_dir))


@pytest.fixture
def settings(isolated_env: Path) -> RecCallSettings:
    """Settings resolved from the isolated environment."""
    return RecCallSettings.from_env()


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock for cache expiry tests."""
    return FakeClock()
