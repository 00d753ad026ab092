"""Public exports for the reccall package."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

from .config import ConfigError, load_repo_config, save_repo_config, update_repo_config
from .models import (
    CacheEntry,
    Manifest,
    ManifestEntry,
    RecCallSettings,
    Recipe,
    RepoConfig,
    ValidationResult,
)
from .repository import (
    CACHE_TTL_MS,
    RecipeCache,
    RecipeNotFoundError,
    RecipeValidationError,
    RepoFetchError,
    RepositoryClient,
    RepositoryDisabledError,
    RepositoryError,
    validate_recipe,
)
from .service import (
    ConfirmationRequiredError,
    ImportFormatError,
    InvalidShortcutNameError,
    ShortcutError,
    ShortcutExistsError,
    ShortcutNotFoundError,
    ShortcutPreview,
    ShortcutService,
    StoreInfo,
)
from .starter_pack import load_starter_pack
from .store import ShortcutMap, ShortcutStore


def _load_local_version() -> str:
    """Return the package version declared in pyproject.toml when metadata is unavailable."""
    pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        raw_text = pyproject_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return "0.0.0"

    try:
        data = tomllib.loads(raw_text)
    except tomllib.TOMLDecodeError:
        return "0.0.0"

    project_section = data.get("project")
    if isinstance(project_section, dict):
        version_value = project_section.get("version")
        if isinstance(version_value, str) and version_value.strip():
            return version_value.strip()
    return "0.0.0"


try:
    __version__ = pkg_version("reccall")
except PackageNotFoundError:
    __version__ = _load_local_version()

__all__ = [
    "CACHE_TTL_MS",
    "CacheEntry",
    "ConfigError",
    "ConfirmationRequiredError",
    "ImportFormatError",
    "InvalidShortcutNameError",
    "Manifest",
    "ManifestEntry",
    "RecCallSettings",
    "Recipe",
    "RecipeCache",
    "RecipeNotFoundError",
    "RecipeValidationError",
    "RepoConfig",
    "RepoFetchError",
    "RepositoryClient",
    "RepositoryDisabledError",
    "RepositoryError",
    "ShortcutError",
    "ShortcutExistsError",
    "ShortcutMap",
    "ShortcutNotFoundError",
    "ShortcutPreview",
    "ShortcutService",
    "ShortcutStore",
    "StoreInfo",
    "ValidationResult",
    "__version__",
    "load_repo_config",
    "load_starter_pack",
    "save_repo_config",
    "update_repo_config",
    "validate_recipe",
]
