"""Core data models for RecCall."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_REPO_URL: Final[str] = "https://raw.githubusercontent.com/reccaller-ai/reccall-recipes/main"
BUNDLED_STARTER_PACK_DIR: Final[Path] = Path(__file__).resolve().parent / "starter-pack"


def _expand_path(value: Any) -> Path:
    """Return a user-expanded Path for strings or Path instances."""
    if isinstance(value, Path):
        return value.expanduser()
    return Path(str(value)).expanduser()


class Recipe(BaseModel):
    """A shortcut/context pair sourced from a starter pack or repository.

    Only the field types are enforced here; the content rules are checked by
    ``validate_recipe`` so every violation can be reported in one pass.
    """

    model_config = ConfigDict(frozen=True)

    shortcut: str
    context: str
    name: str | None = None
    description: str | None = None


class ManifestEntry(BaseModel):
    """Pointer to a recipe file listed in a manifest."""

    model_config = ConfigDict(frozen=True)

    file: str
    name: str | None = None
    description: str | None = None

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str) -> str:
        """Ensure the recipe file reference is present."""
        normalized = value.strip()
        if not normalized:
            msg = "Manifest entries must reference a recipe file"
            raise ValueError(msg)
        return normalized


class Manifest(BaseModel):
    """Index of recipe files published by a starter pack or repository."""

    model_config = ConfigDict(frozen=True)

    recipes: list[ManifestEntry] = Field(default_factory=list)


class RepoConfig(BaseModel):
    """Remote recipe repository settings persisted as JSON."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    default_repo: str = Field(default=DEFAULT_REPO_URL, alias="defaultRepo")
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".reccall" / "cache", alias="cacheDir")
    enabled: bool = True

    @field_validator("default_repo")
    @classmethod
    def validate_default_repo(cls, value: str) -> str:
        """Ensure the default repository URL is present and normalized."""
        normalized = value.strip().rstrip("/")
        if not normalized:
            msg = "defaultRepo must be provided"
            raise ValueError(msg)
        return normalized

    @field_validator("cache_dir", mode="before")
    @classmethod
    def expand_cache_dir(cls, value: Any) -> Path:
        """Expand user paths for the cache directory."""
        return _expand_path(value)


class CacheEntry(BaseModel):
    """Cached recipe listing for a single repository URL."""

    timestamp: int
    recipes: list[Recipe] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of validating a recipe."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: list[str] = Field(default_factory=list)


class RecCallSettings(BaseModel):
    """Global tool settings derived from environment variables or defaults."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    store_path: Path = Field(default_factory=lambda: Path.home() / ".reccall.json")
    repo_config_path: Path = Field(default_factory=lambda: Path.home() / ".reccall" / "repo-config.json")
    starter_pack_dir: Path = Field(default=BUNDLED_STARTER_PACK_DIR)
    http_timeout_seconds: float = Field(default=10.0, ge=1, le=120)

    @field_validator("store_path", "repo_config_path", "starter_pack_dir", mode="before")
    @classmethod
    def expand_paths(cls, value: Any) -> Path:
        """Expand user paths while keeping lazy resolution."""
        return _expand_path(value)

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, *, env_prefix: str = "RECCALL_") -> RecCallSettings:
        """Build settings, applying any prefixed environment overrides."""
        prefix = env_prefix.strip().upper()
        if not prefix.endswith("_"):
            prefix = f"{prefix}_"
        source = os.environ if env is None else env
        upper_env = {key.upper(): value for key, value in source.items()}

        mapping: dict[str, str] = {
            f"{prefix}STORE_PATH": "store_path",
            f"{prefix}REPO_CONFIG_PATH": "repo_config_path",
            f"{prefix}STARTER_PACK_DIR": "starter_pack_dir",
            f"{prefix}HTTP_TIMEOUT": "http_timeout_seconds",
        }
        overrides: dict[str, Any] = {}
        for env_key, field_name in mapping.items():
            raw_value = upper_env.get(env_key, "").strip()
            if raw_value:
                overrides[field_name] = raw_value
        return cls(**overrides)
