"""Repository configuration loading utilities for RecCall."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from reccall.models import RepoConfig


class ConfigError(RuntimeError):
    """Raised when the repository configuration cannot be loaded or parsed."""


def load_repo_config(config_path: Path) -> RepoConfig:
    """Load the repo configuration, falling back to defaults for missing keys.

    Args:
        config_path: Location of the JSON configuration file.

    Returns:
        RepoConfig built from defaults shallow-merged with the stored values.

    Raises:
        ConfigError: If the file exists but is not a valid configuration object.
    """
    if not config_path.exists():
        return RepoConfig()

    raw_data = _load_json_mapping(config_path)
    try:
        return RepoConfig.model_validate({**_default_payload(), **raw_data})
    except ValidationError as exc:
        msg = f"Invalid repository configuration: {exc}"
        raise ConfigError(msg) from exc


def save_repo_config(config_path: Path, config: RepoConfig) -> Path:
    """Persist the repo configuration using its JSON field names.

    Args:
        config_path: Location of the JSON configuration file.
        config: Configuration to write.

    Returns:
        Path to the written configuration file.
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json", by_alias=True)
    config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return config_path


def update_repo_config(
    config_path: Path,
    *,
    default_repo: str | None = None,
    cache_dir: Path | None = None,
    enabled: bool | None = None,
) -> RepoConfig:
    """Apply the provided changes to the stored configuration and save it.

    Args:
        config_path: Location of the JSON configuration file.
        default_repo: New default repository URL.
        cache_dir: New recipe cache directory.
        enabled: Whether repository features should be enabled.

    Returns:
        The updated RepoConfig.

    Raises:
        ConfigError: If the existing file or the resulting values are invalid.
    """
    current = load_repo_config(config_path)
    changes: dict[str, Any] = {}
    if default_repo is not None:
        changes["defaultRepo"] = default_repo
    if cache_dir is not None:
        changes["cacheDir"] = cache_dir
    if enabled is not None:
        changes["enabled"] = enabled

    if not changes:
        return current

    try:
        updated = RepoConfig.model_validate({**current.model_dump(by_alias=True), **changes})
    except ValidationError as exc:
        msg = f"Invalid repository configuration: {exc}"
        raise ConfigError(msg) from exc

    save_repo_config(config_path, updated)
    return updated


def _default_payload() -> dict[str, Any]:
    """Return the default configuration keyed by JSON field names."""
    return RepoConfig().model_dump(mode="json", by_alias=True)


def _load_json_mapping(config_path: Path) -> dict[str, Any]:
    """Load JSON data from disk ensuring a mapping result."""
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"Unable to parse {config_path.name}: {exc}"
        raise ConfigError(msg) from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"{config_path.name} must contain a JSON object"
        raise ConfigError(msg)
    return raw
