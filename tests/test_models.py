"""Unit tests for Pydantic models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reccall.models import (
    BUNDLED_STARTER_PACK_DIR,
    DEFAULT_REPO_URL,
    CacheEntry,
    Manifest,
    RecCallSettings,
    Recipe,
    RepoConfig,
)

from .payloads import RecipePayload, RepoConfigPayload


def test_recipe_accepts_optional_metadata(recipe_payload: RecipePayload) -> None:
    """Recipes should carry optional name and description metadata."""
    recipe = Recipe(**recipe_payload)

    assert recipe.shortcut == "sync-main"
    assert recipe.name == "Sync with main"
    assert recipe.description == "Keep the branch current"


def test_recipe_allows_empty_strings_for_later_validation() -> None:
    """Content rules are enforced by validate_recipe, not deserialization."""
    recipe = Recipe(shortcut="", context="")

    assert recipe.shortcut == ""
    assert recipe.context == ""


def test_recipe_requires_context_field() -> None:
    """Missing required fields should fail deserialization."""
    with pytest.raises(ValidationError):
        Recipe.model_validate({"shortcut": "greet"})


def test_manifest_rejects_blank_file_reference() -> None:
    """Manifest entries must reference a file."""
    with pytest.raises(ValidationError):
        Manifest.model_validate({"recipes": [{"file": "  "}]})


def test_manifest_defaults_to_empty_recipe_list() -> None:
    """A manifest without recipes should parse as empty."""
    assert Manifest.model_validate({}).recipes == []


def test_repo_config_reads_camel_case_aliases(repo_config_payload: RepoConfigPayload) -> None:
    """JSON field names should populate the snake_case attributes."""
    config = RepoConfig.model_validate(repo_config_payload)

    assert config.default_repo == repo_config_payload["defaultRepo"]
    assert config.cache_dir == Path(repo_config_payload["cacheDir"])
    assert config.enabled is True


def test_repo_config_strips_trailing_slash() -> None:
    """Repository URLs should be normalized without trailing slashes."""
    config = RepoConfig(default_repo="https://example.com/recipes/ ")

    assert config.default_repo == "https://example.com/recipes"


def test_repo_config_rejects_blank_repo() -> None:
    """Blank repository URLs should be rejected."""
    with pytest.raises(ValidationError):
        RepoConfig(default_repo="   ")


def test_repo_config_defaults(isolated_env: Path) -> None:
    """Defaults should point at the public recipe repository and the home cache."""
    config = RepoConfig()

    assert config.default_repo == DEFAULT_REPO_URL
    assert config.cache_dir == isolated_env / ".reccall" / "cache"
    assert config.enabled is True


def test_repo_config_dumps_with_aliases(tmp_path: Path) -> None:
    """Serialized configuration should use the persisted field names."""
    config = RepoConfig(cache_dir=tmp_path)

    payload = config.model_dump(mode="json", by_alias=True)

    assert set(payload) == {"defaultRepo", "cacheDir", "enabled"}


def test_cache_entry_round_trips_recipes(recipe_payload: RecipePayload) -> None:
    """Cache entries should serialize nested recipes."""
    entry = CacheEntry(timestamp=123, recipes=[Recipe(**recipe_payload)])

    restored = CacheEntry.model_validate_json(entry.model_dump_json())

    assert restored.timestamp == 123
    assert restored.recipes[0].shortcut == "sync-main"


def test_settings_defaults_use_home_directory(isolated_env: Path) -> None:
    """Without overrides the store lives in the home directory."""
    settings = RecCallSettings.from_env({})

    assert settings.store_path == isolated_env / ".reccall.json"
    assert settings.repo_config_path == isolated_env / ".reccall" / "repo-config.json"
    assert settings.starter_pack_dir == BUNDLED_STARTER_PACK_DIR
    assert settings.http_timeout_seconds == 10.0


def test_settings_apply_environment_overrides(tmp_path: Path) -> None:
    """Prefixed environment variables should override defaults."""
    env = {
        "CTX_STORE_PATH": str(tmp_path / "store.json"),
        "CTX_HTTP_TIMEOUT": "30",
        "RECCALL_STORE_PATH": "ignored",
    }

    settings = RecCallSettings.from_env(env, env_prefix="ctx")

    assert settings.store_path == tmp_path / "store.json"
    assert settings.http_timeout_seconds == 30.0


def test_settings_reject_out_of_range_timeout() -> None:
    """HTTP timeouts must stay within sane bounds."""
    with pytest.raises(ValidationError):
        RecCallSettings(http_timeout_seconds=0)


def test_bundled_starter_pack_ships_manifest() -> None:
    """The package should include a starter pack manifest."""
    assert (BUNDLED_STARTER_PACK_DIR / "manifest.json").is_file()
