"""Remote recipe repository client with a time-boxed local cache.

Repositories publish a ``manifest.json`` listing recipe files; every recipe is
fetched relative to the repository base URL. Listings are cached per URL for
one hour under the configured cache directory.
"""

from __future__ import annotations

import base64
import logging
import re
import time
from collections.abc import Callable
from pathlib import Path
from typing import Final

import httpx
from pydantic import ValidationError

from reccall.models import CacheEntry, Manifest, Recipe, RepoConfig, ValidationResult
from reccall.service import ShortcutService

CACHE_TTL_MS: Final[int] = 60 * 60 * 1000
_SHORTCUT_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_-]+")

logger = logging.getLogger(__name__)


class RepositoryError(RuntimeError):
    """Base class for recipe repository failures."""


class RepoFetchError(RepositoryError):
    """Raised when a repository resource cannot be fetched or parsed."""

    def __init__(self, url: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.status_code = status_code


class RecipeNotFoundError(RepositoryError):
    """Raised when a shortcut is not published by the repository."""

    def __init__(self, shortcut: str, repo_url: str) -> None:
        super().__init__(f"Recipe '{shortcut}' not found in repository {repo_url}")
        self.shortcut = shortcut
        self.repo_url = repo_url


class RecipeValidationError(RepositoryError):
    """Raised when a recipe fails validation and cannot be installed."""

    def __init__(self, shortcut: str, errors: list[str]) -> None:
        super().__init__(f"Recipe '{shortcut}' is invalid: {'; '.join(errors)}")
        self.shortcut = shortcut
        self.errors = errors


class RepositoryDisabledError(RepositoryError):
    """Raised when repository features are disabled in the configuration."""


def validate_recipe(recipe: Recipe) -> ValidationResult:
    """Check a recipe against the installation rules, collecting every violation."""
    errors: list[str] = []
    if not recipe.shortcut:
        errors.append("Shortcut must be a non-empty string")
    elif not _SHORTCUT_PATTERN.fullmatch(recipe.shortcut):
        errors.append("Shortcut must contain only letters, numbers, dashes, or underscores")
    if not recipe.context:
        errors.append("Context must be a non-empty string")
    return ValidationResult(valid=not errors, errors=errors)


def cache_key(repo_url: str) -> str:
    """Return the reversible cache file stem for a repository URL."""
    encoded = base64.urlsafe_b64encode(_normalize_url(repo_url).encode("utf-8"))
    return encoded.decode("ascii").rstrip("=")


def decode_cache_key(key: str) -> str:
    """Return the repository URL encoded in a cache file stem."""
    padding = "=" * (-len(key) % 4)
    return base64.urlsafe_b64decode(f"{key}{padding}").decode("utf-8")


def _normalize_url(repo_url: str) -> str:
    """Strip whitespace and trailing slashes from a repository URL."""
    return repo_url.strip().rstrip("/")


class RecipeCache:
    """One JSON file per repository URL holding the last fetched listing."""

    def __init__(self, cache_dir: Path, *, ttl_ms: int = CACHE_TTL_MS) -> None:
        self.cache_dir = cache_dir
        self.ttl_ms = ttl_ms

    def path_for(self, repo_url: str) -> Path:
        """Return the cache file used for ``repo_url``."""
        return self.cache_dir / f"{cache_key(repo_url)}.json"

    def get(self, repo_url: str, *, now_ms: int) -> list[Recipe] | None:
        """Return cached recipes if present and fresh, otherwise None."""
        cache_path = self.path_for(repo_url)
        try:
            entry = CacheEntry.model_validate_json(cache_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", cache_path, exc)
            return None

        if now_ms - entry.timestamp >= self.ttl_ms:
            logger.debug("Cache for %s is stale", repo_url)
            return None
        return entry.recipes

    def put(self, repo_url: str, recipes: list[Recipe], *, now_ms: int) -> Path:
        """Store ``recipes`` for ``repo_url`` stamped with ``now_ms``."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        cache_path = self.path_for(repo_url)
        entry = CacheEntry(timestamp=now_ms, recipes=recipes)
        cache_path.write_text(entry.model_dump_json(indent=2, exclude_none=True), encoding="utf-8")
        return cache_path

    def clear(self) -> int:
        """Delete every cache file and return how many were removed."""
        if not self.cache_dir.is_dir():
            return 0
        removed = 0
        for cache_path in self.cache_dir.glob("*.json"):
            cache_path.unlink(missing_ok=True)
            removed += 1
        return removed


class RepositoryClient:
    """Browse and install recipes published by remote repositories.

    Args:
        config: Repository settings (default URL, cache directory, enabled flag).
        service: Shortcut service used to persist installed recipes.
        http_client: Optional preconfigured ``httpx.Client``.
        timeout: Request timeout in seconds when no client is provided.
        clock: Callable returning the current time in seconds.
    """

    def __init__(
        self,
        config: RepoConfig,
        service: ShortcutService,
        *,
        http_client: httpx.Client | None = None,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.service = service
        self.timeout = timeout
        self.cache = RecipeCache(config.cache_dir)
        self._clock = clock
        self._client = http_client
        self._owns_client = http_client is None

    def __enter__(self) -> RepositoryClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def fetch_manifest(self, repo_url: str | None = None) -> Manifest:
        """Fetch and parse ``{repo_url}/manifest.json``.

        Raises:
            RepoFetchError: On transport errors, non-2xx responses, or a malformed manifest.
        """
        url = f"{self._resolve_url(repo_url)}/manifest.json"
        payload = self._get_json(url)
        try:
            return Manifest.model_validate(payload)
        except ValidationError as exc:
            raise RepoFetchError(url, f"invalid manifest: {exc}") from exc

    def list_recipes(self, repo_url: str | None = None) -> list[Recipe]:
        """Fetch every recipe listed by the repository manifest.

        Recipes that fail to download or parse are logged and skipped.

        Raises:
            RepoFetchError: If the manifest itself cannot be fetched.
        """
        base_url = self._resolve_url(repo_url)
        manifest = self.fetch_manifest(base_url)

        recipes: list[Recipe] = []
        for entry in manifest.recipes:
            url = f"{base_url}/{entry.file.lstrip('/')}"
            try:
                recipe = Recipe.model_validate(self._get_json(url))
            except RepoFetchError as exc:
                logger.warning("Skipping recipe %s: %s", entry.file, exc)
                continue
            except ValidationError as exc:
                logger.warning("Skipping malformed recipe %s: %s", entry.file, exc)
                continue
            recipes.append(
                recipe.model_copy(
                    update={
                        "name": recipe.name or entry.name,
                        "description": recipe.description or entry.description,
                    }
                )
            )
        return recipes

    def list_recipes_cached(self, repo_url: str | None = None) -> list[Recipe]:
        """Return the repository listing, served from cache while it is fresh."""
        base_url = self._resolve_url(repo_url)
        now_ms = self._now_ms()
        cached = self.cache.get(base_url, now_ms=now_ms)
        if cached is not None:
            logger.debug("Using cached recipes for %s", base_url)
            return cached

        recipes = self.list_recipes(base_url)
        self.cache.put(base_url, recipes, now_ms=now_ms)
        return recipes

    def search_recipes(self, query: str, repo_url: str | None = None) -> list[Recipe]:
        """Return recipes whose shortcut, name, description, or context contains ``query``."""
        needle = query.casefold()
        return [
            recipe
            for recipe in self.list_recipes_cached(repo_url)
            if any(
                needle in field.casefold()
                for field in (recipe.shortcut, recipe.name, recipe.description, recipe.context)
                if field
            )
        ]

    def install_recipe(self, shortcut: str, repo_url: str | None = None) -> Recipe:
        """Install the recipe published under ``shortcut`` into the local store.

        Raises:
            RecipeNotFoundError: If the repository does not publish ``shortcut``.
            RecipeValidationError: If the recipe fails validation.
        """
        base_url = self._resolve_url(repo_url)
        recipe = next((item for item in self.list_recipes_cached(base_url) if item.shortcut == shortcut), None)
        if recipe is None:
            raise RecipeNotFoundError(shortcut, base_url)

        result = validate_recipe(recipe)
        if not result.valid:
            raise RecipeValidationError(shortcut, result.errors)

        self.service.install(recipe.shortcut, recipe.context)
        return recipe

    def clear_cache(self) -> int:
        """Delete all cached repository listings and return the count removed."""
        return self.cache.clear()

    def _resolve_url(self, repo_url: str | None) -> str:
        """Return the normalized repository URL, enforcing the enabled flag."""
        if not self.config.enabled:
            msg = "Repository features are disabled. Enable them with `reccall repo-config --enable`."
            raise RepositoryDisabledError(msg)
        return _normalize_url(repo_url or self.config.default_repo)

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def _get_json(self, url: str) -> object:
        """GET ``url`` and decode its JSON body."""
        logger.debug("Fetching %s", url)
        try:
            response = self._get_client().get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RepoFetchError(
                url, f"HTTP {exc.response.status_code}", status_code=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise RepoFetchError(url, str(exc) or type(exc).__name__) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise RepoFetchError(url, "response is not valid JSON", status_code=response.status_code) from exc

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
