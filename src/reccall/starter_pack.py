"""Starter pack loading helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from reccall.models import Manifest, Recipe

MANIFEST_FILENAME: Final[str] = "manifest.json"

logger = logging.getLogger(__name__)


def load_starter_pack(base_dir: Path) -> dict[str, str]:
    """Return the shortcuts bundled in the starter pack at ``base_dir``.

    A missing or unreadable manifest yields an empty mapping. Recipes that
    cannot be read or parsed are logged and skipped.

    Args:
        base_dir: Directory containing ``manifest.json`` and the recipe files.

    Returns:
        Mapping of shortcut name to context, in manifest order.
    """
    manifest = _load_manifest(base_dir / MANIFEST_FILENAME)
    if manifest is None:
        return {}

    shortcuts: dict[str, str] = {}
    for entry in manifest.recipes:
        recipe_path = base_dir / entry.file
        try:
            recipe = Recipe.model_validate_json(recipe_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            logger.warning("Failed to load recipe %s: %s", entry.file, exc)
            continue
        shortcuts[recipe.shortcut] = recipe.context
    return shortcuts


def _load_manifest(manifest_path: Path) -> Manifest | None:
    """Parse the starter pack manifest, returning None when unavailable."""
    try:
        raw_text = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No starter pack manifest at %s", manifest_path)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to load starter pack manifest %s: %s", manifest_path, exc)
        return None

    try:
        return Manifest.model_validate(json.loads(raw_text))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Failed to parse starter pack manifest %s: %s", manifest_path, exc)
        return None
