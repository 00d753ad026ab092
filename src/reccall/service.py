"""Shortcut operations layered on top of the JSON store."""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from reccall.starter_pack import load_starter_pack
from reccall.store import ShortcutMap, ShortcutStore

PREVIEW_LENGTH: Final[int] = 100
_ELLIPSIS: Final[str] = "..."


class ShortcutError(RuntimeError):
    """Base class for recoverable shortcut operation failures."""


class ShortcutExistsError(ShortcutError):
    """Raised when recording a shortcut that is already stored."""

    def __init__(self, name: str, existing_context: str) -> None:
        super().__init__(f"Shortcut '{name}' already exists.")
        self.name = name
        self.existing_context = existing_context


class ShortcutNotFoundError(ShortcutError):
    """Raised when a shortcut lookup misses."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(f"Shortcut '{name}' not found.")
        self.name = name
        self.available = available


class InvalidShortcutNameError(ShortcutError):
    """Raised when a shortcut name is empty or only whitespace."""

    def __init__(self, name: str) -> None:
        super().__init__("Shortcut name cannot be blank.")
        self.name = name


class ConfirmationRequiredError(ShortcutError):
    """Raised when a destructive operation is attempted without confirmation."""

    def __init__(self, action: str, count: int) -> None:
        super().__init__(f"Confirmation required to {action} {count} shortcuts.")
        self.action = action
        self.count = count


class ImportFormatError(ShortcutError):
    """Raised when an import file does not contain a shortcut mapping."""


@dataclass(frozen=True, slots=True)
class ShortcutPreview:
    """Shortcut name paired with a truncated view of its context.

    Attributes:
        name: Shortcut name.
        preview: First characters of the context, suffixed with an ellipsis when truncated.
    """

    name: str
    preview: str


@dataclass(frozen=True, slots=True)
class StoreInfo:
    """Summary statistics about the shortcut store.

    Attributes:
        store_path: Location of the JSON store.
        total: Number of stored shortcuts.
        categories: Shortcut counts keyed by the prefix before the first dash.
    """

    store_path: Path
    total: int
    categories: dict[str, int]


def build_preview(context: str, limit: int = PREVIEW_LENGTH) -> str:
    """Return the first ``limit`` characters of ``context`` with an ellipsis if truncated."""
    if len(context) <= limit:
        return context
    return f"{context[:limit]}{_ELLIPSIS}"


class ShortcutService:
    """Record, recall, and maintain shortcuts.

    Each mutating call performs one load, mutate, save cycle against the store.
    """

    def __init__(self, store: ShortcutStore, *, starter_pack_dir: Path | None = None) -> None:
        self.store = store
        self.starter_pack_dir = starter_pack_dir if starter_pack_dir is not None else store.starter_pack_dir

    def record(self, name: str, context: str) -> None:
        """Store a new shortcut, refusing to overwrite an existing one.

        Raises:
            InvalidShortcutNameError: If ``name`` is blank.
            ShortcutExistsError: If ``name`` is already stored.
        """
        _require_name(name)
        shortcuts = self.store.load_or_bootstrap()
        if name in shortcuts:
            raise ShortcutExistsError(name, shortcuts[name])
        shortcuts[name] = context
        self.store.save(shortcuts)

    def update(self, name: str, context: str) -> str:
        """Replace the context of an existing shortcut and return the previous one.

        Raises:
            ShortcutNotFoundError: If ``name`` is not stored.
        """
        shortcuts = self.store.load_or_bootstrap()
        if name not in shortcuts:
            raise ShortcutNotFoundError(name, list(shortcuts))
        previous = shortcuts[name]
        shortcuts[name] = context
        self.store.save(shortcuts)
        return previous

    def install(self, name: str, context: str) -> None:
        """Insert or overwrite a shortcut without existence checks.

        Raises:
            InvalidShortcutNameError: If ``name`` is blank.
        """
        _require_name(name)
        shortcuts = self.store.load_or_bootstrap()
        shortcuts[name] = context
        self.store.save(shortcuts)

    def delete(self, name: str) -> bool:
        """Remove ``name`` if present. Returns whether anything was removed."""
        shortcuts = self.store.load()
        if name not in shortcuts:
            return False
        del shortcuts[name]
        self.store.save(shortcuts)
        return True

    def purge(self, *, confirm: bool = False) -> int:
        """Delete every shortcut and return how many were removed.

        An already-empty store is a successful no-op.

        Raises:
            ConfirmationRequiredError: If the store is non-empty and ``confirm`` is false.
        """
        shortcuts = self.store.load()
        count = len(shortcuts)
        if count == 0:
            return 0
        if not confirm:
            raise ConfirmationRequiredError("delete", count)
        self.store.save({})
        return count

    def call(self, name: str) -> str:
        """Return the full context stored for ``name``.

        Raises:
            ShortcutNotFoundError: If ``name`` is not stored.
        """
        shortcuts = self.store.load_or_bootstrap()
        if name not in shortcuts:
            raise ShortcutNotFoundError(name, list(shortcuts))
        return shortcuts[name]

    def list(self) -> Iterator[ShortcutPreview]:
        """Yield a preview for every stored shortcut in file order."""
        shortcuts = self.store.load_or_bootstrap()
        for name, context in shortcuts.items():
            yield ShortcutPreview(name=name, preview=build_preview(context))

    def search(self, query: str) -> list[ShortcutPreview]:
        """Return previews of shortcuts whose name or context contains ``query``."""
        needle = query.casefold()
        shortcuts = self.store.load_or_bootstrap()
        return [
            ShortcutPreview(name=name, preview=build_preview(context))
            for name, context in shortcuts.items()
            if needle in name.casefold() or needle in context.casefold()
        ]

    def reload_starter_pack(self, *, confirm: bool = False) -> int:
        """Overwrite the store with the starter pack and return the recipe count.

        Raises:
            ConfirmationRequiredError: If the store is non-empty and ``confirm`` is false.
        """
        existing = self.store.load()
        if existing and not confirm:
            raise ConfirmationRequiredError("overwrite", len(existing))

        starter = load_starter_pack(self.starter_pack_dir) if self.starter_pack_dir is not None else {}
        self.store.save(starter)
        return len(starter)

    def export_shortcuts(self, path: Path) -> int:
        """Write all shortcuts to ``path`` and return how many were exported."""
        shortcuts = self.store.load_or_bootstrap()
        target = path.expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(shortcuts, indent=2, ensure_ascii=False), encoding="utf-8")
        return len(shortcuts)

    def import_shortcuts(self, path: Path, *, merge: bool = False) -> int:
        """Load shortcuts from ``path`` and overwrite or merge them into the store.

        Imported entries win over existing ones when merging.

        Returns:
            Number of shortcuts read from the import file.

        Raises:
            ImportFormatError: If the file cannot be read or is not a mapping of strings.
        """
        imported = _read_shortcut_file(path.expanduser())
        if merge:
            shortcuts = self.store.load()
            shortcuts.update(imported)
        else:
            shortcuts = dict(imported)
        self.store.save(shortcuts)
        return len(imported)

    def info(self) -> StoreInfo:
        """Return the store location, total count, and per-category counts."""
        shortcuts = self.store.load_or_bootstrap()
        categories = Counter(name.split("-", 1)[0] for name in shortcuts if "-" in name)
        return StoreInfo(
            store_path=self.store.path,
            total=len(shortcuts),
            categories=dict(sorted(categories.items())),
        )


def _require_name(name: str) -> None:
    if not name.strip():
        raise InvalidShortcutNameError(name)


def _read_shortcut_file(path: Path) -> ShortcutMap:
    """Parse an exported shortcut file into a mapping."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"Failed to import shortcuts from {path}: {exc}"
        raise ImportFormatError(msg) from exc

    if not isinstance(data, Mapping):
        msg = f"{path} must contain a JSON object of shortcut names to contexts"
        raise ImportFormatError(msg)

    invalid = sorted(str(key) for key, value in data.items() if not isinstance(value, str))
    if invalid:
        msg = f"Shortcuts with non-string contexts in {path}: {', '.join(invalid)}"
        raise ImportFormatError(msg)
    return dict(data)
