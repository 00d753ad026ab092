"""JSON-backed persistence for the shortcut map."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from reccall.starter_pack import load_starter_pack

ShortcutMap = dict[str, str]

logger = logging.getLogger(__name__)


class ShortcutStore:
    """Load and save the shortcut map stored in a single JSON file.

    Every call reads or writes the whole file; nothing is cached between
    calls, so concurrent writers follow last-writer-wins semantics.
    """

    def __init__(self, path: Path, *, starter_pack_dir: Path | None = None) -> None:
        self.path = path
        self.starter_pack_dir = starter_pack_dir

    def load(self) -> ShortcutMap:
        """Return the persisted shortcuts, or an empty map if none can be read."""
        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to read shortcut store %s: %s", self.path, exc)
            return {}

        try:
            data = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            logger.warning("Shortcut store %s is not valid JSON: %s", self.path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("Shortcut store %s does not contain a JSON object", self.path)
            return {}

        shortcuts: ShortcutMap = {}
        for name, context in data.items():
            if not isinstance(context, str):
                logger.warning("Ignoring shortcut '%s' with non-string context", name)
                continue
            shortcuts[name] = context
        return shortcuts

    def save(self, shortcuts: ShortcutMap) -> None:
        """Replace the persisted map with ``shortcuts``.

        The payload is written to a sibling temp file and moved into place so a
        concurrent ``load`` never observes a partially written map.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(shortcuts, indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load_or_bootstrap(self) -> ShortcutMap:
        """Return the stored map, seeding it from the starter pack when empty.

        This is the only read that may write: an empty store is replaced by the
        starter pack contents, which are persisted before being returned.
        """
        shortcuts = self.load()
        if shortcuts or self.starter_pack_dir is None:
            return shortcuts

        starter = load_starter_pack(self.starter_pack_dir)
        if not starter:
            return shortcuts

        logger.info("Seeding %s with %d starter pack recipes", self.path, len(starter))
        self.save(starter)
        return starter
