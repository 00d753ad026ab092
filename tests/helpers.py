"""Helpers shared by the test modules."""

from __future__ import annotations

import json
from pathlib import Path

REPO_URL = "https://recipes.example.com/pack"


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, *, minutes: float) -> None:
        self.now += minutes * 60


def read_store(path: Path) -> dict[str, str]:
    """Return the raw JSON contents of a store file."""
    return json.loads(path.read_text(encoding="utf-8"))
