"""Persistence port for keyed JSON blobs (goal list, category snapshot)"""

from typing import Dict, Optional, Protocol

GOALS_KEY = "weekly_goals"
CATEGORIES_KEY = "money_categories"


class StoragePort(Protocol):
    """Read/write a serialized blob under a fixed key"""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, blob: str) -> None:
        ...


class InMemoryStorage:
    """Dict-backed storage for tests and single-process use"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob
