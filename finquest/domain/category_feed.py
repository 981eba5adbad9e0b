"""Category spend snapshot with push notifications to subscribers"""

import json
import logging
from typing import Callable, List, Optional
from finquest.domain.models import CategorySpend
from finquest.domain.ports import CATEGORIES_KEY, StoragePort

Listener = Callable[[float], None]

logger = logging.getLogger(__name__)


def load_blob_list(storage: StoragePort, key: str) -> list:
    """
    Decode a stored JSON list.

    Absent keys and malformed blobs both read as an empty list; the latter is
    logged so corrupted state is visible without failing the request.
    """
    raw = storage.read(key)
    if raw is None:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Discarding malformed stored blob", extra={"key": key})
        return []
    if not isinstance(value, list):
        logger.warning("Stored blob is not a list", extra={"key": key})
        return []
    return value


class Subscription:
    """Handle returned by CategorySpendFeed.subscribe; usable as a context manager"""

    def __init__(self, feed: "CategorySpendFeed", listener: Listener):
        self._feed = feed
        self._listener: Optional[Listener] = listener

    @property
    def active(self) -> bool:
        return self._listener is not None

    def cancel(self) -> None:
        if self._listener is not None:
            self._feed._remove(self._listener)
            self._listener = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class CategorySpendFeed:
    """Source of category totals; publishing persists the snapshot then notifies listeners"""

    def __init__(self, storage: StoragePort):
        self.storage = storage
        self._listeners: List[Listener] = []

    def snapshot(self) -> List[CategorySpend]:
        categories = []
        for item in load_blob_list(self.storage, CATEGORIES_KEY):
            try:
                categories.append(CategorySpend.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed category entry", extra={"entry": repr(item)})
        return categories

    def total(self) -> float:
        return sum(category.spent for category in self.snapshot())

    def publish(self, categories: List[CategorySpend]) -> float:
        """Persist a new snapshot and push its total to every subscriber"""
        self.storage.write(CATEGORIES_KEY, json.dumps([c.to_dict() for c in categories]))
        total = sum(category.spent for category in categories)
        for listener in list(self._listeners):
            listener(total)
        return total

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _remove(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
