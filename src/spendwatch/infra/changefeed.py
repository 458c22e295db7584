"""In-process change notifications for owned rows.

Repositories publish a ``ChangeEvent`` after every committed insert, update or
delete. Consumers subscribe to one table filtered by owner and receive events
synchronously on the publishing thread.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One committed row change."""

    table: str
    change: ChangeType
    user_id: int
    row_id: Optional[int] = None


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``; close it to stop delivery."""

    def __init__(self, feed: "ChangeFeed", key: int, table: str, user_id: int) -> None:
        self._feed = feed
        self._key = key
        self.table = table
        self.user_id = user_id
        self.closed = False

    def close(self) -> None:
        """Stop receiving events. Closing twice is a no-op."""
        if self.closed:
            return
        self._feed._remove(self._key)
        self.closed = True
        logger.debug(
            "Subscription closed", extra={"table": self.table, "user_id": self.user_id}
        )

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()


class ChangeFeed:
    """Fan-out of row changes to per-table, per-owner subscribers."""

    def __init__(self) -> None:
        self._subscribers: dict[int, tuple[str, int, ChangeCallback]] = {}
        self._keys = itertools.count(1)

    def subscribe(self, table: str, *, user_id: int, callback: ChangeCallback) -> Subscription:
        """Deliver every change on ``table`` owned by ``user_id`` to ``callback``."""
        key = next(self._keys)
        self._subscribers[key] = (table, user_id, callback)
        logger.debug("Subscription opened", extra={"table": table, "user_id": user_id})
        return Subscription(self, key, table, user_id)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver ``event`` to matching subscribers and return how many got it.

        A failing subscriber is logged and skipped so the remaining ones still
        receive the event.
        """
        delivered = 0
        for table, user_id, callback in list(self._subscribers.values()):
            if table != event.table or user_id != event.user_id:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Change subscriber failed",
                    extra={"table": event.table, "change": event.change.value},
                )
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, table: Optional[str] = None) -> int:
        """Return the number of open subscriptions, optionally for one table."""
        if table is None:
            return len(self._subscribers)
        return sum(1 for t, _uid, _cb in self._subscribers.values() if t == table)

    def _remove(self, key: int) -> None:
        self._subscribers.pop(key, None)
