"""In-process change notifications for the listing tables.

Writers publish after commit; subscribers get a ``ChangeEvent`` but are
expected to re-fetch whatever view they show instead of applying diffs.
Delivery is synchronous on the publishing thread and best-effort: a
subscriber that raises is logged and skipped.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from foodshare.core.errors import InvalidInput

logger = logging.getLogger(__name__)

T = TypeVar("T")

LISTINGS = "food_listings"
RESTAURANTS = "restaurants"
CLAIMS = "claims"
TABLES = (LISTINGS, RESTAURANTS, CLAIMS)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: str  # "insert" | "update" | "delete"
    row_id: Optional[str] = None


Callback = Callable[[ChangeEvent], Any]


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, callback: Callback):
        self._feed = feed
        self.table = table
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self)
            self.active = False


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[Subscription]] = defaultdict(list)

    def subscribe(self, table: str, callback: Callback) -> Subscription:
        if table not in TABLES:
            raise InvalidInput(f"Unknown table '{table}'")
        sub = Subscription(self, table, callback)
        with self._lock:
            self._subscribers[table].append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(sub.table, [])
            if sub in subs:
                subs.remove(sub)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscribers.get(table, []))

    def publish(self, table: str, action: str, row_id: Optional[str] = None) -> int:
        """Deliver to current subscribers; returns how many were called."""
        event = ChangeEvent(table=table, action=action, row_id=row_id)
        with self._lock:
            targets = list(self._subscribers.get(table, []))
        for sub in targets:
            try:
                sub.callback(event)
            except Exception:
                logger.exception("Change feed subscriber failed for %s/%s", table, action)
        return len(targets)


_feed = ChangeFeed()


def get_feed() -> ChangeFeed:
    return _feed


@dataclass
class Snapshot(Generic[T]):
    sequence: int
    items: T
    event: Optional[ChangeEvent] = field(default=None)


class LiveListingFeed(Generic[T]):
    """Keeps a consumer's view in sync by re-fetching on every change.

    Each snapshot carries a sequence number; consumers that receive
    snapshots out of order should drop the ones older than the last seen.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        fetch: Callable[[], T],
        on_snapshot: Callable[[Snapshot[T]], Any],
        tables: Iterable[str] = (LISTINGS, RESTAURANTS),
    ):
        self._feed = feed
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._tables = tuple(tables)
        self._subscriptions: List[Subscription] = []
        self._sequence = 0
        self._seq_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def start(self, initial: bool = True) -> "LiveListingFeed[T]":
        if not self._subscriptions:
            self._subscriptions = [
                self._feed.subscribe(table, self._on_event) for table in self._tables
            ]
        if initial:
            try:
                self.refresh()
            except Exception:
                self.stop()
                raise
        return self

    def stop(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions = []

    def refresh(self, event: Optional[ChangeEvent] = None) -> Snapshot[T]:
        with self._seq_lock:
            self._sequence += 1
            sequence = self._sequence
        snapshot = Snapshot(sequence=sequence, items=self._fetch(), event=event)
        self._on_snapshot(snapshot)
        return snapshot

    def _on_event(self, event: ChangeEvent) -> None:
        self.refresh(event)

    def __enter__(self) -> "LiveListingFeed[T]":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()
