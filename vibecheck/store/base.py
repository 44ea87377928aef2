"""
Backend Base Class — Interface for the settings store and vote ledger.

A backend owns two tables (``app_settings`` and ``vibe_counts``) and a
change feed. Callers never see rows as dicts; everything crosses this
boundary as a pydantic model.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from ..models.vibes import ChangeEvent, Setting, VibeOption
from ..validation import BackendError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]

RowModel = TypeVar("RowModel", bound=BaseModel)


def parse_row(model: Type[RowModel], row: Any, table: str) -> RowModel:
    """
    Build a model from a stored row.

    Raises:
        BackendError: If the row does not fit the model
    """
    try:
        return model.model_validate(row)
    except ModelValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "row"
        raise BackendError(f"Malformed {table} row ({where}): {first.get('msg')}")


class Subscription:
    """Handle returned by ``subscribe``; call ``unsubscribe`` to stop."""

    def __init__(self, feed: "ChangeFeed", table: str, callback: ChangeCallback):
        self._feed = feed
        self.table = table
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._feed.remove(self)


class ChangeFeed:
    """
    In-process fan-out of change notifications, keyed by table.

    Delivery is synchronous in the publishing thread. A failing
    listener is logged and does not stop the others.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subs: Dict[str, List[Subscription]] = {}

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        sub = Subscription(self, table, callback)
        with self._lock:
            self._subs.setdefault(table, []).append(sub)
        logger.debug(f"Subscribed to {table} ({self.listener_count(table)} listeners)")
        return sub

    def remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(sub.table, [])
            if sub in subs:
                subs.remove(sub)

    def listener_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is not None:
                return len(self._subs.get(table, []))
            return sum(len(s) for s in self._subs.values())

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            subs = list(self._subs.get(event.table, []))
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.callback(event)
            except Exception as e:
                logger.exception(f"Change listener for {event.table} failed: {e}")


class PollingFeed(ChangeFeed):
    """
    Change feed whose source is polled on a daemon thread.

    The thread starts with the first subscriber and exits once the last
    one unsubscribes. Subclasses implement ``detect_changes``; each
    detected event is published to the subscribers of its table.
    """

    def __init__(self, interval: float = 2.0, autostart: bool = True):
        super().__init__()
        self.interval = interval
        self.autostart = autostart
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._thread_lock = threading.Lock()

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        sub = super().subscribe(table, callback)
        if self.autostart:
            self._ensure_running()
        return sub

    def detect_changes(self) -> List[ChangeEvent]:
        raise NotImplementedError

    def reset(self) -> None:
        """Forget polling state once the last subscriber has gone."""
        pass

    def poll_once(self) -> List[ChangeEvent]:
        """Detect changes and publish them."""
        events = self.detect_changes()
        for event in events:
            self.publish(event)
        return events

    def _ensure_running(self) -> None:
        with self._thread_lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="vibecheck-poll", daemon=True)
            self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        with self._thread_lock:
            thread = self._thread
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)

    def _run(self) -> None:
        logger.debug(f"Change poller started (interval={self.interval}s)")
        while not self._stop.is_set():
            # Exit decision and handle release are one step, so a racing
            # subscribe either keeps this thread alive or starts a new one
            with self._thread_lock:
                if self.listener_count() == 0:
                    if self._thread is threading.current_thread():
                        self._thread = None
                    self.reset()
                    break
            self.poll_once()
            self._stop.wait(self.interval)
        logger.debug("Change poller stopped")


class Backend(ABC):
    """
    Abstract base class for all backends.

    Implementations must make ``increment_vibe`` atomic with respect to
    concurrent callers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The backend identifier (e.g., 'file', 'rest')."""
        pass

    @abstractmethod
    def get_setting(self, key: str) -> Optional[Setting]:
        """Read one setting; None when the row does not exist."""
        pass

    @abstractmethod
    def set_setting(self, key: str, value: bool) -> Setting:
        """
        Overwrite an existing setting.

        Raises:
            BackendError: If the row is missing or the write fails
        """
        pass

    @abstractmethod
    def list_vibes(self) -> List[VibeOption]:
        """Full read of the vote ledger."""
        pass

    @abstractmethod
    def increment_vibe(self, vibe_name: str) -> VibeOption:
        """
        Atomically add one to the row whose name equals ``vibe_name``.

        Raises:
            UnknownVibeError: If no row has that name
            BackendError: If the write fails
        """
        pass

    @abstractmethod
    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        """Register for change notifications on a table."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass
