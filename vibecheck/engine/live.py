"""
Live View — Keep a rendered tally in step with the vote ledger.

Two states:

    loading ──(first successful full read)──▶ ready

Every change notification triggers a full re-read of the ledger, never
a delta merge, so missed or reordered notifications heal on the next
one. A failed re-read keeps the last good snapshot.

## Usage

    view = LiveView(backend, on_update=lambda snap: print(snap.overall))
    view.start()
    ...
    view.stop()
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from ..models.vibes import VIBES_TABLE, ChangeEvent, LiveSnapshot, VibeOption
from ..store.base import Backend, Subscription
from ..validation import BackendError
from .vibe import overall_vibe, split_counts

logger = logging.getLogger(__name__)

LOADING = "loading"
READY = "ready"


def build_snapshot(vibes: List[VibeOption], state: str = READY) -> LiveSnapshot:
    """Sort by name and attach the overall label."""
    ordered = sorted(vibes, key=lambda v: v.name)
    return LiveSnapshot(
        state=state,
        vibes=ordered,
        overall=overall_vibe(ordered),
        total_votes=sum(split_counts(ordered)),
    )


class LiveView:
    """Full-resync subscriber over the vote ledger."""

    def __init__(
        self,
        backend: Backend,
        on_update: Optional[Callable[[LiveSnapshot], None]] = None,
    ):
        self.backend = backend
        self.on_update = on_update
        self.snapshot = LiveSnapshot()
        self.refresh_count = 0
        self._subscription: Optional[Subscription] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        return self.snapshot.state

    @property
    def ready(self) -> bool:
        return self.snapshot.state == READY

    def start(self) -> LiveSnapshot:
        """
        Initial read, then subscribe.

        The subscription is made even if the read fails, so the view can
        still become ready on the next notification.
        """
        try:
            self.refresh()
        except BackendError as e:
            logger.error(f"Error fetching initial vibes: {e.message}")

        if self._subscription is None:
            self._subscription = self.backend.subscribe(VIBES_TABLE, self._on_change)
        return self.snapshot

    def refresh(self) -> LiveSnapshot:
        """
        Re-read the whole ledger and recompute.

        Raises:
            BackendError: If the read fails (state is left as it was)
        """
        vibes = self.backend.list_vibes()
        with self._lock:
            self.snapshot = build_snapshot(vibes)
            self.refresh_count += 1
            snapshot = self.snapshot
        if self.on_update is not None:
            self.on_update(snapshot)
        return snapshot

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug(f"Change on {event.table} ({event.event}), re-fetching")
        try:
            self.refresh()
        except BackendError as e:
            logger.error(f"Error re-fetching vibes: {e.message}")

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
