"""
File Backend — JSON document holding both tables.

Layout of the data file:

    {
      "app_settings": [{"key": "censor_bad_vibes", "value": false}],
      "vibe_counts":  [{"id": "...", "name": "Good Vibes", "count": 0}, ...]
    }

Reads and writes go through one process-wide lock, which is what makes
``increment_vibe`` atomic. Writes are temp-file-then-rename so a crash
never leaves a half-written document.

## Change notifications

Writes made through this backend are published right away, after the
lock is released so listeners may read back immediately. Writes made by
anyone else sharing the file (``vibecheck vote`` next to a running
server, a second server process) are picked up by a poller that re-reads
the document every ``poll_interval`` seconds while there are
subscribers. Both paths compare against the last document this backend
saw, so a write is announced once.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..models.vibes import (
    CENSOR_SETTING_KEY,
    SETTINGS_TABLE,
    VIBES_TABLE,
    ChangeEvent,
    Setting,
    VibeOption,
)
from ..validation import BackendError, UnknownVibeError
from .base import Backend, ChangeCallback, PollingFeed, Subscription, parse_row

logger = logging.getLogger(__name__)

DEFAULT_VIBES = ("Good Vibes", "Neutral Vibes", "Bad Vibes")
TABLES = (SETTINGS_TABLE, VIBES_TABLE)


def default_document() -> Dict[str, Any]:
    """Seed rows: the censorship flag off and one zeroed row per option."""
    return {
        SETTINGS_TABLE: [{"key": CENSOR_SETTING_KEY, "value": False}],
        VIBES_TABLE: [
            {"id": uuid4().hex, "name": name, "count": 0}
            for name in DEFAULT_VIBES
        ],
    }


class FileChangeFeed(PollingFeed):
    """Polls the data file for writes made outside this backend."""

    def __init__(self, backend: "FileBackend", interval: float = 2.0, autostart: bool = True):
        super().__init__(interval=interval, autostart=autostart)
        self.backend = backend

    def detect_changes(self) -> List[ChangeEvent]:
        return self.backend.external_changes()


class FileBackend(Backend):
    """Local backend for development, demos and tests."""

    def __init__(self, path: Path, poll_interval: float = 2.0, autostart: bool = True):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._feed = FileChangeFeed(self, interval=poll_interval, autostart=autostart)
        # Tables as of the last read-for-changes or own write; None until primed
        self._seen: Optional[Dict[str, List[Any]]] = None

    @property
    def name(self) -> str:
        return "file"

    # ── Document I/O ──────────────────────────────────────────

    def seed(self, overwrite: bool = False) -> bool:
        """
        Write the default document.

        Returns:
            True if the file was written, False if it already existed
        """
        with self._lock:
            if self.path.exists() and not overwrite:
                return False
            self._write(default_document())
        logger.info(f"Seeded vibe data at {self.path}")
        return True

    def _read(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise BackendError(f"Data file not found: {self.path} (run `vibecheck seed`)")
        except (OSError, json.JSONDecodeError) as e:
            raise BackendError(f"Cannot read data file {self.path}: {e}")

        if not isinstance(data, dict):
            raise BackendError(f"Malformed data file {self.path}: expected a JSON object")
        for table in TABLES:
            rows = data.setdefault(table, [])
            if not isinstance(rows, list):
                raise BackendError(f"Malformed data file {self.path}: {table} is not a list")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
            temp_path.replace(self.path)
        except OSError as e:
            raise BackendError(f"Cannot write data file {self.path}: {e}")
        self._seen = _tables(data)

    @staticmethod
    def _find(rows: List[Any], field: str, value: str) -> Optional[Dict[str, Any]]:
        return next(
            (r for r in rows if isinstance(r, dict) and r.get(field) == value),
            None,
        )

    # ── Settings ──────────────────────────────────────────────

    def get_setting(self, key: str) -> Optional[Setting]:
        with self._lock:
            rows = self._read()[SETTINGS_TABLE]
        row = self._find(rows, "key", key)
        if row is None:
            return None
        return parse_row(Setting, row, SETTINGS_TABLE)

    def set_setting(self, key: str, value: bool) -> Setting:
        with self._lock:
            data = self._read()
            row = self._find(data[SETTINGS_TABLE], "key", key)
            if row is None:
                raise BackendError(f"Setting not found: {key}")
            row["value"] = value
            setting = parse_row(Setting, row, SETTINGS_TABLE)
            self._write(data)

        logger.info(f"Setting {key} = {value}", extra={"setting_key": key})
        self._feed.publish(ChangeEvent(table=SETTINGS_TABLE, record=setting.model_dump()))
        return setting

    # ── Ledger ────────────────────────────────────────────────

    def list_vibes(self) -> List[VibeOption]:
        with self._lock:
            rows = self._read()[VIBES_TABLE]
        return [parse_row(VibeOption, row, VIBES_TABLE) for row in rows]

    def increment_vibe(self, vibe_name: str) -> VibeOption:
        with self._lock:
            data = self._read()
            row = self._find(data[VIBES_TABLE], "name", vibe_name)
            if row is None:
                raise UnknownVibeError(vibe_name)
            current = parse_row(VibeOption, row, VIBES_TABLE)
            row["count"] = current.count + 1
            vibe = current.model_copy(update={"count": current.count + 1})
            self._write(data)

        logger.debug(f"Vote counted: {vibe.name} -> {vibe.count}", extra={"vibe_name": vibe.name})
        self._feed.publish(ChangeEvent(table=VIBES_TABLE, record=vibe.model_dump()))
        return vibe

    # ── Realtime ──────────────────────────────────────────────

    def _snapshot_tables(self) -> Dict[str, List[Any]]:
        """Current tables; a missing file reads as empty. Caller holds the lock."""
        if not self.path.exists():
            return {table: [] for table in TABLES}
        return _tables(self._read())

    def external_changes(self) -> List[ChangeEvent]:
        """
        One event per table that changed since this backend last looked.

        The first call only records a baseline. Read failures are logged
        and reported as no change.
        """
        with self._lock:
            try:
                current = self._snapshot_tables()
            except BackendError as e:
                logger.warning(f"Change poll for {self.path} failed: {e.message}")
                return []
            previous, self._seen = self._seen, current

        if previous is None:
            return []
        return [
            ChangeEvent(table=table)
            for table in TABLES
            if current[table] != previous[table]
        ]

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        with self._lock:
            if self._seen is None:
                try:
                    self._seen = self._snapshot_tables()
                except BackendError as e:
                    # First successful poll sets the baseline instead
                    logger.debug(f"No change baseline yet: {e.message}")
        return self._feed.subscribe(table, callback)

    def close(self) -> None:
        self._feed.stop()


def _tables(data: Dict[str, Any]) -> Dict[str, List[Any]]:
    return {table: data.get(table, []) for table in TABLES}
