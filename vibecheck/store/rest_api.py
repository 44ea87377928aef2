"""
REST Backend — Hosted Postgres behind a PostgREST-style API.

Talks to the ``/rest/v1`` surface of a hosted database project
(Supabase or a bare PostgREST). The tables, seed rows and the
``increment_vibe_count`` function it relies on are in ``sql/schema.sql``.

## Configuration

- SUPABASE_URL: Project URL (https://<ref>.supabase.co)
- SUPABASE_ANON_KEY: Public key; used for reads and the increment RPC
- SUPABASE_SERVICE_ROLE_KEY: Privileged key; used for settings writes
- VIBECHECK_TIMEOUT: Per-request timeout in seconds (default: 10)
- VIBECHECK_POLL_SECONDS: Change-feed poll interval (default: 2)

## Change notifications

The hosted realtime channel is a websocket protocol; here changes are
detected by polling the table and diffing full snapshots. Consumers
re-read the whole table on any notification anyway, so a coarse feed
loses nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..models.vibes import (
    SETTINGS_TABLE,
    VIBES_TABLE,
    ChangeEvent,
    Setting,
    VibeOption,
)
from ..validation import BackendError, ConfigurationError, UnknownVibeError
from .base import Backend, ChangeCallback, PollingFeed, Subscription, parse_row

logger = logging.getLogger(__name__)

INCREMENT_RPC = "increment_vibe_count"


class PollingChangeFeed(PollingFeed):
    """
    Change feed that re-reads each subscribed table and diffs snapshots.

    The first poll of a table only records a baseline.
    """

    def __init__(
        self,
        fetchers: Dict[str, Callable[[], List[Dict[str, Any]]]],
        interval: float = 2.0,
        autostart: bool = True,
    ):
        super().__init__(interval=interval, autostart=autostart)
        self.fetchers = fetchers
        self._snapshots: Dict[str, List[Dict[str, Any]]] = {}

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        if table not in self.fetchers:
            raise BackendError(f"No change feed for table: {table}")
        return super().subscribe(table, callback)

    def reset(self) -> None:
        self._snapshots.clear()

    def detect_changes(self) -> List[ChangeEvent]:
        events = []
        for table, fetch in self.fetchers.items():
            if self.listener_count(table) == 0:
                self._snapshots.pop(table, None)
                continue
            try:
                rows = fetch()
            except BackendError as e:
                logger.warning(f"Change poll for {table} failed: {e.message}")
                continue
            previous = self._snapshots.get(table)
            self._snapshots[table] = rows
            if previous is None or previous == rows:
                continue
            changed = [r for r in rows if r not in previous]
            events.append(ChangeEvent(table=table, record=changed[0] if changed else {}))
        return events


class RestBackend(Backend):
    """Backend for a hosted PostgREST database."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        service_key: Optional[str] = None,
        timeout: float = 10.0,
        poll_interval: float = 2.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not url:
            raise ConfigurationError("SUPABASE_URL not configured")
        if not url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid SUPABASE_URL: {url}")
        if not anon_key:
            raise ConfigurationError("SUPABASE_ANON_KEY not configured")

        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.service_key = service_key
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=f"{self.url}/rest/v1",
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "User-Agent": "vibecheck/1.0",
            },
        )
        self._feed = PollingChangeFeed(
            fetchers={
                VIBES_TABLE: self._fetch_vibe_rows,
                SETTINGS_TABLE: self._fetch_setting_rows,
            },
            interval=poll_interval,
        )

    @property
    def name(self) -> str:
        return "rest"

    # ── HTTP ──────────────────────────────────────────────────

    def _auth_headers(self, privileged: bool = False) -> Dict[str, str]:
        key = self.anon_key
        if privileged:
            if not self.service_key:
                raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY not configured")
            key = self.service_key
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    def _request(
        self,
        method: str,
        path: str,
        privileged: bool = False,
        **kwargs: Any,
    ) -> Any:
        headers = {**self._auth_headers(privileged), **kwargs.pop("headers", {})}
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException:
            raise BackendError(f"Request timed out after {self.timeout}s")
        except httpx.RequestError as e:
            raise BackendError(f"Backend request failed: {e}")

        if response.status_code >= 400:
            raise BackendError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise BackendError(f"Invalid JSON from backend ({response.status_code})")

    # ── Settings ──────────────────────────────────────────────

    def _fetch_setting_rows(self) -> List[Dict[str, Any]]:
        return _rows(
            self._request("GET", f"/{SETTINGS_TABLE}", params={"select": "key,value"}),
            SETTINGS_TABLE,
        )

    def get_setting(self, key: str) -> Optional[Setting]:
        rows = _rows(
            self._request(
                "GET",
                f"/{SETTINGS_TABLE}",
                params={"select": "key,value", "key": f"eq.{key}"},
            ),
            SETTINGS_TABLE,
        )
        if not rows:
            return None
        return parse_row(Setting, rows[0], SETTINGS_TABLE)

    def set_setting(self, key: str, value: bool) -> Setting:
        rows = self._request(
            "PATCH",
            f"/{SETTINGS_TABLE}",
            privileged=True,
            params={"key": f"eq.{key}"},
            json={"value": value},
            headers={"Prefer": "return=representation"},
        )
        rows = _rows(rows, SETTINGS_TABLE)
        if not rows:
            raise BackendError(f"Setting not found: {key}")
        setting = parse_row(Setting, rows[0], SETTINGS_TABLE)
        logger.info(f"Setting {key} = {setting.value}", extra={"setting_key": key})
        return setting

    # ── Ledger ────────────────────────────────────────────────

    def _fetch_vibe_rows(self) -> List[Dict[str, Any]]:
        return _rows(
            self._request(
                "GET",
                f"/{VIBES_TABLE}",
                params={"select": "id,name,count", "order": "name.asc"},
            ),
            VIBES_TABLE,
        )

    def list_vibes(self) -> List[VibeOption]:
        return [parse_row(VibeOption, row, VIBES_TABLE) for row in self._fetch_vibe_rows()]

    def increment_vibe(self, vibe_name: str) -> VibeOption:
        result = self._request(
            "POST",
            f"/rpc/{INCREMENT_RPC}",
            json={"vibe_name": vibe_name},
        )
        # setof returns a list; a scalar-row function returns an object
        if isinstance(result, dict):
            result = [result]
        result = _rows(result, VIBES_TABLE)
        if not result:
            raise UnknownVibeError(vibe_name)
        return parse_row(VibeOption, result[0], VIBES_TABLE)

    # ── Realtime ──────────────────────────────────────────────

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        return self._feed.subscribe(table, callback)

    def close(self) -> None:
        self._feed.stop()
        self._client.close()


def _rows(result: Any, table: str) -> List[Any]:
    """Rows from a PostgREST response; an empty body means no rows."""
    if result is None:
        return []
    if not isinstance(result, list):
        raise BackendError(f"Unexpected {table} response: expected a list of rows")
    return result


def _error_message(response: httpx.Response) -> str:
    """Best error text from a PostgREST error body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for field in ("message", "error", "msg", "hint"):
            if body.get(field):
                return str(body[field])
    text = response.text[:200].strip()
    return text or f"Backend error {response.status_code}"
