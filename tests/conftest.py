"""
Shared fixtures.

Provides a seeded FileBackend under a temp directory and a Flask test app
wired to it, so routes and engine code run against real storage without
touching the working tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from vibecheck.config.loader import AppConfig
from vibecheck.store.file_store import FileBackend


ADMIN_PASSWORD = "open-sesame"


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "vibes.json"


@pytest.fixture
def backend(data_file: Path) -> Iterator[FileBackend]:
    """Seeded local backend: censorship off, three zeroed vibes."""
    backend = FileBackend(data_file)
    backend.seed()
    yield backend
    backend.close()


@pytest.fixture
def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest.fixture
def config(data_file: Path, admin_password: str) -> AppConfig:
    return AppConfig(
        admin_password=admin_password,
        backend="file",
        data_file=str(data_file),
    )


@pytest.fixture
def app(config, backend):
    """Flask test app bound to the temp backend."""
    pytest.importorskip("flask")
    from vibecheck.web.server import create_app

    app = create_app(config=config, backend=backend)
    app.config["TESTING"] = True
    app.config["SSE_KEEPALIVE_SECONDS"] = 0.05
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def counts(backend):
    """Callable returning {name: count} for the current ledger."""
    def _counts():
        return {v.name: v.count for v in backend.list_vibes()}
    return _counts


@pytest.fixture
def censor_on(backend):
    """Turn censorship on directly in the store."""
    backend.set_setting("censor_bad_vibes", True)
    return backend
