"""
CLI context helpers — shared config/backend access for click commands.

``ctx.obj`` carries ``config`` (AppConfig) and a lazily built ``backend``.
Tests may pre-populate either through ``CliRunner.invoke(..., obj=...)``.
"""

from __future__ import annotations

import click

from ..config.loader import AppConfig
from ..store.base import Backend
from ..store.registry import create_backend
from ..validation import ConfigurationError


def get_config(ctx: click.Context) -> AppConfig:
    return ctx.obj["config"]


def get_backend(ctx: click.Context) -> Backend:
    """Build the configured backend once per invocation."""
    backend = ctx.obj.get("backend")
    if backend is None:
        try:
            backend = create_backend(get_config(ctx))
        except ConfigurationError as e:
            raise click.ClickException(str(e))
        ctx.obj["backend"] = backend
        ctx.find_root().call_on_close(backend.close)
    return backend
