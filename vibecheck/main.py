"""
Vibe Check — CLI Entry Point

Usage:
    vibecheck serve [--host H] [--port P] [--debug]
    vibecheck status
    vibecheck vote "Good Vibes"
    vibecheck censor on|off [--password ...]
    vibecheck watch [--updates N]
    vibecheck seed [--force]
    vibecheck health [--json]
    vibecheck check-config
    vibecheck generate-config [-o FILE]
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
load_dotenv()  # .env in the working directory, if any

import threading

import click

from .cli.context import get_backend, get_config
from .cli.ops import check_config, generate_config, health
from .config.loader import load_config
from .engine.censorship import read_censorship, toggle_censorship
from .engine.live import build_snapshot, LiveView
from .engine.votes import cast_vote
from .logging_config import setup_logging
from .models.vibes import LiveSnapshot
from .validation import (
    AuthorizationError,
    BackendError,
    ConfigurationError,
    UnknownVibeError,
    ValidationError,
)

# Initialize logging
setup_logging()


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Vibe Check — live vibe voting with a censorship switch."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", load_config())
    ctx.obj.setdefault("backend", None)


def _echo_snapshot(snapshot: LiveSnapshot) -> None:
    width = max([len(v.name) for v in snapshot.vibes] + [10])
    for vibe in snapshot.vibes:
        click.echo(f"  {vibe.name:<{width}}  {vibe.count:>6}")
    click.echo(f"  {'Total':<{width}}  {snapshot.total_votes:>6}")
    click.echo("")
    click.echo(f"Overall Vibe: {snapshot.overall}")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=5000, type=int, help="Port")
@click.option("--debug", is_flag=True, help="Enable debug mode")
def serve(host: str, port: int, debug: bool) -> None:
    """Run the web server."""
    from .web.server import run_server

    run_server(host=host, port=port, debug=debug)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show current tallies, overall vibe and censorship state."""
    backend = get_backend(ctx)

    try:
        snapshot = build_snapshot(backend.list_vibes())
    except BackendError as e:
        raise click.ClickException(e.message)

    click.echo(f"Backend:      {backend.name}")
    click.echo("")
    _echo_snapshot(snapshot)

    try:
        active = read_censorship(backend)
    except BackendError as e:
        click.secho(f"Censorship:   unknown ({e.message})", fg="yellow")
        return
    if active:
        click.secho("Censorship:   ACTIVE", fg="red", bold=True)
    else:
        click.secho("Censorship:   inactive", fg="green")


@cli.command()
@click.argument("vibe_name")
@click.pass_context
def vote(ctx: click.Context, vibe_name: str) -> None:
    """Cast one vote for VIBE_NAME."""
    try:
        result = cast_vote(get_backend(ctx), vibe_name)
    except ValidationError as e:
        raise click.BadParameter(e.message, param_hint="VIBE_NAME")
    except UnknownVibeError as e:
        raise click.ClickException(e.message)
    except BackendError as e:
        raise click.ClickException(e.message)

    if result.censored:
        click.secho("Vote received, but action modified due to policy.", fg="yellow")
    else:
        click.secho(f"✓ {result.vibe.name}: {result.vibe.count}", fg="green")


@cli.command()
@click.argument("state", type=click.Choice(["on", "off"]))
@click.option("--password", prompt=True, hide_input=True, help="Admin password")
@click.pass_context
def censor(ctx: click.Context, state: str, password: str) -> None:
    """Turn "Bad Vibes" censorship on or off."""
    try:
        result = toggle_censorship(
            get_backend(ctx),
            password=password,
            new_state=state == "on",
            admin_password=get_config(ctx).admin_password,
        )
    except AuthorizationError:
        raise click.ClickException("Unauthorized")
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    except BackendError as e:
        raise click.ClickException(e.message)

    label = "ON" if result.new_state else "OFF"
    click.secho(f"Censorship is now {label}.", fg="red" if result.new_state else "green", bold=True)


@cli.command()
@click.option("--updates", default=0, type=int, help="Exit after N snapshots (0 = until Ctrl+C)")
@click.pass_context
def watch(ctx: click.Context, updates: int) -> None:
    """Follow tallies live; re-renders on every ledger change."""
    seen = 0
    done = threading.Event()

    def on_update(snapshot: LiveSnapshot) -> None:
        nonlocal seen
        seen += 1
        click.echo("")
        _echo_snapshot(snapshot)
        if updates and seen >= updates:
            done.set()

    view = LiveView(get_backend(ctx), on_update=on_update)
    view.start()
    if not view.ready:
        click.secho("Loading Vibe Check... (waiting for the first successful read)", fg="yellow")

    try:
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        click.echo("")
    finally:
        view.stop()


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite existing data (resets all counts)")
@click.pass_context
def seed(ctx: click.Context, force: bool) -> None:
    """Create the local data file with the default vibes."""
    backend = get_backend(ctx)
    seed_fn = getattr(backend, "seed", None)
    if seed_fn is None:
        raise click.ClickException(
            f"The {backend.name} backend is seeded by sql/schema.sql, not by this command"
        )

    if force and not click.confirm("Reset all vote counts?", default=False):
        click.echo("Cancelled.")
        return

    if seed_fn(overwrite=force):
        click.secho(f"✓ Seeded {backend.path}", fg="green")
    else:
        click.echo(f"Already seeded: {backend.path} (use --force to reset)")


cli.add_command(health)
cli.add_command(check_config)
cli.add_command(generate_config)


if __name__ == "__main__":
    cli()
