"""
CLI ops commands — health and configuration checks.

Usage:
    vibecheck health [--json]
    vibecheck check-config
    vibecheck generate-config [-o FILE]
"""

from __future__ import annotations

import click

from .context import get_backend, get_config


@click.command("health")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def health(ctx: click.Context, as_json: bool) -> None:
    """Check system health status."""
    from ..observability.health import HealthChecker, HealthStatus

    checker = HealthChecker(get_backend(ctx), get_config(ctx))
    result = checker.check()

    if as_json:
        import json
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.status == HealthStatus.UNHEALTHY:
            raise SystemExit(1)
        return

    status_colors = {
        HealthStatus.HEALTHY: ("✅", "green"),
        HealthStatus.DEGRADED: ("⚠️", "yellow"),
        HealthStatus.UNHEALTHY: ("❌", "red"),
    }
    icon, color = status_colors.get(result.status, ("❓", "white"))

    click.echo()
    click.secho(f"{icon} System Health: {result.status.value.upper()}", fg=color, bold=True)
    click.echo()

    click.echo("Components:")
    for component in result.components:
        c_icon, c_color = status_colors.get(component.status, ("❓", "white"))
        click.echo(f"  {c_icon} ", nl=False)
        click.secho(f"{component.name}", fg=c_color, bold=True, nl=False)
        click.echo(f": {component.message}")
        if component.latency_ms:
            click.echo(f"      Latency: {component.latency_ms:.1f}ms")

    click.echo()

    if result.status == HealthStatus.UNHEALTHY:
        raise SystemExit(1)


@click.command("check-config")
@click.pass_context
def check_config(ctx: click.Context) -> None:
    """Check admin and backend configuration."""
    from ..config.validator import ConfigValidator

    results = ConfigValidator(get_config(ctx)).validate_all()

    click.echo("\n📋 Configuration Status\n")

    not_configured = []
    for name, status in results.items():
        if status.configured:
            click.secho(f"  ✓ {name}", fg="green", nl=False)
            click.echo(f" — {status.mode}")
        else:
            not_configured.append((name, status))
            click.secho(f"  ✗ {name}", fg="red", nl=False)
            if status.missing:
                click.echo(f" — missing: {', '.join(status.missing)}")
            else:
                click.echo(f" — {status.mode}: not valid")

    if not_configured:
        click.echo("\n📖 Setup Guide:\n")
        for name, status in not_configured:
            if status.guidance:
                click.echo(f"  {name}:")
                click.echo(f"    → {status.guidance}")
        click.echo("\n  Or set everything at once: vibecheck generate-config")
        raise SystemExit(1)


@click.command("generate-config")
@click.option("--output", "-o", help="Output file (default: stdout)")
def generate_config(output: str) -> None:
    """
    Generate a VIBECHECK_CONFIG template.

    One JSON value holding every setting, for hosts where a single secret
    is easier to manage than eight environment variables.
    """
    from ..config.loader import generate_master_config_template

    template = generate_master_config_template()

    if output:
        with open(output, "w") as f:
            f.write(template)
        click.secho(f"✅ Template written to {output}", fg="green")
        click.echo()
        click.echo("Next steps:")
        click.echo("  1. Fill in the password and database keys")
        click.echo("  2. Export the whole file as VIBECHECK_CONFIG")
        return

    click.echo(template)
