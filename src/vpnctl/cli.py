from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click
from tabulate import tabulate

from vpnlib.config import COLOR_ROLES, Config, ConfigError, load_config
import vpnlib.clients as clients
from vpnlib.errors import format_error_message, format_config_error, suggest_troubleshooting_steps


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file; defaults to VPNCTL_CONFIG or ~/.config/vpnctl/config.yaml",
)
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], json_output: bool, verbose: bool) -> None:
    """VPN location browser.

    Browse the locations offered by the VPN command-line tool and connect or
    disconnect, either with one-shot commands or the interactive TUI.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose

    # Configure logging once per process
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:  # entry point
    cli(standalone_mode=True)


def _load_config(ctx: click.Context, log: logging.Logger) -> Config:
    try:
        log.info("Loading config...")
        cfg = load_config(ctx.obj.get("config_path"))
        log.info("Loaded config from %s", cfg.source_path or "<defaults>")
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)
    return cfg


def _fail(ctx: click.Context, operation: str, error: Exception, context: Optional[dict] = None) -> None:
    click.echo(format_error_message(operation, error, context), err=True)
    if ctx.obj.get("verbose"):
        suggestions = suggest_troubleshooting_steps(operation, error)
        if suggestions:
            click.echo("\nTroubleshooting suggestions:", err=True)
            for suggestion in suggestions[:3]:  # Show top 3 suggestions
                click.echo(f"  • {suggestion}", err=True)
    raise SystemExit(2)


# LOCATIONS commands


@cli.group()
@click.pass_context
def locations(ctx: click.Context) -> None:  # noqa: D401
    """Location-related commands."""
    pass


@locations.command("list")
@click.option("--country", "country_name", help="Show the cities of one country (name or code)")
@click.pass_context
def locations_list(ctx: click.Context, country_name: Optional[str]) -> None:
    """List countries, or the cities of a country."""
    log = logging.getLogger("vpnctl.locations")
    cfg = _load_config(ctx, log)

    try:
        log.info("Loading locations with '%s'", cfg.binary)
        catalog = clients.get_client(cfg).list_locations()
        log.info("Found %d countries", len(catalog))
    except clients.CommandError as e:
        _fail(ctx, "list locations", e)

    if country_name:
        found = catalog.find(country_name)
        if found is None:
            click.echo(f"Country not found: {country_name}", err=True)
            raise SystemExit(2)
        entries = list(found.children)
        headers = ["CITY", "CODE", "LOCATION"]
        rows = [[c.name, c.code, c.detail or "—"] for c in entries]
    else:
        entries = list(catalog.countries)
        headers = ["COUNTRY", "CODE", "CITIES"]
        rows = [[c.name, c.code, len(c.children)] for c in entries]

    if ctx.obj.get("json"):
        key = "cities" if country_name else "countries"
        out = {
            key: [
                {
                    "name": loc.name,
                    "code": loc.code,
                    "id": list(catalog.location_id(loc)),
                    "cities": len(loc.children),
                }
                for loc in entries
            ]
        }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    if not rows:
        click.echo("No locations found")
        return

    log.info("Rendering %d locations", len(rows))
    click.echo(tabulate(rows, headers=headers))


# CONFIG commands


@cli.group("config")
@click.pass_context
def config_group(ctx: click.Context) -> None:  # noqa: D401
    """Configuration commands."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the resolved configuration."""
    log = logging.getLogger("vpnctl.config")
    cfg = _load_config(ctx, log)

    if ctx.obj.get("json"):
        click.echo(cfg.to_json())
        return

    rows = [
        ["source", str(cfg.source_path) if cfg.source_path else "<defaults>"],
        ["binary", cfg.binary],
        ["timeout", f"{cfg.timeout:g}s"],
    ]
    rows.extend([f"colors.{role}", getattr(cfg.colors, role)] for role in COLOR_ROLES)
    click.echo(tabulate(rows, headers=["SETTING", "VALUE"]))


# CONNECTION commands


@cli.command()
@click.argument("country_name")
@click.argument("city_name", required=False)
@click.pass_context
def connect(ctx: click.Context, country_name: str, city_name: Optional[str]) -> None:
    """Connect to a country, or a city within it."""
    log = logging.getLogger("vpnctl.connect")
    cfg = _load_config(ctx, log)
    client = clients.get_client(cfg)

    try:
        catalog = client.list_locations()
    except clients.CommandError as e:
        _fail(ctx, "list locations", e)

    location = catalog.find(country_name, city_name)
    if location is None:
        wanted = f"{country_name} {city_name}" if city_name else country_name
        click.echo(f"Location not found: {wanted}", err=True)
        raise SystemExit(2)

    location_id = catalog.location_id(location)
    try:
        log.info("Connecting to %s", "/".join(location_id))
        output = client.connect(location_id)
    except clients.CommandError as e:
        _fail(ctx, "connect", e, {"location": location.name})

    if ctx.obj.get("json"):
        out = {"connected": True, "location": location.name, "id": list(location_id), "output": output}
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return
    for line in output:
        click.echo(line)
    click.echo(f"Connected to {location.name}")


@cli.command()
@click.pass_context
def disconnect(ctx: click.Context) -> None:
    """Disconnect from the VPN."""
    log = logging.getLogger("vpnctl.disconnect")
    cfg = _load_config(ctx, log)

    try:
        log.info("Disconnecting")
        output = clients.get_client(cfg).disconnect()
    except clients.CommandError as e:
        _fail(ctx, "disconnect", e)

    if ctx.obj.get("json"):
        click.echo(json.dumps({"connected": False, "output": output}, indent=2, sort_keys=True))
        return
    for line in output:
        click.echo(line)
    click.echo("Disconnected")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the VPN connection status."""
    log = logging.getLogger("vpnctl.status")
    cfg = _load_config(ctx, log)

    try:
        state = clients.get_client(cfg).status()
    except clients.CommandError as e:
        _fail(ctx, "get status", e)

    if ctx.obj.get("json"):
        click.echo(json.dumps({"connected": state.connected, "status": state.text}, indent=2, sort_keys=True))
        return
    click.echo(state.text or ("Connected" if state.connected else "Disconnected"))


@cli.command()
@click.pass_context
def tui(ctx: click.Context) -> None:
    """Launch the interactive location browser."""
    log = logging.getLogger("vpnctl.tui")
    cfg = _load_config(ctx, log)
    client = clients.get_client(cfg)

    # Only a catalog failure is fatal before the UI starts
    try:
        catalog = client.list_locations()
    except clients.CommandError as e:
        _fail(ctx, "list locations", e)

    try:
        connected = client.status().connected
    except clients.CommandError as e:
        log.warning("Status check failed, assuming disconnected: %s", e)
        connected = False

    try:
        from vpntui.app import run_tui
        run_tui(cfg, client, catalog, connected=connected)
    except ImportError as e:
        click.echo(f"TUI dependencies not available: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        error_msg = format_error_message("launch TUI", e, {})
        click.echo(error_msg, err=True)
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
