"""CLI entry point for adsmith."""

import asyncio
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from adsmith import __version__
from adsmith.config.loader import default_config_path, load_config
from adsmith.content.parser import parse_html
from adsmith.models.block import Zone
from adsmith.models.config import Config
from adsmith.services.access import AccessDecision, Session, check_access
from adsmith.services.ads_client import AdsApiClient
from adsmith.services.exceptions import TransportFailure
from adsmith.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()

ZONE_CHOICES = click.Choice([zone.value for zone in Zone])


def _load_config(config_path: Optional[Path]) -> Config:
    """
    Load configuration, turning failures into CLI errors.

    Raises:
        click.ClickException: If config is missing, has invalid permissions, or validation fails
    """
    path = config_path or default_config_path()
    try:
        config = load_config(path)
        logger.info("config_loaded", path=str(path))
        return config
    except FileNotFoundError as e:
        logger.error("config_not_found", path=str(path))
        raise click.ClickException(str(e))
    except PermissionError as e:
        logger.error("config_permission_error", path=str(path))
        raise click.ClickException(str(e))
    except (ValidationError, ValueError) as e:
        logger.error("config_validation_error", error=str(e))
        raise click.ClickException(f"Configuration validation failed:\n{e}")


def _require_access(config: Config) -> None:
    """
    Check the configured session against the editor's allowed roles.

    Raises:
        click.ClickException: If the session is signed out or its role is not allowed
    """
    session = Session.from_config(config)
    decision = check_access(session, config.session.allowed_roles)
    if decision == AccessDecision.LOGIN_REQUIRED:
        raise click.ClickException(
            "Not signed in: set api.token in the config file or ADSMITH_API_TOKEN"
        )
    if decision == AccessDecision.FORBIDDEN:
        raise click.ClickException(
            f"Role {session.role!r} may not open the ads editor "
            f"(allowed: {', '.join(config.session.allowed_roles or [])})"
        )


def _resolve_site(config: Config, site: Optional[str]) -> str:
    if site is None:
        return config.sites[0].value
    if site not in config.site_values():
        raise click.BadParameter(
            f"{site!r} is not a configured site ({', '.join(config.site_values())})",
            param_hint="--site",
        )
    return site


@click.group()
@click.version_option(version=__version__, prog_name="adsmith")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/adsmith/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]):
    """adsmith: edit the ads of your sites from the terminal."""
    configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--site", help="Site to open (default: first configured site)")
@click.pass_context
def edit(ctx: click.Context, site: Optional[str]):
    """
    Open the ads editor.

    Examples:
        adsmith edit                    # Edit the first configured site
        adsmith edit --site a3satta.pro
    """
    config = _load_config(ctx.obj["config_path"])
    _require_access(config)
    site = _resolve_site(config, site)

    from adsmith.services.editor import AdsEditor
    from adsmith.tui.app import AdsmithApp

    logger.info("edit_command_started", site=site)
    editor = AdsEditor(config, site=site)
    AdsmithApp(editor).run()
    logger.info("edit_command_completed", site=site)


@cli.command(name="list")
@click.option("--site", help="Site to list (default: first configured site)")
@click.option("--zone", type=ZONE_CHOICES, help="Only list one zone")
@click.pass_context
def list_ads(ctx: click.Context, site: Optional[str], zone: Optional[str]):
    """List the saved ads of a site, grouped by zone."""
    config = _load_config(ctx.obj["config_path"])
    _require_access(config)
    site = _resolve_site(config, site)
    client = AdsApiClient(config.api)

    try:
        blocks = asyncio.run(client.list_ads(site))
    except TransportFailure as e:
        raise click.ClickException(f"Failed to load ads for {site}: {e.message}")

    zones = [Zone(zone)] if zone else list(Zone)
    for current in zones:
        zone_blocks = sorted((b for b in blocks if b.zone == current), key=lambda b: b.order)
        table = Table(title=f"{current.label} ({len(zone_blocks)})", title_justify="left")
        table.add_column("#", justify="right", style="bold")
        table.add_column("ID", style="dim")
        table.add_column("Content")
        for block in zone_blocks:
            text = " ".join(parse_html(block.content).text_content().split())
            table.add_row(str(block.order + 1), block.key, Text(text) if text else Text("(empty)", style="dim"))
        console.print(table)


@cli.command()
@click.pass_context
def sites(ctx: click.Context):
    """List the configured sites."""
    config = _load_config(ctx.obj["config_path"])
    table = Table(title="Sites", title_justify="left")
    table.add_column("Label", style="bold")
    table.add_column("Site")
    for option in config.sites:
        table.add_row(option.label, option.value)
    console.print(table)


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
