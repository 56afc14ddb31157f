"""Config commands - show and change local CLI configuration."""

import typer

from ..config import ConfigStore
from .utils import error, info, success

config_app = typer.Typer(help="Manage CLI configuration", no_args_is_help=True)

API_URL_KEYS = {"apiUrl", "api-url", "url"}
CAMPAIGN_KEYS = {"campaign", "campaignId", "campaign-id"}
ENCOUNTER_KEYS = {"encounter", "encounterId", "encounter-id"}


@config_app.command("show")
def show():
    """Show current configuration."""
    store = ConfigStore()
    stored = store.load()
    info(f"Config file: {store.path}")
    typer.echo(f"  API URL: {store.api_url}")
    typer.echo(f"  Current Campaign: {stored.current_campaign_id or '(not set)'}")
    typer.echo(f"  Current Encounter: {stored.current_encounter_id or '(not set)'}")
    typer.echo(f"  Token: {'(set)' if stored.token else '(not set)'}")


@config_app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Configuration key (apiUrl, campaign, encounter)"),
    value: str = typer.Argument(..., help="Value to set"),
):
    """Set a configuration value."""
    store = ConfigStore()

    if key in API_URL_KEYS:
        store.set_api_url(value)
        success(f"API URL set to: {value}")
    elif key in CAMPAIGN_KEYS:
        store.set_current_campaign_id(value)
        success(f"Current campaign set to: {value}")
    elif key in ENCOUNTER_KEYS:
        store.set_current_encounter_id(value)
        success(f"Current encounter set to: {value}")
    else:
        error(f"Unknown config key: {key}")
        typer.echo("\nAvailable keys:", err=True)
        typer.echo("  apiUrl     - API server URL", err=True)
        typer.echo("  campaign   - Current campaign ID", err=True)
        typer.echo("  encounter  - Current encounter (fight) ID", err=True)
        raise typer.Exit(code=1)


@config_app.command("local")
def local():
    """Switch to the local development server."""
    store = ConfigStore()
    url = store.settings.local_api_url
    store.set_api_url(url)
    success(f"Switched to local development server: {url}")


@config_app.command("production")
def production():
    """Switch to the production server."""
    store = ConfigStore()
    url = store.settings.api_url
    store.set_api_url(url)
    success(f"Switched to production server: {url}")
