"""Typer application for the chiwar CLI."""

import typer

from ..config import configure_logging, get_settings
from .auth import login, logout
from .config import config_app
from .encounter import encounter_app

app = typer.Typer(
    name="chiwar",
    help="CLI for Chi War - Feng Shui 2 campaign manager",
    no_args_is_help=True,
)
app.command("login")(login)
app.command("logout")(logout)
app.add_typer(config_app, name="config")
app.add_typer(encounter_app, name="encounter")


@app.callback()
def main_callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    configure_logging(get_settings(), verbose=verbose)


def main() -> None:
    app()
