"""Login and logout commands."""

import webbrowser

import typer

from ..api.client import get_client
from ..config import ConfigStore
from ..services.auth import AuthService
from .utils import async_command, info, success, warn


@async_command
async def login():
    """Authenticate with Chi War via browser."""
    store = ConfigStore()
    client = get_client(store)
    try:
        service = AuthService(client, store)
        if service.is_logged_in:
            warn("You are already logged in. Logging in again will replace the existing session.")

        info("Starting browser authentication...")
        auth = await service.start_login()

        info(f"Authorization code: {auth.code}")
        info("Opening browser to authorize...")
        info(f"If browser doesn't open, visit: {auth.url}")
        webbrowser.open(auth.url)

        info("")
        info("Waiting for browser authorization...")
        info("(Press Ctrl+C to cancel)")

        def show_progress(attempt: int) -> None:
            dots = "." * (attempt % 4 + 1)
            typer.echo(f"\rWaiting for approval{dots}   ", nl=False)

        user = await service.wait_for_approval(auth.code, on_pending=show_progress)
    finally:
        await client.close()

    typer.echo("\r" + " " * 50 + "\r", nl=False)
    success(f"Logged in as {user.display_name}")
    if user.gamemaster:
        info("You have gamemaster privileges.")


@async_command
async def logout():
    """Clear saved authentication."""
    store = ConfigStore()
    async with get_client(store) as client:
        logged_out = AuthService(client, store).logout()

    if logged_out:
        success("Logged out successfully.")
    else:
        info("You are not logged in.")
