"""Auth service - device-authorization login and logout."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..api.client import ChiWarClient
from ..api.schemas import CliAuthStart, User
from ..config import ConfigStore
from .encounters import CommandError

logger = logging.getLogger(__name__)


class AuthService:
    """Service for the browser-based CLI login flow.

    The CLI asks the server for a short code, the user approves it in the
    browser, and the CLI polls until the code is approved or expires.
    """

    def __init__(
        self,
        client: ChiWarClient,
        store: ConfigStore,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.store = store
        self.settings = store.settings
        self._sleep = sleep

    @property
    def is_logged_in(self) -> bool:
        return self.store.token is not None

    async def start_login(self) -> CliAuthStart:
        """Request a device-authorization code and the URL to approve it at."""
        return await self.client.start_cli_auth()

    async def wait_for_approval(
        self,
        code: str,
        on_pending: Callable[[int], None] | None = None,
    ) -> User:
        """Poll until the code is approved, then store the session token.

        Args:
            code: Code returned by start_login
            on_pending: Called with the attempt number while still pending

        Returns:
            The user who approved the login

        Raises:
            CommandError: If the code expires or polling times out
        """
        for attempt in range(self.settings.auth_max_poll_attempts):
            poll = await self.client.poll_cli_auth(code)

            if poll.status == "approved" and poll.token and poll.user:
                self.store.set_token(poll.token)
                logger.info(f"Logged in as {poll.user.email}")
                return poll.user

            if poll.status == "expired":
                raise CommandError("Authorization code expired. Please try again.")

            if on_pending:
                on_pending(attempt)
            await self._sleep(self.settings.auth_poll_interval)

        raise CommandError("Authentication timed out. Please try again.")

    def logout(self) -> bool:
        """Forget the stored token. Returns False if there was none."""
        if not self.is_logged_in:
            return False
        self.store.clear_token()
        return True
