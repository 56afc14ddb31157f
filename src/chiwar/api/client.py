"""Async client for the Chi War REST API."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx

from ..config import ConfigStore, Settings, get_settings
from .schemas import (
    CliAuthPoll,
    CliAuthStart,
    CombatUpdate,
    Encounter,
    Fight,
    FightList,
    InitiativeUpdate,
    Swerve,
    User,
)

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Not authenticated. Run 'chiwar login' first."
SESSION_EXPIRED = "Session expired. Run 'chiwar login' to re-authenticate."


class ApiError(Exception):
    """Error response (or transport failure) from the API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotAuthenticatedError(ApiError):
    """No session token is stored."""

    def __init__(self) -> None:
        super().__init__(NOT_AUTHENTICATED)


def _setup_request_logger(settings: Settings) -> logging.Logger | None:
    """Set up the HTTP exchange logger with file output and rotation.

    Args:
        settings: Application settings containing log directory and rotation config

    Returns:
        Configured logger instance, or None when request logging is disabled
    """
    if not settings.request_log_dir:
        return None

    log_dir = Path(settings.request_log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Rotate old logs - keep only last N sessions
    log_files = sorted(log_dir.glob("session_*.log"), key=lambda p: p.stat().st_mtime)
    excess = len(log_files) - max(settings.request_log_rotation_count - 1, 0)
    for old_file in log_files[: max(excess, 0)]:
        old_file.unlink()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"session_{timestamp}.log"

    request_logger = logging.getLogger("chiwar.requests")
    request_logger.setLevel(logging.INFO)
    request_logger.handlers.clear()
    request_logger.propagate = False

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("%(message)s"))
    request_logger.addHandler(handler)

    return request_logger


def _error_message(response: httpx.Response, action: str, not_found: str | None, forbidden: str | None) -> str:
    """Build a user-facing message for an error response."""
    if response.status_code == 401:
        return SESSION_EXPIRED
    if response.status_code == 403 and forbidden:
        return forbidden
    if response.status_code == 404 and not_found:
        return not_found

    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, dict) and errors:
            messages = "; ".join(
                f"{field}: {', '.join(errs) if isinstance(errs, list) else errs}" for field, errs in errors.items()
            )
            return f"Failed to {action}: {messages}"
        message = data.get("message") or data.get("error")
        if isinstance(message, str) and message:
            return message

    return f"Failed to {action}"


class ChiWarClient:
    """Bearer-token client for the Chi War API.

    Usage:
        async with ChiWarClient(base_url, token=token) as client:
            encounter = await client.get_encounter(fight_id)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.token = token
        self.request_logger = _setup_request_logger(self.settings)
        self.http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            timeout=self.settings.http_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ChiWarClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http.aclose()

    def _log_exchange(self, method: str, path: str, status: int | str, duration_ms: int) -> None:
        logger.debug(f"{method} {path} -> {status} ({duration_ms}ms)")
        if self.request_logger:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
            self.request_logger.info(f"[{timestamp}] {method} {path} -> {status} ({duration_ms}ms)")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        auth: bool = True,
        not_found: str | None = None,
        forbidden: str | None = None,
    ) -> httpx.Response:
        """Send a request and map error responses to ApiError.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            action: Short description used in error messages ("get encounter")
            json: Optional JSON body
            params: Optional query parameters
            auth: Whether the request needs the bearer token
            not_found: Message to use for a 404 response
            forbidden: Message to use for a 403 response

        Returns:
            The successful response

        Raises:
            NotAuthenticatedError: If auth is required and no token is set
            ApiError: On an error response or transport failure
        """
        headers: dict[str, str] = {}
        if auth:
            if not self.token:
                raise NotAuthenticatedError()
            headers["Authorization"] = f"Bearer {self.token}"

        start_time = time.time()
        try:
            response = await self.http.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            self._log_exchange(method, path, "error", int((time.time() - start_time) * 1000))
            raise ApiError(f"Failed to {action}: {e}") from e

        self._log_exchange(method, path, response.status_code, int((time.time() - start_time) * 1000))

        if response.is_error:
            raise ApiError(_error_message(response, action, not_found, forbidden), response.status_code)
        return response

    # =========================================================================
    # Auth
    # =========================================================================

    async def start_cli_auth(self) -> CliAuthStart:
        response = await self._request("POST", "/api/v2/cli/auth/start", action="start authentication", auth=False)
        return CliAuthStart.model_validate(response.json())

    async def poll_cli_auth(self, code: str) -> CliAuthPoll:
        """Poll a device-authorization code; an expired code comes back as status "expired"."""
        try:
            response = await self._request(
                "POST",
                "/api/v2/cli/auth/poll",
                action="poll authentication status",
                json={"code": code},
                auth=False,
            )
        except ApiError as e:
            if e.status_code == 410:
                return CliAuthPoll(status="expired", error="Authorization code expired")
            raise
        return CliAuthPoll.model_validate(response.json())

    async def get_current_user(self) -> User:
        response = await self._request("GET", "/api/v2/users/current", action="get current user")
        return User.model_validate(response.json())

    # =========================================================================
    # Fights
    # =========================================================================

    async def list_fights(self, limit: int | None = None, page: int | None = None, active: bool | None = None) -> FightList:
        params: dict[str, Any] = {}
        if limit:
            params["per_page"] = limit
        if page:
            params["page"] = page
        if active is not None:
            params["active"] = str(active).lower()

        response = await self._request("GET", "/api/v2/fights", action="list fights", params=params)
        return FightList.model_validate(response.json())

    async def update_fight(self, fight_id: str, fight_data: dict[str, Any]) -> Fight:
        response = await self._request(
            "PATCH",
            f"/api/v2/fights/{fight_id}",
            action="update fight",
            json={"fight": fight_data},
            not_found=f"Fight not found: {fight_id}",
        )
        return Fight.model_validate(response.json())

    async def update_shot_location(self, fight_id: str, shot_id: str, location: str) -> None:
        await self._request(
            "PATCH",
            f"/api/v2/fights/{fight_id}/shots/{shot_id}",
            action="update location",
            json={"shot": {"location": location}},
            not_found="Shot not found",
        )

    # =========================================================================
    # Encounters
    # =========================================================================

    async def get_encounter(self, fight_id: str) -> Encounter:
        response = await self._request(
            "GET",
            f"/api/v2/encounters/{fight_id}",
            action="get encounter",
            not_found=f"Encounter not found: {fight_id}",
        )
        return Encounter.model_validate(response.json())

    async def spend_shots(self, fight_id: str, shot_id: str, shots: int = 3) -> Encounter:
        response = await self._request(
            "PATCH",
            f"/api/v2/encounters/{fight_id}/act",
            action="spend shots",
            json={"shot_id": shot_id, "shots": shots},
            not_found="Encounter or shot not found",
            forbidden="Only gamemaster can modify encounters",
        )
        return Encounter.model_validate(response.json())

    async def apply_combat_action(self, fight_id: str, updates: list[CombatUpdate]) -> Encounter:
        """Submit a batch of slot updates in one request."""
        logger.info(f"Applying {len(updates)} combat update(s) to encounter {fight_id}")
        response = await self._request(
            "POST",
            f"/api/v2/encounters/{fight_id}/apply_combat_action",
            action="apply combat action",
            json={"character_updates": [update.to_payload() for update in updates]},
            not_found="Encounter not found",
            forbidden="Only gamemaster can apply combat actions",
        )
        return Encounter.model_validate(response.json())

    async def update_initiatives(self, fight_id: str, shots: list[InitiativeUpdate]) -> Encounter:
        response = await self._request(
            "PATCH",
            f"/api/v2/encounters/{fight_id}/update_initiatives",
            action="update initiatives",
            json={"shots": [shot.model_dump() for shot in shots]},
            not_found="Encounter not found",
        )
        return Encounter.model_validate(response.json())

    # =========================================================================
    # Dice
    # =========================================================================

    async def roll_swerve(self) -> Swerve:
        response = await self._request("POST", "/api/v2/dice/swerve", action="roll swerve")
        return Swerve.model_validate(response.json())


def get_client(store: ConfigStore | None = None, transport: httpx.AsyncBaseTransport | None = None) -> ChiWarClient:
    """Get a client configured from the local config file.

    Args:
        store: Optional config store, uses the default location if not provided
        transport: Optional httpx transport (used by tests)

    Returns:
        ChiWarClient pointed at the effective API URL with the stored token
    """
    if store is None:
        store = ConfigStore()
    return ChiWarClient(store.api_url, token=store.token, settings=store.settings, transport=transport)
