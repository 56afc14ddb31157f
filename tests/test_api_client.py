"""Tests for the REST client, using httpx's mock transport."""

import json

import httpx
import pytest

from chiwar.api.client import (
    SESSION_EXPIRED,
    ApiError,
    ChiWarClient,
    NotAuthenticatedError,
    _setup_request_logger,
    get_client,
)
from chiwar.api.schemas import CombatUpdate, InitiativeUpdate
from chiwar.config import ConfigStore, Settings

BASE_URL = "https://chiwar.test"


def make_client(settings, handler, token="tok"):
    return ChiWarClient(BASE_URL, token=token, settings=settings, transport=httpx.MockTransport(handler))


class TestRequests:
    """Tests for request shape and response parsing."""

    async def test_get_encounter_sends_bearer_token(self, settings, encounter_payload):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=encounter_payload)

        async with make_client(settings, handler) as client:
            encounter = await client.get_encounter("fight-1")

        assert encounter.name == "Dockside Brawl"
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/v2/encounters/fight-1"
        assert seen[0].headers["Authorization"] == "Bearer tok"

    async def test_missing_token_raises_before_request(self, settings):
        def handler(request):
            raise AssertionError("request should not be sent")

        async with make_client(settings, handler, token=None) as client:
            with pytest.raises(NotAuthenticatedError):
                await client.get_encounter("fight-1")

    async def test_auth_start_needs_no_token(self, settings):
        def handler(request):
            assert "Authorization" not in request.headers
            return httpx.Response(200, json={"code": "ABCD", "url": "https://chiwar.test/cli/auth/ABCD"})

        async with make_client(settings, handler, token=None) as client:
            start = await client.start_cli_auth()

        assert start.code == "ABCD"

    async def test_apply_combat_action_body(self, settings, encounter_payload):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=encounter_payload)

        update = CombatUpdate(shot_id="s-raymond", character_id="c-raymond", wounds=3)
        async with make_client(settings, handler) as client:
            await client.apply_combat_action("fight-1", [update])

        assert bodies == [{"character_updates": [{"shot_id": "s-raymond", "character_id": "c-raymond", "wounds": 3}]}]

    async def test_update_initiatives_body(self, settings, encounter_payload):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=encounter_payload)

        async with make_client(settings, handler) as client:
            await client.update_initiatives("fight-1", [InitiativeUpdate(id="s-ray", shot=12)])

        assert bodies == [{"shots": [{"id": "s-ray", "shot": 12}]}]

    async def test_list_fights_params(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"fights": [{"id": "fight-1", "name": "Dockside Brawl"}]})

        async with make_client(settings, handler) as client:
            fights = await client.list_fights(limit=5, active=True)

        assert fights.fights[0].id == "fight-1"
        assert seen[0].url.params["per_page"] == "5"
        assert seen[0].url.params["active"] == "true"

    async def test_roll_swerve(self, settings):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "positives": {"sum": 11, "rolls": [6, 5]},
                    "negatives": {"sum": 3, "rolls": [3]},
                    "total": 8,
                    "boxcars": False,
                },
            )

        async with make_client(settings, handler) as client:
            swerve = (await client.roll_swerve()).to_swerve()

        assert swerve.total == 8
        assert swerve.positives.rolls == (6, 5)


class TestErrors:
    """Tests for error mapping."""

    async def test_401_means_session_expired(self, settings):
        async with make_client(settings, lambda request: httpx.Response(401)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_current_user()

        assert exc_info.value.message == SESSION_EXPIRED
        assert exc_info.value.status_code == 401

    async def test_404_uses_custom_message(self, settings):
        async with make_client(settings, lambda request: httpx.Response(404)) as client:
            with pytest.raises(ApiError, match="Encounter not found: fight-9"):
                await client.get_encounter("fight-9")

    async def test_403_uses_custom_message(self, settings):
        async with make_client(settings, lambda request: httpx.Response(403)) as client:
            with pytest.raises(ApiError, match="Only gamemaster can apply combat actions"):
                await client.apply_combat_action("fight-1", [])

    async def test_validation_errors_are_joined(self, settings):
        def handler(request):
            return httpx.Response(422, json={"errors": {"name": ["can't be blank"], "sequence": "is invalid"}})

        async with make_client(settings, handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.update_fight("fight-1", {"name": ""})

        assert exc_info.value.message == "Failed to update fight: name: can't be blank; sequence: is invalid"

    async def test_server_message(self, settings):
        def handler(request):
            return httpx.Response(500, json={"error": "Database unavailable"})

        async with make_client(settings, handler) as client:
            with pytest.raises(ApiError, match="Database unavailable"):
                await client.roll_swerve()

    async def test_generic_message(self, settings):
        async with make_client(settings, lambda request: httpx.Response(500, text="oops")) as client:
            with pytest.raises(ApiError, match="Failed to roll swerve"):
                await client.roll_swerve()

    async def test_transport_failure(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        async with make_client(settings, handler) as client:
            with pytest.raises(ApiError, match="Failed to get encounter: connection refused") as exc_info:
                await client.get_encounter("fight-1")

        assert exc_info.value.status_code is None

    async def test_expired_auth_code(self, settings):
        async with make_client(settings, lambda request: httpx.Response(410), token=None) as client:
            poll = await client.poll_cli_auth("ABCD")

        assert poll.status == "expired"


class TestRequestLog:
    """Tests for the optional per-session request log."""

    async def test_writes_session_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        settings = Settings(config_dir=tmp_path, request_log_dir=str(log_dir))
        user = {"id": "u-1", "email": "gm@example.com"}

        async with make_client(settings, lambda request: httpx.Response(200, json=user)) as client:
            await client.get_current_user()

        [log_file] = log_dir.glob("session_*.log")
        assert "GET /api/v2/users/current -> 200" in log_file.read_text(encoding="utf-8")

    @pytest.mark.parametrize("rotation_count,kept_old", [(1, 0), (3, 2)])
    def test_rotation_keeps_last_sessions(self, tmp_path, rotation_count, kept_old):
        """Old session files are pruned so the new one makes rotation_count in total."""
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        for day in range(1, 5):
            (log_dir / f"session_2000010{day}_000000.log").write_text("old", encoding="utf-8")
        settings = Settings(
            config_dir=tmp_path,
            request_log_dir=str(log_dir),
            request_log_rotation_count=rotation_count,
        )

        request_logger = _setup_request_logger(settings)
        for handler in request_logger.handlers:
            handler.close()

        files = list(log_dir.glob("session_*.log"))
        assert len(files) == rotation_count
        assert sum(1 for f in files if f.name.startswith("session_2000")) == kept_old

    def test_disabled_without_dir(self, settings):
        client = ChiWarClient(BASE_URL, settings=settings)
        assert client.request_logger is None


class TestGetClient:
    """Tests for building a client from stored config."""

    def test_uses_stored_url_and_token(self, settings):
        store = ConfigStore(settings=settings)
        store.set_api_url("http://localhost:4002")
        store.set_token("secret")

        client = get_client(store)

        assert str(client.http.base_url).rstrip("/") == "http://localhost:4002"
        assert client.token == "secret"
