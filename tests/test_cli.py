"""Tests for the typer CLI wiring."""

import json

import pytest
from typer.testing import CliRunner

from chiwar.cli import utils
from chiwar.cli.app import app
from chiwar.config import ConfigStore

runner = CliRunner()


@pytest.fixture
def cli_client(cli_env, fake_client, monkeypatch):
    """Route CLI commands to the in-memory client."""
    monkeypatch.setattr(utils, "get_client", lambda store=None: fake_client)
    return fake_client


@pytest.fixture
def with_encounter(cli_env):
    ConfigStore().set_current_encounter_id("fight-1")


class TestConfigCommands:
    """Tests for config show/set/local/production."""

    def test_set_and_show(self, cli_env):
        result = runner.invoke(app, ["config", "set", "encounter", "fight-1"])
        assert result.exit_code == 0
        assert "Current encounter set to: fight-1" in result.output

        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Current Encounter: fight-1" in result.output
        assert "Token: (not set)" in result.output

    def test_unknown_key(self, cli_env):
        result = runner.invoke(app, ["config", "set", "colour", "blue"])
        assert result.exit_code == 1
        assert "Unknown config key: colour" in result.output

    def test_local_and_production(self, cli_env):
        runner.invoke(app, ["config", "local"])
        assert ConfigStore().api_url == "http://localhost:4002"

        runner.invoke(app, ["config", "production"])
        assert ConfigStore().api_url == "https://shot-elixir.fly.dev"


class TestLogout:
    """Tests for logout."""

    def test_logout_when_logged_in(self, cli_env):
        ConfigStore().set_token("secret")
        result = runner.invoke(app, ["logout"])
        assert result.exit_code == 0
        assert "Logged out successfully." in result.output
        assert ConfigStore().token is None

    def test_logout_when_not_logged_in(self, cli_env):
        result = runner.invoke(app, ["logout"])
        assert result.exit_code == 0
        assert "You are not logged in." in result.output


class TestEncounterCommands:
    """Tests for encounter commands end to end."""

    def test_no_encounter_exits_1(self, cli_client):
        result = runner.invoke(app, ["encounter", "list"])
        assert result.exit_code == 1
        assert "No encounter set" in result.output

    def test_attack(self, cli_client, with_encounter):
        result = runner.invoke(app, ["encounter", "attack", "Raymond", "-t", "Ray", "-r", "3"])
        assert result.exit_code == 0
        assert "Attack: 16 vs Defense 14" in result.output
        assert "Combat action applied" in result.output
        assert len(cli_client.applied) == 1
        assert cli_client.closed

    def test_multiattack_repeated_targets(self, cli_client, with_encounter):
        result = runner.invoke(
            app,
            ["encounter", "multiattack", "Ray", "-t", "Raymond", "-t", "Bob Smith", "-r", "1", "-d", "9,3"],
        )
        assert result.exit_code == 0
        assert "Damage allocation: 9, 3" in result.output

    def test_ambiguous_name_shows_candidates(self, cli_client, with_encounter):
        result = runner.invoke(app, ["encounter", "wound", "Bob", "3"])
        assert result.exit_code == 1
        assert 'Ambiguous name "Bob"' in result.output
        assert "Bob Jones" in result.output

    def test_list_json(self, cli_client, with_encounter):
        result = runner.invoke(app, ["encounter", "list", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [c["name"] for c in data][:2] == ["Ray", "Junk Boat"]
        assert data[0]["character_kind"] == "PC"

    def test_api_error_exits_1(self, cli_client):
        result = runner.invoke(app, ["encounter", "set", "fight-404"])
        assert result.exit_code == 1
        assert "Encounter not found: fight-404" in result.output
