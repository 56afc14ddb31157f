"""Shared fixtures for engine, service and CLI tests."""

import pytest

from chiwar.api.client import ApiError
from chiwar.api.schemas import DiceRolls, Encounter, Fight, FightList, Swerve
from chiwar.config import ConfigStore, Settings, get_settings
from chiwar.engine.types import CharacterKind, Combatant, CombatantKind


def make_swerve(total: int, boxcars: bool = False) -> Swerve:
    """Server-shaped swerve with the given total."""
    positive = max(0, total)
    negative = max(0, -total)
    return Swerve(
        positives=DiceRolls(sum=positive, rolls=[positive]),
        negatives=DiceRolls(sum=negative, rolls=[negative]),
        total=total,
        boxcars=boxcars,
    )


class FakeClient:
    """In-memory stand-in for ChiWarClient that records every write."""

    def __init__(self, encounter: Encounter, swerves: list[int] | None = None):
        self.encounter = encounter
        self.swerves = list(swerves or [])
        self.fights: list[Fight] = []
        self.applied: list[tuple] = []
        self.fight_updates: list[tuple] = []
        self.initiatives: list[tuple] = []
        self.locations: list[tuple] = []
        self.spent: list[tuple] = []
        self.closed = False

    async def get_encounter(self, fight_id):
        if fight_id != self.encounter.id:
            raise ApiError(f"Encounter not found: {fight_id}", 404)
        return self.encounter

    async def roll_swerve(self):
        return make_swerve(self.swerves.pop(0))

    async def apply_combat_action(self, fight_id, updates):
        self.applied.append((fight_id, updates))
        return self.encounter

    async def update_fight(self, fight_id, fight_data):
        self.fight_updates.append((fight_id, fight_data))
        return Fight(id=fight_id, name=self.encounter.name)

    async def update_initiatives(self, fight_id, shots):
        self.initiatives.append((fight_id, shots))
        return self.encounter

    async def update_shot_location(self, fight_id, shot_id, location):
        self.locations.append((fight_id, shot_id, location))

    async def spend_shots(self, fight_id, shot_id, shots=3):
        self.spent.append((fight_id, shot_id, shots))
        updated = self.encounter.model_copy(deep=True)
        for group in updated.shots:
            for character in group.characters:
                if character.shot_id == shot_id and character.current_shot is not None:
                    character.current_shot -= shots
        return updated

    async def list_fights(self, limit=None, page=None, active=None):
        return FightList(fights=self.fights)

    async def close(self):
        self.closed = True


@pytest.fixture
def encounter_payload():
    """Encounter JSON as returned by GET /api/v2/encounters/:id."""
    return {
        "id": "fight-1",
        "name": "Dockside Brawl",
        "sequence": 1,
        "started_at": "2026-01-01T00:00:00.000Z",
        "ended_at": None,
        "character_ids": ["c-ray", "c-raymond", "c-bob-smith", "c-bob-jones", "c-thugs"],
        "vehicle_ids": ["v-boat"],
        "shots": [
            {
                "shot": 14,
                "characters": [
                    {
                        "id": "c-ray",
                        "name": "Ray",
                        "shot_id": "s-ray",
                        "current_shot": 14,
                        "impairments": 0,
                        "count": 0,
                        "location": "Pier",
                        "action_values": {
                            "Type": "PC",
                            "MainAttack": "Guns",
                            "Guns": 14,
                            "Defense": 14,
                            "Toughness": 7,
                            "Damage": 10,
                            "Speed": 7,
                            "Wounds": 12,
                        },
                    }
                ],
                "vehicles": [
                    {
                        "id": "v-boat",
                        "name": "Junk Boat",
                        "shot_id": "s-boat",
                        "current_shot": 14,
                        "driver": {"id": "c-ray", "name": "Ray"},
                    }
                ],
            },
            {
                "shot": 12,
                "characters": [
                    {
                        "id": "c-raymond",
                        "name": "Raymond",
                        "shot_id": "s-raymond",
                        "current_shot": 12,
                        "impairments": 0,
                        "count": 10,
                        "action_values": {
                            "Type": "Featured Foe",
                            "MainAttack": "Martial Arts",
                            "Martial Arts": "13",
                            "Defense": 13,
                            "Toughness": 6,
                            "Damage": 9,
                            "Speed": 6,
                        },
                    }
                ],
            },
            {
                "shot": 9,
                "characters": [
                    {
                        "id": "c-bob-smith",
                        "name": "Bob Smith",
                        "shot_id": "s-bob-smith",
                        "current_shot": 9,
                        "impairments": 1,
                        "count": 26,
                        "action_values": {
                            "Type": "Boss",
                            "MainAttack": "Guns",
                            "Guns": 15,
                            "Defense": 15,
                            "Toughness": 8,
                            "Damage": 11,
                            "Speed": 8,
                        },
                    },
                    {
                        "id": "c-bob-jones",
                        "name": "Bob Jones",
                        "shot_id": "s-bob-jones",
                        "current_shot": 9,
                        "action_values": {"Type": "Ally"},
                    },
                ],
            },
            {
                "shot": None,
                "characters": [
                    {
                        "id": "c-thugs",
                        "name": "Thugs",
                        "shot_id": "s-thugs",
                        "current_shot": None,
                        "count": 8,
                        "action_values": {
                            "Type": "Mook",
                            "MainAttack": "Guns",
                            "Guns": 8,
                            "Defense": 13,
                            "Toughness": 5,
                            "Damage": 7,
                            "Speed": 5,
                        },
                    }
                ],
            },
        ],
    }


@pytest.fixture
def encounter(encounter_payload):
    return Encounter.model_validate(encounter_payload)


@pytest.fixture
def make_combatant():
    """Factory for combatants with only the stats a test cares about."""

    def _make(name: str = "Fighter", **overrides) -> Combatant:
        combatant_id = overrides.pop("id", f"c-{name.lower().replace(' ', '-')}")
        values = {
            "kind": CombatantKind.CHARACTER,
            "id": combatant_id,
            "name": name,
            "shot_id": f"s-{combatant_id}",
            "character_kind": CharacterKind.NPC,
        }
        values.update(overrides)
        return Combatant(**values)

    return _make


@pytest.fixture
def settings(tmp_path):
    return Settings(config_dir=tmp_path, request_log_dir=None)


@pytest.fixture
def store(settings):
    """Config store in a temp dir with the test encounter selected."""
    config_store = ConfigStore(settings=settings)
    config_store.set_current_encounter_id("fight-1")
    return config_store


@pytest.fixture
def fake_client(encounter):
    return FakeClient(encounter)


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI's settings at a temp config dir."""
    monkeypatch.setenv("CHIWAR_CONFIG_DIR", str(tmp_path))
    monkeypatch.delenv("CHIWAR_API_URL", raising=False)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
