"""Combatant extraction and fuzzy name resolution."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .types import CharacterKind, Combatant, CombatantKind

if TYPE_CHECKING:
    from ..api.schemas import Encounter, EncounterCharacter


def to_int(value: Any) -> int | None:
    """Coerce an action value to int, accepting numeric strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def attack_value(action_values: Mapping[str, Any], attack_name: str | None) -> int | None:
    """Look up the value of a named attack skill.

    The attack name is itself data (``action_values["MainAttack"]``), so the
    value is found by indirection.

    Args:
        action_values: Raw action-value map of a character
        attack_name: Name of the attack skill, e.g. "Guns"

    Returns:
        The skill value, or None when the name or value is missing
    """
    if not attack_name:
        return None
    return to_int(action_values.get(attack_name))


def parse_character_kind(value: Any) -> CharacterKind | None:
    try:
        return CharacterKind(value)
    except ValueError:
        return None


def _character_wounds(character: EncounterCharacter, kind: CharacterKind | None) -> int:
    if kind == CharacterKind.PC:
        return to_int(character.action_values.get("Wounds")) or 0
    if kind == CharacterKind.MOOK:
        return 0
    return character.count or 0


def extract_combatants(encounter: Encounter) -> list[Combatant]:
    """Flatten an encounter's shot groups into an ordered list of combatants.

    Characters of a shot group come before its vehicles. Missing stats are
    kept as None; defaults are applied by the attack calculators.
    """
    combatants: list[Combatant] = []

    for group in encounter.shots:
        for character in group.characters:
            values = character.action_values or {}
            main_attack = values.get("MainAttack")
            if not isinstance(main_attack, str):
                main_attack = None
            kind = parse_character_kind(values.get("Type"))

            combatants.append(
                Combatant(
                    kind=CombatantKind.CHARACTER,
                    id=character.id,
                    name=character.name,
                    shot_id=character.shot_id,
                    current_shot=character.current_shot,
                    character_kind=kind,
                    impairments=character.impairments or 0,
                    count=character.count,
                    defense=to_int(values.get("Defense")),
                    toughness=to_int(values.get("Toughness")),
                    main_attack=main_attack,
                    attack_value=attack_value(values, main_attack),
                    damage=to_int(values.get("Damage")),
                    speed=to_int(values.get("Speed")),
                    wounds=_character_wounds(character, kind),
                    location=character.location or "",
                )
            )

        for vehicle in group.vehicles:
            combatants.append(
                Combatant(
                    kind=CombatantKind.VEHICLE,
                    id=vehicle.id,
                    name=vehicle.name,
                    shot_id=vehicle.shot_id,
                    current_shot=vehicle.current_shot,
                    impairments=0,
                    location=vehicle.location or "",
                )
            )

    return combatants


def _pick(matches: list[Combatant]) -> Combatant | list[Combatant] | None:
    if len(matches) == 1:
        return matches[0]
    if matches:
        return matches
    return None


def find_combatant(query: str, combatants: list[Combatant]) -> Combatant | list[Combatant] | None:
    """Resolve free-text input to a combatant of the current encounter.

    Tiers are tried in order, each only when the previous one matched
    nothing: exact name, name prefix, substring, word prefix. A tier that
    matches several combatants returns all of them instead of falling
    through.

    Args:
        query: Name typed by the user
        combatants: Roster from extract_combatants

    Returns:
        The single match, a list of two or more ambiguous candidates, or
        None when nothing matched
    """
    q = query.strip().lower()
    names = [(combatant, combatant.name.strip().lower()) for combatant in combatants]

    for combatant, name in names:
        if name == q:
            return combatant

    tiers: list[Callable[[str], bool]] = [
        lambda name: name.startswith(q),
        lambda name: q in name,
        lambda name: any(word.startswith(q) for word in name.split()),
    ]
    for matches_tier in tiers:
        result = _pick([combatant for combatant, name in names if matches_tier(name)])
        if result is not None:
            return result

    return None
