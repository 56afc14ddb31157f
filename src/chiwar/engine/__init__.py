"""Combat engine - combatant resolution, attack math, wounds and result formatting."""

from .attacks import calculate_attack, calculate_multi_target_attack
from .combatants import attack_value, extract_combatants, find_combatant
from .formatting import format_attack_result, format_multi_target_attack_result, format_wound_result
from .types import (
    AttackResult,
    CharacterKind,
    Combatant,
    CombatantKind,
    DicePool,
    MultiTargetAttackResult,
    SwerveResult,
    WoundResult,
    WoundStorage,
)
from .wounds import calculate_heal, calculate_impairment, calculate_wound_result, wound_storage_for

__all__ = [
    # Types
    "AttackResult",
    "CharacterKind",
    "Combatant",
    "CombatantKind",
    "DicePool",
    "MultiTargetAttackResult",
    "SwerveResult",
    "WoundResult",
    "WoundStorage",
    # Combatants
    "attack_value",
    "extract_combatants",
    "find_combatant",
    # Attacks
    "calculate_attack",
    "calculate_multi_target_attack",
    # Wounds
    "calculate_heal",
    "calculate_impairment",
    "calculate_wound_result",
    "wound_storage_for",
    # Formatting
    "format_attack_result",
    "format_multi_target_attack_result",
    "format_wound_result",
]
