"""Feng Shui 2 attack resolution.

Combat flow:
1. Attack roll = Swerve + Attack Value - Impairments
2. Compare to the target's Defense (ties hit)
3. If hit: Outcome = Attack Roll - Defense
4. Smackdown = Outcome + Damage
5. Non-mooks: Wounds = Smackdown - Toughness (minimum 0)
6. Mooks: each point of Smackdown drops one mook
"""

from collections.abc import Sequence

from .types import (
    DEFAULT_ATTACK_VALUE,
    DEFAULT_DAMAGE,
    DEFAULT_DEFENSE,
    DEFAULT_TOUGHNESS,
    AttackResult,
    Combatant,
    MultiTargetAttackResult,
    SwerveResult,
)


def _stat(value: int | None, default: int) -> int:
    return default if value is None else value


def roll_attack(attacker: Combatant, swerve: SwerveResult) -> int:
    """Attack roll for an attacker: swerve plus impaired attack value."""
    effective_attack = _stat(attacker.attack_value, DEFAULT_ATTACK_VALUE) - attacker.impairments
    return swerve.total + effective_attack


def _resolve_against(
    attacker: Combatant,
    target: Combatant,
    swerve: SwerveResult,
    attack_roll: int,
    target_count: int | None = None,
    allocated_damage: int | None = None,
) -> AttackResult:
    """Resolve an already-rolled attack against one target."""
    damage = _stat(attacker.damage, DEFAULT_DAMAGE)
    defense = _stat(target.defense, DEFAULT_DEFENSE)
    toughness = _stat(target.toughness, DEFAULT_TOUGHNESS)

    hit = attack_roll >= defense
    outcome = attack_roll - defense if hit else 0
    smackdown = 0
    wounds_dealt = 0
    mooks_dropped: int | None = None

    if hit:
        smackdown = allocated_damage if allocated_damage is not None else outcome + damage
        if target.is_mook:
            if target_count is not None:
                max_mooks = target_count
            else:
                # An unknown group size counts as one mook.
                max_mooks = target.count if target.count is not None else 1
            mooks_dropped = max(0, min(smackdown, max_mooks))
        else:
            wounds_dealt = max(0, smackdown - toughness)

    return AttackResult(
        attacker_id=attacker.id,
        attacker_name=attacker.name,
        target_id=target.id,
        target_name=target.name,
        swerve=swerve,
        attack_roll=attack_roll,
        defense=defense,
        hit=hit,
        outcome=outcome,
        damage=damage,
        smackdown=smackdown,
        toughness=toughness,
        target_is_mook=target.is_mook,
        wounds_dealt=wounds_dealt,
        mooks_dropped=mooks_dropped,
        boxcars=swerve.boxcars,
        allocated_damage=allocated_damage,
    )


def calculate_attack(
    attacker: Combatant,
    target: Combatant,
    swerve: SwerveResult,
    target_count: int | None = None,
) -> AttackResult:
    """Calculate an attack result given attacker, target and swerve.

    Args:
        attacker: Attacking combatant
        target: Defending combatant
        swerve: Roll supplied by the caller
        target_count: How many mooks of the group are targeted; defaults to
            the group's current size

    Returns:
        AttackResult with hit/miss, smackdown and wounds or mooks dropped
    """
    return _resolve_against(attacker, target, swerve, roll_attack(attacker, swerve), target_count=target_count)


def calculate_multi_target_attack(
    attacker: Combatant,
    targets: Sequence[Combatant],
    swerve: SwerveResult,
    damage_allocation: Sequence[int] | None = None,
) -> MultiTargetAttackResult:
    """Resolve one attack roll against several targets.

    The attacker rolls once. Each target is checked against its own
    Defense. Without an allocation every hit target takes its own full
    smackdown; with one, each hit target's smackdown is its share as given
    (the shares are not checked against any total).

    Args:
        attacker: Attacking combatant
        targets: Targets in the order given by the user
        swerve: Roll supplied by the caller
        damage_allocation: Optional smackdown per target, same length as targets

    Returns:
        MultiTargetAttackResult with one AttackResult per target

    Raises:
        ValueError: If the allocation length differs from the target count
    """
    if damage_allocation is not None and len(damage_allocation) != len(targets):
        raise ValueError(
            f"Damage allocation count ({len(damage_allocation)}) must match target count ({len(targets)})"
        )

    attack_roll = roll_attack(attacker, swerve)
    results = tuple(
        _resolve_against(
            attacker,
            target,
            swerve,
            attack_roll,
            allocated_damage=damage_allocation[index] if damage_allocation is not None else None,
        )
        for index, target in enumerate(targets)
    )

    return MultiTargetAttackResult(
        attacker_id=attacker.id,
        attacker_name=attacker.name,
        swerve=swerve,
        attack_roll=attack_roll,
        target_count=len(targets),
        results=results,
        damage_allocation=tuple(damage_allocation) if damage_allocation is not None else None,
        boxcars=swerve.boxcars,
    )
