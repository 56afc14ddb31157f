"""Build combat update batches from engine results.

Wounds live in two places on the server: PCs keep them in the "Wounds"
action value, everyone else in the slot's count field. The helpers here
pick the right field through wound_storage_for so callers never branch on
character type themselves.
"""

from typing import Any

from ..api.schemas import CombatEvent, CombatUpdate
from ..engine.types import AttackResult, Combatant, MultiTargetAttackResult, WoundStorage
from ..engine.wounds import wound_storage_for

ATTACK_EVENT = "attack"
OUT_OF_FIGHT = "out_of_fight"
UP_CHECK_REQUIRED = "up_check_required"


def attack_event_details(attacker: Combatant, target: Combatant, result: AttackResult) -> dict[str, Any]:
    """Structured details attached to an attack event."""
    details: dict[str, Any] = {
        "attacker_id": attacker.id,
        "attacker_name": attacker.name,
        "target_id": target.id,
        "target_name": target.name,
        "swerve": result.swerve.total,
        "attack_total": result.attack_roll,
        "defense": result.defense,
        "outcome": result.outcome,
        "hit": result.hit,
    }
    if result.hit:
        details["smackdown"] = result.smackdown
        details["wounds_dealt"] = result.wounds_dealt
        if result.target_is_mook:
            details["mooks_dropped"] = result.mooks_dropped
    return details


def _hit_summary(result: AttackResult) -> str:
    if result.target_is_mook:
        return f"HIT for {result.mooks_dropped} mooks dropped"
    return f"HIT for {result.wounds_dealt} wounds"


def _wound_fields(target: Combatant, wounds: int) -> dict[str, Any]:
    """Update fields that add wounds to a target."""
    if wound_storage_for(target) is WoundStorage.ACTION_VALUE:
        return {"action_values": {"Wounds": target.wounds + wounds}}
    # The server adds incremental wounds to the slot count.
    return {"wounds": wounds}


def _target_update(
    attacker: Combatant,
    target: Combatant,
    result: AttackResult,
    label: str,
    details: dict[str, Any],
) -> CombatUpdate:
    """Update for a target that was hit."""
    header = f"{attacker.name} attacks {target.name}{label}"

    if result.target_is_mook and result.mooks_dropped:
        return CombatUpdate(
            shot_id=target.shot_id,
            character_id=target.id,
            count=max(0, target.group_size - result.mooks_dropped),
            event=CombatEvent(event_type=ATTACK_EVENT, description=f"{header} - {_hit_summary(result)}", details=details),
        )

    if result.target_is_mook:
        return CombatUpdate(
            shot_id=target.shot_id,
            character_id=target.id,
            event=CombatEvent(event_type=ATTACK_EVENT, description=f"{header} - HIT but 0 mooks dropped", details=details),
        )

    if result.wounds_dealt > 0:
        return CombatUpdate(
            shot_id=target.shot_id,
            character_id=target.id,
            event=CombatEvent(event_type=ATTACK_EVENT, description=f"{header} - {_hit_summary(result)}", details=details),
            **_wound_fields(target, result.wounds_dealt),
        )

    return CombatUpdate(
        shot_id=target.shot_id,
        character_id=target.id,
        event=CombatEvent(
            event_type=ATTACK_EVENT,
            description=f"{header} - HIT but 0 wounds (blocked by toughness)",
            details=details,
        ),
    )


def build_attack_updates(attacker: Combatant, target: Combatant, result: AttackResult) -> list[CombatUpdate]:
    """Turn a single-target attack into the updates to submit.

    A miss is still recorded, on the attacker's slot, so it shows up in the
    fight log.
    """
    details = attack_event_details(attacker, target, result)

    if not result.hit:
        return [
            CombatUpdate(
                shot_id=attacker.shot_id,
                character_id=attacker.id,
                event=CombatEvent(
                    event_type=ATTACK_EVENT,
                    description=f"{attacker.name} attacks {target.name} - MISS",
                    details=details,
                ),
            )
        ]

    return [_target_update(attacker, target, result, "", details)]


def build_multi_target_updates(
    attacker: Combatant,
    targets: list[Combatant],
    result: MultiTargetAttackResult,
) -> list[CombatUpdate]:
    """Turn a multi-target attack into per-target updates.

    Only the first miss is recorded to avoid duplicate log entries.
    """
    updates: list[CombatUpdate] = []
    miss_recorded = False

    for index, (target, target_result) in enumerate(zip(targets, result.results), start=1):
        details = attack_event_details(attacker, target, target_result)
        details["multi_target"] = True
        details["target_count"] = result.target_count
        if target_result.allocated_damage is not None:
            details["allocated_damage"] = target_result.allocated_damage
        label = f" (multi-target {index}/{result.target_count})"

        if target_result.hit:
            updates.append(_target_update(attacker, target, target_result, label, details))
        elif not miss_recorded:
            miss_recorded = True
            updates.append(
                CombatUpdate(
                    shot_id=target.shot_id,
                    character_id=target.id,
                    event=CombatEvent(
                        event_type=ATTACK_EVENT,
                        description=f"{attacker.name} attacks {target.name}{label} - MISS",
                        details=details,
                    ),
                )
            )

    return updates


def build_wound_update(target: Combatant, wounds: int) -> CombatUpdate:
    """Add wounds directly to a target."""
    return CombatUpdate(shot_id=target.shot_id, character_id=target.id, **_wound_fields(target, wounds))


def build_heal_update(target: Combatant, new_wounds: int) -> CombatUpdate:
    """Set a target's wound total to an already-healed absolute value."""
    if wound_storage_for(target) is WoundStorage.ACTION_VALUE:
        return CombatUpdate(shot_id=target.shot_id, character_id=target.id, action_values={"Wounds": new_wounds})
    return CombatUpdate(shot_id=target.shot_id, character_id=target.id, count=new_wounds)


def build_mook_count_update(target: Combatant, new_count: int) -> CombatUpdate:
    return CombatUpdate(shot_id=target.shot_id, character_id=target.id, count=new_count)


def build_out_of_fight_update(target: Combatant) -> CombatUpdate:
    """Mark a character who failed an Up Check as out of the fight."""
    return CombatUpdate(
        shot_id=target.shot_id,
        character_id=target.id,
        add_status=[OUT_OF_FIGHT],
        remove_status=[UP_CHECK_REQUIRED],
    )
