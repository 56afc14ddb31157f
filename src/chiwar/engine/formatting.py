"""Human-readable rendering of combat results.

Every formatter returns a list of lines; printing is left to the caller.
"""

from .types import AttackResult, CharacterKind, MultiTargetAttackResult, SwerveResult, WoundResult
from .wounds import DOWN_THRESHOLD

BOXCARS_LINE = "⚠️  BOXCARS! Something dramatic happens!"


def signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def format_shot(shot: int | None) -> str:
    """Format a shot value; None means initiative is still hidden."""
    if shot is None:
        return "Hidden"
    return f"Shot {shot}"


def format_type(character_kind: CharacterKind | str | None) -> str:
    if not character_kind:
        return ""
    value = character_kind.value if isinstance(character_kind, CharacterKind) else character_kind
    return f"({value})"


def format_swerve(swerve: SwerveResult) -> str:
    positives = ", ".join(str(roll) for roll in swerve.positives.rolls)
    negatives = ", ".join(str(roll) for roll in swerve.negatives.rolls)
    return f"Swerve: {signed(swerve.total)} (positive: {positives}, negative: {negatives})"


def _damage_lines(result: AttackResult, indent: str = "") -> list[str]:
    lines = [f"{indent}Outcome: {result.outcome}"]

    if result.allocated_damage is not None:
        lines.append(f"{indent}Smackdown: {result.smackdown} (allocated)")
    else:
        lines.append(f"{indent}Smackdown: {result.outcome} + {result.damage} damage = {result.smackdown}")

    if result.target_is_mook and result.mooks_dropped is not None:
        lines.append(f"{indent}Mooks dropped: {result.mooks_dropped}")
    else:
        lines.append(
            f"{indent}Wounds: {result.smackdown} - {result.toughness} toughness = {result.wounds_dealt}"
        )
    return lines


def format_attack_result(result: AttackResult) -> list[str]:
    """Format a single-target attack for display."""
    lines = [
        f"{result.attacker_name} attacks {result.target_name}",
        format_swerve(result.swerve),
        f"Attack: {result.attack_roll} vs Defense {result.defense}",
    ]

    if result.boxcars:
        lines.append(BOXCARS_LINE)

    if not result.hit:
        lines.append("Result: MISS")
        return lines

    lines.extend(_damage_lines(result))
    return lines


def format_multi_target_attack_result(result: MultiTargetAttackResult) -> list[str]:
    """Format a multi-target attack: shared roll first, then one block per target."""
    lines = [
        f"{result.attacker_name} attacks {result.target_count} targets",
        format_swerve(result.swerve),
        f"Attack: {result.attack_roll} (shared by all targets)",
    ]

    if result.boxcars:
        lines.append(BOXCARS_LINE)

    if result.damage_allocation is not None:
        allocation = ", ".join(str(share) for share in result.damage_allocation)
        lines.append(f"Damage allocation: {allocation}")

    for index, target_result in enumerate(result.results, start=1):
        status = "HIT" if target_result.hit else "MISS"
        lines.append(
            f"[{index}/{result.target_count}] {target_result.target_name}: "
            f"{result.attack_roll} vs Defense {target_result.defense} - {status}"
        )
        if target_result.hit:
            lines.extend(_damage_lines(target_result, indent="  "))

    return lines


def format_wound_result(result: WoundResult) -> list[str]:
    """Format a wound application, with warnings at the 25/30/35 thresholds."""
    lines = [f"{result.target}: {result.previous_wounds} → {result.new_wounds} wounds"]

    if result.impairment_change > 0:
        lines.append(f"Impairment increased to -{result.new_impairment}")

    if result.new_wounds >= DOWN_THRESHOLD:
        lines.append(f"⚠️  CHARACTER DOWN! ({DOWN_THRESHOLD}+ wounds)")
    elif result.new_wounds >= 30:
        lines.append("⚠️  Critical condition (30+ wounds, -2 impairment)")
    elif result.new_wounds >= 25:
        lines.append("⚠️  Wounded badly (25+ wounds, -1 impairment)")

    return lines
