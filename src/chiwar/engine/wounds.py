"""Wound and impairment bookkeeping (Feng Shui 2 thresholds)."""

from .types import Combatant, WoundResult, WoundStorage

# Wound totals at which impairment steps up.
IMPAIRMENT_THRESHOLDS = (25, 30, 35)
DOWN_THRESHOLD = 35


def calculate_impairment(wounds: int) -> int:
    """Calculate impairment level from a wound total.

    - below 25 wounds: 0
    - 25-29 wounds: 1
    - 30-34 wounds: 2
    - 35+ wounds: 3 (character is down)

    Args:
        wounds: Current wound total

    Returns:
        Impairment level (0 to 3)
    """
    return sum(1 for threshold in IMPAIRMENT_THRESHOLDS if wounds >= threshold)


def calculate_wound_result(
    target: Combatant,
    wounds_to_apply: int,
    current_wounds: int = 0,
) -> WoundResult:
    """Calculate the effect of applying wounds to a target.

    New wounds are not clamped; healing goes through calculate_heal.

    Args:
        target: Combatant receiving the wounds
        wounds_to_apply: Wounds being added
        current_wounds: Wound total before this application

    Returns:
        WoundResult with previous/new wounds and impairment change
    """
    new_wounds = current_wounds + wounds_to_apply
    previous_impairment = calculate_impairment(current_wounds)
    new_impairment = calculate_impairment(new_wounds)

    return WoundResult(
        target=target.name,
        wounds_applied=wounds_to_apply,
        previous_wounds=current_wounds,
        new_wounds=new_wounds,
        previous_impairment=previous_impairment,
        new_impairment=new_impairment,
        impairment_change=new_impairment - previous_impairment,
    )


def calculate_heal(current_wounds: int, wounds_to_heal: int) -> int:
    """Return the wound total after healing, floored at 0."""
    return max(0, current_wounds - wounds_to_heal)


def wound_storage_for(combatant: Combatant) -> WoundStorage:
    """Pick where the server stores this combatant's wounds.

    PCs keep wounds in the "Wounds" action value; everyone else uses the
    slot's count field.
    """
    if combatant.is_pc:
        return WoundStorage.ACTION_VALUE
    return WoundStorage.SLOT_COUNT
