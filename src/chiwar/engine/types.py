"""Type definitions for the combat engine."""

from dataclasses import dataclass, field
from enum import Enum

# Fallbacks used when a combatant's stat is missing from its action values.
DEFAULT_ATTACK_VALUE = 7
DEFAULT_DEFENSE = 13
DEFAULT_TOUGHNESS = 5
DEFAULT_DAMAGE = 7
DEFAULT_SPEED = 5


class CombatantKind(str, Enum):
    """What kind of entity occupies an initiative slot."""

    CHARACTER = "character"
    VEHICLE = "vehicle"


class CharacterKind(str, Enum):
    """Character types as stored in the "Type" action value."""

    PC = "PC"
    NPC = "NPC"
    ALLY = "Ally"
    MOOK = "Mook"
    FEATURED_FOE = "Featured Foe"
    BOSS = "Boss"
    UBER_BOSS = "Uber-Boss"


class WoundStorage(str, Enum):
    """Where the server keeps a combatant's wound total."""

    ACTION_VALUE = "action_value"  # action_values["Wounds"], PCs only
    SLOT_COUNT = "slot_count"  # the slot's generic count field


@dataclass(frozen=True)
class Combatant:
    """Flattened view of a character or vehicle inside one encounter.

    Stats are left as None when absent; the attack calculators substitute
    the module defaults at calculation time.
    """

    kind: CombatantKind
    id: str
    name: str
    shot_id: str
    current_shot: int | None = None
    character_kind: CharacterKind | None = None
    impairments: int = 0
    count: int | None = None
    defense: int | None = None
    toughness: int | None = None
    main_attack: str | None = None
    attack_value: int | None = None
    damage: int | None = None
    speed: int | None = None
    wounds: int = 0
    location: str = ""

    @property
    def is_mook(self) -> bool:
        return self.character_kind == CharacterKind.MOOK

    @property
    def is_pc(self) -> bool:
        return self.character_kind == CharacterKind.PC

    @property
    def group_size(self) -> int:
        """Number of mooks left in this slot (only meaningful for mooks)."""
        return (self.count or 0) if self.is_mook else 0


@dataclass(frozen=True)
class DicePool:
    """One side of a swerve: summed exploding-die rolls."""

    sum: int
    rolls: tuple[int, ...] = ()


@dataclass(frozen=True)
class SwerveResult:
    """A positive pool minus a negative pool, as rolled by the server."""

    positives: DicePool
    negatives: DicePool
    total: int
    boxcars: bool = False

    @classmethod
    def from_total(cls, total: int) -> "SwerveResult":
        """Build a swerve from a value the player rolled at the table."""
        return cls(
            positives=DicePool(sum=max(0, total), rolls=(max(0, total),)),
            negatives=DicePool(sum=max(0, -total), rolls=(max(0, -total),)),
            total=total,
            boxcars=False,
        )


@dataclass(frozen=True)
class AttackResult:
    """Outcome of one attack roll against one target."""

    attacker_id: str
    attacker_name: str
    target_id: str
    target_name: str
    swerve: SwerveResult
    attack_roll: int
    defense: int
    hit: bool
    outcome: int
    damage: int
    smackdown: int
    toughness: int
    target_is_mook: bool
    wounds_dealt: int = 0
    mooks_dropped: int | None = None
    boxcars: bool = False
    allocated_damage: int | None = None


@dataclass(frozen=True)
class MultiTargetAttackResult:
    """One shared attack roll resolved against several targets."""

    attacker_id: str
    attacker_name: str
    swerve: SwerveResult
    attack_roll: int
    target_count: int
    results: tuple[AttackResult, ...] = field(default_factory=tuple)
    damage_allocation: tuple[int, ...] | None = None
    boxcars: bool = False


@dataclass(frozen=True)
class WoundResult:
    """Wound and impairment bookkeeping for a single application of wounds."""

    target: str
    wounds_applied: int
    previous_wounds: int
    new_wounds: int
    previous_impairment: int
    new_impairment: int
    impairment_change: int
