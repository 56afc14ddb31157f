"""Wire schemas for the Chi War REST API."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..engine.types import DicePool, SwerveResult


class ApiModel(BaseModel):
    """Base for response models; the server adds fields freely."""

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Auth
# =============================================================================


class User(ApiModel):
    """Authenticated user."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    gamemaster: bool = False

    @property
    def display_name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.email


class CliAuthStart(ApiModel):
    """Device-authorization code issued to the CLI."""

    code: str
    url: str
    expires_in: int = 0


class CliAuthPoll(ApiModel):
    """Result of polling the device-authorization code."""

    status: Literal["pending", "approved", "expired"]
    expires_in: int | None = None
    token: str | None = None
    user: User | None = None
    error: str | None = None


# =============================================================================
# Encounter snapshot
# =============================================================================


class Driver(ApiModel):
    id: str
    name: str


class EncounterCharacter(ApiModel):
    """Character entry inside a shot group."""

    id: str
    name: str
    shot_id: str = Field(description="Initiative slot id, required to submit updates")
    current_shot: int | None = None
    impairments: int | None = 0
    count: int | None = Field(default=None, description="Mook count, or wound total for non-PC characters")
    location: str | None = None
    action_values: dict[str, Any] = Field(default_factory=dict)
    status: list[str] = Field(default_factory=list)


class EncounterVehicle(ApiModel):
    """Vehicle entry inside a shot group."""

    id: str
    name: str
    shot_id: str
    current_shot: int | None = None
    location: str | None = None
    driver: Driver | None = None


class ShotGroup(ApiModel):
    """All combatants acting on the same shot."""

    shot: int | None = Field(default=None, description="Shot number; None while initiative is hidden")
    characters: list[EncounterCharacter] = Field(default_factory=list)
    vehicles: list[EncounterVehicle] = Field(default_factory=list)


class Encounter(ApiModel):
    """Snapshot of a fight grouped by initiative shot."""

    id: str
    name: str
    sequence: int = 0
    started_at: str | None = None
    ended_at: str | None = None
    shots: list[ShotGroup] = Field(default_factory=list)
    character_ids: list[str] = Field(default_factory=list)
    vehicle_ids: list[str] = Field(default_factory=list)


# =============================================================================
# Fights
# =============================================================================


class Fight(ApiModel):
    id: str
    name: str
    sequence: int = 0
    started_at: str | None = None
    ended_at: str | None = None


class PaginationMeta(ApiModel):
    current_page: int = 1
    total_pages: int = 1
    total_count: int = 0
    per_page: int = 25


class FightList(ApiModel):
    fights: list[Fight] = Field(default_factory=list)
    meta: PaginationMeta = Field(default_factory=PaginationMeta)


# =============================================================================
# Dice
# =============================================================================


class DiceRolls(ApiModel):
    sum: int
    rolls: list[int] = Field(default_factory=list)


class Swerve(ApiModel):
    """Swerve as returned by the dice endpoint."""

    positives: DiceRolls
    negatives: DiceRolls
    total: int
    boxcars: bool = False

    def to_swerve(self) -> SwerveResult:
        return SwerveResult(
            positives=DicePool(sum=self.positives.sum, rolls=tuple(self.positives.rolls)),
            negatives=DicePool(sum=self.negatives.sum, rolls=tuple(self.negatives.rolls)),
            total=self.total,
            boxcars=self.boxcars,
        )


# =============================================================================
# Combat updates
# =============================================================================


class CombatEvent(BaseModel):
    """Narrative entry recorded in the fight log."""

    event_type: str = Field(description="Event kind, e.g. 'attack'")
    description: str
    details: dict[str, Any] | None = None


class CombatUpdate(BaseModel):
    """State change for one initiative slot."""

    shot_id: str
    character_id: str | None = None
    wounds: int | None = Field(default=None, description="Incremental wounds for non-PC characters")
    impairments: int | None = None
    count: int | None = None
    location: str | None = None
    action_values: dict[str, Any] | None = Field(default=None, description="Action value patch, e.g. PC Wounds")
    add_status: list[str] | None = None
    remove_status: list[str] | None = None
    event: CombatEvent | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class InitiativeUpdate(BaseModel):
    id: str = Field(description="Slot id")
    shot: int
