"""REST client for the Chi War API."""

from .client import ApiError, ChiWarClient, NotAuthenticatedError, get_client
from .schemas import (
    CliAuthPoll,
    CliAuthStart,
    CombatEvent,
    CombatUpdate,
    Encounter,
    EncounterCharacter,
    EncounterVehicle,
    Fight,
    FightList,
    InitiativeUpdate,
    ShotGroup,
    Swerve,
    User,
)

__all__ = [
    # Client
    "ApiError",
    "ChiWarClient",
    "NotAuthenticatedError",
    "get_client",
    # Schemas
    "CliAuthPoll",
    "CliAuthStart",
    "CombatEvent",
    "CombatUpdate",
    "Encounter",
    "EncounterCharacter",
    "EncounterVehicle",
    "Fight",
    "FightList",
    "InitiativeUpdate",
    "ShotGroup",
    "Swerve",
    "User",
]
