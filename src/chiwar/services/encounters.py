"""Encounter service - runs encounter commands against the API."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..api.client import ApiError, ChiWarClient
from ..api.schemas import Encounter, InitiativeUpdate
from ..config import ConfigStore
from ..engine.attacks import calculate_attack, calculate_multi_target_attack
from ..engine.combatants import extract_combatants, find_combatant
from ..engine.formatting import (
    format_attack_result,
    format_multi_target_attack_result,
    format_shot,
    format_swerve,
    format_type,
    format_wound_result,
    signed,
)
from ..engine.types import DEFAULT_SPEED, Combatant, CombatantKind, SwerveResult
from ..engine.wounds import calculate_heal, calculate_wound_result
from .updates import (
    build_attack_updates,
    build_heal_update,
    build_mook_count_update,
    build_multi_target_updates,
    build_out_of_fight_update,
    build_wound_update,
)

logger = logging.getLogger(__name__)

NO_ENCOUNTER = "No encounter set. Use 'encounter set <fight-id>' first."


class CommandError(Exception):
    """User-facing failure of a command, with optional hint lines."""

    def __init__(self, message: str, hints: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hints = hints or []


class LineKind(str, Enum):
    """How a line of command output should be presented."""

    TEXT = "text"
    SUCCESS = "success"
    INFO = "info"
    WARN = "warn"


@dataclass
class CommandResult:
    """Output of a command: ordered lines plus optional raw data for --json."""

    lines: list[tuple[LineKind, str]] = field(default_factory=list)
    data: Any = None

    def text(self, *lines: str) -> None:
        self.lines.extend((LineKind.TEXT, line) for line in lines)

    def success(self, line: str) -> None:
        self.lines.append((LineKind.SUCCESS, line))

    def info(self, line: str) -> None:
        self.lines.append((LineKind.INFO, line))

    def warn(self, line: str) -> None:
        self.lines.append((LineKind.WARN, line))


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _roster_hint(combatants: list[Combatant]) -> list[str]:
    return ["", "Combatants in this fight:"] + [f"  {c.name}" for c in combatants]


def parse_damage_allocation(value: str, target_count: int) -> list[int]:
    """Parse a comma-separated damage allocation such as "5,3".

    Raises:
        CommandError: If a share is not a number or the count is wrong
    """
    try:
        shares = [int(part.strip()) for part in value.split(",")]
    except ValueError:
        raise CommandError("Invalid damage allocation. Must be comma-separated numbers.") from None
    if len(shares) != target_count:
        raise CommandError(f"Damage allocation count ({len(shares)}) must match target count ({target_count}).")
    return shares


def split_target_names(values: list[str]) -> list[str]:
    """Flatten repeated and comma-separated target options into names."""
    return [name.strip() for value in values for name in value.split(",") if name.strip()]


def format_encounter_status(encounter: Encounter) -> list[str]:
    """Render an encounter grouped by shot, with wounds read from the right storage."""
    lines = [f"=== {encounter.name} ===", f"Sequence: {encounter.sequence}"]

    if encounter.started_at and not encounter.ended_at:
        lines.append("Status: In Progress")
    elif encounter.ended_at:
        lines.append("Status: Ended")
    else:
        lines.append("Status: Not Started")
    lines.append("")

    combatants = {(c.kind, c.id): c for c in extract_combatants(encounter)}

    for group in encounter.shots:
        lines.append(f"{format_shot(group.shot)}:")

        for character in group.characters:
            combatant = combatants[(CombatantKind.CHARACTER, character.id)]
            status_line = f"  {combatant.name.upper()} {format_type(combatant.character_kind)}".rstrip()

            if combatant.is_mook:
                if combatant.group_size > 0:
                    status_line += f" x{combatant.group_size}"
            else:
                stats = [f"Wounds: {combatant.wounds}"]
                if combatant.impairments > 0:
                    stats.append(f"Imp: {combatant.impairments}")
                status_line += f" - {', '.join(stats)}"
            lines.append(status_line)

            combat_stats = []
            if combatant.main_attack and combatant.attack_value:
                combat_stats.append(f"{combatant.main_attack} {combatant.attack_value}")
            if combatant.defense:
                combat_stats.append(f"Defense {combatant.defense}")
            if combat_stats:
                lines.append(f"    {', '.join(combat_stats)}")

        for vehicle in group.vehicles:
            lines.append(f"  {vehicle.name} (Vehicle)")
            if vehicle.driver:
                lines.append(f"    Driver: {vehicle.driver.name}")

        lines.append("")

    return lines


class EncounterService:
    """Service for encounter (combat) commands."""

    def __init__(self, client: ChiWarClient, store: ConfigStore) -> None:
        self.client = client
        self.store = store

    # =========================================================================
    # Helpers
    # =========================================================================

    def _encounter_id(self) -> str:
        encounter_id = self.store.current_encounter_id
        if not encounter_id:
            raise CommandError(NO_ENCOUNTER)
        return encounter_id

    async def _load(self) -> tuple[str, Encounter, list[Combatant]]:
        encounter_id = self._encounter_id()
        encounter = await self.client.get_encounter(encounter_id)
        return encounter_id, encounter, extract_combatants(encounter)

    @staticmethod
    def resolve(query: str, combatants: list[Combatant], role: str = "name") -> Combatant:
        """Resolve a name or raise a CommandError listing candidates or the roster.

        Args:
            query: Name typed by the user
            combatants: Encounter roster
            role: Word used in the ambiguity message ("attacker", "target", "name")
        """
        match = find_combatant(query, combatants)
        if match is None:
            raise CommandError(f'No combatant found matching "{query}"', _roster_hint(combatants))
        if isinstance(match, list):
            raise CommandError(
                f'Ambiguous {role} "{query}". Did you mean:',
                [f"  {c.name}" for c in match],
            )
        return match

    async def _swerve(self, roll: int | None) -> SwerveResult:
        if roll is not None:
            return SwerveResult.from_total(roll)
        return (await self.client.roll_swerve()).to_swerve()

    @staticmethod
    def _require_mooks(combatant: Combatant) -> None:
        if not combatant.is_mook:
            raise CommandError(f"{combatant.name} is not a mook group. Use 'wound' for named characters.")

    @staticmethod
    def _reject_mooks(combatant: Combatant) -> None:
        if combatant.is_mook:
            raise CommandError(f"{combatant.name} is a mook group. Use 'drop' or 'mooks' to change its count.")

    # =========================================================================
    # Context
    # =========================================================================

    async def set_encounter(self, fight_id: str) -> CommandResult:
        encounter = await self.client.get_encounter(fight_id)
        self.store.set_current_encounter_id(fight_id)

        result = CommandResult(data=encounter)
        result.success(f"Current encounter set to: {encounter.name}")
        result.info(f"Fight ID: {fight_id}")
        result.info(
            f"Combatants: {len(encounter.character_ids)} characters, {len(encounter.vehicle_ids)} vehicles"
        )
        return result

    async def status(self, fight_id: str | None = None) -> CommandResult:
        encounter_id = fight_id or self.store.current_encounter_id
        if not encounter_id:
            hints: list[str] = []
            try:
                fights = await self.client.list_fights(limit=5, active=True)
            except ApiError as e:
                logger.debug(f"Could not list fights for hint: {e}")
            else:
                if fights.fights:
                    hints = ["", "Available fights:"] + [f"  {f.id} - {f.name}" for f in fights.fights]
            raise CommandError(
                "No encounter specified. Use 'encounter set <fight-id>' first or provide a fight ID.",
                hints,
            )

        encounter = await self.client.get_encounter(encounter_id)
        result = CommandResult(data=encounter)
        result.text("", *format_encounter_status(encounter))
        return result

    async def list_combatants(self) -> CommandResult:
        _, encounter, combatants = await self._load()
        result = CommandResult(data=combatants)
        result.text("", f"Combatants in {encounter.name}:", "")
        for c in combatants:
            line = f"  {c.name} {format_type(c.character_kind)} - {format_shot(c.current_shot)}"
            if c.count:
                line += f" x{c.count}"
            result.text(line)
        return result

    # =========================================================================
    # Dice
    # =========================================================================

    async def roll(self, description: str | None = None) -> CommandResult:
        swerve = await self.client.roll_swerve()
        result = CommandResult(data=swerve)
        result.text("")
        if description:
            result.text(f"Rolling for: {description}")
        result.text(
            f"Positive: {swerve.positives.sum} ({', '.join(map(str, swerve.positives.rolls))})",
            f"Negative: {swerve.negatives.sum} ({', '.join(map(str, swerve.negatives.rolls))})",
            f"Swerve: {signed(swerve.total)}",
        )
        if swerve.boxcars:
            result.warn("BOXCARS! Something dramatic happens!")
        return result

    async def boost(self, name: str, fortune: int = 1) -> CommandResult:
        """Roll the Fortune die for a boost; the positive pool is the bonus."""
        _, _, combatants = await self._load()
        combatant = self.resolve(name, combatants)
        swerve = (await self.client.roll_swerve()).to_swerve()

        result = CommandResult()
        result.text(
            "",
            f"{combatant.name} spends {fortune} Fortune to boost",
            f"Fortune die: +{swerve.positives.sum} ({', '.join(map(str, swerve.positives.rolls))})",
        )
        result.info("Add this bonus to the action result")
        return result

    async def up_check(self, name: str) -> CommandResult:
        """Roll an Up Check; failing marks the character out of the fight."""
        encounter_id, _, combatants = await self._load()
        combatant = self.resolve(name, combatants)
        swerve = (await self.client.roll_swerve()).to_swerve()

        result = CommandResult()
        result.text("", f"{combatant.name} makes an Up Check", format_swerve(swerve))

        if swerve.total >= combatant.impairments:
            result.success(f"SUCCESS! {combatant.name} stays conscious.")
        else:
            result.warn(f"FAILED! {combatant.name} goes down.")
            await self.client.apply_combat_action(encounter_id, [build_out_of_fight_update(combatant)])
            result.info("Character marked as out of fight")

        if swerve.boxcars:
            result.warn("BOXCARS! Something dramatic happens!")
        return result

    # =========================================================================
    # Attacks
    # =========================================================================

    async def attack(
        self,
        attacker_name: str,
        target_name: str,
        roll: int | None = None,
        count: int | None = 1,
    ) -> CommandResult:
        encounter_id, _, combatants = await self._load()
        attacker = self.resolve(attacker_name, combatants, "attacker")
        target = self.resolve(target_name, combatants, "target")
        swerve = await self._swerve(roll)

        attack = calculate_attack(attacker, target, swerve, target_count=count)
        updates = build_attack_updates(attacker, target, attack)

        result = CommandResult(data=attack)
        result.text("", *format_attack_result(attack))

        if attack.hit and attack.target_is_mook and attack.mooks_dropped:
            remaining = max(0, target.group_size - attack.mooks_dropped)
            result.text("", f"{target.name}: {target.group_size} → {remaining} mooks remaining")
        elif attack.hit and attack.wounds_dealt > 0:
            wound_result = calculate_wound_result(target, attack.wounds_dealt, target.wounds)
            result.text("", *format_wound_result(wound_result))

        logger.info(f"Attack {attacker.name} -> {target.name}: roll {attack.attack_roll}, hit={attack.hit}")
        await self.client.apply_combat_action(encounter_id, updates)
        result.success("Combat action applied")
        return result

    async def multiattack(
        self,
        attacker_name: str,
        target_names: list[str],
        roll: int | None = None,
        damage: str | None = None,
    ) -> CommandResult:
        names = split_target_names(target_names)
        if len(names) < 2:
            raise CommandError("Multi-target attack requires at least 2 targets. Use 'attack' for single targets.")

        encounter_id, _, combatants = await self._load()
        attacker = self.resolve(attacker_name, combatants, "attacker")
        targets = [self.resolve(name, combatants, "target") for name in names]
        swerve = await self._swerve(roll)
        allocation = parse_damage_allocation(damage, len(targets)) if damage else None

        attack = calculate_multi_target_attack(attacker, targets, swerve, allocation)
        updates = build_multi_target_updates(attacker, targets, attack)

        result = CommandResult(data=attack)
        result.text("", *format_multi_target_attack_result(attack))

        if updates:
            await self.client.apply_combat_action(encounter_id, updates)
            result.success("Multi-target combat action applied")
        return result

    # =========================================================================
    # Wounds and mooks
    # =========================================================================

    async def wound(self, name: str, wounds: int) -> CommandResult:
        if wounds < 1:
            raise CommandError("Invalid wound count. Must be a positive number.")

        encounter_id, _, combatants = await self._load()
        target = self.resolve(name, combatants)
        self._reject_mooks(target)

        await self.client.apply_combat_action(encounter_id, [build_wound_update(target, wounds)])

        result = CommandResult()
        result.text("", *format_wound_result(calculate_wound_result(target, wounds, target.wounds)))
        result.success("Wounds applied")
        return result

    async def heal(self, name: str, wounds: int) -> CommandResult:
        if wounds < 1:
            raise CommandError("Invalid wound count. Must be a positive number.")

        encounter_id, _, combatants = await self._load()
        target = self.resolve(name, combatants)
        self._reject_mooks(target)
        new_wounds = calculate_heal(target.wounds, wounds)

        await self.client.apply_combat_action(encounter_id, [build_heal_update(target, new_wounds)])

        result = CommandResult()
        result.text("")
        result.success(f"{target.name}: {target.wounds} → {new_wounds} wounds ({wounds} healed)")
        return result

    async def mooks(self, name: str, change: int) -> CommandResult:
        """Add to (positive) or remove from (negative) a mook group."""
        encounter_id, _, combatants = await self._load()
        target = self.resolve(name, combatants)
        self._require_mooks(target)
        new_count = max(0, target.group_size + change)

        await self.client.apply_combat_action(encounter_id, [build_mook_count_update(target, new_count)])

        result = CommandResult()
        if change < 0:
            result.success(f"{target.name}: {target.group_size} → {new_count} mooks ({abs(change)} dropped)")
        else:
            result.success(f"{target.name}: {target.group_size} → {new_count} mooks ({change} added)")
        if new_count == 0:
            result.warn("All mooks eliminated!")
        return result

    async def drop(self, name: str, count: int) -> CommandResult:
        if count < 1:
            raise CommandError("Invalid count. Must be a positive number.")

        encounter_id, _, combatants = await self._load()
        target = self.resolve(name, combatants)
        self._require_mooks(target)
        new_count = max(0, target.group_size - count)

        await self.client.apply_combat_action(encounter_id, [build_mook_count_update(target, new_count)])

        result = CommandResult()
        result.success(f"{target.name}: {target.group_size} → {new_count} mooks ({count} dropped)")
        if new_count == 0:
            result.warn("All mooks eliminated!")
        return result

    # =========================================================================
    # Initiative and fight lifecycle
    # =========================================================================

    async def spend(self, name: str, shots: int) -> CommandResult:
        if shots < 1:
            raise CommandError("Invalid shot count. Must be a positive number.")

        encounter_id, _, combatants = await self._load()
        combatant = self.resolve(name, combatants)

        updated = await self.client.spend_shots(encounter_id, combatant.shot_id, shots)
        new_shot = next(
            (c.current_shot for c in extract_combatants(updated) if c.id == combatant.id),
            None,
        )

        result = CommandResult()
        result.success(f"{combatant.name}: {format_shot(combatant.current_shot)} → {format_shot(new_shot)}")
        return result

    async def start(self) -> CommandResult:
        encounter_id = self._encounter_id()
        encounter = await self.client.get_encounter(encounter_id)

        result = CommandResult()
        if encounter.sequence > 0:
            result.warn(f"Fight already started at sequence {encounter.sequence}")
            return result

        await self.client.update_fight(encounter_id, {"sequence": 1, "started_at": _utc_now()})
        result.success(f'Fight "{encounter.name}" started!')
        result.info("Sequence: 1")
        result.info("Use 'encounter initiative' to roll initiative for all combatants.")
        return result

    async def end(self) -> CommandResult:
        encounter_id = self._encounter_id()
        encounter = await self.client.get_encounter(encounter_id)

        result = CommandResult()
        if encounter.ended_at:
            result.warn(f'Fight "{encounter.name}" already ended.')
            return result
        if not encounter.started_at:
            result.warn(f'Fight "{encounter.name}" was never started.')

        await self.client.update_fight(encounter_id, {"ended_at": _utc_now()})
        result.success(f'Fight "{encounter.name}" ended!')
        result.info(f"Sequence: {encounter.sequence}")
        return result

    async def initiative(self) -> CommandResult:
        """Roll Speed + swerve for every combatant and submit the new shots."""
        encounter_id, encounter, combatants = await self._load()
        result = CommandResult()

        if encounter.sequence == 0:
            result.info("Starting fight first...")
            await self.client.update_fight(encounter_id, {"sequence": 1, "started_at": _utc_now()})

        if not combatants:
            raise CommandError("No combatants in this encounter.")

        result.text("", f"Rolling initiative for {len(combatants)} combatants...", "")

        rolls: list[tuple[Combatant, int, int]] = []
        for combatant in combatants:
            swerve = await self.client.roll_swerve()
            speed = DEFAULT_SPEED if combatant.speed is None else combatant.speed
            rolls.append((combatant, speed, swerve.total))

        rolls.sort(key=lambda item: item[1] + item[2], reverse=True)
        for combatant, speed, swerve_total in rolls:
            result.text(f"  {combatant.name}: Speed {speed} {signed(swerve_total)} = Shot {speed + swerve_total}")

        await self.client.update_initiatives(
            encounter_id,
            [InitiativeUpdate(id=c.shot_id, shot=speed + total) for c, speed, total in rolls],
        )

        result.text("")
        result.success(f"Initiative rolled for {len(combatants)} combatants!")
        return result

    async def location(self, name: str, location: str) -> CommandResult:
        encounter_id, _, combatants = await self._load()
        combatant = self.resolve(name, combatants)

        await self.client.update_shot_location(encounter_id, combatant.shot_id, location)

        result = CommandResult()
        result.success(f"{combatant.name}: {combatant.location or '(none)'} → {location}")
        return result

