"""Encounter commands - run combat in the current fight."""

from typing import List, Optional

import typer

from .utils import async_command, encounter_service, print_json, print_result

encounter_app = typer.Typer(help="Manage active combat encounters", no_args_is_help=True)


@encounter_app.command("set")
@async_command
async def set_encounter(fight_id: str = typer.Argument(..., help="Fight ID")):
    """Set the current encounter context."""
    async with encounter_service() as service:
        print_result(await service.set_encounter(fight_id))


@encounter_app.command("status")
@async_command
async def status(
    fight_id: Optional[str] = typer.Argument(None, help="Fight ID (defaults to the current encounter)"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the current encounter status."""
    async with encounter_service() as service:
        result = await service.status(fight_id)
    if as_json:
        print_json(result.data)
    else:
        print_result(result)


@encounter_app.command("list")
@async_command
async def list_combatants(as_json: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List all combatants in the current encounter."""
    async with encounter_service() as service:
        result = await service.list_combatants()
    if as_json:
        print_json(result.data)
    else:
        print_result(result)


@encounter_app.command("spend")
@async_command
async def spend(
    character: str = typer.Argument(..., help="Combatant name"),
    shots: int = typer.Argument(..., help="Shots to spend"),
):
    """Character spends shots (moves down initiative)."""
    async with encounter_service() as service:
        print_result(await service.spend(character, shots))


@encounter_app.command("roll")
@async_command
async def roll(description: Optional[str] = typer.Argument(None, help="What the roll is for")):
    """Roll a swerve (positive die minus negative die)."""
    async with encounter_service() as service:
        print_result(await service.roll(description))


@encounter_app.command("attack")
@async_command
async def attack(
    attacker: str = typer.Argument(..., help="Attacker name"),
    target: str = typer.Option(..., "-t", "--target", help="Target character name"),
    swerve: Optional[int] = typer.Option(None, "-r", "--roll", help="Use provided swerve value instead of rolling"),
    count: int = typer.Option(1, "-c", "--count", help="Number of mooks to target"),
):
    """Attack a target with full damage calculation."""
    async with encounter_service() as service:
        print_result(await service.attack(attacker, target, roll=swerve, count=count))


@encounter_app.command("multiattack")
@async_command
async def multiattack(
    attacker: str = typer.Argument(..., help="Attacker name"),
    target: List[str] = typer.Option(..., "-t", "--target", help="Target names (repeat or comma-separate)"),
    swerve: Optional[int] = typer.Option(None, "-r", "--roll", help="Use provided swerve value instead of rolling"),
    damage: Optional[str] = typer.Option(None, "-d", "--damage", help="Smackdown per target, comma-separated"),
):
    """Attack multiple targets with one shared roll (Feng Shui 2 multi-target rules)."""
    async with encounter_service() as service:
        print_result(await service.multiattack(attacker, target, roll=swerve, damage=damage))


@encounter_app.command("wound")
@async_command
async def wound(
    target: str = typer.Argument(..., help="Target name"),
    wounds: int = typer.Argument(..., help="Wounds to apply"),
):
    """Apply wounds directly to a character."""
    async with encounter_service() as service:
        print_result(await service.wound(target, wounds))


@encounter_app.command("heal")
@async_command
async def heal(
    target: str = typer.Argument(..., help="Target name"),
    wounds: int = typer.Argument(..., help="Wounds to heal"),
):
    """Heal wounds from a character."""
    async with encounter_service() as service:
        print_result(await service.heal(target, wounds))


@encounter_app.command("mooks")
@async_command
async def mooks(
    target: str = typer.Argument(..., help="Mook group name"),
    change: int = typer.Argument(..., help="Change in count (negative to reduce)"),
):
    """Adjust mook count (use a negative number to reduce)."""
    async with encounter_service() as service:
        print_result(await service.mooks(target, change))


@encounter_app.command("drop")
@async_command
async def drop(
    target: str = typer.Argument(..., help="Mook group name"),
    count: int = typer.Argument(..., help="Mooks to drop"),
):
    """Drop mooks from a mook group."""
    async with encounter_service() as service:
        print_result(await service.drop(target, count))


@encounter_app.command("boost")
@async_command
async def boost(
    character: str = typer.Argument(..., help="Character name"),
    fortune: int = typer.Option(1, "-f", "--fortune", help="Fortune points spent"),
):
    """Character uses Fortune to boost a roll (for tracking)."""
    async with encounter_service() as service:
        print_result(await service.boost(character, fortune))


@encounter_app.command("up-check")
@async_command
async def up_check(character: str = typer.Argument(..., help="Character name")):
    """Roll an Up Check for a character at 35+ wounds."""
    async with encounter_service() as service:
        print_result(await service.up_check(character))


@encounter_app.command("start")
@async_command
async def start():
    """Start the encounter (sets sequence to 1)."""
    async with encounter_service() as service:
        print_result(await service.start())


@encounter_app.command("end")
@async_command
async def end():
    """End the encounter (sets the ended_at timestamp)."""
    async with encounter_service() as service:
        print_result(await service.end())


@encounter_app.command("initiative")
@async_command
async def initiative():
    """Roll initiative for all combatants (Speed + swerve)."""
    async with encounter_service() as service:
        print_result(await service.initiative())


@encounter_app.command("location")
@async_command
async def location(
    character: str = typer.Argument(..., help="Character name"),
    place: str = typer.Argument(..., metavar="LOCATION", help="New location"),
):
    """Set a character's location in the current fight."""
    async with encounter_service() as service:
        print_result(await service.location(character, place))
