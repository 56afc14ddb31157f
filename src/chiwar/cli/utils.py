"""CLI utilities - output helpers, error handling and service wiring."""

import asyncio
import functools
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict, is_dataclass
from typing import Any, Callable

import typer
from pydantic import BaseModel

from ..api.client import ApiError, get_client
from ..config import ConfigStore
from ..services.encounters import CommandError, CommandResult, EncounterService, LineKind

logger = logging.getLogger("chiwar.cli")


def success(message: str) -> None:
    typer.secho(f"✓ {message}", fg=typer.colors.GREEN)


def error(message: str) -> None:
    typer.secho(f"✗ {message}", fg=typer.colors.RED, err=True)


def info(message: str) -> None:
    typer.echo(f"  {message}")


def warn(message: str) -> None:
    typer.secho(f"⚠ {message}", fg=typer.colors.YELLOW)


def print_result(result: CommandResult) -> None:
    """Print command output lines in order."""
    printers = {
        LineKind.TEXT: typer.echo,
        LineKind.SUCCESS: success,
        LineKind.INFO: info,
        LineKind.WARN: warn,
    }
    for kind, line in result.lines:
        printers[kind](line)


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    if isinstance(data, (list, tuple)):
        return [_to_jsonable(item) for item in data]
    return data


def print_json(data: Any) -> None:
    typer.echo(json.dumps(_to_jsonable(data), indent=2, default=str))


def async_command(func: Callable) -> Callable:
    """Decorator that runs an async command and turns failures into exit code 1.

    Command and API errors are shown to the user as-is. Anything else is
    logged with its traceback and reported generically.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger.info(f"Command {func.__name__}")
        try:
            return asyncio.run(func(*args, **kwargs))
        except CommandError as e:
            error(e.message)
            for hint in e.hints:
                typer.echo(hint, err=True)
            raise typer.Exit(code=1)
        except ApiError as e:
            error(e.message)
            raise typer.Exit(code=1)
        except Exception as e:
            logger.exception(f"Command error in {func.__name__}: {e}")
            error(f"Failed to run {func.__name__.replace('_', ' ')}: {e}")
            raise typer.Exit(code=1)

    return wrapper


@asynccontextmanager
async def encounter_service() -> AsyncIterator[EncounterService]:
    """Yield an EncounterService whose client is closed afterwards."""
    store = ConfigStore()
    client = get_client(store)
    try:
        yield EncounterService(client, store)
    finally:
        await client.close()
