"""procpipe pytest plugin.

Fixtures provide validated programs, skipping the test when the executable is
missing, and a ``spawn`` factory whose processes are killed and reaped when the
test ends.
"""

from __future__ import annotations

import logging
import typing as t

import pytest
import pytest_asyncio

from procpipe import exc
from procpipe.command import Command
from procpipe.process import Process
from procpipe.program import Program

if t.TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    SpawnFactory = Callable[..., Awaitable[Process]]

logger = logging.getLogger(__name__)


def require_program(name: str) -> Program:
    """Return a validated :class:`Program`, or skip the current test."""
    try:
        return Program.validate(name)
    except exc.InvalidProgramName:
        pytest.skip(f"{name} is not available")


@pytest.fixture(scope="session")
def echo() -> Program:
    """Return the ``echo`` executable."""
    return require_program("echo")


@pytest.fixture(scope="session")
def cat() -> Program:
    """Return the ``cat`` executable."""
    return require_program("cat")


@pytest.fixture(scope="session")
def sh() -> Program:
    """Return the ``sh`` executable."""
    return require_program("sh")


@pytest.fixture(scope="session")
def sleep() -> Program:
    """Return the ``sleep`` executable."""
    return require_program("sleep")


@pytest_asyncio.fixture
async def spawn() -> AsyncIterator[SpawnFactory]:
    """Return a factory spawning commands, released at teardown.

    Accepts a :class:`Command`, or a :class:`Program` followed by its
    arguments, e.g. ``await spawn(echo, "hello")``.
    """
    processes: list[Process] = []

    async def fn(command: Command | Program, *arguments: str) -> Process:
        if isinstance(command, Program):
            command = Command(command, list(arguments))
        elif arguments:
            command = command.clone().add_arguments(arguments)
        process = await command.spawn()
        processes.append(process)
        return process

    yield fn

    for process in processes:
        logger.debug(f"releasing {process!r}")
        await process.aclose()
