"""Executables known to be runnable.

procpipe.program
~~~~~~~~~~~~~~~~

A :class:`Program` is checked once, when it is created with
:meth:`Program.validate`, and then reused to build as many
:class:`~procpipe.command.Command` objects as needed.

The check spawns the executable with a harmless flag (``--help`` by default,
see :envvar:`PROCPIPE_VALIDATE_FLAG`) and all standard streams on
:data:`os.devnull`, then kills and reaps it. Only the spawn itself matters:
the exit code of that run is ignored.
"""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import os
import signal

from . import constants, exc
from ._internal.subprocess import DEVNULL, LaunchSpec
from .otel import start_span

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, order=True)
class Program:
    """A program name or path, believed to be runnable.

    Examples
    --------
    >>> sh = Program.unchecked("sh")
    >>> str(sh)
    'sh'
    >>> sh == Program.unchecked("sh")
    True
    >>> sorted([Program.unchecked("sh"), Program.unchecked("cat")])
    [Program(name='cat'), Program(name='sh')]
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            msg = f"program name must be a str, not {type(self.name).__name__}"
            raise TypeError(msg)

    def __str__(self) -> str:
        return self.name

    @classmethod
    def unchecked(cls, name: str) -> Program:
        """Create a program without probing it."""
        return cls(name)

    def _validation_spec(self) -> LaunchSpec:
        return LaunchSpec(
            [self.name, constants.VALIDATE_FLAG],
            stdin=DEVNULL,
            stdout=DEVNULL,
            stderr=DEVNULL,
        )

    @classmethod
    def validate(cls, name: str) -> Program:
        """Return a :class:`Program` once ``name`` was spawned successfully.

        Parameters
        ----------
        name : str
            Executable name, looked up in :envvar:`PATH`, or a path to it.

        Raises
        ------
        :exc:`exc.InvalidProgramName`
            The executable could not be spawned (missing, not executable...).

        Examples
        --------
        >>> Program.validate("the-impossible-program-that-does-not-exist")
        Traceback (most recent call last):
        ...
        procpipe.exc.InvalidProgramName: invalid program name: 'the-impossible-program-that-does-not-exist'
        """
        program = cls.unchecked(name)
        with start_span("validate", program=name):
            try:
                child = program._validation_spec().Popen()
            except (OSError, ValueError) as e:
                logger.debug(f"validation run of {name!r} failed: {e}")
                raise exc.InvalidProgramName(program) from e

            # the validation run only needs to start
            child.kill()
            child.wait()

        logger.debug(f"program {name!r} validated")
        return program

    @classmethod
    async def avalidate(cls, name: str) -> Program:
        """Async version of :meth:`validate`, spawning on the running loop."""
        program = cls.unchecked(name)
        with start_span("validate", program=name):
            try:
                child = await program._validation_spec().create_subprocess_exec()
            except (OSError, ValueError) as e:
                logger.debug(f"validation run of {name!r} failed: {e}")
                raise exc.InvalidProgramName(program) from e

            if child.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    os.kill(child.pid, signal.SIGKILL)
            await child.wait()

        logger.debug(f"program {name!r} validated")
        return program
