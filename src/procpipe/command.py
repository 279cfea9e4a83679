"""Command lines ready to be spawned.

procpipe.command
~~~~~~~~~~~~~~~~

A :class:`Command` keeps its components in a human readable form so it can
be displayed in logs and error messages. It does nothing until it is spawned
into a :class:`~procpipe.process.Process`.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import typing as t

from ._internal.subprocess import PIPE, LaunchSpec
from .program import Program

if t.TYPE_CHECKING:
    import sys
    from collections.abc import Iterable

    from ._internal.types import StrPath
    from .process import Process

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Command:
    """Program, arguments, working directory and environment of a process.

    Builder methods mutate the command and return it, so they can be chained.
    :meth:`spawn` works on a copy: changing a command afterwards does not
    affect processes already spawned from it.

    Examples
    --------
    >>> echo = Program.unchecked("echo")
    >>> print(Command(echo).add_arguments(["-n", "Hello World!"]))
    echo -n Hello World!

    >>> print(Command(Program.unchecked("ls")).current_working_directory("/tmp"))
    CWD=/tmp ls

    >>> Command(echo, ["hi"]).argv
    ['echo', 'hi']
    """

    program: Program
    arguments: list[str] = dataclasses.field(default_factory=list)
    cwd: StrPath | None = None
    env: dict[str, str] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.program, Program):
            msg = f"expected a Program, not {type(self.program).__name__}"
            raise TypeError(msg)
        self.arguments = [str(argument) for argument in self.arguments]

    def __str__(self) -> str:
        parts = []
        if self.cwd is not None:
            parts.append(f"CWD={os.fspath(self.cwd)}")
        parts.append(str(self.program))
        parts.extend(self.arguments)
        return " ".join(parts)

    def add_argument(self, argument: str) -> Self:
        """Append one argument."""
        self.arguments.append(str(argument))
        return self

    def add_arguments(self, arguments: Iterable[str]) -> Self:
        """Append arguments, in order."""
        self.arguments.extend(str(argument) for argument in arguments)
        return self

    def current_working_directory(self, cwd: StrPath) -> Self:
        """Set the directory in which the command will be executed."""
        self.cwd = cwd
        return self

    def environment(self, key: str, value: str) -> Self:
        """Set an environment variable on top of the inherited environment.

        Examples
        --------
        >>> cmd = Command(Program.unchecked("env")).environment("LANG", "C")
        >>> cmd.env
        {'LANG': 'C'}
        """
        if self.env is None:
            self.env = {}
        self.env[str(key)] = str(value)
        return self

    @property
    def argv(self) -> list[str]:
        """Program followed by its arguments."""
        return [str(self.program), *self.arguments]

    def clone(self) -> Command:
        """Return an independent copy of this command.

        Examples
        --------
        >>> cmd = Command(Program.unchecked("echo"), ["a"])
        >>> copy = cmd.clone().add_argument("b")
        >>> cmd.argv, copy.argv
        (['echo', 'a'], ['echo', 'a', 'b'])
        """
        return dataclasses.replace(
            self,
            arguments=list(self.arguments),
            env=dict(self.env) if self.env is not None else None,
        )

    def launch_spec(self) -> LaunchSpec:
        """Return the OS launch descriptor, with every standard stream piped.

        Examples
        --------
        >>> Command(Program.unchecked("cat"), ["-"]).launch_spec()
        LaunchSpec(args=['cat', '-'])
        """
        return LaunchSpec(
            self.argv,
            cwd=self.cwd,
            env=dict(self.env) if self.env is not None else None,
            stdin=PIPE,
            stdout=PIPE,
            stderr=PIPE,
        )

    async def spawn(self) -> Process:
        """Spawn a copy of this command.

        Raises
        ------
        :exc:`exc.CannotSpawnCommand`
            the program may have changed (permissions, renamed, removed...)
            since it was validated.
        """
        from .process import Process

        return await Process.spawn(self)
