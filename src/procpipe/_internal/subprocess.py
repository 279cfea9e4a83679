"""Deferred process launch descriptor.

Describe how a child process is started, inspect and tweak it, then hand it to
:mod:`asyncio` (or :mod:`subprocess` for synchronous validation runs).

Note
----
This is an internal API not covered by versioning policy.

Examples
--------
- :class:`~LaunchSpec`: Wraps :func:`asyncio.create_subprocess_exec` and
  :class:`subprocess.Popen` in a :func:`~dataclasses.dataclass`. All standard
  streams default to pipes.

  >>> spec = LaunchSpec(['echo', 'hi'])
  >>> spec
  LaunchSpec(args=['echo', 'hi'])
  >>> spec.stdout == subprocess.PIPE
  True

  Tweak params before invocation:

  >>> spec.args[1] = 'hello'
  >>> spec.args
  ['echo', 'hello']
"""

from __future__ import annotations

import asyncio
import dataclasses
import os
import subprocess
import typing as t

from procpipe.constants import STREAM_LIMIT

from .dataclasses import SkipDefaultFieldsReprMixin

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from typing_extensions import TypeAlias

    from .types import EnvMapping, StrPath

    _FILE: TypeAlias = "int | t.IO[t.Any] | None"

PIPE = subprocess.PIPE
DEVNULL = subprocess.DEVNULL


@dataclasses.dataclass(repr=False)
class LaunchSpec(SkipDefaultFieldsReprMixin):
    """Wraps a process launch request. Inspect, mutate, control before invocation.

    Attributes
    ----------
    args : Sequence[str]
        Program followed by its arguments.

    cwd : Optional[StrPath]
        Sets the current directory before the child is executed.

    env : Optional[Mapping[str, str]]
        Variables layered over the parent's environment. ``None`` inherits
        the parent's environment unchanged.

    stdin :
        standard input for executed program, a pipe by default

    stdout :
        standard output for executed program, a pipe by default

    stderr :
        standard error for executed program, a pipe by default

    start_new_session :
        POSIX only

    limit :
        Buffer limit of the :class:`asyncio.StreamReader` objects

    Examples
    --------
    >>> LaunchSpec(['ls', '-l'], cwd='/tmp')
    LaunchSpec(args=['ls', '-l'], cwd='/tmp')

    >>> LaunchSpec(['env'], env={'LANG': 'C'}).environ()['LANG']
    'C'
    """

    args: Sequence[str]
    cwd: StrPath | None = None
    env: EnvMapping | None = None
    stdin: _FILE = PIPE
    stdout: _FILE = PIPE
    stderr: _FILE = PIPE
    start_new_session: bool = False
    limit: int = STREAM_LIMIT

    @property
    def program(self) -> str:
        """Executable launched by this spec."""
        return self.args[0]

    def environ(self) -> dict[str, str] | None:
        """Return the full child environment, ``None`` to inherit as-is."""
        if self.env is None:
            return None
        environ = os.environ.copy()
        environ.update(self.env)
        return environ

    async def create_subprocess_exec(
        self,
        **kwargs: t.Any,
    ) -> asyncio.subprocess.Process:
        """Start the process on the running loop, optionally overriding fields.

        Parameters
        ----------
        **kwargs : dict, optional
            Overrides existing attributes for :func:`asyncio.create_subprocess_exec`

        Examples
        --------
        >>> spec = LaunchSpec(['echo', 'hello'])
        >>> process = await spec.create_subprocess_exec(stdin=DEVNULL) # doctest: +SKIP
        """
        spec = dataclasses.replace(self, **kwargs)
        program, *arguments = spec.args
        return await asyncio.create_subprocess_exec(
            program,
            *arguments,
            stdin=spec.stdin,
            stdout=spec.stdout,
            stderr=spec.stderr,
            cwd=spec.cwd,
            env=spec.environ(),
            start_new_session=spec.start_new_session,
            limit=spec.limit,
        )

    def Popen(self, **kwargs: t.Any) -> subprocess.Popen[bytes]:
        """Start the process with :class:`subprocess.Popen`, optionally overriding fields.

        Parameters
        ----------
        **kwargs : dict, optional
            Overrides existing attributes for :class:`subprocess.Popen`

        Examples
        --------
        >>> spec = LaunchSpec(['true'], stdout=DEVNULL)
        >>> spec.Popen(stdin=DEVNULL, stderr=DEVNULL).wait() # doctest: +SKIP
        0
        """
        spec = dataclasses.replace(self, **kwargs)
        return subprocess.Popen(
            list(spec.args),
            stdin=spec.stdin,
            stdout=spec.stdout,
            stderr=spec.stderr,
            cwd=spec.cwd,
            env=spec.environ(),
            start_new_session=spec.start_new_session,
        )
