"""Running child processes.

procpipe.process
~~~~~~~~~~~~~~~~

A :class:`Process` is the root of an adapter chain. It owns the child and its
three standard pipes until adapters take them.

Release a process with :meth:`~procpipe.control.Control.aclose` or
``async with``. A process dropped with every adapter wrapping it, without
being closed, is killed when it is garbage collected.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import os
import signal
import typing as t
import weakref

from . import exc
from .control import Control, Stream
from .otel import start_span

if t.TYPE_CHECKING:
    from ._internal.types import ExitStatus
    from .command import Command

logger = logging.getLogger(__name__)


class Process(Control):
    """A child process spawned from a :class:`~procpipe.command.Command`.

    Use :meth:`spawn` (or :meth:`Command.spawn
    <procpipe.command.Command.spawn>`) rather than instantiating it.

    Examples
    --------
    >>> from procpipe import Command, Program
    >>> async def run():
    ...     async with await Command(Program.unchecked("true")).spawn() as proc:
    ...         return await proc.wait()
    >>> asyncio.run(run())
    0
    """

    def __init__(
        self,
        command: Command,
        process: asyncio.subprocess.Process,
    ) -> None:
        super().__init__()
        self._command = command
        self._process = process
        self._killed = False
        self._pipes: dict[Stream, asyncio.StreamReader | asyncio.StreamWriter] = {}
        if process.stdin is not None:
            self._pipes[Stream.STDIN] = process.stdin
        if process.stdout is not None:
            self._pipes[Stream.STDOUT] = process.stdout
        if process.stderr is not None:
            self._pipes[Stream.STDERR] = process.stderr
        self._finalizer = weakref.finalize(self, _kill_orphan, process, str(command))

    @classmethod
    async def spawn(cls, command: Command) -> Process:
        """Spawn a copy of ``command`` with every standard stream piped.

        Raises
        ------
        :exc:`exc.CannotSpawnCommand`
            the OS refused to start the program.
        """
        command = command.clone()
        with start_span("spawn", command=str(command)) as span:
            try:
                process = await command.launch_spec().create_subprocess_exec()
            except (OSError, ValueError) as e:
                logger.debug(f"cannot spawn '{command}': {e}")
                raise exc.CannotSpawnCommand(command) from e
            span.set_attribute("procpipe.pid", process.pid)

        logger.debug(f"spawned '{command}' (pid: {process.pid})")
        return cls(command, process)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(pid={self.pid}, command='{self._command}')"

    @property
    def command(self) -> Command:
        return self._command

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> ExitStatus | None:
        return self._process.returncode

    def kill(self) -> None:
        """Force the process to finish.

        Raises
        ------
        :exc:`exc.CannotKillProcess`
            the signal could not be delivered, e.g. the process was already
            reaped.
        """
        with start_span("kill", command=str(self._command), pid=self.pid):
            try:
                self._send_kill()
            except OSError as e:
                raise exc.CannotKillProcess(self._command, self.pid) from e
        logger.debug(f"killed '{self._command}' (pid: {self.pid})")

    async def wait(self) -> ExitStatus:
        """Wait for the process to finish and return its exit status.

        A negative status ``-N`` means the process was terminated by signal
        ``N``.

        Raises
        ------
        :exc:`exc.PollError`
            the OS failed to report the status.
        """
        try:
            return await self._process.wait()
        except OSError as e:
            raise exc.PollError(self._command, self.pid) from e

    @property
    def available_streams(self) -> frozenset[Stream]:
        return frozenset(self._pipes)

    def _take_pipe(self, stream: Stream) -> asyncio.StreamReader | asyncio.StreamWriter:
        try:
            return self._pipes.pop(stream)
        except KeyError:
            raise exc.StreamUnavailable(self._command, stream, self.pid) from None

    def _send_kill(self) -> None:
        if self._process.returncode is not None:
            raise ProcessLookupError(errno.ESRCH, "process already reaped")
        # status is collected by the event loop's child watcher only
        os.kill(self.pid, signal.SIGKILL)
        self._killed = True

    def _terminate(self) -> None:
        if self._process.returncode is not None or self._killed:
            return
        logger.debug(f"terminating '{self._command}' (pid: {self.pid})")
        with contextlib.suppress(ProcessLookupError):
            self._send_kill()

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._finalizer.detach()
        self._terminate()

        self._pipes.clear()
        self._close_pipe_transports()

        returncode = await asyncio.shield(self.wait())
        logger.debug(
            f"'{self._command}' (pid: {self.pid}) released, exit status {returncode}",
        )

    def _close_pipe_transports(self) -> None:
        # children of the child may keep the pipes open: never wait for EOF
        transport: asyncio.SubprocessTransport = self._process._transport  # type: ignore[attr-defined]
        for fd in (0, 1, 2):
            pipe = transport.get_pipe_transport(fd)
            if pipe is None or pipe.is_closing():
                continue
            if isinstance(pipe, asyncio.WriteTransport):
                pipe.abort()
            else:
                pipe.close()


def _kill_orphan(process: asyncio.subprocess.Process, command: str) -> None:
    if process.returncode is not None:
        return
    logger.debug(f"'{command}' (pid: {process.pid}) dropped without aclose(), killing")
    with contextlib.suppress(ProcessLookupError):
        os.kill(process.pid, signal.SIGKILL)


__all__ = [
    "Process",
]
