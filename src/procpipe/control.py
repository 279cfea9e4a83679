"""Control and capability surface of a process and its adapters.

procpipe.control
~~~~~~~~~~~~~~~~

A :class:`~procpipe.process.Process` and every adapter wrapped around it share
the :class:`Control` surface:

- control: :attr:`~Control.command`, :attr:`~Control.pid`,
  :meth:`~Control.kill`, :meth:`~Control.wait` (also ``await layer``);
- stream capabilities: :meth:`~Control.capture_stdout`,
  :meth:`~Control.capture_stderr`, :meth:`~Control.send_stdin` and the raw
  ``take_*_pipe()`` calls;
- release: :meth:`~Control.aclose`, ``async with``.

Wrapping moves the wrapped layer into the new :class:`Adapter`: from then on,
only the adapter may use it. Each stream can be consumed once per chain;
once consumed it disappears from :attr:`~Control.available_streams` of every
layer and consuming it again raises :exc:`~procpipe.exc.StreamUnavailable`
before anything is read.

Closing any layer closes the whole chain, from the outermost adapter inward:
the process is killed if it is still running, every pipe is released and the
process is reaped.
"""

from __future__ import annotations

import abc
import enum
import logging
import typing as t
import weakref

from . import exc

if t.TYPE_CHECKING:
    import asyncio
    import sys
    import types
    from collections.abc import Generator

    from ._internal.types import ExitStatus
    from .capture import Capture
    from .codec import Decoder, Encoder
    from .command import Command
    from .send_stdin import SendStdin

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class Stream(str, enum.Enum):
    """Standard stream of a child process."""

    STDIN = "stdin"
    STDOUT = "stdout"
    STDERR = "stderr"

    def __str__(self) -> str:
        return self.value


class Control(abc.ABC):
    """Surface shared by a process and every adapter wrapping it."""

    def __init__(self) -> None:
        self._closed = False
        self._wrapper_ref: weakref.ReferenceType[Adapter] | None = None

    @property
    @abc.abstractmethod
    def command(self) -> Command:
        """Command this process was spawned from."""

    @property
    @abc.abstractmethod
    def pid(self) -> int:
        """OS-assigned process identifier."""

    @property
    @abc.abstractmethod
    def returncode(self) -> ExitStatus | None:
        """Exit status once the process was reaped, ``None`` before."""

    @abc.abstractmethod
    def kill(self) -> None:
        """Force the process to finish (``SIGKILL`` on POSIX)."""

    @abc.abstractmethod
    async def wait(self) -> ExitStatus:
        """Wait for the process to finish and return its exit status."""

    def __await__(self) -> Generator[t.Any, None, ExitStatus]:
        return self.wait().__await__()

    @property
    @abc.abstractmethod
    def available_streams(self) -> frozenset[Stream]:
        """Streams that can still be captured or taken through this chain."""

    @property
    def closed(self) -> bool:
        """Whether :meth:`aclose` ran on this layer."""
        return self._closed

    @property
    def wrapper(self) -> Adapter | None:
        """Adapter owning this layer, if any."""
        if self._wrapper_ref is None:
            return None
        return self._wrapper_ref()

    def take_stdin_pipe(self) -> asyncio.StreamWriter:
        """Take the raw standard input pipe out of the chain."""
        self._check_usable()
        return t.cast("asyncio.StreamWriter", self._take_pipe(Stream.STDIN))

    def take_stdout_pipe(self) -> asyncio.StreamReader:
        """Take the raw standard output pipe out of the chain."""
        self._check_usable()
        return t.cast("asyncio.StreamReader", self._take_pipe(Stream.STDOUT))

    def take_stderr_pipe(self) -> asyncio.StreamReader:
        """Take the raw standard error pipe out of the chain."""
        self._check_usable()
        return t.cast("asyncio.StreamReader", self._take_pipe(Stream.STDERR))

    def capture_stdout(self, decoder: Decoder[T]) -> Capture[T]:
        """Move this layer into a capture of the standard output.

        Raises
        ------
        :exc:`exc.StreamUnavailable`
            the standard output is already captured in this chain.
        :exc:`exc.AlreadyWrapped`
            this layer is already owned by another adapter.
        """
        from .capture import Capture

        return Capture(self, Stream.STDOUT, decoder)

    def capture_stderr(self, decoder: Decoder[T]) -> Capture[T]:
        """Move this layer into a capture of the standard error.

        Raises
        ------
        :exc:`exc.StreamUnavailable`
            the standard error is already captured in this chain.
        :exc:`exc.AlreadyWrapped`
            this layer is already owned by another adapter.
        """
        from .capture import Capture

        return Capture(self, Stream.STDERR, decoder)

    def send_stdin(self, encoder: Encoder[T]) -> SendStdin[T]:
        """Move this layer into a sender of items to the standard input.

        Raises
        ------
        :exc:`exc.StreamUnavailable`
            the standard input is already used in this chain.
        :exc:`exc.AlreadyWrapped`
            this layer is already owned by another adapter.
        """
        from .send_stdin import SendStdin

        return SendStdin(self, encoder)

    async def aclose(self) -> None:
        """Release the whole chain this layer belongs to.

        The process is killed if it is still running, every pipe is released
        and the process is reaped. Safe to call more than once, on any layer.
        """
        await self._outermost()._close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.aclose()

    def _check_usable(self) -> None:
        if self._closed:
            raise exc.LayerClosed(self.command, self.pid)
        if self.wrapper is not None:
            raise exc.AlreadyWrapped(self.command, self.pid)

    def _outermost(self) -> Control:
        layer = self
        while True:
            wrapper = layer.wrapper
            if wrapper is None:
                return layer
            layer = wrapper

    @abc.abstractmethod
    def _take_pipe(self, stream: Stream) -> asyncio.StreamReader | asyncio.StreamWriter:
        """Remove the pipe of ``stream`` from the chain and return it."""

    @abc.abstractmethod
    def _terminate(self) -> None:
        """Kill the process if it is still running, without waiting."""

    @abc.abstractmethod
    async def _close(self) -> None:
        """Release this layer, then the layers it owns."""

    def _sink_layer(self) -> SendStdin[t.Any] | None:
        return None

    def _source_layer(self) -> Capture[t.Any] | None:
        return None


class Adapter(Control):
    """A layer owning another layer and one of its pipes.

    Control and every stream it did not consume are forwarded to the owned
    layer.
    """

    stream: Stream

    def __init__(self, owner: Control, stream: Stream) -> None:
        super().__init__()
        owner._check_usable()
        self._pipe = owner._take_pipe(stream)
        self._owner = owner
        self.stream = stream
        owner._wrapper_ref = weakref.ref(self)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.stream} of '{self.command}', "
            f"pid={self.pid})"
        )

    @property
    def owner(self) -> Control:
        """Layer owned by this adapter."""
        return self._owner

    @property
    def command(self) -> Command:
        return self._owner.command

    @property
    def pid(self) -> int:
        return self._owner.pid

    @property
    def returncode(self) -> ExitStatus | None:
        return self._owner.returncode

    def kill(self) -> None:
        self._owner.kill()

    async def wait(self) -> ExitStatus:
        return await self._owner.wait()

    @property
    def available_streams(self) -> frozenset[Stream]:
        return self._owner.available_streams

    def _take_pipe(self, stream: Stream) -> asyncio.StreamReader | asyncio.StreamWriter:
        return self._owner._take_pipe(stream)

    def _terminate(self) -> None:
        self._owner._terminate()

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._terminate()
        try:
            await self._release_pipe()
        finally:
            await self._owner._close()

    @abc.abstractmethod
    async def _release_pipe(self) -> None:
        """Release the pipe consumed by this adapter, without waiting on it."""

    def _sink_layer(self) -> SendStdin[t.Any] | None:
        return self._owner._sink_layer()

    def _source_layer(self) -> Capture[t.Any] | None:
        return self._owner._source_layer()


__all__ = [
    "Adapter",
    "Control",
    "Stream",
]
