"""Captured output streams.

procpipe.capture
~~~~~~~~~~~~~~~~

A :class:`Capture` owns a process (or another adapter) and its standard output
or standard error pipe, and yields the items a :class:`~procpipe.codec.Decoder`
finds in it.

Every other stream stays reachable through the capture, so captures and
senders can be stacked in any order.
"""

from __future__ import annotations

import logging
import typing as t

from . import exc
from .control import Adapter, Stream
from .framed import FramedRead

if t.TYPE_CHECKING:
    import asyncio
    from collections.abc import Iterable

    from .codec import Decoder
    from .control import Control
    from .send_stdin import SendStdin

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class Capture(Adapter, t.Generic[T]):
    """Asynchronous iterator over the items of an output stream.

    Iteration ends at end of file. A read or decode failure raises
    :exc:`~procpipe.exc.CaptureError` once, then iteration ends: the process
    keeps running until the chain is closed.

    Examples
    --------
    >>> from procpipe import Command, LinesCodec, Program
    >>> async def hello():
    ...     cmd = Command(Program.unchecked("echo")).add_argument("Hello World!")
    ...     process = await cmd.spawn()
    ...     async with process.capture_stdout(LinesCodec()) as stdout:
    ...         return await stdout.collect()
    >>> asyncio.run(hello())
    ['Hello World!']
    """

    def __init__(self, owner: Control, stream: Stream, decoder: Decoder[T]) -> None:
        if stream not in (Stream.STDOUT, Stream.STDERR):
            msg = f"only stdout and stderr can be captured, not {stream}"
            raise ValueError(msg)
        super().__init__(owner, stream)
        self._framed: FramedRead[T] = FramedRead(
            t.cast("asyncio.StreamReader", self._pipe),
            decoder,
        )
        self._finished = False
        logger.debug(f"capturing {stream} of '{self.command}' (pid: {self.pid})")

    @property
    def decoder(self) -> Decoder[T]:
        """Decoder applied to the captured bytes."""
        return self._framed.decoder

    @property
    def finished(self) -> bool:
        """Whether the stream ended or failed."""
        return self._finished

    def __aiter__(self) -> Capture[T]:
        return self

    async def __anext__(self) -> T:
        self._check_usable()
        return await self._next_item()

    async def _next_item(self) -> T:
        if self._finished:
            raise StopAsyncIteration

        try:
            item = await self._framed.read_frame()
        except Exception as e:
            self._finished = True
            logger.debug(f"capture of {self.stream} of '{self.command}' failed: {e}")
            raise exc.CaptureError(self.command, self.stream, self.pid) from e

        if item is None:
            self._finished = True
            logger.debug(f"{self.stream} of '{self.command}' reached end of file")
            raise StopAsyncIteration
        return item

    async def collect(self) -> list[T]:
        """Consume the stream and return every remaining item."""
        return [item async for item in self]

    def feed(self, item: t.Any) -> None:
        """Forward to the :class:`~procpipe.send_stdin.SendStdin` owned below."""
        self._check_usable()
        self._sink()._feed(item)

    async def flush(self) -> None:
        """Forward to the :class:`~procpipe.send_stdin.SendStdin` owned below."""
        self._check_usable()
        await self._sink()._flush()

    async def send(self, item: t.Any) -> None:
        """Forward to the :class:`~procpipe.send_stdin.SendStdin` owned below."""
        self.feed(item)
        await self.flush()

    async def send_all(self, items: Iterable[t.Any]) -> None:
        """Forward to the :class:`~procpipe.send_stdin.SendStdin` owned below."""
        for item in items:
            await self.send(item)

    async def close_stdin(self) -> None:
        """Forward to the :class:`~procpipe.send_stdin.SendStdin` owned below."""
        self._check_usable()
        await self._sink()._close_stdin()

    def _sink(self) -> SendStdin[t.Any]:
        sink = self._owner._sink_layer()
        if sink is None:
            msg = f"{self!r} does not accept items, use send_stdin() first"
            raise TypeError(msg)
        return sink

    def _source_layer(self) -> Capture[t.Any] | None:
        return self

    async def _release_pipe(self) -> None:
        await self._framed.aclose()


__all__ = [
    "Capture",
]
