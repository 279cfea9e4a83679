"""Items sent to the standard input.

procpipe.send_stdin
~~~~~~~~~~~~~~~~~~~

A :class:`SendStdin` owns a process (or another adapter) and its standard
input pipe. Items are encoded with an :class:`~procpipe.codec.Encoder` and
written in the order they are submitted.

Iterating a :class:`SendStdin` iterates the nearest
:class:`~procpipe.capture.Capture` it owns, so a process can be fed and read
through the same outermost layer.
"""

from __future__ import annotations

import logging
import typing as t

from . import exc
from .control import Adapter, Stream
from .framed import FramedWrite

if t.TYPE_CHECKING:
    import asyncio
    from collections.abc import Iterable

    from .codec import Encoder
    from .control import Control

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class SendStdin(Adapter, t.Generic[T]):
    """Sink of items for the standard input of a process.

    :meth:`feed` queues an item; :meth:`flush` waits until every queued byte
    reached the OS pipe. :meth:`send` does both. Any failure, including an
    item the encoder rejects, raises :exc:`~procpipe.exc.SendStdinError`.

    Examples
    --------
    >>> from procpipe import Command, LinesCodec, Program
    >>> async def echo_back():
    ...     process = await Command(Program.unchecked("cat")).spawn()
    ...     async with process.capture_stdout(LinesCodec()).send_stdin(
    ...         LinesCodec(),
    ...     ) as cat:
    ...         await cat.send("Hello World!")
    ...         return await cat.__anext__()
    >>> asyncio.run(echo_back())
    'Hello World!'
    """

    def __init__(self, owner: Control, encoder: Encoder[T]) -> None:
        super().__init__(owner, Stream.STDIN)
        self._framed: FramedWrite[T] = FramedWrite(
            t.cast("asyncio.StreamWriter", self._pipe),
            encoder,
        )
        logger.debug(f"sending to stdin of '{self.command}' (pid: {self.pid})")

    @property
    def encoder(self) -> Encoder[T]:
        """Encoder applied to the items sent."""
        return self._framed.encoder

    def feed(self, item: T) -> None:
        """Encode ``item`` and queue it, without waiting."""
        self._check_usable()
        self._feed(item)

    async def flush(self) -> None:
        """Wait until every queued item reached the OS pipe."""
        self._check_usable()
        await self._flush()

    async def send(self, item: T) -> None:
        """Feed ``item`` and flush it."""
        self.feed(item)
        await self.flush()

    async def send_all(self, items: Iterable[T]) -> None:
        """Send each item of ``items``, in order."""
        for item in items:
            await self.send(item)

    async def close_stdin(self) -> None:
        """Flush, then close the pipe: the process reads end of file.

        Items fed afterwards raise :exc:`~procpipe.exc.SendStdinError`.
        """
        self._check_usable()
        await self._close_stdin()

    def __aiter__(self) -> SendStdin[T]:
        return self

    async def __anext__(self) -> t.Any:
        self._check_usable()
        source = self._owner._source_layer()
        if source is None:
            msg = f"{self!r} owns no capture to iterate"
            raise TypeError(msg)
        return await source._next_item()

    def _feed(self, item: T) -> None:
        try:
            self._framed.feed(item)
        except Exception as e:
            logger.debug(f"cannot feed stdin of '{self.command}': {e}")
            raise exc.SendStdinError(self.command, self.pid) from e

    async def _flush(self) -> None:
        try:
            await self._framed.flush()
        except Exception as e:
            logger.debug(f"cannot flush stdin of '{self.command}': {e}")
            raise exc.SendStdinError(self.command, self.pid) from e

    async def _close_stdin(self) -> None:
        if self._framed.writer.is_closing():
            return
        await self._flush()
        await self._framed.aclose()
        logger.debug(f"closed stdin of '{self.command}' (pid: {self.pid})")

    def _sink_layer(self) -> SendStdin[t.Any] | None:
        return self

    async def _release_pipe(self) -> None:
        self._framed.abort()


__all__ = [
    "SendStdin",
]
