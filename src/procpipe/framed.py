"""Incremental frame reader and writer over asyncio pipes.

procpipe.framed
~~~~~~~~~~~~~~~

:class:`FramedRead` pulls bytes from an :class:`asyncio.StreamReader` chunk by
chunk and hands them to a :class:`~procpipe.codec.Decoder`: items are yielded
as soon as they are complete, the stream is never buffered as a whole.

:class:`FramedWrite` encodes items with an :class:`~procpipe.codec.Encoder`
and writes them to an :class:`asyncio.StreamWriter`. Its write buffer
high-water mark is zero, so :meth:`FramedWrite.flush` returns only once every
byte was handed to the OS pipe.

Errors raised here are the raw causes (:exc:`OSError`,
:exc:`~procpipe.exc.CodecError`...); adapters wrap them with the command they
belong to.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import typing as t

from . import constants

if t.TYPE_CHECKING:
    from collections.abc import Iterable

    from .codec import Decoder, Encoder

logger = logging.getLogger(__name__)

T = t.TypeVar("T")


class FramedRead(t.Generic[T]):
    """Decode items from a stream reader, incrementally."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        decoder: Decoder[T],
        *,
        chunk_size: int = constants.READ_CHUNK_SIZE,
    ) -> None:
        self.reader = reader
        self.decoder = decoder
        self.chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False
        self._reading = False

    async def read_frame(self) -> T | None:
        """Return the next item, or ``None`` once the stream is exhausted.

        Examples
        --------
        >>> from procpipe.codec import LinesCodec
        >>> async def first_line():
        ...     reader = asyncio.StreamReader()
        ...     reader.feed_data(b"Hello World!\\n")
        ...     reader.feed_eof()
        ...     return await FramedRead(reader, LinesCodec()).read_frame()
        >>> asyncio.run(first_line())
        'Hello World!'
        """
        while True:
            if self._eof:
                return self.decoder.decode_eof(self._buffer)

            item = self.decoder.decode(self._buffer)
            if item is not None:
                return item

            self._reading = True
            try:
                chunk = await self.reader.read(self.chunk_size)
            finally:
                self._reading = False

            if chunk:
                self._buffer.extend(chunk)
            else:
                self._eof = True

    def __aiter__(self) -> FramedRead[T]:
        return self

    async def __anext__(self) -> T:
        item = await self.read_frame()
        if item is None:
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Drop buffered bytes; no further item is decoded.

        The pipe itself belongs to the process, which closes it. A task
        suspended on a read receives the end of file then.
        """
        self._buffer.clear()
        if not self._reading:
            self._eof = True


class FramedWrite(t.Generic[T]):
    """Encode items into a stream writer, in submission order."""

    def __init__(self, writer: asyncio.StreamWriter, encoder: Encoder[T]) -> None:
        self.writer = writer
        self.encoder = encoder
        # drain() only returns once the OS took every byte
        writer.transport.set_write_buffer_limits(high=0)

    def feed(self, item: T) -> None:
        """Encode ``item`` and schedule its bytes for writing."""
        if self.writer.is_closing():
            raise BrokenPipeError(errno.EPIPE, "standard input is closed")
        data = self.encoder.encode(item)
        self.writer.write(data)

    async def flush(self) -> None:
        """Wait until every scheduled byte reached the OS pipe."""
        await self.writer.drain()

    async def send(self, item: T) -> None:
        """Feed ``item`` and flush it."""
        self.feed(item)
        await self.flush()

    async def send_all(self, items: Iterable[T]) -> None:
        """Send each item of ``items``, in order."""
        for item in items:
            await self.send(item)

    async def aclose(self) -> None:
        """Close the pipe; the process reads end of file."""
        if self.writer.is_closing():
            return
        self.writer.close()
        with contextlib.suppress(ConnectionError):
            await self.writer.wait_closed()

    def abort(self) -> None:
        """Close the pipe at once, discarding bytes not yet written."""
        if not self.writer.transport.is_closing():
            self.writer.transport.abort()


__all__ = [
    "FramedRead",
    "FramedWrite",
]
