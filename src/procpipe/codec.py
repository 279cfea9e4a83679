"""Codecs turning pipe bytes into items and items into pipe bytes.

procpipe.codec
~~~~~~~~~~~~~~

A :class:`Decoder` is fed the bytes read so far from a captured stream and
either returns one complete item (removing its bytes from the buffer) or
``None`` when more bytes are needed. An :class:`Encoder` serializes one item
for the standard input.

Codecs are supplied by the caller; :class:`LinesCodec` and
:class:`BytesCodec` cover the common cases.
"""

from __future__ import annotations

import abc
import typing as t

from . import exc

T = t.TypeVar("T")


class Decoder(abc.ABC, t.Generic[T]):
    """Incremental byte to item decoder.

    Items cannot be ``None``: ``None`` means *need more bytes*.
    """

    @abc.abstractmethod
    def decode(self, buffer: bytearray) -> T | None:
        """Remove and return the first complete item of ``buffer``.

        Return ``None`` if ``buffer`` does not hold a complete item yet.
        Raise :exc:`exc.CodecError` on malformed data.
        """

    def decode_eof(self, buffer: bytearray) -> T | None:
        """Decode once the stream reached end of file.

        Called repeatedly until it returns ``None``. By default, bytes left
        that do not form a complete item are an error.
        """
        item = self.decode(buffer)
        if item is None and buffer:
            msg = "bytes remaining on stream"
            raise exc.CodecError(msg)
        return item


class Encoder(abc.ABC, t.Generic[T]):
    """Item to bytes encoder."""

    @abc.abstractmethod
    def encode(self, item: T) -> bytes:
        """Return the frame for ``item``."""


class LinesCodec(Decoder[str], Encoder[str]):
    r"""Text lines separated by ``\n``.

    A trailing ``\r`` is stripped. At end of file, an unterminated last line
    is still returned. The codec keeps no state between calls: one instance
    can decode several streams.

    Parameters
    ----------
    max_length : int, optional
        Maximum length of a line in bytes, without its terminator.
    encoding : str
        Text encoding of the lines. Defaults to ``utf-8``.

    Examples
    --------
    >>> codec = LinesCodec()
    >>> buffer = bytearray(b"Hello World!\r\nBawa")
    >>> codec.decode(buffer)
    'Hello World!'
    >>> codec.decode(buffer) is None
    True
    >>> buffer.extend(b"wa\n")
    >>> codec.decode(buffer)
    'Bawawa'
    >>> codec.encode("Bawawa")
    b'Bawawa\n'
    """

    def __init__(self, max_length: int | None = None, encoding: str = "utf-8") -> None:
        self.max_length = max_length
        self.encoding = encoding

    def decode(self, buffer: bytearray) -> str | None:
        newline = buffer.find(b"\n")
        if newline == -1:
            self._check_length(len(buffer))
            return None

        line = bytes(buffer[:newline])
        del buffer[: newline + 1]
        self._check_length(len(line))
        return self._to_str(line)

    def decode_eof(self, buffer: bytearray) -> str | None:
        line = self.decode(buffer)
        if line is None and buffer:
            line = self._to_str(bytes(buffer))
            buffer.clear()
        return line

    def encode(self, item: str) -> bytes:
        if not isinstance(item, str):
            msg = f"LinesCodec encodes str, not {type(item).__name__}"
            raise TypeError(msg)
        return f"{item}\n".encode(self.encoding)

    def _check_length(self, length: int) -> None:
        if self.max_length is not None and length > self.max_length:
            raise exc.LineTooLong(self.max_length)

    def _to_str(self, line: bytes) -> str:
        if line.endswith(b"\r"):
            line = line[:-1]
        try:
            return line.decode(self.encoding)
        except UnicodeDecodeError as e:
            msg = f"line is not valid {self.encoding}"
            raise exc.CodecError(msg) from e


class BytesCodec(Decoder[bytes], Encoder[bytes]):
    """Raw bytes, as they come.

    Examples
    --------
    >>> codec = BytesCodec()
    >>> codec.decode(bytearray(b"\\x00\\x01"))
    b'\\x00\\x01'
    >>> codec.decode(bytearray()) is None
    True
    """

    def decode(self, buffer: bytearray) -> bytes | None:
        if not buffer:
            return None
        chunk = bytes(buffer)
        buffer.clear()
        return chunk

    def encode(self, item: bytes) -> bytes:
        return bytes(item)


__all__ = [
    "BytesCodec",
    "Decoder",
    "Encoder",
    "LinesCodec",
]
