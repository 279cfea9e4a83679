"""Provide exceptions used by procpipe.

procpipe.exc
~~~~~~~~~~~~

Every error raised by procpipe derives from :exc:`ProcpipeException`. Errors
tied to a spawned (or attempted) command derive from
:exc:`CommandException` and keep the :class:`~procpipe.command.Command` and,
when a process exists, its PID so the failure can be traced back to the
exact command line.

Underlying causes (:exc:`OSError`, codec errors) are chained with
``raise ... from``.
"""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from procpipe.command import Command
    from procpipe.control import Stream
    from procpipe.program import Program


class ProcpipeException(Exception):
    """Base exception for all procpipe errors."""


class InvalidProgramName(ProcpipeException):
    """Raised when a program cannot be spawned by the validation run."""

    def __init__(self, program: Program, *args: object) -> None:
        self.program = program
        super().__init__(f"invalid program name: '{program}'")


class CommandException(ProcpipeException):
    """Base exception for errors about a command or its running process."""

    def __init__(
        self,
        command: Command,
        pid: int | None = None,
        message: str | None = None,
        *args: object,
    ) -> None:
        self.command = command
        self.pid = pid
        super().__init__(message or f"error with command: '{command}'")


class CannotSpawnCommand(CommandException):
    """Raised if the OS refused to start the command."""

    def __init__(self, command: Command, *args: object) -> None:
        super().__init__(command, None, f"cannot spawn command: '{command}'")


class CannotKillProcess(CommandException):
    """Raised if the kill signal could not be delivered."""

    def __init__(self, command: Command, pid: int, *args: object) -> None:
        super().__init__(command, pid, f"cannot kill process '{pid}' ({command})")


class PollError(CommandException):
    """Raised if waiting for the process to finish failed."""

    def __init__(self, command: Command, pid: int | None = None, *args: object) -> None:
        super().__init__(
            command,
            pid,
            f"error while waiting for command to finish: {command}",
        )


class CaptureError(CommandException):
    """Raised when decoding or reading a captured stream failed.

    The capture that raised it is finished: it yields no further items.
    """

    def __init__(
        self,
        command: Command,
        stream: Stream,
        pid: int | None = None,
        *args: object,
    ) -> None:
        self.stream = stream
        super().__init__(
            command,
            pid,
            f"error while capturing {stream} of '{command}'",
        )


class SendStdinError(CommandException):
    """Raised when encoding or writing an item to stdin failed."""

    def __init__(self, command: Command, pid: int | None = None, *args: object) -> None:
        super().__init__(command, pid, f"error while sending to stdin of '{command}'")


class StreamUnavailable(CommandException):
    """Raised if a stream was already captured or taken from the chain."""

    def __init__(
        self,
        command: Command,
        stream: Stream,
        pid: int | None = None,
        *args: object,
    ) -> None:
        self.stream = stream
        super().__init__(
            command,
            pid,
            f"{stream} of '{command}' is already captured",
        )


class AlreadyWrapped(CommandException):
    """Raised if a layer that already has an owner is used directly."""

    def __init__(self, command: Command, pid: int | None = None, *args: object) -> None:
        super().__init__(
            command,
            pid,
            f"process of '{command}' is already owned by another adapter",
        )


class LayerClosed(CommandException):
    """Raised when a closed process or adapter is used."""

    def __init__(self, command: Command, pid: int | None = None, *args: object) -> None:
        super().__init__(command, pid, f"process of '{command}' is closed")


class CodecError(ProcpipeException, ValueError):
    """Raised by a codec on malformed or incomplete data."""


class LineTooLong(CodecError):
    """Raised by :class:`~procpipe.codec.LinesCodec` on an oversized line."""

    def __init__(self, max_length: int, *args: object) -> None:
        self.max_length = max_length
        super().__init__(f"line longer than {max_length} bytes")


class WaitTimeout(ProcpipeException):
    """Raised when a function times out waiting for a condition."""


__all__ = sorted(
    {
        "AlreadyWrapped",
        "CannotKillProcess",
        "CannotSpawnCommand",
        "CaptureError",
        "CodecError",
        "CommandException",
        "InvalidProgramName",
        "LayerClosed",
        "LineTooLong",
        "PollError",
        "ProcpipeException",
        "SendStdinError",
        "StreamUnavailable",
        "WaitTimeout",
    }
)
