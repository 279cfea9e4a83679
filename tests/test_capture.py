"""Tests for procpipe.capture."""

from __future__ import annotations

import typing as t

import pytest

from procpipe import exc
from procpipe.codec import BytesCodec, LinesCodec
from procpipe.command import Command
from procpipe.control import Stream

if t.TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from procpipe.process import Process
    from procpipe.program import Program

    SpawnFactory = Callable[..., Awaitable[Process]]


@pytest.mark.asyncio
async def test_capture_stdout(spawn: SpawnFactory, echo: Program) -> None:
    """Echoed text is captured line by line."""
    process = await spawn(echo, "Hello World!")
    stdout = process.capture_stdout(LinesCodec())

    assert [line async for line in stdout] == ["Hello World!"]
    assert stdout.finished
    assert await stdout.wait() == 0


@pytest.mark.asyncio
async def test_capture_stderr(spawn: SpawnFactory, cat: Program) -> None:
    """Errors of a failing command are captured from stderr."""
    process = await spawn(Command(cat, ["missing-file"]).environment("LC_ALL", "C"))
    stderr = process.capture_stderr(LinesCodec())

    lines = await stderr.collect()
    assert len(lines) == 1
    assert "missing-file" in lines[0]
    assert "No such file" in lines[0]
    assert await stderr.wait() != 0


@pytest.mark.asyncio
async def test_capture_both_streams(spawn: SpawnFactory, sh: Program) -> None:
    """stdout and stderr can be captured in one chain."""
    process = await spawn(sh, "-c", "echo out; echo err >&2")
    stdout = process.capture_stdout(LinesCodec())
    stderr = stdout.capture_stderr(LinesCodec())

    assert stderr.available_streams == {Stream.STDIN}
    assert await stderr.collect() == ["err"]
    assert stderr.owner is stdout


@pytest.mark.asyncio
async def test_capture_same_stream_twice(spawn: SpawnFactory, echo: Program) -> None:
    """A stream captured once cannot be captured again in the chain."""
    process = await spawn(echo, "hi")
    stdout = process.capture_stdout(LinesCodec())

    with pytest.raises(exc.StreamUnavailable) as excinfo:
        stdout.capture_stdout(LinesCodec())
    assert excinfo.value.stream is Stream.STDOUT

    # the failed attempt left the chain untouched
    assert stdout.wrapper is None
    assert await stdout.collect() == ["hi"]


@pytest.mark.asyncio
async def test_wrapped_layer_is_owned(spawn: SpawnFactory, sh: Program) -> None:
    """Once wrapped, a layer can only be used through its wrapper."""
    process = await spawn(sh, "-c", "echo out")
    stdout = process.capture_stdout(LinesCodec())
    stderr = stdout.capture_stderr(LinesCodec())

    with pytest.raises(exc.AlreadyWrapped):
        process.capture_stderr(LinesCodec())
    with pytest.raises(exc.AlreadyWrapped):
        await stdout.__anext__()
    assert await stderr.collect() == []


@pytest.mark.asyncio
async def test_decode_error_ends_capture(spawn: SpawnFactory, sh: Program) -> None:
    """A decode error is reported once, the process keeps running."""
    process = await spawn(sh, "-c", r"printf 'ok\n\377\nlost\n'; exec sleep 30")
    stdout = process.capture_stdout(LinesCodec())

    assert await stdout.__anext__() == "ok"
    with pytest.raises(exc.CaptureError) as excinfo:
        await stdout.__anext__()

    assert excinfo.value.stream is Stream.STDOUT
    assert excinfo.value.pid == process.pid
    assert isinstance(excinfo.value.__cause__, exc.CodecError)
    assert stdout.finished
    assert [line async for line in stdout] == []
    assert stdout.returncode is None

    await stdout.aclose()
    assert process.returncode is not None


@pytest.mark.asyncio
async def test_partial_trailing_line(spawn: SpawnFactory, sh: Program) -> None:
    """An unterminated last line is still yielded."""
    process = await spawn(sh, "-c", "printf 'a\\nb'")
    stdout = process.capture_stdout(LinesCodec())
    assert await stdout.collect() == ["a", "b"]


@pytest.mark.asyncio
async def test_capture_bytes(spawn: SpawnFactory, sh: Program) -> None:
    """Raw bytes can be captured."""
    process = await spawn(sh, "-c", r"printf '\000\001\002'")
    stdout = process.capture_stdout(BytesCodec())
    assert b"".join(await stdout.collect()) == b"\x00\x01\x02"


@pytest.mark.asyncio
async def test_capture_large_output(spawn: SpawnFactory, sh: Program) -> None:
    """Output larger than the pipe buffers is streamed."""
    process = await spawn(sh, "-c", "i=0; while [ $i -lt 20000 ]; do echo $i; i=$((i+1)); done")
    stdout = process.capture_stdout(LinesCodec())

    lines = await stdout.collect()
    assert len(lines) == 20000
    assert lines[0] == "0"
    assert lines[-1] == "19999"


@pytest.mark.asyncio
async def test_capture_without_sink(spawn: SpawnFactory, echo: Program) -> None:
    """A capture without a sender below does not accept items."""
    process = await spawn(echo)
    stdout = process.capture_stdout(LinesCodec())
    with pytest.raises(TypeError):
        await stdout.send("item")


@pytest.mark.asyncio
async def test_closed_capture(spawn: SpawnFactory, echo: Program) -> None:
    """A closed capture cannot be iterated."""
    process = await spawn(echo, "hi")
    stdout = process.capture_stdout(LinesCodec())
    await stdout.aclose()

    with pytest.raises(exc.LayerClosed):
        await stdout.__anext__()
