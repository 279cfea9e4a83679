"""Tests for procpipe.process."""

from __future__ import annotations

import asyncio
import signal
import typing as t

import pytest

from procpipe import exc
from procpipe.command import Command
from procpipe.control import Stream
from procpipe.process import Process
from procpipe.program import Program
from procpipe.test import pid_exists

if t.TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    SpawnFactory = Callable[..., Awaitable[Process]]


@pytest.mark.asyncio
async def test_spawn(spawn: SpawnFactory, echo: Program) -> None:
    """Spawned processes report their pid and exit status."""
    process = await spawn(echo, "Hello World!")

    assert process.pid > 0
    assert process.command.argv == ["echo", "Hello World!"]
    assert process.available_streams == {Stream.STDIN, Stream.STDOUT, Stream.STDERR}
    assert await process == 0
    assert process.returncode == 0


@pytest.mark.asyncio
async def test_exit_status(spawn: SpawnFactory, sh: Program) -> None:
    """Exit statuses are reported as-is."""
    process = await spawn(sh, "-c", "exit 3")
    assert await process.wait() == 3


@pytest.mark.asyncio
async def test_spawn_failure() -> None:
    """The OS refusing to spawn raises CannotSpawnCommand."""
    command = Command(Program.unchecked("procpipe-program-that-does-not-exist"))

    with pytest.raises(exc.CannotSpawnCommand) as excinfo:
        await Process.spawn(command)

    assert excinfo.value.pid is None
    assert str(command) in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_kill(spawn: SpawnFactory, sleep: Program) -> None:
    """Killed processes finish with the kill signal."""
    process = await spawn(sleep, "30")
    process.kill()
    assert await process.wait() == -signal.SIGKILL


@pytest.mark.asyncio
async def test_kill_reaped_process(spawn: SpawnFactory, echo: Program) -> None:
    """A reaped process cannot be killed."""
    process = await spawn(echo)
    await process.wait()

    with pytest.raises(exc.CannotKillProcess) as excinfo:
        process.kill()
    assert excinfo.value.pid == process.pid


@pytest.mark.asyncio
async def test_aclose_kills_and_reaps(sleep: Program) -> None:
    """Closing a running process kills and reaps it."""
    process = await Command(sleep, ["30"]).spawn()
    pid = process.pid

    await process.aclose()

    assert process.closed
    assert process.returncode == -signal.SIGKILL
    assert not pid_exists(pid)
    assert process.available_streams == frozenset()

    # idempotent
    await process.aclose()


@pytest.mark.asyncio
async def test_async_with(sleep: Program) -> None:
    """Leaving ``async with`` releases the process."""
    async with await Command(sleep, ["30"]).spawn() as process:
        assert process.returncode is None
    assert process.returncode == -signal.SIGKILL


@pytest.mark.asyncio
async def test_aclose_after_exit(spawn: SpawnFactory, echo: Program) -> None:
    """Closing a finished process keeps its exit status."""
    process = await spawn(echo, "unread output")
    assert await process.wait() == 0

    await process.aclose()
    assert process.returncode == 0


@pytest.mark.asyncio
async def test_take_pipe_once(spawn: SpawnFactory, cat: Program) -> None:
    """Each pipe can be taken once."""
    process = await spawn(cat)

    stdin = process.take_stdin_pipe()
    assert process.available_streams == {Stream.STDOUT, Stream.STDERR}

    with pytest.raises(exc.StreamUnavailable) as excinfo:
        process.take_stdin_pipe()
    assert excinfo.value.stream is Stream.STDIN
    assert str(excinfo.value) == "stdin of 'cat' is already captured"

    stdout = process.take_stdout_pipe()
    stdin.write(b"raw\n")
    await stdin.drain()
    assert await stdout.readline() == b"raw\n"

    stdin.close()
    assert await stdout.read() == b""
    assert await process.wait() == 0


@pytest.mark.asyncio
async def test_closed_process_is_unusable(echo: Program) -> None:
    """Streams of a closed process cannot be taken or captured."""
    process = await Command(echo).spawn()
    await process.aclose()

    with pytest.raises(exc.LayerClosed):
        process.take_stdout_pipe()


@pytest.mark.asyncio
async def test_wait_is_shared(spawn: SpawnFactory, sh: Program) -> None:
    """Concurrent waiters get the same exit status."""
    process = await spawn(sh, "-c", "exit 7")
    assert await asyncio.gather(process.wait(), process.wait()) == [7, 7]


@pytest.mark.asyncio
async def test_spawn_logs(
    spawn: SpawnFactory,
    echo: Program,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Spawning is logged with the command and pid."""
    process = await spawn(echo, "logged")
    assert f"spawned 'echo logged' (pid: {process.pid})" in caplog.text


@pytest.mark.asyncio
async def test_aclose_with_unread_taken_pipe(sh: Program) -> None:
    """Closing does not wait for a taken pipe nobody reads."""
    process = await Command(sh, ["-c", "while :; do echo y; done"]).spawn()
    stdout = process.take_stdout_pipe()
    await asyncio.sleep(0.3)

    await asyncio.wait_for(process.aclose(), 5)

    assert process.returncode == -signal.SIGKILL
    assert not pid_exists(process.pid)
    assert await asyncio.wait_for(stdout.read(), 5)
