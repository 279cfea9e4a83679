"""Tests for procpipe's pytest plugin."""

from __future__ import annotations

import textwrap

import pytest

from procpipe import pytest_plugin


def test_require_program_skips() -> None:
    """Missing programs skip the test."""
    with pytest.raises(pytest.skip.Exception, match="not available"):
        pytest_plugin.require_program("procpipe-program-that-does-not-exist")


def test_plugin(pytester: pytest.Pytester) -> None:
    """The spawn fixture releases what it spawned."""
    pytester.makeini(
        textwrap.dedent(
            """
[pytest]
asyncio_mode = strict
asyncio_default_fixture_loop_scope = function
""",
        ),
    )
    pytester.makeconftest('pytest_plugins = ["procpipe.pytest_plugin"]')
    pytester.makepyfile(
        textwrap.dedent(
            """
import pytest

from procpipe.test import pid_exists

PIDS = []


@pytest.mark.asyncio
async def test_spawn(spawn, sleep):
    process = await spawn(sleep, "30")
    PIDS.append(process.pid)
    assert process.returncode is None


def test_released():
    assert PIDS
    assert not pid_exists(PIDS[0])
""",
        ),
    )

    result = pytester.runpytest("-p", "no:cacheprovider")
    result.assert_outcomes(passed=2)
