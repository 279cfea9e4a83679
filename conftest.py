"""Conftest.py (root-level).

We keep this in root pytest fixtures in pytest's doctest plugin to be available, as well
as avoiding conftest.py from being included in the wheel, in addition to pytest_plugin
being registered once, from the root directory.

See "pytest_plugins in non-top-level conftest files" in
https://docs.pytest.org/en/stable/deprecations.html
"""

from __future__ import annotations

import asyncio
import logging
import typing as t

import pytest
from _pytest.doctest import DoctestItem

from procpipe import Command, LinesCodec, Program

pytest_plugins = ["pytester", "procpipe.pytest_plugin"]


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    if isinstance(request._pyfuncitem, DoctestItem):
        doctest_namespace["asyncio"] = asyncio
        doctest_namespace["Command"] = Command
        doctest_namespace["LinesCodec"] = LinesCodec
        doctest_namespace["Program"] = Program


@pytest.fixture(autouse=True)
def setup_fn(caplog: pytest.LogCaptureFixture) -> None:
    """Function-level test configuration fixtures for pytest."""
    caplog.set_level(logging.DEBUG, logger="procpipe")
