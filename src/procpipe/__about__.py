"""Metadata package for procpipe."""

from __future__ import annotations

__title__ = "procpipe"
__package_name__ = "procpipe"
__version__ = "0.1.0"
__description__ = "Typed, composable asyncio pipes to child processes"
__email__ = "procpipe@users.noreply.github.com"
__author__ = "procpipe contributors"
__github__ = "https://github.com/procpipe/procpipe"
__docs__ = "https://github.com/procpipe/procpipe#readme"
__tracker__ = "https://github.com/procpipe/procpipe/issues"
__pypi__ = "https://pypi.org/project/procpipe/"
__license__ = "MIT"
__copyright__ = "Copyright 2026- procpipe contributors"
