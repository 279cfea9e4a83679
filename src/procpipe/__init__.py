"""procpipe, typed and composable asyncio pipes to child processes."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .capture import Capture
from .codec import BytesCodec, Decoder, Encoder, LinesCodec
from .command import Command
from .control import Control, Stream
from .process import Process
from .program import Program
from .send_stdin import SendStdin

__all__ = (
    "BytesCodec",
    "Capture",
    "Command",
    "Control",
    "Decoder",
    "Encoder",
    "LinesCodec",
    "Process",
    "Program",
    "SendStdin",
    "Stream",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
)
