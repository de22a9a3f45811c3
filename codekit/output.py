"""Console output for codekit.

All user-facing text goes through :func:`message`, which filters on the
global verbosity level and adds a colored prefix per message type.
"""

import json
import sys
from enum import Enum, IntEnum
from typing import Any, TextIO


class MessageType(Enum):
    """Kind of message, controls prefix, color and stream."""

    NORMAL = "normal"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"


class VerbosityLevel(IntEnum):
    """Minimum ``-v`` count required for a message to be shown."""

    ALWAYS = 0
    VERBOSE = 1
    EXTRA_VERBOSE = 2
    DEBUG = 3


_COLORS = {
    MessageType.INFO: "\033[34m",
    MessageType.SUCCESS: "\033[32m",
    MessageType.WARNING: "\033[33m",
    MessageType.ERROR: "\033[31m",
    MessageType.DEBUG: "\033[90m",
}
_RESET = "\033[0m"

_PREFIXES = {
    MessageType.INFO: "i ",
    MessageType.SUCCESS: "✓ ",
    MessageType.WARNING: "⚠ ",
    MessageType.ERROR: "✗ ",
    MessageType.DEBUG: "[debug] ",
}


class OutputManager:
    """Holds the output settings for the current process."""

    def __init__(self, verbosity: int = 0, use_color: bool = False):
        self.verbosity = verbosity
        self.use_color = use_color

    def should_show(self, verbosity: VerbosityLevel) -> bool:
        return self.verbosity >= verbosity

    def _stream(self, msg_type: MessageType) -> TextIO:
        if msg_type in (MessageType.ERROR, MessageType.WARNING):
            return sys.stderr
        return sys.stdout

    def format(self, text: str, msg_type: MessageType) -> str:
        """Apply prefix and color to *text*.

        Multi-line messages and empty lines are left without a prefix so
        that section layouts stay intact.
        """
        if msg_type == MessageType.NORMAL or not text.strip():
            return text

        leading = text[: len(text) - len(text.lstrip("\n"))]
        body = text.lstrip("\n")
        formatted = f"{_PREFIXES[msg_type]}{body}"
        if self.use_color:
            formatted = f"{_COLORS[msg_type]}{formatted}{_RESET}"
        return leading + formatted

    def message(
        self,
        text: str,
        msg_type: MessageType = MessageType.NORMAL,
        verbosity: VerbosityLevel = VerbosityLevel.ALWAYS,
    ) -> None:
        if not self.should_show(verbosity):
            return
        print(self.format(text, msg_type), file=self._stream(msg_type))

    def json(self, data: Any) -> None:
        print(json.dumps(data, indent=2, default=str))


_output = OutputManager()


def get_output() -> OutputManager:
    """Return the process-wide output manager."""
    return _output


def message(
    text: str,
    msg_type: MessageType = MessageType.NORMAL,
    verbosity: VerbosityLevel = VerbosityLevel.ALWAYS,
) -> None:
    """Print *text* if the current verbosity allows it.

    Args:
        text: Message to print
        msg_type: Type of message (selects prefix, color and stream)
        verbosity: Minimum verbosity level required to show the message
    """
    _output.message(text, msg_type, verbosity)


def output_json(data: Any) -> None:
    """Print *data* as indented JSON on stdout (used by ``--json``)."""
    _output.json(data)
