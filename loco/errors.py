"""
Exception hierarchy for the loco toolkit.
"""


class LocoError(Exception):
    """Base class for every error raised by loco."""


class SessionStateError(LocoError):
    """An aggregator operation was called in the wrong session state."""


class StorageError(LocoError):
    """The persistence layer could not read or write a payload."""


class ReplayFormatError(LocoError):
    """A recorded sample file contains a row that cannot be parsed."""

    def __init__(self, line: int, message: str) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line
