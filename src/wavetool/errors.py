"""Exception types raised by wavetool.

Every failure is fatal to the operation that raised it; nothing is retried.
"""

from pathlib import Path


class WavetoolError(Exception):
    """Base class for all wavetool errors."""


class MalformedInputError(WavetoolError, ValueError):
    """Input data does not describe a usable wavetable or edit."""


class InvariantViolationError(WavetoolError, ArithmeticError):
    """An edited spectrum no longer describes a real-valued cycle."""

    def __init__(self, message: str, residue: float) -> None:
        self.residue = residue
        super().__init__(message)


class ResourceError(WavetoolError, OSError):
    """A wavetable file could not be opened, read or written."""

    def __init__(self, message: str, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")
