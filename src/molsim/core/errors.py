"""
Exception types raised by the trajectory iteration and alignment code.

Each error also derives from the closest builtin exception, so callers that
only catch ``ValueError`` or ``IndexError`` keep working.
"""


class MolsimError(Exception):
    """Base class for all molsim errors."""


class OpenError(MolsimError, OSError):
    """A trajectory file could not be opened or reopened."""


class EndOfData(MolsimError, EOFError):
    """A backend was asked for a frame past the last raw frame."""


class EndOfSelection(MolsimError):
    """The iterator already sits on the last frame of its selection."""


class NoFrameRead(MolsimError, RuntimeError):
    """The current frame was requested before any frame was read."""


class OutOfRange(MolsimError, IndexError):
    """A frame index is not a member of the active frame selection."""


class DimensionMismatch(MolsimError, ValueError):
    """Point sets (or weights) have incompatible lengths or dimensions."""
