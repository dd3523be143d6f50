"""
Engine exceptions.

Rule violations are never raised; they come back as a failed ActionResult.
These exceptions cover malformed input at the transport boundary and
internal invariant breaches that indicate a bug.
"""


class MandalaError(Exception):
    """Base class for engine errors."""


class InvalidActionError(MandalaError):
    """An action record could not be parsed into a known action."""


class EngineInvariantError(MandalaError):
    """The validator and executor disagreed, or state is corrupt."""
