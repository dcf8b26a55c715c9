"""Errors raised when a chamber refuses an operation."""


class ReactorError(Exception):
    """Base class of refused chamber operations. No state was changed."""
    pass


class SlotFull(ReactorError):
    """Every rod slot is occupied."""
    pass


class PipeOccupied(ReactorError):
    """The pipe slot already holds a pipe."""
    pass


class StarterNotReady(ReactorError):
    """A starter rod needs a linked control console before insertion."""
    pass


class InvalidOperation(ReactorError):
    """The operation does not apply to the chamber in its current state."""
    pass
