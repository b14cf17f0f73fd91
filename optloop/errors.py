"""Exception hierarchy raised by optloop.

Each error also derives from the builtin exception closest in meaning, so
callers that catch ``ValueError`` or ``NotImplementedError`` keep working.
"""

from __future__ import annotations


class OptloopError(Exception):
    """Base class of all optloop errors."""


class InvalidParameterError(OptloopError, ValueError):
    """A solver or executor was configured with an out-of-range value."""


class NotImplementedOperatorError(OptloopError, NotImplementedError):
    """The operator does not provide the requested capability."""


class NumericalFailureError(OptloopError, ArithmeticError):
    """A numerical routine failed, e.g. inverting a singular Hessian."""


class ImpossibleStateError(OptloopError, RuntimeError):
    """An internal invariant was violated.

    Raised for programmer errors such as reading a gradient that was never
    computed, or for corrupted numerical input that cannot occur with valid
    data.
    """


__all__ = [
    "ImpossibleStateError",
    "InvalidParameterError",
    "NotImplementedOperatorError",
    "NumericalFailureError",
    "OptloopError",
]
