# exactgeo/geometry/errors.py

"""
Error kinds raised by the kernel.

Callers branch on the exception type, never on the message text. Parallel or
coincident configurations are *not* errors: the intersection routines return
them as ordinary results.

Division by a zero Rational is a plain ``ZeroDivisionError`` and is never
caught inside the kernel.
"""


class GeometryError(Exception):
    """Base class for recoverable kernel errors."""


class DegenerateConstruction(GeometryError, ValueError):
    """The requested object is not well defined for the given inputs."""


class UnresolvedFreePoint(GeometryError, LookupError):
    """A free point has no coordinates and no solvable constraint."""

    def __init__(self, name, message=None):
        self.name = name
        super().__init__(message or f"free point '{name}' has no coordinate binding")


class IndeterminatePredicate(GeometryError):
    """The sign of an oracle value could not be decided within the refinement bound."""

    def __init__(self, expression, interval, depth):
        self.expression = expression
        self.interval = interval
        self.depth = depth
        lo, hi = interval
        super().__init__(
            f"cannot decide the sign of {expression}: interval [{lo},{hi}] "
            f"still contains zero after {depth} refinement rounds"
        )
