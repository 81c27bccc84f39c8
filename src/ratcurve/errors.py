"""Exception and warning types raised while building curves and transforms.

Every curve validation error derives from :class:`InvalidCurveDefinition`,
which is itself a :class:`ValueError`, so callers can catch either the
specific failure or the whole family.
"""


class InvalidCurveDefinition(ValueError):
    """The degree, knots and control points do not form a valid curve."""


class InvalidKnotVector(InvalidCurveDefinition):
    """A knot vector is not 1D, finite, non-decreasing and within [0, 1]."""


class InvalidControlPointData(InvalidCurveDefinition):
    """Control point coordinates or weights are malformed."""


class InsufficientControlPoints(InvalidCurveDefinition):
    """Fewer than ``degree + 1`` control points were supplied."""


class InvalidTransformation(ValueError):
    """A matrix is not a well-formed affine transformation."""


class DegenerateWeightWarning(UserWarning):
    """A control point has zero weight (a point at infinity)."""
