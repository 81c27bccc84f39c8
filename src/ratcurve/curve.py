"""NURBS curve class and constructors."""

from __future__ import annotations

import functools
import warnings
from collections.abc import Iterable

import numpy as np
import numpy.typing as npt

from .errors import DegenerateWeightWarning, InvalidControlPointData
from .knots import KnotVector, _validate_degree_and_count
from .point import HomogeneousPoint
from .tolerance import get_default_tolerance
from .transform import TransformLike, as_transform


def _as_points_array(points: npt.ArrayLike | None) -> npt.NDArray[np.float64]:
    """Convert Euclidean points to a float64 array of shape (n, 3).

    Raises:
        InvalidControlPointData: If points is None, not of shape (n, 3), or
            not finite.
    """
    if points is None:
        raise InvalidControlPointData("points must not be None")
    try:
        pts = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidControlPointData(f"points must be numeric: {exc}") from exc

    if pts.shape == (0,):
        return np.empty((0, 3), dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 3:  # noqa: PLR2004
        raise InvalidControlPointData(f"points must have shape (n, 3). Got {pts.shape}")
    if not np.all(np.isfinite(pts)):
        raise InvalidControlPointData("point coordinates must be finite")
    return pts


def _as_weights_array(weights: npt.ArrayLike | None, num_points: int) -> npt.NDArray[np.float64]:
    """Convert weights to a float64 array matching ``num_points``.

    Raises:
        InvalidControlPointData: If weights is None, not 1D, has the wrong
            length, or contains a negative or non-finite value.
    """
    if weights is None:
        raise InvalidControlPointData("weights must not be None")
    try:
        ws = np.asarray(weights, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidControlPointData(f"weights must be numeric: {exc}") from exc

    if ws.ndim != 1 or ws.size != num_points:
        raise InvalidControlPointData(
            f"The number of weights must match the number of points. "
            f"Got {ws.size} weights and {num_points} points"
        )
    if not np.all(np.isfinite(ws)):
        raise InvalidControlPointData("weights must be finite")
    negative = np.flatnonzero(ws < 0.0)
    if negative.size > 0:
        raise InvalidControlPointData(
            f"weights must be non-negative. Got weights[{negative[0]}] = {ws[negative[0]]}"
        )
    return ws


class NurbsCurve:
    """A rational B-spline curve in 3D.

    A curve is the triple (degree, knot vector, weighted control points) and
    always satisfies ``len(knots) == len(control_points) + degree + 1``.
    Instances are immutable; operations that change the geometry return a
    new curve.

    Attributes:
        _degree (int): Polynomial degree.
        _knots (KnotVector): Knot vector on [0, 1].
        _control_points (tuple[HomogeneousPoint, ...]): Control polygon.
    """

    _degree: int
    _knots: KnotVector
    _control_points: tuple[HomogeneousPoint, ...]

    def __init__(
        self,
        degree: int,
        knots: KnotVector | npt.ArrayLike,
        control_points: Iterable[HomogeneousPoint],
    ) -> None:
        """Initialize a curve from its canonical data.

        Args:
            degree (int): Polynomial degree. Must be at least 1.
            knots (KnotVector | npt.ArrayLike): Knot vector, or values that
                form a valid one.
            control_points (Iterable[HomogeneousPoint]): Control points, in
                control polygon order.

        Raises:
            InvalidCurveDefinition: If degree is not an integer, is smaller than 1,
                or the number of knots is not ``len(control_points) + degree + 1``.
            InsufficientControlPoints: If there are at most ``degree``
                control points.
            InvalidKnotVector: If ``knots`` are not valid knot values.
            InvalidControlPointData: If an element is not a HomogeneousPoint.
        """
        points = tuple(control_points)
        for i, point in enumerate(points):
            if not isinstance(point, HomogeneousPoint):
                raise InvalidControlPointData(
                    f"control_points[{i}] must be a HomogeneousPoint. Got {type(point).__name__}"
                )

        _validate_degree_and_count(degree, len(points))
        degree = int(degree)

        knot_vector = knots if isinstance(knots, KnotVector) else KnotVector(knots)
        knot_vector.validate_for(degree, len(points))

        self._degree = degree
        self._knots = knot_vector
        self._control_points = points

    @classmethod
    def from_points(cls, points: npt.ArrayLike | None, degree: int) -> NurbsCurve:
        """Create a non-rational curve with a clamped uniform knot vector.

        Every control point gets weight 1.

        Args:
            points (npt.ArrayLike | None): Euclidean control points, shape (n, 3).
            degree (int): Polynomial degree. Must be at least 1.

        Returns:
            NurbsCurve: The curve.

        Raises:
            InvalidControlPointData: If points is None or malformed.
            InsufficientControlPoints: If points is empty or ``n <= degree``.
            InvalidCurveDefinition: If degree is not an integer or is smaller than 1.

        Example:
            >>> curve = NurbsCurve.from_points([[0, 0, 0], [1, 1, 0], [2, 0, 0], [3, 1, 0]], 3)
            >>> curve.knots.values
            array([0., 0., 0., 0., 1., 1., 1., 1.])
        """
        pts = _as_points_array(points)
        knots = KnotVector.clamped_uniform(degree, pts.shape[0])
        return cls(degree, knots, (HomogeneousPoint._from_validated(*pt, 1.0) for pt in pts))

    @classmethod
    def from_weighted_points(
        cls,
        points: npt.ArrayLike | None,
        weights: npt.ArrayLike | None,
        degree: int,
    ) -> NurbsCurve:
        """Create a rational curve with a clamped uniform knot vector.

        Args:
            points (npt.ArrayLike | None): Euclidean control points, shape (n, 3).
            weights (npt.ArrayLike | None): One non-negative weight per point.
            degree (int): Polynomial degree. Must be at least 1.

        Returns:
            NurbsCurve: The curve.

        Raises:
            InvalidControlPointData: If points or weights are None or
                malformed, their lengths differ, or a weight is negative.
            InsufficientControlPoints: If points is empty or ``n <= degree``.
            InvalidCurveDefinition: If degree is not an integer or is smaller than 1.

        Warns:
            DegenerateWeightWarning: If some weights are zero.
        """
        pts = _as_points_array(points)
        ws = _as_weights_array(weights, pts.shape[0])
        knots = KnotVector.clamped_uniform(degree, pts.shape[0])

        zero = np.flatnonzero(ws == 0.0)
        if zero.size > 0:
            warnings.warn(
                f"Control point with zero weight (point at infinity) at indices {zero.tolist()}.",
                DegenerateWeightWarning,
                stacklevel=2,
            )

        return cls(
            degree,
            knots,
            (HomogeneousPoint._from_validated(*pt, w) for pt, w in zip(pts, ws, strict=True)),
        )

    @property
    def degree(self) -> int:
        """Get the polynomial degree."""
        return self._degree

    @property
    def knots(self) -> KnotVector:
        """Get the knot vector."""
        return self._knots

    @property
    def control_points(self) -> tuple[HomogeneousPoint, ...]:
        """Get the control points, in control polygon order."""
        return self._control_points

    @property
    def num_control_points(self) -> int:
        """Get the number of control points."""
        return len(self._control_points)

    @property
    def domain(self) -> tuple[float, float]:
        """Get the parametric domain ``(knots[degree], knots[-degree - 1])``."""
        return self._knots.domain(self._degree)

    @functools.cached_property
    def _xyzw(self) -> npt.NDArray[np.float64]:
        arr = np.array([pt.as_array() for pt in self._control_points], dtype=np.float64)
        arr.flags.writeable = False
        return arr

    @property
    def weights(self) -> npt.NDArray[np.float64]:
        """Get the control point weights (read-only), shape (n,)."""
        return self._xyzw[:, 3]

    @property
    def euclidean_control_points(self) -> npt.NDArray[np.float64]:
        """Get the Euclidean control point coordinates (read-only), shape (n, 3)."""
        return self._xyzw[:, :3]

    @functools.cached_property
    def homogeneous_control_points(self) -> npt.NDArray[np.float64]:
        """Get the weighted control points ``(x*w, y*w, z*w, w)``, shape (n, 4).

        This is the form consumed by rational evaluators.
        """
        arr = self._xyzw.copy()
        arr[:, :3] *= arr[:, 3:]
        arr.flags.writeable = False
        return arr

    @property
    def is_rational(self) -> bool:
        """Check whether any weight differs from 1."""
        tol = get_default_tolerance(np.float64)
        return bool(np.any(np.abs(self.weights - 1.0) > tol))

    @classmethod
    def _from_valid_parts(
        cls,
        degree: int,
        knots: KnotVector,
        control_points: tuple[HomogeneousPoint, ...],
    ) -> NurbsCurve:
        """Build a curve from parts already known to satisfy the invariants."""
        curve = cls.__new__(cls)
        curve._degree = degree
        curve._knots = knots
        curve._control_points = control_points
        return curve

    def transform(self, matrix: TransformLike) -> NurbsCurve:
        """Apply an affine transformation to the control points.

        Degree and knot vector are kept, weights are unchanged and the
        control points keep their order. The curve itself is not modified.

        Args:
            matrix (TransformLike): A :class:`~ratcurve.transform.Transform`
                or an affine matrix accepted by it.

        Returns:
            NurbsCurve: The transformed curve.

        Raises:
            InvalidTransformation: If ``matrix`` is malformed.
        """
        xform = as_transform(matrix)
        xyz = xform.apply(self.euclidean_control_points)
        weights = self.weights
        points = tuple(
            HomogeneousPoint._from_validated(x, y, z, w)
            for (x, y, z), w in zip(xyz, weights, strict=True)
        )
        return NurbsCurve._from_valid_parts(self._degree, self._knots, points)

    def reversed(self) -> NurbsCurve:
        """Get the same curve traversed in the opposite direction."""
        return NurbsCurve._from_valid_parts(
            self._degree, self._knots.reversed(), self._control_points[::-1]
        )

    def is_close(self, other: NurbsCurve, tol: float | None = None) -> bool:
        """Check whether two curves have the same data up to ``tol``.

        Args:
            other (NurbsCurve): Curve to compare with.
            tol (float | None): Absolute tolerance for knots and control
                point coordinates. Defaults to the float64 default tolerance.

        Returns:
            bool: True if degrees match and knots and control points agree.
        """
        tol = get_default_tolerance(np.float64) if tol is None else tol
        if self._degree != other._degree or self.num_control_points != other.num_control_points:
            return False
        return bool(
            np.allclose(self._knots.values, other._knots.values, rtol=0.0, atol=tol)
            and np.allclose(self._xyzw, other._xyzw, rtol=0.0, atol=tol)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NurbsCurve):
            return NotImplemented
        return (
            self._degree == other._degree
            and self._knots == other._knots
            and self._control_points == other._control_points
        )

    def __hash__(self) -> int:
        return hash((self._degree, self._knots, self._control_points))

    def __repr__(self) -> str:
        return (
            f"NurbsCurve(degree={self._degree}, knots={self._knots!r}, "
            f"control_points={list(self._control_points)!r})"
        )
