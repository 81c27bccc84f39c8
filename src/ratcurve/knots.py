"""Knot vectors on the normalized parametric domain [0, 1].

This module provides the immutable :class:`KnotVector` value type used by
:class:`ratcurve.curve.NurbsCurve`, together with the generator of clamped
uniform knot vectors used when a curve is built from bare points.
"""

from __future__ import annotations

import functools
import numbers
from collections.abc import Iterator
from typing import Any, cast, overload

import numpy as np
import numpy.typing as npt

from ._knots_impl import (
    _count_close_impl,
    _fill_clamped_uniform_knots_impl,
    _first_decreasing_index_impl,
    _get_unique_knots_and_multiplicity_impl,
    _snap_to_unit_interval_impl,
)
from .errors import InsufficientControlPoints, InvalidCurveDefinition, InvalidKnotVector
from .tolerance import ensure_float_dtype, get_strict_tolerance


def _validate_degree_and_count(degree: int, num_points: int) -> None:
    """Check that ``num_points`` control points can carry a curve of ``degree``.

    Args:
        degree (int): Curve degree.
        num_points (int): Number of control points.

    Raises:
        InvalidCurveDefinition: If degree is not an integer or is smaller than 1.
        InsufficientControlPoints: If ``num_points <= degree``.
    """
    if isinstance(degree, bool) or not isinstance(degree, numbers.Integral):
        raise InvalidCurveDefinition(f"degree must be an integer. Got {degree!r}")
    if degree < 1:
        raise InvalidCurveDefinition(f"degree must be at least 1. Got {degree}")
    if num_points <= degree:
        raise InsufficientControlPoints(
            f"A curve of degree {degree} needs at least {degree + 1} control points. "
            f"Got {num_points}"
        )


def create_clamped_uniform_knot_vector(
    degree: int,
    num_points: int,
    dtype: npt.DTypeLike = np.float64,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a clamped uniform knot vector on [0, 1].

    The first and last ``degree + 1`` knots are 0 and 1 respectively, so the
    curve interpolates its end control points. The ``num_points - degree - 1``
    interior knots are ``i / (num_points - degree)``.

    Args:
        degree (int): Curve degree. Must be at least 1.
        num_points (int): Number of control points. Must exceed ``degree``.
        dtype (npt.DTypeLike): float32 or float64. Defaults to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector of length
            ``num_points + degree + 1``.

    Raises:
        InvalidCurveDefinition: If degree is not an integer or is smaller than 1.
        InsufficientControlPoints: If ``num_points <= degree``.
        ValueError: If dtype is not float32 or float64.

    Example:
        >>> create_clamped_uniform_knot_vector(2, 4)
        array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    _validate_degree_and_count(degree, num_points)
    dtype_obj = ensure_float_dtype(dtype)

    knots = np.empty(num_points + degree + 1, dtype=dtype_obj)
    _fill_clamped_uniform_knots_impl(knots, degree)
    return knots


def _as_knot_array(values: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Convert knot input to a fresh 1D floating array.

    Integer input is promoted to float64; float32 and float64 are preserved.

    Raises:
        InvalidKnotVector: If the values are not a 1D real sequence.
    """
    try:
        knots = np.array(values)
    except (TypeError, ValueError) as exc:
        raise InvalidKnotVector(f"knots must be a 1D sequence of real numbers: {exc}") from exc

    if knots.ndim != 1:
        raise InvalidKnotVector(f"knots must be a 1D sequence. Got shape {knots.shape}")

    if np.issubdtype(knots.dtype, np.integer) or knots.dtype == np.bool_:
        knots = knots.astype(np.float64)
    elif knots.dtype not in (np.float32, np.float64):
        if not np.issubdtype(knots.dtype, np.floating):
            raise InvalidKnotVector(f"knots must be real numbers. Got dtype {knots.dtype}")
        knots = knots.astype(np.float64)

    return cast(npt.NDArray[np.float32 | np.float64], knots)


class KnotVector:
    """An immutable, non-decreasing knot vector on [0, 1].

    Values lying within the strict tolerance of the dtype outside [0, 1] are
    snapped onto the bounds at construction. The backing array is read-only,
    so instances can be shared freely between curves and threads.

    Attributes:
        _knots (npt.NDArray[np.float32 | np.float64]): Read-only knot values.
        _tol (float): Tolerance used for snapping and multiplicity queries.
    """

    _knots: npt.NDArray[np.float32 | np.float64]
    _tol: float

    def __init__(self, values: npt.ArrayLike) -> None:
        """Initialize a knot vector from explicit values.

        Args:
            values (npt.ArrayLike): Knot values. Must be finite, non-decreasing
                and contained in [0, 1].

        Raises:
            InvalidKnotVector: If the values are not 1D, not finite, decrease
                somewhere, are negative, or exceed 1.
        """
        knots = _as_knot_array(values)
        self._tol = get_strict_tolerance(knots.dtype)
        KnotVector._validate_values(knots, self._tol)
        knots.flags.writeable = False
        self._knots = knots

    @staticmethod
    def _validate_values(knots: npt.NDArray[np.float32 | np.float64], tol: float) -> None:
        """Validate knot values in place, snapping them onto [0, 1] if close.

        Raises:
            InvalidKnotVector: If any rule is violated.
        """
        if knots.size == 0:
            raise InvalidKnotVector("knots must not be empty")

        if not np.all(np.isfinite(knots)):
            raise InvalidKnotVector("knots must be finite")

        index = _first_decreasing_index_impl(knots)
        if index >= 0:
            raise InvalidKnotVector(
                f"knots must be non-decreasing. Got knots[{index}] = {knots[index]} > "
                f"knots[{index + 1}] = {knots[index + 1]}"
            )

        _snap_to_unit_interval_impl(knots, tol)

        if knots[0] < 0.0:
            raise InvalidKnotVector(f"knots must be non-negative. Got {knots[0]}")

        if knots[-1] > 1.0:
            raise InvalidKnotVector(
                f"knots must lie in the normalized domain [0, 1]. Got {knots[-1]}"
            )

    @classmethod
    def clamped_uniform(
        cls, degree: int, num_points: int, dtype: npt.DTypeLike = np.float64
    ) -> KnotVector:
        """Create a clamped uniform knot vector.

        See :func:`create_clamped_uniform_knot_vector`.
        """
        return cls(create_clamped_uniform_knot_vector(degree, num_points, dtype))

    @classmethod
    def normalized(cls, values: npt.ArrayLike) -> KnotVector:
        """Create a knot vector by affinely mapping ``values`` onto [0, 1].

        Args:
            values (npt.ArrayLike): Finite, non-decreasing knots on any domain.

        Returns:
            KnotVector: Knots with the first value at 0 and the last at 1.

        Raises:
            InvalidKnotVector: If the values are decreasing somewhere or the
                first and last values coincide.

        Example:
            >>> KnotVector.normalized([2, 2, 3, 4, 4]).values
            array([0. , 0. , 0.5, 1. , 1. ])
        """
        knots = _as_knot_array(values)
        if knots.size == 0 or not np.all(np.isfinite(knots)):
            raise InvalidKnotVector("knots must be a non-empty sequence of finite values")

        index = _first_decreasing_index_impl(knots)
        if index >= 0:
            raise InvalidKnotVector(f"knots must be non-decreasing. Got decrease at index {index}")

        start, end = knots[0], knots[-1]
        if not end > start:
            raise InvalidKnotVector("knots must span a non-empty interval to be normalized")

        return cls((knots - start) / (end - start))

    def validate_for(self, degree: int, num_points: int) -> None:
        """Check that this knot vector matches a curve's degree and point count.

        Args:
            degree (int): Curve degree.
            num_points (int): Number of control points.

        Raises:
            InvalidCurveDefinition: If ``len(self) != num_points + degree + 1``.
        """
        expected = num_points + degree + 1
        if len(self) != expected:
            raise InvalidCurveDefinition(
                f"The number of knots must equal the number of control points + degree + 1 "
                f"({num_points} + {degree} + 1 = {expected}). Got {len(self)} knots"
            )

    @property
    def values(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the (read-only) knot values.

        Returns:
            npt.NDArray[np.float32 | np.float64]: The knot values.
        """
        return self._knots

    @property
    def dtype(self) -> np.dtype[np.floating[Any]]:
        """Get the floating-point type of the knots."""
        return cast(np.dtype[np.floating[Any]], self._knots.dtype)

    @property
    def tolerance(self) -> float:
        """Get the tolerance used for knot comparisons."""
        return self._tol

    def domain(self, degree: int) -> tuple[float, float]:
        """Get the parametric domain of a curve of ``degree`` on these knots.

        Args:
            degree (int): Curve degree.

        Returns:
            tuple[float, float]: ``(knots[degree], knots[-degree - 1])``.
        """
        return float(self._knots[degree]), float(self._knots[-degree - 1])

    def is_clamped(self, degree: int) -> bool:
        """Check whether the first and last ``degree + 1`` knots coincide.

        Args:
            degree (int): Curve degree.

        Returns:
            bool: True if both ends are clamped, False otherwise.
        """
        if self._knots.size < 2 * (degree + 1):
            return False
        first = self._knots[: degree + 1]
        last = self._knots[-degree - 1 :]
        return bool(
            np.all(np.abs(first - first[0]) <= self._tol)
            and np.all(np.abs(last - last[-1]) <= self._tol)
        )

    def multiplicity(self, value: float) -> int:
        """Count how many knots coincide with ``value`` up to tolerance."""
        return int(_count_close_impl(self._knots, self.dtype.type(value), self._tol))

    @functools.cached_property
    def _unique_and_multiplicity(
        self,
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
        unique, mults = _get_unique_knots_and_multiplicity_impl(
            np.array(self._knots), self._tol
        )
        unique.flags.writeable = False
        mults.flags.writeable = False
        return unique, mults

    def unique_knots_and_multiplicity(
        self,
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
        """Get the distinct knot values and their multiplicities.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
                Unique values and multiplicities, both read-only and of equal
                length.

        Example:
            >>> KnotVector([0, 0, 0, 0.5, 1, 1, 1]).unique_knots_and_multiplicity()
            (array([0. , 0.5, 1. ]), array([3, 1, 3]))
        """
        return self._unique_and_multiplicity

    def reversed(self) -> KnotVector:
        """Get the knot vector of the reversed parametrization ``u -> 1 - u``."""
        return KnotVector(1.0 - self._knots[::-1])

    def __len__(self) -> int:
        return int(self._knots.size)

    @overload
    def __getitem__(self, index: int) -> float: ...

    @overload
    def __getitem__(self, index: slice) -> npt.NDArray[np.float32 | np.float64]: ...

    def __getitem__(
        self, index: int | slice
    ) -> float | npt.NDArray[np.float32 | np.float64]:
        if isinstance(index, slice):
            return self._knots[index]
        return float(self._knots[index])

    def __iter__(self) -> Iterator[float]:
        return (float(knot) for knot in self._knots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KnotVector):
            return NotImplemented
        return self.dtype == other.dtype and bool(np.array_equal(self._knots, other._knots))

    def __hash__(self) -> int:
        return hash((self._knots.dtype.str, tuple(self._knots.tolist())))

    def __repr__(self) -> str:
        return f"KnotVector({self._knots.tolist()!r}, dtype={self.dtype.name})"
