"""Weighted control points in homogeneous coordinates."""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from typing import cast

import numpy as np
import numpy.typing as npt

from .errors import DegenerateWeightWarning, InvalidControlPointData
from .tolerance import get_default_tolerance
from .transform import TransformLike, as_transform


def _check_weight(weight: float, stacklevel: int) -> float:
    """Validate a control point weight.

    Args:
        weight (float): The weight.
        stacklevel (int): Stack level of the emitted warning.

    Returns:
        float: The weight as a Python float.

    Raises:
        InvalidControlPointData: If the weight is negative or not finite.

    Warns:
        DegenerateWeightWarning: If the weight is zero.
    """
    w = float(weight)
    if not np.isfinite(w):
        raise InvalidControlPointData(f"weight must be finite. Got {weight}")
    if w < 0.0:
        raise InvalidControlPointData(f"weight must be non-negative. Got {weight}")
    if w == 0.0:
        warnings.warn(
            "Control point with zero weight (point at infinity).",
            DegenerateWeightWarning,
            stacklevel=stacklevel,
        )
    return w


class HomogeneousPoint:
    """A 3D point with a non-negative weight.

    The point stores its Euclidean coordinates ``(x, y, z)`` and its weight
    ``w``. The weighted form ``(x*w, y*w, z*w, w)`` consumed by rational
    evaluators is available through :attr:`weighted`.

    Instances are immutable and hashable.

    Attributes:
        _xyzw (npt.NDArray[np.float64]): Read-only array ``(x, y, z, w)``.
    """

    _xyzw: npt.NDArray[np.float64]

    def __init__(self, x: float, y: float, z: float, w: float) -> None:
        """Initialize a point from Euclidean coordinates and a weight.

        Args:
            x (float): Euclidean x coordinate.
            y (float): Euclidean y coordinate.
            z (float): Euclidean z coordinate.
            w (float): Weight. Must be non-negative; zero is accepted with a
                :class:`DegenerateWeightWarning`.

        Raises:
            InvalidControlPointData: If a coordinate is not finite or the
                weight is negative.
        """
        weight = _check_weight(w, stacklevel=3)
        xyzw = np.array([x, y, z, weight], dtype=np.float64)
        if not np.all(np.isfinite(xyzw)):
            raise InvalidControlPointData(f"coordinates must be finite. Got {(x, y, z)}")
        xyzw.flags.writeable = False
        self._xyzw = xyzw

    @classmethod
    def from_point(cls, point: npt.ArrayLike) -> HomogeneousPoint:
        """Create a point of weight 1 from Euclidean coordinates.

        Args:
            point (npt.ArrayLike): Sequence ``(x, y, z)``.

        Raises:
            InvalidControlPointData: If point is not a finite 3D point.
        """
        x, y, z = _as_point3(point)
        return cls(x, y, z, 1.0)

    @classmethod
    def from_point_and_weight(cls, point: npt.ArrayLike, weight: float) -> HomogeneousPoint:
        """Create a point from Euclidean coordinates and an explicit weight.

        Raises:
            InvalidControlPointData: If point is not a finite 3D point or
                the weight is negative or not finite.

        Warns:
            DegenerateWeightWarning: If the weight is zero.
        """
        x, y, z = _as_point3(point)
        return cls._from_validated(x, y, z, _check_weight(weight, stacklevel=3))

    @classmethod
    def from_weighted(cls, xw: float, yw: float, zw: float, w: float) -> HomogeneousPoint:
        """Create a point from its weighted form ``(x*w, y*w, z*w, w)``.

        Raises:
            InvalidControlPointData: If the weight is not strictly positive,
                since the Euclidean point is then undefined.
        """
        weight = float(w)
        if not weight > 0.0:
            raise InvalidControlPointData(
                f"weight must be positive to recover the Euclidean point. Got {w}"
            )
        return cls(xw / weight, yw / weight, zw / weight, weight)

    @property
    def x(self) -> float:
        """Euclidean x coordinate."""
        return float(self._xyzw[0])

    @property
    def y(self) -> float:
        """Euclidean y coordinate."""
        return float(self._xyzw[1])

    @property
    def z(self) -> float:
        """Euclidean z coordinate."""
        return float(self._xyzw[2])

    @property
    def w(self) -> float:
        """Weight."""
        return float(self._xyzw[3])

    @property
    def euclidean(self) -> npt.NDArray[np.float64]:
        """Get the Euclidean coordinates ``(x, y, z)`` (read-only)."""
        return self._xyzw[:3]

    @property
    def weighted(self) -> npt.NDArray[np.float64]:
        """Get the weighted form ``(x*w, y*w, z*w, w)``."""
        w = self._xyzw[3]
        return np.array([*(self._xyzw[:3] * w), w])

    def as_array(self) -> npt.NDArray[np.float64]:
        """Get a copy of ``(x, y, z, w)``."""
        return self._xyzw.copy()

    def transform(self, matrix: TransformLike) -> HomogeneousPoint:
        """Apply an affine transformation to the Euclidean part.

        The weight is carried through unchanged.

        Args:
            matrix (TransformLike): A :class:`~ratcurve.transform.Transform`
                or an affine matrix accepted by it.

        Returns:
            HomogeneousPoint: The transformed point.

        Raises:
            InvalidTransformation: If ``matrix`` is malformed.
        """
        x, y, z = as_transform(matrix).apply(self._xyzw[:3])
        return HomogeneousPoint._from_validated(x, y, z, self._xyzw[3])

    @classmethod
    def _from_validated(cls, x: float, y: float, z: float, w: float) -> HomogeneousPoint:
        """Build a point skipping the weight check (already done by the source)."""
        point = cls.__new__(cls)
        xyzw = np.array([x, y, z, w], dtype=np.float64)
        xyzw.flags.writeable = False
        point._xyzw = xyzw
        return point

    def is_close(self, other: HomogeneousPoint, tol: float | None = None) -> bool:
        """Check whether two points agree coordinate-wise up to ``tol``."""
        tol = get_default_tolerance(np.float64) if tol is None else tol
        return bool(np.allclose(self._xyzw, other._xyzw, rtol=0.0, atol=tol))

    def __iter__(self) -> Iterator[float]:
        return (float(c) for c in self._xyzw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HomogeneousPoint):
            return NotImplemented
        return bool(np.array_equal(self._xyzw, other._xyzw))

    def __hash__(self) -> int:
        return hash(tuple(self._xyzw.tolist()))

    def __repr__(self) -> str:
        return f"HomogeneousPoint(x={self.x!r}, y={self.y!r}, z={self.z!r}, w={self.w!r})"


def _as_point3(point: npt.ArrayLike) -> tuple[float, float, float]:
    """Unpack a 3D point.

    Raises:
        InvalidControlPointData: If point does not have exactly three finite
            coordinates.
    """
    try:
        pt = np.asarray(point, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidControlPointData(f"point must be numeric: {exc}") from exc
    if pt.shape != (3,):
        raise InvalidControlPointData(f"point must have three coordinates. Got shape {pt.shape}")
    if not np.all(np.isfinite(pt)):
        raise InvalidControlPointData(f"point coordinates must be finite. Got {pt.tolist()}")
    return cast(tuple[float, float, float], tuple(float(c) for c in pt))
