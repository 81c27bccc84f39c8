"""Affine transformations and the transformable capability.

A :class:`Transform` is an immutable 4x4 matrix acting on 3D points in
homogeneous form. Only affine matrices (bottom row ``(0, 0, 0, 1)``) are
accepted: they act on the Euclidean part of a weighted control point and
leave its weight unchanged, which keeps the shape of rational curves intact.

The named constructors follow Goldman, "Matrices and transformations",
Graphics Gems I (1990) and "More matrices and transformations: shear and
pseudo-perspective", Graphics Gems II (1990).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, Self, TypeAlias, TypeVar, runtime_checkable

import numpy as np
import numpy.typing as npt
from scipy.spatial.transform import Rotation

from ._transform_impl import _apply_affine_impl, _max_projective_deviation_impl
from .errors import InvalidTransformation
from .tolerance import get_default_tolerance

_AFFINE_ROWS = 3
_MATRIX_SIZE = 4


def _unit_vector(vector: npt.ArrayLike, name: str) -> npt.NDArray[np.float64]:
    """Normalize a 3D vector.

    Raises:
        InvalidTransformation: If the vector is not 3D, not finite, or null.
    """
    vec = np.asarray(vector, dtype=np.float64)
    if vec.shape != (3,) or not np.all(np.isfinite(vec)):
        raise InvalidTransformation(f"{name} must be a finite 3D vector. Got {vector!r}")
    norm = np.linalg.norm(vec)
    if norm <= get_default_tolerance(np.float64):
        raise InvalidTransformation(f"{name} must not be the zero vector")
    return vec / norm


def _point3(point: npt.ArrayLike, name: str) -> npt.NDArray[np.float64]:
    """Convert a 3D point, raising :class:`InvalidTransformation` if malformed."""
    pt = np.asarray(point, dtype=np.float64)
    if pt.shape != (3,) or not np.all(np.isfinite(pt)):
        raise InvalidTransformation(f"{name} must be a finite 3D point. Got {point!r}")
    return pt


class Transform:
    """An immutable affine transformation of 3D space.

    Composition follows matrix multiplication: ``(a @ b)`` applies ``b``
    first and ``a`` second.

    Attributes:
        _matrix (npt.NDArray[np.float64]): Read-only 4x4 affine matrix.
    """

    _matrix: npt.NDArray[np.float64]

    def __init__(self, matrix: npt.ArrayLike) -> None:
        """Initialize a transformation from a matrix.

        Args:
            matrix (npt.ArrayLike): Either a 4x4 matrix whose bottom row is
                ``(0, 0, 0, 1)`` (up to the float64 default tolerance), or the
                3x4 upper block of such a matrix.

        Raises:
            InvalidTransformation: If the matrix has the wrong shape, contains
                non-finite values, or is projective.
        """
        try:
            mat = np.array(matrix, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidTransformation(f"matrix must be numeric: {exc}") from exc

        if mat.shape == (_AFFINE_ROWS, _MATRIX_SIZE):
            mat = np.vstack([mat, [0.0, 0.0, 0.0, 1.0]])
        elif mat.shape != (_MATRIX_SIZE, _MATRIX_SIZE):
            raise InvalidTransformation(
                f"matrix must have shape (4, 4) or (3, 4). Got {mat.shape}"
            )

        if not np.all(np.isfinite(mat)):
            raise InvalidTransformation("matrix must be finite")

        deviation = _max_projective_deviation_impl(mat)
        if deviation > get_default_tolerance(np.float64):
            raise InvalidTransformation(
                "matrix must be affine (bottom row (0, 0, 0, 1)). "
                f"Got bottom row {mat[3].tolist()}"
            )
        mat[3] = (0.0, 0.0, 0.0, 1.0)

        mat.flags.writeable = False
        self._matrix = mat

    @classmethod
    def from_matrix(cls, matrix: npt.ArrayLike) -> Transform:
        """Create a transformation from a 4x4 or 3x4 affine matrix."""
        return cls(matrix)

    @classmethod
    def identity(cls) -> Transform:
        """Create the identity transformation."""
        return cls(np.identity(_MATRIX_SIZE))

    @classmethod
    def translation(cls, vector: npt.ArrayLike) -> Transform:
        """Create a translation by ``vector``.

        Raises:
            InvalidTransformation: If vector is not a finite 3D vector.
        """
        mat = np.identity(_MATRIX_SIZE)
        mat[:3, 3] = _point3(vector, "vector")
        return cls(mat)

    @classmethod
    def rotation(
        cls,
        angle: float,
        axis: npt.ArrayLike = (0.0, 0.0, 1.0),
        origin: npt.ArrayLike = (0.0, 0.0, 0.0),
    ) -> Transform:
        """Create a rotation about the line through ``origin`` along ``axis``.

        Args:
            angle (float): Rotation angle in radians, counter-clockwise when
                looking against ``axis`` (right-hand rule).
            axis (npt.ArrayLike): Direction of the rotation axis. Defaults to z.
            origin (npt.ArrayLike): A point on the axis. Defaults to the origin.

        Returns:
            Transform: The rotation.

        Raises:
            InvalidTransformation: If axis is null or inputs are not 3D.
        """
        unit_axis = _unit_vector(axis, "axis")
        q = _point3(origin, "origin")
        rot = Rotation.from_rotvec(float(angle) * unit_axis).as_matrix()

        mat = np.identity(_MATRIX_SIZE)
        mat[:3, :3] = rot
        mat[:3, 3] = q - rot @ q
        return cls(mat)

    @classmethod
    def scaling(
        cls,
        factor: float,
        origin: npt.ArrayLike = (0.0, 0.0, 0.0),
        direction: npt.ArrayLike | None = None,
    ) -> Transform:
        """Create a uniform scaling, or a scaling along a single direction.

        Args:
            factor (float): Scaling factor.
            origin (npt.ArrayLike): Fixed point of the scaling.
            direction (npt.ArrayLike | None): If given, only lengths along
                this direction are scaled.

        Returns:
            Transform: The scaling.
        """
        c = float(factor)
        q = _point3(origin, "origin")
        mat = np.identity(_MATRIX_SIZE)
        if direction is None:
            mat[:3, :3] *= c
            mat[:3, 3] = (1.0 - c) * q
        else:
            w = _unit_vector(direction, "direction")
            mat[:3, :3] -= (1.0 - c) * np.outer(w, w)
            mat[:3, 3] = (1.0 - c) * np.dot(q, w) * w
        return cls(mat)

    @classmethod
    def mirror(
        cls,
        normal: npt.ArrayLike,
        origin: npt.ArrayLike = (0.0, 0.0, 0.0),
    ) -> Transform:
        """Create a reflection through the plane with ``normal`` containing ``origin``."""
        n = _unit_vector(normal, "normal")
        q = _point3(origin, "origin")
        mat = np.identity(_MATRIX_SIZE)
        mat[:3, :3] -= 2.0 * np.outer(n, n)
        mat[:3, 3] = 2.0 * np.dot(q, n) * n
        return cls(mat)

    @classmethod
    def shear(
        cls,
        angle: float,
        direction: npt.ArrayLike,
        normal: npt.ArrayLike,
        origin: npt.ArrayLike = (0.0, 0.0, 0.0),
    ) -> Transform:
        """Create a shear relative to the plane through ``origin`` with ``normal``.

        A point at signed distance ``d`` from the shearing plane slides by
        ``d * tan(angle)`` along ``direction``, which must lie in the plane.

        Args:
            angle (float): Shear angle in radians.
            direction (npt.ArrayLike): Sliding direction, orthogonal to normal.
            normal (npt.ArrayLike): Normal of the shearing plane.
            origin (npt.ArrayLike): A point on the shearing plane.

        Returns:
            Transform: The shear.

        Raises:
            InvalidTransformation: If direction is not orthogonal to normal.
        """
        w = _unit_vector(direction, "direction")
        v = _unit_vector(normal, "normal")
        if abs(np.dot(w, v)) > get_default_tolerance(np.float64):
            raise InvalidTransformation("shear direction must be orthogonal to the plane normal")
        q = _point3(origin, "origin")

        t = np.tan(float(angle))
        mat = np.identity(_MATRIX_SIZE)
        mat[:3, :3] += t * np.outer(w, v)
        mat[:3, 3] = -t * np.dot(q, v) * w
        return cls(mat)

    @property
    def matrix(self) -> npt.NDArray[np.float64]:
        """Get the (read-only) 4x4 matrix."""
        return self._matrix

    def compose(self, other: TransformLike) -> Transform:
        """Get the transformation applying ``other`` first and then ``self``."""
        return Transform(self._matrix @ as_transform(other)._matrix)

    def __matmul__(self, other: Transform) -> Transform:
        if not isinstance(other, Transform):
            return NotImplemented
        return self.compose(other)

    def inverse(self) -> Transform:
        """Get the inverse transformation.

        Raises:
            InvalidTransformation: If the matrix is singular.
        """
        try:
            return Transform(np.linalg.inv(self._matrix))
        except np.linalg.LinAlgError as exc:
            raise InvalidTransformation("matrix is singular and cannot be inverted") from exc

    def transform(self, matrix: TransformLike) -> Transform:
        """Get this transformation followed by ``matrix``."""
        return as_transform(matrix).compose(self)

    def apply(self, points: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Apply the transformation to Euclidean points.

        Args:
            points (npt.ArrayLike): Array of shape (n, 3) or (3,). float32
                input is kept in float32; anything else becomes float64.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Transformed points with the
                same shape as the input.

        Raises:
            ValueError: If the last axis does not have size 3.
        """
        pts = np.asarray(points)
        if pts.dtype not in (np.float32, np.float64):
            pts = pts.astype(np.float64)

        single = pts.ndim == 1
        pts2d = pts.reshape(1, -1) if single else pts
        if pts2d.ndim != 2 or pts2d.shape[1] != 3:  # noqa: PLR2004
            raise ValueError(f"points must have shape (n, 3) or (3,). Got {pts.shape}")

        out = np.empty(pts2d.shape, dtype=pts.dtype)
        _apply_affine_impl(self._matrix, np.ascontiguousarray(pts2d), out)
        return out[0] if single else out

    def is_identity(self, tol: float | None = None) -> bool:
        """Check whether the matrix is the identity up to ``tol``."""
        tol = get_default_tolerance(np.float64) if tol is None else tol
        return bool(np.allclose(self._matrix, np.identity(_MATRIX_SIZE), rtol=0.0, atol=tol))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(np.array_equal(self._matrix, other._matrix))

    def __hash__(self) -> int:
        return hash(tuple(self._matrix.ravel().tolist()))

    def __repr__(self) -> str:
        return f"Transform({self._matrix.tolist()!r})"


TransformLike: TypeAlias = "Transform | npt.ArrayLike"


def as_transform(matrix: TransformLike) -> Transform:
    """Coerce a :class:`Transform` or an affine matrix into a :class:`Transform`.

    Raises:
        InvalidTransformation: If ``matrix`` is not a well-formed affine matrix.
    """
    if isinstance(matrix, Transform):
        return matrix
    return Transform(matrix)


@runtime_checkable
class Transformable(Protocol):
    """Geometry that can be transformed into a new instance of its own type."""

    def transform(self, matrix: TransformLike) -> Self:
        """Return a transformed copy; the receiver is left unchanged."""
        ...


T = TypeVar("T", bound=Transformable)


def transform_all(items: Iterable[T], matrix: TransformLike) -> list[T]:
    """Transform every item of a heterogeneous collection with one matrix.

    Args:
        items (Iterable[T]): Transformable geometry (points, curves, ...).
        matrix (TransformLike): The affine transformation.

    Returns:
        list[T]: Transformed items, in input order.

    Raises:
        InvalidTransformation: If ``matrix`` is malformed.
    """
    xform = as_transform(matrix)
    return [item.transform(xform) for item in items]
