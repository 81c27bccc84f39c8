"""Compiled kernels applying affine matrices to batches of points."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:

    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _apply_affine_impl(
    matrix: npt.NDArray[np.float64],
    points: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Compute ``out[i] = A @ points[i] + t`` for every row of ``points``.

    Args:
        matrix (npt.NDArray[np.float64]): 4x4 affine matrix whose upper 3x4
            block holds the linear part ``A`` and translation ``t``.
        points (npt.NDArray[np.float32 | np.float64]): Points of shape (n, 3).
        out (npt.NDArray[np.float32 | np.float64]): Output of shape (n, 3).
            It must not alias ``points``.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    for i in range(points.shape[0]):
        x = points[i, 0]
        y = points[i, 1]
        z = points[i, 2]
        for r in range(3):
            out[i, r] = matrix[r, 0] * x + matrix[r, 1] * y + matrix[r, 2] * z + matrix[r, 3]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _max_projective_deviation_impl(matrix: npt.NDArray[np.float64]) -> float:
    """Get the largest deviation of the bottom row of ``matrix`` from (0, 0, 0, 1)."""
    deviation = abs(matrix[3, 3] - 1.0)
    for c in range(3):
        deviation = max(deviation, abs(matrix[3, c]))
    return deviation
