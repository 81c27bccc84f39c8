"""Compiled kernels for knot vector generation and validation.

Functions in this module assume their inputs were already validated by
:mod:`ratcurve.knots`; they never raise.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _fill_clamped_uniform_knots_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
) -> None:
    """Fill ``knots`` in place with a clamped uniform knot vector on [0, 1].

    The first and last ``degree + 1`` entries are 0 and 1, and the interior
    entries are ``i / (n - degree)`` for ``i = 1, ..., n - degree - 1``, with
    ``n = knots.size - degree - 1`` control points.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Output array of size
            ``n + degree + 1``.
        degree (int): Curve degree.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    num_points = knots.size - degree - 1
    num_spans = num_points - degree

    for i in range(degree + 1):
        knots[i] = 0.0
        knots[knots.size - 1 - i] = 1.0

    for i in range(1, num_spans):
        knots[degree + i] = i / num_spans


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _first_decreasing_index_impl(knots: npt.NDArray[np.float32 | np.float64]) -> int:
    """Find the first index ``i`` such that ``knots[i + 1] < knots[i]``.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): 1D knot values.

    Returns:
        int: The offending index, or -1 if the values are non-decreasing.
    """
    for i in range(knots.size - 1):
        if knots[i + 1] < knots[i]:
            return i
    return -1


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _snap_to_unit_interval_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> None:
    """Snap values lying within ``tol`` outside [0, 1] onto the bounds, in place.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): 1D knot values.
        tol (float): Snapping tolerance.
    """
    for i in range(knots.size):
        if -tol <= knots[i] < 0.0:
            knots[i] = 0.0
        elif 1.0 < knots[i] <= 1.0 + tol:
            knots[i] = 1.0


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _get_unique_knots_and_multiplicity_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
    """Group a non-decreasing knot vector into distinct values and counts.

    Consecutive knots closer than ``tol`` to the first knot of the current
    group are counted in that group.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Non-decreasing knots.
        tol (float): Grouping tolerance.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
            Unique knot values and their multiplicities (same length).

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    n = knots.size
    unique_ids = np.empty(n, dtype=np.int_)
    mult = np.zeros(n, dtype=np.int_)

    j = -1
    for i in range(n):
        if j >= 0 and knots[i] - knots[unique_ids[j]] <= tol:
            mult[j] += 1
        else:
            j += 1
            unique_ids[j] = i
            mult[j] = 1

    return knots[unique_ids[: j + 1]], mult[: j + 1]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _count_close_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    value: float,
    tol: float,
) -> int:
    """Count knots within ``tol`` of ``value``.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot values.
        value (float): Reference value.
        tol (float): Absolute tolerance.

    Returns:
        int: Number of knots ``k`` with ``|k - value| <= tol``.
    """
    count = 0
    for i in range(knots.size):
        if abs(knots[i] - value) <= tol:
            count += 1
    return count
