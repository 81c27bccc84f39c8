"""Tolerance presets for floating-point comparisons of knots and points."""

from functools import cache
from typing import Any, Literal, NamedTuple, cast

import numpy as np
from numpy import typing as npt

ToleranceKind = Literal["default", "strict", "conservative"]


class _TolerancePreset(NamedTuple):
    """Tolerance values for the floating-point types supported by curves."""

    float32: float
    float64: float


_TOLERANCE_PRESETS: dict[str, _TolerancePreset] = {
    "default": _TolerancePreset(1e-6, 1e-12),
    "strict": _TolerancePreset(1e-7, 1e-15),
    "conservative": _TolerancePreset(1e-5, 1e-10),
}


@cache
def _ensure_float_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator returning a supported floating dtype from its name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: Validated floating-point dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float32, np.float64):
        raise ValueError(f"Unsupported dtype: {name}")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def ensure_float_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize a dtype-like into float32 or float64.

    Args:
        dtype (npt.DTypeLike): Candidate dtype.

    Returns:
        np.dtype[np.floating[Any]]: The validated dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    return _ensure_float_dtype_by_name(np.dtype(dtype).name)


def get_tolerance(dtype: npt.DTypeLike, kind: ToleranceKind = "default") -> float:
    """Look up a tolerance preset for a dtype.

    Args:
        dtype (npt.DTypeLike): float32 or float64.
        kind (ToleranceKind): Which preset to use. Defaults to "default".

    Returns:
        float: Tolerance for the given dtype and preset.

    Raises:
        ValueError: If dtype is unsupported or kind is unknown.

    Example:
        >>> get_tolerance(np.float32, "strict")
        1e-07
    """
    if kind not in _TOLERANCE_PRESETS:
        raise ValueError(f"Unknown tolerance kind: {kind!r}")
    preset = _TOLERANCE_PRESETS[kind]
    dtype_obj = ensure_float_dtype(dtype)
    return preset.float32 if dtype_obj.type == np.float32 else preset.float64


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used for point and matrix comparisons.

    Example:
        >>> get_default_tolerance("float64")
        1e-12
    """
    return get_tolerance(dtype, "default")


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used for snapping and grouping knot values."""
    return get_tolerance(dtype, "strict")


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a loose tolerance for comparisons after chained transformations."""
    return get_tolerance(dtype, "conservative")


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for float32 or float64.

    Raises:
        ValueError: If dtype is unsupported.
    """
    return float(np.finfo(ensure_float_dtype(dtype)).eps)
