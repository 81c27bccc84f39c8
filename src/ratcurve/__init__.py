"""Public API surface for ratcurve.

Defines package metadata and exported interfaces.
"""

from typing import Final

from .curve import NurbsCurve
from .errors import (
    DegenerateWeightWarning,
    InsufficientControlPoints,
    InvalidControlPointData,
    InvalidCurveDefinition,
    InvalidKnotVector,
    InvalidTransformation,
)
from .knots import KnotVector, create_clamped_uniform_knot_vector
from .point import HomogeneousPoint
from .tolerance import (
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
    get_tolerance,
)
from .transform import Transform, Transformable, as_transform, transform_all

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "ratcurve developers"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "DegenerateWeightWarning",
    "HomogeneousPoint",
    "InsufficientControlPoints",
    "InvalidControlPointData",
    "InvalidCurveDefinition",
    "InvalidKnotVector",
    "InvalidTransformation",
    "KnotVector",
    "NurbsCurve",
    "Transform",
    "Transformable",
    "__author__",
    "__license__",
    "__version__",
    "as_transform",
    "create_clamped_uniform_knot_vector",
    "get_conservative_tolerance",
    "get_default_tolerance",
    "get_machine_epsilon",
    "get_strict_tolerance",
    "get_tolerance",
    "transform_all",
]
