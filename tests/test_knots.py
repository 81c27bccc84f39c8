"""Tests for knot vector utilities."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from ratcurve.errors import InsufficientControlPoints, InvalidCurveDefinition, InvalidKnotVector
from ratcurve.knots import KnotVector, create_clamped_uniform_knot_vector


class TestCreateClampedUniformKnotVector:
    """Tests for `create_clamped_uniform_knot_vector`."""

    def test_no_interior_knots(self) -> None:
        """Four points of degree 3 give a fully clamped vector."""
        knots = create_clamped_uniform_knot_vector(3, 4)
        nptest.assert_array_equal(knots, [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0])

    def test_interior_spacing(self) -> None:
        """Interior knots are i / (n - p)."""
        knots = create_clamped_uniform_knot_vector(2, 5)
        assert knots.size == 8
        nptest.assert_allclose(knots, [0.0, 0.0, 0.0, 1 / 3, 2 / 3, 1.0, 1.0, 1.0])

    def test_single_interior_knot(self) -> None:
        """One interior knot sits at the midpoint."""
        knots = create_clamped_uniform_knot_vector(2, 4)
        nptest.assert_array_equal(knots, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])

    @pytest.mark.parametrize(("degree", "num_points"), [(1, 2), (1, 7), (2, 6), (3, 10), (5, 9)])
    def test_clamped_and_strictly_increasing_interior(self, degree: int, num_points: int) -> None:
        """Ends repeat degree+1 times and the interior strictly increases."""
        knots = create_clamped_uniform_knot_vector(degree, num_points)
        assert knots.size == num_points + degree + 1
        nptest.assert_array_equal(knots[: degree + 1], 0.0)
        nptest.assert_array_equal(knots[-degree - 1 :], 1.0)
        interior = knots[degree : num_points + 1]
        assert np.all(np.diff(interior) > 0.0)

    def test_float32(self) -> None:
        """The requested dtype is honored."""
        knots = create_clamped_uniform_knot_vector(2, 5, dtype=np.float32)
        assert knots.dtype == np.float32

    def test_invalid_dtype(self) -> None:
        """Reject non-floating dtypes."""
        with pytest.raises(ValueError, match="Unsupported dtype"):
            create_clamped_uniform_knot_vector(2, 5, dtype=np.int32)

    @pytest.mark.parametrize(("degree", "num_points"), [(3, 3), (2, 1), (2, 0)])
    def test_insufficient_points(self, degree: int, num_points: int) -> None:
        """At least degree + 1 points are required."""
        with pytest.raises(InsufficientControlPoints, match="at least"):
            create_clamped_uniform_knot_vector(degree, num_points)

    def test_insufficient_points_is_curve_definition_error(self) -> None:
        """Too few points is also an invalid curve definition."""
        with pytest.raises(InvalidCurveDefinition):
            create_clamped_uniform_knot_vector(3, 2)

    def test_degree_zero(self) -> None:
        """Degree must be at least one."""
        with pytest.raises(InvalidCurveDefinition, match="degree must be at least 1"):
            create_clamped_uniform_knot_vector(0, 3)

    @pytest.mark.parametrize("degree", [1.5, 2.0, "2", True])
    def test_non_integer_degree(self, degree: object) -> None:
        """Degree must be an integer."""
        with pytest.raises(InvalidCurveDefinition, match="degree must be an integer"):
            create_clamped_uniform_knot_vector(degree, 4)  # type: ignore[arg-type]

    def test_numpy_integer_degree(self) -> None:
        """NumPy integers are valid degrees."""
        knots = create_clamped_uniform_knot_vector(np.int64(2), 4)
        nptest.assert_array_equal(knots, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])


class TestKnotVectorInit:
    """Tests for explicit knot vectors."""

    def test_valid(self) -> None:
        """Accept a well-formed vector and keep its values."""
        kv = KnotVector([0.0, 0.0, 0.3, 1.0, 1.0])
        nptest.assert_array_equal(kv.values, [0.0, 0.0, 0.3, 1.0, 1.0])
        assert kv.dtype == np.float64
        assert len(kv) == 5

    def test_integer_input_promoted(self) -> None:
        """Integer knots become float64."""
        kv = KnotVector([0, 0, 1, 1])
        assert kv.dtype == np.float64

    def test_float32_preserved(self) -> None:
        """float32 knots stay float32."""
        kv = KnotVector(np.array([0.0, 0.5, 1.0], dtype=np.float32))
        assert kv.dtype == np.float32

    def test_values_read_only(self) -> None:
        """The backing array cannot be modified."""
        kv = KnotVector([0.0, 0.5, 1.0])
        with pytest.raises(ValueError, match="read-only"):
            kv.values[0] = 0.2

    def test_input_not_aliased(self) -> None:
        """Mutating the source array does not affect the knot vector."""
        source = np.array([0.0, 0.5, 1.0])
        kv = KnotVector(source)
        source[1] = 0.7
        assert kv[1] == 0.5

    def test_decreasing(self) -> None:
        """Reject decreasing knots and name the offending position."""
        with pytest.raises(InvalidKnotVector, match=r"non-decreasing.*knots\[1\]"):
            KnotVector([0.0, 0.6, 0.4, 1.0])

    def test_negative(self) -> None:
        """Reject negative knots."""
        with pytest.raises(InvalidKnotVector, match="non-negative"):
            KnotVector([-0.5, 0.0, 1.0])

    def test_above_one(self) -> None:
        """Reject knots outside the normalized domain."""
        with pytest.raises(InvalidKnotVector, match=r"normalized domain \[0, 1\]"):
            KnotVector([0.0, 1.0, 2.0])

    def test_snapping(self) -> None:
        """Values within the strict tolerance of the bounds are snapped."""
        kv = KnotVector([-1e-17, 0.5, 1.0 + 1e-16])
        assert kv[0] == 0.0
        assert kv[-1] == 1.0

    @pytest.mark.parametrize("values", [[0.0, np.nan, 1.0], [0.0, np.inf]])
    def test_non_finite(self, values: list[float]) -> None:
        """Reject NaN and infinite knots."""
        with pytest.raises(InvalidKnotVector, match="finite"):
            KnotVector(values)

    def test_not_1d(self) -> None:
        """Reject multi-dimensional input."""
        with pytest.raises(InvalidKnotVector, match="1D"):
            KnotVector([[0.0, 1.0], [0.0, 1.0]])

    def test_empty(self) -> None:
        """Reject an empty vector."""
        with pytest.raises(InvalidKnotVector, match="empty"):
            KnotVector([])

    def test_non_numeric(self) -> None:
        """Reject non-numeric values."""
        with pytest.raises(InvalidKnotVector):
            KnotVector(["a", "b"])

    def test_errors_are_value_errors(self) -> None:
        """Knot errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            KnotVector([1.0, 0.0])


class TestKnotVectorValidateFor:
    """Tests for `KnotVector.validate_for`."""

    def test_matching_length(self) -> None:
        """Accept n + p + 1 knots."""
        KnotVector.clamped_uniform(2, 5).validate_for(2, 5)

    def test_mismatch(self) -> None:
        """Reject a cardinality mismatch."""
        kv = KnotVector([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
        with pytest.raises(InvalidCurveDefinition, match="control points \\+ degree \\+ 1"):
            kv.validate_for(2, 4)


class TestKnotVectorNormalized:
    """Tests for `KnotVector.normalized`."""

    def test_maps_to_unit_interval(self) -> None:
        """Affinely map the values onto [0, 1]."""
        kv = KnotVector.normalized([2.0, 2.0, 3.0, 4.0, 4.0])
        nptest.assert_allclose(kv.values, [0.0, 0.0, 0.5, 1.0, 1.0])

    def test_already_normalized(self) -> None:
        """Normalized input is unchanged."""
        kv = KnotVector.normalized([0.0, 0.25, 1.0])
        nptest.assert_allclose(kv.values, [0.0, 0.25, 1.0])

    def test_degenerate_span(self) -> None:
        """Reject vectors whose ends coincide."""
        with pytest.raises(InvalidKnotVector, match="non-empty interval"):
            KnotVector.normalized([3.0, 3.0, 3.0])

    def test_decreasing(self) -> None:
        """Reject decreasing input."""
        with pytest.raises(InvalidKnotVector, match="non-decreasing"):
            KnotVector.normalized([0.0, 5.0, 2.0])


class TestKnotVectorQueries:
    """Tests for knot vector queries."""

    def test_domain(self) -> None:
        """The domain excludes the clamped ends."""
        kv = KnotVector([0.0, 0.1, 0.2, 0.8, 0.9, 1.0])
        assert kv.domain(2) == (0.2, 0.8)

    def test_is_clamped(self) -> None:
        """Detect clamped ends."""
        assert KnotVector.clamped_uniform(3, 6).is_clamped(3)
        assert not KnotVector([0.0, 0.1, 0.2, 0.8, 0.9, 1.0]).is_clamped(2)
        assert not KnotVector([0.0, 1.0]).is_clamped(2)

    def test_multiplicity(self) -> None:
        """Count coincident knots."""
        kv = KnotVector([0.0, 0.0, 0.0, 0.5, 0.5, 1.0, 1.0, 1.0])
        assert kv.multiplicity(0.0) == 3
        assert kv.multiplicity(0.5) == 2
        assert kv.multiplicity(0.25) == 0

    def test_unique_knots_and_multiplicity(self) -> None:
        """Group knots into distinct values and counts."""
        kv = KnotVector([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])
        unique, mults = kv.unique_knots_and_multiplicity()
        nptest.assert_array_equal(unique, [0.0, 0.5, 1.0])
        nptest.assert_array_equal(mults, [3, 1, 3])
        assert int(np.sum(mults)) == len(kv)

    def test_reversed(self) -> None:
        """Reversal maps u to 1 - u and reverses the order."""
        kv = KnotVector([0.0, 0.0, 0.25, 1.0, 1.0])
        nptest.assert_allclose(kv.reversed().values, [0.0, 0.0, 0.75, 1.0, 1.0])

    def test_sequence_protocol(self) -> None:
        """Support len, indexing, slicing and iteration."""
        kv = KnotVector([0.0, 0.5, 1.0])
        assert len(kv) == 3
        assert kv[1] == 0.5
        assert isinstance(kv[1], float)
        nptest.assert_array_equal(kv[1:], [0.5, 1.0])
        assert list(kv) == [0.0, 0.5, 1.0]

    def test_equality_and_hash(self) -> None:
        """Equal values compare and hash equal."""
        a = KnotVector([0.0, 0.5, 1.0])
        b = KnotVector(np.array([0.0, 0.5, 1.0]))
        c = KnotVector([0.0, 0.4, 1.0])
        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert a != KnotVector(np.array([0.0, 0.5, 1.0], dtype=np.float32))

    def test_signed_zero_hash(self) -> None:
        """Knot vectors differing only in the sign of a zero hash equal."""
        a = KnotVector([0.0, 0.0, 1.0, 1.0])
        b = KnotVector([-0.0, -0.0, 1.0, 1.0])
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_repr(self) -> None:
        """The representation shows values and dtype."""
        assert repr(KnotVector([0.0, 1.0])) == "KnotVector([0.0, 1.0], dtype=float64)"
