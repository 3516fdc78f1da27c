import math

import numpy as np
import pytest

from dipole_shield.physics.errors import SingularFieldError
from dipole_shield.physics.field import (
    DipoleParameters,
    dipole_field,
    field_magnitude,
    field_magnitude_at,
)

POSITIONS = [
    [0.3, 0.0, 0.0],
    [0.0, 0.2, 0.0],
    [-0.1, 0.05, 0.02],
    [1.0, -2.0, 0.5],
]


@pytest.fixture
def dipole():
    return DipoleParameters(moment=1.066, protected_size=0.1, mu_r=100.0)


@pytest.mark.parametrize("position", POSITIONS)
@pytest.mark.parametrize("k", [0.25, 2.0, 10.0])
def test_inverse_cube_scaling(dipole, position, k):
    b1 = field_magnitude(position, dipole)
    bk = field_magnitude(k * np.array(position), dipole)
    assert bk == pytest.approx(b1 / k**3, rel=1e-12)


def test_equatorial_field_is_antiparallel_to_moment(dipole):
    r = 0.2
    b = dipole_field([r, 0.0, 0.0], dipole)
    expected = -dipole.prefactor * dipole.moment / r**3
    np.testing.assert_allclose(b, [0.0, expected, 0.0], rtol=1e-12, atol=0.0)


def test_axial_field_is_twice_equatorial(dipole):
    r = 0.2
    b_axis = dipole_field([0.0, r, 0.0], dipole)
    b_eq = dipole_field([r, 0.0, 0.0], dipole)
    assert b_axis[1] == pytest.approx(-2.0 * b_eq[1], rel=1e-12)
    assert b_axis[0] == 0.0 and b_axis[2] == 0.0


def test_prefactor(dipole):
    assert dipole.prefactor == pytest.approx(4.0 * math.pi * 1e-7 * 100.0 / (4.0 * math.pi))


def test_field_magnitude_at_matches_pointwise_field(dipole):
    L = dipole.protected_size
    assert field_magnitude_at(L, dipole) == pytest.approx(field_magnitude([L, 0.0, 0.0], dipole), rel=1e-12)
    assert field_magnitude_at(L, dipole) == pytest.approx(field_magnitude([0.0, 0.0, L], dipole), rel=1e-12)


def test_zero_moment_gives_zero_field():
    dipole = DipoleParameters(moment=0.0, protected_size=0.1)
    np.testing.assert_array_equal(dipole_field([0.3, 0.1, -0.2], dipole), np.zeros(3))


def test_axis_is_normalized():
    dipole = DipoleParameters(moment=2.0, protected_size=0.1, axis=(0.0, 0.0, 5.0))
    np.testing.assert_allclose(dipole.moment_vector, [0.0, 0.0, 2.0])


@pytest.mark.parametrize("position", [[0.0, 0.0, 0.0], [1e-15, 0.0, 0.0], [0.0, -1e-13, 1e-13]])
def test_singular_at_origin(dipole, position):
    with pytest.raises(SingularFieldError):
        dipole_field(position, dipole)


def test_non_finite_position_is_singular(dipole):
    with pytest.raises(SingularFieldError):
        dipole_field([np.nan, 0.0, 0.0], dipole)


def test_singular_error_is_value_error(dipole):
    with pytest.raises(ValueError):
        dipole_field([0.0, 0.0, 0.0], dipole)


def test_field_magnitude_at_rejects_zero_distance(dipole):
    with pytest.raises(SingularFieldError):
        field_magnitude_at(0.0, dipole)


@pytest.mark.parametrize("kwargs", [
    {"moment": -1.0, "protected_size": 0.1},
    {"moment": 1.0, "protected_size": 0.0},
    {"moment": 1.0, "protected_size": 0.1, "axis": (0.0, 0.0, 0.0)},
])
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        DipoleParameters(**kwargs)
