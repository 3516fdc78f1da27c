import numpy as np
import pytest

from dipole_shield.config import settings
from dipole_shield.physics.state import ParticleState
from dipole_shield.physics.trajectory import Trajectory
from dipole_shield.physics.utils import initial_state, kinetic_energy, speed_from_energy


def test_state_round_trip_through_vector():
    state = ParticleState([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
    again = ParticleState.from_vector(state.as_vector())
    np.testing.assert_array_equal(again.r, state.r)
    np.testing.assert_array_equal(again.v, state.v)


def test_state_rejects_bad_shapes():
    with pytest.raises(ValueError):
        ParticleState([1.0, 2.0], [0.0, 0.0, 0.0])
    with pytest.raises(ValueError):
        ParticleState.from_vector([1.0, 2.0, 3.0])


def test_state_copy_is_independent():
    state = ParticleState([1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
    clone = state.copy()
    clone.r[0] = 5.0
    assert state.r[0] == 1.0


def test_speed_and_distance():
    state = ParticleState([3.0, 4.0, 0.0], [0.0, 6.0, 8.0])
    assert state.distance == pytest.approx(5.0)
    assert state.speed == pytest.approx(10.0)


def test_initial_state_geometry():
    state = initial_state(10.0, 0.1)
    np.testing.assert_allclose(state.r, [-1.0, 0.0, 0.01])
    assert state.v[1] == 0.0 and state.v[2] == 0.0
    assert state.v[0] == pytest.approx(np.sqrt(2.0 * 10.0 * 1.602e-16 / 9.11e-31))


def test_kinetic_energy_inverts_speed():
    energy = settings.kev_to_joules(50.0)
    v = speed_from_energy(energy)
    state = ParticleState([0.0, 0.0, 0.0], [0.0, 0.0, v])
    assert kinetic_energy(state) == pytest.approx(energy, rel=1e-12)


def test_speed_from_negative_energy_rejected():
    with pytest.raises(ValueError):
        speed_from_energy(-1.0)


def test_trajectory_requires_increasing_time():
    with pytest.raises(ValueError):
        Trajectory(np.array([0.0, 1.0, 1.0]), np.zeros((3, 6)))


def test_trajectory_requires_matching_shape():
    with pytest.raises(ValueError):
        Trajectory(np.array([0.0, 1.0]), np.zeros((3, 6)))


def test_trajectory_accessors(straight_trajectory):
    traj = straight_trajectory
    assert traj.n_samples == 11
    assert traj.positions.shape == (11, 3)
    assert traj.velocities.shape == (11, 3)
    assert traj.closest_index == 5
    np.testing.assert_array_equal(traj.initial_state.as_vector(), traj.y[0])
    np.testing.assert_array_equal(traj.final_state.as_vector(), traj.y[-1])
    assert traj.speed_drift() == 0.0


def test_speed_drift_measures_relative_change(straight_trajectory):
    y = straight_trajectory.y.copy()
    y[-1, 3] *= 1.001
    assert Trajectory(straight_trajectory.t, y).speed_drift() == pytest.approx(1e-3)


def test_trajectory_stores_any_state_width():
    traj = Trajectory(np.array([0.0, 0.5, 1.0]), np.array([[1.0], [0.6], [0.4]]))
    assert traj.n_samples == 3
    assert traj.y.shape == (3, 1)
    with pytest.raises(ValueError):
        traj.positions
    with pytest.raises(ValueError):
        traj.final_state


def test_trajectory_rejects_flat_states():
    with pytest.raises(ValueError):
        Trajectory(np.array([0.0, 1.0]), np.array([1.0, 2.0]))
