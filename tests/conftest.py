import math

import numpy as np
import pytest

from dipole_shield.config import settings
from dipole_shield.physics.field import DipoleParameters
from dipole_shield.physics.forces import MagneticLorentzForce
from dipole_shield.physics.solver_rk45 import RK45Solver
from dipole_shield.physics.state import ParticleState

# Reference configuration
MU0 = 4.0 * math.pi * 1e-7
MU_R = 100.0
M_E = 9.11e-31
Q_E = -1.602e-19
L = 0.1


@pytest.fixture(scope="session")
def dipole_100kev():
    moment = settings.shielding_moment(L, 100.0 * 1.602e-16, mass=M_E, charge=Q_E, mu0=MU0, mu_r=MU_R)
    return DipoleParameters(moment=moment, protected_size=L, mu_r=MU_R, mu0=MU0)


@pytest.fixture(scope="session")
def v0_10kev():
    return math.sqrt(2.0 * 10.0 * 1.602e-16 / M_E)


@pytest.fixture(scope="session")
def scenario_10kev(dipole_100kev, v0_10kev):
    """
    10 keV electron from (-1, 0, 0.01) m heading +x through the 100 keV dipole.
    """
    state = ParticleState([-1.0, 0.0, 0.01], [v0_10kev, 0.0, 0.0])
    t_span = (0.0, 2.0 / v0_10kev)
    force = MagneticLorentzForce(dipole_100kev, M_E, Q_E)
    solver = RK45Solver(force.derivative, rtol=1e-8, atol=1e-10)
    trajectory = solver.integrate(state.as_vector(), t_span)
    return state, t_span, trajectory


@pytest.fixture
def straight_trajectory():
    """
    Hand-built trajectory: straight line along +x at z = 0.05 m.
    """
    from dipole_shield.physics.trajectory import Trajectory

    t = np.linspace(0.0, 1e-8, 11)
    v = 1e7
    y = np.zeros((t.size, 6))
    y[:, 0] = -0.05 + v * t
    y[:, 2] = 0.05
    y[:, 3] = v
    return Trajectory(t, y)
