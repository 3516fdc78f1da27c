# dipole_shield/physics/forces.py
import numpy as np

from dipole_shield.physics.field import DipoleParameters, dipole_field
from dipole_shield.physics.state import ParticleState


def _cross(a, b) -> np.ndarray:
    return np.array([
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    ], dtype=float)


def lorentz_acceleration(r, v, dipole: DipoleParameters, charge_to_mass: float) -> np.ndarray:
    # q/m * (v x B), no E field
    return charge_to_mass * _cross(v, dipole_field(r, dipole))


def equations_of_motion(t: float, y, dipole: DipoleParameters, mass: float, charge: float) -> np.ndarray:
    """
    Non-relativistic Lorentz force in the dipole field (no E field).
    y = [x, y, z, vx, vy, vz] -> [vx, vy, vz, ax, ay, az].
    t is unused; the field is static.
    """
    y = np.asarray(y, dtype=float)
    v = y[3:]
    return np.hstack((v, lorentz_acceleration(y[:3], v, dipole, charge / mass)))


class ForceModel:
    """
    Base force model. Acceleration signature accepts optional time t (seconds).
    """
    def acceleration(self, state: ParticleState, t: float = 0.0) -> np.ndarray:
        raise NotImplementedError

    def derivative(self, t: float, y) -> np.ndarray:
        # f(t, y) form used by the integrator
        state = ParticleState.from_vector(y)
        return np.hstack((state.v, self.acceleration(state, t)))


class MagneticLorentzForce(ForceModel):
    """
    q/m * (v x B) with B from a point dipole at the origin.
    The force is perpendicular to v, so |v| is a constant of motion.
    """
    def __init__(self, dipole: DipoleParameters, mass: float, charge: float):
        if mass <= 0:
            raise ValueError("mass must be > 0")
        self.dipole = dipole
        self.mass = float(mass)
        self.charge = float(charge)

    @property
    def charge_to_mass(self) -> float:
        return self.charge / self.mass

    def acceleration(self, state: ParticleState, t: float = 0.0) -> np.ndarray:
        return lorentz_acceleration(state.r, state.v, self.dipole, self.charge_to_mass)
