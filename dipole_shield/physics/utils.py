# dipole_shield/physics/utils.py
import numpy as np

from dipole_shield.config.settings import (
    ELECTRON_MASS,
    START_X_FACTOR,
    START_Z_FACTOR,
    kev_to_joules,
)
from dipole_shield.physics.state import ParticleState


def speed_from_energy(energy_joules: float, mass: float = ELECTRON_MASS) -> float:
    """
    Non-relativistic speed for a kinetic energy: v = sqrt(2E/m).
    """
    if energy_joules < 0:
        raise ValueError("energy_joules must be >= 0")
    return float(np.sqrt(2.0 * energy_joules / mass))


def kinetic_energy(state: ParticleState, mass: float = ELECTRON_MASS) -> float:
    """
    Kinetic energy (J). Conserved under a pure magnetic force; used as a
    numerical stability diagnostic.
    """
    return 0.5 * mass * float(np.dot(state.v, state.v))


def initial_state(energy_kev: float, protected_size: float, mass: float = ELECTRON_MASS) -> ParticleState:
    """
    Launch point (START_X_FACTOR * L, 0, START_Z_FACTOR * L), heading +x.
    """
    v0 = speed_from_energy(kev_to_joules(energy_kev), mass)
    position = np.array([START_X_FACTOR * protected_size, 0.0, START_Z_FACTOR * protected_size])
    velocity = np.array([v0, 0.0, 0.0])
    return ParticleState(position, velocity)
