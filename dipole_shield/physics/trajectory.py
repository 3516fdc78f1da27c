# dipole_shield/physics/trajectory.py
from dataclasses import dataclass

import numpy as np

from dipole_shield.physics.state import ParticleState


@dataclass
class Trajectory:
    """
    Accepted samples of one integration run.

    t : (N,) strictly increasing times (s), t[0] is the start of the span
    y : (N, d) states, y[0] is the initial condition

    Any state width is stored. The phase-space accessors (positions,
    velocities, radii, speeds and the end states) need d == 6,
    [x, y, z, vx, vy, vz].
    """
    t: np.ndarray
    y: np.ndarray
    nfev: int = 0
    n_rejected: int = 0

    def __post_init__(self):
        self.t = np.asarray(self.t, dtype=float)
        self.y = np.asarray(self.y, dtype=float)
        if self.t.ndim != 1 or self.t.size == 0:
            raise ValueError("t must be a non-empty 1D array")
        if self.y.ndim != 2 or self.y.shape[0] != self.t.size or self.y.shape[1] == 0:
            raise ValueError(f"y must have shape ({self.t.size}, d), got {self.y.shape}")
        if np.any(np.diff(self.t) <= 0.0):
            raise ValueError("Trajectory times must be strictly increasing")

    def _phase_space(self) -> np.ndarray:
        if self.y.shape[1] != 6:
            raise ValueError(f"Phase-space accessors need 6 state columns, got {self.y.shape[1]}")
        return self.y

    @property
    def n_samples(self) -> int:
        return int(self.t.size)

    @property
    def positions(self) -> np.ndarray:
        return self._phase_space()[:, :3]

    @property
    def velocities(self) -> np.ndarray:
        return self._phase_space()[:, 3:]

    @property
    def radii(self) -> np.ndarray:
        return np.linalg.norm(self.positions, axis=1)

    @property
    def speeds(self) -> np.ndarray:
        return np.linalg.norm(self.velocities, axis=1)

    @property
    def closest_index(self) -> int:
        return int(np.argmin(self.radii))

    @property
    def initial_state(self) -> ParticleState:
        return ParticleState.from_vector(self._phase_space()[0])

    @property
    def final_state(self) -> ParticleState:
        return ParticleState.from_vector(self._phase_space()[-1])

    def speed_drift(self) -> float:
        """
        Largest relative deviation of |v(t)| from |v(0)| over all samples.
        A pure magnetic force does no work, so this measures integration error.
        """
        speeds = self.speeds
        v0 = speeds[0]
        if v0 == 0.0:
            return float(np.max(speeds))
        return float(np.max(np.abs(speeds - v0)) / v0)
