# dipole_shield/physics/state.py
import numpy as np


class ParticleState:
    """
    State vector for a charged particle in 3D.
    [x, y, z, vx, vy, vz] in m and m/s.
    """
    def __init__(self, position, velocity):
        if len(position) != 3 or len(velocity) != 3:
            raise ValueError("Position and velocity must be 3D vectors.")
        self.r = np.array(position, dtype=float)
        self.v = np.array(velocity, dtype=float)

    @classmethod
    def from_vector(cls, y):
        y = np.asarray(y, dtype=float)
        if y.shape != (6,):
            raise ValueError(f"State vector must have shape (6,), got {y.shape}")
        return cls(y[:3], y[3:])

    def as_vector(self) -> np.ndarray:
        return np.hstack((self.r, self.v))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.v))

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.r))

    def copy(self):
        return ParticleState(self.r.copy(), self.v.copy())

    def __repr__(self):
        return f"ParticleState(r={self.r.tolist()}, v={self.v.tolist()})"
