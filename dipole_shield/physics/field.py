# dipole_shield/physics/field.py
"""
Point magnetic dipole fixed at the origin.

    B(r) = (mu0 * mu_r / 4pi) * (3 (m . r_hat) r_hat - m) / |r|^3

The moment points along `axis` (+y by default, so the x-z plane is the
equatorial plane and a particle launched in it stays in it). The field is
undefined inside `singularity_radius`; evaluating there raises
SingularFieldError instead of clamping.
"""
import math
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from dipole_shield.config.settings import MU0, MU_R, SINGULARITY_RADIUS
from dipole_shield.physics.errors import SingularFieldError


@dataclass(frozen=True)
class DipoleParameters:
    moment: float                       # A·m²
    protected_size: float               # L (m), only used for B(L)
    mu_r: float = MU_R
    mu0: float = MU0
    axis: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    singularity_radius: float = SINGULARITY_RADIUS
    _m_vec: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.moment < 0:
            raise ValueError("moment must be >= 0")
        if self.protected_size <= 0:
            raise ValueError("protected_size must be > 0")
        axis = np.array(self.axis, dtype=float)
        if axis.shape != (3,):
            raise ValueError("axis must be a 3D vector")
        norm = np.linalg.norm(axis)
        if norm == 0.0:
            raise ValueError("axis must be non-zero")
        object.__setattr__(self, "_m_vec", self.moment * axis / norm)

    @property
    def prefactor(self) -> float:
        return self.mu0 * self.mu_r / (4.0 * math.pi)

    @property
    def moment_vector(self) -> np.ndarray:
        return self._m_vec.copy()


def dipole_field(position, dipole: DipoleParameters) -> np.ndarray:
    """
    Magnetic field vector (T) at `position` (m).
    Raises SingularFieldError for |r| <= dipole.singularity_radius or a
    non-finite position.
    """
    r = np.asarray(position, dtype=float)
    x, y, z = r
    norm = math.sqrt(x * x + y * y + z * z)
    if not norm > dipole.singularity_radius or not math.isfinite(norm):
        raise SingularFieldError(r, dipole.singularity_radius)

    m = dipole._m_vec
    inv_r = 1.0 / norm
    r_hat = r * inv_r
    m_dot = m[0] * r_hat[0] + m[1] * r_hat[1] + m[2] * r_hat[2]
    return dipole.prefactor * (3.0 * m_dot * r_hat - m) * inv_r**3


def field_magnitude(position, dipole: DipoleParameters) -> float:
    return float(np.linalg.norm(dipole_field(position, dipole)))


def field_magnitude_at(distance: float, dipole: DipoleParameters) -> float:
    """
    |B| at `distance` on the equatorial plane (perpendicular to the moment),
    the axis the shielding criterion is defined on.
    """
    if distance <= dipole.singularity_radius:
        raise SingularFieldError(np.array([distance, 0.0, 0.0]), dipole.singularity_radius)
    return float(dipole.prefactor * dipole.moment / distance**3)
