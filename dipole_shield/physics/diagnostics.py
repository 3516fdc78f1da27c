# dipole_shield/physics/diagnostics.py
"""
Scalar diagnostics of an integrated trajectory:

- minimum distance to the dipole over all accepted samples
- final deflection angle, atan2(vz, vx) of the last sample in degrees
  (x-z projection; vy is ignored, the scan stays in the x-z plane)
- theoretical Larmor radius sqrt(2 m E) / (|q| B(L))
- near-miss flag when the minimum distance drops below NEAR_MISS_THRESHOLD
"""
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from dipole_shield.config.settings import KEV_TO_JOULES, NEAR_MISS_THRESHOLD
from dipole_shield.physics.field import DipoleParameters, field_magnitude_at
from dipole_shield.physics.trajectory import Trajectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergyResult:
    energy_kev: float
    deflection_deg: float
    min_distance: float
    larmor_radius: float
    near_miss: bool
    closest_time: float
    speed_drift: float
    shielded: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def minimum_distance(trajectory: Trajectory) -> float:
    return float(trajectory.radii.min())


def deflection_angle_deg(trajectory: Trajectory) -> float:
    vx, _, vz = trajectory.velocities[-1]
    return math.degrees(math.atan2(vz, vx))


def larmor_radius(energy_joules: float, dipole: DipoleParameters, mass: float, charge: float) -> float:
    """
    Gyroradius in the field magnitude found at distance L on the shielding axis.
    Infinite when the dipole moment is zero.
    """
    b_l = field_magnitude_at(dipole.protected_size, dipole)
    momentum = math.sqrt(2.0 * mass * energy_joules)
    if b_l == 0.0:
        return math.inf
    return momentum / (abs(charge) * b_l)


def analyze(trajectory: Trajectory, dipole: DipoleParameters, mass: float, charge: float,
            energy_joules: float, near_miss_threshold: float = NEAR_MISS_THRESHOLD,
            energy_kev: Optional[float] = None) -> EnergyResult:
    """
    energy_kev labels the result; when omitted it is derived from energy_joules.
    """
    idx = trajectory.closest_index
    r_min = float(trajectory.radii[idx])
    near_miss = r_min < near_miss_threshold
    if energy_kev is None:
        energy_kev = energy_joules / KEV_TO_JOULES

    if near_miss:
        logger.warning(
            "Near miss at %.3g keV: closest approach %.3e m < %.3e m",
            energy_kev, r_min, near_miss_threshold,
        )

    return EnergyResult(
        energy_kev=float(energy_kev),
        deflection_deg=deflection_angle_deg(trajectory),
        min_distance=r_min,
        larmor_radius=larmor_radius(energy_joules, dipole, mass, charge),
        near_miss=bool(near_miss),
        closest_time=float(trajectory.t[idx]),
        speed_drift=trajectory.speed_drift(),
        shielded=bool(r_min >= dipole.protected_size),
    )
