"""
Project settings (constants + small helpers).
Units: meters (m), seconds (s), kilograms (kg), tesla (T), joules (J).
Energies in the sweep are given in keV.
"""
from __future__ import annotations

import math
import os
from typing import Optional, Sequence, Tuple

import numpy as np

# Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
OUTPUT_DIR = os.path.join(BASE_DIR, "outputs")

# Run
VALIDATE_ON_IMPORT = False

# Physical constants
MU0 = 4.0 * math.pi * 1e-7          # vacuum permeability (T·m/A)
MU_R = 100.0                        # relative permeability of the core
ELECTRON_MASS = 9.11e-31            # kg
ELECTRON_CHARGE = -1.602e-19        # C (signed)
KEV_TO_JOULES = 1.602e-16

# Geometry
PROTECTED_SIZE = 0.1                # L (m)
START_X_FACTOR = -10.0              # x0 = START_X_FACTOR * L
START_Z_FACTOR = 0.1                # z0 = START_Z_FACTOR * L

# Sweep
ENERGIES_KEV = [1.0, 10.0, 50.0, 100.0]
REFERENCE_ENERGY_KEV: Optional[float] = None  # None -> max(ENERGIES_KEV)

# Integration
RTOL = 1e-8
ATOL = 1e-10
TRAVEL_FACTOR = 2.0                 # slowest particle covers TRAVEL_FACTOR * |x0|
MAX_STEPS = 2_000_000
DT_MAX = math.inf
FIRST_STEP_FRACTION = 1e-2           # first step = FIRST_STEP_FRACTION * L / v0

# Diagnostics
NEAR_MISS_THRESHOLD = 0.01          # m
SINGULARITY_RADIUS = 1e-12          # m, field undefined inside


def kev_to_joules(energy_kev: float) -> float:
    return float(energy_kev) * KEV_TO_JOULES


def reference_energy_kev(energies_kev: Optional[Sequence[float]] = None) -> float:
    if REFERENCE_ENERGY_KEV is not None:
        return float(REFERENCE_ENERGY_KEV)
    energies = ENERGIES_KEV if energies_kev is None else energies_kev
    return float(max(energies))


def shielding_moment(
    protected_size: float,
    energy_joules: float,
    mass: float = ELECTRON_MASS,
    charge: float = ELECTRON_CHARGE,
    mu0: float = MU0,
    mu_r: float = MU_R,
) -> float:
    """
    Minimum dipole moment (A·m²) whose field keeps the Larmor radius of a
    particle of the given energy within the protected size L:

        mu_d_min = (4*pi*L^2 / (mu0*mu_r)) * sqrt(2*m*E) / |q|
    """
    if protected_size <= 0:
        raise ValueError("protected_size must be > 0")
    if energy_joules < 0:
        raise ValueError("energy_joules must be >= 0")
    momentum = math.sqrt(2.0 * mass * energy_joules)
    return float((4.0 * math.pi * protected_size**2 / (mu0 * mu_r)) * momentum / abs(charge))


def default_time_span(
    energies_kev: Optional[Sequence[float]] = None,
    protected_size: float = PROTECTED_SIZE,
    mass: float = ELECTRON_MASS,
) -> Tuple[float, float]:
    """
    Time span long enough for the slowest particle of the sweep to travel
    TRAVEL_FACTOR times its starting distance from the dipole.
    """
    energies = ENERGIES_KEV if energies_kev is None else energies_kev
    e_min = float(min(energies))
    if e_min <= 0:
        raise ValueError("energies must be > 0")
    v_min = float(np.sqrt(2.0 * kev_to_joules(e_min) / mass))
    distance = TRAVEL_FACTOR * abs(START_X_FACTOR) * protected_size
    return 0.0, distance / v_min


def validate_settings() -> None:
    if MU0 <= 0:
        raise ValueError("MU0 must be > 0")
    if MU_R <= 0:
        raise ValueError("MU_R must be > 0")
    if ELECTRON_MASS <= 0:
        raise ValueError("ELECTRON_MASS must be > 0")
    if ELECTRON_CHARGE == 0:
        raise ValueError("ELECTRON_CHARGE must be non-zero")
    if PROTECTED_SIZE <= 0:
        raise ValueError("PROTECTED_SIZE must be > 0")
    if not ENERGIES_KEV:
        raise ValueError("ENERGIES_KEV must not be empty")
    if any(e <= 0 for e in ENERGIES_KEV):
        raise ValueError("ENERGIES_KEV must all be > 0")
    if REFERENCE_ENERGY_KEV is not None and REFERENCE_ENERGY_KEV <= 0:
        raise ValueError("REFERENCE_ENERGY_KEV must be > 0")
    if RTOL <= 0 or ATOL <= 0:
        raise ValueError("RTOL and ATOL must be > 0")
    if TRAVEL_FACTOR <= 0:
        raise ValueError("TRAVEL_FACTOR must be > 0")
    if MAX_STEPS <= 0:
        raise ValueError("MAX_STEPS must be > 0")
    if DT_MAX <= 0:
        raise ValueError("DT_MAX must be > 0")
    if FIRST_STEP_FRACTION <= 0:
        raise ValueError("FIRST_STEP_FRACTION must be > 0")
    if NEAR_MISS_THRESHOLD <= 0:
        raise ValueError("NEAR_MISS_THRESHOLD must be > 0")
    if SINGULARITY_RADIUS < 0:
        raise ValueError("SINGULARITY_RADIUS must be >= 0")


if VALIDATE_ON_IMPORT:
    validate_settings()
