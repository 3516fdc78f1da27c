"""
Energy sweep driver.

Each energy is an independent, pure computation (initial state ->
integration -> diagnostics). The sweep only collects what each energy
returns; there is no shared accumulator, so energies could be mapped over
a process pool unchanged.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dipole_shield.config import settings
from dipole_shield.physics.diagnostics import EnergyResult, analyze
from dipole_shield.physics.errors import DipoleShieldError
from dipole_shield.physics.field import DipoleParameters
from dipole_shield.physics.forces import MagneticLorentzForce
from dipole_shield.physics.solver_rk45 import RK45Solver
from dipole_shield.physics.state import ParticleState
from dipole_shield.physics.trajectory import Trajectory
from dipole_shield.physics.utils import initial_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergyRun:
    energy_kev: float
    trajectory: Trajectory
    result: EnergyResult


@dataclass(frozen=True)
class SweepFailure:
    energy_kev: float
    error: str
    message: str


@dataclass
class SweepResults:
    dipole: DipoleParameters
    t_span: Tuple[float, float]
    runs: List[EnergyRun] = field(default_factory=list)
    failures: List[SweepFailure] = field(default_factory=list)

    @property
    def results(self) -> List[EnergyResult]:
        return [run.result for run in self.runs]

    def near_misses(self) -> List[EnergyResult]:
        return [r for r in self.results if r.near_miss]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dipole": {
                "moment": self.dipole.moment,
                "mu_r": self.dipole.mu_r,
                "mu0": self.dipole.mu0,
                "protected_size": self.dipole.protected_size,
                "axis": list(self.dipole.axis),
            },
            "t_span": list(self.t_span),
            "results": [r.to_dict() for r in self.results],
            "failures": [vars(f) for f in self.failures],
        }


def build_dipole(
    protected_size: float = settings.PROTECTED_SIZE,
    reference_energy_kev: Optional[float] = None,
    mass: float = settings.ELECTRON_MASS,
    charge: float = settings.ELECTRON_CHARGE,
    mu0: float = settings.MU0,
    mu_r: float = settings.MU_R,
) -> DipoleParameters:
    """
    Dipole whose moment just shields L against the reference energy.
    """
    e_ref = settings.reference_energy_kev() if reference_energy_kev is None else float(reference_energy_kev)
    moment = settings.shielding_moment(
        protected_size, settings.kev_to_joules(e_ref), mass=mass, charge=charge, mu0=mu0, mu_r=mu_r
    )
    logger.info("Dipole moment for L=%.3g m at %.3g keV: %.6e A·m²", protected_size, e_ref, moment)
    return DipoleParameters(moment=moment, protected_size=protected_size, mu_r=mu_r, mu0=mu0)


def run_energy(
    energy_kev: float,
    dipole: DipoleParameters,
    t_span: Tuple[float, float],
    mass: float = settings.ELECTRON_MASS,
    charge: float = settings.ELECTRON_CHARGE,
    rtol: float = settings.RTOL,
    atol: float = settings.ATOL,
    max_steps: Optional[int] = settings.MAX_STEPS,
    dt_max: float = settings.DT_MAX,
    state: Optional[ParticleState] = None,
    first_step: Optional[float] = None,
) -> EnergyRun:
    """
    Integrate and analyze one energy. SingularFieldError and ConvergenceError
    propagate to the caller.

    Without an explicit first_step the run starts with a step of
    FIRST_STEP_FRACTION * L / |v0|, the time scale of the encounter, instead
    of the generic starting-step estimate.
    """
    if state is None:
        state = initial_state(energy_kev, dipole.protected_size, mass)
    if first_step is None and state.speed > 0.0:
        first_step = settings.FIRST_STEP_FRACTION * dipole.protected_size / state.speed
    force = MagneticLorentzForce(dipole, mass, charge)
    solver = RK45Solver(
        force.derivative, rtol=rtol, atol=atol, dt_max=dt_max, max_steps=max_steps, first_step=first_step
    )
    trajectory = solver.integrate(state.as_vector(), t_span)
    result = analyze(
        trajectory, dipole, mass, charge, settings.kev_to_joules(energy_kev), energy_kev=energy_kev
    )
    logger.info(
        "E=%7.2f keV: r_min=%.4e m, deflection=%8.3f deg, r_L=%.4e m, samples=%d",
        energy_kev, result.min_distance, result.deflection_deg, result.larmor_radius, trajectory.n_samples,
    )
    return EnergyRun(energy_kev=float(energy_kev), trajectory=trajectory, result=result)


def run_sweep(
    energies_kev: Optional[Sequence[float]] = None,
    dipole: Optional[DipoleParameters] = None,
    protected_size: float = settings.PROTECTED_SIZE,
    t_span: Optional[Tuple[float, float]] = None,
    mass: float = settings.ELECTRON_MASS,
    charge: float = settings.ELECTRON_CHARGE,
    rtol: float = settings.RTOL,
    atol: float = settings.ATOL,
    max_steps: Optional[int] = settings.MAX_STEPS,
    stop_on_error: bool = False,
) -> SweepResults:
    """
    Run every energy of the sweep against one fixed dipole.

    A failed energy is recorded in `failures` and the sweep continues, unless
    stop_on_error is set, in which case the error is re-raised.
    """
    energies = list(settings.ENERGIES_KEV if energies_kev is None else energies_kev)
    if not energies:
        raise ValueError("energies_kev must not be empty")
    if dipole is None:
        dipole = build_dipole(
            protected_size, settings.reference_energy_kev(energies), mass=mass, charge=charge
        )
    if t_span is None:
        t_span = settings.default_time_span(energies, dipole.protected_size, mass)

    sweep = SweepResults(dipole=dipole, t_span=(float(t_span[0]), float(t_span[1])))
    for energy in energies:
        try:
            run = run_energy(
                energy, dipole, t_span, mass=mass, charge=charge,
                rtol=rtol, atol=atol, max_steps=max_steps,
            )
        except DipoleShieldError as e:
            if stop_on_error:
                raise
            logger.error("E=%.2f keV failed: %s", energy, e)
            sweep.failures.append(SweepFailure(float(energy), type(e).__name__, str(e)))
            continue
        sweep.runs.append(run)
    return sweep
