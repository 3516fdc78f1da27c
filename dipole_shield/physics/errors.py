# dipole_shield/physics/errors.py


class DipoleShieldError(Exception):
    """
    Base class for failures of a single trajectory computation.
    """


class SingularFieldError(DipoleShieldError, ValueError):
    """
    Position coincides with the dipole (within the singular radius);
    the point-dipole field is undefined there.
    """
    def __init__(self, position, radius: float):
        self.position = position
        self.radius = float(radius)
        super().__init__(
            f"Dipole field undefined at {list(position)} "
            f"(|r| <= singular radius {self.radius:g} m)"
        )


class ConvergenceError(DipoleShieldError, RuntimeError):
    """
    The adaptive integrator could not meet its tolerances: the required
    step fell below the machine-precision floor, or the step budget ran out.
    """
    def __init__(self, message: str, t: float, h: float):
        self.t = float(t)
        self.h = float(h)
        super().__init__(f"{message} (t={self.t:.6e} s, h={self.h:.3e} s)")
