# dipole_shield/physics/solver_rk45.py
import logging
from typing import Callable, Optional, Tuple

import numpy as np

from dipole_shield.physics.errors import ConvergenceError
from dipole_shield.physics.trajectory import Trajectory

logger = logging.getLogger(__name__)

# Dormand–Prince (7 stages) coefficients
_C = np.array([0.0, 1/5, 3/10, 4/5, 8/9, 1.0, 1.0], dtype=float)
_A = [
    [],
    [1/5],
    [3/40, 9/40],
    [44/45, -56/15, 32/9],
    [19372/6561, -25360/2187, 64448/6561, -212/729],
    [9017/3168, -355/33, 46732/5247, 49/176, -5103/18656],
    [35/384, 0.0, 500/1113, 125/192, -2187/6784, 11/84]
]
_B_HIGH = np.array([35/384, 0.0, 500/1113, 125/192, -2187/6784, 11/84, 0.0], dtype=float)
_B_LOW = np.array([5179/57600, 0.0, 7571/16695, 393/640, -92097/339200, 187/2100, 1/40], dtype=float)
_E = _B_HIGH - _B_LOW

_ERROR_EXPONENT = -1.0 / 5.0
SAFETY = 0.9
MIN_FACTOR = 0.2
MAX_FACTOR = 5.0

Derivative = Callable[[float, np.ndarray], np.ndarray]


def _rms(x: np.ndarray) -> float:
    return float(np.sqrt(np.mean(x * x)))


class RK45Solver:
    """
    Dormand–Prince 5(4) adaptive integrator.

    The derivative has the form f(t, y) -> dy/dt on a flat state vector.
    Steps are propagated with the 5th-order solution; the embedded 4th-order
    solution gives the local error estimate. A step is accepted only if every
    component satisfies |err_i| <= atol + rtol * max(|y_i|, |y_new_i|).
    """
    def __init__(self, derivative: Derivative, rtol: float = 1e-8, atol: float = 1e-10,
                 dt_max: float = np.inf, max_steps: Optional[int] = None,
                 first_step: Optional[float] = None):
        if rtol <= 0 or atol <= 0:
            raise ValueError("rtol and atol must be > 0")
        if dt_max <= 0:
            raise ValueError("dt_max must be > 0")
        if max_steps is not None and max_steps <= 0:
            raise ValueError("max_steps must be > 0")
        if first_step is not None and first_step <= 0:
            raise ValueError("first_step must be > 0")
        self.derivative = derivative
        self.rtol = float(rtol)
        self.atol = float(atol)
        self.dt_max = float(dt_max)
        self.max_steps = max_steps
        self.first_step = first_step

    def _initial_step(self, t0: float, y0: np.ndarray, f0: np.ndarray, interval: float) -> float:
        """
        Starting step from the size of y and its first two derivatives
        (Hairer, Nørsett & Wanner, Solving ODEs I, II.4).
        """
        scale = self.atol + np.abs(y0) * self.rtol
        d0 = _rms(y0 / scale)
        d1 = _rms(f0 / scale)
        if d0 < 1e-5 or d1 < 1e-5:
            h0 = 1e-6
        else:
            h0 = 0.01 * d0 / d1
        h0 = min(h0, interval)

        y1 = y0 + h0 * f0
        f1 = self.derivative(t0 + h0, y1)
        self._nfev += 1
        d2 = _rms((f1 - f0) / scale) / h0

        if d1 <= 1e-15 and d2 <= 1e-15:
            h1 = max(1e-6, h0 * 1e-3)
        else:
            h1 = (0.01 / max(d1, d2)) ** (1.0 / 5.0)
        return min(100.0 * h0, h1, interval)

    def _attempt(self, t: float, y: np.ndarray, f: np.ndarray, h: float):
        """
        One Dormand–Prince step of size h from (t, y) with f = f(t, y).
        Returns (y_new, f_new, error_ratio); a non-finite y_new has ratio inf.
        """
        ks = [f]
        for i in range(1, len(_C) - 1):
            yi = y.copy()
            for j, aij in enumerate(_A[i]):
                if aij != 0.0:
                    yi += h * aij * ks[j]
            ks.append(self.derivative(t + _C[i] * h, yi))

        y_new = y.copy()
        for i_k in range(len(ks)):
            if _B_HIGH[i_k] != 0.0:
                y_new += h * _B_HIGH[i_k] * ks[i_k]
        if not np.all(np.isfinite(y_new)):
            self._nfev += 5
            return y_new, None, np.inf

        # first-same-as-last: last stage is f at the new point
        f_new = self.derivative(t + h, y_new)
        ks.append(f_new)
        self._nfev += 6

        with np.errstate(invalid="ignore", over="ignore"):
            err_vec = np.zeros_like(y)
            for i_k in range(len(ks)):
                err_vec += h * _E[i_k] * ks[i_k]
            scale = self.atol + self.rtol * np.maximum(np.abs(y), np.abs(y_new))
            err_ratio = float(np.max(np.abs(err_vec) / scale))
        return y_new, f_new, err_ratio

    def integrate(self, y0, t_span: Tuple[float, float]) -> Trajectory:
        """
        Integrate from t_span[0] to t_span[1] and return every accepted sample.
        Raises ConvergenceError if the step falls below the machine-precision
        floor or max_steps is exhausted before t_span[1].

        Near a finite-time singularity the run stops where the numerical
        solution blows up, which can sit past the exact pole by an amount of
        the order of the accumulated tolerance.
        """
        t0, t_end = float(t_span[0]), float(t_span[1])
        if not t_end > t0:
            raise ValueError("t_span must be increasing (t_end > t0)")
        y = np.array(y0, dtype=float)
        if y.ndim != 1:
            raise ValueError("y0 must be a flat state vector")

        self._nfev = 0
        n_rejected = 0
        t = t0
        f = self.derivative(t, y)
        self._nfev += 1

        if self.first_step is None:
            h = self._initial_step(t, y, f, t_end - t0)
        else:
            h = min(float(self.first_step), t_end - t0)

        ts = [t]
        ys = [y.copy()]
        n_steps = 0

        while t < t_end:
            if self.max_steps is not None and n_steps >= self.max_steps:
                raise ConvergenceError(f"Step budget of {self.max_steps} exhausted", t, h)

            min_step = 10.0 * abs(np.nextafter(t, np.inf) - t)
            h = min(h, self.dt_max)
            if h < min_step:
                h = min_step

            step_rejected = False
            while True:
                if h < min_step:
                    raise ConvergenceError("Step size fell below machine-precision floor", t, h)

                t_new = t + h
                if t_new >= t_end:
                    t_new = t_end
                h_try = t_new - t

                y_new, f_new, err_ratio = self._attempt(t, y, f, h_try)

                if err_ratio <= 1.0:
                    if err_ratio == 0.0:
                        factor = MAX_FACTOR
                    else:
                        factor = min(MAX_FACTOR, SAFETY * err_ratio ** _ERROR_EXPONENT)
                    # no growth right after a rejection
                    if step_rejected:
                        factor = min(1.0, factor)
                    h_next = h_try * factor
                    break

                if np.isfinite(err_ratio):
                    factor = max(MIN_FACTOR, SAFETY * err_ratio ** _ERROR_EXPONENT)
                else:
                    factor = MIN_FACTOR
                h = h_try * factor
                step_rejected = True
                n_rejected += 1

            t, y, f = t_new, y_new, f_new
            h = h_next
            n_steps += 1
            ts.append(t)
            ys.append(y.copy())

        logger.debug(
            "RK45 run complete: %d steps accepted, %d rejected, %d evaluations",
            n_steps, n_rejected, self._nfev,
        )
        return Trajectory(np.array(ts), np.array(ys), nfev=self._nfev, n_rejected=n_rejected)


def integrate(initial_state, t_span: Tuple[float, float], derivative: Derivative,
              rtol: float = 1e-8, atol: float = 1e-10, **kwargs) -> Trajectory:
    """
    Functional front-end: RK45Solver(derivative, rtol, atol, **kwargs).integrate(...).
    `initial_state` is a flat vector or anything with .as_vector().
    """
    if hasattr(initial_state, "as_vector"):
        initial_state = initial_state.as_vector()
    solver = RK45Solver(derivative, rtol=rtol, atol=atol, **kwargs)
    return solver.integrate(initial_state, t_span)
