"""
MBCS Numerical Integration

This module provides the time grids and the ODE solver wrapper shared by
the growth and kinetics models.

Key features:
- Linear time grids with an explicit step (e.g. t = 0, 0.1, ..., 100)
- Thin wrapper around scipy's solve_ivp returning a plain dataclass
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence
import numpy as np
from numpy.typing import NDArray
from scipy.integrate import solve_ivp


@dataclass
class IntegrationResult:
    """Result of an ODE integration.

    Attributes:
        t: Time points at which the solution is reported
        y: Solution array of shape (n_variables, n_times)
        success: Whether the solver reached the end of the interval
        message: Solver termination message
        n_evaluations: Number of right-hand side evaluations
    """
    t: NDArray[np.float64]
    y: NDArray[np.float64]
    success: bool
    message: str
    n_evaluations: int


def make_time_grid(t_min: float, t_max: float, dt: float) -> NDArray[np.float64]:
    """Create a linearly-spaced time grid including both endpoints.

    Args:
        t_min: Start time
        t_max: End time (must be > t_min)
        dt: Step between consecutive samples (must be > 0 and divide
            t_max - t_min)

    Returns:
        Array t_min, t_min + dt, ..., t_max

    Raises:
        ValueError: If dt does not divide the interval, so the grid would
            stop short of or overshoot t_max
    """
    if dt <= 0:
        raise ValueError(f"dt must be > 0, got {dt}")
    if t_max <= t_min:
        raise ValueError(f"t_max ({t_max}) must be > t_min ({t_min})")
    steps = (t_max - t_min) / dt
    n_steps = int(round(steps))
    if abs(steps - n_steps) > 1e-6:
        raise ValueError(f"dt ({dt}) must divide t_max - t_min ({t_max - t_min})")
    return t_min + dt * np.arange(n_steps + 1, dtype=float)


def solve_ode(rhs: Callable[[float, NDArray[np.float64]], NDArray[np.float64]],
              y0: Sequence[float],
              t_span: tuple[float, float],
              t_eval: Optional[NDArray[np.float64]] = None,
              method: str = "LSODA",
              rtol: float = 1e-8,
              atol: float = 1e-10) -> IntegrationResult:
    """Integrate ``dy/dt = rhs(t, y)`` with scipy's solve_ivp.

    Args:
        rhs: Right-hand side function
        y0: Initial state
        t_span: (t_start, t_end)
        t_eval: Optional times at which to report the solution
        method: solve_ivp method name
        rtol: Relative tolerance
        atol: Absolute tolerance

    Returns:
        IntegrationResult with the solution

    Raises:
        ValueError: If the time span is empty
        RuntimeError: If the solver fails
    """
    t0, t1 = float(t_span[0]), float(t_span[1])
    if t1 <= t0:
        raise ValueError(f"t_span end ({t1}) must be > start ({t0})")

    sol = solve_ivp(rhs, (t0, t1), np.asarray(y0, dtype=float),
                    t_eval=t_eval, method=method, rtol=rtol, atol=atol)

    if not sol.success:
        raise RuntimeError(f"ODE integration failed: {sol.message}")

    return IntegrationResult(
        t=sol.t,
        y=sol.y,
        success=bool(sol.success),
        message=str(sol.message),
        n_evaluations=int(sol.nfev),
    )
