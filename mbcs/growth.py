"""
MBCS Population Growth Models

Discrete and continuous models of population growth:

- Unconstrained (discrete):  p_{t+1} = r p_t            =>  p_t = r^t p_0
- Unconstrained (Euler):     p <- p + dt p (r - 1)
- Constrained (discrete):    p_{n+1} = r(p_n) p_n,  r(p) linear and decreasing
- Logistic map:              n <- n + r n (1 - n)
- Exponential (continuous):  N(t) = N_0 e^{μ t},  μ = ln 2 / T
- Logistic (continuous):     dN/dt = μ N (1 - N/K)
                             N(t) = K N_0 / (N_0 + (K - N_0) e^{-μ t})
"""

from dataclasses import dataclass
from typing import Optional
import numpy as np
from numpy.typing import ArrayLike, NDArray

from .integrate import solve_ode


@dataclass
class GrowthTrajectory:
    """A population trajectory.

    Attributes:
        times: Sample times (step index for discrete models)
        values: Population at each sample
        label: Short description of the model
    """
    times: NDArray[np.float64]
    values: NDArray[np.float64]
    label: str

    @property
    def final(self) -> float:
        """Population at the last sample."""
        return float(self.values[-1])


@dataclass
class LinearGrowthFactor:
    """Density-dependent growth factor r(p) = intercept + slope * p.

    The default reproduces r(1) ≈ 1.1 with equilibrium population 50,
    i.e. r(p) = 1.1 - 2e-3 p.
    """
    intercept: float = 1.10
    slope: float = -0.002

    def __call__(self, p):
        return self.intercept + self.slope * p

    @property
    def equilibrium(self) -> float:
        """Population at which r(p) = 1 (no net growth)."""
        if self.slope == 0:
            raise ValueError("equilibrium undefined for a constant growth factor")
        return (1.0 - self.intercept) / self.slope

    @classmethod
    def from_points(cls, p1: float, r1: float, p2: float, r2: float) -> "LinearGrowthFactor":
        """Line through (p1, r1) and (p2, r2)."""
        if p1 == p2:
            raise ValueError(f"p1 and p2 must differ, got {p1}")
        slope = (r2 - r1) / (p2 - p1)
        return cls(intercept=r1 - slope * p1, slope=slope)


def _check_steps(n_steps: int, dt: Optional[float] = None) -> None:
    if n_steps < 1:
        raise ValueError(f"n_steps must be >= 1, got {n_steps}")
    if dt is not None and dt <= 0:
        raise ValueError(f"dt must be > 0, got {dt}")


def _check_positive(**values: float) -> None:
    for name, value in values.items():
        if value <= 0:
            raise ValueError(f"{name} must be > 0, got {value}")


def exponential_closed_form(t: ArrayLike, r: float, p0: float = 1.0) -> NDArray[np.float64]:
    """p_t = p_0 r^t."""
    _check_positive(r=r)
    return p0 * np.power(r, np.asarray(t, dtype=float))


def unconstrained_growth_discrete(p0: float, r: float, n_steps: int = 10) -> GrowthTrajectory:
    """Iterate p <- r p for ``n_steps`` generations.

    The returned values are p_1 .. p_n (the initial value is not included).
    """
    _check_positive(r=r)
    _check_steps(n_steps)
    traj = np.empty(n_steps)
    p = float(p0)
    for i in range(n_steps):
        p = p * r
        traj[i] = p
    return GrowthTrajectory(times=np.arange(1, n_steps + 1, dtype=float),
                            values=traj,
                            label=f"Unconstrained growth, r={r}")


def unconstrained_growth_euler(p0: float, r: float, dt: float = 0.01,
                               n_steps: int = 1000) -> GrowthTrajectory:
    """Iterate p <- p + dt p (r - 1), the small-step version of p <- r p."""
    _check_positive(r=r)
    _check_steps(n_steps, dt)
    traj = np.empty(n_steps)
    p = float(p0)
    for i in range(n_steps):
        p += dt * (p * (r - 1))
        traj[i] = p
    return GrowthTrajectory(times=dt * np.arange(1, n_steps + 1, dtype=float),
                            values=traj,
                            label=f"Unconstrained growth (dt={dt}), r={r}")


def constrained_growth_discrete(p0: float,
                                factor: Optional[LinearGrowthFactor] = None,
                                n_steps: int = 100) -> GrowthTrajectory:
    """Iterate p <- p r(p): discrete logistic growth."""
    _check_steps(n_steps)
    if factor is None:
        factor = LinearGrowthFactor()
    traj = np.empty(n_steps)
    p = float(p0)
    for i in range(n_steps):
        p = p * factor(p)
        traj[i] = p
    return GrowthTrajectory(times=np.arange(1, n_steps + 1, dtype=float),
                            values=traj,
                            label=f"Constrained growth, r(p)={factor.intercept}{factor.slope:+}p")


def constrained_growth_euler(n0: float, r: float, crowding: float = 0.028,
                             dt: float = 0.01, n_steps: int = 1000) -> GrowthTrajectory:
    """Iterate n <- n + dt n (r - c n); the population saturates at r / c."""
    _check_positive(r=r, crowding=crowding)
    _check_steps(n_steps, dt)
    traj = np.empty(n_steps)
    n = float(n0)
    for i in range(n_steps):
        n += dt * (n * (r - crowding * n))
        traj[i] = n
    return GrowthTrajectory(times=dt * np.arange(1, n_steps + 1, dtype=float),
                            values=traj,
                            label=f"Constrained growth, r={r}")


def logistic_map(n0: float, r: float, n_steps: int = 50) -> GrowthTrajectory:
    """Iterate n <- n + r n (1 - n) with n measured in units of the capacity."""
    _check_positive(r=r)
    _check_steps(n_steps)
    traj = np.empty(n_steps)
    n = float(n0)
    for i in range(n_steps):
        n += n * r * (1.0 - n)
        traj[i] = n
    return GrowthTrajectory(times=np.arange(1, n_steps + 1, dtype=float),
                            values=traj,
                            label=f"Logistic map, r={r}")


def logistic_euler(n0: float, r: float, dt: float = 0.01,
                   n_steps: int = 500) -> GrowthTrajectory:
    """Iterate n <- n + dt r n (1 - n)."""
    _check_positive(r=r)
    _check_steps(n_steps, dt)
    traj = np.empty(n_steps)
    n = float(n0)
    for i in range(n_steps):
        n += dt * n * r * (1.0 - n)
        traj[i] = n
    return GrowthTrajectory(times=dt * np.arange(1, n_steps + 1, dtype=float),
                            values=traj,
                            label=f"Logistic growth (dt={dt}), r={r}")


def growth_rate_from_cycle(cycle_length: float) -> float:
    """μ = ln 2 / T: the population doubles every cell cycle T."""
    _check_positive(cycle_length=cycle_length)
    return float(np.log(2.0) / cycle_length)


def cycle_from_growth_rate(mu: float) -> float:
    """T = ln 2 / μ."""
    _check_positive(mu=mu)
    return float(np.log(2.0) / mu)


def exponential_growth(t: ArrayLike, N0: float, cycle_length: float) -> NDArray[np.float64]:
    """N(t) = N_0 e^{μ t} with μ = ln 2 / T."""
    _check_positive(N0=N0)
    mu = growth_rate_from_cycle(cycle_length)
    return N0 * np.exp(mu * np.asarray(t, dtype=float))


def logistic_growth(t: ArrayLike, N0: float, K: float, cycle_length: float) -> NDArray[np.float64]:
    """N(t) = K N_0 / (N_0 + (K - N_0) e^{-μ t})."""
    _check_positive(N0=N0, K=K)
    mu = growth_rate_from_cycle(cycle_length)
    t = np.asarray(t, dtype=float)
    return K * N0 / (N0 + (K - N0) * np.exp(-mu * t))


def logistic_growth_rate_from_sample(t: ArrayLike, N: ArrayLike, N0: float, K: float) -> NDArray[np.float64]:
    """Invert the logistic solution for μ.

    μ = (1/t) ln( N (K - N_0) / (N_0 (K - N)) )

    Samples at t = 0, or with N outside (0, K), give ``nan``.
    """
    _check_positive(N0=N0, K=K)
    t = np.asarray(t, dtype=float)
    N = np.asarray(N, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = N * (K - N0) / (N0 * (K - N))
        mu = np.log(ratio) / t
    return np.where(np.isfinite(mu) & (t > 0), mu, np.nan)


def logistic_cycle_from_sample(t: ArrayLike, N: ArrayLike, N0: float, K: float) -> NDArray[np.float64]:
    """Cell cycle length T = ln 2 / μ recovered from logistic samples."""
    mu = logistic_growth_rate_from_sample(t, N, N0, K)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.log(2.0) / mu


def logistic_growth_numeric(t: ArrayLike, N0: float, K: float, cycle_length: float) -> NDArray[np.float64]:
    """Integrate dN/dt = μ N (1 - N/K) from N(0) = N_0 and sample at ``t``.

    ``t`` must be non-negative and increasing; it need not start at 0.
    """
    _check_positive(N0=N0, K=K)
    mu = growth_rate_from_cycle(cycle_length)
    t = np.atleast_1d(np.asarray(t, dtype=float))
    if np.any(t < 0):
        raise ValueError("t must be >= 0")
    if np.any(np.diff(t) <= 0):
        raise ValueError("t must be strictly increasing")
    if t[-1] == 0:
        return np.full_like(t, N0)

    def rhs(_, y):
        return mu * y * (1.0 - y / K)

    result = solve_ode(rhs, [N0], (0.0, float(t[-1])), t_eval=t)
    return result.y[0]
