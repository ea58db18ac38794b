"""
MBCS Experiments

This module runs the worked examples of each section and collects their
results for plotting and reporting.

Experiments include:
- Diversity indices of the example communities
- Metrics of the example networks
- Peaks and hill climbing on the fitness landscapes
- Discrete, Euler and continuous growth laws, and recovering T from data
- Stem cell scenarios and the inverse (estimation) problem
- Mass-action kinetics, equilibrium constants and the Arrhenius law
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence
import numpy as np
from numpy.typing import NDArray

from . import diversity, growth, kinetics, landscapes, networks, stemcells
from .integrate import make_time_grid


@dataclass
class DiversityResult:
    """Diversity summaries of a set of communities."""
    communities: dict[str, diversity.Community]
    summaries: dict[str, diversity.DiversitySummary]


@dataclass
class NetworkResult:
    """Metrics of one network."""
    name: str
    matrix: NDArray[np.int64]
    summary: networks.NetworkSummary
    mean_distances: NDArray[np.float64]  # Mean shortest distance from each node


@dataclass
class LandscapeResult:
    """A landscape sampled on a grid with its peaks and one greedy climb."""
    name: str
    X: NDArray[np.float64]
    Y: NDArray[np.float64]
    Z: NDArray[np.float64]
    peaks: list[tuple[int, int]]
    climb: list[tuple[int, int]]


@dataclass
class GrowthResult:
    """Growth model trajectories and the cycle length recovered from a logistic curve."""
    r: float
    iterative: dict[str, growth.GrowthTrajectory]
    t: NDArray[np.float64]
    N0: float
    K: float
    exponential: dict[float, NDArray[np.float64]]  # Cycle length -> N(t)
    logistic: dict[float, NDArray[np.float64]]
    logistic_numeric_error: float  # Max |closed form - ODE| over all curves
    recovered_cycle_length: dict[float, float]


@dataclass
class StemCellResult:
    """Stem cell trajectories by scenario and parameter estimates by case."""
    trajectories: dict[str, stemcells.StemCellTrajectory]
    recurrence: stemcells.StemCellTrajectory
    estimates: dict[str, stemcells.ParameterEstimate]
    estimation_truth: dict[str, dict[str, float]]


@dataclass
class KineticsResult:
    """Mass-action runs, equilibrium constants and Arrhenius curves."""
    runs: dict[str, kinetics.MassActionResult]
    equilibrium_constants: dict[str, float]
    equilibrium_units: dict[str, str]
    iodine_K_eq: NDArray[np.float64]
    iodine_I2: NDArray[np.float64]
    Ea: float
    temperature: NDArray[np.float64]
    rate_constant: NDArray[np.float64]
    reversible: kinetics.ReversibleArrhenius


# Equilibrium concentrations (M) of the textbook reactions
EQUILIBRIUM_EXAMPLES: dict[str, dict[str, float]] = {
    "nitrogen_dioxide": {"NO2": 2.0, "N2O4": 3.0},
    "sodium_carbonate": {"Na2CO3": 2.0, "CaCl2": 0.5, "CaCO3": 2.0, "NaCl": 1.2},
}

# H2 + I2 <-> 2 HI with fixed [HI] and [H2]
IODINE_FIXED = {"HI": 0.75, "H2": 0.2}


def run_diversity(counts: Optional[Sequence[int]] = None,
                  species: Optional[Sequence[str]] = None) -> DiversityResult:
    """Summarize the example communities, plus a custom census if given.

    Args:
        counts: Optional custom species counts
        species: Optional names for the custom counts

    Returns:
        DiversityResult keyed by community name
    """
    communities = {name: diversity.get_community(name) for name in diversity.EXAMPLE_COMMUNITIES}
    if counts is not None:
        if species is None:
            species = [f"species_{i + 1}" for i in range(len(counts))]
        communities["custom"] = diversity.Community(species=list(species), counts=np.asarray(counts))

    summaries = {name: diversity.summarize(c) for name, c in communities.items()}
    return DiversityResult(communities=communities, summaries=summaries)


def run_networks(matrices: Optional[dict[str, list[list[int]]]] = None) -> dict[str, NetworkResult]:
    """Characterize each network: type, links, density, degrees, distances."""
    if matrices is None:
        matrices = networks.EXAMPLE_MATRICES

    results = {}
    for name, matrix in matrices.items():
        A = networks.as_adjacency(matrix)
        results[name] = NetworkResult(
            name=name,
            matrix=A,
            summary=networks.summarize(A),
            mean_distances=np.array([networks.mean_shortest_distance(A, i)
                                     for i in range(A.shape[0])]),
        )
    return results


def run_landscapes(extent: float = 5.0, n: int = 101,
                   start: Optional[tuple[int, int]] = None) -> dict[str, LandscapeResult]:
    """Sample each landscape, locate its peaks and climb from ``start``.

    The default start is a corner of the grid, far from the central peak.
    """
    if start is None:
        start = (n // 5, n // 5)

    results = {}
    for name in landscapes.LANDSCAPE_NAMES:
        X, Y, Z = landscapes.make_landscape(name, extent, n)
        results[name] = LandscapeResult(
            name=name,
            X=X,
            Y=Y,
            Z=Z,
            peaks=landscapes.local_maxima(Z),
            climb=landscapes.hill_climb(Z, start),
        )
    return results


def run_growth(r: float = 1.1,
               N0: float = 200.0,
               K: float = 400.0,
               cycle_lengths: Sequence[float] = (5.0, 10.0, 15.0),
               t_max: float = 100.0,
               dt: float = 0.1) -> GrowthResult:
    """Run the growth models and recover T from the logistic curves.

    Args:
        r: Growth factor of the iterative models
        N0: Initial population of the continuous models
        K: Carrying capacity
        cycle_lengths: Cell cycle lengths T to compare
        t_max: End of the time grid
        dt: Time grid step

    Returns:
        GrowthResult with all trajectories
    """
    iterative = {
        "unconstrained": growth.unconstrained_growth_discrete(1.0, r, n_steps=10),
        "unconstrained_euler": growth.unconstrained_growth_euler(1.0, r),
        "constrained": growth.constrained_growth_discrete(1.0),
        "constrained_euler": growth.constrained_growth_euler(1.0, r),
        "logistic_map": growth.logistic_map(0.01, min(r, 2.0)),
        "logistic_euler": growth.logistic_euler(0.01, r),
    }

    t = make_time_grid(0.0, t_max, dt)
    exponential = {}
    logistic = {}
    recovered = {}
    max_error = 0.0
    for T in cycle_lengths:
        exponential[T] = growth.exponential_growth(t, N0, T)
        logistic[T] = growth.logistic_growth(t, N0, K, T)
        numeric = growth.logistic_growth_numeric(t, N0, K, T)
        max_error = max(max_error, float(np.max(np.abs(numeric - logistic[T]))))
        estimates = growth.logistic_cycle_from_sample(t, logistic[T], N0, K)
        finite = estimates[np.isfinite(estimates)]
        recovered[T] = float(np.median(finite)) if finite.size else float("nan")

    return GrowthResult(
        r=r,
        iterative=iterative,
        t=t,
        N0=N0,
        K=K,
        exponential=exponential,
        logistic=logistic,
        logistic_numeric_error=max_error,
        recovered_cycle_length=recovered,
    )


def run_stemcells(base_params: Optional[stemcells.StemCellParameters] = None,
                  apoptosis: float = 0.0,
                  n_cycles: int = 10) -> StemCellResult:
    """Run the named scenarios, a custom run, and the estimation cases.

    Args:
        base_params: Parameters of the custom run (also supplies P0, D0, T
            and the time grid of the named scenarios)
        apoptosis: Apoptosis probability applied to the named scenarios,
            capped at 1 - pp - dd for each scenario
        n_cycles: Cycles of the discrete recurrence

    Returns:
        StemCellResult
    """
    if base_params is None:
        base_params = stemcells.StemCellParameters()

    trajectories = {"custom": stemcells.simulate(base_params)}
    for name, scenario in stemcells.STEM_CELL_SCENARIOS.items():
        fit = min(apoptosis, max(0.0, 1.0 - scenario["pp"] - scenario["dd"]))
        params = stemcells.get_scenario_params(name, base_params, apoptosis=fit)
        trajectories[name] = stemcells.simulate(params)

    recurrence = stemcells.iterate_divisions(base_params.P0, base_params.D0,
                                             base_params.modes, n_cycles)

    estimates = {}
    for name, case in stemcells.ESTIMATION_CASES.items():
        modes = stemcells.DivisionModes(pp=case["pp"], dd=case["dd"])
        params = stemcells.StemCellParameters(modes=modes, P0=base_params.P0, D0=base_params.D0,
                                              cycle_length=case["cycle_length"],
                                              t_max=base_params.t_max, dt=base_params.dt)
        traj = stemcells.simulate(params)
        estimates[name] = stemcells.estimate_parameters(traj.t, traj.P, traj.D)

    return StemCellResult(
        trajectories=trajectories,
        recurrence=recurrence,
        estimates=estimates,
        estimation_truth={name: dict(case) for name, case in stemcells.ESTIMATION_CASES.items()},
    )


def run_kinetics(k1: Optional[float] = None,
                 k2: Optional[float] = None,
                 b0: float = 1.0,
                 Ea: float = 10.0,
                 T_range: tuple[float, float] = (100.0, 300.0),
                 n_T: int = 100) -> KineticsResult:
    """Run the mass-action demos and the equilibrium / Arrhenius examples.

    ``k1`` and ``k2`` override the rate constants of the dimerization demo;
    ``b0`` sets the initial [b] of the association demo.
    """
    runs = {
        "isomerization": kinetics.run_demo("isomerization"),
        "association": kinetics.run_demo("association", initial={"b": b0}),
        "double_displacement": kinetics.run_demo("double_displacement"),
        "dimerization": kinetics.run_demo("dimerization", k1=k1, k2=k2),
    }

    constants = {}
    units = {}
    for name, concentrations in EQUILIBRIUM_EXAMPLES.items():
        reaction = kinetics.get_reaction(name)
        constants[name] = kinetics.equilibrium_constant_from_concentrations(reaction, concentrations)
        units[name] = kinetics.equilibrium_units(reaction)
    for name, run in runs.items():
        units[name] = kinetics.equilibrium_units(run.reaction)

    iodine = kinetics.get_reaction("hydrogen_iodide")
    K_eq = np.linspace(0.1, 1.0, 10)
    I2 = kinetics.equilibrium_reactant(iodine, "I2", IODINE_FIXED, K_eq)

    T = np.linspace(T_range[0], T_range[1], n_T)
    return KineticsResult(
        runs=runs,
        equilibrium_constants=constants,
        equilibrium_units=units,
        iodine_K_eq=K_eq,
        iodine_I2=I2,
        Ea=Ea,
        temperature=T,
        rate_constant=kinetics.arrhenius(T, A=1.0, Ea=Ea),
        reversible=kinetics.reversible_arrhenius(T, A=1.0, Ea=Ea),
    )


@dataclass
class SectionResults:
    """Results of every section that was run (None for skipped sections)."""
    diversity: Optional[DiversityResult] = None
    networks: Optional[dict[str, NetworkResult]] = None
    landscapes: Optional[dict[str, LandscapeResult]] = None
    growth: Optional[GrowthResult] = None
    stemcells: Optional[StemCellResult] = None
    kinetics: Optional[KineticsResult] = None
    parameters: dict = field(default_factory=dict)


def _finite_or_none(value: float) -> Optional[float]:
    return float(value) if np.isfinite(value) else None


def summarize_results(results: SectionResults) -> dict:
    """Create a JSON-serializable summary of all experimental results.

    Args:
        results: Section results

    Returns:
        Summary dictionary
    """
    summary: dict = {"parameters": results.parameters}

    if results.diversity is not None:
        summary["diversity"] = {
            name: {
                "species": results.diversity.communities[name].species,
                "counts": results.diversity.communities[name].counts.tolist(),
                "total": s.total,
                "richness": s.richness,
                "dominance": s.dominance,
                "simpson": s.simpson,
                "evenness": _finite_or_none(s.evenness),
            }
            for name, s in results.diversity.summaries.items()
        }

    if results.networks is not None:
        summary["networks"] = {
            name: {
                "kind": r.summary.kind,
                "n_nodes": r.summary.n_nodes,
                "n_links": r.summary.n_links,
                "min_links": r.summary.min_links,
                "max_links": r.summary.max_links,
                "density": _finite_or_none(r.summary.density),
                "average_degree": r.summary.average_degree,
                "p_k": r.summary.degree_distribution.p_k.tolist(),
                "mean_distances": [_finite_or_none(d) for d in r.mean_distances],
            }
            for name, r in results.networks.items()
        }

    if results.landscapes is not None:
        summary["landscapes"] = {
            name: {
                "n_peaks": len(r.peaks),
                "climb_length": len(r.climb) - 1,
                "climb_end_height": float(r.Z[r.climb[-1]]),
                "global_max": float(r.Z.max()),
            }
            for name, r in results.landscapes.items()
        }

    if results.growth is not None:
        g = results.growth
        summary["growth"] = {
            "r": g.r,
            "final_values": {name: traj.final for name, traj in g.iterative.items()},
            "N0": g.N0,
            "K": g.K,
            "logistic_final": {str(T): float(v[-1]) for T, v in g.logistic.items()},
            "recovered_cycle_length": {str(T): _finite_or_none(v)
                                       for T, v in g.recovered_cycle_length.items()},
            "logistic_numeric_error": g.logistic_numeric_error,
        }

    if results.stemcells is not None:
        s = results.stemcells
        summary["stemcells"] = {
            "final": {
                name: {"P": float(traj.P[-1]), "D": float(traj.D[-1]), "A": float(traj.A[-1])}
                for name, traj in s.trajectories.items()
            },
            "estimates": {},
        }
        for name, est in s.estimates.items():
            ppdd, T = est.median()
            truth = s.estimation_truth[name]
            summary["stemcells"]["estimates"][name] = {
                "true_pp_minus_dd": truth["pp"] - truth["dd"],
                "true_cycle_length": truth["cycle_length"],
                "pp_minus_dd": _finite_or_none(ppdd),
                "cycle_length": _finite_or_none(T),
            }

    if results.kinetics is not None:
        k = results.kinetics
        summary["kinetics"] = {
            "final_concentrations": {name: run.final for name, run in k.runs.items()},
            "final_quotient": {name: _finite_or_none(float(run.quotient[-1]))
                               for name, run in k.runs.items()},
            "rate_ratio": {name: run.k_forward / run.k_backward for name, run in k.runs.items()},
            "equilibrium_constants": k.equilibrium_constants,
            "equilibrium_units": k.equilibrium_units,
            "iodine": {"K_eq": k.iodine_K_eq.tolist(), "I2": k.iodine_I2.tolist()},
            "arrhenius": {
                "Ea": k.Ea,
                "T_range": [float(k.temperature.min()), float(k.temperature.max())],
                "k_range": [float(k.rate_constant.min()), float(k.rate_constant.max())],
            },
        }

    return summary
