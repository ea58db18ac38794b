"""
MBCS - Mathematical Biology & Complex Systems

Worked examples of an introductory complex systems course: diversity
indices, network metrics, fitness landscapes, population growth, stem cell
proliferation and differentiation, and mass-action chemical kinetics.

Usage:
    python -m mbcs --help
    python -m mbcs --section stemcells --pp 0.5 --dd 0.3
    python -m mbcs --outdir outputs

Main components:
    - diversity: Dominance, Simpson index and evenness
    - networks: Links, density and degree distribution of adjacency matrices
    - landscapes: Fitness landscape surfaces, peaks and hill climbing
    - growth: Discrete, Euler-stepped and continuous growth laws
    - stemcells: Progenitor/differentiated cell model and its inverse
    - kinetics: Mass-action ODEs, equilibrium constants, Arrhenius law
    - experiments / plot / report: Worked examples, figures and reports
"""

__version__ = "0.1.0"

from .diversity import (
    Community,
    EXAMPLE_COMMUNITIES,
    dominance_index,
    simpson_index,
    simpson_evenness,
)

from .networks import (
    EXAMPLE_MATRICES,
    classify,
    density,
    average_degree,
    degree_distribution,
)

from .growth import (
    exponential_growth,
    logistic_growth,
    growth_rate_from_cycle,
)

from .stemcells import (
    DivisionModes,
    StemCellParameters,
    STEM_CELL_SCENARIOS,
    get_scenario_params,
    estimate_parameters,
)

from .kinetics import (
    Reaction,
    REACTIONS,
    get_reaction,
    arrhenius,
    equilibrium_constant,
)

from .integrate import (
    IntegrationResult,
    make_time_grid,
    solve_ode,
)

__all__ = [
    "Community",
    "EXAMPLE_COMMUNITIES",
    "dominance_index",
    "simpson_index",
    "simpson_evenness",
    "EXAMPLE_MATRICES",
    "classify",
    "density",
    "average_degree",
    "degree_distribution",
    "exponential_growth",
    "logistic_growth",
    "growth_rate_from_cycle",
    "DivisionModes",
    "StemCellParameters",
    "STEM_CELL_SCENARIOS",
    "get_scenario_params",
    "estimate_parameters",
    "Reaction",
    "REACTIONS",
    "get_reaction",
    "arrhenius",
    "equilibrium_constant",
    "IntegrationResult",
    "make_time_grid",
    "solve_ode",
]
