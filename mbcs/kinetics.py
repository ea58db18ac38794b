"""
MBCS Chemical Kinetics

Mass-action dynamics of a reversible reaction

    a A + b B  <-- k1 / k2 -->  c C + d D

with net rate v = k1 [A]^a [B]^b - k2 [C]^c [D]^d and d[X]/dt = ν_X v,
where ν_X is the signed stoichiometric coefficient. At equilibrium v = 0
and the reaction quotient

    Q = [C]^c [D]^d / ([A]^a [B]^b)

reaches K_eq = k1 / k2, whose units are M^{c + d - a - b}.

Temperature enters through the Arrhenius law k = A e^{-Ea / (R T)}.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from .integrate import make_time_grid, solve_ode

# Gas constant in L·atm/(mol·K), the unit system used for Ea here
GAS_CONSTANT = 0.082


@dataclass
class Reaction:
    """A reversible reaction with mass-action kinetics.

    Attributes:
        name: Identifier
        reactants: Species -> stoichiometric coefficient (left side)
        products: Species -> stoichiometric coefficient (right side)
        description: Human-readable equation
    """
    name: str
    reactants: dict[str, int]
    products: dict[str, int]
    description: str = ""

    def __post_init__(self) -> None:
        """Validate the stoichiometry after initialization."""
        if not self.reactants or not self.products:
            raise ValueError(f"reaction '{self.name}' needs reactants and products")
        for side in (self.reactants, self.products):
            for species, coeff in side.items():
                if coeff <= 0:
                    raise ValueError(f"coefficient of {species} must be > 0, got {coeff}")
        overlap = set(self.reactants) & set(self.products)
        if overlap:
            raise ValueError(f"species on both sides: {', '.join(sorted(overlap))}")

    @property
    def species(self) -> list[str]:
        """Species in state-vector order: reactants then products."""
        return list(self.reactants) + list(self.products)

    @property
    def stoichiometry(self) -> NDArray[np.float64]:
        """Signed coefficients ν (negative for reactants)."""
        return np.array([-float(c) for c in self.reactants.values()]
                        + [float(c) for c in self.products.values()])

    @property
    def order_change(self) -> int:
        """c + d - a - b: exponent of M in the units of K_eq."""
        return sum(self.products.values()) - sum(self.reactants.values())


@dataclass
class MassActionResult:
    """Concentrations of all species over time."""
    reaction: Reaction
    t: NDArray[np.float64]
    concentrations: NDArray[np.float64]  # Shape (n_species, n_times)
    k_forward: float
    k_backward: float

    def __getitem__(self, species: str) -> NDArray[np.float64]:
        return self.concentrations[species_index(self.reaction, species)]

    @property
    def quotient(self) -> NDArray[np.float64]:
        """Reaction quotient Q along the trajectory."""
        return reaction_quotient(self.reaction, self.concentrations)

    @property
    def final(self) -> dict[str, float]:
        """Concentrations at the end of the run."""
        return {s: float(self.concentrations[i, -1]) for i, s in enumerate(self.reaction.species)}


REACTIONS: dict[str, Reaction] = {
    "isomerization": Reaction(
        "isomerization", {"a": 1}, {"c": 1}, "a <-> c"),
    "association": Reaction(
        "association", {"a": 1, "b": 1}, {"c": 1}, "a + b <-> c"),
    "double_displacement": Reaction(
        "double_displacement", {"a": 1, "b": 1}, {"c": 1, "d": 2}, "a + b <-> c + 2d"),
    "dimerization": Reaction(
        "dimerization", {"a": 2}, {"b": 1}, "2a <-> b (singles and couples)"),
    "nitrogen_dioxide": Reaction(
        "nitrogen_dioxide", {"NO2": 2}, {"N2O4": 1}, "2 NO2 <-> N2O4"),
    "sodium_carbonate": Reaction(
        "sodium_carbonate", {"Na2CO3": 1, "CaCl2": 1}, {"CaCO3": 1, "NaCl": 2},
        "Na2CO3 + CaCl2 <-> CaCO3 + 2 NaCl"),
    "hydrogen_iodide": Reaction(
        "hydrogen_iodide", {"H2": 1, "I2": 1}, {"HI": 2}, "H2 + I2 <-> 2 HI"),
}

# Default rate constants and initial concentrations (M) for each demo
KINETICS_DEMOS: dict[str, dict] = {
    "isomerization": {"k1": 0.23, "k2": 0.25, "initial": {"a": 0.05, "c": 0.0}, "t_max": 10.0},
    "association": {"k1": 0.23, "k2": 0.25, "initial": {"a": 0.05, "b": 1.0, "c": 0.0}, "t_max": 10.0},
    "double_displacement": {"k1": 1.3, "k2": 2.5,
                            "initial": {"a": 0.05, "b": 0.05, "c": 0.05, "d": 0.05}, "t_max": 50.0},
    "dimerization": {"k1": 0.28, "k2": 0.53, "initial": {"a": 0.5, "b": 0.0}, "t_max": 10.0},
}


def get_reaction(name: str) -> Reaction:
    """Look up a reaction by name.

    Raises:
        ValueError: If the name is not recognized
    """
    if name not in REACTIONS:
        valid = ", ".join(REACTIONS.keys())
        raise ValueError(f"Unknown reaction '{name}'. Valid: {valid}")
    return REACTIONS[name]


def species_index(reaction: Reaction, species: str) -> int:
    """Row of ``species`` in the state vector."""
    try:
        return reaction.species.index(species)
    except ValueError:
        raise ValueError(f"Unknown species '{species}' for reaction '{reaction.name}'") from None


def _check_rates(k1: float, k2: float) -> None:
    if k1 <= 0:
        raise ValueError(f"k1 must be > 0, got {k1}")
    if k2 <= 0:
        raise ValueError(f"k2 must be > 0, got {k2}")


def _mass_action_term(y: NDArray[np.float64], coefficients: Sequence[int]) -> NDArray[np.float64]:
    term = np.ones_like(y[0], dtype=float)
    for row, coeff in zip(y, coefficients):
        term = term * np.power(row, coeff)
    return term


def rate(reaction: Reaction, y: ArrayLike, k1: float, k2: float) -> NDArray[np.float64]:
    """Net rate v = k1 Π[reactant]^ν - k2 Π[product]^ν.

    ``y`` has one row per species (or is a single state vector).
    """
    y = np.asarray(y, dtype=float)
    n_reactants = len(reaction.reactants)
    forward = k1 * _mass_action_term(y[:n_reactants], list(reaction.reactants.values()))
    backward = k2 * _mass_action_term(y[n_reactants:], list(reaction.products.values()))
    return forward - backward


def derivatives(reaction: Reaction, k1: float, k2: float):
    """Right-hand side dy/dt = ν v for the ODE solver."""
    _check_rates(k1, k2)
    nu = reaction.stoichiometry

    def rhs(_, y):
        return nu * rate(reaction, y, k1, k2)

    return rhs


def initial_state(reaction: Reaction, initial: Mapping[str, float]) -> NDArray[np.float64]:
    """State vector from a species -> concentration mapping (missing species are 0)."""
    unknown = set(initial) - set(reaction.species)
    if unknown:
        raise ValueError(f"Unknown species for '{reaction.name}': {', '.join(sorted(unknown))}")
    y0 = np.array([float(initial.get(s, 0.0)) for s in reaction.species])
    if np.any(y0 < 0):
        raise ValueError(f"initial concentrations must be >= 0, got {y0.tolist()}")
    return y0


def simulate(reaction: Reaction,
             initial: Mapping[str, float],
             t_span: tuple[float, float],
             k1: float,
             k2: float,
             dt: float = 0.05) -> MassActionResult:
    """Integrate the mass-action ODEs from ``initial`` over ``t_span``.

    Args:
        reaction: Reaction to simulate
        initial: Initial concentrations by species, at t_span[0]
        t_span: (t_start, t_end)
        k1: Forward rate constant
        k2: Backward rate constant
        dt: Output sampling step

    Returns:
        MassActionResult with concentrations on the output grid

    Raises:
        RuntimeError: If the solver fails
    """
    y0 = initial_state(reaction, initial)
    t_eval = make_time_grid(float(t_span[0]), float(t_span[1]), dt)
    result = solve_ode(derivatives(reaction, k1, k2), y0, (t_eval[0], t_eval[-1]), t_eval=t_eval)
    return MassActionResult(
        reaction=reaction,
        t=result.t,
        concentrations=result.y,
        k_forward=k1,
        k_backward=k2,
    )


def run_demo(name: str, k1: Optional[float] = None, k2: Optional[float] = None,
             initial: Optional[Mapping[str, float]] = None) -> MassActionResult:
    """Run one of the KINETICS_DEMOS with optional overrides."""
    if name not in KINETICS_DEMOS:
        valid = ", ".join(KINETICS_DEMOS.keys())
        raise ValueError(f"Unknown demo '{name}'. Valid: {valid}")
    demo = KINETICS_DEMOS[name]
    start = dict(demo["initial"])
    if initial:
        start.update(initial)
    return simulate(
        get_reaction(name),
        start,
        (0.0, demo["t_max"]),
        k1=demo["k1"] if k1 is None else k1,
        k2=demo["k2"] if k2 is None else k2,
    )


def reaction_quotient(reaction: Reaction, concentrations: ArrayLike) -> NDArray[np.float64]:
    """Q = Π[product]^ν / Π[reactant]^ν.

    ``concentrations`` is a state vector or an (n_species, n_times) array.
    Undefined quotients (empty reactant side) are ``nan``.
    """
    y = np.asarray(concentrations, dtype=float)
    if y.shape[0] != len(reaction.species):
        raise ValueError(f"expected {len(reaction.species)} species, got {y.shape[0]}")
    n_reactants = len(reaction.reactants)
    numerator = _mass_action_term(y[n_reactants:], list(reaction.products.values()))
    denominator = _mass_action_term(y[:n_reactants], list(reaction.reactants.values()))
    with np.errstate(divide="ignore", invalid="ignore"):
        Q = numerator / denominator
    return np.where(np.isfinite(Q), Q, np.nan)


def equilibrium_constant(k1: float, k2: float) -> float:
    """K_eq = k1 / k2."""
    _check_rates(k1, k2)
    return k1 / k2


def equilibrium_constant_from_concentrations(reaction: Reaction,
                                             concentrations: Mapping[str, float]) -> float:
    """K_eq from equilibrium concentrations of every species."""
    missing = set(reaction.species) - set(concentrations)
    if missing:
        raise ValueError(f"missing concentrations for: {', '.join(sorted(missing))}")
    y = np.array([float(concentrations[s]) for s in reaction.species])
    if np.any(y <= 0):
        raise ValueError(f"equilibrium concentrations must be > 0, got {y.tolist()}")
    return float(reaction_quotient(reaction, y))


def equilibrium_units(reaction: Reaction) -> str:
    """Units of K_eq as a power of molarity, e.g. 'M^-1'."""
    exponent = reaction.order_change
    if exponent == 0:
        return "dimensionless"
    if exponent == 1:
        return "M"
    return f"M^{exponent}"


def equilibrium_reactant(reaction: Reaction, species: str,
                         others: Mapping[str, float], K_eq: ArrayLike) -> NDArray[np.float64]:
    """Equilibrium concentration of one reactant given all other species.

    For H2 + I2 <-> 2 HI:  [I2] = [HI]^2 / ([H2] K_eq)
    """
    if species not in reaction.reactants:
        raise ValueError(f"'{species}' is not a reactant of '{reaction.name}'")
    missing = set(reaction.species) - {species} - set(others)
    if missing:
        raise ValueError(f"missing concentrations for: {', '.join(sorted(missing))}")
    K_eq = np.asarray(K_eq, dtype=float)
    if np.any(K_eq <= 0):
        raise ValueError("K_eq must be > 0")

    numerator = 1.0
    for s, coeff in reaction.products.items():
        numerator *= float(others[s]) ** coeff
    denominator = 1.0
    for s, coeff in reaction.reactants.items():
        if s != species:
            denominator *= float(others[s]) ** coeff

    coeff = reaction.reactants[species]
    return np.power(numerator / (denominator * K_eq), 1.0 / coeff)


def arrhenius(T: ArrayLike, A: float, Ea: float, R: float = GAS_CONSTANT) -> NDArray[np.float64]:
    """k = A e^{-Ea / (R T)}."""
    T = np.asarray(T, dtype=float)
    if np.any(T <= 0):
        raise ValueError("temperature must be > 0")
    if A <= 0:
        raise ValueError(f"A must be > 0, got {A}")
    return A * np.exp(-Ea / (R * T))


def log_arrhenius(T: ArrayLike, A: float, Ea: float, R: float = GAS_CONSTANT) -> NDArray[np.float64]:
    """ln k = ln A - Ea / (R T): linear in 1/T with slope -Ea/R."""
    T = np.asarray(T, dtype=float)
    if np.any(T <= 0):
        raise ValueError("temperature must be > 0")
    if A <= 0:
        raise ValueError(f"A must be > 0, got {A}")
    return np.log(A) - Ea / (R * T)


@dataclass
class ReversibleArrhenius:
    """ln k of both directions of a reversible reaction over temperature.

    The exothermic direction has the smaller barrier (Ea / 2 here), the
    endothermic direction the full Ea.
    """
    T: NDArray[np.float64]
    log_k_exothermic: NDArray[np.float64]
    log_k_endothermic: NDArray[np.float64]
    log_K_eq: NDArray[np.float64] = field(init=False)

    def __post_init__(self) -> None:
        self.log_K_eq = self.log_k_exothermic - self.log_k_endothermic


def reversible_arrhenius(T: ArrayLike, A: float, Ea: float,
                         R: float = GAS_CONSTANT) -> ReversibleArrhenius:
    """Rate constants of the exothermic (Ea/2) and endothermic (Ea) directions.

    K_eq = k_exo / k_endo = e^{Ea / (2 R T)} decreases with temperature:
    heating shifts the equilibrium towards the endothermic side.
    """
    T = np.asarray(T, dtype=float)
    return ReversibleArrhenius(
        T=T,
        log_k_exothermic=log_arrhenius(T, A, Ea / 2.0, R),
        log_k_endothermic=log_arrhenius(T, A, Ea, R),
    )
