"""
MBCS Diversity Indices

Ecological diversity measures computed directly from species counts:

- N: total number of organisms = Σ n_i
- R: richness, number of species present
- D: dominance index = Σ n_i (n_i - 1) / (N (N - 1))
- S: Simpson's index of diversity = 1 - D
- E: Simpson evenness = 1 / (D · R)
"""

from dataclasses import dataclass
from typing import Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass
class Community:
    """Species census of a community.

    Attributes:
        species: Species names
        counts: Number of organisms per species
    """
    species: list[str]
    counts: NDArray[np.int64]

    def __post_init__(self) -> None:
        """Validate the census after initialization."""
        self.species = list(self.species)
        self.counts = as_counts(self.counts)
        if len(self.species) != len(self.counts):
            raise ValueError(
                f"species ({len(self.species)}) and counts ({len(self.counts)}) must have the same length"
            )


@dataclass
class DiversitySummary:
    """All diversity measures of one community."""
    total: int
    richness: int
    dominance: float
    simpson: float
    evenness: float


# Forest census and the three ten-species exercise systems
EXAMPLE_COMMUNITIES: dict[str, dict[str, list]] = {
    "forest": {
        "species": ["Dog", "Mouse", "Cat", "Fox", "Bear"],
        "counts": [50, 50, 50, 50, 50],
    },
    "even_ten": {
        "species": list("ABCDEFGHIJ"),
        "counts": [10, 9, 11, 10, 8, 12, 10, 11, 10, 9],
    },
    "one_dominant": {
        "species": list("ABCDEFGHIJ"),
        "counts": [72, 9, 11, 10, 8, 12, 10, 11, 10, 9],
    },
    "three_species": {
        "species": list("ABCDEFGHIJ"),
        "counts": [33, 33, 34, 0, 0, 0, 0, 0, 0, 0],
    },
}


def get_community(name: str) -> Community:
    """Get one of the example communities by name.

    Raises:
        ValueError: If the name is not recognized
    """
    if name not in EXAMPLE_COMMUNITIES:
        valid = ", ".join(EXAMPLE_COMMUNITIES.keys())
        raise ValueError(f"Unknown community '{name}'. Valid: {valid}")
    entry = EXAMPLE_COMMUNITIES[name]
    return Community(species=list(entry["species"]), counts=np.array(entry["counts"]))


def as_counts(counts: ArrayLike) -> NDArray[np.int64]:
    """Validate and convert species counts to an integer array."""
    arr = np.asarray(counts)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError("counts must be a non-empty 1-D sequence")
    if not np.all(np.isfinite(arr)) or np.any(arr != np.round(arr)):
        raise ValueError(f"counts must be whole numbers, got {arr.tolist()}")
    if np.any(arr < 0):
        raise ValueError(f"counts must be >= 0, got {arr.tolist()}")
    return arr.astype(np.int64)


def total_organisms(counts: ArrayLike) -> int:
    """Total number of organisms N."""
    return int(as_counts(counts).sum())


def richness(counts: ArrayLike) -> int:
    """Number of species with at least one organism."""
    return int(np.count_nonzero(as_counts(counts)))


def dominance_index(counts: ArrayLike) -> float:
    """Dominance index D = Σ n_i (n_i - 1) / (N (N - 1)).

    D is the probability that two organisms drawn without replacement
    belong to the same species.

    Raises:
        ValueError: If there are fewer than two organisms
    """
    n = as_counts(counts).astype(float)
    N = n.sum()
    if N < 2:
        raise ValueError(f"dominance index needs at least 2 organisms, got {int(N)}")
    return float(np.sum(n * (n - 1)) / (N * (N - 1)))


def simpson_index(counts: ArrayLike) -> float:
    """Simpson's index of diversity S = 1 - D."""
    return 1.0 - dominance_index(counts)


def simpson_evenness(counts: ArrayLike) -> float:
    """Simpson evenness E = 1 / (D · R).

    Returns ``inf`` when D = 0 (no species has more than one organism).
    """
    D = dominance_index(counts)
    R = richness(counts)
    if D == 0.0:
        return float("inf")
    return 1.0 / D / R


def summarize(community: Community) -> DiversitySummary:
    """Compute every diversity measure for a community."""
    counts = community.counts
    return DiversitySummary(
        total=total_organisms(counts),
        richness=richness(counts),
        dominance=dominance_index(counts),
        simpson=simpson_index(counts),
        evenness=simpson_evenness(counts),
    )


def size_diversity(sizes: Sequence[float]) -> float:
    """Trait diversity measured as the standard deviation of sizes."""
    arr = np.asarray(sizes, dtype=float)
    if arr.size == 0:
        raise ValueError("sizes must not be empty")
    return float(np.std(arr))
