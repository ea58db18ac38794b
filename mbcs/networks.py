"""
MBCS Network Metrics

Graph measures computed from a binary adjacency matrix A (N x N):

- undirected:           A_ij = A_ji, A_ii = 0
- directed:             A_ij != A_ji allowed, A_ii = 0
- directed_self_links:  A_ii != 0 allowed

Links:    E_min = N - 1 (tree), E_max = N(N-1)/2 | N(N-1) | N^2
Density:  D = (E - (N - 1)) / (E_max - (N - 1))
Degree:   <k> = 2E/N (undirected), <k_in> = <k_out> = E/N (directed)
"""

from dataclasses import dataclass
from typing import Optional
import networkx as nx
import numpy as np
from numpy.typing import ArrayLike, NDArray

UNDIRECTED = "undirected"
DIRECTED = "directed"
DIRECTED_SELF_LINKS = "directed_self_links"

NETWORK_KINDS = [UNDIRECTED, DIRECTED, DIRECTED_SELF_LINKS]


@dataclass
class DegreeDistribution:
    """Degree distribution p_k and node counts N_k = N p_k."""
    k: NDArray[np.int64]
    p_k: NDArray[np.float64]
    N_k: NDArray[np.float64]

    @property
    def mean(self) -> float:
        """<k> = Σ k p_k."""
        return float(np.sum(self.k * self.p_k))


@dataclass
class NetworkSummary:
    """Global properties of a network."""
    kind: str
    n_nodes: int
    n_links: int
    min_links: int
    max_links: int
    density: float
    average_degree: float
    degree_distribution: DegreeDistribution


# Exercise matrices: draw and characterize the corresponding networks
EXAMPLE_MATRICES: dict[str, list[list[int]]] = {
    "example_1": [
        [0, 1, 0, 1],
        [1, 0, 1, 0],
        [0, 1, 0, 1],
        [1, 0, 1, 0],
    ],
    "example_2": [
        [0, 1, 0, 0],
        [0, 0, 0, 1],
        [1, 0, 0, 1],
        [0, 1, 0, 0],
    ],
    "example_3": [
        [0, 1, 0, 1],
        [1, 0, 1, 1],
        [0, 1, 0, 0],
        [1, 1, 0, 1],
    ],
}


def get_matrix(name: str) -> NDArray[np.int64]:
    """Get one of the example adjacency matrices by name."""
    if name not in EXAMPLE_MATRICES:
        valid = ", ".join(EXAMPLE_MATRICES.keys())
        raise ValueError(f"Unknown matrix '{name}'. Valid: {valid}")
    return as_adjacency(EXAMPLE_MATRICES[name])


def as_adjacency(matrix: ArrayLike) -> NDArray[np.int64]:
    """Validate a square binary adjacency matrix."""
    A = np.asarray(matrix)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"adjacency matrix must be square, got shape {A.shape}")
    if A.shape[0] == 0:
        raise ValueError("adjacency matrix must have at least one node")
    if not np.all((A == 0) | (A == 1)):
        raise ValueError("adjacency matrix must be binary (0/1)")
    return A.astype(np.int64)


def classify(matrix: ArrayLike) -> str:
    """Classify a network as undirected, directed or directed with self-links."""
    A = as_adjacency(matrix)
    if np.any(np.diag(A) != 0):
        return DIRECTED_SELF_LINKS
    if np.array_equal(A, A.T):
        return UNDIRECTED
    return DIRECTED


def count_links(matrix: ArrayLike, kind: Optional[str] = None) -> int:
    """Number of links E.

    Each undirected link appears twice in A, so E = Σ A_ij / 2.
    """
    A = as_adjacency(matrix)
    kind = kind or classify(A)
    total = int(A.sum())
    if kind == UNDIRECTED:
        return total // 2
    return total


def min_links(n_nodes: int) -> int:
    """Minimal number of links of a connected network (a tree): N - 1."""
    if n_nodes < 1:
        raise ValueError(f"n_nodes must be >= 1, got {n_nodes}")
    return n_nodes - 1


def max_links(n_nodes: int, kind: str) -> int:
    """Maximal number of links for a network type.

    Args:
        n_nodes: Number of nodes N
        kind: One of NETWORK_KINDS

    Returns:
        N(N-1)/2 (undirected), N(N-1) (directed) or N^2 (with self-links)
    """
    if n_nodes < 1:
        raise ValueError(f"n_nodes must be >= 1, got {n_nodes}")
    if kind == UNDIRECTED:
        return n_nodes * (n_nodes - 1) // 2
    if kind == DIRECTED:
        return n_nodes * (n_nodes - 1)
    if kind == DIRECTED_SELF_LINKS:
        return n_nodes * n_nodes
    raise ValueError(f"Unknown network kind '{kind}'. Valid: {', '.join(NETWORK_KINDS)}")


def density(matrix: ArrayLike, kind: Optional[str] = None) -> float:
    """Density D = (E - (N - 1)) / (E_max - (N - 1)).

    0 for a tree, 1 for a complete network.

    Raises:
        ValueError: If the network has fewer than 2 nodes, or if E_max equals
            E_min (an undirected pair, where the only connected network is a tree)
    """
    A = as_adjacency(matrix)
    kind = kind or classify(A)
    N = A.shape[0]
    if N < 2:
        raise ValueError(f"density needs at least 2 nodes, got {N}")
    E = count_links(A, kind)
    E_min = min_links(N)
    E_max = max_links(N, kind)
    if E_max == E_min:
        raise ValueError(f"density is undefined for a {kind} network of {N} nodes (E_max = E_min = {E_min})")
    return (E - E_min) / (E_max - E_min)


def in_degrees(matrix: ArrayLike) -> NDArray[np.int64]:
    """k_in: incoming links per node (column sums, A_ij is a link i -> j)."""
    return as_adjacency(matrix).sum(axis=0)


def out_degrees(matrix: ArrayLike) -> NDArray[np.int64]:
    """k_out: outgoing links per node (row sums)."""
    return as_adjacency(matrix).sum(axis=1)


def total_degrees(matrix: ArrayLike) -> NDArray[np.int64]:
    """k_tot = k_in + k_out."""
    return in_degrees(matrix) + out_degrees(matrix)


def degrees(matrix: ArrayLike) -> NDArray[np.int64]:
    """Node degrees k_i.

    For undirected networks this is the number of neighbours; for directed
    networks the total degree.
    """
    A = as_adjacency(matrix)
    if classify(A) == UNDIRECTED:
        return A.sum(axis=1)
    return total_degrees(A)


def average_degree(matrix: ArrayLike) -> float:
    """Average degree: 2E/N for undirected, E/N (= <k_in> = <k_out>) for directed."""
    A = as_adjacency(matrix)
    kind = classify(A)
    N = A.shape[0]
    E = count_links(A, kind)
    if kind == UNDIRECTED:
        return 2.0 * E / N
    return E / N


def degree_distribution(matrix: ArrayLike) -> DegreeDistribution:
    """Degree distribution p_k = (nodes with degree k) / N for k = 0..k_max.

    Uses the degrees returned by ``degrees``, so for directed networks the
    distribution is over total degree.
    """
    A = as_adjacency(matrix)
    k_i = degrees(A)
    N = A.shape[0]
    counts = np.bincount(k_i)
    p_k = counts / N
    return DegreeDistribution(
        k=np.arange(len(counts), dtype=np.int64),
        p_k=p_k,
        N_k=N * p_k,
    )


def to_graph(matrix: ArrayLike) -> nx.Graph:
    """networkx graph of an adjacency matrix; nodes are 0..N-1.

    Undirected networks give an ``nx.Graph``, the others an ``nx.DiGraph``
    with a link i -> j for every A_ij = 1.
    """
    A = as_adjacency(matrix)
    directed = classify(A) != UNDIRECTED
    return nx.from_numpy_array(A, create_using=nx.DiGraph if directed else nx.Graph)


def shortest_distances(matrix: ArrayLike, source: int) -> NDArray[np.float64]:
    """Hop distance from ``source`` to every node.

    Unreachable nodes get ``inf``.
    """
    A = as_adjacency(matrix)
    N = A.shape[0]
    if not 0 <= source < N:
        raise ValueError(f"source must be in [0, {N - 1}], got {source}")

    dist = np.full(N, np.inf)
    for node, hops in nx.single_source_shortest_path_length(to_graph(A), source).items():
        dist[node] = hops
    return dist


def mean_shortest_distance(matrix: ArrayLike, source: int) -> float:
    """Average shortest distance from ``source`` to the other reachable nodes.

    Central nodes have a smaller value than nodes at the boundary.
    Returns ``nan`` if no other node is reachable.
    """
    dist = shortest_distances(matrix, source)
    mask = np.isfinite(dist)
    mask[source] = False
    if not np.any(mask):
        return float("nan")
    return float(np.mean(dist[mask]))


def summarize(matrix: ArrayLike) -> NetworkSummary:
    """Compute global properties of a network."""
    A = as_adjacency(matrix)
    kind = classify(A)
    N = A.shape[0]
    return NetworkSummary(
        kind=kind,
        n_nodes=N,
        n_links=count_links(A, kind),
        min_links=min_links(N),
        max_links=max_links(N, kind),
        density=density(A, kind) if N >= 2 and max_links(N, kind) > min_links(N) else float("nan"),
        average_degree=average_degree(A),
        degree_distribution=degree_distribution(A),
    )
