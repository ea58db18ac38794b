"""
Fitness landscape functions z = z(x, y).

The state of a system is its position in the xy plane and the elevation z
is the value of a property of that state. Families follow the classic
picture book: a single Mount Fuji peak, a rugged ripple landscape with many
peaks and valleys, and a moving landscape whose peak shifts with the state
of the system (feedback).
"""
from __future__ import annotations

from typing import Dict, List, Tuple
import numpy as np
from numpy.typing import NDArray

LANDSCAPE_NAMES = ["fuji", "ripple", "moving"]

# Images and videos illustrating landscape types
LANDSCAPE_MEDIA: Dict[str, str] = {
    "fuji": "https://upload.wikimedia.org/wikipedia/commons/thumb/1/12/Mount_Fuji_and_Shinkansen_100_from_Fuji_River.jpg/1200px-Mount_Fuji_and_Shinkansen_100_from_Fuji_River.jpg",
    "ripple": "https://images.ireland.com/media/Images/Down/3e656c481c7a49a2b366d4f8696b17b2.jpg",
    "discrete": "https://reference.wolfram.com/language/ref/Files/DiscretePlot3D.en/O_3.png",
    "continuum": "https://i.stack.imgur.com/jGmh5.png",
    "annealing": "https://www.researchgate.net/profile/Omid_Ghasemalizadeh/publication/308786233/figure/fig1/AS:412751978614791@1475419148801/Simulated-Annealing-optimization-of-a-one-dimensional-objective-function.png",
    "waddington": "https://www.researchgate.net/profile/Vladimir-Kovac/publication/230718157/figure/fig1/AS:300417280954380@1448636469781/The-epigenetic-landscape-proposed-by-C-H-Waddington-1940-in-Organisers-genes.png",
    "static_video": "https://www.youtube.com/embed/4pdiAneMMhU?start=83",
    "moving_video": "https://www.youtube.com/embed/iaq_Fpr4KZc?start=83",
    "exploration_video": "https://www.youtube.com/embed/KUvuv74_E1U",
    "epigenetic_video": "https://www.youtube.com/embed/PRmWBBnWfdA",
}


def fuji_landscape(x: NDArray[np.float64], y: NDArray[np.float64],
                   height: float = 1.0, width: float = 1.0) -> NDArray[np.float64]:
    """Single smooth peak at the origin."""
    if width <= 0:
        raise ValueError(f"width must be > 0, got {width}")
    return height * np.exp(-(np.square(x) + np.square(y)) / (2.0 * width ** 2))


def ripple_landscape(x: NDArray[np.float64], y: NDArray[np.float64],
                     height: float = 1.0, frequency: float = 2.0,
                     envelope: float = 3.0) -> NDArray[np.float64]:
    """Rugged landscape: many peaks and valleys under a broad envelope."""
    if envelope <= 0:
        raise ValueError(f"envelope must be > 0, got {envelope}")
    ripples = np.cos(frequency * x) * np.cos(frequency * y)
    hull = np.exp(-(np.square(x) + np.square(y)) / (2.0 * envelope ** 2))
    return height * hull * (1.0 + ripples) / 2.0


def moving_landscape(x: NDArray[np.float64], y: NDArray[np.float64],
                     state: Tuple[float, float], lead: float = 1.0,
                     height: float = 1.0, width: float = 1.0) -> NDArray[np.float64]:
    """Landscape whose peak sits ``lead`` ahead of the current state.

    The peak moves away as the system approaches it: the value of a
    position depends on the position itself.
    """
    sx, sy = state
    norm = np.hypot(sx, sy)
    if norm == 0:
        px, py = lead, 0.0
    else:
        px, py = sx + lead * sx / norm, sy + lead * sy / norm
    return fuji_landscape(x - px, y - py, height=height, width=width)


def make_grid(extent: float = 5.0, n: int = 101) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Square meshgrid over [-extent, extent]^2."""
    if n < 3:
        raise ValueError(f"n must be >= 3, got {n}")
    axis = np.linspace(-extent, extent, n)
    return np.meshgrid(axis, axis, indexing="ij")


def make_landscape(name: str, extent: float = 5.0, n: int = 101) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Evaluate a named landscape on a square grid."""
    if name not in LANDSCAPE_NAMES:
        raise ValueError(f"Unknown landscape '{name}'. Valid: {', '.join(LANDSCAPE_NAMES)}")
    X, Y = make_grid(extent, n)
    if name == "fuji":
        Z = fuji_landscape(X, Y)
    elif name == "ripple":
        Z = ripple_landscape(X, Y)
    else:
        Z = moving_landscape(X, Y, state=(0.0, 0.0))
    return X, Y, Z


def local_maxima(z: NDArray[np.float64]) -> List[Tuple[int, int]]:
    """Grid indices strictly higher than all eight neighbours."""
    z = np.asarray(z, dtype=float)
    if z.ndim != 2:
        raise ValueError(f"z must be 2-D, got {z.ndim}-D")
    padded = np.pad(z, 1, mode="constant", constant_values=-np.inf)
    is_peak = np.ones_like(z, dtype=bool)
    rows, cols = z.shape
    for di in (-1, 0, 1):
        for dj in (-1, 0, 1):
            if di == 0 and dj == 0:
                continue
            neighbour = padded[1 + di:1 + di + rows, 1 + dj:1 + dj + cols]
            is_peak &= z > neighbour
    return [(int(i), int(j)) for i, j in zip(*np.nonzero(is_peak))]


def hill_climb(z: NDArray[np.float64], start: Tuple[int, int],
               max_steps: int = 10_000) -> List[Tuple[int, int]]:
    """Greedy ascent from ``start`` to the nearest peak.

    Returns the visited path; the last element is a local maximum unless
    ``max_steps`` was exhausted.
    """
    z = np.asarray(z, dtype=float)
    rows, cols = z.shape
    i, j = start
    if not (0 <= i < rows and 0 <= j < cols):
        raise ValueError(f"start {start} outside grid of shape {z.shape}")

    path = [(int(i), int(j))]
    for _ in range(max_steps):
        best = (i, j)
        for di in (-1, 0, 1):
            for dj in (-1, 0, 1):
                ni, nj = i + di, j + dj
                if 0 <= ni < rows and 0 <= nj < cols and z[ni, nj] > z[best]:
                    best = (ni, nj)
        if best == (i, j):
            break
        i, j = best
        path.append((int(i), int(j)))
    return path
