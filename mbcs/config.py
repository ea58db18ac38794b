"""
Run configuration for the MBCS command line.

Every slider of the worked examples is a field here. Values come from the
dataclass defaults, then an optional JSON file (--config), then explicit
command line flags, then an optional JSON string (--params).
"""

from dataclasses import dataclass, field, asdict, fields, replace
from pathlib import Path
from typing import Any, Optional
import json

SECTIONS = ["diversity", "networks", "landscapes", "growth", "stemcells", "kinetics"]


@dataclass
class RunConfig:
    """
    Parameters of one MBCS run.

    Attributes:
        sections: Sections to run (subset of SECTIONS)

        # Diversity
        counts: Optional custom species counts

        # Growth
        r: Growth factor of the iterative models
        N0: Initial population of the continuous models
        K: Carrying capacity
        cycle_lengths: Cell cycle lengths compared in the growth section

        # Stem cells
        pp: Probability of proliferative division
        dd: Probability of differentiative division
        apoptosis: Probability of apoptosis
        cycle_length: Cell cycle length T
        P0: Initial progenitors
        D0: Initial differentiated cells
        t_max: End of the stem cell time grid

        # Kinetics
        k1: Forward rate of the dimerization demo (None = demo default)
        k2: Backward rate of the dimerization demo (None = demo default)
        b0: Initial [b] of the association demo
        Ea: Activation energy for the Arrhenius law
    """
    sections: list[str] = field(default_factory=lambda: list(SECTIONS))

    counts: Optional[list[int]] = None

    r: float = 1.1
    N0: float = 200.0
    K: float = 400.0
    cycle_lengths: list[float] = field(default_factory=lambda: [5.0, 10.0, 15.0])

    pp: float = 0.6
    dd: float = 0.2
    apoptosis: float = 0.0
    cycle_length: float = 24.0
    P0: float = 100.0
    D0: float = 50.0
    t_max: float = 100.0

    k1: Optional[float] = None
    k2: Optional[float] = None
    b0: float = 1.0
    Ea: float = 10.0

    def __post_init__(self) -> None:
        """Validate the configuration after initialization."""
        unknown = [s for s in self.sections if s not in SECTIONS]
        if unknown:
            raise ValueError(f"Unknown section(s) {unknown}. Valid: {', '.join(SECTIONS)}")
        if not self.sections:
            raise ValueError("at least one section must be selected")
        if self.r <= 0:
            raise ValueError(f"r must be > 0, got {self.r}")
        if self.N0 <= 0 or self.K <= 0:
            raise ValueError(f"N0 and K must be > 0, got N0={self.N0}, K={self.K}")
        if not self.cycle_lengths or any(T <= 0 for T in self.cycle_lengths):
            raise ValueError(f"cycle_lengths must be non-empty and > 0, got {self.cycle_lengths}")
        if self.b0 < 0:
            raise ValueError(f"b0 must be >= 0, got {self.b0}")
        for name in ("k1", "k2"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "RunConfig":
        """Create config from dictionary.

        Raises:
            ValueError: If the dictionary has keys that are not config fields
        """
        known_fields = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known_fields)
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")
        return cls(**d)

    def updated(self, overrides: dict[str, Any]) -> "RunConfig":
        """Copy of this config with ``overrides`` applied (None values ignored)."""
        known_fields = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known_fields)
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(path: Path) -> RunConfig:
    """Read a RunConfig from a JSON file."""
    path = Path(path)
    if not path.is_file():
        raise ValueError(f"config file not found: {path}")
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"config file must contain a JSON object, got {type(data).__name__}")
    return RunConfig.from_dict(data)


def parse_overrides(text: Optional[str]) -> dict[str, Any]:
    """Parse a JSON object string of parameter overrides."""
    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"--params is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("--params must be a JSON object")
    return data
