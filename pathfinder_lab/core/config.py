from dataclasses import dataclass, asdict
from typing import Optional, Tuple

# Grid size limits
MIN_SIZE = 2
RECOMMENDED_MAX_SIZE = 50
DEFAULT_ROWS = 20
DEFAULT_COLS = 20

# Weights offered by the editor palette. Any positive int is valid on a cell.
WEIGHT_PALETTE = (1, 2, 5, 10)

# Names accepted by the CLI and the comparison helpers
ALGORITHMS = ("dijkstra", "astar")


@dataclass
class GeneratorConfig:
    # Chance of offering each perpendicular step to the repair walk
    detour_chance: float = 0.5
    # Chance that randomize_weights gives a cell a weight other than 1
    fill_probability: float = 0.5
    weight_choices: Tuple[int, ...] = WEIGHT_PALETTE[1:]
    # Start/End draw attempts. None means 2 * rows * cols.
    max_attempts: Optional[int] = None

    def __post_init__(self):
        if not 0.0 <= self.detour_chance <= 1.0:
            raise ValueError(f"detour_chance must be within [0, 1], got {self.detour_chance}")
        if not 0.0 <= self.fill_probability <= 1.0:
            raise ValueError(f"fill_probability must be within [0, 1], got {self.fill_probability}")
        if not self.weight_choices or any(w < 1 for w in self.weight_choices):
            raise ValueError("weight_choices must hold positive integers")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def as_dict(self):
        return asdict(self)
