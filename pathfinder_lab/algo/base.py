import logging
import random
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from pathfinder_lab.core.config import GeneratorConfig
from pathfinder_lab.core.grid import Grid

logger = logging.getLogger(__name__)


class Generator(ABC):
    """
    Layout generator over an existing Grid. All randomness comes from
    self.rng, so equal seeds on equal-sized grids give equal layouts.
    """
    name = "generator"

    def __init__(self, grid: Grid, seed: Optional[int] = None, config: Optional[GeneratorConfig] = None):
        self.grid = grid
        self.seed = seed
        self.config = config or GeneratorConfig()
        self.rng = random.Random(seed)
        self.step_count = 0

    @abstractmethod
    def run(self) -> Iterator[str]:
        """Rewrites self.grid in place, yielding status lines along the way."""

    def run_all(self) -> Grid:
        for _ in self.run():
            pass
        logger.debug(f"{self.name}: {self.grid.rows}x{self.grid.cols}, seed={self.seed}, "
                     f"{self.grid.wall_count()} walls")
        return self.grid
