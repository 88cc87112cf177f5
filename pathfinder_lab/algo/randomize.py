import logging
import random
from typing import Optional, Sequence, Tuple

from pathfinder_lab.algo.division import RecursiveDivision, ensure_path
from pathfinder_lab.core.config import GeneratorConfig
from pathfinder_lab.core.grid import Grid

logger = logging.getLogger(__name__)


def randomize_start_end(grid: Grid, rng: random.Random,
                        max_attempts: Optional[int] = None) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Draws open positions for Start and End, retrying up to max_attempts times
    each. When the attempts run out the last draw is used anyway.
    """
    if max_attempts is None:
        max_attempts = grid.rows * grid.cols * 2

    def is_wall(r, c):
        return grid.cells[r * grid.cols + c].is_wall

    tries = 0
    while True:
        start = (rng.randrange(grid.rows), rng.randrange(grid.cols))
        tries += 1
        if not is_wall(*start) or tries >= max_attempts:
            break

    tries = 0
    while True:
        end = (rng.randrange(grid.rows), rng.randrange(grid.cols))
        tries += 1
        if (end != start and not is_wall(*end)) or tries >= max_attempts:
            break

    if end == start:
        # Degenerate draw: take the first other cell
        idx = 1 if grid.get_index(*start) == 0 else 0
        end = grid.cells[idx].position
        logger.warning(f"Start/End draws exhausted, falling back to End={end}")

    grid.set_start_end(start, end)
    return start, end


def randomize_weights(grid: Grid, rng: random.Random, fill_probability: float = 0.5,
                      choices: Sequence[int] = (2, 5, 10)) -> int:
    """
    Gives each open, non-special cell a weight from choices with probability
    fill_probability, else weight 1. Returns how many cells got a heavy weight.
    """
    heavy = 0
    for cell in grid.cells:
        if cell.is_wall or cell.is_special:
            continue
        if rng.random() < fill_probability:
            cell.weight = rng.choice(choices)
            heavy += 1
        else:
            cell.weight = 1
    return heavy


def generate_random_environment(grid: Grid, seed: Optional[int] = None,
                                config: Optional[GeneratorConfig] = None,
                                fill_probability: float = 1.0) -> Grid:
    """Maze, then random Start/End, then weights on every open cell."""
    config = config or GeneratorConfig()
    generator = RecursiveDivision(grid, seed=seed, config=config)
    generator.run_all()
    rng = generator.rng
    randomize_start_end(grid, rng, config.max_attempts)
    # New Start/End may sit in separate chambers
    ensure_path(grid, rng, config.detour_chance)
    randomize_weights(grid, rng, fill_probability, config.weight_choices)
    logger.debug(f"Random environment {grid.rows}x{grid.cols}: {grid.wall_count()} walls, "
                 f"start={grid.start!r}, end={grid.end!r}")
    return grid
