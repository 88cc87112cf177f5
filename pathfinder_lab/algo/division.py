import logging
import random
from collections import deque
from typing import Iterator, List, Tuple

from pathfinder_lab.algo.base import Generator
from pathfinder_lab.core.grid import Grid

logger = logging.getLogger(__name__)


def is_reachable(grid: Grid) -> bool:
    """Breadth-first check that End can be reached from Start over open cells."""
    start, end = grid.start_index, grid.end_index
    if start is None or end is None:
        return False
    seen = bytearray(len(grid.cells))
    seen[start] = 1
    queue = deque([grid.cells[start]])
    while queue:
        cell = queue.popleft()
        if grid.index_of(cell) == end:
            return True
        for n in grid.open_neighbors(cell):
            n_idx = grid.index_of(n)
            if not seen[n_idx]:
                seen[n_idx] = 1
                queue.append(n)
    return False


def reachable_count(grid: Grid) -> int:
    """Number of open cells connected to Start, Start included."""
    start = grid.start_index
    seen = bytearray(len(grid.cells))
    seen[start] = 1
    queue = deque([grid.cells[start]])
    count = 1
    while queue:
        cell = queue.popleft()
        for n in grid.open_neighbors(cell):
            n_idx = grid.index_of(n)
            if not seen[n_idx]:
                seen[n_idx] = 1
                count += 1
                queue.append(n)
    return count


def _walk_options(grid: Grid, r: int, c: int, end_r: int, end_c: int,
                  rng: random.Random, detour_chance: float) -> List[Tuple[int, int]]:
    options = []
    if r < end_r:
        options.append((r + 1, c))
    if r > end_r:
        options.append((r - 1, c))
    if c < end_c:
        options.append((r, c + 1))
    if c > end_c:
        options.append((r, c - 1))
    # Detours, for a less straight corridor
    if detour_chance > 0:
        if rng.random() < detour_chance and r > 0:
            options.append((r - 1, c))
        if rng.random() < detour_chance and r < grid.rows - 1:
            options.append((r + 1, c))
        if rng.random() < detour_chance and c > 0:
            options.append((r, c - 1))
        if rng.random() < detour_chance and c < grid.cols - 1:
            options.append((r, c + 1))
    return options


def ensure_path(grid: Grid, rng: random.Random, detour_chance: float = 0.5) -> int:
    """
    Carves a corridor from Start to End when End is unreachable.
    Returns the number of walls cleared.
    """
    if is_reachable(grid):
        return 0

    start, end = grid.start, grid.end
    r, c = start.row, start.col
    end_r, end_c = end.row, end.col
    walked = [(r, c)]
    max_steps = grid.rows * grid.cols * 2
    steps = 0
    while (r, c) != (end_r, end_c) and steps < max_steps:
        r, c = rng.choice(_walk_options(grid, r, c, end_r, end_c, rng, detour_chance))
        walked.append((r, c))
        steps += 1

    # Step budget spent: finish the corridor without detours
    while (r, c) != (end_r, end_c):
        r, c = rng.choice(_walk_options(grid, r, c, end_r, end_c, rng, 0.0))
        walked.append((r, c))

    cleared = 0
    for row, col in walked:
        cell = grid.cells[row * grid.cols + col]
        if cell.is_wall and not cell.is_special:
            cell.is_wall = False
            cleared += 1
    logger.debug(f"Carved repair corridor: {len(walked)} cells walked, {cleared} walls cleared")
    return cleared


class RecursiveDivision(Generator):
    """
    Recursive-division walls plus a connectivity repair pass.
    Start and End are never overwritten.
    """
    name = "division"

    def run(self) -> Iterator[str]:
        grid = self.grid
        rng = self.rng

        for cell in grid.cells:
            if not cell.is_special:
                grid.clear_cell(cell.row, cell.col)

        # Region stack: (row, col, height, width, horizontal)
        stack = [(0, 0, grid.rows, grid.cols, True)]
        while stack:
            row, col, height, width, horizontal = stack.pop()
            if height < 3 or width < 3:
                continue

            wall_col = col + (0 if horizontal else rng.randrange(width - 2))
            wall_row = row + (rng.randrange(height - 2) if horizontal else 0)
            pass_col = wall_col + (rng.randrange(width) if horizontal else 0)
            pass_row = wall_row + (0 if horizontal else rng.randrange(height))
            d_col = 1 if horizontal else 0
            d_row = 0 if horizontal else 1
            length = width if horizontal else height

            for i in range(length):
                r = wall_row + i * d_row
                c = wall_col + i * d_col
                if (r, c) == (pass_row, pass_col) or not grid.is_valid_position(r, c):
                    continue
                # set_wall skips Start and End
                grid.set_wall(r, c)

            if horizontal:
                first = (row, col, wall_row - row + 1, width, False)
                second = (wall_row + 1, col, row + height - (wall_row + 1), width, False)
            else:
                first = (row, col, height, wall_col - col + 1, True)
                second = (row, wall_col + 1, height, col + width - (wall_col + 1), True)
            # LIFO: first sub-region is divided before the second
            stack.append(second)
            stack.append(first)

            self.step_count += 1
            if self.step_count % 50 == 0:
                yield f"Dividing... Regions: {len(stack)}"

        cleared = ensure_path(grid, rng, self.config.detour_chance)
        if cleared:
            yield f"Repaired: {cleared} walls cleared"
        yield "Done"
