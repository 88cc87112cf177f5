import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from pathfinder_lab.algo.randomize import generate_random_environment
from pathfinder_lab.algo.division import RecursiveDivision
from pathfinder_lab.algo.solvers import AStar, Dijkstra
from pathfinder_lab.core.events import SearchResult
from pathfinder_lab.core.grid import Grid

logger = logging.getLogger(__name__)


@dataclass
class Comparison:
    dijkstra: SearchResult
    astar: SearchResult
    dijkstra_seconds: float
    astar_seconds: float

    @property
    def both_succeeded(self) -> bool:
        return self.dijkstra.success and self.astar.success

    @property
    def path_lengths_match(self) -> bool:
        return self.dijkstra.path_length == self.astar.path_length

    @property
    def costs_match(self) -> bool:
        return self.dijkstra.path_cost == self.astar.path_cost

    @property
    def winner(self) -> Optional[str]:
        """Algorithm that explored fewer cells, None on a tie."""
        d, a = self.dijkstra.nodes_explored, self.astar.nodes_explored
        if a < d:
            return "astar"
        if d < a:
            return "dijkstra"
        return None

    @property
    def efficiency_percent(self) -> float:
        """How many fewer cells the winner explored, relative to the loser."""
        d, a = self.dijkstra.nodes_explored, self.astar.nodes_explored
        worst = max(d, a)
        if worst == 0:
            return 0.0
        return round(abs(d - a) / worst * 100, 1)

    def summary(self) -> str:
        d, a = self.dijkstra, self.astar
        if not d.success and not a.success:
            return "Neither algorithm could find a path in this configuration."
        if not self.both_succeeded:
            only = "Dijkstra" if d.success else "A*"
            return f"Only {only} found a path in this configuration."

        lines = []
        if self.winner == "astar":
            lines.append(f"A* explored {self.efficiency_percent}% fewer cells than Dijkstra "
                         f"({a.nodes_explored} vs {d.nodes_explored}).")
        elif self.winner == "dijkstra":
            lines.append(f"Dijkstra explored {self.efficiency_percent}% fewer cells than A* "
                         f"({d.nodes_explored} vs {a.nodes_explored}).")
        else:
            lines.append(f"Both algorithms explored {d.nodes_explored} cells.")

        if self.costs_match and self.path_lengths_match:
            lines.append(f"Both found an optimal path of {d.path_length} cells (cost {d.path_cost}).")
        elif self.costs_match:
            # Equal-cost routes through differently weighted cells
            lines.append(f"Both found cost-{d.path_cost} paths, of {d.path_length} and {a.path_length} cells.")
        else:
            lines.append(f"Path costs differ: Dijkstra {d.path_cost}, A* {a.path_cost}.")
        lines.append(f"Time: Dijkstra {self.dijkstra_seconds * 1000:.2f} ms, "
                     f"A* {self.astar_seconds * 1000:.2f} ms.")
        return "\n".join(lines)


def _timed(solver) -> Tuple[SearchResult, float]:
    t0 = time.perf_counter()
    result = solver.run_all()
    return result, time.perf_counter() - t0


def compare(grid: Grid, heuristic="manhattan") -> Comparison:
    """Runs both algorithms, each on its own copy of grid."""
    d_result, d_time = _timed(Dijkstra(grid.copy()))
    a_result, a_time = _timed(AStar(grid.copy(), heuristic=heuristic))
    comparison = Comparison(d_result, a_result, d_time, a_time)
    if comparison.both_succeeded and not comparison.costs_match:
        logger.warning(f"Path costs differ: dijkstra={d_result.path_cost}, astar={a_result.path_cost}")
    return comparison


@dataclass
class BenchmarkReport:
    sizes: List[int]
    runs: int
    explored: Dict[str, np.ndarray] = field(default_factory=dict)
    path_lengths: Dict[str, np.ndarray] = field(default_factory=dict)
    seconds: Dict[str, np.ndarray] = field(default_factory=dict)
    mismatches: int = 0
    unsolved: int = 0

    def stats(self) -> Dict[str, Dict[str, float]]:
        out = {}
        for algo, explored in self.explored.items():
            out[algo] = {
                "explored_mean": float(np.mean(explored)) if explored.size else 0.0,
                "explored_median": float(np.median(explored)) if explored.size else 0.0,
                "explored_max": int(np.max(explored)) if explored.size else 0,
                "path_mean": float(np.mean(self.path_lengths[algo])) if explored.size else 0.0,
                "ms_mean": float(np.mean(self.seconds[algo]) * 1000) if explored.size else 0.0,
            }
        return out

    def explored_ratio(self) -> float:
        """Mean of A* explored / Dijkstra explored over solved mazes."""
        d = self.explored.get("dijkstra")
        a = self.explored.get("astar")
        if d is None or a is None or not d.size:
            return 0.0
        return float(np.mean(a / np.maximum(d, 1)))


def benchmark(sizes: Sequence[int] = (10, 20, 30), runs: int = 10,
              seed: Optional[int] = None, weighted: bool = False) -> BenchmarkReport:
    """
    Generates runs random mazes per size and compares both algorithms on each.
    Unsolvable layouts are counted and left out of the aggregates.
    """
    rng = np.random.default_rng(seed)
    collected = {"dijkstra": ([], [], []), "astar": ([], [], [])}
    report = BenchmarkReport(sizes=list(sizes), runs=runs)

    for size in sizes:
        for _ in range(runs):
            maze_seed = int(rng.integers(0, 2**31 - 1))
            grid = Grid(size, size)
            if weighted:
                generate_random_environment(grid, seed=maze_seed)
            else:
                RecursiveDivision(grid, seed=maze_seed).run_all()

            result = compare(grid)
            if not result.both_succeeded:
                report.unsolved += 1
                continue
            if not result.costs_match:
                report.mismatches += 1
            for name, res, secs in (("dijkstra", result.dijkstra, result.dijkstra_seconds),
                                    ("astar", result.astar, result.astar_seconds)):
                explored, lengths, times = collected[name]
                explored.append(res.nodes_explored)
                lengths.append(res.path_length)
                times.append(secs)
        logger.info(f"Benchmarked {runs} mazes at {size}x{size}")

    for name, (explored, lengths, times) in collected.items():
        report.explored[name] = np.asarray(explored, dtype=np.int64)
        report.path_lengths[name] = np.asarray(lengths, dtype=np.int64)
        report.seconds[name] = np.asarray(times, dtype=np.float64)
    return report
