import heapq
import logging
import math
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from pathfinder_lab.core.errors import ConfigurationError
from pathfinder_lab.core.events import (
    Progress, SearchResult, SearchState, SearchStats, Terminal,
)
from pathfinder_lab.core.grid import INF, Cell, Grid

logger = logging.getLogger(__name__)

StepEvent = Union[Progress, Terminal]
Heuristic = Callable[[Cell, Cell], float]

HEURISTICS: Dict[str, Heuristic] = {
    "manhattan": lambda a, b: a.manhattan_distance_to(b),
    "euclidean": lambda a, b: math.hypot(a.row - b.row, a.col - b.col),
    "chebyshev": lambda a, b: max(abs(a.row - b.row), abs(a.col - b.col)),
    # Zero heuristic turns A* into Dijkstra
    "zero": lambda a, b: 0,
}


class Solver(ABC):
    """
    Resumable search session over one Grid.

    Construct it, then call step() until it returns a Terminal event (or use
    run() / run_all()). A session is single use.
    """
    name = "solver"
    info: Dict[str, object] = {}

    def __init__(self, grid: Grid,
                 on_progress: Optional[Callable[[int], None]] = None,
                 on_complete: Optional[Callable[[SearchResult], None]] = None,
                 should_stop: Optional[Callable[[], bool]] = None,
                 event_writer=None):
        if grid.start_index is None or grid.end_index is None:
            raise ConfigurationError("Grid needs both a Start and an End cell before searching")
        self.grid = grid
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.should_stop = should_stop
        self.event_writer = event_writer

        self.state = SearchState.READY
        self.nodes_explored = 0
        self.path_length = 0
        self.path: List[Tuple[int, int]] = []
        self.result: Optional[SearchResult] = None
        self._stop_requested = False

        # Closed set: indices already popped and expanded
        self.closed = bytearray(len(grid.cells))
        self.frontier: List[tuple] = []

        grid.reset_annotations()
        self.start_index = grid.start_index
        self.end_index = grid.end_index
        self.seed_frontier()

    # --- Algorithm hooks ---

    @abstractmethod
    def seed_frontier(self):
        pass

    @abstractmethod
    def pop_next(self) -> Optional[int]:
        """Pops the next live frontier index, or None when the frontier is empty."""

    @abstractmethod
    def cost_of(self, cell: Cell) -> float:
        pass

    @abstractmethod
    def relax(self, idx: int, cost: float, neighbor: Cell, n_idx: int):
        """Records a strictly better cost for neighbor and (re)queues it."""

    # --- Stepping protocol ---

    @property
    def finished(self) -> bool:
        return self.state.is_terminal

    def stop(self):
        """Requests cancellation. Observed at the top of the next step."""
        if not self.finished:
            self._stop_requested = True

    def _stop_signalled(self) -> bool:
        if self._stop_requested:
            return True
        return bool(self.should_stop and self.should_stop())

    def step(self) -> Optional[StepEvent]:
        """
        Performs one step. Returns a Progress event when a cell was explored,
        a Terminal event when the session ended, or None when the popped cell
        was Start (Start and End are never reported as explored).
        """
        if self.finished:
            raise RuntimeError(f"{self.name} session already finished ({self.state.value})")

        if self._stop_signalled():
            return self._finish(SearchState.CANCELLED, SearchResult(
                success=False, nodes_explored=self.nodes_explored, message="Stopped"))

        if self.state is SearchState.READY:
            self.state = SearchState.RUNNING
            logger.debug(f"{self.name}: searching {self.grid.start!r} -> {self.grid.end!r}")

        idx = self.pop_next()
        if idx is None:
            return self._finish(SearchState.EXHAUSTED, SearchResult(
                success=False, nodes_explored=self.nodes_explored, message="No path found"))

        grid = self.grid
        cell = grid.cells[idx]
        self.closed[idx] = 1

        event = None
        if not cell.is_special:
            cell.explored = True
            self.nodes_explored += 1
            if self.event_writer:
                self.event_writer.log_explore(cell.row, cell.col)
            if self.on_progress:
                self.on_progress(self.nodes_explored)
            event = Progress(self.nodes_explored)

        if idx == self.end_index:
            path = self.reconstruct_path()
            return self._finish(SearchState.FOUND, SearchResult(
                success=True, nodes_explored=self.nodes_explored,
                path_length=len(path), path=path, path_cost=self.cost_of(cell)))

        cost = self.cost_of(cell)
        for neighbor in grid.neighbors(cell):
            if neighbor.is_wall:
                continue
            n_idx = grid.index_of(neighbor)
            if self.closed[n_idx]:
                continue
            self.relax(idx, cost, neighbor, n_idx)

        return event

    def run(self) -> Iterator[StepEvent]:
        """Steps until terminal, yielding every event."""
        while not self.finished:
            event = self.step()
            if event is not None:
                yield event

    def run_all(self) -> SearchResult:
        for _ in self.run():
            pass
        return self.result

    def statistics(self) -> SearchStats:
        return SearchStats(self.nodes_explored, self.path_length, self.state)

    def _finish(self, state: SearchState, result: SearchResult) -> Terminal:
        self.state = state
        self.result = result
        self.path_length = result.path_length
        self.path = list(result.path)
        # Transient structures go away with the session
        self.frontier = []

        if self.event_writer:
            self.event_writer.log_result(result)
        logger.info(f"{self.name}: {state.value}, explored={result.nodes_explored}, "
                    f"path_length={result.path_length}")
        if self.on_complete:
            self.on_complete(result)
        return Terminal(result, state)

    def reconstruct_path(self) -> List[Tuple[int, int]]:
        cells = self.grid.cells
        path = []
        idx = self.end_index
        while idx is not None:
            cell = cells[idx]
            path.append(cell.position)
            if idx == self.start_index:
                break
            idx = cell.previous
        path.reverse()

        for r, c in path:
            cell = cells[r * self.grid.cols + c]
            if not cell.is_special:
                cell.is_path = True
            if self.event_writer:
                self.event_writer.log_path_add(r, c)
        return path


class Dijkstra(Solver):
    """
    Uniform-cost search whose pop order matches re-sorting every cell stably
    by distance before each pop, starting from row-major order.

    Only discovered cells are queued. Each carries a key
    (distance, step of last improvement, key before that improvement), with
    (inf, -1, row-major index) for a cell that was never improved. Equal
    distances then pop in the order cells reached them; cells improved in
    the same step fall back to their earlier keys, and finally to row-major
    order.
    """
    name = "dijkstra"
    info = {
        "name": "Dijkstra's Algorithm",
        "description": "Explores cells in order of their distance from the start",
        "time_complexity": "O((V + E) log V)",
        "space_complexity": "O(V)",
        "guarantees_optimal": True,
    }

    def seed_frontier(self):
        start = self.grid.cells[self.start_index]
        start.distance = 0
        self._pops = 0
        key = (0, -1, (INF, -1, self.start_index))
        self._keys: Dict[int, tuple] = {self.start_index: key}
        self.frontier = [(key, self.start_index)]

    def pop_next(self) -> Optional[int]:
        while self.frontier:
            key, idx = heapq.heappop(self.frontier)
            # Superseded by a later improvement
            if self.closed[idx] or key != self._keys[idx]:
                continue
            self._pops += 1
            return idx
        return None

    def cost_of(self, cell: Cell) -> float:
        return cell.distance

    def relax(self, idx: int, cost: float, neighbor: Cell, n_idx: int):
        candidate = cost + neighbor.movement_cost()
        if candidate < neighbor.distance:
            neighbor.distance = candidate
            neighbor.previous = idx
            key = (candidate, self._pops, self._keys.get(n_idx, (INF, -1, n_idx)))
            self._keys[n_idx] = key
            heapq.heappush(self.frontier, (key, n_idx))


class AStar(Solver):
    """
    Heuristic-guided search. Frontier entries are keyed (f, insertion
    sequence, index); a cell keeps the sequence number of its first insertion,
    so equal f-scores pop in the order cells joined the frontier.
    """
    name = "astar"
    info = {
        "name": "A* Search Algorithm",
        "description": "Uses a heuristic to guide the search towards the goal",
        "time_complexity": "O(b^d) where b is branching factor and d is depth",
        "space_complexity": "O(b^d)",
        "guarantees_optimal": True,
    }

    def __init__(self, grid: Grid, heuristic: Union[str, Heuristic] = "manhattan", **kwargs):
        if isinstance(heuristic, str):
            try:
                heuristic = HEURISTICS[heuristic]
            except KeyError:
                raise ValueError(f"Unknown heuristic {heuristic!r}, expected one of {sorted(HEURISTICS)}")
        self.heuristic = heuristic
        self._sequence: Dict[int, int] = {}
        super().__init__(grid, **kwargs)

    def seed_frontier(self):
        start = self.grid.cells[self.start_index]
        end = self.grid.cells[self.end_index]
        start.g_score = 0
        start.h_score = self.heuristic(start, end)
        start.f_score = start.h_score
        self._sequence = {self.start_index: 0}
        self.frontier = [(start.f_score, 0, self.start_index)]

    def pop_next(self) -> Optional[int]:
        cells = self.grid.cells
        while self.frontier:
            f, _, idx = heapq.heappop(self.frontier)
            if self.closed[idx] or f != cells[idx].f_score:
                continue
            return idx
        return None

    def cost_of(self, cell: Cell) -> float:
        return cell.g_score

    def relax(self, idx: int, cost: float, neighbor: Cell, n_idx: int):
        tentative = cost + neighbor.movement_cost()
        if tentative >= neighbor.g_score:
            return
        neighbor.previous = idx
        neighbor.g_score = tentative
        neighbor.h_score = self.heuristic(neighbor, self.grid.cells[self.end_index])
        neighbor.f_score = tentative + neighbor.h_score
        seq = self._sequence.get(n_idx)
        if seq is None:
            seq = len(self._sequence)
            self._sequence[n_idx] = seq
        heapq.heappush(self.frontier, (neighbor.f_score, seq, n_idx))


SOLVERS = {
    "dijkstra": Dijkstra,
    "astar": AStar,
}


def get_solver(name: str, grid: Grid, **kwargs) -> Solver:
    try:
        cls = SOLVERS[name]
    except KeyError:
        raise ValueError(f"Unknown algorithm {name!r}, expected one of {sorted(SOLVERS)}")
    return cls(grid, **kwargs)
