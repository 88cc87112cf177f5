from typing import Iterator, List, Optional, Tuple

from pathfinder_lab.core.config import MIN_SIZE
from pathfinder_lab.core.errors import InvalidPlacement

INF = float("inf")


class Cell:
    # Roles
    NORMAL = 0
    START = 1
    END = 2

    __slots__ = ('row', 'col', 'role', 'is_wall', 'weight',
                 'explored', 'is_path', 'distance', 'previous',
                 'g_score', 'h_score', 'f_score')

    def __init__(self, row: int, col: int):
        self.row = row
        self.col = col
        self.role = Cell.NORMAL
        self.is_wall = False
        self.weight = 1
        self.reset()

    def reset(self):
        """Clears search annotations only."""
        self.explored = False
        self.is_path = False
        self.distance = INF
        # Index into Grid.cells, never a Cell reference
        self.previous: Optional[int] = None
        self.g_score = INF
        self.h_score = 0
        self.f_score = INF

    def reset_completely(self):
        self.role = Cell.NORMAL
        self.is_wall = False
        self.weight = 1
        self.reset()

    @property
    def is_start(self) -> bool:
        return self.role == Cell.START

    @property
    def is_end(self) -> bool:
        return self.role == Cell.END

    @property
    def is_special(self) -> bool:
        return self.role != Cell.NORMAL

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def movement_cost(self) -> int:
        return self.weight

    def manhattan_distance_to(self, other: "Cell") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    def __repr__(self):
        return f"Cell({self.row}, {self.col})"


class Grid:
    # Neighbor order: up, down, left, right. Search tie-breaking depends on it.
    DIRECTIONS = ((-1, 0), (1, 0), (0, -1), (0, 1))

    __slots__ = ('rows', 'cols', 'cells', 'start_index', 'end_index')

    def __init__(self, rows: int, cols: int):
        self.rows = 0
        self.cols = 0
        self.cells: List[Cell] = []
        self.start_index: Optional[int] = None
        self.end_index: Optional[int] = None
        self.resize(rows, cols)

    def resize(self, rows: int, cols: int):
        """Rebuilds every cell. Old state is discarded."""
        if rows < MIN_SIZE or cols < MIN_SIZE:
            raise ValueError(f"Grid must be at least {MIN_SIZE}x{MIN_SIZE}, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self.cells = [Cell(r, c) for r in range(rows) for c in range(cols)]
        self.start_index = None
        self.end_index = None
        self.set_start(0, 0)
        self.set_end(rows - 1, cols - 1)

    def get_index(self, row: int, col: int) -> int:
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return row * self.cols + col
        raise IndexError(f"Coordinate ({row}, {col}) out of bounds")

    def is_valid_position(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        if self.is_valid_position(row, col):
            return self.cells[row * self.cols + col]
        return None

    def index_of(self, cell: Cell) -> int:
        return cell.row * self.cols + cell.col

    def __getitem__(self, pos: Tuple[int, int]) -> Cell:
        return self.cells[self.get_index(*pos)]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def start(self) -> Optional[Cell]:
        return None if self.start_index is None else self.cells[self.start_index]

    @property
    def end(self) -> Optional[Cell]:
        return None if self.end_index is None else self.cells[self.end_index]

    # --- Special cells ---

    def _place(self, idx: int, role: int):
        cell = self.cells[idx]
        cell.is_wall = False
        cell.weight = 1
        cell.role = role

    def set_start(self, row: int, col: int) -> bool:
        """Moves Start. Returns False (and changes nothing) when the target is End."""
        idx = self.get_index(row, col)
        if idx == self.end_index:
            return False
        if self.start_index is not None:
            self.cells[self.start_index].role = Cell.NORMAL
        self._place(idx, Cell.START)
        self.start_index = idx
        return True

    def set_end(self, row: int, col: int) -> bool:
        """Moves End. Returns False (and changes nothing) when the target is Start."""
        idx = self.get_index(row, col)
        if idx == self.start_index:
            return False
        if self.end_index is not None:
            self.cells[self.end_index].role = Cell.NORMAL
        self._place(idx, Cell.END)
        self.end_index = idx
        return True

    def set_start_end(self, start: Tuple[int, int], end: Tuple[int, int]):
        """Places both special cells at once, so swapping them is possible."""
        s_idx = self.get_index(*start)
        e_idx = self.get_index(*end)
        if s_idx == e_idx:
            raise InvalidPlacement(f"Start and End cannot share cell {start}")
        for idx in (self.start_index, self.end_index):
            if idx is not None:
                self.cells[idx].role = Cell.NORMAL
        self._place(s_idx, Cell.START)
        self._place(e_idx, Cell.END)
        self.start_index = s_idx
        self.end_index = e_idx

    # --- Cell mutators ---

    def set_wall(self, row: int, col: int, wall: bool = True) -> bool:
        cell = self.cells[self.get_index(row, col)]
        if cell.is_special:
            return False
        cell.is_wall = wall
        cell.weight = 1
        return True

    def set_weight(self, row: int, col: int, weight: int) -> bool:
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
            raise ValueError(f"Weight must be a positive integer, got {weight!r}")
        cell = self.cells[self.get_index(row, col)]
        if cell.is_special or cell.is_wall:
            return False
        cell.weight = weight
        return True

    def clear_cell(self, row: int, col: int) -> bool:
        """Eraser: back to an open, unweighted cell. Start and End are left alone."""
        cell = self.cells[self.get_index(row, col)]
        if cell.is_special:
            return False
        cell.is_wall = False
        cell.weight = 1
        cell.explored = False
        cell.is_path = False
        return True

    def clear(self):
        for cell in self.cells:
            cell.reset_completely()
        self.start_index = None
        self.end_index = None
        self.set_start(0, 0)
        self.set_end(self.rows - 1, self.cols - 1)

    def reset_annotations(self):
        for cell in self.cells:
            cell.reset()

    # --- Adjacency ---

    def neighbors(self, cell: Cell) -> Iterator[Cell]:
        """
        Yields in-bounds neighbors in the order up, down, left, right.
        Does NOT check walls.
        """
        for dr, dc in self.DIRECTIONS:
            r, c = cell.row + dr, cell.col + dc
            if 0 <= r < self.rows and 0 <= c < self.cols:
                yield self.cells[r * self.cols + c]

    def open_neighbors(self, cell: Cell) -> Iterator[Cell]:
        for n in self.neighbors(cell):
            if not n.is_wall:
                yield n

    # --- Layout helpers ---

    def layout(self) -> Tuple[Tuple[int, bool, int], ...]:
        return tuple((c.role, c.is_wall, c.weight) for c in self.cells)

    def copy_layout_from(self, other: "Grid"):
        if (self.rows, self.cols) != (other.rows, other.cols):
            self.resize(other.rows, other.cols)
        for mine, theirs in zip(self.cells, other.cells):
            mine.role = theirs.role
            mine.is_wall = theirs.is_wall
            mine.weight = theirs.weight
            mine.reset()
        self.start_index = other.start_index
        self.end_index = other.end_index

    def copy(self) -> "Grid":
        clone = Grid(self.rows, self.cols)
        clone.copy_layout_from(self)
        return clone

    def wall_count(self) -> int:
        return sum(1 for c in self.cells if c.is_wall)

    def explored_count(self) -> int:
        return sum(1 for c in self.cells if c.explored)

    def path_cells(self) -> List[Cell]:
        return [c for c in self.cells if c.is_path]
