import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

# Event Types (binary search log)
EVT_EXPLORE = 0x01
EVT_PATH_ADD = 0x02
EVT_RESULT = 0x03

LOG_MAGIC = b"PATHLOG"


class SearchState(Enum):
    READY = "ready"
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SearchState.FOUND, SearchState.EXHAUSTED, SearchState.CANCELLED)


@dataclass
class SearchResult:
    success: bool
    nodes_explored: int
    path_length: int = 0
    # (row, col) from Start to End inclusive, empty unless success
    path: List[Tuple[int, int]] = field(default_factory=list)
    # Sum of entered cells' weights, Start excluded
    path_cost: int = 0
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "nodesExplored": self.nodes_explored,
            "pathLength": self.path_length,
        }
        if self.success:
            data["path"] = [[r, c] for r, c in self.path]
            data["pathCost"] = self.path_cost
        if self.message:
            data["message"] = self.message
        return data


@dataclass(frozen=True)
class SearchStats:
    nodes_explored: int
    path_length: int
    state: SearchState


@dataclass(frozen=True)
class Progress:
    """One more non-special cell was explored."""
    explored: int


@dataclass(frozen=True)
class Terminal:
    """The session ended. Emitted exactly once."""
    result: SearchResult
    state: SearchState


class SearchEventWriter:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "wb")

    def write_header(self, rows: int, cols: int):
        # Header: Magic "PATHLOG" + Rows (4b) + Cols (4b)
        self.file.write(LOG_MAGIC)
        self.file.write(struct.pack(">II", rows, cols))

    def log_explore(self, row: int, col: int):
        # 1 byte type + 2b row + 2b col
        self.file.write(struct.pack(">BHH", EVT_EXPLORE, row, col))

    def log_path_add(self, row: int, col: int):
        self.file.write(struct.pack(">BHH", EVT_PATH_ADD, row, col))

    def log_result(self, result: SearchResult):
        # 1 byte type + 1b success + 4b explored + 4b path length
        self.file.write(struct.pack(">BBII", EVT_RESULT, int(result.success),
                                    result.nodes_explored, result.path_length))

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class SearchEventReader:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "rb")
        self.rows = 0
        self.cols = 0

    def read_header(self) -> Tuple[int, int]:
        magic = self.file.read(len(LOG_MAGIC))
        if magic != LOG_MAGIC:
            raise ValueError("Invalid search log file")
        self.rows, self.cols = struct.unpack(">II", self.file.read(8))
        return self.rows, self.cols

    def stream_events(self) -> Iterator[Tuple[int, Tuple]]:
        while True:
            type_byte = self.file.read(1)
            if not type_byte:
                break

            type_code = ord(type_byte)

            if type_code in (EVT_EXPLORE, EVT_PATH_ADD):
                row, col = struct.unpack(">HH", self.file.read(4))
                yield (type_code, (row, col))
            elif type_code == EVT_RESULT:
                success, explored, length = struct.unpack(">BII", self.file.read(9))
                yield (type_code, (bool(success), explored, length))
            else:
                raise ValueError(f"Unknown event type 0x{type_code:02x} in {self.filename}")

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def summarize_log(filename: str) -> Dict[str, Any]:
    """Reads a whole search log back into counts, for replay tooling."""
    explored = 0
    path: List[Tuple[int, int]] = []
    result: Optional[Tuple[bool, int, int]] = None
    with SearchEventReader(filename) as reader:
        rows, cols = reader.read_header()
        for code, payload in reader.stream_events():
            if code == EVT_EXPLORE:
                explored += 1
            elif code == EVT_PATH_ADD:
                path.append(payload)
            elif code == EVT_RESULT:
                result = payload
    return {"rows": rows, "cols": cols, "explored": explored, "path": path, "result": result}
