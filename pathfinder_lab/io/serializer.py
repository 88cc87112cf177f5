import json
import logging
import struct
import zlib
from typing import Any, Dict, List, Optional, Tuple

from pathfinder_lab.core.config import MIN_SIZE
from pathfinder_lab.core.errors import GridLoadError
from pathfinder_lab.core.grid import Cell, Grid

logger = logging.getLogger(__name__)

CELL_FIELDS = ("row", "col", "isStart", "isEnd", "isWall", "weight")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class GridSerializer:
    MAGIC = b"PFLB"
    VERSION = 1

    # Flags
    FLAG_COMPRESSED = 1

    # --- Records ---

    @staticmethod
    def to_record(grid: Grid) -> Dict[str, Any]:
        """Layout only: search annotations are never serialized."""
        return {
            "rows": grid.rows,
            "cols": grid.cols,
            "cells": [
                {
                    "row": c.row,
                    "col": c.col,
                    "isStart": c.is_start,
                    "isEnd": c.is_end,
                    "isWall": c.is_wall,
                    "weight": c.weight,
                }
                for c in grid.cells
            ],
        }

    @staticmethod
    def validate_record(record: Any) -> Tuple[int, int, List[Tuple[int, bool, int]]]:
        """
        Checks a record without touching any grid and returns
        (rows, cols, [(role, is_wall, weight)] in row-major order).
        A wall flag on Start/End is dropped in favor of the role.
        """
        if not isinstance(record, dict):
            raise GridLoadError("Grid record must be an object")
        rows, cols, cells = record.get("rows"), record.get("cols"), record.get("cells")
        if not (_is_int(rows) and _is_int(cols)) or rows < MIN_SIZE or cols < MIN_SIZE:
            raise GridLoadError(f"Invalid grid size {rows!r}x{cols!r}")
        if not isinstance(cells, list) or len(cells) != rows * cols:
            raise GridLoadError(f"Expected {rows * cols} cells")

        layout: List[Optional[Tuple[int, bool, int]]] = [None] * (rows * cols)
        starts = ends = 0
        for i, entry in enumerate(cells):
            if not isinstance(entry, dict):
                raise GridLoadError(f"Cell #{i} is not an object")
            missing = [f for f in CELL_FIELDS if f not in entry]
            if missing:
                raise GridLoadError(f"Cell #{i} is missing {', '.join(missing)}")
            row, col, weight = entry["row"], entry["col"], entry["weight"]
            if not (_is_int(row) and _is_int(col)) or not (0 <= row < rows and 0 <= col < cols):
                raise GridLoadError(f"Cell #{i} has invalid position ({row!r}, {col!r})")
            flags = [entry[f] for f in ("isStart", "isEnd", "isWall")]
            if not all(isinstance(f, bool) for f in flags):
                raise GridLoadError(f"Cell ({row}, {col}) has non-boolean flags")
            if not _is_int(weight) or weight < 1:
                raise GridLoadError(f"Cell ({row}, {col}) has invalid weight {weight!r}")
            is_start, is_end, is_wall = flags
            if is_start and is_end:
                raise GridLoadError(f"Cell ({row}, {col}) is both Start and End")

            idx = row * cols + col
            if layout[idx] is not None:
                raise GridLoadError(f"Cell ({row}, {col}) appears twice")
            if is_start:
                role, starts = Cell.START, starts + 1
            elif is_end:
                role, ends = Cell.END, ends + 1
            else:
                role = Cell.NORMAL
            if role != Cell.NORMAL:
                is_wall, weight = False, 1
            elif is_wall:
                weight = 1
            layout[idx] = (role, is_wall, weight)

        if starts != 1 or ends != 1:
            raise GridLoadError(f"Expected exactly one Start and one End, got {starts} and {ends}")
        return rows, cols, layout

    @staticmethod
    def from_record(record: Any, grid: Optional[Grid] = None) -> Grid:
        """
        Populates grid (or a new one) from a record. The record is fully
        validated first, so a bad record leaves grid untouched.
        """
        rows, cols, layout = GridSerializer.validate_record(record)
        if grid is None:
            grid = Grid(rows, cols)
        elif (grid.rows, grid.cols) != (rows, cols):
            grid.resize(rows, cols)

        for idx, (cell, (role, is_wall, weight)) in enumerate(zip(grid.cells, layout)):
            cell.reset()
            cell.role = role
            cell.is_wall = is_wall
            cell.weight = weight
            if role == Cell.START:
                grid.start_index = idx
            elif role == Cell.END:
                grid.end_index = idx
        return grid

    @staticmethod
    def dumps(grid: Grid) -> str:
        return json.dumps(GridSerializer.to_record(grid))

    @staticmethod
    def loads(text: str, grid: Optional[Grid] = None) -> Grid:
        try:
            record = json.loads(text)
        except (TypeError, ValueError) as e:
            raise GridLoadError(f"Grid record is not valid JSON: {e}") from e
        return GridSerializer.from_record(record, grid)

    # --- Files ---

    @staticmethod
    def save(grid: Grid, filepath: str, meta: Dict[str, Any] = None, compress=False):
        """
        Saves the grid to a binary file.
        Format:
        - MAGIC (4 bytes)
        - VERSION (1 byte)
        - FLAGS (1 byte)
        - ROWS (4 bytes)
        - COLS (4 bytes)
        - META_LEN (2 bytes)
        - META_JSON (META_LEN bytes)
        - DATA_LEN (4 bytes)
        - DATA (grid record JSON, zlib-compressed when flagged)
        """
        if meta is None:
            meta = {}

        flags = 0
        if compress:
            flags |= GridSerializer.FLAG_COMPRESSED

        meta_bytes = json.dumps(meta).encode('utf-8')
        # META_LEN is an unsigned short
        if len(meta_bytes) > 0xFFFF:
            raise ValueError(f"Metadata is {len(meta_bytes)} bytes once encoded, the limit is 65535")
        data = GridSerializer.dumps(grid).encode('utf-8')
        if compress:
            data = zlib.compress(data)

        with open(filepath, "wb") as f:
            f.write(GridSerializer.MAGIC)
            f.write(struct.pack("B", GridSerializer.VERSION))
            f.write(struct.pack("B", flags))
            f.write(struct.pack("II", grid.rows, grid.cols))
            f.write(struct.pack("H", len(meta_bytes)))
            f.write(meta_bytes)
            f.write(struct.pack("I", len(data)))
            f.write(data)
        logger.info(f"Saved {grid.rows}x{grid.cols} grid to {filepath}")

    @staticmethod
    def load(filepath: str, grid: Optional[Grid] = None) -> Tuple[Grid, Dict[str, Any]]:
        with open(filepath, "rb") as f:
            blob = f.read()

        try:
            if blob[:4] != GridSerializer.MAGIC:
                raise GridLoadError("Invalid file format")
            version, flags = struct.unpack_from("BB", blob, 4)
            if version != GridSerializer.VERSION:
                raise GridLoadError(f"Unsupported version {version}")
            rows, cols = struct.unpack_from("II", blob, 6)
            (meta_len,) = struct.unpack_from("H", blob, 14)
            offset = 16
            meta = json.loads(blob[offset:offset + meta_len].decode('utf-8'))
            offset += meta_len
            (data_len,) = struct.unpack_from("I", blob, offset)
            offset += 4
            data = blob[offset:offset + data_len]
            if len(data) != data_len:
                raise GridLoadError("Truncated grid data")
            if flags & GridSerializer.FLAG_COMPRESSED:
                data = zlib.decompress(data)
            record = json.loads(data.decode('utf-8'))
        except (struct.error, zlib.error, UnicodeDecodeError, ValueError) as e:
            if isinstance(e, GridLoadError):
                raise
            raise GridLoadError(f"Corrupt grid file {filepath}: {e}") from e

        if not isinstance(record, dict) or (record.get("rows"), record.get("cols")) != (rows, cols):
            raise GridLoadError("Header size does not match grid record")

        grid = GridSerializer.from_record(record, grid)
        logger.info(f"Loaded {rows}x{cols} grid from {filepath}")
        return grid, meta
