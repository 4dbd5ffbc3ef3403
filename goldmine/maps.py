"""
Map model for Goldmine boards.

A board is a rectangular grid of cells read from a text record:

    =<height>,<width>,<steps>
    <height rows of width characters from {w,s,.,d,0-9}>

Points of interest are every cell that is neither a wall nor a plain space.
Index 0 of the points of interest is always the starting cell.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple


# Cell types
START = 's'
SPACE = '.'
WALL = 'w'
PICKAXE = 'd'

HEADER = '='
_HEADER_PATTERN = re.compile(r"=(\d+),(\d+),(\d+)")


class Direction(str, Enum):
    """A single move on the board."""
    UP = 'u'
    DOWN = 'd'
    LEFT = 'l'
    RIGHT = 'r'

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_DELTAS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


class Vertex(NamedTuple):
    """A (row, col) position on a board."""
    row: int
    col: int

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"

    def valid(self) -> bool:
        """Whether this could be a position on some board."""
        return self.row >= 0 and self.col >= 0

    def move(self, direction: Direction) -> "Vertex":
        """Adjacent vertex in the given direction. No bounds checking."""
        d_row, d_col = _DELTAS[direction]
        return Vertex(self.row + d_row, self.col + d_col)


INVALID_VERTEX = Vertex(-1, -1)


class MapParseError(ValueError):
    """Raised when a single map record is malformed."""
    pass


@dataclass(frozen=True)
class Map:
    """
    Parsed, read-only Goldmine board.

    Attributes:
        cells: One string per row; every row has the same width
        points_of_interest: Non-space, non-wall cells; index 0 is the start
        steps_allowed: Number of moves a path may take
    """
    cells: Tuple[str, ...]
    points_of_interest: Tuple[Vertex, ...]
    steps_allowed: int

    @classmethod
    def from_rows(cls, rows: Iterable[str], steps_allowed: int) -> "Map":
        """
        Build a map from its rows, locating the start and points of interest.

        Args:
            rows: Board rows of equal width
            steps_allowed: Step budget for paths on this map

        Returns:
            Map instance

        Raises:
            MapParseError: If there is no start, more than one start, or an
                unknown cell character
        """
        cells = tuple(rows)
        start = None
        others = []

        for row_index, row in enumerate(cells):
            for col_index, value in enumerate(row):
                v = Vertex(row_index, col_index)
                if value in (WALL, SPACE):
                    continue
                if value == START:
                    if start is not None:
                        raise MapParseError(f"found second starting location at {v}")
                    start = v
                elif value == PICKAXE or '0' <= value <= '9':
                    others.append(v)
                else:
                    raise MapParseError(
                        f"unknown character {value} at column {col_index} of row {row_index} ({row})"
                    )

        if start is None:
            raise MapParseError("did not find starting location")

        return cls(cells=cells, points_of_interest=(start, *others), steps_allowed=steps_allowed)

    def __str__(self) -> str:
        """The map in its record format."""
        lines = [f"{HEADER}{self.rows()},{self.cols()},{self.steps_allowed}"]
        lines.extend(self.cells)
        return "\n".join(lines) + "\n"

    @property
    def start(self) -> Vertex:
        return self.points_of_interest[0]

    def rows(self) -> int:
        return len(self.cells)

    def cols(self) -> int:
        return len(self.cells[0])

    def at(self, v: Vertex) -> str:
        """Board piece at a vertex. The vertex must be in bounds."""
        return self.cells[v.row][v.col]

    def can_be_at(self, v: Vertex) -> bool:
        """Whether v is inside the board and not a wall."""
        in_bounds = 0 <= v.row < self.rows() and 0 <= v.col < self.cols()
        return in_bounds and self.at(v) != WALL

    def interesting(self, v: Vertex) -> bool:
        """Whether v is a point of interest."""
        return self.can_be_at(v) and self.at(v) != SPACE


class MapReader:
    """
    Reads consecutive map records from a line stream.

    Iterating yields one Map per record. A malformed record raises
    MapParseError from that iteration step only; the reader then skips to the
    next header so that following records can still be read.

    Example:
        >>> reader = MapReader(open("maps.txt"))
        >>> for board in reader:
        ...     print(board.steps_allowed)
    """

    def __init__(self, stream: Iterable[str]):
        self._lines: Iterator[str] = iter(stream)
        self._pushed_back: Optional[str] = None
        self._resync = False

    def __iter__(self) -> "MapReader":
        return self

    def __next__(self) -> Map:
        header = self._next_header()
        if header is None:
            raise StopIteration

        try:
            return self._read_record(header)
        except MapParseError:
            self._resync = True
            raise

    def read_all(self) -> Tuple[List[Map], List[Tuple[int, MapParseError]]]:
        """
        Read every record in the stream.

        Returns:
            Tuple of (maps, errors) where errors holds (record_index, error)
            for records that failed to parse
        """
        maps = []
        errors = []
        index = 0
        while True:
            try:
                maps.append(next(self))
            except StopIteration:
                break
            except MapParseError as e:
                errors.append((index, e))
            index += 1
        return maps, errors

    def _read_line(self) -> Optional[str]:
        if self._pushed_back is not None:
            line, self._pushed_back = self._pushed_back, None
            return line
        return next(self._lines, None)

    def _next_header(self) -> Optional[str]:
        """Skip blank lines (and leftovers of a bad record) up to a header."""
        while True:
            line = self._read_line()
            if line is None:
                return None
            stripped = line.strip()
            if not stripped:
                continue
            if self._resync and not stripped.startswith(HEADER):
                continue
            self._resync = False
            return stripped

    def _read_record(self, header: str) -> Map:
        match = _HEADER_PATTERN.fullmatch(header)
        if match is None:
            raise MapParseError("expected header of '=<height>,<width>,<moves>'")
        height, width, steps_allowed = (int(group) for group in match.groups())

        rows = []
        for row_index in range(height):
            line = self._read_line()
            row = line.strip() if line is not None else ""
            if row.startswith(HEADER):
                # Start of the next record; leave it for the next iteration
                self._pushed_back = line
                row = ""
            if not row:
                raise MapParseError(f"failed to read row {row_index}")
            if len(row) != width:
                raise MapParseError(
                    f"row {row_index} ({row}); expected {width} columns got {len(row)}"
                )
            rows.append(row)

        return Map.from_rows(rows, steps_allowed)


def parse_map(text: str) -> Map:
    """Parse exactly one map record from a string."""
    try:
        return next(MapReader(text.splitlines()))
    except StopIteration:
        raise MapParseError("expected header of '=<height>,<width>,<moves>'") from None
