"""
Paths and the Goldmine scoring model.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from .maps import Direction, Map, Vertex, INVALID_VERTEX, PICKAXE, SPACE, START, WALL


# Order in which padding looks for a walkable direction
PAD_PRIORITY = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


@dataclass
class Path:
    """
    An ordered series of moves starting at a map's start cell.

    Attributes:
        steps: Moves in the order they are taken
    """
    steps: List[Direction] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "Path":
        """
        Create a path from its u/d/l/r text form.

        Raises:
            ValueError: If text contains anything but u, d, l and r
        """
        return cls([Direction(ch) for ch in text])

    def __str__(self) -> str:
        return "".join(step.value for step in self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def append(self, direction: Direction) -> None:
        """Add a move in place."""
        self.steps.append(direction)

    def push(self, direction: Direction) -> "Path":
        """Like append, but returns a new path and leaves this one alone."""
        return Path(self.steps + [direction])

    def concat(self, other: Iterable[Direction]) -> None:
        """Add all moves of another path in place."""
        self.steps.extend(other)

    def copy(self) -> "Path":
        return Path(list(self.steps))

    def ending_vertex(self, m: Map) -> Vertex:
        """
        Final location after following this path on a map.

        Returns:
            The last vertex, or INVALID_VERTEX if any step leaves the board
            or walks into a wall
        """
        v = m.start
        for step in self.steps:
            v = v.move(step)
            if not m.can_be_at(v):
                return INVALID_VERTEX
        return v

    def pad(self, m: Map) -> None:
        """
        Fill the path up to the map's step budget in place.

        Padding oscillates between the ending vertex and its first walkable
        neighbour, so it never changes the score. Paths already at or over
        the budget are left untouched.
        """
        if len(self.steps) >= m.steps_allowed:
            return

        v = self.ending_vertex(m)
        first = Direction.RIGHT
        for direction in PAD_PRIORITY:
            if m.can_be_at(v.move(direction)):
                first = direction
                break
        second = first.opposite()

        while len(self.steps) < m.steps_allowed:
            self.steps.append(first)
            first, second = second, first

    def score(self, m: Map) -> int:
        """
        Points this path earns on a map.

        Each value cell pays its digit shifted left by the number of pickaxes
        collected so far, once. Revisited cells pay nothing. A single step
        off the board or into a wall makes the whole path worth 0.
        """
        seen = set()
        seen.add(m.start)
        total = 0
        pickaxes = 0
        v = m.start

        for step in self.steps:
            v = v.move(step)
            if not m.can_be_at(v):
                return 0
            if v in seen:
                continue
            seen.add(v)

            cell = m.at(v)
            if cell in (SPACE, START):
                continue
            if cell == PICKAXE:
                pickaxes += 1
            elif cell == WALL:
                return 0
            else:
                total += int(cell) << pickaxes

        return total
