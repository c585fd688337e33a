"""
Shared type definitions for the pipeloop system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


# =============================================================================
# Errors
# =============================================================================


class PipeLoopError(ValueError):
    """Base class for every error raised while solving a pipe map."""


class MalformedGrid(PipeLoopError):
    """Input text does not describe a rectangular pipe map with a single start."""


class InvalidPipe(PipeLoopError):
    """Travel reached a pipe through a side the pipe does not connect."""


class AmbiguousOrMissingLoop(PipeLoopError):
    """No loop, or more than one distinct loop, passes through the start cell."""


# =============================================================================
# Directions and Pipe Kinds
# =============================================================================


class Direction(Enum):
    """Cardinal direction of travel, plus the two walker outcomes."""

    N = "N"  # Up (decreasing row)
    S = "S"  # Down (increasing row)
    E = "E"  # Right (increasing col)
    W = "W"  # Left (decreasing col)
    STUCK = "stuck"  # No valid continuation
    GOAL = "goal"  # Arrived back at the start cell

    @property
    def is_cardinal(self) -> bool:
        return self in CARDINALS

    @property
    def opposite(self) -> Direction:
        if not self.is_cardinal:
            raise ValueError(f"{self} has no opposite")
        return _OPPOSITES[self]


CARDINALS: tuple[Direction, ...] = (Direction.N, Direction.S, Direction.E, Direction.W)

_OPPOSITES = {
    Direction.N: Direction.S,
    Direction.S: Direction.N,
    Direction.E: Direction.W,
    Direction.W: Direction.E,
}

# Direction deltas: (row_delta, col_delta)
DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.N: (-1, 0),
    Direction.S: (1, 0),
    Direction.E: (0, 1),
    Direction.W: (0, -1),
}


class PipeKind(Enum):
    """The symbol occupying a cell of the pipe map."""

    VERTICAL = "|"
    HORIZONTAL = "-"
    BEND_NE = "L"
    BEND_NW = "J"
    BEND_SW = "7"
    BEND_SE = "F"
    GROUND = "."
    START = "S"

    @property
    def connections(self) -> frozenset[Direction]:
        """The two sides this pipe connects (empty for ground and start)."""
        return PIPE_CONNECTIONS.get(self, frozenset())

    @property
    def is_pipe(self) -> bool:
        return self in PIPE_CONNECTIONS

    @classmethod
    def from_symbol(cls, symbol: str) -> PipeKind | None:
        try:
            return cls(symbol)
        except ValueError:
            return None

    @classmethod
    def from_connections(cls, sides: frozenset[Direction]) -> PipeKind | None:
        """Find the pipe that joins exactly the given two sides."""
        for kind, connects in PIPE_CONNECTIONS.items():
            if connects == sides:
                return kind
        return None


PIPE_CONNECTIONS: dict[PipeKind, frozenset[Direction]] = {
    PipeKind.VERTICAL: frozenset({Direction.N, Direction.S}),
    PipeKind.HORIZONTAL: frozenset({Direction.E, Direction.W}),
    PipeKind.BEND_NE: frozenset({Direction.N, Direction.E}),
    PipeKind.BEND_NW: frozenset({Direction.N, Direction.W}),
    PipeKind.BEND_SW: frozenset({Direction.S, Direction.W}),
    PipeKind.BEND_SE: frozenset({Direction.S, Direction.E}),
}

VALID_SYMBOLS = "".join(kind.value for kind in PipeKind)


class Role(Enum):
    """Topological role of a loop cell when scanning a row for crossings."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    NORTH_BEND = "north_bend"
    SOUTH_BEND = "south_bend"

    @property
    def is_bend(self) -> bool:
        return self in (Role.NORTH_BEND, Role.SOUTH_BEND)


ROLE_BY_KIND: dict[PipeKind, Role] = {
    PipeKind.VERTICAL: Role.VERTICAL,
    PipeKind.HORIZONTAL: Role.HORIZONTAL,
    PipeKind.BEND_NE: Role.NORTH_BEND,
    PipeKind.BEND_NW: Role.NORTH_BEND,
    PipeKind.BEND_SW: Role.SOUTH_BEND,
    PipeKind.BEND_SE: Role.SOUTH_BEND,
}


class WalkTermination(Enum):
    """Reason why a walker stopped."""

    START_REACHED = "start_reached"  # Came back around to the start cell
    GROUND_REACHED = "ground_reached"  # Walked onto a ground cell
    EDGE_REACHED = "edge_reached"  # Pipe pointed off the map
    INVALID_PIPE = "invalid_pipe"  # Pipe does not connect to the side we came from
    STEP_LIMIT = "step_limit"  # Walked more cells than the map holds


# =============================================================================
# Coordinates
# =============================================================================


@dataclass(frozen=True)
class Coordinate:
    """A (row, col) position on the pipe map."""

    row: int
    col: int

    def is_above(self, other: Coordinate) -> bool:
        """True if self is directly above other."""
        return self.row + 1 == other.row and self.col == other.col

    def is_below(self, other: Coordinate) -> bool:
        """True if self is directly below other."""
        return self.row == other.row + 1 and self.col == other.col

    def is_left_of(self, other: Coordinate) -> bool:
        """True if self is directly left of other."""
        return self.row == other.row and self.col + 1 == other.col

    def is_right_of(self, other: Coordinate) -> bool:
        """True if self is directly right of other."""
        return self.row == other.row and self.col == other.col + 1

    def direction_to(self, other: Coordinate) -> Direction | None:
        """Direction of the single step from self to other, or None if not adjacent."""
        if other.is_above(self):
            return Direction.N
        if other.is_below(self):
            return Direction.S
        if other.is_right_of(self):
            return Direction.E
        if other.is_left_of(self):
            return Direction.W
        return None

    def step(self, direction: Direction) -> Coordinate:
        """Raw one-step arithmetic; bounds are the map's concern."""
        dr, dc = DELTAS[direction]
        return Coordinate(self.row + dr, self.col + dc)


# =============================================================================
# Pipe Map
# =============================================================================


@dataclass(frozen=True)
class PipeMap:
    """A rectangular pipe map stored row-major in a single string."""

    cells: str
    rows: int
    cols: int

    def __post_init__(self) -> None:
        if self.rows < 0 or self.cols < 0 or self.rows * self.cols != len(self.cells):
            raise MalformedGrid(
                f"Pipe map buffer does not match its dimensions\n"
                f"  rows * cols = {self.rows} * {self.cols} = {self.rows * self.cols}\n"
                f"  buffer length = {len(self.cells)}"
            )

    def in_bounds(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self.rows and 0 <= coord.col < self.cols

    def index_of(self, coord: Coordinate) -> int:
        if not self.in_bounds(coord):
            raise IndexError(f"{coord} is outside a {self.rows}x{self.cols} map")
        return coord.row * self.cols + coord.col

    def coord_of(self, index: int) -> Coordinate:
        if not 0 <= index < len(self.cells):
            raise IndexError(f"Index {index} is outside a {self.rows}x{self.cols} map")
        return Coordinate(index // self.cols, index % self.cols)

    def cell_at(self, coord: Coordinate) -> str | None:
        """Symbol at coord, or None when coord is off the map."""
        if not self.in_bounds(coord):
            return None
        return self.cells[coord.row * self.cols + coord.col]

    def kind_at(self, coord: Coordinate) -> PipeKind | None:
        symbol = self.cell_at(coord)
        if symbol is None:
            return None
        return PipeKind.from_symbol(symbol)

    def find_first(self, symbol: str) -> Coordinate | None:
        index = self.cells.find(symbol)
        if index < 0:
            return None
        return self.coord_of(index)

    def neighbor(self, coord: Coordinate, direction: Direction) -> Coordinate | None:
        """
        Coordinate one step from coord in direction.

        Returns None instead of wrapping when the step would leave the map, so
        falling off an edge is an ordinary outcome for a walker.
        """
        if direction == Direction.N:
            return Coordinate(coord.row - 1, coord.col) if coord.row > 0 else None
        if direction == Direction.S:
            return Coordinate(coord.row + 1, coord.col) if coord.row + 1 < self.rows else None
        if direction == Direction.W:
            return Coordinate(coord.row, coord.col - 1) if coord.col > 0 else None
        if direction == Direction.E:
            return Coordinate(coord.row, coord.col + 1) if coord.col + 1 < self.cols else None
        raise ValueError(f"Cannot step in direction {direction}")

    def row(self, row: int) -> str:
        return self.cells[row * self.cols : (row + 1) * self.cols]

    def coordinates(self) -> Iterator[Coordinate]:
        for index in range(len(self.cells)):
            yield self.coord_of(index)

    def lines(self) -> list[str]:
        return [self.row(r) for r in range(self.rows)]


@dataclass(frozen=True)
class LoopRules:
    """Settings governing loop discovery."""

    concurrent_walkers: bool = False  # Run the four walkers on a thread pool
    max_steps: int | None = None  # None = rows * cols + 1
