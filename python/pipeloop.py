"""
Closed-loop extraction and interior classification on a pipe map.
Two-phase algorithm: discover (walk the loop from the start cell) -> classify
(row-by-row crossing scan over the discovered loop).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from pipe_parser import parse_pipe_map
from pipe_types import (
    CARDINALS,
    ROLE_BY_KIND,
    AmbiguousOrMissingLoop,
    Coordinate,
    Direction,
    InvalidPipe,
    LoopRules,
    MalformedGrid,
    PipeKind,
    PipeMap,
    Role,
    WalkTermination,
)

logger = logging.getLogger(__name__)

Loop = tuple[Coordinate, ...]

Canvas = list[list[Role | None]]


# =============================================================================
# Pipe Transition
# =============================================================================


def transit(pipe_map: PipeMap, frm: Coordinate, at: Coordinate) -> Direction:
    """
    Direction in which travel continues after arriving at `at` from `frm`.

    The arrival side is the side of `at` that `frm` lies on. A pipe joins two
    sides; arriving through one of them continues out through the other.

    Args:
        pipe_map: The map being walked
        frm: The cell travel just left
        at: The cell currently occupied

    Returns:
        The cardinal direction to continue in, Direction.STUCK on ground, or
        Direction.GOAL on the start cell

    Raises:
        ValueError: If `frm` is not the cell directly next to `at`
        MalformedGrid: If `at` holds a symbol that is not a pipe kind
        InvalidPipe: If the pipe at `at` does not connect the arrival side
    """
    if frm == at:
        raise ValueError(f"Walker has not moved: both cells are {at}")

    symbol = pipe_map.cell_at(at)
    if symbol is None:
        raise ValueError(f"{at} is outside the {pipe_map.rows}x{pipe_map.cols} map")
    kind = PipeKind.from_symbol(symbol)
    if kind is None:
        raise MalformedGrid(f"Invalid character '{symbol}' at ({at.row}, {at.col})")

    arrival = at.direction_to(frm)
    if arrival is None:
        raise ValueError(f"{frm} is not next to {at}")

    if kind == PipeKind.GROUND:
        return Direction.STUCK
    if kind == PipeKind.START:
        return Direction.GOAL

    connects = kind.connections
    if arrival not in connects:
        raise InvalidPipe(
            f"Pipe '{kind.value}' at ({at.row}, {at.col}) cannot be entered from the {arrival.value} side\n"
            f"  Connected sides: {', '.join(sorted(d.value for d in connects))}"
        )
    (continuation,) = connects - {arrival}
    return continuation


# =============================================================================
# Walker
# =============================================================================


class LoopWalker:
    """
    Cursor that follows pipes away from the start cell.

    Usage:
        walker = LoopWalker(pipe_map, start, Direction.E)
        if walker.explore() == Direction.GOAL:
            print(walker.path)  # Loop cells, beginning with the start cell
        print(walker.termination_reason)  # Why the walk ended
    """

    def __init__(
        self,
        pipe_map: PipeMap,
        start: Coordinate,
        direction: Direction,
        max_steps: int | None = None,
    ) -> None:
        if not direction.is_cardinal:
            raise ValueError(f"Walkers must set off in a cardinal direction, not {direction}")

        self.pipe_map = pipe_map
        self.start = start
        self.initial_direction = direction
        self.max_steps = max_steps if max_steps is not None else pipe_map.rows * pipe_map.cols + 1
        self.last = start
        self.current = start
        self.path: list[Coordinate] = [start]
        self.steps = 0
        self.outcome: Direction | None = None
        self.termination_reason: WalkTermination | None = None

        first = pipe_map.neighbor(start, direction)
        if first is None:
            self._finish(Direction.STUCK, WalkTermination.EDGE_REACHED)
        else:
            self._advance(first)

    def __repr__(self) -> str:
        return (
            f"LoopWalker({self.initial_direction.value} from ({self.start.row}, {self.start.col}), "
            f"steps={self.steps}, outcome={self.outcome})"
        )

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    def _advance(self, coord: Coordinate) -> None:
        self.last = self.current
        self.current = coord
        self.path.append(coord)
        self.steps += 1

    def _finish(self, outcome: Direction, reason: WalkTermination) -> Direction:
        self.outcome = outcome
        self.termination_reason = reason
        logger.debug(
            "walker %s: %s after %d steps at (%d, %d)",
            self.initial_direction.value,
            reason.value,
            self.steps,
            self.current.row,
            self.current.col,
        )
        return outcome

    def step(self) -> Direction:
        """
        Move one cell along the pipe.

        Returns the direction taken, or STUCK/GOAL once the walk is over. A
        finished walker keeps returning its outcome without moving.
        """
        if self.outcome is not None:
            return self.outcome

        if self.steps >= self.max_steps:
            logger.warning(
                "walker %s exceeded %d steps; the map is malformed",
                self.initial_direction.value,
                self.max_steps,
            )
            return self._finish(Direction.STUCK, WalkTermination.STEP_LIMIT)

        try:
            direction = transit(self.pipe_map, self.last, self.current)
        except InvalidPipe as e:
            logger.debug("walker %s: %s", self.initial_direction.value, e)
            return self._finish(Direction.STUCK, WalkTermination.INVALID_PIPE)

        if direction == Direction.GOAL:
            return self._finish(Direction.GOAL, WalkTermination.START_REACHED)
        if direction == Direction.STUCK:
            return self._finish(Direction.STUCK, WalkTermination.GROUND_REACHED)

        next_coord = self.pipe_map.neighbor(self.current, direction)
        if next_coord is None:
            return self._finish(Direction.STUCK, WalkTermination.EDGE_REACHED)

        if next_coord == self.start:
            # Closing the loop; the start cell already heads the path
            self.last = self.current
            self.current = next_coord
            self.steps += 1
            return direction

        self._advance(next_coord)
        return direction

    def explore(self) -> Direction:
        """Step until the walker is STUCK or reaches its GOAL, and return which."""
        direction = self.step()
        while direction.is_cardinal:
            direction = self.step()
        return direction


# =============================================================================
# Phase 1: Discover
# =============================================================================


def locate_start(pipe_map: PipeMap) -> Coordinate:
    """Find the start cell, or raise MalformedGrid if there is none."""
    start = pipe_map.find_first(PipeKind.START.value)
    if start is None:
        raise MalformedGrid(
            f"No start cell in pipe map\n"
            f"  Exactly one '{PipeKind.START.value}' is required"
        )
    return start


def run_walkers(
    pipe_map: PipeMap,
    start: Coordinate,
    rules: LoopRules | None = None,
) -> list[LoopWalker]:
    """
    Launch one walker per cardinal direction and run each to completion.

    Walkers share nothing but the read-only map, so running them on a thread
    pool gives the same results as running them one after another.

    Returns:
        The finished walkers, in N, S, E, W order
    """
    if rules is None:
        rules = LoopRules()

    walkers = [LoopWalker(pipe_map, start, direction, rules.max_steps) for direction in CARDINALS]

    if rules.concurrent_walkers:
        with ThreadPoolExecutor(max_workers=len(walkers)) as pool:
            list(pool.map(LoopWalker.explore, walkers))
    else:
        for walker in walkers:
            walker.explore()

    return walkers


def discover_loop(
    pipe_map: PipeMap,
    start: Coordinate | None = None,
    rules: LoopRules | None = None,
) -> Loop:
    """
    Find the loop of pipes passing through the start cell.

    A loop is reached from the start in both rotational directions, so two
    walkers normally succeed; they must agree on which cells form the loop.
    The first successful walker in N, S, E, W order gives the canonical order.

    Args:
        pipe_map: The map to search
        start: Start cell (located automatically if None)
        rules: LoopRules governing discovery

    Returns:
        The loop cells in walking order, beginning with the start cell

    Raises:
        MalformedGrid: If there is no start cell, or a walker exceeded its step limit
        AmbiguousOrMissingLoop: If no walker returns to the start, or the
            successful walkers describe different loops
    """
    if start is None:
        start = locate_start(pipe_map)
    logger.info("discover_loop: start at (%d, %d)", start.row, start.col)

    walkers = run_walkers(pipe_map, start, rules)

    stalled = [w for w in walkers if w.termination_reason == WalkTermination.STEP_LIMIT]
    if stalled:
        raise MalformedGrid(
            f"Walker exceeded {stalled[0].max_steps} steps without finishing\n"
            f"  Directions: {', '.join(w.initial_direction.value for w in stalled)}"
        )

    # Collapse walkers that went round the same loop in opposite directions
    loops: dict[frozenset[Coordinate], LoopWalker] = {}
    for walker in walkers:
        if walker.outcome == Direction.GOAL:
            loops.setdefault(frozenset(walker.path), walker)

    if not loops:
        summary = ", ".join(
            f"{w.initial_direction.value}: {w.termination_reason.value if w.termination_reason else '?'}"
            for w in walkers
        )
        raise AmbiguousOrMissingLoop(
            f"No loop passes through the start cell at ({start.row}, {start.col})\n"
            f"  Walker outcomes: {summary}"
        )
    if len(loops) > 1:
        raise AmbiguousOrMissingLoop(
            f"{len(loops)} different loops pass through the start cell at ({start.row}, {start.col})\n"
            f"  Loop lengths: {', '.join(str(len(cells)) for cells in loops)}"
        )

    loop = tuple(next(iter(loops.values())).path)
    logger.info("discover_loop: loop of %d cells", len(loop))
    return loop


def farthest_point_distance(loop: Loop) -> int:
    """Steps from the start cell to the loop cell farthest from it."""
    return len(loop) // 2


# =============================================================================
# Phase 2: Classify
# =============================================================================


def _closing_cell(loop: Loop) -> Coordinate:
    """The loop cell walked just before returning to the start."""
    if loop[-1] == loop[0]:
        return loop[-2]
    return loop[-1]


def infer_start_kind(loop: Loop) -> PipeKind:
    """
    Work out which pipe the start cell stands for.

    The start symbol hides its shape; the loop cells on either side of it
    show which two sides it must connect.
    """
    if len(loop) < 4:
        raise InvalidPipe(f"A loop needs at least 4 cells, got {len(loop)}")

    start = loop[0]
    first = start.direction_to(loop[1])
    closing = start.direction_to(_closing_cell(loop))
    kind = None
    if first is not None and closing is not None:
        kind = PipeKind.from_connections(frozenset({first, closing}))
    if kind is None:
        raise InvalidPipe(
            f"Start cell at ({start.row}, {start.col}) does not join its loop neighbours\n"
            f"  Neighbours: {loop[1]}, {_closing_cell(loop)}"
        )
    return kind


def infer_start_role(loop: Loop) -> Role:
    return ROLE_BY_KIND[infer_start_kind(loop)]


def build_canvas(pipe_map: PipeMap, loop: Loop) -> Canvas:
    """Map-sized canvas holding the role of each loop cell and None elsewhere."""
    canvas: Canvas = [[None] * pipe_map.cols for _ in range(pipe_map.rows)]
    start_role = infer_start_role(loop)

    for coord in loop:
        kind = pipe_map.kind_at(coord)
        if kind == PipeKind.START:
            role = start_role
        elif kind in ROLE_BY_KIND:
            role = ROLE_BY_KIND[kind]
        else:
            raise InvalidPipe(f"({coord.row}, {coord.col}) holds {kind} and cannot be part of a loop")
        canvas[coord.row][coord.col] = role

    return canvas


def scan_row(roles: list[Role | None]) -> list[int]:
    """
    Columns of one canvas row that lie inside the loop.

    Scans left to right with the even-odd rule. A vertical pipe is a crossing.
    A run of horizontal pipes between two bends is a crossing only when the
    bends turn opposite ways (one north, one south); two bends turning the same
    way touch the boundary without crossing it. Blank cells seen while inside
    are confirmed when the scan leaves the interior again.
    """
    inside = False
    pending_bend: Role | None = None
    pending: list[int] = []
    confirmed: list[int] = []

    for col, role in enumerate(roles):
        if role is None:
            if inside:
                pending.append(col)
            continue

        crossed = False
        match role:
            case Role.VERTICAL:
                crossed = True
            case Role.HORIZONTAL:
                pass
            case Role.NORTH_BEND | Role.SOUTH_BEND:
                if pending_bend is None:
                    pending_bend = role
                else:
                    crossed = pending_bend != role
                    pending_bend = None

        if crossed:
            if inside:
                confirmed.extend(pending)
                pending.clear()
            inside = not inside

    return confirmed


def find_interior_cells(pipe_map: PipeMap, loop: Loop) -> frozenset[Coordinate]:
    """All cells enclosed by the loop."""
    canvas = build_canvas(pipe_map, loop)
    interior: set[Coordinate] = set()
    for row_idx, roles in enumerate(canvas):
        cols = scan_row(roles)
        if cols:
            logger.debug("row %d: %d interior cells", row_idx, len(cols))
        interior.update(Coordinate(row_idx, col) for col in cols)
    return frozenset(interior)


def classify_interior(pipe_map: PipeMap, loop: Loop) -> int:
    """Number of cells enclosed by the loop."""
    return len(find_interior_cells(pipe_map, loop))


# =============================================================================
# Pipeline
# =============================================================================


@dataclass(frozen=True)
class LoopSolution:
    """Both answers for a pipe map, plus what they were computed from."""

    pipe_map: PipeMap
    loop: Loop
    interior: frozenset[Coordinate]

    @property
    def farthest_point_distance(self) -> int:
        return farthest_point_distance(self.loop)

    @property
    def interior_cell_count(self) -> int:
        return len(self.interior)

    @property
    def start_kind(self) -> PipeKind:
        return infer_start_kind(self.loop)


def solve_map(pipe_map: PipeMap, rules: LoopRules | None = None) -> LoopSolution:
    loop = discover_loop(pipe_map, rules=rules)
    interior = find_interior_cells(pipe_map, loop)
    logger.info(
        "solve: farthest point %d, %d interior cells",
        farthest_point_distance(loop),
        len(interior),
    )
    return LoopSolution(pipe_map, loop, interior)


def solve(text: str, rules: LoopRules | None = None) -> LoopSolution:
    """
    Parse puzzle text, discover the loop and classify its interior.

    Raises:
        MalformedGrid: If the text is not a valid pipe map
        AmbiguousOrMissingLoop: If the start cell is not on exactly one loop
    """
    return solve_map(parse_pipe_map(text), rules)
