"""
ASCII rendering for solved pipe maps.

Loop pipes are redrawn with box-drawing glyphs so the loop stands out from
stray pipes, interior cells are marked, and everything else is shown as ground.
"""

from __future__ import annotations

import logging
from typing import Callable

from simple_chalk import chalk  # type: ignore[import-untyped]

from pipeloop import LoopSolution
from pipe_types import PipeKind

logger = logging.getLogger(__name__)

GLYPHS: dict[PipeKind, str] = {
    PipeKind.VERTICAL: "│",
    PipeKind.HORIZONTAL: "─",
    PipeKind.BEND_NE: "└",
    PipeKind.BEND_NW: "┘",
    PipeKind.BEND_SW: "┐",
    PipeKind.BEND_SE: "┌",
}

INTERIOR_CHAR = "I"
EXTERIOR_CHAR = "."


def _plain(s: str) -> str:
    return s


def render_loop(solution: LoopSolution, color: bool = True) -> str:
    """
    Render a solved pipe map to a string.

    Args:
        solution: Result of solving the map
        color: Add ANSI colors (loop green, start yellow, interior red)

    Returns:
        One line per map row
    """
    pipe_map = solution.pipe_map
    loop_cells = set(solution.loop)
    start = solution.loop[0]
    start_glyph = GLYPHS[solution.start_kind]

    loop_color: Callable[[str], str] = chalk.green if color else _plain
    start_color: Callable[[str], str] = chalk.yellowBright if color else _plain
    interior_color: Callable[[str], str] = chalk.red if color else _plain
    exterior_color: Callable[[str], str] = chalk.blue if color else _plain

    buffer: list[list[str]] = [[" " for _ in range(pipe_map.cols)] for _ in range(pipe_map.rows)]
    for coord in pipe_map.coordinates():
        if coord == start:
            char = start_color(start_glyph)
        elif coord in loop_cells:
            char = loop_color(GLYPHS[pipe_map.kind_at(coord)])
        elif coord in solution.interior:
            char = interior_color(INTERIOR_CHAR)
        else:
            char = exterior_color(EXTERIOR_CHAR)
        buffer[coord.row][coord.col] = char

    logger.debug(
        "render_loop: %dx%d map, %d loop cells, %d interior",
        pipe_map.rows,
        pipe_map.cols,
        len(loop_cells),
        len(solution.interior),
    )
    return "\n".join("".join(row) for row in buffer)
