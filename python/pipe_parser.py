"""
Pipe map parsing for pipeloop.

Converts puzzle text (one row of pipe symbols per line) into a PipeMap,
rejecting anything that is not a rectangular map with exactly one start cell.
"""

from __future__ import annotations

import logging

from pipe_types import VALID_SYMBOLS, MalformedGrid, PipeKind, PipeMap

__all__ = ["parse_pipe_map"]

logger = logging.getLogger(__name__)


def parse_pipe_map(text: str) -> PipeMap:
    """
    Parse a pipe map from puzzle text.

    Format:
    - One row per line; surrounding whitespace on each line is stripped
    - Leading and trailing blank lines are ignored
    - Every cell is a single character:
      * '|' vertical pipe (north/south)
      * '-' horizontal pipe (east/west)
      * 'L' bend north/east, 'J' bend north/west
      * '7' bend south/west, 'F' bend south/east
      * '.' ground
      * 'S' start (exactly one)

    Example:
        \"\"\"
        .....
        .S-7.
        .|.|.
        .L-J.
        .....
        \"\"\"
        Creates a 5x5 PipeMap whose start cell is at (1, 1).

    Args:
        text: Raw puzzle text

    Returns:
        PipeMap with the rows concatenated row-major

    Raises:
        MalformedGrid: If the rows are ragged, a symbol is unknown, or there is
            not exactly one start cell
    """
    lines = [line.strip() for line in text.strip().splitlines()]

    if not lines or not lines[0]:
        raise MalformedGrid("Pipe map is empty")

    cols = len(lines[0])
    mismatched = [(i, len(line)) for i, line in enumerate(lines) if len(line) != cols]
    if mismatched:
        error_msg = (
            f"Inconsistent row lengths in pipe map\n"
            f"  Expected: {cols} columns (from row 0)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{lines[row_idx]}\"\n"
        error_msg += "  All rows must have the same number of cells"
        raise MalformedGrid(error_msg)

    starts: list[tuple[int, int]] = []
    for row_idx, line in enumerate(lines):
        for col_idx, char in enumerate(line):
            kind = PipeKind.from_symbol(char)
            if kind is None:
                raise MalformedGrid(
                    f"Invalid character '{char}' in pipe map\n"
                    f"  Row {row_idx}, column {col_idx}: \"{line}\"\n"
                    f"  Valid characters: {' '.join(VALID_SYMBOLS)}"
                )
            if kind == PipeKind.START:
                starts.append((row_idx, col_idx))

    if not starts:
        raise MalformedGrid(
            f"No start cell in pipe map\n"
            f"  Exactly one '{PipeKind.START.value}' is required"
        )
    if len(starts) > 1:
        positions = ", ".join(f"({r}, {c})" for r, c in starts)
        raise MalformedGrid(
            f"Multiple start cells in pipe map\n"
            f"  Found '{PipeKind.START.value}' at: {positions}\n"
            f"  Exactly one start cell is allowed"
        )

    pipe_map = PipeMap("".join(lines), len(lines), cols)
    logger.debug("parse_pipe_map: %dx%d map, start at %s", pipe_map.rows, pipe_map.cols, starts[0])
    return pipe_map
