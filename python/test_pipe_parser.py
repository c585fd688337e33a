"""Tests for pipe_parser module."""

import pytest

from pipe_parser import parse_pipe_map
from pipe_types import Coordinate, MalformedGrid, PipeKind


class TestParsePipeMap:
    """Tests for the pipe map parser."""

    def test_simple_square_loop(self) -> None:
        """Parse the smallest example map."""
        pipe_map = parse_pipe_map(
            """
            .....
            .S-7.
            .|.|.
            .L-J.
            .....
            """
        )

        assert pipe_map.rows == 5
        assert pipe_map.cols == 5
        assert len(pipe_map.cells) == 25
        assert pipe_map.row(1) == ".S-7."
        assert pipe_map.find_first("S") == Coordinate(1, 1)

    def test_every_symbol_is_accepted(self) -> None:
        """Each pipe kind symbol parses."""
        pipe_map = parse_pipe_map("|-LJ\n7F.S")

        assert pipe_map.kind_at(Coordinate(0, 0)) == PipeKind.VERTICAL
        assert pipe_map.kind_at(Coordinate(0, 1)) == PipeKind.HORIZONTAL
        assert pipe_map.kind_at(Coordinate(0, 2)) == PipeKind.BEND_NE
        assert pipe_map.kind_at(Coordinate(0, 3)) == PipeKind.BEND_NW
        assert pipe_map.kind_at(Coordinate(1, 0)) == PipeKind.BEND_SW
        assert pipe_map.kind_at(Coordinate(1, 1)) == PipeKind.BEND_SE
        assert pipe_map.kind_at(Coordinate(1, 2)) == PipeKind.GROUND
        assert pipe_map.kind_at(Coordinate(1, 3)) == PipeKind.START

    def test_trailing_newline_and_carriage_returns(self) -> None:
        """Line endings and a trailing newline do not become cells."""
        pipe_map = parse_pipe_map("S7\r\nLJ\r\n")

        assert pipe_map.rows == 2
        assert pipe_map.cols == 2
        assert pipe_map.cells == "S7LJ"

    def test_error_ragged_rows(self) -> None:
        """Error when rows have different lengths."""
        with pytest.raises(MalformedGrid, match="Inconsistent row lengths"):
            parse_pipe_map("S-7\n|.\nL-J")

    def test_error_invalid_character(self) -> None:
        """Error on a symbol that is not a pipe, ground or start."""
        with pytest.raises(MalformedGrid, match="Invalid character 'x'"):
            parse_pipe_map("S7\nLx")

    def test_error_missing_start(self) -> None:
        """Error when there is no start cell."""
        with pytest.raises(MalformedGrid, match="No start cell"):
            parse_pipe_map("F7\nLJ")

    def test_error_multiple_starts(self) -> None:
        """Error when there is more than one start cell."""
        with pytest.raises(MalformedGrid, match="Multiple start cells"):
            parse_pipe_map("S7\nLS")

    def test_error_empty(self) -> None:
        """Error on empty input."""
        with pytest.raises(MalformedGrid, match="empty"):
            parse_pipe_map("\n\n")

    def test_malformed_grid_is_value_error(self) -> None:
        """Parser errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_pipe_map("S7\nL")
