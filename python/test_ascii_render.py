"""Tests for ascii_render and the loop_demo command line."""

from ascii_render import render_loop
from loop_demo import main
from pipeloop import solve


class TestRenderLoop:
    """Tests for drawing a solved map."""

    def test_plain_small_square(self) -> None:
        solution = solve(".....\n.S-7.\n.|.|.\n.L-J.\n.....")

        assert render_loop(solution, color=False).split("\n") == [
            ".....",
            ".┌─┐.",
            ".│I│.",
            ".└─┘.",
            ".....",
        ]

    def test_junk_pipes_drawn_as_ground(self) -> None:
        """Only loop pipes keep their shape."""
        solution = solve("-L|F7\n7S-7|\nL|7||\n-L-J|\nL|-JF")

        assert render_loop(solution, color=False).split("\n") == [
            ".....",
            ".┌─┐.",
            ".│I│.",
            ".└─┘.",
            ".....",
        ]

    def test_start_drawn_as_inferred_pipe(self) -> None:
        solution = solve("F7\nLS")
        assert render_loop(solution, color=False) == "┌┐\n└┘"

    def test_color_output_keeps_layout(self) -> None:
        """Colored output has the same glyphs once escape codes are removed."""
        solution = solve("S7\nLJ")
        rendered = render_loop(solution, color=True)

        for glyph in "┌┐└┘":
            assert glyph in rendered
        assert rendered.count("\n") == 1


class TestLoopDemo:
    """Tests for the command-line entry point."""

    def test_solves_file(self, tmp_path, capsys) -> None:
        puzzle = tmp_path / "puzzle.txt"
        puzzle.write_text("..F7.\n.FJ|.\nSJ.L7\n|F--J\nLJ...\n")

        assert main([str(puzzle), "--plain"]) == 0

        out = capsys.readouterr().out
        assert "Farthest point: 8" in out
        assert "Interior cells: 1" in out
        assert "Loop length: 16" in out

    def test_threads_flag(self, tmp_path, capsys) -> None:
        puzzle = tmp_path / "puzzle.txt"
        puzzle.write_text("S7\nLJ\n")

        assert main([str(puzzle), "--threads", "--plain"]) == 0
        assert "Interior cells: 0" in capsys.readouterr().out

    def test_malformed_file(self, tmp_path, capsys) -> None:
        puzzle = tmp_path / "puzzle.txt"
        puzzle.write_text("S7\nLx\n")

        assert main([str(puzzle)]) == 1
        assert "MalformedGrid" in capsys.readouterr().out

    def test_missing_loop(self, tmp_path, capsys) -> None:
        puzzle = tmp_path / "puzzle.txt"
        puzzle.write_text("S-7\n|..\nL-.\n")

        assert main([str(puzzle)]) == 1
        assert "AmbiguousOrMissingLoop" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys) -> None:
        assert main([str(tmp_path / "nope.txt")]) == 1
        assert "Could not read" in capsys.readouterr().out

    def test_usage(self, capsys) -> None:
        assert main([]) == 2
        assert main(["a.txt", "--bogus"]) == 2
        assert "usage" in capsys.readouterr().out
