#!/usr/bin/env python3
"""
Solve a pipe map puzzle file and display the loop.

Usage:
    python loop_demo.py <puzzle-file> [-v] [--threads] [--plain]
"""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_loop
from pipe_types import LoopRules, PipeLoopError
from pipeloop import LoopSolution, solve

USAGE = "usage: loop_demo.py <puzzle-file> [-v] [--threads] [--plain]"


def build_panel(solution: LoopSolution, path: str, color: bool = True) -> Panel:
    """Panel with the rendered map and both answers."""
    body = Text()
    body.append(Text.from_ansi(render_loop(solution, color=color)))
    body.append("\n\n")
    body.append("Loop length: ", style="bold")
    body.append(f"{len(solution.loop)}\n")
    body.append("Farthest point: ", style="bold")
    body.append(f"{solution.farthest_point_distance}\n")
    body.append("Interior cells: ", style="bold")
    body.append(f"{solution.interior_cell_count}")
    return Panel(body, title=f"Pipe loop - {path}", border_style="green")


def main(argv: list[str]) -> int:
    """Run the demo; returns the process exit code."""
    console = Console()
    flags = {arg for arg in argv if arg.startswith("-")}
    paths = [arg for arg in argv if not arg.startswith("-")]

    if len(paths) != 1 or flags - {"-v", "--verbose", "--threads", "--plain"}:
        console.print(USAGE, style="bold red")
        return 2

    verbose = bool(flags & {"-v", "--verbose"})
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    path = paths[0]
    try:
        with open(path, "r") as f:
            text = f.read()
    except OSError as e:
        console.print(f"Could not read {path}: {e}", style="bold red")
        return 1

    rules = LoopRules(concurrent_walkers="--threads" in flags)
    try:
        solution = solve(text, rules)
    except PipeLoopError as e:
        error = Text()
        error.append(f"{type(e).__name__}\n", style="bold red")
        error.append(str(e))
        console.print(Panel(error, title="Pipe loop - Error", border_style="red"))
        return 1

    console.print(build_panel(solution, path, color="--plain" not in flags))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
