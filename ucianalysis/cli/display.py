"""
Rich-based terminal output for an analysis run.

This is the ONLY place where terminal output happens. It turns AnalysisInfo
snapshots and GoResults into Rich renderables; main.py decides when to show them.
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ucianalysis.analysis import AnalysisInfo, Cp, Score, ScoreType
from ucianalysis.board import PositionBoard
from ucianalysis.jobs import GoJob, GoResult

console = Console(legacy_windows=False)


def format_score(score: Score, scoretype: ScoreType = ScoreType.EXACT) -> str:
    """+0.35 for centipawns, #5 / #-3 for mates, with the bound kind appended."""
    if isinstance(score, Cp):
        text = f"{score.value / 100:+.2f}"
    else:
        text = f"#{score.value}"
    match scoretype:
        case ScoreType.LOWERBOUND:
            return f"{text} (lowerbound)"
        case ScoreType.UPPERBOUND:
            return f"{text} (upperbound)"
        case _:
            return text


def format_pv(info: AnalysisInfo, board: PositionBoard | None = None) -> str:
    if info.pv is None:
        return "-"
    if board is not None:
        san = board.san_line(info.pv)
        if san:
            return " ".join(san)
    return info.pv


def render_info(info: AnalysisInfo, board: PositionBoard | None = None) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim", justify="right")
    table.add_column()

    score_style = "bold green" if info.done else "bold"
    table.add_row("score", Text(format_score(info.score, info.scoretype), style=score_style))
    table.add_row("depth", f"{info.depth}/{info.seldepth}")
    if info.multipv:
        table.add_row("multipv", str(info.multipv))
    table.add_row("nodes", f"{info.nodes:,}")
    table.add_row("nps", f"{info.nps:,}")
    table.add_row("time", f"{info.time / 1000:.2f}s")
    if info.hashfull:
        table.add_row("hashfull", f"{info.hashfull / 10:.1f}%")
    if info.tbhits:
        table.add_row("tbhits", f"{info.tbhits:,}")
    if info.cpuload:
        table.add_row("cpuload", f"{info.cpuload / 10:.1f}%")
    if info.wdl.win or info.wdl.draw or info.wdl.loss:
        table.add_row("wdl", f"{info.wdl.win} / {info.wdl.draw} / {info.wdl.loss}")
    if info.currmove is not None and not info.done:
        table.add_row("currmove", f"{info.currmove} ({info.currmovenumber})")
    table.add_row("pv", format_pv(info, board))

    title = "[bold green] Analysis done [/]" if info.done else "[bold] Analysing… [/]"
    return Panel(table, title=title, border_style="green" if info.done else "dim", expand=False)


def display_job(job: GoJob, engine_path: str, board: PositionBoard | None) -> None:
    lines = [f"[bold white]{engine_path}[/]"]
    position = job.position_command()
    if position:
        lines.append(f"[dim]{position}[/]")
    lines.append(f"[dim]{job.go_command()}[/]")

    body: list = ["\n".join(lines)]
    if board is not None:
        body.append(Text(board.ascii(), style="green"))
        body.append(f"[dim]{board.turn} to move[/]")

    console.print()
    console.print(
        Panel(
            Group(*body),
            title="[bold green] UCI Analysis [/]",
            border_style="green",
            expand=False,
        )
    )


def display_result(result: GoResult, board: PositionBoard | None = None) -> None:
    if result.bestmove is None:
        console.print("  [red]✗[/] engine output ended without a bestmove")
        return

    best = result.bestmove
    if board is not None:
        san = board.san_line(best)
        if san:
            best = f"{san[0]}  [dim]({result.bestmove})[/]"

    ponder = f"   ponder [bold]{result.ponder}[/]" if result.ponder else ""
    console.print(f"  [green]✓[/] bestmove [bold]{best}[/]{ponder}")
