"""
UCI analysis — command-line entry point.

Wires together:  config → go job → engine → analysis session → CLI display

    python main.py --depth 18
    python main.py --fen "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3" --movetime 2000
    python main.py --moves "e2e4 e7e5" --tc 60000 1000 60000 1000 --json
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import sys
from pathlib import Path

from rich.live import Live

from ucianalysis.board import PositionBoard
from ucianalysis.cli.display import console, display_job, display_result, render_info
from ucianalysis.config import Config, load_config
from ucianalysis.engine import UciEngine
from ucianalysis.errors import EngineSpawnError
from ucianalysis.jobs import GoJob, TimeControl
from ucianalysis.session import AnalysisSession

_LOG_FILE = Path("./logs/ucianalysis.log")


def _configure_logging() -> None:
    # The terminal belongs to Rich; engine chatter goes to the log file only.
    _LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        handlers=[
            logging.handlers.RotatingFileHandler(
                _LOG_FILE, maxBytes=2 * 1024 * 1024, backupCount=3,  # 2 MB × 3 files
                encoding="utf-8",
            ),
        ],
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyse a position with a UCI engine.")
    parser.add_argument("--config", default="config.yaml", help="path to config.yaml")
    parser.add_argument("--engine", help="engine command, overrides engine.path")
    parser.add_argument("--fen", help="position to analyse (default: start position)")
    parser.add_argument("--moves", help='moves played from the position, e.g. "e2e4 e7e5"')
    parser.add_argument("--depth", type=int)
    parser.add_argument("--nodes", type=int)
    parser.add_argument("--movetime", type=int, help="milliseconds")
    parser.add_argument(
        "--tc", type=int, nargs=4, metavar=("WTIME", "WINC", "BTIME", "BINC"),
        help="time control in milliseconds",
    )
    parser.add_argument("--json", action="store_true", help="print the final snapshot as JSON")
    return parser.parse_args(argv)


def build_job(config: Config, args: argparse.Namespace) -> GoJob:
    """Config options and search defaults first, command-line flags on top."""
    job = GoJob()
    for key, value in config.engine.options.items():
        job.option(key, value)

    if args.fen:
        job.fen(args.fen)
    else:
        job.startpos()
    if args.moves:
        job.moves(args.moves)

    search_flags = (args.depth, args.nodes, args.movetime, args.tc)
    if not any(flag is not None for flag in search_flags):
        for key, value in config.search.items():
            job.go_option(key, value)

    if args.depth is not None:
        job.depth(args.depth)
    if args.nodes is not None:
        job.nodes(args.nodes)
    if args.movetime is not None:
        job.movetime(args.movetime)
    if args.tc is not None:
        job.time_control(TimeControl(*args.tc))

    if not job.go_options:
        # a bare "go" searches until "stop", which this client never sends
        job.depth(12)
    return job


async def _main(args: argparse.Namespace) -> None:
    try:
        config = load_config(args.config)
    except FileNotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Config error:[/] {exc}")
        sys.exit(1)

    engine_path = args.engine or config.engine.path
    try:
        job = build_job(config, args)
    except ValueError as exc:
        console.print(f"[red]Argument error:[/] {exc}")
        sys.exit(2)
    board = PositionBoard.from_job(job)
    display_job(job, engine_path, board)

    with Live(console=console, refresh_per_second=8, transient=False) as live:
        session = AnalysisSession(
            allow_unknown_key=config.allow_unknown_info_key,
            on_update=lambda info: live.update(render_info(info, board)),
        )
        try:
            engine = await UciEngine.spawn(engine_path, *config.engine.args, info_sink=session.feed)
        except EngineSpawnError as exc:
            live.stop()
            console.print(f"[red]Engine error:[/] {exc}")
            sys.exit(1)

        async with engine:
            result = await session.run(engine, job)

    display_result(result, board)
    if session.errors:
        console.print(f"  [yellow]{session.errors} info line(s) could not be fully parsed[/]")
    if args.json:
        console.print_json(session.info.to_json())


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging()
    asyncio.run(_main(args))


if __name__ == "__main__":
    main()
