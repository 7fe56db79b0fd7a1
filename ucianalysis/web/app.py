"""
FastAPI application — streams engine analysis to a browser.

Exposes:
  GET  /api/config         Engine path, options and default search arguments
  WS   /ws/analysis        Run one search and stream AnalysisInfo snapshots

WebSocket protocol:
  client → {"fen"?: str, "moves"?: str | [str], "options"?: {...}, "go"?: {...}}
  server → {"type": "snapshot", ...AnalysisInfo snapshot...}   (per info line)
           {"type": "snapshot", ..., "done": true}              (final)
           {"type": "bestmove", "bestmove": str | null, "ponder": str | null}
           {"type": "error", "message": str}

Each connection gets its own engine process, closed when the search ends.
There is no stop message: a search runs until the engine prints bestmove, so
"infinite" and "ponder" go arguments are refused. Text containing a line
break is refused too.
"""

from __future__ import annotations

import asyncio
import json
import logging
import logging.handlers
from pathlib import Path

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from ucianalysis.analysis import AnalysisInfo
from ucianalysis.config import Config, load_config
from ucianalysis.engine import UciEngine
from ucianalysis.jobs import GoJob
from ucianalysis.session import AnalysisSession
from ucianalysis.snapshot import to_dict

# --------------------------------------------------------------------------- #
# Logging                                                                      #
# --------------------------------------------------------------------------- #

_LOG_FILE = Path("./logs/ucianalysis.log")
_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    handlers=[
        logging.StreamHandler(),                                   # server console
        logging.handlers.RotatingFileHandler(
            _LOG_FILE, maxBytes=2 * 1024 * 1024, backupCount=3,  # 2 MB × 3 files
            encoding="utf-8",
        ),
    ],
)
logger = logging.getLogger("ucianalysis")


def _load_app_config() -> Config:
    try:
        return load_config()
    except FileNotFoundError:
        logger.warning("config.yaml not found, using defaults (engine: stockfish)")
        return Config()


config = _load_app_config()

app = FastAPI(title="ucianalysis")

_DEFAULT_GO = {"depth": "12"}

# searches that only end on "stop", which this endpoint never sends
_UNBOUNDED_GO = ("infinite", "ponder")


def _to_json(data: dict) -> str:
    return json.dumps(data, separators=(",", ":"))


def _snapshot_message(info: AnalysisInfo) -> str:
    return _to_json({"type": "snapshot", **to_dict(info)})


def _job_from_message(message: dict) -> GoJob:
    """
    Build the GoJob for a start message.

    Configured engine options come first, then the client's. Go arguments are
    the client's if given, else the configured search defaults.

    Raises:
        ValueError: the message has the wrong shape.
    """
    if not isinstance(message, dict):
        raise ValueError("start message must be a JSON object")

    job = GoJob()
    for key, value in config.engine.options.items():
        job.option(key, value)
    for key, value in _pairs(message.get("options"), "options").items():
        job.option(key, value)

    fen = message.get("fen")
    if fen is not None and not isinstance(fen, str):
        raise ValueError("fen must be a string")
    if fen:
        job.fen(fen)
    else:
        job.startpos()

    moves = message.get("moves")
    if moves:
        if isinstance(moves, str):
            job.moves(moves)
        elif isinstance(moves, list) and all(isinstance(m, str) for m in moves):
            job.moves(moves)
        else:
            raise ValueError("moves must be a string or a list of strings")

    go = _pairs(message.get("go"), "go") or config.search or _DEFAULT_GO
    for key, value in go.items():
        if not key or " " in key:
            raise ValueError(f"go argument {key!r} must be a single word")
        if key in _UNBOUNDED_GO:
            raise ValueError(f"go argument {key!r} is not supported")
        job.go_option(key, value)
    return job


def _pairs(value: object, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be an object")
    return value


# --------------------------------------------------------------------------- #
# REST                                                                         #
# --------------------------------------------------------------------------- #

@app.get("/api/config")
def get_config():
    return {
        "engine": config.engine.path,
        "options": config.engine.options,
        "search": config.search or _DEFAULT_GO,
        "allow_unknown_info_key": config.allow_unknown_info_key,
    }


# --------------------------------------------------------------------------- #
# WebSocket analysis                                                           #
# --------------------------------------------------------------------------- #

@app.websocket("/ws/analysis")
async def analysis_ws(ws: WebSocket) -> None:
    await ws.accept()

    try:
        job = _job_from_message(await ws.receive_json())

        outbox: asyncio.Queue[str | None] = asyncio.Queue()
        session = AnalysisSession(
            allow_unknown_key=config.allow_unknown_info_key,
            on_update=lambda info: outbox.put_nowait(_snapshot_message(info)),
        )

        async def _send_loop() -> None:
            while (message := await outbox.get()) is not None:
                await ws.send_text(message)

        engine = await UciEngine.spawn(
            config.engine.path, *config.engine.args, info_sink=session.feed
        )
        sender = asyncio.create_task(_send_loop())
        try:
            async with engine:
                result = await session.run(engine, job)
        finally:
            outbox.put_nowait(None)
            await sender

        await ws.send_text(
            _to_json({"type": "bestmove", "bestmove": result.bestmove, "ponder": result.ponder})
        )
        await ws.close()

    except WebSocketDisconnect:
        logger.info("analysis client disconnected")
    except Exception as exc:
        logger.exception("analysis failed")
        try:
            await ws.send_text(_to_json({"type": "error", "message": str(exc)}))
            await ws.close()
        except (WebSocketDisconnect, RuntimeError):
            pass
