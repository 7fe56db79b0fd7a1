"""
UciEngine — drives one UCI engine subprocess.

Three units of work per engine:
  * the caller's task, which writes commands and awaits go() results
  * a reader task that drains engine stdout, forwards ``bestmove`` lines to a
    hand-off channel and logs everything else (optionally handing it to an
    ``info_sink`` so the embedding application can feed an AnalysisInfo)
  * a supervisor task that waits for the process to exit and logs the status

Both background tasks start in the constructor and live as long as the
process; nothing joins them.

Usage contract:
  * One caller drives one engine, with at most one go() in flight. UCI is
    strictly request/response and there is no lock here to enforce it.
  * go() has no timeout and cannot be cancelled cleanly. It waits for as long
    as the engine keeps running without printing ``bestmove``. If the engine's
    output ends first, go() returns a GoResult with both moves absent.
  * No ``quit`` is ever sent. close() ends the child's stdin and waits for it
    to exit.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from ucianalysis.errors import EngineSpawnError
from ucianalysis.jobs import GoJob, GoResult

logger = logging.getLogger(__name__)

InfoSink = Callable[[str], None]

_BESTMOVE = "bestmove"
_DISCONNECTED = object()

# per-line cap on engine output; asyncio defaults to 64 KiB
_STREAM_LIMIT = 1024 * 1024


class BestmoveChannel:
    """
    Single-producer, single-consumer FIFO between the reader task and go().

    Once closed, every pending and future recv() returns None.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, line: str) -> None:
        if not self._closed:
            self._queue.put_nowait(line)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_DISCONNECTED)

    async def recv(self) -> str | None:
        item = await self._queue.get()
        if item is _DISCONNECTED:
            # leave the marker for whoever asks next
            self._queue.put_nowait(_DISCONNECTED)
            return None
        return item  # type: ignore[return-value]


class UciEngine:
    def __init__(
        self,
        path: str,
        proc: asyncio.subprocess.Process,
        info_sink: InfoSink | None = None,
    ) -> None:
        if proc.stdin is None or proc.stdout is None:
            proc.kill()
            raise EngineSpawnError(f"uci engine {path} has no stdin/stdout pipe")

        self._path = path
        self._proc = proc
        self._stdin = proc.stdin
        self._info_sink = info_sink
        self._channel = BestmoveChannel()

        # Strong references only; the tasks are never awaited.
        self._tasks = (
            asyncio.create_task(self._supervise(), name=f"uci-supervisor[{path}]"),
            asyncio.create_task(self._read_stdout(proc.stdout), name=f"uci-reader[{path}]"),
        )

        logger.info("spawned uci engine : %s (pid %s)", path, proc.pid)

    @classmethod
    async def spawn(
        cls,
        path: str,
        *args: str,
        info_sink: InfoSink | None = None,
    ) -> UciEngine:
        """
        Start ``path`` with piped stdin/stdout, e.g. ``await UciEngine.spawn("./stockfish")``.

        Raises:
            EngineSpawnError: the process could not be started.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                path,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                limit=_STREAM_LIMIT,
            )
        except OSError as exc:
            raise EngineSpawnError(f"failed to spawn uci engine {path}: {exc}") from exc
        return cls(path, proc, info_sink=info_sink)

    @property
    def path(self) -> str:
        return self._path

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode

    # ------------------------------------------------------------------ #
    # Background tasks                                                     #
    # ------------------------------------------------------------------ #

    async def _supervise(self) -> None:
        status = await self._proc.wait()
        logger.debug("child exit status : %s", status)

    async def _read_stdout(self, stdout: asyncio.StreamReader) -> None:
        try:
            while True:
                try:
                    raw = await stdout.readline()
                except ValueError as exc:
                    # longer than the stream limit; the reader drops it from its buffer
                    logger.warning("skipped engine output line : %s", exc)
                    continue
                if not raw:
                    break
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                if line[:8] == _BESTMOVE:
                    logger.debug("uci engine out : %s", line)
                    self._channel.send(line)
                    continue
                logger.info("uci engine out : %s", line)
                self._forward(line)
            logger.debug("reader ok : end of engine output")
        except OSError as exc:
            logger.debug("reader err %r", exc)
        finally:
            self._channel.close()

    def _forward(self, line: str) -> None:
        if self._info_sink is None:
            return
        try:
            self._info_sink(line)
        except Exception:
            logger.exception("info sink failed for line %r", line)

    # ------------------------------------------------------------------ #
    # Commands                                                             #
    # ------------------------------------------------------------------ #

    async def issue_command(self, command: str) -> None:
        """
        Write ``command`` plus a newline to the engine.

        Raises:
            OSError: the pipe to the engine is broken.
        """
        logger.info("issuing uci command : %s", command)
        self._stdin.write(f"{command}\n".encode("utf-8"))
        await self._stdin.drain()

    async def go(self, job: GoJob) -> GoResult:
        """
        Send the job's options, position and go command, then wait for ``bestmove``.

        See the module docstring for the one-request-at-a-time contract and
        the lack of a timeout.
        """
        for command in job.option_commands():
            await self.issue_command(command)

        position = job.position_command()
        if position is not None:
            await self.issue_command(position)

        await self.issue_command(job.go_command())

        line = await self._channel.recv()
        logger.debug("recv bestmove result : %r", line)

        if line is None:
            return GoResult()
        return parse_bestmove(line)

    async def close(self) -> int:
        """Close the engine's stdin and wait for the process to exit."""
        if not self._stdin.is_closing():
            self._stdin.close()
            try:
                await self._stdin.wait_closed()
            except (BrokenPipeError, ConnectionResetError) as exc:
                logger.debug("stdin close err %r", exc)
        return await self._proc.wait()

    async def __aenter__(self) -> UciEngine:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"UciEngine(path={self._path!r}, pid={self._proc.pid})"


def parse_bestmove(line: str) -> GoResult:
    """``bestmove <move> [ponder <move>]`` -> GoResult."""
    parts = line.split(" ")
    return GoResult(
        bestmove=parts[1] if len(parts) > 1 else None,
        ponder=parts[3] if len(parts) > 3 else None,
    )
