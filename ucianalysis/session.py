"""
AnalysisSession — keeps one AnalysisInfo current while an engine searches.

The driver and the parser do not know about each other. The session is the
piece of the embedding application that joins them: its ``feed`` method is
passed to UciEngine as the info sink, and ``run`` marks the record done when
the go() call returns.

    session = AnalysisSession()
    engine = await UciEngine.spawn("stockfish", info_sink=session.feed)
    result = await session.run(engine, GoJob().startpos().depth(12))
"""

from __future__ import annotations

import logging
from typing import Callable

from ucianalysis.analysis import AnalysisInfo
from ucianalysis.engine import UciEngine
from ucianalysis.errors import InfoParseError
from ucianalysis.jobs import GoJob, GoResult

logger = logging.getLogger(__name__)


class AnalysisSession:
    def __init__(
        self,
        *,
        allow_unknown_key: bool | None = None,
        on_update: Callable[[AnalysisInfo], None] | None = None,
    ) -> None:
        self.info = AnalysisInfo()
        self.result: GoResult | None = None
        self.errors = 0
        self._allow_unknown_key = allow_unknown_key
        self._on_update = on_update

    def feed(self, line: str) -> None:
        """Apply one engine line. Parse failures are logged and counted, never raised."""
        if line.split(" ", 1)[0] != "info":
            return
        try:
            self.info.parse(line, allow_unknown_key=self._allow_unknown_key)
        except InfoParseError as exc:
            # fields before the bad token are already applied
            self.errors += 1
            logger.warning("info line partly applied (%s): %s", exc, line)
        if self._on_update is not None:
            self._on_update(self.info)

    def finish(self, result: GoResult) -> AnalysisInfo:
        self.result = result
        self.info.done = True
        if self._on_update is not None:
            self._on_update(self.info)
        return self.info

    def reset(self) -> None:
        """Start over for the next search."""
        self.info = AnalysisInfo()
        self.result = None
        self.errors = 0

    async def run(self, engine: UciEngine, job: GoJob) -> GoResult:
        result = await engine.go(job)
        self.finish(result)
        return result
