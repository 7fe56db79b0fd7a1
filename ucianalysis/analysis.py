"""
AnalysisInfo — the running snapshot of an engine search, and the info-line parser that feeds it.

The parser is a token-by-token state machine. ``step`` is the whole machine:
it takes the current state and one token, applies whatever that token means to
the record, and returns the next state. ``AnalysisInfo.parse`` only splits the
line and threads the state through ``step``.

Every line is a partial update. Fields not named in the line keep the values
from earlier lines, and a failure halfway through a line leaves the fields
decoded before it applied.

Reference for the grammar: http://wbec-ridderkerk.nl/html/UCIProtocol.html

    info depth 2 score cp 214 time 1242 nodes 2124 nps 34928 pv e2e4 e7e5 g1f3
    info currmove e2e4 currmovenumber 1
    info depth 12 nodes 123456 nps 100000
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from ucianalysis.buffers import MoveText, PvText
from ucianalysis.config import allow_unknown_info_key
from ucianalysis.errors import (
    InfoParseError,
    InvalidKeyError,
    InvalidScoreSpecifier,
    ParseNumberError,
)

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

_UNSIGNED = re.compile(r"\+?[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Cp:
    """Centipawn score from the engine's point of view."""
    value: int


@dataclass(frozen=True)
class Mate:
    """Mate in ``value`` moves (not plies); negative when the engine is getting mated."""
    value: int


Score = Cp | Mate


class ScoreType(Enum):
    EXACT = "Exact"
    LOWERBOUND = "Lowerbound"
    UPPERBOUND = "Upperbound"


@dataclass
class Wdl:
    win: int = 0
    draw: int = 0
    loss: int = 0


class ParsingState(Enum):
    INFO = "info"
    KEY = "key"
    UNKNOWN = "unknown"
    IGNORE = "ignore"
    DEPTH = "depth"
    SELDEPTH = "seldepth"
    TIME = "time"
    NODES = "nodes"
    MULTIPV = "multipv"
    SCORE = "score"
    SCORE_CP = "score cp"
    SCORE_MATE = "score mate"
    WDL_W = "wdl win"
    WDL_D = "wdl draw"
    WDL_L = "wdl loss"
    CURRMOVE = "currmove"
    CURRMOVENUMBER = "currmovenumber"
    HASHFULL = "hashfull"
    NPS = "nps"
    TBHITS = "tbhits"
    CPULOAD = "cpuload"
    PV_BESTMOVE = "pv bestmove"
    PV_PONDER = "pv ponder"
    PV_REST = "pv rest"


_KEY_STATES: dict[str, ParsingState] = {
    "depth": ParsingState.DEPTH,
    "seldepth": ParsingState.SELDEPTH,
    "time": ParsingState.TIME,
    "nodes": ParsingState.NODES,
    "multipv": ParsingState.MULTIPV,
    "score": ParsingState.SCORE,
    "wdl": ParsingState.WDL_W,
    "currmove": ParsingState.CURRMOVE,
    "currmovenumber": ParsingState.CURRMOVENUMBER,
    "hashfull": ParsingState.HASHFULL,
    "nps": ParsingState.NPS,
    "tbhits": ParsingState.TBHITS,
    "cpuload": ParsingState.CPULOAD,
    "pv": ParsingState.PV_BESTMOVE,
}

# string, refutation and currline are not supported: the rest of the line is dropped
_UNSUPPORTED_KEYS = frozenset({"string", "refutation", "currline"})

_BOUND_WORDS: dict[str, ScoreType] = {
    "lowerbound": ScoreType.LOWERBOUND,
    "upperbound": ScoreType.UPPERBOUND,
}

# value state -> (attribute, state that follows)
_UNSIGNED_FIELDS: dict[ParsingState, tuple[str, ParsingState]] = {
    ParsingState.DEPTH: ("depth", ParsingState.KEY),
    ParsingState.SELDEPTH: ("seldepth", ParsingState.KEY),
    ParsingState.TIME: ("time", ParsingState.KEY),
    ParsingState.NODES: ("nodes", ParsingState.KEY),
    ParsingState.MULTIPV: ("multipv", ParsingState.KEY),
    ParsingState.CURRMOVENUMBER: ("currmovenumber", ParsingState.KEY),
    ParsingState.HASHFULL: ("hashfull", ParsingState.KEY),
    ParsingState.NPS: ("nps", ParsingState.KEY),
    ParsingState.TBHITS: ("tbhits", ParsingState.KEY),
    ParsingState.CPULOAD: ("cpuload", ParsingState.KEY),
}

_WDL_FIELDS: dict[ParsingState, tuple[str, ParsingState]] = {
    ParsingState.WDL_W: ("win", ParsingState.WDL_D),
    ParsingState.WDL_D: ("draw", ParsingState.WDL_L),
    ParsingState.WDL_L: ("loss", ParsingState.KEY),
}

_PV_STATES = frozenset(
    {ParsingState.PV_BESTMOVE, ParsingState.PV_PONDER, ParsingState.PV_REST}
)


@dataclass
class AnalysisInfo:
    """
    Most recently known state of an ongoing search.

    ``done`` belongs to the embedding application: it is flipped when the
    matching ``bestmove`` arrives through the driver. The parser never sets it.
    """

    done: bool = False
    bestmove_text: MoveText = field(default_factory=MoveText)
    ponder_text: MoveText = field(default_factory=MoveText)
    pv_text: PvText = field(default_factory=PvText)
    depth: int = 0
    seldepth: int = 0
    time: int = 0            # ms searched
    nodes: int = 0
    multipv: int = 0
    score: Score = Cp(0)
    scoretype: ScoreType = ScoreType.EXACT
    currmove_text: MoveText = field(default_factory=MoveText)
    currmovenumber: int = 0  # 1-based
    hashfull: int = 0        # permill
    nps: int = 0
    tbhits: int = 0
    cpuload: int = 0         # permill
    wdl: Wdl = field(default_factory=Wdl)

    @property
    def bestmove(self) -> str | None:
        return self.bestmove_text.to_option()

    @property
    def ponder(self) -> str | None:
        return self.ponder_text.to_option()

    @property
    def pv(self) -> str | None:
        return self.pv_text.to_option()

    @property
    def currmove(self) -> str | None:
        return self.currmove_text.to_option()

    def parse(self, line: str, *, allow_unknown_key: bool | None = None) -> None:
        """
        Apply one engine output line to this record.

        Lines that do not start with ``info`` and lines using the ``string``,
        ``refutation`` or ``currline`` extensions are accepted and change
        nothing past the point where they were recognised.

        ``allow_unknown_key`` defaults to the ALLOW_UNKNOWN_INFO_KEY environment
        toggle. When it is off an unknown key raises InvalidKeyError; when on the
        key and the token after it are skipped.

        Raises:
            ParseNumberError, InvalidKeyError, InvalidScoreSpecifier
        """
        if allow_unknown_key is None:
            allow_unknown_key = allow_unknown_info_key()

        state = ParsingState.INFO
        pv_tokens: list[str] = []

        for token in line.rstrip("\r\n").split(" "):
            state = step(state, token, self, pv_tokens, allow_unknown_key=allow_unknown_key)
            if state is ParsingState.IGNORE:
                return

        if state in _PV_STATES:
            self.pv_text.set_trim(" ".join(pv_tokens), " ")

    # ------------------------------------------------------------------ #
    # Transport                                                            #
    # ------------------------------------------------------------------ #

    def to_json(self) -> str:
        from ucianalysis.snapshot import to_json
        return to_json(self)

    @classmethod
    def from_json(cls, text: str | bytes) -> AnalysisInfo:
        from ucianalysis.snapshot import from_json
        return from_json(text)


def step(
    state: ParsingState,
    token: str,
    info: AnalysisInfo,
    pv_tokens: list[str],
    *,
    allow_unknown_key: bool = False,
) -> ParsingState:
    """Consume one token in ``state``, mutate ``info`` and return the next state."""
    match state:
        case ParsingState.INFO:
            # anything else is not an info line
            return ParsingState.KEY if token == "info" else ParsingState.IGNORE

        case ParsingState.KEY:
            return _step_key(token, info, allow_unknown_key)

        case ParsingState.UNKNOWN:
            # hope the unknown key took exactly one argument
            return ParsingState.KEY

        case ParsingState.SCORE:
            if token == "cp":
                return ParsingState.SCORE_CP
            if token == "mate":
                return ParsingState.SCORE_MATE
            if token in _BOUND_WORDS:
                info.scoretype = _BOUND_WORDS[token]
                return ParsingState.SCORE
            raise _logged(InvalidScoreSpecifier(token))

        case ParsingState.SCORE_CP | ParsingState.SCORE_MATE:
            # some engines put the bound word before the number
            if token in _BOUND_WORDS:
                info.scoretype = _BOUND_WORDS[token]
                return state
            value = _parse_signed(state, token)
            info.score = Cp(value) if state is ParsingState.SCORE_CP else Mate(value)
            return ParsingState.KEY

        case ParsingState.CURRMOVE:
            info.currmove_text.set(token)
            return ParsingState.KEY

        case ParsingState.PV_BESTMOVE:
            info.bestmove_text.set(token)
            info.ponder_text.reset()
            pv_tokens.append(token)
            return ParsingState.PV_PONDER

        case ParsingState.PV_PONDER:
            info.ponder_text.set(token)
            pv_tokens.append(token)
            return ParsingState.PV_REST

        case ParsingState.PV_REST:
            pv_tokens.append(token)
            return ParsingState.PV_REST

        case ParsingState.IGNORE:
            return ParsingState.IGNORE

    if state in _WDL_FIELDS:
        attr, next_state = _WDL_FIELDS[state]
        setattr(info.wdl, attr, _parse_unsigned(state, token))
        return next_state

    attr, next_state = _UNSIGNED_FIELDS[state]
    setattr(info, attr, _parse_unsigned(state, token))
    return next_state


def _step_key(token: str, info: AnalysisInfo, allow_unknown_key: bool) -> ParsingState:
    if token in _UNSUPPORTED_KEYS:
        return ParsingState.IGNORE

    if token in _BOUND_WORDS:
        info.scoretype = _BOUND_WORDS[token]
        return ParsingState.KEY

    next_state = _KEY_STATES.get(token)
    if next_state is None:
        if not allow_unknown_key:
            raise _logged(InvalidKeyError(token))
        logger.warning("unknown info key %s", token)
        return ParsingState.UNKNOWN

    if next_state is ParsingState.SCORE:
        info.scoretype = ScoreType.EXACT
    return next_state


def _parse_unsigned(state: ParsingState, token: str) -> int:
    if _UNSIGNED.fullmatch(token):
        value = int(token)
        if value <= U64_MAX:
            return value
    raise _logged(ParseNumberError(state, token))


def _parse_signed(state: ParsingState, token: str) -> int:
    if _SIGNED.fullmatch(token):
        value = int(token)
        if I32_MIN <= value <= I32_MAX:
            return value
    raise _logged(ParseNumberError(state, token))


def _logged(exc: InfoParseError) -> InfoParseError:
    logger.error("%s", exc)
    return exc
