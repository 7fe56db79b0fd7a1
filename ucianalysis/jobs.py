"""
Go jobs and time controls — what the caller hands to UciEngine.go().

A GoJob is assembled with chained setters and consumed once by the driver:

    job = (
        GoJob()
        .option("Threads", 2)
        .startpos()
        .moves("e2e4 e7e5")
        .time_control(TimeControl(wtime=30000, btime=30000))
    )
    result = await engine.go(job)

Options and go arguments keep their insertion order; engines can care about
the order in which options are set.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class PositionSpec(Enum):
    NONE = "none"
    STARTPOS = "startpos"
    FEN = "fen"


@dataclass(frozen=True)
class TimeControl:
    """Remaining time and increment per side, in milliseconds."""

    wtime: int = 60000
    winc: int = 0
    btime: int = 60000
    binc: int = 0

    def go_pairs(self) -> list[tuple[str, str]]:
        return [
            ("wtime", str(self.wtime)),
            ("winc", str(self.winc)),
            ("btime", str(self.btime)),
            ("binc", str(self.binc)),
        ]


@dataclass(frozen=True)
class GoResult:
    bestmove: str | None = None
    ponder: str | None = None


class GoJob:
    def __init__(self) -> None:
        self.uci_options: dict[str, str] = {}
        self.pos_spec = PositionSpec.NONE
        self.pos_fen: str | None = None
        self.pos_moves: str | None = None
        self.go_options: dict[str, str] = {}

    # ------------------------------------------------------------------ #
    # Builders                                                             #
    # ------------------------------------------------------------------ #

    def option(self, key: object, value: object) -> GoJob:
        """
        Queue ``setoption name <key> value <value>``.

        Raises:
            ValueError: the key or value contains a line break. The same
                check applies to every setter that feeds a command line.
        """
        name = _one_line(key, "option name")
        self.uci_options[name] = _one_line(_uci_value(value), "option value")
        return self

    def startpos(self) -> GoJob:
        self.pos_spec = PositionSpec.STARTPOS
        return self

    def fen(self, fen: object) -> GoJob:
        self.pos_fen = _one_line(fen, "fen")
        self.pos_spec = PositionSpec.FEN
        return self

    def moves(self, moves: str | Iterable[str]) -> GoJob:
        """Moves played from the position, as one string or a sequence of UCI moves."""
        text = moves if isinstance(moves, str) else " ".join(moves)
        self.pos_moves = _one_line(text, "moves").strip() or None
        return self

    def go_option(self, key: object, value: object) -> GoJob:
        name = _one_line(key, "go argument")
        self.go_options[name] = _one_line(_uci_value(value), "go value")
        return self

    def time_control(self, tc: TimeControl) -> GoJob:
        for key, value in tc.go_pairs():
            self.go_options[key] = value
        return self

    def depth(self, plies: int) -> GoJob:
        return self.go_option("depth", plies)

    def nodes(self, nodes: int) -> GoJob:
        return self.go_option("nodes", nodes)

    def movetime(self, ms: int) -> GoJob:
        return self.go_option("movetime", ms)

    # ------------------------------------------------------------------ #
    # Rendering                                                            #
    # ------------------------------------------------------------------ #

    def option_commands(self) -> list[str]:
        return [
            f"setoption name {key} value {value}"
            for key, value in self.uci_options.items()
        ]

    def position_command(self) -> str | None:
        """``position ...`` for this job, or None when no position was given."""
        moves = f" moves {self.pos_moves}" if self.pos_moves else ""
        match self.pos_spec:
            case PositionSpec.STARTPOS:
                return f"position startpos{moves}"
            case PositionSpec.FEN:
                return f"position fen {self.pos_fen}{moves}"
            case _:
                return None

    def go_command(self) -> str:
        return "go" + "".join(f" {key} {value}" for key, value in self.go_options.items())

    def __repr__(self) -> str:
        return (
            f"GoJob(options={self.uci_options!r}, position={self.position_command()!r}, "
            f"go={self.go_command()!r})"
        )


def _uci_value(value: object) -> str:
    # UCI check options are spelled true/false
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _one_line(value: object, what: str) -> str:
    """``str(value)``; a line break would split the command the engine reads."""
    text = str(value)
    if "\n" in text or "\r" in text:
        raise ValueError(f"{what} must not contain a line break: {text!r}")
    return text
