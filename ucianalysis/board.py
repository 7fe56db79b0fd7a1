"""
Thin facade over python-chess, used only to show analysis to a human.

The driver and parser never look at chess rules. This module rebuilds the
position a GoJob describes so the CLI and web UI can print the board and turn
the engine's UCI principal variation into SAN.
"""

from __future__ import annotations

import chess

from ucianalysis.jobs import GoJob, PositionSpec


class PositionBoard:
    """Facade over chess.Board for the position being analysed."""

    def __init__(self, fen: str | None = None) -> None:
        self._board = chess.Board(fen) if fen else chess.Board()

    @classmethod
    def from_job(cls, job: GoJob) -> PositionBoard | None:
        """
        The position a job sends to the engine.

        Returns None when the job has no position, the FEN does not parse, or
        one of the moves is not legal.
        """
        match job.pos_spec:
            case PositionSpec.STARTPOS:
                board = cls()
            case PositionSpec.FEN:
                try:
                    board = cls(job.pos_fen)
                except ValueError:
                    return None
            case _:
                return None

        for uci in (job.pos_moves or "").split():
            if board.push_uci(uci) is None:
                return None
        return board

    @property
    def fen(self) -> str:
        return self._board.fen()

    @property
    def turn(self) -> str:
        return "white" if self._board.turn == chess.WHITE else "black"

    def ascii(self) -> str:
        return str(self._board)

    def push_uci(self, uci: str) -> str | None:
        """Apply a legal move. Returns its SAN, or None if the move was not applied."""
        try:
            move = chess.Move.from_uci(uci)
        except (ValueError, chess.InvalidMoveError):
            return None
        if move not in self._board.legal_moves:
            return None
        san = self._board.san(move)
        self._board.push(move)
        return san

    def san_line(self, pv: str | None) -> list[str]:
        """
        SAN for as much of ``pv`` as is legal from here; the board itself is unchanged.

        A PV cell can be cut short, and a stale PV can belong to a previous
        position, so conversion stops at the first move that does not apply.
        """
        copy = PositionBoard()
        copy._board = self._board.copy(stack=False)
        san_moves: list[str] = []
        for uci in (pv or "").split():
            san = copy.push_uci(uci)
            if san is None:
                break
            san_moves.append(san)
        return san_moves
