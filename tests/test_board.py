import unittest

from ucianalysis.board import PositionBoard
from ucianalysis.jobs import GoJob


class PositionBoardTests(unittest.TestCase):
    def test_startpos_with_moves(self) -> None:
        board = PositionBoard.from_job(GoJob().startpos().moves("e2e4 e7e5"))
        assert board is not None
        self.assertEqual(board.turn, "white")
        self.assertIn("4p3/4P3", board.fen)

    def test_job_without_position_has_no_board(self) -> None:
        self.assertIsNone(PositionBoard.from_job(GoJob()))

    def test_bad_fen_or_illegal_move_has_no_board(self) -> None:
        self.assertIsNone(PositionBoard.from_job(GoJob().fen("not a fen")))
        self.assertIsNone(PositionBoard.from_job(GoJob().startpos().moves("e2e5")))

    def test_san_line_stops_at_first_bad_move(self) -> None:
        board = PositionBoard()
        self.assertEqual(board.san_line("e2e4 e7e5 g1f3"), ["e4", "e5", "Nf3"])
        self.assertEqual(board.san_line("e2e4 e7e5 e1e3 g1f3"), ["e4", "e5"])
        self.assertEqual(board.san_line(None), [])

    def test_san_line_leaves_board_untouched(self) -> None:
        board = PositionBoard()
        before = board.fen
        board.san_line("d2d4 d7d5")
        self.assertEqual(board.fen, before)

    def test_ascii_has_eight_ranks(self) -> None:
        self.assertEqual(len(PositionBoard().ascii().splitlines()), 8)
