import unittest

from ucianalysis.engine import parse_bestmove
from ucianalysis.jobs import GoJob, GoResult, PositionSpec, TimeControl


class GoJobTests(unittest.TestCase):
    def test_new_job_has_no_position(self) -> None:
        job = GoJob()
        self.assertIs(job.pos_spec, PositionSpec.NONE)
        self.assertIsNone(job.position_command())
        self.assertEqual(job.option_commands(), [])
        self.assertEqual(job.go_command(), "go")

    def test_options_keep_insertion_order(self) -> None:
        job = GoJob().option("Threads", 4).option("Hash", 256).option("MultiPV", 2)
        self.assertEqual(
            job.option_commands(),
            [
                "setoption name Threads value 4",
                "setoption name Hash value 256",
                "setoption name MultiPV value 2",
            ],
        )

    def test_boolean_option_values_are_lowercase(self) -> None:
        job = GoJob().option("UCI_ShowWDL", True)
        self.assertEqual(job.option_commands(), ["setoption name UCI_ShowWDL value true"])

    def test_startpos_with_and_without_moves(self) -> None:
        self.assertEqual(GoJob().startpos().position_command(), "position startpos")
        self.assertEqual(
            GoJob().startpos().moves("e2e4 e7e5").position_command(),
            "position startpos moves e2e4 e7e5",
        )
        self.assertEqual(
            GoJob().startpos().moves(["d2d4", "d7d5"]).position_command(),
            "position startpos moves d2d4 d7d5",
        )

    def test_fen_with_and_without_moves(self) -> None:
        fen = "8/8/8/8/8/8/4K3/4k3 w - - 0 1"
        self.assertEqual(GoJob().fen(fen).position_command(), f"position fen {fen}")
        self.assertEqual(
            GoJob().fen(fen).moves("e2d2").position_command(),
            f"position fen {fen} moves e2d2",
        )

    def test_empty_move_list_is_no_move_list(self) -> None:
        self.assertEqual(GoJob().startpos().moves([]).position_command(), "position startpos")

    def test_go_options_in_order(self) -> None:
        job = GoJob().depth(12).go_option("nodes", 5000).movetime(200)
        self.assertEqual(job.go_command(), "go depth 12 nodes 5000 movetime 200")

    def test_time_control_adds_four_pairs(self) -> None:
        job = GoJob().time_control(TimeControl(wtime=30000, winc=500, btime=29000, binc=500))
        self.assertEqual(job.go_command(), "go wtime 30000 winc 500 btime 29000 binc 500")

    def test_default_time_control_is_one_minute_each(self) -> None:
        self.assertEqual(
            TimeControl().go_pairs(),
            [("wtime", "60000"), ("winc", "0"), ("btime", "60000"), ("binc", "0")],
        )

    def test_repeated_go_option_overwrites_in_place(self) -> None:
        job = GoJob().depth(5).movetime(100).depth(9)
        self.assertEqual(job.go_command(), "go depth 9 movetime 100")

    def test_line_breaks_are_rejected(self) -> None:
        setters = [
            lambda job: job.option("Hash", "1\nquit"),
            lambda job: job.option("Hash\r", 1),
            lambda job: job.fen("8/8/8/8/8/8/4K3/4k3 w - - 0 1\ngo infinite"),
            lambda job: job.moves(["e2e4", "e7e5\nquit"]),
            lambda job: job.go_option("depth", "3\nquit"),
            lambda job: job.go_option("de\npth", 3),
        ]
        for setter in setters:
            job = GoJob()
            with self.subTest(), self.assertRaises(ValueError):
                setter(job)
            self.assertEqual(job.option_commands(), [])
            self.assertIsNone(job.position_command())
            self.assertEqual(job.go_command(), "go")


class ParseBestmoveTests(unittest.TestCase):
    def test_with_ponder(self) -> None:
        self.assertEqual(
            parse_bestmove("bestmove e2e4 ponder e7e5"),
            GoResult(bestmove="e2e4", ponder="e7e5"),
        )

    def test_without_ponder(self) -> None:
        self.assertEqual(parse_bestmove("bestmove g1f3"), GoResult(bestmove="g1f3"))

    def test_bare_bestmove(self) -> None:
        self.assertEqual(parse_bestmove("bestmove"), GoResult())

    def test_three_tokens_has_no_ponder(self) -> None:
        self.assertEqual(parse_bestmove("bestmove a7a8q ponder"), GoResult(bestmove="a7a8q"))
