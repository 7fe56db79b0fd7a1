import sys
import unittest
from pathlib import Path

from ucianalysis.analysis import AnalysisInfo, Cp, Wdl
from ucianalysis.engine import UciEngine
from ucianalysis.jobs import GoJob, GoResult
from ucianalysis.session import AnalysisSession

FAKE_ENGINE = Path(__file__).with_name("fake_uci_engine.py")


class AnalysisSessionTests(unittest.TestCase):
    def test_feed_applies_info_lines(self) -> None:
        session = AnalysisSession()
        session.feed("info depth 4 score cp 17 pv e2e4 e7e5")
        self.assertEqual(session.info.depth, 4)
        self.assertEqual(session.info.score, Cp(17))
        self.assertEqual(session.errors, 0)

    def test_feed_counts_errors_and_keeps_partial_update(self) -> None:
        session = AnalysisSession()
        with self.assertLogs("ucianalysis.session", level="WARNING"):
            session.feed("info depth 9 nodes many")
        self.assertEqual(session.errors, 1)
        self.assertEqual(session.info.depth, 9)

    def test_feed_ignores_other_lines_without_updates(self) -> None:
        updates: list[AnalysisInfo] = []
        session = AnalysisSession(on_update=updates.append)
        session.feed("id name Fake")
        session.feed("readyok")
        self.assertEqual(updates, [])
        session.feed("info nodes 1")
        self.assertEqual(len(updates), 1)

    def test_unknown_key_setting_is_passed_to_parser(self) -> None:
        session = AnalysisSession(allow_unknown_key=True)
        with self.assertLogs("ucianalysis.analysis", level="WARNING"):
            session.feed("info zzz 1 depth 2")
        self.assertEqual(session.errors, 0)
        self.assertEqual(session.info.depth, 2)

    def test_finish_marks_done(self) -> None:
        session = AnalysisSession()
        info = session.finish(GoResult(bestmove="e2e4"))
        self.assertTrue(info.done)
        self.assertEqual(session.result, GoResult(bestmove="e2e4"))

    def test_reset_starts_a_fresh_record(self) -> None:
        session = AnalysisSession()
        session.feed("info depth 4")
        session.finish(GoResult())
        session.reset()
        self.assertEqual(session.info, AnalysisInfo())
        self.assertIsNone(session.result)


class AnalysisSessionEngineTests(unittest.IsolatedAsyncioTestCase):
    async def test_run_keeps_snapshot_current_and_marks_done(self) -> None:
        updates: list[bool] = []
        session = AnalysisSession(on_update=lambda info: updates.append(info.done))
        engine = await UciEngine.spawn(
            sys.executable, str(FAKE_ENGINE), "normal", info_sink=session.feed
        )
        async with engine:
            result = await session.run(engine, GoJob().startpos().depth(2))

        info = session.info
        self.assertEqual(result, GoResult(bestmove="e2e4", ponder="e7e5"))
        self.assertTrue(info.done)
        self.assertEqual(info.depth, 2)
        self.assertEqual(info.seldepth, 3)
        self.assertEqual(info.score, Cp(35))
        self.assertEqual(info.wdl, Wdl(win=120, draw=800, loss=80))
        self.assertEqual(info.pv, "e2e4 e7e5 g1f3")
        self.assertEqual(info.currmove, "d2d4")
        self.assertEqual(info.currmovenumber, 2)
        self.assertEqual(session.errors, 0)
        self.assertEqual(updates[-1], True)
        self.assertFalse(any(updates[:-1]))
