import io
import random
import unittest

from flashsum.app import explain
from flashsum.session.manager import SessionManager
from flashsum.session.models import SESSION_COMPLETE

from ._support import FAST_TIMING, Recorder, quick_config


class ExplainModeTests(unittest.TestCase):
    def tearDown(self) -> None:
        explain.enable(False)

    def test_disabled_by_default(self) -> None:
        out = io.StringIO()
        explain.enable(False, stream=out)
        explain.trace("session_started", {"session_id": 1})
        self.assertEqual(out.getvalue(), "")

    def test_format_line(self) -> None:
        self.assertEqual(
            explain.format_line("answer_validated", {"delta": 0, "correct": True}),
            '[EXPLAIN] answer_validated :: {"correct":true,"delta":0}',
        )
        self.assertEqual(explain.format_line("ping"), "[EXPLAIN] ping :: {}")

    def test_session_milestones_are_traced(self) -> None:
        out = io.StringIO()
        explain.enable(True, stream=out)
        rec = Recorder()
        manager = SessionManager(rec.emit, timing=FAST_TIMING, rng_factory=lambda: random.Random(1))
        try:
            manager.start(quick_config(total_numbers=2))
            self.assertTrue(rec.wait_count(SESSION_COMPLETE, 1))
        finally:
            manager.stop()
        lines = out.getvalue().splitlines()
        self.assertTrue(any(line.startswith("[EXPLAIN] session_started :: ") for line in lines))
        self.assertTrue(any(line.startswith("[EXPLAIN] session_complete :: ") for line in lines))


if __name__ == "__main__":
    unittest.main()
