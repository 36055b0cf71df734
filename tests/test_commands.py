import threading
import unittest

from flashsum.app.commands import DrillCommands
from flashsum.app.events import APP_SETTINGS_CHANGED, EventBus
from flashsum.app.settings import AppSettings
from flashsum.session.errors import AlreadyRunning, InvalidAnswerFormat, InvalidConfig, NotFound
from flashsum.session.manager import SessionManager
from flashsum.session.models import AUTO_REPEAT_WAITING, SESSION_COMPLETE, AutoRepeatPlan

from ._support import FAST_TIMING, Recorder, quick_config

DRILL = {
    "digits_per_number": 3,
    "number_duration_s": 0.1,
    "delay_between_numbers_s": 0.0,
    "total_numbers": 2,
    "allow_negative_numbers": False,
}


class DrillCommandsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bus = EventBus()
        self.rec = Recorder()
        for event in (SESSION_COMPLETE, AUTO_REPEAT_WAITING, APP_SETTINGS_CHANGED):
            self.bus.subscribe(event, lambda payload, _e=event: self.rec.emit(_e, payload))
        self.manager = SessionManager(self.bus.emit, timing=FAST_TIMING)
        self.commands = DrillCommands(self.manager, self.bus)

    def tearDown(self) -> None:
        self.commands.stop_session()

    def _run_drill(self, **overrides):
        response = self.commands.start_session({**DRILL, **overrides})
        self.assertTrue(self.rec.wait_count(SESSION_COMPLETE, 1))
        return response, self.rec.payloads(SESSION_COMPLETE)[-1]

    def test_ping(self) -> None:
        self.assertEqual(self.commands.ping(), "pong")

    def test_start_session_echoes_effective_config(self) -> None:
        response = self.commands.start_session({**DRILL, "digits_per_number": 30, "number_duration_s": 0.04})
        self.assertEqual(response.session_id, 1)
        self.assertEqual(response.effective_config.digits_per_number, 18)
        self.assertEqual(response.effective_config.number_duration_s, 0.1)
        self.assertIsNone(response.effective_auto_repeat)
        self.assertEqual(response.to_json()["effective_config"]["total_numbers"], 2)

    def test_start_session_with_auto_repeat_and_cancel(self) -> None:
        response = self.commands.start_session(DRILL, {"enabled": True, "repeats": 4, "delay_s": 2})
        self.assertEqual(response.effective_auto_repeat.to_json(), {"enabled": True, "repeats": 4, "delay_s": 5.0})
        self.assertEqual(self.manager.auto_repeat_plan().remaining, 4)

        self.commands.cancel_auto_repeat()
        self.assertIsNone(self.manager.auto_repeat_plan())
        self.assertTrue(self.rec.wait_count(SESSION_COMPLETE, 1))
        result = self.rec.payloads(SESSION_COMPLETE)[0]
        self.assertIsNone(self.commands.submit_answer(result.session_id, result.sum).auto_repeat_waiting)

    def test_start_session_errors(self) -> None:
        with self.assertRaises(InvalidConfig):
            self.commands.start_session({"digits_per_number": 2})
        self.commands.start_session({**DRILL, "number_duration_s": 5})
        with self.assertRaises(AlreadyRunning):
            self.commands.start_session(DRILL)

    def test_submit_correct_answer(self) -> None:
        _, result = self._run_drill()
        response = self.commands.submit_answer(result.session_id, result.sum)
        self.assertTrue(response.validation.correct)
        self.assertEqual(response.validation.delta, 0)
        self.assertIsNone(response.auto_repeat_waiting)

        records = self.commands.history.records()
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].digits, 3)
        self.assertEqual(records[0].total_numbers, 2)
        self.assertTrue(records[0].correct)

    def test_submit_incorrect_answer(self) -> None:
        _, result = self._run_drill()
        response = self.commands.submit_answer(result.session_id, result.sum - 6)
        self.assertFalse(response.validation.correct)
        self.assertEqual(response.validation.delta, -6)
        self.assertEqual(response.validation.expected_sum, result.sum)
        # The result stays cached; a second submission compares again.
        self.assertTrue(self.commands.submit_answer(result.session_id, result.sum).validation.correct)

    def test_submit_answer_text(self) -> None:
        _, result = self._run_drill()
        response = self.commands.submit_answer_text(result.session_id, f"  {result.sum:,} ")
        self.assertTrue(response.validation.correct)
        with self.assertRaises(InvalidAnswerFormat):
            self.commands.submit_answer_text(result.session_id, "twelve")
        self.assertEqual(len(self.commands.history), 1)

    def test_submit_rejects_non_integer_answers(self) -> None:
        _, result = self._run_drill()
        for bad in (3.7, float(result.sum), str(result.sum), True, None, 2**63, -(2**63) - 1):
            with self.subTest(provided=bad):
                with self.assertRaises(InvalidAnswerFormat):
                    self.commands.submit_answer(result.session_id, bad)
        self.assertEqual(len(self.commands.history), 0)
        self.assertFalse(self.commands.submit_answer(result.session_id, 2**63 - 1).validation.correct)

    def test_submit_for_unknown_session(self) -> None:
        with self.assertRaises(NotFound):
            self.commands.submit_answer(99, 1)
        with self.assertRaises(NotFound):
            self.commands.result_for(99)

    def test_validating_from_the_complete_handler(self) -> None:
        responses = []
        done = threading.Event()

        def on_complete(result):
            responses.append(self.commands.submit_answer(result.session_id, result.sum))
            done.set()

        self.bus.subscribe(SESSION_COMPLETE, on_complete)
        config = quick_config(total_numbers=1)
        self.manager.configure_auto_repeat(AutoRepeatPlan(remaining=1, delay_ms=5_000, config=config))
        self.manager.start(config)

        self.assertTrue(done.wait(5.0))
        self.assertTrue(responses[0].validation.correct)
        self.assertIsNotNone(responses[0].auto_repeat_waiting)
        self.assertEqual(responses[0].auto_repeat_waiting.remaining, 0)
        self.assertEqual(self.rec.payloads(AUTO_REPEAT_WAITING), [responses[0].auto_repeat_waiting])

    def test_mark_validated_without_plan(self) -> None:
        _, result = self._run_drill()
        self.assertIsNone(self.commands.mark_validated(result.session_id))
        self.assertIsNone(self.commands.acknowledge_complete(result.session_id))

    def test_settings_commands(self) -> None:
        self.assertEqual(self.commands.get_app_settings(), AppSettings())
        updated = self.commands.set_color_scheme("amber")
        self.assertEqual(updated.color_scheme, "amber")
        updated = self.commands.set_theme_mode("light")
        self.assertEqual(updated, AppSettings(color_scheme="amber", theme_mode="light"))
        self.assertEqual(self.rec.payloads(APP_SETTINGS_CHANGED)[-1], updated)

        with self.assertRaises(ValueError):
            self.commands.set_color_scheme("plaid")
        with self.assertRaises(ValueError):
            self.commands.set_theme_mode("dim")
        self.assertEqual(self.commands.get_app_settings(), updated)
        self.assertEqual(len(self.rec.payloads(APP_SETTINGS_CHANGED)), 2)

    def test_sound_commands(self) -> None:
        self.assertFalse(self.commands.cues.is_enabled())
        self.commands.set_sound_enabled(True)
        self.assertTrue(self.commands.cues.is_enabled())
        # No synth factory: playing is a silent no-op.
        self.commands.play_sound_kind("beep")
        with self.assertRaises(ValueError):
            self.commands.play_sound_kind("kazoo")


if __name__ == "__main__":
    unittest.main()
