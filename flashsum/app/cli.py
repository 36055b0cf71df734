from __future__ import annotations

"""Terminal front end: flashes a drill, asks for the sum, handles auto-repeat."""

import argparse
import json
import logging
import queue
import sys
from typing import Any, Dict

from .. import __version__
from ..audio.cues import SoundCues
from ..audio.playback import make_synth_from_config
from ..config.config import load_config, validate_config
from ..session.errors import InvalidAnswerFormat, SessionError
from ..session.manager import SessionManager
from ..session.models import (
    AUTO_REPEAT_TICK,
    AUTO_REPEAT_WAITING,
    CLEAR_SCREEN,
    COUNTDOWN_TICK,
    SESSION_COMPLETE,
    SHOW_NUMBER,
    AutoRepeatTick,
    AutoRepeatWaiting,
    SessionResult,
    ShowNumber,
    SubmitAnswerResponse,
)
from ..session.normalize import normalize_auto_repeat, normalize_session_config
from ..stats.history import AttemptHistory, format_summary
from ..util.randomness import make_rng, seed_if_needed
from .commands import DrillCommands
from .events import EventBus
from .settings import AppSettings, SettingsStore

logger = logging.getLogger("flashsum.cli")

_LINE_WIDTH = 40


def _drill_from_args(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    drill = dict(cfg["drill"])
    if args.digits is not None:
        drill["digits_per_number"] = args.digits
    if args.duration is not None:
        drill["number_duration_s"] = args.duration
    if args.gap is not None:
        drill["delay_between_numbers_s"] = args.gap
    if args.count is not None:
        drill["total_numbers"] = args.count
    if args.negative is not None:
        drill["allow_negative_numbers"] = args.negative
    return drill


def _auto_repeat_from_args(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    ar = dict(cfg["auto_repeat"])
    if args.repeat is not None:
        ar["enabled"] = args.repeat > 0
        if args.repeat > 0:
            ar["repeats"] = args.repeat
    if args.repeat_delay is not None:
        ar["delay_s"] = args.repeat_delay
    return ar


def _add_drill_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("--digits", type=int, default=None, help="Digits per number (1-18)")
    p.add_argument("--duration", type=float, default=None, help="Seconds each number stays visible")
    p.add_argument("--gap", type=float, default=None, help="Seconds between numbers")
    p.add_argument("--count", type=int, default=None, help="How many numbers to flash")
    p.add_argument("--negative", dest="negative", action="store_true", help="Allow negative numbers")
    p.add_argument("--no-negative", dest="negative", action="store_false")
    p.set_defaults(negative=None)
    p.add_argument("--repeat", type=int, default=None, help="Auto-repeat this many times (0 disables)")
    p.add_argument("--repeat-delay", dest="repeat_delay", type=float, default=None, help="Seconds before each repeat")


class _Console:
    """Renders lifecycle signals on a single terminal line."""

    def __init__(self, cues: SoundCues, show_running_sum: bool) -> None:
        self.cues = cues
        self.show_running_sum = show_running_sum
        self.completed: "queue.Queue[SessionResult]" = queue.Queue()

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(CLEAR_SCREEN, self.on_clear)
        bus.subscribe(COUNTDOWN_TICK, self.on_countdown)
        bus.subscribe(SHOW_NUMBER, self.on_show_number)
        bus.subscribe(SESSION_COMPLETE, self.completed.put)
        bus.subscribe(AUTO_REPEAT_WAITING, self.on_waiting)
        bus.subscribe(AUTO_REPEAT_TICK, self.on_tick)

    def _line(self, text: str) -> None:
        sys.stdout.write("\r" + text.center(_LINE_WIDTH))
        sys.stdout.flush()

    def on_clear(self, _payload: Any) -> None:
        self._line("")

    def on_countdown(self, value: str) -> None:
        self._line(f"{value}...")
        self.cues.play_kind("beep")

    def on_show_number(self, ev: ShowNumber) -> None:
        text = f"{ev.value:,}"
        if self.show_running_sum:
            text += f"   [{ev.index}/{ev.total}  sum {ev.running_sum:,}]"
        self._line(text)

    def on_waiting(self, ev: AutoRepeatWaiting) -> None:
        print(f"Next drill scheduled ({ev.remaining} repeat(s) left).")

    def on_tick(self, ev: AutoRepeatTick) -> None:
        self._line(f"next drill in {ev.seconds_left}s" if ev.seconds_left else "")


def _wait_for_result(console: _Console, commands: DrillCommands) -> SessionResult | None:
    while True:
        try:
            return console.completed.get(timeout=0.25)
        except queue.Empty:
            if not commands.manager.is_running() and commands.manager.auto_repeat_plan() is None:
                return None


def _ask_answer(commands: DrillCommands, result: SessionResult) -> SubmitAnswerResponse:
    while True:
        text = input("Your sum: ")
        try:
            return commands.submit_answer_text(result.session_id, text)
        except InvalidAnswerFormat as e:
            print(e)


def _run(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    if args.sound is not None:
        cfg.setdefault("audio", {})["enabled"] = bool(args.sound)
    cfg = validate_config(cfg)

    bus = EventBus()
    manager = SessionManager(bus.emit, rng_factory=make_rng)
    cues = SoundCues(synth_factory=lambda: make_synth_from_config(cfg), enabled=bool(cfg["audio"]["enabled"]))
    settings = SettingsStore(
        bus.emit,
        AppSettings(color_scheme=cfg["ui"]["color_scheme"], theme_mode=cfg["ui"]["theme_mode"]),
    )
    history = AttemptHistory(capacity=cfg["history"]["capacity"])
    commands = DrillCommands(manager, bus, settings=settings, cues=cues, history=history)

    console = _Console(cues, show_running_sum=bool(cfg["ui"]["show_running_sum"]))
    console.attach(bus)

    try:
        started = commands.start_session(_drill_from_args(cfg, args), _auto_repeat_from_args(cfg, args))
    except SessionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger.info("drill %s started", started.session_id)
    eff = started.effective_config
    print(
        f"Drill: {eff.total_numbers} numbers, {eff.digits_per_number} digit(s), "
        f"{eff.number_duration_s}s each, {eff.delay_between_numbers_s}s gap"
        + (", negatives on" if eff.allow_negative_numbers else "")
    )

    try:
        while True:
            result = _wait_for_result(console, commands)
            if result is None:
                break
            print()
            response = _ask_answer(commands, result)
            v = response.validation
            if v.correct:
                print(f"Correct! The sum was {v.expected_sum:,}.")
                cues.play_kind("applause")
            else:
                print(f"Incorrect. The sum was {v.expected_sum:,} (off by {v.delta:+,}).")
                cues.play_kind("buzzer")
            print("Numbers: " + ", ".join(f"{n:,}" for n in result.numbers))
            if response.auto_repeat_waiting is None:
                break
    except (KeyboardInterrupt, EOFError):
        print("\nStopping.")
    finally:
        commands.stop_session()
        cues.close()

    print("\nSession Summary:")
    print(format_summary(history.summarize()))
    return 0


def _show_config(args: argparse.Namespace) -> int:
    cfg = validate_config(load_config(args.config))
    try:
        config, effective = normalize_session_config(_drill_from_args(cfg, args))
        _plan, effective_ar = normalize_auto_repeat(_auto_repeat_from_args(cfg, args), config)
    except SessionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    out = {
        "effective_config": effective.to_json(),
        "effective_auto_repeat": effective_ar.to_json() if effective_ar else None,
    }
    print(json.dumps(out, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="flashsum", description="Flash mental-arithmetic drills")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    p.add_argument("--explain", action="store_true", help="Trace session milestones")
    sub = p.add_subparsers(dest="cmd")

    rp = sub.add_parser("run", help="Run a drill")
    _add_drill_args(rp)
    rp.add_argument("--sound", dest="sound", action="store_true", help="Enable sound cues")
    rp.add_argument("--no-sound", dest="sound", action="store_false")
    rp.set_defaults(sound=None)

    sp = sub.add_parser("show-config", help="Print the effective drill configuration")
    _add_drill_args(sp)

    args = p.parse_args(argv)

    if args.version:
        print(f"flashsum {__version__}")
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.explain:
        from .explain import enable as explain_enable
        explain_enable(True)
    seed_if_needed()

    if args.cmd == "run":
        return _run(args)
    if args.cmd == "show-config":
        return _show_config(args)
    p.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
