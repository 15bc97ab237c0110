#!/usr/bin/env python3
# Endorbot main loop
# One tick:
#   1. Image Source (screenshot)
#   2. Frame Sampler (sparse pixel sample + coordinate readout)
#   3. Screen Detector (classified game state, merged with the last one)
#   4. Planner (next action)
#   5. Action Executor (tap on the device)
#   6. Persistence + status view
from __future__ import annotations

import argparse
import sys
import time
from typing import Any, Dict, List, Optional

from endorbot.botlogging import SessionLogger
from endorbot.core.action_executor import ActionExecutor
from endorbot.core.errors import (
    CaptureError,
    DeviceNotFoundError,
    InputError,
    UnknownPositionError,
    UnknownStateError,
)
from endorbot.core.implementations import (
    AdbInputDevice,
    AdbScreenCapture,
    DummyInputDevice,
    FramebufferCapture,
    ScreenshotFileSource,
)
from endorbot.core.interfaces import ImageSource, InputDevice
from endorbot.decision.planner import Planner, PlannerPolicy
from endorbot.models.game_state import Action, ActionType, GameState
from endorbot.models.state import Coords
from endorbot.persistence.state_store import load_state, save_state
from endorbot.status.server import StateHolder, start_status_server
from endorbot.vision.sampler import FrameSampler
from endorbot.vision.screen_detector import ScreenDetector
from endorbot.vision.ui_vision import CoordinateReader, PartyTextReader


def summarize(state: GameState) -> Dict[str, Any]:
    """Compact state description for the session log."""
    dungeon = state.dungeon
    position = state.position
    return {
        "state_type": state.state_type.value,
        "run_state": dungeon.run_state.kind.value,
        "floor": dungeon.info.floor,
        "position": position.to_dict() if position else None,
        "tiles": len(dungeon.tiles),
        "party": [c.health.value for c in dungeon.characters],
    }


class EndorbotRunner:
    """Runs the capture -> classify -> plan -> act loop."""

    def __init__(
        self,
        image_source: ImageSource,
        input_device: InputDevice,
        sampler: Optional[FrameSampler] = None,
        planner: Optional[Planner] = None,
        state_file: Optional[str] = "state.json",
        holder: Optional[StateHolder] = None,
        session_logger: Optional[SessionLogger] = None,
        debug: bool = True,
    ):
        self.image_source = image_source
        self.sampler = sampler or FrameSampler(debug=debug)
        self.detector = ScreenDetector(debug=debug)
        self.planner = planner or Planner(debug=debug)
        self.executor = ActionExecutor(input_device, debug=debug)
        self.state_file = state_file
        self.session_logger = session_logger
        self.debug = debug

        self.state = load_state(state_file, debug=debug) if state_file else GameState()
        self.holder = holder or StateHolder(self.state)
        self.last_action: Optional[Action] = None
        # Tile held before the last movement tap
        self.previous_position: Optional[Coords] = None
        self.tick = 0
        self.start_time = time.time()

    def step(self) -> Optional[Action]:
        """
        Run one tick.

        Returns:
            The executed action, or None when the tick was skipped

        Raises:
            DeviceNotFoundError: the device is gone
        """
        self.tick += 1
        if self.session_logger:
            self.session_logger.log_tick()

        try:
            frame = self.image_source.get_frame()
        except DeviceNotFoundError:
            raise
        except CaptureError as e:
            print(f"[CAPTURE] ⚠️  {e}")
            if self.session_logger:
                self.session_logger.log_capture_error(str(e))
            return None

        sample = self.sampler.sample(frame)

        try:
            state = self.detector.classify(sample, self.state)
        except UnknownStateError as e:
            print(f"[SCREEN] Unknown state, skipping tick: {e}")
            if self.session_logger:
                self.session_logger.log_unknown_state(str(e))
            return None

        try:
            action = self.planner.determine_action(state, self.last_action, self.previous_position)
        except UnknownPositionError as e:
            print(f"[PLANNER] {e}, skipping tick")
            if self.session_logger:
                self.session_logger.log_unknown_state(str(e))
            self._commit(state, None)
            return None

        if self.debug:
            print(f"[BOT] Tick {self.tick}: {state.state_type.value} -> {action.describe()}")

        if action.action_type == ActionType.RESURRECT:
            print("[BOT] Need manual resurrection")
            self._commit(state, action)
            if self.session_logger:
                self.session_logger.log_stop("manual resurrection needed", summarize(state))
            return action

        try:
            predicted = self.executor.execute(action, state)
        except InputError as e:
            print(f"[ACTION] ⚠️  {e}, skipping tick")
            self._commit(state, None)
            return None
        if predicted is not None:
            self.previous_position = state.position
            state.set_position(predicted)

        if self.session_logger:
            self.session_logger.log_decision(action.action_type.value, summarize(state), action.describe())
        self._commit(state, action)
        return action

    def _commit(self, state: GameState, action: Optional[Action]) -> None:
        self.state = state
        if action is not None:
            self.last_action = action
        self.holder.update(state, self.last_action, self.tick)
        if self.state_file:
            try:
                save_state(state, self.state_file)
            except OSError as e:
                print(f"[STATE] ⚠️  Could not save state: {e}")

    def run(self, max_ticks: Optional[int] = None, tick_delay: float = 0.2, single_step: bool = False) -> None:
        """Loop until resurrection is needed, the tick limit is hit or Ctrl+C."""
        try:
            while max_ticks is None or self.tick < max_ticks:
                action = self.step()
                if action is not None and action.action_type == ActionType.RESURRECT:
                    break
                if single_step:
                    break
                time.sleep(tick_delay)
        except KeyboardInterrupt:
            print("\n[BOT] Interrupted by user")
        finally:
            self._shutdown()

    def _shutdown(self):
        elapsed = time.time() - self.start_time
        print("\n" + "=" * 60)
        print(f"[BOT] Ticks: {self.tick}")
        print(f"[BOT] Duration: {elapsed:.1f}s")
        if self.state.position:
            print(f"[BOT] Last position: ({self.state.position.x},{self.state.position.y})")
        if self.session_logger:
            summary = self.session_logger.end_session()
            print(f"[BOT] Session log: {summary['file']}")
        print("=" * 60)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Endorbot - dungeon crawler automation over adb")

    parser.add_argument(
        "--device",
        type=str,
        default=None,
        help="adb serial of the device (default: the only connected device)"
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Run on the device itself (call screencap/input directly)"
    )
    parser.add_argument(
        "--screenshot",
        type=str,
        default=None,
        help="Path to screenshot file for testing (instead of live capture)"
    )
    parser.add_argument(
        "--framebuffer",
        action="store_true",
        help="Capture from the raw framebuffer instead of screencap (needs root)"
    )
    parser.add_argument(
        "--step",
        action="store_true",
        help="Run a single tick and exit"
    )
    parser.add_argument(
        "--no-action",
        action="store_true",
        help="Plan but never tap the device"
    )
    parser.add_argument(
        "--no-ocr",
        action="store_true",
        help="Skip the coordinate readout (position comes from movement only)"
    )
    parser.add_argument(
        "--tesseract",
        action="store_true",
        help="Read the coordinate readout and party cards with Tesseract"
    )
    parser.add_argument(
        "--state",
        type=str,
        default="state.json",
        help="Path to persistent game state file"
    )
    parser.add_argument(
        "--tick-delay",
        type=float,
        default=0.2,
        help="Seconds to sleep between ticks"
    )
    parser.add_argument(
        "--status-port",
        type=int,
        default=8765,
        help="Port of the status view (0 disables it)"
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=None,
        help="Maximum ticks to run (default: unlimited)"
    )
    parser.add_argument(
        "--retreat-on-low-health",
        action="store_true",
        help="Leave fights for the city when a party member is low"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for session logs"
    )
    parser.add_argument(
        "--no-debug",
        action="store_true",
        help="Disable debug output"
    )

    return parser.parse_args(argv)


def build_runner(args: argparse.Namespace) -> EndorbotRunner:
    debug = not args.no_debug

    if args.screenshot:
        source: ImageSource = ScreenshotFileSource(args.screenshot)
    elif args.framebuffer:
        source = FramebufferCapture(device=args.device, local=args.local)
    else:
        source = AdbScreenCapture(device=args.device, local=args.local, debug=debug)

    if args.no_action or args.screenshot:
        device: InputDevice = DummyInputDevice(debug=debug)
    else:
        device = AdbInputDevice(device=args.device, local=args.local, debug=debug)

    if args.tesseract:
        sampler = FrameSampler(
            coordinate_reader=CoordinateReader(debug=debug),
            party_reader=PartyTextReader(debug=debug),
            ocr_enabled=not args.no_ocr,
            debug=debug,
        )
    else:
        sampler = FrameSampler(ocr_enabled=not args.no_ocr, debug=debug)

    policy = PlannerPolicy(retreat_on_low_health=args.retreat_on_low_health)

    return EndorbotRunner(
        image_source=source,
        input_device=device,
        sampler=sampler,
        planner=Planner(policy=policy, debug=debug),
        state_file=args.state,
        session_logger=SessionLogger(args.log_dir),
        debug=debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)

    print("=" * 60)
    print("[BOT] Endorbot starting")
    print(f"[BOT] Capture: {args.screenshot or ('framebuffer' if args.framebuffer else 'screencap')}")
    print(f"[BOT] Taps: {'disabled' if args.no_action else 'enabled'}")
    print(f"[BOT] State file: {args.state}")
    print("=" * 60)

    try:
        runner = build_runner(args)
        if args.status_port:
            start_status_server(runner.holder, port=args.status_port)
        runner.run(max_ticks=args.max_ticks, tick_delay=args.tick_delay, single_step=args.step)
    except DeviceNotFoundError as e:
        print(f"[BOT] ❌ Device not available: {e}")
        return 1
    except OSError as e:
        print(f"[BOT] ❌ Startup failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
