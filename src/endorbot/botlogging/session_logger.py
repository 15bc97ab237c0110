"""Per-session event log of bot decisions and loop incidents."""

import json
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class SessionEvent:
    """One logged event."""

    timestamp: float
    event_type: str
    action: str
    game_state: Dict[str, Any] = field(default_factory=dict)
    result: Optional[str] = None


@dataclass
class SessionMetrics:
    """Metrics collected during a session."""

    start_time: float
    end_time: Optional[float] = None

    # Counters
    total_events: int = 0
    total_ticks: int = 0
    total_decisions: int = 0
    unknown_states: int = 0
    capture_errors: int = 0

    # Run progress
    floors_descended: int = 0
    fights: int = 0
    town_returns: int = 0
    actions_by_type: Dict[str, int] = field(default_factory=dict)

    def get_duration(self) -> float:
        """Get session duration in seconds."""
        if self.end_time:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "duration_seconds": self.get_duration(),
            "total_events": self.total_events,
            "ticks": self.total_ticks,
            "decisions": self.total_decisions,
            "unknown_states": self.unknown_states,
            "capture_errors": self.capture_errors,
            "floors_descended": self.floors_descended,
            "fights": self.fights,
            "town_returns": self.town_returns,
            "actions_by_type": dict(self.actions_by_type),
        }


class SessionLogger:
    """
    Logs bot decisions and loop incidents for analysis.

    Saves logs to:
    - logs/sessions/ - Per-session JSON files
    - logs/session.jsonl - Line-delimited JSON for streaming analysis
    """

    def __init__(self, log_dir: str = "logs"):
        """
        Initialize session logger.

        Args:
            log_dir: Directory to store logs
        """
        self.log_dir = Path(log_dir)
        self.session_dir = self.log_dir / "sessions"
        self.session_dir.mkdir(parents=True, exist_ok=True)

        # Current session
        self.session_id = self._generate_session_id()
        self.session_file = self.session_dir / f"session_{self.session_id}.json"
        self.events: List[SessionEvent] = []
        self.metrics = SessionMetrics(start_time=time.time())

        self._init_session_file()

    def _generate_session_id(self) -> str:
        """Generate unique session ID."""
        now = datetime.now()
        return now.strftime("%Y%m%d_%H%M%S_") + f"{now.microsecond // 1000:03d}"

    def _init_session_file(self):
        session_data = {
            "session_id": self.session_id,
            "created_at": datetime.now().isoformat(),
            "events": [],
            "metrics": {}
        }

        with open(self.session_file, 'w') as f:
            json.dump(session_data, f, indent=2)

    def log_tick(self):
        self.metrics.total_ticks += 1

    def log_decision(
        self,
        action: str,
        game_state: Dict[str, Any],
        result: Optional[str] = None,
    ):
        """
        Log a planner decision.

        Args:
            action: ActionType value (close_ad, find_fight, ...)
            game_state: Compact summary of the classified state
            result: Human-readable description of the action
        """
        event = SessionEvent(
            timestamp=time.time(),
            event_type="decision",
            action=action,
            game_state=game_state,
            result=result,
        )

        self._log_event(event)
        self.metrics.total_decisions += 1
        self.metrics.actions_by_type[action] = self.metrics.actions_by_type.get(action, 0) + 1
        if action == "go_down":
            self.metrics.floors_descended += 1
        elif action == "fight":
            self.metrics.fights += 1
        elif action == "return_to_town":
            self.metrics.town_returns += 1

    def log_unknown_state(self, reason: str):
        """A tick was skipped because the screen or position was not recognised."""
        event = SessionEvent(
            timestamp=time.time(),
            event_type="unknown_state",
            action="skip_tick",
            result=reason,
        )

        self._log_event(event)
        self.metrics.unknown_states += 1

    def log_capture_error(self, error: str):
        event = SessionEvent(
            timestamp=time.time(),
            event_type="capture_error",
            action="skip_tick",
            result=error,
        )

        self._log_event(event)
        self.metrics.capture_errors += 1

    def log_stop(self, reason: str, game_state: Optional[Dict[str, Any]] = None):
        """Log the loop stopping on its own (manual resurrection needed, tick limit)."""
        event = SessionEvent(
            timestamp=time.time(),
            event_type="stop",
            action="stop",
            game_state=game_state or {},
            result=reason,
        )

        self._log_event(event)

    def _log_event(self, event: SessionEvent):
        self.events.append(event)
        self.metrics.total_events += 1

        # Write to session file
        self._append_event_to_file(event)

        # Also write to jsonl stream
        self._write_to_jsonl(event)

    def _append_event_to_file(self, event: SessionEvent):
        """Append event to session JSON file."""
        try:
            with open(self.session_file, 'r') as f:
                data = json.load(f)

            data["events"].append(asdict(event))

            with open(self.session_file, 'w') as f:
                json.dump(data, f, indent=2)
        except (OSError, ValueError) as e:
            print(f"[BOT] ⚠️  Error appending to session file: {e}")

    def _write_to_jsonl(self, event: SessionEvent):
        """Write event to jsonl stream."""
        try:
            jsonl_file = self.log_dir / "session.jsonl"
            with open(jsonl_file, 'a') as f:
                f.write(json.dumps({
                    "session_id": self.session_id,
                    **asdict(event)
                }) + '\n')
        except OSError as e:
            print(f"[BOT] ⚠️  Error writing to jsonl: {e}")

    def end_session(self) -> Dict[str, Any]:
        """
        Finalize and save session.

        Returns:
            Session summary
        """
        self.metrics.end_time = time.time()

        try:
            with open(self.session_file, 'r') as f:
                data = json.load(f)

            data["metrics"] = self.metrics.to_dict()
            data["ended_at"] = datetime.now().isoformat()

            with open(self.session_file, 'w') as f:
                json.dump(data, f, indent=2)
        except (OSError, ValueError) as e:
            print(f"[BOT] ⚠️  Error finalizing session: {e}")

        return {
            "session_id": self.session_id,
            "file": str(self.session_file),
            "metrics": self.metrics.to_dict()
        }

    def get_recent_events(self, count: int = 10) -> List[Dict[str, Any]]:
        recent = self.events[-count:]
        return [asdict(e) for e in recent]

    def get_session_summary(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "duration": self.metrics.get_duration(),
            "events_logged": len(self.events),
            "metrics": self.metrics.to_dict(),
        }

    @staticmethod
    def load_session(session_file: str) -> Dict[str, Any]:
        """
        Load a previous session from file.

        Args:
            session_file: Path to session JSON file

        Returns:
            Session data, empty when unreadable
        """
        try:
            with open(session_file, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            print(f"[BOT] ⚠️  Error loading session: {e}")
            return {}

    @staticmethod
    def list_sessions(log_dir: str = "logs") -> List[Path]:
        sessions_dir = Path(log_dir) / "sessions"
        if not sessions_dir.exists():
            return []

        return sorted(sessions_dir.glob("session_*.json"))
