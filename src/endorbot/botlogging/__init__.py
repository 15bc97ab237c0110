"""Bot logging package (renamed to avoid stdlib conflict)."""
from .session_logger import SessionLogger, SessionEvent, SessionMetrics

__all__ = ["SessionLogger", "SessionEvent", "SessionMetrics"]
