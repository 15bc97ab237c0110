"""Persistence helpers for GameState."""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from endorbot.models import GameState


def save_state(state: GameState, path: Union[str, Path]) -> None:
    """Write ``state`` as indented JSON, replacing ``path`` atomically."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=str(p.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(state.to_json())
        os.replace(tmp, p)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def load_state(path: Union[str, Path], debug: bool = False) -> GameState:
    """
    Load the last saved state.

    A missing, unreadable or malformed file gives the default state
    (main screen, empty map) instead of an error.
    """
    p = Path(path)
    if not p.exists():
        if debug:
            print(f"[STATE] No saved state at {p}, starting fresh")
        return GameState()
    try:
        return GameState.from_json(p.read_text(encoding="utf-8"))
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        print(f"[STATE] ⚠️  Ignoring unreadable state file {p}: {e}")
        return GameState()
