#!/usr/bin/env python3
"""
Main entry point for Endorbot

Usage:
    python main.py                         # Live mode over adb with debug
    python main.py --device SERIAL         # Pick the adb device
    python main.py --no-debug              # Live mode without debug
    python main.py --screenshot PATH       # Classify and plan on one screenshot
    python main.py --no-action --step      # One dry-run tick
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from endorbot.main import main


if __name__ == "__main__":
    sys.exit(main())
