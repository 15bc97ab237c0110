"""endorbot - screen-reading automation agent for a mobile dungeon crawler."""

__version__ = "0.1.0"
