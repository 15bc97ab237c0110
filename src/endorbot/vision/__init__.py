"""Vision package: pixel sampling, readouts and screen classification."""

from .pixel_sample import PixelSample
from .screen_points import SCREEN_PROBES, TAP_TARGETS, MOVE_TARGETS, PixelProbe, ScreenRegion
from .sampler import FrameSampler
from .screen_detector import ScreenDetector, classify
from .ui_vision import CoordinateReader, GlyphCoordinateReader, PartyTextReader, parse_coordinates

__all__ = [
    "PixelSample",
    "PixelProbe",
    "ScreenRegion",
    "SCREEN_PROBES",
    "TAP_TARGETS",
    "MOVE_TARGETS",
    "FrameSampler",
    "ScreenDetector",
    "classify",
    "CoordinateReader",
    "GlyphCoordinateReader",
    "PartyTextReader",
    "parse_coordinates",
]
