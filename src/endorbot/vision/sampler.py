"""
Frame sampler - turns a full screenshot into the sparse PixelSample.

Only the calibration points listed in screen_points, health_reader and
tile_reader are copied out of the frame; the readout text comes from a
coordinate reader that looks at the full frame.
"""

from typing import List, Optional

import numpy as np

from endorbot.models.state import DungeonInfo
from endorbot.vision import health_reader, tile_reader
from endorbot.vision.pixel_sample import PixelSample, Point
from endorbot.vision.screen_points import SCREEN_PROBES
from endorbot.vision.ui_vision import GlyphCoordinateReader, PartyTextReader


def calibration_points() -> List[Point]:
    """Every screen point any reader may query, without duplicates."""
    points = []
    for probe in SCREEN_PROBES.values():
        points.extend(probe.points)
    points.extend(health_reader.party_sample_points())
    points.extend(health_reader.enemy_sample_points())
    points.extend(tile_reader.sample_points())
    return list(dict.fromkeys(points))


class FrameSampler:
    """
    Samples RGB frames at the calibration points.

    Args:
        coordinate_reader: object with ``read(frame) -> DungeonInfo``
        party_reader: optional PartyTextReader for the "dead" label
        ocr_enabled: read the coordinate readout at all
        strict: produce strict samples (tests)
    """

    def __init__(
        self,
        coordinate_reader=None,
        party_reader: Optional[PartyTextReader] = None,
        ocr_enabled: bool = True,
        strict: bool = False,
        debug: bool = False,
    ):
        self.coordinate_reader = coordinate_reader or GlyphCoordinateReader(debug=debug)
        self.party_reader = party_reader
        self.ocr_enabled = ocr_enabled
        self.strict = strict
        self.debug = debug
        self.points = calibration_points()

    def sample(self, frame: np.ndarray) -> PixelSample:
        if not isinstance(frame, np.ndarray) or frame.ndim != 3 or frame.shape[2] < 3:
            raise ValueError("Frame must be an HxWx3 (or x4) numpy array")

        h, w = frame.shape[:2]
        pixels = {}
        for x, y in self.points:
            if 0 <= x < w and 0 <= y < h:
                r, g, b = frame[y, x, :3]
                pixels[(x, y)] = (int(r), int(g), int(b))

        sample = PixelSample(pixels=pixels, strict=self.strict)
        if not self.ocr_enabled:
            return sample

        sample.info = self.coordinate_reader.read(frame) or DungeonInfo()
        has_dead = any(c.is_dead() for c in health_reader.read_characters(sample))
        if not has_dead and self.party_reader is not None:
            has_dead = self.party_reader.has_dead(frame)
        sample.has_dead_characters = has_dead

        if self.debug:
            print(
                f"[SCREEN] Sampled {len(pixels)} points, "
                f"info={sample.info.floor!r} {sample.coordinates}, dead={has_dead}"
            )
        return sample
