"""
Sparse per-tick pixel sample.

The capture layer reads a fixed set of calibration points from the
screenshot and hands them over as a PixelSample together with the text it
recognised. Everything downstream only ever looks at these points.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set, Tuple

from endorbot.core.errors import MissingPixelError
from endorbot.models.state import Coords, DungeonInfo

RGB = Tuple[int, int, int]
Point = Tuple[int, int]

# Returned for unsampled points outside strict mode.
SENTINEL: RGB = (0, 0, 0)


@dataclass
class PixelSample:
    """
    Read-only map from screen coordinates to RGB colors.

    Strict samples raise MissingPixelError when asked for a point that was
    never sampled; this catches calibration tables drifting out of sync with
    the sampler. Non-strict samples answer with SENTINEL and warn once per
    point.
    """

    pixels: Dict[Point, RGB] = field(default_factory=dict)
    info: DungeonInfo = field(default_factory=DungeonInfo)
    has_dead_characters: bool = False
    strict: bool = False
    _warned: Set[Point] = field(default_factory=set, repr=False, compare=False)

    def color_at(self, x: int, y: int) -> RGB:
        color = self.pixels.get((x, y))
        if color is not None:
            return color
        if self.strict:
            raise MissingPixelError(x, y)
        if (x, y) not in self._warned:
            self._warned.add((x, y))
            print(f"[SCREEN] ⚠️  Pixel ({x},{y}) was not sampled, using {SENTINEL}")
        return SENTINEL

    def has(self, x: int, y: int) -> bool:
        return (x, y) in self.pixels

    def is_color(self, point: Point, colors: Iterable[RGB]) -> bool:
        return self.color_at(*point) in tuple(colors)

    @property
    def coordinates(self) -> Optional[Coords]:
        return self.info.coordinates

    @property
    def floor(self) -> str:
        return self.info.floor

    @staticmethod
    def from_colors(
        colors: Dict[Point, RGB],
        coordinates: Optional[Coords] = None,
        floor: str = "",
        has_dead_characters: bool = False,
        strict: bool = True,
    ) -> "PixelSample":
        """Build a sample directly from a point->color map (tests, replays)."""
        return PixelSample(
            pixels=dict(colors),
            info=DungeonInfo(floor, coordinates),
            has_dead_characters=has_dead_characters,
            strict=strict,
        )
