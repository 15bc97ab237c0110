"""
Screen calibration tables for the 1080x2408 portrait layout.

Everything the bot reads or taps on screen is listed here by name:
- Pixel probes used to recognise each screen
- Party and enemy health bar sample points
- Dungeon tile window geometry
- OCR regions
- Tap targets

All colors are RGB.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

RGB = Tuple[int, int, int]
Point = Tuple[int, int]

SCREEN_SIZE = (1080, 2408)

# Colors
WHITE: RGB = (255, 255, 255)
MENU_GREY: RGB = (202, 196, 208)
PROMPT_DARK: RGB = (43, 41, 48)
CHEST_BANNER: RGB = (185, 207, 220)
PURPLE_BUTTON: RGB = (56, 30, 114)
FIGHT: RGB = (208, 188, 255)
FIGHT_PRESSED: RGB = (192, 172, 241)
CITY_1: RGB = (1, 0, 31)
CITY_2: RGB = (3, 2, 20)
HEALTH_GREY: RGB = (158, 158, 158)
HEALTH_RED: RGB = (244, 67, 54)
HEALTH_RED_PLAYER: RGB = (211, 47, 47)
HEALTH_GREEN: RGB = (56, 142, 60)
HEALTH_ORANGE: RGB = (245, 124, 0)
TILE_UNEXPLORED: RGB = (29, 27, 32)
MARKER: RGB = (244, 67, 54)
MARKER_FADED: RGB = (165, 118, 66)
TEXT: RGB = (230, 224, 233)


@dataclass(frozen=True)
class PixelProbe:
    """A set of screen points expected to carry one of a few colors."""

    name: str
    points: Tuple[Point, ...]
    colors: Tuple[RGB, ...]

    def matches(self, sample) -> bool:
        """Every point carries one of the colors."""
        return all(sample.color_at(x, y) in self.colors for x, y in self.points)

    def matches_any(self, sample) -> bool:
        """At least one point carries one of the colors."""
        return any(sample.color_at(x, y) in self.colors for x, y in self.points)


SCREEN_PROBES: Dict[str, PixelProbe] = {
    'ad_close_button': PixelProbe(
        name='ad_close_button',
        points=((918, 138), (949, 138), (919, 168), (949, 168)),
        colors=(MENU_GREY,),
    ),
    'teleport_prompt': PixelProbe(
        name='teleport_prompt',
        points=((911, 940), (155, 940), (919, 168), (949, 168)),
        colors=(PROMPT_DARK,),
    ),
    'chest_banner': PixelProbe(
        name='chest_banner',
        points=((466, 1116),),
        colors=(CHEST_BANNER,),
    ),
    'chest_buttons': PixelProbe(
        name='chest_buttons',
        points=((690, 1306), (717, 1326)),
        colors=(PURPLE_BUTTON,),
    ),
    'fight_button': PixelProbe(
        name='fight_button',
        points=((827, 1306), (827, 1260)),
        colors=(FIGHT, FIGHT_PRESSED),
    ),
    'action_button': PixelProbe(
        name='action_button',
        points=((671, 1309),),
        colors=(PURPLE_BUTTON,),
    ),
    'idle_menu': PixelProbe(
        name='idle_menu',
        points=((979, 1083), (1023, 1116)),
        colors=(MENU_GREY,),
    ),
    'city_tile_button': PixelProbe(
        name='city_tile_button',
        points=((716, 1279),),
        colors=(FIGHT,),
    ),
    'dungeon_exit_buttons': PixelProbe(
        name='dungeon_exit_buttons',
        points=((642, 1201), (608, 1307), (609, 1329)),
        colors=(PURPLE_BUTTON,),
    ),
    'city_background_bottom': PixelProbe(
        name='city_background_bottom',
        points=((752, 1926),),
        colors=(CITY_1,),
    ),
    'city_background_side': PixelProbe(
        name='city_background_side',
        points=((75, 1512),),
        colors=(CITY_2,),
    ),
    'main_title': PixelProbe(
        name='main_title',
        points=((462, 1254), (536, 1262), (615, 1270)),
        colors=(WHITE,),
    ),
}

# Party health bars: one row per slot, probes from the right (full) end.
PARTY_BAR_FIRST_Y = 560
PARTY_BAR_PITCH = 120
PARTY_BAR_HEALTHY_X = 514
PARTY_BAR_HURT_X = 291
PARTY_BAR_LOW_X = 147

# Enemy health bar; it shifts left when the second indicator is shown.
ENEMY_BAR_Y = 1471
ENEMY_BAR_HEALTHY_X = 511
ENEMY_BAR_HURT_X = 355
ENEMY_BAR_LOW_X = 181
ENEMY_BAR_SHIFT = 89
ENEMY_INDICATOR: Point = (90, 1472)

# Dungeon tile window
TILE_SIZE = (60, 60)
TILE_START = (536, 536)
TILE_COUNT = (7, 7)
# Grid offset from the player to the window's top-left tile.
WINDOW_ORIGIN_OFFSET = (4, 3)
# Edge probe inset from the tile's near and far border.
EDGE_NEAR = 1
EDGE_FAR = 4
# Marker probes relative to the tile center.
MARKER_OFFSET: Point = (-2, 0)
MARKER_BELOW: Point = (4, 8)
MARKER_COLORS = (MARKER, MARKER_FADED)
# The stairs-down detector misfires on this grid position.
IGNORED_GO_DOWN_POSITIONS = ((15, 15),)

# Coordinate readout glyphs
GLYPH_ROW = 1051
GLYPH_SCAN_X = (220, 378)
GLYPH_FIRST_OFFSET = 20
GLYPH_PITCH = 20


@dataclass(frozen=True)
class ScreenRegion:
    """Absolute pixel rectangle on the device screen."""

    name: str
    x: int
    y: int
    w: int
    h: int

    def extract_from_frame(self, frame: np.ndarray) -> np.ndarray:
        """Extract this region from a frame, clamped to its bounds."""
        if not isinstance(frame, np.ndarray):
            raise ValueError("Frame must be numpy array")

        frame_h, frame_w = frame.shape[:2]
        x = max(0, min(self.x, frame_w - 1))
        y = max(0, min(self.y, frame_h - 1))
        x_end = min(x + self.w, frame_w)
        y_end = min(y + self.h, frame_h)

        return frame[y:y_end, x:x_end]


OCR_REGIONS = {
    'coordinates': ScreenRegion('coordinates', 211, 1039, 365, 51),
    'party': ScreenRegion('party', 143, 520, 375, 394),
}

TAP_TARGETS: Dict[str, Point] = {
    'close_ad': (935, 153),
    'goto_dungeon': (890, 1928),
    'cancel_teleport': (331, 1440),
    'confirm_teleport': (680, 1440),
    'go_down': (715, 1316),
    'enter_city': (715, 1316),
    'fight': (711, 1308),
    'open_chest': (798, 1312),
}

MOVE_TARGETS: Dict[str, Point] = {
    'north': (774, 2085),
    'east': (953, 2277),
    'south': (774, 2264),
    'west': (575, 2277),
}
