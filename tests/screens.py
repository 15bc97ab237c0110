"""Synthetic screens for tests: numpy frames painted at calibration points."""

import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from endorbot.models.state import Coords, DungeonInfo, Health
from endorbot.vision import screen_points as sp
from endorbot.vision.health_reader import party_bar_y
from endorbot.vision.sampler import FrameSampler
from endorbot.vision.tile_reader import tile_probes, window_origin
from endorbot.vision.ui_vision import GLYPH_RULES

BACKGROUND = (10, 10, 10)
FLOOR = (90, 80, 100)
WALL = (200, 200, 200)


class FixedReader:
    """Coordinate reader returning a fixed readout."""

    def __init__(self, coordinates: Optional[Coords] = None, floor: str = "D1"):
        self.info = DungeonInfo(floor if coordinates else "", coordinates)

    def read(self, frame):
        return DungeonInfo(self.info.floor, self.info.coordinates)


def blank_frame() -> np.ndarray:
    width, height = sp.SCREEN_SIZE
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :] = BACKGROUND
    return frame


def paint(frame: np.ndarray, point, color) -> None:
    x, y = point
    frame[y, x] = color


def paint_probe(frame: np.ndarray, name: str, color=None) -> None:
    probe = sp.SCREEN_PROBES[name]
    for point in probe.points:
        paint(frame, point, color or probe.colors[0])


def paint_party(frame: np.ndarray, healths: Sequence[Health]) -> None:
    for slot, health in enumerate(healths):
        y = party_bar_y(slot)
        if health == Health.HEALTHY:
            paint(frame, (sp.PARTY_BAR_HEALTHY_X, y), sp.HEALTH_GREEN)
        elif health == Health.HURT:
            paint(frame, (sp.PARTY_BAR_HURT_X, y), sp.HEALTH_GREEN)
        elif health == Health.LOW:
            paint(frame, (sp.PARTY_BAR_LOW_X, y), sp.HEALTH_RED_PLAYER)
        elif health == Health.DEAD:
            paint(frame, (sp.PARTY_BAR_LOW_X, y), sp.HEALTH_GREY)


def paint_tile(
    frame: np.ndarray,
    column: int,
    row: int,
    walls: Iterable[str] = (),
    marker: Optional[str] = None,
) -> None:
    """
    Paint one revealed tile of the map window.

    ``walls`` names edges (north/east/south/west); ``marker`` is
    "city" or "down".
    """
    tile_w, tile_h = sp.TILE_SIZE
    left = sp.TILE_START[0] + column * tile_w
    top = sp.TILE_START[1] + row * tile_h
    frame[top:top + tile_h, left:left + tile_w] = FLOOR

    probes = tile_probes(column, row)
    for edge in walls:
        x, y = getattr(probes, edge)
        paint(frame, (x, y), WALL)
        paint(frame, (x, y + 1), WALL)

    if marker is not None:
        paint(frame, probes.marker, sp.MARKER)
    if marker == "down":
        paint(frame, probes.marker_below, sp.MARKER)


def paint_fog(frame: np.ndarray) -> None:
    """Cover the whole map window with fog."""
    columns, rows = sp.TILE_COUNT
    tile_w, tile_h = sp.TILE_SIZE
    x0, y0 = sp.TILE_START
    frame[y0:y0 + rows * tile_h, x0:x0 + columns * tile_w] = sp.TILE_UNEXPLORED


def paint_map(frame: np.ndarray, player: Coords, tiles: Dict[Coords, dict]) -> None:
    """
    Paint the map window around ``player``.

    ``tiles`` maps grid coordinates to paint_tile keyword arguments; every
    other cell stays fogged.
    """
    paint_fog(frame)
    x_base, y_base = window_origin(player)
    columns, rows = sp.TILE_COUNT
    for pos, spec in tiles.items():
        column, row = pos.x - x_base, pos.y - y_base
        if 0 <= column < columns and 0 <= row < rows:
            paint_tile(frame, column, row, **spec)


def paint_glyph(frame: np.ndarray, x: int, y: int, glyph) -> None:
    """Paint the pixels a glyph rule expects (first alternative of each clause)."""
    for candidate, clauses in GLYPH_RULES:
        if candidate != glyph:
            continue
        for clause in clauses:
            dx, dy, color, expected = clause[0]
            if expected:
                paint(frame, (x + dx, y + dy), color)
        return
    raise ValueError(f"No glyph rule for {glyph!r}")


def idle_dungeon_frame(player: Coords, tiles: Dict[Coords, dict], party=None) -> np.ndarray:
    frame = blank_frame()
    paint_probe(frame, 'idle_menu')
    paint_party(frame, party or [Health.HEALTHY] * 4)
    paint_map(frame, player, tiles)
    return frame


def sample_frame(frame: np.ndarray, coordinates: Optional[Coords] = None, ocr: bool = True):
    sampler = FrameSampler(coordinate_reader=FixedReader(coordinates), ocr_enabled=ocr, strict=True)
    return sampler.sample(frame)


def open_area(center: Coords, radius: int = 3) -> Dict[Coords, dict]:
    """Revealed tiles without walls in a square around ``center``."""
    tiles = {}
    for x in range(center.x - radius, center.x + radius + 1):
        for y in range(center.y - radius, center.y + radius + 1):
            if x >= 0 and y >= 0:
                tiles[Coords(x, y)] = {}
    return tiles
