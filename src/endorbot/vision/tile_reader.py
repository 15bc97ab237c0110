"""
Dungeon tile window reader.

The dungeon map shows a 7x7 window of tiles around the player. Each tile
is read from a handful of pixels:
- center: fog color means the tile is not revealed yet
- one probe inside each edge: a wall is drawn as a bright or a dark band
- two marker probes near the center: city and stairs-down icons
"""

from dataclasses import dataclass
from typing import List, Optional

from endorbot.models.dungeon import Dungeon
from endorbot.models.state import Coords, DungeonInfo, DungeonRunState, Tile
from endorbot.vision import screen_points as sp
from endorbot.vision.health_reader import read_characters
from endorbot.vision.pixel_sample import RGB, PixelSample, Point


@dataclass(frozen=True)
class TileProbes:
    """Screen points read for one cell of the tile window."""

    column: int
    row: int
    center: Point
    north: Point
    east: Point
    south: Point
    west: Point
    marker: Point
    marker_below: Point

    @property
    def edges(self) -> List[Point]:
        return [self.north, self.east, self.south, self.west]

    def points(self) -> List[Point]:
        points = [self.center]
        for x, y in self.edges:
            points.extend([(x, y), (x, y + 1)])
        points.extend([self.marker, self.marker_below])
        return points


def _offset(point: Point, delta: Point) -> Point:
    return (point[0] + delta[0], point[1] + delta[1])


def tile_probes(column: int, row: int) -> TileProbes:
    tile_w, tile_h = sp.TILE_SIZE
    left = sp.TILE_START[0] + column * tile_w
    top = sp.TILE_START[1] + row * tile_h
    cx = left + tile_w // 2
    cy = top + tile_h // 2
    marker = _offset((cx, cy), sp.MARKER_OFFSET)
    return TileProbes(
        column=column,
        row=row,
        center=(cx, cy),
        north=(cx, top + sp.EDGE_NEAR),
        east=(left + tile_w - sp.EDGE_FAR, cy),
        south=(cx, top + tile_h - sp.EDGE_FAR),
        west=(left + sp.EDGE_NEAR, cy),
        marker=marker,
        marker_below=_offset(marker, sp.MARKER_BELOW),
    )


def window_probes() -> List[TileProbes]:
    columns, rows = sp.TILE_COUNT
    return [tile_probes(c, r) for c in range(columns) for r in range(rows)]


def sample_points() -> List[Point]:
    """Every screen point the tile reader may query."""
    points = []
    for probes in window_probes():
        points.extend(probes.points())
    return points


def _is_wall_color(color: RGB) -> bool:
    return all(v >= 125 for v in color) or all(40 <= v <= 64 for v in color)


def is_wall(sample: PixelSample, point: Point) -> bool:
    """A wall band covers the probe or the pixel right below it."""
    x, y = point
    return _is_wall_color(sample.color_at(x, y)) or _is_wall_color(sample.color_at(x, y + 1))


def _is_marker(sample: PixelSample, point: Point) -> bool:
    return sample.is_color(point, sp.MARKER_COLORS)


def read_tile(sample: PixelSample, probes: TileProbes, position: Coords) -> Optional[Tile]:
    """Read one window cell, or None when it is fogged or half revealed."""
    if sample.color_at(*probes.center) == sp.TILE_UNEXPLORED:
        return None
    if sample.color_at(*probes.west) == sp.TILE_UNEXPLORED:
        return None

    marker = _is_marker(sample, probes.marker)
    below = _is_marker(sample, probes.marker_below)
    stairs_down = (
        marker
        and below
        and (position.x, position.y) not in sp.IGNORED_GO_DOWN_POSITIONS
    )

    return Tile(
        position=position,
        explored=True,
        is_city=marker and not below,
        is_go_down=stairs_down,
        north_passable=not is_wall(sample, probes.north),
        east_passable=not is_wall(sample, probes.east),
        south_passable=not is_wall(sample, probes.south),
        west_passable=not is_wall(sample, probes.west),
    )


def window_origin(position: Coords) -> tuple:
    """Grid coordinate of the window's top-left cell (may be negative)."""
    dx, dy = sp.WINDOW_ORIGIN_OFFSET
    return position.x - dx, position.y - dy


def read_tiles(sample: PixelSample, position: Optional[Coords]) -> List[Tile]:
    """
    Read the visible tile window around ``position``.

    Cells that would land on a negative grid coordinate are skipped, and so
    is the whole window when the position is unknown.
    """
    if position is None:
        return []

    x_base, y_base = window_origin(position)
    tiles = []
    for probes in window_probes():
        x = x_base + probes.column
        y = y_base + probes.row
        if x < 0 or y < 0:
            continue
        tile = read_tile(sample, probes, Coords(x, y))
        if tile is not None:
            tiles.append(tile)
    return tiles


def dungeon_from_sample(
    run_state: DungeonRunState,
    sample: PixelSample,
    fallback_position: Optional[Coords],
    previous: Optional[Dungeon] = None,
) -> Dungeon:
    """
    Build a fresh, unmerged dungeon map from one sample.

    The recognised coordinates win; ``fallback_position`` covers ticks where
    the readout could not be read.
    """
    if sample.coordinates is not None:
        info = DungeonInfo(sample.floor, sample.coordinates)
    else:
        info = DungeonInfo(sample.floor, fallback_position)

    characters = read_characters(sample, previous.characters if previous else None)
    dungeon = Dungeon(run_state=run_state, characters=characters, info=info)
    for tile in read_tiles(sample, info.coordinates):
        dungeon.add_tile(tile)
    if info.coordinates is not None:
        dungeon.mark_visited(info.coordinates)
    return dungeon
