"""Tests for the dungeon tile window reader on painted frames."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from endorbot.models.dungeon import Dungeon
from endorbot.models.state import Character, Coords, DungeonRunState, Health
from endorbot.vision import screen_points as sp
from endorbot.vision.pixel_sample import PixelSample
from endorbot.vision.tile_reader import (
    dungeon_from_sample,
    is_wall,
    read_tile,
    read_tiles,
    tile_probes,
    window_origin,
)

from screens import FLOOR, blank_frame, open_area, paint, paint_fog, paint_map, paint_party, paint_tile, sample_frame

PLAYER = Coords(5, 5)


def by_position(tiles):
    return {tile.position: tile for tile in tiles}


def test_window_origin():
    assert window_origin(Coords(5, 5)) == (1, 2)
    assert window_origin(Coords(1, 0)) == (-3, -3)
    print("✓ Window origin test passed")


def test_fogged_window_has_no_tiles():
    frame = blank_frame()
    paint_fog(frame)
    assert read_tiles(sample_frame(frame, PLAYER), PLAYER) == []
    print("✓ Fog test passed")


def test_unknown_position_reads_nothing():
    frame = blank_frame()
    paint_map(frame, PLAYER, open_area(PLAYER))
    assert read_tiles(sample_frame(frame), None) == []
    print("✓ Unknown position test passed")


def test_walls_and_markers():
    """Edge walls, the city marker and stairs down are read per tile."""
    frame = blank_frame()
    paint_map(frame, PLAYER, {
        PLAYER: {"walls": ("north", "west")},
        Coords(6, 5): {"marker": "city"},
        Coords(5, 6): {"marker": "down", "walls": ("south",)},
    })
    tiles = by_position(read_tiles(sample_frame(frame, PLAYER), PLAYER))

    assert set(tiles) == {PLAYER, Coords(6, 5), Coords(5, 6)}
    assert all(t.explored for t in tiles.values())

    me = tiles[PLAYER]
    assert not me.north_passable
    assert not me.west_passable
    assert me.east_passable and me.south_passable
    assert not me.is_city and not me.is_go_down

    assert tiles[Coords(6, 5)].is_city
    assert not tiles[Coords(6, 5)].is_go_down

    stairs = tiles[Coords(5, 6)]
    assert stairs.is_go_down
    assert not stairs.is_city
    assert not stairs.south_passable

    print("✓ Walls and markers test passed")


def test_negative_window_cells_skipped():
    """Near the grid origin the window cells left or above it are dropped."""
    player = Coords(1, 1)
    frame = blank_frame()
    paint_map(frame, player, open_area(player))
    tiles = read_tiles(sample_frame(frame, player), player)

    assert len(tiles) == 20
    assert min(t.position.x for t in tiles) == 0
    assert min(t.position.y for t in tiles) == 0
    print("✓ Negative window test passed")


def test_ignored_go_down_position():
    """The stairs marker on the known bad grid cell is not trusted."""
    player = Coords(15, 15)
    frame = blank_frame()
    paint_map(frame, player, {
        player: {"marker": "down"},
        Coords(16, 15): {"marker": "down"},
    })
    tiles = by_position(read_tiles(sample_frame(frame, player), player))

    assert not tiles[player].is_go_down
    assert tiles[Coords(16, 15)].is_go_down
    print("✓ Ignored stairs position test passed")


def test_half_revealed_tile_skipped():
    frame = blank_frame()
    paint_fog(frame)
    column, row = 4, 3
    paint_tile(frame, column, row)
    probes = tile_probes(column, row)
    paint(frame, probes.west, sp.TILE_UNEXPLORED)

    assert read_tile(sample_frame(frame, PLAYER), probes, PLAYER) is None
    print("✓ Half revealed test passed")


def test_wall_band_below_probe_and_dark_walls():
    probes = tile_probes(0, 0)
    x, y = probes.north
    colors = {point: FLOOR for point in probes.points()}
    colors[(x, y + 1)] = (200, 210, 220)
    ex, ey = probes.east
    colors[(ex, ey)] = (50, 45, 60)
    sample = PixelSample.from_colors(colors)

    assert is_wall(sample, probes.north)
    assert is_wall(sample, probes.east)
    assert not is_wall(sample, probes.south)

    tile = read_tile(sample, probes, Coords(0, 0))
    assert not tile.north_passable and not tile.east_passable
    assert tile.south_passable and tile.west_passable
    print("✓ Wall color test passed")


def test_faded_markers():
    """The faded marker color counts like the bright one."""
    probes = tile_probes(0, 0)
    colors = {point: FLOOR for point in probes.points()}
    colors[probes.marker] = sp.MARKER_FADED
    sample = PixelSample.from_colors(colors)

    assert sample.is_color(probes.marker, sp.MARKER_COLORS)
    assert not sample.is_color(probes.marker_below, sp.MARKER_COLORS)
    assert read_tile(sample, probes, Coords(0, 0)).is_city

    colors[probes.marker_below] = sp.MARKER_FADED
    tile = read_tile(PixelSample.from_colors(colors), probes, Coords(0, 0))
    assert tile.is_go_down
    assert not tile.is_city
    print("✓ Faded marker test passed")


def test_dungeon_from_sample_uses_fallback_position():
    """Without a readout the last known position anchors the window."""
    frame = blank_frame()
    paint_party(frame, [Health.HEALTHY, Health.HURT, Health.LOW, Health.DEAD])
    paint_map(frame, PLAYER, open_area(PLAYER, radius=1))
    sample = sample_frame(frame)

    dungeon = dungeon_from_sample(DungeonRunState.idle(), sample, PLAYER)
    assert dungeon.position == PLAYER
    assert len(dungeon.tiles) == 9
    assert dungeon.tiles[PLAYER].visited
    assert not dungeon.tiles[Coords(6, 5)].visited
    assert [c.health for c in dungeon.characters] == [
        Health.HEALTHY, Health.HURT, Health.LOW, Health.DEAD,
    ]
    print("✓ Fallback position test passed")


def test_dungeon_from_sample_keeps_unknown_slots():
    frame = blank_frame()
    paint_party(frame, [Health.HEALTHY])
    paint_map(frame, PLAYER, {})
    previous = Dungeon(characters=[Character(Health.HURT)] * 2 + [Character(Health.DEAD)] * 2)

    dungeon = dungeon_from_sample(DungeonRunState.idle(), sample_frame(frame, PLAYER), None, previous)
    assert [c.health for c in dungeon.characters] == [
        Health.HEALTHY, Health.HURT, Health.DEAD, Health.DEAD,
    ]
    assert dungeon.tiles == {}
    print("✓ Party carry-over test passed")


if __name__ == "__main__":
    test_window_origin()
    test_fogged_window_has_no_tiles()
    test_unknown_position_reads_nothing()
    test_walls_and_markers()
    test_negative_window_cells_skipped()
    test_ignored_go_down_position()
    test_half_revealed_tile_skipped()
    test_wall_band_below_probe_and_dark_walls()
    test_faded_markers()
    test_dungeon_from_sample_uses_fallback_position()
    test_dungeon_from_sample_keeps_unknown_slots()
    print("\n✓ All tile reader tests passed!")
