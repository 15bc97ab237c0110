"""Tests for grid pathfinding."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from endorbot.models.dungeon import Dungeon
from endorbot.models.state import Coords, MoveDirection, Tile
from endorbot.navigation.grid import PLAYFIELD_BOUND, GridPathfinder, PathResult, direction_to


def walled_box(x0, y0, x1, y1, visited=True):
    """Explored rectangle whose outer edges are walls."""
    dungeon = Dungeon()
    for x in range(x0, x1 + 1):
        for y in range(y0, y1 + 1):
            dungeon.add_tile(Tile(
                Coords(x, y),
                explored=True,
                visited=visited,
                north_passable=y > y0,
                south_passable=y < y1,
                west_passable=x > x0,
                east_passable=x < x1,
            ))
    return dungeon


def test_open_grid_path_is_manhattan():
    """On an unknown (fully open) map the path length is the Manhattan distance."""
    finder = GridPathfinder(Dungeon())
    result = finder.plan(Coords(2, 3), Coords(7, 9))

    assert result.success
    assert result.cost == 11
    assert len(result.path) == 12
    assert result.path[0] == Coords(2, 3)
    assert result.goal == Coords(7, 9)
    for a, b in zip(result.path, result.path[1:]):
        assert a.manhattan(b) == 1
    print("✓ Manhattan path test passed")


def test_path_goes_around_wall():
    """A wall on the leaving tile's edge forces a detour."""
    dungeon = Dungeon()
    dungeon.add_tile(Tile(Coords(1, 1), explored=True, east_passable=False))
    result = GridPathfinder(dungeon).plan(Coords(1, 1), Coords(2, 1))

    assert result.success
    assert result.cost == 3
    assert result.next_step in (Coords(1, 0), Coords(1, 2))
    print("✓ Wall detour test passed")


def test_unreachable_goal():
    dungeon = walled_box(0, 0, 2, 2)
    finder = GridPathfinder(dungeon)

    result = finder.plan(Coords(1, 1), Coords(5, 5))
    assert not result.success
    assert result.next_step is None
    assert result.goal is None

    start = dungeon.tile_at(Coords(1, 1))
    assert finder.shortest_path(start, dungeon.tile_at(Coords(5, 5))) is None
    print("✓ Unreachable goal test passed")


def test_shortest_path_returns_next_tile():
    dungeon = Dungeon()
    finder = GridPathfinder(dungeon)
    start = dungeon.tile_at(Coords(4, 4))

    assert finder.shortest_path(start, start) is start
    step = finder.shortest_path(start, dungeon.tile_at(Coords(4, 8)))
    assert step.position == Coords(4, 5)
    assert direction_to(start, step) == MoveDirection.SOUTH
    print("✓ shortest_path test passed")


def test_goal_search_respects_playfield_bound():
    """Goal paths never step east or south past the playfield."""
    finder = GridPathfinder(Dungeon())
    inside = finder.plan(Coords(PLAYFIELD_BOUND - 1, 0), Coords(PLAYFIELD_BOUND, 0))
    assert inside.success

    outside = finder.plan(Coords(PLAYFIELD_BOUND, 0), Coords(PLAYFIELD_BOUND + 1, 0))
    assert not outside.success
    print("✓ Playfield bound test passed")


def test_nearest_unvisited_in_enclosed_region():
    """None exactly when every reachable tile has been visited."""
    dungeon = walled_box(0, 0, 3, 3)
    finder = GridPathfinder(dungeon)
    start = dungeon.tile_at(Coords(0, 0))
    assert finder.nearest_unvisited(start) is None

    dungeon.tiles[Coords(3, 2)].visited = False
    found = finder.nearest_unvisited(start)
    assert found.position == Coords(3, 2)
    print("✓ nearest_unvisited test passed")


def test_nearest_unvisited_prefers_closest():
    dungeon = walled_box(0, 0, 5, 0)
    dungeon.tiles[Coords(1, 0)].visited = False
    dungeon.tiles[Coords(5, 0)].visited = False
    start = dungeon.tile_at(Coords(2, 0))

    assert GridPathfinder(dungeon).nearest_unvisited(start).position == Coords(1, 0)
    print("✓ Closest unvisited test passed")


def test_nearest_unvisited_includes_start():
    dungeon = walled_box(0, 0, 2, 2, visited=False)
    start = dungeon.tile_at(Coords(1, 1))
    assert GridPathfinder(dungeon).nearest_unvisited(start) is start
    print("✓ Unvisited start test passed")


def test_nearest_unvisited_reaches_unknown_territory():
    """Leaving the known area is fine: unknown tiles are unvisited."""
    dungeon = Dungeon()
    dungeon.add_tile(Tile(Coords(0, 0), explored=True, visited=True, south_passable=False))
    found = GridPathfinder(dungeon).nearest_unvisited(dungeon.tile_at(Coords(0, 0)))
    assert found.position == Coords(1, 0)
    print("✓ Unknown territory test passed")


def test_empty_path_result():
    result = PathResult()
    assert not result.success
    assert result.next_step is None
    assert PathResult(path=[Coords(1, 1)], cost=0, success=True).next_step == Coords(1, 1)
    print("✓ PathResult test passed")


if __name__ == "__main__":
    test_open_grid_path_is_manhattan()
    test_path_goes_around_wall()
    test_unreachable_goal()
    test_shortest_path_returns_next_tile()
    test_goal_search_respects_playfield_bound()
    test_nearest_unvisited_in_enclosed_region()
    test_nearest_unvisited_prefers_closest()
    test_nearest_unvisited_includes_start()
    test_nearest_unvisited_reaches_unknown_territory()
    test_empty_path_result()
    print("\n✓ All grid tests passed!")
