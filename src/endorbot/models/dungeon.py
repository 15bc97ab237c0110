"""Incrementally built map of the current dungeon floor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from endorbot.core.errors import UnknownPositionError
from endorbot.models.state import (
    Character,
    Coords,
    DungeonInfo,
    DungeonRunState,
    Health,
    MoveDirection,
    Tile,
    empty_party,
)

# Neighbour scan order used wherever all four edges are visited.
DIRECTIONS = (
    MoveDirection.NORTH,
    MoveDirection.EAST,
    MoveDirection.SOUTH,
    MoveDirection.WEST,
)


@dataclass
class Dungeon:
    """
    Grid model of the dungeon floor the party is on.

    Tiles are keyed by absolute grid position. Only tiles inside the
    on-screen window are refreshed each tick; ``merge`` folds in what the
    previous tick knew about everything else.
    """

    run_state: DungeonRunState = field(default_factory=DungeonRunState.idle)
    characters: List[Character] = field(default_factory=empty_party)
    info: DungeonInfo = field(default_factory=DungeonInfo)
    tiles: Dict[Coords, Tile] = field(default_factory=dict)

    @property
    def position(self) -> Optional[Coords]:
        return self.info.coordinates

    def set_position(self, position: Coords) -> None:
        self.info.coordinates = position

    def has_dead_character(self) -> bool:
        return any(c.is_dead() for c in self.characters)

    def has_low_character(self) -> bool:
        return any(c.is_low() for c in self.characters)

    def add_tile(self, tile: Tile) -> None:
        self.tiles[tile.position] = tile

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles.values())

    def tile_at(self, position: Coords) -> Tile:
        """Known tile at ``position`` or an open, unexplored placeholder."""
        tile = self.tiles.get(position)
        if tile is None:
            return Tile.open(position)
        return tile

    def current_tile(self) -> Tile:
        if self.position is None:
            raise UnknownPositionError("Player position is unknown")
        return self.tile_at(self.position)

    def city_tile(self) -> Optional[Tile]:
        for tile in self.tiles.values():
            if tile.is_city:
                return tile
        return None

    def go_down_tile(self) -> Optional[Tile]:
        for tile in self.tiles.values():
            if tile.is_go_down:
                return tile
        return None

    def mark_visited(self, position: Coords) -> None:
        tile = self.tiles.get(position)
        if tile is not None:
            tile.visited = True

    def clear_visited(self) -> None:
        for tile in self.tiles.values():
            tile.visited = False

    def clear_tiles(self) -> None:
        self.tiles = {}

    def neighbour(self, tile: Tile, direction: MoveDirection) -> Optional[Tile]:
        """Tile across ``direction``, or None past the grid origin."""
        if direction == MoveDirection.NORTH and tile.position.y == 0:
            return None
        if direction == MoveDirection.WEST and tile.position.x == 0:
            return None
        return self.tile_at(tile.position.moved(direction))

    def passable_neighbours(self, tile: Tile) -> List[Tuple[MoveDirection, Tile]]:
        result = []
        for direction in DIRECTIONS:
            if not tile.passable(direction):
                continue
            other = self.neighbour(tile, direction)
            if other is not None:
                result.append((direction, other))
        return result

    def has_unexplored_neighbour(self, tile: Tile) -> bool:
        return any(not other.explored for _, other in self.passable_neighbours(tile))

    def merge(self, previous: "Dungeon") -> "Dungeon":
        """
        Fold the previous tick's tiles into this freshly sampled map.

        Visited flags accumulate. City and stairs-down markers are only
        carried over while this map has not detected its own, so a
        confirmed marker replaces a stale one.
        """
        has_city = self.city_tile() is not None
        has_go_down = self.go_down_tile() is not None
        for old in previous.tiles.values():
            tile = self.tiles.get(old.position)
            if tile is not None:
                if not has_city:
                    tile.is_city = tile.is_city or old.is_city
                if not has_go_down:
                    tile.is_go_down = tile.is_go_down or old.is_go_down
                tile.visited = tile.visited or old.visited
            else:
                carried = old.copy()
                if has_city:
                    carried.is_city = False
                if has_go_down:
                    carried.is_go_down = False
                self.tiles[carried.position] = carried
        return self

    def copy(self) -> "Dungeon":
        return Dungeon(
            run_state=DungeonRunState(
                self.run_state.kind, self.run_state.on_city_tile, self.run_state.enemy
            ),
            characters=[Character(c.health) for c in self.characters],
            info=DungeonInfo(self.info.floor, self.info.coordinates),
            tiles={pos: tile.copy() for pos, tile in self.tiles.items()},
        )

    def render_ascii(self) -> str:
        """Plain-text map of known tiles for the status view."""
        if not self.tiles:
            return "(no tiles)"
        xs = [p.x for p in self.tiles]
        ys = [p.y for p in self.tiles]
        lines = []
        for y in range(min(ys), max(ys) + 1):
            row = []
            for x in range(min(xs), max(xs) + 1):
                pos = Coords(x, y)
                tile = self.tiles.get(pos)
                if pos == self.position:
                    row.append("@")
                elif tile is None:
                    row.append(" ")
                elif tile.is_city:
                    row.append("C")
                elif tile.is_go_down:
                    row.append("v")
                elif tile.visited:
                    row.append(".")
                else:
                    row.append("o")
            lines.append("".join(row).rstrip())
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.run_state.to_dict(),
            "characters": [c.health.value for c in self.characters],
            "info": self.info.to_dict(),
            "tiles": [tile.to_dict() for tile in self.tiles.values()],
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Dungeon":
        dungeon = Dungeon(
            run_state=DungeonRunState.from_dict(raw.get("state", {})),
            characters=[Character(Health(h)) for h in raw.get("characters", [])]
            or empty_party(),
            info=DungeonInfo.from_dict(raw.get("info", {})),
        )
        for tile_raw in raw.get("tiles", []):
            dungeon.add_tile(Tile.from_dict(tile_raw))
        return dungeon
