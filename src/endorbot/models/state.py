"""Value types shared by the vision, navigation and decision layers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class MoveDirection(str, Enum):
    """One step on the 4-connected dungeon grid."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


@dataclass(frozen=True, order=True)
class Coords:
    """Absolute position on the dungeon grid (never negative)."""

    x: int
    y: int

    def moved(self, direction: MoveDirection) -> "Coords":
        """Return the neighbouring coordinate in ``direction``, clamped at 0."""
        if direction == MoveDirection.NORTH:
            return Coords(self.x, max(0, self.y - 1))
        if direction == MoveDirection.EAST:
            return Coords(self.x + 1, self.y)
        if direction == MoveDirection.SOUTH:
            return Coords(self.x, self.y + 1)
        return Coords(max(0, self.x - 1), self.y)

    def manhattan(self, other: "Coords") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}

    @staticmethod
    def from_dict(raw: Optional[Dict[str, Any]]) -> Optional["Coords"]:
        if raw is None:
            return None
        return Coords(int(raw["x"]), int(raw["y"]))


class Health(str, Enum):
    UNKNOWN = "unknown"
    DEAD = "dead"
    LOW = "low"
    HURT = "hurt"
    HEALTHY = "healthy"


@dataclass
class Character:
    """One party member as read from the health bars."""

    health: Health = Health.UNKNOWN

    def is_dead(self) -> bool:
        return self.health == Health.DEAD

    def is_low(self) -> bool:
        return self.health == Health.LOW


@dataclass
class Enemy:
    health: Health = Health.UNKNOWN


PARTY_SIZE = 4


def empty_party() -> List[Character]:
    return [Character() for _ in range(PARTY_SIZE)]


@dataclass
class DungeonInfo:
    """Floor label and player coordinates read from the on-screen readout."""

    floor: str = ""
    coordinates: Optional[Coords] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "floor": self.floor,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "DungeonInfo":
        return DungeonInfo(
            floor=raw.get("floor", ""),
            coordinates=Coords.from_dict(raw.get("coordinates")),
        )


@dataclass
class Tile:
    """
    One cell of the dungeon map.

    Passability flags describe this tile's own four edges as sampled from
    the screen. A neighbour may disagree about the shared edge.
    """

    position: Coords
    explored: bool = False
    visited: bool = False
    is_city: bool = False
    is_go_down: bool = False
    trap: bool = False
    north_passable: bool = True
    east_passable: bool = True
    south_passable: bool = True
    west_passable: bool = True

    @staticmethod
    def open(position: Coords) -> "Tile":
        """Never-sampled tile: unexplored with every edge open."""
        return Tile(position=position)

    def passable(self, direction: MoveDirection) -> bool:
        if direction == MoveDirection.NORTH:
            return self.north_passable
        if direction == MoveDirection.EAST:
            return self.east_passable
        if direction == MoveDirection.SOUTH:
            return self.south_passable
        return self.west_passable

    def direction_from(self, other: "Tile") -> MoveDirection:
        """Direction to move from ``other`` to reach this tile."""
        if self.position.x == other.position.x:
            if self.position.y > other.position.y:
                return MoveDirection.SOUTH
            return MoveDirection.NORTH
        if self.position.x < other.position.x:
            return MoveDirection.WEST
        return MoveDirection.EAST

    def copy(self) -> "Tile":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "explored": self.explored,
            "visited": self.visited,
            "is_city": self.is_city,
            "is_go_down": self.is_go_down,
            "trap": self.trap,
            "north_passable": self.north_passable,
            "east_passable": self.east_passable,
            "south_passable": self.south_passable,
            "west_passable": self.west_passable,
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Tile":
        data = dict(raw)
        data["position"] = Coords.from_dict(data["position"])
        return Tile(**data)


class RunStateKind(str, Enum):
    IDLE = "idle"
    IDLE_CHEST = "idle_chest"
    FIGHT = "fight"


@dataclass
class DungeonRunState:
    """What the party is doing inside the dungeon."""

    kind: RunStateKind = RunStateKind.IDLE
    on_city_tile: bool = False
    enemy: Optional[Enemy] = None

    @staticmethod
    def idle(on_city_tile: bool = False) -> "DungeonRunState":
        return DungeonRunState(RunStateKind.IDLE, on_city_tile=on_city_tile)

    @staticmethod
    def idle_chest() -> "DungeonRunState":
        return DungeonRunState(RunStateKind.IDLE_CHEST)

    @staticmethod
    def fight(enemy: Enemy) -> "DungeonRunState":
        return DungeonRunState(RunStateKind.FIGHT, enemy=enemy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "on_city_tile": self.on_city_tile,
            "enemy": self.enemy.health.value if self.enemy else None,
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "DungeonRunState":
        enemy = raw.get("enemy")
        return DungeonRunState(
            kind=RunStateKind(raw.get("kind", RunStateKind.IDLE)),
            on_city_tile=raw.get("on_city_tile", False),
            enemy=Enemy(Health(enemy)) if enemy else None,
        )

