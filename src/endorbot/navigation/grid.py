"""Grid pathfinding over the dungeon tile map."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import heapq

from endorbot.models.dungeon import Dungeon
from endorbot.models.state import Coords, MoveDirection, Tile

# Largest grid coordinate on either axis a goal path may step onto.
PLAYFIELD_BOUND = 29


@dataclass
class PathResult:
    path: List[Coords] = field(default_factory=list)  # start ... goal
    cost: float = float('inf')
    success: bool = False

    @property
    def next_step(self) -> Optional[Coords]:
        if not self.success:
            return None
        if len(self.path) == 1:
            return self.path[0]
        return self.path[1]

    @property
    def goal(self) -> Optional[Coords]:
        return self.path[-1] if self.success else None


class GridPathfinder:
    """
    A* over the 4-connected dungeon grid, edge cost 1.

    A step is allowed when the tile being left is passable on that edge.
    Tiles never seen are treated as fully open (``Dungeon.tile_at``), so
    paths through unknown territory are optimistic and get re-planned as
    the map fills in.
    """

    def __init__(self, dungeon: Dungeon, bound: int = PLAYFIELD_BOUND):
        self.dungeon = dungeon
        self.bound = bound

    @staticmethod
    def heuristic(a: Coords, b: Coords) -> float:
        return a.manhattan(b)

    def neighbors(self, pos: Coords, bounded: bool) -> List[Coords]:
        tile = self.dungeon.tile_at(pos)
        res = []
        if tile.north_passable and pos.y > 0:
            res.append(Coords(pos.x, pos.y - 1))
        if tile.east_passable and (not bounded or pos.x < self.bound):
            res.append(Coords(pos.x + 1, pos.y))
        if tile.south_passable and (not bounded or pos.y < self.bound):
            res.append(Coords(pos.x, pos.y + 1))
        if tile.west_passable and pos.x > 0:
            res.append(Coords(pos.x - 1, pos.y))
        return res

    def _search(
        self,
        start: Coords,
        is_goal: Callable[[Coords], bool],
        heuristic: Callable[[Coords], float],
        bounded: bool,
    ) -> PathResult:
        open_set: List[Tuple[float, Coords]] = []
        heapq.heappush(open_set, (heuristic(start), start))

        came_from: Dict[Coords, Optional[Coords]] = {start: None}
        g_score: Dict[Coords, float] = {start: 0}
        closed = set()

        while open_set:
            _, current = heapq.heappop(open_set)
            if current in closed:
                continue
            if is_goal(current):
                path = self._reconstruct(came_from, current)
                return PathResult(path=path, cost=g_score[current], success=True)
            closed.add(current)

            for neighbor in self.neighbors(current, bounded):
                tentative_g = g_score[current] + 1
                if tentative_g < g_score.get(neighbor, float('inf')):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative_g
                    heapq.heappush(open_set, (tentative_g + heuristic(neighbor), neighbor))

        return PathResult()

    def plan(self, start: Coords, goal: Coords) -> PathResult:
        """Full shortest path from ``start`` to ``goal`` inside the playfield."""
        return self._search(
            start,
            lambda pos: pos == goal,
            lambda pos: self.heuristic(pos, goal),
            bounded=True,
        )

    def shortest_path(self, start: Tile, goal: Tile) -> Optional[Tile]:
        """Next tile to step onto towards ``goal``; ``start`` itself when already there."""
        if start.position == goal.position:
            return start
        step = self.plan(start.position, goal.position).next_step
        if step is None:
            return None
        return self.dungeon.tile_at(step)

    def nearest_unvisited(self, start: Tile) -> Optional[Tile]:
        """Closest reachable tile the player has not stood on."""
        result = self._search(
            start.position,
            lambda pos: not self.dungeon.tile_at(pos).visited,
            lambda pos: 0,
            bounded=False,
        )
        if not result.success:
            return None
        return self.dungeon.tile_at(result.goal)

    @staticmethod
    def _reconstruct(came_from: Dict[Coords, Optional[Coords]],
                     current: Coords) -> List[Coords]:
        path = [current]
        while came_from[current] is not None:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return path


def direction_to(current: Tile, target: Tile) -> MoveDirection:
    return target.direction_from(current)
