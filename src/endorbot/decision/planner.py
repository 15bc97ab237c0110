"""Rule-based action selection from the classified game state."""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from endorbot.models.dungeon import DIRECTIONS, Dungeon
from endorbot.models.game_state import Action, ActionType, GameState, StateType
from endorbot.models.state import Coords, MoveDirection, RunStateKind, Tile
from endorbot.navigation.grid import GridPathfinder, direction_to


@dataclass
class PlannerPolicy:
    """Tunable behaviour of the planner."""

    # Leave a fight for the city when a party member is low (dead always does).
    retreat_on_low_health: bool = False
    # Ticks spent walking towards one exploration target before giving up on it.
    max_ticks_same_target: int = 30


class Heading(str, Enum):
    """What a random step should favour."""

    UNEXPLORED = "unexplored"
    CITY = "city"


def random_neighbour(
    dungeon: Dungeon,
    heading: Heading,
    avoid: Optional[Coords] = None,
    rng: Optional[random.Random] = None,
) -> Tile:
    """
    Pick a neighbouring tile to step onto when no path is known.

    Exploration never steps onto the city or stairs tiles by accident; a
    city-bound step takes the city tile when it is adjacent. ``avoid`` (the
    tile just left) is dropped while other candidates remain.
    """
    rng = rng or random.Random()
    current = dungeon.current_tile()
    candidates = [tile for _, tile in dungeon.passable_neighbours(current)]
    if heading == Heading.UNEXPLORED:
        candidates = [t for t in candidates if not t.is_city and not t.is_go_down]

    if not candidates:
        # Walled in on every side; the wall reading is probably wrong.
        candidates = [
            tile for tile in (dungeon.neighbour(current, d) for d in DIRECTIONS)
            if tile is not None
        ]

    if len(candidates) > 1 and avoid is not None:
        candidates = [t for t in candidates if t.position != avoid] or candidates

    if len(candidates) > 1:
        if heading == Heading.CITY:
            city = [t for t in candidates if t.is_city]
            if city:
                candidates = city
        else:
            unexplored = [t for t in candidates if dungeon.has_unexplored_neighbour(t)]
            if unexplored:
                candidates = unexplored

    return rng.choice(candidates)


def pick_exploration_target(
    dungeon: Dungeon,
    last_known_position: Optional[Coords] = None,
    rng: Optional[random.Random] = None,
) -> Tile:
    """
    Choose a new exploration target.

    Tried in order: nearest unvisited tile, an unexplored direct neighbour
    (west, east, north, south), any known tile on the edge of the explored
    area, and finally a random neighbour.
    """
    rng = rng or random.Random()
    me = dungeon.current_tile()

    tile = GridPathfinder(dungeon).nearest_unvisited(me)
    if tile is not None:
        return tile

    for direction in (MoveDirection.WEST, MoveDirection.EAST, MoveDirection.NORTH, MoveDirection.SOUTH):
        if not me.passable(direction):
            continue
        other = dungeon.neighbour(me, direction)
        if other is not None and not other.explored:
            return other

    frontier = [t for t in dungeon if dungeon.has_unexplored_neighbour(t)]
    if frontier:
        return rng.choice(frontier)

    return random_neighbour(dungeon, Heading.UNEXPLORED, last_known_position, rng)


class Planner:
    """
    Maps a GameState plus the previous action to the next Action.

    Holds no state between calls; everything it remembers travels in
    ``last_action`` (the exploration target and its tick counter).
    """

    def __init__(self,
                 policy: Optional[PlannerPolicy] = None,
                 rng: Optional[random.Random] = None,
                 debug: bool = False):
        self.policy = policy or PlannerPolicy()
        self.rng = rng or random.Random()
        self.debug = debug

    def _log(self, message: str) -> None:
        if self.debug:
            print(f"[PLANNER] {message}")

    def determine_action(self,
                         state: GameState,
                         last_action: Optional[Action],
                         last_known_position: Optional[Coords]) -> Action:
        if state.state_type == StateType.AD:
            return Action.close_ad()
        if state.state_type == StateType.TELEPORT_PROMPT:
            if state.dungeon.has_dead_character():
                return Action.confirm_teleport()
            return Action.cancel_teleport()
        if state.state_type == StateType.MAIN:
            return Action.goto_town()
        if state.state_type == StateType.CITY:
            if state.has_dead:
                return Action.resurrect()
            return Action.goto_dungeon()
        return self._dungeon_action(state.dungeon, last_action, last_known_position)

    def _dungeon_action(self,
                        dungeon: Dungeon,
                        last_action: Optional[Action],
                        last_known_position: Optional[Coords]) -> Action:
        run_state = dungeon.run_state
        if run_state.kind == RunStateKind.IDLE_CHEST:
            return Action.open_chest()

        if run_state.kind == RunStateKind.FIGHT:
            retreat = dungeon.has_dead_character() or (
                self.policy.retreat_on_low_health and dungeon.has_low_character()
            )
            if retreat:
                return self._return_to_city(dungeon, last_known_position)
            return Action.fight()

        if dungeon.has_dead_character():
            if run_state.on_city_tile:
                return Action.return_to_town(True, MoveDirection.EAST)
            return self._return_to_city(dungeon, last_known_position)

        return self._explore(dungeon, last_action, last_known_position)

    def _return_to_city(self, dungeon: Dungeon, last_known_position: Optional[Coords]) -> Action:
        current = dungeon.current_tile()
        city = dungeon.city_tile()
        if city is None:
            self._log(f"City tile unknown from {current.position}")
        else:
            next_tile = GridPathfinder(dungeon).shortest_path(current, city)
            if next_tile is not None:
                self._log(f"Heading to city {city.position} via {next_tile.position}")
                return Action.return_to_town(False, direction_to(current, next_tile))
            self._log(f"No path to city tile {city.position}")

        tile = random_neighbour(dungeon, Heading.CITY, last_known_position, self.rng)
        return Action.return_to_town(False, direction_to(current, tile))

    def _explore(self,
                 dungeon: Dungeon,
                 last_action: Optional[Action],
                 last_known_position: Optional[Coords]) -> Action:
        current = dungeon.current_tile()
        go_down = dungeon.go_down_tile()
        if go_down is not None and go_down.position == current.position:
            return Action.go_down()

        if (
            last_action is not None
            and last_action.action_type == ActionType.FIND_FIGHT
            and last_action.target is not None
            and last_action.target.position != current.position
        ):
            target, ticks = last_action.target, last_action.ticks_same_target + 1
            self._log(f"Keeping target {target.position} ({ticks} ticks)")
        else:
            target, ticks = self._new_target(dungeon, last_known_position), 1

        if ticks > self.policy.max_ticks_same_target:
            self._log(f"Gave up on {target.position} after {ticks - 1} ticks")
            target, ticks = self._new_target(dungeon, last_known_position), 1

        if go_down is not None and go_down.position != target.position:
            target, ticks = go_down, 1

        next_tile = GridPathfinder(dungeon).shortest_path(current, target)
        if next_tile is None:
            self._log(f"No path to {target.position}")
            tile = random_neighbour(dungeon, Heading.UNEXPLORED, last_known_position, self.rng)
            return Action.find_fight(direction_to(current, tile), tile, 0)

        return Action.find_fight(direction_to(current, next_tile), target, ticks)

    def _new_target(self, dungeon: Dungeon, last_known_position: Optional[Coords]) -> Tile:
        target = pick_exploration_target(dungeon, last_known_position, self.rng)
        self._log(f"New exploration target {target.position}")
        return target


def determine_action(state: GameState,
                     last_action: Optional[Action],
                     last_known_position: Optional[Coords],
                     policy: Optional[PlannerPolicy] = None,
                     rng: Optional[random.Random] = None) -> Action:
    """Pure entry point: same inputs and seed give the same action."""
    return Planner(policy=policy, rng=rng).determine_action(state, last_action, last_known_position)
