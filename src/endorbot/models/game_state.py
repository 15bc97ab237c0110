"""Top-level game state and the actions the planner can choose."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from endorbot.models.dungeon import Dungeon
from endorbot.models.state import Coords, MoveDirection, Tile


class StateType(str, Enum):
    """Which screen the game is showing."""

    AD = "ad"
    MAIN = "main"
    CITY = "city"
    DUNGEON = "dungeon"
    TELEPORT_PROMPT = "teleport_prompt"


@dataclass
class GameState:
    """
    Classified game state for one tick.

    ``dungeon`` is always present: outside the dungeon it holds what the
    previous ticks learned so the map and position survive overlays.
    ``has_dead`` is the payload of the city screen.
    """

    state_type: StateType = StateType.MAIN
    dungeon: Dungeon = field(default_factory=Dungeon)
    has_dead: bool = False

    @property
    def position(self) -> Optional[Coords]:
        return self.dungeon.position

    def set_position(self, position: Coords) -> None:
        self.dungeon.set_position(position)

    def merge(self, previous: "GameState") -> "GameState":
        self.dungeon.merge(previous.dungeon)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state_type": self.state_type.value,
            "has_dead": self.has_dead,
            "dungeon": self.dungeon.to_dict(),
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "GameState":
        return GameState(
            state_type=StateType(raw.get("state_type", StateType.MAIN)),
            dungeon=Dungeon.from_dict(raw.get("dungeon", {})),
            has_dead=raw.get("has_dead", False),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @staticmethod
    def from_json(data: str) -> "GameState":
        raw = json.loads(data)
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")
        return GameState.from_dict(raw)


class ActionType(str, Enum):
    CLOSE_AD = "close_ad"
    GOTO_TOWN = "goto_town"
    GOTO_DUNGEON = "goto_dungeon"
    GO_DOWN = "go_down"
    CANCEL_TELEPORT = "cancel_teleport"
    CONFIRM_TELEPORT = "confirm_teleport"
    FIND_FIGHT = "find_fight"
    FIGHT = "fight"
    OPEN_CHEST = "open_chest"
    RETURN_TO_TOWN = "return_to_town"
    RESURRECT = "resurrect"


@dataclass(frozen=True)
class Action:
    """
    One atomic intent.

    ``direction`` is set for FIND_FIGHT and RETURN_TO_TOWN; ``target`` and
    ``ticks_same_target`` carry the exploration target of FIND_FIGHT;
    ``on_city_tile`` belongs to RETURN_TO_TOWN.
    """

    action_type: ActionType
    direction: Optional[MoveDirection] = None
    target: Optional[Tile] = None
    ticks_same_target: int = 0
    on_city_tile: bool = False

    @staticmethod
    def close_ad() -> "Action":
        return Action(ActionType.CLOSE_AD)

    @staticmethod
    def goto_town() -> "Action":
        return Action(ActionType.GOTO_TOWN)

    @staticmethod
    def goto_dungeon() -> "Action":
        return Action(ActionType.GOTO_DUNGEON)

    @staticmethod
    def go_down() -> "Action":
        return Action(ActionType.GO_DOWN)

    @staticmethod
    def cancel_teleport() -> "Action":
        return Action(ActionType.CANCEL_TELEPORT)

    @staticmethod
    def confirm_teleport() -> "Action":
        return Action(ActionType.CONFIRM_TELEPORT)

    @staticmethod
    def find_fight(direction: MoveDirection, target: Tile, ticks_same_target: int) -> "Action":
        return Action(
            ActionType.FIND_FIGHT,
            direction=direction,
            target=target,
            ticks_same_target=ticks_same_target,
        )

    @staticmethod
    def fight() -> "Action":
        return Action(ActionType.FIGHT)

    @staticmethod
    def open_chest() -> "Action":
        return Action(ActionType.OPEN_CHEST)

    @staticmethod
    def return_to_town(on_city_tile: bool, direction: MoveDirection) -> "Action":
        return Action(ActionType.RETURN_TO_TOWN, direction=direction, on_city_tile=on_city_tile)

    @staticmethod
    def resurrect() -> "Action":
        return Action(ActionType.RESURRECT)

    def is_movement(self) -> bool:
        """True when executing this action moves the party one tile."""
        if self.action_type == ActionType.FIND_FIGHT:
            return True
        return self.action_type == ActionType.RETURN_TO_TOWN and not self.on_city_tile

    def describe(self) -> str:
        if self.action_type == ActionType.FIND_FIGHT:
            target = self.target.position if self.target else None
            return (
                f"find_fight {self.direction.value} -> "
                f"({target.x},{target.y}) x{self.ticks_same_target}"
                if target
                else f"find_fight {self.direction.value}"
            )
        if self.action_type == ActionType.RETURN_TO_TOWN:
            if self.on_city_tile:
                return "return_to_town (on city tile)"
            return f"return_to_town {self.direction.value}"
        return self.action_type.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "direction": self.direction.value if self.direction else None,
            "target": self.target.to_dict() if self.target else None,
            "ticks_same_target": self.ticks_same_target,
            "on_city_tile": self.on_city_tile,
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Action":
        direction = raw.get("direction")
        target = raw.get("target")
        return Action(
            action_type=ActionType(raw["action_type"]),
            direction=MoveDirection(direction) if direction else None,
            target=Tile.from_dict(target) if target else None,
            ticks_same_target=raw.get("ticks_same_target", 0),
            on_city_tile=raw.get("on_city_tile", False),
        )
