from .state import (
    Character,
    Coords,
    DungeonInfo,
    DungeonRunState,
    Enemy,
    Health,
    MoveDirection,
    RunStateKind,
    Tile,
    PARTY_SIZE,
)
from .dungeon import Dungeon
from .game_state import Action, ActionType, GameState, StateType

__all__ = [
	"Action",
	"ActionType",
	"Character",
	"Coords",
	"Dungeon",
	"DungeonInfo",
	"DungeonRunState",
	"Enemy",
	"GameState",
	"Health",
	"MoveDirection",
	"PARTY_SIZE",
	"RunStateKind",
	"StateType",
	"Tile",
]
"""Models module."""
