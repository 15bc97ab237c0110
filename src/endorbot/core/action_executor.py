"""Action executor for bot - turns planner actions into device taps."""

from __future__ import annotations

from typing import Optional

from endorbot.core.interfaces import InputDevice
from endorbot.models.game_state import Action, ActionType, GameState
from endorbot.models.state import Coords
from endorbot.vision.screen_points import MOVE_TARGETS, TAP_TARGETS

# Actions answered with a single fixed tap.
_FIXED_TAPS = {
    ActionType.CLOSE_AD: 'close_ad',
    ActionType.GOTO_DUNGEON: 'goto_dungeon',
    ActionType.CANCEL_TELEPORT: 'cancel_teleport',
    ActionType.CONFIRM_TELEPORT: 'confirm_teleport',
    ActionType.GO_DOWN: 'go_down',
    ActionType.FIGHT: 'fight',
    ActionType.OPEN_CHEST: 'open_chest',
}


class ActionExecutor:
    """Executes bot actions on the device.

    Every action costs at most one tap and nothing is confirmed; the next
    screenshot shows whether it worked. Movement returns the position the
    party should be on afterwards so the caller can keep tracking it when
    the coordinate readout fails.
    """

    def __init__(self, device: InputDevice, debug: bool = False):
        """Initialize action executor.

        Args:
            device: Input device receiving the taps
            debug: Enable debug logging
        """
        self.device = device
        self.debug = debug
        self.tap_count = 0

    def _tap(self, point) -> None:
        x, y = point
        self.device.tap(x, y)
        self.tap_count += 1

    def execute(self, action: Action, state: GameState) -> Optional[Coords]:
        """Execute ``action`` and apply its side effects to ``state``.

        Returns:
            Predicted player position after a movement, else None
        """
        if self.debug:
            print(f"[ACTION] {action.describe()}")

        if action.action_type == ActionType.GOTO_DUNGEON:
            # Visited flags belong to the previous run.
            state.dungeon.clear_visited()
        elif action.action_type == ActionType.GO_DOWN:
            state.dungeon.clear_tiles()

        name = _FIXED_TAPS.get(action.action_type)
        if name is not None:
            self._tap(TAP_TARGETS[name])
            return None

        if action.action_type == ActionType.RETURN_TO_TOWN and action.on_city_tile:
            self._tap(TAP_TARGETS['enter_city'])
            return None

        if action.is_movement():
            self._tap(MOVE_TARGETS[action.direction.value])
            if state.position is None:
                return None
            return state.position.moved(action.direction)

        # GOTO_TOWN and RESURRECT need no tap.
        return None
