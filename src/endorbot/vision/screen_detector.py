"""Screen/state classification for the dungeon crawler.

Detects which screen the game is currently showing from a PixelSample:
- Ad overlay
- Teleport prompt
- Dungeon (chest, fight, idle)
- City
- Main (title) screen

Probes are checked in a fixed order and the first match wins; several
screens share pixels, so overlays are tested before what they cover.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from endorbot.core.errors import UnknownStateError
from endorbot.models.dungeon import Dungeon
from endorbot.models.game_state import GameState, StateType
from endorbot.models.state import DungeonInfo, DungeonRunState
from endorbot.vision.health_reader import read_characters, read_enemy
from endorbot.vision.pixel_sample import PixelSample
from endorbot.vision.screen_points import SCREEN_PROBES
from endorbot.vision.tile_reader import dungeon_from_sample


def is_ad(sample: PixelSample) -> bool:
    return SCREEN_PROBES['ad_close_button'].matches(sample)


def is_teleport_prompt(sample: PixelSample) -> bool:
    return SCREEN_PROBES['teleport_prompt'].matches(sample)


def is_chest(sample: PixelSample) -> bool:
    return (
        SCREEN_PROBES['chest_banner'].matches(sample)
        and SCREEN_PROBES['chest_buttons'].matches(sample)
    )


def is_fight(sample: PixelSample) -> bool:
    # The coordinate readout is hidden while a fight is on screen.
    return (
        sample.coordinates is None
        and SCREEN_PROBES['fight_button'].matches_any(sample)
        and not SCREEN_PROBES['action_button'].matches(sample)
    )


def is_idle(sample: PixelSample) -> bool:
    return SCREEN_PROBES['idle_menu'].matches(sample)


def is_on_city_tile(sample: PixelSample) -> bool:
    return (
        SCREEN_PROBES['city_tile_button'].matches(sample)
        and not SCREEN_PROBES['dungeon_exit_buttons'].matches(sample)
    )


def is_city(sample: PixelSample) -> bool:
    return (
        SCREEN_PROBES['city_background_bottom'].matches(sample)
        and SCREEN_PROBES['city_background_side'].matches(sample)
    )


def is_main(sample: PixelSample) -> bool:
    return SCREEN_PROBES['main_title'].matches(sample)


def _carried_dungeon(sample: PixelSample, previous: GameState) -> Dungeon:
    """Dungeon model for screens that do not show the map."""
    old = previous.dungeon
    if sample.coordinates is not None:
        info = DungeonInfo(sample.floor, sample.coordinates)
    else:
        info = DungeonInfo(old.info.floor, old.info.coordinates)
    dungeon = Dungeon(
        run_state=DungeonRunState(old.run_state.kind, old.run_state.on_city_tile, old.run_state.enemy),
        characters=read_characters(sample, old.characters),
        info=info,
    )
    return dungeon.merge(old)


def _dungeon_state(
    run_state: DungeonRunState, sample: PixelSample, previous: GameState
) -> GameState:
    dungeon = dungeon_from_sample(run_state, sample, previous.position, previous.dungeon)
    return GameState(StateType.DUNGEON, dungeon.merge(previous.dungeon))


class ScreenDetector:
    """Classifies samples into game states."""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.rules: List[Tuple[str, Callable[[PixelSample], bool]]] = [
            ('ad', is_ad),
            ('teleport_prompt', is_teleport_prompt),
            ('dungeon_chest', is_chest),
            ('dungeon_fight', is_fight),
            ('dungeon_idle', is_idle),
            ('city', is_city),
            ('main', is_main),
        ]

    def match(self, sample: PixelSample) -> Optional[str]:
        """Name of the first rule matching the sample."""
        for name, predicate in self.rules:
            if predicate(sample):
                return name
        return None

    def classify(self, sample: PixelSample, previous: GameState) -> GameState:
        """
        Turn a sample into a GameState merged with ``previous``.

        Raises:
            UnknownStateError: no rule matched; the caller keeps ``previous``.
        """
        name = self.match(sample)
        if self.debug:
            print(f"[SCREEN] Matched: {name}")

        if name is None:
            raise UnknownStateError()
        if name == 'dungeon_chest':
            return _dungeon_state(DungeonRunState.idle_chest(), sample, previous)
        if name == 'dungeon_fight':
            return _dungeon_state(DungeonRunState.fight(read_enemy(sample)), sample, previous)
        if name == 'dungeon_idle':
            return _dungeon_state(DungeonRunState.idle(is_on_city_tile(sample)), sample, previous)

        state_type = {
            'ad': StateType.AD,
            'teleport_prompt': StateType.TELEPORT_PROMPT,
            'city': StateType.CITY,
            'main': StateType.MAIN,
        }[name]
        has_dead = sample.has_dead_characters if state_type == StateType.CITY else False
        return GameState(state_type, _carried_dungeon(sample, previous), has_dead=has_dead)


def classify(sample: PixelSample, previous: GameState) -> GameState:
    """Classify ``sample`` with the default rule order."""
    return ScreenDetector().classify(sample, previous)
