"""Tests for screen classification on painted frames."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from endorbot.core.errors import UnknownStateError
from endorbot.models.dungeon import Dungeon
from endorbot.models.game_state import GameState, StateType
from endorbot.models.state import Character, Coords, DungeonInfo, Health, RunStateKind, Tile
from endorbot.vision import screen_points as sp
from endorbot.vision.screen_detector import ScreenDetector, classify

from screens import (
    blank_frame,
    idle_dungeon_frame,
    open_area,
    paint,
    paint_map,
    paint_party,
    paint_probe,
    sample_frame,
)

PLAYER = Coords(5, 5)


def previous_state():
    """State from an earlier tick: a city tile and a visited tile off screen."""
    dungeon = Dungeon(
        characters=[Character(Health.HEALTHY) for _ in range(4)],
        info=DungeonInfo("D2", Coords(20, 20)),
    )
    dungeon.add_tile(Tile(Coords(20, 20), explored=True, visited=True))
    dungeon.add_tile(Tile(Coords(21, 20), explored=True, is_city=True))
    return GameState(StateType.DUNGEON, dungeon)


def test_blank_frame_is_unknown():
    with pytest.raises(UnknownStateError):
        classify(sample_frame(blank_frame()), GameState())
    print("✓ Unknown screen test passed")


def test_ad_wins_over_everything():
    """The ad overlay is recognised even on top of another screen."""
    frame = idle_dungeon_frame(PLAYER, open_area(PLAYER))
    paint_probe(frame, 'ad_close_button')
    state = classify(sample_frame(frame, PLAYER), previous_state())

    assert state.state_type == StateType.AD
    assert state.position == PLAYER
    assert state.dungeon.tiles[Coords(21, 20)].is_city
    print("✓ Ad detection test passed")


def test_teleport_prompt():
    frame = blank_frame()
    paint_probe(frame, 'teleport_prompt')
    state = classify(sample_frame(frame), previous_state())

    assert state.state_type == StateType.TELEPORT_PROMPT
    assert state.position == Coords(20, 20)
    assert state.dungeon.info.floor == "D2"
    print("✓ Teleport prompt test passed")


def test_idle_dungeon_merges_previous_map():
    frame = idle_dungeon_frame(PLAYER, open_area(PLAYER, radius=1))
    state = classify(sample_frame(frame, PLAYER), previous_state())

    assert state.state_type == StateType.DUNGEON
    dungeon = state.dungeon
    assert dungeon.run_state.kind == RunStateKind.IDLE
    assert not dungeon.run_state.on_city_tile
    assert dungeon.position == PLAYER
    assert dungeon.tiles[PLAYER].visited
    assert dungeon.tiles[Coords(20, 20)].visited
    assert dungeon.city_tile().position == Coords(21, 20)
    assert len(dungeon.tiles) == 11
    print("✓ Idle dungeon test passed")


def test_idle_on_city_tile():
    frame = idle_dungeon_frame(PLAYER, open_area(PLAYER, radius=1))
    paint_probe(frame, 'city_tile_button')
    state = ScreenDetector().classify(sample_frame(frame, PLAYER), GameState())
    assert state.dungeon.run_state.on_city_tile

    paint_probe(frame, 'dungeon_exit_buttons')
    state = ScreenDetector().classify(sample_frame(frame, PLAYER), GameState())
    assert not state.dungeon.run_state.on_city_tile
    print("✓ City tile button test passed")


def test_chest():
    frame = idle_dungeon_frame(PLAYER, {})
    paint_probe(frame, 'chest_banner')
    paint_probe(frame, 'chest_buttons')
    state = classify(sample_frame(frame, PLAYER), GameState())

    assert state.state_type == StateType.DUNGEON
    assert state.dungeon.run_state.kind == RunStateKind.IDLE_CHEST
    print("✓ Chest test passed")


def test_fight_reads_enemy_and_keeps_position():
    """The readout is hidden during a fight; the last position is used."""
    frame = blank_frame()
    paint(frame, (827, 1306), sp.FIGHT_PRESSED)
    paint(frame, (sp.ENEMY_BAR_HURT_X, sp.ENEMY_BAR_Y), sp.HEALTH_RED)
    paint_party(frame, [Health.HEALTHY] * 4)
    paint_map(frame, Coords(20, 20), open_area(Coords(20, 20), radius=0))
    state = classify(sample_frame(frame), previous_state())

    dungeon = state.dungeon
    assert dungeon.run_state.kind == RunStateKind.FIGHT
    assert dungeon.run_state.enemy.health == Health.HURT
    assert dungeon.position == Coords(20, 20)
    print("✓ Fight test passed")


def test_shifted_enemy_bar():
    frame = blank_frame()
    paint_probe(frame, 'fight_button')
    paint(frame, sp.ENEMY_INDICATOR, sp.HEALTH_GREY)
    paint(frame, (sp.ENEMY_BAR_HEALTHY_X - sp.ENEMY_BAR_SHIFT, sp.ENEMY_BAR_Y), sp.HEALTH_RED)
    state = classify(sample_frame(frame), previous_state())
    assert state.dungeon.run_state.enemy.health == Health.HEALTHY
    print("✓ Shifted enemy bar test passed")


def test_fight_button_with_readout_is_not_fight():
    """Fight pixels alone do not count while the coordinates are visible."""
    frame = blank_frame()
    paint_probe(frame, 'fight_button')
    with pytest.raises(UnknownStateError):
        classify(sample_frame(frame, PLAYER), GameState())
    print("✓ Fight readout test passed")


def test_city_reports_dead_party():
    frame = blank_frame()
    paint_probe(frame, 'city_background_bottom')
    paint_probe(frame, 'city_background_side')
    paint_party(frame, [Health.HEALTHY, Health.DEAD, Health.HEALTHY, Health.HEALTHY])
    state = classify(sample_frame(frame), previous_state())

    assert state.state_type == StateType.CITY
    assert state.has_dead
    assert state.dungeon.characters[1].health == Health.DEAD
    assert state.position == Coords(20, 20)
    print("✓ City test passed")


def test_city_without_dead():
    frame = blank_frame()
    paint_probe(frame, 'city_background_bottom')
    paint_probe(frame, 'city_background_side')
    state = classify(sample_frame(frame), previous_state())
    assert state.state_type == StateType.CITY
    assert not state.has_dead
    print("✓ Healthy city test passed")


def test_main_screen():
    frame = blank_frame()
    paint_probe(frame, 'main_title')
    state = classify(sample_frame(frame), GameState())
    assert state.state_type == StateType.MAIN
    assert ScreenDetector().match(sample_frame(frame)) == 'main'
    print("✓ Main screen test passed")


if __name__ == "__main__":
    test_blank_frame_is_unknown()
    test_ad_wins_over_everything()
    test_teleport_prompt()
    test_idle_dungeon_merges_previous_map()
    test_idle_on_city_tile()
    test_chest()
    test_fight_reads_enemy_and_keeps_position()
    test_shifted_enemy_bar()
    test_fight_button_with_readout_is_not_fight()
    test_city_reports_dead_party()
    test_city_without_dead()
    test_main_screen()
    print("\n✓ All screen detector tests passed!")
