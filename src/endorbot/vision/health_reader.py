"""Party and enemy health read from the health bar pixels."""

from typing import List, Optional

from endorbot.models.state import PARTY_SIZE, Character, Enemy, Health
from endorbot.vision import screen_points as sp
from endorbot.vision.pixel_sample import PixelSample, Point

PARTY_LOW_COLORS = (sp.HEALTH_RED_PLAYER, sp.HEALTH_GREEN, sp.HEALTH_ORANGE)
ENEMY_SHIFT_COLORS = (sp.HEALTH_RED, sp.HEALTH_GREY)


def party_bar_y(slot: int) -> int:
    return sp.PARTY_BAR_FIRST_Y + sp.PARTY_BAR_PITCH * slot


def party_sample_points() -> List[Point]:
    points = []
    for slot in range(PARTY_SIZE):
        y = party_bar_y(slot)
        points.extend([
            (sp.PARTY_BAR_HEALTHY_X, y),
            (sp.PARTY_BAR_HURT_X, y),
            (sp.PARTY_BAR_LOW_X, y),
        ])
    return points


def enemy_sample_points() -> List[Point]:
    points = [sp.ENEMY_INDICATOR]
    for shift in (0, sp.ENEMY_BAR_SHIFT):
        for x in (sp.ENEMY_BAR_HEALTHY_X, sp.ENEMY_BAR_HURT_X, sp.ENEMY_BAR_LOW_X):
            points.append((x - shift, sp.ENEMY_BAR_Y))
    return points


def read_character(sample: PixelSample, slot: int) -> Character:
    """
    Read one party slot.

    The bar drains from the right, so the first probe from the right that
    is still green tells how full it is.
    """
    y = party_bar_y(slot)
    if sample.color_at(sp.PARTY_BAR_HEALTHY_X, y) == sp.HEALTH_GREEN:
        return Character(Health.HEALTHY)
    if sample.color_at(sp.PARTY_BAR_HURT_X, y) == sp.HEALTH_GREEN:
        return Character(Health.HURT)
    low_color = sample.color_at(sp.PARTY_BAR_LOW_X, y)
    if low_color in PARTY_LOW_COLORS:
        return Character(Health.LOW)
    if low_color == sp.HEALTH_GREY:
        return Character(Health.DEAD)
    return Character(Health.UNKNOWN)


def read_characters(
    sample: PixelSample, previous: Optional[List[Character]] = None
) -> List[Character]:
    """
    Read the whole party.

    Slots that read as unknown keep their health from ``previous`` when given.
    """
    party = [read_character(sample, slot) for slot in range(PARTY_SIZE)]
    if previous:
        for slot, character in enumerate(party):
            if character.health == Health.UNKNOWN and slot < len(previous):
                party[slot] = Character(previous[slot].health)
    return party


def read_enemy(sample: PixelSample) -> Enemy:
    shift = 0
    if sample.color_at(*sp.ENEMY_INDICATOR) in ENEMY_SHIFT_COLORS:
        shift = sp.ENEMY_BAR_SHIFT

    y = sp.ENEMY_BAR_Y
    if sample.color_at(sp.ENEMY_BAR_HEALTHY_X - shift, y) == sp.HEALTH_RED:
        return Enemy(Health.HEALTHY)
    if sample.color_at(sp.ENEMY_BAR_HURT_X - shift, y) == sp.HEALTH_RED:
        return Enemy(Health.HURT)
    low_color = sample.color_at(sp.ENEMY_BAR_LOW_X - shift, y)
    if low_color == sp.HEALTH_RED:
        return Enemy(Health.LOW)
    if low_color == sp.HEALTH_GREY:
        return Enemy(Health.DEAD)
    return Enemy(Health.UNKNOWN)
