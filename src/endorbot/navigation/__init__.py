"""Navigation module for pathfinding on the dungeon grid."""

from .grid import GridPathfinder, PathResult, PLAYFIELD_BOUND

__all__ = ["GridPathfinder", "PathResult", "PLAYFIELD_BOUND"]
