"""Decision module."""

from .planner import Planner, PlannerPolicy, determine_action

__all__ = ["Planner", "PlannerPolicy", "determine_action"]
