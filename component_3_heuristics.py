"""
Component 3: Planning Heuristics

Heuristics estimating how far a candidate action leaves the search from the
goal:
- EffectDistanceHeuristic: goal facts not provided by the action's raw effects
- UnsatisfiedGoalHeuristic: goal facts missing from the successor state

EffectDistanceHeuristic is the planner's default. It ignores the state the
action is applied to and is not admissible; it only biases the search toward
actions whose effects mention the goal.

Author: GOAP Planner Development Team
Date: 2026-10-19
"""

from collections.abc import Hashable
from typing import Optional, Tuple

from component_1_world_state import WorldState
from component_2_actions import Action

# ============================================================================
# Heuristics
# ============================================================================


class Heuristic:
    """Base class for planning heuristics."""

    def estimate(self, action: Action, state: WorldState, goal: WorldState) -> float:
        """Estimate remaining distance after applying action on state."""
        raise NotImplementedError

    def cache_key(self) -> Optional[Tuple[Hashable, ...]]:
        """
        Identity of this heuristic for plan memoization.

        Two heuristics with equal keys must give equal estimates. The default
        combines the class with the instance attributes, so differently
        parameterized instances of one class never share cached plans.

        Returns:
            Hashable key, or None if the attributes are unhashable (plans
            found with this heuristic are then not cached)
        """
        cls = type(self)
        attributes = tuple(sorted(getattr(self, "__dict__", {}).items()))
        key = (cls.__module__, cls.__qualname__, attributes)
        try:
            hash(key)
        except TypeError:
            return None
        return key


class EffectDistanceHeuristic(Heuristic):
    """Count goal facts that the action's effects alone do not provide."""

    def estimate(self, action: Action, state: WorldState, goal: WorldState) -> float:
        return len(goal.difference(action.effects_state))


class UnsatisfiedGoalHeuristic(Heuristic):
    """
    Count goal facts still missing after the action is applied.

    Takes the current state into account, unlike EffectDistanceHeuristic.
    """

    def estimate(self, action: Action, state: WorldState, goal: WorldState) -> float:
        return len(goal.difference(action.apply(state)))
