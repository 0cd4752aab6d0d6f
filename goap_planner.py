"""
GOAP Planner (Goal-Oriented Action Planning)

Facade module providing the public planning API from one import.

The implementation is split into focused modules:
- component_1_world_state: Facts and world states
- component_2_actions: Preconditions, actions and action libraries
- component_3_heuristics: Distance heuristics
- component_4_goap_planner: Search nodes and the planner
- component_5_combat_domain: Example combat library

Usage:
    from goap_planner import GOAPPlanner, WorldState, Fact

    planner = GOAPPlanner(library)
    node = planner.find_path(start, goal)
    if node is not None:
        print(format_plan(node))
"""

import logging
from typing import Optional, TextIO

from component_1_world_state import Fact, FactValue, WorldState, merge_facts
from component_15_logging_config import setup_logging
from component_2_actions import Action, ActionLibrary, Precondition
from component_3_heuristics import (
    EffectDistanceHeuristic,
    Heuristic,
    UnsatisfiedGoalHeuristic,
)
from component_4_goap_planner import GOAPPlanner, SearchNode
from component_5_combat_domain import (
    build_combat_library,
    combat_goal,
    combat_start_state,
)
from goap_config import get_config

__all__ = [
    # State model
    "Fact",
    "FactValue",
    "WorldState",
    "merge_facts",
    # Action model
    "Precondition",
    "Action",
    "ActionLibrary",
    # Heuristics
    "Heuristic",
    "EffectDistanceHeuristic",
    "UnsatisfiedGoalHeuristic",
    # Search
    "SearchNode",
    "GOAPPlanner",
    # Example domain
    "build_combat_library",
    "combat_start_state",
    "combat_goal",
    # Output
    "format_plan",
    "print_plan",
    "main",
]


def format_plan(node: SearchNode) -> str:
    """Render the plan ending at node as 'A -> B -> C'."""
    return " -> ".join(node.reconstruct_plan())


def print_plan(node: SearchNode, stream: Optional[TextIO] = None) -> None:
    """Print the final path of a search."""
    print("\n---FINAL PATH---", file=stream)
    print(format_plan(node), file=stream)


def main() -> int:
    """Example usage: solve the combat domain and print the plan."""
    config = get_config()
    setup_logging(console_level=logging.getLevelName(config.log_level.upper()))

    planner = GOAPPlanner(build_combat_library(), config=config)
    node = planner.find_path(combat_start_state(), combat_goal())

    if node is None:
        print("No plan found")
        return 1

    print_plan(node)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
