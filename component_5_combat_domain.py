"""
Component 5: Combat Domain

Example action library for a shooter agent that can fight in the open or
from cover. Used by the command-line entry point and as a reference domain
in tests.

    SHOOT               HAS_AMMO                      -> HURT_TARGET   (50)
    SHOOT_FROM_COVER    HAS_AMMO, IN_COVER            -> HURT_TARGET   (75)
    RELOAD              not HAS_AMMO                  -> HAS_AMMO      (25)
    RELOAD_FROM_COVER   IN_COVER, not HAS_AMMO        -> HAS_AMMO      (50)
    GOTO_COVER          NEARBY_COVER*, not IN_COVER   -> IN_COVER      (50)

* NEARBY_COVER is checked through a resolver at search time.

Author: GOAP Planner Development Team
Date: 2026-10-19
"""

from typing import Callable, Optional

from component_1_world_state import Fact, FactValue, WorldState
from component_2_actions import Action, ActionLibrary, Precondition


def check_cover() -> bool:
    """Default cover sensor: cover is always within reach."""
    return True


def build_combat_library(
    cover_check: Optional[Callable[[], FactValue]] = None,
) -> ActionLibrary:
    """
    Build the combat action library.

    Args:
        cover_check: Resolver for the NEARBY_COVER precondition of GOTO_COVER
            (default: check_cover)
    """
    cover_check = cover_check or check_cover

    return ActionLibrary(
        [
            Action(
                name="SHOOT",
                preconditions=[Precondition("HAS_AMMO", True)],
                effects=[Fact("HURT_TARGET", True)],
                priority=50,
            ),
            Action(
                name="SHOOT_FROM_COVER",
                preconditions=[
                    Precondition("HAS_AMMO", True),
                    Precondition("IN_COVER", True),
                ],
                effects=[Fact("HURT_TARGET", True)],
                priority=75,
            ),
            Action(
                name="RELOAD",
                preconditions=[Precondition("HAS_AMMO", False)],
                effects=[Fact("HAS_AMMO", True)],
                priority=25,
            ),
            Action(
                name="RELOAD_FROM_COVER",
                preconditions=[
                    Precondition("IN_COVER", True),
                    Precondition("HAS_AMMO", False),
                ],
                effects=[Fact("HAS_AMMO", True)],
                priority=50,
            ),
            Action(
                name="GOTO_COVER",
                preconditions=[
                    Precondition("NEARBY_COVER", cover_check),
                    Precondition("IN_COVER", False),
                ],
                effects=[Fact("IN_COVER", True)],
                priority=50,
            ),
        ]
    )


def combat_start_state() -> WorldState:
    return WorldState(
        [
            Fact("NEARBY_COVER", True),
            Fact("HAS_AMMO", False),
            Fact("IN_COVER", False),
        ]
    )


def combat_goal() -> WorldState:
    return WorldState([Fact("HURT_TARGET", True)])
