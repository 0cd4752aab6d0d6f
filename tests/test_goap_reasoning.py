"""
tests/test_goap_reasoning.py

Tests for the reasoning-engine interface of the GOAP planner.

Tests cover:
- reason() results for found and missing plans
- Plan explanations (ProofTree)
- Plan cache for static libraries
- Capabilities and cost estimation
"""

import pytest

from component_1_world_state import Fact, WorldState
from component_17_plan_explanation import StepType
from component_2_actions import Action, ActionLibrary, Precondition
from component_3_heuristics import Heuristic
from component_4_goap_planner import GOAPPlanner
from component_5_combat_domain import build_combat_library, combat_goal, combat_start_state
from goap_config import GOAPConfig
from infrastructure.plan_cache import current_plan_cache, reset_plan_cache
from infrastructure.interfaces import BaseReasoningEngine

COVER_PLAN = ["GOTO_COVER", "RELOAD_FROM_COVER", "SHOOT_FROM_COVER"]


@pytest.fixture(autouse=True)
def fresh_cache():
    reset_plan_cache()
    yield
    reset_plan_cache()


@pytest.fixture
def static_library():
    """Combat library without the deferred cover check."""
    return ActionLibrary(
        [
            Action(
                name="RELOAD",
                preconditions=[Precondition("HAS_AMMO", False)],
                effects=[Fact("HAS_AMMO", True)],
                priority=25,
            ),
            Action(
                name="SHOOT",
                preconditions=[Precondition("HAS_AMMO", True)],
                effects=[Fact("HURT_TARGET", True)],
                priority=50,
            ),
        ]
    )


class ScaledDistance(Heuristic):
    """Effect distance multiplied by a weight."""

    def __init__(self, weight):
        self.weight = weight

    def estimate(self, action, state, goal):
        return self.weight * len(goal.difference(action.effects_state))


@pytest.fixture
def detour_library():
    """A cheap two-step route (A, C) and an expensive direct one (B)."""
    return ActionLibrary(
        [
            Action(name="A", effects=[Fact("STEP", True)], priority=90),
            Action(name="B", effects=[Fact("DONE", True)], priority=0),
            Action(
                name="C",
                preconditions=[Precondition("STEP", True)],
                effects=[Fact("DONE", True)],
                priority=90,
            ),
        ]
    )


@pytest.fixture
def context():
    return {"start_state": combat_start_state(), "goal": combat_goal()}


# ==================== reason() Tests ====================


class TestReason:
    """Test the reasoning interface."""

    def test_is_reasoning_engine(self):
        assert isinstance(GOAPPlanner(build_combat_library(), config=GOAPConfig()), BaseReasoningEngine)

    def test_plan_found(self, context):
        planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())
        result = planner.reason("hurt the target", context)

        assert result.success
        assert result.confidence == 1.0
        assert result.metadata["plan"] == COVER_PLAN
        assert result.plan == COVER_PLAN
        assert result.metadata["plan_length"] == 3
        assert result.metadata["cost"] == 25
        assert result.metadata["is_valid"] is True
        assert "GOTO_COVER -> RELOAD_FROM_COVER -> SHOOT_FROM_COVER" in result.answer

    def test_proof_tree(self, context):
        planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())
        tree = planner.reason("hurt the target", context).proof_tree

        assert tree.query == "hurt the target"
        assert tree.plan == COVER_PLAN
        assert tree.succeeded
        assert tree.steps[0].step_type == StepType.PREMISE
        assert tree.steps[-1].step_type == StepType.CONCLUSION
        assert tree.steps[-1].depends_on == ["plan_action_2", "plan_goal"]
        assert tree.get_step("plan_action_0").cost == 50
        assert tree.get_step("plan_action_0").facts == ["IN_COVER=false", "NEARBY_COVER=true"]
        assert tree.get_step("plan_action_2").produces == ["HURT_TARGET=true"]
        assert tree.metadata["heuristic"] == "EffectDistanceHeuristic"
        assert tree.metadata["search_stats"]["expansions"] == 3

    def test_proof_can_be_disabled(self, context):
        planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())
        context["enable_proof"] = False

        assert planner.reason("q", context).proof_tree is None

    def test_missing_context(self):
        planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())
        result = planner.reason("q", {"goal": combat_goal()})

        assert not result.success
        assert result.metadata["error"] == "missing_planning_input"

    def test_no_plan(self):
        planner = GOAPPlanner(ActionLibrary([]), config=GOAPConfig())
        result = planner.reason("q", {"start_state": WorldState(), "goal": combat_goal()})

        assert not result.success
        assert result.answer == "No plan found"
        assert result.metadata["reason"] == "search_exhausted"

        tree = result.proof_tree
        assert not tree.succeeded
        assert tree.steps[-1].step_type == StepType.CONTRADICTION
        assert tree.steps[-1].facts == ["HURT_TARGET=true"]

    def test_no_plan_due_to_limit(self, context):
        planner = GOAPPlanner(build_combat_library(), max_expansions=1, config=GOAPConfig())
        result = planner.reason("q", context)

        assert not result.success
        assert result.metadata["reason"] == "expansion_limit"

    def test_empty_plan(self):
        planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())
        result = planner.reason("q", {"start_state": WorldState(), "goal": WorldState()})

        assert result.success
        assert result.metadata["plan"] == []
        assert "<empty>" in result.answer


# ==================== Plan Cache Tests ====================


class TestPlanCache:
    """Test memoization of plans for static libraries."""

    def test_static_library_is_cached(self, static_library, context):
        planner = GOAPPlanner(static_library, config=GOAPConfig())

        first = planner.reason("q", context)
        second = planner.reason("q", context)

        assert first.metadata["from_cache"] is False
        assert second.metadata["from_cache"] is True
        assert second.metadata["plan"] == first.metadata["plan"] == ["RELOAD", "SHOOT"]
        assert current_plan_cache().stats.hits == 1

    def test_equal_library_shares_cache(self, static_library, context):
        GOAPPlanner(static_library, config=GOAPConfig()).reason("q", context)
        result = GOAPPlanner(static_library, config=GOAPConfig()).reason("q", context)

        assert result.metadata["from_cache"] is True

    def test_different_goal_is_not_shared(self, static_library, context):
        planner = GOAPPlanner(static_library, config=GOAPConfig())
        planner.reason("q", context)

        result = planner.reason(
            "q", {"start_state": context["start_state"], "goal": WorldState([Fact("HAS_AMMO", True)])}
        )

        assert result.metadata["from_cache"] is False
        assert result.metadata["plan"] == ["RELOAD"]

    def test_deferred_library_is_never_cached(self, context):
        planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())

        planner.reason("q", context)
        result = planner.reason("q", context)

        assert result.metadata["from_cache"] is False
        assert current_plan_cache() is None

    def test_cache_disabled_by_config(self, static_library, context):
        planner = GOAPPlanner(static_library, config=GOAPConfig(plan_cache_enabled=False))

        planner.reason("q", context)
        result = planner.reason("q", context)

        assert result.metadata["from_cache"] is False

    def test_heuristic_parameters_are_not_shared(self, detour_library):
        context = {"start_state": WorldState(), "goal": WorldState([Fact("DONE", True)])}
        light = GOAPPlanner(detour_library, heuristic=ScaledDistance(0), config=GOAPConfig())
        heavy = GOAPPlanner(detour_library, heuristic=ScaledDistance(1000), config=GOAPConfig())

        assert light.reason("q", context).metadata["plan"] == ["A", "C"]
        result = heavy.reason("q", context)

        assert result.metadata["from_cache"] is False
        assert result.metadata["plan"] == ["B"] == heavy.plan(WorldState(), context["goal"])

    def test_equal_heuristic_parameters_share_cache(self, detour_library):
        context = {"start_state": WorldState(), "goal": WorldState([Fact("DONE", True)])}
        GOAPPlanner(detour_library, heuristic=ScaledDistance(0), config=GOAPConfig()).reason(
            "q", context
        )
        result = GOAPPlanner(
            detour_library, heuristic=ScaledDistance(0), config=GOAPConfig()
        ).reason("q", context)

        assert result.metadata["from_cache"] is True
        assert result.metadata["plan"] == ["A", "C"]

    def test_unhashable_heuristic_is_never_cached(self, static_library, context):
        heuristic = ScaledDistance(1)
        heuristic.history = []
        planner = GOAPPlanner(static_library, heuristic=heuristic, config=GOAPConfig())

        planner.reason("q", context)
        result = planner.reason("q", context)

        assert result.metadata["from_cache"] is False
        assert current_plan_cache() is None

    def test_expansion_cap_is_not_shared(self, static_library, context):
        GOAPPlanner(static_library, config=GOAPConfig()).reason("q", context)
        capped = GOAPPlanner(static_library, max_expansions=1, config=GOAPConfig())

        result = capped.reason("q", context)

        assert not result.success
        assert result.metadata["reason"] == "expansion_limit"
        assert capped.plan(context["start_state"], context["goal"]) is None


# ==================== Capability Tests ====================


def test_capabilities():
    planner = GOAPPlanner(build_combat_library(), config=GOAPConfig())

    assert planner.supports_capability("goap")
    assert planner.supports_capability("plan_validation")
    assert not planner.supports_capability("arithmetic")


def test_estimate_cost_grows_with_library():
    small = GOAPPlanner(ActionLibrary([Action("A")]), config=GOAPConfig())
    large = GOAPPlanner(build_combat_library(), config=GOAPConfig())

    assert 0.0 <= small.estimate_cost("q") < large.estimate_cost("q") <= 1.0
