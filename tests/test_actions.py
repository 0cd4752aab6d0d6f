"""
tests/test_actions.py

Unit tests for preconditions, actions and action libraries.

Tests cover:
- Literal and deferred preconditions
- Per-search resolution of deferred preconditions
- Resolver failures
- Action cost, applicability and effects
- Library name uniqueness
"""

import pytest

from component_1_world_state import Fact, WorldState
from component_2_actions import Action, ActionLibrary, Precondition, as_library
from goap_exceptions import (
    DuplicateActionError,
    InvalidFactError,
    PreconditionResolutionError,
)


class CountingResolver:
    """Resolver that records how often it is called."""

    def __init__(self, value=True):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


# ==================== Precondition Tests ====================


class TestPrecondition:
    """Test literal and deferred preconditions."""

    def test_literal_needs_no_resolution(self):
        precondition = Precondition("HAS_AMMO", True)
        resolved = {}

        assert not precondition.is_deferred
        assert precondition.resolve(resolved) == Fact("HAS_AMMO", True)
        assert resolved == {}

    def test_deferred_is_not_called_on_construction(self):
        resolver = CountingResolver(True)
        precondition = Precondition("NEARBY_COVER", resolver)

        assert precondition.is_deferred
        assert resolver.calls == 0

    def test_deferred_resolves_once_per_resolution(self):
        resolver = CountingResolver(True)
        precondition = Precondition("NEARBY_COVER", resolver)
        resolved = {}

        first = precondition.resolve(resolved)
        second = precondition.resolve(resolved)

        assert first == second == Fact("NEARBY_COVER", True)
        assert resolver.calls == 1
        assert resolved == {precondition: Fact("NEARBY_COVER", True)}

    def test_separate_resolutions_do_not_share_values(self):
        resolver = CountingResolver(False)
        precondition = Precondition("NEARBY_COVER", resolver)

        precondition.resolve({})
        resolver.value = True

        assert precondition.resolve({}) == Fact("NEARBY_COVER", True)
        assert resolver.calls == 2

    def test_without_resolution_resolver_runs_every_time(self):
        resolver = CountingResolver(True)
        precondition = Precondition("NEARBY_COVER", resolver)

        precondition.resolve()
        precondition.resolve()

        assert resolver.calls == 2

    def test_resolver_may_return_string(self):
        precondition = Precondition("STANCE", lambda: "crouched")
        assert precondition.resolve() == Fact("STANCE", "crouched")

    def test_resolver_exception_is_wrapped(self):
        def broken():
            raise RuntimeError("sensor offline")

        precondition = Precondition("NEARBY_COVER", broken)
        resolved = {}

        with pytest.raises(PreconditionResolutionError) as exc_info:
            precondition.resolve(resolved)

        error = exc_info.value
        assert error.context["precondition_name"] == "NEARBY_COVER"
        assert isinstance(error.original_exception, RuntimeError)
        assert "sensor offline" in str(error)
        assert resolved == {}

    def test_resolver_returning_invalid_type(self):
        precondition = Precondition("COUNT", lambda: 3)

        with pytest.raises(InvalidFactError):
            precondition.resolve()

    def test_repr_stays_deferred_after_resolution(self):
        precondition = Precondition("NEARBY_COVER", lambda: True)
        precondition.resolve({})

        assert repr(precondition) == "Precondition(NEARBY_COVER=<deferred>)"
        assert repr(Precondition("HAS_AMMO", False)) == "Precondition(HAS_AMMO=false)"


# ==================== Action Tests ====================


class TestAction:
    """Test action cost and state transitions."""

    @pytest.fixture
    def reload_action(self):
        return Action(
            name="RELOAD",
            preconditions=[Precondition("HAS_AMMO", False)],
            effects=[Fact("HAS_AMMO", True)],
            priority=25,
        )

    def test_cost_from_priority(self, reload_action):
        assert reload_action.cost == 75

    def test_cost_outside_expected_range(self):
        assert Action("X", priority=120).cost == -20
        assert Action("Y", priority=-10).cost == 110

    def test_sequences_are_stored_as_tuples(self, reload_action):
        assert isinstance(reload_action.preconditions, tuple)
        assert isinstance(reload_action.effects, tuple)

    def test_effects_state(self, reload_action):
        assert reload_action.effects_state == WorldState([Fact("HAS_AMMO", True)])

    def test_is_applicable(self, reload_action):
        assert reload_action.is_applicable(
            WorldState([Fact("HAS_AMMO", False), Fact("IN_COVER", True)])
        )
        assert not reload_action.is_applicable(WorldState([Fact("HAS_AMMO", True)]))
        assert not reload_action.is_applicable(WorldState())

    def test_apply_replaces_fact(self, reload_action):
        state = WorldState([Fact("HAS_AMMO", False), Fact("IN_COVER", True)])
        result = reload_action.apply(state)

        assert result == WorldState([Fact("HAS_AMMO", True), Fact("IN_COVER", True)])
        assert state == WorldState([Fact("HAS_AMMO", False), Fact("IN_COVER", True)])

    def test_precondition_state_resolves_deferred(self):
        resolver = CountingResolver(True)
        action = Action(
            name="GOTO_COVER",
            preconditions=[Precondition("NEARBY_COVER", resolver), Precondition("IN_COVER", False)],
            effects=[Fact("IN_COVER", True)],
            priority=50,
        )

        resolved = {}

        assert action.has_deferred_preconditions
        assert action.precondition_state(resolved) == WorldState(
            [Fact("NEARBY_COVER", True), Fact("IN_COVER", False)]
        )
        action.precondition_state(resolved)
        assert resolver.calls == 1

        action.precondition_state({})
        assert resolver.calls == 2

    def test_is_applicable_with_deferred_precondition(self):
        action = Action(
            name="GOTO_COVER",
            preconditions=[Precondition("NEARBY_COVER", CountingResolver(False))],
            effects=[Fact("IN_COVER", True)],
        )

        assert action.is_applicable(WorldState([Fact("NEARBY_COVER", False)]), {})
        assert not action.is_applicable(WorldState([Fact("NEARBY_COVER", True)]), {})

    def test_action_without_preconditions_always_applies(self):
        action = Action("WAIT", effects=[Fact("WAITED", True)], priority=10)
        assert action.is_applicable(WorldState())

    def test_str(self, reload_action):
        assert str(reload_action) == "RELOAD"


# ==================== Library Tests ====================


class TestActionLibrary:
    """Test action library construction."""

    def test_preserves_order(self):
        library = ActionLibrary([Action("B"), Action("A"), Action("C")])
        assert library.names() == ["B", "A", "C"]
        assert [a.name for a in library] == ["B", "A", "C"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(DuplicateActionError) as exc_info:
            ActionLibrary([Action("SHOOT", priority=50), Action("SHOOT", priority=75)])

        assert exc_info.value.context["action_name"] == "SHOOT"

    def test_lookup(self):
        shoot = Action("SHOOT")
        library = ActionLibrary([shoot])

        assert library.get("SHOOT") is shoot
        assert library.get("MISSING") is None
        assert "SHOOT" in library
        assert len(library) == 1

    def test_has_deferred_preconditions(self):
        static = ActionLibrary([Action("A", preconditions=[Precondition("X", True)])])
        dynamic = ActionLibrary([Action("B", preconditions=[Precondition("X", lambda: True)])])

        assert not static.has_deferred_preconditions
        assert dynamic.has_deferred_preconditions

    def test_one_resolution_covers_shared_precondition(self):
        resolver = CountingResolver()
        cover = Precondition("NEARBY_COVER", resolver)
        library = ActionLibrary(
            [
                Action("A", preconditions=[cover]),
                Action("B", preconditions=[cover, Precondition("Y", True)]),
            ]
        )
        resolved = {}

        for action in library:
            action.precondition_state(resolved)

        assert resolver.calls == 1
        assert list(resolved) == [cover]

    def test_as_library(self):
        library = ActionLibrary([Action("A")])

        assert as_library(library) is library
        assert as_library([Action("A")]).names() == ["A"]
