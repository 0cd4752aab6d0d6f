"""
Component 2: Action Model

Preconditions, actions and the static action library:
- Precondition: literal or deferred (resolver-backed) value requirement
- Action: name, preconditions, effects and priority-derived cost
- ActionLibrary: ordered, read-only collection with unique action names

A deferred precondition calls its resolver with no arguments. Resolved
values live in a caller-owned Resolution dict, not on the precondition. The
planner starts a fresh dict for every search: each resolver runs at most once
per search and searching never mutates the library.

Author: GOAP Planner Development Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from common.constants import COST_BASE
from component_1_world_state import Fact, FactValue, WorldState, merge_facts
from component_15_logging_config import get_logger
from goap_exceptions import DuplicateActionError, GOAPException, PreconditionResolutionError

logger = get_logger(__name__)

Resolver = Callable[[], FactValue]


# ============================================================================
# Precondition
# ============================================================================


class Precondition:
    """
    Requirement that a named fact hold a value before an action may fire.

    The required value is either a literal (bool/str) or a resolver that is
    called lazily to read context the world state does not capture, such as
    "is cover nearby right now".
    """

    def __init__(self, name: str, required: Union[FactValue, Resolver]):
        self.name = name
        self._resolver: Optional[Resolver] = required if callable(required) else None
        self._fact: Optional[Fact] = None if self._resolver else Fact(name, required)

    @property
    def is_deferred(self) -> bool:
        return self._resolver is not None

    def resolve(self, resolved: Optional["Resolution"] = None) -> Fact:
        """
        Return the required fact.

        A deferred precondition is looked up in resolved first. On a miss the
        resolver runs and its fact is stored there. Without resolved the
        resolver runs on every call.

        Raises:
            PreconditionResolutionError: If the resolver raises
        """
        if self._fact is not None:
            return self._fact
        if resolved is not None and self in resolved:
            return resolved[self]

        try:
            value = self._resolver()
        except GOAPException:
            raise
        except Exception as e:
            raise PreconditionResolutionError(
                f"Resolver for precondition '{self.name}' failed",
                precondition_name=self.name,
                original_exception=e,
            ) from e

        fact = Fact(self.name, value)
        if resolved is not None:
            resolved[self] = fact
        logger.debug("Resolved deferred precondition", extra={"precondition": fact.encoded})
        return fact

    def __repr__(self):
        if self._fact is not None:
            return f"Precondition({self._fact.encoded})"
        return f"Precondition({self.name}=<deferred>)"


# Deferred precondition values of one search, keyed by precondition identity
Resolution = Dict[Precondition, Fact]


# ============================================================================
# Action
# ============================================================================


@dataclass(frozen=True)
class Action:
    """
    Named transition with preconditions, effects and a priority.

    Higher priority means cheaper: cost = COST_BASE - priority.

    Attributes:
        name: Unique identifier within a library
        preconditions: Requirements checked against the current state
        effects: Facts overlaid onto the state when the action is applied
        priority: Integer weight, expected in roughly [0, 100]
    """

    name: str
    preconditions: Tuple[Precondition, ...] = field(default_factory=tuple)
    effects: Tuple[Fact, ...] = field(default_factory=tuple)
    priority: int = 0

    def __post_init__(self):
        # Accept any sequence but store tuples
        object.__setattr__(self, "preconditions", tuple(self.preconditions))
        object.__setattr__(self, "effects", tuple(self.effects))

    @property
    def cost(self) -> int:
        return COST_BASE - self.priority

    @property
    def effects_state(self) -> WorldState:
        """The action's raw effects as a state."""
        return WorldState(self.effects)

    @property
    def has_deferred_preconditions(self) -> bool:
        return any(p.is_deferred for p in self.preconditions)

    def precondition_state(self, resolved: Optional[Resolution] = None) -> WorldState:
        """Preconditions as a state, resolving deferred ones through resolved."""
        return WorldState(p.resolve(resolved) for p in self.preconditions)

    def is_applicable(self, state: WorldState, resolved: Optional[Resolution] = None) -> bool:
        """Check if the action can fire in the given state."""
        return state.is_superset_of(self.precondition_state(resolved))

    def apply(self, state: WorldState) -> WorldState:
        """Overlay the effects onto state, returning a new state."""
        return merge_facts(state, self.effects)

    def __str__(self):
        return self.name


# ============================================================================
# Action Library
# ============================================================================


class ActionLibrary:
    """
    Ordered, read-only collection of actions shared by every node expansion.

    Library order is the order successors are generated in, which decides
    ties in the search.
    """

    def __init__(self, actions: Iterable[Action]):
        self._actions: Tuple[Action, ...] = tuple(actions)
        self._by_name: Dict[str, Action] = {}

        for action in self._actions:
            if action.name in self._by_name:
                raise DuplicateActionError(
                    f"Duplicate action name '{action.name}'",
                    action_name=action.name,
                )
            self._by_name[action.name] = action

    @property
    def actions(self) -> Tuple[Action, ...]:
        return self._actions

    @property
    def has_deferred_preconditions(self) -> bool:
        return any(a.has_deferred_preconditions for a in self._actions)

    def get(self, name: str) -> Optional[Action]:
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [a.name for a in self._actions]

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self):
        return f"ActionLibrary({', '.join(self.names())})"


def as_library(actions: Union[ActionLibrary, Sequence[Action]]) -> ActionLibrary:
    """Wrap a plain action sequence into an ActionLibrary."""
    if isinstance(actions, ActionLibrary):
        return actions
    return ActionLibrary(actions)
