"""
Component 1: World State Representation

Facts and world states for goal-oriented action planning:
- Fact: an atomic named proposition with a bool or str value
- WorldState: an immutable set of facts with superset and difference tests
- merge_facts: overlay facts by name (one value per name)

Equality of facts and states is derived from the canonical "name=value"
encoding, so equal states can be used directly as dict keys in the search.

Booleans encode as true/false and strings are JSON-quoted, which keeps the
string "true" distinct from the boolean True:

    HAS_AMMO=true       Fact("HAS_AMMO", True)
    MODE="true"         Fact("MODE", "true")

Author: GOAP Planner Development Team
Date: 2026-10-19
"""

import json
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from common.constants import FACT_SEPARATOR, FALSE_LITERAL, TRUE_LITERAL
from goap_exceptions import InvalidFactError

FactValue = Union[bool, str]


def encode_value(value: FactValue) -> str:
    """Type-tagged string form of a fact value."""
    if isinstance(value, bool):
        return TRUE_LITERAL if value else FALSE_LITERAL
    if isinstance(value, str):
        return json.dumps(value)
    raise InvalidFactError(
        f"Fact values must be bool or str, got {type(value).__name__}", value=value
    )


# ============================================================================
# Fact
# ============================================================================


@dataclass(frozen=True)
class Fact:
    """
    Atomic named proposition.

    Attributes:
        name: Proposition name (e.g. "HAS_AMMO")
        value: True/False or a string value
    """

    name: str
    value: FactValue
    encoded: str = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            encoded = f"{self.name}{FACT_SEPARATOR}{encode_value(self.value)}"
        except InvalidFactError as e:
            raise InvalidFactError(e.message, fact_name=self.name, value=self.value) from e
        object.__setattr__(self, "encoded", encoded)

    def __eq__(self, other):
        if not isinstance(other, Fact):
            return NotImplemented
        return self.encoded == other.encoded

    def __hash__(self):
        return hash(self.encoded)

    def __str__(self):
        return self.encoded


# ============================================================================
# WorldState
# ============================================================================


class WorldState:
    """
    Immutable set of facts describing what is true at one point of a search.

    Facts are unique by encoding. Construction does not reject two facts with
    the same name and different values; use merge_facts() when applying
    effects so each name holds one value.
    """

    __slots__ = ("_facts", "_key", "_hash")

    def __init__(self, facts: Optional[Iterable[Fact]] = None):
        by_encoding: Dict[str, Fact] = {}
        for fact in facts or ():
            by_encoding.setdefault(fact.encoded, fact)

        self._facts: FrozenSet[Fact] = frozenset(by_encoding.values())
        self._key: Tuple[str, ...] = tuple(sorted(by_encoding))
        self._hash = hash(self._key)

    @classmethod
    def from_dict(cls, mapping: Mapping[str, FactValue]) -> "WorldState":
        """Build a state from a {name: value} mapping."""
        return cls(Fact(name, value) for name, value in mapping.items())

    @property
    def key(self) -> Tuple[str, ...]:
        """Sorted canonical encodings; the basis of equality and hashing."""
        return self._key

    @property
    def facts(self) -> FrozenSet[Fact]:
        return self._facts

    def is_superset_of(self, other: "WorldState") -> bool:
        """True if every fact of other is present in this state."""
        return other._facts <= self._facts

    def difference(self, other: "WorldState") -> "WorldState":
        """Facts of this state that are absent from other."""
        return WorldState(self._facts - other._facts)

    def get(self, name: str, default: Optional[FactValue] = None) -> Optional[FactValue]:
        """Value held for name (first by encoding if several)."""
        for fact in self:
            if fact.name == name:
                return fact.value
        return default

    def names(self) -> List[str]:
        return [fact.name for fact in self]

    def has_unique_names(self) -> bool:
        """True if no name holds more than one value."""
        names = self.names()
        return len(names) == len(set(names))

    def to_dict(self) -> Dict[str, FactValue]:
        return {fact.name: fact.value for fact in self}

    def to_string(self) -> str:
        """Human-readable state description."""
        if not self._facts:
            return "{}"
        return "{" + ", ".join(self._key) + "}"

    def __iter__(self) -> Iterator[Fact]:
        return iter(sorted(self._facts, key=lambda fact: fact.encoded))

    def __len__(self) -> int:
        return len(self._facts)

    def __contains__(self, fact: object) -> bool:
        return fact in self._facts

    def __eq__(self, other):
        if not isinstance(other, WorldState):
            return NotImplemented
        return self._key == other._key

    def __hash__(self):
        return self._hash

    def __repr__(self):
        return f"WorldState({self.to_string()})"


def merge_facts(base: Iterable[Fact], overlay: Iterable[Fact]) -> WorldState:
    """
    Overlay facts by name: start from base, replace or add each overlay fact.

    The result holds at most one fact per name as long as base does.
    """
    by_name: Dict[str, Fact] = {}
    for fact in base:
        by_name[fact.name] = fact
    for fact in overlay:
        by_name[fact.name] = fact
    return WorldState(by_name.values())
