"""
infrastructure/interfaces.py

Query/context interface shared by planning engines.

An engine receives a free-text query plus a context dict holding its inputs
(for GOAP: 'start_state' and 'goal') and answers with a ReasoningResult.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from component_17_plan_explanation import ProofTree


@dataclass
class ReasoningResult:
    """
    Outcome of one reason() call.

    Attributes:
        success: True when a plan (possibly empty) was produced
        answer: Human-readable summary
        confidence: In [0.0, 1.0]; lowered when the plan fails validation
        proof_tree: Step-by-step explanation, if requested
        metadata: Plan, cost, search statistics and cache information
        strategy_used: Identifier of the search strategy
        computation_cost: Share of the expansion budget spent (0.0 when cached)
    """

    success: bool
    answer: str = ""
    confidence: float = 0.0
    proof_tree: Optional[ProofTree] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    strategy_used: str = ""
    computation_cost: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence out of range [0.0, 1.0]: {self.confidence}"
            )

    @property
    def plan(self) -> List[str]:
        """Action names of the produced plan ([] when none)."""
        return list(self.metadata.get("plan", []))


class BaseReasoningEngine(ABC):
    """Engine driven through reason(); capabilities are lowercase identifiers."""

    @abstractmethod
    def reason(self, query: str, context: Dict[str, Any]) -> ReasoningResult:
        """Answer the query using the inputs found in context."""

    @abstractmethod
    def get_capabilities(self) -> List[str]:
        pass

    @abstractmethod
    def estimate_cost(self, query: str) -> float:
        """
        Rough cost of answering before doing it, in [0.0, 1.0].
        """

    def supports_capability(self, capability: str) -> bool:
        return capability in self.get_capabilities()
