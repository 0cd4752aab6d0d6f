"""
infrastructure package

Shared services for the GOAP planner.

Modules:
    - interfaces: Query/context interface for planning engines
    - plan_cache: TTL-bounded memoization of found plans
"""

from infrastructure.interfaces import BaseReasoningEngine, ReasoningResult
from infrastructure.plan_cache import PlanCache, PlanCacheKey, get_plan_cache

__all__ = [
    "BaseReasoningEngine",
    "ReasoningResult",
    "PlanCache",
    "PlanCacheKey",
    "get_plan_cache",
]
