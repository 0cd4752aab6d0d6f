"""
Centralized constants for the GOAP planner.

This module provides a single source of truth for the numbers and literals
used by the planning components. Components may override these via
GOAPConfig (goap_config.py) or constructor parameters.

Organization:
    - Cost Model: Priority-to-cost conversion
    - Search Limits: Expansion caps
    - Fact Encoding: Canonical string encoding of facts
    - Plan Cache: TTL and size limits for memoized plans
    - Logging: Logger names

Usage:
    from common.constants import COST_BASE, FACT_SEPARATOR
"""

from typing import Optional

# =============================================================================
# Cost Model
# =============================================================================

COST_BASE: int = 100
"""
Base value that an action's priority is subtracted from.

    action_cost = COST_BASE - priority

Priorities are expected in roughly [0, 100]; values outside that range are
accepted and simply produce negative or larger-than-base costs.
"""

ROOT_EDGE: str = ""
"""Edge name of the root search node (no action led to it)."""

# =============================================================================
# Search Limits
# =============================================================================

DEFAULT_MAX_EXPANSIONS: Optional[int] = None
"""
Maximum node expansions per search. None means unbounded: the search runs
until the goal is found or the open set is exhausted.
"""

# =============================================================================
# Fact Encoding
# =============================================================================

FACT_SEPARATOR: str = "="
TRUE_LITERAL: str = "true"
FALSE_LITERAL: str = "false"

# =============================================================================
# Plan Cache
# =============================================================================

PLAN_CACHE_MAXSIZE: int = 256
PLAN_CACHE_TTL: int = 600  # seconds

# =============================================================================
# Logging
# =============================================================================

PERFORMANCE_LOGGER_NAME: str = "goap.performance"
