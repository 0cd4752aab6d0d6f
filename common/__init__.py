"""
Common constants for the GOAP planner.

This package provides the centralized cost model, search limits and encoding
literals used throughout the planning components.
"""

from common.constants import *

__all__ = [
    # Cost Model
    "COST_BASE",
    "ROOT_EDGE",
    # Search Limits
    "DEFAULT_MAX_EXPANSIONS",
    # Fact Encoding
    "FACT_SEPARATOR",
    "TRUE_LITERAL",
    "FALSE_LITERAL",
    # Plan Cache
    "PLAN_CACHE_MAXSIZE",
    "PLAN_CACHE_TTL",
    # Logging
    "PERFORMANCE_LOGGER_NAME",
]
