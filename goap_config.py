"""
goap_config.py

Runtime configuration for the GOAP planner.

Defaults come from common.constants; any field can be overridden through
GOAP_* environment variables (see GOAPConfig.from_env) or by replacing the
module-level singleton.

Usage:
    from goap_config import get_config

    config = get_config()
    planner = GOAPPlanner(library, max_expansions=config.max_expansions)
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from common.constants import (
    DEFAULT_MAX_EXPANSIONS,
    PLAN_CACHE_MAXSIZE,
    PLAN_CACHE_TTL,
)
from goap_exceptions import InvalidConfigError

ENV_PREFIX = "GOAP_"

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass
class GOAPConfig:
    """
    Planner configuration.

    Attributes:
        max_expansions: Expansion cap per search (None = unbounded)
        cumulative_cost: Add the parent's cost to each successor's cost
            (standard A*). Off by default: successor cost replaces it.
        plan_cache_enabled: Memoize plans for static action libraries
        plan_cache_maxsize: Maximum number of memoized plans
        plan_cache_ttl: Lifetime of a memoized plan in seconds
        log_level: Console log level name used by the command-line entry point
    """

    max_expansions: Optional[int] = DEFAULT_MAX_EXPANSIONS
    cumulative_cost: bool = False
    plan_cache_enabled: bool = True
    plan_cache_maxsize: int = PLAN_CACHE_MAXSIZE
    plan_cache_ttl: int = PLAN_CACHE_TTL
    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise InvalidConfigError for out-of-range values."""
        if self.max_expansions is not None and self.max_expansions <= 0:
            raise InvalidConfigError(
                "max_expansions must be positive or None",
                config_key="max_expansions",
                config_value=self.max_expansions,
            )
        if self.plan_cache_maxsize <= 0:
            raise InvalidConfigError(
                "plan_cache_maxsize must be positive",
                config_key="plan_cache_maxsize",
                config_value=self.plan_cache_maxsize,
            )
        if self.plan_cache_ttl <= 0:
            raise InvalidConfigError(
                "plan_cache_ttl must be positive",
                config_key="plan_cache_ttl",
                config_value=self.plan_cache_ttl,
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidConfigError(
                "Unknown log level",
                config_key="log_level",
                config_value=self.log_level,
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Dict-style access for callers that look up settings by name."""
        return getattr(self, key, default)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GOAPConfig":
        """
        Build a config from GOAP_* environment variables.

        GOAP_MAX_EXPANSIONS accepts an integer or "none". Boolean fields
        accept 1/0, true/false, yes/no, on/off.

        Raises:
            InvalidConfigError: If a variable cannot be parsed
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            values[f.name] = _parse_value(f.name, raw)

        return cls(**values)


def _parse_value(key: str, raw: str) -> Any:
    text = raw.strip()

    if key == "max_expansions":
        if text.lower() in ("", "none"):
            return None
        return _parse_int(key, text)

    if key in ("cumulative_cost", "plan_cache_enabled"):
        lowered = text.lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise InvalidConfigError(
            "Expected a boolean", config_key=key, config_value=raw
        )

    if key in ("plan_cache_maxsize", "plan_cache_ttl"):
        return _parse_int(key, text)

    return text


def _parse_int(key: str, text: str) -> int:
    try:
        return int(text)
    except ValueError as e:
        raise InvalidConfigError(
            "Expected an integer",
            config_key=key,
            config_value=text,
            original_exception=e,
        ) from e


_config: Optional[GOAPConfig] = None


def get_config() -> GOAPConfig:
    """Return the process-wide config, loading it from the environment once."""
    global _config
    if _config is None:
        _config = GOAPConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() reloads it."""
    global _config
    _config = None
