"""
goap_exceptions.py

Errors raised by the GOAP planner, grouped by where they originate:

    GOAPException
    ├── ModelException            bad facts or action libraries, at build time
    │   ├── InvalidFactError
    │   └── DuplicateActionError
    ├── PlanningException         failures while a search runs
    │   ├── PreconditionResolutionError
    │   └── SearchLimitError
    └── ConfigurationException    rejected settings
        └── InvalidConfigError

A search that simply finds nothing is a normal outcome and returns None.

Each error keeps its structured details in `context`, so callers can log them
without parsing the message:

    try:
        library = ActionLibrary(actions)
    except DuplicateActionError as e:
        logger.error("Rejected action library", extra=e.context)
"""

from typing import Any, Dict, Optional


class GOAPException(Exception):
    """
    Root of the planner's errors.

    str() renders "<message> | Context: k=v, ... | Caused by: <Type>: <text>",
    dropping the parts that are empty. original_exception duplicates
    __cause__ for callers that only see the error object, e.g. after it was
    logged or pickled.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append("Context: " + ", ".join(f"{k}={v}" for k, v in self.context.items()))
        if self.original_exception is not None:
            cause = self.original_exception
            parts.append(f"Caused by: {type(cause).__name__}: {cause}")
        return " | ".join(parts)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# MODEL EXCEPTIONS
# ============================================================================


class ModelException(GOAPException):
    """Base exception for malformed facts, states and action libraries."""


class InvalidFactError(ModelException):
    """
    A fact was built with a value that is neither bool nor str.

    Causes:
    - Numeric or None values passed as fact values
    - A resolver returned an unsupported type
    """

    def __init__(
        self,
        message: str,
        fact_name: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["fact_name"] = fact_name
        context["value"] = repr(value)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class DuplicateActionError(ModelException):
    """
    Two actions in one library share a name.

    The search uses action names as edge labels and to block immediate
    self-repetition, so names must be unique.
    """

    def __init__(self, message: str, action_name: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["action_name"] = action_name
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# PLANNING EXCEPTIONS
# ============================================================================


class PlanningException(GOAPException):
    """Base exception for failures during a search."""


class PreconditionResolutionError(PlanningException):
    """
    A deferred precondition's resolver raised.

    The planner fails fast instead of guessing a value, since a guessed value
    could produce an incorrect plan.
    """

    def __init__(
        self, message: str, precondition_name: Optional[str] = None, **kwargs
    ):
        context = kwargs.get("context", {})
        context["precondition_name"] = precondition_name
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class SearchLimitError(PlanningException):
    """
    The expansion cap was reached before the search finished.

    Only raised when a strict search is requested; otherwise the planner
    returns None.
    """

    def __init__(self, message: str, max_expansions: Optional[int] = None, **kwargs):
        context = kwargs.get("context", {})
        context["max_expansions"] = max_expansions
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(GOAPException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid configuration value.

    Causes:
    - Negative or zero expansion cap
    - Non-numeric environment override
    - Non-positive cache size or TTL
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Any = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["config_key"] = config_key
        context["config_value"] = config_value
        kwargs["context"] = context
        super().__init__(message, **kwargs)
