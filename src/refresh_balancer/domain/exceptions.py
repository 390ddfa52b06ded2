"""Domain exceptions for the refresh balancer.

All package-specific exceptions inherit from ``RefreshBalancerError`` so
callers can catch the full family with a single ``except`` clause when needed.
"""

from __future__ import annotations

from typing import Any


class RefreshBalancerError(Exception):
    """Base exception for all refresh balancer errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class ValidationError(RefreshBalancerError):
    """Raised when a raw schedule cannot be turned into a legal ``Schedule``.

    Always caller-recoverable: the offending record or edit is rejected and
    reported, sibling records keep processing.

    Attributes
    ----------
    field:
        Raw field name that violated a rule (camelCase, as on the wire).
    rule:
        Short machine-readable rule identifier, e.g. ``"allowed_values"``.
    message:
        Human-readable explanation, e.g. ``"Hourly requires intervalHours == 1"``.
    """

    def __init__(
        self,
        field: str,
        rule: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.rule = rule
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}

    def __repr__(self) -> str:
        return f"ValidationError(field={self.field!r}, rule={self.rule!r}, message={self.message!r})"


class SimulationError(RefreshBalancerError):
    """Raised when a requested what-if move cannot be expressed.

    Hourly schedules span a window of hours and cannot be moved to a single
    target hour.
    """

    def __init__(
        self,
        message: str = "Simulation failed",
        task_id: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.task_id = task_id


class ConfigurationError(RefreshBalancerError):
    """Raised when a configuration file or section cannot be loaded."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        source: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source
