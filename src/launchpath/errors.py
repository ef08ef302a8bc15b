"""Exception hierarchy shared by storage, generation and workflow layers."""

from __future__ import annotations


class LaunchPathError(Exception):
    """Base class for all application errors."""


class RequestValidationError(LaunchPathError):
    """Malformed request body; surfaced as HTTP 400 before any streaming starts."""


class SystemNotFoundError(LaunchPathError):
    def __init__(self, system_id: str):
        super().__init__(f"System not found: {system_id}")
        self.system_id = system_id


class PersistenceError(LaunchPathError):
    """A document-store read or write failed."""


class GenerationError(LaunchPathError):
    """The model call failed or returned output that does not fit the schema."""


class QualityGateError(GenerationError):
    """Output validators still failed after every corrective retry."""

    def __init__(self, step_id: str, violations: list[str]):
        super().__init__(f"{step_id} failed quality checks: {'; '.join(violations)}")
        self.step_id = step_id
        self.violations = violations


class WorkflowError(LaunchPathError):
    """A workflow could not produce its artifact.

    ``reason`` is a short user-safe string such as ``"workflow failed"`` or
    ``"no niche selected"``.
    """

    def __init__(self, reason: str, step_id: str | None = None):
        super().__init__(reason if step_id is None else f"{reason} (at {step_id})")
        self.reason = reason
        self.step_id = step_id


class PreconditionError(LaunchPathError):
    """An action tool was invoked before the session state allowed it."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []
