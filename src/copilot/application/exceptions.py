"""Application-level exceptions.

Callers branch on these types: a malformed request, a capability nobody
offers and a cancelled stream are distinct conditions.  Failures raised by a
provider itself are never wrapped and propagate as-is.
"""

from __future__ import annotations

from typing import Any


class CopilotError(Exception):
    """Base class for every error raised by this package."""


class MessageValidationError(CopilotError, ValueError):
    """Raised when a payload does not match its declared message shape."""

    def __init__(self, model_name: str, errors: list[dict[str, Any]]) -> None:
        self.model_name = model_name
        self.errors = errors
        locs = ", ".join(".".join(str(p) for p in e.get("loc", ())) or "<root>" for e in errors)
        super().__init__(f"Invalid {model_name}: {locs}")


class CapabilityUnavailableError(CopilotError, LookupError):
    """Raised when no registered provider can serve a capability."""

    def __init__(self, capability: Any, model: str | None = None) -> None:
        self.capability = capability
        self.model = model
        detail = f" with model '{model}'" if model else ""
        super().__init__(f"No provider offers {capability}{detail}")


class ProviderConformanceError(CopilotError, TypeError):
    """Raised when a provider declares a capability it does not implement."""


class CopilotAbortError(CopilotError):
    """Raised when an operation is cancelled before producing any output."""


class SessionActionError(CopilotError, ValueError):
    """Raised when a message is pushed to an action session that already ran."""
