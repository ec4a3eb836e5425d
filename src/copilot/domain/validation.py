"""Validation entry points that return a result instead of raising.

Callers at the system boundary (HTTP handlers, queue consumers) get a
``ValidationResult`` and decide how to report the failure; code that prefers
exceptions calls ``unwrap()``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from copilot.application.exceptions import MessageValidationError
from copilot.domain.models import ChatHistory, ChatMessage, PromptMessage, SubmittedMessage

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    value: T | None = None
    errors: list[dict[str, Any]] = field(default_factory=list)
    model_name: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        """Return the validated value or raise ``MessageValidationError``."""
        if self.errors:
            raise MessageValidationError(self.model_name, self.errors)
        return self.value  # type: ignore[return-value]


@lru_cache
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def _validate(tp: Any, data: Any, name: str) -> ValidationResult:
    try:
        value = _adapter(tp).validate_python(data)
    except ValidationError as exc:
        return ValidationResult(errors=exc.errors(include_url=False), model_name=name)
    return ValidationResult(value=value, model_name=name)


def validate_prompt_message(data: Any) -> ValidationResult[PromptMessage]:
    return _validate(PromptMessage, data, "PromptMessage")


def validate_chat_message(data: Any) -> ValidationResult[ChatMessage]:
    return _validate(ChatMessage, data, "ChatMessage")


def validate_submitted_message(data: Any) -> ValidationResult[SubmittedMessage]:
    return _validate(SubmittedMessage, data, "SubmittedMessage")


def validate_chat_history(data: Any) -> ValidationResult[ChatHistory]:
    return _validate(ChatHistory, data, "ChatHistory")


def validate_prompt_messages(data: Sequence[Any]) -> ValidationResult[list[PromptMessage]]:
    """Validate an ordered sequence of prompt messages as a whole."""
    return _validate(list[PromptMessage], data, "list[PromptMessage]")
