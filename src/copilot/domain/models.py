"""Domain entities and value objects.

Message shapes are strict pydantic models: unknown keys are rejected rather
than dropped, and wrong-typed values are rejected rather than coerced.  The
wire format uses camelCase keys (``createdAt``, ``sessionId``) while Python
code uses snake_case attributes.  Roles and timestamps are the exceptions to
strict typing: roles arrive as plain strings and timestamps as ISO 8601 text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from copilot.domain.protocols import ChatPrompt


class ChatMessageRole(StrEnum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    USER = "user"


PromptParams = dict[str, str | list[str]]


class _StrictModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        strict=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class _PureMessage(_StrictModel):
    content: str
    attachments: list[str] | None = Field(
        default=None, description="Opaque file/blob references, in order"
    )
    params: PromptParams | None = Field(
        default=None, description="Template placeholder values; None means no substitution"
    )


class PromptMessage(_PureMessage):
    """One conversational turn as authored or replayed."""

    model_config = ConfigDict(frozen=True)

    role: ChatMessageRole = Field(strict=False)


class ChatMessage(PromptMessage):
    """A prompt message once committed to history."""

    created_at: datetime = Field(strict=False)


class SubmittedMessage(_PureMessage):
    """Inbound message appended by a caller.

    The role is assigned by the session, so it is not accepted here, and
    ``content`` may be omitted for attachment-only submissions.
    """

    session_id: str
    content: str | None = None


class ChatHistory(_StrictModel):
    """Read-optimised projection of a session's exchange."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    action: str | None = None
    tokens: int = Field(ge=0, description="Tokens attributable to this record")
    messages: list[ChatMessage | PromptMessage]
    created_at: datetime = Field(strict=False)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@dataclass
class ChatSessionOptions:
    user_id: str
    workspace_id: str
    doc_id: str
    prompt_name: str


@dataclass
class ChatSessionState:
    """Live state of an open session, owned by the session that created it."""

    session_id: str
    user_id: str
    workspace_id: str
    doc_id: str
    prompt: ChatPrompt
    messages: list[ChatMessage] = field(default_factory=list)


class ListHistoriesOptions(_StrictModel):
    """Filters for history listing.

    ``action`` is either a boolean (``True`` keeps only action sessions,
    ``False`` only plain chats) or an exact action tag.
    """

    action: bool | str | None = None
    limit: int | None = Field(default=None, ge=0)
    skip: int | None = Field(default=None, ge=0)
    session_id: str | None = None
