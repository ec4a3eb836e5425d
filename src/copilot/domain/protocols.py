"""Domain service interfaces (ports).

Concrete vendor adapters live outside this package; they satisfy these
protocols structurally.  ``CAPABILITY_TO_PROVIDER`` and
``CAPABILITY_OPERATIONS`` must cover every ``CopilotCapability``: adding a
capability without its contract fails at import time.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol, runtime_checkable

from copilot.domain.capabilities import (
    CopilotCapability,
    CopilotChatOptions,
    CopilotEmbeddingOptions,
    CopilotImageOptions,
    CopilotProviderType,
)
from copilot.domain.models import (
    ChatHistory,
    ChatMessage,
    ChatSessionOptions,
    ChatSessionState,
    ListHistoriesOptions,
    PromptMessage,
    PromptParams,
)

# ---------------------------------------------------------------------------
# Prompt (rendering is owned by the prompt module, opaque here)
# ---------------------------------------------------------------------------


@runtime_checkable
class ChatPrompt(Protocol):
    name: str
    action: str | None
    model: str
    # Token cost of the rendered prompt, counted against the history budget.
    tokens: int

    def finish(self, params: PromptParams, session_id: str | None = None) -> list[PromptMessage]: ...


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


@runtime_checkable
class CopilotProvider(Protocol):
    """Base contract every provider satisfies."""

    @property
    def type(self) -> CopilotProviderType: ...

    def get_capabilities(self) -> list[CopilotCapability]: ...

    async def is_model_available(self, model: str) -> bool: ...


@runtime_checkable
class CopilotTextToTextProvider(CopilotProvider, Protocol):
    async def generate_text(
        self,
        messages: Sequence[PromptMessage],
        model: str | None = None,
        options: CopilotChatOptions | None = None,
    ) -> str: ...

    def generate_text_stream(
        self,
        messages: Sequence[PromptMessage],
        model: str | None = None,
        options: CopilotChatOptions | None = None,
    ) -> AsyncIterator[str]: ...


@runtime_checkable
class CopilotTextToEmbeddingProvider(CopilotProvider, Protocol):
    async def generate_embedding(
        self,
        messages: str | Sequence[str],
        model: str,
        options: CopilotEmbeddingOptions | None = None,
    ) -> list[list[float]]: ...


@runtime_checkable
class CopilotTextToImageProvider(CopilotProvider, Protocol):
    async def generate_images(
        self,
        messages: Sequence[PromptMessage],
        model: str,
        options: CopilotImageOptions | None = None,
    ) -> list[str]: ...

    def generate_images_stream(
        self,
        messages: Sequence[PromptMessage],
        model: str | None = None,
        options: CopilotImageOptions | None = None,
    ) -> AsyncIterator[str]: ...


@runtime_checkable
class CopilotImageToTextProvider(CopilotProvider, Protocol):
    async def generate_text(
        self,
        messages: Sequence[PromptMessage],
        model: str,
        options: CopilotChatOptions | None = None,
    ) -> str: ...

    def generate_text_stream(
        self,
        messages: Sequence[PromptMessage],
        model: str,
        options: CopilotChatOptions | None = None,
    ) -> AsyncIterator[str]: ...


@runtime_checkable
class CopilotImageToImageProvider(CopilotProvider, Protocol):
    async def generate_images(
        self,
        messages: Sequence[PromptMessage],
        model: str,
        options: CopilotImageOptions | None = None,
    ) -> list[str]: ...

    def generate_images_stream(
        self,
        messages: Sequence[PromptMessage],
        model: str,
        options: CopilotImageOptions | None = None,
    ) -> AsyncIterator[str]: ...


CAPABILITY_TO_PROVIDER: dict[CopilotCapability, type[CopilotProvider]] = {
    CopilotCapability.TEXT_TO_TEXT: CopilotTextToTextProvider,
    CopilotCapability.TEXT_TO_EMBEDDING: CopilotTextToEmbeddingProvider,
    CopilotCapability.TEXT_TO_IMAGE: CopilotTextToImageProvider,
    CopilotCapability.IMAGE_TO_TEXT: CopilotImageToTextProvider,
    CopilotCapability.IMAGE_TO_IMAGE: CopilotImageToImageProvider,
}

# Operation name -> True when it returns a lazy stream rather than a coroutine.
CAPABILITY_OPERATIONS: dict[CopilotCapability, dict[str, bool]] = {
    CopilotCapability.TEXT_TO_TEXT: {"generate_text": False, "generate_text_stream": True},
    CopilotCapability.TEXT_TO_EMBEDDING: {"generate_embedding": False},
    CopilotCapability.TEXT_TO_IMAGE: {"generate_images": False, "generate_images_stream": True},
    CopilotCapability.IMAGE_TO_TEXT: {"generate_text": False, "generate_text_stream": True},
    CopilotCapability.IMAGE_TO_IMAGE: {"generate_images": False, "generate_images_stream": True},
}

assert set(CAPABILITY_TO_PROVIDER) == set(CopilotCapability), "capability without a provider contract"
assert set(CAPABILITY_OPERATIONS) == set(CopilotCapability), "capability without an operation set"


# ---------------------------------------------------------------------------
# Chat History
# ---------------------------------------------------------------------------


@runtime_checkable
class IChatHistoryService(Protocol):
    """Interface for chat history persistence.

    Implementations: ChatHistoryService (SQLite-backed).
    """

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def create_session(
        self,
        options: ChatSessionOptions,
        action: str | None = None,
        session_id: str | None = None,
    ) -> str: ...

    def save_session(self, state: ChatSessionState, tokens: int = 0) -> None: ...

    def get_session_messages(self, session_id: str) -> list[ChatMessage]: ...

    def list_histories(
        self,
        user_id: str,
        workspace_id: str,
        doc_id: str | None = None,
        options: ListHistoriesOptions | None = None,
    ) -> list[ChatHistory]: ...
