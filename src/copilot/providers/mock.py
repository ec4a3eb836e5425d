"""Deterministic provider for tests and local development (no API calls)."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import ClassVar

from copilot.config import CopilotConfig
from copilot.domain.capabilities import (
    CopilotCapability,
    CopilotChatOptions,
    CopilotEmbeddingOptions,
    CopilotImageOptions,
    CopilotProviderOptions,
    CopilotProviderType,
)
from copilot.domain.catalog import AvailableModels
from copilot.domain.models import PromptMessage
from copilot.domain.signals import AbortSignal
from copilot.services.streaming import abortable

DEFAULT_DIMENSIONS = 256


def _signal(options: CopilotProviderOptions | None) -> AbortSignal | None:
    return options.signal if options else None


class MockCopilotProvider:
    """Implements every capability with canned, input-derived output."""

    type: ClassVar[CopilotProviderType] = CopilotProviderType.TEST
    capabilities: ClassVar[list[CopilotCapability]] = [
        CopilotCapability.TEXT_TO_TEXT,
        CopilotCapability.TEXT_TO_EMBEDDING,
        CopilotCapability.TEXT_TO_IMAGE,
        CopilotCapability.IMAGE_TO_TEXT,
        CopilotCapability.IMAGE_TO_IMAGE,
    ]

    def __init__(self, config: CopilotConfig | None = None) -> None:
        self.config = config
        self._models = {"test", *AvailableModels.__members__, *(m.value for m in AvailableModels)}

    @classmethod
    def assert_config(cls, config: CopilotConfig) -> bool:
        return config.test_provider

    def get_capabilities(self) -> list[CopilotCapability]:
        return list(self.capabilities)

    async def is_model_available(self, model: str) -> bool:
        return model in self._models

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    @staticmethod
    def _reply(messages: Sequence[PromptMessage]) -> str:
        if not messages:
            raise ValueError("messages must not be empty")
        return f"generated: {messages[-1].content}"

    async def generate_text(
        self,
        messages: Sequence[PromptMessage],
        model: str | None = None,
        options: CopilotChatOptions | None = None,
    ) -> str:
        signal = _signal(options)
        if signal is not None:
            signal.throw_if_aborted()
        return self._reply(messages)

    def generate_text_stream(
        self,
        messages: Sequence[PromptMessage],
        model: str | None = None,
        options: CopilotChatOptions | None = None,
    ) -> AsyncIterator[str]:
        words = self._reply(messages).split(" ")
        chunks = [words[0], *(f" {w}" for w in words[1:])]
        return abortable(self._emit(chunks), _signal(options))

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    async def generate_embedding(
        self,
        messages: str | Sequence[str],
        model: str,
        options: CopilotEmbeddingOptions | None = None,
    ) -> list[list[float]]:
        signal = _signal(options)
        if signal is not None:
            signal.throw_if_aborted()
        texts = [messages] if isinstance(messages, str) else list(messages)
        dimensions = options.dimensions if options else DEFAULT_DIMENSIONS
        return [[((len(text) + i) % 10) / 10 for i in range(dimensions)] for text in texts]

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def _image_urls(
        messages: Sequence[PromptMessage], model: str | None, options: CopilotImageOptions | None
    ) -> list[str]:
        seed = options.seed if options and options.seed is not None else 0
        urls = [f"https://mock.copilot.local/{model or 'test'}/{seed}/{len(messages)}.png"]
        for message in messages:
            urls.extend(message.attachments or [])
        return urls

    async def generate_images(
        self,
        messages: Sequence[PromptMessage],
        model: str,
        options: CopilotImageOptions | None = None,
    ) -> list[str]:
        signal = _signal(options)
        if signal is not None:
            signal.throw_if_aborted()
        return self._image_urls(messages, model, options)

    def generate_images_stream(
        self,
        messages: Sequence[PromptMessage],
        model: str | None = None,
        options: CopilotImageOptions | None = None,
    ) -> AsyncIterator[str]:
        return abortable(self._emit(self._image_urls(messages, model, options)), _signal(options))

    @staticmethod
    async def _emit(chunks: list[str]) -> AsyncIterator[str]:
        for chunk in chunks:
            await asyncio.sleep(0)
            yield chunk
