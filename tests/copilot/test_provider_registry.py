"""Tests for the capability taxonomy and the provider registry."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from copilot.application.exceptions import (
    CapabilityUnavailableError,
    MessageValidationError,
    ProviderConformanceError,
)
from copilot.config import CopilotConfig
from copilot.domain.capabilities import CopilotCapability, CopilotProviderType
from copilot.domain.protocols import (
    CAPABILITY_OPERATIONS,
    CAPABILITY_TO_PROVIDER,
    CopilotTextToEmbeddingProvider,
    CopilotTextToTextProvider,
)
from copilot.providers.mock import MockCopilotProvider
from copilot.services.provider_registry import ProviderRegistry, check_conformance

# ---------------------------------------------------------------------------
# Provider doubles
# ---------------------------------------------------------------------------


class EmbeddingOnlyProvider:
    type = CopilotProviderType.OPENAI

    def __init__(self, models: set[str] | None = None) -> None:
        self.models = models or {"text-embedding-3-small"}

    def get_capabilities(self):
        return [CopilotCapability.TEXT_TO_EMBEDDING]

    async def is_model_available(self, model: str) -> bool:
        return model in self.models

    async def generate_embedding(self, messages, model, options=None):
        return [[0.0] * options.dimensions]


class ChatProvider:
    type = CopilotProviderType.OPENAI

    def get_capabilities(self):
        return [CopilotCapability.TEXT_TO_TEXT]

    async def is_model_available(self, model: str) -> bool:
        return True

    async def generate_text(self, messages, model=None, options=None):
        return "from openai"

    async def generate_text_stream(self, messages, model=None, options=None) -> AsyncIterator[str]:
        yield "from openai"


class MissingStreamProvider:
    """Declares text-to-image but only implements the non-streaming operation."""

    type = CopilotProviderType.FAL

    def get_capabilities(self):
        return [CopilotCapability.TEXT_TO_IMAGE]

    async def is_model_available(self, model: str) -> bool:
        return True

    async def generate_images(self, messages, model, options=None):
        return []


class SyncTextProvider(ChatProvider):
    def generate_text(self, messages, model=None, options=None):  # not a coroutine
        return "sync"


class SyncAvailabilityProvider(ChatProvider):
    def is_model_available(self, model: str) -> bool:
        return True


class CoroutineStreamProvider(ChatProvider):
    async def generate_text_stream(self, messages, model=None, options=None):
        return "from openai"


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


class TestTaxonomy:
    def test_mapping_is_exhaustive(self):
        assert set(CAPABILITY_TO_PROVIDER) == set(CopilotCapability)
        assert set(CAPABILITY_OPERATIONS) == set(CopilotCapability)

    def test_capability_values(self):
        assert {c.value for c in CopilotCapability} == {
            "text-to-text",
            "text-to-embedding",
            "text-to-image",
            "image-to-image",
            "image-to-text",
        }

    def test_operation_sets(self):
        assert set(CAPABILITY_OPERATIONS[CopilotCapability.TEXT_TO_EMBEDDING]) == {
            "generate_embedding"
        }
        assert set(CAPABILITY_OPERATIONS[CopilotCapability.IMAGE_TO_IMAGE]) == {
            "generate_images",
            "generate_images_stream",
        }


# ---------------------------------------------------------------------------
# Conformance
# ---------------------------------------------------------------------------


class TestConformance:
    def test_mock_provider_satisfies_every_declared_contract(self, mock_provider):
        check_conformance(mock_provider)
        for capability in mock_provider.get_capabilities():
            assert isinstance(mock_provider, CAPABILITY_TO_PROVIDER[capability])

    def test_single_capability_provider(self):
        provider = EmbeddingOnlyProvider()
        check_conformance(provider)
        assert isinstance(provider, CopilotTextToEmbeddingProvider)
        assert not isinstance(provider, CopilotTextToTextProvider)

    def test_missing_operation_rejected(self):
        with pytest.raises(ProviderConformanceError, match="generate_images_stream"):
            check_conformance(MissingStreamProvider())

    def test_sync_operation_rejected(self):
        with pytest.raises(ProviderConformanceError, match="generate_text must be async"):
            check_conformance(SyncTextProvider())

    def test_coroutine_stream_rejected(self):
        with pytest.raises(ProviderConformanceError, match="generate_text_stream must return"):
            check_conformance(CoroutineStreamProvider())

    def test_async_generator_stream_accepted(self):
        check_conformance(ChatProvider())

    def test_sync_availability_rejected(self):
        with pytest.raises(ProviderConformanceError, match="is_model_available"):
            check_conformance(SyncAvailabilityProvider())

    def test_non_provider_rejected(self):
        with pytest.raises(ProviderConformanceError):
            check_conformance(object())


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_register_rejects_nonconforming_provider(self, config: CopilotConfig):
        registry = ProviderRegistry(config)
        with pytest.raises(ProviderConformanceError):
            registry.register(MissingStreamProvider())
        assert registry.providers == []

    def test_get_providers_by_capability(self, registry: ProviderRegistry, mock_provider):
        embedding = EmbeddingOnlyProvider()
        registry.register(embedding)

        assert registry.get_providers(CopilotCapability.TEXT_TO_EMBEDDING) == [
            mock_provider,
            embedding,
        ]
        assert registry.get_providers(CopilotCapability.TEXT_TO_TEXT) == [mock_provider]

    def test_get_providers_empty(self, config: CopilotConfig):
        assert ProviderRegistry(config).get_providers(CopilotCapability.IMAGE_TO_TEXT) == []

    async def test_get_provider_first_registered(self, registry: ProviderRegistry, mock_provider):
        registry.register(ChatProvider())
        provider = await registry.get_provider(CopilotCapability.TEXT_TO_TEXT)
        assert provider is mock_provider

    async def test_get_provider_prefers_type(self, registry: ProviderRegistry):
        chat = ChatProvider()
        registry.register(chat)
        provider = await registry.get_provider(
            CopilotCapability.TEXT_TO_TEXT, prefer=CopilotProviderType.OPENAI
        )
        assert provider is chat

    async def test_get_provider_checks_model(self, config: CopilotConfig):
        registry = ProviderRegistry(config)
        registry.register(EmbeddingOnlyProvider())
        provider = await registry.get_provider(
            CopilotCapability.TEXT_TO_EMBEDDING, model="text-embedding-3-small"
        )
        assert provider.type == CopilotProviderType.OPENAI

        with pytest.raises(CapabilityUnavailableError, match="text-embedding-3-large"):
            await registry.get_provider(
                CopilotCapability.TEXT_TO_EMBEDDING, model="text-embedding-3-large"
            )

    async def test_unavailable_capability_is_distinct(self, config: CopilotConfig):
        registry = ProviderRegistry(config)
        registry.register(EmbeddingOnlyProvider())
        with pytest.raises(CapabilityUnavailableError) as exc_info:
            await registry.get_provider(CopilotCapability.IMAGE_TO_IMAGE)
        assert exc_info.value.capability == CopilotCapability.IMAGE_TO_IMAGE
        assert isinstance(exc_info.value, LookupError)
        assert not isinstance(exc_info.value, MessageValidationError)

    def test_unregister(self, registry: ProviderRegistry):
        registry.unregister(CopilotProviderType.TEST)
        assert registry.providers == []

    def test_register_class_respects_config(self):
        enabled = ProviderRegistry(CopilotConfig(_env_file=None, test_provider=True))
        assert enabled.register_class(MockCopilotProvider)
        assert [p.type for p in enabled.providers] == [CopilotProviderType.TEST]

        disabled = ProviderRegistry(CopilotConfig(_env_file=None, test_provider=False))
        assert not disabled.register_class(MockCopilotProvider)
        assert disabled.providers == []
