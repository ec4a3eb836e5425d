"""Capability-indexed registry of copilot providers.

Providers are checked for structural conformance when registered, so a
provider that declares a capability without implementing its operations is
rejected at startup instead of failing on first use.  Choosing among several
capable providers beyond "preferred type first, then registration order" is
left to the caller via ``get_providers``.
"""

from __future__ import annotations

import inspect
from typing import Any, ClassVar, Protocol

from loguru import logger

from copilot.application.exceptions import CapabilityUnavailableError, ProviderConformanceError
from copilot.config import CopilotConfig
from copilot.domain.capabilities import CopilotCapability, CopilotProviderType
from copilot.domain.protocols import CAPABILITY_OPERATIONS, CAPABILITY_TO_PROVIDER, CopilotProvider


class CopilotProviderClass(Protocol):
    """A provider class the registry can build from the process config."""

    type: ClassVar[CopilotProviderType]
    capabilities: ClassVar[list[CopilotCapability]]

    @classmethod
    def assert_config(cls, config: CopilotConfig) -> bool: ...

    def __call__(self, config: CopilotConfig) -> CopilotProvider: ...


def check_conformance(provider: Any) -> None:
    """Verify that *provider* implements every operation it declares.

    Raises:
        ProviderConformanceError: if a base member or a capability operation
            is missing, a non-streaming operation is not a coroutine, or a
            streaming operation is a coroutine instead of returning a stream.
    """
    if not isinstance(provider, CopilotProvider):
        raise ProviderConformanceError(
            f"{type(provider).__name__} does not implement the base provider contract"
        )
    if not inspect.iscoroutinefunction(provider.is_model_available):
        raise ProviderConformanceError(
            f"{type(provider).__name__}.is_model_available must be async"
        )

    for capability in provider.get_capabilities():
        operations = CAPABILITY_OPERATIONS.get(capability)
        if operations is None:
            raise ProviderConformanceError(f"Unknown capability {capability!r}")
        for name, streaming in operations.items():
            operation = getattr(provider, name, None)
            if not callable(operation):
                raise ProviderConformanceError(
                    f"{type(provider).__name__} declares {capability} but lacks {name}()"
                )
            if not streaming and not inspect.iscoroutinefunction(operation):
                raise ProviderConformanceError(
                    f"{type(provider).__name__}.{name} must be async"
                )
            if streaming and inspect.iscoroutinefunction(operation):
                raise ProviderConformanceError(
                    f"{type(provider).__name__}.{name} must return an async iterator, "
                    "not a coroutine"
                )
        if not isinstance(provider, CAPABILITY_TO_PROVIDER[capability]):
            raise ProviderConformanceError(
                f"{type(provider).__name__} does not satisfy the {capability} contract"
            )


class ProviderRegistry:
    """Holds provider instances and answers "who can do X" queries."""

    def __init__(self, config: CopilotConfig) -> None:
        self.config = config
        self._providers: dict[CopilotProviderType, CopilotProvider] = {}

    @property
    def providers(self) -> list[CopilotProvider]:
        return list(self._providers.values())

    def register(self, provider: CopilotProvider) -> None:
        """Add a provider instance after checking its declared capabilities."""
        check_conformance(provider)
        if provider.type in self._providers:
            logger.warning("Replacing registered provider {}", provider.type)
        self._providers[provider.type] = provider
        logger.info(
            "Registered provider {} | capabilities={}",
            provider.type,
            [str(c) for c in provider.get_capabilities()],
        )

    def register_class(self, provider_cls: CopilotProviderClass) -> bool:
        """Instantiate and register *provider_cls* if the config supports it.

        Returns True when the provider was registered.
        """
        if not provider_cls.assert_config(self.config):
            logger.info("Skipping provider {}: not configured", provider_cls.type)
            return False
        self.register(provider_cls(self.config))
        return True

    def unregister(self, provider_type: CopilotProviderType) -> None:
        self._providers.pop(provider_type, None)

    def get_providers(self, capability: CopilotCapability) -> list[CopilotProvider]:
        """Return every provider declaring *capability*, in registration order."""
        return [p for p in self._providers.values() if capability in p.get_capabilities()]

    async def get_provider(
        self,
        capability: CopilotCapability,
        model: str | None = None,
        prefer: CopilotProviderType | None = None,
    ) -> CopilotProvider:
        """Return the first provider that declares *capability*.

        When *model* is given, only providers reporting it available qualify.
        Providers of the *prefer* type are tried before the others.

        Raises:
            CapabilityUnavailableError: if no provider qualifies.
        """
        candidates = self.get_providers(capability)
        if prefer is not None:
            candidates.sort(key=lambda p: p.type != prefer)

        for provider in candidates:
            if model is None or await provider.is_model_available(model):
                return provider

        logger.warning("No provider for {} (model={})", capability, model)
        raise CapabilityUnavailableError(capability, model)
