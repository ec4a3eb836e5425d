"""Process startup wiring for the copilot layer.

Builds the shared resources once from an explicit config: logging, the
provider registry and the history store.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from copilot.config import CopilotConfig
from copilot.logging_config import setup_logging
from copilot.providers.mock import MockCopilotProvider
from copilot.services.chat_history_service import ChatHistoryService
from copilot.services.provider_registry import CopilotProviderClass, ProviderRegistry

BUILTIN_PROVIDERS: tuple[CopilotProviderClass, ...] = (MockCopilotProvider,)


def create_registry(
    config: CopilotConfig,
    provider_classes: Iterable[CopilotProviderClass] = BUILTIN_PROVIDERS,
) -> ProviderRegistry:
    """Register every provider class whose configuration is present."""
    registry = ProviderRegistry(config)
    for provider_cls in provider_classes:
        registry.register_class(provider_cls)
    logger.info("Provider registry ready | providers={}", [str(p.type) for p in registry.providers])
    return registry


def open_history(config: CopilotConfig) -> ChatHistoryService:
    history = ChatHistoryService(db_path=config.history_db_path)
    history.connect()
    return history


def bootstrap(config: CopilotConfig) -> tuple[ProviderRegistry, ChatHistoryService]:
    """Configure logging, then build the registry and open the history store.

    Call this once at application startup.
    """
    setup_logging(level=config.log_level, json=config.log_json)
    config.validate_runtime()
    return create_registry(config), open_history(config)
