"""Shared fixtures for copilot tests."""

import sys
from dataclasses import dataclass
from pathlib import Path

# Add src/ to sys.path so `import copilot` works without an editable install.
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

import pytest

from copilot.config import CopilotConfig
from copilot.domain.models import ChatMessageRole, PromptMessage, PromptParams
from copilot.providers.mock import MockCopilotProvider
from copilot.services.chat_history_service import ChatHistoryService
from copilot.services.provider_registry import ProviderRegistry


def pytest_configure(config):
    """Set pytest-asyncio mode to auto so async test functions work without markers."""
    config.option.asyncio_mode = "auto"


@dataclass
class FakePrompt:
    """Minimal ChatPrompt: renders a single system message."""

    name: str = "chat:general"
    action: str | None = None
    model: str = "DallE3"
    tokens: int = 0

    def finish(self, params: PromptParams, session_id: str | None = None) -> list[PromptMessage]:
        rendered = ", ".join(f"{k}={v}" for k, v in sorted(params.items()))
        return [PromptMessage(role=ChatMessageRole.SYSTEM, content=f"{self.name}[{rendered}]")]


@pytest.fixture()
def config() -> CopilotConfig:
    """A config isolated from the developer's .env file."""
    return CopilotConfig(_env_file=None, test_provider=True)


@pytest.fixture()
def mock_provider(config: CopilotConfig) -> MockCopilotProvider:
    return MockCopilotProvider(config)


@pytest.fixture()
def registry(config: CopilotConfig, mock_provider: MockCopilotProvider) -> ProviderRegistry:
    reg = ProviderRegistry(config)
    reg.register(mock_provider)
    return reg


@pytest.fixture()
def history_service(tmp_path: Path) -> ChatHistoryService:
    """A ChatHistoryService connected to a temp database."""
    svc = ChatHistoryService(db_path=tmp_path / "history.sqlite")
    svc.connect()
    yield svc
    svc.close()
