"""Process-wide copilot configuration using pydantic-settings.

The config is built once at startup and passed to components explicitly;
it is frozen, so request handling cannot mutate it.
"""

from functools import lru_cache
from pathlib import Path

from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent.parent  # src/copilot/ → project root


class OpenAIClientOptions(BaseModel):
    """Options forwarded to the OpenAI client constructor."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    base_url: str | None = None
    organization: str | None = None
    project: str | None = None
    timeout: float = 60.0
    max_retries: int = 2

    def create_client(self) -> AsyncOpenAI:
        """Build an async OpenAI client for a vendor adapter."""
        return AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            organization=self.organization,
            project=self.project,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )


class FalConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str = ""


class CopilotConfig(BaseSettings):
    """All copilot settings, loaded from ``COPILOT_*`` env vars and .env file.

    Nested values use a double underscore, e.g. ``COPILOT_OPENAI__API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="COPILOT_",
        env_nested_delimiter="__",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------
    openai: OpenAIClientOptions = OpenAIClientOptions()
    fal: FalConfig = FalConfig()

    # ------------------------------------------------------------------
    # Feature keys
    # ------------------------------------------------------------------
    unsplash_key: str = ""
    # Registers the deterministic mock provider (local development and tests)
    test_provider: bool = False

    # ------------------------------------------------------------------
    # History store
    # ------------------------------------------------------------------
    history_db_path: Path = _PROJECT_ROOT / "database" / "copilot_history.sqlite"

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------
    def validate_runtime(self) -> None:
        """Check that at least one vendor is configured.

        Call this at application startup (not at import time) so that
        tests can override settings before validation runs.
        """
        if not (self.openai.api_key or self.fal.api_key or self.test_provider):
            raise ValueError(
                "No provider credentials. Set COPILOT_OPENAI__API_KEY or COPILOT_FAL__API_KEY."
            )


@lru_cache
def get_config() -> CopilotConfig:
    """Return the cached config for the process entry point."""
    return CopilotConfig()
