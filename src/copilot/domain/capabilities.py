"""Capability kinds, provider identities and per-call option shapes."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from copilot.domain.signals import AbortSignal


class CopilotProviderType(StrEnum):
    FAL = "fal"
    OPENAI = "openai"
    # only for tests and local development
    TEST = "test"


class CopilotCapability(StrEnum):
    TEXT_TO_TEXT = "text-to-text"
    TEXT_TO_EMBEDDING = "text-to-embedding"
    TEXT_TO_IMAGE = "text-to-image"
    IMAGE_TO_IMAGE = "image-to-image"
    IMAGE_TO_TEXT = "image-to-text"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class CopilotProviderOptions(BaseModel):
    """Fields shared by every capability's options."""

    model_config = ConfigDict(
        extra="forbid",
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    signal: AbortSignal | None = Field(default=None, description="Cooperative cancellation")
    user: str | None = Field(default=None, description="Caller identity for vendor accounting")


class CopilotChatOptions(CopilotProviderOptions):
    temperature: float | None = None
    max_tokens: int | None = Field(default=None, gt=0)


class CopilotEmbeddingOptions(CopilotProviderOptions):
    dimensions: int = Field(gt=0, description="Length of every returned vector")


class CopilotImageOptions(CopilotProviderOptions):
    seed: int | None = Field(default=None, description="Seed for reproducible generation")
