"""Static catalog of the models the copilot knows about.

Member names are the logical identifiers callers use (``Gpt4Omni``); member
values are the vendor model ids (``gpt-4o``).  Adding a vendor model means
adding it here and, when it is text-generating, checking that
``services.token_encoder`` resolves an encoder for it.
"""

from __future__ import annotations

from enum import Enum, StrEnum


class AvailableModels(StrEnum):
    # text to text
    Gpt4Omni = "gpt-4o"
    Gpt4VisionPreview = "gpt-4-vision-preview"
    Gpt4TurboPreview = "gpt-4-turbo-preview"
    Gpt35Turbo = "gpt-3.5-turbo"
    # embeddings
    TextEmbedding3Large = "text-embedding-3-large"
    TextEmbedding3Small = "text-embedding-3-small"
    TextEmbeddingAda002 = "text-embedding-ada-002"
    # moderation
    TextModerationLatest = "text-moderation-latest"
    TextModerationStable = "text-moderation-stable"
    # text to image
    DallE3 = "dall-e-3"


class ModelPurpose(Enum):
    TEXT_TO_TEXT = "text-to-text"
    EMBEDDING = "embedding"
    MODERATION = "moderation"
    TEXT_TO_IMAGE = "text-to-image"


_PURPOSES: dict[AvailableModels, ModelPurpose] = {
    AvailableModels.Gpt4Omni: ModelPurpose.TEXT_TO_TEXT,
    AvailableModels.Gpt4VisionPreview: ModelPurpose.TEXT_TO_TEXT,
    AvailableModels.Gpt4TurboPreview: ModelPurpose.TEXT_TO_TEXT,
    AvailableModels.Gpt35Turbo: ModelPurpose.TEXT_TO_TEXT,
    AvailableModels.TextEmbedding3Large: ModelPurpose.EMBEDDING,
    AvailableModels.TextEmbedding3Small: ModelPurpose.EMBEDDING,
    AvailableModels.TextEmbeddingAda002: ModelPurpose.EMBEDDING,
    AvailableModels.TextModerationLatest: ModelPurpose.MODERATION,
    AvailableModels.TextModerationStable: ModelPurpose.MODERATION,
    AvailableModels.DallE3: ModelPurpose.TEXT_TO_IMAGE,
}

assert set(_PURPOSES) == set(AvailableModels), "every catalog model needs a purpose"


def resolve_model(name: str | None) -> AvailableModels | None:
    """Look up a model by its logical name. Returns None when unknown."""
    if not name:
        return None
    return AvailableModels.__members__.get(name)


def purpose_of(model: AvailableModels) -> ModelPurpose:
    return _PURPOSES[model]


def models_for(purpose: ModelPurpose) -> list[AvailableModels]:
    """Return the catalog models serving *purpose*, in declaration order."""
    return [m for m in AvailableModels if _PURPOSES[m] is purpose]
