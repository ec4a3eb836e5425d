"""Model-aware tokenizer selection for budgeting prompts before sending them.

Selection never raises: callers use it speculatively to decide whether to
chunk input, and "no encoder" tells them no estimate is available.
"""

from __future__ import annotations

from collections.abc import Iterable

import tiktoken
from loguru import logger

from copilot.domain.catalog import resolve_model
from copilot.domain.models import PromptMessage

FALLBACK_ENCODING = "cl100k_base"


def get_token_encoder(model: str | None) -> tiktoken.Encoding | None:
    """Return the tokenizer for a logical model name, or None.

    - GPT-family models get their model-specific encoding.
    - DALL-E models are not token-metered on input and get None.
    - Other catalog models (embedding, moderation) share ``cl100k_base``.
    - Missing or unknown names get None.
    """
    resolved = resolve_model(model)
    if resolved is None:
        if model:
            logger.debug("No token encoder for unknown model '{}'", model)
        return None

    model_id = resolved.value
    if model_id.startswith("gpt"):
        return tiktoken.encoding_for_model(model_id)
    if model_id.startswith("dall"):
        return None
    return tiktoken.get_encoding(FALLBACK_ENCODING)


def count_tokens(messages: Iterable[PromptMessage], model: str | None) -> int:
    """Sum the content tokens of *messages* for *model* (0 without an encoder)."""
    encoder = get_token_encoder(model)
    if encoder is None:
        return 0
    return sum(len(encoder.encode_ordinary(m.content)) for m in messages)
