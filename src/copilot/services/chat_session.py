"""Live chat session wrapper around ``ChatSessionState``.

A session is owned by the context that opened it; nothing here is shared
between sessions, so no locking is needed.
"""

from __future__ import annotations

from datetime import UTC, datetime

from loguru import logger

from copilot.application.exceptions import SessionActionError
from copilot.domain.models import (
    ChatMessage,
    ChatMessageRole,
    ChatSessionState,
    PromptMessage,
    PromptParams,
    SubmittedMessage,
)
from copilot.domain.protocols import IChatHistoryService
from copilot.services.token_encoder import count_tokens, get_token_encoder

DEFAULT_MAX_TOKEN_SIZE = 3840


class ChatSession:
    def __init__(self, state: ChatSessionState, max_token_size: int = DEFAULT_MAX_TOKEN_SIZE) -> None:
        self.state = state
        self.max_token_size = max_token_size

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def model(self) -> str:
        return self.state.prompt.model

    @property
    def is_action(self) -> bool:
        return bool(self.state.prompt.action)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def push(self, message: ChatMessage) -> None:
        """Append a committed message.

        Action prompts run once: after the first message, further user
        messages are rejected.
        """
        if self.is_action and self.state.messages and message.role == ChatMessageRole.USER:
            raise SessionActionError(
                f"Action '{self.state.prompt.action}' has been taken, no more messages allowed"
            )
        self.state.messages.append(message)

    def submit(self, message: SubmittedMessage) -> ChatMessage:
        """Commit a caller-submitted message as a user turn."""
        if message.session_id != self.session_id:
            raise ValueError(
                f"Message for session {message.session_id} submitted to {self.session_id}"
            )
        chat_message = ChatMessage(
            role=ChatMessageRole.USER,
            content=message.content or "",
            attachments=message.attachments,
            params=message.params,
            created_at=datetime.now(UTC),
        )
        self.push(chat_message)
        return chat_message

    def pop(self) -> ChatMessage | None:
        return self.state.messages.pop() if self.state.messages else None

    def take_messages(self) -> list[ChatMessage]:
        """Return the newest messages that fit in the token budget, oldest first.

        The rendered prompt's own tokens are counted first.  Action sessions
        only ever replay their last message.
        """
        messages = self.state.messages
        if self.is_action:
            return messages[-1:]

        encoder = get_token_encoder(self.model)
        taken: list[ChatMessage] = []
        size = self.state.prompt.tokens
        for message in reversed(messages):
            if encoder is not None:
                size += len(encoder.encode_ordinary(message.content))
            if size > self.max_token_size:
                break
            taken.append(message)
        taken.reverse()
        return taken

    def count_tokens(self) -> int:
        return count_tokens(self.state.messages, self.model)

    def finish(self, params: PromptParams | None = None) -> list[PromptMessage]:
        """Render the prompt and append the history that fits the budget.

        Without explicit *params*, the first replayed message's params are
        used.  Messages with neither attachments nor non-blank content are
        dropped.
        """
        messages = self.take_messages()
        if not params:
            params = (messages[0].params if messages else None) or {}
        rendered = self.state.prompt.finish(params, self.session_id)
        return [*rendered, *(m for m in messages if m.content.strip() or m.attachments)]

    def save(self, history: IChatHistoryService) -> None:
        tokens = self.count_tokens()
        history.save_session(self.state, tokens=tokens)
        logger.debug(
            "Saved session {} | messages={} tokens={}",
            self.session_id,
            len(self.state.messages),
            tokens,
        )
