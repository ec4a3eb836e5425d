"""Cooperative cancellation tokens passed to providers via options."""

from __future__ import annotations

import asyncio

from copilot.application.exceptions import CopilotAbortError


class AbortSignal:
    """Read side of a cancellation token.

    Providers check ``aborted`` (or call ``throw_if_aborted``) at each
    suspension point and stop producing output once it is set.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    async def wait(self) -> None:
        """Suspend until the signal is aborted."""
        await self._event.wait()

    def throw_if_aborted(self) -> None:
        if self.aborted:
            raise CopilotAbortError(self._reason or "Operation aborted")

    def _abort(self, reason: str | None) -> None:
        if self.aborted:
            return
        self._reason = reason
        self._event.set()

    def __repr__(self) -> str:
        return f"AbortSignal(aborted={self.aborted})"


class AbortController:
    """Owner of an ``AbortSignal``; the only way to trigger it."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: str | None = None) -> None:
        self.signal._abort(reason)
