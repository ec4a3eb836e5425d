"""Helpers for lazily produced provider output."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator
from typing import TypeVar

from loguru import logger

from copilot.application.exceptions import CopilotAbortError
from copilot.domain.signals import AbortSignal

T = TypeVar("T")


async def _pull(iterator: AsyncIterator[T]) -> T:
    return await anext(iterator)


async def _next_or_abort(iterator: AsyncIterator[T], signal: AbortSignal) -> T | None:
    """Await the next chunk, giving up as soon as *signal* fires.

    Returns None when the abort won; the pending pull is cancelled and
    awaited so the source is idle before it gets closed.
    """
    pull = asyncio.create_task(_pull(iterator))
    aborted = asyncio.create_task(signal.wait())
    try:
        await asyncio.wait({pull, aborted}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        aborted.cancel()
        if not pull.done():
            pull.cancel()
            await asyncio.wait({pull})
    if pull.cancelled():
        return None
    return pull.result()


async def abortable(stream: AsyncIterable[T], signal: AbortSignal | None) -> AsyncIterator[T]:
    """Re-yield *stream*, stopping once *signal* is aborted.

    Waiting for the next chunk is raced against the signal, so an abort
    interrupts a source that is stalled on its vendor.  Cancellation after at
    least one chunk ends the sequence like a normal completion; cancellation
    before any output raises ``CopilotAbortError``.  The wrapped iterator is
    always closed, including when the consumer stops iterating early.
    """
    iterator = aiter(stream)
    produced = 0

    def stopped() -> bool:
        if signal is None or not signal.aborted:
            return False
        if produced == 0:
            raise CopilotAbortError(signal.reason or "Stream aborted before output")
        logger.debug("Stream aborted after {} chunks", produced)
        return True

    try:
        while not stopped():
            try:
                if signal is None:
                    chunk = await anext(iterator)
                else:
                    chunk = await _next_or_abort(iterator, signal)
            except StopAsyncIteration:
                return
            if stopped():
                return
            produced += 1
            yield chunk
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()
