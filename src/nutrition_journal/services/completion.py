"""Chat-completion contract, failure classes and retry with backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
BASE_DELAY_SECONDS = 0.1


@dataclass(frozen=True)
class CompletionRequest:
    """A composed chat-completion request."""

    model: str
    temperature: float
    messages: list[dict[str, str]]

    def to_payload(self) -> dict[str, object]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "messages": self.messages,
        }


class CompletionError(Exception):
    """Base class for upstream completion failures."""


class TransientCompletionError(CompletionError):
    """Upstream failure likely to succeed on retry (timeouts, 429, 5xx)."""


class PermanentCompletionError(CompletionError):
    """Unusable request or response; retrying will not help."""


class CompletionClient(Protocol):
    """Interface for LLM chat completions returning parsed JSON."""

    async def complete(self, request: CompletionRequest) -> object:
        """Return the JSON decoded from the first choice's message content."""


@dataclass
class UnavailableCompletionClient(CompletionClient):
    """Stands in for a provider that cannot be used, failing every call."""

    reason: str

    async def complete(self, request: CompletionRequest) -> object:
        raise PermanentCompletionError(self.reason)


@dataclass
class RetryPolicy:
    """Bounded exponential backoff for transient failures."""

    max_attempts: int = MAX_RETRIES
    base_delay: float = BASE_DELAY_SECONDS
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return (2 ** (attempt - 1)) * self.base_delay


async def complete_with_retry(
    client: CompletionClient,
    request: CompletionRequest,
    policy: RetryPolicy,
) -> object:
    """Call ``client`` until it succeeds or transient failures run out.

    Permanent failures propagate on the first occurrence. After the last
    attempt the final transient failure is re-raised.
    """
    attempt = 1
    while True:
        try:
            return await client.complete(request)
        except TransientCompletionError as exc:
            if attempt >= policy.max_attempts:
                raise
            delay = policy.delay_after(attempt)
            logger.info(
                "Transient completion failure attempt=%s retry_in=%.1fs: %s",
                attempt,
                delay,
                exc,
            )
            await policy.sleep(delay)
            attempt += 1
