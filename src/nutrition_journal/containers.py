"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_journal.adapters.openai_chat_client import OpenAIChatClient
from nutrition_journal.adapters.supabase_journal_repository import (
    SupabaseJournalRepository,
)
from nutrition_journal.config import Settings
from nutrition_journal.services.cache import InMemoryCache
from nutrition_journal.services.completion import (
    CompletionClient,
    UnavailableCompletionClient,
)
from nutrition_journal.services.day_close import DayCloseService
from nutrition_journal.services.entries import EntryService
from nutrition_journal.services.pipeline import AnalysisPipeline
from nutrition_journal.services.prompts import PromptComposer
from nutrition_journal.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    rate_limiter: RateLimiter
    entry_service: EntryService
    day_close_service: DayCloseService
    close_resources: Callable[[], Awaitable[None]]


def build_completion_client(settings: Settings) -> CompletionClient:
    """Return the client for the configured LLM provider."""
    if settings.llm_provider == "openai":
        return OpenAIChatClient.create(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout_seconds,
            log_payloads=settings.is_development,
        )
    logger.warning("Unsupported LLM provider provider=%s", settings.llm_provider)
    return UnavailableCompletionClient(
        f"Unsupported LLM provider: {settings.llm_provider}"
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    repository = SupabaseJournalRepository(supabase_client)
    rate_limiter = RateLimiter(
        cache=InMemoryCache(),
        daily_limit=resolved_settings.llm_daily_limit,
        hourly_limit=resolved_settings.llm_hourly_limit,
        disabled=resolved_settings.disable_llm_rate_limit,
    )
    completion_client = build_completion_client(resolved_settings)
    pipeline = AnalysisPipeline(
        rate_limiter=rate_limiter,
        composer=PromptComposer(model=resolved_settings.openai_model),
        client=completion_client,
    )

    async def close_resources() -> None:
        if isinstance(completion_client, OpenAIChatClient):
            await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        rate_limiter=rate_limiter,
        entry_service=EntryService(repository=repository, pipeline=pipeline),
        day_close_service=DayCloseService(repository=repository, pipeline=pipeline),
        close_resources=close_resources,
    )
