"""Generic rate-limit, compose, complete and normalize flow."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from nutrition_journal.domain.analysis import (
    ANALYSIS_SCHEMAS,
    AnalysisKind,
    AnalysisResult,
)
from nutrition_journal.services.completion import (
    CompletionClient,
    PermanentCompletionError,
    RetryPolicy,
    TransientCompletionError,
    complete_with_retry,
)
from nutrition_journal.services.messages import translate
from nutrition_journal.services.normalizer import normalize
from nutrition_journal.services.prompts import PromptComposer, PromptInput
from nutrition_journal.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class FailureReason(StrEnum):
    """Why an analysis produced no result."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True)
class PipelineOutcome:
    """Either a normalized result or a localized failure."""

    result: AnalysisResult | None = None
    reason: FailureReason | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass
class AnalysisPipeline:
    """Runs one analysis of any kind end to end."""

    rate_limiter: RateLimiter
    composer: PromptComposer
    client: CompletionClient
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)

    async def run(
        self,
        kind: AnalysisKind,
        payload: PromptInput,
        *,
        user_id: UUID,
        record_id: UUID,
        language: str,
    ) -> PipelineOutcome:
        """Analyze ``payload``; never raises for upstream or schema failures."""
        schema = ANALYSIS_SCHEMAS[kind]
        context = f"{schema.record_label}={record_id} user_id={user_id}"

        if not self.rate_limiter.allow(user_id, context=context):
            return PipelineOutcome(
                reason=FailureReason.RATE_LIMITED,
                message=translate("rate_limit_exceeded", language),
            )

        request = self.composer.build(kind, payload, language)
        unavailable = translate(schema.unavailable_message, language)
        try:
            raw = await complete_with_retry(self.client, request, self.retry_policy)
        except TransientCompletionError as exc:
            logger.error(
                "%s transient failure %s: %s: %s",
                schema.label,
                context,
                type(exc).__name__,
                exc,
            )
            return PipelineOutcome(reason=FailureReason.TRANSIENT, message=unavailable)
        except PermanentCompletionError as exc:
            logger.error(
                "%s failure %s: %s: %s",
                schema.label,
                context,
                type(exc).__name__,
                exc,
            )
            return PipelineOutcome(reason=FailureReason.PERMANENT, message=unavailable)

        result = normalize(kind, raw, context=context)
        if result is None:
            return PipelineOutcome(
                reason=FailureReason.INVALID_RESPONSE, message=unavailable
            )
        return PipelineOutcome(result=result)
