"""OpenAI chat-completions client for journal analysis."""

import json
import logging
import time
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from nutrition_journal.services.completion import (
    CompletionClient,
    CompletionRequest,
    PermanentCompletionError,
    TransientCompletionError,
)

logger = logging.getLogger(__name__)

REDACTED = "[redacted]"


@dataclass
class OpenAIChatClient(CompletionClient):
    """Completion client backed by the OpenAI Chat Completions API."""

    client: AsyncOpenAI | None
    log_payloads: bool = False

    @classmethod
    def create(
        cls,
        api_key: str | None,
        base_url: str,
        timeout: float,
        log_payloads: bool = False,
    ) -> "OpenAIChatClient":
        """Create a client; retries are handled by the caller, not the SDK."""
        if not api_key:
            return cls(client=None, log_payloads=log_payloads)
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
            ),
            log_payloads=log_payloads,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self.client is not None:
            await self.client.close()

    async def complete(self, request: CompletionRequest) -> object:
        """Send the request and parse the first choice's content as JSON."""
        if self.client is None:
            raise PermanentCompletionError("OpenAI API key not configured")

        started_at = time.monotonic()
        status: int | None = None
        body: object = None
        try:
            response = await self.client.chat.completions.with_raw_response.create(
                **request.to_payload()
            )
            status = response.status_code
            body = response.text
            if status != 200:
                raise PermanentCompletionError(
                    f"OpenAI request failed status={status}"
                )
            completion = response.parse()
            content = ""
            if completion.choices:
                content = completion.choices[0].message.content or ""
            body = content
            return json.loads(content)
        except openai.APIStatusError as exc:
            status = exc.status_code
            body = exc.response.text
            if status >= 500 or status == 429:
                raise TransientCompletionError(
                    f"OpenAI temporary failure status={status}"
                ) from exc
            raise PermanentCompletionError(
                f"OpenAI request failed status={status}"
            ) from exc
        except openai.APIConnectionError as exc:
            raise TransientCompletionError(
                f"OpenAI connection failure: {type(exc).__name__}"
            ) from exc
        except json.JSONDecodeError as exc:
            raise PermanentCompletionError(
                f"Invalid OpenAI JSON payload: {exc.msg}"
            ) from exc
        except openai.OpenAIError as exc:
            raise PermanentCompletionError(
                f"OpenAI error: {type(exc).__name__}"
            ) from exc
        finally:
            self._log_exchange(request, status, body, started_at)

    def _log_exchange(
        self,
        request: CompletionRequest,
        status: int | None,
        body: object,
        started_at: float,
    ) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        elapsed_ms = round((time.monotonic() - started_at) * 1000, 2)
        request_payload = request.to_payload()
        if not self.log_payloads:
            request_payload["messages"] = REDACTED
            body = REDACTED
        payload = {
            "llm": "openai",
            "request": request_payload,
            "response": {"status": status, "body": body},
            "elapsed_ms": elapsed_ms,
        }
        if self.log_payloads:
            logger.debug(json.dumps(payload, indent=2, ensure_ascii=False))
        else:
            logger.debug(json.dumps(payload))
