from __future__ import annotations

import logging
import time

import httpx

from interview_ai.errors import CredentialMissing, UpstreamError, UpstreamTransportError
from interview_ai.models import SamplingConfig
from interview_ai.providers.base import CompletionClient, chat_messages

log = logging.getLogger("interview_ai.llm")


class OpenAIClient(CompletionClient):
    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        import openai
        self._openai = openai
        self.api_key = api_key
        self.model = model
        self.client = None
        if api_key:
            # Retries belong to the question generator's fixed budget
            self.client = openai.AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
                http_client=http_client,
            )

    async def complete(
        self, system_prompt: str, user_prompt: str, sampling: SamplingConfig | None = None
    ) -> str | None:
        if self.client is None:
            raise CredentialMissing()
        sampling = sampling or SamplingConfig()
        log.info("── PROMPT (%s, %d chars) ──", self.model, len(user_prompt))
        t0 = time.monotonic()
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=chat_messages(system_prompt, user_prompt),
                **sampling.to_dict(),
            )
        except self._openai.APIStatusError as e:
            body = e.response.text if e.response is not None else str(e)
            log.warning("Completion service returned HTTP %s", e.status_code)
            raise UpstreamError(e.status_code, body) from e
        except self._openai.APIConnectionError as e:
            log.warning("Completion service unreachable: %s", e)
            raise UpstreamTransportError(f"{type(e).__name__}: {e}") from e
        elapsed = time.monotonic() - t0
        if not resp.choices:
            log.info("── RESPONSE (%.1fs) ── no choices", elapsed)
            return None
        content = resp.choices[0].message.content
        log.info("── RESPONSE (%.1fs, %d chars) ──", elapsed, len(content or ""))
        return content

    def name(self) -> str:
        return f"openai/{self.model}"
