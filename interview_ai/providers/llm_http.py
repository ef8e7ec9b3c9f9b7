from __future__ import annotations

import logging
import time

import httpx

from interview_ai.errors import CredentialMissing, UpstreamError, UpstreamTransportError
from interview_ai.models import SamplingConfig
from interview_ai.providers.base import CompletionClient, chat_messages

log = logging.getLogger("interview_ai.llm")


class HTTPCompletionClient(CompletionClient):
    """Plain httpx client for any OpenAI-compatible chat completions proxy."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def complete(
        self, system_prompt: str, user_prompt: str, sampling: SamplingConfig | None = None
    ) -> str | None:
        if not self.api_key:
            raise CredentialMissing()
        sampling = sampling or SamplingConfig()
        body = {
            "model": self.model,
            "messages": chat_messages(system_prompt, user_prompt),
            **sampling.to_dict(),
        }
        log.info("── PROMPT (%s, %d chars) ──", self.model, len(user_prompt))
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=body,
                )
            except httpx.TransportError as e:
                log.warning("Completion service unreachable: %s", e)
                raise UpstreamTransportError(f"{type(e).__name__}: {e}") from e
            if resp.status_code < 200 or resp.status_code >= 300:
                log.warning("Completion service returned HTTP %d", resp.status_code)
                raise UpstreamError(resp.status_code, resp.text)
            data = resp.json()
        elapsed = time.monotonic() - t0
        choices = data.get("choices") or []
        if not choices:
            log.info("── RESPONSE (%.1fs) ── no choices", elapsed)
            return None
        content = (choices[0].get("message") or {}).get("content")
        log.info("── RESPONSE (%.1fs, %d chars) ──", elapsed, len(content or ""))
        return content

    def name(self) -> str:
        return f"http/{self.model}"
