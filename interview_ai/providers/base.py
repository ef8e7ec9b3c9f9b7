from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from interview_ai.models import SamplingConfig

if TYPE_CHECKING:
    from interview_ai.config import Settings


class CompletionClient(ABC):
    @abstractmethod
    async def complete(
        self, system_prompt: str, user_prompt: str, sampling: SamplingConfig | None = None
    ) -> str | None:
        """Return the first choice's text, or None when the service returned no choice.

        Raises CredentialMissing without a configured key and UpstreamError on
        a non-success HTTP status.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        ...


def chat_messages(system_prompt: str, user_prompt: str) -> list[dict]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def create_client(settings: Settings) -> CompletionClient:
    if settings.llm_provider == "openai":
        from interview_ai.providers.llm_openai import OpenAIClient
        return OpenAIClient(
            api_key=settings.api_key, model=settings.llm_model,
            base_url=settings.base_url, timeout=settings.request_timeout,
        )
    elif settings.llm_provider == "http":
        from interview_ai.providers.llm_http import HTTPCompletionClient
        return HTTPCompletionClient(
            api_key=settings.api_key, model=settings.llm_model,
            base_url=settings.base_url, timeout=settings.request_timeout,
        )
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
