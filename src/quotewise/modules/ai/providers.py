"""Chat completion providers.

The prompt composer produces provider-neutral messages; a provider turns
them into a reply. Only an OpenAI-compatible HTTP API is implemented, any
service speaking ``POST {base_url}/chat/completions`` works.
"""

from typing import Annotated, Protocol

import httpx
import structlog
from fastapi import Depends

from quotewise.config import settings
from quotewise.core.errors import ServiceUnavailableError
from quotewise.modules.prompts.schemas import ComposedMessage


logger = structlog.get_logger()


class CompletionProvider(Protocol):
    """Anything that can answer a composed conversation."""

    async def complete(self, messages: list[ComposedMessage]) -> str: ...


class OpenAICompatibleProvider:
    """Completion provider for OpenAI-style chat completion endpoints.

    Args:
        api_key: Bearer key sent to the provider
        base_url: API root, e.g. ``https://api.openai.com/v1``
        model: Model name
        temperature: Sampling temperature
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used to stub the network in tests
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float = 0.7,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.transport = transport

    async def complete(self, messages: list[ComposedMessage]) -> str:
        """Send the conversation and return the first choice's text.

        Raises:
            ServiceUnavailableError: On any transport, HTTP or payload error.
                The underlying error is logged, not returned to the caller.
        """
        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [{"role": m.role.value, "content": m.content} for m in messages],
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    "/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                data = response.json()
            return data["choices"][0]["message"]["content"]
        except httpx.HTTPStatusError as exc:
            logger.error(
                "completion_provider_error",
                status_code=exc.response.status_code,
                body=exc.response.text[:500],
            )
        except httpx.HTTPError as exc:
            logger.error("completion_provider_unreachable", error=str(exc))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("completion_provider_bad_payload", error=str(exc))
        raise ServiceUnavailableError(
            "The AI service is temporarily unavailable",
            error_code="ai_unavailable",
        )


def get_completion_provider() -> CompletionProvider:
    """Build the configured provider.

    Raises:
        ServiceUnavailableError: If no API key is configured
    """
    if not settings.openai_api_key:
        raise ServiceUnavailableError(
            "AI provider is not configured",
            error_code="ai_not_configured",
        )
    return OpenAICompatibleProvider(
        api_key=settings.openai_api_key,
        base_url=settings.ai_base_url,
        model=settings.ai_model,
        temperature=settings.ai_temperature,
        timeout=settings.ai_timeout_seconds,
    )


Provider = Annotated[CompletionProvider, Depends(get_completion_provider)]
