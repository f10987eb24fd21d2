"""Async client for Groq's OpenAI-compatible chat completions API."""
import logging
from typing import Any, Protocol

import httpx

from core.config import Settings
from services.exceptions import LLMServiceError

logger = logging.getLogger(__name__)

Message = dict[str, Any]


class CompletionClient(Protocol):
    """The subset of LLMClient that services depend on (tests pass fakes)."""

    text_model: str
    vision_model: str

    async def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.0,
    ) -> str: ...


class LLMClient:
    """
    Thin wrapper around `POST {base_url}/chat/completions`.

    The underlying `httpx.AsyncClient` is shared for the life of the app (created in
    the lifespan, closed at shutdown) so connections are pooled across requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        text_model: str,
        vision_model: str,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self.text_model = text_model
        self.vision_model = vision_model

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        """Build a client with its own connection pool from settings."""
        http_client = httpx.AsyncClient(
            base_url=settings.groq_base_url,
            timeout=settings.llm_timeout_seconds,
        )
        return cls(
            http_client,
            api_key=settings.groq_api_key,
            text_model=settings.groq_text_model,
            vision_model=settings.groq_vision_model,
        )

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()

    async def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        max_tokens: int = 256,
        temperature: float = 0.0,
    ) -> str:
        """
        Run a chat completion and return the first choice's text (stripped).

        Raises:
            LLMServiceError: Missing API key, transport failure, non-2xx response,
                or a payload without a message.
        """
        if not self._api_key:
            raise LLMServiceError("GROQ_API_KEY is not configured")

        payload = {
            "model": model or self.text_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        try:
            response = await self._http.post(
                "/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.TimeoutException as e:
            logger.warning("llm_timeout model=%s", payload["model"])
            raise LLMServiceError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            logger.warning("llm_request_error model=%s error=%s", payload["model"], e)
            raise LLMServiceError(f"Connection error: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "llm_http_error model=%s status=%s", payload["model"], response.status_code,
            )
            raise LLMServiceError(
                f"{response.status_code} {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMServiceError(
                f"Unexpected response payload: {e}", status_code=response.status_code,
            ) from e
        return (content or "").strip()


def _error_message(response: httpx.Response) -> str:
    """Pull the provider's error message out of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    error = body.get("error") if isinstance(body, dict) else body
    if not error:
        return ""
    if isinstance(error, dict):
        return " ".join(
            str(part) for part in (error.get("code"), error.get("message")) if part
        )
    return str(error)
