"""OpenRouter backend (OpenAI-compatible chat completions for many vendors)."""

import logging

import httpx

from app.backends.base import BackendInvoker, LlmResponse
from app.core.config import settings
from app.core.exceptions import BackendInvocationError

logger = logging.getLogger(__name__)

AVAILABLE_MODELS: list[dict[str, str]] = [
    # OpenAI
    {"id": "openai/gpt-4o", "name": "GPT-4o"},
    {"id": "openai/gpt-4o-mini", "name": "GPT-4o Mini"},
    {"id": "openai/gpt-4-turbo", "name": "GPT-4 Turbo"},
    {"id": "openai/gpt-3.5-turbo", "name": "GPT-3.5 Turbo"},
    # Anthropic
    {"id": "anthropic/claude-3.5-sonnet", "name": "Claude 3.5 Sonnet"},
    {"id": "anthropic/claude-3-haiku", "name": "Claude 3 Haiku"},
    {"id": "anthropic/claude-3-opus", "name": "Claude 3 Opus"},
    # Google
    {"id": "google/gemini-2.5-flash", "name": "Gemini 2.5 Flash"},
    {"id": "google/gemini-2.0-flash-exp", "name": "Gemini 2.0 Flash"},
    {"id": "google/gemini-pro", "name": "Gemini Pro"},
    # xAI
    {"id": "x-ai/grok-2", "name": "Grok-2"},
]


def _error_message(resp: httpx.Response) -> str:
    """Pull the vendor's error message out of an error response."""
    try:
        error_body = resp.json()
        return error_body.get("error", {}).get("message") or resp.text[:500]
    except Exception:
        return resp.text[:500]


class OpenRouterInvoker(BackendInvoker):
    """Query any model exposed by OpenRouter."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.backend_timeout_seconds

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def invoke(self, model: str, prompt: str) -> LlmResponse:
        """Send a prompt to OpenRouter Chat Completions API."""
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": settings.app_url,
            "X-Title": settings.app_title,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)

                if resp.status_code >= 400:
                    error_msg = _error_message(resp)
                    logger.error(
                        "OpenRouter API %d for model=%s: %s", resp.status_code, model, error_msg, extra={"llm_model": model}
                    )
                    if resp.status_code == 429:
                        raise BackendInvocationError(model, f"rate limit or quota exceeded: {error_msg}")
                    if resp.status_code in (400, 404):
                        raise BackendInvocationError(model, f"invalid model or request: {error_msg}")
                    raise BackendInvocationError(model, f"HTTP {resp.status_code}: {error_msg}")

                data = resp.json()
        except httpx.TimeoutException as e:
            logger.warning("OpenRouter timeout after %.0fs for model=%s", self.timeout, model)
            raise BackendInvocationError(model, f"timed out after {self.timeout:.0f}s") from e
        except httpx.HTTPError as e:
            logger.warning("OpenRouter transport error for model=%s: %s", model, e)
            raise BackendInvocationError(model, f"network error: {e}") from e
        except ValueError as e:
            raise BackendInvocationError(model, "malformed response: body is not JSON") from e

        # Some vendors report failures inside a 200 body
        if "error" in data and not data.get("choices"):
            message = (data.get("error") or {}).get("message", "unknown error")
            raise BackendInvocationError(model, message)

        try:
            choice = data["choices"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendInvocationError(model, "malformed response: no choices") from e

        text = (choice.get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}

        return LlmResponse(
            text=text,
            model=data.get("model", model),
            tokens=usage.get("total_tokens", 0),
            finish_reason=choice.get("finish_reason"),
        )
