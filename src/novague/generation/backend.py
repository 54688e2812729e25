"""Generation backend contract and HTTP implementation.

The pipeline only depends on the ``GenerationBackend`` protocol: given a
configuration, a prompt and a pydantic schema, return a validated instance of
that schema or raise. ``HttpGenerationBackend`` implements it over the REST
APIs of OpenAI (and OpenAI-compatible custom endpoints), Anthropic and Google.

No retries are attempted; callers fall back to the mock generators on any
failure.

Example usage:
    >>> from novague.config import GenerationConfig
    >>> from novague.models import ProjectAnalysis
    >>>
    >>> config = GenerationConfig(provider="anthropic", model="claude-sonnet-4-5", api_key="sk-...")
    >>> async with HttpGenerationBackend() as backend:
    ...     analysis = await backend.generate(config, "Analyze: a recipe app", ProjectAnalysis)
"""

from __future__ import annotations

import json
from typing import Any, Protocol, TypeVar, runtime_checkable

import httpx
import structlog
from pydantic import BaseModel

from novague.config import GenerationConfig
from novague.generation.parsing import OutputParseError, parse_model_output

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SYSTEM_PROMPT = (
    "You are a senior software architect. Answer only with a single JSON "
    "object that satisfies the provided JSON schema. Do not add commentary."
)

DEFAULT_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
    "google": "https://generativelanguage.googleapis.com/v1beta",
}

ANTHROPIC_VERSION = "2023-06-01"


class GenerationBackendError(Exception):
    """Base exception for generation backend errors."""


class GenerationAuthError(GenerationBackendError):
    """Raised when the credential is missing or rejected."""


class GenerationConnectionError(GenerationBackendError):
    """Raised when the provider cannot be reached."""


class GenerationTimeoutError(GenerationBackendError):
    """Raised when the provider request times out."""


class GenerationAPIError(GenerationBackendError):
    """Raised when the provider returns an error or an unexpected payload.

    Attributes:
        status_code: HTTP status code, if the error came from a response
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerationSchemaError(GenerationBackendError):
    """Raised when the generated output does not satisfy the schema."""


@runtime_checkable
class GenerationBackend(Protocol):
    """Turns a prompt plus a target schema into a validated object."""

    async def generate(
        self, config: GenerationConfig, prompt: str, schema: type[ModelT]
    ) -> ModelT:
        """Generate an instance of ``schema`` for ``prompt``.

        Args:
            config: Provider, model, credential and sampling settings
            prompt: Natural-language stage prompt
            schema: Pydantic model class the result must satisfy

        Returns:
            Validated schema instance

        Raises:
            GenerationBackendError: On any failure
        """
        ...


def build_schema_prompt(prompt: str, schema: type[BaseModel]) -> str:
    """Append the JSON schema of ``schema`` to a stage prompt."""
    schema_json = json.dumps(schema.model_json_schema(), indent=2)
    return (
        f"{prompt.strip()}\n\n"
        "Respond with a single JSON object matching this JSON schema:\n"
        f"```json\n{schema_json}\n```"
    )


class HttpGenerationBackend:
    """Generation backend calling provider REST APIs with httpx.

    Must be used as an async context manager, which owns the HTTP client.

    Attributes:
        transport: Optional httpx transport (used to stub providers in tests)
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> HttpGenerationBackend:
        """Async context manager entry."""
        self._client = httpx.AsyncClient(transport=self.transport)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Return the active HTTP client.

        Raises:
            RuntimeError: If called outside async context manager
        """
        if self._client is None:
            raise RuntimeError("HttpGenerationBackend must be used as async context manager")
        return self._client

    async def generate(
        self, config: GenerationConfig, prompt: str, schema: type[ModelT]
    ) -> ModelT:
        """Generate an instance of ``schema`` from the configured provider.

        Raises:
            GenerationAuthError: Missing or rejected credential
            GenerationConnectionError: Provider unreachable
            GenerationTimeoutError: Request timed out
            GenerationAPIError: Error status or unexpected payload
            GenerationSchemaError: Output does not satisfy ``schema``
        """
        api_key = config.api_key.get_secret_value() if config.api_key else ""
        if not api_key:
            raise GenerationAuthError("No API key configured")

        full_prompt = build_schema_prompt(prompt, schema)
        url, headers, payload = self._build_request(config, api_key, full_prompt)

        logger.debug(
            "generation_request",
            provider=config.provider,
            model=config.model,
            schema=schema.__name__,
            prompt_length=len(full_prompt),
        )

        client = self._get_client()
        try:
            response = await client.post(
                url, headers=headers, json=payload, timeout=config.timeout_seconds
            )
        except httpx.TimeoutException as e:
            raise GenerationTimeoutError(
                f"{config.provider} request timed out after {config.timeout_seconds}s"
            ) from e
        except (httpx.ConnectError, httpx.NetworkError) as e:
            raise GenerationConnectionError(f"Failed to connect to {url}") from e

        if response.status_code in (401, 403):
            raise GenerationAuthError(
                f"{config.provider} rejected the credential (HTTP {response.status_code})"
            )
        if response.status_code >= 400:
            raise GenerationAPIError(
                f"API error: HTTP {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise GenerationAPIError("Provider returned a non-JSON body") from e

        text = self._extract_text(config.provider, body)
        self._log_usage(config, schema, body)

        try:
            return parse_model_output(text, schema)
        except OutputParseError as e:
            raise GenerationSchemaError(str(e)) from e

    def _build_request(
        self, config: GenerationConfig, api_key: str, prompt: str
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Build URL, headers and JSON payload for the configured provider."""

        if config.provider == "custom" and not config.base_url:
            raise GenerationAPIError("The custom provider requires base_url")
        base_url = (config.base_url or DEFAULT_BASE_URLS.get(config.provider, "")).rstrip("/")

        if config.provider == "anthropic":
            return (
                f"{base_url}/messages",
                {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
                {
                    "model": config.model,
                    "max_tokens": config.max_tokens,
                    "temperature": config.temperature,
                    "system": SYSTEM_PROMPT,
                    "messages": [{"role": "user", "content": prompt}],
                },
            )

        if config.provider == "google":
            return (
                f"{base_url}/models/{config.model}:generateContent",
                {"x-goog-api-key": api_key},
                {
                    "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
                    "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                    "generationConfig": {
                        "temperature": config.temperature,
                        "maxOutputTokens": config.max_tokens,
                        "responseMimeType": "application/json",
                    },
                },
            )

        # openai and OpenAI-compatible custom endpoints
        return (
            f"{base_url}/chat/completions",
            {"Authorization": f"Bearer {api_key}"},
            {
                "model": config.model,
                "temperature": config.temperature,
                "max_tokens": config.max_tokens,
                "response_format": {"type": "json_object"},
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            },
        )

    def _extract_text(self, provider: str, body: dict[str, Any]) -> str:
        """Pull the generated text out of a provider response body.

        Raises:
            GenerationAPIError: If the body does not have the expected shape
        """
        try:
            if provider == "anthropic":
                return "".join(
                    block["text"] for block in body["content"] if block.get("type") == "text"
                )
            if provider == "google":
                parts = body["candidates"][0]["content"]["parts"]
                return "".join(part.get("text", "") for part in parts)
            return body["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationAPIError(f"Unexpected {provider} response format") from e

    def _log_usage(
        self, config: GenerationConfig, schema: type[BaseModel], body: dict[str, Any]
    ) -> None:
        usage = body.get("usage") or body.get("usageMetadata")
        logger.info(
            "generation_completed",
            provider=config.provider,
            model=config.model,
            schema=schema.__name__,
            usage=usage,
        )
