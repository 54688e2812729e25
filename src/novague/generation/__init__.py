"""Generation backend contract, HTTP implementation and stage prompts."""

from __future__ import annotations

from novague.generation.backend import (
    GenerationAPIError,
    GenerationAuthError,
    GenerationBackend,
    GenerationBackendError,
    GenerationConnectionError,
    GenerationSchemaError,
    GenerationTimeoutError,
    HttpGenerationBackend,
    build_schema_prompt,
)
from novague.generation.parsing import OutputParseError, extract_json, parse_model_output

__all__ = [
    "GenerationAPIError",
    "GenerationAuthError",
    "GenerationBackend",
    "GenerationBackendError",
    "GenerationConnectionError",
    "GenerationSchemaError",
    "GenerationTimeoutError",
    "HttpGenerationBackend",
    "OutputParseError",
    "build_schema_prompt",
    "extract_json",
    "parse_model_output",
]
