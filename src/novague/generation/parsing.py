"""Extraction of structured JSON from free-form model output."""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class OutputParseError(ValueError):
    """Raised when model output contains no valid object for the schema."""


def extract_json(text: str) -> str | None:
    """Extract a JSON object from text that may contain markdown or prose.

    Strategies, in order:
    1. A fenced ```json block
    2. Any fenced block whose body looks like an object
    3. The first balanced ``{...}`` object in the text

    Args:
        text: Text that may contain JSON

    Returns:
        Extracted JSON string or None if not found
    """
    fenced = re.search(r"```json\s*\n(.*?)\n```", text, re.DOTALL | re.IGNORECASE)
    if fenced:
        return fenced.group(1).strip()

    block = re.search(r"```\s*\n(.*?)\n```", text, re.DOTALL)
    if block:
        candidate = block.group(1).strip()
        if candidate.startswith("{") and candidate.endswith("}"):
            return candidate

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False
    for i in range(start, len(text)):
        char = text[i]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def parse_model_output(text: str, schema: type[ModelT]) -> ModelT:
    """Parse model output into an instance of ``schema``.

    Args:
        text: Raw model output
        schema: Pydantic model class the output must satisfy

    Returns:
        Validated schema instance

    Raises:
        OutputParseError: If no JSON is found, it does not decode, or it
            fails schema validation
    """
    json_str = extract_json(text)
    if json_str is None:
        raise OutputParseError("No JSON object found in model output")

    try:
        data: Any = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise OutputParseError(f"Invalid JSON in model output: {e}") from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise OutputParseError(
            f"Output does not match {schema.__name__}: {e.error_count()} errors"
        ) from e
