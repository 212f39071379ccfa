"""
Parse untrusted LLM text into a pydantic schema.

Steps, in order, each tried once:
1. strip markdown code fences and surrounding prose, strict json.loads
2. on a decode error, one repair pass: drop trailing commas, then
   langchain-core's partial JSON parser (closes truncated brackets/strings, unescaped newlines)
3. schema.model_validate

Failure at any step raises UpstreamProviderError. Nothing is fabricated.
"""

from __future__ import annotations

import json
import re
from typing import Any, Type, TypeVar

from langchain_core.utils.json import parse_json_markdown
from pydantic import BaseModel, ValidationError as PydanticValidationError

from api.utils.errors import UpstreamProviderError
from api.utils.logger import configure_logging

logger = configure_logging()

T = TypeVar("T", bound=BaseModel)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def strip_fences(raw: str) -> str:
    text = (raw or "").strip()
    match = _FENCE.search(text)
    if match:
        text = match.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start > 0 and end > start:
        text = text[start : end + 1]
    return text


def decode_json(raw: str) -> Any:
    text = strip_fences(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("llm output is not valid json, attempting repair pos=%s", exc.pos)
    try:
        repaired = parse_json_markdown(_TRAILING_COMMA.sub(r"\1", text))
    except ValueError as exc:
        logger.error("llm output repair failed snippet=%r", text[:300])
        raise UpstreamProviderError("The AI returned malformed data.") from exc
    if repaired is None:
        raise UpstreamProviderError("The AI returned malformed data.")
    return repaired


def parse_llm_json(raw: str, schema: Type[T]) -> T:
    data = decode_json(raw)
    if not isinstance(data, dict):
        raise UpstreamProviderError("The AI returned data in an unexpected shape.")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        logger.error("llm output failed schema=%s errors=%s", schema.__name__, exc.error_count())
        raise UpstreamProviderError(
            "The AI returned data that does not match the expected structure.",
            {"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        ) from exc
