"""LLM client utilities for LangChain-backed chains."""

import json
import re
from typing import TypeVar

from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from app.core.config import get_settings

T = TypeVar("T", bound=BaseModel)


def get_llm(
    model: str | None = None,
    temperature: float = 0.1,
    json_mode: bool = False,
    max_tokens: int | None = None,
) -> ChatOpenAI:
    """
    Get configured LLM instance for LangChain chains.

    Args:
        model: Model name override (defaults to OPENAI_MODEL)
        temperature: Temperature for generation (default 0.1)
        json_mode: Ask the model for a single JSON object response
        max_tokens: Completion token cap (defaults to AI_MAX_TOKENS)

    Returns:
        ChatOpenAI instance configured with API key and model
    """
    settings = get_settings()

    model_kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}

    return ChatOpenAI(
        api_key=settings.OPENAI_API_KEY,
        model=model or settings.OPENAI_MODEL,
        temperature=temperature,
        max_tokens=max_tokens or settings.AI_MAX_TOKENS,
        model_kwargs=model_kwargs,
    )


def strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences (```json ... ``` or ``` ... ```) from LLM output."""
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_llm_json(raw_output: str, model: type[T]) -> T:
    """
    Parse LLM output as JSON and validate it against a Pydantic model.

    Raises:
        json.JSONDecodeError: If JSON parsing fails after fence cleanup
        pydantic.ValidationError: If the parsed JSON doesn't match the schema
    """
    return model.model_validate(json.loads(strip_llm_fences(raw_output)))
