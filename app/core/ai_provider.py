"""Hybrid OpenAI / Anthropic completion routing.

Each task type maps to a provider and model. A task is tried twice on its
primary provider, then once on the opposite provider's fallback model.
"""

import json
import os
import re
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# Tasks whose callers parse the response as JSON
JSON_TASKS = {"document-analysis", "enhanced-scoring", "smart-form-completion", "categorization"}

JSON_INSTRUCTIONS = (
    "\n\nCRITICAL: You MUST respond with valid JSON only. Do not include any conversational "
    "text, explanations, or markdown formatting. Just return the raw JSON object."
)

_REFUSAL_PREFIXES = ("I'm sorry", "I can't", "I apologize")


class AIProviderError(Exception):
    """Raised when every provider failed for a task."""


@dataclass
class ProviderConfig:
    provider: str
    model: str
    reason: str


@dataclass
class Completion:
    content: str | None
    provider: str
    model: str
    usage: dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        if "total_tokens" in self.usage:
            return self.usage["total_tokens"] or 0
        return (self.usage.get("input_tokens") or 0) + (self.usage.get("output_tokens") or 0)


def default_strategy() -> dict[str, ProviderConfig]:
    settings = get_settings()
    return {
        "document-analysis": ProviderConfig(
            "openai", settings.DOCUMENT_ANALYSIS_MODEL, "Reliable structured extraction"
        ),
        "smart-form-completion": ProviderConfig(
            "openai", settings.FORM_COMPLETION_MODEL, "Instruction following for field mapping"
        ),
        "enhanced-scoring": ProviderConfig("openai", "gpt-4o-mini", "Cost-effective analysis"),
        "basic-scoring": ProviderConfig("openai", "gpt-4o-mini", "Fast simple scoring"),
        "conversation": ProviderConfig("openai", "gpt-4o", "Conversational quality"),
        "categorization": ProviderConfig("openai", "gpt-4o-mini", "Efficient classification"),
    }


def env_override_key(task: str) -> str:
    """``document-analysis`` -> ``AI_PROVIDER_DOCUMENT_ANALYSIS``."""
    return "AI_PROVIDER_" + task.upper().replace("-", "_")


def load_environment_overrides(
    strategy: dict[str, ProviderConfig], environ: dict[str, str] | None = None
) -> dict[str, ProviderConfig]:
    """Apply ``AI_PROVIDER_<TASK>=provider:model`` overrides in place."""
    env = os.environ if environ is None else environ
    for task in list(strategy):
        override = env.get(env_override_key(task))
        if not override or ":" not in override:
            continue
        provider, model = override.split(":", 1)
        if provider and model:
            strategy[task] = ProviderConfig(provider, model, "Environment variable override")
    return strategy


def ensure_json_instructions(messages: list[dict[str, str]]) -> list[dict[str, str]]:
    return [
        {**m, "content": m["content"] + JSON_INSTRUCTIONS} if m.get("role") == "system" else m
        for m in messages
    ]


def safe_parse_json(content: str | None) -> Any:
    """
    Parse a model response as JSON, tolerating fences and surrounding prose.

    Raises:
        ValueError: If the response is empty, a refusal, or contains no parseable JSON
    """
    if not content:
        raise ValueError("No content received from AI provider")

    stripped = content.strip()
    if stripped.startswith(_REFUSAL_PREFIXES):
        raise ValueError(
            f"AI provider returned a conversational response instead of JSON. Response: {content[:100]}..."
        )

    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        original_error = e

    fence = re.search(r"```json\s*([\s\S]*?)\s*```", content)
    if fence:
        try:
            return json.loads(fence.group(1))
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Failed to parse JSON from markdown block: {e}. Content: {content[:200]}..."
            ) from e

    start = content.find("{")
    end = content.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(content[start : end + 1])
        except json.JSONDecodeError:
            pass

    raise ValueError(
        f"Failed to parse JSON from AI response: {original_error}. Content: {content[:200]}..."
    ) from original_error


class AIProviderService:
    """Routes completions to OpenAI or Anthropic by task type."""

    def __init__(
        self,
        openai_client: AsyncOpenAI | None = None,
        anthropic_client: AsyncAnthropic | None = None,
        strategy: dict[str, ProviderConfig] | None = None,
    ):
        settings = get_settings()
        self.openai = openai_client or AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        self._anthropic = anthropic_client
        self.strategy = strategy if strategy is not None else load_environment_overrides(default_strategy())
        self.fallback_models = {
            "openai": settings.FALLBACK_OPENAI_MODEL,
            "anthropic": settings.FALLBACK_ANTHROPIC_MODEL,
        }
        self.default_max_tokens = settings.AI_MAX_TOKENS

    @property
    def anthropic(self) -> AsyncAnthropic:
        if self._anthropic is None:
            self._anthropic = AsyncAnthropic(api_key=get_settings().ANTHROPIC_API_KEY)
        return self._anthropic

    def get_provider_config(self, task: str) -> ProviderConfig:
        return self.strategy.get(task) or ProviderConfig("openai", "gpt-4o-mini", "Default fallback")

    async def generate_completion(
        self,
        task: str,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float = 0.1,
        json_mode: bool = False,
        max_retries: int = 2,
    ) -> Completion:
        """
        Run a chat completion for ``task`` with retry and provider failover.

        Args:
            task: Task type key (e.g. "document-analysis")
            messages: OpenAI-style role/content messages
            max_tokens: Completion token cap (defaults to AI_MAX_TOKENS)
            temperature: Sampling temperature
            json_mode: Request a JSON object response where the provider supports it
            max_retries: Attempts on the primary provider before failing over

        Returns:
            Completion with content, usage, provider and model

        Raises:
            AIProviderError: If the primary and fallback providers both fail
        """
        config = self.get_provider_config(task)
        logger.info(f"Using {config.provider}:{config.model} for {task} ({config.reason})")

        if task in JSON_TASKS:
            messages = ensure_json_instructions(messages)

        options = {
            "max_tokens": max_tokens or self.default_max_tokens,
            "temperature": temperature,
            "json_mode": json_mode,
        }

        for attempt in range(1, max_retries + 1):
            try:
                return await self._call(config.provider, config.model, messages, **options)
            except Exception as e:
                logger.warning(f"Attempt {attempt} failed for {config.provider}: {e}")

        return await self._call_fallback(task, config, messages, options)

    async def _call_fallback(
        self,
        task: str,
        config: ProviderConfig,
        messages: list[dict[str, str]],
        options: dict[str, Any],
    ) -> Completion:
        fallback_provider = "anthropic" if config.provider == "openai" else "openai"
        fallback_model = self.fallback_models[fallback_provider]
        logger.warning(f"Falling back to {fallback_provider}:{fallback_model} for {task}")
        try:
            return await self._call(fallback_provider, fallback_model, messages, **options)
        except Exception as e:
            logger.error(f"Fallback provider also failed for {task}: {e}")
            raise AIProviderError(f"All AI providers failed for task: {task}") from e

    async def _call(self, provider: str, model: str, messages: list[dict[str, str]], **options) -> Completion:
        if provider == "openai":
            return await self.call_openai(model, messages, **options)
        if provider == "anthropic":
            return await self.call_anthropic(model, messages, **options)
        raise ValueError(f"Unknown AI provider: {provider}")

    async def call_openai(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int = 4000,
        temperature: float = 0.1,
        json_mode: bool = False,
    ) -> Completion:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        start = time.time()
        response = await self.openai.chat.completions.create(**kwargs)
        duration_ms = int((time.time() - start) * 1000)

        usage = response.usage.model_dump() if response.usage else {}
        logger.debug(
            f"OpenAI completion finished in {duration_ms}ms",
            extra={"model": model, "tokens": usage.get("total_tokens")},
        )
        return Completion(
            content=response.choices[0].message.content,
            provider="openai",
            model=model,
            usage=usage,
        )

    async def call_anthropic(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int = 4000,
        temperature: float = 0.1,
        json_mode: bool = False,
    ) -> Completion:
        # Anthropic takes the system prompt separately from the turn list
        system = next((m["content"] for m in messages if m.get("role") == "system"), "")
        turns = [m for m in messages if m.get("role") != "system"]

        start = time.time()
        response = await self.anthropic.messages.create(
            model=model,
            system=system,
            messages=turns,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        duration_ms = int((time.time() - start) * 1000)

        usage = {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        }
        logger.debug(f"Anthropic completion finished in {duration_ms}ms", extra={"model": model})
        return Completion(
            content=response.content[0].text if response.content else None,
            provider="anthropic",
            model=model,
            usage=usage,
        )

    def get_provider_status(self) -> dict[str, Any]:
        settings = get_settings()
        return {
            "openai": {"configured": bool(settings.OPENAI_API_KEY)},
            "anthropic": {"configured": bool(settings.ANTHROPIC_API_KEY)},
            "strategy": {
                task: {"provider": c.provider, "model": c.model, "reason": c.reason}
                for task, c in self.strategy.items()
            },
        }


@lru_cache(maxsize=1)
def get_ai_provider() -> AIProviderService:
    """Get the shared AI provider service (cached singleton)."""
    return AIProviderService()
