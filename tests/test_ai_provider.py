"""Tests for hybrid AI provider routing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.ai_provider import (
    JSON_INSTRUCTIONS,
    AIProviderError,
    AIProviderService,
    ProviderConfig,
    env_override_key,
    load_environment_overrides,
    safe_parse_json,
)


def _openai_response(content: str) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage.model_dump.return_value = {"total_tokens": 42}
    return response


def _anthropic_response(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(text=text)]
    response.usage.input_tokens = 10
    response.usage.output_tokens = 5
    return response


def _service(openai_create=None, anthropic_create=None) -> AIProviderService:
    openai_client = MagicMock()
    openai_client.chat.completions.create = openai_create or AsyncMock()
    anthropic_client = MagicMock()
    anthropic_client.messages.create = anthropic_create or AsyncMock()
    strategy = {"document-analysis": ProviderConfig("openai", "gpt-4o", "test")}
    return AIProviderService(openai_client=openai_client, anthropic_client=anthropic_client, strategy=strategy)


class TestSafeParseJson:
    def test_plain_json(self):
        assert safe_parse_json('{"a": 1}') == {"a": 1}

    def test_markdown_fence(self):
        assert safe_parse_json('Here you go:\n```json\n{"a": 2}\n```') == {"a": 2}

    def test_embedded_object(self):
        assert safe_parse_json('Result: {"a": 3} done') == {"a": 3}

    def test_refusal(self):
        with pytest.raises(ValueError, match="conversational response"):
            safe_parse_json("I'm sorry, I cannot help with that.")

    def test_empty(self):
        with pytest.raises(ValueError, match="No content"):
            safe_parse_json("")

    def test_unparseable(self):
        with pytest.raises(ValueError, match="Failed to parse JSON"):
            safe_parse_json("not json at all")


class TestEnvironmentOverrides:
    def test_override_key(self):
        assert env_override_key("smart-form-completion") == "AI_PROVIDER_SMART_FORM_COMPLETION"

    def test_valid_override_applied(self):
        strategy = {"conversation": ProviderConfig("openai", "gpt-4o", "default")}
        environ = {"AI_PROVIDER_CONVERSATION": "anthropic:claude-3-5-sonnet"}

        result = load_environment_overrides(strategy, environ)

        assert result["conversation"].provider == "anthropic"
        assert result["conversation"].model == "claude-3-5-sonnet"
        assert result["conversation"].reason == "Environment variable override"

    def test_malformed_override_ignored(self):
        strategy = {"conversation": ProviderConfig("openai", "gpt-4o", "default")}

        load_environment_overrides(strategy, {"AI_PROVIDER_CONVERSATION": "anthropic"})

        assert strategy["conversation"].provider == "openai"


class TestGenerateCompletion:
    @pytest.mark.asyncio
    async def test_primary_success(self):
        create = AsyncMock(return_value=_openai_response('{"ok": true}'))
        service = _service(openai_create=create)

        result = await service.generate_completion(
            "document-analysis", [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}], json_mode=True
        )

        assert result.provider == "openai"
        assert result.content == '{"ok": true}'
        assert result.total_tokens == 42
        kwargs = create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["content"] == "sys" + JSON_INSTRUCTIONS

    @pytest.mark.asyncio
    async def test_retries_then_falls_back_to_anthropic(self):
        openai_create = AsyncMock(side_effect=RuntimeError("rate limited"))
        anthropic_create = AsyncMock(return_value=_anthropic_response('{"ok": true}'))
        service = _service(openai_create=openai_create, anthropic_create=anthropic_create)

        result = await service.generate_completion(
            "document-analysis", [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}]
        )

        assert openai_create.await_count == 2
        assert result.provider == "anthropic"
        assert result.total_tokens == 15
        kwargs = anthropic_create.call_args.kwargs
        assert kwargs["system"].startswith("sys")
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_all_providers_fail(self):
        service = _service(
            openai_create=AsyncMock(side_effect=RuntimeError("down")),
            anthropic_create=AsyncMock(side_effect=RuntimeError("down")),
        )

        with pytest.raises(AIProviderError, match="document-analysis"):
            await service.generate_completion("document-analysis", [{"role": "user", "content": "hi"}])

    def test_unknown_task_uses_default(self):
        service = _service()

        assert service.get_provider_config("nope").model == "gpt-4o-mini"
