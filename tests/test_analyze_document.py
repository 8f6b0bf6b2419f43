"""Tests for the document analysis chains."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.chains.analyze_document import (
    analyze_document,
    analyze_documents_batch,
    build_analysis_prompt,
    generate_clarifying_questions,
    get_system_prompt,
)
from app.chains.smart_form_completion import run_form_completion_action
from app.core.ai_provider import Completion


def _provider(*contents: str) -> MagicMock:
    provider = MagicMock()
    provider.generate_completion = AsyncMock(
        side_effect=[
            Completion(content=c, provider="openai", model="gpt-4o", usage={"total_tokens": 100})
            for c in contents
        ]
    )
    return provider


ANALYSIS = {
    "keyInformation": {"title": "Community Grant", "sponsor": "City Foundation"},
    "requirements": {"eligibility": ["501(c)(3) status"], "documents": ["Budget form"]},
}


class TestPrompts:
    def test_type_specific_system_prompt(self):
        assert "RFPs" in get_system_prompt("rfp")
        assert "Always respond with valid" in get_system_prompt("unknown")

    def test_long_document_truncated(self):
        prompt = build_analysis_prompt("x" * 13000, "rfp", {})

        assert " ...[truncated]" in prompt
        assert "CONTEXT FOR PERSONALIZED ANALYSIS" not in prompt

    def test_context_appended(self):
        prompt = build_analysis_prompt("text", "rfp", {"userProfile": {"org": "Acme"}})

        assert "CONTEXT FOR PERSONALIZED ANALYSIS" in prompt


@pytest.mark.asyncio
async def test_analyze_document_adds_metadata():
    provider = _provider(json.dumps(ANALYSIS))

    result = await analyze_document("RFP text", "rfp", provider=provider)

    assert result["keyInformation"]["title"] == "Community Grant"
    metadata = result["metadata"]
    assert metadata["documentType"] == "rfp"
    assert metadata["tokensUsed"] == 100
    assert metadata["confidence"] == 0.9
    assert metadata["provider"] == "openai"
    task = provider.generate_completion.call_args.args[0]
    assert task == "document-analysis"


@pytest.mark.asyncio
async def test_analyze_document_empty_response():
    provider = _provider("")

    with pytest.raises(ValueError, match="No response"):
        await analyze_document("text", provider=provider)


@pytest.mark.asyncio
async def test_clarifying_questions_unwrapped():
    provider = _provider(json.dumps({"questions": [{"question": "What is your EIN?"}]}))

    result = await generate_clarifying_questions({}, {}, provider=provider)

    assert result == [{"question": "What is your EIN?"}]


@pytest.mark.asyncio
async def test_batch_isolates_failed_documents():
    provider = _provider(json.dumps(ANALYSIS), "I'm sorry, I can't do that", json.dumps({"overview": "ok"}))
    documents = [
        {"id": "1", "name": "rfp.pdf", "content": "RFP", "type": "rfp"},
        {"id": "2", "name": "bad.pdf", "content": "???"},
    ]

    result = await analyze_documents_batch(documents, provider=provider)

    assert result["analyses"][0]["documentName"] == "rfp.pdf"
    assert "error" in result["analyses"][1]
    assert result["summary"] == {"overview": "ok"}
    assert result["consolidatedRequirements"]["requirements"] == ["Budget form", "501(c)(3) status"]


@pytest.mark.asyncio
async def test_form_completion_action():
    provider = _provider(json.dumps({"completedFields": {"org": "Acme"}}))

    result = await run_form_completion_action(
        "generate-narratives", {"org": {"label": "Org"}}, {"name": "Acme"}, {"title": "Food Hub"}, provider=provider
    )

    assert result == {"completedFields": {"org": "Acme"}}
    assert provider.generate_completion.call_args.kwargs["temperature"] == 0.3


@pytest.mark.asyncio
async def test_form_completion_unknown_action():
    with pytest.raises(KeyError):
        await run_form_completion_action("nope", {}, provider=_provider())
