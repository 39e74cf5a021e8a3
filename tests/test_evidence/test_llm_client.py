"""Tests for AI classifier providers and response parsing."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from compliance_scoring.evidence.config import EvidenceConfig
from compliance_scoring.evidence.errors import AIClassificationError
from compliance_scoring.evidence.llm_client import (
    AnthropicEvidenceClassifier,
    OpenAIEvidenceClassifier,
    build_ai_classifier,
    parse_classification_response,
)
from compliance_scoring.evidence.prompts import SYSTEM_PROMPT
from compliance_scoring.evidence.schemas import EvidenceTier

VALID_RESPONSE = {
    "tier": "TIER_2",
    "confidence": 0.92,
    "reason": "Database export with timestamps",
    "indicators": {
        "hasTimestamps": True,
        "hasVersionControl": False,
        "hasApprovalSignatures": False,
        "isStructuredData": True,
    },
}


def _openai_client(content: str | None) -> MagicMock:
    client = MagicMock()
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client.chat.completions.create = AsyncMock(return_value=response)
    client.close = AsyncMock()
    return client


def _anthropic_client(blocks: list) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=SimpleNamespace(content=blocks))
    client.close = AsyncMock()
    return client


class TestParseClassificationResponse:
    def test_valid_response(self) -> None:
        result = parse_classification_response(json.dumps(VALID_RESPONSE), "openai")
        assert result.tier == EvidenceTier.TIER_2
        assert result.confidence == 0.92
        assert result.indicators.has_timestamps is True
        assert result.indicators.is_structured_data is True

    def test_indicators_optional(self) -> None:
        raw = json.dumps({"tier": "TIER_0", "confidence": 0.4, "reason": "Email"})
        result = parse_classification_response(raw, "openai")
        assert result.indicators.has_approval_signatures is False

    @pytest.mark.parametrize(
        "override",
        [
            {"tier": "TIER_3"},
            {"confidence": 1.5},
            {"confidence": -0.1},
            {"reason": ""},
        ],
    )
    def test_invalid_values_rejected(self, override: dict) -> None:
        raw = json.dumps({**VALID_RESPONSE, **override})
        with pytest.raises(AIClassificationError):
            parse_classification_response(raw, "openai")

    @pytest.mark.parametrize("missing", ["tier", "confidence", "reason"])
    def test_missing_field_rejected(self, missing: str) -> None:
        payload = {k: v for k, v in VALID_RESPONSE.items() if k != missing}
        with pytest.raises(AIClassificationError):
            parse_classification_response(json.dumps(payload), "openai")

    @pytest.mark.parametrize("raw", [None, "", "not json", "[1, 2]"])
    def test_unusable_payload_rejected(self, raw) -> None:
        with pytest.raises(AIClassificationError):
            parse_classification_response(raw, "anthropic")


class TestOpenAIEvidenceClassifier:
    async def test_classify(self) -> None:
        client = _openai_client(json.dumps(VALID_RESPONSE))
        config = EvidenceConfig(_env_file=None, openai_api_key="test-key")
        classifier = OpenAIEvidenceClassifier(config, client=client)

        result = await classifier.classify("export.csv", "id,name\n1,alice")

        assert result.tier == EvidenceTier.TIER_2
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["content"] == SYSTEM_PROMPT
        assert "Filename: export.csv" in kwargs["messages"][1]["content"]
        assert "1,alice" in kwargs["messages"][1]["content"]

    async def test_malformed_content_raises(self) -> None:
        client = _openai_client('{"tier": "TIER_1"}')
        classifier = OpenAIEvidenceClassifier(EvidenceConfig(_env_file=None), client=client)
        with pytest.raises(AIClassificationError):
            await classifier.classify("a.txt", "text")

    async def test_no_choices_raises(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))
        classifier = OpenAIEvidenceClassifier(EvidenceConfig(_env_file=None), client=client)
        with pytest.raises(AIClassificationError):
            await classifier.classify("a.txt", "text")

    async def test_close(self) -> None:
        client = _openai_client(None)
        await OpenAIEvidenceClassifier(EvidenceConfig(_env_file=None), client=client).close()
        client.close.assert_awaited_once()


class TestAnthropicEvidenceClassifier:
    async def test_classify_from_tool_use(self) -> None:
        blocks = [
            SimpleNamespace(type="text", text="Classifying..."),
            SimpleNamespace(type="tool_use", name="submit_classification", input=VALID_RESPONSE),
        ]
        client = _anthropic_client(blocks)
        config = EvidenceConfig(
            _env_file=None, ai_provider="anthropic", anthropic_api_key="test-key"
        )
        classifier = AnthropicEvidenceClassifier(config, client=client)

        result = await classifier.classify("export.csv", "id,name")

        assert result.tier == EvidenceTier.TIER_2
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "submit_classification"}
        assert kwargs["system"] == SYSTEM_PROMPT

    async def test_missing_tool_block_raises(self) -> None:
        client = _anthropic_client([SimpleNamespace(type="text", text="TIER_2")])
        classifier = AnthropicEvidenceClassifier(EvidenceConfig(_env_file=None), client=client)
        with pytest.raises(AIClassificationError):
            await classifier.classify("a.txt", "text")


class TestBuildAIClassifier:
    def test_none_without_key(self) -> None:
        config = EvidenceConfig(_env_file=None, openai_api_key=None, anthropic_api_key=None)
        assert build_ai_classifier(config) is None

    def test_openai_provider(self) -> None:
        config = EvidenceConfig(_env_file=None, openai_api_key="test-key")
        assert isinstance(build_ai_classifier(config), OpenAIEvidenceClassifier)

    def test_anthropic_provider(self) -> None:
        config = EvidenceConfig(
            _env_file=None,
            ai_provider="anthropic",
            openai_api_key=None,
            anthropic_api_key="test-key",
        )
        assert isinstance(build_ai_classifier(config), AnthropicEvidenceClassifier)

    def test_anthropic_provider_requires_its_own_key(self) -> None:
        config = EvidenceConfig(
            _env_file=None,
            ai_provider="anthropic",
            openai_api_key="test-key",
            anthropic_api_key=None,
        )
        assert build_ai_classifier(config) is None
