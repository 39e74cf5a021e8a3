"""AI classifier implementations for evidence tiering.

Two providers share one contract (``AIClassifier``):
- OpenAI: chat completion in JSON mode
- Anthropic: forced tool use for structured output

Responses are validated strictly against AIClassificationResponse. Any
missing field, unknown tier or out-of-range confidence raises
AIClassificationError; the caller treats that exactly like a transport
failure.
"""

import json
import logging
from typing import Any

import anthropic
import openai
from pydantic import ValidationError

from compliance_scoring.evidence.config import EvidenceConfig
from compliance_scoring.evidence.errors import AIClassificationError
from compliance_scoring.evidence.interfaces import AIClassifier
from compliance_scoring.evidence.prompts import (
    CLASSIFICATION_TOOL,
    SYSTEM_PROMPT,
    build_classification_prompt,
)
from compliance_scoring.evidence.schemas import AIClassificationResponse, ClassificationResult

logger = logging.getLogger(__name__)


def parse_classification_response(raw: str | None, provider: str) -> ClassificationResult:
    """Parse a raw JSON response into a ClassificationResult.

    Raises:
        AIClassificationError: If the response is empty, not JSON, or
            fails schema validation.
    """
    if not raw:
        raise AIClassificationError(f"Empty response from {provider}")
    try:
        parsed = AIClassificationResponse.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Failed to validate %s response: %s", provider, e.errors()[:3])
        raise AIClassificationError(f"Invalid {provider} response: {e.error_count()} errors") from e
    return parsed.to_result()


class OpenAIEvidenceClassifier:
    """Evidence classification with an OpenAI chat model.

    Args:
        config: Evidence configuration with API key and model settings.
        client: Optional pre-built ``openai.AsyncOpenAI`` client.
    """

    provider = "openai"

    def __init__(self, config: EvidenceConfig, client: Any = None) -> None:
        self._config = config
        if client is None:
            api_key = config.openai_api_key
            client = openai.AsyncOpenAI(
                api_key=api_key.get_secret_value() if api_key else None,
                timeout=config.ai_timeout,
            )
        self._client = client

    async def classify(self, filename: str, excerpt: str) -> ClassificationResult:
        response = await self._client.chat.completions.create(
            model=self._config.openai_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_classification_prompt(filename, excerpt)},
            ],
            temperature=self._config.ai_temperature,
            max_tokens=self._config.ai_max_tokens,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            raise AIClassificationError("OpenAI response contained no choices")
        raw = response.choices[0].message.content
        return parse_classification_response(raw, self.provider)

    async def close(self) -> None:
        await self._client.close()


class AnthropicEvidenceClassifier:
    """Evidence classification with a Claude model via forced tool use.

    Args:
        config: Evidence configuration with API key and model settings.
        client: Optional pre-built ``anthropic.AsyncAnthropic`` client.
    """

    provider = "anthropic"

    def __init__(self, config: EvidenceConfig, client: Any = None) -> None:
        self._config = config
        if client is None:
            api_key = config.anthropic_api_key
            client = anthropic.AsyncAnthropic(
                api_key=api_key.get_secret_value() if api_key else None,
                timeout=config.ai_timeout,
            )
        self._client = client

    async def classify(self, filename: str, excerpt: str) -> ClassificationResult:
        response = await self._client.messages.create(
            model=self._config.anthropic_model,
            max_tokens=self._config.ai_max_tokens,
            temperature=self._config.ai_temperature,
            system=SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": build_classification_prompt(filename, excerpt)},
            ],
            tools=[CLASSIFICATION_TOOL],
            tool_choice={"type": "tool", "name": CLASSIFICATION_TOOL["name"]},
        )
        for block in response.content:
            if block.type == "tool_use" and block.name == CLASSIFICATION_TOOL["name"]:
                return parse_classification_response(json.dumps(block.input), self.provider)
        raise AIClassificationError("Anthropic response contained no tool_use block")

    async def close(self) -> None:
        await self._client.close()


def build_ai_classifier(config: EvidenceConfig) -> AIClassifier | None:
    """Build the AI classifier for the configured provider.

    Returns None when the provider has no API key.
    """
    if not config.ai_configured:
        return None
    if config.ai_provider == "anthropic":
        return AnthropicEvidenceClassifier(config)
    return OpenAIEvidenceClassifier(config)
