"""Configuration for the evidence classification pipeline.

Provides Pydantic settings for the AI provider, API keys, model selection,
content truncation, caching, and circuit breaker tuning. All settings can be
overridden via EVIDENCE_* environment variables.
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class EvidenceConfig(BaseSettings):
    """Configuration for evidence tier classification.

    Settings can be overridden via environment variables prefixed with EVIDENCE_.

    Example:
        EVIDENCE_AI_PROVIDER=anthropic
        EVIDENCE_ANTHROPIC_API_KEY=sk-ant-...
        EVIDENCE_CIRCUIT_RECOVERY_TIMEOUT=120
    """

    model_config = SettingsConfigDict(
        env_prefix="EVIDENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # AI provider
    ai_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="Which provider backs AI-assisted classification",
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key; without it classification is heuristic-only",
    )
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        description="Anthropic API key, used when ai_provider=anthropic",
    )
    openai_model: str = Field(default="gpt-4o-mini")
    anthropic_model: str = Field(default="claude-sonnet-4-5-20250929")
    ai_temperature: float = Field(default=0.2, ge=0.0, le=1.0)
    ai_max_tokens: int = Field(default=500, ge=50, le=4096)
    ai_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=120.0,
        description="Timeout in seconds for one AI classification call",
    )

    # Content
    max_content_length: int = Field(
        default=5000,
        ge=100,
        description="Characters of content sent to the AI and scanned by heuristics",
    )

    # Cache settings
    cache_enabled: bool = Field(default=True)
    cache_ttl_days: int = Field(default=30, ge=1)
    cache_max_entries: int = Field(default=10_000, ge=1)

    # Circuit breaker settings
    circuit_failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before opening circuit",
    )
    circuit_recovery_timeout: float = Field(
        default=300.0,
        ge=1.0,
        description="Seconds before attempting recovery probe",
    )

    # Batch classification
    batch_concurrency: int = Field(default=4, ge=1, le=64)

    @property
    def cache_ttl_seconds(self) -> int:
        """Get cache TTL in seconds."""
        return self.cache_ttl_days * 24 * 3600

    @property
    def ai_configured(self) -> bool:
        """Check if the selected AI provider has an API key."""
        if self.ai_provider == "anthropic":
            return self.anthropic_api_key is not None
        return self.openai_api_key is not None
