import os
from typing import Literal

from pydantic import BaseModel, Field

PHI_CATEGORIES = [
    "email",
    "ssn",
    "credit_card",
    "phone",
    "mrn",
    "dob",
    "street_address",
    "ip_address",
    "url",
    "zip_code",
    "person_name",
]


class ModelConfig(BaseModel):
    """Configuration for a language model.

    Attributes:
        provider: Model provider (ollama, openai, anthropic, etc.)
        name: Model name/identifier
        base_url: Optional base URL for OpenAI-compatible servers
        temperature: Sampling temperature (0.0 to 1.0+)
        max_tokens: Maximum tokens to generate
    """

    provider: str = "openai"
    name: str = "gpt-4o-mini"
    base_url: str | None = None

    enable_thinking: bool | None = None
    temperature: float | None = 0.3
    max_tokens: int | None = 1000


class GenerationConfig(BaseModel):
    """Settings for calls to the external text generator."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    timeout: float = Field(default=60.0, gt=0)
    max_attempts: int = Field(default=2, ge=1)
    output_retries: int = Field(default=2, ge=0)
    min_content_length: int = Field(default=10, ge=0)


class ContentConfig(BaseModel):
    """Length limits applied to text bound for the generator."""

    max_length: int = Field(default=2000, ge=1)
    entry_max_length: int = Field(default=1500, ge=1)
    title_max_length: int = Field(default=200, ge=1)
    max_tags: int = Field(default=10, ge=0)
    tag_max_length: int = Field(default=50, ge=1)


class RedactionRuleConfig(BaseModel):
    """A user-supplied redaction rule."""

    category: str
    pattern: str
    placeholder: str
    ignore_case: bool = True


class RedactionConfig(BaseModel):
    categories: list[str] = Field(default_factory=lambda: list(PHI_CATEGORIES))
    custom_rules: list[RedactionRuleConfig] = []
    summary_placeholder: str = "[Summary contains PHI - redacted]"


class PromptGuardConfig(BaseModel):
    block_marker: str = "[BLOCKED]"
    extra_patterns: list[str] = []


class AggregationConfig(BaseModel):
    group_size: int = Field(default=3, ge=2, le=10)
    max_concurrency: int = Field(
        default=4, description="Maximum concurrent generation calls", ge=1
    )
    min_entries: int = Field(default=2, ge=2)


class OllamaConfig(BaseModel):
    base_url: str = Field(
        default_factory=lambda: os.environ.get(
            "OLLAMA_BASE_URL", "http://localhost:11434"
        )
    )


class ProvidersConfig(BaseModel):
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)


class AppConfig(BaseModel):
    environment: Literal["production", "development", "test"] = "production"
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    redaction: RedactionConfig = Field(default_factory=RedactionConfig)
    prompt_guard: PromptGuardConfig = Field(default_factory=PromptGuardConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
