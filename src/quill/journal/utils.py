import re
from typing import Any

_CODE_FENCE = re.compile(r"```[a-zA-Z]*\s*([\s\S]*?)```")

ANTHROPIC_THINKING_BUDGET = 4096


def _model_settings(
    settings_class: type[Any], model_config: Any, **provider_settings: Any
) -> Any | None:
    """Merge provider-specific settings with temperature and max_tokens.

    Returns None when nothing is set, so the provider defaults apply.
    """
    values = {k: v for k, v in provider_settings.items() if v is not None}
    if model_config.temperature is not None:
        values["temperature"] = model_config.temperature
    if model_config.max_tokens is not None:
        values["max_tokens"] = model_config.max_tokens
    return settings_class(**values) if values else None


def _reasoning_effort(enable_thinking: bool | None) -> str | None:
    if enable_thinking is None:
        return None
    return "high" if enable_thinking else "low"


def _anthropic_thinking(enable_thinking: bool | None) -> dict[str, Any] | None:
    if enable_thinking is None:
        return None
    if enable_thinking:
        return {"type": "enabled", "budget_tokens": ANTHROPIC_THINKING_BUDGET}
    return {"type": "disabled"}


def get_model(
    model_config: Any,
    app_config: Any | None = None,
) -> Any:
    """
    Get a model instance for the specified configuration.

    Ollama and OpenAI (including OpenAI-compatible servers at ``base_url``)
    share the OpenAI chat model; Anthropic has its own. Any other provider is
    handed to pydantic-ai as a ``provider:name`` string.

    Args:
        model_config: ModelConfig with provider, name and sampling settings
        app_config: AppConfig for the Ollama base URL (defaults to global Config)

    Returns:
        A configured model instance
    """
    from pydantic_ai.models.openai import OpenAIChatModel, OpenAIChatModelSettings
    from pydantic_ai.providers.ollama import OllamaProvider
    from pydantic_ai.providers.openai import OpenAIProvider

    provider = model_config.provider
    name = model_config.name

    if provider in ("ollama", "openai"):
        settings = _model_settings(
            OpenAIChatModelSettings,
            model_config,
            openai_reasoning_effort=_reasoning_effort(model_config.enable_thinking),
        )
        if provider == "ollama":
            if app_config is None:
                from quill.journal.config import Config

                app_config = Config
            base_url = f"{app_config.providers.ollama.base_url}/v1"
            return OpenAIChatModel(
                model_name=name,
                provider=OllamaProvider(base_url=base_url),
                settings=settings,
            )
        if model_config.base_url:
            return OpenAIChatModel(
                model_name=name,
                provider=OpenAIProvider(base_url=model_config.base_url),
                settings=settings,
            )
        return OpenAIChatModel(model_name=name, settings=settings)

    if provider == "anthropic":
        from pydantic_ai.models.anthropic import AnthropicModel, AnthropicModelSettings

        settings = _model_settings(
            AnthropicModelSettings,
            model_config,
            anthropic_thinking=_anthropic_thinking(model_config.enable_thinking),
        )
        return AnthropicModel(model_name=name, settings=settings)

    return f"{provider}:{name}"


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences, keeping their contents."""
    return _CODE_FENCE.sub(r"\1", text).strip()


def count_words(text: str) -> int:
    return len(text.split())
