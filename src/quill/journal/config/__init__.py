from quill.journal.config.loader import (
    find_config_file,
    generate_default_config,
    load_config,
    load_yaml_config,
)
from quill.journal.config.models import (
    PHI_CATEGORIES,
    AggregationConfig,
    AppConfig,
    ContentConfig,
    GenerationConfig,
    ModelConfig,
    OllamaConfig,
    PromptGuardConfig,
    ProvidersConfig,
    RedactionConfig,
    RedactionRuleConfig,
)

__all__ = [
    "Config",
    "AppConfig",
    "AggregationConfig",
    "ContentConfig",
    "GenerationConfig",
    "ModelConfig",
    "OllamaConfig",
    "PromptGuardConfig",
    "ProvidersConfig",
    "RedactionConfig",
    "RedactionRuleConfig",
    "PHI_CATEGORIES",
    "find_config_file",
    "load_config",
    "load_yaml_config",
    "generate_default_config",
    "set_config",
]


class ConfigProxy:
    """Proxy for the global configuration that allows runtime updates."""

    def __init__(self):
        self._config = load_config()

    def __getattr__(self, name):
        """Proxy attribute access to the underlying config."""
        return getattr(self._config, name)

    def set(self, config: AppConfig) -> None:
        """Replace the current configuration."""
        self._config = config

    def get(self) -> AppConfig:
        return self._config


Config = ConfigProxy()


def set_config(config: AppConfig) -> None:
    """Set the global configuration programmatically.

    Example:
        >>> from quill.journal.config import set_config, AppConfig
        >>> set_config(AppConfig(aggregation={"group_size": 5}))
    """
    Config.set(config)
