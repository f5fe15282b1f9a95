import os
from pathlib import Path

import yaml

from quill.journal.config.models import AppConfig

CONFIG_ENV_VAR = "QUILL_JOURNAL_CONFIG_PATH"


def find_config_file(cli_path: Path | None = None) -> Path | None:
    """Find the YAML config file using the search path.

    Search order:
    1. CLI-provided path (if given)
    2. QUILL_JOURNAL_CONFIG_PATH environment variable
    3. ./quill.journal.yaml (current directory)
    4. ~/.config/quill.journal/config.yaml (user config)

    Returns None if no config file is found.
    """
    if cli_path:
        if cli_path.exists():
            return cli_path
        raise FileNotFoundError(f"Config file not found: {cli_path}")

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {path}")

    cwd_config = Path.cwd() / "quill.journal.yaml"
    if cwd_config.exists():
        return cwd_config

    user_config = Path.home() / ".config" / "quill.journal" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def load_yaml_config(path: Path) -> dict:
    """Load and parse a YAML config file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def load_config(cli_path: Path | None = None) -> AppConfig:
    """Load an AppConfig from the first config file found, or defaults."""
    path = find_config_file(cli_path)
    if path is None:
        return AppConfig()
    return AppConfig.model_validate(load_yaml_config(path))


def generate_default_config() -> dict:
    """Generate a default YAML config structure."""
    return AppConfig().model_dump(mode="json")
