import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

# Prevent tests from loading a local quill.journal.yaml by pointing the loader
# at an empty config file BEFORE any quill.journal imports.
_test_config_dir = tempfile.mkdtemp()
_test_config_path = Path(_test_config_dir) / "test-defaults.yaml"
_test_config_path.write_text("{}")  # Empty YAML = use all defaults
os.environ["QUILL_JOURNAL_CONFIG_PATH"] = str(_test_config_path)

import pytest  # noqa: E402
import yaml  # noqa: E402

from quill.journal.summary.models import JournalEntry  # noqa: E402

BASE_TIME = datetime(2024, 3, 1, 9, 0, 0)


def _make_entry(index: int, **overrides) -> JournalEntry:
    data = {
        "id": f"entry-{index}",
        "title": f"Day {index}",
        "content": {
            "type": "doc",
            "content": [
                {
                    "type": "paragraph",
                    "content": [
                        {
                            "type": "text",
                            "text": f"Entry {index}: felt calmer after a long walk today.",
                        }
                    ],
                }
            ],
        },
        "mood": 5,
        "tags": ["walk"],
        "created_at": BASE_TIME + timedelta(days=index),
        "owner_id": "client-1",
    }
    data.update(overrides)
    return JournalEntry(**data)


@pytest.fixture
def entries():
    """Seven entries owned by client-1, one per day."""
    return [_make_entry(i) for i in range(7)]


@pytest.fixture
def temp_yaml_config(tmp_path, monkeypatch):
    """Create a temporary YAML config file and point the loader at it."""
    config_file = tmp_path / "test-config.yaml"
    config_data = {
        "environment": "test",
        "generation": {
            "model": {"provider": "ollama", "name": "llama3.2"},
            "timeout": 5,
        },
        "aggregation": {"group_size": 4, "max_concurrency": 2},
        "redaction": {"categories": ["email", "phone"]},
    }

    with open(config_file, "w") as f:
        yaml.dump(config_data, f)

    monkeypatch.setenv("QUILL_JOURNAL_CONFIG_PATH", str(config_file))

    yield config_file


@pytest.fixture
def make_entry():
    """Factory for journal entries: make_entry(index, **overrides)."""
    return _make_entry
