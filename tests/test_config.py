"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from tome.config import TomeConfig, load_config
from tome.exceptions import ConfigurationError

ENV_VARS = [
    "TOME_CONFIG",
    "TOME_DATA_DIR",
    "TOME_VECTOR_STORE_DIR",
    "TOME_LLM_PROVIDER",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate each test from the caller's environment and working directory."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("tome.config.load_dotenv", lambda *args, **kwargs: False)


def write_config(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data))
    return path


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_config()

    assert config.paths.data_dir == (tmp_path / "rag-data").resolve()
    assert config.paths.vector_store_dir == (tmp_path / "rag-vector-store").resolve()
    assert config.store.documents_file == "user-documents.json"
    assert config.store.max_documents == 1000
    assert config.llm.provider == "openai"
    assert config.llm.api_key is None
    assert config.search.default_max_results == 5


def test_load_yaml_file(tmp_path: Path) -> None:
    path = write_config(
        tmp_path / "custom.yaml",
        {
            "paths": {"data_dir": str(tmp_path / "kb")},
            "store": {"autosave": False, "write_text_copies": False},
            "llm": {"provider": "claude", "model": "claude-test"},
            "search": {"default_max_results": 3},
        },
    )

    config = load_config(str(path))

    assert config.paths.data_dir == (tmp_path / "kb").resolve()
    assert config.store.autosave is False
    assert config.store.write_text_copies is False
    assert config.llm.provider == "claude"
    assert config.llm.model == "claude-test"
    assert config.search.default_max_results == 3


def test_default_location_is_used(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    write_config(tmp_path / "config" / "tome.yaml", {"store": {"max_documents": 10}})

    assert load_config().store.max_documents == 10


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = write_config(tmp_path / "tome.yaml", {"paths": {"data_dir": str(tmp_path / "from-file")}})
    monkeypatch.setenv("TOME_DATA_DIR", str(tmp_path / "from-env"))
    monkeypatch.setenv("TOME_LLM_PROVIDER", "claude")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "anthropic-key")
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")

    config = load_config(str(path))

    assert config.paths.data_dir == (tmp_path / "from-env").resolve()
    assert config.llm.provider == "claude"
    assert config.llm.api_key == "anthropic-key"


def test_api_key_in_file_wins(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = write_config(tmp_path / "tome.yaml", {"llm": {"api_key": "file-key"}})
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")

    assert load_config(str(path)).llm.api_key == "file-key"


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(str(tmp_path / "nope.yaml"))

    assert exc_info.value.exit_code == 2
    assert "nope.yaml" in str(exc_info.value)


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("paths: [unclosed")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_config(str(path))


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"llm": {"provider": "unknown"}},
        {"store": {"max_documents": 0}},
    ],
)
def test_invalid_configuration(tmp_path: Path, data) -> None:
    path = write_config(tmp_path / "bad.yaml", data)

    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_store_config(tmp_path: Path) -> None:
    config = TomeConfig(
        paths=TomeConfig.Paths(data_dir=tmp_path / "d", vector_store_dir=tmp_path / "v"),
        store=TomeConfig.Store(documents_file="docs.json", autosave=False),
    )

    store_config = config.store_config()

    assert store_config.documents_path == (tmp_path / "d" / "docs.json").resolve()
    assert store_config.vector_store_dir == (tmp_path / "v").resolve()
    assert store_config.autosave is False
