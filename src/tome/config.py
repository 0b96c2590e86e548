"""Tome configuration management."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from tome.exceptions import ConfigurationError
from tome.store.models import StoreConfig


class TomeConfig(BaseModel):
    """Tome configuration model with validation."""

    class Paths(BaseModel):
        """Path configuration."""

        data_dir: Path = Field(
            default=Path("./rag-data"),
            description="Directory for the documents file, text copies and exports",
        )
        vector_store_dir: Path = Field(
            default=Path("./rag-vector-store"),
            description="Directory for vector store data",
        )
        logs_dir: Path = Field(
            default=Path(".tome/logs"), description="Directory for log files"
        )

        @field_validator("*")
        @classmethod
        def expand_path(cls, v: Path) -> Path:
            """Expand user and make path absolute."""
            return Path(os.path.expandvars(str(v))).expanduser().resolve()

    class Store(BaseModel):
        """Document store configuration."""

        documents_file: str = "user-documents.json"
        max_documents: int = Field(default=1000, ge=1)
        autosave: bool = True
        write_text_copies: bool = True

    class Embedding(BaseModel):
        """Embedding model configuration."""

        model: str = "paraphrase-MiniLM-L3-v2"
        collection_name: str = "tome"

    class LLM(BaseModel):
        """Generative backend configuration."""

        provider: Literal["openai", "claude"] = "openai"
        model: str | None = None
        api_key: str | None = Field(default=None, repr=False)
        max_tokens: int = 1000
        temperature: float = 0.7

    class Search(BaseModel):
        """Query defaults."""

        default_max_results: int = Field(default=5, ge=1, le=100)

    paths: Paths = Field(default_factory=Paths)
    store: Store = Field(default_factory=Store)
    embedding: Embedding = Field(default_factory=Embedding)
    llm: LLM = Field(default_factory=LLM)
    search: Search = Field(default_factory=Search)

    def store_config(self) -> StoreConfig:
        """Build the immutable store configuration from this config."""
        return StoreConfig(
            data_dir=self.paths.data_dir,
            vector_store_dir=self.paths.vector_store_dir,
            documents_file=self.store.documents_file,
            max_documents=self.store.max_documents,
            autosave=self.store.autosave,
            write_text_copies=self.store.write_text_copies,
        )


def _apply_env_overrides(config_data: dict[str, Any]) -> dict[str, Any]:
    """Overlay environment variables on the file configuration."""
    if "TOME_DATA_DIR" in os.environ:
        config_data.setdefault("paths", {})["data_dir"] = os.environ["TOME_DATA_DIR"]

    if "TOME_VECTOR_STORE_DIR" in os.environ:
        config_data.setdefault("paths", {})["vector_store_dir"] = os.environ[
            "TOME_VECTOR_STORE_DIR"
        ]

    if "TOME_LLM_PROVIDER" in os.environ:
        config_data.setdefault("llm", {})["provider"] = os.environ["TOME_LLM_PROVIDER"]

    llm = config_data.setdefault("llm", {})
    if not llm.get("api_key"):
        key_var = "ANTHROPIC_API_KEY" if llm.get("provider") == "claude" else "OPENAI_API_KEY"
        if os.environ.get(key_var):
            llm["api_key"] = os.environ[key_var]

    return config_data


def load_config(config_path: str | None = None) -> TomeConfig:
    """Load configuration from file and environment variables.

    Args:
        config_path: Path to config file. If None, uses default locations.

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If an explicit config file is missing or any
            config file is invalid.
    """
    load_dotenv()

    if config_path and not Path(config_path).expanduser().exists():
        raise ConfigurationError("Configuration file not found", config_file=config_path)

    config_locations = [
        "config/tome.yaml",
        "~/.config/tome/config.yaml",
        os.environ.get("TOME_CONFIG", ""),
    ]
    if config_path:
        config_locations.insert(0, config_path)

    config_data: dict[str, Any] = {}
    loaded_from: str | None = None
    for loc in config_locations:
        if not loc:
            continue
        path = Path(loc).expanduser()
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML: {e}", config_file=str(path)) from e
            loaded_from = str(path)
            break

    if not isinstance(config_data, dict):
        raise ConfigurationError("Configuration root must be a mapping", config_file=loaded_from)

    config_data = _apply_env_overrides(config_data)

    try:
        return TomeConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", config_file=loaded_from) from e
