"""Embedding engine for document text."""

import logging
from typing import Any

import numpy as np
from chromadb.api.types import Documents, EmbeddingFunction, Embeddings
from chromadb.utils.embedding_functions import register_embedding_function

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "paraphrase-MiniLM-L3-v2"
EMBEDDING_FUNCTION_NAME = "tome-sentence-transformers"


class EmbeddingEngine:
    """Engine for creating normalized sentence-transformers embeddings.

    The model is loaded on first use so that commands which never touch
    the index do not pay for it.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL) -> None:
        self.model_name = model_name
        self._model = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            logger.info(f"Loading embedding model {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_texts(self, texts: list[str]) -> list[np.ndarray]:
        """Create embeddings for multiple texts.

        Args:
            texts: List of texts to embed

        Returns:
            One float32 vector per text
        """
        embeddings = self.model.encode(
            texts,
            convert_to_numpy=True,
            normalize_embeddings=True,
            batch_size=32,
        )
        return list(embeddings.astype(np.float32))


@register_embedding_function
class TomeEmbeddingFunction(EmbeddingFunction[Documents]):
    """ChromaDB embedding function backed by an :class:`EmbeddingEngine`."""

    def __init__(self, engine: EmbeddingEngine | None = None) -> None:
        """Initialize the embedding function."""
        self.engine = engine or EmbeddingEngine()

    def __call__(self, input: Documents) -> Embeddings:
        """Create embeddings for texts.

        Args:
            input: Sequence of texts to embed

        Returns:
            List of embeddings as numpy arrays
        """
        return self.engine.embed_texts(list(input))

    @staticmethod
    def name() -> str:
        return EMBEDDING_FUNCTION_NAME

    def get_config(self) -> dict[str, Any]:
        """Configuration ChromaDB stores with the collection."""
        return {"model_name": getattr(self.engine, "model_name", DEFAULT_MODEL)}

    @staticmethod
    def build_from_config(config: dict[str, Any]) -> "TomeEmbeddingFunction":
        return TomeEmbeddingFunction(EmbeddingEngine(config.get("model_name", DEFAULT_MODEL)))
