"""Semantic retrieval interface."""

from __future__ import annotations

import logging

import numpy as np

from docgrounder.embedding.encoder import EmbeddingProvider
from docgrounder.errors import ProviderError
from docgrounder.index.storage import InMemoryVectorStore
from docgrounder.models import QueryResult

LOGGER = logging.getLogger(__name__)


class Retriever:
    """Embeds a question and ranks stored chunks against it."""

    def __init__(self, embedder: EmbeddingProvider, store: InMemoryVectorStore) -> None:
        self.embedder = embedder
        self.store = store

    def embed_question(self, question: str) -> np.ndarray:
        embeddings = np.asarray(self.embedder.embed([question]))
        if embeddings.ndim == 1:
            return embeddings
        if embeddings.shape[0] < 1:
            raise ProviderError("Embedding provider returned no vector for the question")
        return embeddings[0]

    def retrieve(self, question: str, *, top_k: int = 5) -> QueryResult:
        """Return the ``top_k`` best chunks; an empty result means no context."""
        result = self.store.query(self.embed_question(question), top_k=top_k)
        if result.is_empty:
            LOGGER.info("No relevant context found for %r", question[:60])
        return result
