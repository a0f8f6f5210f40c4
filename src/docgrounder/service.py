"""Wiring of the indexing and answering paths behind two operations."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from docgrounder.answering import Answerer
from docgrounder.config import AppConfig
from docgrounder.embedding.encoder import EmbeddingConfig, EmbeddingModel, EmbeddingProvider
from docgrounder.generation.client import ChatCompletionClient, GenerationProvider
from docgrounder.index.fingerprints import ChangeDetector
from docgrounder.index.indexer import Indexer, IndexStats
from docgrounder.index.search import Retriever
from docgrounder.index.storage import InMemoryVectorStore
from docgrounder.models import Answer, QueryResult

LOGGER = logging.getLogger(__name__)


class KnowledgeBase:
    """Process-lifetime index over the JSON documents in ``config.data_dir``.

    Nothing is persisted: a new instance starts with an empty store and an
    empty fingerprint table, so its first :meth:`reindex` rebuilds everything.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        embedder: EmbeddingProvider | None = None,
        generator: GenerationProvider | None = None,
        detector: ChangeDetector | None = None,
        base_dir: Path | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.data_dir = self.config.resolve_data_dir(base_dir)
        self.embedder = embedder or EmbeddingModel(EmbeddingConfig(model_name=self.config.model_name))
        self.generator = generator or ChatCompletionClient(
            self.config.llm_api_key,
            base_url=self.config.llm_base_url,
            model=self.config.llm_model,
            timeout=self.config.llm_timeout,
        )
        self.store = InMemoryVectorStore()
        self.detector = detector if detector is not None else ChangeDetector()
        self.indexer = Indexer(
            self.embedder,
            self.store,
            self.detector,
            max_tokens=self.config.max_tokens,
            overlap=self.config.overlap,
            batch_size=self.config.batch_size,
        )
        self.retriever = Retriever(self.embedder, self.store)
        self.answerer = Answerer(
            self.retriever,
            self.generator,
            top_k=self.config.top_k,
            max_prompt_chars=self.config.max_prompt_chars,
        )
        self._index_lock = threading.Lock()

    def reindex(self) -> IndexStats:
        """Scan the data directory and index every new or changed document."""
        with self._index_lock:
            if not self.data_dir.exists():
                LOGGER.info("Creating missing data directory at: %s", self.data_dir)
                self.data_dir.mkdir(parents=True, exist_ok=True)
                return IndexStats()

            stats = self.indexer.index([self.data_dir])
            self.store.compact()
            return stats

    def search(self, question: str, *, top_k: int | None = None) -> QueryResult:
        return self.retriever.retrieve(
            question, top_k=self.config.top_k if top_k is None else top_k
        )

    def ask(self, question: str) -> Answer:
        """Answer a question from the indexed documents."""
        return self.answerer.answer(question)
