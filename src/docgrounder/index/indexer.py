"""Document indexing pipeline."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Sequence

import numpy as np

from docgrounder.embedding.encoder import EmbeddingProvider
from docgrounder.errors import ProviderError
from docgrounder.index.fingerprints import ChangeDetector
from docgrounder.index.storage import InMemoryVectorStore
from docgrounder.ingestion.json_loader import DEFAULT_MAX_TOKENS, DEFAULT_OVERLAP, build_chunks
from docgrounder.models import Chunk, SourceDocument
from docgrounder.utils.files import iter_json_paths

LOGGER = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


def find_json_files(paths: Sequence[Path]) -> list[Path]:
    """Find all JSON files under the given paths."""
    return list(iter_json_paths(paths))


def new_record_id() -> str:
    return f"id_{uuid.uuid4()}"


def iter_batches(chunks: Sequence[Chunk], batch_size: int) -> Iterator[Sequence[Chunk]]:
    step = max(batch_size, 1)
    for start in range(0, len(chunks), step):
        yield chunks[start : start + step]


@dataclass(slots=True)
class IndexStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    upserted: int = 0
    failed_batches: int = 0
    processed_files: list[Path] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        if status == "inserted":
            self.inserted += 1
        elif status == "updated":
            self.updated += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_files.append(path)

    def as_dict(self) -> dict:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "upserted": self.upserted,
            "failed_batches": self.failed_batches,
            "processed_files": [str(path) for path in self.processed_files],
        }


@dataclass(slots=True)
class BatchReport:
    upserted: int = 0
    failed_batches: int = 0
    total_batches: int = 0

    @property
    def succeeded_batches(self) -> int:
        return self.total_batches - self.failed_batches


class EmbeddingBatcher:
    """Drives chunks through the embedding provider in fixed-size batches.

    A batch whose embedding call fails is logged and dropped; it is not
    retried and the remaining batches still run.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        store: InMemoryVectorStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.batch_size = batch_size

    def _embed(self, texts: List[str]) -> np.ndarray:
        embeddings = np.asarray(self.embedder.embed(texts))
        if embeddings.ndim == 1 and len(texts) == 1:
            embeddings = embeddings.reshape(1, -1)
        if embeddings.ndim != 2 or embeddings.shape[0] != len(texts):
            raise ProviderError(
                f"Embedding provider returned {embeddings.shape[0] if embeddings.ndim else 0} "
                f"vectors for {len(texts)} texts"
            )
        return embeddings

    def embed_and_store(
        self,
        chunks: Sequence[Chunk],
        *,
        document: str | None = None,
        generation: int = 0,
    ) -> BatchReport:
        report = BatchReport()
        for batch in iter_batches(chunks, self.batch_size):
            report.total_batches += 1
            texts = [chunk.text for chunk in batch]
            try:
                embeddings = self._embed(texts)
                self.store.upsert(
                    [new_record_id() for _ in batch],
                    embeddings,
                    [chunk.metadata for chunk in batch],
                    texts,
                    document=document,
                    generation=generation,
                )
            except Exception as e:
                LOGGER.error(
                    "Failed to process batch %s of %s: %s",
                    report.total_batches,
                    document or "<unknown>",
                    e,
                )
                report.failed_batches += 1
                continue
            report.upserted += len(batch)
        return report


class Indexer:
    """Coordinates change detection, chunking and embedding of JSON documents."""

    def __init__(
        self,
        embedder: EmbeddingProvider,
        store: InMemoryVectorStore,
        detector: ChangeDetector | None = None,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        overlap: int = DEFAULT_OVERLAP,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.detector = detector if detector is not None else ChangeDetector()
        self.max_tokens = max_tokens
        self.overlap = overlap
        self.batcher = EmbeddingBatcher(embedder, store, batch_size=batch_size)

    def index(self, paths: Sequence[Path]) -> IndexStats:
        """Index every changed JSON document found under the given paths."""
        json_files = find_json_files(paths)
        stats = IndexStats()
        if not json_files:
            LOGGER.warning("No JSON files found")
            return stats

        for path in json_files:
            try:
                status = self._index_single(path, stats)
                stats.increment(status, path)
            except Exception as e:
                LOGGER.error("Failed to process %s: %s", path, e)
                stats.failed += 1
                stats.processed_files.append(path)

        LOGGER.info("Indexing complete. %s new/updated chunks inserted.", stats.upserted)
        return stats

    def _index_single(self, path: Path, stats: IndexStats) -> str:
        """Index a single JSON file when its bytes changed."""
        document = SourceDocument.read(path)
        document_id = document.document_id
        if not self.detector.should_reindex(document_id, document.raw):
            return "skipped"

        LOGGER.info("Processing updated/new file: %s", path)
        previously_indexed = document_id in self.detector
        chunks = build_chunks(document, max_tokens=self.max_tokens, overlap=self.overlap)
        if not chunks:
            LOGGER.warning("No text extracted from %s", path)
            if previously_indexed:
                # an empty generation hides what the old bytes produced
                self.store.promote(document_id, self.store.begin_generation(document_id))
            self.detector.mark_indexed(document_id, document.raw)
            return "skipped"

        generation = self.store.begin_generation(document_id)
        report = self.batcher.embed_and_store(chunks, document=document_id, generation=generation)
        stats.upserted += report.upserted
        stats.failed_batches += report.failed_batches

        if report.succeeded_batches == 0:
            # left unmarked so the next scan tries again
            LOGGER.error("All %s batches failed for %s", report.total_batches, path)
            return "failed"

        self.store.promote(document_id, generation)
        self.detector.mark_indexed(document_id, document.raw)
        return "updated" if previously_indexed else "inserted"

