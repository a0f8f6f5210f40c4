"""In-memory vector store with exact cosine search."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Sequence

import numpy as np

from docgrounder.models import QueryResult, Record, ScoredChunk

LOGGER = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors, 0.0 when either has zero norm."""
    left = np.asarray(a, dtype="float64")
    right = np.asarray(b, dtype="float64")
    denom = float(np.linalg.norm(left) * np.linalg.norm(right))
    if denom == 0.0:
        return 0.0
    return float(np.dot(left, right) / denom)


class InMemoryVectorStore:
    """Flat collection of records scanned linearly on every query.

    Records of one document are grouped into generations: a re-index writes a
    new generation that stays hidden until :meth:`promote` switches the
    document over to it, after which the older records are no longer returned
    and :meth:`compact` can evict them.
    """

    def __init__(self, *, dimension: int | None = None) -> None:
        self.dimension = dimension
        self._records: List[Record] = []
        self._latest: Dict[str, int] = {}
        self._promoted: Dict[str, int] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def count(self) -> int:
        """Number of records a query can currently see."""
        with self._lock:
            return sum(1 for record in self._records if self._is_visible(record))

    def _is_visible(self, record: Record) -> bool:
        if record.document is None:
            return True
        promoted = self._promoted.get(record.document)
        return promoted is None or record.generation == promoted

    def begin_generation(self, document: str) -> int:
        """Reserve the next generation number for a document."""
        with self._lock:
            generation = self._latest.get(document, 0) + 1
            self._latest[document] = generation
            return generation

    def promote(self, document: str, generation: int) -> None:
        """Make ``generation`` the only visible generation of ``document``."""
        with self._lock:
            self._promoted[document] = generation
        LOGGER.debug("Promoted %s to generation %s", document, generation)

    def compact(self) -> int:
        """Evict records hidden by a newer promoted generation."""
        with self._lock:
            before = len(self._records)
            self._records = [record for record in self._records if self._is_visible(record)]
            removed = before - len(self._records)
        if removed:
            LOGGER.info("Evicted %s stale records", removed)
        return removed

    def sources(self) -> List[str]:
        with self._lock:
            seen: Dict[str, None] = {}
            for record in self._records:
                if self._is_visible(record) and record.metadata.get("source"):
                    seen.setdefault(record.metadata["source"], None)
            return list(seen)

    def upsert(
        self,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]] | np.ndarray,
        metadatas: Sequence[Dict[str, Any]],
        texts: Sequence[str],
        *,
        document: str | None = None,
        generation: int = 0,
    ) -> None:
        """Append one record per input tuple.

        The whole batch is validated before anything is appended, so a query
        never sees part of it.
        """
        if not ids and not len(embeddings):
            return

        vectors = np.asarray(embeddings, dtype="float64")
        if vectors.ndim == 1 and len(ids) == 1:
            vectors = vectors.reshape(1, -1)
        if vectors.ndim != 2:
            raise ValueError(f"Expected a 2-D batch of embeddings, got shape {vectors.shape}")
        if not (len(ids) == vectors.shape[0] == len(metadatas) == len(texts)):
            raise ValueError("Ids, embeddings, metadatas and texts length mismatch")
        with self._lock:
            dimension = self.dimension if self.dimension is not None else vectors.shape[1]
            if vectors.shape[1] != dimension:
                raise ValueError(
                    f"Embedding dimension {vectors.shape[1]} does not match store dimension {dimension}"
                )
            self.dimension = dimension
            self._records.extend(
                Record(
                    id=record_id,
                    embedding=vector,
                    metadata=dict(metadata),
                    text=text,
                    document=document,
                    generation=generation,
                )
                for record_id, vector, metadata, text in zip(ids, vectors, metadatas, texts)
            )
            total = len(self._records)
        LOGGER.info("Inserted %s chunks into vector store. Total size: %s", len(ids), total)

    def query(self, query_embedding: Sequence[float] | np.ndarray, top_k: int = 5) -> QueryResult:
        """Return the ``top_k`` records most cosine-similar to the query."""
        with self._lock:
            rows = [record for record in self._records if self._is_visible(record)]

        if not rows or top_k <= 0:
            return QueryResult()

        query = np.asarray(query_embedding, dtype="float64").ravel()
        embeddings = np.vstack([row.embedding for row in rows])
        if query.shape[0] != embeddings.shape[1]:
            raise ValueError(
                f"Query dimension {query.shape[0]} does not match store dimension {embeddings.shape[1]}"
            )

        denom = np.linalg.norm(embeddings, axis=1) * np.linalg.norm(query)
        scores = np.divide(
            embeddings @ query, denom, out=np.zeros(len(rows), dtype="float64"), where=denom > 0
        )
        # stable: equal scores keep insertion order
        top_indices = np.argsort(-scores, kind="stable")[:top_k]

        return QueryResult(
            hits=[
                ScoredChunk(
                    text=rows[idx].text,
                    metadata=dict(rows[idx].metadata),
                    score=float(scores[idx]),
                )
                for idx in top_indices
            ]
        )
