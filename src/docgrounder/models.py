"""Core docgrounder data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

import numpy as np

# Recursive JSON sum type: object / array / string / number / boolean / null.
JSONValue = Union[Dict[str, "JSONValue"], List["JSONValue"], str, int, float, bool, None]


@dataclass(slots=True)
class SourceDocument:
    """Raw bytes of one corpus document plus its stable identifier."""

    path: Path
    raw: bytes

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def document_id(self) -> str:
        return str(self.path)

    @classmethod
    def read(cls, path: Path) -> "SourceDocument":
        return cls(path=path, raw=Path(path).read_bytes())


@dataclass(frozen=True, slots=True)
class Chunk:
    """Bounded piece of document text paired with its provenance."""

    text: str
    source: str
    path: str
    section: str = ""

    @property
    def metadata(self) -> Dict[str, str]:
        return {"source": self.source, "path": self.path, "section": self.section}


@dataclass(slots=True)
class Record:
    """Unit stored in the vector store."""

    id: str
    embedding: np.ndarray
    metadata: Dict[str, Any]
    text: str
    document: str | None = None
    generation: int = 0


@dataclass(slots=True)
class ScoredChunk:
    text: str
    metadata: Dict[str, Any]
    score: float


@dataclass(slots=True)
class QueryResult:
    """Hits of one similarity query, best first."""

    hits: List[ScoredChunk] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self) -> Iterator[ScoredChunk]:
        return iter(self.hits)

    def __getitem__(self, index: int) -> ScoredChunk:
        return self.hits[index]

    @property
    def is_empty(self) -> bool:
        return not self.hits

    @property
    def texts(self) -> List[str]:
        return [hit.text for hit in self.hits]

    @property
    def metadatas(self) -> List[Dict[str, Any]]:
        return [hit.metadata for hit in self.hits]

    def sources(self) -> List[str]:
        """Distinct ``source`` values of the hits, first occurrence first."""
        seen: Dict[str, None] = {}
        for hit in self.hits:
            source = hit.metadata.get("source") if hit.metadata else None
            if source:
                seen.setdefault(source, None)
        return list(seen)


@dataclass(slots=True)
class Answer:
    answer: str
    sources: List[str] = field(default_factory=list)
    context_found: bool = True
