"""Sentence-transformers embedding provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Literal, Protocol, Sequence, runtime_checkable

import numpy as np
from sentence_transformers import SentenceTransformer

from docgrounder.errors import ProviderError

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that maps a batch of strings to one vector per string, in order."""

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        ...


@dataclass(slots=True)
class EmbeddingConfig:
    model_name: str = DEFAULT_MODEL
    batch_size: int = 16
    normalize: bool = True
    backend: Literal["torch", "onnx", "openvino"] = "torch"
    device: str | None = None


class EmbeddingModel:
    """Embedding provider backed by a local `SentenceTransformer` model.

    The model is loaded on first use so that constructing the wrapper never
    touches the network or the disk.
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()
        self._model: SentenceTransformer | None = None

    def _load_model(self) -> SentenceTransformer:
        """Load the SentenceTransformer model with the configured backend."""
        if self._model is None:
            try:
                self._model = SentenceTransformer(
                    self.config.model_name,
                    backend=self.config.backend,
                    device=self.config.device,
                )
            except Exception as exc:
                raise ProviderError(
                    f"Unable to load embedding model {self.config.model_name!r}: {exc}"
                ) from exc
            logger.info(
                "Loaded embedding model %s | Backend: %s",
                self.config.model_name,
                self.config.backend,
            )
        return self._model

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        """Return float32 embeddings for input texts, one row per text."""
        sentences = list(texts)
        model = self._load_model()
        try:
            embeddings = model.encode(
                sentences,
                batch_size=self.config.batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=self.config.normalize,
            )
        except Exception as exc:
            raise ProviderError(f"Embedding request failed: {exc}") from exc
        return np.atleast_2d(embeddings).astype("float32", copy=False)
