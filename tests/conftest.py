"""Shared test doubles."""

from __future__ import annotations

import zlib
from typing import Iterable, List

import numpy as np
import pytest


class HashingEmbedder:
    """Deterministic bag-of-words embedder, no model download needed."""

    def __init__(self, dimension: int = 64) -> None:
        self.dimension = dimension
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> np.ndarray:
        vector = np.zeros(self.dimension, dtype="float32")
        for token in text.lower().split():
            token = token.strip(".,:;[]()")
            if token:
                vector[zlib.crc32(token.encode("utf-8")) % self.dimension] += 1.0
        return vector

    def embed(self, texts: Iterable[str]) -> np.ndarray:
        batch = list(texts)
        self.calls.append(batch)
        return np.vstack([self._vector(text) for text in batch])


class RecordingGenerator:
    def __init__(self, reply: str = "Generated answer") -> None:
        self.reply = reply
        self.calls: List[tuple[str, str]] = []

    def generate(self, system_instruction: str, user_message: str) -> str:
        self.calls.append((system_instruction, user_message))
        return self.reply


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def generator() -> RecordingGenerator:
    return RecordingGenerator()
