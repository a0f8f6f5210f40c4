"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Iterator


def iter_json_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield JSON paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_json_paths(sorted(child for child in item.rglob("*.json")))
        elif item.is_file() and item.suffix.lower() == ".json":
            yield item


def compute_sha256(data: bytes) -> str:
    """Compute the SHA256 hex digest of a byte string."""
    return hashlib.sha256(data).hexdigest()

