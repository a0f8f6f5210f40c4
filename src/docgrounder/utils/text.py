"""Text helpers including simple token-aware chunking."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List

_CAPITAL = re.compile(r"([A-Z])")
_SEPARATORS = re.compile(r"[_-]")


def to_readable_label(key: str) -> str:
    """Turn a camelCase / snake_case / kebab-case key into words.

    ``"headOfDepartment"`` becomes ``"Head Of Department"`` and
    ``"office_hours"`` becomes ``"Office hours"``.
    """
    if not key:
        return ""
    label = _CAPITAL.sub(r" \1", key)
    label = _SEPARATORS.sub(" ", label)
    label = " ".join(label.split())
    return label[:1].upper() + label[1:]


def tokenize(text: str) -> List[str]:
    """Whitespace-delimited tokens, the unit chunk sizes are measured in."""
    return text.split()


def count_tokens(text: str) -> int:
    return len(tokenize(text))


def split_tokens(text: str, *, max_tokens: int) -> Iterator[str]:
    """Split text into consecutive windows of at most ``max_tokens`` tokens."""
    tokens = tokenize(text)
    step = max(max_tokens, 1)
    for start in range(0, len(tokens), step):
        yield " ".join(tokens[start : start + step])


def tail_tokens(tokens: List[str], count: int) -> List[str]:
    """Last ``count`` tokens, used as the overlap carried into the next chunk."""
    if count <= 0:
        return []
    return tokens[-count:]


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())
