"""JSON loading and chunking utilities.

Two document shapes are understood:

* generic JSON of arbitrary nesting, flattened into readable sentences such as
  ``"Head Of Department Name: Dr. Alice Smith."`` and packed into chunks of a
  bounded number of whitespace tokens with a small overlap;
* pre-segmented knowledge files shaped ``{"pages": [{"page", "url",
  "content": [{"section", "text"}]}]}``, where every content section already is
  a chunk.

The shape is decided once per document by :func:`classify_document`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

from docgrounder.errors import DocumentParseError
from docgrounder.models import Chunk, JSONValue, SourceDocument
from docgrounder.utils.text import (
    normalize_whitespace,
    split_tokens,
    tail_tokens,
    to_readable_label,
    tokenize,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 400
DEFAULT_OVERLAP = 50


@dataclass(slots=True)
class GenericDocument:
    data: JSONValue


@dataclass(slots=True)
class PagedDocument:
    pages: List[Dict[str, Any]]


DocumentShape = Union[GenericDocument, PagedDocument]


def parse_document(raw: bytes) -> JSONValue:
    """Decode UTF-8 bytes and parse them as JSON."""
    try:
        return json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DocumentParseError(str(exc)) from exc
    except RecursionError as exc:
        raise DocumentParseError("document is nested too deeply") from exc


def _is_section(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("text"), str)


def _is_page(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    content = item.get("content")
    return isinstance(content, list) and all(_is_section(section) for section in content)


def classify_document(data: JSONValue) -> DocumentShape:
    """Pick the traversal for a parsed document from its structure alone."""
    if isinstance(data, dict):
        pages = data.get("pages")
        # a valid pages list wins; sibling top-level keys are not indexed
        if isinstance(pages, list) and pages and all(_is_page(page) for page in pages):
            return PagedDocument(pages=pages)
    return GenericDocument(data=data)


def _render_value(value: Union[str, int, float, bool, None]) -> str:
    if isinstance(value, str):
        return " ".join(value.split())
    return json.dumps(value)


def iter_sentences(data: JSONValue, context: str = "") -> Iterator[Tuple[str, str]]:
    """Yield ``(context, sentence)`` pairs, one per non-blank leaf value."""
    if isinstance(data, dict):
        for key, value in data.items():
            label = to_readable_label(str(key))
            child = f"{context} {label}".strip() if label else context
            yield from iter_sentences(value, child)
    elif isinstance(data, list):
        for item in data:
            yield from iter_sentences(item, context)
    else:
        rendered = _render_value(data)
        if not rendered:
            return
        yield context, f"{context}: {rendered}." if context else f"{rendered}."


def _pack(
    sentences: Iterable[Tuple[str, str]], *, max_tokens: int, overlap: int
) -> Iterator[Tuple[str, str]]:
    """Pack sentences into ``(section, body)`` pairs bounded by ``max_tokens``.

    Every body after the first starts with the last ``overlap`` tokens of the
    previous one; those carried tokens do not count against ``max_tokens``.
    """
    overlap = max(min(overlap, max_tokens - 1), 0)
    current: List[str] = []
    fresh = 0
    section = ""

    for context, sentence in sentences:
        for piece in split_tokens(sentence, max_tokens=max_tokens):
            words = tokenize(piece)
            if fresh and fresh + len(words) > max_tokens:
                yield section, " ".join(current)
                current = tail_tokens(current, overlap)
                fresh = 0
            if not fresh:
                section = context
            current.extend(words)
            fresh += len(words)

    if fresh:
        yield section, " ".join(current)


def _header(source: str) -> str:
    return f"[File: {source}]"


def _segment_generic(
    data: JSONValue, source: str, path: str, *, max_tokens: int, overlap: int
) -> List[Chunk]:
    packed = _pack(iter_sentences(data), max_tokens=max_tokens, overlap=overlap)
    return [
        Chunk(text=f"{_header(source)} {body}", source=source, path=path, section=section)
        for section, body in packed
    ]


def _segment_pages(pages: List[Dict[str, Any]], source: str, path: str) -> List[Chunk]:
    chunks: List[Chunk] = []
    for page in pages:
        page_label = str(page.get("page") or "").strip()
        page_path = str(page.get("url") or path)
        for item in page["content"]:
            text = normalize_whitespace(item["text"].splitlines())
            if not text:
                continue
            section = str(item.get("section") or page_label).strip()
            chunks.append(
                Chunk(
                    text=f"{_header(source)} [Page: {page_label}] [Section: {section}] {text}",
                    source=page_label or source,
                    path=page_path,
                    section=section,
                )
            )
    return chunks


def segment_document(
    data: JSONValue,
    source: str,
    path: str,
    *,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    overlap: int = DEFAULT_OVERLAP,
) -> List[Chunk]:
    """Convert one parsed document into ordered chunks."""
    shape = classify_document(data)
    if isinstance(shape, PagedDocument):
        return _segment_pages(shape.pages, source, path)
    return _segment_generic(shape.data, source, path, max_tokens=max_tokens, overlap=overlap)


def build_chunks(
    document: SourceDocument,
    *,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    overlap: int = DEFAULT_OVERLAP,
) -> List[Chunk]:
    """Produce chunks for a source document; unparsable documents yield none."""
    try:
        data = parse_document(document.raw)
    except DocumentParseError as exc:
        LOGGER.error("Failed to parse %s: %s", document.path, exc)
        return []

    try:
        return segment_document(
            data,
            document.name,
            document.document_id,
            max_tokens=max_tokens,
            overlap=overlap,
        )
    except RecursionError:
        LOGGER.error("Failed to parse %s: document is nested too deeply", document.path)
        return []
