"""Content fingerprints used to decide which documents need re-indexing."""

from __future__ import annotations

import logging
from typing import MutableMapping

from docgrounder.utils.files import compute_sha256

LOGGER = logging.getLogger(__name__)


class ChangeDetector:
    """Remembers the digest each document had when it was last indexed.

    The table lives in ``backend`` (a plain dict unless another mapping is
    injected) and is never evicted, so it grows with the number of distinct
    documents seen. An empty table means every document is indexed again.
    """

    def __init__(self, backend: MutableMapping[str, str] | None = None) -> None:
        self._digests: MutableMapping[str, str] = {} if backend is None else backend

    @staticmethod
    def fingerprint(raw: bytes) -> str:
        return compute_sha256(raw)

    def should_reindex(self, document_id: str, raw: bytes) -> bool:
        previous = self._digests.get(document_id)
        return previous is None or previous != self.fingerprint(raw)

    def mark_indexed(self, document_id: str, raw: bytes) -> None:
        self._digests[document_id] = self.fingerprint(raw)
        LOGGER.debug("Recorded fingerprint for %s", document_id)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._digests

    def __len__(self) -> int:
        return len(self._digests)
