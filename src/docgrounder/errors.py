"""Exception hierarchy shared by the indexing and query paths."""

from __future__ import annotations


class DocgrounderError(Exception):
    """Base class for docgrounder failures."""


class DocumentParseError(DocgrounderError):
    """A source document could not be decoded or parsed."""


class ProviderError(DocgrounderError):
    """An embedding or generation provider call failed."""


class ConfigurationError(DocgrounderError):
    """A capability is missing the settings it needs (credentials, endpoint)."""
