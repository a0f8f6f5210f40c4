"""Tests for the FastAPI web application."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import HashingEmbedder, RecordingGenerator
from docgrounder.answering import NO_CONTEXT_ANSWER
from docgrounder.config import AppConfig
from docgrounder.errors import ConfigurationError, ProviderError
from docgrounder.service import KnowledgeBase
from docgrounder.web.app import app, configure, get_knowledge_base, set_knowledge_base


client = TestClient(app)


@pytest.fixture
def kb(tmp_path: Path):
    (tmp_path / "faculty.json").write_text(
        json.dumps({"head": {"name": "Dr. Alice Smith", "dept": "Computer Science"}})
    )
    knowledge_base = KnowledgeBase(
        AppConfig(data_dir=tmp_path),
        embedder=HashingEmbedder(),
        generator=RecordingGenerator("Dr. Alice Smith."),
    )
    set_knowledge_base(knowledge_base)
    yield knowledge_base
    set_knowledge_base(None)


@pytest.fixture
def mock_kb():
    knowledge_base = MagicMock()
    set_knowledge_base(knowledge_base)
    yield knowledge_base
    set_knowledge_base(None)


class TestKnowledgeBaseState:
    """Tests for the module-level knowledge base holder."""

    def test_configure_builds_lazily(self, tmp_path: Path) -> None:
        configure(AppConfig(data_dir=tmp_path))
        try:
            knowledge_base = get_knowledge_base()
            assert knowledge_base.data_dir == tmp_path
            assert get_knowledge_base() is knowledge_base
        finally:
            configure(None)


class TestHealthEndpoint:
    """Tests for GET /."""

    def test_health(self) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestChatEndpoint:
    """Tests for POST /chat endpoint."""

    def test_chat_empty_question(self, mock_kb: MagicMock) -> None:
        """Returns 400 for a blank question."""
        response = client.post("/chat", json={"question": "   "})
        assert response.status_code == 400
        assert "question" in response.json()["detail"]
        mock_kb.ask.assert_not_called()

    def test_chat_missing_field(self) -> None:
        response = client.post("/chat", json={})
        assert response.status_code == 422

    def test_chat_answers_from_index(self, kb: KnowledgeBase) -> None:
        """Answers with deduplicated sources after indexing."""
        kb.reindex()

        response = client.post("/chat", json={"question": "Who is the head of Computer Science?"})

        assert response.status_code == 200
        assert response.json() == {"answer": "Dr. Alice Smith.", "sources": ["faculty.json"]}

    def test_chat_without_context(self, kb: KnowledgeBase) -> None:
        """An empty index yields the canned answer."""
        response = client.post("/chat", json={"question": "Anything?"})

        assert response.status_code == 200
        assert response.json() == {"answer": NO_CONTEXT_ANSWER, "sources": []}

    def test_chat_not_configured(self, mock_kb: MagicMock) -> None:
        """A missing API key is reported as 503."""
        mock_kb.ask.side_effect = ConfigurationError("set OPENROUTER_API_KEY")

        response = client.post("/chat", json={"question": "Who?"})

        assert response.status_code == 503
        assert "OPENROUTER_API_KEY" in response.json()["detail"]

    def test_chat_provider_failure(self, mock_kb: MagicMock) -> None:
        """Upstream failures are reported as 502."""
        mock_kb.ask.side_effect = ProviderError("upstream 500")

        response = client.post("/chat", json={"question": "Who?"})

        assert response.status_code == 502
        assert response.json()["detail"] == "upstream 500"

    def test_chat_question_trimmed(self, mock_kb: MagicMock) -> None:
        mock_kb.ask.return_value = MagicMock(answer="ok", sources=[])

        client.post("/chat", json={"question": "  Who?  "})

        mock_kb.ask.assert_called_once_with("Who?")


class TestReindexEndpoint:
    """Tests for POST /reindex endpoint."""

    def test_reindex(self, kb: KnowledgeBase) -> None:
        response = client.post("/reindex")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["stats"]["inserted"] == 1
        assert len(kb.store) == 1

    def test_reindex_twice_is_idempotent(self, kb: KnowledgeBase) -> None:
        client.post("/reindex")
        response = client.post("/reindex")

        assert response.json()["stats"]["upserted"] == 0
        assert response.json()["stats"]["skipped"] == 1

    def test_reindex_failure(self, mock_kb: MagicMock) -> None:
        mock_kb.reindex.side_effect = RuntimeError("disk gone")

        response = client.post("/reindex")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to complete reindexing."
