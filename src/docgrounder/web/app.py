"""FastAPI application exposing chat and re-index endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from docgrounder.config import AppConfig
from docgrounder.errors import ConfigurationError, ProviderError
from docgrounder.service import KnowledgeBase

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="docgrounder", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_state: dict[str, Any] = {"config": None, "kb": None}


class ChatPayload(BaseModel):
    question: str


class ChatResponse(BaseModel):
    answer: str
    sources: List[str]


def configure(config: AppConfig) -> None:
    """Use ``config`` for the knowledge base built on first use."""
    _state["config"] = config
    _state["kb"] = None


def set_knowledge_base(kb: KnowledgeBase | None) -> None:
    _state["kb"] = kb


def get_knowledge_base() -> KnowledgeBase:
    if _state["kb"] is None:
        _state["kb"] = KnowledgeBase(_state["config"] or AppConfig.from_env())
    return _state["kb"]


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    # the store is empty after every restart, so build it before serving
    LOGGER.info("Running automatic indexing of local JSON files...")
    stats = await asyncio.to_thread(get_knowledge_base().reindex)
    LOGGER.info("Startup indexing finished: %s chunks upserted", stats.upserted)


@app.get("/")
async def health() -> dict[str, str]:
    return {"status": "ok", "message": "docgrounder is running."}


@app.post("/chat")
async def chat(payload: ChatPayload) -> ChatResponse:
    question = payload.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="A non-empty 'question' is required")

    LOGGER.info("Received question: %r", question[:120])
    kb = get_knowledge_base()
    try:
        answer = await asyncio.to_thread(kb.ask, question)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ProviderError as exc:
        LOGGER.error("Chat request failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return ChatResponse(answer=answer.answer, sources=answer.sources)


@app.post("/reindex")
async def reindex() -> dict[str, Any]:
    LOGGER.info("Manual reindex requested...")
    kb = get_knowledge_base()
    try:
        stats = await asyncio.to_thread(kb.reindex)
    except Exception as exc:
        LOGGER.exception("Reindexing failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to complete reindexing.") from exc

    return {"success": True, "message": "Reindexing complete.", "stats": stats.as_dict()}
