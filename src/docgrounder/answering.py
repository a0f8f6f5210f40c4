"""Grounded question answering on top of the retriever."""

from __future__ import annotations

import logging

from docgrounder.generation.client import GenerationProvider
from docgrounder.index.search import Retriever
from docgrounder.models import Answer, QueryResult

LOGGER = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an official assistant for this knowledge base.
Answer ONLY using the provided context.
If the answer is not present in the context, say you do not have that information.
Be concise and helpful."""

NO_CONTEXT_ANSWER = "I don't have enough information to answer that."


def build_user_message(question: str, context: QueryResult, *, max_chars: int = 8000) -> str:
    context_text = "\n\n".join(context.texts)
    message = f"Context:\n{context_text}\n\nQuestion:\n{question}"
    if len(message) > max_chars:
        message = message[:max_chars] + "..."
    return message


class Answerer:
    """Runs retrieval and hands the ranked context to the generation provider."""

    def __init__(
        self,
        retriever: Retriever,
        generator: GenerationProvider,
        *,
        top_k: int = 5,
        max_prompt_chars: int = 8000,
    ) -> None:
        self.retriever = retriever
        self.generator = generator
        self.top_k = top_k
        self.max_prompt_chars = max_prompt_chars

    def answer(self, question: str) -> Answer:
        context = self.retriever.retrieve(question, top_k=self.top_k)
        if context.is_empty:
            return Answer(answer=NO_CONTEXT_ANSWER, sources=[], context_found=False)

        user_message = build_user_message(question, context, max_chars=self.max_prompt_chars)
        LOGGER.debug("Prompting with %s context chunks", len(context))
        reply = self.generator.generate(SYSTEM_PROMPT, user_message)
        return Answer(answer=reply, sources=context.sources(), context_found=True)
