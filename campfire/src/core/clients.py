"""
Campfire - Model Clients
=========================
Factories for the Gemini embedding and chat models, plus the structural
types the pipeline expects from them.

Any LangChain embedding model satisfies ``Embedder`` and any LangChain chat
model satisfies ``ChatModel``, so tests inject lightweight fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from campfire.config.settings import settings
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)


# ── Protocols ─────────────────────────────────────────────────────────

@runtime_checkable
class Embedder(Protocol):
    """Structural type for any LangChain-compatible async embedding model."""

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]: ...

    async def aembed_query(self, text: str) -> list[float]: ...


@runtime_checkable
class ChatModel(Protocol):
    """Structural type for any LangChain chat model."""

    async def ainvoke(self, input: Sequence[Any], **kwargs: Any) -> Any: ...


# ── Factories ─────────────────────────────────────────────────────────

def create_embedder() -> Embedder:
    """Initialise the Gemini embedding model via LangChain."""
    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    logger.info("Embedder initialised: %s", settings.EMBEDDING_MODEL)
    return embedder


def create_chat_model() -> ChatModel:
    """Initialise the Gemini LLM via LangChain."""
    from langchain_google_genai import ChatGoogleGenerativeAI

    llm = ChatGoogleGenerativeAI(model=settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    logger.info("LLM initialised: %s (temperature=%.1f)", settings.LLM_MODEL, settings.LLM_TEMPERATURE)
    return llm
