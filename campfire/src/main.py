"""
Campfire - Application Entry Point
===================================
FastAPI application factory.  The lifespan wires the catalog, vector
store, Gemini clients and the ``SearchSession`` once per process; route
handlers reach the session through ``app.state``.

The product index is *not* built at startup: the first search builds it
(see ``SearchSession.ensure_index``).  Run ``campfire.scripts.build_index``
to build it ahead of traffic.

Run:
    uvicorn campfire.src.main:app --reload
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from campfire.src.api.routes import router
from campfire.src.core.clients import create_chat_model, create_embedder
from campfire.src.core.indexer import ProductIndexer
from campfire.src.core.query_engine import ProductQueryEngine
from campfire.src.core.search_session import SearchSession
from campfire.src.core.synthesizer import ResponseSynthesizer
from campfire.src.database.catalog import MongoCatalogStore
from campfire.src.database.vector_store import ProductVectorStore
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)


def create_search_session() -> SearchSession:
    """Wire the production collaborators into a ``SearchSession``."""
    catalog = MongoCatalogStore()
    store = ProductVectorStore()
    embedder = create_embedder()
    llm = create_chat_model()

    return SearchSession(
        indexer=ProductIndexer(catalog, store, embedder),
        query_engine=ProductQueryEngine(catalog, store, embedder),
        synthesizer=ResponseSynthesizer(llm),
    )


def create_app(session: SearchSession | None = None) -> FastAPI:
    """
    Build the FastAPI app.

    Passing *session* skips the production wiring (used by tests).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.search_session = session or create_search_session()
        logger.info("Campfire search API ready.")
        yield
        logger.info("Campfire search API shutting down.")

    app = FastAPI(title="Campfire Product Search", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
