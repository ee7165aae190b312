"""
Pytest configuration for the Campfire test suite.

Configures:
- required settings (``GOOGLE_API_KEY``, ``MONGO_URI``) before any
  ``campfire`` import, since ``settings`` is instantiated at import time
- in-memory fakes for the catalog, embedder, vector store and chat model
"""

import asyncio
import os
import tempfile
from pathlib import Path

os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("LANCEDB_URI", str(Path(tempfile.gettempdir()) / "campfire-test-lancedb"))
os.environ.setdefault("REMOTE_CALL_TIMEOUT_SECONDS", "2")

import pytest
from langchain_core.messages import AIMessage

from campfire.src.core.indexer import ProductIndexer
from campfire.src.core.models import Product, VectorHit
from campfire.src.core.query_engine import ProductQueryEngine
from campfire.src.core.search_session import SearchSession
from campfire.src.core.synthesizer import ResponseSynthesizer


class FakeCatalog:
    """Catalog store backed by a dict; products can be deleted after indexing."""

    def __init__(self, products):
        self.products = {p.id: p for p in products}
        self.list_calls = 0
        self.lookups = []

    async def list_all(self):
        self.list_calls += 1
        return sorted(self.products.values(), key=lambda p: p.id)

    async def find_by_id(self, product_id):
        self.lookups.append(product_id)
        return self.products.get(product_id)


class FakeEmbedder:
    """Deterministic embedder; texts containing a ``fail_on`` marker raise."""

    def __init__(self, vector=None, fail_on=(), delay=0.0, query_error=None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.fail_on = tuple(fail_on)
        self.delay = delay
        self.query_error = query_error
        self.document_calls = []
        self.query_calls = []

    async def aembed_documents(self, texts):
        self.document_calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        for text in texts:
            if any(marker in text for marker in self.fail_on):
                raise RuntimeError(f"embedding service rejected: {text}")
        return [list(self.vector) for _ in texts]

    async def aembed_query(self, text):
        self.query_calls.append(text)
        if self.query_error is not None:
            raise self.query_error
        return list(self.vector)


class FakeVectorStore:
    """Dict-backed vector store; ``hits`` overrides query results when set."""

    def __init__(self, hits=None, upsert_error=None):
        self.records = {}
        self.hits = hits
        self.upsert_error = upsert_error
        self.upsert_calls = 0
        self.query_limits = []

    async def upsert(self, ids, vectors, metadatas):
        self.upsert_calls += 1
        if self.upsert_error is not None:
            raise self.upsert_error
        for pid, vec, meta in zip(ids, vectors, metadatas):
            self.records[pid] = (vec, meta)
        return len(ids)

    async def query(self, vector, limit, include_metadata=True, include_distance=True):
        self.query_limits.append(limit)
        if self.hits is not None:
            return list(self.hits)[:limit]
        return [VectorHit(id=pid, score=0.9, metadata=meta) for pid, (_, meta) in list(self.records.items())[:limit]]


class FakeChatModel:
    """Chat model returning a canned answer, or raising ``error``."""

    def __init__(self, answer="Grab the Tent! Perfect for two campers.", error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    async def ainvoke(self, messages, **kwargs):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.answer)


@pytest.fixture
def tent():
    return Product(id=1, name="Tent", price=99, description="2-person tent", image_url="tent.png")


@pytest.fixture
def products(tent):
    return [
        tent,
        Product(id=2, name="Camping Stove", price=49.99, description="Compact gas stove"),
        Product(id=3, name="Hiking Poles", price=24.99, description="Adjustable aluminium poles"),
    ]


@pytest.fixture
def catalog(products):
    return FakeCatalog(products)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def vector_store():
    return FakeVectorStore()


@pytest.fixture
def chat_model():
    return FakeChatModel()


@pytest.fixture
def make_session():
    """Factory wiring fakes into a real ``SearchSession``."""

    def _make(catalog, store, embedder, llm, threshold=0.3, limit=1, overfetch_factor=2):
        return SearchSession(
            indexer=ProductIndexer(catalog, store, embedder, max_workers=4, timeout=2),
            query_engine=ProductQueryEngine(catalog, store, embedder, threshold=threshold, limit=limit, overfetch_factor=overfetch_factor, timeout=2),
            synthesizer=ResponseSynthesizer(llm, timeout=2),
        )

    return _make
