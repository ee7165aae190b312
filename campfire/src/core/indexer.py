"""
Campfire - ProductIndexer
==========================
Full rebuild of the product vector index: read catalog → embed → upsert.

Key design decisions:
    • **Dependency Injection** – receives the catalog, the vector store and
      the embedder; nothing is constructed here.
    • **One embedding per product** – the canonical product text is built
      from ``PRODUCT_INFO_TEMPLATE`` and is deterministic, so unchanged
      products re-embed to the same vector.
    • **Skip on failure** – a product whose embedding fails (or times out)
      is logged and left out; the build carries on with the rest.  A
      non-empty catalog where every embedding fails is a failed build.
    • **Bounded concurrency** – at most ``MAX_WORKERS`` embedding calls are
      in flight; results keep catalog order.
    • **Single batch upsert** – ids, vectors and metadata are accumulated
      in parallel lists and written in one call.  A failed upsert fails
      the whole build with ``IndexBuildError``.

Usage:
    from campfire.src.core.indexer import ProductIndexer
    indexer = ProductIndexer(catalog, vector_store, embedder)
    count = await indexer.build()
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from campfire.config.prompt_templates import PRODUCT_INFO_TEMPLATE
from campfire.config.settings import settings
from campfire.src.core.clients import Embedder
from campfire.src.core.exceptions import IndexBuildError
from campfire.src.core.models import Product, RecordMetadata, Vector
from campfire.src.utils.async_utils import run_with_timeout
from campfire.src.utils.logger import get_logger
from campfire.src.utils.text_utils import format_price, normalise_text

logger = get_logger(__name__)


def product_info(product: Product) -> str:
    """Canonical text embedded for *product*."""
    return PRODUCT_INFO_TEMPLATE.format(name=normalise_text(product.name), price=format_price(product.price), description=normalise_text(product.description))


class ProductIndexer:
    """
    Builds the product index from scratch on every call.

    Parameters
    ----------
    catalog
        Catalog store exposing ``list_all()``.
    vector_store
        Vector store exposing ``upsert(ids, vectors, metadatas)``.
    embedder
        ``Embedder``-compatible model.
    max_workers
        Concurrent embedding calls.  Defaults to ``settings.MAX_WORKERS``.
    timeout
        Per-embedding bound in seconds.
    """

    __slots__ = ("_catalog", "_store", "_embedder", "_max_workers", "_timeout")

    def __init__(self, catalog: Any, vector_store: Any, embedder: Embedder, max_workers: int | None = None, timeout: float | None = None) -> None:
        self._catalog = catalog
        self._store = vector_store
        self._embedder = embedder
        self._max_workers = max_workers or settings.MAX_WORKERS
        self._timeout = timeout or settings.REMOTE_CALL_TIMEOUT_SECONDS


    async def build(self) -> int:
        """
        Rebuild the index from the full catalog.

        Returns
        -------
        int
            Number of records upserted (products that embedded successfully).

        Raises
        ------
        IndexBuildError
            If the catalog cannot be read, no product could be embedded
            or the batch upsert fails.
        """
        t_start = time.perf_counter()

        logger.info("[INDEX] Reading product catalog.")
        try:
            products = await self._catalog.list_all()
        except Exception as exc:
            logger.exception("[INDEX] Failed to read the product catalog.")
            raise IndexBuildError(f"catalog read failed: {exc}") from exc

        logger.info("[INDEX] Embedding %d product(s) with %d worker(s).", len(products), self._max_workers)
        semaphore = asyncio.Semaphore(self._max_workers)
        vectors = await asyncio.gather(*(self._embed_product(p, semaphore) for p in products))

        # ── Accumulate parallel sequences for the successful products ──
        ids: list[str] = []
        embeddings: list[Vector] = []
        metadatas: list[RecordMetadata] = []
        for product, vector in zip(products, vectors):
            if vector is None:
                continue
            ids.append(product.key)
            embeddings.append(vector)
            metadatas.append(product.metadata())

        skipped = len(products) - len(ids)
        if not products:
            logger.warning("[INDEX] Catalog is empty: nothing to upsert.")
            return 0
        if not ids:
            logger.error("[INDEX] None of the %d product(s) could be embedded.", len(products))
            raise IndexBuildError("no product could be embedded")

        try:
            written = await self._store.upsert(ids, embeddings, metadatas)
        except Exception as exc:
            logger.exception("[INDEX] Batch upsert of %d record(s) failed.", len(ids))
            raise IndexBuildError(f"vector store upsert failed: {exc}") from exc

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[INDEX] DONE: %d record(s) upserted, %d skipped in %.1fms.", written, skipped, elapsed_ms)
        return written


    async def _embed_product(self, product: Product, semaphore: asyncio.Semaphore) -> Vector | None:
        """Embed one product; ``None`` marks a skipped product."""
        async with semaphore:
            try:
                logger.debug("[INDEX] Embedding product %s: %s", product.id, product.name)
                vectors = await run_with_timeout(self._embedder.aembed_documents([product_info(product)]), self._timeout, f"embedding of product {product.id}")
                return list(vectors[0])
            except Exception:
                logger.exception("[INDEX] Error embedding product %s (%s): skipped.", product.id, product.name)
                return None
