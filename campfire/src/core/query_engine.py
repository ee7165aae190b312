"""
Campfire - ProductQueryEngine
==============================
Turns a natural-language query into catalog products:

    1. Embed the query (failure → ``QueryError``).
    2. Nearest-neighbour lookup, over-fetching
       ``SEARCH_RESULTS_LIMIT * SEARCH_OVERFETCH_FACTOR`` candidates.
    3. Keep candidates whose similarity ``score`` exceeds
       ``RELEVANCE_THRESHOLD``.
    4. Resolve each kept id through the catalog; ids that no longer
       resolve (product deleted since indexing) are dropped.
    5. Return at most ``SEARCH_RESULTS_LIMIT`` matches in the vector
       store's order.
"""

from __future__ import annotations

import time
from typing import Any

from campfire.config.settings import settings
from campfire.src.core.clients import Embedder
from campfire.src.core.exceptions import QueryError
from campfire.src.core.models import Product, QueryMatch, VectorHit
from campfire.src.utils.async_utils import run_with_timeout
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)


class ProductQueryEngine:
    """
    Parameters
    ----------
    catalog
        Catalog store exposing ``find_by_id(product_id)``.
    vector_store
        Vector store exposing ``query(vector, limit, include_metadata, include_distance)``.
    embedder
        ``Embedder``-compatible model.
    threshold
        Minimum similarity.  Defaults to ``settings.RELEVANCE_THRESHOLD``.
    limit
        Matches returned.  Defaults to ``settings.SEARCH_RESULTS_LIMIT``.
    overfetch_factor
        Candidate multiplier.  Defaults to ``settings.SEARCH_OVERFETCH_FACTOR``.
    """

    __slots__ = ("_catalog", "_store", "_embedder", "_threshold", "_limit", "_overfetch", "_timeout")

    def __init__(self, catalog: Any, vector_store: Any, embedder: Embedder, threshold: float | None = None, limit: int | None = None, overfetch_factor: int | None = None, timeout: float | None = None) -> None:
        self._catalog = catalog
        self._store = vector_store
        self._embedder = embedder
        self._threshold = settings.RELEVANCE_THRESHOLD if threshold is None else threshold
        self._limit = limit or settings.SEARCH_RESULTS_LIMIT
        self._overfetch = overfetch_factor or settings.SEARCH_OVERFETCH_FACTOR
        self._timeout = timeout or settings.REMOTE_CALL_TIMEOUT_SECONDS

    @property
    def candidate_count(self) -> int:
        return self._limit * self._overfetch


    async def query(self, query_text: str) -> list[QueryMatch]:
        """
        Find the catalog products closest to *query_text*.

        Raises
        ------
        QueryError
            If the query cannot be embedded or the vector store lookup fails.
        """
        t_start = time.perf_counter()

        try:
            query_vector = await run_with_timeout(self._embedder.aembed_query(query_text), self._timeout, "query embedding")
        except Exception as exc:
            logger.error("[QUERY] Failed to embed query: %s", exc)
            raise QueryError(f"query embedding failed: {exc}") from exc

        try:
            hits: list[VectorHit] = await self._store.query(list(query_vector), limit=self.candidate_count, include_metadata=True, include_distance=True)
        except Exception as exc:
            logger.error("[QUERY] Vector store lookup failed: %s", exc)
            raise QueryError(f"vector store query failed: {exc}") from exc

        accepted = self.filter_hits(hits)

        matches: list[QueryMatch] = []
        for hit in accepted:
            if len(matches) >= self._limit:
                break
            product = await self._resolve(hit.id)
            if product is not None:
                matches.append(QueryMatch(product_id=hit.id, score=hit.score, product=product))

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[QUERY] %d candidate(s) → %d above %.2f → %d match(es) in %.1fms.", len(hits), len(accepted), self._threshold, len(matches), elapsed_ms)
        return matches


    def filter_hits(self, hits: list[VectorHit]) -> list[VectorHit]:
        """Keep hits whose similarity strictly exceeds the threshold, preserving order."""
        return [hit for hit in hits if hit.score is not None and hit.score > self._threshold]


    async def _resolve(self, product_id: str) -> Product | None:
        """Look a matched id up in the catalog; ``None`` drops the candidate."""
        try:
            key = int(product_id)
        except ValueError:
            logger.warning("[QUERY] Ignoring non-numeric product id '%s' from the vector store.", product_id)
            return None

        try:
            product = await self._catalog.find_by_id(key)
        except Exception:
            logger.exception("[QUERY] Catalog lookup for product %s failed: dropped.", key)
            return None

        if product is None:
            logger.debug("[QUERY] Product %s no longer in the catalog: dropped.", key)
        return product
