"""
Campfire - SearchSession
=========================
Façade over indexer → query engine → synthesizer, owning the lazy,
single-flight index build.

State machine
-------------
``UNINDEXED`` → ``BUILDING`` → ``READY`` (terminal for the process)
                     ↘ back to ``UNINDEXED`` on failure

- The first search in ``UNINDEXED`` starts one build task.  Every search
  arriving while it runs awaits that same task; none starts another.
- A failed build returns to ``UNINDEXED`` so the *next* search retries.
- Searches still run after a failed build, against whatever the vector
  store already holds.

Usage:
    from campfire.src.core.search_session import SearchSession
    session = SearchSession(indexer, query_engine, synthesizer)
    result = await session.search("tent for two people")
"""

from __future__ import annotations

import asyncio
import time

from campfire.src.core.exceptions import IndexBuildError, QueryError
from campfire.src.core.indexer import ProductIndexer
from campfire.src.core.models import IndexState, SearchResponse
from campfire.src.core.query_engine import ProductQueryEngine
from campfire.src.core.synthesizer import ResponseSynthesizer, fallback_answer
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)


class SearchSession:
    """
    Parameters
    ----------
    indexer
        ``ProductIndexer`` run on first use.
    query_engine
        ``ProductQueryEngine`` used for every search.
    synthesizer
        ``ResponseSynthesizer`` used for every search.
    """

    __slots__ = ("_indexer", "_engine", "_synthesizer", "_state", "_state_lock", "_build_task")

    def __init__(self, indexer: ProductIndexer, query_engine: ProductQueryEngine, synthesizer: ResponseSynthesizer) -> None:
        self._indexer = indexer
        self._engine = query_engine
        self._synthesizer = synthesizer
        self._state = IndexState.UNINDEXED
        self._state_lock = asyncio.Lock()
        self._build_task: asyncio.Task[int] | None = None

    @property
    def index_state(self) -> IndexState:
        return self._state


    async def ensure_index(self) -> bool:
        """
        Make sure the index has been built once.

        Returns ``True`` when the index is ready, ``False`` when the build
        this call waited on failed.
        """
        if self._state is IndexState.READY:
            return True

        async with self._state_lock:
            if self._state is IndexState.READY:
                return True
            if self._build_task is None:
                logger.info("[SESSION] Index not built yet: starting build.")
                self._state = IndexState.BUILDING
                self._build_task = asyncio.create_task(self._run_build())
            task = self._build_task

        # Shielded: a cancelled caller must not cancel the shared build
        return await asyncio.shield(task) >= 0


    async def _run_build(self) -> int:
        """
        Run the build and settle the state; ``-1`` marks a failed build.

        Anything other than ``IndexBuildError`` (misconfiguration, bugs)
        propagates to every waiting caller after the state is reset.
        """
        try:
            count = await self._indexer.build()
        except IndexBuildError:
            logger.exception("[SESSION] Index build failed: will retry on the next search.")
            self._state = IndexState.UNINDEXED
            return -1
        except BaseException:
            self._state = IndexState.UNINDEXED
            raise
        finally:
            self._build_task = None

        self._state = IndexState.READY
        logger.info("[SESSION] Index ready (%d record(s)).", count)
        return count


    async def search(self, query_text: str) -> SearchResponse:
        """Answer *query_text* with a grounded response and the products it cites."""
        query_text = (query_text or "").strip()
        if not query_text:
            return SearchResponse(response=fallback_answer(query_text), products=[])

        t_start = time.perf_counter()
        await self.ensure_index()

        try:
            matches = await self._engine.query(query_text)
        except QueryError:
            logger.exception("[SESSION] Search failed for query '%s'.", query_text[:80])
            return SearchResponse(response=fallback_answer(query_text), products=[])

        answer = await self._synthesizer.synthesize(query_text, matches)

        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[SESSION] Search answered with %d product(s) in %.1fms.", len(matches), total_ms)
        return SearchResponse(response=answer, products=[m.product for m in matches])
